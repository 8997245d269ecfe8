import sys

from gravity_models.main import main


sys.exit(main())
