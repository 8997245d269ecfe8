import sys
import argparse

from typing import List, Optional

from gravity_models.input.configuration import QUANTITIES
from gravity_models.utility.time_helper  import parse_time


def parse_command_line_arguments(
  argv : Optional[List[str]] = None,
) -> argparse.Namespace:
  """
  Parse command-line arguments for the gravity model evaluator.

  Options left unset are None so that values of a YAML configuration file can
  fill them in.

  Input:
  ------
    argv : list[str] | None
      Arguments to parse (default: sys.argv[1:]).

  Output:
  -------
    args : argparse.Namespace
      Parsed command-line arguments.
  """
  parser = argparse.ArgumentParser(
    prog            = 'gravity-models',
    description     = 'Evaluate spherical harmonic gravity field models (ICGEM format)',
    formatter_class = argparse.RawDescriptionHelpFormatter,
  )

  # If no arguments provided, print help and exit
  if argv is None and len(sys.argv) == 1:
    parser.print_help(sys.stderr)
    sys.exit(1)

  # Model arguments
  parser.add_argument(
    '--model',
    dest    = 'model',
    type    = str,
    default = None,
    help    = "Gravity model: identifier (EGM96, EGM2008), download URL, or path to a .gfc file.",
  )
  parser.add_argument(
    '--force-download',
    dest    = 'force_download',
    action  = 'store_true',
    default = None,
    help    = "Download the model even if it is already cached.",
  )
  parser.add_argument(
    '--cache-dir',
    dest    = 'cache_dir',
    type    = str,
    default = None,
    help    = "Directory of the downloaded model files.",
  )

  # Evaluation arguments
  parser.add_argument(
    '--position',
    dest    = 'positions',
    type    = float,
    nargs   = 3,
    action  = 'append',
    metavar = ('X', 'Y', 'Z'),
    default = None,
    help    = "Body-fixed position [m]. Can be repeated (e.g. --position 6378137 0 0 --position 0 0 6356752.3).",
  )
  parser.add_argument(
    '--time',
    dest    = 'time',
    type    = parse_time,
    default = None,
    help    = "Evaluation time in ISO format (default: 2000-01-01T00:00:00).",
  )
  parser.add_argument(
    '--max-degree',
    dest    = 'max_degree',
    type    = int,
    default = None,
    help    = "Maximum degree (default: model maximum).",
  )
  parser.add_argument(
    '--max-order',
    dest    = 'max_order',
    type    = int,
    default = None,
    help    = "Maximum order (default: maximum degree).",
  )
  parser.add_argument(
    '--quantity',
    dest    = 'quantity',
    type    = str.lower,
    choices = list(QUANTITIES),
    default = None,
    help    = "Quantity to compute (default: all).",
  )

  # Input/output arguments
  parser.add_argument(
    '--config',
    dest    = 'config_filepath',
    type    = str,
    default = None,
    help    = "YAML configuration file. Command-line arguments override its values.",
  )
  parser.add_argument(
    '--log-file',
    dest    = 'log_filepath',
    type    = str,
    default = None,
    help    = "Also write the terminal output to this file.",
  )

  # Parse arguments
  args = parser.parse_args(argv)

  return args
