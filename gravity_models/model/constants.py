from datetime import datetime


class CONVERTER:
  # Angle Conversions
  RAD_PER_DEG = 3.141592653589793 / 180.0  # [radian] per [degree]
  DEG_PER_RAD = 180.0 / 3.141592653589793  # [degree] per [radian]

  # Time Conversions
  SEC_PER_DAY         = 86400.0            # [seconds] per [day]
  DAY_PER_JULIAN_YEAR = 365.25             # [days] per [julian year]


class TIMEVALUES:
  # Epoch used when the caller does not provide an instant
  DEFAULT_EPOCH = datetime(2000, 1, 1)

  # Julian date of the Unix epoch 1970-01-01T00:00:00
  JD_UNIX_EPOCH = 2440587.5


class SOLARSYSTEMCONSTANTS:
  """
  Physical constants of the central bodies supported by the gravity models.
  """

  class EARTH:
    # Rotation rate
    OMEGA = 7.292115146706979e-5           # Earth's rotation rate [rad/s]
