from datetime     import datetime, timezone
from typing       import Union

from astropy.time import Time as AstropyTime

from gravity_models.model.constants import CONVERTER, TIMEVALUES
from gravity_models.utility.time_helper import parse_time


Instant = Union[datetime, AstropyTime, str]

_UNIX_EPOCH = datetime(1970, 1, 1)


def to_utc_datetime(
  time : Instant,
) -> datetime:
  """
  Convert a supported instant into a naive UTC datetime object.

  Input:
  ------
    time : datetime | astropy.time.Time | str
      Instant to convert. Naive datetimes are assumed to be UTC, aware
      datetimes are converted to UTC, and strings are parsed as ISO 8601.

  Output:
  -------
    utc_dt : datetime
      The instant as a naive UTC datetime.
  """
  if isinstance(time, AstropyTime):
    return time.utc.to_datetime()

  if isinstance(time, str):
    time = parse_time(time)

  if not isinstance(time, datetime):
    raise TypeError(f"Unsupported instant type: {type(time).__name__}")

  if time.tzinfo is not None:
    time = time.astimezone(timezone.utc).replace(tzinfo=None)

  return time


def utc_to_jd(
  time : Instant,
) -> float:
  """
  Convert an instant to a Julian date (UTC).

  Input:
  ------
    time : datetime | astropy.time.Time | str
      Instant to convert.

  Output:
  -------
    jd : float
      Julian date [days].
  """
  if isinstance(time, AstropyTime):
    return float(time.utc.jd)

  utc_dt = to_utc_datetime(time)
  return TIMEVALUES.JD_UNIX_EPOCH + (utc_dt - _UNIX_EPOCH).total_seconds() / CONVERTER.SEC_PER_DAY


def years_between(
  time     : Instant,
  time_ref : Instant,
) -> float:
  """
  Elapsed time from `time_ref` to `time` in Julian years (365.25 days).
  """
  return (utc_to_jd(time) - utc_to_jd(time_ref)) / CONVERTER.DAY_PER_JULIAN_YEAR
