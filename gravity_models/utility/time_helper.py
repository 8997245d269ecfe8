"""
Time Utilities
==============

Utility functions for time parsing.
"""
from datetime import datetime


def parse_time(
  time_str : str,
) -> datetime:
  """
  Parse a time string into a datetime object (assumed UTC).

  Accepted formats include:
  - Date only: "2000-01-01"
  - ISO 8601 with 'T' separator: "2025-10-01T00:00:00"
  - ISO 8601 with 'Z' suffix: "2025-10-01T00:00:00Z"
  - Space-separated: "2025-10-01 00:00:00"
  - With microseconds: "2025-10-01 00:00:00.123456"

  Input:
  ------
    time_str : str
      Time string to parse.

  Output:
  -------
    datetime
      Parsed (naive) datetime object.
  """
  time_str = time_str.strip()

  # Handle 'Z' suffix for Python < 3.11 compatibility
  if time_str.endswith('Z'):
    time_str = time_str[:-1]

  try:
    parsed = datetime.fromisoformat(time_str)
  except ValueError:
    formats = [
      '%Y-%m-%dT%H:%M:%S.%f', # ISO 8601 with microseconds
      '%Y-%m-%dT%H:%M',       # ISO 8601 without seconds: 2025-10-01T00:00
      '%Y-%m-%d %H:%M:%S.%f', # Space-separated with microseconds
      '%Y-%m-%d %H:%M',       # Space-separated without seconds: 2025-10-01 00:00
    ]
    for fmt in formats:
      try:
        return datetime.strptime(time_str, fmt)
      except ValueError:
        continue
    raise ValueError(f"Cannot parse time string: {time_str}")

  # Offsets such as +00:00 are folded into naive UTC
  if parsed.tzinfo is not None:
    parsed = (parsed - parsed.utcoffset()).replace(tzinfo=None)

  return parsed
