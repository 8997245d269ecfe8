"""
Gravity Model Errors
====================

Exception hierarchy raised by the gravity model core.

  GravityModelError
  ├── FormatError : malformed, incomplete, or out-of-bounds model file content
  └── DomainError : inconsistent degree/order, non-positive radius, or
                    out-of-range trigonometric input

Missing or unreadable files surface as the built-in OSError family
(e.g. FileNotFoundError).
"""
from typing import Optional


class GravityModelError(ValueError):
  """
  Base class for all gravity model errors.
  """


class FormatError(GravityModelError):
  """
  Raised when a gravity model file cannot be parsed.
  """
  def __init__(
    self,
    message : str,
    line_no : Optional[int] = None,
    source  : Optional[str] = None,
  ):
    self.message = message
    self.line_no = line_no
    self.source  = source

    location = ''
    if source is not None:
      location += f"{source}"
    if line_no is not None:
      location += f"{':' if location else 'line '}{line_no}"

    super().__init__(f"{location}: {message}" if location else message)


class DomainError(GravityModelError):
  """
  Raised when an evaluation input lies outside the domain of the computation.
  """
