"""
Spherical Harmonic Coefficients
===============================

Storage and time evaluation of the Stokes coefficients (Clm, Slm) of a gravity
field model.

Summary:
--------
  PeriodicTerm        : one sinusoidal variation of a coefficient pair
  CoefficientRecord   : constant part plus optional secular and periodic terms
                        of the coefficient pair at one (degree, order)
  CoefficientTable    : read-only mapping (degree, order) -> CoefficientRecord
  evaluate            : value of a coefficient pair at a given instant

Time-variable coefficients follow:

  C(t) = C0 + dC/dt (t - t0) + sum_k [ acos_k cos(2 pi (t - t0) / T_k)
                                     + asin_k sin(2 pi (t - t0) / T_k) ]

with (t - t0) and T_k in Julian years. The same expression holds for S.
Evaluation outside the validity interval of a record is an extrapolation and
is not guarded.
"""
import math

import numpy as np

from dataclasses import dataclass, field
from datetime    import datetime
from types       import MappingProxyType
from typing      import Iterable, Iterator, Optional, Tuple

from gravity_models.model.time_converter import Instant, utc_to_jd, years_between
from gravity_models.model.constants      import CONVERTER


@dataclass(frozen=True)
class PeriodicTerm:
  """
  Sinusoidal variation of a coefficient pair.

  Attributes:
  -----------
    period : float
      Period [years].
    acos_c, acos_s : float
      Cosine amplitudes of C and S.
    asin_c, asin_s : float
      Sine amplitudes of C and S.
  """
  period : float
  acos_c : float = 0.0
  acos_s : float = 0.0
  asin_c : float = 0.0
  asin_s : float = 0.0


@dataclass(frozen=True)
class CoefficientRecord:
  """
  Coefficient pair of degree `degree` and order `order`.

  A record is time variable when it carries a reference epoch. Constant
  records have no secular or periodic part.
  """
  degree      : int
  order       : int
  c           : float
  s           : float
  sigma_c     : Optional[float]    = None
  sigma_s     : Optional[float]    = None
  epoch       : Optional[datetime] = None
  valid_until : Optional[datetime] = None
  trend_c     : Optional[float]    = None
  trend_s     : Optional[float]    = None
  periodic    : Tuple[PeriodicTerm, ...] = field(default_factory=tuple)

  @property
  def is_time_variable(
    self,
  ) -> bool:
    return self.epoch is not None

  def at_elapsed_years(
    self,
    delta_years : float,
  ) -> Tuple[float, float]:
    """
    Evaluate the coefficient pair `delta_years` after the reference epoch.

    Input:
    ------
      delta_years : float
        Elapsed time since the reference epoch [years].

    Output:
    -------
      c, s : float
        Coefficient pair.
    """
    c = self.c
    s = self.s

    if not self.is_time_variable:
      return c, s

    if self.trend_c is not None:
      c = c + self.trend_c * delta_years
      s = s + self.trend_s * delta_years

    for term in self.periodic:
      arg     = 2.0 * math.pi * delta_years / term.period
      cos_arg = math.cos(arg)
      sin_arg = math.sin(arg)
      c = c + term.acos_c * cos_arg + term.asin_c * sin_arg
      s = s + term.acos_s * cos_arg + term.asin_s * sin_arg

    return c, s


class CoefficientTable:
  """
  Read-only table of coefficient records covering 0 <= order <= degree <= max_degree.

  The constant parts are kept in dense lower-triangular matrices so that a
  whole set of coefficients can be materialised at once; the records with a
  time-variable part are kept aside and applied on top when evaluating at an
  instant. Pairs without a record evaluate to (0, 0).
  """

  def __init__(
    self,
    max_degree : int,
    records    : Iterable[CoefficientRecord],
    dtype      : type = np.float64,
  ):
    """
    Build the table.

    Input:
    ------
      max_degree : int
        Maximum degree covered by the table.
      records : Iterable[CoefficientRecord]
        Coefficient records. At most one record per (degree, order).
      dtype : type
        Floating point type of the stored coefficients.

    Raises:
    -------
      ValueError
        If a record lies outside 0 <= order <= degree <= max_degree or if a
        (degree, order) pair appears twice.
    """
    if max_degree < 0:
      raise ValueError(f"max_degree must be >= 0, got {max_degree}")

    self._max_degree = int(max_degree)
    self._dtype      = np.dtype(dtype)

    size    = self._max_degree + 1
    c_mat   = np.zeros((size, size), dtype=self._dtype)
    s_mat   = np.zeros((size, size), dtype=self._dtype)
    present = np.zeros((size, size), dtype=bool)

    by_key        = {}
    time_variable = []

    for record in records:
      degree = record.degree
      order  = record.order
      if not (0 <= order <= degree <= self._max_degree):
        raise ValueError(
          f"Coefficient ({degree}, {order}) outside 0 <= m <= l <= {self._max_degree}"
        )
      if present[degree, order]:
        raise ValueError(f"Duplicate coefficient record for ({degree}, {order})")

      present[degree, order] = True
      c_mat[degree, order]   = record.c
      s_mat[degree, order]   = record.s
      by_key[(degree, order)] = record

      if record.is_time_variable:
        time_variable.append(record)

    for array in (c_mat, s_mat, present):
      array.setflags(write=False)

    self._c_mat         = c_mat
    self._s_mat         = s_mat
    self._present       = present
    self._records       = MappingProxyType(by_key)
    self._time_variable = tuple(time_variable)

  @property
  def max_degree(
    self,
  ) -> int:
    return self._max_degree

  @property
  def dtype(
    self,
  ) -> np.dtype:
    return self._dtype

  @property
  def records(
    self,
  ) -> MappingProxyType:
    """Read-only view of the records keyed by (degree, order)."""
    return self._records

  @property
  def time_variable_records(
    self,
  ) -> Tuple[CoefficientRecord, ...]:
    return self._time_variable

  @property
  def highest_degree(
    self,
  ) -> int:
    """Highest degree with at least one record, or -1 for an empty table."""
    degrees = np.nonzero(self._present.any(axis=1))[0]
    return int(degrees[-1]) if degrees.size else -1

  def __len__(
    self,
  ) -> int:
    return len(self._records)

  def __contains__(
    self,
    key : Tuple[int, int],
  ) -> bool:
    return key in self._records

  def __iter__(
    self,
  ) -> Iterator[Tuple[int, int]]:
    return iter(sorted(self._records))

  def __getitem__(
    self,
    key : Tuple[int, int],
  ) -> CoefficientRecord:
    return self._records[key]

  def get(
    self,
    degree : int,
    order  : int,
  ) -> Optional[CoefficientRecord]:
    return self._records.get((degree, order))

  def coefficient_matrices(
    self,
    time       : Instant,
    max_degree : Optional[int] = None,
    max_order  : Optional[int] = None,
  ) -> Tuple[np.ndarray, np.ndarray]:
    """
    Materialise all coefficients up to the given degree and order at an instant.

    Input:
    ------
      time : datetime | astropy.time.Time | str
        Evaluation instant.
      max_degree : int, optional
        Maximum degree (defaults to, and is clamped at, the table's maximum).
      max_order : int, optional
        Maximum order (defaults to, and is clamped at, max_degree).

    Output:
    -------
      c_mat, s_mat : np.ndarray
        (max_degree+1) x (max_degree+1) lower-triangular matrices indexed
        [degree, order]. Entries with order > max_order are zero.
    """
    n_max = self._max_degree if max_degree is None else min(max_degree, self._max_degree)
    m_max = n_max            if max_order  is None else min(max_order,  n_max)

    c_mat = np.array(self._c_mat[:n_max + 1, :n_max + 1])
    s_mat = np.array(self._s_mat[:n_max + 1, :n_max + 1])

    if m_max < n_max:
      c_mat[:, m_max + 1:] = 0
      s_mat[:, m_max + 1:] = 0

    if self._time_variable:
      jd = utc_to_jd(time)
      for record in self._time_variable:
        if record.degree > n_max or record.order > m_max:
          continue
        delta_years = (jd - utc_to_jd(record.epoch)) / CONVERTER.DAY_PER_JULIAN_YEAR
        c, s = record.at_elapsed_years(delta_years)
        c_mat[record.degree, record.order] = c
        s_mat[record.degree, record.order] = s

    return c_mat, s_mat


def evaluate(
  table  : CoefficientTable,
  degree : int,
  order  : int,
  time   : Instant,
) -> Tuple[float, float]:
  """
  Evaluate the coefficient pair (Clm, Slm) of a table at an instant.

  Input:
  ------
    table : CoefficientTable
      Coefficient table.
    degree : int
      Degree (l).
    order : int
      Order (m).
    time : datetime | astropy.time.Time | str
      Evaluation instant. Ignored for constant records.

  Output:
  -------
    c, s : float
      Coefficient pair in the table's floating point type. Pairs without a
      record, including those outside the table, return (0, 0).
  """
  zero   = table.dtype.type(0)
  record = table.get(degree, order)

  if record is None:
    return zero, zero

  if not record.is_time_variable:
    return table.dtype.type(record.c), table.dtype.type(record.s)

  c, s = record.at_elapsed_years(years_between(time, record.epoch))
  return table.dtype.type(c), table.dtype.type(s)
