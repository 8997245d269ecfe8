"""
Associated Legendre Functions
=============================

Forward column recursion for the associated Legendre functions P[n, m] of
cos(colatitude) = sin(latitude) and their derivatives with respect to the
colatitude, in three normalization conventions.

Summary:
--------
With t = sin(lat) = cos(theta) and u = cos(lat) = sin(theta) >= 0:

  sectoral  : P[m, m]   from P[m-1, m-1]       (seed P[0, 0] = 1)
  first     : P[m+1, m] from P[m, m]
  degree    : P[n, m]   from P[n-1, m] and P[n-2, m]

  derivative: dP[n, 0] = -k1(n) P[n, 1]
              dP[n, m] = 1/2 ( k2(n, m) P[n, m-1] - k3(n, m) P[n, m+1] ),  m >= 1

The derivative recurrence uses only neighbouring orders of the same degree,
so it contains no division by sin(theta) and stays finite at the poles.

Normalization:
--------------
  'full'         : geodesy 4 pi normalization,
                   N = sqrt( (2 - delta_m0) (2n + 1) (n - m)! / (n + m)! )
  'schmidt'      : Schmidt quasi-normalization,
                   N = sqrt( (2 - delta_m0) (n - m)! / (n + m)! )
  'unnormalized' : Ferrers functions (N = 1)

All scale factors are applied inside the recursion, so no factorial is ever
formed and the recursion does not overflow for high degrees.

Buffers:
--------
P and dP are (n_max + 1) x (n_max + 1) arrays indexed [degree, order]. They can
be supplied by the caller to avoid allocations. Only the lower triangle up to
the requested order is written, and the arrays are never resized or kept
after the call. Sharing one buffer between threads requires external
synchronization.

Reference: Holmes & Featherstone (2002), "A unified approach to the Clenshaw
summation and the recursive computation of very high degree and order
normalised associated Legendre functions".
"""
import math

import numpy as np

from typing import Optional, Tuple

from gravity_models.model.errors import DomainError


NORMALIZATIONS = ('full', 'schmidt', 'unnormalized')

# Tolerance on |sin(lat)| beyond 1 accepted as round-off
_SIN_LATITUDE_TOLERANCE = 1e-12


class LegendreEngine:
  """
  Associated Legendre functions and colatitude derivatives.
  """

  @staticmethod
  def check_buffer(
    buffer     : Optional[np.ndarray],
    max_degree : int,
    dtype      : type,
    name       : str = 'P',
  ) -> np.ndarray:
    """
    Validate a caller-owned buffer or allocate a new one.

    Input:
    ------
      buffer : np.ndarray | None
        Caller-owned buffer, or None to allocate.
      max_degree : int
        Maximum degree to be stored.
      dtype : type
        Floating point type for a newly allocated buffer.
      name : str
        Buffer name used in error messages.

    Output:
    -------
      buffer : np.ndarray
        The caller buffer (unchanged shape) or a new zero-filled array.

    Raises:
    -------
      DomainError
        If the caller buffer is smaller than (max_degree+1) x (max_degree+1).
    """
    size = max_degree + 1

    if buffer is None:
      return np.zeros((size, size), dtype=dtype)

    if buffer.ndim != 2 or buffer.shape[0] < size or buffer.shape[1] < size:
      raise DomainError(
        f"Matrix {name} must have at least {size} x {size} elements, got shape {buffer.shape}"
      )

    return buffer

  @staticmethod
  def _check_inputs(
    max_degree   : int,
    max_order    : int,
    sin_latitude : float,
    norm         : str,
  ) -> Tuple[int, float]:
    if norm not in NORMALIZATIONS:
      raise DomainError(f"Unknown normalization '{norm}'. Expected one of {NORMALIZATIONS}")

    if max_degree < 0:
      raise DomainError(f"max_degree must be >= 0, got {max_degree}")

    if max_order < 0:
      max_order = max_degree
    elif max_order > max_degree:
      raise DomainError(f"max_order ({max_order}) cannot exceed max_degree ({max_degree})")

    if not math.isfinite(sin_latitude) or abs(sin_latitude) > 1.0 + _SIN_LATITUDE_TOLERANCE:
      raise DomainError(f"sin(latitude) must lie in [-1, 1], got {sin_latitude}")

    # Round-off beyond the poles is clamped
    sin_latitude = min(1.0, max(-1.0, float(sin_latitude)))

    return max_order, sin_latitude

  @staticmethod
  def _fill_legendre(
    P            : np.ndarray,
    n_max        : int,
    m_max        : int,
    sin_latitude : float,
    norm         : str,
    phase_term   : bool,
  ) -> None:
    """
    Fill P[n, m] for 0 <= m <= min(n, m_max), 0 <= n <= n_max.
    """
    t = sin_latitude
    u = math.sqrt(max(0.0, 1.0 - t * t))

    if phase_term:
      u = -u

    P[0, 0] = 1.0

    for m_order in range(0, m_max + 1):
      # Sectoral term P[m, m]
      if m_order == 1:
        if norm == 'full':
          P[1, 1] = math.sqrt(3.0) * u
        else:
          P[1, 1] = u
      elif m_order >= 2:
        if norm == 'full':
          fac = math.sqrt((2.0 * m_order + 1.0) / (2.0 * m_order))
        elif norm == 'schmidt':
          fac = math.sqrt((2.0 * m_order - 1.0) / (2.0 * m_order))
        else:
          fac = 2.0 * m_order - 1.0
        P[m_order, m_order] = fac * u * P[m_order - 1, m_order - 1]

      if m_order + 1 > n_max:
        continue

      # First off-diagonal term P[m+1, m]
      if norm == 'full':
        fac = math.sqrt(2.0 * m_order + 3.0)
      elif norm == 'schmidt':
        fac = math.sqrt(2.0 * m_order + 1.0)
      else:
        fac = 2.0 * m_order + 1.0
      P[m_order + 1, m_order] = fac * t * P[m_order, m_order]

      # Degree recursion P[n, m], n >= m + 2
      for n_degree in range(m_order + 2, n_max + 1):
        nm_sum  = n_degree + m_order
        nm_diff = n_degree - m_order

        if norm == 'full':
          a_nm = math.sqrt((2.0 * n_degree - 1.0) * (2.0 * n_degree + 1.0) / (nm_diff * nm_sum))
          b_nm = math.sqrt(
            (2.0 * n_degree + 1.0) * (nm_sum - 1.0) * (nm_diff - 1.0)
            / ((2.0 * n_degree - 3.0) * nm_diff * nm_sum)
          )
        elif norm == 'schmidt':
          root = math.sqrt(nm_diff * nm_sum)
          a_nm = (2.0 * n_degree - 1.0) / root
          b_nm = math.sqrt((nm_sum - 1.0) * (nm_diff - 1.0)) / root
        else:
          a_nm = (2.0 * n_degree - 1.0) / nm_diff
          b_nm = (nm_sum - 1.0) / nm_diff

        P[n_degree, m_order] = a_nm * t * P[n_degree - 1, m_order] - b_nm * P[n_degree - 2, m_order]

  @staticmethod
  def _fill_derivative(
    dP         : np.ndarray,
    P          : np.ndarray,
    n_max      : int,
    m_max      : int,
    norm       : str,
    phase_term : bool,
  ) -> None:
    """
    Fill dP[n, m] = d P[n, m] / d colatitude for 0 <= m <= min(n, m_max).

    Requires P up to order min(n, m_max + 1).
    """
    # With the Condon-Shortley phase, P[n, m±1] flips sign relative to P[n, m]
    sign = -1.0 if phase_term else 1.0

    for n_degree in range(0, n_max + 1):
      dP[n_degree, 0] = 0.0 if n_degree == 0 else (
        -sign * _k1(n_degree, norm) * P[n_degree, 1]
      )

      for m_order in range(1, min(n_degree, m_max) + 1):
        aux = _k2(n_degree, m_order, norm) * P[n_degree, m_order - 1]

        if m_order < n_degree:
          aux -= _k3(n_degree, m_order, norm) * P[n_degree, m_order + 1]

        dP[n_degree, m_order] = 0.5 * sign * aux

  @classmethod
  def legendre(
    cls,
    max_degree   : int,
    max_order    : int,
    sin_latitude : float,
    norm         : str = 'full',
    P            : Optional[np.ndarray] = None,
    phase_term   : bool = False,
    dtype        : type = np.float64,
  ) -> np.ndarray:
    """
    Compute the associated Legendre functions only.

    Input:
    ------
      max_degree : int
        Maximum degree.
      max_order : int
        Maximum order. A negative value means max_degree.
      sin_latitude : float
        sin(latitude) = cos(colatitude).
      norm : str
        'full', 'schmidt', or 'unnormalized'.
      P : np.ndarray, optional
        Caller-owned output buffer.
      phase_term : bool
        Apply the Condon-Shortley phase (-1)^m.
      dtype : type
        Floating point type of an engine-owned buffer.

    Output:
    -------
      P : np.ndarray
        Buffer filled for 0 <= m <= min(n, max_order).
    """
    max_order, sin_latitude = cls._check_inputs(max_degree, max_order, sin_latitude, norm)
    P = cls.check_buffer(P, max_degree, dtype, 'P')
    cls._fill_legendre(P, max_degree, max_order, sin_latitude, norm, phase_term)
    return P

  @classmethod
  def compute(
    cls,
    max_degree   : int,
    max_order    : int,
    sin_latitude : float,
    norm         : str = 'full',
    P            : Optional[np.ndarray] = None,
    dP           : Optional[np.ndarray] = None,
    phase_term   : bool = False,
    dtype        : type = np.float64,
  ) -> Tuple[np.ndarray, np.ndarray]:
    """
    Compute the associated Legendre functions and their colatitude derivatives.

    Input:
    ------
      max_degree : int
        Maximum degree.
      max_order : int
        Maximum order. A negative value means max_degree.
      sin_latitude : float
        sin(latitude) = cos(colatitude).
      norm : str
        'full', 'schmidt', or 'unnormalized'.
      P, dP : np.ndarray, optional
        Caller-owned buffers with at least (max_degree+1) x (max_degree+1)
        elements.
      phase_term : bool
        Apply the Condon-Shortley phase (-1)^m.
      dtype : type
        Floating point type of engine-owned buffers.

    Output:
    -------
      P, dP : np.ndarray
        P filled for 0 <= m <= min(n, max_order + 1) and dP for
        0 <= m <= min(n, max_order).

    Raises:
    -------
      DomainError
        If max_order > max_degree, |sin_latitude| > 1, or a buffer is too small.
    """
    max_order, sin_latitude = cls._check_inputs(max_degree, max_order, sin_latitude, norm)

    P  = cls.check_buffer(P,  max_degree, dtype, 'P')
    dP = cls.check_buffer(dP, max_degree, dtype, 'dP')

    # The derivative of order m needs P of order m + 1
    p_order = min(max_order + 1, max_degree)

    cls._fill_legendre(P, max_degree, p_order, sin_latitude, norm, phase_term)
    cls._fill_derivative(dP, P, max_degree, max_order, norm, phase_term)

    return P, dP


def _k1(
  n_degree : int,
  norm     : str,
) -> float:
  """Factor of P[n, 1] in dP[n, 0]."""
  if norm == 'unnormalized':
    return 1.0
  return math.sqrt(n_degree * (n_degree + 1.0) / 2.0)


def _k2(
  n_degree : int,
  m_order  : int,
  norm     : str,
) -> float:
  """Factor of P[n, m-1] in 2 dP[n, m]."""
  if norm == 'unnormalized':
    return (n_degree + m_order) * (n_degree - m_order + 1.0)
  fac = math.sqrt((n_degree + m_order) * (n_degree - m_order + 1.0))
  # P[n, 0] carries no factor 2 in the normalization
  return fac * math.sqrt(2.0) if m_order == 1 else fac


def _k3(
  n_degree : int,
  m_order  : int,
  norm     : str,
) -> float:
  """Factor of P[n, m+1] in 2 dP[n, m]."""
  if norm == 'unnormalized':
    return 1.0
  return math.sqrt((n_degree - m_order) * (n_degree + m_order + 1.0))
