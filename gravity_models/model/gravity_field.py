"""
Gravity Field Module
====================

Spherical harmonic synthesis of the gravitational potential derivatives and
the public evaluation functions of the gravity models.

The potential of a model with gravity constant GM and reference radius R is

  U(r, lat, lon) = GM/r sum_n (R/r)^n sum_m P[n, m](sin lat) ( C[n, m] cos(m lon) + S[n, m] sin(m lon) )

and its partial derivatives are

  dU/dr   = -GM/r² sum_n (n + 1) (R/r)^n sum_m P[n, m]  ( C cos(m lon) + S sin(m lon) )
  dU/dlat = -GM/r  sum_n         (R/r)^n sum_m dP[n, m] ( C cos(m lon) + S sin(m lon) )
  dU/dlon =  GM/r  sum_n         (R/r)^n sum_m m P[n, m] ( S cos(m lon) - C sin(m lon) )

where dP is the derivative with respect to the colatitude (hence the sign of
dU/dlat). Terms are summed degree-major, order-minor.

Usage Example:
--------------
  from gravity_models.model.icgem         import IcgemFile
  from gravity_models.model.gravity_field import gravitational_acceleration

  egm96   = IcgemFile.load('EGM96.gfc')
  acc_vec = gravitational_acceleration(egm96, [6378137.0, 0.0, 0.0], max_degree=20)

References:
- Montenbruck & Gill, "Satellite Orbits", Chapter 3.2
- Holmes & Featherstone (2002)
"""
import dataclasses
import math

import numpy as np

from dataclasses import dataclass
from typing      import Optional, Sequence, Tuple

from gravity_models.model.acceleration   import (
  cartesian_to_spherical,
  to_gravitational_acceleration,
  to_gravity_acceleration,
)
from gravity_models.model.constants      import SOLARSYSTEMCONSTANTS, TIMEVALUES
from gravity_models.model.errors         import DomainError
from gravity_models.model.gravity_model  import AbstractGravityModel
from gravity_models.model.legendre       import LegendreEngine
from gravity_models.model.time_converter import Instant


@dataclass(frozen=True, eq=False)
class EvaluationOptions:
  """
  Options of the gravity field evaluation functions.

  Attributes:
  -----------
    max_degree : int
      Maximum degree used in the synthesis. A negative value, or a value above
      the model's maximum degree, selects the model's maximum degree.
    max_order : int
      Maximum order used in the synthesis. A negative value, or a value above
      the effective maximum degree, selects the effective maximum degree.
    P : np.ndarray, optional
      Caller-owned buffer for the Legendre functions, with at least
      (n+1) x (n+1) elements for the effective degree n.
    dP : np.ndarray, optional
      Caller-owned buffer for the Legendre derivatives (same shape as P).
    angular_velocity : float
      Rotation rate of the body-fixed frame [rad/s], used by gravity_acceleration.
  """
  max_degree       : int                  = -1
  max_order        : int                  = -1
  P                : Optional[np.ndarray] = None
  dP               : Optional[np.ndarray] = None
  angular_velocity : float                = SOLARSYSTEMCONSTANTS.EARTH.OMEGA


def resolve_degree_order(
  model_max_degree : int,
  max_degree       : int = -1,
  max_order        : int = -1,
) -> Tuple[int, int]:
  """
  Apply the default and clamping rules to the requested degree and order.

  Input:
  ------
    model_max_degree : int
      Maximum degree of the model.
    max_degree : int
      Requested maximum degree (< 0 for the model's maximum).
    max_order : int
      Requested maximum order (< 0 for the effective maximum degree).

  Output:
  -------
    n_max, m_max : int
      Effective maximum degree and order, with 0 <= m_max <= n_max.
  """
  n_max = model_max_degree if (max_degree < 0 or max_degree > model_max_degree) else max_degree
  m_max = n_max            if (max_order  < 0 or max_order  > n_max)            else max_order
  return n_max, m_max


def synthesize(
  model      : AbstractGravityModel,
  r          : float,
  lat        : float,
  lon        : float,
  time       : Instant = TIMEVALUES.DEFAULT_EPOCH,
  max_degree : int = -1,
  max_order  : int = -1,
  P          : Optional[np.ndarray] = None,
  dP         : Optional[np.ndarray] = None,
) -> Tuple[float, float, float]:
  """
  Compute the derivatives of the gravitational potential in spherical coordinates.

  Input:
  ------
    model : AbstractGravityModel
      Gravity model.
    r : float
      Distance from the center [m].
    lat : float
      Geocentric latitude [rad].
    lon : float
      Longitude [rad].
    time : datetime | astropy.time.Time | str
      Evaluation instant of the coefficients.
    max_degree, max_order : int
      Requested maximum degree and order (see resolve_degree_order).
    P, dP : np.ndarray, optional
      Caller-owned Legendre buffers.

  Output:
  -------
    dU_dr : float
      Derivative w.r.t. the radius [m/s²].
    dU_dlat : float
      Derivative w.r.t. the geocentric latitude [m²/s²/rad].
    dU_dlon : float
      Derivative w.r.t. the longitude [m²/s²/rad].

  Raises:
  -------
    DomainError
      If r <= 0, the model radius is not positive, or a buffer is too small.
  """
  if not r > 0:
    raise DomainError("The distance from the center must be positive (r > 0).")

  radius_ref = float(model.radius())
  if not radius_ref > 0:
    raise DomainError(f"The model reference radius must be positive, got {radius_ref}")

  gp    = float(model.gravity_constant())
  dtype = model.numeric_type

  n_max, m_max = resolve_degree_order(model.maximum_degree(), max_degree, max_order)

  # Legendre functions of sin(lat) = cos(colatitude)
  P, dP = LegendreEngine.compute(
    max_degree   = n_max,
    max_order    = m_max,
    sin_latitude = math.sin(lat),
    norm         = model.coefficient_norm(),
    P            = P,
    dP           = dP,
    dtype        = dtype,
  )

  c_mat, s_mat = model.coefficient_matrices(n_max, m_max, time)

  # Lists for the inner loops
  P_list  = P [:n_max + 1, :m_max + 1].tolist()
  dP_list = dP[:n_max + 1, :m_max + 1].tolist()
  c_list  = c_mat[:, :m_max + 1].tolist()
  s_list  = s_mat[:, :m_max + 1].tolist()

  # cos(m lon) and sin(m lon) by angle addition
  cos_lon = math.cos(lon)
  sin_lon = math.sin(lon)
  cos_mlon = [1.0] * (m_max + 1)
  sin_mlon = [0.0] * (m_max + 1)
  for m_order in range(1, m_max + 1):
    cos_mlon[m_order] = cos_mlon[m_order - 1] * cos_lon - sin_mlon[m_order - 1] * sin_lon
    sin_mlon[m_order] = sin_mlon[m_order - 1] * cos_lon + cos_mlon[m_order - 1] * sin_lon

  ratio   = radius_ref / r
  ratio_n = 1.0

  sum_r   = 0.0
  sum_lat = 0.0
  sum_lon = 0.0

  for n_degree in range(n_max + 1):
    P_n  = P_list [n_degree]
    dP_n = dP_list[n_degree]
    C_n  = c_list [n_degree]
    S_n  = s_list [n_degree]

    aux_r   = 0.0
    aux_lat = 0.0
    aux_lon = 0.0

    for m_order in range(min(n_degree, m_max) + 1):
      C = C_n[m_order]
      S = S_n[m_order]

      CcSs = C * cos_mlon[m_order] + S * sin_mlon[m_order]
      ScCc = S * cos_mlon[m_order] - C * sin_mlon[m_order]

      aux_r   += P_n [m_order] * CcSs
      aux_lat += dP_n[m_order] * CcSs
      aux_lon += m_order * P_n[m_order] * ScCc

    sum_r   += (n_degree + 1) * ratio_n * aux_r
    sum_lat += ratio_n * aux_lat
    sum_lon += ratio_n * aux_lon

    ratio_n *= ratio

  dU_dr   = -gp / (r * r) * sum_r
  dU_dlat = -gp / r       * sum_lat
  dU_dlon =  gp / r       * sum_lon

  return dtype.type(dU_dr), dtype.type(dU_dlat), dtype.type(dU_dlon)


def _merge_options(
  options : Optional[EvaluationOptions],
  kwargs  : dict,
) -> EvaluationOptions:
  """
  Combine an options struct and keyword overrides (keywords take precedence).
  """
  if options is None:
    options = EvaluationOptions()
  elif not isinstance(options, EvaluationOptions):
    raise TypeError(
      f"options must be an EvaluationOptions instance, got {type(options).__name__}; "
      f"pass max_degree, max_order, P, and dP as keyword arguments"
    )
  if kwargs:
    options = dataclasses.replace(options, **kwargs)
  return options


def _evaluate_derivatives(
  model   : AbstractGravityModel,
  pos_vec : Sequence[float],
  time    : Optional[Instant],
  options : EvaluationOptions,
) -> Tuple[Tuple[float, float, float], Tuple[float, float, float]]:
  r, lat, lon = cartesian_to_spherical(pos_vec)

  derivatives = synthesize(
    model      = model,
    r          = r,
    lat        = lat,
    lon        = lon,
    time       = TIMEVALUES.DEFAULT_EPOCH if time is None else time,
    max_degree = options.max_degree,
    max_order  = options.max_order,
    P          = options.P,
    dP         = options.dP,
  )

  return (r, lat, lon), derivatives


def gravitational_field_derivative(
  model   : AbstractGravityModel,
  pos_vec : Sequence[float],
  time    : Optional[Instant] = None,
  options : Optional[EvaluationOptions] = None,
  **kwargs,
) -> Tuple[float, float, float]:
  """
  Compute the derivatives of the gravitational potential at a body-fixed position.

  Input:
  ------
    model : AbstractGravityModel
      Gravity model.
    pos_vec : Sequence[float]
      Position [m] in the body-fixed frame.
    time : datetime | astropy.time.Time | str, optional
      Evaluation instant (default: 2000-01-01).
    options : EvaluationOptions, optional
      Evaluation options.
    **kwargs
      Overrides of the EvaluationOptions fields (max_degree, max_order, P, dP).

  Output:
  -------
    dU_dr, dU_dlat, dU_dlon : float
      Derivatives w.r.t. the radius [m/s²], the geocentric latitude, and the
      longitude [m²/s²/rad].
  """
  options = _merge_options(options, kwargs)
  _, derivatives = _evaluate_derivatives(model, pos_vec, time, options)
  return derivatives


def gravitational_acceleration(
  model   : AbstractGravityModel,
  pos_vec : Sequence[float],
  time    : Optional[Instant] = None,
  options : Optional[EvaluationOptions] = None,
  **kwargs,
) -> np.ndarray:
  """
  Compute the gravitational acceleration at a body-fixed position.

  The acceleration does not include the centrifugal term; see gravity_acceleration.

  Input:
  ------
    Same as gravitational_field_derivative.

  Output:
  -------
    acc_vec : np.ndarray
      Gravitational acceleration [m/s²] in the body-fixed frame.
  """
  options = _merge_options(options, kwargs)
  (r, lat, lon), (dU_dr, dU_dlat, dU_dlon) = _evaluate_derivatives(model, pos_vec, time, options)
  return to_gravitational_acceleration(r, lat, lon, dU_dr, dU_dlat, dU_dlon)


def gravity_acceleration(
  model   : AbstractGravityModel,
  pos_vec : Sequence[float],
  time    : Optional[Instant] = None,
  options : Optional[EvaluationOptions] = None,
  **kwargs,
) -> np.ndarray:
  """
  Compute the gravity acceleration (gravitational plus centrifugal) at a
  body-fixed position.

  Input:
  ------
    Same as gravitational_field_derivative. The rotation rate of the frame is
    taken from the `angular_velocity` option.

  Output:
  -------
    acc_vec : np.ndarray
      Gravity acceleration [m/s²] in the body-fixed frame.
  """
  options = _merge_options(options, kwargs)
  (r, lat, lon), (dU_dr, dU_dlat, dU_dlon) = _evaluate_derivatives(model, pos_vec, time, options)
  return to_gravity_acceleration(
    pos_vec, r, lat, lon, dU_dr, dU_dlat, dU_dlon,
    angular_velocity = options.angular_velocity,
  )
