"""
Acceleration Transform
======================

Conversion of the gravitational field derivatives in spherical coordinates
(dU/dr, dU/dlat, dU/dlon) into a Cartesian acceleration in the body-fixed
frame, and addition of the centrifugal term of the rotating frame.

  a_r   = dU/dr
  a_lat = dU/dlat / r
  a_lon = dU/dlon / (r cos(lat))      (zero on the rotation axis)

  ax = cos(lat) cos(lon) a_r - sin(lat) cos(lon) a_lat - sin(lon) a_lon
  ay = cos(lat) sin(lon) a_r - sin(lat) sin(lon) a_lat + cos(lon) a_lon
  az = sin(lat)          a_r + cos(lat)          a_lat

On the rotation axis the longitude term vanishes analytically because dU/dlon
is proportional to cos(lat)^m with m >= 1.
"""
import math

import numpy as np

from typing import Sequence, Tuple

from gravity_models.model.constants import SOLARSYSTEMCONSTANTS
from gravity_models.model.errors    import DomainError


# Relative distance to the rotation axis below which the position is on the axis
_AXIS_TOLERANCE = 1e-12


def cartesian_to_spherical(
  pos_vec : Sequence[float],
) -> Tuple[float, float, float]:
  """
  Convert a body-fixed Cartesian position into spherical coordinates.

  Input:
  ------
    pos_vec : Sequence[float]
      Position [m] in the body-fixed frame.

  Output:
  -------
    r : float
      Distance from the center [m].
    lat : float
      Geocentric latitude [rad] in [-pi/2, pi/2].
    lon : float
      Longitude [rad] in (-pi, pi]. Zero on the rotation axis.

  Raises:
  -------
    DomainError
      If the position does not have three finite components or r <= 0.
  """
  if len(pos_vec) != 3:
    raise DomainError(f"Position must have 3 components, got {len(pos_vec)}")

  x, y, z = (float(comp) for comp in pos_vec)

  if not (math.isfinite(x) and math.isfinite(y) and math.isfinite(z)):
    raise DomainError(f"Position must be finite, got ({x}, {y}, {z})")

  rho = math.hypot(x, y)
  r   = math.hypot(rho, z)

  if r <= 0.0:
    raise DomainError("The distance from the center must be positive (r > 0).")

  lat = math.atan2(z, rho)
  lon = math.atan2(y, x)

  return r, lat, lon


def is_on_rotation_axis(
  lat : float,
) -> bool:
  """
  True when r cos(lat) is zero relative to r, within floating point tolerance.
  """
  return abs(math.cos(lat)) <= _AXIS_TOLERANCE


def to_gravitational_acceleration(
  r       : float,
  lat     : float,
  lon     : float,
  dU_dr   : float,
  dU_dlat : float,
  dU_dlon : float,
) -> np.ndarray:
  """
  Convert spherical field derivatives into a Cartesian gravitational acceleration.

  Input:
  ------
    r : float
      Distance from the center [m].
    lat : float
      Geocentric latitude [rad].
    lon : float
      Longitude [rad].
    dU_dr : float
      Derivative of the potential w.r.t. the radius [m/s²].
    dU_dlat : float
      Derivative of the potential w.r.t. the geocentric latitude [m²/s²/rad].
    dU_dlon : float
      Derivative of the potential w.r.t. the longitude [m²/s²/rad].

  Output:
  -------
    acc_vec : np.ndarray
      Gravitational acceleration [m/s²] in the body-fixed frame, with the
      floating point type of dU_dr.
  """
  dtype = np.result_type(dU_dr, dU_dlat, dU_dlon)

  sin_lat = math.sin(lat)
  cos_lat = math.cos(lat)
  sin_lon = math.sin(lon)
  cos_lon = math.cos(lon)

  acc_r   = float(dU_dr)
  acc_lat = float(dU_dlat) / r

  if is_on_rotation_axis(lat):
    acc_lon = 0.0
  else:
    acc_lon = float(dU_dlon) / (r * cos_lat)

  acc_x = cos_lat * cos_lon * acc_r - sin_lat * cos_lon * acc_lat - sin_lon * acc_lon
  acc_y = cos_lat * sin_lon * acc_r - sin_lat * sin_lon * acc_lat + cos_lon * acc_lon
  acc_z = sin_lat           * acc_r + cos_lat           * acc_lat

  return np.array([acc_x, acc_y, acc_z], dtype=dtype)


def centrifugal_acceleration(
  pos_vec          : Sequence[float],
  angular_velocity : float = SOLARSYSTEMCONSTANTS.EARTH.OMEGA,
) -> np.ndarray:
  """
  Centrifugal acceleration (w² x, w² y, 0) of a frame rotating about +z.

  Input:
  ------
    pos_vec : Sequence[float]
      Position [m] in the rotating frame.
    angular_velocity : float
      Rotation rate of the frame [rad/s].

  Output:
  -------
    acc_vec : np.ndarray
      Centrifugal acceleration [m/s²].
  """
  omega_sq = angular_velocity * angular_velocity
  return np.array([omega_sq * float(pos_vec[0]), omega_sq * float(pos_vec[1]), 0.0])


def to_gravity_acceleration(
  pos_vec          : Sequence[float],
  r                : float,
  lat              : float,
  lon              : float,
  dU_dr            : float,
  dU_dlat          : float,
  dU_dlon          : float,
  angular_velocity : float = SOLARSYSTEMCONSTANTS.EARTH.OMEGA,
) -> np.ndarray:
  """
  Gravitational acceleration plus the centrifugal term of the rotating body frame.

  Input:
  ------
    pos_vec : Sequence[float]
      Position [m] in the body-fixed frame.
    r, lat, lon : float
      Spherical coordinates of pos_vec (see cartesian_to_spherical).
    dU_dr, dU_dlat, dU_dlon : float
      Field derivatives (see to_gravitational_acceleration).
    angular_velocity : float
      Rotation rate of the body [rad/s].

  Output:
  -------
    acc_vec : np.ndarray
      Gravity acceleration [m/s²] in the body-fixed frame.
  """
  acc_vec = to_gravitational_acceleration(r, lat, lon, dU_dr, dU_dlat, dU_dlon)
  return (acc_vec + centrifugal_acceleration(pos_vec, angular_velocity)).astype(acc_vec.dtype)
