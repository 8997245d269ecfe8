"""
Gravity Models Package
======================

Spherical harmonic gravity field models loaded from ICGEM files: coefficient
evaluation (including time-variable coefficients), associated Legendre
functions, potential derivatives, and gravitational/gravity accelerations.
"""

from .model import (
  AbstractGravityModel,
  DomainError,
  EvaluationOptions,
  FormatError,
  GravityModelError,
  IcgemFile,
  coefficient_norm,
  coefficients,
  gravitational_acceleration,
  gravitational_field_derivative,
  gravity_acceleration,
  gravity_constant,
  load,
  maximum_degree,
  radius,
)

__version__ = '0.1.0'

__all__ = [
  'AbstractGravityModel', 'IcgemFile', 'EvaluationOptions',
  'GravityModelError', 'FormatError', 'DomainError',
  'load', 'coefficients', 'coefficient_norm', 'gravity_constant', 'maximum_degree', 'radius',
  'gravitational_field_derivative', 'gravitational_acceleration', 'gravity_acceleration',
]
