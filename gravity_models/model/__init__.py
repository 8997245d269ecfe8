"""
Gravity Model Core
==================

Provides the model file parser, coefficient evaluation, Legendre functions,
harmonic synthesis, and acceleration transforms.
"""

from .errors        import GravityModelError, FormatError, DomainError
from .gravity_model import (
  AbstractGravityModel,
  coefficient_norm,
  coefficients,
  gravity_constant,
  load,
  maximum_degree,
  model_kinds,
  radius,
)
from .icgem         import IcgemFile, ModelHeader, parse_icgem
from .gravity_field import (
  EvaluationOptions,
  gravitational_acceleration,
  gravitational_field_derivative,
  gravity_acceleration,
)

__all__ = [
  'GravityModelError', 'FormatError', 'DomainError',
  'AbstractGravityModel', 'load', 'model_kinds',
  'coefficients', 'coefficient_norm', 'gravity_constant', 'maximum_degree', 'radius',
  'IcgemFile', 'ModelHeader', 'parse_icgem',
  'EvaluationOptions', 'gravitational_field_derivative', 'gravitational_acceleration', 'gravity_acceleration',
]
