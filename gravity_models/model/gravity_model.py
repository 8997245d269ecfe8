"""
Gravity Model API
=================

Capability set shared by every gravity model variant, and the functions that
expose it.

Class Structure:
----------------
  AbstractGravityModel
  └── IcgemFile (model/icgem.py) : model backed by an ICGEM text file

A variant implements:
  - load(...)            : build the model (classmethod)
  - coefficients(l, m, t): Clm and Slm at an instant
  - coefficient_norm()   : 'full', 'schmidt', or 'unnormalized'
  - gravity_constant()   : GM [m³/s²]
  - maximum_degree()     : maximum degree of the expansion
  - radius()             : reference radius [m]

and may override coefficient_matrices() with a faster version. The harmonic
synthesis in model/gravity_field.py only relies on these methods, so new
variants do not require changes there.

Usage Example:
--------------
  from gravity_models.model.gravity_model import load
  from gravity_models.model.icgem         import IcgemFile

  egm96 = load(IcgemFile, 'EGM96.gfc')
  egm96 = load('icgem', 'EGM96.gfc', numeric_type=np.float32)
"""
import numpy as np

from abc    import ABC, abstractmethod
from typing import Dict, Optional, Tuple, Type, Union

from gravity_models.model.constants      import TIMEVALUES
from gravity_models.model.time_converter import Instant


class AbstractGravityModel(ABC):
  """
  Abstract base of all gravity models.
  """

  # Name under which the variant is registered for load()
  kind : str = ''

  @classmethod
  @abstractmethod
  def load(
    cls,
    *args,
    **kwargs,
  ) -> 'AbstractGravityModel':
    """
    Load a gravity model of this variant.
    """

  @abstractmethod
  def coefficients(
    self,
    degree : int,
    order  : int,
    time   : Instant = TIMEVALUES.DEFAULT_EPOCH,
  ) -> Tuple[float, float]:
    """
    Return the Clm and Slm coefficients for the degree, order, and instant.

    Models with constant coefficients must accept `time` and ignore it.
    Pairs outside the model return (0, 0).
    """

  @abstractmethod
  def coefficient_norm(
    self,
  ) -> str:
    """
    Return the normalization of the coefficients: 'full', 'schmidt', or 'unnormalized'.
    """

  @abstractmethod
  def gravity_constant(
    self,
  ) -> float:
    """
    Return the gravity constant GM [m³/s²].
    """

  @abstractmethod
  def maximum_degree(
    self,
  ) -> int:
    """
    Return the maximum degree of the model.
    """

  @abstractmethod
  def radius(
    self,
  ) -> float:
    """
    Return the reference radius [m].
    """

  @property
  def numeric_type(
    self,
  ) -> np.dtype:
    """Floating point type of the model values."""
    return np.dtype(np.float64)

  def coefficient_matrices(
    self,
    max_degree : int,
    max_order  : int,
    time       : Instant = TIMEVALUES.DEFAULT_EPOCH,
  ) -> Tuple[np.ndarray, np.ndarray]:
    """
    Return all coefficients up to `max_degree` and `max_order` at an instant.

    Input:
    ------
      max_degree : int
        Maximum degree.
      max_order : int
        Maximum order (<= max_degree).
      time : datetime | astropy.time.Time | str
        Evaluation instant.

    Output:
    -------
      c_mat, s_mat : np.ndarray
        (max_degree+1) x (max_degree+1) matrices indexed [degree, order],
        zero above the diagonal and beyond max_order.
    """
    size  = max_degree + 1
    c_mat = np.zeros((size, size), dtype=self.numeric_type)
    s_mat = np.zeros((size, size), dtype=self.numeric_type)

    for n_degree in range(size):
      for m_order in range(min(n_degree, max_order) + 1):
        c_mat[n_degree, m_order], s_mat[n_degree, m_order] = self.coefficients(n_degree, m_order, time)

    return c_mat, s_mat


_MODEL_KINDS : Dict[str, Type[AbstractGravityModel]] = {}


def register_model(
  model_cls : Type[AbstractGravityModel],
) -> Type[AbstractGravityModel]:
  """
  Class decorator registering a gravity model variant under its `kind` name.
  """
  if not model_cls.kind:
    raise ValueError(f"{model_cls.__name__} must define a non-empty 'kind'")
  _MODEL_KINDS[model_cls.kind.lower()] = model_cls
  return model_cls


def model_kinds(
) -> Tuple[str, ...]:
  """Names of the registered gravity model variants."""
  return tuple(sorted(_MODEL_KINDS))


def load(
  kind : Union[str, Type[AbstractGravityModel]],
  *args,
  **kwargs,
) -> AbstractGravityModel:
  """
  Load a gravity model of variant `kind` using `args` and `kwargs`.

  Input:
  ------
    kind : str | Type[AbstractGravityModel]
      Variant class or its registered name (e.g. 'icgem').
    *args, **kwargs
      Variant specific arguments, e.g. the file path and numeric type.

  Output:
  -------
    model : AbstractGravityModel
      Loaded model.

  Raises:
  -------
    ValueError
      If `kind` is not a registered variant.
  """
  if isinstance(kind, type) and issubclass(kind, AbstractGravityModel):
    model_cls = kind
  else:
    model_cls = _MODEL_KINDS.get(str(kind).lower())
    if model_cls is None:
      raise ValueError(f"Unknown gravity model kind '{kind}'. Supported: {list(model_kinds())}")

  return model_cls.load(*args, **kwargs)


# -----------------------------------------------------------------------------
# Functional accessors
# -----------------------------------------------------------------------------

def coefficients(
  model  : AbstractGravityModel,
  degree : int,
  order  : int,
  time   : Optional[Instant] = None,
) -> Tuple[float, float]:
  """Clm and Slm of `model` (defaults to the J2000.0 epoch)."""
  return model.coefficients(degree, order, TIMEVALUES.DEFAULT_EPOCH if time is None else time)


def coefficient_norm(
  model : AbstractGravityModel,
) -> str:
  return model.coefficient_norm()


def gravity_constant(
  model : AbstractGravityModel,
) -> float:
  return model.gravity_constant()


def maximum_degree(
  model : AbstractGravityModel,
) -> int:
  return model.maximum_degree()


def radius(
  model : AbstractGravityModel,
) -> float:
  return model.radius()
