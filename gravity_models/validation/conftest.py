"""
Pytest Configuration and Fixtures
=================================

Shared fixtures for all validation tests.
"""
import pytest
import numpy as np
from pathlib import Path

from gravity_models.download.icgem import ModelCache
from gravity_models.model.icgem    import IcgemFile


ICGEM_HEADER = {
  'product_type'           : 'gravity_field',
  'modelname'              : 'TEST',
  'earth_gravity_constant' : '3.986004415E+14',
  'radius'                 : '6.3781363E+06',
  'max_degree'             : '2',
  'errors'                 : 'formal',
  'tide_system'            : 'tide_free',
  'norm'                   : 'fully_normalized',
}


def make_icgem_text(
  data_lines     : list,
  header         : dict = None,
  omit           : tuple = (),
  end_of_head    : bool = True,
  closing_record : bool = True,
) -> str:
  """
  Build the contents of an ICGEM file from data lines and header overrides.

  With `closing_record`, a zero (N, N) record is appended when the data lines
  do not contain one, so that the file is complete.
  """
  values = dict(ICGEM_HEADER)
  values.update(header or {})

  lines = ['begin_of_head']
  for key, value in values.items():
    if key not in omit:
      lines.append(f"{key:<24s}  {value}")
  if end_of_head:
    lines.append('end_of_head')
  lines.extend(data_lines)

  n_max = str(values.get('max_degree', ''))
  if closing_record and not any(line.split()[1:3] == [n_max, n_max] for line in data_lines):
    lines.append(f"gfc {n_max} {n_max} 0.0 0.0")

  return '\n'.join(lines) + '\n'


@pytest.fixture(scope="session")
def fixtures_path():
  """Return path to test fixtures directory."""
  return Path(__file__).parent / "fixtures"


@pytest.fixture(scope="session")
def simple_model_filepath(fixtures_path):
  """Degree 4 model with EGM96 coefficients, (1, 0), (1, 1), and (3, 3) absent."""
  return fixtures_path / "simple_model.gfc"


@pytest.fixture(scope="session")
def simple_model(simple_model_filepath):
  return IcgemFile.load(simple_model_filepath)


@pytest.fixture(scope="session")
def time_variable_model(fixtures_path):
  """ICGEM 1.0 model with secular and periodic terms on (2, 0) and (2, 2)."""
  return IcgemFile.load(fixtures_path / "time_variable.gfc")


@pytest.fixture(scope="session")
def j2_model():
  """Model with only the monopole and C20."""
  return IcgemFile.from_string(make_icgem_text([
    'gfc 0 0  1.0            0.0',
    'gfc 2 0 -0.484165371736E-03 0.0',
  ]))


@pytest.fixture
def icgem_text():
  """Builder of ICGEM file contents (see make_icgem_text)."""
  return make_icgem_text


@pytest.fixture
def test_positions():
  """Body-fixed positions [m] covering the equator, mid latitudes, and the poles."""
  return [
    np.array([ 6378137.0,       0.0,       0.0]),
    np.array([       0.0, 6378137.0,       0.0]),
    np.array([ 4000.0e3,   3000.0e3,   4500.0e3]),
    np.array([-5000.0e3,  -2000.0e3,  -3800.0e3]),
    np.array([ 7000.0e3,   -500.0e3,   1000.0e3]),
    np.array([       0.0,       0.0, 6356752.3]),
    np.array([       0.0,       0.0, -6356752.3]),
  ]


@pytest.fixture(scope="session")
def egm96_filepath():
  """Path of the cached EGM96 file. Tests using it are skipped when it has not been downloaded."""
  filepath = ModelCache().get('EGM96.gfc')
  if filepath is None:
    pytest.skip("EGM96.gfc is not in the model cache (python -m gravity_models.download.icgem EGM96)")
  return filepath


@pytest.fixture(scope="session")
def egm96(egm96_filepath):
  return IcgemFile.load(egm96_filepath)
