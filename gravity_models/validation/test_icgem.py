"""
ICGEM Parser Tests
==================

Tests for the ICGEM file parser and the IcgemFile gravity model.
"""
import io

import pytest
import numpy as np

from datetime import datetime

from gravity_models.model.errors        import FormatError
from gravity_models.model.gravity_model import (
  coefficient_norm,
  coefficients,
  gravity_constant,
  load,
  maximum_degree,
  model_kinds,
  radius,
)
from gravity_models.model.icgem         import IcgemFile, parse_icgem


class TestParseHeader:
  """Tests for the header of ICGEM files."""

  def test_simple_model_header(self, simple_model):
    header = simple_model.header
    assert header.product_type == 'gravity_field'
    assert header.model_name   == 'EGM96_D4'
    assert header.max_degree   == 4
    assert header.max_order    == 4
    assert header.errors       == 'formal'
    assert header.tide_system  == 'tide_free'
    assert header.norm         == 'full'
    assert header.file_format  == 'icgem1.0'
    assert np.isclose(header.gravity_constant, 3.986004415e14, rtol=1e-15)
    assert np.isclose(header.radius,           6378136.3,      rtol=1e-15)

  def test_accessors(self, simple_model):
    assert coefficient_norm(simple_model) == 'full'
    assert maximum_degree(simple_model)   == 4
    assert np.isclose(gravity_constant(simple_model), 3.986004415e14, rtol=1e-15)
    assert np.isclose(radius(simple_model),           6378136.3,      rtol=1e-15)

  @pytest.mark.parametrize("norm_tag, norm", [
    ('fully_normalized',   'full'),
    ('full',               'full'),
    ('schmidt',            'schmidt'),
    ('schmidt_normalized', 'schmidt'),
    ('quasi_normalized',   'schmidt'),
    ('unnormalized',       'unnormalized'),
    ('non-normalized',     'unnormalized'),
    ('non_normalized',     'unnormalized'),
  ])
  def test_norm_tags(self, icgem_text, norm_tag, norm):
    text  = icgem_text(['gfc 2 0 1.0 0.0'], header={'norm': norm_tag})
    model = IcgemFile.from_string(text)
    assert model.coefficient_norm() == norm

  def test_unknown_norm_tag(self, icgem_text):
    text = icgem_text(['gfc 2 0 1.0 0.0'], header={'norm': 'orthonormal'})
    with pytest.raises(FormatError, match="normalization"):
      IcgemFile.from_string(text)

  def test_product_type_other(self, icgem_text):
    text  = icgem_text(['gfc 2 0 1.0 0.0'], header={'product_type': 'topography'})
    model = IcgemFile.from_string(text)
    assert model.header.product_type == 'other'

  def test_gravity_constant_alias(self, icgem_text):
    text = icgem_text(
      ['gfc 2 0 1.0 0.0'],
      header = {'gravity_constant': '4.9028E+12'},
      omit   = ('earth_gravity_constant',),
    )
    model = IcgemFile.from_string(text)
    assert np.isclose(model.gravity_constant(), 4.9028e12)

  def test_free_text_before_begin_of_head_is_ignored(self, icgem_text):
    text  = "radius 1.0\nmodelname WRONG\n" + icgem_text(['gfc 2 0 1.0 0.0'])
    model = IcgemFile.from_string(text)
    assert model.header.model_name == 'TEST'
    assert np.isclose(model.radius(), 6378136.3)

  def test_header_without_begin_of_head(self, icgem_text):
    text  = icgem_text(['gfc 2 0 1.0 0.0']).replace('begin_of_head\n', '')
    model = IcgemFile.from_string(text)
    assert model.maximum_degree() == 2

  @pytest.mark.parametrize("key", [
    'product_type',
    'modelname',
    'earth_gravity_constant',
    'radius',
    'max_degree',
    'errors',
    'tide_system',
    'norm',
  ])
  def test_missing_required_key(self, icgem_text, key):
    text = icgem_text(['gfc 2 0 1.0 0.0'], omit=(key,))
    with pytest.raises(FormatError, match=key):
      IcgemFile.from_string(text)

  def test_missing_end_of_head(self, icgem_text):
    text = icgem_text(['gfc 2 0 1.0 0.0'], end_of_head=False)
    with pytest.raises(FormatError, match="end_of_head"):
      IcgemFile.from_string(text)

  def test_empty_file(self):
    with pytest.raises(FormatError, match="end_of_head"):
      IcgemFile.from_string("")

  def test_unknown_error_type(self, icgem_text):
    text = icgem_text(['gfc 2 0 1.0 0.0'], header={'errors': 'guessed'})
    with pytest.raises(FormatError, match="error type"):
      IcgemFile.from_string(text)

  def test_unsupported_format(self, icgem_text):
    text = icgem_text(['gfc 2 0 1.0 0.0'], header={'format': 'icgem3.0'})
    with pytest.raises(FormatError, match="format"):
      IcgemFile.from_string(text)


class TestParseData:
  """Tests for the data lines of ICGEM files."""

  def test_coefficients(self, simple_model):
    c, s = coefficients(simple_model, 2, 0)
    assert c == -0.484165371736e-03
    assert s == 0.0

    c, s = coefficients(simple_model, 4, 4)
    assert c == -0.188560802735e-06
    assert s ==  0.308853169333e-06

  def test_fortran_exponent(self, simple_model):
    c, s = simple_model.coefficients(2, 2)
    assert c ==  0.243914352398e-05
    assert s == -0.140016683654e-05

  def test_standard_deviations(self, simple_model):
    record = simple_model.table.get(2, 0)
    assert record.sigma_c == 0.3561e-10
    assert record.sigma_s == 0.0

  def test_absent_coefficients_are_zero(self, simple_model):
    for degree, order in [(1, 0), (1, 1), (3, 3), (5, 0), (10, 3), (2, 3)]:
      assert simple_model.coefficients(degree, order) == (0.0, 0.0)

  def test_record_count(self, simple_model):
    assert len(simple_model.table) == 12
    assert (3, 3) not in simple_model.table
    assert (4, 4) in simple_model.table

  @pytest.mark.parametrize("line", [
    'gfc 3 0 1.0 0.0',
    'gfc 2 3 1.0 0.0',
    'gfc -1 0 1.0 0.0',
    'gfc 2 -1 1.0 0.0',
  ])
  def test_out_of_bounds(self, icgem_text, line):
    text = icgem_text(['gfc 2 0 1.0 0.0', line])
    with pytest.raises(FormatError, match="outside"):
      IcgemFile.from_string(text)

  def test_truncated_file(self, icgem_text):
    text = icgem_text(['gfc 0 0 1.0 0.0', 'gfc 1 0 0.0 0.0'], closing_record=False)
    with pytest.raises(FormatError, match="truncated"):
      IcgemFile.from_string(text)

  def test_file_cut_within_last_degree(self, simple_model_filepath):
    lines = simple_model_filepath.read_text().splitlines(keepends=True)
    cut   = next(idx for idx, line in enumerate(lines) if line.split()[:3] == ['gfc', '4', '0'])

    with pytest.raises(FormatError, match=r"\(4, 4\) is missing"):
      IcgemFile.from_string(''.join(lines[:cut + 1]))

  def test_order_major_file(self, simple_model, simple_model_filepath):
    lines   = simple_model_filepath.read_text().splitlines(keepends=True)
    n_head  = next(idx for idx, line in enumerate(lines) if line.startswith('end_of_head')) + 1
    data    = sorted((line for line in lines[n_head:] if line.strip()), key=lambda line: (int(line.split()[2]), int(line.split()[1])))
    model   = IcgemFile.from_string(''.join(lines[:n_head] + data))

    assert len(model.table) == len(simple_model.table)
    assert model.coefficients(4, 4) == simple_model.coefficients(4, 4)

  def test_empty_data_block_is_truncated(self, icgem_text):
    with pytest.raises(FormatError, match="truncated"):
      IcgemFile.from_string(icgem_text([], closing_record=False))

  def test_unknown_tag(self, icgem_text):
    text = icgem_text(['gfc 2 0 1.0 0.0', 'xyz 2 1 1.0 0.0'])
    with pytest.raises(FormatError, match="xyz"):
      IcgemFile.from_string(text)

  def test_duplicate_record(self, icgem_text):
    text = icgem_text(['gfc 2 0 1.0 0.0', 'gfc 2 0 2.0 0.0'])
    with pytest.raises(FormatError, match="Duplicate"):
      IcgemFile.from_string(text)

  def test_incomplete_line(self, icgem_text):
    text = icgem_text(['gfc 2 0 1.0'])
    with pytest.raises(FormatError, match="Incomplete"):
      IcgemFile.from_string(text)

  def test_invalid_number(self, icgem_text):
    text = icgem_text(['gfc 2 0 1.0x 0.0'])
    with pytest.raises(FormatError, match="1.0x"):
      IcgemFile.from_string(text)

  def test_trend_without_time_variable_record(self, icgem_text):
    text = icgem_text(['gfc 2 0 1.0 0.0', 'trnd 2 0 1.0 0.0'])
    with pytest.raises(FormatError, match="gfct"):
      IcgemFile.from_string(text)

  def test_periodic_term_without_period(self, icgem_text):
    text = icgem_text(['gfct 2 0 1.0 0.0 20000101', 'acos 2 0 1.0 0.0'])
    with pytest.raises(FormatError, match="period"):
      IcgemFile.from_string(text)

  def test_invalid_epoch(self, icgem_text):
    text = icgem_text(['gfct 2 0 1.0 0.0 2000-01-01'])
    with pytest.raises(FormatError, match="epoch"):
      IcgemFile.from_string(text)

  def test_error_reports_line_number(self, icgem_text):
    text = icgem_text(['gfc 2 0 1.0 0.0', '', 'bad 2 1 1.0 0.0'])

    # Header: begin_of_head + 8 keys + end_of_head = 10 lines
    with pytest.raises(FormatError) as excinfo:
      IcgemFile.from_string(text)

    assert excinfo.value.line_no == 13
    assert "line 13" in str(excinfo.value)

  def test_error_reports_source_path(self, tmp_path, icgem_text):
    filepath = tmp_path / "broken.gfc"
    filepath.write_text(icgem_text(['gfc 2 0 1.0 0.0', 'gfc 2 5 1.0 0.0']))

    with pytest.raises(FormatError) as excinfo:
      IcgemFile.load(filepath)

    assert excinfo.value.source == str(filepath)
    assert str(excinfo.value).startswith(f"{filepath}:12:")

  def test_format_error_is_value_error(self, icgem_text):
    with pytest.raises(ValueError):
      IcgemFile.from_string(icgem_text([], end_of_head=False))


class TestTimeVariableRecords:
  """Tests for gfct, trnd, acos, and asin lines."""

  def test_icgem1_record(self, time_variable_model):
    record = time_variable_model.table.get(2, 0)

    assert record.is_time_variable
    assert record.epoch       == datetime(2000, 1, 1)
    assert record.valid_until is None
    assert record.c           == -4.84165e-04
    assert record.sigma_c     == 1.0e-11
    assert record.trend_c     == 1.0e-11
    assert record.trend_s     == 0.0

  def test_periodic_terms_are_grouped_by_period(self, time_variable_model):
    record = time_variable_model.table.get(2, 0)

    assert [term.period for term in record.periodic] == [0.5, 1.0]

    half_year, year = record.periodic
    assert year.acos_c      == 2.0e-11
    assert year.asin_c      == 3.0e-11
    assert half_year.acos_c == 0.0
    assert half_year.asin_c == 4.0e-11

  def test_epoch_with_time_of_day(self, time_variable_model):
    record = time_variable_model.table.get(2, 2)
    assert record.epoch   == datetime(2000, 1, 1, 12, 0)
    assert record.sigma_c is None
    assert record.trend_s == -5.0e-12

  def test_constant_records_in_time_variable_file(self, time_variable_model):
    assert not time_variable_model.table.get(0, 0).is_time_variable
    assert len(time_variable_model.table.time_variable_records) == 2

  def test_icgem2_record(self, fixtures_path):
    model  = IcgemFile.load(fixtures_path / "time_variable_v2.gfc")
    record = model.table.get(2, 0)

    assert model.header.file_format == 'icgem2.0'
    assert record.epoch       == datetime(2000, 1, 1)
    assert record.valid_until == datetime(2010, 1, 1)
    assert record.sigma_c     == 1.0e-11
    assert record.trend_c     == 1.0e-11
    assert record.periodic[0].period == 1.0
    assert record.periodic[0].acos_c == 2.0e-11

  def test_duplicate_trend(self, icgem_text):
    text = icgem_text([
      'gfct 2 0 1.0 0.0 20000101',
      'trnd 2 0 1.0 0.0',
      'dot  2 0 1.0 0.0',
    ])
    with pytest.raises(FormatError, match="Duplicate secular"):
      IcgemFile.from_string(text)


class TestNumericType:
  """Tests for the floating point type of the parsed values."""

  def test_default_float64(self, simple_model):
    assert simple_model.numeric_type == np.float64
    c, _ = simple_model.coefficients(2, 0)
    assert isinstance(c, np.float64)

  def test_float32(self, simple_model_filepath):
    model = IcgemFile.load(simple_model_filepath, np.float32)
    c, s  = model.coefficients(2, 2)

    assert model.numeric_type == np.float32
    assert isinstance(c, np.float32)
    assert isinstance(s, np.float32)
    assert isinstance(model.gravity_constant(), np.float32)
    assert np.isclose(c, 0.243914352398e-05, rtol=1e-6)

    c, s = model.coefficients(3, 3)
    assert isinstance(c, np.float32)

  def test_integer_type_is_converted_to_float(self, simple_model_filepath):
    model = IcgemFile.load(simple_model_filepath, int)
    assert model.numeric_type == np.float64


class TestLoad:
  """Tests for load() and the IcgemFile model."""

  def test_load_by_name(self, simple_model_filepath):
    model = load('icgem', simple_model_filepath)
    assert isinstance(model, IcgemFile)
    assert model.filename == simple_model_filepath

  def test_load_by_class(self, simple_model_filepath):
    model = load(IcgemFile, str(simple_model_filepath), numeric_type=np.float32)
    assert model.numeric_type == np.float32

  def test_registered_kinds(self):
    assert 'icgem' in model_kinds()

  def test_unknown_kind(self, simple_model_filepath):
    with pytest.raises(ValueError, match="Unknown gravity model kind"):
      load('spherical_cap', simple_model_filepath)

  def test_missing_file(self, tmp_path):
    with pytest.raises(FileNotFoundError):
      load('icgem', tmp_path / "missing.gfc")

  def test_load_from_stream(self, icgem_text):
    header, table = parse_icgem(io.StringIO(icgem_text(['gfc 2 0 1.0 0.0'])))
    assert header.max_degree == 2
    assert len(table) == 2

  def test_summary(self, simple_model):
    summary = str(simple_model)
    assert summary.startswith("IcgemFile{float64}:")
    assert "EGM96_D4"  in summary
    assert "tide_free" in summary
    assert "Maximum degree : 4" in summary
    assert summary == simple_model.summary()

  def test_table_matrices_are_read_only(self, simple_model):
    c_mat, _ = simple_model.coefficient_matrices(4, 4)
    c_mat[2, 0] = 0.0
    assert simple_model.coefficients(2, 0)[0] == -0.484165371736e-03
