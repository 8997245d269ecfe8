"""
Coefficient Tests
=================

Tests for the coefficient table and the time evaluation of the coefficients.
"""
import pytest
import numpy as np

from datetime     import datetime, timedelta, timezone
from astropy.time import Time

from gravity_models.model.coefficients   import CoefficientRecord, CoefficientTable, PeriodicTerm, evaluate
from gravity_models.model.time_converter import utc_to_jd, years_between


class TestCoefficientRecord:
  """Tests for CoefficientRecord."""

  def test_constant_record_ignores_time(self):
    record = CoefficientRecord(degree=2, order=0, c=-4.8e-4, s=0.0)
    assert not record.is_time_variable
    assert record.at_elapsed_years(10.0) == (-4.8e-4, 0.0)

  def test_secular_only_record(self):
    record = CoefficientRecord(
      degree  = 2,
      order   = 1,
      c       = 1.0e-9,
      s       = 2.0e-9,
      epoch   = datetime(2005, 1, 1),
      trend_c = 3.0e-11,
      trend_s = -4.0e-11,
    )

    c_0, s_0 = record.at_elapsed_years(0.0)
    c_1, s_1 = record.at_elapsed_years(1.0)

    assert c_0 == 1.0e-9
    assert s_0 == 2.0e-9
    assert np.isclose(c_1 - c_0,  3.0e-11, rtol=1e-9, atol=0.0)
    assert np.isclose(s_1 - s_0, -4.0e-11, rtol=1e-9, atol=0.0)

  def test_periodic_record(self):
    record = CoefficientRecord(
      degree   = 2,
      order    = 0,
      c        = 0.0,
      s        = 0.0,
      epoch    = datetime(2005, 1, 1),
      periodic = (PeriodicTerm(period=1.0, acos_c=1.0, asin_c=2.0, acos_s=3.0, asin_s=4.0),),
    )

    # Quarter period: cos = 0, sin = 1
    c, s = record.at_elapsed_years(0.25)
    assert np.isclose(c, 2.0, atol=1e-12)
    assert np.isclose(s, 4.0, atol=1e-12)

    # Half period: cos = -1, sin = 0
    c, s = record.at_elapsed_years(0.5)
    assert np.isclose(c, -1.0, atol=1e-12)
    assert np.isclose(s, -3.0, atol=1e-12)


class TestCoefficientTable:
  """Tests for CoefficientTable."""

  @pytest.fixture
  def table(self):
    return CoefficientTable(
      max_degree = 3,
      records    = [
        CoefficientRecord(0, 0, 1.0, 0.0),
        CoefficientRecord(2, 0, -4.8e-4, 0.0),
        CoefficientRecord(2, 2, 2.4e-6, -1.4e-6),
        CoefficientRecord(3, 1, 2.0e-6, 2.5e-7),
        CoefficientRecord(3, 3, 1.0e-7, 1.5e-6),
      ],
    )

  def test_get(self, table):
    assert table.get(2, 2).c == 2.4e-6
    assert table.get(1, 1) is None
    assert table[(3, 1)].s == 2.5e-7

  def test_iteration_is_sorted(self, table):
    assert list(table) == [(0, 0), (2, 0), (2, 2), (3, 1), (3, 3)]

  def test_highest_degree(self, table):
    assert table.highest_degree == 3
    assert CoefficientTable(5, []).highest_degree == -1

  def test_records_are_read_only(self, table):
    with pytest.raises(TypeError):
      table.records[(1, 0)] = CoefficientRecord(1, 0, 1.0, 0.0)

  def test_out_of_range_record(self):
    with pytest.raises(ValueError, match="outside"):
      CoefficientTable(2, [CoefficientRecord(3, 0, 1.0, 0.0)])
    with pytest.raises(ValueError, match="outside"):
      CoefficientTable(2, [CoefficientRecord(1, 2, 1.0, 0.0)])

  def test_duplicate_record(self):
    with pytest.raises(ValueError, match="Duplicate"):
      CoefficientTable(2, [CoefficientRecord(2, 0, 1.0, 0.0), CoefficientRecord(2, 0, 2.0, 0.0)])

  def test_matrices(self, table):
    c_mat, s_mat = table.coefficient_matrices(datetime(2000, 1, 1))

    assert c_mat.shape == (4, 4)
    assert c_mat[0, 0] == 1.0
    assert c_mat[1, 0] == 0.0
    assert c_mat[2, 2] == 2.4e-6
    assert s_mat[3, 3] == 1.5e-6
    assert np.all(np.triu(c_mat, k=1) == 0.0)

  def test_matrices_are_truncated(self, table):
    c_mat, s_mat = table.coefficient_matrices(datetime(2000, 1, 1), max_degree=3, max_order=1)

    assert c_mat[3, 1] == 2.0e-6
    assert np.all(c_mat[:, 2:] == 0.0)
    assert np.all(s_mat[:, 2:] == 0.0)

  def test_matrices_degree_is_clamped(self, table):
    c_mat, _ = table.coefficient_matrices(datetime(2000, 1, 1), max_degree=100)
    assert c_mat.shape == (4, 4)

    c_mat, _ = table.coefficient_matrices(datetime(2000, 1, 1), max_degree=2)
    assert c_mat.shape == (3, 3)

  def test_matrices_are_copies(self, table):
    c_mat, _ = table.coefficient_matrices(datetime(2000, 1, 1))
    c_mat[2, 0] = 0.0
    assert table.coefficient_matrices(datetime(2000, 1, 1))[0][2, 0] == -4.8e-4


class TestEvaluate:
  """Tests for evaluate() on constant and time-variable coefficients."""

  def test_absent_pairs(self, time_variable_model):
    table = time_variable_model.table
    assert evaluate(table, 1, 0, datetime(2010, 1, 1)) == (0.0, 0.0)
    assert evaluate(table, 7, 3, datetime(2010, 1, 1)) == (0.0, 0.0)

  def test_constant_pair(self, time_variable_model):
    table = time_variable_model.table
    assert evaluate(table, 0, 0, datetime(1990, 6, 1)) == (1.0, 0.0)
    assert evaluate(table, 0, 0, datetime(2030, 6, 1)) == (1.0, 0.0)

  def test_at_reference_epoch(self, time_variable_model):
    # Only the cosine amplitude of the yearly term contributes at t0
    c, s = evaluate(time_variable_model.table, 2, 0, datetime(2000, 1, 1))
    assert np.isclose(c, -4.84165e-04 + 2.0e-11, rtol=0.0, atol=1e-18)
    assert s == 0.0

  def test_one_year_after_epoch(self, time_variable_model):
    time = datetime(2000, 1, 1) + timedelta(days=365.25)
    c, _ = evaluate(time_variable_model.table, 2, 0, time)
    assert np.isclose(c, -4.84165e-04 + 1.0e-11 + 2.0e-11, rtol=0.0, atol=1e-18)

  def test_quarter_year_after_epoch(self, time_variable_model):
    time = datetime(2000, 1, 1) + timedelta(days=365.25 / 4.0)
    c, _ = evaluate(time_variable_model.table, 2, 0, time)
    assert np.isclose(c, -4.84165e-04 + 0.25e-11 + 3.0e-11, rtol=0.0, atol=1e-18)

  def test_extrapolation_before_epoch(self, time_variable_model):
    time = datetime(2000, 1, 1) - timedelta(days=10 * 365.25)
    c, _ = evaluate(time_variable_model.table, 2, 0, time)
    assert np.isclose(c, -4.84165e-04 - 10.0e-11 + 2.0e-11, rtol=0.0, atol=1e-18)

  def test_epoch_with_time_of_day(self, time_variable_model):
    # The (2, 2) record has its epoch at 2000-01-01 12:00
    c, s = evaluate(time_variable_model.table, 2, 2, datetime(2000, 1, 1, 12, 0))
    assert c == 2.439e-06
    assert s == -1.400e-06

    c, s = evaluate(time_variable_model.table, 2, 2, datetime(2000, 1, 1))
    assert c < 2.439e-06
    assert s > -1.400e-06

  def test_time_types(self, time_variable_model):
    table    = time_variable_model.table
    expected = evaluate(table, 2, 0, datetime(2003, 7, 2, 6, 0))

    c_astropy, _ = evaluate(table, 2, 0, Time('2003-07-02T06:00:00', scale='utc'))
    c_str,     _ = evaluate(table, 2, 0, '2003-07-02T06:00:00')
    c_aware,   _ = evaluate(table, 2, 0, datetime(2003, 7, 2, 8, 0, tzinfo=timezone(timedelta(hours=2))))

    assert np.isclose(c_astropy, expected[0], rtol=0.0, atol=1e-18)
    assert c_str   == expected[0]
    assert c_aware == expected[0]

  def test_model_defaults_to_j2000(self, time_variable_model):
    assert time_variable_model.coefficients(2, 0) == time_variable_model.coefficients(2, 0, datetime(2000, 1, 1))

  def test_matrices_match_evaluate(self, time_variable_model):
    time         = datetime(2012, 3, 4, 5, 6, 7)
    c_mat, s_mat = time_variable_model.coefficient_matrices(2, 2, time)

    for degree, order in [(0, 0), (2, 0), (2, 1), (2, 2)]:
      c, s = time_variable_model.coefficients(degree, order, time)
      assert np.isclose(c_mat[degree, order], c, rtol=1e-14, atol=0.0)
      assert np.isclose(s_mat[degree, order], s, rtol=1e-14, atol=0.0)


class TestTimeConverter:
  """Tests for the Julian date conversions."""

  def test_j2000_julian_date(self):
    assert utc_to_jd(datetime(2000, 1, 1, 12, 0)) == 2451545.0

  def test_julian_date_matches_astropy(self):
    time = datetime(2021, 9, 14, 3, 25, 41)
    assert np.isclose(utc_to_jd(time), Time(time, scale='utc').jd, rtol=0.0, atol=1e-8)

  def test_years_between(self):
    assert years_between(datetime(2000, 12, 31, 6, 0), datetime(2000, 1, 1)) == 1.0
    assert years_between(datetime(2000, 1, 1), datetime(2000, 12, 31, 6, 0)) == -1.0

  def test_unsupported_type(self):
    with pytest.raises(TypeError):
      utc_to_jd(2000.0)
