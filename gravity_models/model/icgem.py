"""
ICGEM Gravity Field Files
=========================

Parser for gravity field coefficient files in the ICGEM format (as distributed
by the International Centre for Global Earth Models) and the gravity model
variant backed by such a file.

Supported formats:
- ICGEM 1.0 (.gfc): gfc, gfct (with reference epoch), trnd/dot, acos, asin
- ICGEM 2.0 (.gfc): as above, with the validity interval t0 t1 on time-variable lines

File Layout:
------------
  <free text>
  begin_of_head                    (optional)
  product_type            gravity_field
  modelname               EGM96
  earth_gravity_constant  0.3986004415E+15
  radius                  0.6378136300E+07
  max_degree              360
  errors                  formal
  tide_system             tide_free
  norm                    fully_normalized
  end_of_head
  gfc    2    0  -0.484165371736E-03  0.000000000000E+00  ...
  gfct   2    0  -0.484165371736E-03  0.000000000000E+00  ...  19860101.0000
  trnd   2    0   0.116275500000E-10  0.000000000000E+00  ...
  acos   2    0   0.100000000000E-10  0.000000000000E+00  ...  1.0
  asin   2    0   0.100000000000E-10  0.000000000000E+00  ...  1.0

References:
- Barthelmes & Förste (2011), "The ICGEM-format", GFZ Potsdam
"""
import io

import numpy as np

from dataclasses import dataclass
from datetime    import datetime
from pathlib     import Path
from typing      import Dict, List, Optional, TextIO, Tuple, Union

from gravity_models.model.coefficients   import CoefficientRecord, CoefficientTable, PeriodicTerm, evaluate
from gravity_models.model.constants      import TIMEVALUES
from gravity_models.model.errors         import FormatError
from gravity_models.model.gravity_model  import AbstractGravityModel, register_model
from gravity_models.model.time_converter import Instant


# Header keys that must be present, mapped to the name used in error messages
_REQUIRED_KEYS = {
  'product_type'     : 'product_type',
  'modelname'        : 'modelname',
  'gravity_constant' : 'earth_gravity_constant',
  'radius'           : 'radius',
  'max_degree'       : 'max_degree',
  'norm'             : 'norm',
  'tide_system'      : 'tide_system',
  'errors'           : 'errors',
}

_KEY_ALIASES = {
  'earth_gravity_constant' : 'gravity_constant',
  'gravity_constant'       : 'gravity_constant',
}

_NORM_TAGS = {
  'fully_normalized'   : 'full',
  'full'               : 'full',
  'schmidt'            : 'schmidt',
  'schmidt_normalized' : 'schmidt',
  'quasi_normalized'   : 'schmidt',
  'unnormalized'       : 'unnormalized',
  'non-normalized'     : 'unnormalized',
  'non_normalized'     : 'unnormalized',
}

_ERROR_TAGS = ('no', 'calibrated', 'formal', 'calibrated_and_formal')

_FORMATS = ('icgem1.0', 'icgem2.0')

_DATA_TAGS = ('gfc', 'gfct', 'trnd', 'dot', 'acos', 'asin')


@dataclass(frozen=True)
class ModelHeader:
  """
  Header of an ICGEM file.

  Attributes:
  -----------
    product_type : str
      'gravity_field' or 'other'.
    model_name : str
      Name of the model.
    gravity_constant : float
      GM [m³/s²].
    radius : float
      Reference radius [m].
    max_degree : int
      Declared maximum degree.
    max_order : int
      Declared maximum order (equal to max_degree for ICGEM files).
    tide_system : str
      Tide system, e.g. 'tide_free', 'zero_tide', 'mean_tide', or 'unknown'.
    errors : str
      Error type: 'no', 'calibrated', 'formal', or 'calibrated_and_formal'.
    norm : str
      Normalization: 'full', 'schmidt', or 'unnormalized'.
    file_format : str
      'icgem1.0' or 'icgem2.0'.
  """
  product_type     : str
  model_name       : str
  gravity_constant : float
  radius           : float
  max_degree       : int
  max_order        : int
  tide_system      : str
  errors           : str
  norm             : str
  file_format      : str = 'icgem1.0'


# =============================================================================
# Parser
# =============================================================================

def _parse_float(
  token   : str,
  dtype   : np.dtype,
  line_no : int,
  what    : str,
) -> float:
  """
  Parse a numeric field, accepting Fortran 'D' exponents (e.g. 1.0D-06).
  """
  val_str = token.replace('D', 'E').replace('d', 'e')
  try:
    return dtype.type(float(val_str))
  except ValueError:
    raise FormatError(f"Invalid {what} '{token}'", line_no) from None


def _parse_int(
  token   : str,
  line_no : int,
  what    : str,
) -> int:
  try:
    return int(token)
  except ValueError:
    raise FormatError(f"Invalid {what} '{token}'", line_no) from None


def _parse_epoch(
  token   : str,
  line_no : int,
) -> datetime:
  """
  Parse an ICGEM epoch 'yyyymmdd' or 'yyyymmdd.hhmm'.
  """
  date_str, _, time_str = token.partition('.')
  time_str = (time_str + '0000')[:4]

  if len(date_str) != 8 or not date_str.isdigit() or not time_str.isdigit():
    raise FormatError(f"Invalid epoch '{token}', expected yyyymmdd[.hhmm]", line_no)

  try:
    return datetime.strptime(date_str + time_str, '%Y%m%d%H%M')
  except ValueError:
    raise FormatError(f"Invalid epoch '{token}'", line_no) from None


def _read_header(
  lines : List[Tuple[int, str]],
  dtype : np.dtype,
) -> ModelHeader:
  """
  Build the header from the (line number, line) pairs before 'end_of_head'.
  """
  # Lines before 'begin_of_head' are free text
  for idx, (_, line) in enumerate(lines):
    if line.split()[0].lower() == 'begin_of_head':
      lines = lines[idx + 1:]
      break

  values : Dict[str, Tuple[List[str], int]] = {}
  for line_no, line in lines:
    tokens = line.split()
    key    = _KEY_ALIASES.get(tokens[0].lower(), tokens[0].lower())
    if len(tokens) >= 2:
      values[key] = (tokens[1:], line_no)

  missing = [name for key, name in _REQUIRED_KEYS.items() if key not in values]
  if missing:
    raise FormatError(f"Missing required header key(s): {', '.join(missing)}")

  product_type_raw = values['product_type'][0][0].lower()
  product_type     = 'gravity_field' if product_type_raw == 'gravity_field' else 'other'

  model_name = ' '.join(values['modelname'][0])

  gravity_constant = _parse_float(values['gravity_constant'][0][0], dtype, values['gravity_constant'][1], 'gravity constant')
  radius           = _parse_float(values['radius'          ][0][0], dtype, values['radius'          ][1], 'radius')
  max_degree       = _parse_int  (values['max_degree'      ][0][0],        values['max_degree'      ][1], 'max_degree')

  if max_degree < 0:
    raise FormatError(f"max_degree must be >= 0, got {max_degree}", values['max_degree'][1])

  norm_raw = values['norm'][0][0].lower()
  if norm_raw not in _NORM_TAGS:
    raise FormatError(f"Unknown normalization '{norm_raw}'", values['norm'][1])

  errors = values['errors'][0][0].lower()
  if errors not in _ERROR_TAGS:
    raise FormatError(f"Unknown error type '{errors}'. Expected one of {_ERROR_TAGS}", values['errors'][1])

  file_format = 'icgem1.0'
  if 'format' in values:
    file_format = values['format'][0][0].lower()
    if file_format not in _FORMATS:
      raise FormatError(f"Unsupported file format '{file_format}'", values['format'][1])

  return ModelHeader(
    product_type     = product_type,
    model_name       = model_name,
    gravity_constant = gravity_constant,
    radius           = radius,
    max_degree       = max_degree,
    max_order        = max_degree,
    tide_system      = values['tide_system'][0][0].lower(),
    errors           = errors,
    norm             = _NORM_TAGS[norm_raw],
    file_format      = file_format,
  )


def _read_data_line(
  tokens  : List[str],
  line_no : int,
  header  : ModelHeader,
  dtype   : np.dtype,
  records : Dict[Tuple[int, int], dict],
) -> None:
  """
  Apply one data line to the record builders.
  """
  tag = tokens[0].lower()

  if tag not in _DATA_TAGS:
    raise FormatError(f"Unknown data line tag '{tokens[0]}'", line_no)

  if len(tokens) < 5:
    raise FormatError(f"Incomplete '{tag}' line: expected at least 5 fields, got {len(tokens)}", line_no)

  degree = _parse_int(tokens[1], line_no, 'degree')
  order  = _parse_int(tokens[2], line_no, 'order')

  if not (0 <= order <= degree <= header.max_degree):
    raise FormatError(
      f"Coefficient ({degree}, {order}) outside 0 <= m <= l <= {header.max_degree}", line_no
    )

  key    = (degree, order)
  val_c  = _parse_float(tokens[3], dtype, line_no, 'coefficient')
  val_s  = _parse_float(tokens[4], dtype, line_no, 'coefficient')
  is_two = header.file_format == 'icgem2.0'

  if tag in ('gfc', 'gfct'):
    if key in records:
      raise FormatError(f"Duplicate coefficient record for ({degree}, {order})", line_no)

    builder = {
      'degree'   : degree,
      'order'    : order,
      'c'        : val_c,
      's'        : val_s,
      'periodic' : {},
    }

    if tag == 'gfc':
      n_sigma_fields = 7
    else:
      n_epoch_fields = 2 if is_two else 1
      if len(tokens) < 5 + n_epoch_fields:
        raise FormatError("Missing reference epoch on 'gfct' line", line_no)
      builder['epoch'] = _parse_epoch(tokens[-n_epoch_fields], line_no)
      if is_two:
        builder['valid_until'] = _parse_epoch(tokens[-1], line_no)
      n_sigma_fields = 7 + n_epoch_fields

    if len(tokens) >= n_sigma_fields:
      builder['sigma_c'] = _parse_float(tokens[5], dtype, line_no, 'standard deviation')
      builder['sigma_s'] = _parse_float(tokens[6], dtype, line_no, 'standard deviation')

    records[key] = builder
    return

  # Secular and periodic lines refine a preceding time-variable record
  builder = records.get(key)
  if builder is None or 'epoch' not in builder:
    raise FormatError(f"'{tag}' line without a preceding 'gfct' record for ({degree}, {order})", line_no)

  if tag in ('trnd', 'dot'):
    if 'trend_c' in builder:
      raise FormatError(f"Duplicate secular term for ({degree}, {order})", line_no)
    builder['trend_c'] = val_c
    builder['trend_s'] = val_s
    return

  if len(tokens) < 6:
    raise FormatError(f"Missing period on '{tag}' line", line_no)

  period = _parse_float(tokens[-1], dtype, line_no, 'period')
  if not period > 0:
    raise FormatError(f"Period must be positive, got {period}", line_no)

  term = builder['periodic'].setdefault(float(period), {})
  if tag in term:
    raise FormatError(f"Duplicate '{tag}' term of period {period} for ({degree}, {order})", line_no)
  term[tag] = (val_c, val_s)


def _build_record(
  builder : dict,
) -> CoefficientRecord:
  periodic = []
  for period, term in sorted(builder['periodic'].items()):
    acos_c, acos_s = term.get('acos', (0.0, 0.0))
    asin_c, asin_s = term.get('asin', (0.0, 0.0))
    periodic.append(PeriodicTerm(period, acos_c, acos_s, asin_c, asin_s))

  return CoefficientRecord(
    degree      = builder['degree'],
    order       = builder['order'],
    c           = builder['c'],
    s           = builder['s'],
    sigma_c     = builder.get('sigma_c'),
    sigma_s     = builder.get('sigma_s'),
    epoch       = builder.get('epoch'),
    valid_until = builder.get('valid_until'),
    trend_c     = builder.get('trend_c'),
    trend_s     = builder.get('trend_s'),
    periodic    = tuple(periodic),
  )


def _float_dtype(
  numeric_type : type,
) -> np.dtype:
  """Floating point dtype for `numeric_type` (non-floating types become float64)."""
  dtype = np.dtype(numeric_type)
  if dtype.kind != 'f':
    return np.dtype(np.float64)
  return dtype


def parse_icgem(
  source       : Union[str, Path, TextIO],
  numeric_type : type = np.float64,
) -> Tuple[ModelHeader, CoefficientTable]:
  """
  Parse an ICGEM file.

  Input:
  ------
    source : str | Path | TextIO
      Path to the file, or an open text stream.
    numeric_type : type
      Floating point type of the parsed values (default: np.float64).
      Non-floating types are converted to np.float64.

  Output:
  -------
    header : ModelHeader
      Parsed header.
    table : CoefficientTable
      Parsed coefficients.

  Raises:
  -------
    FormatError
      If the header is missing 'end_of_head' or a required key, a data line is
      malformed or out of the declared bounds, or the file ends before the
      declared maximum degree is reached.
    FileNotFoundError, OSError
      If the file cannot be read.
  """
  dtype = _float_dtype(numeric_type)

  if isinstance(source, (str, Path)):
    with open(source, 'r', encoding='utf-8', errors='replace') as f:
      try:
        return _parse_stream(f, dtype)
      except FormatError as err:
        raise FormatError(err.message, err.line_no, str(source)) from None

  return _parse_stream(source, dtype)


def _parse_stream(
  stream : TextIO,
  dtype  : np.dtype,
) -> Tuple[ModelHeader, CoefficientTable]:
  header_lines : List[Tuple[int, str]] = []
  end_of_head  = False
  line_no      = 0

  # Read header
  for line_no, line in enumerate(stream, start=1):
    line = line.strip()
    if not line:
      continue
    if line.split()[0].lower() == 'end_of_head':
      end_of_head = True
      break
    header_lines.append((line_no, line))

  if not end_of_head:
    raise FormatError("Missing 'end_of_head' marker")

  header = _read_header(header_lines, dtype)

  # Read coefficients (continue reading from current stream position)
  records : Dict[Tuple[int, int], dict] = {}
  for line_no, line in enumerate(stream, start=line_no + 1):
    tokens = line.split()
    if not tokens:
      continue
    _read_data_line(tokens, line_no, header, dtype, records)

  table = CoefficientTable(
    max_degree = header.max_degree,
    records    = (_build_record(builder) for builder in records.values()),
    dtype      = dtype,
  )

  if table.highest_degree < header.max_degree:
    raise FormatError(
      f"File truncated: declared max_degree {header.max_degree} but the last "
      f"coefficients read are of degree {table.highest_degree}"
    )

  # (N, N) closes the data block in both degree-major and order-major files
  if (header.max_degree, header.max_degree) not in table:
    raise FormatError(
      f"File truncated: declared max_degree {header.max_degree} but coefficient "
      f"({header.max_degree}, {header.max_degree}) is missing"
    )

  return header, table


# =============================================================================
# Gravity model variant
# =============================================================================

@register_model
class IcgemFile(AbstractGravityModel):
  """
  Gravity model loaded from an ICGEM file.
  """
  kind = 'icgem'

  def __init__(
    self,
    header   : ModelHeader,
    table    : CoefficientTable,
    filename : Optional[Union[str, Path]] = None,
  ):
    self._header   = header
    self._table    = table
    self._filename = Path(filename) if filename is not None else None

  @classmethod
  def load(
    cls,
    filename     : Union[str, Path, TextIO],
    numeric_type : type = np.float64,
  ) -> 'IcgemFile':
    """
    Load the ICGEM file `filename`, converting the values to `numeric_type`.
    """
    header, table = parse_icgem(filename, numeric_type)
    return cls(header, table, filename if isinstance(filename, (str, Path)) else None)

  @classmethod
  def from_string(
    cls,
    text         : str,
    numeric_type : type = np.float64,
  ) -> 'IcgemFile':
    """
    Load an ICGEM model from the file contents.
    """
    return cls.load(io.StringIO(text), numeric_type)

  @property
  def header(
    self,
  ) -> ModelHeader:
    return self._header

  @property
  def table(
    self,
  ) -> CoefficientTable:
    return self._table

  @property
  def filename(
    self,
  ) -> Optional[Path]:
    return self._filename

  @property
  def numeric_type(
    self,
  ) -> np.dtype:
    return self._table.dtype

  def coefficients(
    self,
    degree : int,
    order  : int,
    time   : Instant = TIMEVALUES.DEFAULT_EPOCH,
  ) -> Tuple[float, float]:
    return evaluate(self._table, degree, order, time)

  def coefficient_matrices(
    self,
    max_degree : int,
    max_order  : int,
    time       : Instant = TIMEVALUES.DEFAULT_EPOCH,
  ) -> Tuple[np.ndarray, np.ndarray]:
    return self._table.coefficient_matrices(time, max_degree, max_order)

  def coefficient_norm(
    self,
  ) -> str:
    return self._header.norm

  def gravity_constant(
    self,
  ) -> float:
    return self._header.gravity_constant

  def maximum_degree(
    self,
  ) -> int:
    return self._header.max_degree

  def radius(
    self,
  ) -> float:
    return self._header.radius

  def summary(
    self,
  ) -> str:
    """
    Multi-line description of the model.
    """
    header = self._header
    return '\n'.join([
      f"IcgemFile{{{self.numeric_type.name}}}:",
      f"      Product type : {header.product_type}",
      f"       Model name  : {header.model_name}",
      f"  Gravity constant : {header.gravity_constant}",
      f"            Radius : {header.radius}",
      f"    Maximum degree : {header.max_degree}",
      f"            Errors : {header.errors}",
      f"       Tide system : {header.tide_system}",
      f"              Norm : {header.norm}",
      f"         Data type : {self.numeric_type.name}",
    ])

  def __str__(
    self,
  ) -> str:
    return self.summary()

  def __repr__(
    self,
  ) -> str:
    return (
      f"IcgemFile(model_name={self._header.model_name!r}, "
      f"max_degree={self._header.max_degree}, norm={self._header.norm!r}, "
      f"dtype={self.numeric_type.name})"
    )
