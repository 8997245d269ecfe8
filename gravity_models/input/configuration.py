import yaml

from pathlib  import Path
from datetime import datetime
from types    import SimpleNamespace
from typing   import Optional, Union

from gravity_models.model.constants     import TIMEVALUES
from gravity_models.utility.time_helper import parse_time


# Default values of the configuration entries
DEFAULTS = {
  'model'          : 'EGM96',
  'positions'      : None,
  'time'           : TIMEVALUES.DEFAULT_EPOCH,
  'max_degree'     : -1,
  'max_order'      : -1,
  'quantity'       : 'all',
  'force_download' : False,
  'cache_dir'      : None,
  'log_filepath'   : None,
}

QUANTITIES = ('derivative', 'gravitational', 'gravity', 'all')


def load_config_file(
  config_filepath : Union[str, Path],
) -> dict:
  """
  Load a YAML configuration file.

  Input:
  ------
    config_filepath : str | Path
      Path to the YAML file. Keys are the long option names with '-' or '_'
      (e.g. max_degree, positions, log_file).

  Output:
  -------
    config_dict : dict
      Configuration entries with normalized keys.
  """
  with open(config_filepath, 'r') as f:
    raw = yaml.safe_load(f) or {}

  if not isinstance(raw, dict):
    raise ValueError(f"Configuration file {config_filepath} must contain a mapping")

  aliases = {
    'position' : 'positions',
    'log_file' : 'log_filepath',
  }

  config_dict = {}
  for key, value in raw.items():
    key = str(key).lower().replace('-', '_')
    key = aliases.get(key, key)
    if key not in DEFAULTS:
      raise ValueError(f"Unknown configuration key '{key}' in {config_filepath}")
    config_dict[key] = value

  return config_dict


def _parse_positions(
  positions,
) -> list:
  """
  Normalize positions into a list of [x, y, z] float lists.
  """
  if positions is None:
    return []

  # A single position may be given as a flat list
  if len(positions) == 3 and all(isinstance(comp, (int, float)) for comp in positions):
    positions = [positions]

  pos_list = []
  for pos in positions:
    if len(pos) != 3:
      raise ValueError(f"Position must have 3 components, got {pos}")
    pos_list.append([float(comp) for comp in pos])

  return pos_list


def build_config(
  model           : Optional[str]                 = None,
  positions       : Optional[list]                = None,
  time            : Optional[Union[str, datetime]] = None,
  max_degree      : Optional[int]                 = None,
  max_order       : Optional[int]                 = None,
  quantity        : Optional[str]                 = None,
  force_download  : Optional[bool]                = None,
  cache_dir       : Optional[str]                 = None,
  log_filepath    : Optional[str]                 = None,
  config_filepath : Optional[str]                 = None,
) -> SimpleNamespace:
  """
  Merge the command-line arguments, the configuration file, and the defaults.

  Explicit arguments take precedence over the configuration file, which takes
  precedence over the defaults.

  Input:
  ------
    model : str | None
      Model identifier, URL, or file path.
    positions : list | None
      Body-fixed positions [m].
    time : str | datetime | None
      Evaluation time.
    max_degree, max_order : int | None
      Maximum degree and order (-1 for the model maximum).
    quantity : str | None
      'derivative', 'gravitational', 'gravity', or 'all'.
    force_download : bool | None
      Download the model even if cached.
    cache_dir : str | None
      Cache directory of downloaded models.
    log_filepath : str | None
      Log file path.
    config_filepath : str | None
      YAML configuration file.

  Output:
  -------
    config : SimpleNamespace
      Configuration object. `user_set` holds the names of the entries that do
      not come from the defaults.
  """
  file_values = load_config_file(config_filepath) if config_filepath is not None else {}

  cli_values = {
    'model'          : model,
    'positions'      : positions,
    'time'           : time,
    'max_degree'     : max_degree,
    'max_order'      : max_order,
    'quantity'       : quantity,
    'force_download' : force_download,
    'cache_dir'      : cache_dir,
    'log_filepath'   : log_filepath,
  }

  values   = dict(DEFAULTS)
  user_set = set()
  for key in DEFAULTS:
    if cli_values[key] is not None:
      values[key] = cli_values[key]
      user_set.add(key)
    elif file_values.get(key) is not None:
      values[key] = file_values[key]
      user_set.add(key)

  # Normalize and validate
  positions = _parse_positions(values['positions'])
  if not positions:
    raise ValueError("At least one position is required (--position X Y Z or 'positions' in the configuration file)")

  time_dt = values['time']
  if isinstance(time_dt, str):
    time_dt = parse_time(time_dt)
  elif not isinstance(time_dt, datetime):
    # YAML reads unquoted dates as datetime.date
    time_dt = datetime(time_dt.year, time_dt.month, time_dt.day)

  quantity = str(values['quantity']).lower()
  if quantity not in QUANTITIES:
    raise ValueError(f"Unknown quantity '{quantity}'. Expected one of {QUANTITIES}")

  return SimpleNamespace(
    model           = str(values['model']),
    positions       = positions,
    time            = time_dt,
    max_degree      = int(values['max_degree']),
    max_order       = int(values['max_order']),
    quantity        = quantity,
    force_download  = bool(values['force_download']),
    cache_dir       = values['cache_dir'],
    log_filepath    = Path(values['log_filepath']) if values['log_filepath'] is not None else None,
    config_filepath = Path(config_filepath) if config_filepath is not None else None,
    user_set        = user_set,
  )


def print_configuration(
  config : SimpleNamespace,
) -> None:
  """
  Print the configuration in a formatted table.

  Input:
  ------
    config : SimpleNamespace
      Configuration object from build_config.

  Output:
  -------
    None
  """
  positions_str = '; '.join(' '.join(f"{comp:.3f}" for comp in pos) for pos in config.positions)

  # Build configuration entries: (name, value, default, user_set)
  entries = [
    ('model',          config.model,          DEFAULTS['model']),
    ('positions',      positions_str,         DEFAULTS['positions']),
    ('time',           config.time.isoformat(), DEFAULTS['time'].isoformat()),
    ('max_degree',     config.max_degree,     DEFAULTS['max_degree']),
    ('max_order',      config.max_order,      DEFAULTS['max_order']),
    ('quantity',       config.quantity,       DEFAULTS['quantity']),
    ('force_download', config.force_download, DEFAULTS['force_download']),
    ('log_filepath',   config.log_filepath,   DEFAULTS['log_filepath']),
  ]

  headers = ['Argument', 'Value', 'Default', 'User Set']
  rows = []
  for name, value, default in entries:
    rows.append([
      name,
      str(value) if value is not None else "None",
      str(default) if default is not None else "None",
      str(name in config.user_set),
    ])

  # Column widths: max of header and all values, plus 4 for spacing
  min_spacing = 4
  col_widths = []
  for col_idx in range(len(headers)):
    max_len = len(headers[col_idx])
    for row in rows:
      max_len = max(max_len, len(row[col_idx]))
    col_widths.append(max_len + min_spacing)

  print("\nInput Configuration")
  if config.config_filepath is not None:
    print(f"  Configuration File : {config.config_filepath}")
  header_line = "  " + "".join(h.ljust(col_widths[i]) for i, h in enumerate(headers))
  print(header_line)
  separator_line = "  " + "".join(("-" * (col_widths[i] - min_spacing)).ljust(col_widths[i]) for i in range(len(headers)))
  print(separator_line)

  for row in rows:
    row_line = "  " + "".join(row[col_idx].ljust(col_widths[col_idx]) for col_idx in range(len(row)))
    print(row_line)
