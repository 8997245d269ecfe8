"""
Gravity Field Evaluator

Description:
  This script evaluates a spherical harmonic gravity field model (ICGEM format)
  at one or more positions in the body-fixed frame. The model is given as a
  pre-configured identifier (downloaded on first use and cached), a download
  URL, or a local .gfc file.

  The script performs the following steps:
  1. Builds the configuration from the command line and an optional YAML file.
  2. Fetches (if needed) and loads the gravity model.
  3. Computes the potential derivatives, the gravitational acceleration, and
     the gravity acceleration (gravitational plus centrifugal) at each position.
  4. Prints the results, optionally copying the output to a log file.

Usage:

  Argument            Required   Description
  ------------------  --------   --------------------------------------------------
  --model             No         Model identifier (EGM96, EGM2008), URL, or .gfc path (default: EGM96)
  --position          Yes        Body-fixed position X Y Z [m], repeatable
  --time              No         Evaluation time, ISO format (default: 2000-01-01T00:00:00)
  --max-degree        No         Maximum degree (default: model maximum)
  --max-order         No         Maximum order (default: maximum degree)
  --quantity          No         derivative, gravitational, gravity, or all (default: all)
  --config            No         YAML configuration file
  --force-download    No         Download the model even if cached
  --cache-dir         No         Cache directory of downloaded models
  --log-file          No         Copy the terminal output to this file

  Example Commands:
    python -m gravity_models \
      --model EGM96 \
      --position 6378137 0 0 \
      --position 0 0 6356752.3 \
      [--time 2000-01-01T00:00:00] \
      [--max-degree 360 --max-order 360] \
      [--quantity gravitational]

    python -m gravity_models --config evaluation.yaml --log-file output/evaluation.log
"""
import sys

import requests

from pathlib  import Path
from datetime import datetime
from typing   import List, Optional

from gravity_models.download.icgem       import ModelCache, fetch_icgem_file
from gravity_models.input.cli            import parse_command_line_arguments
from gravity_models.input.configuration  import build_config, print_configuration
from gravity_models.model.errors         import GravityModelError
from gravity_models.model.gravity_field  import (
  EvaluationOptions,
  gravitational_acceleration,
  gravitational_field_derivative,
  gravity_acceleration,
  resolve_degree_order,
)
from gravity_models.model.gravity_model  import AbstractGravityModel, load
from gravity_models.utility.logger       import start_logging, stop_logging
from gravity_models.utility.printer      import print_model_summary, print_results_summary


def load_model(
  model          : str,
  force_download : bool = False,
  cache_dir      : Optional[str] = None,
) -> AbstractGravityModel:
  """
  Load a gravity model from a local file, or fetch it first.

  Input:
  ------
    model : str
      Path to a .gfc file, pre-configured identifier, or download URL.
    force_download : bool
      Download the model even if it is cached.
    cache_dir : str | None
      Cache directory of downloaded models.

  Output:
  -------
    gravity_model : AbstractGravityModel
      Loaded model.
  """
  filepath = Path(model).expanduser()

  if not filepath.is_file():
    filepath = fetch_icgem_file(
      model,
      force = force_download,
      cache = ModelCache(cache_dir),
    )

  print(f"\nLoading gravity model : {filepath}")
  return load('icgem', filepath)


def evaluate_positions(
  gravity_model : AbstractGravityModel,
  positions     : List[list],
  time          : datetime,
  options       : EvaluationOptions,
  quantity      : str = 'all',
) -> List[dict]:
  """
  Evaluate the requested quantities at each position.

  Input:
  ------
    gravity_model : AbstractGravityModel
      Gravity model.
    positions : list[list]
      Body-fixed positions [m].
    time : datetime
      Evaluation time.
    options : EvaluationOptions
      Evaluation options.
    quantity : str
      'derivative', 'gravitational', 'gravity', or 'all'.

  Output:
  -------
    results : list[dict]
      One entry per position (see print_results_summary).
  """
  results = []
  for pos_vec in positions:
    result = {'pos_vec': pos_vec}
    if quantity in ('derivative', 'all'):
      result['derivative'] = gravitational_field_derivative(gravity_model, pos_vec, time, options)
    if quantity in ('gravitational', 'all'):
      result['gravitational'] = gravitational_acceleration(gravity_model, pos_vec, time, options)
    if quantity in ('gravity', 'all'):
      result['gravity'] = gravity_acceleration(gravity_model, pos_vec, time, options)
    results.append(result)
  return results


def run(
  model           : Optional[str]            = None,
  positions       : Optional[list]           = None,
  time            : Optional[datetime]       = None,
  max_degree      : Optional[int]            = None,
  max_order       : Optional[int]            = None,
  quantity        : Optional[str]            = None,
  force_download  : Optional[bool]           = None,
  cache_dir       : Optional[str]            = None,
  log_filepath    : Optional[str]            = None,
  config_filepath : Optional[str]            = None,
) -> dict:
  """
  Run the gravity field evaluation.

  Input:
  ------
    Same as build_config.

  Output:
  -------
    result : dict
      'success' : bool, and on success 'results' (see evaluate_positions),
      'max_degree' and 'max_order' (effective values). On failure 'message'.
  """
  # Process inputs and setup
  try:
    config = build_config(
      model           = model,
      positions       = positions,
      time            = time,
      max_degree      = max_degree,
      max_order       = max_order,
      quantity        = quantity,
      force_download  = force_download,
      cache_dir       = cache_dir,
      log_filepath    = log_filepath,
      config_filepath = config_filepath,
    )
  except (OSError, ValueError) as e:
    print(f"\n    [ERROR] Invalid configuration: {e}")
    return {'success': False, 'message': str(e)}

  # Start logging to file
  logger = start_logging(config.log_filepath) if config.log_filepath is not None else None

  try:
    # Print input configuration
    print_configuration(config)

    try:
      gravity_model = load_model(config.model, config.force_download, config.cache_dir)
    except (OSError, requests.RequestException, GravityModelError, ValueError) as e:
      print(f"\n    [ERROR] Could not load gravity model '{config.model}': {e}")
      return {'success': False, 'message': str(e)}

    print_model_summary(gravity_model)

    options = EvaluationOptions(
      max_degree = config.max_degree,
      max_order  = config.max_order,
    )
    n_max, m_max = resolve_degree_order(gravity_model.maximum_degree(), config.max_degree, config.max_order)

    try:
      results = evaluate_positions(gravity_model, config.positions, config.time, options, config.quantity)
    except GravityModelError as e:
      print(f"\n    [ERROR] Evaluation failed: {e}")
      return {'success': False, 'message': str(e)}

    # Display results
    print_results_summary(results, config.time, n_max, m_max)

    return {
      'success'    : True,
      'results'    : results,
      'max_degree' : n_max,
      'max_order'  : m_max,
    }
  finally:
    # Stop logging
    stop_logging(logger)


def main(
  argv : Optional[List[str]] = None,
) -> int:
  """
  Command-line entry point. Returns the process exit status.
  """
  # Parse command-line arguments
  args = parse_command_line_arguments(argv)

  # Run main function
  result = run(
    model           = args.model,
    positions       = args.positions,
    time            = args.time,
    max_degree      = args.max_degree,
    max_order       = args.max_order,
    quantity        = args.quantity,
    force_download  = args.force_download,
    cache_dir       = args.cache_dir,
    log_filepath    = args.log_filepath,
    config_filepath = args.config_filepath,
  )

  return 0 if result['success'] else 1


if __name__ == "__main__":
  sys.exit(main())
