import numpy as np

from datetime import datetime
from typing   import List

from gravity_models.model.constants import CONVERTER


def print_model_summary(
  model,
) -> None:
  """
  Print the summary of a loaded gravity model.

  Input:
  ------
    model : AbstractGravityModel
      Loaded model. Models without a summary() print their accessors.
  """
  print("\nGravity Model")
  if hasattr(model, 'summary'):
    for line in model.summary().splitlines():
      print(f"  {line}")
  else:
    print(f"  Gravity constant : {model.gravity_constant()}")
    print(f"            Radius : {model.radius()}")
    print(f"    Maximum degree : {model.maximum_degree()}")
    print(f"              Norm : {model.coefficient_norm()}")


def print_results_summary(
  results    : List[dict],
  time       : datetime,
  max_degree : int,
  max_order  : int,
) -> None:
  """
  Print the evaluation results.

  Input:
  ------
    results : list[dict]
      One entry per position with the key 'pos_vec' and, depending on the
      requested quantity, 'derivative', 'gravitational', and 'gravity'.
    time : datetime
      Evaluation time.
    max_degree, max_order : int
      Effective maximum degree and order.
  """
  print("\nResults Summary")
  print(f"  Epoch        : {time.isoformat()} UTC")
  print(f"  Frame        : Body-fixed")
  print(f"  Degree/Order : {max_degree} / {max_order}")

  for idx, result in enumerate(results):
    pos_vec = np.asarray(result['pos_vec'], dtype=float)
    r       = np.linalg.norm(pos_vec)
    lat     = np.arctan2(pos_vec[2], np.hypot(pos_vec[0], pos_vec[1])) * CONVERTER.DEG_PER_RAD
    lon     = np.arctan2(pos_vec[1], pos_vec[0]) * CONVERTER.DEG_PER_RAD

    print(f"  Position {idx + 1}")
    print(f"    Cartesian : {pos_vec[0]:>19.12e}  {pos_vec[1]:>19.12e}  {pos_vec[2]:>19.12e} m")
    print(f"    Spherical : r = {r:.3f} m, lat = {lat:.6f} deg, lon = {lon:.6f} deg")

    if 'derivative' in result:
      dU_dr, dU_dlat, dU_dlon = result['derivative']
      print(f"    Potential Derivatives")
      print(f"      dU/dr   : {dU_dr:>19.12e} m/s²")
      print(f"      dU/dlat : {dU_dlat:>19.12e} m²/s²/rad")
      print(f"      dU/dlon : {dU_dlon:>19.12e} m²/s²/rad")

    if 'gravitational' in result:
      acc_vec = result['gravitational']
      print(f"    Gravitational Acceleration : {acc_vec[0]:>19.12e}  {acc_vec[1]:>19.12e}  {acc_vec[2]:>19.12e} m/s²")

    if 'gravity' in result:
      acc_vec = result['gravity']
      print(f"    Gravity Acceleration       : {acc_vec[0]:>19.12e}  {acc_vec[1]:>19.12e}  {acc_vec[2]:>19.12e} m/s²")
