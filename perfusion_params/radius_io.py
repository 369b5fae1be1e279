# perfusion_params/radius_io.py
import numpy as np
import logging
from typing import IO, List, Optional

from perfusion_params.discretization import Discretization

logger = logging.getLogger(__name__)

# Radius data file format (one radius per branch, branches in region-id order):
#
#   BEGIN_LIST
#   BEGIN_ARC
#     0.05
#   END_ARC
#   BEGIN_ARC
#     0.03
#   END_ARC
#   END_LIST
#
# Tokens are whitespace separated; '#' starts a comment.

def open_radius_source(filepath: str) -> Optional[IO[str]]:
    """Opens a radius data file for reading, or logs a warning and returns None."""
    try:
        return open(filepath, 'r')
    except OSError as e:
        logger.warning(f"impossible to read from file {filepath}: {e}")
        return None

def _tokens(stream: IO[str]) -> List[str]:
    tokens = []
    for line in stream:
        line = line.split('#', 1)[0]
        tokens.extend(line.split())
    return tokens

def read_branch_radii(stream: IO[str]) -> List[float]:
    """
    Parses the radius list of a radius data stream.

    Raises:
        ValueError: If the stream is not a radius data file or an arc is malformed.
    """
    tokens = _tokens(stream)
    try:
        pos = tokens.index("BEGIN_LIST") + 1
    except ValueError:
        raise ValueError("This seems not to be a radius data file (BEGIN_LIST not found)") from None

    radii = []
    while True:
        if pos >= len(tokens):
            raise ValueError("Unexpected end of radius data file (END_LIST not found)")
        token = tokens[pos]
        if token == "END_LIST":
            break
        if token != "BEGIN_ARC":
            raise ValueError(f"Expected BEGIN_ARC or END_LIST, got '{token}'")
        if pos + 2 >= len(tokens) or tokens[pos + 2] != "END_ARC":
            raise ValueError(f"Arc {len(radii)} must contain exactly one radius value followed by END_ARC")
        try:
            radii.append(float(tokens[pos + 1]))
        except ValueError:
            raise ValueError(f"Invalid radius value '{tokens[pos + 1]}' in arc {len(radii)}") from None
        pos += 3
    return radii

def import_network_radius(radius: np.ndarray, stream: IO[str], mf_vessel: Discretization) -> np.ndarray:
    """
    Fills `radius` in place with the per-branch radii read from `stream`.

    Branch b is assigned to every DOF of region b of `mf_vessel`. DOFs outside the listed
    branches keep their current value.
    """
    if radius.shape != (mf_vessel.nb_dof,):
        raise ValueError(f"Radius field has shape {radius.shape}, expected ({mf_vessel.nb_dof},)")

    branch_radii = read_branch_radii(stream)
    for branch, value in enumerate(branch_radii):
        if branch not in mf_vessel.regions:
            logger.warning(f"Radius given for branch {branch}, which is not a region of the vessel mesh. Ignored.")
            continue
        radius[mf_vessel.basic_dof_on_region(branch)] = value

    missing = [rg for rg in mf_vessel.region_ids() if rg >= len(branch_radii)]
    if missing:
        logger.warning(f"No radius given for vessel branches {missing}. Their DOFs keep their previous value.")
    logger.debug(f"Imported radii of {len(branch_radii)} branches.")
    return radius
