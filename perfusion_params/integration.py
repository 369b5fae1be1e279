# perfusion_params/integration.py
from __future__ import annotations
import numpy as np
import logging

from perfusion_params.discretization import Discretization, iter_line_cells

logger = logging.getLogger(__name__)


class LineIntegrator:
    """
    Lumped (trapezoidal) integration over the line cells of a vessel mesh.

    Each line segment of length L whose endpoints both lie in the region contributes L/2
    to the weight of each endpoint. Integrating a field f over the region is then
    sum(w_i * f_i).
    """

    def dof_weights(self, discretization: Discretization, region: int) -> np.ndarray:
        dofs = discretization.basic_dof_on_region(region)
        in_region = np.zeros(discretization.nb_dof, dtype=bool)
        in_region[dofs] = True

        mesh = discretization.mesh
        points = np.asarray(mesh.points)
        weights = np.zeros(discretization.nb_dof, dtype=float)
        for point_ids in iter_line_cells(mesh):
            for a, b in zip(point_ids[:-1], point_ids[1:]):
                if in_region[a] and in_region[b]:
                    half_length = 0.5 * np.linalg.norm(points[b] - points[a])
                    weights[a] += half_length
                    weights[b] += half_length
        return weights[dofs]


def compute_region_average(integrator, discretization: Discretization, field: np.ndarray, region: int) -> float:
    """
    Average of a per-DOF field over a region: integral(field) / measure(region).

    `integrator` is any object with dof_weights(discretization, region) returning one
    weight per DOF of the region (in basic_dof_on_region order).
    """
    field = np.asarray(field, dtype=float)
    if field.shape != (discretization.nb_dof,):
        raise ValueError(f"Field has shape {field.shape}, expected ({discretization.nb_dof},)")

    dofs = discretization.basic_dof_on_region(region)
    weights = np.asarray(integrator.dof_weights(discretization, region), dtype=float)
    if weights.shape != dofs.shape:
        raise ValueError(f"Integrator returned {weights.size} weights for {dofs.size} DOFs in region {region}")

    measure = weights.sum()
    if measure <= 0:
        raise ValueError(f"Region {region} has zero measure; cannot average.")
    return float(np.dot(weights, field[dofs]) / measure)
