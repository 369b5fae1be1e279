# perfusion_params/params.py
"""
Dimensionless parameters of the coupled 3D/1D perfusion model.

Builds, from the configuration and the tissue/vessel discretizations:
- the dimensionless vessel radius R'(s), one value per vessel DOF,
- the tissue conductivity kappa_t, one value per tissue DOF (constant by assumption),
- the vessel wall conductivity Q(s), one value per vessel DOF,
- the vessel bed conductivity kappa_v(s), one value per vessel DOF,

s being the arc length over the vessel network.

The conductivities either come straight from the config (test cases, already
dimensionless) or are derived from dimensional microcirculation parameters:

    kappa_t = k P / (mu U d)
    kappa_v = pi/8 P d / (mu U) R'^4
    Q       = 2 pi Lp P / U R'
"""
from __future__ import annotations
import numpy as np
import pandas as pd
import logging
import os
from dataclasses import dataclass
from typing import Dict, Optional, Tuple, Union

from perfusion_params import config_manager, constants, radius_io, vtk_export
from perfusion_params.discretization import Discretization
from perfusion_params.errors import ConfigurationError
from perfusion_params.integration import compute_region_average

logger = logging.getLogger(__name__)

FieldTriple = Tuple[np.ndarray, np.ndarray, np.ndarray]


@dataclass(frozen=True)
class DirectCoefficients:
    """Conductivities given directly in dimensionless form."""
    kt: float
    Q: float
    kv: float

    @classmethod
    def from_config(cls, config: dict) -> "DirectCoefficients":
        return cls(
            kt=config_manager.real_value(config, constants.KEY_KT, "dimensionless tissue conductivity"),
            Q=config_manager.real_value(config, constants.KEY_Q, "dimensionless vessel wall conductivity"),
            kv=config_manager.real_value(config, constants.KEY_KV, "dimensionless vessel bed conductivity"),
        )

    def nondimensionalize_radius(self, radius: float) -> float:
        return radius

    def derive(self, radius: np.ndarray, n_tissue_dof: int) -> FieldTriple:
        """Returns (kt, Q, kv) fields: kt sized to the tissue, Q and kv to the radius field."""
        kt = np.full(n_tissue_dof, self.kt, dtype=float)
        Q = np.full(radius.size, self.Q, dtype=float)
        kv = np.full(radius.size, self.kv, dtype=float)
        return kt, Q, kv


@dataclass(frozen=True)
class DimensionalCoefficients:
    """Dimensional physical parameters (SI units) from which the conductivities are derived."""
    P: float   # average interstitial pressure [Pa]
    U: float   # characteristic flow speed in the capillary bed [m/s]
    d: float   # characteristic length of the problem [m]
    k: float   # permeability of the interstitium [m^2]
    mu: float  # fluid viscosity [kg/ms]
    Lp: float  # permeability of the vessel walls [m^2 s/kg]

    @classmethod
    def from_config(cls, config: dict) -> "DimensionalCoefficients":
        return cls(
            P=config_manager.real_value(config, constants.KEY_PRESSURE, "average interstitial pressure [Pa]"),
            U=config_manager.real_value(config, constants.KEY_SPEED, "characteristic flow speed in the capillary bed [m/s]"),
            d=config_manager.real_value(config, constants.KEY_LENGTH, "characteristic length of the problem [m]"),
            k=config_manager.real_value(config, constants.KEY_PERMEABILITY, "permeability of the interstitium [m^2]"),
            mu=config_manager.real_value(config, constants.KEY_VISCOSITY, "fluid viscosity [kg/ms]"),
            Lp=config_manager.real_value(config, constants.KEY_WALL_PERMEABILITY, "permeability of the vessel walls [m^2 s/kg]"),
        )

    def nondimensionalize_radius(self, radius: float) -> float:
        return radius / self.d

    def tissue_conductivity(self) -> float:
        return self.k / self.mu * self.P / self.U / self.d

    def bed_conductivity(self, radius: np.ndarray) -> np.ndarray:
        return constants.PI / 8.0 / self.mu * self.P * self.d / self.U * radius**4

    def wall_conductivity(self, radius: np.ndarray) -> np.ndarray:
        return 2.0 * constants.PI * self.Lp * self.P / self.U * radius

    def derive(self, radius: np.ndarray, n_tissue_dof: int) -> FieldTriple:
        """Returns (kt, Q, kv) fields; Q and kv follow the radius field element by element."""
        kt = np.full(n_tissue_dof, self.tissue_conductivity(), dtype=float)
        return kt, self.wall_conductivity(radius), self.bed_conductivity(radius)


CoefficientModel = Union[DirectCoefficients, DimensionalCoefficients]


def select_coefficient_model(config: dict, nondimensional: bool) -> CoefficientModel:
    """Reads the coefficient model matching the nondimensional-input flag."""
    if nondimensional:
        return DirectCoefficients.from_config(config)
    return DimensionalCoefficients.from_config(config)


class PhysicalParameters:
    """Dimensionless physical parameters of the coupled 3D/1D model, built once from a config."""

    def __init__(self):
        self._built = False
        self.model: Optional[CoefficientModel] = None
        self.mf_tissue: Optional[Discretization] = None
        self.mf_vessel: Optional[Discretization] = None
        self._average_radius = constants.UNDEFINED_RADIUS
        self._R = np.empty(0)
        self._kt = np.empty(0)
        self._Q = np.empty(0)
        self._kv = np.empty(0)

    def build(self, config: dict, mf_tissue: Discretization, mf_vessel: Discretization,
              verbose: bool = False) -> "PhysicalParameters":
        """
        Builds the arrays of dimensionless parameters.

        Args:
            config (dict): Configuration (see constants.KEY_* for the keys read).
            mf_tissue (Discretization): Descriptor of the tissue data fields.
            mf_vessel (Discretization): Descriptor of the vessel data fields.
            verbose (bool): Report build progress at INFO level instead of DEBUG.

        Returns:
            PhysicalParameters: self, for chaining.

        Raises:
            ConfigurationError: On conflicting flags, a missing or invalid config entry,
                or a zero tissue / vessel bed conductivity.
        """
        self._built = False
        progress = logger.info if verbose else logger.debug

        import_radius = config_manager.bool_value(config, constants.KEY_IMPORT_RADIUS, "import radius from file")
        nondim_param = config_manager.bool_value(config, constants.KEY_NONDIM_PARAM, "parameters are already dimensionless")
        export_param = config_manager.bool_value(config, constants.KEY_EXPORT_PARAM, "export parameters")

        if import_radius and nondim_param:
            raise ConfigurationError("try to import non constant (dimensionless) radius: "
                                     "please insert dimensional parameters")

        model = select_coefficient_model(config, nondim_param)
        output_dir = None
        if export_param:
            output_dir = config_manager.string_value(config, constants.KEY_OUTPUT_DIR, "OutputDirectory")
        n_tissue_dof = mf_tissue.nb_dof
        n_vessel_dof = mf_vessel.nb_dof

        progress("  Assembling dimensionless radius R'... ")
        if not import_radius:
            radius_value = config_manager.real_value(config, constants.KEY_RADIUS, "Vessel average radius")
            average_radius = model.nondimensionalize_radius(radius_value)
            R = np.full(n_vessel_dof, average_radius, dtype=float)
        else:
            rfile = config_manager.string_value(config, constants.KEY_RADIUS_FILE, "radius data file")
            logger.info(f"  Importing radius values from file {rfile} ...")
            R = np.full(n_vessel_dof, constants.UNDEFINED_RADIUS, dtype=float)
            stream = radius_io.open_radius_source(rfile)
            if stream is not None:
                with stream:
                    radius_io.import_network_radius(R, stream, mf_vessel)
            else:
                logger.warning(f"Radius field left undefined (NaN) on all {n_vessel_dof} vessel DOFs.")
            finite = np.isfinite(R)
            average_radius = float(R[finite].mean()) if finite.any() else constants.UNDEFINED_RADIUS

        progress("  Assembling dimensionless permeabilities kt, Q, kv ... ")
        kt, Q, kv = model.derive(R, n_tissue_dof)

        if kt.size == 0:
            raise ConfigurationError(f"tissue discretization '{mf_tissue.name}' has no degrees of freedom")
        if kv.size == 0:
            raise ConfigurationError(f"vessel discretization '{mf_vessel.name}' has no degrees of freedom")
        if kt[0] == 0:
            raise ConfigurationError("wrong tissue conductivity (kt>0 required)")
        if kv[0] == 0:
            raise ConfigurationError("wrong vessel bed conductivity (kv>0 required)")
        if Q[0] == 0:
            logger.warning("Warning: uncoupled problem (Q=0)")

        self.model = model
        self.mf_tissue = mf_tissue
        self.mf_vessel = mf_vessel
        self._average_radius = average_radius
        self._R, self._kt, self._Q, self._kv = R, kt, Q, kv
        self._built = True

        if output_dir is not None:
            try:
                self.export(output_dir)
            except Exception:
                self._built = False
                raise

        progress(f"Physical parameters built: {n_tissue_dof} tissue DOFs, {n_vessel_dof} vessel DOFs.")
        return self

    def export(self, output_dir: str):
        """Writes radius.vtk, conductivity.vtk and a CSV summary of the fields to output_dir."""
        self._require_built()
        os.makedirs(output_dir, exist_ok=True)
        vtk_export.export_point_data(self.mf_vessel, self._R, constants.RADIUS_FIELD_NAME,
                                     os.path.join(output_dir, constants.RADIUS_VTK_FILENAME))
        vtk_export.export_point_data(self.mf_vessel, self._Q, constants.WALL_CONDUCTIVITY_FIELD_NAME,
                                     os.path.join(output_dir, constants.CONDUCTIVITY_VTK_FILENAME))
        csv_path = os.path.join(output_dir, constants.SUMMARY_CSV_FILENAME)
        summarize_parameters(self).to_csv(csv_path)
        logger.info(f"Saved parameter summary to {csv_path}")

    def _require_built(self):
        if not self._built:
            raise RuntimeError("Physical parameters have not been built.")

    # --- Per-DOF accessors ---
    def R(self, i: int) -> float:
        """Radius at vessel DOF i."""
        self._require_built()
        return float(self._R[i])

    def kt(self, i: int) -> float:
        """Tissue conductivity at tissue DOF i."""
        self._require_built()
        return float(self._kt[i])

    def Q(self, i: int) -> float:
        """Vessel wall conductivity at vessel DOF i."""
        self._require_built()
        return float(self._Q[i])

    def kv(self, i: int) -> float:
        """Vessel bed conductivity at vessel DOF i."""
        self._require_built()
        return float(self._kv[i])

    def region_radius(self, integrator, region: int) -> float:
        """Average radius over a region of the vessel discretization."""
        self._require_built()
        return compute_region_average(integrator, self.mf_vessel, self._R, region)

    # --- Full fields ---
    @property
    def average_radius(self) -> float:
        self._require_built()
        return self._average_radius

    @property
    def radius(self) -> np.ndarray:
        self._require_built()
        return self._R

    @radius.setter
    def radius(self, values):
        self._require_built()
        self._R = np.asarray(values, dtype=float)

    @property
    def wall_conductivity(self) -> np.ndarray:
        self._require_built()
        return self._Q

    @wall_conductivity.setter
    def wall_conductivity(self, values):
        self._require_built()
        self._Q = np.asarray(values, dtype=float)

    @property
    def tissue_conductivity(self) -> np.ndarray:
        self._require_built()
        return self._kt

    @property
    def bed_conductivity(self) -> np.ndarray:
        self._require_built()
        return self._kv

    def __str__(self):
        return format_parameters(self)


def format_parameters(params: PhysicalParameters) -> str:
    """Human-readable summary: first entry of each field."""
    lines = [
        "--- PHYSICAL PARAMS ------",
        f"  R'     : {params.R(0):g}",
        f"  kappat : {params.kt(0):g}",
        f"  Q      : {params.Q(0):g}",
        f"  kappav : {params.kv(0):g}",
        "--------------------------",
    ]
    return "\n".join(lines) + "\n"


def summarize_parameters(params: PhysicalParameters) -> pd.DataFrame:
    """Per-field statistics (NaN entries skipped), indexed by field name."""
    fields: Dict[str, np.ndarray] = {
        "R": params.radius,
        "kt": params.tissue_conductivity,
        "Q": params.wall_conductivity,
        "kv": params.bed_conductivity,
    }
    rows = []
    for name, values in fields.items():
        series = pd.Series(values, dtype=float)
        rows.append({"field": name, "n_dof": int(series.size),
                     "min": series.min(), "max": series.max(), "mean": series.mean()})
    return pd.DataFrame(rows).set_index("field")
