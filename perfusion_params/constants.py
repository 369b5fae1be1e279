# perfusion_params/constants.py
import numpy as np

# Math constants
PI = np.pi

# Fill value for radius DOFs that were never assigned (e.g. radius file could not be read).
# Downstream values computed from it are undefined.
UNDEFINED_RADIUS = np.nan

# --- Configuration keys (dot-separated paths into the YAML config) ---
# Model options
KEY_IMPORT_RADIUS = "options.IMPORT_RADIUS"
KEY_NONDIM_PARAM = "options.TEST_PARAM"  # parameters are already dimensionless
KEY_EXPORT_PARAM = "options.EXPORT_PARAM"
KEY_VERBOSE = "options.VERBOSE"

# Vessel network radius
KEY_RADIUS = "network.RADIUS"
KEY_RADIUS_FILE = "network.RFILE"

# Dimensional physical parameters (microcirculation applications)
KEY_PRESSURE = "physical_parameters.P"      # average interstitial pressure [Pa]
KEY_SPEED = "physical_parameters.U"         # characteristic flow speed in the capillary bed [m/s]
KEY_LENGTH = "physical_parameters.d"        # characteristic length of the problem [m]
KEY_PERMEABILITY = "physical_parameters.k"  # permeability of the interstitium [m^2]
KEY_VISCOSITY = "physical_parameters.mu"    # fluid viscosity [kg/ms]
KEY_WALL_PERMEABILITY = "physical_parameters.Lp"  # permeability of the vessel walls [m^2 s/kg]

# Dimensionless physical parameters (test cases)
KEY_KT = "dimensionless_parameters.Kt"
KEY_Q = "dimensionless_parameters.Q"
KEY_KV = "dimensionless_parameters.Kv"

# Output
KEY_OUTPUT_DIR = "paths.OutputDir"

# --- Output file names ---
RADIUS_VTK_FILENAME = "radius.vtk"
CONDUCTIVITY_VTK_FILENAME = "conductivity.vtk"
SUMMARY_CSV_FILENAME = "parameters_summary.csv"

# Point data names used in the exported VTK files
RADIUS_FIELD_NAME = "R"
WALL_CONDUCTIVITY_FIELD_NAME = "Q"

# Cell data array tagging each line cell of the vessel mesh with its branch index
BRANCH_ARRAY_NAME = "branch"

# --- Typical values (used to create a default config) ---
# Capillary-bed scales, see e.g. Notaro et al. / Cattaneo & Zunino
DEFAULT_INTERSTITIAL_PRESSURE = 1333.0   # Pa (10 mmHg)
DEFAULT_FLOW_SPEED = 1.0e-3              # m/s
DEFAULT_CHARACTERISTIC_LENGTH = 1.0e-4   # m
DEFAULT_TISSUE_PERMEABILITY = 1.0e-18    # m^2
DEFAULT_PLASMA_VISCOSITY = 1.2e-3        # Pa.s
DEFAULT_WALL_HYDRAULIC_CONDUCTIVITY = 1.0e-12  # m^2 s/kg
DEFAULT_VESSEL_RADIUS = 4.0e-6           # m
