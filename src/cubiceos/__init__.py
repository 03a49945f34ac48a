"""   cubiceos.

Root directory for the cubiceos package. Contains the following sub-packages:

ad: Forward-mode differentiation of thermodynamic quantities with respect to
    temperature, pressure and the amounts of species.

eos: Cubic equations of state, mixing rules and the residual properties of a phase.

test_utils: Helpers for testing derivatives.


isort:skip_file

"""

import os
from pathlib import Path
import configparser


__version__ = "0.1.0"

# Try to read the config file from the directory where python process was launched
try:
    cwd = Path(os.getcwd())
    pth = cwd / Path("cubiceos.cfg")
    cfg = configparser.ConfigParser()
    cfg.read(pth)
    config = dict(cfg)
except configparser.Error:
    # the assumption is that no configurations are given
    config = {}

# ------------------------------------
# Simplified namespaces. The rule of thumb is that classes and functions that a
# user can be exposed to should have a shortcut here.

from cubiceos._core import *
from cubiceos.utils import EOSConfigurationError, EOSConvergenceError, safe_sum

from cubiceos import ad
from cubiceos.ad import (
    ThermoScalar,
    ThermoVector,
    ChemicalScalar,
    ChemicalVector,
    init_temperature,
    init_pressure,
    init_mole_fractions,
    lift,
)

from cubiceos import eos
from cubiceos.eos import (
    CubicEOS,
    CubicModel,
    Result,
    InteractionArgs,
    InteractionMatrices,
    InteractionCorrection,
    IdentityCorrection,
    ConstantCorrection,
    LinearCorrection,
    CallableCorrection,
)
