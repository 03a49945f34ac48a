"""Contains species data and fixtures shared by different testing modules."""

from __future__ import annotations

from typing import Sequence

import numpy as np
import pytest

import cubiceos as ce
from cubiceos.eos.interaction import InteractionArgs
from cubiceos.eos.mixing import (
    MixtureParameters,
    PureParameters,
    compute_mixture_parameters,
    compute_pure_parameters,
)

SPECIES: dict[str, tuple[float, float, float]] = {
    "CH4": (190.6, 4.6e6, 0.008),
    "CO2": (304.1282, 7377300.0, 0.22394),
    "H2S": (373.1, 9000000.0, 0.1005),
    "H2O": (647.096, 22064000.0, 0.3443),
}
"""Critical temperature, critical pressure and acentric factor of species used in
tests."""

ALL_MODELS: list[ce.CubicModel] = list(ce.CubicModel)
"""All supported cubic models, for parametrization."""


def species_data(names: Sequence[str]) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Returns critical temperatures, critical pressures and acentric factors."""
    data = np.array([SPECIES[name] for name in names])
    return data[:, 0], data[:, 1], data[:, 2]


def make_eos(names: Sequence[str], model=ce.CubicModel.peng_robinson, **kwargs):
    """Creates a configured equation of state for the given species."""
    Tc, Pc, omega = species_data(names)
    eos = ce.CubicEOS(len(names), model=model, **kwargs)
    eos.set_critical_temperatures(Tc)
    eos.set_critical_pressures(Pc)
    eos.set_acentric_factors(omega)
    return eos


def mixing_pipeline(
    names: Sequence[str],
    model: ce.CubicModel,
    T: float,
    n: Sequence[float],
    correction=None,
) -> tuple[PureParameters, MixtureParameters, ce.ChemicalVector]:
    """Runs the first stages of an evaluation: pure parameters and mixing rule,
    with temperature seeded as independent variable."""
    Tc, Pc, omega = species_data(names)
    params = ce.eos.get_model_parameters(model)
    T_ = ce.init_temperature(T, len(names))
    x = ce.init_mole_fractions(n)
    pure = compute_pure_parameters(params, T_, Tc, Pc, omega)
    strategy = ce.eos.as_interaction_correction(correction)
    matrices = strategy(InteractionArgs(T_, pure.a, pure.aT, pure.aTT, pure.b))
    mixture = compute_mixture_parameters(pure, x, matrices)
    return pure, mixture, x


@pytest.fixture(scope="module")
def model(request) -> ce.CubicModel:
    """Indirect parametrization of the cubic model."""
    return request.param


@pytest.fixture
def ternary_eos(model: ce.CubicModel) -> ce.CubicEOS:
    """Equation of state of a CH4-CO2-H2S mixture in a tight Newton configuration."""
    return make_eos(
        ["CH4", "CO2", "H2S"], model=model, tolerance=1e-12, max_iterations=50
    )
