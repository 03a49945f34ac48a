"""This module contains the parameters of the supported cubic equations of state.

All supported models share the generic cubic form

.. math::

    P = \\frac{RT}{V - b} - \\frac{a(T)}{(V + \\epsilon b)(V + \\sigma b)},

with pure-component parameters

.. math::

    a_i = \\Psi \\frac{R^2 T_{c,i}^2}{P_{c,i}} \\alpha(T_{r,i}, \\omega_i),~
    b_i = \\Omega \\frac{R T_{c,i}}{P_{c,i}}.

A model is hence characterized by the four constants :math:`\\Omega, \\Psi, \\epsilon,
\\sigma` and the function :math:`\\alpha`. They are stored in :data:`MODEL_TABLE`,
which is the only place where models are distinguished. Adding a model requires only
a new entry in :class:`CubicModel` and in the table.

References:
    [1]: `Smith, Van Ness, Abbott (2005), Table 3.1
         <https://www.mheducation.com/highered/product/introduction-chemical-
         engineering-thermodynamics-smith-van-ness/M9781259696527.html>`_
    [2]: `Jaubert et al. (2005) <https://doi.org/10.1016/j.fluid.2005.07.019>`_

"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

import numpy as np

from ..ad import functions as af
from ..utils import EOSConfigurationError

__all__ = [
    "CubicModel",
    "AlphaFunction",
    "ModelParameters",
    "MODEL_TABLE",
    "get_model_parameters",
    "alpha_van_der_waals",
    "alpha_redlich_kwong",
    "alpha_soave_redlich_kwong",
    "alpha_peng_robinson",
]


class CubicModel(Enum):
    """Enum object for the supported cubic equations of state."""

    van_der_waals: int = 0
    redlich_kwong: int = 1
    soave_redlich_kwong: int = 2
    peng_robinson: int = 3

    @classmethod
    def from_name(cls, name: str) -> CubicModel:
        """Returns the model by name, ignoring case, underscores, dashes and spaces.

        E.g., ``'PengRobinson'``, ``'peng_robinson'`` and ``'Peng-Robinson'`` all
        return :attr:`peng_robinson`.

        Raises:
            EOSConfigurationError: If no model with this name exists.

        """
        key = name.lower()
        for char in "_- ":
            key = key.replace(char, "")
        for model in cls:
            if model.name.replace("_", "") == key:
                return model
        raise EOSConfigurationError(
            f"Unknown cubic model '{name}'. Expecting one of"
            + f" {[m.name for m in cls]}."
        )


AlphaFunction = Callable[[Any, float], tuple[Any, Any, Any]]
"""Type alias for the cohesion correction :math:`\\alpha(T_r, \\omega)`.

It takes the reduced temperature :math:`T_r` (float or differentiable number) and the
acentric factor, and returns :math:`\\alpha` and its first and second derivatives
with respect to the **reduced** temperature.

"""


def alpha_van_der_waals(Tr: Any, omega: float) -> tuple[Any, Any, Any]:
    """Cohesion correction of the van der Waals EoS: identical to 1."""
    return 1.0, 0.0, 0.0


def alpha_redlich_kwong(Tr: Any, omega: float) -> tuple[Any, Any, Any]:
    """Cohesion correction of the Redlich-Kwong EoS, :math:`T_r^{-1/2}`."""
    val = 1.0 / af.sqrt(Tr)
    ddt = -0.5 / Tr * val
    d2dt2 = -0.5 / Tr * (ddt - val / Tr)
    return val, ddt, d2dt2


def _alpha_soave(Tr: Any, m: float) -> tuple[Any, Any, Any]:
    """Soave-type correction :math:`(1 + m (1 - \\sqrt{T_r}))^2` and its
    derivatives."""
    sqrt_Tr = af.sqrt(Tr)
    aux = 1.0 + m * (1.0 - sqrt_Tr)
    aux_ddt = -0.5 * m / sqrt_Tr
    aux_d2dt2 = 0.25 * m / (Tr * sqrt_Tr)
    val = aux * aux
    ddt = 2.0 * aux * aux_ddt
    d2dt2 = 2.0 * (aux_ddt * aux_ddt + aux * aux_d2dt2)
    return val, ddt, d2dt2


def alpha_soave_redlich_kwong(Tr: Any, omega: float) -> tuple[Any, Any, Any]:
    """Cohesion correction of the Soave-Redlich-Kwong EoS with
    :math:`m = 0.480 + 1.574 \\omega - 0.176 \\omega^2`."""
    m = 0.480 + 1.574 * omega - 0.176 * omega**2
    return _alpha_soave(Tr, m)


def alpha_peng_robinson(Tr: Any, omega: float) -> tuple[Any, Any, Any]:
    """Cohesion correction of the Peng-Robinson (1978) EoS.

    The slope :math:`m` is given by two different polynomials in the acentric factor,
    for light (:math:`\\omega \\leq 0.491`) and heavy components [2].

    """
    if omega <= 0.491:
        m = 0.374640 + 1.54226 * omega - 0.269920 * omega**2
    else:
        m = 0.379642 + 1.48503 * omega - 0.164423 * omega**2 + 0.016666 * omega**3
    return _alpha_soave(Tr, m)


@dataclass(frozen=True)
class ModelParameters:
    """Immutable parameters of a cubic equation of state."""

    model: CubicModel
    """The model tag."""

    Omega: float
    """Coefficient of the covolume :math:`b`."""

    Psi: float
    """Coefficient of the cohesion :math:`a`."""

    epsilon: float
    """First constant in the attractive term."""

    sigma: float
    """Second constant in the attractive term."""

    alpha: AlphaFunction
    """The cohesion correction (see :data:`AlphaFunction`)."""

    def temperature_alpha(
        self, T: Any, Tc: float, omega: float
    ) -> tuple[Any, Any, Any]:
        """Evaluates :attr:`alpha` at the reduced temperature ``T / Tc`` and returns
        the derivatives with respect to the temperature ``T``.

        The chain rule factor :math:`\\frac{dT_r}{dT} = \\frac{1}{T_c}` is applied
        independently of how the derivatives of ``T`` are seeded.

        Parameters:
            T: Temperature.
            Tc: Critical temperature.
            omega: Acentric factor.

        Returns:
            :math:`\\alpha, \\frac{d\\alpha}{dT}, \\frac{d^2\\alpha}{dT^2}`.

        """
        val, ddt, d2dt2 = self.alpha(T / Tc, omega)
        return val, ddt / Tc, d2dt2 / Tc**2


MODEL_TABLE: dict[CubicModel, ModelParameters] = {
    CubicModel.van_der_waals: ModelParameters(
        model=CubicModel.van_der_waals,
        Omega=1.0 / 8.0,
        Psi=27.0 / 64.0,
        epsilon=0.0,
        sigma=0.0,
        alpha=alpha_van_der_waals,
    ),
    CubicModel.redlich_kwong: ModelParameters(
        model=CubicModel.redlich_kwong,
        Omega=0.08664,
        Psi=0.42748,
        epsilon=0.0,
        sigma=1.0,
        alpha=alpha_redlich_kwong,
    ),
    CubicModel.soave_redlich_kwong: ModelParameters(
        model=CubicModel.soave_redlich_kwong,
        Omega=0.08664,
        Psi=0.42748,
        epsilon=0.0,
        sigma=1.0,
        alpha=alpha_soave_redlich_kwong,
    ),
    CubicModel.peng_robinson: ModelParameters(
        model=CubicModel.peng_robinson,
        Omega=0.0777960739,
        Psi=0.457235529,
        epsilon=1.0 - np.sqrt(2.0),
        sigma=1.0 + np.sqrt(2.0),
        alpha=alpha_peng_robinson,
    ),
}
"""The parameters of each supported cubic model."""


def get_model_parameters(model: CubicModel | str) -> ModelParameters:
    """Looks up the parameters of a cubic model.

    Parameters:
        model: A model tag or its name (see :meth:`CubicModel.from_name`).

    Raises:
        EOSConfigurationError: If the model is unknown.

    """
    if isinstance(model, str):
        model = CubicModel.from_name(model)
    try:
        return MODEL_TABLE[model]
    except KeyError as err:
        raise EOSConfigurationError(f"Unsupported cubic model {model}.") from err
