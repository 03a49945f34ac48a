"""Pure-component parameters and the van der Waals mixing rule for cubic equations of
state.

The mixture parameters are

.. math::

    a_{mix} = \\sum_i \\sum_j x_i x_j a_{ij},~
    b_{mix} = \\sum_i x_i b_i,

and the partial molar parameters

.. math::

    \\bar{a}_i = 2 \\sum_j x_j a_{ij} - a_{mix},~
    \\bar{b}_i = b_i,

such that the Euler relation :math:`\\sum_i x_i \\bar{a}_i = a_{mix}` holds for
fractions summing up to 1.

Note:
    The covolume is assumed to be temperature independent and linearly mixed. Hence
    :math:`\\bar{b}_i` has no cross term in the composition, and all temperature
    derivatives of :math:`b_{mix}` vanish. This is a modelling choice of this EoS
    family.

"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np

from .._core import R_IDEAL_MOL
from ..ad import ChemicalScalar, ChemicalVector, lift
from ..ad import functions as af
from ..utils import safe_sum
from .interaction import InteractionMatrices
from .models import ModelParameters

__all__ = [
    "PureParameters",
    "MixtureParameters",
    "compute_pure_parameters",
    "compute_mixture_parameters",
    "euler_residual",
]


@dataclass
class PureParameters:
    """Cohesion and covolume parameters of each species as a pure component."""

    a: ChemicalVector
    """Cohesion parameters :math:`a_i`."""

    aT: ChemicalVector
    """First temperature derivatives of :attr:`a`."""

    aTT: ChemicalVector
    """Second temperature derivatives of :attr:`a`."""

    b: np.ndarray
    """Covolume parameters :math:`b_i`."""


@dataclass
class MixtureParameters:
    """Cohesion and covolume of a mixture, including partial molar parameters."""

    amix: ChemicalScalar
    """Cohesion of the mixture."""

    amixT: ChemicalScalar
    """First temperature derivative of :attr:`amix`."""

    amixTT: ChemicalScalar
    """Second temperature derivative of :attr:`amix`."""

    abar: ChemicalVector
    """Partial molar cohesion per species."""

    abarT: ChemicalVector
    """First temperature derivative of :attr:`abar`."""

    bmix: ChemicalScalar
    """Covolume of the mixture."""

    bbar: np.ndarray
    """Partial molar covolume per species, equal to the pure covolumes."""


def compute_pure_parameters(
    model: ModelParameters,
    T: ChemicalScalar,
    critical_temperatures: np.ndarray,
    critical_pressures: np.ndarray,
    acentric_factors: np.ndarray,
) -> PureParameters:
    """Computes the pure-component parameters

    .. math::

        a_i = \\Psi \\frac{R^2 T_{c,i}^2}{P_{c,i}} \\alpha(T_{r,i}, \\omega_i),~
        b_i = \\Omega \\frac{R T_{c,i}}{P_{c,i}}.

    Parameters:
        model: Parameters of the cubic model.
        T: Temperature.
        critical_temperatures: ``shape=(nspecies,)``
        critical_pressures: ``shape=(nspecies,)``
        acentric_factors: ``shape=(nspecies,)``

    Returns:
        The cohesion with its first and second temperature derivatives, and the
        covolume, per species.

    """
    nspecies = T.nspecies
    a = ChemicalVector(len(critical_temperatures), nspecies)
    aT = ChemicalVector(len(critical_temperatures), nspecies)
    aTT = ChemicalVector(len(critical_temperatures), nspecies)

    for i, (Tc, Pc, omega) in enumerate(
        zip(critical_temperatures, critical_pressures, acentric_factors)
    ):
        factor = model.Psi * R_IDEAL_MOL**2 * Tc**2 / Pc
        alpha, alphaT, alphaTT = model.temperature_alpha(T, Tc, omega)
        a[i] = lift(factor * alpha, nspecies)
        aT[i] = lift(factor * alphaT, nspecies)
        aTT[i] = lift(factor * alphaTT, nspecies)

    b = model.Omega * R_IDEAL_MOL * critical_temperatures / critical_pressures

    return PureParameters(a=a, aT=aT, aTT=aTT, b=b)


def compute_mixture_parameters(
    pure: PureParameters, x: ChemicalVector, interaction: InteractionMatrices
) -> MixtureParameters:
    """Applies the van der Waals mixing rule with binary interaction parameters.

    The binary cohesion and its temperature derivatives are

    .. math::

        a_{ij} = r_{ij} s_{ij},~ r_{ij} = 1 - k_{ij},~ s_{ij} = \\sqrt{a_i a_j},

        \\frac{da_{ij}}{dT} = r'_{ij} s_{ij} + r_{ij} s'_{ij},

        \\frac{d^2a_{ij}}{dT^2} = r''_{ij} s_{ij} + 2 r'_{ij} s'_{ij}
        + r_{ij} s''_{ij}.

    Parameters:
        pure: Parameters of the pure species.
        x: ``len=nspecies``

            Mole fractions of the species.
        interaction: Binary interaction parameters and their temperature
            derivatives.

    Returns:
        Mixture and partial molar parameters, differentiated with respect to
        temperature, pressure and species amounts.

    """
    a, aT, aTT = pure.a, pure.aT, pure.aTT
    nrows = len(x)
    nspecies = x.nspecies
    k, kT, kTT = interaction.k, interaction.kT, interaction.kTT

    amix = ChemicalScalar(nspecies)
    amixT = ChemicalScalar(nspecies)
    amixTT = ChemicalScalar(nspecies)
    abar = ChemicalVector(nrows, nspecies)
    abarT = ChemicalVector(nrows, nspecies)

    for i in range(nrows):
        for j in range(nrows):
            r = 1.0 - k[i][j]
            rT = -kT[i][j]
            rTT = -kTT[i][j]

            aiaj = a[i] * a[j]
            s = af.sqrt(aiaj)
            sT = 0.5 * s / aiaj * (aT[i] * a[j] + a[i] * aT[j])
            sTT = (
                0.5 * s / aiaj * (aTT[i] * a[j] + 2.0 * aT[i] * aT[j] + a[i] * aTT[j])
                - sT * sT / s
            )

            aij = r * s
            aijT = rT * s + r * sT
            aijTT = rTT * s + 2.0 * rT * sT + r * sTT

            xixj = x[i] * x[j]
            amix += xixj * aij
            amixT += xixj * aijT
            amixTT += xixj * aijTT

            abar[i] += 2.0 * x[j] * aij
            abarT[i] += 2.0 * x[j] * aijT

    for i in range(nrows):
        abar[i] -= amix
        abarT[i] -= amixT

    bbar = np.array(pure.b, dtype=float)
    bmix = lift(safe_sum([x[i] * bbar[i] for i in range(nrows)]), nspecies)

    return MixtureParameters(
        amix=amix,
        amixT=amixT,
        amixTT=amixTT,
        abar=abar,
        abarT=abarT,
        bmix=bmix,
        bbar=bbar,
    )


def euler_residual(mixture: MixtureParameters, x: ChemicalVector) -> Any:
    """Returns :math:`\\sum_i x_i \\bar{a}_i - a_{mix}`, which must vanish for
    normalized fractions."""
    return (x * mixture.abar).sum() - mixture.amix
