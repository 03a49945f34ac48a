"""Assembly of the residual thermodynamic properties of a phase described by a cubic
equation of state.

Given the compressibility factor :math:`Z` and the coefficients of the cubic
polynomial, the integration factor

.. math::

    I = \\frac{1}{\\sigma - \\epsilon}
    \\ln\\left(\\frac{Z + \\sigma\\beta}{Z + \\epsilon\\beta}\\right)
    ~\\text{if}~\\sigma \\neq \\epsilon,~
    I = \\frac{\\beta}{Z + \\epsilon\\beta}~\\text{otherwise},

enters all residual properties. Partial molar quantities :math:`X_i` are obtained by
applying :math:`\\frac{\\partial (n X)}{\\partial n_i}` to each term, using the
partial molar cohesion and covolume of the mixing rule.

"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .._core import R_IDEAL_MOL
from ..ad import ChemicalScalar, ChemicalVector
from ..ad import functions as af
from .cubic_polynomial import CubicCoefficients
from .mixing import MixtureParameters

__all__ = [
    "Result",
    "integration_factor",
    "integration_factor_variation",
    "assemble_properties",
]


@dataclass
class Result:
    """Thermodynamic properties of a phase computed by a cubic equation of state.

    All properties carry their derivatives with respect to temperature, pressure and
    the amounts of species.

    """

    compressibility_factor: ChemicalScalar
    """Compressibility factor :math:`Z` of the phase."""

    molar_volume: ChemicalScalar
    """Molar volume :math:`V` in ``[m^3 / mol]``."""

    residual_molar_gibbs_energy: ChemicalScalar
    """Residual molar Gibbs energy in ``[J / mol]``."""

    residual_molar_enthalpy: ChemicalScalar
    """Residual molar enthalpy in ``[J / mol]``."""

    residual_molar_heat_capacity_cp: ChemicalScalar
    """Residual molar isobaric heat capacity in ``[J / mol / K]``."""

    residual_molar_heat_capacity_cv: ChemicalScalar
    """Residual molar isochoric heat capacity in ``[J / mol / K]``."""

    partial_molar_volumes: ChemicalVector
    """Partial molar volumes of the species in ``[m^3 / mol]``."""

    residual_partial_molar_gibbs_energies: ChemicalVector
    """Residual partial molar Gibbs energies of the species in ``[J / mol]``."""

    residual_partial_molar_enthalpies: ChemicalVector
    """Residual partial molar enthalpies of the species in ``[J / mol]``."""

    ln_fugacity_coefficients: ChemicalVector
    """Natural logarithms of the fugacity coefficients of the species."""

    converged: bool = True
    """Whether Newton's method for :attr:`compressibility_factor` converged."""

    iterations: int = 0
    """Number of Newton iterations performed."""


def _integration_factor_log(Z: Any, beta: Any, epsilon: float, sigma: float) -> Any:
    return af.log((Z + sigma * beta) / (Z + epsilon * beta)) / (sigma - epsilon)


def _integration_factor_closed(Z: Any, beta: Any, epsilon: float) -> Any:
    return beta / (Z + epsilon * beta)


def _variation_log(
    Z: Any, beta: Any, dZ: Any, dbeta: Any, epsilon: float, sigma: float
) -> Any:
    return (
        (dZ + sigma * dbeta) / (Z + sigma * beta)
        - (dZ + epsilon * dbeta) / (Z + epsilon * beta)
    ) / (sigma - epsilon)


def _variation_closed(
    I: Any, Z: Any, beta: Any, dZ: Any, dbeta: Any, epsilon: float
) -> Any:
    return I * (dbeta / beta - (dZ + epsilon * dbeta) / (Z + epsilon * beta))


def integration_factor(Z: Any, beta: Any, epsilon: float, sigma: float) -> Any:
    """Computes the integration factor :math:`I` of the residual properties.

    The logarithmic form is used only if ``sigma != epsilon``. For
    ``sigma == epsilon`` (e.g. van der Waals), the closed form
    :math:`\\frac{\\beta}{Z + \\epsilon\\beta}` applies.

    """
    if sigma == epsilon:
        return _integration_factor_closed(Z, beta, epsilon)
    return _integration_factor_log(Z, beta, epsilon, sigma)


def integration_factor_variation(
    I: Any, Z: Any, beta: Any, dZ: Any, dbeta: Any, epsilon: float, sigma: float
) -> Any:
    """Computes the variation of :math:`I` for variations ``dZ`` and ``dbeta`` of
    :math:`Z` and :math:`\\beta`.

    With the temperature derivatives as variations, this is the temperature
    derivative of :math:`I`. With the partial molar quantities :math:`Z_i,\\beta_i`,
    it is the difference :math:`I_i - I`.

    Parameters:
        I: The integration factor at ``Z`` and ``beta``.
        Z: Compressibility factor.
        beta: Dimensionless covolume.
        dZ: Variation of the compressibility factor.
        dbeta: Variation of the dimensionless covolume.
        epsilon: Model constant :math:`\\epsilon`.
        sigma: Model constant :math:`\\sigma`.

    """
    if sigma == epsilon:
        return _variation_closed(I, Z, beta, dZ, dbeta, epsilon)
    return _variation_log(Z, beta, dZ, dbeta, epsilon, sigma)


def assemble_properties(
    T: ChemicalScalar,
    P: ChemicalScalar,
    Z: ChemicalScalar,
    coefficients: CubicCoefficients,
    mixture: MixtureParameters,
    epsilon: float,
    sigma: float,
    converged: bool = True,
    iterations: int = 0,
) -> Result:
    """Computes all properties of the phase from its compressibility factor.

    Parameters:
        T: Temperature.
        P: Pressure.
        Z: Compressibility factor with derivatives.
        coefficients: Coefficients of the cubic polynomial at ``T, P``.
        mixture: Mixture and partial molar parameters.
        epsilon: Model constant :math:`\\epsilon`.
        sigma: Model constant :math:`\\sigma`.
        converged: Convergence flag of the root finding, stored in the result.
        iterations: Number of iterations of the root finding, stored in the result.

    Returns:
        A freshly allocated result.

    """
    R = R_IDEAL_MOL
    RT = R * T
    es = epsilon * sigma

    beta, betaT = coefficients.beta, coefficients.betaT
    q, qT, qTT = coefficients.q, coefficients.qT, coefficients.qTT
    A, B, C = coefficients.A, coefficients.B, coefficients.C

    dfdZ = 3.0 * Z * Z + 2.0 * A * Z + B

    # Temperature derivative of Z at constant pressure and composition.
    ZT = -(coefficients.AT * Z * Z + coefficients.BT * Z + coefficients.CT) / dfdZ

    # Pressure derivative of Z at constant temperature and composition.
    betaP = beta / P
    AP = (epsilon + sigma - 1.0) * betaP
    BP = 2.0 * (es - epsilon - sigma) * beta * betaP - (epsilon + sigma - q) * betaP
    CP = -3.0 * es * beta * beta * betaP - 2.0 * (es + q) * beta * betaP
    ZP = -(AP * Z * Z + BP * Z + CP) / dfdZ

    I = integration_factor(Z, beta, epsilon, sigma)
    IT = integration_factor_variation(I, Z, beta, ZT, betaT, epsilon, sigma)

    log_Z_beta = af.log(Z - beta)

    V = Z * RT / P
    G_res = RT * (Z - 1.0 - log_Z_beta - q * I)
    H_res = RT * (Z - 1.0 + T * qT * I)
    Cp_res = RT * (ZT + qT * I + T * qTT * I + T * qT * IT) + H_res / T

    dVdT = V * (1.0 / T + ZT / Z)
    dPdT = P * (1.0 / T + ZT / Z) / (1.0 - P * ZP / Z)
    Cv_res = Cp_res - T * dPdT * dVdT + R

    nrows = len(mixture.abar)
    nspecies = Z.nspecies
    Vi_vec = ChemicalVector(nrows, nspecies)
    Gi_vec = ChemicalVector(nrows, nspecies)
    Hi_vec = ChemicalVector(nrows, nspecies)
    ln_phi = ChemicalVector(nrows, nspecies)

    amix, amixT, bmix = mixture.amix, mixture.amixT, mixture.bmix

    for i in range(nrows):
        abar_i = mixture.abar[i]
        abarT_i = mixture.abarT[i]
        bbar_i = mixture.bbar[i]

        beta_i = P * bbar_i / RT
        q_i = q * (1.0 + abar_i / amix - bbar_i / bmix)
        qT_i = q_i * qT / q + q * (abarT_i - abar_i * amixT / amix) / amix

        A_i = (epsilon + sigma - 1.0) * beta_i - 1.0
        B_i = (
            (es - epsilon - sigma) * (2.0 * beta * beta_i - beta * beta)
            - (epsilon + sigma - q) * (beta_i - beta)
            - (epsilon + sigma - q_i) * beta
        )
        C_i = (
            -3.0 * es * beta * beta * beta_i
            + 2.0 * es * beta * beta * beta
            - (es + q_i) * beta * beta
            - 2.0 * (es + q) * (beta * beta_i - beta * beta)
        )

        Z_i = -(A_i * Z * Z + (B_i + B) * Z + C_i + 2.0 * C) / dfdZ
        I_i = I + integration_factor_variation(
            I, Z, beta, Z_i, beta_i, epsilon, sigma
        )

        G_i = RT * (
            Z_i
            - (Z_i - beta_i) / (Z - beta)
            - log_Z_beta
            - q_i * I
            - q * I_i
            + q * I
        )
        H_i = RT * (Z_i - 1.0 + T * (qT_i * I + qT * I_i - qT * I))

        Vi_vec[i] = RT * Z_i / P
        Gi_vec[i] = G_i
        Hi_vec[i] = H_i
        ln_phi[i] = G_i / RT

    return Result(
        compressibility_factor=Z.copy(),
        molar_volume=V,
        residual_molar_gibbs_energy=G_res,
        residual_molar_enthalpy=H_res,
        residual_molar_heat_capacity_cp=Cp_res,
        residual_molar_heat_capacity_cv=Cv_res,
        partial_molar_volumes=Vi_vec,
        residual_partial_molar_gibbs_energies=Gi_vec,
        residual_partial_molar_enthalpies=Hi_vec,
        ln_fugacity_coefficients=ln_phi,
        converged=bool(converged),
        iterations=int(iterations),
    )
