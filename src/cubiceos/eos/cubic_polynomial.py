"""Module for computing the compressibility factor as a root of the generic cubic
equation of state.

In terms of the dimensionless covolume :math:`\\beta = \\frac{P b}{RT}` and
:math:`q = \\frac{a}{b R T}`, the compressibility factor :math:`Z` solves

.. math::

    Z^3 + A Z^2 + B Z + C = 0,

with

.. math::

    A = (\\epsilon + \\sigma - 1) \\beta - 1,

    B = (\\epsilon \\sigma - \\epsilon - \\sigma) \\beta^2
    - (\\epsilon + \\sigma - q) \\beta,

    C = -\\epsilon \\sigma \\beta^3 - (\\epsilon \\sigma + q) \\beta^2.

The root is found by Newton's method on the values of the coefficients only. Its
derivatives are obtained afterwards by implicit differentiation of the polynomial,

.. math::

    dZ = - \\frac{dA Z^2 + dB Z + dC}{3 Z^2 + 2 A Z + B},

for each direction (temperature, pressure, species amounts) at once.

"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numba as nb
import numpy as np

from .._core import NUMBA_CACHE, NUMBA_FAST_MATH, R_IDEAL_MOL
from ..ad import ChemicalScalar
from .mixing import MixtureParameters

__all__ = [
    "CubicCoefficients",
    "cubic_coefficients",
    "polynomial_residual",
    "newton_root",
    "root_derivatives",
    "solve_compressibility_factor",
]


logger = logging.getLogger(__name__)


_COMPILE_KWARGS = dict(fastmath=NUMBA_FAST_MATH, cache=NUMBA_CACHE)
"""Keyword arguments for compiling functions in this module."""


_COMPILER = nb.njit
"""Decorator for compiling functions in this module."""


@dataclass
class CubicCoefficients:
    """Dimensionless quantities and coefficients of the cubic polynomial, including
    their temperature derivatives required for thermal properties."""

    beta: ChemicalScalar
    """Dimensionless covolume :math:`\\beta`."""

    betaT: ChemicalScalar
    """Temperature derivative of :attr:`beta`."""

    q: ChemicalScalar
    """Dimensionless cohesion :math:`q`."""

    qT: ChemicalScalar
    """Temperature derivative of :attr:`q`."""

    qTT: ChemicalScalar
    """Second temperature derivative of :attr:`q`."""

    A: ChemicalScalar
    """Coefficient of :math:`Z^2`."""

    B: ChemicalScalar
    """Coefficient of :math:`Z`."""

    C: ChemicalScalar
    """Constant coefficient."""

    AT: ChemicalScalar
    """Temperature derivative of :attr:`A`."""

    BT: ChemicalScalar
    """Temperature derivative of :attr:`B`."""

    CT: ChemicalScalar
    """Temperature derivative of :attr:`C`."""


def cubic_coefficients(
    T: ChemicalScalar,
    P: ChemicalScalar,
    mixture: MixtureParameters,
    epsilon: float,
    sigma: float,
) -> CubicCoefficients:
    """Assembles the coefficients of the cubic polynomial and their temperature
    derivatives.

    Parameters:
        T: Temperature.
        P: Pressure.
        mixture: Cohesion and covolume of the mixture.
        epsilon: Model constant :math:`\\epsilon`.
        sigma: Model constant :math:`\\sigma`.

    """
    R = R_IDEAL_MOL
    amix, amixT, amixTT = mixture.amix, mixture.amixT, mixture.amixTT
    bmix = mixture.bmix

    beta = P * bmix / (R * T)
    # The covolume is temperature independent.
    betaT = -beta / T

    q = amix / (bmix * R * T)
    qT = q * (amixT / amix - 1.0 / T)
    qTT = qT * qT / q + q * (
        1.0 / (T * T) + amixTT / amix - amixT * amixT / (amix * amix)
    )

    es = epsilon * sigma
    A = (epsilon + sigma - 1.0) * beta - 1.0
    B = (es - epsilon - sigma) * beta * beta - (epsilon + sigma - q) * beta
    C = -es * beta * beta * beta - (es + q) * beta * beta

    AT = (epsilon + sigma - 1.0) * betaT
    BT = (
        2.0 * (es - epsilon - sigma) * beta * betaT
        + qT * beta
        - (epsilon + sigma - q) * betaT
    )
    CT = (
        -3.0 * es * beta * beta * betaT
        - qT * beta * beta
        - 2.0 * (es + q) * beta * betaT
    )

    return CubicCoefficients(
        beta=beta,
        betaT=betaT,
        q=q,
        qT=qT,
        qTT=qTT,
        A=A,
        B=B,
        C=C,
        AT=AT,
        BT=BT,
        CT=CT,
    )


@_COMPILER(nb.f8(nb.f8, nb.f8, nb.f8, nb.f8), **_COMPILE_KWARGS)
def polynomial_residual(Z: float, A: float, B: float, C: float) -> float:
    """Evaluates :math:`Z^3 + A Z^2 + B Z + C`."""
    return ((Z + A) * Z + B) * Z + C


@_COMPILER(
    nb.types.Tuple((nb.f8, nb.i8, nb.boolean))(
        nb.f8, nb.f8, nb.f8, nb.f8, nb.f8, nb.i8
    ),
    **_COMPILE_KWARGS,
)
def newton_root(
    A: float, B: float, C: float, Z0: float, tol: float, maxiter: int
) -> tuple[float, int, bool]:
    """Newton's method for a root of :math:`Z^3 + A Z^2 + B Z + C`.

    Parameters:
        A: Coefficient of :math:`Z^2`.
        B: Coefficient of :math:`Z`.
        C: Constant coefficient.
        Z0: Initial guess.
        tol: Tolerance for the absolute value of the Newton step.
        maxiter: Maximal number of iterations.

    Returns:
        The last iterate, the number of performed iterations, and a flag whether the
        step fell below ``tol``.

        If the derivative of the polynomial vanishes at an iterate, the iteration
        stops without convergence.

    """
    Z = Z0
    for k in range(1, maxiter + 1):
        f = ((Z + A) * Z + B) * Z + C
        df = (3.0 * Z + 2.0 * A) * Z + B
        if df == 0.0:
            return Z, k, False
        step = f / df
        Z = Z - step
        if np.abs(step) < tol:
            return Z, k, True
    return Z, maxiter, False


@_COMPILER(
    nb.f8[:](nb.f8, nb.f8, nb.f8, nb.f8[:], nb.f8[:], nb.f8[:]),
    **_COMPILE_KWARGS,
)
def root_derivatives(
    Z: float, A: float, B: float, dA: np.ndarray, dB: np.ndarray, dC: np.ndarray
) -> np.ndarray:
    """Implicit differentiation of a root :math:`Z` of the cubic polynomial.

    Parameters:
        Z: A root of the polynomial.
        A: Coefficient of :math:`Z^2`.
        B: Coefficient of :math:`Z`.
        dA: Derivatives of :math:`A` in an arbitrary number of directions.
        dB: Derivatives of :math:`B` in the same directions.
        dC: Derivatives of :math:`C` in the same directions.

    Returns:
        The derivatives of :math:`Z` in the given directions.

    """
    factor = -1.0 / ((3.0 * Z + 2.0 * A) * Z + B)
    return factor * ((dA * Z + dB) * Z + dC)


def solve_compressibility_factor(
    coefficients: CubicCoefficients, Z0: float, tol: float, maxiter: int
) -> tuple[ChemicalScalar, int, bool]:
    """Computes the compressibility factor and its derivatives.

    Parameters:
        coefficients: Coefficients of the cubic polynomial.
        Z0: Initial guess, which decides on the root found.
        tol: Tolerance for the Newton step.
        maxiter: Maximal number of Newton iterations.

    Returns:
        The compressibility factor with derivatives, the number of Newton iterations,
        and the convergence flag.

    """
    A, B, C = coefficients.A, coefficients.B, coefficients.C
    Z_val, iterations, converged = newton_root(
        A.val, B.val, C.val, float(Z0), float(tol), int(maxiter)
    )
    logger.debug(
        f"Newton for compressibility factor: Z = {Z_val}, {iterations} iterations,"
        + f" converged = {converged}"
    )

    Z = ChemicalScalar(A.nspecies, Z_val)
    Z.jac[:] = root_derivatives(
        Z_val,
        A.val,
        B.val,
        np.ascontiguousarray(A.jac),
        np.ascontiguousarray(B.jac),
        np.ascontiguousarray(C.jac),
    )
    return Z, iterations, converged
