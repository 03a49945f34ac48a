"""Module containing functionality for testing the derivatives computed by forward
mode differentiation against finite differences and Taylor expansions."""

from __future__ import annotations

import logging
from typing import Any, Callable

import numpy as np

from ..ad import init_mole_fractions, init_pressure, init_temperature

__all__ = [
    "central_difference",
    "property_functions",
    "get_EOC_taylor",
    "assert_order_at_least",
]


logger = logging.getLogger(__name__)


def central_difference(
    func: Callable[..., np.ndarray | float],
    x0: np.ndarray,
    index: int,
    rel_step: float = 1e-6,
) -> np.ndarray:
    """Approximates the partial derivative of ``func`` with respect to its
    ``index``-th argument by a centered difference quotient.

    Parameters:
        func: A function taking ``len(x0)`` floats as arguments.
        x0: Point at which the derivative is approximated.
        index: Index of the argument to perturb.
        rel_step: ``default=1e-6``

            Step size relative to the absolute value of the perturbed argument.

    Returns:
        The difference quotient, with the shape of the output of ``func``.

    """
    x0 = np.asarray(x0, dtype=float)
    h = rel_step * max(abs(x0[index]), 1.0)
    xp = x0.copy()
    xm = x0.copy()
    xp[index] += h
    xm[index] -= h
    return (np.asarray(func(*xp)) - np.asarray(func(*xm))) / (2.0 * h)


def property_functions(
    eos: Any, getter: Callable[[Any], Any]
) -> tuple[Callable[..., np.ndarray], Callable[..., np.ndarray]]:
    """Wraps a property of the result of an equation of state into a pair of
    functions of plain floats, suitable for :func:`central_difference` and
    :func:`get_EOC_taylor`.

    Both functions take temperature, pressure and the amounts of species
    ``(T, P, n_0, ..., n_{k-1})`` as arguments. The composition is passed as mole
    fractions with derivatives with respect to the amounts.

    Parameters:
        eos: An equation of state with an ``evaluate(T, P, x)`` method.
        getter: Extracts a differentiable number from the result.

    Returns:
        A function returning the values of the property (``shape=(m,)``), and a
        function returning its derivatives (``shape=(m, 2 + k)``).

    """

    def _evaluate(T: float, P: float, *n: float) -> Any:
        nspecies = len(n)
        return getter(
            eos.evaluate(
                init_temperature(T, nspecies),
                init_pressure(P, nspecies),
                init_mole_fractions(np.array(n)),
            )
        )

    def func(T: float, P: float, *n: float) -> np.ndarray:
        return np.atleast_1d(_evaluate(T, P, *n).val)

    def dfunc(T: float, P: float, *n: float) -> np.ndarray:
        return np.atleast_2d(_evaluate(T, P, *n).jac)

    return func, dfunc


def get_EOC_taylor(
    func: Callable[..., np.ndarray | float],
    dfunc: Callable[..., np.ndarray],
    x0: np.ndarray,
    d: np.ndarray,
    h: np.ndarray,
    tol: float = 1e-14,
) -> np.ndarray:
    """Estimate the order of convergence (EOC) of the first-order Taylor expansion of
    ``func`` at point ``x0`` along direction ``d``.

    If ``dfunc`` is the exact derivative, the error of the expansion decreases
    quadratically with the step size.

    Parameters:
        func: Function of ``len(x0)`` floats.
        dfunc: Function returning the derivatives of ``func`` as a 2D array with shape
            ``(m, len(x0))``.
        x0: Point of expansion.
        d: Direction of the expansion. It is normalized internally.
        h: Decreasing step sizes.
        tol: Tolerance below which errors are considered zero.

    Returns:
        Estimated EOC values for each consecutive pair of step sizes. An infinite
        value indicates an exact approximation.

    """
    d = d / np.linalg.norm(d)

    errorlist = []
    for h_ in h:
        approx = func(*x0) + h_ * (dfunc(*x0) @ d)
        exact = func(*(x0 + h_ * d))
        error = float(np.linalg.norm(exact - approx))
        # Ratios of errors close to machine precision indicate falsely a loss of order.
        if error < tol:
            error = 0.0
        errorlist.append(error)

    errors = np.array(errorlist)
    h_ratios = h[1:] / h[:-1]

    error_ratios = np.full_like(errors[1:], np.nan)
    mask = errors[:-1] > tol
    error_ratios[mask] = errors[1:][mask] / errors[:-1][mask]

    orders = np.full_like(error_ratios, np.inf)
    finite_mask = np.isfinite(error_ratios) & (error_ratios > tol)
    orders[finite_mask] = np.log(error_ratios[finite_mask]) / np.log(
        h_ratios[finite_mask]
    )

    logger.debug(f"Taylor errors {errors} for steps {h}, estimated orders {orders}")
    return orders


def assert_order_at_least(
    orders: np.ndarray,
    expected_order: float,
    tol: float = 0.1,
    err_msg: str = "",
    asymptotic: int | None = None,
) -> None:
    """Asserts that the average of the estimated orders is at least the expected order
    minus a tolerance.

    Infinite orders are treated as exact approximations and count as the expected
    order.

    Parameters:
        orders: Estimated orders, see :func:`get_EOC_taylor`.
        expected_order: The expected (average) order.
        tol: Tolerance for the expected order.
        err_msg: Appended to the messages of raised errors.
        asymptotic: If an integer ``n`` is given, only the last ``n`` orders are
            checked. For expansions whose error decreases only asymptotically.

    Raises:
        ValueError: If any order is negative or nan.

    """
    orders = np.array(orders, dtype=float)
    if isinstance(asymptotic, int):
        orders = orders[-asymptotic:]

    if np.any(orders < 0):
        raise ValueError(f"Negative orders, derivative is wrong: {err_msg}")
    if np.any(np.isnan(orders)):
        raise ValueError(f"Estimated orders contain NAN values: {err_msg}")

    if not np.all(np.isinf(orders)):
        orders[np.isinf(orders)] = expected_order
        order_avg = np.mean(orders)
        assert order_avg >= expected_order - tol, (
            f"Expected the average order to be at least {expected_order - tol}, "
            f"but got {order_avg}: {err_msg}"
        )
