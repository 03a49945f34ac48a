"""Elementary functions acting on the differentiable numbers of
:mod:`cubiceos.ad.forward_mode`.

Each function returns the plain numpy result if called with floats or arrays, and a
differentiable number with exactly propagated derivatives otherwise.

"""

from __future__ import annotations

from typing import Any

import numpy as np

from .forward_mode import ThermoScalar

__all__ = [
    "sqrt",
    "log",
    "exp",
    "power",
    "abs",
    "sign",
]


def sqrt(var: Any) -> Any:
    """Square root with ``d(sqrt u) = du / (2 sqrt u)``."""
    if not isinstance(var, ThermoScalar):
        return np.sqrt(var)

    val = np.sqrt(var._data[..., 0])
    return var.apply_chain_rule(val, 0.5 / val)


def log(var: Any) -> Any:
    """Natural logarithm with ``d(log u) = du / u``."""
    if not isinstance(var, ThermoScalar):
        return np.log(var)

    u = var._data[..., 0]
    return var.apply_chain_rule(np.log(u), 1.0 / u)


def exp(var: Any) -> Any:
    """Exponential function with ``d(exp u) = exp(u) du``."""
    if not isinstance(var, ThermoScalar):
        return np.exp(var)

    val = np.exp(var._data[..., 0])
    return var.apply_chain_rule(val, val)


def power(var: Any, exponent: Any) -> Any:
    """Power function ``var ** exponent``, where either argument can be
    differentiable."""
    return var**exponent


def sign(var: Any) -> Any:
    """Sign of the value(s). The result carries no derivatives."""
    if not isinstance(var, ThermoScalar):
        return np.sign(var)
    return np.sign(var._data[..., 0])


def abs(var: Any) -> Any:
    """Absolute value with ``d|u| = sign(u) du``."""
    if not isinstance(var, ThermoScalar):
        return np.abs(var)

    u = var._data[..., 0]
    return var.apply_chain_rule(np.abs(u), np.sign(u))
