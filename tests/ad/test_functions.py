"""Tests the elementary functions acting on differentiable numbers."""

from __future__ import annotations

import numpy as np
import pytest

from cubiceos.ad import (
    ChemicalVector,
    ThermoScalar,
    init_pressure,
    init_temperature,
)
from cubiceos.ad import functions as af
from cubiceos.test_utils.derivative_testing import central_difference


@pytest.mark.parametrize(
    "func, val, deriv",
    [
        (af.sqrt, np.sqrt(4.0), 0.5 / np.sqrt(4.0)),
        (af.log, np.log(4.0), 1.0 / 4.0),
        (af.exp, np.exp(4.0), np.exp(4.0)),
        (af.abs, 4.0, 1.0),
    ],
)
def test_elementary_functions(func, val, deriv) -> None:
    var = ThermoScalar(4.0, 3.0, -2.0)
    result = func(var)
    assert type(result) is ThermoScalar
    assert np.isclose(result.val, val)
    assert np.isclose(result.ddt, deriv * 3.0)
    assert np.isclose(result.ddp, deriv * -2.0)


def test_abs_of_negative_value() -> None:
    result = af.abs(ThermoScalar(-2.0, 3.0, 1.0))
    assert result.val == 2.0
    assert result.ddt == -3.0
    assert result.ddp == -1.0


def test_functions_on_floats_and_arrays() -> None:
    assert af.sqrt(4.0) == 2.0
    assert af.log(1.0) == 0.0
    assert af.exp(0.0) == 1.0
    assert af.abs(-1.0) == 1.0
    assert af.sign(-3.0) == -1.0
    assert np.allclose(af.sqrt(np.array([1.0, 9.0])), [1.0, 3.0])


def test_functions_on_vectors() -> None:
    vec = ChemicalVector.from_arrays([1.0, np.e], ddt=[1.0, 2.0], nspecies=2)
    result = af.log(vec)
    assert isinstance(result, ChemicalVector)
    assert np.allclose(result.val, [0.0, 1.0])
    assert np.allclose(result.ddt, [1.0, 2.0 / np.e])
    assert np.all(af.sign(vec) == [1.0, 1.0])


def test_power_with_differentiable_exponent() -> None:
    T = init_temperature(2.0)
    P = init_pressure(3.0)
    result = af.power(T, P)
    assert np.isclose(result.val, 8.0)
    assert np.isclose(result.ddt, 3.0 * 4.0)
    assert np.isclose(result.ddp, 8.0 * np.log(2.0))


def _composite(T, P):
    """A nested expression of all operators and functions, evaluable for floats and
    differentiable numbers."""
    return (
        af.exp(T / P) * af.sqrt(T * P)
        - af.log(T + P) ** 2
        + af.power(T, 1.5) / (1.0 + P)
        - 2.0 / af.abs(T - 3.0 * P)
    )


@pytest.mark.parametrize("T, P", [(1.3, 0.7), (0.4, 2.5), (2.0, 1.5)])
def test_composite_expression_against_finite_differences(T: float, P: float) -> None:
    result = _composite(init_temperature(T), init_pressure(P))
    x0 = np.array([T, P])

    assert np.isclose(result.val, _composite(T, P), rtol=1e-14)
    assert np.isclose(result.ddt, central_difference(_composite, x0, 0), rtol=1e-7)
    assert np.isclose(result.ddp, central_difference(_composite, x0, 1), rtol=1e-7)
