"""Tests the arithmetic of the differentiable thermo and chemical numbers.

The tests cover

1. The calculus rules of every operator, including reflected operators with floats
   and numpy scalars.
2. Promotion of thermo to chemical numbers, and broadcasting of scalars to vectors.
3. Row views of vectors and in-place operations acting on the vector storage.
4. Seeding of temperature, pressure and mole fractions.

"""

from __future__ import annotations

import numpy as np
import pytest

from cubiceos.ad import (
    ChemicalScalar,
    ChemicalVector,
    ThermoScalar,
    ThermoVector,
    init_mole_fractions,
    init_pressure,
    init_temperature,
    lift,
)


@pytest.fixture
def u() -> ThermoScalar:
    return ThermoScalar(2.0, 3.0, 5.0)


@pytest.fixture
def v() -> ThermoScalar:
    return ThermoScalar(7.0, 11.0, 13.0)


def _assert_thermo(var, val, ddt, ddp):
    assert np.isclose(var.val, val, rtol=1e-14)
    assert np.isclose(var.ddt, ddt, rtol=1e-14)
    assert np.isclose(var.ddp, ddp, rtol=1e-14)


def test_constructor_and_accessors(u: ThermoScalar) -> None:
    _assert_thermo(u, 2.0, 3.0, 5.0)
    assert np.all(u.jac == [3.0, 5.0])
    assert float(u) == 2.0

    u.val = 4.0
    u.ddp = -1.0
    _assert_thermo(u, 4.0, 3.0, -1.0)


def test_sum_and_difference(u: ThermoScalar, v: ThermoScalar) -> None:
    _assert_thermo(u + v, 9.0, 14.0, 18.0)
    _assert_thermo(u - v, -5.0, -8.0, -8.0)
    _assert_thermo(u + 1.0, 3.0, 3.0, 5.0)
    _assert_thermo(1.0 + u, 3.0, 3.0, 5.0)
    _assert_thermo(1.0 - u, -1.0, -3.0, -5.0)
    _assert_thermo(-u, -2.0, -3.0, -5.0)
    _assert_thermo(+u, 2.0, 3.0, 5.0)


def test_product_rule(u: ThermoScalar, v: ThermoScalar) -> None:
    # d(uv) = u dv + v du
    _assert_thermo(u * v, 14.0, 2.0 * 11.0 + 7.0 * 3.0, 2.0 * 13.0 + 7.0 * 5.0)
    _assert_thermo(2.0 * u, 4.0, 6.0, 10.0)
    _assert_thermo(u * 2, 4.0, 6.0, 10.0)


def test_quotient_rule(u: ThermoScalar, v: ThermoScalar) -> None:
    # d(u/v) = (du v - u dv) / v^2
    _assert_thermo(
        u / v,
        2.0 / 7.0,
        (3.0 * 7.0 - 2.0 * 11.0) / 49.0,
        (5.0 * 7.0 - 2.0 * 13.0) / 49.0,
    )
    _assert_thermo(1.0 / u, 0.5, -3.0 / 4.0, -5.0 / 4.0)
    _assert_thermo(u / 2.0, 1.0, 1.5, 2.5)


def test_power_rules(u: ThermoScalar, v: ThermoScalar) -> None:
    _assert_thermo(u**3, 8.0, 3.0 * 4.0 * 3.0, 3.0 * 4.0 * 5.0)
    d_sqrt = 0.5 / np.sqrt(2.0)
    _assert_thermo(u**0.5, np.sqrt(2.0), d_sqrt * 3.0, d_sqrt * 5.0)

    # d(u^w) = u^w (w / u du + log(u) dw)
    w = u**v
    val = 2.0**7.0
    _assert_thermo(
        w,
        val,
        val * (7.0 / 2.0 * 3.0 + np.log(2.0) * 11.0),
        val * (7.0 / 2.0 * 5.0 + np.log(2.0) * 13.0),
    )

    # d(c^u) = c^u log(c) du
    _assert_thermo(2.0**u, 4.0, 4.0 * np.log(2.0) * 3.0, 4.0 * np.log(2.0) * 5.0)


def test_numpy_scalars_act_as_constants(u: ThermoScalar) -> None:
    """Numpy scalars on the left-hand side must defer to the reflected operators
    instead of treating the number as an array."""
    for result in [np.float64(2.0) * u, np.float64(2.0) + u, np.float64(4.0) / u]:
        assert type(result) is ThermoScalar

    _assert_thermo(np.float64(4.0) / u, 2.0, -3.0, -5.0)
    _assert_thermo(np.float64(1.0) - u, -1.0, -3.0, -5.0)


def test_comparisons_act_on_values(u: ThermoScalar, v: ThermoScalar) -> None:
    assert u < v
    assert u <= v
    assert v > u
    assert v >= 7.0
    assert u == 2.0
    assert u == ThermoScalar(2.0, -1.0, 0.0)
    assert u != v


def test_unsupported_operands(u: ThermoScalar) -> None:
    with pytest.raises(TypeError):
        u + "1"
    with pytest.raises(TypeError):
        u * [1.0, 2.0]
    with pytest.raises(TypeError):
        u ** "2"
    with pytest.raises(TypeError):
        u ** [1.0, 2.0]
    with pytest.raises(TypeError):
        [1.0] ** u


def test_power_with_chemical_exponent(u: ThermoScalar) -> None:
    w = ChemicalScalar(2, 3.0, 0.0, 0.0, ddn=[1.0, 0.0])
    result = u**w
    assert isinstance(result, ChemicalScalar)
    _assert_thermo(result, 8.0, 3.0 * 4.0 * 3.0, 3.0 * 4.0 * 5.0)
    assert np.allclose(result.ddn, [8.0 * np.log(2.0), 0.0])

    with pytest.raises(ValueError):
        ChemicalScalar(3, 2.0) ** w


def test_promotion_to_chemical(u: ThermoScalar) -> None:
    c = ChemicalScalar(2, 1.0, 0.5, 0.0, ddn=[1.0, 2.0])

    for result in [u + c, c + u, u * c, c / u]:
        assert isinstance(result, ChemicalScalar)
        assert result.nspecies == 2

    prod = u * c
    _assert_thermo(prod, 2.0, 3.0 * 1.0 + 2.0 * 0.5, 5.0)
    # The thermo operand has zero composition derivatives.
    assert np.allclose(prod.ddn, [2.0, 4.0])


def test_species_mismatch_raises() -> None:
    with pytest.raises(ValueError):
        ChemicalScalar(2) + ChemicalScalar(3)
    with pytest.raises(ValueError):
        ChemicalScalar(2, ddn=[1.0, 2.0, 3.0])


def test_copy_is_independent(u: ThermoScalar) -> None:
    w = u.copy()
    w.val = 10.0
    assert u.val == 2.0


def test_chain_rule(u: ThermoScalar) -> None:
    w = u.apply_chain_rule(np.sin(u.val), np.cos(u.val))
    _assert_thermo(w, np.sin(2.0), np.cos(2.0) * 3.0, np.cos(2.0) * 5.0)


def test_vector_arithmetic_and_broadcasting(u: ThermoScalar) -> None:
    vec = ThermoVector.from_arrays([1.0, 2.0, 3.0], ddt=[1.0, 1.0, 1.0])
    assert len(vec) == 3

    prod = vec * u
    assert isinstance(prod, ThermoVector)
    assert np.allclose(prod.val, [2.0, 4.0, 6.0])
    assert np.allclose(prod.ddt, [1.0 * 3.0 + 2.0, 2.0 * 3.0 + 2.0, 3.0 * 3.0 + 2.0])
    assert np.allclose(prod.ddp, [5.0, 10.0, 15.0])

    shifted = vec + np.array([1.0, 1.0, 1.0])
    assert np.allclose(shifted.val, [2.0, 3.0, 4.0])
    assert np.allclose(shifted.ddt, 1.0)

    summed = vec.sum()
    assert isinstance(summed, ThermoScalar) and not isinstance(summed, ThermoVector)
    _assert_thermo(summed, 6.0, 3.0, 0.0)

    with pytest.raises(ValueError):
        vec + ThermoVector(2)
    with pytest.raises(ValueError):
        vec * np.ones(2)


def test_row_views_alias_vector_storage() -> None:
    vec = ChemicalVector(3)
    row = vec[1]
    assert isinstance(row, ChemicalScalar)

    row.assign(ChemicalScalar(3, 5.0, ddt=1.0, ddn=[1.0, 2.0, 3.0]))
    assert vec.val[1] == 5.0
    assert vec.ddt[1] == 1.0
    assert np.all(vec.ddn[1] == [1.0, 2.0, 3.0])

    row += 1.0
    assert vec.val[1] == 6.0

    row *= 2.0
    assert vec.val[1] == 12.0
    assert np.all(vec.ddn[1] == [2.0, 4.0, 6.0])

    vec[0] = 2.0
    vec[2] += ChemicalScalar(3, 1.0, ddn=[0.0, 0.0, 1.0])
    assert np.all(vec.val == [2.0, 12.0, 1.0])
    assert np.all(vec.ddn[2] == [0.0, 0.0, 1.0])
    # Other rows are untouched.
    assert np.all(vec.ddn[0] == 0.0)

    # Thermo numbers are assigned with zero composition derivatives.
    vec[1] = ThermoScalar(3.0, 1.0, 1.0)
    assert np.all(vec.ddn[1] == 0.0)
    assert vec.ddp[1] == 1.0

    with pytest.raises(ValueError):
        ThermoVector(3)[0] = ChemicalScalar(3, 1.0)


def test_slices_and_iteration() -> None:
    vec = ThermoVector.from_arrays([1.0, 2.0, 3.0])
    part = vec[1:]
    assert isinstance(part, ThermoVector)
    part.val = 0.0
    assert np.all(vec.val == [1.0, 0.0, 0.0])

    for i, row in enumerate(vec):
        row += float(i)
    assert np.all(vec.val == [1.0, 1.0, 2.0])


def test_seeding() -> None:
    T = init_temperature(300.0)
    P = init_pressure(1e5)
    _assert_thermo(T, 300.0, 1.0, 0.0)
    _assert_thermo(P, 1e5, 0.0, 1.0)

    Tc = init_temperature(300.0, nspecies=2)
    assert isinstance(Tc, ChemicalScalar)
    assert np.all(Tc.ddn == 0.0)

    n = np.array([1.0, 3.0])
    x = init_mole_fractions(n)
    assert np.allclose(x.val, [0.25, 0.75])
    expected = (np.eye(2) - np.array([[0.25], [0.75]])) / 4.0
    assert np.allclose(x.ddn, expected)
    # The fractions sum up to one for any amounts.
    assert np.allclose(x.sum().ddn, 0.0)

    with pytest.raises(ValueError):
        init_mole_fractions([0.0, 0.0])


def test_lift() -> None:
    c = lift(2.0, 3)
    assert isinstance(c, ChemicalScalar)
    assert c.nspecies == 3 and c.val == 2.0

    t = lift(ThermoScalar(1.0, 2.0, 3.0), 2)
    assert isinstance(t, ChemicalScalar)
    _assert_thermo(t, 1.0, 2.0, 3.0)
    assert np.all(t.ddn == 0.0)

    vec = lift(ThermoVector.from_arrays([1.0, 2.0]), 4)
    assert isinstance(vec, ChemicalVector)
    assert vec.ddn.shape == (2, 4)

    c2 = ChemicalScalar(2, 1.0)
    assert lift(c2, 2) is c2
    with pytest.raises(ValueError):
        lift(c2, 3)
