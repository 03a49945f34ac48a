"""Forward-mode differentiation for thermodynamic quantities.

All quantities store their value and their derivatives in one contiguous array,
the last axis being ordered as

.. code-block:: text

    [val, ddt, ddp, ddn_0, ..., ddn_{n-1}]

where ``ddt`` and ``ddp`` are the partial derivatives with respect to temperature and
pressure, and ``ddn_i`` the partial derivatives with respect to the amount of species
``i``. The derivative part (everything but ``val``) is referred to as ``jac``.

- :class:`ThermoScalar` and :class:`ThermoVector` carry derivatives with respect to
  temperature and pressure only.
- :class:`ChemicalScalar` and :class:`ChemicalVector` additionally carry the
  derivatives with respect to the species amounts.

Binary operations between thermo and chemical numbers promote to chemical numbers
(the thermo operand having zero ``ddn``), and operations between scalars and vectors
broadcast to vectors.

Indexing a vector returns a view of a row, which is a scalar aliasing the storage of
the vector. In-place operations on the view (:meth:`~ThermoScalar.assign`, ``+=``,
``-=``, ``*=``, ``/=``) hence modify the vector.

"""

from __future__ import annotations

from typing import Any, Iterator, Optional, Sequence

import numpy as np

__all__ = [
    "ThermoScalar",
    "ThermoVector",
    "ChemicalScalar",
    "ChemicalVector",
    "init_temperature",
    "init_pressure",
    "init_mole_fractions",
    "lift",
]


_THERMO_WIDTH: int = 3
"""Width of the storage of a thermo number: value, temperature and pressure
derivative."""


def _mul(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Product rule on storage arrays: ``d(uv) = u dv + v du``."""
    out = np.empty(np.broadcast_shapes(a.shape, b.shape))
    out[..., 0] = a[..., 0] * b[..., 0]
    out[..., 1:] = a[..., :1] * b[..., 1:] + b[..., :1] * a[..., 1:]
    return out


def _div(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Quotient rule on storage arrays: ``d(u/v) = (du v - u dv) / v^2``."""
    out = np.empty(np.broadcast_shapes(a.shape, b.shape))
    v = b[..., :1]
    out[..., 0] = a[..., 0] / b[..., 0]
    out[..., 1:] = (a[..., 1:] * v - a[..., :1] * b[..., 1:]) / v**2
    return out


def _pow(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Power rule on storage arrays with a differentiable exponent:
    ``d(u^w) = w u^(w-1) du + u^w log(u) dw``."""
    out = np.empty(np.broadcast_shapes(a.shape, b.shape))
    u = a[..., :1]
    w = b[..., :1]
    val = u**w
    out[..., :1] = val
    out[..., 1:] = w * u ** (w - 1) * a[..., 1:]
    # Constant exponents do not require the logarithm, which would fail for u <= 0.
    if np.any(b[..., 1:] != 0.0):
        out[..., 1:] += val * np.log(u) * b[..., 1:]
    return out


def _pad(data: np.ndarray, width: int) -> np.ndarray:
    """Extends the storage of a thermo number with zero composition derivatives."""
    out = np.zeros(data.shape[:-1] + (width,))
    out[..., : data.shape[-1]] = data
    return out


class ThermoScalar:
    """A scalar thermodynamic quantity with its partial derivatives with respect to
    temperature and pressure.

    Arithmetic operations and the functions in :mod:`cubiceos.ad.functions` compute
    the derivatives of the result using the exact rules of calculus.

    Comparisons are performed on the values only.

    Parameters:
        val: ``default=0.``

            The value of the quantity.
        ddt: ``default=0.``

            The partial derivative with respect to temperature.
        ddp: ``default=0.``

            The partial derivative with respect to pressure.

    """

    _chemical: bool = False
    _vector: bool = False

    # Make numpy arrays and scalars defer to the reflected operators of this class.
    __array_ufunc__ = None

    def __init__(self, val: float = 0.0, ddt: float = 0.0, ddp: float = 0.0) -> None:
        self._data: np.ndarray = np.array([val, ddt, ddp], dtype=float)

    @classmethod
    def _from_data(cls, data: np.ndarray) -> Any:
        """Creates an instance using ``data`` as storage, without copying it."""
        obj = cls.__new__(cls)
        obj._data = data
        return obj

    def __repr__(self) -> str:
        return f"{type(self).__name__}(val={self.val}, ddt={self.ddt}, ddp={self.ddp})"

    # -- access ------------------------------------------------------------------------

    @property
    def val(self) -> Any:
        """The value of the quantity."""
        return float(self._data[0])

    @val.setter
    def val(self, value: Any) -> None:
        self._data[..., 0] = value

    @property
    def ddt(self) -> Any:
        """The partial derivative with respect to temperature."""
        return float(self._data[1])

    @ddt.setter
    def ddt(self, value: Any) -> None:
        self._data[..., 1] = value

    @property
    def ddp(self) -> Any:
        """The partial derivative with respect to pressure."""
        return float(self._data[2])

    @ddp.setter
    def ddp(self, value: Any) -> None:
        self._data[..., 2] = value

    @property
    def jac(self) -> np.ndarray:
        """A view of all partial derivatives, ordered as ``[ddt, ddp, ddn...]``."""
        return self._data[..., 1:]

    def copy(self) -> Any:
        """Returns a deep copy, not sharing any storage with this instance."""
        return type(self)._from_data(self._data.copy())

    def apply_chain_rule(self, value: Any, derivative: Any) -> Any:
        """Returns a new instance with given value and the derivatives of this
        instance multiplied by ``derivative``.

        I.e., for a function ``f`` of this quantity ``u``, it returns ``f(u)``
        with ``d f(u) = f'(u) du``.

        Parameters:
            value: The value ``f(u)``.
            derivative: The value ``f'(u)``.

        """
        out = np.empty_like(self._data)
        out[..., 0] = value
        out[..., 1:] = np.asarray(derivative)[..., None] * self._data[..., 1:]
        return type(self)._from_data(out)

    # -- coercion ----------------------------------------------------------------------

    def _coerce(self, other: Any) -> Optional[tuple[np.ndarray, np.ndarray, type]]:
        """Brings the storage of ``self`` and ``other`` to a common width and returns
        both arrays and the class of the result.

        Returns None if ``other`` is not supported as operand.

        """
        a = self._data
        if isinstance(other, ThermoScalar):
            b = other._data
            chemical = self._chemical or other._chemical
            vector = self._vector or other._vector
            wa, wb = a.shape[-1], b.shape[-1]
            if wa != wb:
                if wa == _THERMO_WIDTH:
                    a = _pad(a, wb)
                elif wb == _THERMO_WIDTH:
                    b = _pad(b, wa)
                else:
                    raise ValueError(
                        "Mismatch in number of species between operands: "
                        + f"{wa - _THERMO_WIDTH} and {wb - _THERMO_WIDTH}."
                    )
            if self._vector and other._vector and a.shape[0] != b.shape[0]:
                raise ValueError(
                    f"Mismatch in number of rows between operands: {a.shape[0]} and"
                    + f" {b.shape[0]}."
                )
        else:
            if not isinstance(other, (int, float, np.number, np.ndarray)):
                return None
            value = np.asarray(other, dtype=float)
            chemical = self._chemical
            if value.ndim == 0:
                vector = self._vector
                b = np.zeros(a.shape[-1])
                b[0] = value
            elif value.ndim == 1:
                vector = True
                if self._vector and value.shape[0] != a.shape[0]:
                    raise ValueError(
                        f"Mismatch in number of rows between operands: {a.shape[0]}"
                        + f" and {value.shape[0]}."
                    )
                b = np.zeros((value.shape[0], a.shape[-1]))
                b[:, 0] = value
            else:
                return None
        return a, b, _CLASSES[(vector, chemical)]

    # -- arithmetic --------------------------------------------------------------------

    def __add__(self, other: Any) -> Any:
        coerced = self._coerce(other)
        if coerced is None:
            return NotImplemented
        a, b, cls = coerced
        return cls._from_data(a + b)

    def __radd__(self, other: Any) -> Any:
        return self.__add__(other)

    def __sub__(self, other: Any) -> Any:
        coerced = self._coerce(other)
        if coerced is None:
            return NotImplemented
        a, b, cls = coerced
        return cls._from_data(a - b)

    def __rsub__(self, other: Any) -> Any:
        coerced = self._coerce(other)
        if coerced is None:
            return NotImplemented
        a, b, cls = coerced
        return cls._from_data(b - a)

    def __mul__(self, other: Any) -> Any:
        coerced = self._coerce(other)
        if coerced is None:
            return NotImplemented
        a, b, cls = coerced
        return cls._from_data(_mul(a, b))

    def __rmul__(self, other: Any) -> Any:
        return self.__mul__(other)

    def __truediv__(self, other: Any) -> Any:
        coerced = self._coerce(other)
        if coerced is None:
            return NotImplemented
        a, b, cls = coerced
        return cls._from_data(_div(a, b))

    def __rtruediv__(self, other: Any) -> Any:
        coerced = self._coerce(other)
        if coerced is None:
            return NotImplemented
        a, b, cls = coerced
        return cls._from_data(_div(b, a))

    def __pow__(self, other: Any) -> Any:
        if not isinstance(other, ThermoScalar):
            if not isinstance(other, (int, float, np.number)):
                return NotImplemented
            u = self._data[..., 0]
            return self.apply_chain_rule(u**other, other * u ** (other - 1))
        # Differentiable exponents are always coercible.
        a, b, cls = self._coerce(other)  # type: ignore[misc]
        return cls._from_data(_pow(a, b))

    def __rpow__(self, other: Any) -> Any:
        if not isinstance(other, (int, float, np.number)):
            return NotImplemented
        val = other ** self._data[..., 0]
        return self.apply_chain_rule(val, val * np.log(other))

    def __neg__(self) -> Any:
        return type(self)._from_data(-self._data)

    def __pos__(self) -> Any:
        return self.copy()

    # -- in-place operations -----------------------------------------------------------

    def assign(self, other: Any) -> Any:
        """Overwrites the value and derivatives of this instance with those of
        ``other``, in place.

        This acts on the storage of a vector, if this instance is a row view.

        Raises:
            ValueError: If ``other`` carries composition derivatives which this
                instance cannot store, or if the number of species differs.

        """
        if isinstance(other, ThermoScalar):
            data = other._data
            width = self._data.shape[-1]
            if data.shape[-1] != width:
                if data.shape[-1] == _THERMO_WIDTH:
                    data = _pad(data, width)
                else:
                    raise ValueError(
                        f"Cannot assign a {type(other).__name__} with"
                        + f" {data.shape[-1] - _THERMO_WIDTH} species derivatives to a"
                        + f" {type(self).__name__} with {width - _THERMO_WIDTH}."
                    )
            self._data[...] = data
        else:
            self._data[...] = 0.0
            self._data[..., 0] = other
        return self

    def _inplace(self, result: Any) -> Any:
        # Store the result in place if it fits, otherwise the name is rebound.
        if result is NotImplemented:
            return result
        if type(result) is type(self) and result._data.shape == self._data.shape:
            self._data[...] = result._data
            return self
        return result

    def __iadd__(self, other: Any) -> Any:
        return self._inplace(self.__add__(other))

    def __isub__(self, other: Any) -> Any:
        return self._inplace(self.__sub__(other))

    def __imul__(self, other: Any) -> Any:
        return self._inplace(self.__mul__(other))

    def __itruediv__(self, other: Any) -> Any:
        return self._inplace(self.__truediv__(other))

    # -- comparison on values ----------------------------------------------------------

    def _value_of(self, other: Any) -> Any:
        if isinstance(other, ThermoScalar):
            return other._data[..., 0]
        return other

    def __eq__(self, other: Any) -> Any:  # type: ignore[override]
        return self._data[..., 0] == self._value_of(other)

    def __ne__(self, other: Any) -> Any:  # type: ignore[override]
        return self._data[..., 0] != self._value_of(other)

    def __lt__(self, other: Any) -> Any:
        return self._data[..., 0] < self._value_of(other)

    def __le__(self, other: Any) -> Any:
        return self._data[..., 0] <= self._value_of(other)

    def __gt__(self, other: Any) -> Any:
        return self._data[..., 0] > self._value_of(other)

    def __ge__(self, other: Any) -> Any:
        return self._data[..., 0] >= self._value_of(other)

    __hash__ = None  # type: ignore[assignment]

    def __float__(self) -> float:
        return float(self._data[0])


class ChemicalScalar(ThermoScalar):
    """A scalar thermodynamic quantity with its partial derivatives with respect to
    temperature, pressure and the amounts of species.

    Parameters:
        nspecies: Number of species, i.e. size of the composition derivative ``ddn``.
        val: ``default=0.``

            The value of the quantity.
        ddt: ``default=0.``

            The partial derivative with respect to temperature.
        ddp: ``default=0.``

            The partial derivative with respect to pressure.
        ddn: ``default=None``

            The partial derivatives with respect to the species amounts.
            Zero if not given.

    Raises:
        ValueError: If ``ddn`` is given and not of size ``nspecies``.

    """

    _chemical = True

    def __init__(
        self,
        nspecies: int,
        val: float = 0.0,
        ddt: float = 0.0,
        ddp: float = 0.0,
        ddn: Optional[Sequence[float] | np.ndarray] = None,
    ) -> None:
        data = np.zeros(_THERMO_WIDTH + nspecies)
        data[:_THERMO_WIDTH] = (val, ddt, ddp)
        if ddn is not None:
            ddn = np.asarray(ddn, dtype=float)
            if ddn.shape != (nspecies,):
                raise ValueError(
                    f"Expecting {nspecies} composition derivatives, but"
                    + f" {ddn.size} were given."
                )
            data[_THERMO_WIDTH:] = ddn
        self._data = data

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(val={self.val}, ddt={self.ddt}, ddp={self.ddp},"
            + f" ddn={self.ddn})"
        )

    @property
    def nspecies(self) -> int:
        """Number of species with respect to which derivatives are stored."""
        return self._data.shape[-1] - _THERMO_WIDTH

    @property
    def ddn(self) -> np.ndarray:
        """A view of the partial derivatives with respect to the species amounts."""
        return self._data[..., _THERMO_WIDTH:]

    @ddn.setter
    def ddn(self, value: Any) -> None:
        self._data[..., _THERMO_WIDTH:] = value


class ThermoVector(ThermoScalar):
    """A vector of thermodynamic quantities (e.g. per species or reaction), with
    partial derivatives of each entry with respect to temperature and pressure.

    Indexing and :meth:`row` return views of rows, which are scalars sharing the
    storage of the vector.

    Parameters:
        nrows: Number of entries.

    """

    _vector = True

    def __init__(self, nrows: int) -> None:
        self._data = np.zeros((nrows, _THERMO_WIDTH))

    @classmethod
    def from_arrays(
        cls, val: np.ndarray | Sequence[float], ddt=None, ddp=None
    ) -> ThermoVector:
        """Creates a vector from arrays of values and derivatives.

        Derivatives which are not given are zero.

        """
        val = np.asarray(val, dtype=float)
        vec = cls(val.size)
        vec.val = val
        if ddt is not None:
            vec.ddt = ddt
        if ddp is not None:
            vec.ddp = ddp
        return vec

    def __repr__(self) -> str:
        return f"{type(self).__name__}(val={self.val})"

    @property
    def val(self) -> np.ndarray:
        """A view of the values of all entries."""
        return self._data[:, 0]

    @val.setter
    def val(self, value: Any) -> None:
        self._data[:, 0] = value

    @property
    def ddt(self) -> np.ndarray:
        """A view of the temperature derivatives of all entries."""
        return self._data[:, 1]

    @ddt.setter
    def ddt(self, value: Any) -> None:
        self._data[:, 1] = value

    @property
    def ddp(self) -> np.ndarray:
        """A view of the pressure derivatives of all entries."""
        return self._data[:, 2]

    @ddp.setter
    def ddp(self, value: Any) -> None:
        self._data[:, 2] = value

    @property
    def nrows(self) -> int:
        """Number of entries."""
        return self._data.shape[0]

    def __len__(self) -> int:
        return self._data.shape[0]

    def __iter__(self) -> Iterator[Any]:
        for i in range(self._data.shape[0]):
            yield self.row(i)

    def row(self, i: int) -> Any:
        """Returns a view of the ``i``-th entry.

        The returned scalar shares the storage of this vector.

        """
        return _CLASSES[(False, self._chemical)]._from_data(self._data[i])

    def __getitem__(self, key: int | slice) -> Any:
        if isinstance(key, slice):
            return type(self)._from_data(self._data[key])
        return self.row(key)

    def __setitem__(self, key: int | slice, value: Any) -> None:
        self[key].assign(value)

    def sum(self) -> Any:
        """Returns the sum of all entries as a scalar."""
        return _CLASSES[(False, self._chemical)]._from_data(self._data.sum(axis=0))

    def __float__(self) -> float:
        raise TypeError("Only scalars can be converted to float.")


class ChemicalVector(ThermoVector):
    """A vector of thermodynamic quantities with partial derivatives of each entry
    with respect to temperature, pressure and the amounts of species.

    Each row carries the full gradient with respect to the species amounts, i.e.
    :attr:`ddn` is a 2D array with shape ``(nrows, nspecies)``.

    Parameters:
        nrows: Number of entries.
        nspecies: ``default=None``

            Number of species. Equal to ``nrows`` if not given.

    """

    _chemical = True

    def __init__(self, nrows: int, nspecies: Optional[int] = None) -> None:
        if nspecies is None:
            nspecies = nrows
        self._data = np.zeros((nrows, _THERMO_WIDTH + nspecies))

    @classmethod
    def from_arrays(  # type: ignore[override]
        cls,
        val: np.ndarray | Sequence[float],
        ddt=None,
        ddp=None,
        ddn=None,
        nspecies: Optional[int] = None,
    ) -> ChemicalVector:
        """Creates a vector from arrays of values and derivatives.

        Derivatives which are not given are zero. The number of species is deduced
        from ``ddn``, if not given explicitly.

        """
        val = np.asarray(val, dtype=float)
        if nspecies is None:
            nspecies = val.size if ddn is None else np.asarray(ddn).shape[1]
        vec = cls(val.size, nspecies)
        vec.val = val
        if ddt is not None:
            vec.ddt = ddt
        if ddp is not None:
            vec.ddp = ddp
        if ddn is not None:
            vec.ddn = ddn
        return vec

    @property
    def nspecies(self) -> int:
        """Number of species with respect to which derivatives are stored."""
        return self._data.shape[-1] - _THERMO_WIDTH

    @property
    def ddn(self) -> np.ndarray:
        """A view of the composition derivatives, with row-wise gradients."""
        return self._data[:, _THERMO_WIDTH:]

    @ddn.setter
    def ddn(self, value: Any) -> None:
        self._data[:, _THERMO_WIDTH:] = value


_CLASSES: dict[tuple[bool, bool], type] = {
    (False, False): ThermoScalar,
    (False, True): ChemicalScalar,
    (True, False): ThermoVector,
    (True, True): ChemicalVector,
}
"""Result classes of operations, keyed by ``(is_vector, is_chemical)``."""


def init_temperature(T: float, nspecies: int = 0) -> ThermoScalar:
    """Returns the temperature as an independent variable, i.e. with unit temperature
    derivative.

    Parameters:
        T: Temperature value.
        nspecies: ``default=0``

            If positive, a :class:`ChemicalScalar` with zero composition derivatives
            is returned.

    """
    if nspecies > 0:
        return ChemicalScalar(nspecies, T, ddt=1.0)
    return ThermoScalar(T, ddt=1.0)


def init_pressure(P: float, nspecies: int = 0) -> ThermoScalar:
    """Returns the pressure as an independent variable, i.e. with unit pressure
    derivative (see :func:`init_temperature`)."""
    if nspecies > 0:
        return ChemicalScalar(nspecies, P, ddp=1.0)
    return ThermoScalar(P, ddp=1.0)


def init_mole_fractions(n: np.ndarray | Sequence[float]) -> ChemicalVector:
    """Returns the mole fractions ``x_i = n_i / sum_j n_j`` with their derivatives
    with respect to the species amounts ``n``.

    It holds ``dx_i / dn_j = (delta_ij - x_i) / sum_k n_k``.

    Parameters:
        n: Amounts of species.

    Raises:
        ValueError: If the amounts are not a non-empty 1D array with positive sum.

    """
    n = np.asarray(n, dtype=float)
    if n.ndim != 1 or n.size == 0:
        raise ValueError("Expecting a non-empty 1D array of species amounts.")
    ntot = n.sum()
    if not ntot > 0.0:
        raise ValueError(f"Expecting a positive total amount, got {ntot}.")
    x = n / ntot
    ddn = (np.eye(n.size) - x[:, np.newaxis]) / ntot
    return ChemicalVector.from_arrays(x, ddn=ddn)


def lift(number: Any, nspecies: int) -> Any:
    """Converts a number into a chemical number with ``nspecies`` composition
    derivatives.

    Floats become constant :class:`ChemicalScalar`, thermo numbers get zero composition
    derivatives. Chemical numbers are returned as they are.

    Raises:
        ValueError: If ``number`` is a chemical number with a different number of
            species.

    """
    if isinstance(number, ThermoScalar):
        if number._chemical:
            if number.nspecies != nspecies:  # type: ignore[attr-defined]
                raise ValueError(
                    f"Expecting {nspecies} species, but the number has"
                    + f" {number.nspecies}."  # type: ignore[attr-defined]
                )
            return number
        cls = _CLASSES[(number._vector, True)]
        return cls._from_data(_pad(number._data, _THERMO_WIDTH + nspecies))
    return ChemicalScalar(nspecies, float(number))
