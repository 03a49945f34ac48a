"""Binary interaction corrections for the van der Waals mixing rule.

The cohesion of a pair of species is corrected by the binary interaction parameter
(BIP) :math:`k_{ij}`,

.. math::

    a_{ij} = (1 - k_{ij}) \\sqrt{a_i a_j}.

A correction is a strategy which computes the matrices :math:`k, \\frac{dk}{dT},
\\frac{d^2k}{dT^2}` for the current temperature and pure-component parameters.
The absence of a correction is represented by :class:`IdentityCorrection`
(:math:`k \\equiv 0`).

"""

from __future__ import annotations

import abc
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence

import numpy as np

from ..ad import ChemicalVector, ThermoScalar
from ..utils import EOSConfigurationError

__all__ = [
    "InteractionArgs",
    "InteractionMatrices",
    "InteractionCorrection",
    "IdentityCorrection",
    "ConstantCorrection",
    "LinearCorrection",
    "CallableCorrection",
    "as_interaction_correction",
]


def _values_of(mat: Any) -> np.ndarray:
    """Values of the entries of a square matrix of floats or differentiable numbers."""
    return np.array(
        [
            [entry.val if isinstance(entry, ThermoScalar) else entry for entry in row]
            for row in mat
        ],
        dtype=float,
    )


def _check_symmetric(values: np.ndarray, name: str) -> None:
    """Raises an error if the BIP matrix is not symmetric.

    The partial molar cohesions of the mixing rule are the derivatives of the cohesion
    of the mixture only for :math:`k_{ij} = k_{ji}`.

    """
    if not np.allclose(values, values.T, rtol=1e-12, atol=1e-14):
        raise EOSConfigurationError(
            f"Expecting a symmetric interaction matrix {name}, but got"
            + f" {values.tolist()}."
        )


@dataclass(frozen=True)
class InteractionArgs:
    """Arguments passed to an interaction correction."""

    T: Any
    """Temperature."""

    a: ChemicalVector
    """Cohesion parameters of the pure species."""

    aT: ChemicalVector
    """First temperature derivatives of :attr:`a`."""

    aTT: ChemicalVector
    """Second temperature derivatives of :attr:`a`."""

    b: np.ndarray
    """Covolume parameters of the pure species (temperature independent)."""

    @property
    def nspecies(self) -> int:
        """Number of species."""
        return len(self.b)


@dataclass(frozen=True)
class InteractionMatrices:
    """The binary interaction parameters and their temperature derivatives.

    Each matrix is indexable as ``k[i][j]``, with entries being floats or
    differentiable numbers.

    """

    k: Any
    """Binary interaction parameters."""

    kT: Any
    """First temperature derivatives of :attr:`k`."""

    kTT: Any
    """Second temperature derivatives of :attr:`k`."""

    def validate(self, nspecies: int) -> None:
        """Asserts that all matrices have shape ``(nspecies, nspecies)``
        and are symmetric.

        Raises:
            EOSConfigurationError: If a matrix has the wrong shape or is not
                symmetric.

        """
        for name, mat in (("k", self.k), ("kT", self.kT), ("kTT", self.kTT)):
            nrows = len(mat)
            if nrows != nspecies or any(len(row) != nspecies for row in mat):
                ncols = [len(row) for row in mat]
                raise EOSConfigurationError(
                    f"Expecting interaction matrix {name} of shape"
                    + f" ({nspecies}, {nspecies}), but got {nrows} rows with lengths"
                    + f" {ncols}."
                )
            _check_symmetric(_values_of(mat), name)


class InteractionCorrection(abc.ABC):
    """Abstract strategy computing the binary interaction parameters."""

    @abc.abstractmethod
    def __call__(self, args: InteractionArgs) -> InteractionMatrices:
        """Computes the interaction matrices for the given arguments."""
        ...


class IdentityCorrection(InteractionCorrection):
    """No correction, :math:`k_{ij} = 0` for all pairs."""

    def __call__(self, args: InteractionArgs) -> InteractionMatrices:
        zero = np.zeros((args.nspecies, args.nspecies))
        return InteractionMatrices(zero, zero, zero)


class ConstantCorrection(InteractionCorrection):
    """Temperature-independent binary interaction parameters.

    Parameters:
        k: A square 2D array containing the BIPs. The row/column order corresponds to
            the order of species.

    Raises:
        EOSConfigurationError: If ``k`` is not a symmetric 2D array.

    """

    def __init__(self, k: np.ndarray | Sequence[Sequence[float]]) -> None:
        k = np.array(k, dtype=float)
        if k.ndim != 2 or k.shape[0] != k.shape[1]:
            raise EOSConfigurationError(
                f"Expecting a square matrix of BIPs, got shape {k.shape}."
            )
        _check_symmetric(k, "k")
        self.k: np.ndarray = k
        """The BIP matrix passed at instantiation."""

    def __call__(self, args: InteractionArgs) -> InteractionMatrices:
        zero = np.zeros_like(self.k)
        matrices = InteractionMatrices(self.k, zero, zero)
        matrices.validate(args.nspecies)
        return matrices


class LinearCorrection(InteractionCorrection):
    """Binary interaction parameters depending linearly on temperature,

    .. math::

        k_{ij}(T) = k^0_{ij} + k^1_{ij} \\left(\\frac{T}{T_{ref}} - 1\\right).

    Parameters:
        k0: BIPs at the reference temperature.
        k1: Slopes of the BIPs with respect to the relative temperature.
        T_ref: ``default=298.15``

            Reference temperature in ``[K]``.

    Raises:
        EOSConfigurationError: If ``k0`` and ``k1`` are not symmetric square matrices
            of equal shape, or ``T_ref`` is not positive.

    """

    def __init__(
        self,
        k0: np.ndarray | Sequence[Sequence[float]],
        k1: np.ndarray | Sequence[Sequence[float]],
        T_ref: float = 298.15,
    ) -> None:
        k0 = np.array(k0, dtype=float)
        k1 = np.array(k1, dtype=float)
        if k0.shape != k1.shape or k0.ndim != 2 or k0.shape[0] != k0.shape[1]:
            raise EOSConfigurationError(
                "Expecting square BIP matrices of equal shape, got"
                + f" {k0.shape} and {k1.shape}."
            )
        if not T_ref > 0.0:
            raise EOSConfigurationError(
                f"Expecting a positive reference temperature, got {T_ref}."
            )
        _check_symmetric(k0, "k0")
        _check_symmetric(k1, "k1")
        self.k0: np.ndarray = k0
        self.k1: np.ndarray = k1
        self.T_ref: float = T_ref

    def __call__(self, args: InteractionArgs) -> InteractionMatrices:
        n = self.k0.shape[0]
        tau = args.T / self.T_ref - 1.0
        k = [[self.k0[i, j] + self.k1[i, j] * tau for j in range(n)] for i in range(n)]
        matrices = InteractionMatrices(k, self.k1 / self.T_ref, np.zeros((n, n)))
        matrices.validate(args.nspecies)
        return matrices


class CallableCorrection(InteractionCorrection):
    """Wraps a user-provided function as an interaction correction.

    Parameters:
        func: A callable taking :class:`InteractionArgs` and returning either
            :class:`InteractionMatrices`, a 3-tuple ``(k, kT, kTT)``, or None to signal
            that no correction applies.

    """

    def __init__(
        self, func: Callable[[InteractionArgs], Optional[InteractionMatrices | tuple]]
    ) -> None:
        self.func = func

    def __call__(self, args: InteractionArgs) -> InteractionMatrices:
        result = self.func(args)
        if result is None:
            return IdentityCorrection()(args)
        if not isinstance(result, InteractionMatrices):
            try:
                k, kT, kTT = result
            except (TypeError, ValueError) as err:
                raise EOSConfigurationError(
                    "Interaction correction must return InteractionMatrices, a tuple"
                    + f" (k, kT, kTT) or None, got {type(result).__name__}."
                ) from err
            result = InteractionMatrices(k, kT, kTT)
        result.validate(args.nspecies)
        return result


def as_interaction_correction(obj: Any) -> InteractionCorrection:
    """Converts ``obj`` into an interaction correction strategy.

    - None becomes :class:`IdentityCorrection`,
    - an :class:`InteractionCorrection` is returned as is,
    - an array (or nested sequence) becomes :class:`ConstantCorrection`,
    - any other callable becomes :class:`CallableCorrection`.

    Raises:
        TypeError: If ``obj`` is neither of the above.

    """
    if obj is None:
        return IdentityCorrection()
    if isinstance(obj, InteractionCorrection):
        return obj
    if isinstance(obj, (np.ndarray, list, tuple)):
        return ConstantCorrection(obj)
    if callable(obj):
        return CallableCorrection(obj)
    raise TypeError(
        f"Cannot interpret object of type {type(obj).__name__} as interaction"
        + " correction."
    )
