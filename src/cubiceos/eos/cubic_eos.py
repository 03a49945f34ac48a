"""This module contains the cubic equation of state engine.

The engine is configured once per chemical system (number of species, critical
properties, model, phase) and evaluated for given temperature, pressure and
composition. Each evaluation runs the pipeline

1. pure-component parameters and binary interaction corrections,
2. the van der Waals mixing rule,
3. Newton's method for the compressibility factor,
4. the assembly of residual properties,

and returns a fresh :class:`~cubiceos.eos.properties.Result`.

"""

from __future__ import annotations

import logging
import time
from typing import Any, Optional, Sequence

import numpy as np

import cubiceos as ce

from .._core import NEWTON_MAX_ITERATIONS, NEWTON_TOLERANCE, PhysicalState
from ..ad import (
    ChemicalScalar,
    ChemicalVector,
    ThermoScalar,
    ThermoVector,
    init_mole_fractions,
    init_pressure,
    init_temperature,
    lift,
)
from ..utils import EOSConfigurationError, EOSConvergenceError
from .cubic_polynomial import cubic_coefficients, solve_compressibility_factor
from .interaction import (
    InteractionArgs,
    InteractionCorrection,
    as_interaction_correction,
)
from .mixing import compute_mixture_parameters, compute_pure_parameters
from .models import CubicModel, ModelParameters, get_model_parameters
from .properties import Result, assemble_properties

__all__ = ["CubicEOS", "FRACTION_SUM_TOLERANCE"]


logger = logging.getLogger(__name__)


FRACTION_SUM_TOLERANCE: float = 1e-10
"""Admissible deviation of the sum of mole fractions passed to
:meth:`CubicEOS.evaluate` from 1."""


def _newton_defaults() -> tuple[float, int]:
    """Reads the default Newton tolerance and iteration budget from the ``[newton]``
    section of the configuration file, falling back to the package defaults."""
    section = ce.config.get("newton", {})
    try:
        tol = float(section.get("tolerance", NEWTON_TOLERANCE))
        maxiter = int(section.get("max_iterations", NEWTON_MAX_ITERATIONS))
    except ValueError as err:
        raise EOSConfigurationError(
            f"Invalid entry in section [newton] of the configuration file: {err}"
        ) from err
    return tol, maxiter


class CubicEOS:
    """A cubic equation of state for a phase of a mixture with a fixed number of
    species.

    Critical temperatures and pressures must be set before the first evaluation.
    Acentric factors default to zero.

    Example:
        >>> eos = CubicEOS(1)
        >>> eos.set_critical_temperatures([190.6])
        >>> eos.set_critical_pressures([4.6e6])
        >>> eos.set_acentric_factors([0.008])
        >>> result = eos.evaluate(298.15, 1e6, [1.0])
        >>> lnphi = result.ln_fugacity_coefficients.val

    Parameters:
        nspecies: Number of species in the mixture.
        model: ``default=CubicModel.peng_robinson``

            The cubic model, as tag or by name.
        phase: ``default=PhysicalState.gas``

            The physical state of the phase, deciding on the root of the cubic
            polynomial.
        tolerance: ``default=None``

            Tolerance for the Newton step. If None, the value from the configuration
            file or :data:`~cubiceos._core.NEWTON_TOLERANCE` is used.
        max_iterations: ``default=None``

            Maximal number of Newton iterations. If None, the value from the
            configuration file or :data:`~cubiceos._core.NEWTON_MAX_ITERATIONS` is
            used.
        strict: ``default=False``

            If True, :meth:`evaluate` raises an :class:`~cubiceos.utils.
            EOSConvergenceError` if Newton's method does not converge. Otherwise the
            result is flagged and a warning is logged.

    Raises:
        EOSConfigurationError: If ``nspecies`` is not positive, or the Newton
            parameters are invalid.

    """

    def __init__(
        self,
        nspecies: int,
        model: CubicModel | str = CubicModel.peng_robinson,
        phase: PhysicalState = PhysicalState.gas,
        tolerance: Optional[float] = None,
        max_iterations: Optional[int] = None,
        strict: bool = False,
    ) -> None:
        if int(nspecies) < 1:
            raise EOSConfigurationError(
                f"Expecting at least one species, got {nspecies}."
            )
        self._nspecies: int = int(nspecies)

        self._critical_temperatures: Optional[np.ndarray] = None
        self._critical_pressures: Optional[np.ndarray] = None
        self._acentric_factors: np.ndarray = np.zeros(self._nspecies)

        self._parameters: ModelParameters = get_model_parameters(model)
        self._phase: PhysicalState = PhysicalState.gas
        self.set_phase(phase)
        self._interaction: InteractionCorrection = as_interaction_correction(None)

        tol_default, maxiter_default = _newton_defaults()
        tol = tol_default if tolerance is None else float(tolerance)
        maxiter = maxiter_default if max_iterations is None else int(max_iterations)
        if not tol > 0.0:
            raise EOSConfigurationError(
                f"Expecting a positive Newton tolerance, got {tol}."
            )
        if maxiter < 1:
            raise EOSConfigurationError(
                f"Expecting at least one Newton iteration, got {maxiter}."
            )

        self.tolerance: float = tol
        """Tolerance for the absolute Newton step."""

        self.max_iterations: int = maxiter
        """Maximal number of Newton iterations."""

        self.strict: bool = bool(strict)
        """Flag to raise an error if Newton's method does not converge."""

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(nspecies={self._nspecies},"
            + f" model={self._parameters.model.name}, phase={self._phase.name})"
        )

    @property
    def num_species(self) -> int:
        """Number of species in the mixture."""
        return self._nspecies

    @property
    def model(self) -> CubicModel:
        """The cubic model in use."""
        return self._parameters.model

    @property
    def parameters(self) -> ModelParameters:
        """The constants and alpha function of :attr:`model`."""
        return self._parameters

    @property
    def phase(self) -> PhysicalState:
        """The physical state of the phase."""
        return self._phase

    @property
    def is_vapor(self) -> bool:
        """True if the phase is gas-like."""
        return self._phase == PhysicalState.gas

    @property
    def critical_temperatures(self) -> Optional[np.ndarray]:
        """A copy of the critical temperatures, or None if not set."""
        if self._critical_temperatures is None:
            return None
        return self._critical_temperatures.copy()

    @property
    def critical_pressures(self) -> Optional[np.ndarray]:
        """A copy of the critical pressures, or None if not set."""
        if self._critical_pressures is None:
            return None
        return self._critical_pressures.copy()

    @property
    def acentric_factors(self) -> np.ndarray:
        """A copy of the acentric factors."""
        return self._acentric_factors.copy()

    @property
    def interaction_correction(self) -> InteractionCorrection:
        """The strategy computing the binary interaction parameters."""
        return self._interaction

    def set_model(self, model: CubicModel | str) -> None:
        """Sets the cubic model by tag or name.

        Raises:
            EOSConfigurationError: If the model is unknown.

        """
        self._parameters = get_model_parameters(model)

    def set_phase(self, phase: PhysicalState) -> None:
        """Sets the physical state of the phase.

        Raises:
            EOSConfigurationError: If ``phase`` is not a :class:`PhysicalState`.

        """
        if not isinstance(phase, PhysicalState):
            raise EOSConfigurationError(
                f"Expecting a PhysicalState, got {type(phase).__name__}."
            )
        self._phase = phase

    def set_phase_as_vapor(self) -> None:
        """Sets the phase to be gas-like."""
        self._phase = PhysicalState.gas

    def set_phase_as_liquid(self) -> None:
        """Sets the phase to be liquid-like."""
        self._phase = PhysicalState.liquid

    def _validated(
        self, values: Sequence[float] | np.ndarray, name: str, positive: bool
    ) -> np.ndarray:
        """Converts ``values`` into an array of length :attr:`num_species` and checks
        that all values are finite, and positive if required."""
        arr = np.array(values, dtype=float)
        if arr.ndim != 1 or arr.size != self._nspecies:
            raise EOSConfigurationError(
                f"Cannot set the {name} of the species. Expecting"
                + f" {self._nspecies} values, but {arr.size} were given."
            )
        if not np.all(np.isfinite(arr)):
            raise EOSConfigurationError(
                f"Cannot set the {name} of the species. Expecting finite values, but"
                + f" got {arr.tolist()}."
            )
        if positive and not np.all(arr > 0.0):
            raise EOSConfigurationError(
                f"Cannot set the {name} of the species. Expecting strictly positive"
                + f" values, but got {arr.tolist()}."
            )
        return arr

    def set_critical_temperatures(self, values: Sequence[float] | np.ndarray) -> None:
        """Sets the critical temperatures of the species in ``[K]``.

        Raises:
            EOSConfigurationError: If the number of values does not match the number of
                species, or any value is not finite or not strictly positive.

        """
        self._critical_temperatures = self._validated(
            values, "critical temperatures", True
        )

    def set_critical_pressures(self, values: Sequence[float] | np.ndarray) -> None:
        """Sets the critical pressures of the species in ``[Pa]``.

        Raises:
            EOSConfigurationError: If the number of values does not match the number of
                species, or any value is not finite or not strictly positive.

        """
        self._critical_pressures = self._validated(values, "critical pressures", True)

    def set_acentric_factors(self, values: Sequence[float] | np.ndarray) -> None:
        """Sets the acentric factors of the species.

        Raises:
            EOSConfigurationError: If the number of values does not match the number of
                species, or any value is not finite.

        """
        self._acentric_factors = self._validated(values, "acentric factors", False)

    def set_interaction_correction(self, correction: Any) -> None:
        """Sets the binary interaction correction.

        Parameters:
            correction: None to remove the correction, an
                :class:`~cubiceos.eos.interaction.InteractionCorrection`, a square
                matrix of constant BIPs, or a callable (see
                :func:`~cubiceos.eos.interaction.as_interaction_correction`).

        """
        self._interaction = as_interaction_correction(correction)

    def copy(self) -> CubicEOS:
        """Returns an independent engine with the same configuration."""
        other = CubicEOS(
            self._nspecies,
            model=self._parameters.model,
            phase=self._phase,
            tolerance=self.tolerance,
            max_iterations=self.max_iterations,
            strict=self.strict,
        )
        if self._critical_temperatures is not None:
            other._critical_temperatures = self._critical_temperatures.copy()
        if self._critical_pressures is not None:
            other._critical_pressures = self._critical_pressures.copy()
        other._acentric_factors = self._acentric_factors.copy()
        other._interaction = self._interaction
        return other

    def _as_state_variable(self, value: Any, name: str, init: Any) -> ChemicalScalar:
        """Converts temperature or pressure into a chemical scalar.

        Floats are seeded as independent variables using ``init``.

        """
        if isinstance(value, ThermoVector):
            raise EOSConfigurationError(f"Expecting a scalar {name}, got a vector.")
        if isinstance(value, ThermoScalar):
            try:
                var = lift(value, self._nspecies)
            except ValueError as err:
                raise EOSConfigurationError(f"Invalid {name}: {err}") from err
        else:
            var = init(float(value), self._nspecies)
        if not var.val > 0.0:
            raise EOSConfigurationError(
                f"Expecting a positive {name}, got {var.val}."
            )
        return var

    def _as_fractions(self, x: Any) -> ChemicalVector:
        """Converts the composition into a chemical vector of mole fractions.

        Differentiable vectors are taken as mole fractions, which must sum up to one.
        Plain sequences are taken as species amounts and normalized, the fractions
        being differentiated with respect to the amounts.

        """
        if isinstance(x, ThermoVector):
            if len(x) != self._nspecies:
                raise EOSConfigurationError(
                    f"Expecting {self._nspecies} mole fractions, but {len(x)} were"
                    + " given."
                )
            try:
                fractions = lift(x, self._nspecies)
            except ValueError as err:
                raise EOSConfigurationError(f"Invalid mole fractions: {err}") from err
            total = float(fractions.val.sum())
            if not abs(total - 1.0) <= FRACTION_SUM_TOLERANCE:
                raise EOSConfigurationError(
                    "Expecting mole fractions summing up to 1, but their sum is"
                    + f" {total}."
                )
            return fractions

        amounts = np.asarray(x, dtype=float)
        if amounts.ndim != 1 or amounts.size != self._nspecies:
            raise EOSConfigurationError(
                f"Expecting {self._nspecies} species amounts, but {amounts.size} were"
                + " given."
            )
        if not (np.all(np.isfinite(amounts)) and np.all(amounts >= 0.0)) or not (
            amounts.sum() > 0.0
        ):
            raise EOSConfigurationError(
                "Expecting finite, non-negative species amounts with a positive total,"
                + f" but got {amounts.tolist()}."
            )
        return init_mole_fractions(amounts)

    def evaluate(self, T: Any, P: Any, x: Any) -> Result:
        """Evaluates the equation of state.

        Parameters:
            T: Temperature in ``[K]``. A float is seeded as independent variable,
                i.e. with unit temperature derivative. Thermo and chemical scalars are
                taken as they are.
            P: Pressure in ``[Pa]``, treated analogously to ``T``.
            x: ``len=num_species``

                The composition. Either a chemical vector of mole fractions (see
                :func:`~cubiceos.ad.forward_mode.init_mole_fractions`) whose
                composition derivatives are propagated, or a plain sequence of species
                amounts. Amounts are normalized to mole fractions with derivatives
                with respect to the amounts. Fractions must sum up to 1 within
                :data:`FRACTION_SUM_TOLERANCE`.

        Raises:
            EOSConfigurationError: If critical properties are not set, arguments
                have wrong sizes, mole fractions do not sum up to 1, or amounts are
                negative.
            EOSConvergenceError: If the engine is :attr:`strict` and Newton's method
                did not converge.

        Returns:
            The thermodynamic properties of the phase.

        """
        if self._critical_temperatures is None or self._critical_pressures is None:
            raise EOSConfigurationError(
                "Critical temperatures and pressures must be set before evaluation."
            )
        start = time.time()

        T_ = self._as_state_variable(T, "temperature", init_temperature)
        P_ = self._as_state_variable(P, "pressure", init_pressure)
        x_ = self._as_fractions(x)

        params = self._parameters
        pure = compute_pure_parameters(
            params,
            T_,
            self._critical_temperatures,
            self._critical_pressures,
            self._acentric_factors,
        )
        interaction = self._interaction(
            InteractionArgs(T=T_, a=pure.a, aT=pure.aT, aTT=pure.aTT, b=pure.b)
        )
        mixture = compute_mixture_parameters(pure, x_, interaction)
        coefficients = cubic_coefficients(
            T_, P_, mixture, params.epsilon, params.sigma
        )

        Z0 = 1.0 if self.is_vapor else coefficients.beta.val
        Z, iterations, converged = solve_compressibility_factor(
            coefficients, Z0, self.tolerance, self.max_iterations
        )
        if not converged:
            msg = (
                "Newton's method for the compressibility factor did not converge"
                + f" after {iterations} iterations (T = {T_.val}, P = {P_.val},"
                + f" model = {params.model.name}, phase = {self._phase.name})."
            )
            if self.strict:
                raise EOSConvergenceError(msg)
            logger.warning(msg)

        result = assemble_properties(
            T_,
            P_,
            Z,
            coefficients,
            mixture,
            params.epsilon,
            params.sigma,
            converged=converged,
            iterations=iterations,
        )
        logger.debug(
            f"{params.model.name} EoS evaluated for {self._nspecies} species"
            + " (elapsed time: %.5f (s))." % (time.time() - start)
        )
        return result

    def __call__(self, T: Any, P: Any, x: Any) -> Result:
        """Alias for :meth:`evaluate`."""
        return self.evaluate(T, P, x)
