"""Contains utility functions and the custom exception classes of the package."""

from __future__ import annotations

from typing import Sequence, TypeVar, cast

__all__ = [
    "safe_sum",
    "EOSConfigurationError",
    "EOSConvergenceError",
]


_Addable = TypeVar("_Addable")
"""A type variable representing any type supporting the + overload.

Note:
    Used in :func:`safe_sum` to state that the return value type is the same as the
    argument type.

"""


def safe_sum(x: Sequence[_Addable]) -> _Addable:
    """Safely sum the elements, without creating a first addition with 0.

    Important for differentiable numbers, where a leading ``0 + x[0]`` would produce a
    needless copy.

    Parameters:
        x: A sequence of any objects which support the ``+`` operation.

    Returns:
        The sum of ``x``.

    """
    if len(x) >= 1:
        sum_ = x[0]
        for i in range(1, len(x)):
            sum_ = sum_ + x[i]  # type: ignore[operator]
        return sum_
    else:
        return cast(_Addable, 0)


class EOSConfigurationError(ValueError):
    """Custom exception class to alert the user when an equation of state is
    inconsistently configured.

    Such usage includes for example:

    - passing critical properties or acentric factors whose number does not match the
      number of species,
    - passing non-positive critical temperatures or pressures,
    - requesting an unknown cubic model,
    - evaluating the equation of state before the critical properties are set,
    - passing interaction matrices of the wrong shape.

    """


class EOSConvergenceError(ArithmeticError):
    """Raised by a strict equation of state when the Newton iterations for the
    compressibility factor did not converge within the iteration budget."""
