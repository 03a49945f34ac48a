"""This private module contains central assumptions and data for the entire package.

Changes here should be done with much care.

"""

from __future__ import annotations

from enum import Enum

__all__ = [
    "R_IDEAL_MOL",
    "NEWTON_TOLERANCE",
    "NEWTON_MAX_ITERATIONS",
    "PhysicalState",
]


NUMBA_CACHE: bool = True
"""Flag to instruct the numba compiler to cache (!and use cached!) functions.

This might cause some confusion in the developing process due to some lack in numba's
caching functionality.
(Does not recognize changes in nested functions and hence does not trigger
re-compilation).

See Also:
    https://numba.readthedocs.io/en/stable/user/jit.html#cache

"""

NUMBA_FAST_MATH: bool = False
"""Flag to instruct the numba compiler to use it's ``fastmath`` functions.

To be used with care, due to loss in precision. The implicit derivatives of the
compressibility factor are sensitive to it.

See Also:
    https://numba.readthedocs.io/en/stable/reference/jit-compilation.html#numba.jit

"""

R_IDEAL_MOL: float = 8.31446261815324
"""Universal gas constant in ``[J / K mol]``."""

NEWTON_TOLERANCE: float = 1e-6
"""Default tolerance on the Newton step when solving the cubic equation for the
compressibility factor.

Can be overwritten by the ``tolerance`` key in the ``[newton]`` section of the
configuration file ``cubiceos.cfg``.

"""

NEWTON_MAX_ITERATIONS: int = 10
"""Default maximal number of Newton iterations when solving the cubic equation for the
compressibility factor.

Can be overwritten by the ``max_iterations`` key in the ``[newton]`` section of the
configuration file ``cubiceos.cfg``.

"""


class PhysicalState(Enum):
    """Enum object for characterizing the physical states of a phase.

    - :attr:`liquid`: liquid-like state (value 0)
    - ``gas: int = 1``: gas-like state (value 1)

    The state decides only on the initial guess for the compressibility factor, and
    hence on which root of the cubic equation of state is found.

    """

    liquid: int = 0
    gas: int = 1
