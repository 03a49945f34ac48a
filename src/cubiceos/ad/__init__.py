"""Sub-package providing forward-mode differentiation of thermodynamic quantities.

The differentiable types in :mod:`~cubiceos.ad.forward_mode` carry a value together
with its partial derivatives with respect to temperature, pressure and (for chemical
types) the amounts of species. Elementary functions are provided in
:mod:`~cubiceos.ad.functions`.

"""

__all__ = []

from . import forward_mode, functions
from .forward_mode import *
from .functions import *

__all__.extend(forward_mode.__all__)
__all__.extend(functions.__all__)
