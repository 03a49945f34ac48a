"""Sub-package of ``cubiceos`` with the cubic equations of state.

.. rubric:: Module guide

The supported models (van der Waals, Redlich-Kwong, Soave-Redlich-Kwong and
Peng-Robinson) are characterized by a few constants and an alpha function, collected
in a single table in :mod:`~cubiceos.eos.models`.

Pure-component parameters and the van der Waals mixing rule are implemented in
:mod:`~cubiceos.eos.mixing`, with optional binary interaction corrections from
:mod:`~cubiceos.eos.interaction`.

The compressibility factor is computed by a compiled Newton method in
:mod:`~cubiceos.eos.cubic_polynomial`, and the residual properties of the phase are
assembled in :mod:`~cubiceos.eos.properties`.

The entry point is :class:`~cubiceos.eos.cubic_eos.CubicEOS`.

References:
    [1]: `Peng, Robinson (1976) <https://doi.org/10.1021/i160057a011>`_
    [2]: `Smith, Van Ness, Abbott (2005), Introduction to Chemical Engineering
         Thermodynamics`

"""

__all__ = []

from . import (
    cubic_eos,
    cubic_polynomial,
    interaction,
    mixing,
    models,
    properties,
)
from .cubic_eos import *
from .cubic_polynomial import *
from .interaction import *
from .mixing import *
from .models import *
from .properties import *

__all__.extend(cubic_eos.__all__)
__all__.extend(cubic_polynomial.__all__)
__all__.extend(interaction.__all__)
__all__.extend(mixing.__all__)
__all__.extend(models.__all__)
__all__.extend(properties.__all__)
