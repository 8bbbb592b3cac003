# -*- coding: utf-8 -*
"""A small object system with generic-function dispatch.

Classes with ordered multiple inheritance, value or reference semantics for
their instances, and generic functions that dispatch on the classes of one or
more arguments, with `invoke_next()` to continue to the next applicable method.

Start with `define_class`, `define_generic`, `method` and `invoke`; see
`gendispatch.registry`. See ``dir(gendispatch)`` and submodule docstrings for more.
"""

__version__ = '0.1.0'

from .errors import *  # noqa: F401, F403
from .markers import *  # noqa: F401, F403
from .precedence import *  # noqa: F401, F403
from .classes import *  # noqa: F401, F403
from .instances import *  # noqa: F401, F403
from .methods import *  # noqa: F401, F403
from .dispatch import *  # noqa: F401, F403
from .registry import *  # noqa: F401, F403
