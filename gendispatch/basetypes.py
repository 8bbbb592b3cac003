# -*- coding: utf-8; -*-
"""Built-in pseudo-classes for plain Python values.

Plain values take part in dispatch like instances do. Each registry installs
the following classes, which cannot be redefined or constructed::

    vector                 (virtual)
      logical              bool
      numeric              (virtual)
        integer            int
        double             float
      complex              complex
      character            str
      list                 list, tuple, dict
    function               functions, methods, partials
    NULL                   None

So an `int` argument has the precedence list
`integer, numeric, vector, default`, and a method for `numeric` applies to
both `int` and `float` arguments, while one for `integer` is preferred for
an `int`.

Any other Python value dispatches on a *foreign* class, named
`module.QualName` after its Python type; see `gendispatch.registry`.
"""

__all__ = ["builtin_classes", "builtin_name_of", "builtin_name_of_type", "empty_value"]

from functools import partial
from inspect import isroutine

# name, parents, abstract
builtin_classes = (("vector", (), True),
                   ("logical", ("vector",), False),
                   ("numeric", ("vector",), True),
                   ("integer", ("numeric",), False),
                   ("double", ("numeric",), False),
                   ("complex", ("vector",), False),
                   ("character", ("vector",), False),
                   ("list", ("vector",), False),
                   ("function", (), False),
                   ("NULL", (), False))

# Exact Python type -> built-in class name. Used for Python types appearing
# in signatures and slot declarations.
_exact_types = {bool: "logical",
                int: "integer",
                float: "double",
                complex: "complex",
                str: "character",
                list: "list",
                tuple: "list",
                dict: "list",
                type(None): "NULL"}

def builtin_name_of_type(pytype):
    """Return the built-in class name for the Python type `pytype`, or `None`."""
    return _exact_types.get(pytype, None)

def builtin_name_of(value):
    """Return the name of the built-in class of a plain Python value.

    Returns `None` if `value` has no built-in class (it is then dispatched
    on its foreign class).
    """
    # bool before int, since bool is a subclass of int.
    if isinstance(value, bool):
        return "logical"
    for pytype in (int, float, complex, str, list, tuple, dict):
        if isinstance(value, pytype):
            return _exact_types[pytype]
    if value is None:
        return "NULL"
    if isroutine(value) or isinstance(value, partial):
        return "function"
    return None

_empty_values = {"logical": False,
                 "integer": 0,
                 "double": 0.0,
                 "numeric": 0,
                 "complex": 0j,
                 "character": ""}

def empty_value(classname):
    """Return a fresh type-appropriate empty value for a built-in class name.

    Containers (`list`, `vector`) get a new empty list each time.
    Everything else gets `None`.
    """
    if classname in ("list", "vector"):
        return []
    return _empty_values.get(classname, None)
