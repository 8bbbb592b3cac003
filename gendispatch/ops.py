# -*- coding: utf-8; -*-
"""Operator overloading through generic functions.

Python operators applied to instances invoke generic functions named by the
operator symbol. Each registry predefines these generics (two dispatch
positions each), organized in group generics::

    Ops
      Arith     +  -  *  /  //  %  **
      Compare   ==  !=  <  <=  >  >=
      Logic     &  |

A method registered on a group generic applies to all of its members. When a
member method and a group method are equally specific, the member method
wins. Inside a handler, `cursor.generic` is the name of the operator that was
actually used, and `cursor.call_generic(a, b)` applies that same operator to
other arguments; for plain Python values this falls back to the operator's
Python implementation::

    @method("Arith", "modulus", "modulus")
    def arith(e1, e2, *, cursor):
        return Modulus(value=cursor.call_generic(e1.value, e2.value) % e1.n, n=e1.n)

Unary minus (and plus) is the generic `"-"` (`"+"`) with the second argument
missing; register it with the signature `(cls, "missing")`.

When no method applies, a binary operator returns `NotImplemented`, so
Python's reflected-operand protocol still gets a chance: `1 + x` tries
`("+", 1, x)`. Without an `"=="` method, value instances compare equal when
they have the same class and equal fields; reference instances compare by
identity.
"""

__all__ = ["operators", "groups", "apply_operator", "OperatorMixin"]

import operator

# operator symbol -> (binary implementation, unary implementation or None, group)
operators = {"+": (operator.add, operator.pos, "Arith"),
             "-": (operator.sub, operator.neg, "Arith"),
             "*": (operator.mul, None, "Arith"),
             "/": (operator.truediv, None, "Arith"),
             "//": (operator.floordiv, None, "Arith"),
             "%": (operator.mod, None, "Arith"),
             "**": (operator.pow, None, "Arith"),
             "==": (operator.eq, None, "Compare"),
             "!=": (operator.ne, None, "Compare"),
             "<": (operator.lt, None, "Compare"),
             "<=": (operator.le, None, "Compare"),
             ">": (operator.gt, None, "Compare"),
             ">=": (operator.ge, None, "Compare"),
             "&": (operator.and_, None, "Logic"),
             "|": (operator.or_, None, "Logic")}

# group generic -> the group it belongs to
groups = {"Arith": "Ops",
          "Compare": "Ops",
          "Logic": "Ops",
          "Ops": None}

def _registry_of(args):
    for x in args:
        if isinstance(x, OperatorMixin):
            return x._classdef.registry
    return None

def apply_operator(op, *args):
    """Apply the operator `op` (e.g. `"+"`) to one or two arguments.

    If any argument is an instance, dispatch on the operator generic of its
    registry. Otherwise use Python's own implementation of the operator.
    """
    registry = _registry_of(args)
    if registry is not None:
        return registry.invoke(op, *args)
    binary, unary, _ = operators[op]
    if len(args) == 1:
        if unary is None:
            raise TypeError(f"'{op}' is not a unary operator")
        return unary(*args)
    return binary(*args)

def _try_dispatch(op, *args):
    registry = _registry_of(args)
    if registry.selected_method(op, *args) is None:
        return NotImplemented
    return registry.invoke(op, *args)

def _binary(op):
    def method(self, other):
        return _try_dispatch(op, self, other)
    method.__name__ = f"operator {op}"
    return method

def _reflected(op):
    def method(self, other):
        return _try_dispatch(op, other, self)
    method.__name__ = f"reflected operator {op}"
    return method

def _unary(op):
    def method(self):
        result = _try_dispatch(op, self)
        if result is NotImplemented:
            raise TypeError(f"bad operand type for unary {op}: '{self._classdef.name}'")
        return result
    method.__name__ = f"unary operator {op}"
    return method

class OperatorMixin:
    """Route Python operators on instances to the operator generics."""
    __add__ = _binary("+")
    __radd__ = _reflected("+")
    __sub__ = _binary("-")
    __rsub__ = _reflected("-")
    __mul__ = _binary("*")
    __rmul__ = _reflected("*")
    __truediv__ = _binary("/")
    __rtruediv__ = _reflected("/")
    __floordiv__ = _binary("//")
    __rfloordiv__ = _reflected("//")
    __mod__ = _binary("%")
    __rmod__ = _reflected("%")
    __pow__ = _binary("**")
    __rpow__ = _reflected("**")
    __and__ = _binary("&")
    __rand__ = _reflected("&")
    __or__ = _binary("|")
    __ror__ = _reflected("|")
    # Python reflects comparisons itself (x < y falls back to y > x).
    __lt__ = _binary("<")
    __le__ = _binary("<=")
    __gt__ = _binary(">")
    __ge__ = _binary(">=")
    __neg__ = _unary("-")
    __pos__ = _unary("+")

    def __eq__(self, other):
        result = _try_dispatch("==", self, other)
        if result is NotImplemented:
            return _default_eq(self, other)
        return result

    def __ne__(self, other):
        result = _try_dispatch("!=", self, other)
        if result is not NotImplemented:
            return result
        result = _try_dispatch("==", self, other)
        if result is NotImplemented:
            result = _default_eq(self, other)
            if result is NotImplemented:
                return result
        return not result

def _default_eq(self, other):
    if not isinstance(other, OperatorMixin):
        return NotImplemented
    if self.reference or other.reference:
        return self is other
    return self._classdef is other._classdef and self._cell == other._cell
