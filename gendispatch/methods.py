# -*- coding: utf-8; -*-
"""The method table.

Maps `(generic name, signature) -> handler`. A *signature* has one entry per
dispatch position of the generic. Each entry is one of:

  - a class name (str), including `"default"`, the implicit root that ends
    every precedence list; matches an argument whose precedence list
    contains that class,
  - `ANY`, which matches any supplied argument,
  - `MISSING`, which matches only an argument that was not supplied.

**Specificity**. When several methods match a call, they are ranked by the
sum, over the dispatch positions, of each position's *distance*:

  - a class match: the position of that class in the argument's precedence
    list (0 for the argument's own class, 1 for its first parent, ...),
  - `ANY`: farther than any class match,
  - `MISSING`: farther still.

The smallest total distance wins. Ties are broken by registration order;
the earlier registration wins, so dispatch is deterministic. Registering a
second method with an identical signature replaces the first, which keeps
its place in the registration order.
"""

__all__ = ["MethodEntry", "MethodTable"]

from inspect import signature, Parameter

from .markers import ANY, MISSING

# Larger than the length of any realistic precedence list.
ANY_DISTANCE = 10000
MISSING_DISTANCE = 20000

def _accepts_cursor(handler):
    """Return whether `handler` declares a parameter that can be passed as `cursor=...`."""
    try:
        params = signature(handler).parameters
    except (TypeError, ValueError):  # some builtins cannot be inspected
        return False
    p = params.get("cursor", None)
    return p is not None and p.kind in (Parameter.POSITIONAL_OR_KEYWORD, Parameter.KEYWORD_ONLY)

class MethodEntry:
    """A method registered on a generic function.

    `generic`:   name of the generic function.
    `signature`: tuple of class names and markers, one per dispatch position.
    `handler`:   the callable.
    `serial`:    registration order, used to break ties.
    `wants_cursor`: whether the handler gets the dispatch cursor as `cursor=...`.
    """
    def __init__(self, generic, signature, handler, serial):
        self.generic = generic
        self.signature = tuple(signature)
        self.handler = handler
        self.serial = serial
        self.wants_cursor = _accepts_cursor(handler)

    def __repr__(self):
        sig = ", ".join(str(x) for x in self.signature)
        name = getattr(self.handler, "__qualname__", repr(self.handler))
        return f"<method {self.generic}({sig}) -> {name}>"

    def distance(self, precedences):
        """Return the total distance of this method for a call, or `None` if it does not match.

        `precedences`: one entry per dispatch position; either the tuple of
                       class names in the argument's precedence list, or
                       `MISSING` if the argument was not supplied.
        """
        total = 0
        for pattern, names in zip(self.signature, precedences):
            if pattern is MISSING:
                if names is not MISSING:
                    return None
                total += MISSING_DISTANCE
            elif names is MISSING:
                return None
            elif pattern is ANY:
                total += ANY_DISTANCE
            else:
                try:
                    total += names.index(pattern)
                except ValueError:
                    return None
        return total

class MethodTable:
    """Registered methods of all generic functions of one registry."""
    def __init__(self):
        self._entries = {}  # generic name -> {signature: MethodEntry}
        self._serial = 0

    def register(self, generic, signature, handler):
        """Insert a method, or replace the one with an identical signature. Return the `MethodEntry`."""
        signature = tuple(signature)
        table = self._entries.setdefault(generic, {})
        if signature in table:
            serial = table[signature].serial
        else:
            self._serial += 1
            serial = self._serial
        entry = table[signature] = MethodEntry(generic, signature, handler, serial)
        return entry

    def lookup(self, generic, signature):
        """Return the method registered for exactly `signature`, or `None`."""
        return self._entries.get(generic, {}).get(tuple(signature), None)

    def entries(self, generic):
        """Return the methods of `generic`, in registration order."""
        return sorted(self._entries.get(generic, {}).values(), key=lambda e: e.serial)

    def ranked(self, generic, precedences):
        """Return `(distance, serial, entry)` for each method of `generic` matching the call, best first."""
        out = []
        for entry in self._entries.get(generic, {}).values():
            d = entry.distance(precedences)
            if d is not None:
                out.append((d, entry.serial, entry))
        out.sort(key=lambda item: item[:2])
        return out

    def clear(self, generic=None):
        """Remove the methods of `generic`, or of all generics if `generic` is `None`."""
        if generic is None:
            self._entries.clear()
        else:
            self._entries.pop(generic, None)
