# -*- coding: utf-8; -*-
"""Class definitions.

A `ClassDef` records a class's name, its ordered parents, its declared slots
(field name -> declared type), default field values, an optional validity
predicate, and whether its instances have value or reference semantics.

Class definitions are created by `Registry.define_class` (which see), and
are immutable once registered. A class definition is also the constructor
of its instances::

    Point = define_class("Point", slots={"x": "numeric", "y": "numeric"})
    p = Point(x=1, y=2.5)   # same as construct("Point", x=1, y=2.5)

**Slot types** may be:

  - the name of a class known to the registry, including the built-in
    pseudo-classes such as `"numeric"`, `"character"` or `"list"`
    (see `gendispatch.basetypes`); a value conforms if its class is that
    class or derives from it,
  - a `ClassDef`, which is the same as giving its name,
  - `ANY` or `"ANY"`, which accepts anything,
  - a Python type or a `typing` type specification, checked with
    `gendispatch.typecheck.isoftype`.

Slots are inherited. A class has the slots of all its ancestors; when several
classes declare the same slot, the declaration nearest in the precedence
list wins.
"""

__all__ = ["ClassDef", "normalize_slots"]

from collections.abc import Mapping
from copy import copy

from .basetypes import empty_value
from .errors import TypeMismatchError
from .markers import ANY, DEFAULT
from .precedence import precedence_of
from .typecheck import isoftype

# Attributes of `Instance` itself, which would shadow a field of the same name.
_reserved_names = ("classdef", "reference")

def normalize_slots(slots):
    """Normalize a slot declaration into a `dict` of name -> type spec.

    `slots` may be `None`, a mapping of name -> type spec, or an iterable of
    names (each of which is then declared `ANY`).
    """
    if slots is None:
        return {}
    if isinstance(slots, str):
        raise TypeError(f"slots must be a mapping or a sequence of names, got the string {slots!r}")
    if not isinstance(slots, Mapping):
        slots = {name: ANY for name in slots}
    out = {}
    for name, spec in slots.items():
        if not (isinstance(name, str) and name.isidentifier()):
            raise ValueError(f"slot names must be identifiers, got {name!r}")
        if name.startswith("_") or name in _reserved_names:
            raise ValueError(f"slot names must not begin with an underscore, nor be one of {_reserved_names}; got {name!r}")
        if isinstance(spec, ClassDef):
            spec = spec.name
        elif spec == "ANY":
            spec = ANY
        out[name] = spec
    return out

def _describe(spec):
    if isinstance(spec, str):
        return f'"{spec}"'
    return repr(spec)

class ClassDef:
    """The definition of a class in the object system.

    Attributes:

      `name`:       str, unique within the registry.
      `parents`:    tuple of `ClassDef`, in declaration order.
      `slots`:      dict, the slots declared by this class itself.
      `defaults`:   dict, default values declared by this class itself.
      `validator`:  callable `instance -> bool or str`, or `None`.
      `abstract`:   bool. Abstract (virtual) classes cannot be constructed.
      `reference`:  bool. Whether instances have reference semantics.
      `active`:     dict, active bindings declared by this class itself.
      `registry`:   the `Registry` this class belongs to.
      `builtin`:    bool. Whether this is a built-in pseudo-class.
      `pytype`:     for a foreign class, the Python type it stands for.
    """
    def __init__(self, registry, name, parents=(), slots=None, *, validator=None,
                 defaults=None, abstract=False, reference=False, active=None,
                 builtin=False, pytype=None):
        self.registry = registry
        self.name = name
        self.parents = tuple(parents)
        self.slots = normalize_slots(slots)
        self.defaults = dict(defaults or {})
        self.validator = validator
        self.abstract = abstract
        self.reference = reference
        self.active = dict(active or {})
        self.builtin = builtin
        self.pytype = pytype
        self._precedence = None
        self._all_slots = None

    def __repr__(self):
        return f'<class "{self.name}">'

    def __call__(self, /, **fields):
        """Construct an instance of this class. See `Registry.construct`."""
        return self.registry.construct(self, **fields)

    def precedence(self):
        """Return the precedence list of this class; see `gendispatch.precedence`."""
        return precedence_of(self)

    def ancestors(self):
        """Return the classes of the precedence list, without `DEFAULT`."""
        return tuple(c for c in self.precedence() if c is not DEFAULT)

    def is_subclass_of(self, name):
        """Return whether the class named `name` is in the precedence list of this class."""
        return any(c.name == name for c in self.ancestors())

    # Inherited declarations are merged from the root-most ancestor towards
    # this class, so that nearer declarations override further ones.
    def _merged(self, attr):
        out = {}
        for c in reversed(self.ancestors()):
            out.update(getattr(c, attr))
        return out

    def all_slots(self):
        """Return a dict of all slots of this class, including inherited ones."""
        if self._all_slots is None:
            self._all_slots = self._merged("slots")
        return self._all_slots

    def all_defaults(self):
        """Return a dict of all default field values, including inherited ones."""
        return self._merged("defaults")

    def active_binding(self, name):
        """Return the active binding `name` of this class or its nearest ancestor, or `None`."""
        for c in self.ancestors():
            if name in c.active:
                return c.active[name]
        return None

    def validators(self):
        """Return the validators of this class and its ancestors, root-most first."""
        return [c.validator for c in reversed(self.ancestors()) if c.validator is not None]

    def conforms(self, slot, value):
        """Return whether `value` is acceptable for the slot named `slot`."""
        spec = self.all_slots()[slot]
        if spec is ANY:
            return True
        if isinstance(spec, str):
            return self.registry.is_a(value, spec)
        return isoftype(value, spec)

    def check_slot(self, slot, value):
        """Raise `TypeMismatchError` if `value` is not acceptable for the slot named `slot`.

        Raise `AttributeError` if this class has no such slot.
        """
        if slot not in self.all_slots():
            raise AttributeError(f'invalid name for slot of class "{self.name}": {slot}')
        if not self.conforms(slot, value):
            raise TypeMismatchError(self.name, slot, value, _describe(self.all_slots()[slot]))

    def prototype_fields(self):
        """Return the initial field values of a new instance.

        Each slot gets its default value if one is declared (shallow-copied,
        so instances do not share a mutable default container), else an
        empty value appropriate for its declared type.
        """
        defaults = self.all_defaults()
        out = {}
        for name, spec in self.all_slots().items():
            if name in defaults:
                value = defaults[name]
                if isinstance(value, (list, dict, set)):
                    value = copy(value)
                out[name] = value
            else:
                out[name] = _empty_for(spec)
        return out

def _empty_for(spec):
    if isinstance(spec, str):
        return empty_value(spec)
    if isinstance(spec, type):  # int() == 0, str() == "", list() == [], ...
        try:
            return spec()
        except TypeError:
            return None
    return None
