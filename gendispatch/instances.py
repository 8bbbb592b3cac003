# -*- coding: utf-8; -*-
"""Instances: objects with value semantics or reference semantics.

Each class chooses the semantics of its instances (see `Registry.define_class`,
parameter `reference`):

  - A **value instance** cannot be modified in place. "Modifying" it means
    constructing a new instance with some fields replaced, via `update`.
    Aliasing two names to one value instance is therefore safe::

        p = Point(x=1, y=2)
        q = p
        p = update(p, x=10)
        assert q.x == 1

  - A **reference instance** keeps its fields in a mutable cell shared by
    every alias. Assigning it to a new name creates an alias, not a copy;
    use `clone` for a copy::

        a = Account(balance=100)
        b = a
        b.balance = 0
        assert a.balance == 0

Fields are read and written as attributes (`p.x`, `a.balance = 0`), or with
`get_field` and `set_field`. Writing a field checks its declared type, but
does **not** run the class's validator; use `Registry.revalidate` for that.
"""

__all__ = ["Instance", "ValueInstance", "ReferenceInstance",
           "get_field", "set_field", "update", "clone", "fields"]

from copy import copy

from .errors import ReadOnlyFieldError
from .ops import OperatorMixin

class Instance(OperatorMixin):
    """Base class of all instances. Use `Registry.construct` to create one."""
    # Internal attributes, stored directly in the Python object. All other
    # attribute access goes to the fields.
    _direct_write = ("_classdef", "_cell")
    reference = False

    def __init__(self, classdef, fields):
        object.__setattr__(self, "_classdef", classdef)
        object.__setattr__(self, "_cell", dict(fields))

    @property
    def classdef(self):
        """The `ClassDef` this instance was constructed as."""
        return self._classdef

    # https://docs.python.org/3/reference/datamodel.html#object.__getattr__
    def __getattr__(self, name):
        # Not called for the direct attributes when they exist. When they
        # don't (e.g. during unpickling), we must not recurse into the fields.
        if name in self._direct_write or name.startswith("__"):
            raise AttributeError(name)
        try:
            return get_field(self, name)
        except AttributeError:
            member = self._classdef.registry.member_method(self, name)
            if member is None:
                raise
            return member

    def __setattr__(self, name, value):
        set_field(self, name, value)

    def __delattr__(self, name):
        raise ReadOnlyFieldError(f'cannot delete field "{name}" of an object of class "{self._classdef.name}"')

    def __dir__(self):
        return sorted(set(super().__dir__()) | set(self._cell))

    def __repr__(self):
        return self._classdef.registry.format(self)

    def __copy__(self):
        return clone(self)

    def __deepcopy__(self, memo):
        return _clone(self, True, memo)

class ValueInstance(Instance):
    """An instance with value semantics. Hashing is unsupported, since fields may be mutable containers."""
    __hash__ = None

class ReferenceInstance(Instance):
    """An instance with reference semantics. Compared and hashed by identity unless `==` is overloaded."""
    reference = True
    __hash__ = object.__hash__

def _allocate(classdef, cell):
    cls = ReferenceInstance if classdef.reference else ValueInstance
    return cls(classdef, cell)

def _unshare(value):
    # Value instances must not observe each other through a shared container.
    if isinstance(value, (list, dict, set)):
        return copy(value)
    return value

def get_field(instance, name):
    """Return the value of the field `name` of `instance`.

    If there is no such field, but the class has an active binding `name`,
    return the value computed by the binding.
    """
    cell = instance._cell
    if name in cell:
        return cell[name]
    binding = instance._classdef.active_binding(name)
    if binding is not None:
        return binding(instance)
    raise AttributeError(f'no slot of name "{name}" for this object of class "{instance._classdef.name}"')

def set_field(instance, name, value):
    """Set the field `name` of the reference instance `instance`, in place.

    The change is visible through every alias of `instance`. The value is
    checked against the slot's declared type (`TypeMismatchError`), but the
    class's validator is **not** run.

    For an active binding `name`, call the binding with the new value.

    A value instance cannot be modified in place; this raises
    `ReadOnlyFieldError`. Use `update` to get a modified copy instead.
    """
    classdef = instance._classdef
    if not instance.reference:
        raise ReadOnlyFieldError(f'cannot modify field "{name}" of an object of value class "{classdef.name}" in place; '
                                 f"use update() to construct a modified copy")
    binding = classdef.active_binding(name)
    if binding is not None and name not in instance._cell:
        binding(instance, value)
        return
    if name not in classdef.all_slots():
        raise AttributeError(f'cannot add new field "{name}" to an object of class "{classdef.name}"')
    classdef.check_slot(name, value)
    instance._cell[name] = value

def update(instance, /, **bindings):
    """Return a copy of `instance` with the given fields replaced.

    This is how a value instance is "modified". The input is never mutated.
    The new values are checked against the slots' declared types, but the
    class's validator is **not** run. Fields holding a list, dict or set are
    shallow-copied, so the two value instances do not share the container.

    Also works for reference instances, producing a new, independent
    instance (a shallow clone with the given fields replaced).

    Example::

        s1 = update(s0, elements=[1] + s0.elements)
    """
    classdef = instance._classdef
    for name, value in bindings.items():
        classdef.check_slot(name, value)
    if classdef.reference:
        cell = dict(instance._cell)
    else:
        cell = {name: _unshare(value) for name, value in instance._cell.items()}
    cell.update(bindings)
    return _allocate(classdef, cell)

def clone(instance, deep=False):
    """Return a copy of `instance`, with a new field cell.

    `deep=False`: top-level field values are shared as-is; a field that holds
                  a reference instance still refers to the same nested instance.
                  A value instance gets its own copies of list, dict and set fields.

    `deep=True`: any field holding an instance is cloned too, recursively.
                 Cycles through reference instances are preserved: an instance
                 reached twice is cloned once, and both paths lead to the clone.
    """
    return _clone(instance, deep, {})

def _clone(instance, deep, memo):
    key = id(instance._cell)
    if key in memo:
        return memo[key]
    new = _allocate(instance._classdef, {})
    memo[key] = new
    for name, value in instance._cell.items():
        if deep and isinstance(value, Instance):
            value = _clone(value, deep, memo)
        elif not new.reference:
            value = _unshare(value)
        new._cell[name] = value
    return new

def fields(instance):
    """Return the fields of `instance` as a new `dict`."""
    return dict(instance._cell)
