# -*- coding: utf-8; -*-
"""The registry: classes, generic functions and their methods, in one place.

A `Registry` is a self-contained object system. The module-level functions
(`define_class`, `construct`, `define_generic`, `register_method`, `invoke`,
...) operate on a process-wide default registry; `reset()` clears it. Tests
should call `reset()`, or create a fresh `Registry()`, between scenarios.

Example::

    from gendispatch import define_class, define_generic, method, invoke, update

    define_class("Stack", abstract=True)
    define_class("VectorStack", "Stack", slots={"elements": "list"})

    define_generic("push", arity=1)

    @method("push", "VectorStack")
    def push(stack, element):
        return update(stack, elements=[element] + stack.elements)

    s = invoke("push", construct("VectorStack"), 1)

Each registry predefines:

  - the built-in pseudo-classes of `gendispatch.basetypes`,
  - the generic `initialize(prototype, **fields)`, through which `construct`
    fills in the fields of a new instance,
  - the generic `format(instance)`, which produces the `repr` of instances,
  - the operator generics and their group generics (see `gendispatch.ops`).
"""

__all__ = ["Registry", "current_registry", "reset",
           "define_class", "construct", "revalidate",
           "define_generic", "register_method", "method", "invoke",
           "selected_method", "has_method", "require_methods",
           "list_methods", "format_methods", "methods",
           "find_class", "class_of", "is_a", "precedence_of"]

from functools import partial, wraps
from reprlib import recursive_repr
from warnings import warn

from .basetypes import builtin_classes, builtin_name_of, builtin_name_of_type
from .classes import ClassDef
from .dispatch import Dispatcher, Generic
from .errors import (DuplicateClassError, UnknownParentError, UnknownClassError,
                     AbstractInstantiationError, ValidationError,
                     NoApplicableMethodError, DispatchWarning)
from .instances import Instance, _allocate, update
from .markers import ANY, MISSING, DEFAULT
from .methods import MethodTable
from .ops import operators, groups
from .precedence import linearizations, default_linearization

# Names with a special meaning in signatures.
_reserved_classnames = (str(ANY), str(MISSING), str(DEFAULT))

def _default_initialize(instance, /, **fields):
    """Fill in the given fields of a freshly allocated instance, checking their types."""
    if instance.reference:
        classdef = instance._classdef
        for name, value in fields.items():
            classdef.check_slot(name, value)
        instance._cell.update(fields)
        return instance
    return update(instance, **fields)

@recursive_repr()
def _default_format(instance):
    fields = ", ".join(f"{name}={value!r}" for name, value in instance._cell.items())
    return f"{instance._classdef.name}({fields})"

def _is_single(signature):
    return isinstance(signature, (str, ClassDef, type)) or any(signature is m for m in (ANY, MISSING, DEFAULT))

def _foreign_name(pytype):
    if pytype.__module__ == "builtins":
        return pytype.__qualname__
    return f"{pytype.__module__}.{pytype.__qualname__}"

class Registry:
    """A self-contained object system: classes, generic functions, methods.

    `linearization`: name of the algorithm for class precedence lists,
                     `"depth-first"` or `"c3"`; see `gendispatch.precedence`.
                     Default is `gendispatch.precedence.default_linearization`.
    """
    def __init__(self, linearization=None):
        if linearization is None:
            linearization = default_linearization
        if linearization not in linearizations:
            raise ValueError(f"Unknown linearization {linearization!r}; valid: {list(linearizations)}")
        self.linearization = linearization
        self.dispatcher = Dispatcher(self)
        self.reset()

    def reset(self):
        """Forget all classes, generics and methods; reinstall the predefined ones."""
        self.classes = {}
        self.generics = {}
        self.table = MethodTable()
        self._foreign = {}  # Python type -> ClassDef
        for name, parents, abstract in builtin_classes:
            self.classes[name] = ClassDef(self, name, [self.classes[p] for p in parents],
                                          abstract=abstract, builtin=True)
        self.define_generic("initialize", default=_default_initialize)
        self.define_generic("format", default=_default_format)
        for name, group in groups.items():
            self.define_generic(name, arity=2, group=group)
        for name, (_, _, group) in operators.items():
            self.define_generic(name, arity=2, group=group)

    # --------------------------------------------------------------------------------
    # Classes

    def define_class(self, name, parents=(), slots=None, validator=None, defaults=None, *,
                     abstract=False, reference=None, methods=None, active=None):
        """Define a new class, and return its `ClassDef`.

        `name`:      str, must not be in use.
        `parents`:   class name, `ClassDef`, or a sequence of these, in order of
                     precedence. Parents must already be defined.
        `slots`:     mapping of field name -> type, or a sequence of field names
                     (then of type `ANY`). See `gendispatch.classes` for the
                     accepted type specifications.
        `validator`: callable `instance -> result`, run at construction and by
                     `revalidate`. A true result means valid; a false result,
                     or a string (taken as the reason), means invalid.
        `defaults`:  mapping of field name -> default value.
        `abstract`:  if `True`, the class cannot be instantiated.
        `reference`: if `True`, instances have reference semantics; if `False`,
                     value semantics. If `None`, reference semantics if any
                     parent has them.
        `methods`:   mapping of name -> function, the *member methods* of the
                     class. Calling `instance.name(*args)` invokes the generic
                     `"$name"`, where `invoke_next()` calls the same member
                     method of the next class in the precedence list.
        `active`:    mapping of name -> function, the *active bindings*.
                     Reading `instance.name` returns `f(instance)`; assigning
                     calls `f(instance, value)`.

        Raises `DuplicateClassError` if `name` is in use, `UnknownParentError`
        if a parent is not defined, `InconsistentHierarchyError` if the parents
        admit no precedence order (only with C3), and `TypeMismatchError` if a
        default value does not conform to its slot's type.
        """
        if not (isinstance(name, str) and name):
            raise TypeError(f"class name must be a nonempty string, got {name!r}")
        if name in _reserved_classnames:
            raise ValueError(f"{name!r} is reserved, it cannot be used as a class name")
        if name in self.classes:
            raise DuplicateClassError(name)
        if isinstance(parents, (str, ClassDef)):
            parents = (parents,)
        resolved = []
        for parent in parents:
            parentname = parent.name if isinstance(parent, ClassDef) else parent
            if self.classes.get(parentname, None) is None or (isinstance(parent, ClassDef) and
                                                              self.classes[parentname] is not parent):
                raise UnknownParentError(name, parentname)
            resolved.append(self.classes[parentname])
        if reference is None:
            reference = any(p.reference for p in resolved)
        cls = ClassDef(self, name, resolved, slots, validator=validator, defaults=defaults,
                       abstract=abstract, reference=reference, active=active)
        cls.precedence()  # InconsistentHierarchyError, before anything is registered
        for slot, value in cls.defaults.items():
            cls.check_slot(slot, value)
        for slot, spec in cls.slots.items():
            if isinstance(spec, str) and spec != name and spec not in self.classes:
                warn(f'class "{name}": undefined class "{spec}" for slot "{slot}"', DispatchWarning, stacklevel=2)
        self.classes[name] = cls
        for membername, function in (methods or {}).items():
            self.register_method(f"${membername}", (name,), function)
        return cls

    def find_class(self, name):
        """Return the `ClassDef` named `name`. A `ClassDef` is passed through.

        Raises `UnknownClassError` if there is no such class.
        """
        if isinstance(name, ClassDef):
            return name
        try:
            return self.classes[name]
        except KeyError:
            raise UnknownClassError(name) from None

    def _foreign_class(self, pytype):
        try:
            return self._foreign[pytype]
        except KeyError:
            pass
        parents = [self._foreign_class(base) for base in pytype.__bases__ if base is not object]
        cls = self._foreign[pytype] = ClassDef(self, _foreign_name(pytype), parents,
                                               abstract=True, pytype=pytype)
        return cls

    def class_of(self, value):
        """Return the `ClassDef` that `value` dispatches on.

        An instance dispatches on its class; a plain Python value on its
        built-in pseudo-class (see `gendispatch.basetypes`), or on a foreign
        class named after its Python type.
        """
        if isinstance(value, Instance):
            return value._classdef
        name = builtin_name_of(value)
        if name is not None:
            return self.classes[name]
        return self._foreign_class(type(value))

    def is_a(self, value, classname):
        """Return whether the class of `value` is `classname` or derives from it."""
        if isinstance(classname, ClassDef):
            classname = classname.name
        if classname == str(ANY):
            return True
        return self.class_of(value).is_subclass_of(classname)

    def precedence_of(self, cls):
        """Return the precedence list of the class `cls` (name or `ClassDef`), ending with `DEFAULT`."""
        return self.find_class(cls).precedence()

    # --------------------------------------------------------------------------------
    # Instances

    def construct(self, cls, /, **fields):
        """Create an instance of the class `cls` (name or `ClassDef`).

        Slots not given in `fields` get their default value, or an empty value
        of their declared type. The fields are filled in by the generic
        `initialize`, whose default handler checks each given value against
        its slot's type. Finally the validators are run.

        Raises `UnknownClassError`, `AbstractInstantiationError`,
        `TypeMismatchError`, or `ValidationError`.
        """
        cls = self.find_class(cls)
        if cls.abstract or cls.builtin or cls.pytype is not None:
            raise AbstractInstantiationError(cls.name)
        prototype = _allocate(cls, cls.prototype_fields())
        instance = self.invoke("initialize", prototype, **fields)
        if not (isinstance(instance, Instance) and instance._classdef is cls):
            raise TypeError(f'initialize for class "{cls.name}" must return an object of that class, got {instance!r}')
        self.revalidate(instance)
        return instance

    def revalidate(self, instance):
        """Run the validators of the class of `instance`, root-most ancestor first.

        Raises `ValidationError` if one of them rejects the instance.
        """
        classdef = instance._classdef
        for validator in classdef.validators():
            result = validator(instance)
            if isinstance(result, str):
                raise ValidationError(classdef.name, result)
            if not result:
                raise ValidationError(classdef.name)

    def format(self, instance):
        """Return the human-readable representation of `instance`, via the generic `format`."""
        return str(self.invoke("format", instance))

    def member_method(self, instance, name):
        """Return the member method `name` of `instance` as a bound callable, or `None`."""
        generic = f"${name}"
        if self.dispatcher.selected_method(generic, instance) is None:
            return None
        return partial(self.invoke, generic, instance)

    # --------------------------------------------------------------------------------
    # Generic functions

    def define_generic(self, name, arity=1, default=None, *, group=None):
        """Define the generic function `name`, and return its `Generic`.

        `arity`:   how many leading positional arguments take part in dispatch.
        `default`: handler called when no method applies.
        `group`:   name of a group generic whose methods also apply to this one.

        Redefining a generic with the same arity keeps its methods. With a
        different arity, its methods are discarded, with a `DispatchWarning`.
        A `default` or `group` not given is kept from the earlier definition.

        A group chain that leads back to `name` raises `ValueError`.
        """
        existing = self.generics.get(name, None)
        if existing is not None:
            if default is None:
                default = existing.default
            if group is None:
                group = existing.group
        link = group
        while link is not None:
            if link == name:
                raise ValueError(f'generic "{name}" cannot belong to group "{group}": the groups would form a cycle')
            parent = self.generics.get(link, None)
            link = parent.group if parent is not None else None
        if existing is not None and existing.arity != arity:
            warn(f'generic "{name}" redefined with arity {arity} (was {existing.arity}); its methods were removed',
                 DispatchWarning, stacklevel=2)
            self.table.clear(name)
        generic = self.generics[name] = Generic(name, arity, default, group)
        return generic

    def _signature_key(self, x):
        if x is ANY or x is MISSING:
            return x
        if x is DEFAULT:
            return str(DEFAULT)
        if isinstance(x, ClassDef):
            return x.name
        if isinstance(x, type):
            if x is object:
                return ANY
            name = builtin_name_of_type(x)
            return name if name is not None else self._foreign_class(x).name
        if isinstance(x, str):
            if x == str(ANY):
                return ANY
            if x == str(MISSING):
                return MISSING
            if x != str(DEFAULT) and x not in self.classes:
                warn(f'no definition for class "{x}"', DispatchWarning, stacklevel=4)
            return x
        raise TypeError(f"expected a class name, a ClassDef, a type, ANY or MISSING in a signature, got {x!r}")

    def _signature(self, generic, signature):
        if _is_single(signature):
            signature = (signature,)
        keys = tuple(self._signature_key(x) for x in signature)
        if len(keys) > generic.arity:
            raise TypeError(f'the signature {keys} has more elements than the dispatch arguments of generic "{generic.name}" '
                            f"(arity {generic.arity})")
        return keys + (ANY,) * (generic.arity - len(keys))

    def register_method(self, generic_name, signature, handler):
        """Register `handler` as the method of `generic_name` for `signature`. Return the `MethodEntry`.

        `signature`: a class name, or a sequence of them, one per dispatch
                     argument. A class may also be given as a `ClassDef` or a
                     Python type; `"ANY"` (or `ANY`) matches any argument,
                     `"missing"` (or `MISSING`) only a missing one. A short
                     signature is padded with `ANY`.

        If the generic does not exist yet, it is created, with the length of
        the signature as its arity. A method registered for an identical
        signature is replaced.
        """
        if not callable(handler):
            raise TypeError(f"handler must be callable, got {handler!r}")
        generic = self.generics.get(generic_name, None)
        if generic is None:
            n = 1 if _is_single(signature) else max(len(signature), 1)
            generic = self.define_generic(generic_name, arity=n)
        return self.table.register(generic_name, self._signature(generic, signature), handler)

    def method(self, generic_name, *signature):
        """Decorator. Register the decorated function as a method; see `register_method`.

        Usage::

            @method("area", "Circle")
            def area(c):
                return pi * c.r**2
        """
        def register(function):
            self.register_method(generic_name, signature, function)
            return function
        return register

    def invoke(self, generic_name, /, *args, **kwargs):
        """Call the generic function `generic_name`; see `gendispatch.dispatch`."""
        return self.dispatcher.invoke(generic_name, *args, **kwargs)

    def selected_method(self, generic_name, *args):
        """Return the handler a call with `args` would run first, or `None` if nothing applies."""
        return self.dispatcher.selected_method(generic_name, *args)

    def has_method(self, generic_name, *signature):
        """Return whether a method is registered for exactly `signature` (padded with `ANY`)."""
        generic = self.dispatcher.generic(generic_name)
        return self.table.lookup(generic_name, self._signature(generic, signature)) is not None

    def require_methods(self, generic_names, cls):
        """Declare that subclasses of `cls` must implement the given generics.

        For each generic that has no method for `cls`, register one that
        raises `NoApplicableMethodError`, saying that the method is required
        but was not implemented for the class of the argument. Methods for
        subclasses are more specific, so they are unaffected.
        """
        if isinstance(generic_names, str):
            generic_names = (generic_names,)
        cls = self.find_class(cls)
        for name in generic_names:
            generic = self.dispatcher.generic(name)
            signature = self._signature(generic, (cls.name,))
            if self.table.lookup(name, signature) is None:
                self.table.register(name, signature, _make_required_stub(self, name, cls.name))

    def list_methods(self, generic_name):
        """Return a list of `(handler, signature)`, in registration order."""
        return self.dispatcher.list_methods(generic_name)

    def format_methods(self, generic_name):
        """Format, as a string, a human-readable list of the methods of `generic_name`."""
        return self.dispatcher.format_methods(generic_name)

    def methods(self, generic_name):
        """Print, to stdout, a human-readable list of the methods of `generic_name`."""
        print(self.format_methods(generic_name))

def _make_required_stub(registry, generic_name, classname):
    def required(*args, **kwargs):
        actual = registry.class_of(args[0]).name if args else str(MISSING)
        raise NoApplicableMethodError(generic_name, (actual,),
                                      message=f'function "{generic_name}" is required for class "{classname}", '
                                              f'but was not implemented for class "{actual}"')
    required.__qualname__ = f"<required method {generic_name} of {classname}>"
    return required

# --------------------------------------------------------------------------------
# The process-wide default registry, and the module-level API operating on it.

_default_registry = Registry()

def current_registry():
    """Return the process-wide default registry."""
    return _default_registry

def reset():
    """Clear the default registry. See `Registry.reset`."""
    _default_registry.reset()

def _delegate(name):
    method = getattr(Registry, name)
    @wraps(method)
    def delegated(*args, **kwargs):
        return getattr(_default_registry, name)(*args, **kwargs)
    delegated.__qualname__ = name
    return delegated

define_class = _delegate("define_class")
construct = _delegate("construct")
revalidate = _delegate("revalidate")
define_generic = _delegate("define_generic")
register_method = _delegate("register_method")
method = _delegate("method")
invoke = _delegate("invoke")
selected_method = _delegate("selected_method")
has_method = _delegate("has_method")
require_methods = _delegate("require_methods")
list_methods = _delegate("list_methods")
format_methods = _delegate("format_methods")
methods = _delegate("methods")
find_class = _delegate("find_class")
class_of = _delegate("class_of")
is_a = _delegate("is_a")
precedence_of = _delegate("precedence_of")
