# -*- coding: utf-8; -*-
"""Exception and warning types of the object system.

Every error is a subclass of `ObjectSystemError`, and additionally of the
built-in exception type closest in meaning, so callers may catch either.
A failed dispatch is a `TypeError`, as it is for Python's own
`functools.singledispatch`.
"""

__all__ = ["ObjectSystemError",
           "DuplicateClassError", "UnknownParentError", "UnknownClassError",
           "InconsistentHierarchyError",
           "AbstractInstantiationError", "TypeMismatchError", "ValidationError",
           "ReadOnlyFieldError",
           "UnknownGenericError", "NoApplicableMethodError", "InvalidContinuationError",
           "DispatchWarning"]

class ObjectSystemError(Exception):
    """Base class for all errors raised by `gendispatch`."""

# --------------------------------------------------------------------------------
# Class registry

class DuplicateClassError(ObjectSystemError, ValueError):
    """Raised when defining a class whose name is already registered."""
    def __init__(self, name):
        super().__init__(f'class "{name}" is already defined')
        self.name = name

class UnknownParentError(ObjectSystemError, LookupError):
    """Raised when a class names a parent that has not been defined yet."""
    def __init__(self, name, parent):
        super().__init__(f'class "{name}": no definition was found for superclass "{parent}"')
        self.name = name
        self.parent = parent

class UnknownClassError(ObjectSystemError, LookupError):
    """Raised when looking up a class name that has not been defined."""
    def __init__(self, name):
        super().__init__(f'undefined class "{name}"')
        self.name = name

class InconsistentHierarchyError(ObjectSystemError, TypeError):
    """Raised by C3 linearization when no consistent precedence order exists."""

# --------------------------------------------------------------------------------
# Instances

class AbstractInstantiationError(ObjectSystemError, TypeError):
    """Raised when constructing an abstract (virtual) class."""
    def __init__(self, name):
        super().__init__(f'cannot allocate an object of a virtual class ("{name}")')
        self.name = name

class TypeMismatchError(ObjectSystemError, TypeError):
    """Raised when a slot value does not conform to the slot's declared type."""
    def __init__(self, classname, slot, value, expected):
        super().__init__(f'invalid class "{classname}" object: invalid object for slot "{slot}": '
                         f'got {value!r}, should be or extend {expected}')
        self.classname = classname
        self.slot = slot
        self.value = value
        self.expected = expected

class ValidationError(ObjectSystemError, ValueError):
    """Raised when a validator rejects the field state of an instance."""
    def __init__(self, classname, reason=None):
        msg = f'invalid class "{classname}" object'
        if reason:
            msg += f": {reason}"
        super().__init__(msg)
        self.classname = classname
        self.reason = reason

class ReadOnlyFieldError(ObjectSystemError, AttributeError):
    """Raised on in-place mutation of a value instance, or of a read-only binding."""

# --------------------------------------------------------------------------------
# Dispatch

class UnknownGenericError(ObjectSystemError, LookupError):
    """Raised when invoking a generic function that has not been defined."""
    def __init__(self, name):
        super().__init__(f'could not find generic function "{name}"')
        self.name = name

class NoApplicableMethodError(ObjectSystemError, TypeError):
    """Raised when dispatch finds no applicable method and no default.

    `generic`: name of the generic function.
    `classes`: tuple of class names, one per dispatch-relevant argument.
    """
    def __init__(self, generic, classes, message=None):
        if message is None:
            sig = ", ".join(f'"{c}"' for c in classes)
            message = f'unable to find an inherited method for function "{generic}" for signature ({sig})'
        super().__init__(message)
        self.generic = generic
        self.classes = tuple(classes)

class InvalidContinuationError(ObjectSystemError, RuntimeError):
    """Raised when `invoke_next` is called outside an active dispatch."""

class DispatchWarning(UserWarning):
    """Category of the non-fatal diagnostics emitted by `gendispatch`."""
