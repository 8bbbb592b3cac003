# -*- coding: utf-8; -*-
"""Simplistic run-time type checker for slot values.

Slot types may be given as Python types or as type specifications using the
`typing` stdlib module. This module checks a value against such a
specification; class names of the object system itself are handled by
`gendispatch.classes`, which delegates here for everything else.

Supported `typing` features:

  - `Any`
  - `TypeVar` (bare, or constrained)
  - `NewType` (any instance of the underlying actual type will match)
  - `Union[T1, ..., TN]`, `Optional[T]`
  - `Tuple`, `Tuple[T, ...]`, `Tuple[T1, T2, ..., TN]`
  - `List[T]`, `Set[T]`, `FrozenSet[T]`, `Sequence[T]`, `MutableSequence[T]`,
    `AbstractSet[T]`, `MutableSet[T]`, `Deque[T]`
  - `Dict[K, V]`, `Mapping[K, V]`, `MutableMapping[K, V]`
  - `Callable` (argument and return value types NOT checked)

Built-in generic aliases (`list[int]`, `dict[str, float]`) work the same.
"""

__all__ = ["isoftype"]

import collections.abc
import types
import typing

def _safeissubclass(cls, cls_or_tuple):
    """Like issubclass, but if `cls` is not a class, swallow the `TypeError` and return `False`."""
    try:
        return issubclass(cls, cls_or_tuple)
    except TypeError:
        return False

# Runtime container types that allow non-destructive iteration, in the order
# they must be tested: a mutable value also has the interface of its
# immutable counterpart.
_collection_types = (list, frozenset, set, collections.deque,
                     collections.abc.MutableSet,
                     collections.abc.Set,
                     collections.abc.MutableSequence,
                     collections.abc.Sequence)
_mapping_types = (dict,
                  collections.abc.MutableMapping,
                  collections.abc.Mapping)

def isoftype(value, T):
    """Perform a type check at run time.

    Like `isinstance`, but check `value` against a *type specification* `T`.

    Unlike a dispatcher, which must not guess an element type for an empty
    container, a slot may legitimately be empty; so an empty container
    matches any element type.

    Returns `True` if `value` matches the type specification; `False` if not.
    """
    if T is typing.Any:
        return True

    if isinstance(T, typing.TypeVar):
        if not T.__constraints__:  # just an abstract type name
            return True
        return any(isoftype(value, U) for U in T.__constraints__)

    supertype = getattr(T, "__supertype__", None)
    if supertype is not None:  # typing.NewType
        return isoftype(value, supertype)

    origin = typing.get_origin(T)
    args = typing.get_args(T)

    if origin is typing.Union or origin is types.UnionType:  # Union[X, Y], X | Y
        return any(isoftype(value, U) for U in args)
    if T is typing.Union:  # bare Union is empty, so no value can match
        return False

    if origin is tuple or T is typing.Tuple:
        if not isinstance(value, tuple):
            return False
        if not args:
            return True
        if len(args) == 2 and args[1] is Ellipsis:
            return all(isoftype(elt, args[0]) for elt in value)
        if len(value) != len(args):
            return False
        return all(isoftype(elt, U) for elt, U in zip(value, args))

    if origin in _mapping_types:
        if not isinstance(value, origin):
            return False
        if not args:
            return True
        K, V = args
        return all(isoftype(k, K) and isoftype(v, V) for k, v in value.items())

    if origin in _collection_types and T not in (str, bytes):
        if not isinstance(value, origin):
            return False
        if not args:
            return True
        U = args[0]
        return all(isoftype(elt, U) for elt in value)

    if origin is collections.abc.Callable or T is typing.Callable:
        return callable(value)

    if origin is not None:  # some other parameterized generic; check the container only
        return isoftype(value, origin)

    if getattr(T, "__module__", None) == "typing" and not _safeissubclass(T, object):
        raise NotImplementedError(f"This run-time type checker doesn't currently support {T!r}")

    return isinstance(value, T)  # T should be a concrete class, so delegate.
