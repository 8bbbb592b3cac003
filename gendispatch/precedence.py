# -*- coding: utf-8; -*-
"""Class precedence lists.

The precedence list of a class is the order in which its ancestors are
searched for an applicable method: the class itself first, then its
ancestors, each exactly once, ending with the implicit root `DEFAULT`.

Two linearizations are available:

  - `"depth-first"` (the default): a depth-first, left-to-right walk of the
    parent graph, keeping each class at the position where it is *first*
    encountered. This is the search order of R's S3/S4 dispatch.

    **CAUTION**: this order is not monotonic. For diamond-shaped multiple
    inheritance a shared grandparent may be searched before a more specific
    class on another branch::

        A;  B(A);  C(A);  D(B, C)
        depth-first(D) == [D, B, A, C]    # A before C!
        c3(D)          == [D, B, C, A]

  - `"c3"`: the C3 linearization, as used by Python's own MRO. Guarantees
    that every class precedes all of its ancestors. Raises
    `InconsistentHierarchyError` when no such order exists.

The linearization is chosen per registry (see `gendispatch.registry.Registry`);
it is never upgraded implicitly.
"""

__all__ = ["depth_first", "c3", "linearizations", "default_linearization"]

from .errors import InconsistentHierarchyError
from .markers import DEFAULT

def depth_first(cls):
    """Return the depth-first, left-to-right, duplicate-free ancestor list of `cls`.

    `cls` itself comes first. `DEFAULT` is not included.
    """
    seen = set()
    out = []
    def walk(c):
        if c.name in seen:
            return
        seen.add(c.name)
        out.append(c)
        for parent in c.parents:
            walk(parent)
    walk(cls)
    return out

def c3(cls):
    """Return the C3 linearization of `cls`, `cls` itself first. `DEFAULT` is not included."""
    def merge(sequences):
        sequences = [list(s) for s in sequences if s]
        out = []
        while sequences:
            for seq in sequences:
                head = seq[0]
                if not any(head in s[1:] for s in sequences):
                    break
            else:
                names = ", ".join(s[0].name for s in sequences)
                raise InconsistentHierarchyError(f'cannot create a consistent precedence order for class "{cls.name}" '
                                                 f"(conflicting classes: {names})")
            out.append(head)
            sequences = [s[1:] if s[0] is head else s for s in sequences]
            sequences = [s for s in sequences if s]
        return out
    return [cls] + merge([c3(p) for p in cls.parents] + [list(cls.parents)])

linearizations = {"depth-first": depth_first,
                  "c3": c3}

# Used by registries created without an explicit `linearization` argument.
default_linearization = "depth-first"

def precedence_of(cls, linearization=None):
    """Return the precedence list of the class definition `cls`, as a tuple.

    The result starts with `cls` and ends with the `DEFAULT` marker.

    `linearization`: name of the algorithm, a key of `linearizations`.
                     If `None`, use the one configured on the class's
                     registry, falling back to `default_linearization`.

    The result computed with the class's configured algorithm is cached
    on `cls`; class definitions never change after registration.
    """
    configured = getattr(cls.registry, "linearization", None) or default_linearization
    if linearization is None or linearization == configured:
        if cls._precedence is None:
            cls._precedence = tuple(linearizations[configured](cls)) + (DEFAULT,)
        return cls._precedence
    try:
        algorithm = linearizations[linearization]
    except KeyError:
        raise ValueError(f"Unknown linearization {linearization!r}; valid: {list(linearizations)}") from None
    return tuple(algorithm(cls)) + (DEFAULT,)
