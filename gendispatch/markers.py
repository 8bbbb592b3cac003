# -*- coding: utf-8; -*-
"""Interned, human-readable marker objects.

Markers are lightweight, process-wide unique values that compare by object
identity. They stand for the special positions of a method signature and for
the terminal entry of every precedence list::

    ANY      matches any supplied argument
    MISSING  matches an argument position that was not supplied in the call
    DEFAULT  the implicit root that ends every precedence list

A marker with the same name is always the same object, also across pickling::

    assert marker("ANY") is ANY
"""

__all__ = ["marker", "ANY", "MISSING", "DEFAULT"]

import threading

_markers = {}
_markers_update_lock = threading.Lock()

class marker:
    """A named singleton value, compared by identity.

    name: str
        The human-readable name. Constructing a marker with a name that is
        already in use returns the existing instance.
    """
    def __new__(cls, name):  # This covers unpickling, too.
        try:  # EAFP to eliminate TOCTTOU.
            return _markers[name]
        except KeyError:
            with _markers_update_lock:
                if name not in _markers:
                    _markers[name] = super().__new__(cls)
                return _markers[name]

    def __init__(self, name):
        self.name = name

    # Pickle support: pass the name to `__new__`, so unpickling interns.
    def __getnewargs__(self):
        return (self.name,)

    def __str__(self):
        return self.name
    def __repr__(self):
        return f'marker("{self.name}")'

ANY = marker("ANY")
MISSING = marker("missing")
DEFAULT = marker("default")
