# -*- coding: utf-8; -*-
"""Generic functions and the dispatcher.

Terminology:

  - A *generic function* is a named operation whose behavior is selected at
    call time by the classes of its first `arity` arguments.
  - Its individual implementations are *methods*, registered for a
    *signature* of classes (see `gendispatch.methods`).

**How a call is dispatched**:

  1. The classes of the first `arity` positional arguments are determined
     (see `Registry.class_of`). Positions beyond the supplied arguments are
     *missing*.
  2. All methods of the generic (and of its group generics, if any) that
     match are ranked, most specific first. This ordered list lives on a
     `DispatchCursor`, created for this call only.
  3. The first method is called with the call's arguments.
  4. If that method calls `invoke_next()`, the next method in the list is
     called, and so on. When the list is exhausted, the generic's default
     handler, if any, is called once as the last resort. Past that,
     `invoke_next()` raises `NoApplicableMethodError`.

If no method matches and there is no default handler, the call raises
`NoApplicableMethodError`, naming the generic and the classes involved.

**Return values**: `invoke_next()` returns the value returned by the rest of
the chain, so a method may build on it (`"Printer: " + invoke_next()`). The
result of the whole call is what the *first* method returns. A method that
ignores the value of `invoke_next()` and returns nothing makes the call
return `None`.

**Getting at the cursor**: a method that declares a parameter named
`cursor` receives the `DispatchCursor` of the call as `cursor=...`, and can
use `cursor.invoke_next()`, `cursor.generic`, `cursor.call_generic()`.
The module-level `invoke_next()` does the same for the innermost call
currently running a method in this thread, so that simple methods need not
declare the parameter.
"""

__all__ = ["Generic", "DispatchCursor", "Dispatcher",
           "invoke_next", "current_cursor",
           "SEARCHING", "INVOKING", "COMPLETED", "FAILED"]

import inspect
import threading

from .errors import NoApplicableMethodError, InvalidContinuationError, UnknownGenericError
from .markers import marker, DEFAULT, MISSING
from .methods import _accepts_cursor
from .ops import operators, apply_operator

SEARCHING = marker("searching")
INVOKING = marker("invoking")
COMPLETED = marker("completed")
FAILED = marker("failed")

# Each thread has its own stack of calls that are currently running a method.
_L = threading.local()
def _getstack():
    if not hasattr(_L, "stack"):
        _L.stack = []
    return _L.stack

class Generic:
    """A generic function.

    `name`:    str.
    `arity`:   number of leading positional arguments that take part in dispatch.
    `default`: handler called when no method applies, or `None`.
    `group`:   name of the group generic this one belongs to, or `None`.
    """
    def __init__(self, name, arity=1, default=None, group=None):
        if not (isinstance(arity, int) and arity >= 1):
            raise ValueError(f"arity must be a positive integer, got {arity!r}")
        self.name = name
        self.arity = arity
        self.default = default
        self.group = group

    def __repr__(self):
        return f'<generic "{self.name}"/{self.arity}>'

class DispatchCursor:
    """The dispatch state of one call of a generic function.

    Created when the call starts, and discarded when it completes.

    `generic`:    name of the generic function that was called.
    `args`, `kwargs`: the arguments of the call.
    `classes`:    tuple of `ClassDef` (or `MISSING`), one per dispatch position.
    `candidates`: list of the applicable `MethodEntry`s, most specific first.
    `tried`:      list of the `MethodEntry`s already invoked during this call.
    `state`:      one of `SEARCHING`, `INVOKING`, `COMPLETED`, `FAILED`.
    """
    def __init__(self, dispatcher, generic, args, kwargs, classes, candidates):
        self.dispatcher = dispatcher
        self.generic = generic.name
        self.default = generic.default
        self.args = args
        self.kwargs = kwargs
        self.classes = classes
        self.candidates = candidates
        self.tried = []
        self.state = SEARCHING
        self._position = 0
        self._default_used = False
        self._depth = 0  # how many methods of this call are currently running

    def __repr__(self):
        return f"<DispatchCursor {self.generic}({', '.join(self.classnames())}) {self.state}>"

    def classnames(self):
        """Return the names of the dispatch classes, `"missing"` for missing arguments."""
        return tuple(str(MISSING) if c is MISSING else c.name for c in self.classes)

    def has_next(self):
        """Return whether `invoke_next` would find something to call."""
        return (self._position < len(self.candidates) or
                (self.default is not None and not self._default_used))

    def _select(self):
        self.state = SEARCHING
        if self._position < len(self.candidates):
            entry = self.candidates[self._position]
            self._position += 1
            self.tried.append(entry)
            return entry.handler, entry.wants_cursor
        if self.default is not None and not self._default_used:
            self._default_used = True
            return self.default, _accepts_cursor(self.default)
        self.state = FAILED
        raise NoApplicableMethodError(self.generic, self.classnames())

    def _proceed(self, args, kwargs):
        handler, wants_cursor = self._select()
        if wants_cursor:
            kwargs = dict(kwargs, cursor=self)
        stack = _getstack()
        stack.append(self)
        self._depth += 1
        self.state = INVOKING
        ok = False
        try:
            result = handler(*args, **kwargs)
            ok = True
        finally:
            stack.pop()
            self._depth -= 1
            if self._depth == 0:
                self.state = COMPLETED if ok else FAILED
            else:  # back in the method that called invoke_next
                self.state = INVOKING
        return result

    def invoke_next(self, *args, **kwargs):
        """Call the next applicable method of this call, and return its result.

        With no arguments, pass the arguments of the original call. Otherwise
        pass the given arguments instead; the next method is still the next
        one for the original call, there is no new dispatch.

        Raises `InvalidContinuationError` if the call is no longer running, and
        `NoApplicableMethodError` if there is no next method.
        """
        if self._depth == 0:
            raise InvalidContinuationError(f'invoke_next() on a call of "{self.generic}" that is not running')
        if not args and not kwargs:
            args, kwargs = self.args, self.kwargs
        return self._proceed(args, kwargs)

    def call_generic(self, *args, **kwargs):
        """Call the generic function of this call again, on new arguments.

        For an operator generic (e.g. a group method invoked for `"*"`),
        apply that operator; plain Python values use Python's own operator.
        """
        if self.generic in operators:
            return apply_operator(self.generic, *args)
        return self.dispatcher.invoke(self.generic, *args, **kwargs)

def invoke_next(*args, **kwargs):
    """Call the next applicable method of the innermost running call.

    See `DispatchCursor.invoke_next`. Must be called from within a method
    that is currently running; otherwise raises `InvalidContinuationError`.
    """
    stack = _getstack()
    if not stack:
        raise InvalidContinuationError("invoke_next() called from outside a method")
    return stack[-1].invoke_next(*args, **kwargs)

def current_cursor():
    """Return the cursor of the innermost call running a method in this thread, or `None`."""
    stack = _getstack()
    return stack[-1] if stack else None

class Dispatcher:
    """Resolve and run calls of the generic functions of one registry."""
    def __init__(self, registry):
        self.registry = registry

    def generic(self, name):
        try:
            return self.registry.generics[name]
        except KeyError:
            raise UnknownGenericError(name) from None

    def dispatch_classes(self, generic, args):
        """Return the classes of the dispatch-relevant arguments; `MISSING` where not supplied."""
        return tuple(self.registry.class_of(args[k]) if k < len(args) else MISSING
                     for k in range(generic.arity))

    def candidates(self, generic, classes):
        """Return the applicable methods for a call, most specific first.

        Methods of the generic's group generics are included. On equal
        distance, a method of the generic itself precedes a group method.
        """
        precedences = tuple(MISSING if c is MISSING else
                            tuple(str(DEFAULT) if x is DEFAULT else x.name for x in c.precedence())
                            for c in classes)
        ranked = []
        name, depth = generic.name, 0
        while name is not None:
            for distance, serial, entry in self.registry.table.ranked(name, precedences):
                ranked.append((distance, depth, serial, entry))
            group = self.registry.generics.get(name, None)
            name = group.group if group is not None else None
            depth += 1
        ranked.sort(key=lambda item: item[:3])
        return [entry for _, _, _, entry in ranked]

    def cursor(self, name, args, kwargs=None):
        """Create the `DispatchCursor` for calling `name` with `args` and `kwargs`."""
        generic = self.generic(name)
        classes = self.dispatch_classes(generic, args)
        return DispatchCursor(self, generic, tuple(args), dict(kwargs or {}),
                              classes, self.candidates(generic, classes))

    def invoke(self, name, /, *args, **kwargs):
        """Call the generic function `name` with the given arguments."""
        return self.cursor(name, args, kwargs)._proceed(args, kwargs)

    def selected_method(self, name, *args):
        """Return the handler that a call of `name` with `args` would run first, or `None`."""
        if name not in self.registry.generics:
            return None
        c = self.cursor(name, args)
        if c.candidates:
            return c.candidates[0].handler
        return c.default

    # --------------------------------------------------------------------------------
    # Introspection

    def list_methods(self, name):
        """Return a list of `(handler, signature)` for the methods of `name`, in registration order."""
        self.generic(name)
        return [(e.handler, e.signature) for e in self.registry.table.entries(name)]

    def format_methods(self, name):
        """Format, as a string, a human-readable list of the methods of `name`."""
        generic = self.generic(name)
        lines = [f"  {name}({', '.join(str(x) for x in sig)}) -> {_format_callable(handler)}"
                 for handler, sig in self.list_methods(name)]
        if generic.default is not None:
            lines.append(f"  default -> {_format_callable(generic.default)}")
        if not lines:
            lines.append("  <no methods registered>")
        methods_str = "\n".join(lines)
        return f'Methods for generic "{name}" (arity {generic.arity}):\n{methods_str}'

def _format_callable(thecallable):
    """Format, as a string, a human-readable description of a callable.

    Includes the source filename and starting line number, when available.
    """
    name = getattr(thecallable, "__qualname__", None) or repr(thecallable)
    try:
        filename = inspect.getsourcefile(thecallable)
        _, firstlineno = inspect.getsourcelines(thecallable)
    except (OSError, TypeError):  # builtins, or no source available (e.g. REPL)
        return name
    return f"{name} from {filename}:{firstlineno}"
