# -*- coding: utf-8; -*-

from unpythonic.syntax import macros, test, test_raises, fail, the  # noqa: F401
from unpythonic.test.fixtures import session, testset, returns_normally

from ..dispatch import invoke_next, current_cursor, COMPLETED
from ..errors import NoApplicableMethodError, InvalidContinuationError, UnknownGenericError
from ..registry import Registry

def make_chain():
    r = Registry()
    r.define_class("A")
    r.define_class("B", "A")
    r.define_class("C", "B")
    return r

def runtests():
    with testset("single dispatch"):
        r = make_chain()
        r.define_generic("f")
        # Registration order does not matter; the most specific method wins.
        r.register_method("f", "A", lambda x: "A")
        r.register_method("f", "B", lambda x: "B")
        test[r.invoke("f", r.construct("B")) == "B"]
        test[r.invoke("f", r.construct("C")) == "B"]
        test[r.invoke("f", r.construct("A")) == "A"]

        r = make_chain()
        r.define_generic("f")
        r.register_method("f", "B", lambda x: "B")
        r.register_method("f", "A", lambda x: "A")
        test[r.invoke("f", r.construct("B")) == "B"]

    with testset("inheritance fallback"):
        r = make_chain()
        r.define_generic("g")
        r.register_method("g", "A", lambda x: "A")
        for name in ("A", "B", "C"):
            test[r.invoke("g", r.construct(the[name])) == "A"]

    with testset("continuation chain"):
        r = make_chain()
        visits = []
        def recorder(name):
            def handler(x):
                visits.append(name)
                return invoke_next()
            return handler
        def fallback(x):
            visits.append("default")
            return list(visits)
        r.define_generic("walk", default=fallback)
        r.register_method("walk", "A", recorder("A"))
        r.register_method("walk", "B", recorder("B"))
        r.register_method("walk", "C", recorder("C"))
        test[r.invoke("walk", r.construct("C")) == ["C", "B", "A", "default"]]
        test[visits == ["C", "B", "A", "default"]]

        # no method for B: skipped, no error
        r = make_chain()
        visits = []
        r.define_generic("walk", default=fallback)
        r.register_method("walk", "A", recorder("A"))
        r.register_method("walk", "C", recorder("C"))
        test[returns_normally(r.invoke("walk", r.construct("C")))]
        test[visits == ["C", "A", "default"]]

    with testset("continuation past the end of the chain"):
        r = make_chain()
        r.define_generic("h")
        r.register_method("h", "A", lambda x: invoke_next())
        with test_raises[NoApplicableMethodError, "the chain has no default handler"]:
            r.invoke("h", r.construct("C"))

    with testset("return value convention"):
        r = make_chain()
        r.define_generic("describe")
        r.register_method("describe", "A", lambda x: "a thing")
        r.register_method("describe", "C", lambda x: "a C, and " + invoke_next())
        test[r.invoke("describe", r.construct("C")) == "a C, and a thing"]

        # A method that ignores the rest of the chain decides the result.
        r.register_method("describe", "B", lambda x: invoke_next() and None)
        test[r.invoke("describe", r.construct("B")) is None]

    with testset("invoke_next with replaced arguments"):
        r = make_chain()
        r.define_generic("scale", arity=1)
        r.register_method("scale", "A", lambda x, k: k)
        r.register_method("scale", "B", lambda x, k: invoke_next(x, 10 * k))
        test[r.invoke("scale", r.construct("B"), 2) == 20]
        # Replaced arguments do not trigger a new dispatch: the next method is
        # still the next one for the original call.
        r.register_method("scale", "C", lambda x, k: invoke_next(r.construct("A"), k + 1))
        test[r.invoke("scale", r.construct("C"), 2) == 30]

    with testset("explicit cursor"):
        r = make_chain()
        seen = []
        def handler(x, *, cursor):
            seen.append((cursor.generic, cursor.classnames(), cursor.has_next()))
            return cursor.invoke_next()
        r.define_generic("e", default=lambda x: "bottom")
        r.register_method("e", "B", handler)
        test[r.invoke("e", r.construct("C")) == "bottom"]
        test[seen == [("e", ("C",), True)]]

        # The cursor is only valid while its call runs.
        escaped = []
        r.define_generic("leak")
        r.register_method("leak", "A", lambda x, cursor: escaped.append(cursor))
        r.invoke("leak", r.construct("A"))
        test[the[escaped[0].state] is COMPLETED]
        test[[entry.signature for entry in escaped[0].tried] == [("A",)]]
        test_raises[InvalidContinuationError, escaped[0].invoke_next()]

    with testset("invoke_next outside a method"):
        test_raises[InvalidContinuationError, invoke_next()]
        test[current_cursor() is None]

    with testset("nested calls keep separate cursors"):
        r = make_chain()
        r.define_generic("outer")
        r.define_generic("inner")
        r.register_method("inner", "A", lambda x: "inner A")
        r.register_method("inner", "B", lambda x: "inner B / " + invoke_next())
        r.register_method("outer", "A", lambda x: "outer A")
        r.register_method("outer", "B", lambda x: r.invoke("inner", x) + " | " + invoke_next())
        test[r.invoke("outer", r.construct("B")) == "inner B / inner A | outer A"]

    with testset("multiple dispatch"):
        r = Registry()
        r.define_generic("combine", arity=2)
        r.register_method("combine", ("numeric", "numeric"), lambda a, b: "numeric, numeric")
        r.register_method("combine", ("integer", "numeric"), lambda a, b: "integer, numeric")
        test[r.invoke("combine", 1, 2.5) == "integer, numeric"]
        test[r.invoke("combine", 1.5, 2.5) == "numeric, numeric"]
        test[r.invoke("combine", 1.5, 2) == "numeric, numeric"]

        # Summed distance; equal distance goes to the earlier registration.
        r.register_method("combine", ("numeric", "integer"), lambda a, b: "numeric, integer")
        test[r.invoke("combine", 1, 2) == "integer, numeric"]
        # Replacing a method keeps its place in the registration order.
        r.register_method("combine", ("integer", "numeric"), lambda a, b: "replaced")
        test[r.invoke("combine", 1, 2) == "replaced"]

    with testset("ANY and missing"):
        r = Registry()
        r.define_generic("opt", arity=2)
        r.register_method("opt", ("numeric", "missing"), lambda a: "one")
        r.register_method("opt", ("numeric", "ANY"), lambda a, b: "two")
        test[r.invoke("opt", 1) == "one"]
        test[r.invoke("opt", 1, "x") == "two"]
        test[r.invoke("opt", 1, None) == "two"]

        r = Registry()
        r.define_generic("opt", arity=2)
        r.register_method("opt", ("numeric",), lambda a, b=None: "padded with ANY")
        test_raises[NoApplicableMethodError, r.invoke("opt", 1), "ANY does not match a missing argument"]
        test[r.invoke("opt", 1, 2) == "padded with ANY"]

    with testset("no applicable method"):
        r = make_chain()
        r.define_generic("only_b")
        r.register_method("only_b", "B", lambda x: "B")
        try:
            r.invoke("only_b", r.construct("A"))
        except NoApplicableMethodError as err:
            test[err.generic == "only_b"]
            test[err.classes == ("A",)]
            test["only_b" in str(err) and '"A"' in the[str(err)]]
        else:
            fail["should have raised NoApplicableMethodError"]  # pragma: no cover
        # It is also a TypeError, like other failed dispatches in Python.
        test_raises[TypeError, r.invoke("only_b", 42)]
        test_raises[UnknownGenericError, r.invoke("no_such_generic", 42)]

    with testset("default handler"):
        r = make_chain()
        r.define_generic("size", default=lambda x: 0)
        r.register_method("size", "B", lambda x: 1 + invoke_next())
        test[r.invoke("size", r.construct("A")) == 0]
        test[r.invoke("size", r.construct("C")) == 1]

        # A method registered for the implicit root is an ordinary method.
        r.register_method("size", "default", lambda x: 100)
        test[r.invoke("size", "anything") == 100]
        test[r.invoke("size", r.construct("C")) == 101]

    with testset("keyword arguments pass through"):
        r = Registry()
        r.define_generic("greet")
        r.register_method("greet", "character", lambda name, *, punct="!": f"hello {name}{punct}")
        test[r.invoke("greet", "world") == "hello world!"]
        test[r.invoke("greet", "world", punct="?") == "hello world?"]

    with testset("decorator"):
        r = make_chain()

        @r.method("name_of", "A")
        def name_of_a(x):
            return "A"

        @r.method("name_of", "C")
        def name_of_c(x):
            return "C > " + invoke_next()

        test[name_of_a(None) == "A"]  # the decorator returns the function itself
        test[r.invoke("name_of", r.construct("C")) == "C > A"]
        test[r.selected_method("name_of", r.construct("B")) is name_of_a]
        test[r.selected_method("name_of", 42) is None]
        test[r.has_method("name_of", "A")]
        test[not r.has_method("name_of", "B")]

    with testset("required methods"):
        r = Registry()
        r.define_class("Stack", abstract=True)
        r.define_class("VectorStack", "Stack", slots={"elements": "list"})
        r.define_class("ListStack", "Stack", slots={"items": "list"})
        r.define_generic("pop")
        r.require_methods(["pop"], "Stack")
        r.register_method("pop", "VectorStack", lambda s: s.elements[0])
        test[r.invoke("pop", r.construct("VectorStack", elements=[1, 2])) == 1]
        with test_raises[NoApplicableMethodError, "ListStack does not implement pop"]:
            r.invoke("pop", r.construct("ListStack"))
        try:
            r.invoke("pop", r.construct("ListStack"))
        except NoApplicableMethodError as err:
            test["required" in the[str(err)] and "ListStack" in str(err)]
        test_raises[UnknownGenericError, r.require_methods("push", "Stack")]

    with testset("introspection"):
        r = make_chain()
        def f_a(x):
            return "A"
        def f_b(x):
            return "B"
        r.define_generic("f", default=lambda x: None)
        r.register_method("f", "A", f_a)
        r.register_method("f", "B", f_b)
        test[r.list_methods("f") == [(f_a, ("A",)), (f_b, ("B",))]]
        lines = r.format_methods("f").split("\n")
        test[lines[0] == 'Methods for generic "f" (arity 1):']
        test[lines[1].strip().startswith("f(A) -> ")]
        test[lines[2].strip().startswith("f(B) -> ")]
        test[lines[3].strip().startswith("default -> ")]

        r.define_generic("empty")
        test["<no methods registered>" in the[r.format_methods("empty")]]
        test_raises[UnknownGenericError, r.format_methods("nonexistent")]

if __name__ == '__main__':  # pragma: no cover
    with session(__file__):
        runtests()
