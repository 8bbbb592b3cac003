# -*- coding: utf-8; -*-

from unpythonic.syntax import macros, test, test_raises, fail, the  # noqa: F401
from unpythonic.test.fixtures import session, testset, returns_normally

import typing
import warnings

from ..dispatch import invoke_next
from ..errors import (DuplicateClassError, UnknownParentError, UnknownClassError,
                      AbstractInstantiationError, TypeMismatchError, ValidationError,
                      DispatchWarning)
from ..markers import ANY, DEFAULT
from ..registry import Registry

def runtests():
    with testset("defining classes"):
        r = Registry()
        Point = r.define_class("Point", slots={"x": "numeric", "y": "numeric"})
        test[r.find_class("Point") is Point]
        test[Point.slots == {"x": "numeric", "y": "numeric"}]
        test[Point.parents == ()]
        test[not Point.reference]
        test[r.precedence_of("Point") == (Point, DEFAULT)]

        test_raises[DuplicateClassError, r.define_class("Point")]
        test_raises[UnknownParentError, r.define_class("Point3", "NoSuchParent")]
        test_raises[UnknownClassError, r.find_class("NoSuchClass")]
        # duplicate names are also a ValueError, unknown names a LookupError
        test_raises[ValueError, r.define_class("Point")]
        test_raises[LookupError, r.find_class("NoSuchClass")]

        # the names with a special meaning in signatures are not available
        test_raises[ValueError, r.define_class("ANY")]
        test_raises[ValueError, r.define_class("default")]
        test_raises[ValueError, r.define_class("missing")]
        # nor are the built-in pseudo-classes
        test_raises[DuplicateClassError, r.define_class("integer")]

        # failed definitions leave nothing behind
        test_raises[UnknownClassError, r.find_class("Point3")]

    with testset("slot declarations"):
        r = Registry()
        Tagged = r.define_class("Tagged", slots=["tag", "payload"])
        test[Tagged.slots == {"tag": ANY, "payload": ANY}]
        test_raises[ValueError, r.define_class("Bad1", slots={"_private": "numeric"})]
        test_raises[ValueError, r.define_class("Bad2", slots={"not an identifier": "numeric"})]
        test_raises[ValueError, r.define_class("Bad3", slots=["classdef"])]
        test_raises[TypeError, r.define_class("Bad4", slots="x")]

        # A slot naming a class that does not exist (yet) is accepted, with a warning.
        with warnings.catch_warnings(record=True) as w:
            warnings.simplefilter("always")
            r.define_class("Node", slots={"next": "Node", "owner": "Tree"})
        test[len(w) == 1]
        test[issubclass(w[0].category, DispatchWarning)]
        test['"Tree"' in the[str(w[0].message)]]

    with testset("inheritance of slots and defaults"):
        r = Registry()
        r.define_class("Base", slots={"a": "numeric", "b": "character"}, defaults={"a": 1})
        r.define_class("Derived", "Base", slots={"b": ANY, "c": "list"}, defaults={"b": 42})
        d = r.construct("Derived")
        test[d.a == 1]
        test[d.b == 42]  # the nearer declaration wins
        test[d.c == []]
        test[set(r.find_class("Derived").all_slots()) == {"a", "b", "c"}]

        # The default value must conform to the slot.
        test_raises[TypeMismatchError, r.define_class("Broken", slots={"n": "numeric"}, defaults={"n": "one"})]
        test_raises[AttributeError, r.define_class("Broken2", slots={"n": "numeric"}, defaults={"m": 1})]

    with testset("empty values of slots"):
        r = Registry()
        r.define_class("Other")
        r.define_class("Bag", slots={"i": "integer", "d": "double", "s": "character",
                                     "flag": "logical", "items": "list", "anything": ANY,
                                     "other": "Other", "pytuple": tuple, "spec": typing.List[int]})
        b = r.construct("Bag")
        test[b.i == 0 and the[type(b.i)] is int]
        test[b.d == 0.0 and the[type(b.d)] is float]
        test[b.s == ""]
        test[b.flag is False]
        test[b.items == []]
        test[b.anything is None]
        test[b.other is None]
        test[b.pytuple == ()]
        test[b.spec is None]

        # default containers are not shared between instances
        r.define_class("Holder", slots={"items": "list"}, defaults={"items": []})
        h1 = r.construct("Holder")
        h2 = r.construct("Holder")
        test[the[h1.items] is not the[h2.items]]

    with testset("construction"):
        r = Registry()
        Point = r.define_class("Point", slots={"x": "numeric", "y": "numeric"})
        p = r.construct("Point", x=1, y=2.5)
        test[p.x == 1 and p.y == 2.5]
        test[p.classdef is Point]
        test[r.class_of(p) is Point]
        test[Point(x=3).x == 3]  # a ClassDef is also the constructor

        test_raises[TypeMismatchError, r.construct("Point", x="one")]
        test_raises[TypeError, r.construct("Point", x="one")]
        test_raises[AttributeError, r.construct("Point", z=0)]
        test_raises[UnknownClassError, r.construct("Nonexistent")]

        # subclasses conform to slots declared with their ancestor
        r.define_class("Shape", abstract=True)
        r.define_class("Circle", "Shape", slots={"r": "numeric"})
        r.define_class("Drawing", slots={"shape": "Shape"})
        c = r.construct("Circle", r=1.0)
        test[r.construct("Drawing", shape=c).shape is c]
        test_raises[TypeMismatchError, r.construct("Drawing", shape=42)]

        # Python types and typing specs work as slot types
        r.define_class("Typed", slots={"n": int, "names": typing.List[str], "maybe": typing.Optional[float]})
        test[returns_normally(r.construct("Typed", n=1, names=["a", "b"], maybe=None))]
        test_raises[TypeMismatchError, r.construct("Typed", names=["a", 2])]

    with testset("abstract classes"):
        r = Registry()
        r.define_class("Stack", abstract=True)
        test_raises[AbstractInstantiationError, r.construct("Stack")]
        test_raises[AbstractInstantiationError, r.construct("integer")]
        test_raises[AbstractInstantiationError, r.construct("numeric")]
        # subclasses of an abstract class are concrete unless declared otherwise
        r.define_class("VectorStack", "Stack", slots={"elements": "list"})
        test[returns_normally(r.construct("VectorStack"))]

    with testset("validation"):
        r = Registry()
        def positive(self):
            return self.n > 0
        def small(self):
            return True if self.n < 100 else f"n must be less than 100, got {self.n}"
        r.define_class("Positive", slots={"n": "numeric"}, defaults={"n": 1}, validator=positive)
        r.define_class("SmallPositive", "Positive", validator=small)
        test[r.construct("Positive", n=5).n == 5]
        test_raises[ValidationError, r.construct("Positive", n=-1)]
        test_raises[ValueError, r.construct("Positive", n=0)]

        # ancestors' validators run too, root-most first
        test_raises[ValidationError, r.construct("SmallPositive", n=-1)]
        try:
            r.construct("SmallPositive", n=1000)
        except ValidationError as err:
            test[err.classname == "SmallPositive"]
            test[the[err.reason] == "n must be less than 100, got 1000"]
            test["less than 100" in str(err)]
        else:
            fail["should have raised ValidationError"]  # pragma: no cover

        order = []
        def outer(self):
            order.append("outer")
            return True
        def inner(self):
            order.append("inner")
            return True
        r.define_class("Outer", validator=outer)
        r.define_class("Inner", "Outer", validator=inner)
        r.construct("Inner")
        test[order == ["outer", "inner"]]

    with testset("custom initialize"):
        r = Registry()
        r.define_class("Person", slots={"name": "character", "age": "numeric"})

        @r.method("initialize", "Person")
        def initialize_person(person, name="anonymous", age=0, **kwargs):
            # normalize the arguments, then let the default initialization fill the slots
            return invoke_next(person, name=name.title(), age=age, **kwargs)

        p = r.construct("Person", name="ada lovelace", age=36)
        test[p.name == "Ada Lovelace"]
        test[p.age == 36]
        test[r.construct("Person").name == "Anonymous"]

        r.define_class("Liar", slots={"n": "numeric"})
        r.register_method("initialize", "Liar", lambda obj, **kw: 42)
        test_raises[TypeError, r.construct("Liar"), "initialize must return an instance of the class"]

if __name__ == '__main__':  # pragma: no cover
    with session(__file__):
        runtests()
