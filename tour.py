#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Generic functions for Python.

Tour of the features.
"""

from gendispatch import define_class, define_generic, method, invoke, invoke_next, \
                        construct, update, clone, revalidate, require_methods, \
                        methods, reset, \
                        NoApplicableMethodError, ValidationError, ReadOnlyFieldError, \
                        AbstractInstantiationError, InvalidContinuationError

def report(err):
    print(f"    {type(err).__name__}: {err}")

def main():
    # classes with value semantics
    #
    reset()
    define_class("Stack", abstract=True)
    VectorStack = define_class("VectorStack", "Stack", slots={"elements": "list"})

    define_generic("top")
    define_generic("pop")
    define_generic("push", arity=2)
    define_generic("is_empty")

    @method("top", "VectorStack")
    def top(s):
        return s.elements[0]

    @method("pop", "VectorStack")
    def pop(s):
        return update(s, elements=s.elements[1:])

    @method("push", "VectorStack")
    def push(s, element):
        return update(s, elements=[element] + s.elements)

    @method("is_empty", "VectorStack")
    def is_empty(s):
        return not s.elements

    s0 = VectorStack()
    s1 = invoke("push", s0, 1)
    s2 = invoke("push", s1, 2)
    assert invoke("top", s2) == 2
    assert invoke("top", invoke("pop", s2)) == 1
    assert invoke("is_empty", s0)  # pushing made new stacks, s0 is still empty
    print(s2)  # VectorStack(elements=[2, 1])

    try:
        s2.elements = []  # value instances cannot be modified in place
    except ReadOnlyFieldError as err:
        report(err)

    try:
        construct("Stack")
    except AbstractInstantiationError as err:
        report(err)

    # interfaces
    #
    require_methods(["top", "pop", "push", "is_empty"], "Stack")
    define_class("ListStack", "Stack", slots={"items": "list"})
    try:
        invoke("top", construct("ListStack"))
    except NoApplicableMethodError as err:
        report(err)

    # inheritance, and the next method
    #
    define_class("Printer", slots={"name": "character"})
    define_class("ColorPrinter", "Printer")
    define_class("PhotoPrinter", "ColorPrinter")

    @method("describe", "Printer")
    def describe_printer(p):
        return f"printer {p.name}"

    @method("describe", "ColorPrinter")
    def describe_color(p):
        return "color " + invoke_next()

    @method("describe", "PhotoPrinter")
    def describe_photo(p):
        return "photo-quality " + invoke_next()

    assert invoke("describe", construct("PhotoPrinter", name="P1")) == "photo-quality color printer P1"
    methods("describe")

    try:
        invoke_next()  # only valid inside a method
    except InvalidContinuationError as err:
        report(err)

    try:
        invoke("describe", 42)
    except NoApplicableMethodError as err:
        report(err)

    # multiple dispatch; plain Python values dispatch on built-in classes
    #
    define_generic("combine", arity=2)

    @method("combine", "numeric", "numeric")
    def combine_numbers(a, b):
        return "two numbers"

    @method("combine", "integer", "numeric")
    def combine_integer_first(a, b):
        return "an integer, then a number"

    @method("combine", "character", "missing")
    def combine_string(a):
        return "just a string"

    assert invoke("combine", 1, 2.0) == "an integer, then a number"
    assert invoke("combine", 1.0, 2) == "two numbers"
    assert invoke("combine", "hello") == "just a string"

    # reference semantics, validation, cloning
    #
    define_class("Account", slots={"owner": "character", "balance": "numeric"}, reference=True,
                 validator=lambda self: self.balance >= 0 or "balance must not be negative")
    a = construct("Account", owner="ada", balance=100)
    b = a
    b.balance = 50
    assert a.balance == 50  # same account

    c = clone(a)
    c.balance = 0
    assert a.balance == 50  # a different account

    try:
        construct("Account", owner="bob", balance=-1)
    except ValidationError as err:
        report(err)

    a.balance = -10  # not checked yet...
    try:
        revalidate(a)  # ...until now
    except ValidationError as err:
        report(err)

    # operators
    #
    define_class("Modulus", slots={"value": "integer", "n": "integer"})

    @method("Arith", "Modulus", "Modulus")
    def modular_arithmetic(x, y, *, cursor):
        return construct("Modulus", value=cursor.call_generic(x.value, y.value) % x.n, n=x.n)

    x = construct("Modulus", value=5, n=7)
    y = construct("Modulus", value=4, n=7)
    assert (x + y).value == 2
    assert (x * y).value == 6
    print(x - y)  # Modulus(value=1, n=7)

    # member methods, the "super" call, and active bindings
    #
    def deposit(self, amount):
        self.balance = self.balance + amount
        return self

    def logged_deposit(self, amount):
        print(f"    depositing {amount}")
        return invoke_next()

    define_class("Wallet", slots={"balance": "numeric"}, reference=True,
                 methods={"deposit": deposit},
                 active={"cents": lambda self, *value: round(self.balance * 100)})
    define_class("LoggedWallet", "Wallet", methods={"deposit": logged_deposit})
    w = construct("LoggedWallet")
    w.deposit(1.5).deposit(2)
    assert w.balance == 3.5
    assert w.cents == 350

    reset()

if __name__ == '__main__':
    main()
