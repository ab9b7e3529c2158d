# SPDX-PackageName: doubledispatch
# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: Copyright the doubledispatch contributors.

"""Tests for doubledispatch._internal._candidates."""

from typing import Annotated, Any, Generic, Optional, TypeVar
from typing_extensions import overload

import unittest
from unittest import mock

from doubledispatch import errors
from doubledispatch._internal import _candidates
from doubledispatch._internal._candidates import (
    CandidateKind,
    CandidateTable,
    build_table,
)


_T = TypeVar("_T")


class Shape:
    pass


class Circle(Shape):
    pass


class Square(Shape):
    pass


class Box(Generic[_T]):
    pass


class Renderer:
    @overload
    def render(self, shape: Circle) -> str:
        return "circle"

    @overload
    def render(self, shape: Square) -> str:
        return "square"

    def render(self, shape: Shape) -> str:
        raise NotImplementedError

    def clear(self, shape: Shape) -> None:
        pass

    def describe(self, shape: "Circle") -> str:
        return "described"

    def untyped_result(self, shape: Shape):  # type: ignore [no-untyped-def]
        return "untyped"

    def untyped_param(self, shape) -> str:  # type: ignore [no-untyped-def]
        return "never"

    def two_params(self, shape: Shape, other: Shape) -> str:
        return "never"

    def no_params(self) -> str:
        return "never"

    def star_args(self, *shapes: Shape) -> str:
        return "never"

    def keyword_only(self, *, shape: Shape) -> str:
        return "never"

    def generic_param(self, box: Box[int]) -> str:
        return "never"

    def typevar_param(self, value: _T) -> str:
        return "never"

    def union_param(self, value: int | str) -> str:
        return "union"

    def optional_param(self, value: Optional[Circle]) -> str:
        return "optional"

    def any_param(self, value: Any) -> str:
        return "any"

    def annotated_param(self, value: Annotated[Square, "meta"]) -> str:
        return "annotated"

    def unresolvable(self, value: "NoSuchType") -> str:  # type: ignore [name-defined]  # noqa: F821
        return "never"

    def _private(self, shape: Shape) -> str:
        return "private"

    def __eq__(self, other: object) -> bool:
        return self is other

    __hash__ = object.__hash__

    @staticmethod
    def static_op(shape: Shape) -> str:
        return "static"

    @classmethod
    def class_op(cls, shape: Shape) -> str:
        return "class"

    @property
    def prop(self) -> str:
        return "prop"


class DerivedRenderer(Renderer):
    @overload
    def render(self, shape: Square) -> str:
        return "derived square"

    def render(self, shape: Shape) -> str:
        raise NotImplementedError


class WrappingRenderer(Renderer):
    def render(self, shape: Shape) -> str:
        return f"wrapped {super().render(shape)}"

    def clear(self, shape: Circle) -> None:  # type: ignore [override]
        pass


class Duplicates:
    @overload
    def run(self, shape: Circle) -> str:
        return "first"

    @overload
    def run(self, shape: Circle) -> str:
        return "second"

    def run(self, shape: Shape) -> str:
        raise NotImplementedError


class Operations:
    @overload
    @staticmethod
    def parse(value: int) -> str:
        return f"int {value}"

    @overload
    @staticmethod
    def parse(value: str) -> str:
        return f"str {value}"

    @staticmethod
    def parse(value: object) -> str:
        raise NotImplementedError

    @classmethod
    def make(cls, shape: Shape) -> str:
        return f"{cls.__name__} made"

    def instance_only(self, shape: Shape) -> str:
        return "never"


class Empty:
    pass


def _names(table: CandidateTable) -> set[str]:
    return set(table.names())


class TestInstanceTable(unittest.TestCase):
    def setUp(self) -> None:
        self.table = build_table(Renderer())

    def test_overloads_are_candidates(self) -> None:
        entries = self.table.entries("render", function=True)
        self.assertEqual(set(entries), {Circle, Square})
        # the implementation is the entry point, not a candidate
        self.assertNotIn(Shape, entries)

    def test_plain_method_is_candidate(self) -> None:
        (candidate,) = self.table.lookup("clear", Shape, function=False)
        self.assertEqual(candidate.name, "clear")
        self.assertIsNone(candidate.return_type)
        self.assertTrue(candidate.is_procedure)
        self.assertIs(candidate.owner, Renderer)
        self.assertIs(candidate.kind, CandidateKind.INSTANCE)

    def test_procedures_and_functions_are_partitioned(self) -> None:
        self.assertEqual(self.table.lookup("clear", Shape, function=True), ())
        self.assertEqual(
            self.table.lookup("render", Circle, function=False), ()
        )

    def test_unannotated_result_in_both_partitions(self) -> None:
        (proc,) = self.table.lookup("untyped_result", Shape, function=False)
        (func,) = self.table.lookup("untyped_result", Shape, function=True)
        self.assertIs(proc, func)
        self.assertIs(func.return_type, Any)

    def test_string_annotation_resolved(self) -> None:
        (candidate,) = self.table.lookup("describe", Circle, function=True)
        self.assertIs(candidate.param_type, Circle)

    def test_ineligible_methods_skipped(self) -> None:
        names = _names(self.table)
        for name in (
            "untyped_param",
            "two_params",
            "no_params",
            "star_args",
            "keyword_only",
            "generic_param",
            "typevar_param",
            "unresolvable",
            "prop",
        ):
            with self.subTest(name=name):
                self.assertNotIn(name, names)

    def test_static_and_class_methods_not_on_instance_surface(self) -> None:
        names = _names(self.table)
        self.assertNotIn("static_op", names)
        self.assertNotIn("class_op", names)

    def test_union_registers_each_member(self) -> None:
        entries = self.table.entries("union_param", function=True)
        self.assertEqual(set(entries), {int, str})
        self.assertIs(entries[int][0].func, entries[str][0].func)
        self.assertIs(entries[int][0].param_type, int)

    def test_optional_skips_none(self) -> None:
        entries = self.table.entries("optional_param", function=True)
        self.assertEqual(set(entries), {Circle})

    def test_any_keys_on_object(self) -> None:
        entries = self.table.entries("any_param", function=True)
        self.assertEqual(set(entries), {object})

    def test_annotated_is_unwrapped(self) -> None:
        entries = self.table.entries("annotated_param", function=True)
        self.assertEqual(set(entries), {Square})

    def test_private_excluded_by_default(self) -> None:
        self.assertNotIn("_private", _names(self.table))

    def test_include_private(self) -> None:
        table = build_table(Renderer(), include_private=True)
        self.assertIn("_private", _names(table))
        # structural equality against object is never a candidate
        self.assertNotIn("__eq__", _names(table))

    def test_include_private_from_config(self) -> None:
        with mock.patch.object(
            _candidates._config, "INCLUDE_PRIVATE", True
        ):
            table = build_table(Renderer())
        self.assertIn("_private", _names(table))

    def test_overloads_accumulate_along_mro(self) -> None:
        table = build_table(DerivedRenderer())
        entries = table.entries("render", function=True)
        self.assertEqual(set(entries), {Circle, Square})
        # the derived overload shadows the base one with the same signature
        (square,) = entries[Square]
        self.assertIs(square.owner, DerivedRenderer)
        self.assertEqual(
            square.invoke(DerivedRenderer(), Square()), "derived square"
        )
        (circle,) = entries[Circle]
        self.assertIs(circle.owner, Renderer)
        self.assertIn("clear", _names(table))

    def test_overridden_implementation_is_not_a_candidate(self) -> None:
        table = build_table(WrappingRenderer())
        entries = table.entries("render", function=True)
        self.assertEqual(set(entries), {Circle, Square})
        self.assertTrue(
            all(c.owner is Renderer for c in table if c.name == "render")
        )

    def test_most_derived_plain_method_wins(self) -> None:
        table = build_table(WrappingRenderer())
        entries = table.entries("clear", function=False)
        self.assertEqual(set(entries), {Circle})
        (candidate,) = entries[Circle]
        self.assertIs(candidate.owner, WrappingRenderer)

    def test_first_registration_wins(self) -> None:
        table = build_table(Duplicates())
        (candidate,) = table.lookup("run", Circle, function=True)
        self.assertEqual(candidate.invoke(Duplicates(), Circle()), "first")

    def test_skip_owners(self) -> None:
        table = build_table(DerivedRenderer(), skip_owners={Renderer})
        self.assertEqual(_names(table), {"render"})

    def test_rebuild_is_equivalent(self) -> None:
        subject = Renderer()
        first = build_table(subject)
        second = build_table(subject)
        self.assertEqual(first, second)
        self.assertEqual(list(first), list(second))
        self.assertEqual(len(first), len(second))

    def test_empty_subject(self) -> None:
        table = build_table(Empty())
        self.assertFalse(table)
        self.assertEqual(len(table), 0)
        self.assertEqual(table.entries("anything", function=False), {})

    def test_none_subject(self) -> None:
        with self.assertRaises(errors.InvalidArgumentError):
            build_table(None)

    def test_build_is_logged(self) -> None:
        with self.assertLogs("doubledispatch", level="DEBUG") as cm:
            build_table(Renderer())
        self.assertTrue(
            any("built dispatch table" in line for line in cm.output)
        )


class TestTypeTable(unittest.TestCase):
    def test_static_overloads(self) -> None:
        table = build_table(Operations)
        entries = table.entries("parse", function=True)
        self.assertEqual(set(entries), {int, str})
        self.assertIs(entries[int][0].kind, CandidateKind.STATIC)
        self.assertEqual(entries[int][0].invoke(Operations, 1), "int 1")

    def test_classmethod(self) -> None:
        table = build_table(Operations)
        (candidate,) = table.lookup("make", Shape, function=True)
        self.assertIs(candidate.kind, CandidateKind.CLASS)
        self.assertEqual(candidate.invoke(Operations, Shape()), "Operations made")
        self.assertEqual(candidate.bind(Operations)(Shape()), "Operations made")

    def test_instance_methods_not_on_type_surface(self) -> None:
        self.assertNotIn("instance_only", build_table(Operations).names())

    def test_type_tables_are_cached(self) -> None:
        self.assertIs(build_table(Operations), build_table(Operations))


class TestCandidate(unittest.TestCase):
    def test_bind_instance(self) -> None:
        renderer = Renderer()
        (candidate,) = build_table(renderer).lookup(
            "render", Circle, function=True
        )
        bound = candidate.bind(renderer)
        self.assertIs(bound.__self__, renderer)
        self.assertEqual(bound(Circle()), "circle")

    def test_candidates_are_immutable(self) -> None:
        (candidate,) = build_table(Renderer()).lookup(
            "clear", Shape, function=False
        )
        with self.assertRaises(AttributeError):
            candidate.name = "other"  # type: ignore [misc]
