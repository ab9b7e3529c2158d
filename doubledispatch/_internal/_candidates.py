# SPDX-PackageName: doubledispatch
# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: Copyright the doubledispatch contributors.

"""Discovery of dispatch candidates on a subject.

A subject exposes candidates under a method name.  Python binds a name
only once per class, so several candidates under one name are declared
the same way static checkers expect them: as ``@overload`` signatures
that carry real bodies.  Such overloads are recovered at runtime with
``get_overloads()``; the implementation they decorate is the base-typed
entry point and is never a candidate itself.  A name without overloads
contributes its single function.

Instance subjects contribute the plain methods reachable through their
class.  Overloads accumulate along the MRO: a subclass adding overloads
under an inherited name keeps the base class' overloads reachable, and
shadows one only by declaring the same parameter and result types.  A
subclass overriding just the implementation (say, to log before calling
``super()``) adds no candidate.

Classes used as subjects ("type-level" dispatch) contribute the
``staticmethod`` and ``classmethod`` operations declared directly on
them.
"""

from __future__ import annotations

from typing import (
    TYPE_CHECKING,
    Any,
    NamedTuple,
)
from typing_extensions import get_overloads

import dataclasses
import enum
import inspect
import logging
import types

from doubledispatch import errors
from doubledispatch._internal import _config
from doubledispatch._internal import _typing_eval
from doubledispatch._internal import _typing_inspect
from doubledispatch._internal._utils import Unspecified, type_repr

if TYPE_CHECKING:
    from collections.abc import Collection, Iterator, Mapping


logger = logging.getLogger("doubledispatch")

_EQUALITY_OPERATIONS = frozenset({"__eq__", "__ne__"})


class CandidateKind(enum.Enum):
    INSTANCE = "instance"
    CLASS = "class"
    STATIC = "static"


@dataclasses.dataclass(frozen=True)
class Candidate:
    """One eligible callable registered in a subject's table."""

    owner: type[Any]
    name: str
    param_type: type[Any]
    #: None for procedures, ``typing.Any`` when the result is not
    #: annotated.
    return_type: Any
    func: types.FunctionType = dataclasses.field(repr=False)
    kind: CandidateKind = CandidateKind.INSTANCE

    @property
    def is_procedure(self) -> bool:
        return self.return_type is None

    def bind(self, subject: Any) -> Any:
        """Return the callable taking the dispatched argument."""
        if self.kind is CandidateKind.STATIC:
            return self.func
        elif self.kind is CandidateKind.CLASS:
            cls = subject if isinstance(subject, type) else type(subject)
            return types.MethodType(self.func, cls)
        else:
            return types.MethodType(self.func, subject)

    def invoke(self, subject: Any, argument: Any) -> Any:
        if self.kind is CandidateKind.STATIC:
            return self.func(argument)
        elif self.kind is CandidateKind.CLASS:
            cls = subject if isinstance(subject, type) else type(subject)
            return self.func(cls, argument)
        else:
            return self.func(subject, argument)


class CandidateTable:
    """Mapping of (name, parameter type) to candidates.

    Procedures and functions are kept apart.  Several functions may share
    a name and parameter type as long as their declared return types
    differ; the first registration of each (name, parameter type, return
    type) wins and is never overwritten.
    """

    __slots__ = ("_functions", "_procedures")

    def __init__(self) -> None:
        self._procedures: dict[str, dict[type, tuple[Candidate, ...]]] = {}
        self._functions: dict[str, dict[type, tuple[Candidate, ...]]] = {}

    def add(self, candidate: Candidate, *, function: bool) -> bool:
        partition = self._functions if function else self._procedures
        by_type = partition.setdefault(candidate.name, {})
        existing = by_type.get(candidate.param_type, ())
        for other in existing:
            if other.return_type == candidate.return_type:
                return False
        by_type[candidate.param_type] = (*existing, candidate)
        return True

    def entries(
        self,
        name: str,
        *,
        function: bool,
    ) -> Mapping[type, tuple[Candidate, ...]]:
        partition = self._functions if function else self._procedures
        return partition.get(name, {})

    def lookup(
        self,
        name: str,
        tp: type,
        *,
        function: bool,
    ) -> tuple[Candidate, ...]:
        return self.entries(name, function=function).get(tp, ())

    def names(self) -> frozenset[str]:
        return frozenset(self._procedures) | frozenset(self._functions)

    def procedures(self) -> Iterator[Candidate]:
        for by_type in self._procedures.values():
            for candidates in by_type.values():
                yield from candidates

    def functions(self) -> Iterator[Candidate]:
        for by_type in self._functions.values():
            for candidates in by_type.values():
                yield from candidates

    def __iter__(self) -> Iterator[Candidate]:
        seen: set[Candidate] = set()
        for candidate in (*self.procedures(), *self.functions()):
            if candidate not in seen:
                seen.add(candidate)
                yield candidate

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def __bool__(self) -> bool:
        return bool(self._procedures or self._functions)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CandidateTable):
            return NotImplemented
        return (
            self._procedures == other._procedures
            and self._functions == other._functions
        )

    __hash__ = None  # type: ignore [assignment]

    def __repr__(self) -> str:
        return f"<{type(self).__name__} names={sorted(self.names())!r}>"


class _Signature(NamedTuple):
    param_types: tuple[type, ...]
    return_type: Any
    procedure: bool
    function: bool


def _is_public(name: str) -> bool:
    return not name.startswith("_")


def _annotation_namespace(
    func: Any,
    owner: type[Any],
) -> tuple[Mapping[str, Any], Mapping[str, Any]]:
    globalns = getattr(inspect.unwrap(func), "__globals__", {})
    return globalns, {owner.__name__: owner}


def _param_keys(tp: Any) -> tuple[type, ...] | None:
    if tp is Any or tp is object:
        return (object,)
    elif _typing_inspect.is_union_type(tp):
        keys: list[type] = []
        for member in _typing_inspect.union_members(tp):
            if _typing_inspect.is_none_type(member):
                # None never reaches a candidate
                continue
            member_keys = _param_keys(member)
            if member_keys is None:
                return None
            keys.extend(member_keys)
        return tuple(dict.fromkeys(keys)) or None
    elif _typing_inspect.is_type_var(tp) or _typing_inspect.is_generic_alias(tp):
        return None
    elif _typing_inspect.is_class(tp):
        return (tp,)
    else:
        return None


def _return_partitions(
    annotation: Any,
    globalns: Mapping[str, Any],
    localns: Mapping[str, Any],
) -> tuple[Any, bool, bool]:
    if annotation is inspect.Signature.empty:
        return Any, True, True

    rt = _typing_eval.try_resolve_type(
        annotation,
        globals=globalns,
        locals=localns,
        default=Unspecified,
    )
    if rt is Unspecified:
        return Any, False, True
    elif _typing_inspect.is_bottom_type(rt):
        return None, True, False
    else:
        return rt, False, True


def _signature_of(
    func: Any,
    kind: CandidateKind,
    owner: type[Any],
) -> _Signature | str:
    """Return the dispatch signature of *func* or the reason it is
    ineligible."""
    try:
        sig = inspect.signature(func)
    except (TypeError, ValueError):
        return "signature is not introspectable"

    params = list(sig.parameters.values())
    if kind is not CandidateKind.STATIC:
        if not params or params[0].kind not in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
        ):
            return "no implicit receiver parameter"
        params = params[1:]

    if len(params) != 1:
        return f"takes {len(params)} parameters, not 1"

    param = params[0]
    if param.kind not in (
        inspect.Parameter.POSITIONAL_ONLY,
        inspect.Parameter.POSITIONAL_OR_KEYWORD,
    ):
        return "parameter is not positional"
    if param.annotation is inspect.Parameter.empty:
        return "parameter is not annotated"

    globalns, localns = _annotation_namespace(func, owner)
    ptype = _typing_eval.try_resolve_type(
        param.annotation,
        globals=globalns,
        locals=localns,
        default=Unspecified,
    )
    if ptype is Unspecified:
        return f"cannot resolve parameter annotation {param.annotation!r}"

    keys = _param_keys(ptype)
    if keys is None:
        return f"parameter type {type_repr(ptype)} is not a concrete class"

    rt, procedure, function = _return_partitions(
        sig.return_annotation, globalns, localns
    )
    return _Signature(keys, rt, procedure, function)


def _kind_of(attr: Any, default: CandidateKind) -> CandidateKind:
    if isinstance(attr, staticmethod):
        return CandidateKind.STATIC
    elif isinstance(attr, classmethod):
        return CandidateKind.CLASS
    else:
        return default


def _overload_set(
    attr: Any,
    kind: CandidateKind,
) -> Iterator[tuple[Any, CandidateKind]]:
    impl = getattr(attr, "__func__", attr)
    overloads = get_overloads(impl)
    if not overloads:
        yield impl, kind
    else:
        for fn in overloads:
            yield getattr(fn, "__func__", fn), _kind_of(fn, kind)


def _register(
    table: CandidateTable,
    owner: type[Any],
    name: str,
    attr: Any,
    kind: CandidateKind,
    allowed: Collection[CandidateKind],
) -> None:
    for func, fn_kind in _overload_set(attr, kind):
        if fn_kind not in allowed:
            logger.debug(
                "skipping %s.%s: %s overload is not reachable here",
                type_repr(owner),
                name,
                fn_kind.value,
            )
            continue

        sig = _signature_of(func, fn_kind, owner)
        if isinstance(sig, str):
            logger.debug("skipping %s.%s: %s", type_repr(owner), name, sig)
            continue

        for ptype in sig.param_types:
            if name in _EQUALITY_OPERATIONS and ptype is object:
                continue
            candidate = Candidate(
                owner=owner,
                name=name,
                param_type=ptype,
                return_type=sig.return_type,
                func=func,
                kind=fn_kind,
            )
            if sig.procedure:
                table.add(candidate, function=False)
            if sig.function:
                table.add(candidate, function=True)


def _instance_surface(
    cls: type[Any],
    include_private: bool,
    skip_owners: Collection[type],
) -> Iterator[tuple[str, list[tuple[type[Any], types.FunctionType]]]]:
    """Yield each method name with its definitions, most-derived first."""
    for name in dir(cls):
        if not include_private and not _is_public(name):
            continue
        owners = [owner for owner in cls.__mro__ if name in owner.__dict__]
        if not owners or owners[0] in skip_owners:
            continue
        if not isinstance(owners[0].__dict__[name], types.FunctionType):
            continue
        yield name, [
            (owner, owner.__dict__[name])
            for owner in owners
            if owner not in skip_owners
            and isinstance(owner.__dict__[name], types.FunctionType)
        ]


def _type_surface(
    cls: type[Any],
    include_private: bool,
) -> Iterator[tuple[type[Any], str, Any]]:
    for name, attr in list(cls.__dict__.items()):
        if not include_private and not _is_public(name):
            continue
        if isinstance(attr, (staticmethod, classmethod)):
            yield cls, name, attr


_type_tables: dict[tuple[type[Any], bool], CandidateTable] = {}


def _build_type_table(cls: type[Any], include_private: bool) -> CandidateTable:
    table = CandidateTable()
    for owner, name, attr in _type_surface(cls, include_private):
        _register(
            table,
            owner,
            name,
            attr,
            _kind_of(attr, CandidateKind.STATIC),
            (CandidateKind.STATIC, CandidateKind.CLASS),
        )
    return table


def _build_instance_table(
    cls: type[Any],
    include_private: bool,
    skip_owners: Collection[type],
) -> CandidateTable:
    table = CandidateTable()
    for name, definitions in _instance_surface(
        cls, include_private, skip_owners
    ):
        # Once any class declares overloads for a name, every plain
        # definition of it along the MRO is an entry point.
        overloaded = [
            (owner, func)
            for owner, func in definitions
            if get_overloads(func)
        ]
        for owner, func in overloaded or definitions[:1]:
            _register(
                table,
                owner,
                name,
                func,
                CandidateKind.INSTANCE,
                (CandidateKind.INSTANCE,),
            )
    return table


def build_table(
    subject: Any,
    *,
    include_private: bool | None = None,
    skip_owners: Collection[type] = (),
) -> CandidateTable:
    """Build the candidate table of *subject*.

    Args:
        subject:
            An instance, or a class for type-level dispatch over its
            static and class methods.
        include_private:
            Whether underscore-prefixed methods are candidates.  Defaults
            to the ``DOUBLEDISPATCH_INCLUDE_PRIVATE`` setting.
        skip_owners:
            Classes whose own methods are never candidates on an instance
            surface (the dispatcher classes, when a subject inherits
            dispatch capability).

    Returns:
        The table.  Type-level tables are cached for the lifetime of the
        process; the first table published for a class wins.
    """
    if subject is None:
        raise errors.InvalidArgumentError("dispatch subject cannot be None")
    if include_private is None:
        include_private = _config.INCLUDE_PRIVATE

    if isinstance(subject, type):
        key = (subject, include_private)
        table = _type_tables.get(key)
        if table is None:
            table = _type_tables.setdefault(
                key, _build_type_table(subject, include_private)
            )
            logger.debug(
                "built type-level dispatch table for %s: %d candidate(s)",
                type_repr(subject),
                len(table),
            )
        return table
    else:
        table = _build_instance_table(
            type(subject), include_private, skip_owners
        )
        logger.debug(
            "built dispatch table for %s: %d candidate(s)",
            type_repr(type(subject)),
            len(table),
        )
        return table
