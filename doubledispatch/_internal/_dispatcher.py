# SPDX-PackageName: doubledispatch
# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: Copyright the doubledispatch contributors.

"""Per-subject dispatch facade."""

from __future__ import annotations

from typing import (
    TYPE_CHECKING,
    Any,
    TypeVar,
)

import threading

from doubledispatch._internal import _candidates
from doubledispatch._internal import _resolver
from doubledispatch._internal._utils import operation_name, type_repr

if TYPE_CHECKING:
    from collections.abc import Callable, Hashable


_T = TypeVar("_T")
_R = TypeVar("_R")


class Dispatcher:
    """Resolve-and-invoke over the candidates of one subject.

    A dispatcher is either held by its subject (composition)::

        class Service:
            dispatch = composed_dispatcher()

            @overload
            def handle(self, entity: File) -> None: ...

            def handle(self, entity: Entity) -> None:
                self.dispatch.invoke(self.handle, entity)

    or is the subject itself, by inheritance, in which case ``subject``
    is left out.  A class passed as the subject dispatches over the
    class' own static and class methods.

    The candidate table is built on first use, once even when that first
    use is concurrent, and never rebuilt.
    """

    _subject: Any = None
    _surrogate: bool = False
    _table: _candidates.CandidateTable | None = None

    def __init__(self, subject: Any = None, *, surrogate: bool = False) -> None:
        self._subject = subject
        self._surrogate = surrogate
        self._table_lock = threading.Lock()

    @property
    def subject(self) -> Any:
        return self if self._subject is None else self._subject

    @property
    def surrogate(self) -> bool:
        return self._surrogate

    @property
    def table(self) -> _candidates.CandidateTable:
        table = self._table
        if table is None:
            with self._table_lock:
                table = self._table
                if table is None:
                    table = _candidates.build_table(
                        self.subject, skip_owners=_FACADE_TYPES
                    )
                    self._table = table
        return table

    def resolve(
        self,
        name: str | Callable[..., Any],
        argument: Any,
        *,
        function: bool = False,
        returns: Any = Any,
        declared: type[Any] | None = None,
    ) -> _candidates.Candidate | None:
        return _resolver.resolve(
            self.table,
            operation_name(name),
            argument,
            function=function,
            returns=returns,
            declared=declared,
            surrogate=self._surrogate,
        )

    def invoke(
        self,
        name: str | Callable[..., Any],
        argument: Any,
        fallback: Callable[[], object] | None = None,
        *,
        declared: type[Any] | None = None,
    ) -> None:
        """Dispatch *argument* to the procedure *name* best matching its
        runtime type, or run *fallback* if there is none."""
        candidate = self.resolve(name, argument, declared=declared)
        if candidate is not None:
            candidate.invoke(self.subject, argument)
        elif fallback is not None:
            fallback()

    def invoke_function(
        self,
        name: str | Callable[..., Any],
        argument: Any,
        fallback: Callable[[], _R] | None = None,
        default: _R | None = None,
        *,
        returns: Any = Any,
        declared: type[Any] | None = None,
    ) -> _R | None:
        """Dispatch *argument* to the function *name* best matching its
        runtime type and the expected result type *returns*.

        On a miss, the result of *fallback* is returned if it is given,
        and *default* otherwise.
        """
        candidate = self.resolve(
            name,
            argument,
            function=True,
            returns=returns,
            declared=declared,
        )
        if candidate is not None:
            return candidate.invoke(self.subject, argument)  # type: ignore [no-any-return]
        elif fallback is not None:
            return fallback()
        else:
            return default

    def __repr__(self) -> str:
        if self._subject is None:
            return f"<{type_repr(type(self))}>"
        subject = (
            type_repr(self._subject)
            if isinstance(self._subject, type)
            else f"{type_repr(type(self._subject))} object"
        )
        mode = " surrogate" if self._surrogate else ""
        return f"<{type_repr(type(self))}{mode} over {subject}>"


class MemoizingDispatcher(Dispatcher):
    """A dispatcher that also memoizes results on behalf of its subject."""

    _memo: dict[Any, Any]

    def __init__(self, subject: Any = None, *, surrogate: bool = False) -> None:
        super().__init__(subject, surrogate=surrogate)
        self._memo = {}

    def get_or_cache(self, key: Hashable, compute: Callable[[Any], _T]) -> _T:
        """Return the value cached for *key*, computing it on first use."""
        try:
            return self._memo[key]  # type: ignore [no-any-return]
        except KeyError:
            return self._memo.setdefault(key, compute(key))  # type: ignore [no-any-return]


_FACADE_TYPES: frozenset[type] = frozenset({Dispatcher, MemoizingDispatcher})
