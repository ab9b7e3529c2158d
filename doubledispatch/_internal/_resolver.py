# SPDX-PackageName: doubledispatch
# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: Copyright the doubledispatch contributors.

"""Selection of the most specific candidate for a runtime argument type.

The exact type of the argument is tried first, then its MRO is walked
upwards up to and including ``object``, for value types (numbers,
strings and bytes) as much as for any other class: ``True`` reaches an
``int`` candidate.  Function candidates additionally have to return
something assignable to what the caller expects (return type
covariance).
"""

from __future__ import annotations

from typing import (
    TYPE_CHECKING,
    Any,
)

import logging
import numbers
import typing

from doubledispatch._internal import _config
from doubledispatch._internal import _typing_inspect
from doubledispatch._internal._utils import type_repr

if TYPE_CHECKING:
    from collections.abc import Iterable
    from doubledispatch._internal._candidates import Candidate, CandidateTable


logger = logging.getLogger("doubledispatch")

_VALUE_TYPES: tuple[type, ...] = (numbers.Number, str, bytes, type(None))


def is_value_type(tp: type[Any]) -> bool:
    """True for types whose instances carry their state by value.

    Such subjects are exempt from the identity check of surrogate
    invocation; copies of them are expected.
    """
    try:
        return issubclass(tp, _VALUE_TYPES)
    except TypeError:
        return False


def _origin(tp: Any) -> Any:
    if _typing_inspect.is_generic_alias(tp):
        return typing.get_origin(tp)
    return tp


def is_assignable(source: Any, target: Any) -> bool:
    """Return whether a result declared as *source* satisfies *target*."""
    if target is Any or target is object:
        return True
    if source is Any or source is target:
        return True
    if source is None:
        source = type(None)
    if target is None:
        target = type(None)

    if _typing_inspect.is_union_type(target):
        return any(
            is_assignable(source, member)
            for member in _typing_inspect.union_members(target)
        )
    if _typing_inspect.is_union_type(source):
        return all(
            is_assignable(member, target)
            for member in _typing_inspect.union_members(source)
        )

    source = _origin(source)
    target = _origin(target)
    if isinstance(source, type) and isinstance(target, type):
        try:
            return issubclass(source, target)
        except TypeError:
            return False

    return bool(source == target)


def _first_match(
    candidates: tuple[Candidate, ...],
    function: bool,
    returns: Any,
) -> Candidate | None:
    if not function:
        return candidates[0] if candidates else None
    for candidate in candidates:
        if is_assignable(candidate.return_type, returns):
            return candidate
    return None


def _probe_order(
    t0: type[Any],
    declared: type[Any] | None,
    surrogate: bool,
) -> Iterable[type[Any]]:
    if not surrogate and declared is t0:
        # the exact type has already been looked at
        return t0.__mro__[1:]
    else:
        return t0.__mro__


def resolve(
    table: CandidateTable,
    name: str,
    argument: Any,
    *,
    function: bool,
    returns: Any = Any,
    declared: type[Any] | None = None,
    surrogate: bool = False,
) -> Candidate | None:
    """Find the candidate *name* should dispatch *argument* to.

    Args:
        table:
            The subject's candidate table.
        name:
            Operation name.
        argument:
            The argument whose runtime type drives the lookup.  ``None``
            never matches.
        function:
            Look among functions (True) or procedures (False).
        returns:
            Result type the caller expects (functions only).
        declared:
            The type the call site already knows the argument has.
        surrogate:
            Surrogates always walk the hierarchy from the argument's
            own type, whatever type was declared at the call site.

    Returns:
        The matching candidate or None.
    """
    if argument is None:
        return _traced(name, argument, None)

    entries = table.entries(name, function=function)
    if not entries:
        return _traced(name, argument, None)

    t0 = type(argument)
    if not surrogate:
        hit = _first_match(entries.get(t0, ()), function, returns)
        if hit is not None:
            return _traced(name, argument, hit)

    for tp in _probe_order(t0, declared, surrogate):
        hit = _first_match(entries.get(tp, ()), function, returns)
        if hit is not None:
            return _traced(name, argument, hit)

    return _traced(name, argument, None)


def _traced(
    name: str,
    argument: Any,
    candidate: Candidate | None,
) -> Candidate | None:
    if _config.TRACE:
        if candidate is None:
            logger.debug(
                "%s(%s): no candidate", name, type_repr(type(argument))
            )
        else:
            logger.debug(
                "%s(%s) -> %s.%s(%s)",
                name,
                type_repr(type(argument)),
                type_repr(candidate.owner),
                candidate.name,
                type_repr(candidate.param_type),
            )
    return candidate
