# SPDX-PackageName: doubledispatch
# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: Copyright the doubledispatch contributors.

"""Exactly-once installation of a composed dispatcher."""

from __future__ import annotations

from typing import (
    TYPE_CHECKING,
    Any,
    Generic,
    TypeVar,
    overload,
)
from typing_extensions import Self

import logging
import threading

from doubledispatch import errors
from doubledispatch._internal import _dispatcher
from doubledispatch._internal._utils import type_repr

if TYPE_CHECKING:
    from collections.abc import Callable


logger = logging.getLogger("doubledispatch")

_D = TypeVar("_D", bound=_dispatcher.Dispatcher)


class DispatchSlot(Generic[_D]):
    """A single-assignment cell for a dispatcher.

    ``compare_and_set()`` is the only way to publish a value.  The lock is
    held for the comparison and the store and nothing else.
    """

    __slots__ = ("_lock", "_value")

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._value: _D | None = None

    def get(self) -> _D | None:
        return self._value

    def compare_and_set(self, expected: _D | None, value: _D) -> _D | None:
        """Store *value* if the slot still holds *expected*.

        Returns:
            Whatever the slot holds afterwards.
        """
        with self._lock:
            if self._value is expected:
                self._value = value
            return self._value

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self._value!r}>"


def ensure(
    subject: Any,
    slot: DispatchSlot[_D],
    factory: Callable[[Any], _D] = _dispatcher.Dispatcher,  # type: ignore [assignment]
) -> _D:
    """Return the dispatcher installed in *slot*, installing one built
    by *factory* for *subject* if the slot is empty.

    Concurrent callers racing on an empty slot may each build a
    dispatcher, but only the first one published is ever returned.
    """
    if subject is None:
        raise errors.InvalidArgumentError("subject cannot be None")
    if slot is None:
        raise errors.InvalidArgumentError("dispatch slot cannot be None")
    if factory is None:
        raise errors.InvalidArgumentError("dispatcher factory cannot be None")

    current = slot.get()
    if current is not None:
        return current

    dispatcher = factory(subject)
    if dispatcher is None:
        raise errors.InvalidOperationError(
            f"{factory!r} returned no dispatcher for "
            f"{type_repr(type(subject))} object"
        )

    # a slot that no longer holds None holds some published dispatcher
    winner = slot.compare_and_set(None, dispatcher)
    if winner is not dispatcher:
        logger.debug(
            "discarding concurrently built dispatcher for %s object",
            type_repr(type(subject)),
        )
    return winner  # type: ignore [return-value]


class composed_dispatcher(Generic[_D]):  # noqa: N801
    """Give every instance of the owner class its own lazily installed
    dispatcher, held by composition."""

    _slot_name: str

    def __init__(
        self,
        factory: Callable[[Any], _D] = _dispatcher.Dispatcher,  # type: ignore [assignment]
    ) -> None:
        self._factory = factory

    def __set_name__(self, owner: type[Any], name: str) -> None:
        self._slot_name = f"_{name}_slot"

    @overload
    def __get__(self, instance: None, owner: type[Any]) -> Self: ...

    @overload
    def __get__(self, instance: Any, owner: type[Any] | None = None) -> _D: ...

    def __get__(
        self,
        instance: Any | None,
        owner: type[Any] | None = None,
    ) -> Self | _D:
        if instance is None:
            return self

        slots = instance.__dict__
        slot = slots.get(self._slot_name)
        if slot is None:
            # dict.setdefault is atomic: racing callers share one slot
            slot = slots.setdefault(self._slot_name, DispatchSlot())
        return ensure(instance, slot, self._factory)
