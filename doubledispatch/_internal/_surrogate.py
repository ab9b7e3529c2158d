# SPDX-PackageName: doubledispatch
# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: Copyright the doubledispatch contributors.

"""Self-dispatching wrappers around already-bound callables.

A surrogate lets a caller get double dispatch out of a subject which
does not route through a dispatcher itself: the surrogate re-resolves
every call by the argument's runtime type among the subject's candidates
for the wrapped method's name.
"""

from __future__ import annotations

from typing import (
    TYPE_CHECKING,
    Any,
    Generic,
    TypeVar,
)

import functools
import inspect

from doubledispatch import errors
from doubledispatch._internal import _dispatcher
from doubledispatch._internal import _resolver
from doubledispatch._internal import _typing_eval
from doubledispatch._internal import _typing_inspect
from doubledispatch._internal._utils import (
    Unspecified,
    bound_subject,
    operation_name,
    type_repr,
)

if TYPE_CHECKING:
    from collections.abc import Callable


_T_contra = TypeVar("_T_contra", contravariant=True)
_R_co = TypeVar("_R_co", covariant=True)


def _declared_return(fn: Any) -> Any:
    """Return the declared result of *fn*: None for procedures, Any if
    the result is not annotated."""
    func = getattr(fn, "__func__", fn)
    try:
        annotation = inspect.signature(func).return_annotation
    except (TypeError, ValueError):
        return Any
    if annotation is inspect.Signature.empty:
        return Any

    rt = _typing_eval.try_resolve_type(
        annotation,
        globals=getattr(inspect.unwrap(func), "__globals__", None),
        default=Any,
    )
    return None if _typing_inspect.is_bottom_type(rt) else rt


class Surrogate(Generic[_T_contra, _R_co]):
    """A callable dispatching its single argument by runtime type."""

    def __init__(
        self,
        dispatcher: _dispatcher.Dispatcher,
        name: str,
        *,
        returns: Any,
        fallback: Callable[[], Any] | None = None,
        default: Any = None,
        argument_type: type[Any] | None = None,
    ) -> None:
        self._dispatcher = dispatcher
        self._name = name
        self._returns = returns
        self._fallback = fallback
        self._default = default
        self._argument_type = argument_type

    @property
    def name(self) -> str:
        return self._name

    @property
    def dispatcher(self) -> _dispatcher.Dispatcher:
        return self._dispatcher

    @property
    def argument_type(self) -> type[Any] | None:
        return self._argument_type

    @property
    def is_procedure(self) -> bool:
        return self._returns is None

    def __call__(self, argument: _T_contra, /) -> _R_co:
        if self._returns is None:
            self._dispatcher.invoke(self._name, argument, self._fallback)
            return None  # type: ignore [return-value]
        else:
            return self._dispatcher.invoke_function(  # type: ignore [return-value]
                self._name,
                argument,
                self._fallback,
                self._default,
                returns=self._returns,
            )

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self._name!r} {self._dispatcher!r}>"


def _prototype_type(prototype: Any) -> type[Any] | None:
    if prototype is None or isinstance(prototype, type):
        return prototype
    return type(prototype)


def create_surrogate(
    bound: Callable[[_T_contra], _R_co],
    prototype: Any = None,
    fallback: Callable[[], Any] | None = None,
    default: Any = None,
    *,
    returns: Any = Unspecified,
) -> Surrogate[_T_contra, _R_co]:
    """Wrap the bound method *bound* into a self-dispatching callable.

    Args:
        bound:
            A method bound to the subject, e.g. ``service.handle``.  A
            classmethod bound to its class selects type-level dispatch.
        prototype:
            The argument type the wrapped method was written against,
            given as a class or an example value.
        fallback:
            Called when no candidate matches; its result is returned for
            function surrogates.
        default:
            Returned by function surrogates on a miss without *fallback*.
        returns:
            Expected result type.  Defaults to the declared return of
            *bound*; None makes the surrogate a procedure.

    Raises:
        InvalidArgumentError: *bound* is None.
        UnboundCallableError: *bound* is not bound to a subject.
    """
    if bound is None:
        raise errors.InvalidArgumentError("bound callable cannot be None")
    subject = bound_subject(bound)
    if subject is None:
        raise errors.UnboundCallableError(
            f"{bound!r} must be bound to the subject to dispatch over"
        )

    if returns is Unspecified:
        returns = _declared_return(bound)

    surrogate: Surrogate[_T_contra, _R_co] = Surrogate(
        _dispatcher.Dispatcher(subject, surrogate=True),
        operation_name(bound),
        returns=returns,
        fallback=fallback,
        default=default,
        argument_type=_prototype_type(prototype),
    )
    functools.update_wrapper(surrogate, bound, updated=())
    return surrogate


def create_static_surrogate(
    cls: type[Any],
    name: str,
    fallback: Callable[[], Any] | None = None,
    default: Any = None,
    *,
    returns: Any = Unspecified,
) -> Surrogate[Any, Any]:
    """Build a surrogate dispatching over the static and class methods
    named *name* declared on *cls*."""
    if not isinstance(cls, type):
        raise errors.InvalidArgumentError(
            f"type-level dispatch requires a class, got {cls!r}"
        )
    if not isinstance(name, str) or not name:
        raise errors.InvalidArgumentError(
            "operation name must be a non-empty string"
        )

    if returns is Unspecified:
        attr = cls.__dict__.get(name)
        returns = Any if attr is None else _declared_return(attr)

    return Surrogate(
        _dispatcher.Dispatcher(cls, surrogate=True),
        name,
        returns=returns,
        fallback=fallback,
        default=default,
    )


def surrogate_invoke(
    subject: Any,
    method: Callable[[Any], Any],
    argument: Any,
    fallback: Callable[[], Any] | None = None,
    default: Any = None,
) -> Any:
    """Invoke *method* with double dispatch after checking it is bound to
    *subject*.

    Raises:
        InvalidArgumentError: *subject* or *method* is None.
        SubjectMismatchError:
            *method* is bound to some other object.  Value-type subjects
            are exempt: copies of them are interchangeable.
    """
    if subject is None:
        raise errors.InvalidArgumentError("subject cannot be None")
    if method is None:
        raise errors.InvalidArgumentError("method cannot be None")

    if bound_subject(method) is not subject and not _resolver.is_value_type(
        type(subject)
    ):
        raise errors.SubjectMismatchError(
            f"{operation_name(method)} must be bound to the given "
            f"{type_repr(type(subject))} object"
        )

    return create_surrogate(method, None, fallback, default)(argument)
