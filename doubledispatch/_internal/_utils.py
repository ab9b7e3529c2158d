# SPDX-PackageName: doubledispatch
# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: Copyright the doubledispatch contributors.

"""Miscellaneous utilities."""

from typing import Any, final

import types

from doubledispatch import errors


@final
class UnspecifiedType:
    """A type used as a sentinel for unspecified values."""

    def __repr__(self) -> str:
        return "Unspecified"


Unspecified = UnspecifiedType()


def type_repr(t: Any) -> str:
    if isinstance(t, type):
        if t.__module__ == "builtins":
            return t.__qualname__
        else:
            return f"{t.__module__}.{t.__qualname__}"
    else:
        return repr(t)


def operation_name(op: Any) -> str:
    """Return the method name designated by *op*.

    *op* is either the name itself or a callable (usually a bound
    method) whose ``__name__`` is used, so that entry points can pass
    ``self.handle`` instead of ``"handle"``.
    """
    if op is None:
        raise errors.InvalidArgumentError("operation name cannot be None")
    if isinstance(op, str):
        name = op
    elif callable(op):
        name = getattr(op, "__name__", None)
        if not isinstance(name, str):
            raise errors.InvalidArgumentError(
                f"cannot determine the method name of {op!r}"
            )
    else:
        raise errors.InvalidArgumentError(
            f"operation must be a name or a callable, got {type_repr(type(op))}"
        )

    if not name:
        raise errors.InvalidArgumentError("operation name cannot be empty")
    return name


def bound_subject(fn: Any) -> Any:
    """Return the object *fn* is bound to, or None for unbound callables."""
    subject = getattr(fn, "__self__", None)
    if isinstance(subject, types.ModuleType):
        # builtin functions report their module as __self__
        return None
    return subject
