# SPDX-PackageName: doubledispatch
# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: Copyright the doubledispatch contributors.

"""Evaluation of (possibly stringified) annotations into runtime types."""

from typing import (
    Any,
    Mapping,
    Union,
)
from typing_extensions import (
    Annotated,
    ForwardRef,
)

from typing_extensions import evaluate_forward_ref  # type: ignore [attr-defined]

import sys
import types
import typing

from . import _typing_inspect


def resolve_type(
    value: Any,
    *,
    owner: types.ModuleType | type[Any] | None = None,
    globals: Mapping[str, Any] | None = None,
    locals: Mapping[str, Any] | None = None,
) -> Any:
    if isinstance(value, str):
        value = ForwardRef(value)

    if _typing_inspect.is_forward_ref(value):
        value = evaluate_forward_ref(
            value,
            owner=owner,
            globals=globals,
            locals=locals,
        )

    if _typing_inspect.is_type_alias(value):
        # PEP 695 TypeAliasType -> unwrap its __value__
        module = sys.modules.get(value.__module__) if value.__module__ else None
        return resolve_type(
            value.__value__,
            globals=module.__dict__ if module is not None else {},
        )
    elif _typing_inspect.is_generic_alias(value):
        origin = typing.get_origin(value)

        # typing.Annotated[...] -> drop metadata
        if origin is Annotated:
            return resolve_type(
                typing.get_args(value)[0],
                owner=owner,
                globals=globals,
                locals=locals,
            )

        # typing.Union[...] -> rebuild as PEP 604 UnionType (int|str)
        elif origin is Union:
            args = typing.get_args(value)
            resolved = resolve_type(
                args[0],
                owner=owner,
                globals=globals,
                locals=locals,
            )
            for arg in args[1:]:
                resolved |= resolve_type(
                    arg,
                    owner=owner,
                    globals=globals,
                    locals=locals,
                )
            return resolved

        # parameterized generics are left as is, dispatch does not
        # key on them
        else:
            return value
    else:
        # everything else is already a runtime type
        return value


def try_resolve_type(
    value: Any,
    *,
    owner: types.ModuleType | type[Any] | None = None,
    globals: Mapping[str, Any] | None = None,
    locals: Mapping[str, Any] | None = None,
    default: Any = None,
) -> Any:
    try:
        return resolve_type(
            value,
            owner=owner,
            globals=globals,
            locals=locals,
        )
    except (NameError, SyntaxError, TypeError):
        return default
