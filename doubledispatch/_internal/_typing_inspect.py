# SPDX-PackageName: doubledispatch
# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: Copyright the doubledispatch contributors.

"""Predicates over runtime type annotations."""

from typing import (
    Any,
    ForwardRef,
    NoReturn,
    TypeGuard,
    TypeVar,
    Union,
    get_args,
    get_origin,
)
from typing import _GenericAlias, _SpecialGenericAlias  # type: ignore [attr-defined]  # noqa: PLC2701
from typing_extensions import Never, TypeAliasType
from types import GenericAlias, NoneType, UnionType


def is_generic_alias(t: Any) -> TypeGuard[GenericAlias]:
    return isinstance(t, (GenericAlias, _GenericAlias, _SpecialGenericAlias))


def is_type_alias(t: Any) -> TypeGuard[TypeAliasType]:
    return isinstance(t, TypeAliasType)


def is_forward_ref(t: Any) -> TypeGuard[ForwardRef]:
    return isinstance(t, ForwardRef)


def is_type_var(t: Any) -> TypeGuard[TypeVar]:
    return isinstance(t, TypeVar)


def is_union_type(t: Any) -> bool:
    return (
        (is_generic_alias(t) and get_origin(t) is Union)  # type: ignore [comparison-overlap]
        or isinstance(t, UnionType)
    )


def is_none_type(t: Any) -> bool:
    return t is None or t is NoneType


def is_bottom_type(t: Any) -> bool:
    """True for annotations promising no result at all."""
    return is_none_type(t) or t is NoReturn or t is Never


def is_class(t: Any) -> TypeGuard[type[Any]]:
    # On some interpreters GenericAlias passes isinstance(..., type).
    return isinstance(t, type) and not is_generic_alias(t)


def union_members(t: Any) -> tuple[Any, ...]:
    return get_args(t) if is_union_type(t) else (t,)
