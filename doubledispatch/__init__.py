# SPDX-PackageName: doubledispatch
# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: Copyright the doubledispatch contributors.

"""Runtime double dispatch over the methods of a subject.

Specialized methods are declared as ``@overload`` variants with real
bodies; the undecorated implementation is the entry point routing
through a :class:`Dispatcher`, which picks the variant matching the
argument's runtime type.
"""

from typing_extensions import get_overloads, overload

from doubledispatch.errors import (
    DispatchError,
    InvalidArgumentError,
    InvalidOperationError,
    SubjectMismatchError,
    UnboundCallableError,
)
from doubledispatch._internal._candidates import (
    Candidate,
    CandidateKind,
    CandidateTable,
    build_table,
)
from doubledispatch._internal._resolver import (
    is_assignable,
    is_value_type,
    resolve,
)
from doubledispatch._internal._dispatcher import (
    Dispatcher,
    MemoizingDispatcher,
)
from doubledispatch._internal._surrogate import (
    Surrogate,
    create_static_surrogate,
    create_surrogate,
    surrogate_invoke,
)
from doubledispatch._internal._guard import (
    DispatchSlot,
    composed_dispatcher,
    ensure,
)


__all__ = (
    "Candidate",
    "CandidateKind",
    "CandidateTable",
    "DispatchError",
    "DispatchSlot",
    "Dispatcher",
    "InvalidArgumentError",
    "InvalidOperationError",
    "MemoizingDispatcher",
    "SubjectMismatchError",
    "Surrogate",
    "UnboundCallableError",
    "build_table",
    "composed_dispatcher",
    "create_static_surrogate",
    "create_surrogate",
    "ensure",
    "get_overloads",
    "is_assignable",
    "is_value_type",
    "overload",
    "resolve",
    "surrogate_invoke",
)
