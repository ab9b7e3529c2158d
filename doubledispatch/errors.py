# SPDX-PackageName: doubledispatch
# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: Copyright the doubledispatch contributors.

"""Exceptions raised by doubledispatch.

Resolution itself never raises: a missing candidate is routed to the
caller's fallback.  Only the boundaries (surrogate factories, the
validation helper, and the concurrency guard) report misuse.
"""

__all__ = (
    "DispatchError",
    "InvalidArgumentError",
    "InvalidOperationError",
    "SubjectMismatchError",
    "UnboundCallableError",
)


class DispatchError(Exception):
    """Base class for all doubledispatch errors."""


class InvalidArgumentError(DispatchError, ValueError):
    """A factory received a missing or malformed argument."""


class UnboundCallableError(InvalidArgumentError):
    """A surrogate was requested for a callable with no bound subject."""


class InvalidOperationError(DispatchError, RuntimeError):
    """An operation cannot be carried out in the current state."""


class SubjectMismatchError(InvalidOperationError):
    """A method is bound to a different subject than the dispatch target."""
