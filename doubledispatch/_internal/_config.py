# SPDX-PackageName: doubledispatch
# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: Copyright the doubledispatch contributors.

"""Process-wide settings read from the environment at import time.

DOUBLEDISPATCH_TRACE
    Log every resolution hit and miss on the ``doubledispatch`` logger
    at DEBUG level.

DOUBLEDISPATCH_INCLUDE_PRIVATE
    Treat underscore-prefixed methods as dispatch candidates by default.
"""

import os


_TRUTHY = frozenset({"1", "true", "t", "yes", "y"})


def env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in _TRUTHY


TRACE = env_flag("DOUBLEDISPATCH_TRACE")
INCLUDE_PRIVATE = env_flag("DOUBLEDISPATCH_INCLUDE_PRIVATE")
