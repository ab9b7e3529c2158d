# SPDX-PackageName: doubledispatch
# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: Copyright the doubledispatch contributors.
