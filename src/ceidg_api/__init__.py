# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""CEIDG company lookup service.

Looks up Polish business-registry (CEIDG) records by NIP and serves them as a
normalized company record over HTTP.
"""

__version__ = "0.1.0"
