# Copyright (c) 2025 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""MQT TEBD init file.

MQT TEBD is a package for the simulation of quantum circuits with matrix product states (MPS)
that are evolved gate by gate with the time-evolving block decimation (TEBD) update rule.
"""

from __future__ import annotations

from ._version import version as __version__
from ._version import version_tuple as version_info

__all__ = ["__version__", "version_info"]
