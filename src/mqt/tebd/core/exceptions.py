# Copyright (c) 2025 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Exceptions raised by the MPS engine.

All errors derive from :class:`MPSError` and, in addition, from the built-in exception that
best describes them, so callers may catch either.
"""

from __future__ import annotations


class MPSError(Exception):
    """Base class for errors raised by the MPS engine."""


class DimensionError(MPSError, ValueError):
    """A gate or local vector does not match the physical dimension of a site."""


class ShapeMismatchError(MPSError, ValueError):
    """Two states, or a state and an observable, have incompatible site counts or dimensions."""


class AdjacencyError(MPSError, ValueError):
    """A two-site operator targets sites that are not nearest neighbors."""


class PreconditionError(MPSError, RuntimeError):
    """The caller claimed a canonical form that the state does not have at the required location."""


class NumericalError(MPSError, ArithmeticError):
    """The linear algebra backend failed to converge or produced non-finite values."""
