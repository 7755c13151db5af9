# Copyright (c) 2025 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Time-Evolving Block Decimation (TEBD) gate updates.

This module applies one- and two-site gates to a Matrix Product State (MPS).

A two-site gate on the bond (i, i+1) is contracted with both site tensors into a single tensor
theta, which is split again with a truncated SVD (see :func:`~mqt.tebd.core.methods.decompositions.split_theta`).
The truncation is only optimal if the environments of theta are orthonormal, i.e. if the orthogonality
center lies on the bond. Two modes are supported:

- ``iscanonical=True``: the caller guarantees that the MPS is canonical with its center at or next to the
  gate. The center is moved onto the bond by at most one local shift, the update is local and the state
  stays canonical with the center on the side that absorbed the singular values.
- ``iscanonical=False``: nothing is assumed. If the update may truncate, the state is canonized at the bond
  first. Afterwards the state is marked non-canonical.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import numpy as np
import opt_einsum as oe

from ..data_structures.simulation_parameters import EvolveOptions
from ..exceptions import AdjacencyError, DimensionError, PreconditionError
from ..libraries.gate_library import is_unitary
from .decompositions import split_theta

if TYPE_CHECKING:
    from collections.abc import Iterable

    from numpy.typing import NDArray

    from ..data_structures.networks import MPS
    from .decompositions import TruncationInfo


def _gate_operator(gate: Any) -> NDArray[np.complex128]:
    """Matrix (or tensor) of a gate-like object."""
    operator = getattr(gate, "matrix", None)
    if operator is None:
        operator = gate.tensor
    return np.asarray(operator, dtype=complex)


def _require_center_near(state: MPS, sites: list[int]) -> int:
    """Checks the canonical precondition of a local update.

    Args:
        state: The Matrix Product State.
        sites: The sites touched by the update.

    Returns:
        int: The current orthogonality center.

    Raises:
        PreconditionError: If the state is not canonical or its center is more than one site away from ``sites``.
    """
    center = state.orthogonality_center
    if center is None:
        msg = f"A canonical update on sites {sites} was requested, but the MPS is not in canonical form."
        raise PreconditionError(msg)
    if center < min(sites) - 1 or center > max(sites) + 1:
        msg = (
            f"A canonical update on sites {sites} was requested, but the orthogonality center is at site {center}. "
            "Canonize the MPS first."
        )
        raise PreconditionError(msg)
    return center


def apply_single_site_gate(
    state: MPS, operator: NDArray[np.complex128], site: int, options: EvolveOptions | None = None
) -> None:
    """Apply a one-site gate.

    The input index of the gate is contracted with the physical index of the site tensor. Bond dimensions
    do not change.

    Args:
        state: The Matrix Product State, updated in place.
        operator: The (d, d) gate matrix.
        site: The target site.
        options: The update options. Only ``iscanonical`` is relevant.

    Raises:
        DimensionError: If the gate does not match the physical dimension of the site.
        PreconditionError: If ``iscanonical`` is set, but the state is not canonical, or a non-unitary gate is
            applied far away from the orthogonality center.
    """
    if options is None:
        options = EvolveOptions()
    d = state.physical_dimensions[site]
    if operator.shape != (d, d):
        msg = f"Gate of shape {operator.shape} cannot act on site {site} of dimension {d}."
        raise DimensionError(msg)

    if options.iscanonical:
        if state.orthogonality_center is None:
            msg = f"A canonical update on site {site} was requested, but the MPS is not in canonical form."
            raise PreconditionError(msg)
        if not is_unitary(operator):
            # A non-unitary gate only keeps the form if it acts on the center itself
            _require_center_near(state, [site])
            state.canonize(site)

    state.tensors[site] = oe.contract("ab, bcd->acd", operator, state.tensors[site])
    if not options.iscanonical:
        state.orthogonality_center = None


def apply_two_site_gate(
    state: MPS, operator: NDArray[np.complex128], sites: list[int], options: EvolveOptions | None = None
) -> TruncationInfo:
    """Apply a two-site gate on neighboring sites.

    Args:
        state: The Matrix Product State, updated in place.
        operator: The gate as a (d_0 d_1, d_0 d_1) matrix or a (d_0, d_1, d_0, d_1) tensor,
            where 0 and 1 refer to the order of ``sites``.
        sites: The two target sites, in any order.
        options: The update options.

    Returns:
        TruncationInfo: The summary of the truncated split of the updated bond.

    Raises:
        AdjacencyError: If the sites are not nearest neighbors.
        DimensionError: If the gate does not match the physical dimensions of the sites.
        PreconditionError: If ``iscanonical`` is set, but the state is not canonical near the gate.
    """
    if options is None:
        options = EvolveOptions()
    first, second = sites
    if abs(first - second) != 1:
        msg = f"Two-site gates must act on neighboring sites, got sites {sites}."
        raise AdjacencyError(msg)

    d_first = state.physical_dimensions[first]
    d_second = state.physical_dimensions[second]
    if operator.shape == (d_first * d_second, d_first * d_second):
        operator = operator.reshape(d_first, d_second, d_first, d_second)
    elif operator.shape != (d_first, d_second, d_first, d_second):
        msg = f"Gate of shape {operator.shape} cannot act on sites {sites} of dimensions {d_first} and {d_second}."
        raise DimensionError(msg)
    if first > second:
        operator = np.transpose(operator, (1, 0, 3, 2))

    left = min(sites)
    right = left + 1
    if options.iscanonical:
        center = _require_center_near(state, [left, right])
        if center < left:
            state.canonize(left)
        elif center > right:
            state.canonize(right)
    elif options.may_truncate:
        state.canonize(left)

    # (o_i, o_j, i_i, i_j) x (i_i, l, m) x (i_j, m, r) -> (o_i, l, o_j, r)
    theta = oe.contract("abcd, cef, dfg->aebg", operator, state.tensors[left], state.tensors[right])
    state.tensors[left], state.tensors[right], info = split_theta(
        theta, options.maxdim, options.cutoff, renormalize=options.renormalize, absorb=options.absorb
    )

    if options.iscanonical:
        state.orthogonality_center = right if options.absorb == "right" else left
    else:
        state.orthogonality_center = None

    state.fidelity *= 1.0 - info.discarded_weight
    logger = state._logger  # noqa: SLF001
    if info.reduced_extent < info.full_extent:
        logger.debug(
            f"Truncated bond ({left}, {right}) from {info.full_extent} to {info.reduced_extent}, "  # noqa: G004
            f"discarded weight={info.discarded_weight}"
        )
    if logger.isEnabledFor(logging.INFO):
        logger.info(f"MPS size (MiB)={state.get_byte_size() / 2**20}")  # noqa: G004
        logger.info(f"MPS fidelity={state.fidelity}")  # noqa: G004
    return info


def evolve(state: MPS, gate: Any, options: EvolveOptions | None = None) -> TruncationInfo | None:
    """Apply a gate to an MPS.

    Args:
        state: The Matrix Product State, updated in place.
        gate: A gate with ``sites`` set (e.g. from the GateLibrary) or any object exposing ``sites`` and
            ``matrix`` or ``tensor``.
        options: The update options, defaults to ``EvolveOptions()``.

    Returns:
        TruncationInfo | None: The truncation summary of a two-site gate, None for a one-site gate.

    Raises:
        IndexError: If the gate acts on a site outside the chain.
        NotImplementedError: If the gate acts on more than two sites.
    """
    if options is None:
        options = EvolveOptions()
    sites = [int(site) for site in gate.sites]
    for site in sites:
        if not 0 <= site < state.length:
            msg = f"Gate acting on site {site} of an MPS of length {state.length}."
            raise IndexError(msg)

    operator = _gate_operator(gate)
    if len(sites) == 1:
        apply_single_site_gate(state, operator, sites[0], options)
        return None
    if len(sites) == 2:
        return apply_two_site_gate(state, operator, sites, options)

    msg = "Only one- and two-site gates are currently implemented."
    raise NotImplementedError(msg)


def apply_gates(state: MPS, gates: Iterable[Any], options: EvolveOptions | None = None) -> list[TruncationInfo]:
    """Apply a sequence of gates with the same options.

    Args:
        state: The Matrix Product State, updated in place.
        gates: The gates, applied in order.
        options: The update options.

    Returns:
        list[TruncationInfo]: The truncation summaries of all two-site gates, in order.
    """
    infos = []
    for gate in gates:
        info = evolve(state, gate, options)
        if info is not None:
            infos.append(info)
    return infos
