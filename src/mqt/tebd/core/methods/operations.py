# Copyright (c) 2025 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""General tensor network methods.

This module implements the contractions that read out a Matrix Product State (MPS): the scalar (inner)
product between two MPS and expectation values of one- and two-site observables. Both are computed with
a left-to-right transfer matrix sweep, so no full state vector is ever built. The cost is
O(N chi^3 d) for bond dimension chi and physical dimension d.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import numpy as np
import opt_einsum as oe

from ..exceptions import AdjacencyError, ShapeMismatchError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from numpy.typing import NDArray

    from ..data_structures.networks import MPS


def overlap(a: MPS, b: MPS) -> np.complex128:
    """Compute the scalar (inner) product <a|b> between two Matrix Product States (MPS).

    The environment of the bra and ket bonds is carried from left to right and contracted with
    one pair of site tensors at a time.

    Args:
        a: The bra state, its tensors are conjugated.
        b: The ket state.

    Returns:
        np.complex128: The resulting scalar product as a complex number.

    Raises:
        ShapeMismatchError: If the states differ in length or in the physical dimension of a site.
    """
    if a.length != b.length:
        msg = f"Cannot contract an MPS of length {a.length} with one of length {b.length}."
        raise ShapeMismatchError(msg)
    if list(a.physical_dimensions) != list(b.physical_dimensions):
        msg = f"Physical dimensions {a.physical_dimensions} and {b.physical_dimensions} do not match."
        raise ShapeMismatchError(msg)

    env = np.ones((1, 1), dtype=complex)
    for tensor_a, tensor_b in zip(a.tensors, b.tensors):
        env = oe.contract("ab, sac, sbd->cd", env, np.conj(tensor_a), tensor_b)
    return np.complex128(np.squeeze(env))


def _operator_and_sites(observable: Any) -> tuple[NDArray[np.complex128], list[int]]:
    """Extracts the operator and its sites from an Observable or a gate.

    Args:
        observable: An Observable (with ``gate`` and ``sites``) or any gate-like object exposing
            ``sites`` and ``matrix``/``tensor``.

    Returns:
        The operator and the list of sites it acts on.
    """
    gate = getattr(observable, "gate", observable)
    sites = observable.sites if hasattr(observable, "sites") else gate.sites
    sites_list = [sites] if isinstance(sites, (int, np.integer)) else [int(site) for site in sites]
    operator = getattr(gate, "matrix", None)
    if operator is None:
        operator = gate.tensor
    return np.asarray(operator, dtype=complex), sites_list


def _prepare_operator(
    state: MPS, operator: NDArray[np.complex128], sites: list[int]
) -> tuple[NDArray[np.complex128], list[int]]:
    """Validates an operator against the state and brings it into site order.

    One-site operators are returned as (d, d) matrices, two-site operators as rank-4 tensors
    (out_i, out_j, in_i, in_j) with ascending sites.

    Raises:
        ShapeMismatchError: If a site is out of range or the operator does not fit the physical dimensions.
        AdjacencyError: If a two-site operator acts on non-neighboring sites.
        NotImplementedError: If the operator acts on more than two sites.
    """
    for site in sites:
        if not 0 <= site < state.length:
            msg = f"Observable acting on non-existing site {site} of an MPS of length {state.length}."
            raise ShapeMismatchError(msg)

    if len(sites) == 1:
        d = state.physical_dimensions[sites[0]]
        if operator.shape != (d, d):
            msg = f"Operator of shape {operator.shape} does not fit site {sites[0]} of dimension {d}."
            raise ShapeMismatchError(msg)
        return operator, sites

    if len(sites) == 2:
        first, second = sites
        if abs(first - second) != 1:
            msg = f"Only nearest-neighbor observables are supported, got sites {sites}."
            raise AdjacencyError(msg)
        d_first = state.physical_dimensions[first]
        d_second = state.physical_dimensions[second]
        if operator.shape == (d_first * d_second, d_first * d_second):
            operator = operator.reshape(d_first, d_second, d_first, d_second)
        elif operator.shape != (d_first, d_second, d_first, d_second):
            msg = f"Operator of shape {operator.shape} does not fit sites {sites} of dimensions {d_first}, {d_second}."
            raise ShapeMismatchError(msg)
        if first > second:
            operator = np.transpose(operator, (1, 0, 3, 2))
        return operator, sorted(sites)

    msg = "Only one- and two-site observables are currently implemented."
    raise NotImplementedError(msg)


def local_expval(state: MPS, operator: NDArray[np.complex128], sites: list[int]) -> np.complex128:
    """Compute <psi|O|psi> for an operator acting on one site or two neighboring sites.

    If the state is canonical with its orthogonality center inside the support of the operator, the
    environments are identities and only the local tensors are contracted. Otherwise a full transfer
    matrix sweep is performed. The state is never modified or renormalized.

    Args:
        state: The Matrix Product State.
        operator: The local operator as a matrix, or a rank-4 tensor for two sites.
        sites: The sites the operator acts on, in the index order of ``operator``.

    Returns:
        np.complex128: The (unnormalized) expectation value.
    """
    operator, sites = _prepare_operator(state, np.asarray(operator, dtype=complex), sites)
    first = sites[0]

    if state.orthogonality_center is not None and state.orthogonality_center in sites:
        if len(sites) == 1:
            tensor = state.tensors[first]
            return np.complex128(oe.contract("tlr, ts, slr->", np.conj(tensor), operator, tensor))
        theta = oe.contract("slm, umr->slur", state.tensors[first], state.tensors[first + 1])
        return np.complex128(oe.contract("tlvr, tvsu, slur->", np.conj(theta), operator, theta))

    env = np.ones((1, 1), dtype=complex)
    site = 0
    while site < state.length:
        tensor = state.tensors[site]
        if site == first and len(sites) == 1:
            env = oe.contract("ab, tac, ts, sbd->cd", env, np.conj(tensor), operator, tensor)
            site += 1
        elif site == first:
            theta = oe.contract("slm, umr->slur", tensor, state.tensors[site + 1])
            env = oe.contract("ab, tavc, tvsu, sbud->cd", env, np.conj(theta), operator, theta)
            site += 2
        else:
            env = oe.contract("ab, sac, sbd->cd", env, np.conj(tensor), tensor)
            site += 1
    return np.complex128(np.squeeze(env))


def expect(state: MPS, observables: Any | Sequence[Any]) -> NDArray[np.complex128]:
    """Expectation values of a list of observables.

    Args:
        state: The Matrix Product State.
        observables: A single Observable (or gate with sites) or a sequence of them.

    Returns:
        NDArray[np.complex128]: One value <psi|O|psi> per observable, in the given order.
    """
    if hasattr(observables, "sites") or hasattr(observables, "gate"):
        observables = [observables]
    results = np.empty(len(observables), dtype=np.complex128)
    for idx, observable in enumerate(observables):
        operator, sites = _operator_and_sites(observable)
        results[idx] = local_expval(state, operator, sites)
    return results
