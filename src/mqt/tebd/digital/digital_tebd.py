# Copyright (c) 2023 - 2025 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Digital Time-Evolving Block Decimation.

This module provides the circuit backend of the simulator. The circuit is converted to its DAG
representation and consumed layer by layer. Each layer is applied as

1. all single-qubit gates,
2. the two-qubit gates on even bonds (0, 1), (2, 3), ... from left to right, absorbing the singular
   values to the right,
3. the two-qubit gates on odd bonds from right to left, absorbing the singular values to the left.

Every update is a canonical local update, so the orthogonality center follows the sweep and the
whole chain is canonized only once, before the first layer.
"""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING

from qiskit.converters import circuit_to_dag
from tqdm import tqdm

from ..core.methods.tebd import evolve
from ..general import set_logger
from .utils.dag_utils import IGNORED_OPERATIONS, convert_node_to_gate, node_sites, process_layer

if TYPE_CHECKING:
    from qiskit.circuit import QuantumCircuit
    from qiskit.dagcircuit import DAGCircuit, DAGOpNode

    from ..core.data_structures.networks import MPS
    from ..core.data_structures.simulation_parameters import EvolveOptions, StrongSimParams, WeakSimParams


def move_center_next_to(state: MPS, sites: list[int]) -> None:
    """Moves the orthogonality center next to the given sites if it is further away.

    Args:
        state: A canonical Matrix Product State.
        sites: The sites of the next update.
    """
    center = state.orthogonality_center
    assert center is not None, "The MPS must be canonical."
    if center < min(sites) - 1:
        state.canonize(min(sites))
    elif center > max(sites) + 1:
        state.canonize(max(sites))


def apply_two_qubit_group(
    state: MPS, dag: DAGCircuit, nodes: list[DAGOpNode], options: EvolveOptions, *, reverse: bool = False
) -> None:
    """Apply a group of two-qubit gates sorted by their lower site.

    Args:
        state: The Matrix Product State.
        dag: The DAGCircuit the nodes belong to. Applied nodes are removed from it.
        nodes: Two-qubit gate nodes on disjoint bonds.
        options: The update options.
        reverse: Sweep from right to left.
    """
    for node in sorted(nodes, key=lambda node: min(node_sites(dag, node)), reverse=reverse):
        gate = convert_node_to_gate(dag, node)
        move_center_next_to(state, gate.sites)
        evolve(state, gate, options)
        dag.remove_op_node(node)


def digital_tebd(initial_state: MPS, circuit: QuantumCircuit, sim_params: StrongSimParams | WeakSimParams) -> MPS:
    """Circuit Time-Evolving Block Decimation.

    Simulates a quantum circuit on a copy of the initial state.

    Args:
        initial_state: The initial state of the system represented as a Matrix Product State.
        circuit: The quantum circuit to be simulated. Qubit q is site q.
        sim_params: Parameters for the simulation, either for strong or weak simulation.

    Returns:
        MPS: The final state, canonical with a known orthogonality center.
    """
    logger = set_logger("TEBD", level=sim_params.loglevel)
    state = copy.deepcopy(initial_state)
    state.canonize(0)
    dag = circuit_to_dag(circuit)

    even_options = sim_params.evolve_options(absorb="right")
    odd_options = sim_params.evolve_options(absorb="left")

    num_gates = sum(1 for node in dag.op_nodes() if node.op.name not in IGNORED_OPERATIONS)
    layer_count = 0
    with tqdm(total=num_gates, desc="Applying gates", ncols=80, disable=not sim_params.show_progress) as pbar:
        while dag.op_nodes():
            single_qubit_nodes, even_nodes, odd_nodes = process_layer(dag)

            for node in single_qubit_nodes:
                evolve(state, convert_node_to_gate(dag, node), even_options)
                dag.remove_op_node(node)

            # Process two-qubit gates in even/odd sweeps.
            apply_two_qubit_group(state, dag, even_nodes, even_options)
            apply_two_qubit_group(state, dag, odd_nodes, odd_options, reverse=True)

            pbar.update(len(single_qubit_nodes) + len(even_nodes) + len(odd_nodes))
            layer_count += 1
            logger.debug(
                f"Layer {layer_count}: max bond dimension={state.get_max_bond()}, fidelity={state.fidelity}"  # noqa: G004
            )

    return state
