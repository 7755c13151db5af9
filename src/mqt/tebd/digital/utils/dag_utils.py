# Copyright (c) 2025 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""This module implements conversion and processing functions for quantum circuits using their DAG representations.

It provides utilities to:
  - Convert DAG nodes into gate objects from the GateLibrary.
  - Split the front layer of a DAGCircuit into single-qubit, even-bond and odd-bond gates.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ...core.libraries.gate_library import GateLibrary

if TYPE_CHECKING:
    from qiskit.dagcircuit import DAGCircuit, DAGOpNode

    from ...core.libraries.gate_library import BaseGate

IGNORED_OPERATIONS = {"measure", "barrier"}


def node_sites(dag: DAGCircuit, node: DAGOpNode) -> list[int]:
    """Qubit indices a DAG node acts on, in the order of its arguments."""
    return [dag.find_bit(qubit).index for qubit in node.qargs]


def convert_node_to_gate(dag: DAGCircuit, node: DAGOpNode) -> BaseGate:
    """Convert a single DAG node into a gate object from the GateLibrary.

    Args:
        dag: The DAGCircuit containing the node.
        node: The operation node.

    Returns:
        BaseGate: The gate with parameters and sites set.

    Raises:
        ValueError: If the operation is not found in the GateLibrary.
    """
    name = node.op.name
    gate_class = getattr(GateLibrary, name, None)
    if gate_class is None:
        msg = f"Gate {name} is not supported, transpile the circuit to the GateLibrary first."
        raise ValueError(msg)

    if node.op.params:
        gate_object = gate_class([float(param) for param in node.op.params])
    else:
        gate_object = gate_class()
    gate_object.set_sites(*node_sites(dag, node))
    return gate_object


def convert_dag_to_gates(dag: DAGCircuit) -> list[BaseGate]:
    """Convert a DAGCircuit into a list of gate objects from the GateLibrary.

    Measurements and barriers are skipped.

    Args:
        dag: The DAGCircuit.

    Returns:
        list[BaseGate]: The gates in topological order, each with attributes such as .tensor and .sites.
    """
    return [
        convert_node_to_gate(dag, node)
        for node in dag.topological_op_nodes()
        if node.op.name not in IGNORED_OPERATIONS
    ]


def process_layer(dag: DAGCircuit) -> tuple[list[DAGOpNode], list[DAGOpNode], list[DAGOpNode]]:
    """Splits the front layer of a DAG into the groups of a TEBD sweep.

    Measurements and barriers are removed from the DAG instead of being returned, repeatedly, until the
    front layer holds only gates. Gates that follow an ignored operation are therefore part of this layer.
    All returned nodes stay in the DAG until the caller removes them after applying them.

    Args:
        dag: The circuit DAG, consumed layer by layer.

    Returns:
        The single-qubit nodes, the two-qubit nodes whose lower qubit is even, and those whose lower
        qubit is odd. Nodes of one group act on disjoint qubits.

    Raises:
        NotImplementedError: If an operation acts on more than two qubits.
    """
    current_layer = dag.front_layer()
    ignored = [node for node in current_layer if node.op.name in IGNORED_OPERATIONS]
    while ignored:
        for node in ignored:
            dag.remove_op_node(node)
        current_layer = dag.front_layer()
        ignored = [node for node in current_layer if node.op.name in IGNORED_OPERATIONS]

    single_qubit_nodes = []
    even_nodes = []
    odd_nodes = []

    for node in current_layer:
        if len(node.qargs) == 1:
            single_qubit_nodes.append(node)
        elif len(node.qargs) == 2:
            # Group two-qubit gates by even/odd based on the lower qubit index.
            if min(node_sites(dag, node)) % 2 == 0:
                even_nodes.append(node)
            else:
                odd_nodes.append(node)
        else:
            msg = f"Gate {node.op.name} acts on {len(node.qargs)} qubits, only one- and two-qubit gates are supported."
            raise NotImplementedError(msg)

    return single_qubit_nodes, even_nodes, odd_nodes
