# Copyright (c) 2025 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Example: Weak Quantum Circuit Simulation (Shots) with MQT TEBD.

This module samples a GHZ-like circuit followed by a few layers of random rotations. An MPS is
initialized in the |0> state, the circuit is evolved with a bounded bond dimension, and the sampled
bitstring counts are displayed as a bar chart. Bit q of every outcome is qubit q of the circuit.

Usage:
    Run this module as a script to execute the simulation and display the results.
"""

from __future__ import annotations

import matplotlib.pyplot as plt
import numpy as np
from qiskit.circuit import QuantumCircuit

from mqt.tebd import simulator
from mqt.tebd.core.data_structures.networks import MPS
from mqt.tebd.core.data_structures.simulation_parameters import WeakSimParams

if __name__ == "__main__":
    num_qubits = 8

    # Create the circuit.
    rng = np.random.default_rng(0)
    circuit = QuantumCircuit(num_qubits)
    circuit.h(0)
    for qubit in range(num_qubits - 1):
        circuit.cx(qubit, qubit + 1)
    for _ in range(3):
        for qubit in range(num_qubits):
            circuit.ry(rng.uniform(-0.3, 0.3), qubit)
        for qubit in range(num_qubits - 1):
            circuit.rzz(rng.uniform(-np.pi, np.pi), qubit, qubit + 1)
    circuit.measure_all()

    # Define the initial state.
    state = MPS(num_qubits, state="zeros")

    # Define the simulation parameters.
    sim_params = WeakSimParams(shots=1024, max_bond_dim=4, cutoff=1e-10, seed=1, show_progress=True)

    # Run the simulation.
    simulator.run(state, circuit, sim_params)

    # Plot the measurement outcomes as a bar chart.
    labels = [format(outcome, f"0{num_qubits}b") for outcome in sim_params.results]
    plt.bar(labels, sim_params.results.values())
    plt.xlabel("Bitstring (qubit 0 rightmost)")
    plt.ylabel("Counts")
    plt.title("Measurement Results")
    plt.xticks(rotation=90)
    plt.tight_layout()
    plt.show()
