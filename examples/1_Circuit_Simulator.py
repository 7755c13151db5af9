# Copyright (c) 2025 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Example: Strong Quantum Circuit Simulation with MQT TEBD.

This module simulates a Trotterized Ising circuit for several maximum bond dimensions and plots the
local magnetization <Z_i> of every site as a heatmap. Small bond dimensions visibly deviate from the
converged result, while the tracked fidelity of the final state is printed for every run.

Usage:
    Run this module as a script to execute the simulations and display the heatmap.
"""

from __future__ import annotations

import matplotlib.pyplot as plt
import numpy as np

from mqt.tebd import simulator
from mqt.tebd.core.data_structures.networks import MPS
from mqt.tebd.core.data_structures.simulation_parameters import Observable, StrongSimParams
from mqt.tebd.core.libraries.circuit_library import create_ising_circuit

if __name__ == "__main__":
    num_qubits = 12

    # Define the circuit.
    circuit = create_ising_circuit(L=num_qubits, J=1, g=0.5, dt=0.1, timesteps=20)

    # Define the initial state.
    state = MPS(num_qubits, state="x+")

    max_bond_dims = [1, 2, 4, 8, 16]
    heatmap = np.empty((num_qubits, len(max_bond_dims)))
    for j, max_bond_dim in enumerate(max_bond_dims):
        measurements = [Observable("z", site) for site in range(num_qubits)]
        sim_params = StrongSimParams(measurements, max_bond_dim=max_bond_dim, cutoff=1e-12, get_state=True)
        simulator.run(state, circuit, sim_params)
        for i, observable in enumerate(sim_params.sorted_observables):
            heatmap[i, j] = observable.results[0].real
        print(f"max_bond_dim={max_bond_dim}: fidelity={sim_params.output_state.fidelity:.6f}")

    fig, ax = plt.subplots(1, 1)
    im = ax.imshow(heatmap, aspect="auto", vmin=-1, vmax=1)
    ax.set_ylabel("Site")
    ax.set_xlabel("Maximum bond dimension")
    ax.set_xticks(np.arange(len(max_bond_dims)))
    ax.set_xticklabels([str(dim) for dim in max_bond_dims])

    fig.subplots_adjust(top=0.95, right=0.88)
    cbar_ax = fig.add_axes((0.9, 0.11, 0.025, 0.8))
    cbar = fig.colorbar(im, cax=cbar_ax)
    cbar.ax.set_title("$\\langle Z \\rangle$")

    plt.show()
