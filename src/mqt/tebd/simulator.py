# Copyright (c) 2023 - 2025 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""High-level simulator module.

This module implements the simulation routine for quantum circuits on a Matrix Product State (MPS).
The circuit is applied with the digital TEBD backend. Depending on the type of simulation parameters
provided, the final state is then evaluated:
  - StrongSimParams: the expectation value of every observable is stored in ``observable.results``.
  - WeakSimParams: ``shots`` bitstrings are sampled and their counts are stored in ``sim_params.results``.

The initial state is never modified.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from .core.data_structures.simulation_parameters import StrongSimParams, WeakSimParams
from .core.methods.operations import expect
from .digital.digital_tebd import digital_tebd
from .general import set_logger

if TYPE_CHECKING:
    from qiskit.circuit import QuantumCircuit

    from .core.data_structures.networks import MPS


def _run_strong_sim(state: MPS, sim_params: StrongSimParams) -> None:
    """Evaluate the observables on the final state.

    The values are normalized by <psi|psi>, so truncated runs without renormalization still report
    expectation values of the (normalized) approximate state.

    Args:
        state: The final state.
        sim_params: Simulation parameters with the observables to evaluate.
    """
    norm_squared = state.norm() ** 2
    values = expect(state, sim_params.sorted_observables)
    if norm_squared > 0:
        values /= norm_squared
    for observable, value in zip(sim_params.sorted_observables, values):
        observable.results = np.array([value], dtype=np.complex128)


def _run_weak_sim(state: MPS, sim_params: WeakSimParams) -> None:
    """Sample measurement outcomes of the final state.

    Args:
        state: The final state.
        sim_params: Simulation parameters with the number of shots and the seed.
    """
    sim_params.results = state.measure_shots(
        sim_params.shots, seed=sim_params.seed, show_progress=sim_params.show_progress
    )


def run(initial_state: MPS, circuit: QuantumCircuit, sim_params: StrongSimParams | WeakSimParams) -> None:
    """Simulate a quantum circuit.

    Args:
        initial_state: The initial state of the system as an MPS. Qubit q of the circuit is site q.
        circuit: The quantum circuit to simulate.
        sim_params: Simulation parameters specifying the simulation mode and settings.

    Raises:
        ValueError: If the number of qubits does not match the length of the MPS.
        TypeError: If the simulation parameters are of an unknown type.
    """
    if initial_state.length != circuit.num_qubits:
        msg = f"State and circuit qubit counts do not match ({initial_state.length} != {circuit.num_qubits})."
        raise ValueError(msg)
    if not isinstance(sim_params, (StrongSimParams, WeakSimParams)):
        msg = f"Unknown simulation parameters {type(sim_params).__name__}."
        raise TypeError(msg)

    logger = set_logger("Simulation", level=sim_params.loglevel)
    logger.info(
        f"Simulating {circuit.num_qubits} qubits, {circuit.size()} operations, "  # noqa: G004
        f"max_bond_dim={sim_params.max_bond_dim}, cutoff={sim_params.cutoff}"
    )

    state = digital_tebd(initial_state, circuit, sim_params)
    if sim_params.get_state:
        sim_params.output_state = state

    if isinstance(sim_params, StrongSimParams):
        _run_strong_sim(state, sim_params)
    else:
        _run_weak_sim(state, sim_params)

    logger.info(f"Final max bond dimension={state.get_max_bond()}, fidelity={state.fidelity}")  # noqa: G004
