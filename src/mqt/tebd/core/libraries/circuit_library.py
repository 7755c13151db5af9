# Copyright (c) 2025 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Library of useful quantum circuits.

This module provides functions for creating Trotterized circuits of the one-dimensional Ising and
Heisenberg models. All interactions are nearest-neighbor and every Trotter step applies the even bonds
(0, 1), (2, 3), ... before the odd bonds (1, 2), (3, 4), ..., which is the order the TEBD sweep expects.
"""

from __future__ import annotations

# ignore non-lowercase argument names for physics notation
# ruff: noqa: N803
from qiskit.circuit import QuantumCircuit


def _even_odd_bonds(L: int) -> list[tuple[int, int]]:
    """Nearest-neighbor bonds of an open chain, even bonds first."""
    even = [(site, site + 1) for site in range(0, L - 1, 2)]
    odd = [(site, site + 1) for site in range(1, L - 1, 2)]
    return even + odd


def create_ising_circuit(L: int, J: float, g: float, dt: float, timesteps: int) -> QuantumCircuit:
    """Ising Trotter circuit.

    Create a quantum circuit for simulating the transverse field Ising model
    H = -J sum Z_i Z_{i+1} - g sum X_i with open boundary conditions.

    Args:
        L (int): Number of qubits in the circuit.
        J (float): Coupling constant for the ZZ interaction.
        g (float): Transverse field strength.
        dt (float): Time step for the simulation.
        timesteps (int): Number of time steps to simulate.

    Returns:
        QuantumCircuit: A quantum circuit representing the Ising model evolution.
    """
    # Angle on X rotation
    alpha = -2 * dt * g
    # Angle on ZZ rotation
    beta = -2 * dt * J

    circ = QuantumCircuit(L)
    for _ in range(timesteps):
        for site in range(L):
            circ.rx(theta=alpha, qubit=site)
        for first, second in _even_odd_bonds(L):
            circ.rzz(beta, qubit1=first, qubit2=second)
        circ.barrier()

    return circ


def create_heisenberg_circuit(
    L: int, Jx: float, Jy: float, Jz: float, h: float, dt: float, timesteps: int
) -> QuantumCircuit:
    """Heisenberg Trotter circuit.

    Create a quantum circuit for simulating the Heisenberg model
    H = -sum (Jx X_i X_{i+1} + Jy Y_i Y_{i+1} + Jz Z_i Z_{i+1}) - h sum Z_i.

    Args:
        L (int): Number of qubits (sites) in the circuit.
        Jx (float): Coupling constant for the XX interaction.
        Jy (float): Coupling constant for the YY interaction.
        Jz (float): Coupling constant for the ZZ interaction.
        h (float): Magnetic field strength.
        dt (float): Time step for the simulation.
        timesteps (int): Number of time steps to simulate.

    Returns:
        QuantumCircuit: A quantum circuit representing the Heisenberg model evolution.
    """
    theta_xx = -2 * dt * Jx
    theta_yy = -2 * dt * Jy
    theta_zz = -2 * dt * Jz
    theta_z = -2 * dt * h

    circ = QuantumCircuit(L)
    for _ in range(timesteps):
        for site in range(L):
            circ.rz(phi=theta_z, qubit=site)
        for first, second in _even_odd_bonds(L):
            circ.rzz(theta=theta_zz, qubit1=first, qubit2=second)
            circ.rxx(theta=theta_xx, qubit1=first, qubit2=second)
            circ.ryy(theta=theta_yy, qubit1=first, qubit2=second)
        circ.barrier()

    return circ
