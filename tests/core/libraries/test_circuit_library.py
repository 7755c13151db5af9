# Copyright (c) 2025 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Tests for the circuit library.

This module verifies the Ising and Heisenberg Trotter circuits: their size, the gates they contain,
the nearest-neighbor structure and the even-before-odd ordering of the bonds.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from qiskit.circuit import QuantumCircuit

from mqt.tebd.core.libraries.circuit_library import create_heisenberg_circuit, create_ising_circuit

if TYPE_CHECKING:
    from collections.abc import Iterator


def two_qubit_bonds(circ: QuantumCircuit) -> Iterator[tuple[str, int, int]]:
    """Yields the name and the sorted qubit indices of every two-qubit gate."""
    for instruction in circ.data:
        if instruction.operation.num_qubits == 2:
            q0, q1 = (circ.find_bit(qubit).index for qubit in instruction.qubits)
            yield instruction.operation.name, min(q0, q1), max(q0, q1)


@pytest.mark.parametrize("L", [2, 5, 6])
def test_create_ising_circuit(L: int) -> None:  # noqa: N803
    """The Ising circuit has L rx and L-1 rzz gates per time step."""
    timesteps = 3
    circ = create_ising_circuit(L=L, J=1, g=0.5, dt=0.1, timesteps=timesteps)
    assert isinstance(circ, QuantumCircuit)
    assert circ.num_qubits == L
    counts = circ.count_ops()
    assert counts["rx"] == L * timesteps
    assert counts["rzz"] == (L - 1) * timesteps
    assert counts["barrier"] == timesteps

    bonds = list(two_qubit_bonds(circ))
    assert all(second == first + 1 for _, first, second in bonds)
    # Even bonds precede odd bonds within a time step
    first_step = [first for _, first, _ in bonds[: L - 1]]
    parities = [first % 2 for first in first_step]
    assert parities == sorted(parities)


def test_ising_angles() -> None:
    """The rotation angles follow from the Trotter step."""
    circ = create_ising_circuit(L=2, J=2.0, g=0.5, dt=0.1, timesteps=1)
    rx = next(instruction for instruction in circ.data if instruction.operation.name == "rx")
    rzz = next(instruction for instruction in circ.data if instruction.operation.name == "rzz")
    assert rx.operation.params[0] == pytest.approx(-0.1)
    assert rzz.operation.params[0] == pytest.approx(-0.4)


def test_create_heisenberg_circuit() -> None:
    """The Heisenberg circuit applies rz on every site and rzz, rxx, ryy on every bond."""
    L = 4
    timesteps = 2
    circ = create_heisenberg_circuit(L=L, Jx=1, Jy=1, Jz=1, h=0.5, dt=0.1, timesteps=timesteps)
    assert circ.num_qubits == L
    counts = circ.count_ops()
    assert counts["rz"] == L * timesteps
    for name in ("rzz", "rxx", "ryy"):
        assert counts[name] == (L - 1) * timesteps
    assert all(second == first + 1 for _, first, second in two_qubit_bonds(circ))


def test_single_site_circuits() -> None:
    """A single site has no bonds."""
    circ = create_ising_circuit(L=1, J=1, g=1, dt=0.1, timesteps=2)
    assert "rzz" not in circ.count_ops()
    assert circ.count_ops()["rx"] == 2
