# Copyright (c) 2023 - 2025 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Library of quantum gates.

Every gate is a subclass of BaseGate holding its matrix and, once the sites are set, its tensor form.
Two-site tensors use the index order (out_0, out_1, in_0, in_1), where 0 and 1 refer to the sites in the
order they were given. Matrices use the first site as the most significant index.

Rotations exp(-i theta/2 P) about a Pauli string P are built from their generator, controlled gates
from their target block. The GateLibrary class aggregates all gate classes under their Qiskit names.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

import numpy as np

if TYPE_CHECKING:
    from numpy.typing import ArrayLike, NDArray

PAULI_I = np.eye(2, dtype=complex)
PAULI_X = np.array([[0, 1], [1, 0]], dtype=complex)
PAULI_Y = np.array([[0, -1j], [1j, 0]], dtype=complex)
PAULI_Z = np.array([[1, 0], [0, -1]], dtype=complex)


def pauli_rotation(generator: NDArray[np.complex128], theta: float) -> NDArray[np.complex128]:
    """Rotation exp(-i theta/2 P) for an involutory generator P (P @ P = 1).

    Args:
        generator: A Pauli matrix or a tensor product of Pauli matrices.
        theta: The rotation angle.

    Returns:
        NDArray[np.complex128]: cos(theta/2) 1 - i sin(theta/2) P.
    """
    identity = np.eye(generator.shape[0], dtype=complex)
    return np.cos(theta / 2) * identity - 1j * np.sin(theta / 2) * generator


def controlled(target: NDArray[np.complex128]) -> NDArray[np.complex128]:
    """Controlled version of a one-qubit gate, the control is the first site."""
    mat = np.eye(4, dtype=complex)
    mat[2:, 2:] = target
    return mat


def is_unitary(matrix: NDArray[np.complex128]) -> bool:
    """Whether U^dagger U equals the identity."""
    return bool(np.allclose(matrix.conj().T @ matrix, np.eye(matrix.shape[0])))


class BaseGate:
    """Base class representing a quantum gate.

    Attributes:
        name: The name of the gate.
        matrix: The matrix representation of the gate.
        interaction: The number of sites the gate acts on.
        physical_dimension: The local dimension of each site the gate acts on.
        tensor: The tensor representation of the gate.
        sites: The sites the gate acts on, only present after set_sites.
    """

    name = "custom"
    matrix: NDArray[np.complex128]
    interaction: int
    physical_dimension: int
    tensor: NDArray[np.complex128]
    sites: list[int]

    def __init__(self, mat: ArrayLike, interaction: int | None = None) -> None:
        """Initializes a gate from its matrix.

        Args:
            mat: The matrix representation of the gate.
            interaction: Number of sites the gate acts on. If None, it is inferred as log2 of the
                matrix size for qubit gates and 1 otherwise.

        Raises:
            ValueError: If the matrix is not square or its size is not a power of the local dimension.
        """
        mat = np.asarray(mat, dtype=complex)
        if mat.ndim != 2 or mat.shape[0] != mat.shape[1]:
            msg = "Matrix must be square"
            raise ValueError(msg)

        size = mat.shape[0]
        if interaction is None:
            log = np.log2(size)
            interaction = int(round(log)) if size > 1 and np.isclose(log, round(log)) else 1
        physical_dimension = int(round(size ** (1 / interaction)))
        if physical_dimension**interaction != size:
            msg = f"Matrix of size {size} cannot act on {interaction} sites of equal dimension."
            raise ValueError(msg)

        self.matrix = mat
        self.tensor = mat
        self.interaction = interaction
        self.physical_dimension = physical_dimension

    def set_sites(self, *sites: int | list[int]) -> None:
        """Sets the sites for the gate.

        Multi-site gates get their tensor reshaped to (d, ..., d) with the output indices first.

        Args:
            *sites: Site indices, given individually or as lists.

        Raises:
            ValueError: If the number of sites does not match the interaction level of the gate.
        """
        sites_list: list[int] = []
        for s in sites:
            if isinstance(s, (int, np.integer)):
                sites_list.append(int(s))
            else:
                sites_list.extend(int(site) for site in s)

        if len(sites_list) != self.interaction:
            msg = f"Number of sites {len(sites_list)} must be equal to the interaction level {self.interaction}"
            raise ValueError(msg)

        self.sites = sites_list
        if self.interaction > 1:
            self.tensor = np.reshape(self.matrix, (self.physical_dimension,) * (2 * self.interaction))

    def is_unitary(self) -> bool:
        return is_unitary(self.matrix)

    def _check_interaction(self, other: BaseGate, operation: str) -> None:
        if self.interaction != other.interaction:
            msg = f"Cannot {operation} gates with different interaction"
            raise ValueError(msg)

    def __add__(self, other: BaseGate) -> BaseGate:
        self._check_interaction(other, "add")
        return BaseGate(self.matrix + other.matrix, self.interaction)

    def __sub__(self, other: BaseGate) -> BaseGate:
        self._check_interaction(other, "subtract")
        return BaseGate(self.matrix - other.matrix, self.interaction)

    def __mul__(self, other: BaseGate | complex) -> BaseGate:
        """Product of two gates (matrix product) or a gate scaled by a number.

        Raises:
            ValueError: If two gates have different interaction levels.
        """
        if isinstance(other, BaseGate):
            self._check_interaction(other, "multiply")
            return BaseGate(self.matrix @ other.matrix, self.interaction)
        return BaseGate(self.matrix * other, self.interaction)

    def __rmul__(self, other: complex) -> BaseGate:
        return BaseGate(other * self.matrix, self.interaction)

    def __matmul__(self, other: BaseGate) -> BaseGate:
        self._check_interaction(other, "multiply")
        return BaseGate(self.matrix @ other.matrix, self.interaction)

    def dag(self) -> BaseGate:
        """Hermitian conjugate of the gate."""
        return BaseGate(self.matrix.conj().T, self.interaction)

    def conj(self) -> BaseGate:
        return BaseGate(self.matrix.conj(), self.interaction)

    def trans(self) -> BaseGate:
        return BaseGate(self.matrix.T, self.interaction)


class X(BaseGate):
    """Pauli-X (NOT) gate."""

    name = "x"

    def __init__(self) -> None:
        super().__init__(PAULI_X)


class Y(BaseGate):
    """Pauli-Y gate."""

    name = "y"

    def __init__(self) -> None:
        super().__init__(PAULI_Y)


class Z(BaseGate):
    """Pauli-Z gate."""

    name = "z"

    def __init__(self) -> None:
        super().__init__(PAULI_Z)


class H(BaseGate):
    """Hadamard gate."""

    name = "h"

    def __init__(self) -> None:
        super().__init__((PAULI_X + PAULI_Z) / np.sqrt(2))


class Id(BaseGate):
    """Identity gate."""

    name = "id"

    def __init__(self) -> None:
        super().__init__(PAULI_I)


class SX(BaseGate):
    """Square-root X gate, equal to Rx(pi/2) up to a global phase of exp(i pi/4)."""

    name = "sx"

    def __init__(self) -> None:
        super().__init__(np.exp(1j * np.pi / 4) * pauli_rotation(PAULI_X, np.pi / 2))


class RotationGate(BaseGate):
    """Rotation exp(-i theta/2 P) about a fixed Pauli string P.

    Attributes:
        theta: The rotation angle.
    """

    generator: ClassVar[NDArray[np.complex128]]

    def __init__(self, params: list[float]) -> None:
        """Initializes the rotation.

        Args:
            params: A list containing the rotation angle theta.
        """
        self.theta = float(params[0])
        super().__init__(pauli_rotation(self.generator, self.theta))


class Rx(RotationGate):
    """Rotation about the x-axis."""

    name = "rx"
    generator = PAULI_X


class Ry(RotationGate):
    """Rotation about the y-axis."""

    name = "ry"
    generator = PAULI_Y


class Rz(RotationGate):
    """Rotation about the z-axis."""

    name = "rz"
    generator = PAULI_Z


class Rxx(RotationGate):
    """Two-qubit rotation about X⊗X."""

    name = "rxx"
    generator = np.kron(PAULI_X, PAULI_X)


class Ryy(RotationGate):
    """Two-qubit rotation about Y⊗Y."""

    name = "ryy"
    generator = np.kron(PAULI_Y, PAULI_Y)


class Rzz(RotationGate):
    """Two-qubit rotation about Z⊗Z."""

    name = "rzz"
    generator = np.kron(PAULI_Z, PAULI_Z)


class Phase(BaseGate):
    """Phase gate diag(1, exp(i theta)).

    Attributes:
        theta: The phase.
    """

    name = "p"

    def __init__(self, params: list[float]) -> None:
        self.theta = float(params[0])
        super().__init__(np.diag([1, np.exp(1j * self.theta)]))


class U(BaseGate):
    """Generic single-qubit gate U(theta, phi, lambda) in the Qiskit convention.

    Attributes:
        theta: Polar rotation angle.
        phi: Phase applied after the rotation.
        lam: Phase applied before the rotation.
    """

    name = "u"

    def __init__(self, params: list[float]) -> None:
        """Initializes the gate.

        Args:
            params: The three angles (theta, phi, lambda).
        """
        self.theta, self.phi, self.lam = (float(param) for param in params)
        # U = Rz(phi) Ry(theta) Rz(lambda) up to the global phase exp(i (phi + lambda) / 2)
        mat = pauli_rotation(PAULI_Z, self.phi) @ pauli_rotation(PAULI_Y, self.theta) @ pauli_rotation(
            PAULI_Z, self.lam
        )
        super().__init__(np.exp(0.5j * (self.phi + self.lam)) * mat)


class CX(BaseGate):
    """Controlled-NOT gate. The first site is the control, the second site the target."""

    name = "cx"

    def __init__(self) -> None:
        super().__init__(controlled(PAULI_X))


class CZ(BaseGate):
    """Controlled-Z gate."""

    name = "cz"

    def __init__(self) -> None:
        super().__init__(controlled(PAULI_Z))


class CPhase(BaseGate):
    """Controlled phase gate.

    Attributes:
        theta: The phase.
    """

    name = "cp"

    def __init__(self, params: list[float]) -> None:
        self.theta = float(params[0])
        super().__init__(controlled(np.diag([1, np.exp(1j * self.theta)])))


class SWAP(BaseGate):
    """SWAP gate."""

    name = "swap"

    def __init__(self) -> None:
        # (1 + XX + YY + ZZ) / 2
        terms = PAULI_I, PAULI_X, PAULI_Y, PAULI_Z
        super().__init__(sum(np.kron(pauli, pauli) for pauli in terms).real / 2)


class ZZ(BaseGate):
    """Two-site Z⊗Z operator, mostly used as a correlator observable."""

    name = "zz"

    def __init__(self) -> None:
        super().__init__(np.kron(PAULI_Z, PAULI_Z))


class XX(BaseGate):
    """Two-site X⊗X operator, mostly used as a correlator observable."""

    name = "xx"

    def __init__(self) -> None:
        super().__init__(np.kron(PAULI_X, PAULI_X))


class YY(BaseGate):
    """Two-site Y⊗Y correlator."""

    name = "yy"

    def __init__(self) -> None:
        super().__init__(np.kron(PAULI_Y, PAULI_Y))


class P0(BaseGate):
    """Projector |0><0|, measured as the probability of outcome 0."""

    name = "p0"

    def __init__(self) -> None:
        super().__init__(np.diag([1, 0]))


class P1(BaseGate):
    """Projector |1><1|."""

    name = "p1"

    def __init__(self) -> None:
        super().__init__(np.diag([0, 1]))


class GateLibrary:
    """Lookup of the gate classes by their lowercase (Qiskit) names.

    Parameterized gates take a list of angles, all others no arguments. The correlators ``xx``, ``yy`` and
    ``zz`` and the projectors ``p0`` and ``p1`` are observables without a Qiskit gate counterpart.
    """

    x = X
    y = Y
    z = Z
    sx = SX
    h = H
    id = Id
    rx = Rx
    ry = Ry
    rz = Rz
    p = Phase
    u = U
    cx = CX
    cz = CZ
    cp = CPhase
    swap = SWAP
    rxx = Rxx
    ryy = Ryy
    rzz = Rzz
    xx = XX
    yy = YY
    zz = ZZ
    p0 = P0
    p1 = P1
