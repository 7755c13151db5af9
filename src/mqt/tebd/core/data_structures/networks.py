# Copyright (c) 2023 - 2025 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Tensor Network Data Structures.

This module implements the Matrix Product State (MPS) used to represent quantum states in the TEBD engine.
Besides the chain of site tensors, the MPS tracks whether it is in canonical form and where its orthogonality
center sits. It provides canonicalization, bond dimension introspection, entanglement diagnostics,
overlaps, and projective measurements.
"""

from __future__ import annotations

import copy
import logging
from typing import TYPE_CHECKING

import numpy as np
import opt_einsum as oe
from tqdm import tqdm

from ...general import set_logger
from ..exceptions import DimensionError
from ..methods.decompositions import right_qr, right_svd, two_site_svd
from ..methods.operations import overlap

if TYPE_CHECKING:
    from collections.abc import Sequence

    from numpy.typing import ArrayLike, NDArray


_SQRT_HALF = 1 / np.sqrt(2)

# Local vectors of the site independent product states
_UNIFORM_STATES = {
    "zeros": (1, 0),
    "ones": (0, 1),
    "x+": (_SQRT_HALF, _SQRT_HALF),
    "x-": (_SQRT_HALF, -_SQRT_HALF),
    "y+": (_SQRT_HALF, 1j * _SQRT_HALF),
    "y-": (_SQRT_HALF, -1j * _SQRT_HALF),
}


def _local_vector(state: str, site: int, length: int, d: int, rng: np.random.Generator) -> NDArray[np.complex128]:
    """Local vector of a named product state at a site, padded with zeros for qudits.

    Raises:
        ValueError: If the state name is unknown.
    """
    if state in _UNIFORM_STATES:
        amplitudes = _UNIFORM_STATES[state]
    elif state == "Neel":
        amplitudes = (0, 1) if site % 2 else (1, 0)
    elif state == "wall":
        amplitudes = (1, 0) if site < length // 2 else (0, 1)
    elif state == "random":
        p = rng.random()
        amplitudes = (p, 1 - p)
    else:
        msg = "Invalid state string"
        raise ValueError(msg)

    vector = np.zeros(d, dtype=complex)
    vector[:2] = amplitudes
    return vector / np.linalg.norm(vector)


class MPS:
    """Matrix Product State (MPS) class for representing quantum states.

    The index order of every site tensor is (sigma, chi_l-1, chi_l), see ``index_order``.
    Boundary tensors carry a trivial bond of dimension 1, so all sites share the same layout.

    Attributes:
    length (int): The number of sites in the MPS.
    tensors (list[NDArray[np.complex128]]): List of rank-3 tensors representing the MPS.
    physical_dimensions (list[int]): List of physical dimensions for each site.
    orthogonality_center (int | None): Site of the orthogonality center if the MPS is known to be in
        canonical form, None otherwise.
    fidelity (float): Lower bound for the fidelity with the untruncated state, updated on every truncation.
    flipped (bool): Indicates if the network has been flipped.

    Methods:
    from_product_state(local_vectors, physical_dimensions) -> MPS:
        Builds a bond dimension 1 chain from local state vectors.
    canonize(center, decomposition) -> None:
        Brings the MPS into mixed canonical form around a given site.
    shift_orthogonality_center_right(current_orthogonality_center, decomposition) -> None:
        Moves the orthogonality center one site to the right.
    shift_orthogonality_center_left(current_orthogonality_center, decomposition) -> None:
        Moves the orthogonality center one site to the left.
    normalize(center) -> None:
        Canonizes the MPS and scales it to unit norm.
    bond_dimensions() -> list[int]:
        Returns the dimensions of the internal bonds.
    overlap(other) -> np.complex128:
        Computes <self|other>.
    norm() -> np.float64:
        Computes the norm of the MPS.
    """

    index_order = ("physical", "left", "right")

    def __init__(
        self,
        length: int,
        tensors: list[NDArray[np.complex128]] | None = None,
        physical_dimensions: list[int] | int | None = None,
        state: str = "zeros",
        basis_string: str | None = None,
        loglevel: int = logging.WARNING,
    ) -> None:
        """Initializes a Matrix Product State (MPS).

        Args:
            length: Number of sites (qubits) in the MPS.
            tensors: Predefined tensors representing the MPS. Must match `length` if provided.
                If None, tensors are initialized according to `state`.
            physical_dimensions: Physical dimension for each site. Defaults to qubit systems (dimension 2) if None.
            state: Initial product state. Valid options include:
                - "zeros": Initializes all qubits to |0⟩.
                - "ones": Initializes all qubits to |1⟩.
                - "x+", "x-": Eigenstates (|0⟩ ± |1⟩)/√2 of X.
                - "y+", "y-": Eigenstates (|0⟩ ± i|1⟩)/√2 of Y.
                - "Neel": Alternating pattern |0101...⟩.
                - "wall": Domain wall in the middle of the chain |000111⟩.
                - "random": Random real superposition of |0⟩ and |1⟩ on each site.
                - "basis": The computational basis state given by `basis_string`.
                Default is "zeros".
            basis_string: Basis state for `state="basis"`, one digit per site, e.g. "0101". For qudits
                the digits may go up to d-1.
            loglevel: Output level of the internal logger.

        Raises:
            ValueError: If the provided `state` parameter does not match any valid initialization string.
        """
        self.flipped = False
        self.orthogonality_center: int | None = None
        self.fidelity = 1.0
        self.loglevel = loglevel
        self._logger = set_logger("MPS", level=loglevel)
        self.length = length

        if physical_dimensions is None:
            physical_dimensions = [tensor.shape[0] for tensor in tensors] if tensors else 2
        if isinstance(physical_dimensions, int):
            physical_dimensions = [physical_dimensions] * length
        self.physical_dimensions = list(physical_dimensions)
        assert len(self.physical_dimensions) == length

        if tensors:
            assert len(tensors) == length
            self.tensors = [np.asarray(tensor, dtype=complex) for tensor in tensors]
            return

        if state == "basis":
            assert basis_string is not None, "basis_string must be provided for 'basis' state initialization."
            assert len(basis_string) == length, "basis_string must have one digit per site."
            levels = [int(char) for char in basis_string]
        else:
            levels = None

        rng = np.random.default_rng()
        self.tensors = []
        for site, d in enumerate(self.physical_dimensions):
            if levels is not None:
                assert 0 <= levels[site] < d, f"Invalid state index {levels[site]} at site {site}"
                vector = np.zeros(d, dtype=complex)
                vector[levels[site]] = 1
            else:
                vector = _local_vector(state, site, length, d, rng)
            self.tensors.append(vector.reshape(d, 1, 1))

    @classmethod
    def from_product_state(
        cls,
        local_vectors: Sequence[ArrayLike],
        physical_dimensions: list[int] | int | None = None,
        loglevel: int = logging.WARNING,
    ) -> MPS:
        """Builds a product state MPS.

        Every local vector becomes a site tensor of shape (d, 1, 1), so all bond dimensions are 1.
        The vectors are used as given, no normalization is applied. The new MPS is not marked canonical.

        Args:
            local_vectors: One state vector per site.
            physical_dimensions: Expected physical dimension per site (int for all sites).
                Defaults to 2 for every site.
            loglevel: Output level of the internal logger.

        Returns:
            MPS: The product state.

        Raises:
            DimensionError: If no vectors are given, a vector is not one-dimensional,
                or its length does not match the physical dimension of its site.
        """
        vectors = [np.asarray(vector, dtype=complex) for vector in local_vectors]
        if not vectors:
            msg = "Cannot build an MPS from an empty sequence of local vectors."
            raise DimensionError(msg)

        length = len(vectors)
        if physical_dimensions is None:
            dims = [2] * length
        elif isinstance(physical_dimensions, int):
            dims = [physical_dimensions] * length
        else:
            dims = list(physical_dimensions)
            if len(dims) != length:
                msg = f"Got {length} local vectors but {len(dims)} physical dimensions."
                raise DimensionError(msg)

        tensors = []
        for site, (vector, d) in enumerate(zip(vectors, dims)):
            if vector.ndim != 1 or vector.shape[0] != d:
                msg = f"Local vector at site {site} has shape {vector.shape}, expected ({d},)."
                raise DimensionError(msg)
            tensors.append(vector.reshape(d, 1, 1))

        return cls(length, tensors=tensors, physical_dimensions=dims, loglevel=loglevel)

    @property
    def is_canonical(self) -> bool:
        """Whether the MPS is known to be in canonical form."""
        return self.orthogonality_center is not None

    def bond_dimensions(self) -> list[int]:
        """Dimensions of the internal bonds.

        Returns:
            list[int]: Entry i is the dimension of the bond between site i and site i+1.
        """
        return [tensor.shape[2] for tensor in self.tensors[:-1]]

    def get_max_bond(self) -> int:
        """Write max bond dim.

        Returns:
            int: The maximum bond dimension found among all tensors in the network.
        """
        return max(max(tensor.shape[1], tensor.shape[2]) for tensor in self.tensors)

    def get_total_bond(self) -> int:
        """Compute total bond dimension.

        Returns:
            int: The sum of all internal bond dimensions of the network.
        """
        return sum(self.bond_dimensions())

    def get_cost(self) -> int:
        """Estimate contraction cost.

        Approximates the computational cost of a sweep over the network
        by summing the cube of each internal bond dimension.

        Returns:
            int: The estimated contraction cost of the network.
        """
        return sum(bond**3 for bond in self.bond_dimensions())

    def get_byte_size(self) -> int:
        """Returns the number of bytes the site tensors occupy in memory."""
        return sum(tensor.nbytes for tensor in self.tensors)

    def get_schmidt_spectrum(self, sites: list[int]) -> NDArray[np.float64]:
        """Compute Schmidt spectrum.

        Calculates the normalized Schmidt coefficients of the bipartition between two
        adjacent sites. A canonical copy of the state is used, so the MPS itself is not modified.

        Args:
            sites (list[int]): A list of exactly two adjacent site indices (i, i+1).

        Returns:
            NDArray[np.float64]: The Schmidt coefficients in non-increasing order.
        """
        assert len(sites) == 2, "Schmidt spectrum is defined on a bond (two adjacent sites)."
        i, j = sites
        assert i + 1 == j, "Schmidt spectrum only defined for nearest-neighbor cut."

        temp_state = copy.deepcopy(self)
        temp_state.canonize(i)
        _, s_vec, _ = right_svd(temp_state.tensors[i])
        norm = np.linalg.norm(s_vec)
        if norm == 0:
            return s_vec
        return s_vec / norm

    def get_entropy(self, sites: list[int]) -> np.float64:
        """Compute bipartite entanglement entropy.

        Calculates the von Neumann entropy of the reduced density matrix
        across the bond between two adjacent sites.

        Args:
            sites (list[int]): A list of exactly two adjacent site indices (i, i+1).

        Returns:
            np.float64: The entanglement entropy across the specified bond.
        """
        s_vec = self.get_schmidt_spectrum(sites)
        p = s_vec.astype(np.float64) ** 2
        p = p[p > 0]
        return np.float64(-np.sum(p * np.log(p)))

    def flip_network(self) -> None:
        """Flip MPS.

        Flips the bond dimensions in the network so that we can do operations
        from right to left rather than coding it twice.
        """
        new_tensors = [np.transpose(tensor, (0, 2, 1)) for tensor in self.tensors]
        new_tensors.reverse()
        self.tensors = new_tensors
        self.physical_dimensions = self.physical_dimensions[::-1]
        if self.orthogonality_center is not None:
            self.orthogonality_center = self.length - 1 - self.orthogonality_center
        self.flipped = not self.flipped

    def almost_equal(self, other: MPS) -> bool:
        """Tensor-wise comparison with another MPS.

        Two states that only differ by a gauge transformation are not considered equal.
        """
        if self.length != other.length:
            return False
        return all(
            mine.shape == theirs.shape and np.allclose(mine, theirs) for mine, theirs in zip(self.tensors, other.tensors)
        )

    def shift_orthogonality_center_right(self, current_orthogonality_center: int, decomposition: str = "SVD") -> None:
        """Shifts orthogonality center right.

        Decomposes the tensor at the current center into an orthonormal part that stays on the site and a
        remainder that is absorbed into the right neighbor. No singular values are discarded, and the bond
        dimension never grows.

        Args:
            current_orthogonality_center (int): current center
            decomposition: "SVD" or "QR". Both are exact, QR is faster.

        Raises:
            ValueError: If the decomposition is unknown.
        """
        assert current_orthogonality_center < self.length - 1, "Cannot shift the center past the last site."
        tensor = self.tensors[current_orthogonality_center]
        if decomposition == "QR":
            site_tensor, bond_tensor = right_qr(tensor)
        elif decomposition == "SVD":
            site_tensor, s_vec, v_mat = right_svd(tensor)
            bond_tensor = s_vec[:, np.newaxis] * v_mat
        else:
            msg = f"Unknown decomposition {decomposition!r}, expected 'SVD' or 'QR'."
            raise ValueError(msg)

        self.tensors[current_orthogonality_center] = site_tensor
        self.tensors[current_orthogonality_center + 1] = oe.contract(
            "ij, ajc->aic", bond_tensor, self.tensors[current_orthogonality_center + 1]
        )
        if self.orthogonality_center == current_orthogonality_center:
            self.orthogonality_center = current_orthogonality_center + 1

    def shift_orthogonality_center_left(self, current_orthogonality_center: int, decomposition: str = "SVD") -> None:
        """Shifts orthogonality center left.

        This function flips the network, performs a right shift, then flips the network again.

        Args:
            current_orthogonality_center (int): current center
            decomposition: "SVD" or "QR".
        """
        self.flip_network()
        self.shift_orthogonality_center_right(self.length - current_orthogonality_center - 1, decomposition)
        self.flip_network()

    def canonize(self, center: int | None = None, decomposition: str = "SVD") -> None:
        """Sets canonical form of MPS.

        Left-normalizes all sites left of ``center`` and right-normalizes all sites right of it.
        If the MPS is already canonical the center is moved by local shifts only; if it is already
        canonical at ``center`` nothing happens.

        Args:
            center: Site of the orthogonality center. Defaults to 0 (right-canonical chain).
            decomposition: "SVD" or "QR".

        Raises:
            IndexError: If ``center`` is not a site of the MPS.
        """
        if center is None:
            center = 0
        if not 0 <= center < self.length:
            msg = f"Orthogonality center {center} out of range for an MPS of length {self.length}."
            raise IndexError(msg)

        current = self.orthogonality_center
        if current == center:
            return

        if current is not None:
            for site in range(current, center):
                self.shift_orthogonality_center_right(site, decomposition)
            for site in range(current, center, -1):
                self.shift_orthogonality_center_left(site, decomposition)
        else:
            for site in range(center):
                self.shift_orthogonality_center_right(site, decomposition)
            self.flip_network()
            for site in range(self.length - 1 - center):
                self.shift_orthogonality_center_right(site, decomposition)
            self.flip_network()
        self.orthogonality_center = center
        self._logger.debug(f"Canonical form with orthogonality center at site {center}.")  # noqa: G004

    def normalize(self, center: int | None = None, decomposition: str = "SVD") -> None:
        """Normalize MPS.

        Brings the network into canonical form and divides the center tensor by its norm.

        Args:
            center: Site of the orthogonality center. Defaults to the current center, or 0 for a
                non-canonical MPS.
            decomposition: "SVD" or "QR".
        """
        if center is None:
            center = 0 if self.orthogonality_center is None else self.orthogonality_center
        self.canonize(center, decomposition)
        norm = np.linalg.norm(self.tensors[center])
        if norm > 0:
            self.tensors[center] = self.tensors[center] / norm

    def truncate(self, max_bond_dim: int | None = None, cutoff: float = 0.0) -> None:
        """In-place MPS truncation via repeated two-site SVDs.

        The MPS is canonized at the last site and compressed bond by bond from right to left, so every
        cut is made with the orthogonality center on the bond. Afterwards the MPS is canonical at site 0.

        Args:
            max_bond_dim: Maximum bond dimension. None means unbounded.
            cutoff: Relative singular value cutoff.
        """
        if self.length == 1:
            return
        self.canonize(self.length - 1)
        for i in reversed(range(self.length - 1)):
            self.tensors[i], self.tensors[i + 1], info = two_site_svd(
                self.tensors[i], self.tensors[i + 1], max_bond_dim, cutoff, absorb="left"
            )
            self.fidelity *= 1.0 - info.discarded_weight
        self.orthogonality_center = 0

    def overlap(self, other: MPS) -> np.complex128:
        """Computes the inner product <self|other>.

        Args:
            other: The ket state.

        Returns:
            np.complex128: The overlap.
        """
        return overlap(self, other)

    def norm(self) -> np.float64:
        """Norm calculation.

        Returns:
            np.float64: sqrt(<psi|psi>).
        """
        if self.orthogonality_center is not None:
            return np.float64(np.linalg.norm(self.tensors[self.orthogonality_center]))
        return np.float64(np.sqrt(max(overlap(self, self).real, 0.0)))

    def get_amplitude(self, bitstring: str) -> np.complex128:
        """Amplitude of a computational basis state.

        Args:
            bitstring: Basis state, site 0 is the first character.

        Returns:
            np.complex128: <bitstring|psi>.
        """
        assert len(bitstring) == self.length, "Bitstring length must match number of sites"
        basis_state = MPS(self.length, physical_dimensions=self.physical_dimensions, state="basis", basis_string=bitstring)
        return overlap(basis_state, self)

    def project_onto_bitstring(self, bitstring: str) -> np.float64:
        """Projection-valued measurement.

        Probability of obtaining the given bitstring under projective measurement, i.e.
        |<bitstring|psi>|^2 / <psi|psi>.

        Args:
            bitstring (str): Bitstring to project onto (site 0 is first char).

        Returns:
            np.float64: Probability of the outcome.
        """
        norm = self.norm()
        if norm == 0:
            return np.float64(0.0)
        return np.float64(abs(self.get_amplitude(bitstring)) ** 2 / norm**2)

    def measure_single_shot(self, rng: np.random.Generator | None = None) -> int:
        """Perform a single-shot measurement on a Matrix Product State (MPS).

        The state must be normalized with the orthogonality center at site 0. For each site, the local
        probabilities are read off the site tensor, an outcome is drawn, and the projected tensor is
        propagated into the next site.

        Args:
            rng: Random number generator. A fresh default generator is used if None.

        Returns:
            int: The measurement outcome, site i is bit i.
        """
        assert self.orthogonality_center == 0, "Single shots require the orthogonality center at site 0."
        if rng is None:
            rng = np.random.default_rng()
        bitstring = []
        carry = np.ones((1, 1), dtype=complex)
        for tensor in self.tensors:
            local = oe.contract("ab, sbc->sac", carry, tensor)
            probabilities = oe.contract("sac, sac->s", local, np.conj(local)).real
            probabilities = np.clip(probabilities, 0, None)
            probabilities /= np.sum(probabilities)
            chosen_index = int(rng.choice(len(probabilities), p=probabilities))
            bitstring.append(chosen_index)
            carry = local[chosen_index] / np.sqrt(probabilities[chosen_index])
        return sum(c << i for i, c in enumerate(bitstring))

    def measure_shots(self, shots: int, seed: int | None = None, *, show_progress: bool = False) -> dict[int, int]:
        """Perform multiple single-shot measurements on an MPS and aggregate the results.

        A normalized copy of the state with the center at site 0 is sampled, the MPS itself is not modified.

        Args:
            shots (int): The number of measurement shots to perform.
            seed: Seed for reproducible sampling.
            show_progress: Display a progress bar.

        Returns:
            dict[int, int]: A dictionary where keys are measured basis states (as integers) and values are
            the corresponding counts.
        """
        temp_state = copy.deepcopy(self)
        temp_state.normalize(center=0)
        rng = np.random.default_rng(seed)
        results: dict[int, int] = {}
        for _ in tqdm(range(shots), desc="Measuring shots", ncols=80, disable=not show_progress):
            basis_state = temp_state.measure_single_shot(rng)
            results[basis_state] = results.get(basis_state, 0) + 1
        return dict(sorted(results.items()))

    def check_if_valid_mps(self) -> None:
        """Asserts matching bond dimensions between neighbors and trivial boundary bonds."""
        assert self.tensors[0].shape[1] == 1, "Left boundary bond must be trivial."
        assert self.tensors[-1].shape[2] == 1, "Right boundary bond must be trivial."
        for site, (left, right) in enumerate(zip(self.tensors[:-1], self.tensors[1:])):
            assert left.shape[2] == right.shape[1], f"Bond dimension mismatch between sites {site} and {site + 1}."

    def check_canonical_form(self) -> list[int]:
        """Checks canonical form of MPS.

        Checks numerically which sites could serve as the orthogonality center, i.e. for which
        sites all tensors to the left are left-orthonormal and all tensors to the right are
        right-orthonormal. The ``orthogonality_center`` attribute is not touched.

        Returns:
            list[int]: The valid orthogonality centers, empty if the MPS is not canonical.
        """

        def is_isometry(gram: NDArray[np.complex128]) -> bool:
            return bool(np.allclose(gram, np.eye(gram.shape[0])))

        left_orthonormal = [
            is_isometry(oe.contract("slr, slk->rk", np.conj(tensor), tensor)) for tensor in self.tensors
        ]
        right_orthonormal = [
            is_isometry(oe.contract("slr, skr->lk", tensor, np.conj(tensor))) for tensor in self.tensors
        ]
        return [
            site
            for site in range(self.length)
            if all(left_orthonormal[:site]) and all(right_orthonormal[site + 1 :])
        ]

    def to_vec(self) -> NDArray[np.complex128]:
        """Dense state vector, only meant for small systems.

        Site i is bit i of the index (Qiskit ordering), matching :meth:`measure_shots`.

        Returns:
            NDArray[np.complex128]: Vector of length prod(physical_dimensions).
        """
        vec = np.ones((1,), dtype=complex)
        for tensor in self.tensors:
            # (..., chi) x (d, chi, chi') -> (d, ..., chi'), the newest site becomes the most significant axis
            vec = np.moveaxis(np.tensordot(vec, tensor, axes=([-1], [1])), -2, 0)
        return vec.reshape(-1)
