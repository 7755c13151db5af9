# Copyright (c) 2023 - 2025 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Tests for the MPS class.

This module provides unit tests for the Matrix Product State (MPS) class and its associated methods.
It verifies correct initialization, product state construction, bond dimension introspection, network flipping,
orthogonality center shifting, canonicalization, normalization, truncation, measurements, and overall validity
of MPS objects.
"""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING

import numpy as np
import pytest

from mqt.tebd.core.data_structures.networks import MPS
from mqt.tebd.core.exceptions import DimensionError, NumericalError

if TYPE_CHECKING:
    from numpy.typing import NDArray


def crandn(
    size: int | tuple[int, ...], *args: int, seed: np.random.Generator | int | None = None
) -> NDArray[np.complex128]:
    """Draw random samples from the standard complex normal distribution.

    Args:
        size: The size/shape of the output array.
        args: Additional dimensions for the output array.
        seed: The seed for the random number generator.

    Returns:
        The array of random complex numbers.
    """
    if isinstance(size, int) and len(args) > 0:
        size = (size, *list(args))
    elif isinstance(size, int):
        size = (size,)
    rng = np.random.default_rng(seed)
    # 1 / sqrt(2) is a normalization factor
    return np.asarray((rng.standard_normal(size) + 1j * rng.standard_normal(size)) / np.sqrt(2), dtype=np.complex128)


def random_mps(shapes: list[tuple[int, int, int]], *, normalize: bool = True, seed: int = 0) -> MPS:
    """Create a random MPS with the given shapes.

    Args:
        shapes (List[Tuple[int, int, int]]): The shapes of the tensors in the
            MPS.
        normalize (bool): Whether to normalize the MPS.
        seed: Seed of the random tensors.

    Returns:
        MPS: The random MPS.
    """
    tensors = [crandn(shape, seed=seed + i) for i, shape in enumerate(shapes)]
    mps = MPS(len(shapes), tensors=tensors)
    if normalize:
        mps.normalize()
    return mps


@pytest.mark.parametrize("state", ["zeros", "ones", "x+", "x-", "y+", "y-", "Neel", "wall", "random"])
def test_mps_initialization(state: str) -> None:
    """Test that MPS initializes with the correct product state.

    The MPS must have the right length, trivial bonds, unit norm, and the expected local vectors.
    """
    length = 4
    mps = MPS(length, state=state)
    assert mps.length == length
    assert mps.physical_dimensions == [2] * length
    assert mps.bond_dimensions() == [1] * (length - 1)
    assert not mps.is_canonical
    assert np.isclose(mps.norm(), 1)

    expected = {
        "zeros": [1, 0],
        "ones": [0, 1],
        "x+": [1 / np.sqrt(2), 1 / np.sqrt(2)],
        "x-": [1 / np.sqrt(2), -1 / np.sqrt(2)],
        "y+": [1 / np.sqrt(2), 1j / np.sqrt(2)],
        "y-": [1 / np.sqrt(2), -1j / np.sqrt(2)],
    }
    for i, tensor in enumerate(mps.tensors):
        assert tensor.shape == (2, 1, 1)
        if state in expected:
            np.testing.assert_allclose(tensor[:, 0, 0], expected[state])
        elif state == "Neel":
            np.testing.assert_allclose(tensor[:, 0, 0], [0, 1] if i % 2 else [1, 0])
        elif state == "wall":
            np.testing.assert_allclose(tensor[:, 0, 0], [1, 0] if i < length // 2 else [0, 1])


def test_invalid_state_string() -> None:
    """An unknown state string raises a ValueError."""
    with pytest.raises(ValueError, match="Invalid state string"):
        MPS(3, state="plus")


def test_basis_state() -> None:
    """Basis states are built site by site, also for qudits."""
    mps = MPS(3, physical_dimensions=[2, 3, 2], state="basis", basis_string="121")
    assert mps.physical_dimensions == [2, 3, 2]
    assert mps.tensors[1].shape == (3, 1, 1)
    assert mps.tensors[1][2, 0, 0] == 1
    assert np.isclose(mps.project_onto_bitstring("121"), 1)
    assert np.isclose(mps.project_onto_bitstring("120"), 0)


def test_from_product_state() -> None:
    """Product states keep the given local vectors as bond dimension 1 tensors."""
    vectors = [[1, 0], [0.6, 0.8j], [0, 1]]
    mps = MPS.from_product_state(vectors)
    assert mps.length == 3
    assert mps.bond_dimensions() == [1, 1]
    assert mps.orthogonality_center is None
    np.testing.assert_allclose(mps.tensors[1][:, 0, 0], [0.6, 0.8j])
    mps.check_if_valid_mps()

    qutrits = MPS.from_product_state([[0, 0, 1], [1, 0, 0]], physical_dimensions=3)
    assert qutrits.physical_dimensions == [3, 3]


def test_from_product_state_errors() -> None:
    """Invalid local vectors raise a DimensionError."""
    with pytest.raises(DimensionError):
        MPS.from_product_state([])
    with pytest.raises(DimensionError):
        MPS.from_product_state([[1, 0], [1, 0, 0]])
    with pytest.raises(DimensionError):
        MPS.from_product_state([[[1, 0]]])
    with pytest.raises(DimensionError):
        MPS.from_product_state([[1, 0], [1, 0]], physical_dimensions=[2])
    # A DimensionError is also a ValueError
    with pytest.raises(ValueError, match="expected"):
        MPS.from_product_state([[1, 0, 0]])


def test_bond_introspection() -> None:
    """Bond dimensions, maximum, total and cost of a random MPS."""
    mps = random_mps([(2, 1, 2), (2, 2, 4), (2, 4, 2), (2, 2, 1)], normalize=False)
    assert mps.bond_dimensions() == [2, 4, 2]
    assert mps.get_max_bond() == 4
    assert mps.get_total_bond() == 8
    assert mps.get_cost() == 8 + 64 + 8
    assert mps.get_byte_size() == sum(tensor.nbytes for tensor in mps.tensors)


def test_flip_network() -> None:
    """Flipping twice restores the network, flipping once reverses it."""
    mps = random_mps([(2, 1, 2), (3, 2, 4), (2, 4, 1)], normalize=False)
    original = copy.deepcopy(mps)
    mps.canonize(0)
    mps.flip_network()
    assert mps.flipped
    assert mps.orthogonality_center == 2
    assert mps.physical_dimensions == [2, 3, 2]
    assert mps.tensors[0].shape[1] == 1
    mps.flip_network()
    assert not mps.flipped
    assert mps.orthogonality_center == 0
    np.testing.assert_allclose(mps.to_vec(), original.to_vec())


@pytest.mark.parametrize("decomposition", ["SVD", "QR"])
def test_shift_orthogonality_center(decomposition: str) -> None:
    """Local shifts move the center and keep the state."""
    mps = random_mps([(2, 1, 2), (2, 2, 4), (2, 4, 2), (2, 2, 1)])
    vec = mps.to_vec()
    assert mps.orthogonality_center == 0
    mps.shift_orthogonality_center_right(0, decomposition)
    mps.shift_orthogonality_center_right(1, decomposition)
    assert mps.orthogonality_center == 2
    assert 2 in mps.check_canonical_form()
    mps.shift_orthogonality_center_left(2, decomposition)
    assert mps.orthogonality_center == 1
    assert 1 in mps.check_canonical_form()
    np.testing.assert_allclose(mps.to_vec(), vec, atol=1e-12)

    with pytest.raises(ValueError, match="decomposition"):
        mps.shift_orthogonality_center_right(1, "LU")


@pytest.mark.parametrize("center", [0, 1, 2, 3])
def test_canonize(center: int) -> None:
    """Canonize gives a valid mixed canonical form and keeps the state."""
    mps = random_mps([(2, 1, 2), (2, 2, 4), (2, 4, 2), (2, 2, 1)], normalize=False)
    vec = mps.to_vec()
    mps.canonize(center)
    assert mps.orthogonality_center == center
    assert center in mps.check_canonical_form()
    np.testing.assert_allclose(mps.to_vec(), vec, atol=1e-12)
    mps.check_if_valid_mps()


def test_canonize_round_trip() -> None:
    """Canonizing twice at the same center gives the same tensors as canonizing once."""
    for decomposition in ("SVD", "QR"):
        mps = random_mps([(2, 1, 2), (2, 2, 4), (2, 4, 2), (2, 2, 1)], normalize=False, seed=3)
        mps.canonize(2, decomposition)
        once = copy.deepcopy(mps)
        mps.canonize(2, decomposition)
        assert mps.almost_equal(once)

        # Forgetting the flag and sweeping again reproduces the same state
        mps.orthogonality_center = None
        mps.canonize(2, decomposition)
        np.testing.assert_allclose(mps.to_vec(), once.to_vec(), atol=1e-12)
        assert 2 in mps.check_canonical_form()


def test_canonize_moves_center_locally() -> None:
    """A canonical MPS reaches a new center by local shifts."""
    mps = random_mps([(2, 1, 2), (2, 2, 4), (2, 4, 2), (2, 2, 1)])
    vec = mps.to_vec()
    mps.canonize(3)
    assert 3 in mps.check_canonical_form()
    mps.canonize(1)
    assert 1 in mps.check_canonical_form()
    np.testing.assert_allclose(mps.to_vec(), vec, atol=1e-12)


def test_canonize_default_and_range() -> None:
    """The default center is site 0, sites outside the chain are rejected."""
    mps = MPS(3, state="x+")
    mps.canonize()
    assert mps.orthogonality_center == 0
    with pytest.raises(IndexError):
        mps.canonize(3)
    with pytest.raises(IndexError):
        mps.canonize(-1)


def test_canonize_never_grows_bonds() -> None:
    """Canonicalization without truncation never increases a bond dimension."""
    mps = random_mps([(2, 1, 4), (2, 4, 4), (2, 4, 1)], normalize=False)
    before = mps.bond_dimensions()
    mps.canonize(1)
    assert all(after <= b for after, b in zip(mps.bond_dimensions(), before))
    # Bonds larger than the exact bound are reduced
    assert mps.bond_dimensions() == [2, 2]


def test_normalize() -> None:
    """Normalize scales the state to unit norm."""
    mps = random_mps([(2, 1, 2), (2, 2, 2), (2, 2, 1)], normalize=False)
    assert not np.isclose(mps.norm(), 1)
    mps.normalize(center=1)
    assert mps.orthogonality_center == 1
    assert np.isclose(mps.norm(), 1)
    assert np.isclose(np.linalg.norm(mps.to_vec()), 1)


def test_norm_uses_center() -> None:
    """The norm of a canonical MPS is the norm of its center tensor."""
    mps = random_mps([(2, 1, 2), (2, 2, 2), (2, 2, 1)], normalize=False)
    dense_norm = np.linalg.norm(mps.to_vec())
    assert np.isclose(mps.norm(), dense_norm)
    mps.canonize(2)
    assert np.isclose(mps.norm(), dense_norm)


def test_truncate() -> None:
    """Truncation bounds all bonds and is exact when nothing is discarded."""
    mps = random_mps([(2, 1, 2), (2, 2, 4), (2, 4, 2), (2, 2, 1)])
    vec = mps.to_vec()
    exact = copy.deepcopy(mps)
    exact.truncate()
    np.testing.assert_allclose(exact.to_vec(), vec, atol=1e-12)
    assert exact.fidelity == 1
    assert exact.orthogonality_center == 0

    mps.truncate(max_bond_dim=1)
    assert mps.bond_dimensions() == [1, 1, 1]
    assert mps.fidelity < 1
    assert 0 in mps.check_canonical_form()


def test_entropy_and_schmidt_spectrum() -> None:
    """Product states have zero entropy, a Bell pair has entropy log 2."""
    product = MPS(3, state="x+")
    assert np.isclose(product.get_entropy([0, 1]), 0)

    bell = np.zeros((2, 1, 2), dtype=complex)
    bell[0, 0, 0] = bell[1, 0, 1] = 1 / np.sqrt(2)
    second = np.zeros((2, 2, 1), dtype=complex)
    second[0, 0, 0] = second[1, 1, 0] = 1
    mps = MPS(2, tensors=[bell, second])
    np.testing.assert_allclose(mps.get_schmidt_spectrum([0, 1]), [1 / np.sqrt(2)] * 2)
    assert np.isclose(mps.get_entropy([0, 1]), np.log(2))
    # The state itself is not touched
    assert mps.orthogonality_center is None


def test_to_vec_ordering() -> None:
    """Site i is bit i of the dense vector."""
    mps = MPS(3, state="basis", basis_string="100")
    vec = mps.to_vec()
    assert vec.shape == (8,)
    assert vec[1] == 1
    mps = MPS(3, state="basis", basis_string="001")
    assert mps.to_vec()[4] == 1


def test_get_amplitude() -> None:
    """Amplitudes are overlaps with basis states."""
    mps = MPS(2, state="x+")
    assert np.isclose(mps.get_amplitude("01"), 0.5)


def test_measure_shots() -> None:
    """Sampling follows the Born rule and is reproducible with a seed."""
    bell = np.zeros((2, 1, 2), dtype=complex)
    bell[0, 0, 0] = bell[1, 0, 1] = 1
    second = np.zeros((2, 2, 1), dtype=complex)
    second[0, 0, 0] = second[1, 1, 0] = 1
    mps = MPS(2, tensors=[bell, second])

    results = mps.measure_shots(1000, seed=42)
    assert set(results) <= {0, 3}
    assert sum(results.values()) == 1000
    assert 400 < results[0] < 600
    assert results == mps.measure_shots(1000, seed=42)
    # The state itself is not normalized or canonized
    assert mps.orthogonality_center is None
    assert np.isclose(mps.norm(), np.sqrt(2))


def test_measure_single_shot_basis_state() -> None:
    """A basis state is always measured as itself."""
    mps = MPS(4, state="basis", basis_string="1011")
    mps.canonize(0)
    rng = np.random.default_rng(0)
    for _ in range(5):
        assert mps.measure_single_shot(rng) == 0b1101


def test_check_if_valid_mps() -> None:
    """Inconsistent bonds are detected."""
    mps = random_mps([(2, 1, 2), (2, 2, 1)], normalize=False)
    mps.check_if_valid_mps()
    mps.tensors[1] = crandn(2, 3, 1)
    with pytest.raises(AssertionError):
        mps.check_if_valid_mps()


def test_almost_equal() -> None:
    """Tensor-wise comparison of two states."""
    mps = random_mps([(2, 1, 2), (2, 2, 2), (2, 2, 1)], normalize=False)
    same = copy.deepcopy(mps)
    assert mps.almost_equal(same)

    # The same state in another gauge compares unequal
    same.canonize(2)
    assert np.isclose(abs(mps.overlap(same)), mps.norm() ** 2)
    assert not mps.almost_equal(same)
    assert not mps.almost_equal(MPS(2))


def test_to_vec_qudits() -> None:
    """The dense vector of mixed dimensions uses site 0 as the fastest index."""
    mps = MPS(2, physical_dimensions=[3, 2], state="basis", basis_string="21")
    vec = mps.to_vec()
    assert vec.shape == (6,)
    # index = 2 + 3 * 1
    assert vec[5] == 1


@pytest.mark.parametrize("decomposition", ["SVD", "QR"])
def test_canonize_non_finite_state(decomposition: str) -> None:
    """Canonizing a state with NaN entries raises a NumericalError for both decompositions."""
    mps = random_mps([(2, 1, 2), (2, 2, 2), (2, 2, 1)], normalize=False)
    mps.tensors[0][0, 0, 0] = np.nan
    with pytest.raises(NumericalError):
        mps.canonize(2, decomposition=decomposition)
