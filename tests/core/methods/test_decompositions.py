# Copyright (c) 2023 - 2025 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Tests for decompositions.

This module tests the right qr and svd decompositions, the truncation rule and the two-site split.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import pytest

from mqt.tebd.core.exceptions import NumericalError
from mqt.tebd.core.methods.decompositions import (
    right_qr,
    right_svd,
    split_theta,
    svd,
    truncation_index,
    two_site_svd,
)

if TYPE_CHECKING:
    from numpy.typing import NDArray


def crandn(
    size: int | tuple[int, ...], *args: int, seed: np.random.Generator | int | None = None
) -> NDArray[np.complex128]:
    """Draw random samples from the standard complex normal distribution.

    Args:
        size (int |Tuple[int,...]): The size/shape of the output array.
        *args (int): Additional dimensions for the output array.
        seed (Generator | int): The seed for the random number generator.

    Returns:
        NDArray[np.complex128]: The array of random complex numbers.
    """
    if isinstance(size, int) and len(args) > 0:
        size = (size, *list(args))
    elif isinstance(size, int):
        size = (size,)
    rng = np.random.default_rng(seed)
    # 1 / sqrt(2) is a normalization factor
    return np.asarray((rng.standard_normal(size) + 1j * rng.standard_normal(size)) / np.sqrt(2), dtype=np.complex128)


def test_right_qr() -> None:
    """Tests the right qr decomposition.

    Ensures that it produces tensors of the correct shape and a unitary tensor.
    Also checks that the decomposition is actually the original tensor.
    """
    shape = (2, 3, 4)
    tensor = crandn(shape, seed=1)
    q_tensor, r_matrix = right_qr(tensor)
    assert q_tensor.shape[:2] == shape[:2]
    assert r_matrix.shape[1] == shape[2]
    assert q_tensor.shape[2] == r_matrix.shape[0]
    q_matrix = q_tensor.reshape(shape[0] * shape[1], -1)
    assert np.allclose(q_matrix.conj().T @ q_matrix, np.eye(q_tensor.shape[2]))
    assert np.allclose(np.tensordot(q_tensor, r_matrix, axes=(2, 0)), tensor)


def test_right_svd() -> None:
    """Test that the svd produces the correct shapes and tensors."""
    tensor = crandn(2, 3, 4, seed=2)
    u_tensor, s_vec, v_matrix = right_svd(tensor)
    assert u_tensor.shape[:2] == (2, 3)
    assert v_matrix.shape[1] == 4
    assert u_tensor.shape[2] == s_vec.shape[0] == v_matrix.shape[0]
    # Check that u_tensor is an isometry
    result = np.tensordot(u_tensor, u_tensor.conj(), axes=([0, 1], [0, 1]))
    assert np.allclose(result, np.eye(u_tensor.shape[2]))
    # Singular values come in non-increasing order
    assert np.all(np.diff(s_vec) <= 1e-12)
    contr = np.tensordot(u_tensor, np.diag(s_vec) @ v_matrix, axes=(2, 0))
    assert np.allclose(contr, tensor)


def test_svd_rejects_non_finite_input() -> None:
    """NaN or Inf entries are reported as a NumericalError."""
    matrix = np.eye(3, dtype=complex)
    matrix[1, 2] = np.nan
    with pytest.raises(NumericalError):
        svd(matrix)
    matrix[1, 2] = np.inf
    with pytest.raises(ArithmeticError):
        svd(matrix)


def test_right_qr_rejects_non_finite_input() -> None:
    """The QR path applies the same finiteness checks as the SVD."""
    tensor = np.ones((2, 1, 2), dtype=complex)
    tensor[1, 0, 0] = np.nan
    with pytest.raises(NumericalError):
        right_qr(tensor)


def test_right_qr_wraps_backend_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    """A LinAlgError of the QR backend is chained to the NumericalError."""

    def failing_qr(*_args: object, **_kwargs: object) -> None:
        msg = "QR failed"
        raise np.linalg.LinAlgError(msg)

    monkeypatch.setattr(np.linalg, "qr", failing_qr)
    with pytest.raises(NumericalError) as excinfo:
        right_qr(np.ones((2, 1, 2), dtype=complex))
    assert isinstance(excinfo.value.__cause__, np.linalg.LinAlgError)

def test_svd_wraps_convergence_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    """A LinAlgError of the backend is chained to the NumericalError."""

    def failing_svd(*_args: object, **_kwargs: object) -> None:
        msg = "SVD did not converge"
        raise np.linalg.LinAlgError(msg)

    monkeypatch.setattr(np.linalg, "svd", failing_svd)
    with pytest.raises(NumericalError) as excinfo:
        svd(np.eye(2, dtype=complex))
    assert isinstance(excinfo.value.__cause__, np.linalg.LinAlgError)


def test_truncation_index() -> None:
    """Test the positional cut and the relative cutoff."""
    s_vec = np.array([1.0, 0.5, 0.5, 1e-3, 0.0])
    # Only exact zeros are dropped by default
    assert truncation_index(s_vec) == 4
    assert truncation_index(s_vec, max_bond_dim=2) == 2
    assert truncation_index(s_vec, cutoff=1e-2) == 3
    assert truncation_index(s_vec, max_bond_dim=10, cutoff=0.6) == 1
    # At least one value is kept
    assert truncation_index(np.zeros(3)) == 1
    assert truncation_index(np.array([])) == 0


def test_split_theta_exact() -> None:
    """Without truncation the split reproduces theta exactly."""
    theta = crandn(2, 3, 2, 4, seed=3)
    a_new, b_new, info = split_theta(theta)
    assert a_new.shape == (2, 3, info.reduced_extent)
    assert b_new.shape == (2, info.reduced_extent, 4)
    assert info.full_extent == 6
    assert info.reduced_extent == 6
    assert info.discarded_weight == 0.0
    assert np.allclose(np.tensordot(a_new, b_new, axes=(2, 1)), theta)


def test_split_theta_absorb_sides() -> None:
    """The side that does not absorb the singular values is an isometry."""
    theta = crandn(2, 2, 2, 2, seed=4)

    a_new, b_new, _ = split_theta(theta, absorb="right")
    a_mat = a_new.reshape(-1, a_new.shape[2])
    assert np.allclose(a_mat.conj().T @ a_mat, np.eye(a_new.shape[2]))

    a_new, b_new, _ = split_theta(theta, absorb="left")
    b_mat = b_new.transpose(1, 0, 2).reshape(b_new.shape[1], -1)
    assert np.allclose(b_mat @ b_mat.conj().T, np.eye(b_new.shape[1]))
    assert np.allclose(np.tensordot(a_new, b_new, axes=(2, 1)), theta)

    with pytest.raises(ValueError, match="absorb"):
        split_theta(theta, absorb="middle")


def test_split_theta_truncation_and_renormalize() -> None:
    """Truncation reports the discarded weight and renormalization restores the norm."""
    theta = crandn(2, 4, 2, 4, seed=5)
    _, s_vec, _ = np.linalg.svd(theta.reshape(8, 8))
    expected_weight = np.sum(s_vec[2:] ** 2) / np.sum(s_vec**2)

    a_new, b_new, info = split_theta(theta, max_bond_dim=2)
    assert info.reduced_extent == 2
    assert np.isclose(info.discarded_weight, expected_weight)
    truncated = np.tensordot(a_new, b_new, axes=(2, 1))
    assert np.isclose(np.linalg.norm(truncated) ** 2, np.sum(s_vec[:2] ** 2))

    a_new, b_new, info = split_theta(theta, max_bond_dim=2, renormalize=True)
    renormalized = np.tensordot(a_new, b_new, axes=(2, 1))
    assert np.isclose(np.linalg.norm(renormalized), np.linalg.norm(theta))
    assert np.isclose(info.discarded_weight, expected_weight)


def test_two_site_svd() -> None:
    """Two neighboring tensors are merged and split back."""
    a = crandn(2, 1, 3, seed=6)
    b = crandn(2, 3, 1, seed=7)
    theta = np.tensordot(a, b, axes=(2, 1))
    a_new, b_new, info = two_site_svd(a, b)
    # The bond is at most min(2 * 1, 2 * 1) = 2
    assert info.reduced_extent == 2
    assert a_new.shape == (2, 1, 2)
    assert b_new.shape == (2, 2, 1)
    assert np.allclose(np.tensordot(a_new, b_new, axes=(2, 1)), theta)
