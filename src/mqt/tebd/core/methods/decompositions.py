# Copyright (c) 2025 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Tensor Network Decompositions.

This module implements the right moving QR and SVD decompositions of MPS tensors,
the truncation rule for singular value spectra, and the two-site split used by the TEBD update.

All SVDs go through :func:`svd`, which guards the linear algebra backend: non-finite input or output and
convergence failures are raised as :class:`~mqt.tebd.core.exceptions.NumericalError`. The singular values
are returned in non-increasing order, which the truncation rule relies on.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, NamedTuple

import numpy as np

from ..exceptions import NumericalError

if TYPE_CHECKING:
    from numpy.typing import NDArray


class TruncationInfo(NamedTuple):
    """Summary of a truncated two-site split.

    Attributes:
        full_extent: Number of singular values before truncation.
        reduced_extent: Number of singular values kept, i.e. the new bond dimension.
        discarded_weight: Relative weight of the discarded singular values, sum(s_cut**2) / sum(s**2).
            ``1 - discarded_weight`` is the fidelity between the normalized states before and after truncation.
    """

    full_extent: int
    reduced_extent: int
    discarded_weight: float


def _check_finite(array: NDArray[np.generic], msg: str) -> None:
    if not np.all(np.isfinite(array)):
        raise NumericalError(msg)


def svd(
    matrix: NDArray[np.complex128],
) -> tuple[NDArray[np.complex128], NDArray[np.float64], NDArray[np.complex128]]:
    """Thin singular value decomposition with finiteness checks.

    Args:
        matrix: The matrix to be decomposed.

    Returns:
        u_mat: Left singular vectors as columns.
        s_vec: Singular values in non-increasing order.
        v_mat: Right singular vectors as rows.

    Raises:
        NumericalError: If the matrix contains NaN/Inf, the decomposition does not converge,
            or the factors are not finite.
    """
    _check_finite(matrix, "Cannot decompose a matrix containing NaN or Inf entries.")
    try:
        u_mat, s_vec, v_mat = np.linalg.svd(matrix, full_matrices=False)
    except np.linalg.LinAlgError as err:
        msg = f"SVD of a {matrix.shape[0]}x{matrix.shape[1]} matrix did not converge."
        raise NumericalError(msg) from err
    for factor in (u_mat, s_vec, v_mat):
        _check_finite(factor, "SVD produced non-finite factors.")
    return u_mat, s_vec, v_mat


def right_qr(mps_tensor: NDArray[np.complex128]) -> tuple[NDArray[np.complex128], NDArray[np.complex128]]:
    """Right QR.

    Performs the QR decomposition of an MPS tensor moving to the right.

    Args:
        mps_tensor: The tensor to be decomposed.

    Returns:
        q_tensor: The Q tensor with the left virtual leg and the physical
            leg (phys,left,new).
        r_mat: The R matrix with the right virtual leg (new,right).

    Raises:
        NumericalError: Under the same conditions as :func:`svd`.
    """
    old_shape = mps_tensor.shape
    qr_shape = (old_shape[0] * old_shape[1], old_shape[2])
    matrix = mps_tensor.reshape(qr_shape)
    _check_finite(matrix, "Cannot decompose a matrix containing NaN or Inf entries.")
    try:
        q_mat, r_mat = np.linalg.qr(matrix)
    except np.linalg.LinAlgError as err:
        msg = f"QR of a {qr_shape[0]}x{qr_shape[1]} matrix failed."
        raise NumericalError(msg) from err
    _check_finite(q_mat, "QR produced non-finite factors.")
    _check_finite(r_mat, "QR produced non-finite factors.")
    new_shape = (old_shape[0], old_shape[1], -1)
    q_tensor = q_mat.reshape(new_shape)
    return q_tensor, r_mat


def right_svd(
    mps_tensor: NDArray[np.complex128],
) -> tuple[NDArray[np.complex128], NDArray[np.float64], NDArray[np.complex128]]:
    """Right SVD.

    Performs the singular value decomposition of an MPS tensor.

    Args:
        mps_tensor: The tensor to be decomposed.

    Returns:
        u_tensor: The U tensor with the left virtual leg and the physical
            leg (phys,left,new).
        s_vec: The S vector with the singular values.
        v_mat: The V matrix with the right virtual leg (new,right).
    """
    old_shape = mps_tensor.shape
    svd_shape = (old_shape[0] * old_shape[1], old_shape[2])
    u_mat, s_vec, v_mat = svd(mps_tensor.reshape(svd_shape))
    new_shape = (old_shape[0], old_shape[1], -1)
    u_tensor = u_mat.reshape(new_shape)
    return u_tensor, s_vec, v_mat


def truncation_index(s_vec: NDArray[np.float64], max_bond_dim: int | None = None, cutoff: float = 0.0) -> int:
    """Number of singular values to keep.

    Values ``<= cutoff * s_vec[0]`` are discarded, then the spectrum is cut positionally to at most
    ``max_bond_dim`` entries. The cut follows the order of ``s_vec`` exactly, so degenerate values
    straddling the ``max_bond_dim`` boundary are split deterministically. At least one value is kept.

    Args:
        s_vec: Singular values in non-increasing order.
        max_bond_dim: Upper bound on the number of kept values. None means unbounded.
        cutoff: Relative cutoff. With the default 0.0 only exact zeros are dropped.

    Returns:
        int: The number of leading singular values to keep.
    """
    if len(s_vec) == 0:
        return 0
    keep = int(np.count_nonzero(s_vec > cutoff * s_vec[0]))
    keep = max(keep, 1)
    if max_bond_dim is not None:
        keep = min(keep, max_bond_dim)
    return keep


def split_theta(
    theta: NDArray[np.complex128],
    max_bond_dim: int | None = None,
    cutoff: float = 0.0,
    *,
    renormalize: bool = False,
    absorb: str = "right",
) -> tuple[NDArray[np.complex128], NDArray[np.complex128], TruncationInfo]:
    """Split a two-site tensor into two MPS tensors with a truncated SVD.

    The two-site tensor Θ of shape (phys_i, L, phys_j, R) is reshaped into a matrix with rows
    (phys_i, L) and columns (phys_j, R), decomposed, truncated with :func:`truncation_index`,
    and split into A' (phys_i, L, k) and B' (phys_j, k, R).

    Args:
        theta: The two-site tensor (phys_i, L, phys_j, R).
        max_bond_dim: Maximum number of kept singular values. None means unbounded.
        cutoff: Relative singular value cutoff.
        renormalize: If True, the kept singular values are rescaled to the norm of the full spectrum.
        absorb: "right" multiplies the singular values into B' (A' left-orthonormal),
            "left" multiplies them into A' (B' right-orthonormal).

    Returns:
        a_new: The left tensor (phys_i, L, k).
        b_new: The right tensor (phys_j, k, R).
        info: The truncation summary.

    Raises:
        ValueError: If ``absorb`` is neither "left" nor "right".
    """
    if absorb not in {"left", "right"}:
        msg = f"absorb must be 'left' or 'right', got {absorb!r}."
        raise ValueError(msg)

    phys_i, left, phys_j, right = theta.shape
    theta_mat = theta.reshape(phys_i * left, phys_j * right)
    u_mat, s_vec, v_mat = svd(theta_mat)

    keep = truncation_index(s_vec, max_bond_dim, cutoff)
    total_weight = float(np.sum(s_vec**2))
    kept = s_vec[:keep]
    kept_weight = float(np.sum(kept**2))
    discarded_weight = 0.0 if total_weight == 0.0 else max(0.0, 1.0 - kept_weight / total_weight)

    if renormalize and kept_weight > 0.0:
        kept = kept * np.sqrt(total_weight / kept_weight)

    u_mat = u_mat[:, :keep]
    v_mat = v_mat[:keep, :]
    if absorb == "right":
        v_mat = kept[:, np.newaxis] * v_mat
    else:
        u_mat = u_mat * kept[np.newaxis, :]

    a_new = u_mat.reshape(phys_i, left, keep)
    b_new = v_mat.reshape(keep, phys_j, right).transpose(1, 0, 2)

    info = TruncationInfo(full_extent=len(s_vec), reduced_extent=keep, discarded_weight=discarded_weight)
    return a_new, b_new, info


def two_site_svd(
    a: NDArray[np.complex128],
    b: NDArray[np.complex128],
    max_bond_dim: int | None = None,
    cutoff: float = 0.0,
    *,
    renormalize: bool = False,
    absorb: str = "right",
) -> tuple[NDArray[np.complex128], NDArray[np.complex128], TruncationInfo]:
    """Two-site SVD.

    Combine two neighboring MPS tensors A (phys_i, L, D) and B (phys_j, D, R),
    perform a truncated SVD on the joint block, and split back into
    A' (phys_i, L, k) and B' (phys_j, k, R).

    Args:
        a: The left tensor.
        b: The right tensor.
        max_bond_dim: Maximum number of kept singular values. None means unbounded.
        cutoff: Relative singular value cutoff.
        renormalize: If True, the kept singular values are rescaled to the norm of the full spectrum.
        absorb: Side that receives the singular values, "right" or "left".

    Returns:
        The new left tensor, the new right tensor, and the truncation summary.
    """
    theta = np.tensordot(a, b, axes=(2, 1))
    return split_theta(theta, max_bond_dim, cutoff, renormalize=renormalize, absorb=absorb)
