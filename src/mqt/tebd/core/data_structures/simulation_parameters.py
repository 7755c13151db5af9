# Copyright (c) 2023 - 2025 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Simulation Parameters for the TEBD engine and the circuit simulator.

This module provides the options of a single gate application (EvolveOptions), the Observable class
for expectation values, and the WeakSimParams and StrongSimParams classes for configuring circuit
simulation runs. These classes encapsulate settings such as bond dimension limits, singular value
cutoffs and sampling options. All values are validated on construction.
"""

from __future__ import annotations

import copy
import logging
from typing import TYPE_CHECKING

import numpy as np

from mqt.tebd.core.libraries.gate_library import BaseGate, GateLibrary

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from mqt.tebd.core.data_structures.networks import MPS

ABSORB_SIDES = ("right", "left")


def _validate_truncation(max_bond_dim: int | None, cutoff: float) -> None:
    """Checks the truncation parameters shared by all option classes.

    Raises:
        ValueError: If the bond dimension is smaller than 1 or the cutoff is outside [0, 1).
    """
    if max_bond_dim is not None and max_bond_dim < 1:
        msg = f"The maximum bond dimension must be at least 1, got {max_bond_dim}."
        raise ValueError(msg)
    if not 0.0 <= cutoff < 1.0:
        msg = f"The singular value cutoff must lie in [0, 1), got {cutoff}."
        raise ValueError(msg)


class EvolveOptions:
    """Options of a single gate application.

    Attributes:
    -----------
    maxdim : int | None
        Maximum number of singular values kept on the updated bond. None means unlimited.
    iscanonical : bool
        The caller guarantees that the state is canonical with its orthogonality center at or next to
        the gate. The update is then local and keeps the canonical form.
    renormalize : bool
        Rescale the kept singular values to the norm of the full spectrum.
    cutoff : float
        Relative singular value cutoff. Values ``<= cutoff * s_max`` are discarded.
    absorb : str
        Side of a two-site update that receives the singular values, "right" or "left".
    """

    def __init__(
        self,
        maxdim: int | None = None,
        *,
        iscanonical: bool = False,
        renormalize: bool = False,
        cutoff: float = 0.0,
        absorb: str = "right",
    ) -> None:
        """Initializes and validates the options.

        Raises:
            ValueError: If ``maxdim`` is smaller than 1, ``cutoff`` is outside [0, 1) or ``absorb`` is unknown.
        """
        _validate_truncation(maxdim, cutoff)
        if absorb not in ABSORB_SIDES:
            msg = f"absorb must be one of {ABSORB_SIDES}, got {absorb!r}."
            raise ValueError(msg)
        self.maxdim = maxdim
        self.iscanonical = iscanonical
        self.renormalize = renormalize
        self.cutoff = cutoff
        self.absorb = absorb

    @property
    def may_truncate(self) -> bool:
        """Whether an update with these options can discard non-zero singular values."""
        return self.maxdim is not None or self.cutoff > 0

    def replace(self, **changes: int | float | bool | str | None) -> EvolveOptions:
        """Returns a copy with some of the options changed.

        Returns:
            EvolveOptions: The new, validated options.
        """
        values = {
            "maxdim": self.maxdim,
            "iscanonical": self.iscanonical,
            "renormalize": self.renormalize,
            "cutoff": self.cutoff,
            "absorb": self.absorb,
        }
        values.update(changes)
        return EvolveOptions(**values)  # type: ignore[arg-type]

    def __repr__(self) -> str:
        return (
            f"EvolveOptions(maxdim={self.maxdim}, iscanonical={self.iscanonical}, "
            f"renormalize={self.renormalize}, cutoff={self.cutoff}, absorb={self.absorb!r})"
        )


class Observable:
    """Observable class.

    A class to represent an observable in a quantum simulation.

    Attributes:
    ----------
    gate : BaseGate
        The gate that will act as the observable.
    sites : list[int]
        The sites on which the observable is measured.
    results : NDArray[np.complex128] | None
        The expectation value after a simulation, initialized to None.
    """

    def __init__(self, gate: BaseGate | str | NDArray[np.complex128], sites: int | list[int]) -> None:
        """Initializes an Observable instance.

        Args:
            gate: The operator. Either a gate, the name of a parameter-free gate in the GateLibrary
                (e.g. "z" or "zz"), or a square matrix.
            sites: The site or the two neighboring sites the observable acts on.

        Raises:
            ValueError: If the gate name is not found in the GateLibrary.
        """
        if isinstance(gate, str):
            if not hasattr(GateLibrary, gate):
                msg = f"Observable {gate} not found in GateLibrary."
                raise ValueError(msg)
            gate = getattr(GateLibrary, gate)()
        elif not isinstance(gate, BaseGate):
            gate = BaseGate(gate)
        self.gate = copy.deepcopy(gate)
        self.sites = [sites] if isinstance(sites, int) else list(sites)
        self.gate.set_sites(self.sites)
        self.results: NDArray[np.complex128] | None = None

    def __repr__(self) -> str:
        return f"Observable({self.gate.name}, sites={self.sites})"


def _sort_observables(observables: list[Observable]) -> list[Observable]:
    return sorted(observables, key=lambda obs: obs.sites[0])


class WeakSimParams:
    """A class to represent the parameters for a weak simulation.

    Attributes:
    -----------
    shots : int
        The number of shots for the simulation.
    max_bond_dim : int | None
        The maximum bond dimension for the simulation. None means unlimited.
    cutoff : float
        The relative singular value cutoff for the simulation.
    seed : int | None
        Seed of the sampler.
    renormalize : bool
        Rescale the kept singular values after every truncation.
    get_state : bool
        If True, output MPS is stored in ``output_state``.
    show_progress : bool
        Display progress bars.
    loglevel : int
        Output level of the simulation logger.
    results : dict[int, int]
        Measured basis states (site i is bit i) and their counts, filled by the simulator.
    """

    output_state: MPS | None = None

    def __init__(
        self,
        shots: int,
        max_bond_dim: int | None = None,
        cutoff: float = 0.0,
        seed: int | None = None,
        *,
        renormalize: bool = False,
        get_state: bool = False,
        show_progress: bool = False,
        loglevel: int = logging.WARNING,
    ) -> None:
        """Weak circuit simulation initialization.

        Args:
            shots: Number of measurement shots to simulate.
            max_bond_dim: Maximum bond dimension for simulation, unlimited by default.
            cutoff: Relative singular value cutoff, by default 0 (only exact zeros are dropped).
            seed: Seed for reproducible sampling.
            renormalize: Rescale the kept singular values after every truncation.
            get_state: If True, output MPS is returned.
            show_progress: Display progress bars.
            loglevel: Output level of the simulation logger.

        Raises:
            ValueError: If the number of shots is not positive or the truncation parameters are invalid.
        """
        if shots < 1:
            msg = f"The number of shots must be positive, got {shots}."
            raise ValueError(msg)
        _validate_truncation(max_bond_dim, cutoff)
        self.shots = shots
        self.max_bond_dim = max_bond_dim
        self.cutoff = cutoff
        self.seed = seed
        self.renormalize = renormalize
        self.get_state = get_state
        self.show_progress = show_progress
        self.loglevel = loglevel
        self.results: dict[int, int] = {}

    def evolve_options(self, absorb: str = "right") -> EvolveOptions:
        """Options for the canonical gate updates of a circuit run.

        Args:
            absorb: Side that receives the singular values.

        Returns:
            EvolveOptions: The options.
        """
        return EvolveOptions(
            self.max_bond_dim, iscanonical=True, renormalize=self.renormalize, cutoff=self.cutoff, absorb=absorb
        )


class StrongSimParams:
    """Strong Circuit Simulation Parameters.

    A class to represent the parameters for a strong simulation.

    Attributes:
    -----------
    observables : list[Observable]
        A list of observables to be evaluated on the final state.
    sorted_observables : list[Observable]
        The observables sorted by their first site.
    max_bond_dim : int | None
        The maximum bond dimension for the simulation. None means unlimited.
    cutoff : float
        The relative singular value cutoff for the simulation.
    renormalize : bool
        Rescale the kept singular values after every truncation.
    get_state : bool
        If True, output MPS is stored in ``output_state``.
    show_progress : bool
        Display progress bars.
    loglevel : int
        Output level of the simulation logger.
    """

    output_state: MPS | None = None

    def __init__(
        self,
        observables: list[Observable],
        max_bond_dim: int | None = None,
        cutoff: float = 0.0,
        *,
        renormalize: bool = False,
        get_state: bool = False,
        show_progress: bool = False,
        loglevel: int = logging.WARNING,
    ) -> None:
        """Strong circuit simulation parameters initialization.

        Args:
            observables: List of observables to measure after the circuit.
            max_bond_dim: Maximum bond dimension allowed in simulation, unlimited by default.
            cutoff: Relative singular value cutoff, by default 0 (only exact zeros are dropped).
            renormalize: Rescale the kept singular values after every truncation.
            get_state: If True, output MPS is returned.
            show_progress: Display progress bars.
            loglevel: Output level of the simulation logger.
        """
        _validate_truncation(max_bond_dim, cutoff)
        self.observables = observables
        self.sorted_observables = _sort_observables(observables)
        self.max_bond_dim = max_bond_dim
        self.cutoff = cutoff
        self.renormalize = renormalize
        self.get_state = get_state
        self.show_progress = show_progress
        self.loglevel = loglevel

    def evolve_options(self, absorb: str = "right") -> EvolveOptions:
        """Options for the canonical gate updates of a circuit run.

        Args:
            absorb: Side that receives the singular values.

        Returns:
            EvolveOptions: The options.
        """
        return EvolveOptions(
            self.max_bond_dim, iscanonical=True, renormalize=self.renormalize, cutoff=self.cutoff, absorb=absorb
        )
