# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
orbitplan

Orbital transfer planning: Kepler propagation of catalogued bodies,
Lambert and continuous-thrust transfer solvers, a hybrid remap for
low-thrust approximations, a twenty-way outcome taxonomy, and
porkchop grid searches over launch date and transit time.
"""

from orbitplan.domain.orbital_mechanics import (
    OrbitalConstants,
    datetime_to_posix,
    julian_years_to_posix,
    kepler_to_cartesian,
    mg_to_mps2,
    posix_to_julian_years,
)
from orbitplan.domain.vectors import (
    OrbitalState,
    Vector3,
)
from orbitplan.domain.kepler import (
    OrbitalElements,
    body_state_at,
    circular_state_at,
    solve_kepler,
)
from orbitplan.domain.lambert import (
    LambertSolution,
    solve_lambert,
)
from orbitplan.domain.outcomes import (
    TransferOutcome,
    TransferResult,
    best_of,
    was_bug,
)
from orbitplan.domain.transfer import (
    ConicElements,
    HybridRemapConfig,
    TransferMethod,
    TwoBurnTransferInput,
    TwoBurnTransferSolution,
    cartesian_to_conic_elements,
    solve_two_burn_lambert_transfer,
)
from orbitplan.domain.evaluation import (
    evaluate_transfer,
    select_solution,
)
from orbitplan.domain.torch_solver import (
    TorchSolution,
    solve_torch_transfer,
    solve_torch_two_burn_transfer,
)
from orbitplan.domain.hybrid import (
    apply_hybrid_correction,
    calibrated_dv_reduction_kms,
    hybrid_remap,
)
from orbitplan.domain.catalog import (
    BodyCatalog,
    Orbit,
    OrbitCatalog,
    SpaceBody,
    heliocentric_body,
    solar_system_catalog,
)
from orbitplan.domain.porkchop import (
    PorkchopCell,
    PorkchopResult,
    TransferRequest,
    sweep,
)

__version__ = "0.1.0"
