# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Continuous-thrust ("torch") transfer model.

A craft with a fixed maximum acceleration boosts, coasts and
decelerates along straight lines; gravity is neglected over the
transfer. Working in the frame that moves with the mean of the two
endpoint velocities, the boost vector b and the deceleration vector c
must satisfy

    b + c = Δv
    -Δv/2·T + b·(T - |b|/2a) + c·|c|/2a = D

with Δv = v₂ - v₁ and D = (r₂ - r₁) - v̄·T. Both vectors lie in the
plane spanned by D and Δv, so the system has four scalar unknowns.

The system is non-dimensionalised and solved by Newton iteration from a
closed-form one-dimensional seed.
"""
import logging
import math
from dataclasses import dataclass
from enum import Enum

import numpy as np

from orbitplan.domain.outcomes import (
    ArrivalBeforeLaunch,
    BurnLongerThanTransfer,
    BurnNaN,
    InsufficientAcceleration,
    Success,
)
from orbitplan.domain.transfer import TransferMethod, TwoBurnTransferInput, TwoBurnTransferSolution
from orbitplan.domain.vectors import OrbitalState, Vector3, ZERO

logger = logging.getLogger(__name__)

TORCH_MAX_ITERATIONS = 20
TORCH_TOLERANCE = 1e-11
# Non-dimensional squared residual above which the solve counts as failed.
TORCH_CONVERGED_RESIDUAL = 1e-6
_DEGENERATE_EPS = 1e-12


class SeedBranch(Enum):
    """Which closed-form profile seeded the Newton solve."""
    QUADRATIC_A = "quadratic_a"
    QUADRATIC_B = "quadratic_b"
    LINEAR = "linear"
    TRIVIAL = "trivial"


@dataclass(frozen=True)
class TorchSolution:
    """Boost and deceleration ΔV vectors (inertial frame, m/s)."""
    boost: Vector3
    decel: Vector3
    residual_sq: float
    seed_branch: SeedBranch
    converged: bool


@dataclass(frozen=True)
class _Geometry:
    dv: Vector3
    e1: Vector3
    e2: Vector3
    distance_m: float
    half_dv_along_mps: float
    dv_perp_mps: float


def _perpendicular(u: Vector3) -> Vector3:
    p = u.cross(Vector3(0.0, 0.0, 1.0)).normalized()
    if p is None:
        p = u.cross(Vector3(1.0, 0.0, 0.0)).normalized()
    return p


def _geometry(transit_s: float, state1: OrbitalState, state2: OrbitalState) -> _Geometry | None:
    v_mean = (state1.velocity + state2.velocity) * 0.5
    dv = state2.velocity - state1.velocity
    disp = (state2.position - state1.position) - v_mean * transit_s

    e1 = disp.normalized()
    if e1 is None:
        e1 = dv.normalized()
        if e1 is None:
            return None
    along = dv.dot(e1)
    q = dv - e1 * along
    e2 = q.normalized()
    if e2 is None:
        e2 = _perpendicular(e1)

    return _Geometry(
        dv=dv,
        e1=e1,
        e2=e2,
        distance_m=max(0.0, disp.dot(e1)),
        half_dv_along_mps=along / 2.0,
        dv_perp_mps=q.dot(e2),
    )


def torch_seed(
    transit_s: float,
    distance_m: float,
    half_dv_along_mps: float,
    acceleration_mps2: float,
) -> tuple[float, SeedBranch]:
    """
    Cruise speed of the one-dimensional boost-coast-brake profile.

    The craft starts at -s, cruises at vc and ends at +s along the
    displacement direction. Decision table on a, T, s and d:

    =============================================  ==============================
    condition                                      cruise speed vc
    =============================================  ==============================
    disc_A = (aT)² - 4(s² + a·d) >= 0              (aT - √disc_A) / 2
    else disc_B = (aT)² - 4(s² - a·d) >= 0         (-aT + √disc_B) / 2
    else, T - 2|s|/a > 0                           d / (T - 2|s|/a)
    else                                           d / T
    =============================================  ==============================
    """
    a = acceleration_mps2
    s = half_dv_along_mps
    d = distance_m
    a_t = a * transit_s

    disc_a = a_t * a_t - 4.0 * (s * s + a * d)
    if disc_a >= 0:
        return (a_t - math.sqrt(disc_a)) / 2.0, SeedBranch.QUADRATIC_A

    disc_b = a_t * a_t - 4.0 * (s * s - a * d)
    if disc_b >= 0:
        return (-a_t + math.sqrt(disc_b)) / 2.0, SeedBranch.QUADRATIC_B

    denom = transit_s - 2.0 * abs(s) / a if a > 0 else 0.0
    if denom > 0:
        return d / denom, SeedBranch.LINEAR
    return d / transit_s, SeedBranch.LINEAR


def required_acceleration_mps2(transit_s: float, distance_m: float, half_dv_along_mps: float) -> float:
    """Smallest acceleration for which the one-dimensional profile closes."""
    d = distance_m
    s = half_dv_along_mps
    return 2.0 * (d + math.sqrt(d * d + s * s * transit_s * transit_s)) / (transit_s * transit_s)


def _residual(x: np.ndarray, delta: np.ndarray, target: np.ndarray, alpha: float) -> np.ndarray:
    beta = x[:2]
    gamma = x[2:]
    nb = float(np.linalg.norm(beta))
    ng = float(np.linalg.norm(gamma))
    velocity = beta + gamma - delta
    position = -0.5 * delta + beta * (1.0 - nb / (2.0 * alpha)) + gamma * ng / (2.0 * alpha) - target
    return np.concatenate([velocity, position])


def _abs_product_jacobian(u: np.ndarray) -> np.ndarray:
    """d(u·|u|)/du = |u|·I + u·ûᵀ."""
    n = float(np.linalg.norm(u))
    if n <= _DEGENERATE_EPS:
        return np.zeros((2, 2))
    return n * np.eye(2) + np.outer(u, u) / n


def _jacobian(x: np.ndarray, alpha: float) -> np.ndarray:
    eye = np.eye(2)
    jac = np.zeros((4, 4))
    jac[:2, :2] = eye
    jac[:2, 2:] = eye
    jac[2:, :2] = eye - _abs_product_jacobian(x[:2]) / (2.0 * alpha)
    jac[2:, 2:] = _abs_product_jacobian(x[2:]) / (2.0 * alpha)
    return jac


def _newton_step(jac: np.ndarray, f: np.ndarray) -> np.ndarray | None:
    """LU solve with partial pivoting; None for a singular Jacobian."""
    try:
        step = np.linalg.solve(jac, f)
    except np.linalg.LinAlgError:
        return None
    if not np.all(np.isfinite(step)):
        return None
    return step


def solve_torch_transfer(
    transit_s: float,
    state1: OrbitalState,
    state2: OrbitalState,
    acceleration_mps2: float,
) -> TorchSolution:
    """
    Solve for the boost and deceleration vectors of a constant-acceleration transfer.

    Args:
        transit_s: Transfer time (s), positive.
        state1: Departure state (SI).
        state2: Arrival state (SI).
        acceleration_mps2: Maximum acceleration (m/s²), positive.

    Returns:
        TorchSolution. ``converged`` is False when the best residual is
        above the acceptance threshold.

    Raises:
        ValueError: If transit_s or acceleration_mps2 is not positive.
    """
    if transit_s <= 0:
        raise ValueError(f"transit_s must be positive, got {transit_s}")
    if acceleration_mps2 <= 0:
        raise ValueError(f"acceleration_mps2 must be positive, got {acceleration_mps2}")

    geo = _geometry(transit_s, state1, state2)
    if geo is None:
        return TorchSolution(ZERO, ZERO, 0.0, SeedBranch.TRIVIAL, True)

    length = max(geo.distance_m, geo.dv.norm() * transit_s, 1.0)
    speed = length / transit_s
    alpha = acceleration_mps2 * transit_s * transit_s / length
    delta = np.array([2.0 * geo.half_dv_along_mps, geo.dv_perp_mps]) / speed
    target = np.array([geo.distance_m / length, 0.0])

    vc, branch = torch_seed(
        transit_s, geo.distance_m, geo.half_dv_along_mps, acceleration_mps2,
    )
    s = geo.half_dv_along_mps
    half_q = geo.dv_perp_mps / 2.0
    seed = np.array([vc + s, half_q, s - vc, half_q]) / speed
    seed_res = _residual(seed, delta, target, alpha)
    seed_sq = float(seed_res @ seed_res)

    x = seed.copy()
    res_sq = seed_sq
    for _ in range(TORCH_MAX_ITERATIONS):
        if res_sq < TORCH_TOLERANCE:
            break
        f = _residual(x, delta, target, alpha)
        step = _newton_step(_jacobian(x, alpha), f)
        if step is None:
            break
        x = x - step
        res = _residual(x, delta, target, alpha)
        res_sq = float(res @ res)
        if not math.isfinite(res_sq):
            break

    if not math.isfinite(res_sq) or res_sq > seed_sq:
        x = seed
        res_sq = seed_sq

    logger.debug("Torch seed %s, residual² %.3e", branch.value, res_sq)

    boost = (geo.e1 * float(x[0]) + geo.e2 * float(x[1])) * speed
    decel = (geo.e1 * float(x[2]) + geo.e2 * float(x[3])) * speed
    return TorchSolution(
        boost=boost,
        decel=decel,
        residual_sq=res_sq,
        seed_branch=branch,
        converged=res_sq <= TORCH_CONVERGED_RESIDUAL,
    )


def solve_torch_two_burn_transfer(inp: TwoBurnTransferInput) -> TwoBurnTransferSolution:
    """
    Evaluate a transfer under the continuous-thrust model.

    Burns lie inside the transit, so launch and arrival times are not
    shifted. Failures: non-positive transit, missing or insufficient
    acceleration, or burns that do not fit in the transit.
    """
    transit = inp.transit_duration_s
    base = dict(
        launch_time_s=inp.launch_time_s,
        arrival_time_s=inp.arrival_time_s,
        transit_duration_s=transit,
        method=TransferMethod.TORCH,
    )
    if transit <= 0:
        return TwoBurnTransferSolution(result=ArrivalBeforeLaunch(transit), **base)

    geo = _geometry(transit, inp.source_state, inp.destination_state)
    distance = geo.distance_m if geo is not None else 0.0
    half_dv = geo.half_dv_along_mps if geo is not None else 0.0
    required = required_acceleration_mps2(transit, distance, half_dv)

    accel = inp.acceleration_mps2
    if not accel > 0:
        return TwoBurnTransferSolution(result=InsufficientAcceleration(required), **base)

    solution = solve_torch_transfer(transit, inp.source_state, inp.destination_state, accel)
    boost_dv = solution.boost.norm()
    decel_dv = solution.decel.norm()
    sized = dict(
        boost_dv_mps=boost_dv,
        decel_dv_mps=decel_dv,
        total_dv_mps=boost_dv + decel_dv,
        boost_burn_time_s=boost_dv / accel,
        decel_burn_time_s=decel_dv / accel,
    )
    burns = sized["boost_burn_time_s"] + sized["decel_burn_time_s"]

    if math.isnan(burns):
        return TwoBurnTransferSolution(result=BurnNaN(), **base, **sized)
    if burns > transit:
        return TwoBurnTransferSolution(
            result=BurnLongerThanTransfer(burns, transit), **base, **sized,
        )
    if not solution.converged:
        return TwoBurnTransferSolution(result=InsufficientAcceleration(required), **base)

    return TwoBurnTransferSolution(result=Success(), **base, **sized)
