# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Hybrid remap of impulsive transfers.

Approximates a multi-segment (impulsive plus low-thrust) trajectory
with a single two-body Lambert arc. The launch and arrival times are
nudged, within a window around the nominal dates, towards the moments
at which each endpoint body's velocity best matches the velocity the
Lambert arc needs there. The resulting ΔV is then reduced by an
empirically calibrated correction.

The correction curve is a fit to an external reference planner. It
has no first-principles derivation; if the reference changes, refit the
constants below rather than re-deriving them.
"""
import logging
import math
from dataclasses import dataclass, replace

import numpy as np

from orbitplan.domain.lambert import LambertSolution, solve_lambert
from orbitplan.domain.orbital_mechanics import OrbitalConstants
from orbitplan.domain.transfer import (
    HybridRemapConfig,
    StateAt,
    TransferMethod,
    TwoBurnTransferInput,
    TwoBurnTransferSolution,
    burn_time_s,
    solve_two_burn_lambert_transfer,
)
from orbitplan.domain.vectors import Vector3

logger = logging.getLogger(__name__)

# Calibrated ΔV reduction curve (km/s in, km/s out).
HYBRID_LOW_BREAKPOINT_KMS = 20.0
HYBRID_HIGH_BREAKPOINT_KMS = 24.2
HYBRID_LOW_SLOPE = 0.05
HYBRID_MID_REDUCTION_KMS = 1.0
HYBRID_HIGH_REDUCTION_KMS = 2.0
HYBRID_TRANSIT_BONUS_KMS_PER_DAY2 = 2.5e-5


@dataclass(frozen=True)
class RemapResult:
    """Remapped endpoint times and the transfer evaluated between them."""
    launch_time_s: float
    arrival_time_s: float
    rounds: int
    converged: bool
    solution: TwoBurnTransferSolution


def alignment_score(
    body_velocity: Vector3,
    arc_velocity: Vector3,
    config: HybridRemapConfig,
) -> float:
    """Lower is better: weighted direction mismatch plus relative speed mismatch."""
    arc_speed = arc_velocity.norm()
    body_speed = body_velocity.norm()
    if arc_speed <= 0 or body_speed <= 0:
        return math.inf
    cos_angle = max(-1.0, min(1.0, body_velocity.dot(arc_velocity) / (body_speed * arc_speed)))
    return (
        config.direction_weight * (1.0 - cos_angle)
        + config.magnitude_weight * abs(body_speed - arc_speed) / arc_speed
    )


def sample_count(window_s: float, config: HybridRemapConfig) -> int:
    """Roughly one sample per day across the window, clamped to the configured range."""
    per_day = round(2.0 * window_s / OrbitalConstants.SECONDS_PER_DAY)
    return max(config.min_samples, min(config.max_samples, per_day))


def _best_aligned_time(
    state_at: StateAt,
    current_s: float,
    nominal_s: float,
    window_s: float,
    samples: int,
    arc_velocity: Vector3,
    config: HybridRemapConfig,
) -> float:
    """Best-aligned time in [nominal - w, nominal + w]; ``current_s`` wins ties."""
    lo = nominal_s - window_s
    hi = nominal_s + window_s
    best_t = min(hi, max(lo, current_s))
    best_score = alignment_score(state_at(best_t).velocity, arc_velocity, config)
    for t in np.linspace(lo, hi, samples):
        t = float(t)
        score = alignment_score(state_at(t).velocity, arc_velocity, config)
        if score < best_score:
            best_score = score
            best_t = t
    return best_t


def _cheapest_lambert(
    transit_s: float, state1, state2, mu: float,
) -> LambertSolution | None:
    candidates = [
        sol for sol in (
            solve_lambert(transit_s, state1, state2, mu, False),
            solve_lambert(transit_s, state1, state2, mu, True),
        ) if sol is not None
    ]
    if not candidates:
        return None
    return min(candidates, key=lambda sol: sol.total_dv_mps)


def hybrid_remap(
    inp: TwoBurnTransferInput,
    config: HybridRemapConfig,
) -> RemapResult | None:
    """
    Iteratively move the endpoints towards velocity alignment with the Lambert arc.

    Each round solves Lambert between the current endpoint times, then
    scans each endpoint over [t0 - w, t0 + w] around its nominal time
    t0 (w = window_fraction x nominal transit) for the time whose body
    velocity scores best against the arc velocity there. Endpoints never
    leave that window. Stops after ``max_rounds`` or once both endpoints
    move by less than ``convergence_s``.

    Returns:
        RemapResult, or None without state callbacks, with a
        non-positive transit, or when no round could be completed.
    """
    source_at = inp.source_state_at
    destination_at = inp.destination_state_at
    if source_at is None or destination_at is None:
        return None
    nominal = inp.transit_duration_s
    if nominal <= 0:
        return None

    window = config.window_fraction * nominal
    samples = sample_count(window, config)
    t_launch = inp.launch_time_s
    t_arrival = inp.arrival_time_s
    rounds = 0
    converged = False

    for _ in range(config.max_rounds):
        arc = _cheapest_lambert(
            t_arrival - t_launch, source_at(t_launch), destination_at(t_arrival), inp.mu,
        )
        if arc is None:
            break
        new_launch = _best_aligned_time(
            source_at, t_launch, inp.launch_time_s, window, samples,
            arc.initial_velocity, config,
        )
        new_arrival = _best_aligned_time(
            destination_at, t_arrival, inp.arrival_time_s, window, samples,
            arc.final_velocity, config,
        )
        if new_arrival <= new_launch:
            break

        moved = max(abs(new_launch - t_launch), abs(new_arrival - t_arrival))
        t_launch, t_arrival = new_launch, new_arrival
        rounds += 1
        if moved < config.convergence_s:
            converged = True
            break

    if rounds == 0:
        return None

    logger.debug(
        "Hybrid remap: %d rounds, launch %+.0f s, arrival %+.0f s",
        rounds, t_launch - inp.launch_time_s, t_arrival - inp.arrival_time_s,
    )
    remapped = replace(
        inp,
        launch_time_s=t_launch,
        arrival_time_s=t_arrival,
        source_state=source_at(t_launch),
        destination_state=destination_at(t_arrival),
        hybrid=None,
    )
    return RemapResult(
        launch_time_s=t_launch,
        arrival_time_s=t_arrival,
        rounds=rounds,
        converged=converged,
        solution=solve_two_burn_lambert_transfer(remapped),
    )


def calibrated_dv_reduction_kms(raw_kms: float, transit_gain_days: float) -> float:
    """
    Empirical ΔV reduction (km/s) for a hybrid trajectory.

    Piecewise linear in the raw ΔV: 5% below 20 km/s, rising from 1 to
    2 km/s between 20 and 24.2 km/s, flat 2 km/s above. A quadratic
    bonus in the transit-time gained by the remap is added on top.
    """
    if raw_kms < HYBRID_LOW_BREAKPOINT_KMS:
        reduction = HYBRID_LOW_SLOPE * raw_kms
    elif raw_kms < HYBRID_HIGH_BREAKPOINT_KMS:
        span = HYBRID_HIGH_BREAKPOINT_KMS - HYBRID_LOW_BREAKPOINT_KMS
        reduction = HYBRID_MID_REDUCTION_KMS + (
            HYBRID_HIGH_REDUCTION_KMS - HYBRID_MID_REDUCTION_KMS
        ) * (raw_kms - HYBRID_LOW_BREAKPOINT_KMS) / span
    else:
        reduction = HYBRID_HIGH_REDUCTION_KMS
    gain = max(0.0, transit_gain_days)
    return reduction + HYBRID_TRANSIT_BONUS_KMS_PER_DAY2 * gain * gain


def apply_hybrid_correction(
    solution: TwoBurnTransferSolution,
    direct_transit_s: float,
    acceleration_mps2: float,
) -> TwoBurnTransferSolution:
    """
    Apply the calibrated reduction to a successful solution.

    Boost and deceleration ΔV are scaled by the same factor, burn times
    are recomputed, and the uncorrected total is kept in
    ``raw_total_dv_mps``. Failures pass through unchanged.
    """
    if not solution.result.is_success:
        return solution

    raw = solution.total_dv_mps
    gain_days = (solution.transit_duration_s - direct_transit_s) / OrbitalConstants.SECONDS_PER_DAY
    reduction = calibrated_dv_reduction_kms(raw / 1000.0, gain_days) * 1000.0
    corrected = max(0.0, raw - reduction)
    scale = corrected / raw if raw > 0 else 0.0

    boost = solution.boost_dv_mps * scale
    decel = solution.decel_dv_mps * scale
    tb = burn_time_s(boost, acceleration_mps2)
    tc = burn_time_s(decel, acceleration_mps2)

    launch = solution.launch_time_s
    arrival = solution.arrival_time_s
    if solution.method is TransferMethod.LAMBERT:
        # Re-centre the impulsive half-burn shifts on the new burn times.
        launch += 0.5 * (solution.boost_burn_time_s - (tb if math.isfinite(tb) else 0.0))
        arrival -= 0.5 * (solution.decel_burn_time_s - (tc if math.isfinite(tc) else 0.0))

    return replace(
        solution,
        launch_time_s=launch,
        arrival_time_s=arrival,
        boost_dv_mps=boost,
        decel_dv_mps=decel,
        total_dv_mps=boost + decel,
        boost_burn_time_s=tb,
        decel_burn_time_s=tc,
        method=TransferMethod.HYBRID,
        raw_total_dv_mps=raw,
    )
