# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Transfer evaluation across models.

Runs the impulsive Lambert evaluator, falls back to (or augments with)
the continuous-thrust model, and optionally replaces the result by the
hybrid remap with its calibrated ΔV correction.
"""
import logging

from orbitplan.domain.hybrid import apply_hybrid_correction, hybrid_remap
from orbitplan.domain.outcomes import best_of, was_bug
from orbitplan.domain.torch_solver import solve_torch_two_burn_transfer
from orbitplan.domain.transfer import (
    TwoBurnTransferInput,
    TwoBurnTransferSolution,
    solve_two_burn_lambert_transfer,
)

logger = logging.getLogger(__name__)


def select_solution(
    a: TwoBurnTransferSolution,
    b: TwoBurnTransferSolution,
    acceleration_mps2: float,
) -> TwoBurnTransferSolution:
    """Success beats failure, two successes by lower ΔV, two failures by ``best_of``."""
    if a.result.is_success and b.result.is_success:
        return b if b.total_dv_mps < a.total_dv_mps else a
    if a.result.is_success:
        return a
    if b.result.is_success:
        return b
    return b if best_of(a.result, b.result, acceleration_mps2) is b.result else a


def evaluate_transfer(inp: TwoBurnTransferInput) -> TwoBurnTransferSolution:
    """
    Full evaluation of one (launch, arrival) pair.

    Lambert first; the continuous-thrust model runs when requested or
    when Lambert fails, and the better of the two is kept. With a hybrid
    configuration and both state callbacks, the remapped arc replaces
    the direct one only if it is cheaper and longer, and the calibrated
    ΔV correction is applied to the outcome.
    """
    direct = solve_two_burn_lambert_transfer(inp)
    if inp.continuous_thrust or not direct.result.is_success:
        torch = solve_torch_two_burn_transfer(inp)
        direct = select_solution(direct, torch, inp.acceleration_mps2)

    if was_bug(direct.result):
        logger.warning(
            "Transfer %.0f -> %.0f ended in %s",
            inp.launch_time_s, inp.arrival_time_s, direct.result.outcome.name,
        )

    if (
        inp.hybrid is None
        or inp.source_state_at is None
        or inp.destination_state_at is None
    ):
        return direct

    chosen = direct
    remapped = hybrid_remap(inp, inp.hybrid)
    if remapped is not None:
        candidate = remapped.solution
        if candidate.result.is_success and not direct.result.is_success:
            chosen = candidate
        elif (
            candidate.result.is_success
            and candidate.total_dv_mps < direct.total_dv_mps
            and candidate.transit_duration_s > direct.transit_duration_s
        ):
            chosen = candidate

    return apply_hybrid_correction(chosen, direct.transit_duration_s, inp.acceleration_mps2)
