# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Porkchop grid search.

Sweeps launch date x transit time between two catalogued orbits,
evaluates every cell, and summarises the result: minimum and maximum
ΔV over feasible cells, the optimal (cheapest) cell, per-outcome
failure counts, and the most useful failure when nothing succeeds.

Heliocentric transfers propagate both planets from their catalog
elements around the Sun. Transfers between two orbits of the same body
use a circular model around that body instead.

Cells are independent; rows can be farmed out to an executor and are
merged back in row order, so the result does not depend on scheduling.
"""
import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from functools import partial
from types import MappingProxyType
from typing import Mapping, Protocol

from orbitplan.domain.catalog import (
    BodyCatalog,
    OrbitCatalog,
    SpaceBody,
    heliocentric_body,
    local_body,
    parking_radius_m,
)
from orbitplan.domain.evaluation import evaluate_transfer
from orbitplan.domain.kepler import body_state_at, circular_state_at
from orbitplan.domain.orbital_mechanics import (
    OrbitalConstants,
    datetime_to_posix,
    hohmann_transfer_time_s,
    mg_to_mps2,
    synodic_period_s,
)
from orbitplan.domain.outcomes import (
    Hyperbolic,
    InsufficientDV,
    LaunchInPast,
    TransferOutcome,
    TransferResult,
    best_of,
)
from orbitplan.domain.transfer import (
    HybridRemapConfig,
    StateAt,
    TransferMethod,
    TwoBurnTransferInput,
    TwoBurnTransferSolution,
)

logger = logging.getLogger(__name__)

MIN_GRID_RESOLUTION = 20
MAX_GRID_RESOLUTION = 150
DEFAULT_PROBE_ORIGIN = "LowEarthOrbit1"

_DAY_S = OrbitalConstants.SECONDS_PER_DAY
_HELIO_SPAN_CAP_S = 3.0 * OrbitalConstants.SECONDS_PER_JULIAN_YEAR
_LOCAL_SPAN_CAP_S = 120.0 * _DAY_S
_HELIO_MIN_TRANSIT_S = 5.0 * _DAY_S
_LOCAL_MIN_TRANSIT_S = 3600.0
_HELIO_TRANSIT_STEP_FLOOR_S = _DAY_S
_LOCAL_TRANSIT_STEP_FLOOR_S = 1800.0
_MIN_TRANSIT_HOHMANN_FRACTION = 0.3
_MAX_TRANSIT_HOHMANN_FACTOR = 3.0
_MAX_TRANSIT_SYNODIC_FRACTION = 0.9


class CancellationToken(Protocol):
    def is_current(self) -> bool: ...


@dataclass(frozen=True)
class TransferRequest:
    """What to sweep: endpoints, epoch, grid size and craft limits."""
    origin_orbit: str | None
    destination_orbit: str
    reference_epoch: datetime
    grid_resolution: int = 50
    cruise_acceleration_mg: float = 3000.0
    max_delta_v_kms: float | None = None
    departure_horizon_years: float | None = None
    hybrid_remap: bool = False
    probe_mode: bool = False
    probe_high_thrust: bool = False

    @property
    def resolved_origin(self) -> str | None:
        if self.origin_orbit:
            return self.origin_orbit
        return DEFAULT_PROBE_ORIGIN if self.probe_mode else None


@dataclass(frozen=True)
class PorkchopCell:
    """One feasible grid cell. Days are POSIX days, ΔV in km/s."""
    launch_day: float
    arrival_day: float
    departure_dv_raw: float
    launch_impulse_dv: float
    departure_dv: float
    arrival_dv: float
    total_dv_raw: float
    total_dv: float
    transit_days: float
    result: TransferResult
    boost_burn_days: float | None
    decel_burn_days: float | None
    method: TransferMethod


@dataclass(frozen=True)
class PorkchopResult:
    """Sweep summary. ``grid[i][j]`` is launch row i, transit column j."""
    grid: tuple[tuple[PorkchopCell | None, ...], ...]
    min_dv: float
    max_dv: float
    optimal: PorkchopCell | None
    launch_start_day: float
    launch_step_days: float
    min_transit_days: float
    transit_step_days: float
    failure_counts: Mapping[TransferOutcome, int] = field(
        default_factory=lambda: MappingProxyType({}),
    )
    best_failure: TransferResult | None = None
    resolution: int = 0

    @property
    def success_count(self) -> int:
        return sum(1 for row in self.grid for cell in row if cell is not None)

    @classmethod
    def empty(cls) -> "PorkchopResult":
        return cls(
            grid=(),
            min_dv=0.0,
            max_dv=0.0,
            optimal=None,
            launch_start_day=0.0,
            launch_step_days=0.0,
            min_transit_days=0.0,
            transit_step_days=0.0,
        )


def cell_from_solution(solution: TwoBurnTransferSolution) -> PorkchopCell:
    """Convert a successful transfer into grid units (days, km/s)."""
    launch_day = solution.launch_time_s / _DAY_S
    arrival_day = solution.arrival_time_s / _DAY_S
    departure = solution.boost_dv_mps / 1000.0
    arrival = solution.decel_dv_mps / 1000.0
    total = departure + arrival

    total_raw = total
    departure_raw = departure
    if solution.raw_total_dv_mps is not None:
        total_raw = solution.raw_total_dv_mps / 1000.0
        if total > 0:
            departure_raw = departure * total_raw / total

    def _days(t_s: float) -> float | None:
        return t_s / _DAY_S if math.isfinite(t_s) else None

    return PorkchopCell(
        launch_day=launch_day,
        arrival_day=arrival_day,
        departure_dv_raw=departure_raw,
        launch_impulse_dv=0.0,
        departure_dv=departure,
        arrival_dv=arrival,
        total_dv_raw=total_raw,
        total_dv=total,
        transit_days=arrival_day - launch_day,
        result=solution.result,
        boost_burn_days=_days(solution.boost_burn_time_s),
        decel_burn_days=_days(solution.decel_burn_time_s),
        method=solution.method,
    )


@dataclass(frozen=True)
class _SweepPlan:
    resolution: int
    start_s: float
    launch_step_s: float
    min_transit_s: float
    transit_step_s: float
    mu: float
    body_radius_m: float
    acceleration_mps2: float
    dv_cap_kms: float
    origin_state_at: StateAt
    destination_state_at: StateAt
    continuous_thrust: bool
    hybrid: HybridRemapConfig | None


def _heliocentric_state_at(body: SpaceBody):
    return partial(body_state_at, body.heliocentric_elements(), mu=OrbitalConstants.MU_SUN)


def _plan(request: TransferRequest, bodies: BodyCatalog, orbits: OrbitCatalog) -> _SweepPlan | None:
    origin_name = request.resolved_origin
    origin = orbits.get(origin_name)
    destination = orbits.get(request.destination_orbit)
    if origin is None or destination is None:
        logger.warning(
            "Unknown orbit(s): origin=%r destination=%r",
            origin_name, request.destination_orbit,
        )
        return None

    origin_helio = heliocentric_body(origin, bodies)
    destination_helio = heliocentric_body(destination, bodies)
    if origin_helio is None or destination_helio is None:
        logger.warning(
            "Cannot resolve heliocentric body for %s -> %s", origin.name, destination.name,
        )
        return None

    origin_local = local_body(origin, bodies)
    destination_local = local_body(destination, bodies)
    use_local = (
        origin_helio.name == destination_helio.name
        and origin_local is not None
        and destination_local is not None
        and origin_local.name == destination_local.name
    )

    start_s = datetime_to_posix(request.reference_epoch)
    if use_local:
        mu = origin_local.mu
        body_radius = origin_local.equatorial_radius_m
        r1 = parking_radius_m(origin, origin_local)
        r2 = parking_radius_m(destination, origin_local)
        origin_state_at = partial(circular_state_at, r1, mu, start_s)
        destination_state_at = partial(circular_state_at, r2, mu, start_s)
    else:
        mu = OrbitalConstants.MU_SUN
        body_radius = OrbitalConstants.R_SUN
        r1 = origin_helio.semi_major_axis_m
        r2 = destination_helio.semi_major_axis_m
        origin_state_at = _heliocentric_state_at(origin_helio)
        destination_state_at = _heliocentric_state_at(destination_helio)

    if not math.isfinite(mu) or mu <= 0:
        logger.warning("Non-positive gravitational parameter for %s", origin.barycenter)
        return None

    n = max(MIN_GRID_RESOLUTION, min(MAX_GRID_RESOLUTION, math.floor(request.grid_resolution)))
    hohmann = hohmann_transfer_time_s(r1, r2, mu)
    synodic = synodic_period_s(r1, r2, mu)
    synodic_ok = math.isfinite(synodic) and synodic > 0

    span_cap = _LOCAL_SPAN_CAP_S if use_local else _HELIO_SPAN_CAP_S
    horizon = request.departure_horizon_years
    if horizon is not None and horizon > 0:
        launch_span = horizon * OrbitalConstants.SECONDS_PER_JULIAN_YEAR
    else:
        launch_span = min(synodic if synodic_ok else span_cap, span_cap)

    min_floor = _LOCAL_MIN_TRANSIT_S if use_local else _HELIO_MIN_TRANSIT_S
    step_floor = _LOCAL_TRANSIT_STEP_FLOOR_S if use_local else _HELIO_TRANSIT_STEP_FLOOR_S
    min_transit = max(min_floor, hohmann * _MIN_TRANSIT_HOHMANN_FRACTION)
    max_transit_target = min(
        span_cap,
        synodic * _MAX_TRANSIT_SYNODIC_FRACTION if synodic_ok else span_cap,
        hohmann * _MAX_TRANSIT_HOHMANN_FACTOR,
    )
    max_transit = max(min_transit + step_floor, max_transit_target)

    accel_mg = request.cruise_acceleration_mg
    accel_mg = max(0.0, accel_mg) if math.isfinite(accel_mg) else 0.0
    cap = request.max_delta_v_kms
    dv_cap = cap if cap is not None and math.isfinite(cap) and cap > 0 else math.inf

    logger.debug(
        "Sweep %s -> %s: %s model, N=%d, span %.1f d, transit %.1f-%.1f d",
        origin.name, destination.name, "local" if use_local else "heliocentric",
        n, launch_span / _DAY_S, min_transit / _DAY_S, max_transit / _DAY_S,
    )

    return _SweepPlan(
        resolution=n,
        start_s=start_s,
        launch_step_s=launch_span / (n - 1),
        min_transit_s=min_transit,
        transit_step_s=(max_transit - min_transit) / (n - 1),
        mu=mu,
        body_radius_m=body_radius,
        acceleration_mps2=mg_to_mps2(accel_mg),
        dv_cap_kms=dv_cap,
        origin_state_at=origin_state_at,
        destination_state_at=destination_state_at,
        continuous_thrust=request.probe_high_thrust,
        hybrid=HybridRemapConfig() if request.hybrid_remap else None,
    )


def _screen(solution: TwoBurnTransferSolution, plan: _SweepPlan, transit_s: float) -> TransferResult:
    """Downgrade successes that launch too early, cost too much, or escape."""
    result = solution.result
    if not result.is_success:
        return result
    if solution.launch_time_s < plan.start_s:
        return LaunchInPast(plan.start_s - solution.launch_time_s, transit_s)
    if solution.total_dv_mps / 1000.0 > plan.dv_cap_kms:
        return InsufficientDV(solution.total_dv_mps, plan.dv_cap_kms * 1000.0)
    orbit = solution.transfer_orbit
    if orbit is not None and orbit.eccentricity >= 1.0:
        return Hyperbolic(orbit.eccentricity)
    return result


def _sweep_row(
    i: int,
    plan: _SweepPlan,
    token: CancellationToken | None,
) -> list[tuple[PorkchopCell | None, TransferResult | None]] | None:
    if token is not None and not token.is_current():
        return None

    launch_s = plan.start_s + i * plan.launch_step_s
    source_state = plan.origin_state_at(launch_s)
    row = []
    for j in range(plan.resolution):
        transit_s = plan.min_transit_s + j * plan.transit_step_s
        arrival_s = launch_s + transit_s
        solution = evaluate_transfer(TwoBurnTransferInput(
            launch_time_s=launch_s,
            arrival_time_s=arrival_s,
            source_state=source_state,
            destination_state=plan.destination_state_at(arrival_s),
            mu=plan.mu,
            body_mean_radius_m=plan.body_radius_m,
            acceleration_mps2=plan.acceleration_mps2,
            source_state_at=plan.origin_state_at,
            destination_state_at=plan.destination_state_at,
            continuous_thrust=plan.continuous_thrust,
            hybrid=plan.hybrid,
        ))
        verdict = _screen(solution, plan, transit_s)
        if verdict.is_success:
            row.append((cell_from_solution(solution), None))
        else:
            row.append((None, verdict))
    return row


def sweep(
    request: TransferRequest,
    bodies: BodyCatalog,
    orbits: OrbitCatalog,
    *,
    executor=None,
    token: CancellationToken | None = None,
) -> PorkchopResult | None:
    """
    Evaluate the launch x transit grid for a transfer request.

    Args:
        request: Endpoints, reference epoch and craft limits.
        bodies: Body catalog.
        orbits: Orbit catalog.
        executor: Optional ``concurrent.futures.Executor``; rows are
            mapped over it and merged in row order.
        token: Optional cancellation token. Once ``is_current()``
            returns False the sweep stops and returns None.

    Returns:
        PorkchopResult (empty when the endpoints cannot be resolved), or
        None when superseded.
    """
    plan = _plan(request, bodies, orbits)
    if plan is None:
        return PorkchopResult.empty()

    row_fn = partial(_sweep_row, plan=plan, token=token)
    if executor is not None:
        rows = list(executor.map(row_fn, range(plan.resolution)))
    else:
        rows = []
        for i in range(plan.resolution):
            row = row_fn(i)
            if row is None:
                break
            rows.append(row)

    if token is not None and not token.is_current():
        return None
    if any(row is None for row in rows) or len(rows) != plan.resolution:
        return None

    grid = []
    min_dv = math.inf
    max_dv = 0.0
    optimal = None
    failure_counts: dict[TransferOutcome, int] = {}
    best_failure = None

    for row in rows:
        grid_row = []
        for cell, failure in row:
            grid_row.append(cell)
            if cell is None:
                failure_counts[failure.outcome] = failure_counts.get(failure.outcome, 0) + 1
                best_failure = best_of(best_failure, failure, plan.acceleration_mps2)
                continue
            if cell.total_dv < min_dv:
                min_dv = cell.total_dv
                optimal = cell
            if cell.total_dv > max_dv:
                max_dv = cell.total_dv
        grid.append(tuple(grid_row))

    if not math.isfinite(min_dv):
        min_dv = 0.0

    return PorkchopResult(
        grid=tuple(grid),
        min_dv=min_dv,
        max_dv=max_dv,
        optimal=optimal,
        launch_start_day=plan.start_s / _DAY_S,
        launch_step_days=plan.launch_step_s / _DAY_S,
        min_transit_days=plan.min_transit_s / _DAY_S,
        transit_step_days=plan.transit_step_s / _DAY_S,
        failure_counts=MappingProxyType(failure_counts),
        best_failure=best_failure,
        resolution=plan.resolution,
    )
