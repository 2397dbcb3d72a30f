# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Two-burn transfer evaluation.

Turns a pair of endpoint states into a validated impulsive transfer:
Lambert arc selection (prograde vs retrograde), transfer-orbit checks
(parabolic, collision with the central body, orbit period) and burn
durations at the craft's cruise acceleration. Selection against the
continuous-thrust model and the hybrid remap lives in ``evaluation``.

Feasibility failures are returned as ``TransferResult`` variants, never
raised.

No external dependencies beyond stdlib math.
"""
import math
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from orbitplan.domain.lambert import LambertSolution, solve_lambert
from orbitplan.domain.orbital_mechanics import normalize_angle_rad
from orbitplan.domain.outcomes import (
    ArrivalBeforeLaunch,
    BurnLongerThanTransfer,
    BurnNaN,
    CodePathNotImplemented,
    OrbitPeriod,
    Parabolic,
    Success,
    TransferResult,
    WouldCollideWithBody,
)
from orbitplan.domain.vectors import OrbitalState

# Transfers whose orbit period exceeds this many years x 7500 are rejected.
MAX_PERIOD_RATIO = 7500.0
SIDEREAL_YEAR_S = 31_556_924.0
_PARABOLIC_TOLERANCE = 1e-6
_CIRCULAR_ECCENTRICITY = 1e-12
_COLLISION_MIN_ECCENTRICITY = 1e-10
_ENERGY_EPS = 1e-20

StateAt = Callable[[float], OrbitalState]


class TransferMethod(Enum):
    """Model that produced a transfer solution."""
    LAMBERT = "lambert"
    TORCH = "torch"
    HYBRID = "hybrid"


@dataclass(frozen=True)
class HybridRemapConfig:
    """Tuning of the endpoint remap search."""
    window_fraction: float = 0.12
    min_samples: int = 8
    max_samples: int = 160
    max_rounds: int = 4
    convergence_s: float = 60.0
    direction_weight: float = 1.0
    magnitude_weight: float = 0.5


@dataclass(frozen=True)
class ConicElements:
    """Transfer orbit in its own plane, referenced to epoch_s."""
    epoch_s: float
    semi_major_axis_m: float
    eccentricity: float
    mean_anomaly_at_epoch_rad: float
    periapsis_m: float
    apoapsis_m: float


@dataclass(frozen=True)
class TwoBurnTransferInput:
    """Everything needed to evaluate one (launch, arrival) pair.

    ``source_state_at`` / ``destination_state_at`` map a POSIX time to
    the endpoint body's state and are only needed for the hybrid remap.
    """
    launch_time_s: float
    arrival_time_s: float
    source_state: OrbitalState
    destination_state: OrbitalState
    mu: float
    body_mean_radius_m: float
    acceleration_mps2: float
    source_state_at: StateAt | None = None
    destination_state_at: StateAt | None = None
    continuous_thrust: bool = False
    hybrid: HybridRemapConfig | None = None

    @property
    def transit_duration_s(self) -> float:
        return self.arrival_time_s - self.launch_time_s


@dataclass(frozen=True)
class TwoBurnTransferSolution:
    """Evaluated transfer.

    On success the launch time is moved earlier by half the boost burn
    and the arrival later by half the deceleration burn (impulsive
    model). ΔV fields stay zero on failures that happen before the burns
    are sized.
    """
    result: TransferResult
    launch_time_s: float
    arrival_time_s: float
    transit_duration_s: float
    boost_dv_mps: float = 0.0
    decel_dv_mps: float = 0.0
    total_dv_mps: float = 0.0
    boost_burn_time_s: float = 0.0
    decel_burn_time_s: float = 0.0
    transfer_orbit: ConicElements | None = None
    method: TransferMethod = TransferMethod.LAMBERT
    raw_total_dv_mps: float | None = None


def _approximately(a: float, b: float) -> bool:
    largest = max(1.0, abs(a), abs(b))
    return abs(a - b) <= _PARABOLIC_TOLERANCE * largest


def cartesian_to_conic_elements(
    state: OrbitalState,
    mu: float,
    epoch_s: float,
) -> ConicElements:
    """
    Classical conic of a state vector.

    Mean anomaly is NaN when it cannot be defined (parabolic or
    degenerate energy). Circular orbits take the in-plane longitude of
    the position as their mean anomaly.

    Args:
        state: Position/velocity (SI).
        mu: Gravitational parameter (m³/s²).
        epoch_s: Epoch the mean anomaly refers to.

    Returns:
        ConicElements.
    """
    r = state.position
    v = state.velocity
    r_mag = r.norm()
    v_mag2 = v.norm_sq()

    h = r.cross(v)
    e_vec = v.cross(h) * (1.0 / mu) - r * (1.0 / r_mag)
    e = e_vec.norm()

    energy = v_mag2 / 2.0 - mu / r_mag
    a = -mu / (2.0 * energy) if abs(energy) > _ENERGY_EPS else math.inf

    mean_anomaly = math.nan
    if _CIRCULAR_ECCENTRICITY < e < 1.0 and math.isfinite(a) and a > 0:
        cos_nu = max(-1.0, min(1.0, e_vec.dot(r) / (e * r_mag)))
        nu = math.acos(cos_nu)
        if r.dot(v) < 0:
            nu = 2.0 * math.pi - nu
        ecc_anomaly = 2.0 * math.atan2(
            math.sqrt(1.0 - e) * math.sin(nu / 2.0),
            math.sqrt(1.0 + e) * math.cos(nu / 2.0),
        )
        mean_anomaly = normalize_angle_rad(ecc_anomaly - e * math.sin(ecc_anomaly))
    elif e > 1.0 + _CIRCULAR_ECCENTRICITY and math.isfinite(a) and a < 0:
        cos_nu = max(-1.0, min(1.0, e_vec.dot(r) / (e * r_mag)))
        nu = math.acos(cos_nu)
        if r.dot(v) < 0:
            nu = -nu
        cosh_h = (e + math.cos(nu)) / (1.0 + e * math.cos(nu))
        if math.isfinite(cosh_h) and cosh_h >= 1.0:
            hyp_anomaly = math.acosh(cosh_h)
            if nu < 0:
                hyp_anomaly = -hyp_anomaly
            mean_anomaly = e * math.sinh(hyp_anomaly) - hyp_anomaly
    elif e <= _CIRCULAR_ECCENTRICITY and math.isfinite(a) and a > 0:
        mean_anomaly = normalize_angle_rad(math.atan2(r.y, r.x))

    periapsis = abs(a * (1.0 - e)) if math.isfinite(a) else math.nan
    apoapsis = a * (1.0 + e) if e < 1.0 and math.isfinite(a) else math.inf

    return ConicElements(
        epoch_s=epoch_s,
        semi_major_axis_m=a,
        eccentricity=e,
        mean_anomaly_at_epoch_rad=mean_anomaly,
        periapsis_m=periapsis,
        apoapsis_m=apoapsis,
    )


def conic_period_s(orbit: ConicElements, mu: float) -> float:
    """Period of a closed conic, inf for open or degenerate ones."""
    a = orbit.semi_major_axis_m
    if not math.isfinite(a) or a <= 0 or orbit.eccentricity >= 1.0:
        return math.inf
    return 2.0 * math.pi * math.sqrt(a**3 / mu)


def mean_anomalies_at_radius(
    orbit: ConicElements, radius_m: float,
) -> tuple[float, float] | None:
    """Outbound and inbound mean anomalies where an ellipse crosses radius_m."""
    a = orbit.semi_major_axis_m
    e = orbit.eccentricity
    if e >= 1.0 or not math.isfinite(a) or a <= 0:
        return None
    if radius_m < orbit.periapsis_m or radius_m > orbit.apoapsis_m:
        return None
    if e < _COLLISION_MIN_ECCENTRICITY:
        return None

    cos_e = (1.0 - radius_m / a) / e
    if cos_e < -1.0 or cos_e > 1.0:
        return None

    ecc1 = math.acos(cos_e)
    ecc2 = 2.0 * math.pi - ecc1
    return (
        normalize_angle_rad(ecc1 - e * math.sin(ecc1)),
        normalize_angle_rad(ecc2 - e * math.sin(ecc2)),
    )


def next_time_at_mean_anomaly(
    orbit: ConicElements,
    target_rad: float,
    from_time_s: float,
    mu: float,
) -> float | None:
    """First time at or after from_time_s at which the ellipse reaches target_rad."""
    a = orbit.semi_major_axis_m
    if orbit.eccentricity >= 1.0 or not math.isfinite(a) or a <= 0:
        return None
    n = math.sqrt(mu / a**3)
    if not math.isfinite(n) or n <= 0:
        return None

    m_now = normalize_angle_rad(
        orbit.mean_anomaly_at_epoch_rad + n * (from_time_s - orbit.epoch_s)
    )
    delta = normalize_angle_rad(target_rad) - m_now
    if delta < 0:
        delta += 2.0 * math.pi
    return from_time_s + delta / n


def would_collide_with_body(
    orbit: ConicElements,
    launch_time_s: float,
    arrival_time_s: float,
    body_radius_m: float,
    mu: float,
) -> bool:
    """True if the arc dips below the body's mean radius strictly inside the transit."""
    anomalies = mean_anomalies_at_radius(orbit, body_radius_m)
    if anomalies is None:
        return False
    for target in anomalies:
        t = next_time_at_mean_anomaly(orbit, target, launch_time_s, mu)
        if t is not None and launch_time_s < t < arrival_time_s:
            return True
    return False


def burn_time_s(dv_mps: float, acceleration_mps2: float) -> float:
    """Burn duration at constant acceleration; inf (or NaN for zero ΔV) without thrust."""
    if acceleration_mps2 == 0:
        return math.inf if dv_mps > 0 else math.nan
    return dv_mps / acceleration_mps2


def _order_lambert(
    prograde: LambertSolution | None,
    retrograde: LambertSolution | None,
) -> tuple[LambertSolution | None, LambertSolution | None]:
    if prograde is None:
        return retrograde, None
    if retrograde is None:
        return prograde, None
    if prograde.total_dv_mps <= retrograde.total_dv_mps:
        return prograde, retrograde
    return retrograde, prograde


def _failure(inp: TwoBurnTransferInput, result: TransferResult, **kwargs) -> TwoBurnTransferSolution:
    return TwoBurnTransferSolution(
        result=result,
        launch_time_s=inp.launch_time_s,
        arrival_time_s=inp.arrival_time_s,
        transit_duration_s=inp.transit_duration_s,
        **kwargs,
    )


def solve_two_burn_lambert_transfer(inp: TwoBurnTransferInput) -> TwoBurnTransferSolution:
    """
    Evaluate the impulsive two-burn Lambert transfer for one (launch, arrival) pair.

    Pipeline: transit sanity, prograde/retrograde Lambert (cheaper one
    first), transfer-orbit validity, collision with the central body
    (retrying with the other branch), orbit period, burn sizing.

    Args:
        inp: Endpoint times and states, central body and acceleration.

    Returns:
        TwoBurnTransferSolution with method ``TransferMethod.LAMBERT``.
    """
    transit = inp.transit_duration_s
    if transit <= 0:
        return _failure(inp, ArrivalBeforeLaunch(transit))

    prograde = solve_lambert(transit, inp.source_state, inp.destination_state, inp.mu, False)
    retrograde = solve_lambert(transit, inp.source_state, inp.destination_state, inp.mu, True)
    primary, secondary = _order_lambert(prograde, retrograde)
    if primary is None:
        return _failure(inp, CodePathNotImplemented())

    selected = primary
    orbit = None
    collides = False
    for candidate in (primary, secondary):
        if candidate is None:
            break
        selected = candidate
        orbit = cartesian_to_conic_elements(
            OrbitalState(inp.source_state.position, candidate.initial_velocity),
            inp.mu,
            inp.launch_time_s,
        )
        if not math.isfinite(orbit.mean_anomaly_at_epoch_rad):
            return _failure(inp, CodePathNotImplemented())
        if _approximately(orbit.eccentricity, 1.0):
            return _failure(inp, Parabolic(orbit.eccentricity))

        collides = would_collide_with_body(
            orbit, inp.launch_time_s, inp.arrival_time_s, inp.body_mean_radius_m, inp.mu,
        )
        if not collides:
            break

    if collides:
        return _failure(
            inp,
            WouldCollideWithBody(
                max(orbit.periapsis_m, inp.body_mean_radius_m), inp.body_mean_radius_m,
            ),
        )

    period = conic_period_s(orbit, inp.mu)
    if orbit.eccentricity < 1.0 and period / MAX_PERIOD_RATIO > SIDEREAL_YEAR_S:
        return _failure(inp, OrbitPeriod(period, orbit.eccentricity), transfer_orbit=orbit)

    boost_dv = selected.burn0.norm()
    decel_dv = selected.burn1.norm()
    tb = burn_time_s(boost_dv, inp.acceleration_mps2)
    tc = burn_time_s(decel_dv, inp.acceleration_mps2)
    sized = dict(
        boost_dv_mps=boost_dv,
        decel_dv_mps=decel_dv,
        total_dv_mps=boost_dv + decel_dv,
        boost_burn_time_s=tb,
        decel_burn_time_s=tc,
        transfer_orbit=orbit,
    )

    if 2.0 * transit < tb + tc:
        return _failure(inp, BurnLongerThanTransfer((tb + tc) / 2.0, transit), **sized)
    if math.isnan(tb) or math.isnan(tc):
        return _failure(inp, BurnNaN(), **sized)

    return TwoBurnTransferSolution(
        result=Success(),
        launch_time_s=inp.launch_time_s - 0.5 * tb,
        arrival_time_s=inp.arrival_time_s + 0.5 * tc,
        transit_duration_s=transit,
        **sized,
    )
