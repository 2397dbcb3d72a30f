# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Single-revolution Lambert solver (Izzo / Lancaster-Blanchard).

Given two position vectors and a time of flight, finds the conic arc
joining them and the impulsive burns that put a craft onto it from the
departure body's velocity and match the arrival body's velocity.

Ref: Izzo, "Revisiting Lambert's problem", CMDA 121 (2015).

No external dependencies beyond stdlib math.
"""
import math
from dataclasses import dataclass

from orbitplan.domain.vectors import OrbitalState, UNIT_Z, Vector3

LAMBERT_MAX_ITERATIONS = 15
LAMBERT_TOLERANCE = 1e-11
_SINGULAR_EPS = 1e-14
_HOUSEHOLDER_DENOM_EPS = 1e-30


@dataclass(frozen=True)
class LambertSolution:
    """Transfer arc velocities and the two impulsive burns (SI)."""
    initial_velocity: Vector3
    final_velocity: Vector3
    burn0: Vector3
    burn1: Vector3
    total_dv_mps: float


def _time_of_flight(x: float, lam: float, lam2: float) -> float:
    """Non-dimensional time of flight T(x), NaN where undefined."""
    one_minus_x2 = 1.0 - x * x
    if abs(one_minus_x2) <= _SINGULAR_EPS:
        return math.nan

    z = 1.0 / one_minus_x2

    if z > 0:
        psi = 2.0 * math.acos(max(-1.0, min(1.0, x)))
        phi = 2.0 * math.asin(math.sqrt(max(0.0, min(1.0, lam2 / z))))
        if lam < 0:
            phi = -phi
        return z * math.sqrt(z) * ((psi - math.sin(psi)) - (phi - math.sin(phi))) / 2.0

    if x < 1.0:
        return math.nan
    minus_z = -z
    psi = 2.0 * math.acosh(x)
    phi = 2.0 * math.asinh(math.sqrt(max(0.0, -lam2 / z)))
    if lam < 0:
        phi = -phi
    return minus_z * math.sqrt(minus_z) * (
        (math.sinh(psi) - psi) - (math.sinh(phi) - phi)
    ) / 2.0


def _time_derivatives(
    x: float, t: float, lam2: float, lam3: float,
) -> tuple[float, float, float]:
    """First three derivatives of T with respect to x."""
    nan3 = (math.nan, math.nan, math.nan)
    w = 1.0 - x * x
    if abs(w) <= _SINGULAR_EPS:
        return nan3

    y = 1.0 - lam2 * w
    if y <= 0:
        return nan3

    g = math.sqrt(y)
    h = y * g
    one_minus_lam2 = 1.0 - lam2
    lam5 = lam2 * lam3
    inv_w = 1.0 / w

    dt = inv_w * (3.0 * t * x - 2.0 + 2.0 * lam3 * x / g)
    ddt = inv_w * (3.0 * t + 5.0 * x * dt + 2.0 * one_minus_lam2 * lam3 / h)
    dddt = inv_w * (7.0 * x * ddt + 8.0 * dt - 6.0 * one_minus_lam2 * lam5 * x / (h * y))
    return dt, ddt, dddt


def _initial_guess(t: float, lam: float, lam2: float, lam3: float) -> float | None:
    t0 = math.acos(max(-1.0, min(1.0, lam))) + lam * math.sqrt(1.0 - lam2)
    t1 = (2.0 / 3.0) * (1.0 - lam * lam * lam)

    if t >= t0:
        return -(t - t0) / (t - t0 + 4.0)
    if t <= t1:
        lam5 = lam2 * lam3
        return 1.0 + t1 * (t1 - t) * 0.4 * (1.0 - lam5) / t

    denom = math.log(t1 / t0) if t1 > 0 else math.nan
    if not math.isfinite(denom) or abs(denom) <= _SINGULAR_EPS:
        return None
    return (t / t0) ** (math.log(2.0) / denom) - 1.0


def _householder(x0: float, t_target: float, lam: float, lam2: float, lam3: float) -> float:
    """Third-order Householder iteration on T(x) = T; falls back to x0."""
    x = x0
    for _ in range(LAMBERT_MAX_ITERATIONS):
        tx = _time_of_flight(x, lam, lam2)
        if not math.isfinite(tx):
            return x0
        dt, ddt, dddt = _time_derivatives(x, tx, lam2, lam3)
        if not (math.isfinite(dt) and math.isfinite(ddt) and math.isfinite(dddt)):
            return x0

        delta = tx - t_target
        if abs(delta) < LAMBERT_TOLERANCE:
            break

        dt2 = dt * dt
        numerator = delta * (dt2 - delta * ddt / 2.0)
        denominator = dt * (dt2 - delta * ddt) + dddt * delta * delta / 6.0
        if abs(denominator) <= _HOUSEHOLDER_DENOM_EPS:
            break

        next_x = x - numerator / denominator
        if not math.isfinite(next_x):
            return x0
        x = next_x
    return x


def _plane_normal(
    r1_hat: Vector3, r2_hat: Vector3,
    state1: OrbitalState, state2: OrbitalState,
) -> Vector3:
    n = r1_hat.cross(r2_hat)
    n_mag2 = n.norm_sq()
    if n_mag2 >= 0.5:
        return n * (1.0 / math.sqrt(n_mag2))

    # Near-collinear endpoints: use the averaged angular momenta.
    h1 = state1.position.cross(state1.velocity).normalized()
    h2 = state2.position.cross(state2.velocity).normalized()
    if h1 is not None and h2 is not None:
        merged = (h1 + h2).normalized()
        if merged is not None:
            return merged
    return UNIT_Z


def solve_lambert(
    transit_time_s: float,
    state1: OrbitalState,
    state2: OrbitalState,
    mu: float,
    retrograde: bool = False,
) -> LambertSolution | None:
    """
    Solve the single-revolution Lambert problem between two states.

    The departure and arrival burns are measured against each endpoint
    body's own velocity: burn0 = v_arc(t1) - v1, burn1 = v2 - v_arc(t2).

    Args:
        transit_time_s: Time of flight (s), must be positive.
        state1: Departure body state (SI).
        state2: Arrival body state (SI).
        mu: Gravitational parameter of the central body (m³/s²).
        retrograde: Solve for the retrograde arc instead.

    Returns:
        LambertSolution, or None when the geometry is degenerate or any
        intermediate is non-finite.
    """
    if not math.isfinite(transit_time_s) or transit_time_s <= 0:
        return None
    if not math.isfinite(mu) or mu <= 0:
        return None

    r1 = state1.position
    r2 = state2.position
    r1_mag = r1.norm()
    r2_mag = r2.norm()
    if not (r1_mag > 0) or not (r2_mag > 0):
        return None

    r1_hat = r1 * (1.0 / r1_mag)
    r2_hat = r2 * (1.0 / r2_mag)
    n_hat = _plane_normal(r1_hat, r2_hat, state1, state2)

    chord = (r2 - r1).norm()
    if not (chord > 0):
        return None
    s = (chord + r1_mag + r2_mag) / 2.0

    lam2 = max(0.0, 1.0 - chord / s)
    lam = math.sqrt(lam2)
    lam3 = lam2 * lam

    if n_hat.z >= 0:
        t1_hat = n_hat.cross(r1_hat)
        t2_hat = n_hat.cross(r2_hat)
    else:
        t1_hat = r1_hat.cross(n_hat)
        t2_hat = r2_hat.cross(n_hat)
        lam = -lam

    if retrograde:
        lam = -lam
        t1_hat = -t1_hat
        t2_hat = -t2_hat

    t_nd = math.sqrt(2.0 * mu / (s * s * s)) * transit_time_s
    if not math.isfinite(t_nd) or t_nd <= 0:
        return None

    x0 = _initial_guess(t_nd, lam, lam2, lam3)
    if x0 is None or not math.isfinite(x0):
        return None
    x = _householder(x0, t_nd, lam, lam2, lam3)

    gamma = math.sqrt(mu * s / 2.0)
    rho = (r1_mag - r2_mag) / chord
    sigma = math.sqrt(max(0.0, 1.0 - rho * rho))
    w_arg = 1.0 - lam2 * x * x + lam2
    if w_arg <= 0:
        return None
    w = math.sqrt(w_arg)

    lam_w = lam * w
    x_plus = lam_w + x
    x_minus = lam_w - x

    v_r1 = gamma * (x_minus - rho * x_plus) / r1_mag
    v_r2 = -gamma * (x_minus + rho * x_plus) / r2_mag
    v_t1 = gamma * sigma * (w + lam * x) / r1_mag
    v_t2 = gamma * sigma * (w + lam * x) / r2_mag

    initial_velocity = r1_hat * v_r1 + t1_hat * v_t1
    final_velocity = r2_hat * v_r2 + t2_hat * v_t2
    if not initial_velocity.is_finite() or not final_velocity.is_finite():
        return None

    burn0 = initial_velocity - state1.velocity
    burn1 = state2.velocity - final_velocity
    total_dv = burn0.norm() + burn1.norm()
    if not math.isfinite(total_dv):
        return None

    return LambertSolution(
        initial_velocity=initial_velocity,
        final_velocity=final_velocity,
        burn0=burn0,
        burn1=burn1,
        total_dv_mps=total_dv,
    )
