# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Kepler's equation and two-body ephemeris propagation.

Solves the elliptic and hyperbolic forms of Kepler's equation and
propagates classical orbital elements to an instantaneous Cartesian
state.

No external dependencies beyond stdlib math and numpy.
"""
import math
from dataclasses import dataclass

from orbitplan.domain.orbital_mechanics import (
    kepler_to_cartesian,
    normalize_angle_rad,
)
from orbitplan.domain.vectors import OrbitalState, Vector3

KEPLER_MAX_ITERATIONS = 1000
KEPLER_TOLERANCE = 1e-6
# Denominator eccentricity clamp for the elliptic Newton step.
_DENOMINATOR_ECCENTRICITY_CAP = 0.9
# |M| above which the hyperbolic solver seeds from the logarithmic asymptote.
_HYPERBOLIC_LOG_SEED_THRESHOLD = 10.0


@dataclass(frozen=True)
class OrbitalElements:
    """Classical orbital elements (SI, radians, POSIX epoch).

    Elliptic orbits have e < 1 and a > 0; open orbits have e >= 1 and,
    by convention, a < 0.
    """
    semi_major_axis_m: float
    eccentricity: float
    inclination_rad: float
    raan_rad: float
    arg_periapsis_rad: float
    mean_anomaly_at_epoch_rad: float
    epoch_s: float

    @property
    def is_periodic(self) -> bool:
        return self.eccentricity < 1.0

    def mean_motion(self, mu: float) -> float:
        """Mean motion n = √(μ/|a|³) in rad/s."""
        abs_a = abs(self.semi_major_axis_m)
        return math.sqrt(mu / (abs_a * abs_a * abs_a))

    def period_s(self, mu: float) -> float:
        """Orbital period, inf for open orbits."""
        if not self.is_periodic:
            return math.inf
        return 2.0 * math.pi / self.mean_motion(mu)


def solve_kepler(mean_anomaly: float, e: float) -> float:
    """Solve Kepler's equation for the eccentric (or hyperbolic) anomaly.

    Elliptic (e < 1): M = E - e·sin(E), with M normalised into [0, 2π)
    and the Newton iteration seeded at E₀ = M. The denominator uses
    min(e, 0.9) while the numerator keeps the true eccentricity, which
    slows convergence near e → 1 but keeps the step bounded.

    Hyperbolic (e > 1): M = e·sinh(H) - H, dispatched to
    ``solve_kepler_hyperbolic``. Parabolic e == 1 raises ValueError.

    Both stop once |Δ| < 1e-6 or after 1000 iterations.

    Args:
        mean_anomaly: Mean anomaly (radians).
        e: Eccentricity (>= 0, != 1).

    Returns:
        Eccentric anomaly E (radians, e < 1) or hyperbolic anomaly H (e > 1).
    """
    if e >= 1.0:
        return solve_kepler_hyperbolic(mean_anomaly, e)

    m = normalize_angle_rad(mean_anomaly)
    ecc_anomaly = m
    e_denom = min(e, _DENOMINATOR_ECCENTRICITY_CAP)

    for _ in range(KEPLER_MAX_ITERATIONS):
        step = (ecc_anomaly - e * math.sin(ecc_anomaly) - m) / (
            1.0 - e_denom * math.cos(ecc_anomaly)
        )
        ecc_anomaly -= step
        if abs(step) < KEPLER_TOLERANCE:
            break

    return ecc_anomaly


def solve_kepler_hyperbolic(mean_anomaly: float, e: float) -> float:
    """Solve M = e·sinh(H) - H for the hyperbolic anomaly H (Newton-Raphson).

    Seeds at H₀ = M for |M| <= 10, otherwise at sign(M)·ln(|M|/e).

    Raises:
        ValueError: If e <= 1.
    """
    if e <= 1.0:
        raise ValueError(f"hyperbolic eccentricity must exceed 1, got {e}")

    if abs(mean_anomaly) <= _HYPERBOLIC_LOG_SEED_THRESHOLD:
        h = mean_anomaly
    else:
        h = math.copysign(math.log(abs(mean_anomaly) / e), mean_anomaly)

    for _ in range(KEPLER_MAX_ITERATIONS):
        step = (e * math.sinh(h) - h - mean_anomaly) / (e * math.cosh(h) - 1.0)
        h -= step
        if abs(step) < KEPLER_TOLERANCE:
            break

    return h


def true_anomaly_from_anomaly(anomaly: float, e: float) -> float:
    """True anomaly from the eccentric (e < 1) or hyperbolic (e > 1) anomaly."""
    if e < 1.0:
        return math.atan2(
            math.sqrt(1.0 - e * e) * math.sin(anomaly),
            math.cos(anomaly) - e,
        )
    cosh_h = math.cosh(anomaly)
    cos_nu = (cosh_h - e) / (1.0 - e * cosh_h)
    nu = math.acos(max(-1.0, min(1.0, cos_nu)))
    return -nu if anomaly < 0 else nu


def body_state_at(elements: OrbitalElements, t_s: float, mu: float) -> OrbitalState:
    """
    Propagate orbital elements to the Cartesian state at time t_s.

    n = √(μ/|a|³), M(t) = M₀ + n·(t - epoch), anomaly from Kepler's
    equation, then the perifocal state rotated through (Ω, i, ω).

    Args:
        elements: Classical elements of the body.
        t_s: Target time (POSIX seconds).
        mu: Gravitational parameter of the central body (m³/s²).

    Returns:
        OrbitalState in the central body's inertial frame.

    Raises:
        ValueError: If mu <= 0, a == 0, or the orbit is exactly parabolic.
    """
    if mu <= 0:
        raise ValueError(f"mu must be positive, got {mu}")
    if elements.semi_major_axis_m == 0:
        raise ValueError("semi-major axis must be non-zero")
    e = elements.eccentricity
    if e == 1.0:
        raise ValueError("parabolic elements (e == 1) cannot be propagated")

    n = elements.mean_motion(mu)
    mean_anomaly = elements.mean_anomaly_at_epoch_rad + n * (t_s - elements.epoch_s)
    anomaly = solve_kepler(mean_anomaly, e)
    nu = true_anomaly_from_anomaly(anomaly, e)

    pos, vel = kepler_to_cartesian(
        a=elements.semi_major_axis_m,
        e=e,
        i_rad=elements.inclination_rad,
        omega_big_rad=elements.raan_rad,
        omega_small_rad=elements.arg_periapsis_rad,
        nu_rad=nu,
        mu=mu,
    )
    return OrbitalState(
        position=Vector3.from_array(pos),
        velocity=Vector3.from_array(vel),
    )


def circular_state_at(
    radius_m: float,
    mu: float,
    epoch_s: float,
    t_s: float,
) -> OrbitalState:
    """State on an equatorial circular orbit with zero phase at epoch_s."""
    n = math.sqrt(mu / (radius_m * radius_m * radius_m))
    theta = n * (t_s - epoch_s)
    c = math.cos(theta)
    s = math.sin(theta)
    v = math.sqrt(mu / radius_m)
    return OrbitalState(
        position=Vector3(radius_m * c, radius_m * s, 0.0),
        velocity=Vector3(-v * s, v * c, 0.0),
    )
