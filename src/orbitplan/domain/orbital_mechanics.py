# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Orbital mechanics constants and conversions.

Heliocentric constants, the POSIX/Julian-year time base used by the
engine, and the perifocal-to-inertial element conversion shared by the
ephemeris propagator.

All quantities are SI (m, s, m/s, m³/s²). Engine times are POSIX
seconds (UTC).
"""
import math
from dataclasses import dataclass
from datetime import datetime, timezone

import numpy as np


@dataclass(frozen=True)
class _OrbitalConstants:
    """Heliocentric and unit constants."""
    MU_SUN: float = 1.32712440018e20        # m³/s² — heliocentric gravitational parameter
    AU: float = 149_597_870_700.0           # m
    G: float = 6.67384e-11                  # m³/(kg·s²)
    R_SUN: float = 695_700_000.0            # m — mean solar radius
    STANDARD_GRAVITY: float = 9.80665       # m/s²
    SECONDS_PER_DAY: float = 86_400.0
    DAYS_PER_JULIAN_YEAR: float = 365.25
    SECONDS_PER_JULIAN_YEAR: float = 365.25 * 86_400.0
    J2000_POSIX_S: float = 946_728_000.0    # 2000-01-01T12:00:00Z
    DEFAULT_PARKING_ALTITUDE_KM: float = 200.0


OrbitalConstants: _OrbitalConstants = _OrbitalConstants()


def julian_years_to_posix(julian_years: float) -> float:
    """Absolute Julian year (2000.0 == J2000.0) → POSIX seconds."""
    c = OrbitalConstants
    return c.J2000_POSIX_S + (julian_years - 2000.0) * c.SECONDS_PER_JULIAN_YEAR


def posix_to_julian_years(t_s: float) -> float:
    """POSIX seconds → absolute Julian year."""
    c = OrbitalConstants
    return 2000.0 + (t_s - c.J2000_POSIX_S) / c.SECONDS_PER_JULIAN_YEAR


def datetime_to_posix(dt: datetime) -> float:
    """UTC datetime → POSIX seconds. Naive datetimes are taken as UTC."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.timestamp()


def mg_to_mps2(milligees: float) -> float:
    """Acceleration in milli-g → m/s²."""
    return milligees * OrbitalConstants.STANDARD_GRAVITY / 1000.0


def normalize_angle_rad(theta: float) -> float:
    """Wrap an angle into [0, 2π)."""
    two_pi = 2.0 * math.pi
    wrapped = math.fmod(theta, two_pi)
    if wrapped < 0:
        wrapped += two_pi
    return wrapped


def perifocal_rotation(
    omega_big_rad: float,
    i_rad: float,
    omega_small_rad: float,
) -> np.ndarray:
    """3-1-3 (Ω, i, ω) rotation from the perifocal frame to the inertial frame."""
    cO = math.cos(omega_big_rad)
    sO = math.sin(omega_big_rad)
    co = math.cos(omega_small_rad)
    so = math.sin(omega_small_rad)
    ci = math.cos(i_rad)
    si = math.sin(i_rad)

    return np.array([
        [cO * co - sO * so * ci, -cO * so - sO * co * ci, sO * si],
        [sO * co + cO * so * ci, -sO * so + cO * co * ci, -cO * si],
        [so * si, co * si, ci],
    ])


def kepler_to_cartesian(
    a: float,
    e: float,
    i_rad: float,
    omega_big_rad: float,
    omega_small_rad: float,
    nu_rad: float,
    mu: float = OrbitalConstants.MU_SUN,
) -> tuple[list[float], list[float]]:
    """
    Convert Keplerian orbital elements to inertial Cartesian position/velocity.

    Valid for ellipses (a > 0, e < 1) and hyperbolas (a < 0, e > 1):
    the semi-latus rectum is taken as p = |a|·|1 - e²|.

    Args:
        a: Semi-major axis (m), negative for hyperbolas
        e: Eccentricity
        i_rad: Inclination (radians)
        omega_big_rad: Longitude of ascending node (radians)
        omega_small_rad: Argument of periapsis (radians)
        nu_rad: True anomaly (radians)
        mu: Gravitational parameter of the central body (m³/s²)

    Returns:
        (position [x,y,z] in m, velocity [vx,vy,vz] in m/s)
    """
    if mu <= 0:
        raise ValueError(f"mu must be positive, got {mu}")

    cos_nu = math.cos(nu_rad)
    sin_nu = math.sin(nu_rad)

    p = abs(a) * abs(1.0 - e**2)
    if p <= 0:
        raise ValueError(f"degenerate conic: a={a}, e={e}")
    r = p / (1.0 + e * cos_nu)

    p_factor = math.sqrt(mu / p)
    pos_pqw = np.array([r * cos_nu, r * sin_nu, 0.0])
    vel_pqw = np.array([
        -p_factor * sin_nu,
        p_factor * (e + cos_nu),
        0.0,
    ])

    rotation = perifocal_rotation(omega_big_rad, i_rad, omega_small_rad)

    pos_arr = rotation @ pos_pqw
    vel_arr = rotation @ vel_pqw

    pos = [float(pos_arr[0]), float(pos_arr[1]), float(pos_arr[2])]
    vel = [float(vel_arr[0]), float(vel_arr[1]), float(vel_arr[2])]

    return pos, vel


def hohmann_transfer_time_s(r1_m: float, r2_m: float, mu: float) -> float:
    """Half-period of the ellipse tangent to two circular orbits."""
    a = (r1_m + r2_m) / 2.0
    return math.pi * math.sqrt(a**3 / mu)


def hohmann_delta_v(r1_m: float, r2_m: float, mu: float) -> tuple[float, float]:
    """Departure and arrival ΔV (m/s) of a Hohmann transfer between circular orbits.

    Ref: Vallado Ch. 6.
    """
    if r1_m <= 0:
        raise ValueError(f"r1_m must be positive, got {r1_m}")
    if r2_m <= 0:
        raise ValueError(f"r2_m must be positive, got {r2_m}")

    v1 = math.sqrt(mu / r1_m)
    v2 = math.sqrt(mu / r2_m)
    dv1 = abs(v1 * (math.sqrt(2.0 * r2_m / (r1_m + r2_m)) - 1.0))
    dv2 = abs(v2 * (1.0 - math.sqrt(2.0 * r1_m / (r1_m + r2_m))))
    return dv1, dv2


def synodic_period_s(r1_m: float, r2_m: float, mu: float) -> float:
    """Synodic period of two circular orbits, capped at ten of the longer periods.

    Returns inf for coincident radii or invalid input.
    """
    if not (r1_m > 0) or not (r2_m > 0) or not (mu > 0):
        return math.inf
    if abs(r1_m - r2_m) <= max(r1_m, r2_m) * 1e-12:
        return math.inf

    t1 = 2.0 * math.pi * math.sqrt(r1_m**3 / mu)
    t2 = 2.0 * math.pi * math.sqrt(r2_m**3 / mu)
    if not math.isfinite(t1) or not math.isfinite(t2) or t1 <= 0 or t2 <= 0:
        return math.inf

    max_t = max(t1, t2)
    cap = max_t * 10.0
    if abs(t1 - t2) <= max_t * 1e-6:
        return cap
    return min(abs(t1 * t2 / (t1 - t2)), cap)
