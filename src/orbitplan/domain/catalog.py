# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Body and orbit catalog.

Read-only lookups of celestial bodies (classical elements, mass, radius)
and named orbits around them, plus the resolution rules that map an
orbit to the planet that carries it around the Sun.

Catalog records keep the units of the source data (AU, km, degrees,
Julian years); ``SpaceBody.heliocentric_elements`` converts to SI.
"""
import math
import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from orbitplan.domain.kepler import OrbitalElements
from orbitplan.domain.orbital_mechanics import OrbitalConstants, julian_years_to_posix

OBJECT_TYPES = ("Star", "Planet", "DwarfPlanet", "PlanetaryMoon")

# Moons whose planet-moon Lagrange points appear in orbit names.
KNOWN_MOONS = (
    "Luna", "Io", "Europa", "Ganymede", "Callisto", "Titan", "Triton",
    "Ariel", "Umbriel", "Titania", "Oberon", "Dione", "Enceladus",
    "Tethys", "Rhea", "Iapetus", "Miranda",
)

_SUN_LAGRANGE = re.compile(r"^Sun(\w+?)L[1-5]$")


@dataclass(frozen=True)
class SpaceBody:
    """A catalogued body with elements relative to its barycenter."""
    name: str
    friendly_name: str
    object_type: str
    barycenter: str | None
    semi_major_axis_au: float | None
    semi_major_axis_km: float | None
    eccentricity: float
    inclination_deg: float
    long_ascending_node_deg: float
    arg_periapsis_deg: float
    mean_anomaly_at_epoch_deg: float
    epoch_julian_years: float
    mass_kg: float
    equatorial_radius_km: float

    def __post_init__(self) -> None:
        if self.object_type not in OBJECT_TYPES:
            raise ValueError(
                f"{self.name}: object_type must be one of {OBJECT_TYPES}, "
                f"got {self.object_type!r}"
            )

    @property
    def mu(self) -> float:
        """Gravitational parameter G·M (m³/s²)."""
        return OrbitalConstants.G * self.mass_kg

    @property
    def semi_major_axis_m(self) -> float:
        if self.semi_major_axis_au is not None:
            return self.semi_major_axis_au * OrbitalConstants.AU
        if self.semi_major_axis_km is not None:
            return self.semi_major_axis_km * 1000.0
        raise ValueError(f"{self.name}: no semi-major axis")

    @property
    def equatorial_radius_m(self) -> float:
        return self.equatorial_radius_km * 1000.0

    def heliocentric_elements(self) -> OrbitalElements:
        """Classical elements in SI units with a POSIX epoch."""
        return OrbitalElements(
            semi_major_axis_m=self.semi_major_axis_m,
            eccentricity=self.eccentricity,
            inclination_rad=math.radians(self.inclination_deg),
            raan_rad=math.radians(self.long_ascending_node_deg),
            arg_periapsis_rad=math.radians(self.arg_periapsis_deg),
            mean_anomaly_at_epoch_rad=math.radians(self.mean_anomaly_at_epoch_deg),
            epoch_s=julian_years_to_posix(self.epoch_julian_years),
        )


@dataclass(frozen=True)
class Orbit:
    """A named orbit around a body or Lagrange point."""
    name: str
    friendly_name: str
    barycenter: str
    orbit_index: str | None = None
    altitude_km: float | None = None
    semi_major_axis_km: float | None = None
    eccentricity: float = 0.0
    interface_orbit: bool = False
    mass: float | None = None


class _NamedCatalog:
    """Immutable name-indexed collection."""

    def __init__(self, items: Iterable) -> None:
        self._items = tuple(items)
        self._by_name = {item.name: item for item in self._items}
        if len(self._by_name) != len(self._items):
            raise ValueError("catalog names must be unique")

    def get(self, name: str | None):
        if name is None:
            return None
        return self._by_name.get(name)

    def __getitem__(self, name: str):
        try:
            return self._by_name[name]
        except KeyError:
            raise KeyError(f"unknown name {name!r}") from None

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __iter__(self) -> Iterator:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def names(self) -> list[str]:
        return [item.name for item in self._items]


class BodyCatalog(_NamedCatalog):
    """Read-only lookup of ``SpaceBody`` records by name."""

    def get(self, name: str | None) -> SpaceBody | None:
        return super().get(name)

    def moon_names(self) -> set[str]:
        return {b.name for b in self if b.object_type == "PlanetaryMoon"}


class OrbitCatalog(_NamedCatalog):
    """Read-only lookup of ``Orbit`` records by name."""

    def get(self, name: str | None) -> Orbit | None:
        return super().get(name)


def _moon_lagrange_pattern(bodies: BodyCatalog) -> re.Pattern:
    moons = sorted(set(KNOWN_MOONS) | bodies.moon_names(), key=len, reverse=True)
    alternatives = "|".join(re.escape(m) for m in moons)
    return re.compile(rf"^(\w+?)(?:{alternatives})L[1-5]$")


def heliocentric_body(orbit: Orbit, bodies: BodyCatalog) -> SpaceBody | None:
    """
    Planet (or dwarf planet) that carries an orbit around the Sun.

    Resolution order: the barycenter itself when it is a planet or dwarf
    planet; the parent planet of a moon; the planet named by a
    Sun-planet Lagrange point (``SunEarthL1``); the planet named by a
    planet-moon Lagrange point (``EarthLunaL2``).
    """
    direct = bodies.get(orbit.barycenter)
    if direct is not None:
        if direct.object_type in ("Planet", "DwarfPlanet"):
            return direct
        if direct.object_type == "PlanetaryMoon" and direct.barycenter:
            parent = bodies.get(direct.barycenter)
            if parent is not None:
                return parent

    match = _SUN_LAGRANGE.match(orbit.barycenter)
    if match:
        return bodies.get(match.group(1))

    match = _moon_lagrange_pattern(bodies).match(orbit.barycenter)
    if match:
        return bodies.get(match.group(1))

    return None


def local_body(orbit: Orbit, bodies: BodyCatalog) -> SpaceBody | None:
    """Body the orbit is directly around, if it is a catalogued body."""
    return bodies.get(orbit.barycenter)


def parking_radius_m(orbit: Orbit, body: SpaceBody) -> float:
    """Orbit radius from the body centre: altitude, else semi-major axis, else a default parking altitude."""
    if orbit.altitude_km is not None:
        return (body.equatorial_radius_km + orbit.altitude_km) * 1000.0
    if orbit.semi_major_axis_km is not None:
        return orbit.semi_major_axis_km * 1000.0
    return (body.equatorial_radius_km + OrbitalConstants.DEFAULT_PARKING_ALTITUDE_KM) * 1000.0


def solar_system_catalog() -> tuple[BodyCatalog, OrbitCatalog]:
    """Built-in reference catalog: Sun, Earth, Mars, Luna, Phobos and sample orbits."""
    bodies = BodyCatalog([
        SpaceBody(
            name="Sol", friendly_name="Sun", object_type="Star", barycenter=None,
            semi_major_axis_au=None, semi_major_axis_km=None, eccentricity=0.0,
            inclination_deg=0.0, long_ascending_node_deg=0.0, arg_periapsis_deg=0.0,
            mean_anomaly_at_epoch_deg=0.0, epoch_julian_years=2000.0,
            mass_kg=1.98847e30, equatorial_radius_km=695_700.0,
        ),
        SpaceBody(
            name="Earth", friendly_name="Earth", object_type="Planet", barycenter="Sol",
            semi_major_axis_au=1.00000102, semi_major_axis_km=149_598_023.2898281,
            eccentricity=0.0167086, inclination_deg=5e-05,
            long_ascending_node_deg=348.7394, arg_periapsis_deg=114.20783,
            mean_anomaly_at_epoch_deg=358.617, epoch_julian_years=2000.0,
            mass_kg=5.972e24, equatorial_radius_km=6378.137,
        ),
        SpaceBody(
            name="Mars", friendly_name="Mars", object_type="Planet", barycenter="Sol",
            semi_major_axis_au=1.523679, semi_major_axis_km=227_939_134.0303053,
            eccentricity=0.093412, inclination_deg=1.85061,
            long_ascending_node_deg=49.57854, arg_periapsis_deg=286.537,
            mean_anomaly_at_epoch_deg=19.3564, epoch_julian_years=2000.0,
            mass_kg=6.4171e23, equatorial_radius_km=3396.2,
        ),
        SpaceBody(
            name="Luna", friendly_name="Moon", object_type="PlanetaryMoon", barycenter="Earth",
            semi_major_axis_au=None, semi_major_axis_km=384_399.0,
            eccentricity=0.0549, inclination_deg=5.145,
            long_ascending_node_deg=125.08, arg_periapsis_deg=318.15,
            mean_anomaly_at_epoch_deg=135.27, epoch_julian_years=2000.0,
            mass_kg=7.342e22, equatorial_radius_km=1738.1,
        ),
        SpaceBody(
            name="Phobos", friendly_name="Phobos", object_type="PlanetaryMoon", barycenter="Mars",
            semi_major_axis_au=None, semi_major_axis_km=9376.0,
            eccentricity=0.0151, inclination_deg=1.093,
            long_ascending_node_deg=16.946, arg_periapsis_deg=157.116,
            mean_anomaly_at_epoch_deg=91.059, epoch_julian_years=2000.0,
            mass_kg=1.0659e16, equatorial_radius_km=13.0,
        ),
    ])
    orbits = OrbitCatalog([
        Orbit("LowEarthOrbit1", "Low Earth Orbit 1", "Earth", "Earth1",
              altitude_km=500.0, interface_orbit=True, mass=6e24),
        Orbit("GeoEarthOrbit", "Geosynchronous Orbit", "Earth", "Earth3",
              semi_major_axis_km=42_164.0),
        Orbit("LowMarsOrbit", "Low Mars Orbit", "Mars", "Mars1",
              altitude_km=500.0, interface_orbit=True, mass=6.4e23),
        Orbit("HighMarsOrbit", "High Mars Orbit", "Mars", "Mars2",
              semi_major_axis_km=20_000.0),
        Orbit("LowLunarOrbit", "Low Lunar Orbit", "Luna", "Luna1",
              altitude_km=100.0, interface_orbit=True),
        Orbit("LowPhobosOrbit", "Low Phobos Orbit", "Phobos", "Phobos1"),
        Orbit("SunEarthL1Halo", "Sun-Earth L1", "SunEarthL1", "SunEarthL1"),
        Orbit("EarthLunaL2Halo", "Earth-Moon L2", "EarthLunaL2", "EarthLunaL2"),
    ])
    return bodies, orbits
