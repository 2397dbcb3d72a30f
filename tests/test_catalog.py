# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""Tests for the body/orbit catalog and heliocentric resolution."""
import math

import pytest

from orbitplan.domain.catalog import (
    BodyCatalog,
    Orbit,
    OrbitCatalog,
    SpaceBody,
    heliocentric_body,
    local_body,
    parking_radius_m,
    solar_system_catalog,
)
from orbitplan.domain.orbital_mechanics import OrbitalConstants


@pytest.fixture(scope="module")
def catalogs():
    return solar_system_catalog()


def _body(name, object_type="Planet", barycenter="Sol", **overrides):
    fields = dict(
        name=name, friendly_name=name, object_type=object_type, barycenter=barycenter,
        semi_major_axis_au=2.0, semi_major_axis_km=None, eccentricity=0.1,
        inclination_deg=1.0, long_ascending_node_deg=10.0, arg_periapsis_deg=20.0,
        mean_anomaly_at_epoch_deg=30.0, epoch_julian_years=2000.0,
        mass_kg=1e24, equatorial_radius_km=5000.0,
    )
    fields.update(overrides)
    return SpaceBody(**fields)


# ── Records ────────────────────────────────────────────────────────

class TestSpaceBody:

    def test_invalid_object_type_raises(self):
        with pytest.raises(ValueError, match="object_type"):
            _body("Comet", object_type="Comet")

    def test_mu_from_mass(self):
        body = _body("X", mass_kg=1e24)
        assert body.mu == pytest.approx(OrbitalConstants.G * 1e24)

    def test_semi_major_axis_prefers_au(self):
        body = _body("X", semi_major_axis_au=2.0, semi_major_axis_km=1.0)
        assert body.semi_major_axis_m == pytest.approx(2.0 * OrbitalConstants.AU)

    def test_semi_major_axis_km_fallback(self):
        body = _body("X", semi_major_axis_au=None, semi_major_axis_km=9376.0)
        assert body.semi_major_axis_m == pytest.approx(9_376_000.0)

    def test_missing_semi_major_axis_raises(self):
        body = _body("X", semi_major_axis_au=None, semi_major_axis_km=None)
        with pytest.raises(ValueError, match="semi-major"):
            body.semi_major_axis_m

    def test_heliocentric_elements_in_si(self):
        elements = _body("X").heliocentric_elements()
        assert elements.semi_major_axis_m == pytest.approx(2.0 * OrbitalConstants.AU)
        assert elements.inclination_rad == pytest.approx(math.radians(1.0))
        assert elements.raan_rad == pytest.approx(math.radians(10.0))
        assert elements.arg_periapsis_rad == pytest.approx(math.radians(20.0))
        assert elements.mean_anomaly_at_epoch_rad == pytest.approx(math.radians(30.0))
        assert elements.epoch_s == OrbitalConstants.J2000_POSIX_S


class TestNamedCatalog:

    def test_lookup(self, catalogs):
        bodies, orbits = catalogs
        assert bodies["Earth"].object_type == "Planet"
        assert orbits.get("LowMarsOrbit").barycenter == "Mars"
        assert "Mars" in bodies
        assert "Vulcan" not in bodies

    def test_get_unknown_is_none(self, catalogs):
        bodies, _ = catalogs
        assert bodies.get("Vulcan") is None
        assert bodies.get(None) is None

    def test_getitem_unknown_raises(self, catalogs):
        _, orbits = catalogs
        with pytest.raises(KeyError, match="Nowhere"):
            orbits["Nowhere"]

    def test_duplicate_names_rejected(self):
        with pytest.raises(ValueError, match="unique"):
            BodyCatalog([_body("X"), _body("X")])

    def test_iteration_keeps_order(self, catalogs):
        _, orbits = catalogs
        assert [o.name for o in orbits] == orbits.names()
        assert len(orbits) == len(orbits.names())

    def test_moon_names(self, catalogs):
        bodies, _ = catalogs
        assert bodies.moon_names() == {"Luna", "Phobos"}


# ── Resolution ─────────────────────────────────────────────────────

class TestHeliocentricBody:

    def test_planet_orbit(self, catalogs):
        bodies, orbits = catalogs
        assert heliocentric_body(orbits["LowEarthOrbit1"], bodies).name == "Earth"

    def test_moon_orbit_resolves_to_parent(self, catalogs):
        bodies, orbits = catalogs
        assert heliocentric_body(orbits["LowLunarOrbit"], bodies).name == "Earth"
        assert heliocentric_body(orbits["LowPhobosOrbit"], bodies).name == "Mars"

    def test_sun_planet_lagrange_point(self, catalogs):
        bodies, orbits = catalogs
        assert heliocentric_body(orbits["SunEarthL1Halo"], bodies).name == "Earth"

    def test_planet_moon_lagrange_point(self, catalogs):
        bodies, orbits = catalogs
        assert heliocentric_body(orbits["EarthLunaL2Halo"], bodies).name == "Earth"

    def test_catalogued_moon_lagrange_point(self, catalogs):
        """Moons missing from the built-in list are matched from the catalog."""
        bodies, _ = catalogs
        orbit = Orbit("MarsPhobosL1Halo", "Mars-Phobos L1", "MarsPhobosL1")
        assert heliocentric_body(orbit, bodies).name == "Mars"

    def test_dwarf_planet(self):
        bodies = BodyCatalog([_body("Ceres", object_type="DwarfPlanet")])
        orbit = Orbit("LowCeresOrbit", "Low Ceres Orbit", "Ceres")
        assert heliocentric_body(orbit, bodies).name == "Ceres"

    def test_unresolvable(self, catalogs):
        bodies, _ = catalogs
        assert heliocentric_body(Orbit("Lost", "Lost", "Nowhere"), bodies) is None

    def test_star_barycenter_unresolvable(self, catalogs):
        bodies, _ = catalogs
        assert heliocentric_body(Orbit("SolarOrbit", "Solar Orbit", "Sol"), bodies) is None

    def test_local_body(self, catalogs):
        bodies, orbits = catalogs
        assert local_body(orbits["LowLunarOrbit"], bodies).name == "Luna"
        assert local_body(orbits["SunEarthL1Halo"], bodies) is None


class TestParkingRadius:

    def test_altitude(self, catalogs):
        bodies, orbits = catalogs
        r = parking_radius_m(orbits["LowEarthOrbit1"], bodies["Earth"])
        assert r == pytest.approx((6378.137 + 500.0) * 1000.0)

    def test_semi_major_axis(self, catalogs):
        bodies, orbits = catalogs
        assert parking_radius_m(orbits["GeoEarthOrbit"], bodies["Earth"]) == pytest.approx(42_164_000.0)

    def test_default_altitude(self, catalogs):
        bodies, orbits = catalogs
        r = parking_radius_m(orbits["LowPhobosOrbit"], bodies["Phobos"])
        assert r == pytest.approx((13.0 + 200.0) * 1000.0)


class TestSolarSystemCatalog:

    def test_contents(self, catalogs):
        bodies, orbits = catalogs
        assert isinstance(bodies, BodyCatalog)
        assert isinstance(orbits, OrbitCatalog)
        assert {"Sol", "Earth", "Mars", "Luna", "Phobos"} <= set(bodies.names())
        assert {"LowEarthOrbit1", "LowMarsOrbit"} <= set(orbits.names())

    def test_mars_beyond_earth(self, catalogs):
        bodies, _ = catalogs
        assert bodies["Mars"].semi_major_axis_m > bodies["Earth"].semi_major_axis_m
