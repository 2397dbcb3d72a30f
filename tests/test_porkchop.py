# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""Tests for the porkchop grid search."""
import math
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone

import pytest

from orbitplan.domain.catalog import Orbit, OrbitCatalog, parking_radius_m, solar_system_catalog
from orbitplan.domain.orbital_mechanics import (
    OrbitalConstants,
    hohmann_transfer_time_s,
    synodic_period_s,
)
from orbitplan.domain.outcomes import InsufficientDV, TransferOutcome
from orbitplan.domain.porkchop import (
    MIN_GRID_RESOLUTION,
    PorkchopResult,
    TransferRequest,
    sweep,
)

DAY = OrbitalConstants.SECONDS_PER_DAY
EPOCH = datetime(2028, 1, 1, tzinfo=timezone.utc)


class _Token:
    """Goes stale after a fixed number of checks."""

    def __init__(self, checks_left):
        self.checks_left = checks_left

    def is_current(self):
        self.checks_left -= 1
        return self.checks_left >= 0


@pytest.fixture(scope="module")
def catalogs():
    return solar_system_catalog()


def _request(**overrides):
    fields = dict(
        origin_orbit="LowEarthOrbit1",
        destination_orbit="LowMarsOrbit",
        reference_epoch=EPOCH,
        grid_resolution=20,
        cruise_acceleration_mg=3000.0,
        max_delta_v_kms=25.0,
    )
    fields.update(overrides)
    return TransferRequest(**fields)


@pytest.fixture(scope="module")
def earth_mars_grid(catalogs):
    """50x50 Earth-Mars sweep from 2028-01-01, 3 g, 25 km/s cap."""
    bodies, orbits = catalogs
    return sweep(_request(grid_resolution=50), bodies, orbits)


# ── Earth-Mars window ──────────────────────────────────────────────

class TestEarthMarsWindow:

    def test_many_feasible_cells(self, earth_mars_grid):
        assert earth_mars_grid.success_count > 50

    def test_optimal_transit_near_hohmann(self, earth_mars_grid):
        """Cheapest transfer takes 240-280 days."""
        optimal = earth_mars_grid.optimal
        assert optimal is not None
        assert 240 < optimal.transit_days < 280

    def test_optimal_dv(self, earth_mars_grid):
        assert 5.0 < earth_mars_grid.optimal.total_dv < 7.0

    def test_optimal_launch_late_2028(self, earth_mars_grid):
        """The 2028 window opens in November/December."""
        launch = datetime.fromtimestamp(earth_mars_grid.optimal.launch_day * DAY, tz=timezone.utc)
        assert launch.year == 2028
        assert launch.month >= 11


class TestGridInvariants:

    def test_shape(self, earth_mars_grid):
        assert earth_mars_grid.resolution == 50
        assert len(earth_mars_grid.grid) == 50
        assert all(len(row) == 50 for row in earth_mars_grid.grid)

    def test_cells_consistent(self, earth_mars_grid):
        """Transit and totals are derived from the cell's own fields."""
        for row in earth_mars_grid.grid:
            for cell in row:
                if cell is None:
                    continue
                assert cell.transit_days == pytest.approx(cell.arrival_day - cell.launch_day)
                assert cell.total_dv == pytest.approx(cell.departure_dv + cell.arrival_dv)
                assert cell.result.is_success

    def test_cells_respect_screening(self, earth_mars_grid):
        """No feasible cell launches before the epoch or exceeds the cap."""
        start = earth_mars_grid.launch_start_day
        for row in earth_mars_grid.grid:
            for cell in row:
                if cell is not None:
                    assert cell.launch_day >= start
                    assert cell.total_dv <= 25.0

    def test_min_max_and_optimal(self, earth_mars_grid):
        totals = [c.total_dv for row in earth_mars_grid.grid for c in row if c is not None]
        assert earth_mars_grid.min_dv == pytest.approx(min(totals))
        assert earth_mars_grid.max_dv == pytest.approx(max(totals))
        assert earth_mars_grid.optimal.total_dv == earth_mars_grid.min_dv

    def test_failure_counts_cover_grid(self, earth_mars_grid):
        failures = sum(earth_mars_grid.failure_counts.values())
        assert failures + earth_mars_grid.success_count == 50 * 50
        assert TransferOutcome.SUCCESS not in earth_mars_grid.failure_counts

    def test_impulsive_first_row_launches_in_past(self, earth_mars_grid):
        """Half-burn lead time pushes epoch-day launches before the epoch."""
        assert earth_mars_grid.grid[0] == (None,) * 50
        assert earth_mars_grid.failure_counts[TransferOutcome.LAUNCH_IN_PAST] >= 1

    def test_axes(self, catalogs, earth_mars_grid):
        bodies, _ = catalogs
        r1 = bodies["Earth"].semi_major_axis_m
        r2 = bodies["Mars"].semi_major_axis_m
        synodic = synodic_period_s(r1, r2, OrbitalConstants.MU_SUN)
        hohmann = hohmann_transfer_time_s(r1, r2, OrbitalConstants.MU_SUN)
        assert earth_mars_grid.launch_start_day == pytest.approx(EPOCH.timestamp() / DAY)
        assert earth_mars_grid.launch_step_days * 49 == pytest.approx(synodic / DAY)
        assert earth_mars_grid.min_transit_days == pytest.approx(0.3 * hohmann / DAY)

    def test_failure_counts_read_only(self, earth_mars_grid):
        with pytest.raises(TypeError):
            earth_mars_grid.failure_counts[TransferOutcome.BURN_NAN] = 1


# ── Request handling ───────────────────────────────────────────────

class TestRequestHandling:

    def test_resolution_clamped(self, catalogs):
        bodies, orbits = catalogs
        result = sweep(_request(grid_resolution=5), bodies, orbits)
        assert result.resolution == MIN_GRID_RESOLUTION
        assert len(result.grid) == MIN_GRID_RESOLUTION

    def test_horizon_overrides_span(self, catalogs):
        bodies, orbits = catalogs
        result = sweep(_request(departure_horizon_years=0.5), bodies, orbits)
        assert result.launch_step_days * 19 == pytest.approx(0.5 * 365.25)

    def test_dv_cap_downgrades(self, catalogs):
        """A 1 km/s budget leaves only InsufficientDV-style failures to report."""
        bodies, orbits = catalogs
        result = sweep(_request(max_delta_v_kms=1.0), bodies, orbits)
        assert result.success_count == 0
        assert result.optimal is None
        assert result.min_dv == 0.0
        assert isinstance(result.best_failure, InsufficientDV)
        assert result.best_failure.available_dv_mps == pytest.approx(1000.0)
        assert result.best_failure.required_dv_mps > 1000.0

    def test_unknown_orbit_empty(self, catalogs):
        bodies, orbits = catalogs
        result = sweep(_request(destination_orbit="Nowhere"), bodies, orbits)
        assert result == PorkchopResult.empty()
        assert result.success_count == 0

    def test_unresolvable_body_empty(self, catalogs):
        bodies, orbits = catalogs
        lost = OrbitCatalog(list(orbits) + [Orbit("Lost", "Lost", "Nowhere")])
        assert sweep(_request(destination_orbit="Lost"), bodies, lost).grid == ()

    def test_missing_origin_without_probe_empty(self, catalogs):
        bodies, orbits = catalogs
        assert sweep(_request(origin_orbit=None), bodies, orbits).grid == ()

    def test_probe_defaults_to_low_earth_orbit(self, catalogs):
        bodies, orbits = catalogs
        probe = sweep(_request(origin_orbit=None, probe_mode=True), bodies, orbits)
        direct = sweep(_request(), bodies, orbits)
        assert probe.grid == direct.grid

    def test_high_thrust_never_worse(self, catalogs):
        bodies, orbits = catalogs
        plain = sweep(_request(), bodies, orbits)
        torch = sweep(_request(probe_high_thrust=True), bodies, orbits)
        assert torch.success_count >= plain.success_count
        assert torch.min_dv <= plain.min_dv


class TestLocalModel:

    def test_same_body_uses_circular_orbits(self, catalogs):
        """LEO to GEO plans against Earth's μ and parking radii."""
        bodies, orbits = catalogs
        result = sweep(_request(destination_orbit="GeoEarthOrbit", max_delta_v_kms=None), bodies, orbits)
        earth = bodies["Earth"]
        r1 = parking_radius_m(orbits["LowEarthOrbit1"], earth)
        r2 = parking_radius_m(orbits["GeoEarthOrbit"], earth)
        hohmann = hohmann_transfer_time_s(r1, r2, earth.mu)
        synodic = synodic_period_s(r1, r2, earth.mu)

        assert result.resolution == 20
        assert result.min_transit_days * DAY == pytest.approx(0.3 * hohmann)
        assert result.launch_step_days * 19 * DAY == pytest.approx(synodic)
        assert result.success_count + sum(result.failure_counts.values()) == 400


# ── Concurrency and cancellation ───────────────────────────────────

class TestExecution:

    def test_deterministic(self, catalogs):
        bodies, orbits = catalogs
        a = sweep(_request(), bodies, orbits)
        b = sweep(_request(), bodies, orbits)
        assert a.grid == b.grid
        assert a.optimal == b.optimal

    def test_executor_matches_serial(self, catalogs):
        """Rows merge in order regardless of scheduling."""
        bodies, orbits = catalogs
        serial = sweep(_request(), bodies, orbits)
        with ThreadPoolExecutor(max_workers=4) as pool:
            parallel = sweep(_request(), bodies, orbits, executor=pool)
        assert parallel.grid == serial.grid
        assert parallel.optimal == serial.optimal
        assert dict(parallel.failure_counts) == dict(serial.failure_counts)

    def test_stale_token_returns_none(self, catalogs):
        bodies, orbits = catalogs
        assert sweep(_request(), bodies, orbits, token=_Token(0)) is None

    def test_token_going_stale_mid_sweep(self, catalogs):
        bodies, orbits = catalogs
        assert sweep(_request(), bodies, orbits, token=_Token(5)) is None

    def test_current_token_completes(self, catalogs):
        bodies, orbits = catalogs
        result = sweep(_request(), bodies, orbits, token=_Token(math.inf))
        assert result is not None
        assert result.resolution == 20
