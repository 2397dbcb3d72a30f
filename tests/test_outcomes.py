# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""Tests for the transfer outcome taxonomy and comparator."""
import pytest

from orbitplan.domain.outcomes import (
    ArrivalBeforeLaunch,
    BurnLongerThanHalfOrbit,
    BurnLongerThanTransfer,
    BurnNaN,
    CodePathNotImplemented,
    CoastPhaseEndsBeforeItStarts,
    FleetInterceptInMicrothrust,
    Hyperbolic,
    InsufficientAcceleration,
    InsufficientDV,
    LaunchInPast,
    OrbitPeriod,
    Success,
    TransferOutcome,
    TransferResult,
    WouldCollideWithBody,
    best_of,
    result_from_payload,
    variant_for,
    was_bug,
)

ACCEL = 10.0


# ── Taxonomy ───────────────────────────────────────────────────────

class TestTaxonomy:

    def test_twenty_outcomes(self):
        assert len(TransferOutcome) == 20

    def test_stable_ids(self):
        """Ids are fixed for serialisation."""
        assert TransferOutcome.SUCCESS == 0
        assert TransferOutcome.INSUFFICIENT_DV == 1
        assert TransferOutcome.HYPERBOLIC == 6
        assert TransferOutcome.BURN_NAN == 13
        assert TransferOutcome.WOULD_COLLIDE_WITH_BODY == 14
        assert TransferOutcome.CODE_PATH_NOT_IMPLEMENTED == 19

    def test_every_outcome_has_a_variant(self):
        for outcome in TransferOutcome:
            cls = variant_for(outcome)
            assert issubclass(cls, TransferResult)
            assert cls.outcome == outcome

    def test_only_success_is_success(self):
        assert Success().is_success
        assert not Hyperbolic(1.2).is_success
        assert not BurnNaN().is_success

    def test_results_are_frozen(self):
        r = InsufficientDV(5000.0, 3000.0)
        with pytest.raises(AttributeError):
            r.required_dv_mps = 1.0


class TestPayload:

    def test_two_field_payload(self):
        assert InsufficientDV(5000.0, 3000.0).payload == (5000.0, 3000.0)

    def test_one_field_payload_zero_padded(self):
        assert Hyperbolic(1.5).payload == (1.5, 0.0)

    def test_empty_payload(self):
        assert Success().payload == (0.0, 0.0)

    def test_rebuild_from_payload(self):
        """Generic (outcome, value, value2) form rebuilds the variant."""
        r = result_from_payload(TransferOutcome.ORBIT_PERIOD, 1e12, 0.4)
        assert r == OrbitPeriod(1e12, 0.4)
        assert result_from_payload(TransferOutcome.BURN_NAN, 7.0, 8.0) == BurnNaN()
        assert result_from_payload(TransferOutcome.HYPERBOLIC, 1.3) == Hyperbolic(1.3)

    def test_unknown_outcome_raises(self):
        with pytest.raises(ValueError):
            variant_for(42)


# ── Requirements ───────────────────────────────────────────────────

class TestRequirements:

    def test_insufficient_dv_reports_required(self):
        assert InsufficientDV(7000.0, 5000.0).minimum_dv_needed() == 7000.0

    def test_other_variants_report_no_dv(self):
        assert Hyperbolic(1.5).minimum_dv_needed() is None
        assert BurnLongerThanTransfer(10.0, 5.0).minimum_dv_needed() is None

    def test_insufficient_acceleration(self):
        assert InsufficientAcceleration(12.5).minimum_acceleration_needed(ACCEL) == 12.5

    def test_launch_in_past(self):
        """a / (1 - lead/transit)."""
        r = LaunchInPast(lead_time_s=100.0, transit_duration_s=400.0)
        assert r.minimum_acceleration_needed(ACCEL) == pytest.approx(ACCEL / 0.75)

    def test_launch_in_past_degenerate(self):
        r = LaunchInPast(lead_time_s=400.0, transit_duration_s=400.0)
        assert r.minimum_acceleration_needed(ACCEL) is None

    def test_coast_phase(self):
        """a · burn / coast."""
        r = CoastPhaseEndsBeforeItStarts(coast_time_s=100.0, burn_time_s=300.0)
        assert r.minimum_acceleration_needed(ACCEL) == pytest.approx(30.0)

    def test_burn_longer_than_transfer(self):
        """a · burn / available."""
        r = BurnLongerThanTransfer(burn_time_s=200.0, available_time_s=100.0)
        assert r.minimum_acceleration_needed(ACCEL) == pytest.approx(20.0)

    def test_burn_longer_than_half_orbit(self):
        """a · 2·burn / period."""
        r = BurnLongerThanHalfOrbit(burn_time_s=600.0, orbit_period_s=1000.0)
        assert r.minimum_acceleration_needed(ACCEL) == pytest.approx(12.0)

    def test_fleet_intercept(self):
        """separation / (2·t²), independent of the craft's acceleration."""
        r = FleetInterceptInMicrothrust(separation_m=800.0, intercept_time_s=20.0)
        assert r.minimum_acceleration_needed(ACCEL) == pytest.approx(1.0)

    def test_physics_failures_report_nothing(self):
        assert WouldCollideWithBody(6e6, 6.4e6).minimum_acceleration_needed(ACCEL) is None
        assert Hyperbolic(1.1).minimum_acceleration_needed(ACCEL) is None


# ── Comparator ─────────────────────────────────────────────────────

class TestBestOf:

    def test_none_handling(self):
        r = Hyperbolic(1.2)
        assert best_of(None, r, ACCEL) is r
        assert best_of(r, None, ACCEL) is r
        assert best_of(None, None, ACCEL) is None

    def test_success_wins(self):
        s = Success()
        f = InsufficientDV(1.0, 0.0)
        assert best_of(s, f, ACCEL) is s
        assert best_of(f, s, ACCEL) is s

    def test_first_success_kept(self):
        a, b = Success(), Success()
        assert best_of(a, b, ACCEL) is a

    def test_lower_dv_wins(self):
        low = InsufficientDV(5000.0, 3000.0)
        high = InsufficientDV(9000.0, 3000.0)
        assert best_of(high, low, ACCEL) is low
        assert best_of(low, high, ACCEL) is low

    def test_known_dv_beats_unknown(self):
        dv = InsufficientDV(50_000.0, 3000.0)
        accel = InsufficientAcceleration(0.1)
        assert best_of(accel, dv, ACCEL) is dv
        assert best_of(dv, accel, ACCEL) is dv

    def test_lower_acceleration_wins(self):
        low = InsufficientAcceleration(5.0)
        high = BurnLongerThanTransfer(300.0, 100.0)
        assert best_of(high, low, ACCEL) is low

    def test_known_acceleration_beats_unknown(self):
        accel = InsufficientAcceleration(1e6)
        physics = Hyperbolic(2.0)
        assert best_of(physics, accel, ACCEL) is accel

    def test_not_implemented_loses(self):
        cpni = CodePathNotImplemented()
        physics = Hyperbolic(2.0)
        assert best_of(cpni, physics, ACCEL) is physics
        assert best_of(physics, cpni, ACCEL) is physics

    def test_tie_keeps_first(self):
        a = Hyperbolic(1.5)
        b = WouldCollideWithBody(1.0, 2.0)
        assert best_of(a, b, ACCEL) is a
        assert best_of(b, a, ACCEL) is b


class TestWasBug:

    def test_defect_outcomes(self):
        assert was_bug(None)
        assert was_bug(CodePathNotImplemented())
        assert was_bug(ArrivalBeforeLaunch(-5.0))
        assert was_bug(BurnNaN())

    def test_physics_outcomes(self):
        assert not was_bug(Success())
        assert not was_bug(Hyperbolic(1.5))
        assert not was_bug(InsufficientDV(1.0, 0.0))
