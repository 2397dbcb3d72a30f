# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Transfer outcome taxonomy and result comparator.

Every transfer evaluation ends in exactly one of twenty outcomes. Each
outcome is its own frozen dataclass carrying the quantities that explain
it (required ΔV, eccentricity, burn time, ...). ``best_of`` ranks two
results so that grid searches can report the "least bad" failure when
no cell succeeds.

No external dependencies beyond stdlib.
"""
from dataclasses import dataclass, fields
from enum import IntEnum
from typing import ClassVar


class TransferOutcome(IntEnum):
    """Stable outcome ids (0 is success)."""
    SUCCESS = 0
    INSUFFICIENT_DV = 1
    ARRIVAL_BEFORE_LAUNCH = 2
    LAUNCH_IN_PAST = 3
    COAST_PHASE_ENDS_BEFORE_IT_STARTS = 4
    PARABOLIC = 5
    HYPERBOLIC = 6
    HYPERBOLIC_MICROTHRUST = 7
    INSUFFICIENT_ACCELERATION = 8
    ORBIT_PERIOD = 9
    EXCEEDS_MAX_DURATION = 10
    BURN_LONGER_THAN_TRANSFER = 11
    BURN_LONGER_THAN_HALF_ORBIT = 12
    BURN_NAN = 13
    WOULD_COLLIDE_WITH_BODY = 14
    WOULD_EXCEED_HILL_RADIUS = 15
    FLEET_INTERCEPT_IN_MICROTHRUST = 16
    FLEET_INTERCEPT_AFTER_ARRIVAL_AT_ASSET = 17
    FLEET_INTERCEPT_TARGETING_LOOP = 18
    CODE_PATH_NOT_IMPLEMENTED = 19


@dataclass(frozen=True)
class TransferResult:
    """Base of all outcome variants."""
    outcome: ClassVar[TransferOutcome]

    @property
    def is_success(self) -> bool:
        return self.outcome == TransferOutcome.SUCCESS

    @property
    def payload(self) -> tuple[float, float]:
        """Generic (value, value2) view of the variant's fields, zero-padded."""
        values = [float(getattr(self, f.name)) for f in fields(self)]
        values.extend([0.0, 0.0])
        return values[0], values[1]

    def minimum_dv_needed(self) -> float | None:
        """ΔV (m/s) that would have made this transfer feasible, if known."""
        return None

    def minimum_acceleration_needed(self, acceleration_mps2: float) -> float | None:
        """Acceleration (m/s²) that would have made this transfer feasible, if known."""
        return None


@dataclass(frozen=True)
class Success(TransferResult):
    outcome: ClassVar[TransferOutcome] = TransferOutcome.SUCCESS


@dataclass(frozen=True)
class InsufficientDV(TransferResult):
    outcome: ClassVar[TransferOutcome] = TransferOutcome.INSUFFICIENT_DV
    required_dv_mps: float
    available_dv_mps: float

    def minimum_dv_needed(self) -> float | None:
        return self.required_dv_mps


@dataclass(frozen=True)
class ArrivalBeforeLaunch(TransferResult):
    outcome: ClassVar[TransferOutcome] = TransferOutcome.ARRIVAL_BEFORE_LAUNCH
    transit_duration_s: float


@dataclass(frozen=True)
class LaunchInPast(TransferResult):
    outcome: ClassVar[TransferOutcome] = TransferOutcome.LAUNCH_IN_PAST
    lead_time_s: float
    transit_duration_s: float

    def minimum_acceleration_needed(self, acceleration_mps2: float) -> float | None:
        denominator = 1.0 - self.lead_time_s / self.transit_duration_s
        if denominator == 0:
            return None
        return acceleration_mps2 / denominator


@dataclass(frozen=True)
class CoastPhaseEndsBeforeItStarts(TransferResult):
    outcome: ClassVar[TransferOutcome] = TransferOutcome.COAST_PHASE_ENDS_BEFORE_IT_STARTS
    coast_time_s: float
    burn_time_s: float

    def minimum_acceleration_needed(self, acceleration_mps2: float) -> float | None:
        return acceleration_mps2 * (self.burn_time_s / self.coast_time_s)


@dataclass(frozen=True)
class Parabolic(TransferResult):
    outcome: ClassVar[TransferOutcome] = TransferOutcome.PARABOLIC
    eccentricity: float


@dataclass(frozen=True)
class Hyperbolic(TransferResult):
    outcome: ClassVar[TransferOutcome] = TransferOutcome.HYPERBOLIC
    eccentricity: float


@dataclass(frozen=True)
class HyperbolicMicrothrust(TransferResult):
    outcome: ClassVar[TransferOutcome] = TransferOutcome.HYPERBOLIC_MICROTHRUST
    eccentricity: float


@dataclass(frozen=True)
class InsufficientAcceleration(TransferResult):
    outcome: ClassVar[TransferOutcome] = TransferOutcome.INSUFFICIENT_ACCELERATION
    required_acceleration_mps2: float

    def minimum_acceleration_needed(self, acceleration_mps2: float) -> float | None:
        return self.required_acceleration_mps2


@dataclass(frozen=True)
class OrbitPeriod(TransferResult):
    outcome: ClassVar[TransferOutcome] = TransferOutcome.ORBIT_PERIOD
    period_s: float
    eccentricity: float


@dataclass(frozen=True)
class ExceedsMaxDuration(TransferResult):
    outcome: ClassVar[TransferOutcome] = TransferOutcome.EXCEEDS_MAX_DURATION
    duration_s: float
    max_duration_s: float


@dataclass(frozen=True)
class BurnLongerThanTransfer(TransferResult):
    outcome: ClassVar[TransferOutcome] = TransferOutcome.BURN_LONGER_THAN_TRANSFER
    burn_time_s: float
    available_time_s: float

    def minimum_acceleration_needed(self, acceleration_mps2: float) -> float | None:
        return acceleration_mps2 * (self.burn_time_s / self.available_time_s)


@dataclass(frozen=True)
class BurnLongerThanHalfOrbit(TransferResult):
    outcome: ClassVar[TransferOutcome] = TransferOutcome.BURN_LONGER_THAN_HALF_ORBIT
    burn_time_s: float
    orbit_period_s: float

    def minimum_acceleration_needed(self, acceleration_mps2: float) -> float | None:
        return acceleration_mps2 * (2.0 * self.burn_time_s / self.orbit_period_s)


@dataclass(frozen=True)
class BurnNaN(TransferResult):
    outcome: ClassVar[TransferOutcome] = TransferOutcome.BURN_NAN


@dataclass(frozen=True)
class WouldCollideWithBody(TransferResult):
    outcome: ClassVar[TransferOutcome] = TransferOutcome.WOULD_COLLIDE_WITH_BODY
    periapsis_m: float
    body_radius_m: float


@dataclass(frozen=True)
class WouldExceedHillRadius(TransferResult):
    outcome: ClassVar[TransferOutcome] = TransferOutcome.WOULD_EXCEED_HILL_RADIUS
    apoapsis_m: float
    hill_radius_m: float


@dataclass(frozen=True)
class FleetInterceptInMicrothrust(TransferResult):
    outcome: ClassVar[TransferOutcome] = TransferOutcome.FLEET_INTERCEPT_IN_MICROTHRUST
    separation_m: float
    intercept_time_s: float

    def minimum_acceleration_needed(self, acceleration_mps2: float) -> float | None:
        return self.separation_m / (2.0 * self.intercept_time_s * self.intercept_time_s)


@dataclass(frozen=True)
class FleetInterceptAfterArrivalAtAsset(TransferResult):
    outcome: ClassVar[TransferOutcome] = TransferOutcome.FLEET_INTERCEPT_AFTER_ARRIVAL_AT_ASSET


@dataclass(frozen=True)
class FleetInterceptTargetingLoop(TransferResult):
    outcome: ClassVar[TransferOutcome] = TransferOutcome.FLEET_INTERCEPT_TARGETING_LOOP


@dataclass(frozen=True)
class CodePathNotImplemented(TransferResult):
    outcome: ClassVar[TransferOutcome] = TransferOutcome.CODE_PATH_NOT_IMPLEMENTED


_VARIANTS: dict[TransferOutcome, type[TransferResult]] = {
    cls.outcome: cls
    for cls in (
        Success, InsufficientDV, ArrivalBeforeLaunch, LaunchInPast,
        CoastPhaseEndsBeforeItStarts, Parabolic, Hyperbolic,
        HyperbolicMicrothrust, InsufficientAcceleration, OrbitPeriod,
        ExceedsMaxDuration, BurnLongerThanTransfer, BurnLongerThanHalfOrbit,
        BurnNaN, WouldCollideWithBody, WouldExceedHillRadius,
        FleetInterceptInMicrothrust, FleetInterceptAfterArrivalAtAsset,
        FleetInterceptTargetingLoop, CodePathNotImplemented,
    )
}


def variant_for(outcome: TransferOutcome) -> type[TransferResult]:
    """Result class for an outcome id."""
    return _VARIANTS[TransferOutcome(outcome)]


def result_from_payload(
    outcome: TransferOutcome,
    value: float = 0.0,
    value2: float = 0.0,
) -> TransferResult:
    """Rebuild a result from its generic (outcome, value, value2) form."""
    cls = variant_for(outcome)
    names = [f.name for f in fields(cls)]
    return cls(*[value, value2][:len(names)])


def was_bug(result: TransferResult | None) -> bool:
    """True when a result can only come from a defect, not from physics."""
    if result is None:
        return True
    return result.outcome in (
        TransferOutcome.CODE_PATH_NOT_IMPLEMENTED,
        TransferOutcome.ARRIVAL_BEFORE_LAUNCH,
        TransferOutcome.BURN_NAN,
    )


def best_of(
    a: TransferResult | None,
    b: TransferResult | None,
    acceleration_mps2: float,
) -> TransferResult | None:
    """
    Pick the more useful of two results.

    Success wins (a before b). Between two failures, the one with the
    smaller known ΔV requirement wins, and a failure with a known ΔV
    requirement beats one without. Acceleration requirements are
    compared the same way next. Otherwise CodePathNotImplemented loses
    to anything and ties keep a.
    """
    if b is None:
        return a
    if a is None:
        return b

    if a.is_success:
        return a
    if b.is_success:
        return b

    a_dv = a.minimum_dv_needed()
    b_dv = b.minimum_dv_needed()
    if a_dv is not None and b_dv is not None:
        return a if a_dv < b_dv else b
    if a_dv is not None:
        return a
    if b_dv is not None:
        return b

    a_accel = a.minimum_acceleration_needed(acceleration_mps2)
    b_accel = b.minimum_acceleration_needed(acceleration_mps2)
    if a_accel is not None and b_accel is not None:
        return a if a_accel < b_accel else b
    if a_accel is not None:
        return a
    if b_accel is not None:
        return b

    if a.outcome == TransferOutcome.CODE_PATH_NOT_IMPLEMENTED:
        return b
    return a
