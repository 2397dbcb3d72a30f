# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
JSON catalog adapter.

Reads bodies and orbits from a single JSON document:

    {"bodies": [{"name": "Earth", "objectType": "Planet", ...}, ...],
     "orbits": [{"name": "LowEarthOrbit1", "barycenter": "Earth", ...}, ...]}

Keys follow the game data files (``semiMajorAxis_AU``,
``inclination_Deg``, ``epoch_floatJYears``, ...).
"""
import json
from typing import Any

from orbitplan.domain.catalog import BodyCatalog, Orbit, OrbitCatalog, SpaceBody
from orbitplan.ports import CatalogSource

_BODY_REQUIRED = (
    'name', 'objectType', 'eccentricity', 'inclination_Deg',
    'longAscendingNode_Deg', 'argPeriapsis_Deg', 'meanAnomalyAtEpoch_Deg',
    'epoch_floatJYears', 'mass_kg', 'equatorialRadius_km',
)
_ORBIT_REQUIRED = ('name', 'barycenter')


def _require(record: dict[str, Any], keys: tuple[str, ...], kind: str, index: int) -> None:
    if not isinstance(record, dict):
        raise ValueError(f"{kind} record #{index}: expected a JSON object, got {type(record).__name__}")
    missing = [k for k in keys if record.get(k) is None]
    if missing:
        label = record.get('name') or f"#{index}"
        raise ValueError(f"{kind} record {label}: missing {', '.join(missing)}")


def _optional_float(record: dict[str, Any], key: str) -> float | None:
    value = record.get(key)
    return None if value is None else float(value)


def parse_body(record: dict[str, Any], index: int = 0) -> SpaceBody:
    """Build a SpaceBody from a camelCase record."""
    _require(record, _BODY_REQUIRED, "body", index)
    if record.get('semiMajorAxis_AU') is None and record.get('semiMajorAxis_km') is None \
            and record['objectType'] != 'Star':
        raise ValueError(f"body record {record['name']}: missing semiMajorAxis_AU or semiMajorAxis_km")
    return SpaceBody(
        name=record['name'],
        friendly_name=record.get('friendlyName') or record['name'],
        object_type=record['objectType'],
        barycenter=record.get('barycenter'),
        semi_major_axis_au=_optional_float(record, 'semiMajorAxis_AU'),
        semi_major_axis_km=_optional_float(record, 'semiMajorAxis_km'),
        eccentricity=float(record['eccentricity']),
        inclination_deg=float(record['inclination_Deg']),
        long_ascending_node_deg=float(record['longAscendingNode_Deg']),
        arg_periapsis_deg=float(record['argPeriapsis_Deg']),
        mean_anomaly_at_epoch_deg=float(record['meanAnomalyAtEpoch_Deg']),
        epoch_julian_years=float(record['epoch_floatJYears']),
        mass_kg=float(record['mass_kg']),
        equatorial_radius_km=float(record['equatorialRadius_km']),
    )


def parse_orbit(record: dict[str, Any], index: int = 0) -> Orbit:
    """Build an Orbit from a camelCase record."""
    _require(record, _ORBIT_REQUIRED, "orbit", index)
    return Orbit(
        name=record['name'],
        friendly_name=record.get('friendlyName') or record['name'],
        barycenter=record['barycenter'],
        orbit_index=record.get('orbitIndex'),
        altitude_km=_optional_float(record, 'altitude_km'),
        semi_major_axis_km=_optional_float(record, 'semiMajorAxis_km'),
        eccentricity=float(record.get('eccentricity') or 0.0),
        interface_orbit=bool(record.get('interfaceOrbit', False)),
        mass=_optional_float(record, 'mass'),
    )


class JsonCatalogReader(CatalogSource):
    """Loads a body/orbit catalog from a JSON file."""

    def __init__(self, path: str) -> None:
        self._path = path
        self._data: dict[str, Any] | None = None

    def _document(self) -> dict[str, Any]:
        if self._data is None:
            with open(self._path, encoding='utf-8') as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError(f"{self._path}: expected a JSON object with 'bodies' and 'orbits'")
            self._data = data
        return self._data

    def _section(self, key: str) -> list[Any]:
        records = self._document().get(key, [])
        if not isinstance(records, list):
            raise ValueError(f"{self._path}: '{key}' must be a JSON array")
        return records

    def load_bodies(self) -> list[SpaceBody]:
        records = self._section('bodies')
        return [parse_body(rec, i) for i, rec in enumerate(records)]

    def load_orbits(self) -> list[Orbit]:
        records = self._section('orbits')
        return [parse_orbit(rec, i) for i, rec in enumerate(records)]

    def load_catalogs(self) -> tuple[BodyCatalog, OrbitCatalog]:
        """Both catalogs, ready for lookups."""
        return BodyCatalog(self.load_bodies()), OrbitCatalog(self.load_orbits())
