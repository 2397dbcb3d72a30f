# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""CLI tests: argument handling, error exits and report formatting."""
import json
import sys
from datetime import datetime, timezone

import pytest

from orbitplan.cli import format_result, main, parse_date
from orbitplan.domain.porkchop import PorkchopResult


def _argv(*extra):
    return ['orbitplan', '--destination', 'LowMarsOrbit', '--date', '2028-01-01',
            '--resolution', '20', *extra]


class TestParseDate:

    def test_naive_date_is_utc(self):
        assert parse_date("2028-01-01") == datetime(2028, 1, 1, tzinfo=timezone.utc)

    def test_zulu_suffix(self):
        assert parse_date("2028-01-01T12:00:00Z") == datetime(2028, 1, 1, 12, tzinfo=timezone.utc)

    def test_invalid(self):
        with pytest.raises(ValueError, match="Invalid date"):
            parse_date("first of january")


class TestFormatResult:

    def test_empty_result(self):
        lines = format_result(PorkchopResult.empty())
        assert lines[0] == "Grid 0x0: 0/0 feasible transfers"
        assert "No feasible transfer found" in lines


# ── main() ─────────────────────────────────────────────────────────

class TestCliRun:

    def test_builtin_catalog_finds_transfer(self, capsys, monkeypatch):
        monkeypatch.setattr(sys, 'argv', _argv('--origin', 'LowEarthOrbit1', '--max-dv', '25'))
        main()
        out = capsys.readouterr().out
        assert "Grid 20x20:" in out
        assert "Optimal: launch 2028-" in out
        assert "Failures:" in out

    def test_probe_defaults_origin(self, capsys, monkeypatch):
        """--probe launches from LowEarthOrbit1 without --origin."""
        monkeypatch.setattr(sys, 'argv', _argv('--probe'))
        main()
        assert "Optimal:" in capsys.readouterr().out

    def test_threaded_run(self, capsys, monkeypatch):
        monkeypatch.setattr(sys, 'argv', _argv('--origin', 'LowEarthOrbit1', '--workers', '4'))
        main()
        assert "Optimal:" in capsys.readouterr().out

    def test_tiny_budget_reports_closest_failure(self, capsys, monkeypatch):
        monkeypatch.setattr(sys, 'argv', _argv('--origin', 'LowEarthOrbit1', '--max-dv', '1'))
        main()
        out = capsys.readouterr().out
        assert "No feasible transfer found" in out
        assert "Closest failure: InsufficientDV" in out

    def test_custom_catalog(self, tmp_path, capsys, monkeypatch):
        from orbitplan.domain.catalog import solar_system_catalog

        bodies, orbits = solar_system_catalog()
        doc = {
            "bodies": [
                {
                    "name": b.name, "friendlyName": b.friendly_name,
                    "objectType": b.object_type, "barycenter": b.barycenter,
                    "semiMajorAxis_AU": b.semi_major_axis_au,
                    "semiMajorAxis_km": b.semi_major_axis_km,
                    "eccentricity": b.eccentricity, "inclination_Deg": b.inclination_deg,
                    "longAscendingNode_Deg": b.long_ascending_node_deg,
                    "argPeriapsis_Deg": b.arg_periapsis_deg,
                    "meanAnomalyAtEpoch_Deg": b.mean_anomaly_at_epoch_deg,
                    "epoch_floatJYears": b.epoch_julian_years,
                    "mass_kg": b.mass_kg, "equatorialRadius_km": b.equatorial_radius_km,
                }
                for b in bodies
            ],
            "orbits": [
                {
                    "name": o.name, "barycenter": o.barycenter,
                    "altitude_km": o.altitude_km, "semiMajorAxis_km": o.semi_major_axis_km,
                }
                for o in orbits
            ],
        }
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps(doc), encoding="utf-8")

        monkeypatch.setattr(sys, 'argv', _argv('--origin', 'LowEarthOrbit1', '--catalog', str(path)))
        main()
        assert "Optimal:" in capsys.readouterr().out


class TestCliErrors:

    def test_unknown_orbit(self, capsys, monkeypatch):
        monkeypatch.setattr(sys, 'argv', ['orbitplan', '--origin', 'LowEarthOrbit1',
                                          '--destination', 'Atlantis', '--date', '2028-01-01'])
        with pytest.raises(SystemExit) as exc_info:
            main()
        assert exc_info.value.code == 1
        err = capsys.readouterr().err
        assert "Error: Unknown orbit 'Atlantis'" in err

    def test_missing_catalog(self, tmp_path, capsys, monkeypatch):
        """File not found produces specific error message."""
        missing = str(tmp_path / "missing.json")
        monkeypatch.setattr(sys, 'argv', _argv('--origin', 'LowEarthOrbit1', '--catalog', missing))
        with pytest.raises(SystemExit) as exc_info:
            main()
        assert exc_info.value.code == 1
        assert "not found" in capsys.readouterr().err.lower()

    def test_bad_date(self, capsys, monkeypatch):
        monkeypatch.setattr(sys, 'argv', ['orbitplan', '--origin', 'LowEarthOrbit1',
                                          '--destination', 'LowMarsOrbit', '--date', 'soon'])
        with pytest.raises(SystemExit) as exc_info:
            main()
        assert exc_info.value.code == 1
        assert "Invalid date" in capsys.readouterr().err

    def test_origin_required_without_probe(self, capsys, monkeypatch):
        monkeypatch.setattr(sys, 'argv', _argv())
        with pytest.raises(SystemExit) as exc_info:
            main()
        assert exc_info.value.code == 1
        assert "--origin is required" in capsys.readouterr().err

    def test_destination_required(self, monkeypatch):
        """argparse rejects a missing --destination with exit code 2."""
        monkeypatch.setattr(sys, 'argv', ['orbitplan', '--date', '2028-01-01'])
        with pytest.raises(SystemExit) as exc_info:
            main()
        assert exc_info.value.code == 2

    def test_malformed_catalog_record(self, tmp_path, capsys, monkeypatch):
        """A scalar where a body record belongs ends in the Error path, not a traceback."""
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps({"bodies": ["Earth"], "orbits": []}), encoding="utf-8")
        monkeypatch.setattr(sys, 'argv', _argv('--origin', 'LowEarthOrbit1', '--catalog', str(path)))
        with pytest.raises(SystemExit) as exc_info:
            main()
        assert exc_info.value.code == 1
        assert "Error: body record #0" in capsys.readouterr().err
