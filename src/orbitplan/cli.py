# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Command-line interface for transfer planning.

Usage:
    # Earth -> Mars from the built-in catalog
    orbitplan --origin LowEarthOrbit1 --destination LowMarsOrbit --date 2028-01-01

    # Custom catalog, ΔV cap and finer grid on 8 threads
    orbitplan --catalog bodies.json --origin LowEarthOrbit1 \\
        --destination LowMarsOrbit --date 2028-01-01 \\
        --resolution 100 --max-dv 25 --workers 8

    # Probe launched from LEO with continuous thrust
    orbitplan --probe --high-thrust --destination LowMarsOrbit --date 2028-01-01
"""
import argparse
import sys
from datetime import datetime, timezone

from orbitplan.adapters.json_catalog import JsonCatalogReader
from orbitplan.adapters.sweep_runner import SweepRunner
from orbitplan.domain.catalog import BodyCatalog, OrbitCatalog, solar_system_catalog
from orbitplan.domain.porkchop import PorkchopResult, TransferRequest, sweep


def parse_date(text: str) -> datetime:
    """ISO date or datetime; naive values are UTC."""
    try:
        dt = datetime.fromisoformat(text.replace('Z', '+00:00'))
    except ValueError:
        raise ValueError(f"Invalid date {text!r}, expected YYYY-MM-DD") from None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _day_to_iso(day: float) -> str:
    return datetime.fromtimestamp(day * 86_400.0, tz=timezone.utc).strftime('%Y-%m-%d %H:%M')


def format_result(result: PorkchopResult) -> list[str]:
    """Human-readable summary of a sweep."""
    total = result.resolution * result.resolution
    lines = [f"Grid {result.resolution}x{result.resolution}: "
             f"{result.success_count}/{total} feasible transfers"]

    cell = result.optimal
    if cell is not None:
        lines.append(
            f"Optimal: launch {_day_to_iso(cell.launch_day)}, "
            f"arrive {_day_to_iso(cell.arrival_day)} "
            f"({cell.transit_days:.1f} d, {cell.method.value})"
        )
        lines.append(
            f"  ΔV {cell.total_dv:.3f} km/s "
            f"(departure {cell.departure_dv:.3f}, arrival {cell.arrival_dv:.3f})"
        )
        if cell.total_dv_raw != cell.total_dv:
            lines.append(f"  uncorrected ΔV {cell.total_dv_raw:.3f} km/s")
        lines.append(f"  ΔV range {result.min_dv:.3f} - {result.max_dv:.3f} km/s")
    else:
        lines.append("No feasible transfer found")

    if result.failure_counts:
        lines.append("Failures:")
        for outcome, count in sorted(result.failure_counts.items()):
            lines.append(f"  {outcome.name.lower():<36} {count}")
    if result.best_failure is not None and cell is None:
        best = result.best_failure
        lines.append(f"Closest failure: {type(best).__name__} {best.payload}")
    return lines


def run(args: argparse.Namespace) -> PorkchopResult:
    """Load the catalog, build the request and sweep."""
    if args.catalog:
        bodies, orbits = JsonCatalogReader(args.catalog).load_catalogs()
    else:
        bodies, orbits = solar_system_catalog()

    request = TransferRequest(
        origin_orbit=args.origin,
        destination_orbit=args.destination,
        reference_epoch=parse_date(args.date),
        grid_resolution=args.resolution,
        cruise_acceleration_mg=args.acceleration_mg,
        max_delta_v_kms=args.max_dv,
        departure_horizon_years=args.horizon_years,
        hybrid_remap=args.hybrid,
        probe_mode=args.probe,
        probe_high_thrust=args.high_thrust,
    )
    _check_names(request, bodies, orbits)

    if args.workers and args.workers > 1:
        with SweepRunner(max_workers=args.workers) as runner:
            result = runner.submit(request, bodies, orbits).result()
    else:
        result = sweep(request, bodies, orbits)
    return result if result is not None else PorkchopResult.empty()


def _check_names(request: TransferRequest, bodies: BodyCatalog, orbits: OrbitCatalog) -> None:
    origin = request.resolved_origin
    if origin is None:
        raise ValueError("--origin is required unless --probe is given")
    for name in (origin, request.destination_orbit):
        if name not in orbits:
            raise ValueError(f"Unknown orbit {name!r}; known orbits: {', '.join(orbits.names())}")


def main():
    parser = argparse.ArgumentParser(
        description="Search launch/transit grids for orbital transfers (porkchop plots)"
    )
    parser.add_argument('--origin', help="Origin orbit name (default with --probe: LowEarthOrbit1)")
    parser.add_argument('--destination', required=True, help="Destination orbit name")
    parser.add_argument('--date', required=True, help="Reference epoch, YYYY-MM-DD (UTC)")
    parser.add_argument(
        '--catalog',
        help="Path to catalog JSON with 'bodies' and 'orbits' (default: built-in)"
    )
    parser.add_argument(
        '--resolution', type=int, default=50,
        help="Grid cells per axis, clamped to 20-150 (default: 50)"
    )
    parser.add_argument(
        '--acceleration-mg', type=float, default=3000.0,
        help="Cruise acceleration in milli-g (default: 3000)"
    )
    parser.add_argument('--max-dv', type=float, help="ΔV budget in km/s")
    parser.add_argument(
        '--horizon-years', type=float,
        help="Launch window length in years (default: one synodic period)"
    )
    parser.add_argument(
        '--hybrid', action='store_true', default=False,
        help="Apply the hybrid remap and calibrated ΔV correction"
    )
    parser.add_argument(
        '--high-thrust', action='store_true', default=False,
        help="Also evaluate the continuous-thrust model"
    )
    parser.add_argument(
        '--probe', action='store_true', default=False,
        help="Probe mission: origin defaults to LowEarthOrbit1"
    )
    parser.add_argument(
        '--workers', type=int, default=1,
        help="Worker threads for grid rows (default: 1, in-process)"
    )

    args = parser.parse_args()

    try:
        result = run(args)
    except FileNotFoundError:
        print(f"Error: Catalog file not found: {args.catalog}", file=sys.stderr)
        sys.exit(1)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    for line in format_result(result):
        print(line)


if __name__ == '__main__':
    main()
