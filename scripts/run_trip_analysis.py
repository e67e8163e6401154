import argparse
import logging
import os
import sys

import pandas as pd

# Allow running as `python scripts/run_trip_analysis.py` from the repo root
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from network.builder import build_facilities, build_legs, degree_stats, facility_index
from routing import RoutePathResolver, RoutingProvider, default_providers, unlock_precision
from timeline.reconciler import reconcile, summarize
from trips.composer import compose_for_facility, routable


def load_rows(filepath):
    """
    Read a sheet export as a list of dicts. Everything stays text; the
    network builder does its own parsing.
    """
    frame = pd.read_csv(filepath, dtype=str, keep_default_na=False)
    return frame.to_dict(orient="records")


def print_manifest(unit, manifest):
    summary = summarize(manifest)
    print(f"\n{unit.kind.value} {unit.unit_key}")
    for entry in manifest:
        arrival = str(entry.arrival) if entry.arrival else "--:--"
        departure = str(entry.departure) if entry.departure else "--:--"
        line = f"  [{entry.role.value:5}] {entry.facility:<28} arr {arrival}  dep {departure}"
        if entry.dwell_minutes:
            line += f"  dwell {entry.dwell_minutes} min"
        if entry.next_leg and entry.next_leg.distance_m is not None:
            line += (
                f"  -> {entry.next_leg.distance_m / 1000:.1f} km"
                f" / {entry.next_leg.duration_s / 60:.0f} min drive"
            )
            if entry.next_leg.road_slack_minutes is not None:
                line += f" / slack {entry.next_leg.road_slack_minutes:.0f} min"
        print(line)
    print(f"  buffer {summary.total_buffer_hours:.2f} h, scheduled {summary.scheduled_duration_minutes} min")


def run_analysis(facilities_file, connections_file, facility_name=None, provider=RoutingProvider.FREE,
                 passkey=None, resolve=True):
    print("=== TRIP ANALYSIS ===")

    # 1. Load and normalise
    facility_result = build_facilities(load_rows(facilities_file))
    leg_result = build_legs(load_rows(connections_file))
    facilities = facility_index(facility_result.facilities)
    stats = degree_stats(leg_result.legs)
    print(f"Facilities: {facility_result.active_count} active / {facility_result.total_rows} rows")
    print(f"Legs: {leg_result.valid_count} unique / {leg_result.total_rows} rows")

    # 2. Pick the busiest facility if none was given
    if facility_name is None:
        facility_name = max(stats, key=lambda name: stats[name].inbound + stats[name].outbound)
    print(f"Focal facility: {facility_name} (in {stats[facility_name].inbound}, out {stats[facility_name].outbound})")

    # 3. Compose
    units = compose_for_facility(leg_result.legs, facility_name)
    print(f"Composed {len(units)} trip units")

    # 4. Resolve road paths
    paths = {}
    if resolve:
        unlocked = unlock_precision(passkey)
        resolver = RoutePathResolver(
            facilities,
            default_providers(with_precision=provider == RoutingProvider.PRECISION),
            precision_unlocked=unlocked,
        )
        routable_units = [unit for unit in units if routable(unit, facilities)]
        for outcome in resolver.batch_resolve(
            routable_units,
            provider,
            on_progress=lambda done, total: print(f"  resolved {done}/{total}"),
        ):
            if outcome.ok:
                paths[outcome.unit_key] = outcome.path
            else:
                print(f"  pending: {outcome.unit_key} ({outcome.error})")

    # 5. Reconcile
    for unit in units:
        manifest = reconcile(unit, paths.get(unit.unit_key), facilities)
        if not manifest:
            print(f"\nSkipping {unit.unit_key}: no leg between known facilities")
            continue
        print_manifest(unit, manifest)

    print("\n=== ANALYSIS COMPLETE ===")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Compose and reconcile trips for one facility.")
    parser.add_argument("facilities_file")
    parser.add_argument("connections_file")
    parser.add_argument("--facility", default=None)
    parser.add_argument("--precision", action="store_true", help="use the Precision provider")
    parser.add_argument("--passkey", default=None)
    parser.add_argument("--no-resolve", action="store_true", help="schedule-only manifests")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    run_analysis(
        args.facilities_file,
        args.connections_file,
        facility_name=args.facility,
        provider=RoutingProvider.PRECISION if args.precision else RoutingProvider.FREE,
        passkey=args.passkey,
        resolve=not args.no_resolve,
    )
