"""
Nearest facility finder - command line front end.

Usage:
    nearest-finder --lat 12.97 --lon 77.59                # nearest hospital
    nearest-finder --profile bloodbank --address "MG Road, Bengaluru"
    nearest-finder --profile locations --ip --map results.html

With no position option you are asked for an address.
"""

import argparse
import logging
import sys

from dataset_profiles import PROFILES, get_profile
from geo_position import AddressLocationService, IPLocationService, StaticLocationService
from map_visualization import create_results_map, map_link, save_and_open_map
from session import find_nearest


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="nearest-finder", description="Find the nearest hospitals or blood banks.")
    p.add_argument("--profile", choices=sorted(PROFILES), default="hospital", help="dataset kind (default: hospital)")
    p.add_argument("--data", help="CSV path or http(s) URL (default: the profile's bundled CSV)")
    p.add_argument("-k", type=int, help="number of results (default: 1, or 3 for bloodbank)")
    where = p.add_mutually_exclusive_group()
    where.add_argument("--address", help="locate yourself by street address (Nominatim)")
    where.add_argument("--ip", nargs="?", const=True, metavar="ENDPOINT", help="locate yourself by IP address")
    p.add_argument("--lat", type=float)
    p.add_argument("--lon", type=float)
    p.add_argument("--map", metavar="HTML", help="also write a folium map of the results")
    p.add_argument("--no-browser", action="store_true", help="do not open the map in a browser")
    p.add_argument("-v", "--verbose", action="store_true")
    return p


def _location_service(args, parser):
    if (args.lat is None) != (args.lon is None):
        parser.error("--lat and --lon must be given together")
    if args.lat is not None:
        if args.address or args.ip:
            parser.error("--lat/--lon cannot be combined with --address or --ip")
        return StaticLocationService(args.lat, args.lon)
    if args.address:
        return AddressLocationService(args.address)
    if args.ip is True:
        return IPLocationService()
    if args.ip:
        return IPLocationService(args.ip)

    try:
        address = input("Enter your address: ").strip()
    except (EOFError, KeyboardInterrupt):
        address = ""
    if not address:
        parser.error("a position is required (--lat/--lon, --address or --ip)")
    return AddressLocationService(address)


def main(argv=None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    if args.k is not None and args.k < 1:
        parser.error("-k must be at least 1")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    profile = get_profile(args.profile)
    service = _location_service(args, parser)

    coordinator = find_nearest(service, profile, source=args.data, k=args.k)
    view = coordinator.view()

    if view.error:
        print(f"❌ {view.error}")
        return 1

    pos = view.user_position
    print(f"\nYour location: {pos.latitude:.6f}, {pos.longitude:.6f}")
    print(f"View on Map:   {map_link(pos)}")

    if not view.results:
        print(f"\nNo {profile.name} records with valid coordinates were found.")
        return 0

    print(f"\n✅ {profile.title}")
    for rank, result in enumerate(view.results, start=1):
        record = result.record
        print(f"\n{rank}. {record.get('name')}")
        for key, value in record.attributes.items():
            if key != "name":
                print(f"   {key.replace('_', ' ').title()}: {value}")
        print(f"   Coordinates: {result.coordinate.latitude:.6f}, {result.coordinate.longitude:.6f}")
        print(f"   Distance: {result.distance_km:.2f} km")
        print(f"   View on Map: {map_link(result.coordinate)}")

    if args.map:
        results_map = create_results_map(pos, view.results)
        path = save_and_open_map(results_map, args.map, open_browser=not args.no_browser)
        print(f"\nMap saved as {path}")

    return 0


# Run the program if executed directly
if __name__ == "__main__":
    sys.exit(main())
