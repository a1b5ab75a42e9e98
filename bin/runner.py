"""
Runs one poll cycle of the Airthings device handler.
"""
import sys
import os.path
import json
import logging
from os.path import dirname,abspath
import tabulate

# runner can be run directly, so it needs to add . to the path
sys.path.append(dirname(dirname(abspath(__file__))))

from hairt.paths import DB_PATH
from hairt.device import Device
from hairt.driver import AirthingsDriver
from hairt.scheduler import Scheduler
from hairt.tile import FIELDS, TILE_ATTRIBUTE, tile_row, render_tile_text
from hairt.util import get_airthings_config
import hairt.db as db

def report(device):
    attributes = device.attributes()
    rows = [(name, value) for (name, value) in attributes.items() if name != TILE_ATTRIBUTE]
    print(tabulate.tabulate(rows, ["attribute", "value"]))
    tile_rows = [tile_row(field, attributes[field.attribute]) for field in FIELDS if field.attribute in attributes]
    if tile_rows:
        print()
        print(render_tile_text(tile_rows))

def setup_parser():
    import argparse
    parser = argparse.ArgumentParser(description='Airthings latest-samples poller.',
                                     formatter_class=argparse.ArgumentDefaultsHelpFormatter)
    parser.add_argument("--dbfile", help='path to database file', default=DB_PATH)
    parser.add_argument("--dry-run", help="use an in-memory database", action='store_true')
    parser.add_argument("--install", help="run the install lifecycle instead of a refresh", action='store_true')
    parser.add_argument("--report", help="report the current attributes and exit", action='store_true')
    parser.add_argument("--loglevel", help="log level", default=os.getenv("LOG_LEVEL","INFO"))
    return parser

def open_device(args):
    conn = db.connect_db(':memory:' if args.dry_run else args.dbfile)
    db.setup_database(conn)
    return Device(conn)

def main(argv=None):
    parser = setup_parser()
    args = parser.parse_args(argv)
    logging.getLogger().setLevel(args.loglevel.upper())
    logging.info("%s %s",__file__," ".join(sys.argv))
    if args.dry_run:
        print("=dry run=")
    device = open_device(args)
    if args.report:
        report(device)
        return 0

    (credentials, serial_number, poll_interval) = get_airthings_config()
    driver = AirthingsDriver(device, Scheduler(), credentials, serial_number, poll_interval)
    result = driver.installed() if args.install else driver.refresh()
    if args.dry_run:
        print(json.dumps(result.as_dict(), indent=4, default=str))
    report(device)
    return 0 if result.success else 1

if __name__=="__main__":
    sys.exit(main())
