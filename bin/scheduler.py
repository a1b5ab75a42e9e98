"""
Installs the Airthings device handler and polls it forever.
"""
import sys
import os
import logging
from os.path import dirname,abspath

sys.path.append(dirname(dirname(abspath(__file__))))

from hairt.paths import DB_PATH
from hairt.device import Device
from hairt.driver import AirthingsDriver
from hairt.scheduler import Scheduler
from hairt.util import get_airthings_config
import hairt.db as db

def setup_parser():
    import argparse
    parser = argparse.ArgumentParser(description='Airthings polling scheduler.',
                                     formatter_class=argparse.ArgumentDefaultsHelpFormatter)
    parser.add_argument("--dbfile", help='path to database file', default=DB_PATH)
    parser.add_argument("--interval", help="poll interval in seconds (default from config.yaml)", type=int)
    parser.add_argument("--loglevel", help="log level", default=os.getenv("LOG_LEVEL","INFO"))
    return parser

def main(argv=None):
    parser = setup_parser()
    args = parser.parse_args(argv)
    logging.getLogger().setLevel(args.loglevel.upper())
    conn = db.connect_db(args.dbfile)
    db.setup_database(conn)
    (credentials, serial_number, poll_interval) = get_airthings_config()
    if args.interval is not None:
        poll_interval = args.interval
    scheduler = Scheduler()
    driver = AirthingsDriver(Device(conn), scheduler, credentials, serial_number, poll_interval)
    driver.installed()
    logging.info("polling %s every %s seconds", serial_number, poll_interval)
    try:
        scheduler.run_forever()
    except KeyboardInterrupt:
        logging.info("stopped")
    finally:
        conn.close()

if __name__=="__main__":
    main()
