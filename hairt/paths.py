"""
Paths and constants
"""

from pathlib import Path
from os.path import abspath,join,dirname
import os
import logging

from hairt import __version__

TIMEOUT_SECONDS = 10
APP_DIR = dirname(abspath(__file__))
ROOT_DIR = dirname(APP_DIR)
ETC_DIR = join(ROOT_DIR,"etc")
SCHEMA_FILE_PATH = join(ETC_DIR, 'schema.sql')
CONFIG_YAML_PATH = os.getenv("CONFIG_YAML", join(ROOT_DIR, 'config.yaml'))
DEV_DB_PATH = join(ROOT_DIR,'hairt.db')
DB_PATH = Path(os.getenv("DB_PATH", DEV_DB_PATH))
TEST_DIR = join(ROOT_DIR,'tests')
TEST_DATA_DIR = join(TEST_DIR,'data')

USER_AGENT = f'hairt/{__version__}'

# Airthings API allows 120 calls per hour
DEFAULT_POLL_INTERVAL_SECONDS = 5*60
MIN_POLL_INTERVAL_SECONDS = 60

# Attribute events older than this are deleted after each poll cycle
EVENT_RETENTION_SECONDS = 30*24*60*60

LOGGING_CONFIG='%(asctime)s  %(filename)s:%(lineno)d %(levelname)s: %(message)s'
logging.basicConfig(format=LOGGING_CONFIG, level=os.getenv("LOG_LEVEL","INFO").upper(), force=True)
