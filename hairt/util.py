"""
utility functions
"""

import os
import functools
import yaml
from hairt.paths import CONFIG_YAML_PATH, DEFAULT_POLL_INTERVAL_SECONDS
from hairt.token_manager import Credentials


@functools.lru_cache(maxsize=1)
def get_config():
    with open(CONFIG_YAML_PATH, 'r') as f:
        return yaml.safe_load(f)


@functools.lru_cache(maxsize=1)
def get_secrets():
    return get_config()['secrets']

def get_secret(category,name):
    """Get a secret value, checking environment variables first, then secrets file"""
    env_name = category.upper()+"_"+name.upper()
    if env_name in os.environ:
        return os.environ[env_name]
    return get_secrets()[category][name]

def get_airthings_config():
    """
    :return: (credentials, serial_number, poll_interval_seconds) for the configured sensor.
    The serial number may also come from $AIRTHINGS_SERIAL_NUMBER.
    """
    airthings = get_config().get('airthings', {})
    credentials = Credentials(client_id=get_secret('airthings', 'client_id'),
                              client_secret=get_secret('airthings', 'client_secret'))
    serial_number = os.getenv("AIRTHINGS_SERIAL_NUMBER", airthings.get('serial_number'))
    if not serial_number:
        raise KeyError("airthings.serial_number is not configured")
    poll_interval = int(airthings.get('poll_interval', DEFAULT_POLL_INTERVAL_SECONDS))
    return (credentials, str(serial_number), poll_interval)
