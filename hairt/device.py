"""
The host side of a device: attribute values, events and simple state.
"""

import logging
import time

from hairt import db

logger = logging.getLogger(__name__)


class Device:
    """A device whose attributes are stored in the sqlite database `conn`"""
    def __init__(self, conn, name='Airthings'):
        self.conn = conn
        self.name = name

    def current_value(self, name):
        """Last published value of attribute `name` as a string, or None"""
        return db.get_attribute(self.conn, name)

    def send_event(self, name, value):
        db.insert_event(self.conn, name, None if value is None else str(value))

    def send_event_if_changed(self, name, value):
        """Publish `value` only if it differs, as a string, from the current value.
        :return: True if an event was emitted.
        """
        if str(self.current_value(name)) == str(value):
            return False
        logger.debug("%s: %s=%s", self.name, name, value)
        self.send_event(name, value)
        return True

    def events(self, limit=100, name=None):
        return [dict(row) for row in db.fetch_events(self.conn, limit=limit, name=name)]

    def prune_events(self, max_age_seconds, now=None):
        """Forget events older than `max_age_seconds`"""
        if now is None:
            now = time.time()
        return db.prune_events(self.conn, int(now - max_age_seconds))

    def attributes(self):
        return {row['name']: row['value'] for row in db.fetch_attributes(self.conn)}

    def get_state(self, key):
        return db.get_state(self.conn, key)

    def set_state(self, key, value):
        db.set_state(self.conn, key, value)
