"""
Centralized database operations to sqlite3 database.
Holds the host-side attribute values, the attribute event log, and simple state.
Location is specified by environment variable DB_PATH.
Default location is $ROOT_DIR/hairt.db  (largely for development and testing)
"""

import sqlite3
import time
import logging
import os

from hairt.paths import DB_PATH, SCHEMA_FILE_PATH

logger = logging.getLogger(__name__)
logger.debug("DB_PATH=%s",DB_PATH)


def connect_db(db_name):
    """Establishes a connection to the SQLite database."""
    conn = sqlite3.connect(db_name)
    conn.row_factory = sqlite3.Row      # returns rows as dicts
    if 'TEST_DB_NAME' in os.environ or str(db_name) == ':memory:':
        conn.execute("PRAGMA journal_mode=DELETE;")
    else:
        conn.execute("PRAGMA journal_mode=WAL;")
    conn.execute("PRAGMA synchronous=NORMAL;")
    return conn

def get_db_connection():
    """
    Returns a new SQLite connection for each request.
    The connection should be closed by the caller when done.
    """
    try:
        if 'TEST_DB_NAME' in os.environ:
            db_path = os.environ['TEST_DB_NAME']
        else:
            db_path = DB_PATH
        logger.debug("db_path=%s",db_path)
        conn = connect_db(db_path)
        setup_database(conn)
        return conn
    except sqlite3.Error as e:
        logger.exception("Database connection error: %s", e)
        raise

def setup_database(conn, schema_file=SCHEMA_FILE_PATH):
    """
    Creates the necessary tables if they don't exist by reading SQL from a file.
    """
    cursor = conn.cursor()
    try:
        with open(schema_file, 'r') as f:
            schema_sql = f.read()
        cursor.executescript(schema_sql)
        conn.commit()
        logger.debug("Database schema from '%s' set up successfully.", schema_file)
    except sqlite3.Error as e:
        conn.rollback()
        logger.error("Database error during schema setup: %s", e)
        raise

################################################################
### attributes

def get_attribute(conn, name):
    """Returns the stored string value of attribute `name`, or None"""
    c = conn.cursor()
    c.execute("SELECT value from attributes where name=?", (name,))
    row = c.fetchone()
    return row['value'] if row else None

def fetch_attributes(conn):
    """Returns all attributes, ordered by name"""
    c = conn.cursor()
    c.execute("SELECT name,value,logtime from attributes order by name")
    return c.fetchall()

def insert_event(conn, name, value, logtime=None, commit=True):
    """Record an attribute event and make `value` the attribute's current value"""
    if logtime is None:
        logtime = int(time.time())
    c = conn.cursor()
    try:
        c.execute("INSERT INTO events (logtime, name, value) VALUES (?,?,?)", (logtime, name, value))
        c.execute("INSERT INTO attributes (name, value, logtime) VALUES (?,?,?) "
                  "ON CONFLICT(name) DO UPDATE SET value=excluded.value, logtime=excluded.logtime",
                  (name, value, logtime))
        if commit:
            conn.commit()
    except sqlite3.Error as e:
        logger.error("Database error in insert_event: %s", e)
        conn.rollback()
        raise

def fetch_events(conn, limit=100, name=None):
    """Most recent events first"""
    cmd = "SELECT event_id,logtime,name,value from events WHERE 1=1"
    args = []
    if name is not None:
        cmd += " AND name=?"
        args.append(name)
    cmd += " ORDER BY event_id DESC LIMIT ?"
    args.append(limit)
    c = conn.cursor()
    c.execute(cmd, args)
    return c.fetchall()

################################################################
### simple state

def get_state(conn, key):
    c = conn.cursor()
    c.execute("SELECT value from state where key=?", (key,))
    row = c.fetchone()
    return row['value'] if row else None

def set_state(conn, key, value):
    c = conn.cursor()
    c.execute("INSERT INTO state (key, value) VALUES (?,?) "
              "ON CONFLICT(key) DO UPDATE SET value=excluded.value", (key, value))
    conn.commit()

def prune_events(conn, before):
    """Delete events logged before time_t `before`. Current attribute values are kept.
    :return: number of events deleted
    """
    c = conn.cursor()
    try:
        c.execute("DELETE FROM events WHERE logtime < ?", (before,))
        conn.commit()
    except sqlite3.Error as e:
        logger.error("Database error in prune_events: %s", e)
        conn.rollback()
        raise
    if c.rowcount:
        logger.info("Pruned %s events before %s", c.rowcount, time.asctime(time.localtime(before)))
    return c.rowcount
