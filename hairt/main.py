"""
main.py - Flask view of the device
"""

import os
import logging
import sys
import time
from functools import wraps

from flask import Flask, jsonify, request, render_template_string
from werkzeug.exceptions import HTTPException

from hairt import __version__
from hairt import db
from hairt.device import Device
from hairt.driver import AirthingsDriver
from hairt.scheduler import Scheduler
from hairt.tile import TILE_ATTRIBUTE, TABLE_OPEN, TABLE_CLOSE
from hairt.util import get_airthings_config

API_V1_PREFIX = "/api/v1"
DEFAULT_LOG_LEVEL = 'INFO'
LOGGING_CONFIG='%(asctime)s  %(filename)s:%(lineno)d %(levelname)s: %(message)s'
LOG_LEVEL = os.getenv("LOG_LEVEL",DEFAULT_LOG_LEVEL).upper()

logging.basicConfig(
    format=LOGGING_CONFIG,
    level=LOG_LEVEL,
    force=True,
    stream=sys.stderr  # Ensure logs go to stderr for gunicorn
)
logger = logging.getLogger(__name__)

TILE_PAGE = """<!DOCTYPE html>
<html><head><meta charset="utf-8"><title>{{ name }}</title></head>
<body>{{ tile|safe }}<p>updated {{ age }}</p></body></html>
"""

app = Flask(__name__)

################################################################

def with_db_connection(f):
    """Decorator to handle database connections properly"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        conn = db.get_db_connection()
        try:
            return f(conn, *args, **kwargs)
        finally:
            conn.close()
    return decorated_function

def get_driver(conn):
    (credentials, serial_number, poll_interval) = get_airthings_config()
    return AirthingsDriver(Device(conn), Scheduler(), credentials, serial_number, poll_interval)

def github_style_duration(past_time, now=None):
    if now is None:
        now = time.time()
    seconds = int(now - past_time)
    if seconds < 60:
        return f"{seconds}s"
    minutes = seconds // 60
    if minutes < 60:
        return f"{minutes}m"
    hours = minutes // 60
    if hours < 24:
        return f"{hours}h"
    return f"{hours // 24}d"

################################################################
# Versioned API routes

@app.route(API_V1_PREFIX + '/version')
def get_version_json():
    return jsonify({"version": __version__})

@app.route(API_V1_PREFIX + '/attributes')
@with_db_connection
def get_attributes(conn):
    rows = [dict(row) for row in db.fetch_attributes(conn)]
    for row in rows:
        row['age'] = github_style_duration(row['logtime'])
    return jsonify({"attributes": rows})

@app.route(API_V1_PREFIX + '/events')
@with_db_connection
def get_events(conn):
    limit = request.args.get('limit', 100, type=int)
    name = request.args.get('name')
    return jsonify({"events": Device(conn).events(limit=limit, name=name)})

@app.route(API_V1_PREFIX + '/refresh', methods=['POST'])
@with_db_connection
def refresh(conn):
    """Run one poll cycle now"""
    result = get_driver(conn).refresh()
    logger.info("refresh: success=%s", result.success)
    return jsonify(result.as_dict())

################################################################
# Top-level routes

@app.route("/version")
def get_version():
    return f"version: {__version__}"

@app.route("/tile")
@with_db_connection
def show_tile(conn):
    rows = db.fetch_events(conn, limit=1, name=TILE_ATTRIBUTE)
    if rows:
        tile = rows[0]['value']
        age = github_style_duration(rows[0]['logtime'])
    else:
        tile = TABLE_OPEN + TABLE_CLOSE
        age = 'never'
    return render_template_string(TILE_PAGE, name='Airthings', tile=tile, age=age)

# Error handler
@app.errorhandler(HTTPException)
def handle_exception(e):
    return jsonify({"error": e.description}), e.code
