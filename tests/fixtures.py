"""
Shared fixtures: a temporary database, a Device on it, a Flask test client,
and fake `requests` responses.
"""
import os
import json
import tempfile
import logging
from unittest.mock import MagicMock
import pytest

from hairt import db
from hairt.device import Device
from hairt.main import app as flask_app
from hairt.token_manager import Credentials

CREDENTIALS = Credentials(client_id="test-client", client_secret="test-secret")
SERIAL_NUMBER = "2930012345"


def fake_response(status_code=200, body=None, text=None):
    """A stand-in for requests.Response"""
    r = MagicMock()
    r.status_code = status_code
    if body is not None:
        r.json.return_value = body
        r.text = json.dumps(body)
    else:
        r.json.side_effect = ValueError("no JSON")
        r.text = text or ""
    return r


@pytest.fixture
def db_conn():
    """Clean database connection to a database that is created for the purpose"""
    with tempfile.NamedTemporaryFile(suffix=".db") as tf:
        conn = db.connect_db(tf.name)
        db.setup_database(conn)
        yield conn
        conn.close()

@pytest.fixture
def device(db_conn):    # pylint: disable=redefined-outer-name
    return Device(db_conn)

@pytest.fixture
def client():
    """Provides a Flask test client on a temporary database file."""
    with tempfile.NamedTemporaryFile(suffix='.db') as tf:
        logging.info("Created temporary database file for test: %s", tf.name)
        os.environ['TEST_DB_NAME'] = tf.name
        flask_app.config['TESTING'] = True
        with flask_app.test_client() as test_client:
            yield test_client
        os.environ.pop("TEST_DB_NAME", None)
