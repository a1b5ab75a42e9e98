"""
Poll the latest samples of one Airthings sensor and publish them on a Device.
"""

import logging
import math
from typing import NamedTuple, Optional
import requests

from hairt.paths import TIMEOUT_SECONDS, USER_AGENT
from hairt.token_manager import AirthingsError, TokenSession
from hairt.tile import FIELDS, TILE_ATTRIBUTE, tile_row, render_tile_html

LATEST_SAMPLES_URL = "https://ext-api.airthings.com/v1/devices/{serial_number}/latest-samples"

logger = logging.getLogger(__name__)


class PollError(AirthingsError):
    """Data endpoint failed or returned something we could not use"""


class PollResult(NamedTuple):
    success: bool
    reason: Optional[str] = None
    status_code: Optional[int] = None
    updates: Optional[dict] = None


def fetch_latest_samples(serial_number, token):
    """
    :return: the `data` object of the latest-samples response.
    :raises PollError: on any HTTP status >= 300 or a body without a `data` object.
    """
    url = LATEST_SAMPLES_URL.format(serial_number=serial_number)
    headers = {'User-Agent': USER_AGENT,
               'Authorization': f'Bearer {token}'}
    logger.debug("get %s", url)
    r = requests.get(url, headers=headers, timeout=TIMEOUT_SECONDS)
    if r.status_code >= 300:
        logger.error("Failed to receive samples. Response status code: %s, data: %s", r.status_code, r.text)
        raise PollError(f"latest-samples returned {r.status_code}", status_code=r.status_code, body=r.text)
    try:
        data = r.json()['data']
    except (ValueError, KeyError, TypeError) as e:
        raise PollError("malformed latest-samples response", status_code=r.status_code, body=r.text) from e
    if not isinstance(data, dict):
        raise PollError("latest-samples `data` is not an object", status_code=r.status_code, body=r.text)
    return data

def parse_reading(data):
    """Pick the known fields out of a sample. Unknown keys are ignored; absent fields are skipped.
    :return: dict of Airthings key to number, in display order.
    """
    reading = {}
    for field in FIELDS:
        if field.key not in data:
            continue
        value = data[field.key]
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise PollError(f"{field.key}={value!r} is not a number")
        try:
            finite = math.isfinite(float(value))
        except OverflowError:
            finite = False
        if not finite:
            raise PollError(f"{field.key} is not a finite number")
        reading[field.key] = value
    return reading

def publish_reading(device, reading):
    """Send change-guarded attribute events for `reading` and then the tile.
    All tile rows are formatted before the first event is sent.
    :return: (updates, rows) where updates maps attribute name to raw value.
    """
    present = [field for field in FIELDS if field.key in reading]
    rows = [tile_row(field, reading[field.key]) for field in present]
    tile = render_tile_html(rows)
    updates = {}
    for field in present:
        value = reading[field.key]
        device.send_event_if_changed(field.attribute, value)
        updates[field.attribute] = value
    device.send_event_if_changed(TILE_ATTRIBUTE, tile)
    return (updates, rows)

def poll(serial_number, session: TokenSession, device):
    """
    Fetch the latest samples and publish them. Never raises.
    :return: PollResult
    """
    if not session.token:
        return PollResult(False, reason="no access token")
    try:
        reading = parse_reading(fetch_latest_samples(serial_number, session.token))
        (updates, _) = publish_reading(device, reading)
        return PollResult(True, updates=updates)
    except PollError as e:
        logger.error("Poll of %s failed: %s", serial_number, e)
        return PollResult(False, reason=str(e), status_code=e.status_code)
    except Exception as e:      # pylint: disable=broad-exception-caught
        logger.exception("Exception while getting sensor data: %s", e)
        return PollResult(False, reason=str(e))
