"""
The Airthings device handler.

Lifecycle: installed() and updated() call initialize(), which schedules refresh() every poll
interval and polls once immediately. Each poll cycle tries the cached token first; if that poll
fails for any reason the token is refreshed and the poll is tried exactly once more.
"""

import logging
from typing import NamedTuple, Optional

from hairt import poller
from hairt.paths import DEFAULT_POLL_INTERVAL_SECONDS, MIN_POLL_INTERVAL_SECONDS, EVENT_RETENTION_SECONDS
from hairt.poller import PollResult
from hairt.token_manager import AuthError, Credentials, TokenSession

ACCESS_TOKEN_STATE = 'accessToken'

logger = logging.getLogger(__name__)


class CycleResult(NamedTuple):
    first: PollResult
    token_error: Optional[str] = None
    retry: Optional[PollResult] = None

    @property
    def success(self):
        return self.first.success or (self.retry is not None and self.retry.success)

    @property
    def polls(self):
        return 1 if self.retry is None else 2

    def as_dict(self):
        return {'success': self.success,
                'first': self.first._asdict(),
                'token_error': self.token_error,
                'retry': self.retry._asdict() if self.retry is not None else None}


class AirthingsDriver:
    # pylint: disable=too-many-arguments, disable=too-many-positional-arguments
    def __init__(self, device, scheduler, credentials: Credentials, serial_number,
                 poll_interval=DEFAULT_POLL_INTERVAL_SECONDS):
        if poll_interval < MIN_POLL_INTERVAL_SECONDS:
            raise ValueError(f"poll_interval={poll_interval} is below {MIN_POLL_INTERVAL_SECONDS} seconds")
        self.device = device
        self.scheduler = scheduler
        self.credentials = credentials
        self.serial_number = serial_number
        self.poll_interval = poll_interval
        self.session = TokenSession(device.get_state(ACCESS_TOKEN_STATE))

    def installed(self):
        return self.initialize()

    def updated(self):
        return self.initialize()

    def initialize(self):
        logger.debug("Initialization")
        self.scheduler.run_every(self.poll_interval, self.refresh)
        return self.request_sensor_data()

    def refresh(self):
        logger.debug("Refreshing data")
        return self.request_sensor_data()

    def refresh_token(self):
        """Get a new token and persist it. Returns the error message, or None on success."""
        try:
            self.session.refresh(self.credentials)
        except AuthError as e:
            logger.error("Token refresh failed: %s", e)
            return str(e)
        self.device.set_state(ACCESS_TOKEN_STATE, self.session.token)
        return None

    def request_sensor_data(self):
        result = self.poll_with_retry()
        self.device.prune_events(EVENT_RETENTION_SECONDS)
        return result

    def poll_with_retry(self):
        first = poller.poll(self.serial_number, self.session, self.device)
        if first.success:
            return CycleResult(first)

        # If the first poll fails, assume an issue with the token
        token_error = self.refresh_token()
        retry = poller.poll(self.serial_number, self.session, self.device)
        if retry.success:
            logger.info("Poll of %s succeeded after token refresh", self.serial_number)
        else:
            logger.error("Poll of %s failed after token refresh: %s", self.serial_number, retry.reason)
        return CycleResult(first, token_error, retry)
