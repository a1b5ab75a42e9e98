"""
test driver.py: the poll-with-retry cycle and the lifecycle
"""
from unittest.mock import patch
import pytest

from fixtures import CREDENTIALS, SERIAL_NUMBER, fake_response, db_conn, device  # noqa: F401  # pylint: disable=unused-import

from hairt import db
from hairt.driver import AirthingsDriver, ACCESS_TOKEN_STATE
from hairt.scheduler import Scheduler

SAMPLE = {"data": {"co2": 650, "temp": 21.37, "battery": 87}}


def make_driver(device, poll_interval=300):   # noqa: F811
    return AirthingsDriver(device, Scheduler(), CREDENTIALS, SERIAL_NUMBER, poll_interval)

def bearer(call):
    return call.kwargs['headers']['Authorization']


@patch("hairt.token_manager.requests.post")
@patch("hairt.poller.requests.get")
def test_first_poll_succeeds(mock_get, mock_post, device):   # noqa: F811
    device.set_state(ACCESS_TOKEN_STATE, "saved")
    mock_get.return_value = fake_response(200, SAMPLE)
    result = make_driver(device).refresh()
    assert result.success
    assert result.polls == 1
    assert result.retry is None
    mock_post.assert_not_called()
    assert bearer(mock_get.call_args) == "Bearer saved"


@patch("hairt.token_manager.requests.post")
@patch("hairt.poller.requests.get")
def test_retry_after_token_refresh(mock_get, mock_post, device):   # noqa: F811
    device.set_state(ACCESS_TOKEN_STATE, "expired")
    mock_get.side_effect = [fake_response(401, text="expired"), fake_response(200, SAMPLE)]
    mock_post.return_value = fake_response(200, {"access_token": "fresh"})
    driver = make_driver(device)
    result = driver.refresh()

    assert mock_get.call_count == 2
    assert mock_post.call_count == 1
    assert [bearer(c) for c in mock_get.call_args_list] == ["Bearer expired", "Bearer fresh"]
    assert not result.first.success
    assert result.retry.success
    assert result.token_error is None
    assert result.success
    assert driver.session.token == "fresh"
    assert device.get_state(ACCESS_TOKEN_STATE) == "fresh"
    assert device.current_value('carbonDioxide') == '650'


@patch("hairt.token_manager.requests.post")
@patch("hairt.poller.requests.get")
def test_never_a_third_poll(mock_get, mock_post, device):   # noqa: F811
    device.set_state(ACCESS_TOKEN_STATE, "expired")
    mock_get.return_value = fake_response(500, text="server error")
    mock_post.return_value = fake_response(200, {"access_token": "fresh"})
    result = make_driver(device).refresh()
    assert mock_get.call_count == 2
    assert mock_post.call_count == 1
    assert result.polls == 2
    assert not result.success
    assert result.retry.status_code == 500
    assert device.events() == []


@patch("hairt.token_manager.requests.post")
@patch("hairt.poller.requests.get")
def test_token_endpoint_401(mock_get, mock_post, device):   # noqa: F811
    device.set_state(ACCESS_TOKEN_STATE, "old")
    mock_get.return_value = fake_response(401, text="expired")
    mock_post.return_value = fake_response(401, text="invalid_client")
    driver = make_driver(device)
    result = driver.refresh()
    assert result.token_error
    assert driver.session.token == "old"
    assert device.get_state(ACCESS_TOKEN_STATE) == "old"
    assert [bearer(c) for c in mock_get.call_args_list] == ["Bearer old", "Bearer old"]
    assert not result.success
    assert device.attributes() == {}


@patch("hairt.token_manager.requests.post")
@patch("hairt.poller.requests.get")
def test_first_run_without_token(mock_get, mock_post, device):   # noqa: F811
    mock_get.return_value = fake_response(200, SAMPLE)
    mock_post.return_value = fake_response(200, {"access_token": "first"})
    result = make_driver(device).refresh()
    assert result.success
    assert result.first.reason == "no access token"
    assert mock_get.call_count == 1
    assert bearer(mock_get.call_args) == "Bearer first"


@patch("hairt.token_manager.requests.post")
@patch("hairt.poller.requests.get")
def test_installed_schedules_refresh(mock_get, mock_post, device):   # noqa: F811
    mock_get.return_value = fake_response(200, SAMPLE)
    mock_post.return_value = fake_response(200, {"access_token": "tok"})
    driver = make_driver(device)
    assert driver.installed().success
    driver.updated()
    jobs = list(driver.scheduler.jobs.values())
    assert len(jobs) == 1
    assert jobs[0].seconds == 300
    assert jobs[0].callback == driver.refresh


def test_as_dict(device):   # noqa: F811
    with patch("hairt.poller.requests.get") as mock_get:
        mock_get.return_value = fake_response(200, SAMPLE)
        device.set_state(ACCESS_TOKEN_STATE, "tok")
        d = make_driver(device).refresh().as_dict()
    assert d['success'] is True
    assert d['retry'] is None
    assert d['first']['updates']['temperature'] == 21.37


def test_poll_interval_limit(device):   # noqa: F811
    with pytest.raises(ValueError):
        make_driver(device, poll_interval=30)
    assert make_driver(device, poll_interval=60).poll_interval == 60


@patch("hairt.poller.requests.get")
def test_cycle_prunes_old_events(mock_get, db_conn, device):   # noqa: F811
    db.insert_event(db_conn, 'voc', '100', logtime=1000)
    device.set_state(ACCESS_TOKEN_STATE, "tok")
    mock_get.return_value = fake_response(200, SAMPLE)
    assert make_driver(device).refresh().success
    assert device.events(name='voc') == []
    assert device.current_value('voc') == '100'
    assert len(device.events(name='carbonDioxide')) == 1
