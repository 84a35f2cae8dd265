"""
Tests for the operations controller
"""

import itertools

import pytest

from core.domain.errors import (
    AlreadyConnectedError,
    AlreadyDisconnectedError,
    ConnectFailedError,
    DisconnectFailedError,
    InstanceLockedError,
    MissingDependencyError,
    ScriptedSessionError,
)
from core.domain.models import VpnState
from core.instance_lock import InstanceLock
from core.services.vpn_controller import VpnController, parse_status

from conftest import SAMPLE_SECRET, FakeClient, FakeNotifier, FakeTotp


def _controller(settings, client, clock=None):
    kwargs = {}
    if clock is not None:
        kwargs["clock"] = clock
    return VpnController(
        settings=settings,
        client=client,
        totp=FakeTotp(),
        notifier=FakeNotifier(),
        **kwargs,
    )


@pytest.mark.parametrize(
    "output, state",
    [
        (">> state: Connected\n>> notice: Connected to vpn.example.com.", VpnState.CONNECTED),
        (">> state: Disconnected\n", VpnState.DISCONNECTED),
        (">> state: Reconnecting\n", VpnState.DISCONNECTED),
        ("", VpnState.DISCONNECTED),
        ("state: connected", VpnState.DISCONNECTED),
    ],
)
def test_parse_status(output, state):
    report = parse_status(output)
    assert report.state is state
    assert report.output == output


def test_status_connected_notifies_connected(settings):
    controller = _controller(settings, FakeClient(connected=True))
    report = controller.status()
    assert report.connected
    assert controller.notifier.messages == ["Connected"]


def test_status_disconnected_notifies_disconnected(settings):
    controller = _controller(settings, FakeClient(connected=False))
    report = controller.status()
    assert not report.connected
    assert controller.notifier.messages == ["Disconnected"]


def test_vipcode_passes_secret_field_to_generator(settings):
    controller = _controller(settings, FakeClient())
    assert controller.vipcode() == "123456"
    assert controller.totp.secrets == [SAMPLE_SECRET]


def test_connect_success_reports_elapsed_time(settings, credentials):
    client = FakeClient(connected=False)
    ticks = itertools.count(100, 7)
    controller = _controller(settings, client, clock=lambda: next(ticks))

    result = controller.connect(credentials)

    assert client.calls == ["status", ("connect", "vpn.example.com", "123456"), "status"]
    assert result.host == "vpn.example.com"
    assert result.elapsed_seconds == 7
    assert controller.notifier.messages == ["Connected to vpn.example.com in 7s"]


def test_connect_while_connected_makes_no_attempt(settings, credentials):
    client = FakeClient(connected=True)
    controller = _controller(settings, client)

    with pytest.raises(AlreadyConnectedError):
        controller.connect(credentials)

    assert client.calls == ["status"]
    assert controller.totp.secrets == []
    assert controller.notifier.messages == ["VPN is already connected"]


def test_connect_failure_is_reported(settings, credentials):
    client = FakeClient(connected=False, connect_succeeds=False)
    controller = _controller(settings, client)

    with pytest.raises(ConnectFailedError, match="vpn.example.com"):
        controller.connect(credentials)
    assert controller.notifier.messages == ["Could not connect to vpn.example.com"]


def test_connect_session_error_without_tunnel_fails(settings, credentials):
    class BrokenClient(FakeClient):
        def connect(self, credentials, code):
            raise ScriptedSessionError("VPN client exited before prompt 'Group:'")

    client = BrokenClient()
    controller = _controller(settings, client)
    with pytest.raises(ConnectFailedError) as excinfo:
        controller.connect(credentials)

    message = "Could not connect to vpn.example.com: VPN client exited before prompt 'Group:'"
    assert str(excinfo.value) == message
    assert controller.notifier.messages == [message]
    assert client.calls.count("status") == 2


def test_connect_session_error_with_tunnel_up_succeeds(settings, credentials):
    class EarlyExitClient(FakeClient):
        def connect(self, credentials, code):
            self.connected = True
            raise ScriptedSessionError("VPN client exited before prompt 'accept\\?'", "VPN>")

    controller = _controller(settings, EarlyExitClient())
    result = controller.connect(credentials)

    assert result.host == "vpn.example.com"
    assert controller.notifier.messages == [result.summary()]


def test_disconnect_while_disconnected_makes_no_call(settings):
    client = FakeClient(connected=False)
    controller = _controller(settings, client)

    with pytest.raises(AlreadyDisconnectedError):
        controller.disconnect()

    assert "disconnect" not in client.calls
    assert controller.notifier.messages == ["VPN is already disconnected"]


def test_disconnect_success(settings):
    client = FakeClient(connected=True)
    controller = _controller(settings, client)

    report = controller.disconnect()

    assert client.calls == ["status", "disconnect", "status"]
    assert not report.connected
    assert controller.notifier.messages == ["Disconnected"]


def test_disconnect_failure(settings):
    client = FakeClient(connected=True, disconnect_succeeds=False)
    controller = _controller(settings, client)

    with pytest.raises(DisconnectFailedError):
        controller.disconnect()


@pytest.mark.parametrize("operation", ["connect", "disconnect"])
def test_running_instance_blocks_before_any_client_call(settings, credentials, operation):
    client = FakeClient(connected=operation == "disconnect")
    controller = _controller(settings, client)
    args = (credentials,) if operation == "connect" else ()

    with InstanceLock(settings.lock_file):
        with pytest.raises(InstanceLockedError):
            getattr(controller, operation)(*args)

    assert client.calls == []


def test_lock_released_after_guard_failure(settings, credentials):
    controller = _controller(settings, FakeClient(connected=True))
    with pytest.raises(AlreadyConnectedError):
        controller.connect(credentials)

    with InstanceLock(settings.lock_file) as lock:
        assert lock.locked


@pytest.mark.parametrize("operation", ["status", "vipcode", "connect", "disconnect"])
def test_missing_dependency_stops_before_client_call(settings, tmp_path, credentials, operation):
    broken = settings.model_copy(update={"secret_file": tmp_path / "missing"})
    client = FakeClient(connected=True)
    controller = _controller(broken, client)
    args = (credentials,) if operation == "connect" else ()

    with pytest.raises(MissingDependencyError):
        getattr(controller, operation)(*args)

    assert client.calls == []
    assert controller.totp.secrets == []
