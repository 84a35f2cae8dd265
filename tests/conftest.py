"""
Test configuration and fixtures
"""

import stat
import sys
from pathlib import Path

import pytest

from core.config import AppSettings
from core.domain.models import Credentials

SAMPLE_SECRET = "JBSWY3DPEHPK3PXP"

SAMPLE_VIPACCESS = f"""version 1
secret {SAMPLE_SECRET}
id VSST12345678
expiry 2030-01-01T00:00:00.000Z
"""

FAKE_VPN = r'''
import json
import os
import pathlib
import sys

root = pathlib.Path(os.environ["FAKE_VPN_DIR"])
state = root / "state"
log = root / "calls.log"

with log.open("a") as fp:
    fp.write(" ".join(sys.argv[1:]) + "\n")


def connected():
    return state.exists() and state.read_text() == "up"


def ask(prompt):
    sys.stdout.write(prompt)
    sys.stdout.flush()
    return sys.stdin.readline().rstrip("\n")


args = sys.argv[1:]
if args == ["status"]:
    print(">> state: Connected" if connected() else ">> state: Disconnected")
elif args == ["disconnect"]:
    state.write_text("down")
    print(">> state: Disconnected")
elif args == ["-s"]:
    answers = {"command": sys.stdin.readline().rstrip("\n")}
    print("Cisco AnyConnect Secure Mobility Client")
    answers["group"] = ask("Group: [0] staff [1] vip\nGroup: ")
    answers["username"] = ask("Username: ")
    answers["password"] = ask("Password: ")
    answers["code"] = ask("Second Password: ")
    if os.environ.get("FAKE_VPN_NO_BANNER") == "1":
        (root / "answers.json").write_text(json.dumps(answers))
        state.write_text("up")
        print(">> state: Connected\nVPN>")
        sys.exit(0)
    answers["accept"] = ask("accept? [y/n]: ")
    (root / "answers.json").write_text(json.dumps(answers))
    if answers["accept"] == "y" and os.environ.get("FAKE_VPN_REJECT") != "1":
        state.write_text("up")
        print(">> state: Connected")
else:
    sys.exit(2)
'''


def make_executable(path: Path, body: str = "#!/bin/sh\nexit 0\n") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(body)
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture
def secret_file(tmp_path):
    """Sample ~/.vipaccess file"""
    path = tmp_path / "vipaccess"
    path.write_text(SAMPLE_VIPACCESS)
    return path


@pytest.fixture
def bin_dir(tmp_path):
    return tmp_path / "bin"


@pytest.fixture
def settings(tmp_path, bin_dir, secret_file):
    """Settings pointing at stub executables inside tmp_path"""
    return AppSettings(
        _env_file=None,
        vpn_binary=make_executable(bin_dir / "vpn"),
        totp_binary=str(make_executable(bin_dir / "oathtool", '#!/bin/sh\nfor last; do :; done\necho "otp-$last"\n')),
        secret_file=secret_file,
        lock_file=tmp_path / "run" / "vipvpn.lock",
        notifications_enabled=False,
        prompt_timeout_seconds=10,
    )


@pytest.fixture
def fake_vpn(tmp_path, bin_dir, monkeypatch):
    """Scriptable stand-in for the AnyConnect `vpn` binary"""
    root = tmp_path / "fake_vpn"
    root.mkdir()
    monkeypatch.setenv("FAKE_VPN_DIR", str(root))
    make_executable(bin_dir / "fake-vpn", f"#!{sys.executable}\n" + FAKE_VPN)
    return root


@pytest.fixture
def credentials():
    return Credentials(username="alice", password="s3cret", host="vpn.example.com")


class FakeClient:
    """In-memory VpnClient that records every call"""

    def __init__(self, connected=False, connect_succeeds=True, disconnect_succeeds=True):
        self.connected = connected
        self.connect_succeeds = connect_succeeds
        self.disconnect_succeeds = disconnect_succeeds
        self.calls = []

    def status(self):
        self.calls.append("status")
        return ">> state: Connected\n" if self.connected else ">> state: Disconnected\n"

    def disconnect(self):
        self.calls.append("disconnect")
        if self.disconnect_succeeds:
            self.connected = False
        return ">> state: Disconnected\n"

    def connect(self, credentials, code):
        self.calls.append(("connect", credentials.host, code))
        self.connected = self.connect_succeeds
        return "transcript"


class FakeTotp:
    def __init__(self, code="123456"):
        self.code = code
        self.secrets = []

    def generate(self, secret):
        self.secrets.append(secret)
        return self.code


class FakeNotifier:
    def __init__(self):
        self.messages = []

    def notify(self, message, *, title=None):
        self.messages.append(message)
