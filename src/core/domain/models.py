"""Domain models (Pydantic v2).

These models describe *what* flows through one invocation, not *how* it is
obtained. Nothing here is persisted.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, field_validator
from pydantic.config import ConfigDict


class VpnState(str, Enum):
    """Tunnel state as reported by the external client."""

    CONNECTED = "connected"
    DISCONNECTED = "disconnected"

    def label(self) -> str:
        return "Connected" if self is VpnState.CONNECTED else "Disconnected"


class Credentials(BaseModel):
    """Login data for one `connect` call."""

    model_config = ConfigDict(frozen=True)

    username: str = Field(..., min_length=1, description="VPN account name.")
    password: str = Field(..., min_length=1, description="VPN account password.")
    host: str = Field(..., min_length=1, description="VPN gateway host.")

    @field_validator("username", "host", mode="before")
    @classmethod
    def strip_text(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value

    def __repr__(self) -> str:
        return f"Credentials(username={self.username!r}, password='******', host={self.host!r})"

    __str__ = __repr__


class StatusReport(BaseModel):
    """Parsed result of `vpn status`."""

    state: VpnState
    output: str = Field(default="", description="Raw client output.")

    @property
    def connected(self) -> bool:
        return self.state is VpnState.CONNECTED


class ConnectResult(BaseModel):
    """Outcome of a successful `connect`."""

    host: str
    elapsed_seconds: float = Field(..., ge=0)

    def summary(self) -> str:
        return f"Connected to {self.host} in {self.elapsed_seconds:.0f}s"


class DependencyCheck(BaseModel):
    """One row of the dependency check (also rendered by `doctor run`)."""

    name: str
    location: str
    ok: bool
    detail: str = ""
