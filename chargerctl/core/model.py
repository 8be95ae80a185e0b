"""Core data models used across config, service, and CLI."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

from chargerctl.core.errors import MalformedResponseError

DEFAULT_SERIAL_NUMBER = "60AE73B03BUQ059"
DEFAULT_CHARGER_HOST = "192.168.2.200"
DEFAULT_CHARGER_PORT = 80
DEFAULT_STATUS_PATH = "/i/auth/pub/v1/chargers/getChargerInfo"

CHARGING_WORK_MODE = 1


@dataclass(frozen=True)
class ChargerConfig:
    serial_number: str = DEFAULT_SERIAL_NUMBER
    charger_host: str = DEFAULT_CHARGER_HOST
    charger_port: int = DEFAULT_CHARGER_PORT
    status_path: str = DEFAULT_STATUS_PATH
    scan_timeout_s: float = 5.0
    request_timeout_s: float = 10.0
    connect_timeout_s: float = 10.0
    stop_scan_on_match: bool = True

    @property
    def status_url(self) -> str:
        return f"http://{self.charger_host}:{self.charger_port}{self.status_path}"


@dataclass(frozen=True)
class DiscoveredPeripheral:
    address: str
    name: str | None
    rssi: int | None = None


@dataclass(frozen=True)
class ChargerStatus:
    """Subset of the charger's getChargerInfo response.

    Only ``WorkMode == 1`` is known to mean charging. Every other value is
    reported as not charging, which lumps idle, fault and unknown modes
    together.
    """

    work_mode: int

    @property
    def is_charging(self) -> bool:
        return self.work_mode == CHARGING_WORK_MODE

    @classmethod
    def from_payload(cls, payload: Any) -> ChargerStatus:
        if not isinstance(payload, dict):
            raise MalformedResponseError(
                f"Charger status body must be a JSON object, got {type(payload).__name__}"
            )
        if "WorkMode" not in payload:
            raise MalformedResponseError("Charger status body is missing 'WorkMode'")
        work_mode = payload["WorkMode"]
        if isinstance(work_mode, bool) or not isinstance(work_mode, int):
            raise MalformedResponseError(f"'WorkMode' must be an integer, got {work_mode!r}")
        if not 0 <= work_mode <= 255:
            raise MalformedResponseError(f"'WorkMode' out of range 0..255: {work_mode}")
        return cls(work_mode=work_mode)


@dataclass(frozen=True)
class StatusResult:
    url: str
    http_status: int
    status: ChargerStatus | None

    @property
    def ok(self) -> bool:
        return 200 <= self.http_status < 300


@dataclass(frozen=True)
class MatchResult:
    peripheral: DiscoveredPeripheral
    matched_by: Literal["name", "characteristic"]


@dataclass(frozen=True)
class ProvisionResult:
    match: MatchResult
    status: StatusResult
    warnings: tuple[str, ...]
