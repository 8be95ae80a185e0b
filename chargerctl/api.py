"""Stable public API for building tooling on top of chargerctl.

This module is the supported integration surface for third-party callers.
Each method runs one service coroutine to completion with ``asyncio.run``,
so it must not be called from inside a running event loop; async callers
should use :class:`chargerctl.core.service.ChargerService` directly.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from pathlib import Path
from typing import Any

from chargerctl.core.config import load_config
from chargerctl.core.errors import (
    AdapterUnavailableError,
    ChargerctlError,
    ConfigError,
    ConnectionFailedError,
    DeviceNotFoundError,
    MalformedResponseError,
    StatusRequestFailedError,
)
from chargerctl.core.model import (
    ChargerConfig,
    ChargerStatus,
    DiscoveredPeripheral,
    MatchResult,
    ProvisionResult,
    StatusResult,
)
from chargerctl.core.service import ChargerService
from chargerctl.transports.base import BLETransport, StatusTransport
from chargerctl.transports.ble_gatt import BLEGATTTransport
from chargerctl.transports.http_status import ChargerStatusClient

__all__ = [
    "ChargerctlError",
    "ConfigError",
    "AdapterUnavailableError",
    "DeviceNotFoundError",
    "ConnectionFailedError",
    "StatusRequestFailedError",
    "MalformedResponseError",
    "ChargerConfig",
    "ChargerStatus",
    "DiscoveredPeripheral",
    "MatchResult",
    "ProvisionResult",
    "StatusResult",
    "BLEGATTTransport",
    "ChargerStatusClient",
    "Client",
]


class Client:
    """Public client for scanning, matching and querying one charger."""

    def __init__(
        self,
        config: ChargerConfig | None = None,
        *,
        ble_transport: BLETransport | None = None,
        status_transport: StatusTransport | None = None,
    ) -> None:
        self._service = ChargerService(
            config,
            ble_transport=ble_transport,
            status_transport=status_transport,
        )

    @classmethod
    def from_config_file(
        cls,
        path: Path | None = None,
        *,
        overrides: dict[str, Any] | None = None,
        **kwargs: Any,
    ) -> Client:
        loaded = load_config(path, overrides=overrides)
        return cls(loaded.config, **kwargs)

    @property
    def config(self) -> ChargerConfig:
        return self._service.config

    def scan(
        self,
        *,
        on_discovered: Callable[[DiscoveredPeripheral], None] | None = None,
    ) -> list[DiscoveredPeripheral]:
        return asyncio.run(self._service.scan(on_discovered=on_discovered, stop_on_match=False))

    def find_charger(
        self,
        *,
        on_discovered: Callable[[DiscoveredPeripheral], None] | None = None,
    ) -> MatchResult:
        return asyncio.run(self._service.find_charger(on_discovered=on_discovered))

    def check_status(self) -> StatusResult:
        return asyncio.run(self._service.check_status())

    def provision(
        self,
        *,
        on_discovered: Callable[[DiscoveredPeripheral], None] | None = None,
        on_connected: Callable[[MatchResult], None] | None = None,
    ) -> ProvisionResult:
        return asyncio.run(
            self._service.provision(on_discovered=on_discovered, on_connected=on_connected)
        )
