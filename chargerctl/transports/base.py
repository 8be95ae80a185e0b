"""Transport interfaces."""

from __future__ import annotations

from collections.abc import AsyncGenerator, Callable
from typing import Protocol

from chargerctl.core.model import DiscoveredPeripheral, StatusResult


class BLETransport(Protocol):
    async def scan(
        self,
        *,
        timeout_s: float = 5.0,
        stop_when: Callable[[DiscoveredPeripheral], bool] | None = None,
        on_discovered: Callable[[DiscoveredPeripheral], None] | None = None,
    ) -> list[DiscoveredPeripheral]:
        """Scan for advertising peripherals until a match or the deadline."""

    def read_values(
        self,
        peripheral: DiscoveredPeripheral,
        *,
        timeout_s: float = 10.0,
    ) -> AsyncGenerator[bytes, None]:
        """Yield the value of every readable characteristic, skipping failed reads."""

    async def connect(
        self,
        peripheral: DiscoveredPeripheral,
        *,
        timeout_s: float = 10.0,
    ) -> None:
        """Open a connection to the peripheral or raise ConnectionFailedError."""


class StatusTransport(Protocol):
    async def fetch_status(
        self,
        url: str,
        serial: str,
        *,
        timeout_s: float = 10.0,
    ) -> StatusResult:
        """Ask the charger for its status over its local HTTP API."""
