"""Service layer used by CLI and the public API."""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable

from chargerctl.core.device_match import find_charger, name_contains_serial
from chargerctl.core.model import (
    ChargerConfig,
    DiscoveredPeripheral,
    MatchResult,
    ProvisionResult,
    StatusResult,
)
from chargerctl.transports.base import BLETransport, StatusTransport
from chargerctl.transports.ble_gatt import BLEGATTTransport
from chargerctl.transports.http_status import ChargerStatusClient

LOGGER = logging.getLogger(__name__)

WIFI_PROVISIONING_WARNING = (
    "Wi-Fi credential provisioning is not implemented; "
    "the charger must already be on the network for the status check."
)

DiscoveryCallback = Callable[[DiscoveredPeripheral], None]


class ChargerService:
    def __init__(
        self,
        config: ChargerConfig | None = None,
        *,
        ble_transport: BLETransport | None = None,
        status_transport: StatusTransport | None = None,
    ) -> None:
        self.config = config or ChargerConfig()
        self.ble_transport = ble_transport or BLEGATTTransport()
        self.status_transport = status_transport or ChargerStatusClient()

    async def scan(
        self,
        *,
        on_discovered: DiscoveryCallback | None = None,
        stop_on_match: bool | None = None,
    ) -> list[DiscoveredPeripheral]:
        if stop_on_match is None:
            stop_on_match = self.config.stop_scan_on_match
        serial = self.config.serial_number
        stop_when = (lambda p: name_contains_serial(p, serial)) if stop_on_match else None

        peripherals = await self.ble_transport.scan(
            timeout_s=self.config.scan_timeout_s,
            stop_when=stop_when,
            on_discovered=on_discovered,
        )
        LOGGER.info("Scan finished with %d peripheral(s)", len(peripherals))
        return peripherals

    async def find_charger(
        self,
        *,
        on_discovered: DiscoveryCallback | None = None,
    ) -> MatchResult:
        peripherals = await self.scan(on_discovered=on_discovered)
        read_values = functools.partial(
            self.ble_transport.read_values,
            timeout_s=self.config.connect_timeout_s,
        )
        match = await find_charger(peripherals, self.config.serial_number, read_values)
        LOGGER.info(
            "Matched %s (%s) by %s",
            match.peripheral.address,
            match.peripheral.name,
            match.matched_by,
        )
        return match

    async def connect(self, match: MatchResult) -> None:
        await self.ble_transport.connect(
            match.peripheral,
            timeout_s=self.config.connect_timeout_s,
        )

    async def check_status(self) -> StatusResult:
        return await self.status_transport.fetch_status(
            self.config.status_url,
            self.config.serial_number,
            timeout_s=self.config.request_timeout_s,
        )

    async def provision(
        self,
        *,
        on_discovered: DiscoveryCallback | None = None,
        on_connected: Callable[[MatchResult], None] | None = None,
    ) -> ProvisionResult:
        """Run scan, match, connect and the HTTP status check in sequence."""
        match = await self.find_charger(on_discovered=on_discovered)
        await self.connect(match)
        if on_connected is not None:
            on_connected(match)

        LOGGER.debug("Skipping Wi-Fi credential provisioning for %s", match.peripheral.address)
        warnings = (WIFI_PROVISIONING_WARNING,)

        status = await self.check_status()
        return ProvisionResult(match=match, status=status, warnings=warnings)
