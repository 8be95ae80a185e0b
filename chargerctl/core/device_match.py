"""Peripheral-to-charger matching logic."""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator, Callable, Sequence
from contextlib import aclosing

from chargerctl.core.errors import ConnectionFailedError, DeviceNotFoundError
from chargerctl.core.model import DiscoveredPeripheral, MatchResult

LOGGER = logging.getLogger(__name__)

ValueReader = Callable[[DiscoveredPeripheral], AsyncGenerator[bytes, None]]


def decode_lossy(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")


def name_contains_serial(peripheral: DiscoveredPeripheral, serial: str) -> bool:
    return peripheral.name is not None and serial in peripheral.name


def match_by_name(
    peripherals: Sequence[DiscoveredPeripheral],
    serial: str,
) -> DiscoveredPeripheral | None:
    for peripheral in peripherals:
        if name_contains_serial(peripheral, serial):
            return peripheral
    return None


async def match_by_characteristics(
    peripherals: Sequence[DiscoveredPeripheral],
    serial: str,
    read_values: ValueReader,
) -> DiscoveredPeripheral | None:
    for peripheral in peripherals:
        try:
            async with aclosing(read_values(peripheral)) as values:
                async for data in values:
                    if serial in decode_lossy(data):
                        return peripheral
        except ConnectionFailedError as exc:
            LOGGER.debug("Skipping %s during characteristic search: %s", peripheral.address, exc)
    return None


async def find_charger(
    peripherals: Sequence[DiscoveredPeripheral],
    serial: str,
    read_values: ValueReader,
) -> MatchResult:
    """Pick the charger among scanned peripherals.

    Advertised names are checked first and the characteristic reader is only
    consulted when no name matches. The first hit in enumeration order wins.
    """
    peripheral = match_by_name(peripherals, serial)
    if peripheral is not None:
        return MatchResult(peripheral=peripheral, matched_by="name")

    LOGGER.debug("No advertised name contains %s; reading characteristics", serial)
    peripheral = await match_by_characteristics(peripherals, serial, read_values)
    if peripheral is not None:
        return MatchResult(peripheral=peripheral, matched_by="characteristic")

    raise DeviceNotFoundError(
        f"Could not find charger with serial number '{serial}' among {len(peripherals)} device(s)"
    )
