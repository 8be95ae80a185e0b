"""BLE GATT transport implementation."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import AsyncGenerator, Callable

from chargerctl.core.errors import AdapterUnavailableError, ConnectionFailedError
from chargerctl.core.model import DiscoveredPeripheral

LOGGER = logging.getLogger(__name__)


class BLEGATTTransport:
    async def scan(
        self,
        *,
        timeout_s: float = 5.0,
        stop_when: Callable[[DiscoveredPeripheral], bool] | None = None,
        on_discovered: Callable[[DiscoveredPeripheral], None] | None = None,
    ) -> list[DiscoveredPeripheral]:
        try:
            from bleak import BleakScanner  # type: ignore
        except Exception as exc:  # pragma: no cover - import failure path
            raise AdapterUnavailableError(
                "BLE transport requires 'bleak'. Install dependency and retry."
            ) from exc

        seen: dict[str, DiscoveredPeripheral] = {}
        matched = asyncio.Event()

        def _on_advertisement(device, advertisement_data) -> None:
            previous = seen.get(device.address)
            name = advertisement_data.local_name or device.name
            if name is None and previous is not None:
                name = previous.name
            peripheral = DiscoveredPeripheral(
                address=device.address,
                name=name,
                rssi=advertisement_data.rssi,
            )
            seen[device.address] = peripheral

            is_new = previous is None or (previous.name is None and name is not None)
            if is_new:
                LOGGER.debug("Discovered %s (%s)", peripheral.address, peripheral.name)
                if on_discovered is not None:
                    on_discovered(peripheral)
            if stop_when is not None and stop_when(peripheral):
                matched.set()

        scanner = BleakScanner(detection_callback=_on_advertisement)
        try:
            await scanner.start()
        except Exception as exc:
            raise AdapterUnavailableError(f"Could not start BLE scan: {exc}") from exc

        try:
            with contextlib.suppress(asyncio.TimeoutError):
                await asyncio.wait_for(matched.wait(), timeout=timeout_s)
        finally:
            try:
                await scanner.stop()
            except Exception as exc:
                LOGGER.debug("Stopping BLE scan failed: %s", exc)

        if matched.is_set():
            LOGGER.debug("Scan stopped early after a matching advertisement")
        return list(seen.values())

    async def read_values(
        self,
        peripheral: DiscoveredPeripheral,
        *,
        timeout_s: float = 10.0,
    ) -> AsyncGenerator[bytes, None]:
        from bleak import BleakClient  # type: ignore

        client = BleakClient(peripheral.address, timeout=timeout_s)
        try:
            await client.connect()
        except Exception as exc:
            raise ConnectionFailedError(f"BLE connect failed for {peripheral.address}: {exc}") from exc

        try:
            for service in client.services:
                for characteristic in service.characteristics:
                    if "read" not in characteristic.properties:
                        continue
                    try:
                        data = await client.read_gatt_char(characteristic)
                    except Exception as exc:
                        LOGGER.debug(
                            "Read of %s on %s failed: %s",
                            characteristic.uuid,
                            peripheral.address,
                            exc,
                        )
                        continue
                    yield bytes(data)
        finally:
            try:
                await client.disconnect()
            except Exception as exc:
                LOGGER.debug("Disconnect from %s failed: %s", peripheral.address, exc)

    async def connect(
        self,
        peripheral: DiscoveredPeripheral,
        *,
        timeout_s: float = 10.0,
    ) -> None:
        from bleak import BleakClient  # type: ignore

        client = BleakClient(peripheral.address, timeout=timeout_s)
        try:
            await client.connect()
        except Exception as exc:
            raise ConnectionFailedError(f"BLE connect failed for {peripheral.address}: {exc}") from exc

        try:
            if not client.is_connected:
                raise ConnectionFailedError(f"BLE connect failed for {peripheral.address}")
        finally:
            try:
                await client.disconnect()
            except Exception as exc:
                LOGGER.debug("Disconnect from %s failed: %s", peripheral.address, exc)
