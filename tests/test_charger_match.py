from __future__ import annotations

import asyncio

import pytest

from chargerctl.core.device_match import decode_lossy, find_charger, match_by_name
from chargerctl.core.errors import ConnectionFailedError, DeviceNotFoundError
from chargerctl.core.model import DiscoveredPeripheral

SERIAL = "60AE73B03BUQ059"


class FakeReader:
    def __init__(self, values: dict[str, list[bytes]], failing: set[str] | None = None) -> None:
        self.values = values
        self.failing = failing or set()
        self.calls: list[str] = []

    async def __call__(self, peripheral: DiscoveredPeripheral):
        self.calls.append(peripheral.address)
        if peripheral.address in self.failing:
            raise ConnectionFailedError(f"BLE connect failed for {peripheral.address}")
        for value in self.values.get(peripheral.address, []):
            yield value


def _p(address: str, name: str | None = None) -> DiscoveredPeripheral:
    return DiscoveredPeripheral(address=address, name=name)


def test_name_match_skips_characteristic_reads() -> None:
    peripherals = [_p("AA:00", "OtherDevice"), _p("AA:01", f"Charger-{SERIAL}")]
    reader = FakeReader({"AA:00": [SERIAL.encode()]})

    match = asyncio.run(find_charger(peripherals, SERIAL, reader))

    assert match.peripheral.address == "AA:01"
    assert match.matched_by == "name"
    assert reader.calls == []


def test_fallback_reads_characteristics_when_no_name_matches() -> None:
    peripherals = [_p("AA:00")]
    reader = FakeReader({"AA:00": [f"SN:{SERIAL}".encode()]})

    match = asyncio.run(find_charger(peripherals, SERIAL, reader))

    assert match.peripheral.address == "AA:00"
    assert match.matched_by == "characteristic"
    assert reader.calls == ["AA:00"]


def test_fallback_decodes_invalid_utf8_lossily() -> None:
    peripherals = [_p("AA:00", "Sensor")]
    reader = FakeReader({"AA:00": [b"\xff\xfe" + SERIAL.encode() + b"\x80"]})

    match = asyncio.run(find_charger(peripherals, SERIAL, reader))
    assert match.matched_by == "characteristic"


def test_first_match_wins_in_enumeration_order() -> None:
    peripherals = [
        _p("AA:00", f"A-{SERIAL}"),
        _p("AA:01", f"B-{SERIAL}"),
    ]
    match = asyncio.run(find_charger(peripherals, SERIAL, FakeReader({})))
    assert match.peripheral.address == "AA:00"


def test_fallback_stops_at_first_matching_peripheral() -> None:
    peripherals = [_p("AA:00"), _p("AA:01"), _p("AA:02")]
    reader = FakeReader(
        {
            "AA:00": [b"battery 97"],
            "AA:01": [b"fw 1.2", SERIAL.encode()],
            "AA:02": [SERIAL.encode()],
        }
    )

    match = asyncio.run(find_charger(peripherals, SERIAL, reader))

    assert match.peripheral.address == "AA:01"
    assert reader.calls == ["AA:00", "AA:01"]


def test_unreachable_peripheral_is_skipped_during_fallback() -> None:
    peripherals = [_p("AA:00"), _p("AA:01")]
    reader = FakeReader({"AA:01": [SERIAL.encode()]}, failing={"AA:00"})

    match = asyncio.run(find_charger(peripherals, SERIAL, reader))
    assert match.peripheral.address == "AA:01"


def test_no_match_raises_device_not_found() -> None:
    peripherals = [_p("AA:00", "OtherDevice"), _p("AA:01")]
    reader = FakeReader({"AA:01": [b"nothing here"]})

    with pytest.raises(DeviceNotFoundError) as exc:
        asyncio.run(find_charger(peripherals, SERIAL, reader))

    assert SERIAL in str(exc.value)


def test_match_by_name_ignores_nameless_and_is_case_sensitive() -> None:
    peripherals = [_p("AA:00"), _p("AA:01", SERIAL.lower())]
    assert match_by_name(peripherals, SERIAL) is None


def test_decode_lossy_replaces_invalid_bytes() -> None:
    assert decode_lossy(b"SN:\xffX") == "SN:\ufffdX"
