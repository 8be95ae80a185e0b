"""Typer CLI entrypoint."""

from __future__ import annotations

import logging
from dataclasses import asdict
from pathlib import Path

import typer

from chargerctl.api import Client
from chargerctl.core.config import load_config
from chargerctl.core.errors import ChargerctlError
from chargerctl.core.model import DiscoveredPeripheral, MatchResult, StatusResult

app = typer.Typer(help="Find an EV charger over Bluetooth LE and query its charging status")


@app.callback()
def main(
    ctx: typer.Context,
    config: Path | None = typer.Option(None, "--config", help="Path to a YAML config file"),
    serial: str | None = typer.Option(None, "--serial", help="Charger serial number"),
    host: str | None = typer.Option(None, "--host", help="Charger IP address or hostname"),
    port: int | None = typer.Option(None, "--port", help="Charger HTTP port"),
    scan_timeout: float | None = typer.Option(None, "--scan-timeout", help="BLE scan deadline in seconds"),
    request_timeout: float | None = typer.Option(
        None, "--request-timeout", help="HTTP request timeout in seconds"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(levelname)s - [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
    )
    ctx.obj = {
        "path": config,
        "overrides": {
            "serial_number": serial,
            "charger_host": host,
            "charger_port": port,
            "scan_timeout_s": scan_timeout,
            "request_timeout_s": request_timeout,
        },
    }


def _build_client(ctx: typer.Context) -> Client:
    options = ctx.obj or {}
    loaded = load_config(options.get("path"), overrides=options.get("overrides"))
    return Client(loaded.config)


def _echo_discovered(peripheral: DiscoveredPeripheral) -> None:
    if peripheral.name:
        typer.echo(f"Found device: {peripheral.name}")


def _echo_status(result: StatusResult) -> None:
    if result.status is None:
        typer.echo(f"Failed to get charger status. HTTP Error: {result.http_status}")
        return
    if result.status.is_charging:
        typer.echo("The charger is currently in charging mode.")
    else:
        typer.echo("The charger is not charging.")
    typer.echo(f"  WorkMode={result.status.work_mode}")


@app.command("scan")
def scan(ctx: typer.Context) -> None:
    """List BLE peripherals seen during one scan window."""
    try:
        client = _build_client(ctx)
        peripherals = client.scan()
        if not peripherals:
            typer.echo("No Bluetooth devices found")
            return
        for peripheral in peripherals:
            typer.echo(f"{peripheral.address} {peripheral.name or '<unnamed>'}")
    except ChargerctlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("find")
def find(ctx: typer.Context) -> None:
    """Scan and identify the charger by serial number."""
    try:
        client = _build_client(ctx)
        typer.echo("Scanning for available Bluetooth devices...")
        match = client.find_charger(on_discovered=_echo_discovered)
        typer.echo(
            f"Charger {client.config.serial_number}: {match.peripheral.address} "
            f"({match.peripheral.name or '<unnamed>'}) matched by {match.matched_by}"
        )
    except ChargerctlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("status")
def status(ctx: typer.Context) -> None:
    """Ask the charger's HTTP API whether it is charging."""
    try:
        client = _build_client(ctx)
        _echo_status(client.check_status())
    except ChargerctlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("provision")
def provision(ctx: typer.Context) -> None:
    """Find and connect to the charger over BLE, then check its status."""
    try:
        client = _build_client(ctx)
        serial = client.config.serial_number

        def _echo_connected(_: MatchResult) -> None:
            typer.echo(f"Bluetooth connection established with charger SN: {serial}")

        typer.echo("Scanning for available Bluetooth devices...")
        result = client.provision(on_discovered=_echo_discovered, on_connected=_echo_connected)
        for warning in result.warnings:
            typer.echo(f"Warning: {warning}", err=True)
        _echo_status(result.status)
    except ChargerctlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("config")
def show_config(ctx: typer.Context) -> None:
    """Print the effective configuration."""
    try:
        options = ctx.obj or {}
        loaded = load_config(options.get("path"), overrides=options.get("overrides"))
        typer.echo(f"source: {loaded.source or '<defaults>'}")
        for key, value in asdict(loaded.config).items():
            typer.echo(f"{key}: {value}")
        typer.echo(f"status_url: {loaded.config.status_url}")
    except ChargerctlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


def run() -> None:
    app()


if __name__ == "__main__":
    run()
