"""HTTP client for the charger's local status API."""

from __future__ import annotations

import asyncio
import logging

import aiohttp

from chargerctl.core.errors import MalformedResponseError, StatusRequestFailedError
from chargerctl.core.model import ChargerStatus, StatusResult

LOGGER = logging.getLogger(__name__)


class ChargerStatusClient:
    async def fetch_status(
        self,
        url: str,
        serial: str,
        *,
        timeout_s: float = 10.0,
    ) -> StatusResult:
        timeout = aiohttp.ClientTimeout(total=timeout_s)
        LOGGER.debug("POST %s SN=%s", url, serial)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(url, json={"SN": serial}) as response:
                    http_status = response.status
                    if not 200 <= http_status < 300:
                        LOGGER.debug("Charger answered HTTP %s", http_status)
                        return StatusResult(url=url, http_status=http_status, status=None)
                    try:
                        payload = await response.json(content_type=None)
                    except ValueError as exc:
                        raise MalformedResponseError(
                            f"Charger status body from {url} is not valid JSON: {exc}"
                        ) from exc
        except asyncio.TimeoutError as exc:
            raise StatusRequestFailedError(
                f"Charger status request to {url} timed out after {timeout_s:g}s"
            ) from exc
        except aiohttp.ClientError as exc:
            raise StatusRequestFailedError(f"Charger status request to {url} failed: {exc}") from exc

        return StatusResult(
            url=url,
            http_status=http_status,
            status=ChargerStatus.from_payload(payload),
        )
