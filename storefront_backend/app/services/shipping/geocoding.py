"""
Postal code geocoding

Resolves a CEP to {state, city} through ViaCEP. The contract is "location or
None": timeouts, transport errors, non-200 responses, bad JSON and ViaCEP's
{"erro": true} all come back as None so the engine can report one
validation error. Single attempt, no retries.
"""
import asyncio
import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from app.core.config import settings

logger = logging.getLogger(__name__)

_STATE_CODE = re.compile(r"^[A-Z]{2}$")


@dataclass(frozen=True)
class Location:
    state: str
    city: str


class LocationResolver(ABC):

    @abstractmethod
    async def resolve_location(self, postal_code: str) -> Optional[Location]:
        """Location for an 8-digit postal code, or None if it can't be resolved."""
        pass


def parse_viacep_payload(payload: Any) -> Optional[Location]:
    if not isinstance(payload, dict) or payload.get("erro"):
        return None

    state = str(payload.get("uf") or "").strip().upper()
    if not _STATE_CODE.match(state):
        return None

    city = str(payload.get("localidade") or "").strip()
    return Location(state=state, city=city)


class ViaCepLocationResolver(LocationResolver):
    """
    ViaCEP client.

    Owns a lazily created httpx.AsyncClient; call close() on shutdown.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = (base_url or settings.GEOCODING_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.GEOCODING_TIMEOUT_SECONDS
        self._client = client

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                headers={"Accept": "application/json"},
            )
        return self._client

    async def resolve_location(self, postal_code: str) -> Optional[Location]:
        url = f"{self.base_url}/{postal_code}/json/"
        try:
            response = await asyncio.wait_for(
                self._get_client().get(url),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(f"Geocoding timed out for {postal_code} after {self.timeout}s")
            return None
        except httpx.HTTPError as e:
            logger.warning(f"Geocoding request failed for {postal_code}: {type(e).__name__}: {e}")
            return None

        if response.status_code != 200:
            logger.warning(f"Geocoding returned HTTP {response.status_code} for {postal_code}")
            return None

        try:
            payload = response.json()
        except ValueError:
            logger.warning(f"Geocoding returned a non-JSON body for {postal_code}")
            return None

        location = parse_viacep_payload(payload)
        if location is None:
            logger.info(f"Geocoding found no location for {postal_code}")
        return location

    async def close(self):
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
