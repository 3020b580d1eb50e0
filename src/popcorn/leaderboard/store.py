"""Remote document store clients.

The leaderboard lives in a single JSON document. Reads return the whole
document and writes overwrite it unconditionally; there is no
compare-and-swap.
"""

import asyncio
import copy
import logging
from typing import Any, Dict, Optional, Protocol, runtime_checkable

import aiohttp

from popcorn.errors import StoreUnavailable

logger = logging.getLogger(__name__)

Document = Dict[str, Any]


@runtime_checkable
class DocumentStore(Protocol):
    """Opaque key-value document service.

    Both operations raise StoreUnavailable when the service cannot be
    reached or answers with a non-success status.
    """

    async def read(self) -> Document:
        ...

    async def write(self, document: Document) -> Document:
        ...


class JsonBinStore:
    """Document store backed by a JSONBin.io bin."""

    DEFAULT_BASE_URL = "https://api.jsonbin.io/v3"

    def __init__(
        self,
        bin_id: str,
        master_key: str,
        base_url: Optional[str] = None,
        timeout: float = 15.0,
    ):
        """Initialize the store client.

        Args:
            bin_id: JSONBin bin identifier
            master_key: JSONBin X-Master-Key
            base_url: API root, without a trailing slash
            timeout: Total timeout per request in seconds
        """
        self._bin_id = bin_id
        self._master_key = master_key
        self._base_url = (base_url or self.DEFAULT_BASE_URL).rstrip("/")
        self._timeout = timeout
        self._session: Optional[aiohttp.ClientSession] = None

    @property
    def bin_url(self) -> str:
        return f"{self._base_url}/b/{self._bin_id}"

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._timeout),
                headers={"X-Master-Key": self._master_key},
            )
        return self._session

    async def read(self) -> Document:
        """Fetch the latest version of the document."""
        session = await self._get_session()
        url = f"{self.bin_url}/latest"
        try:
            async with session.get(url, headers={"X-Bin-Meta": "false"}) as response:
                if not response.ok:
                    logger.error(f"JSONBin read failed: HTTP {response.status}")
                    raise StoreUnavailable(f"read failed with HTTP {response.status}")
                return await response.json(content_type=None)
        except asyncio.TimeoutError as e:
            logger.error("Timeout reading leaderboard")
            raise StoreUnavailable("read timed out") from e
        except (aiohttp.ClientError, ValueError) as e:
            logger.error(f"Network error reading leaderboard: {e}")
            raise StoreUnavailable(f"read failed: {e}") from e

    async def write(self, document: Document) -> Document:
        """Overwrite the document and return what the service stored."""
        session = await self._get_session()
        try:
            async with session.put(self.bin_url, json=document) as response:
                if not response.ok:
                    logger.error(f"JSONBin write failed: HTTP {response.status}")
                    raise StoreUnavailable(f"write failed with HTTP {response.status}")
                data = await response.json(content_type=None)
        except asyncio.TimeoutError as e:
            logger.error("Timeout writing leaderboard")
            raise StoreUnavailable("write timed out") from e
        except (aiohttp.ClientError, ValueError) as e:
            logger.error(f"Network error writing leaderboard: {e}")
            raise StoreUnavailable(f"write failed: {e}") from e

        # Without X-Bin-Meta: false the stored document comes wrapped in "record"
        if isinstance(data, dict) and "record" in data:
            return data["record"]
        return data

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None


class InMemoryStore:
    """Process-local document store.

    Used for offline play when no bin is configured, and in tests.
    """

    def __init__(self, document: Optional[Document] = None):
        self._document: Document = copy.deepcopy(document) if document else {"scores": []}
        self.reads = 0
        self.writes = 0

    async def read(self) -> Document:
        self.reads += 1
        return copy.deepcopy(self._document)

    async def write(self, document: Document) -> Document:
        self.writes += 1
        self._document = copy.deepcopy(document)
        return copy.deepcopy(self._document)

    async def close(self) -> None:
        pass

    @property
    def document(self) -> Document:
        return copy.deepcopy(self._document)
