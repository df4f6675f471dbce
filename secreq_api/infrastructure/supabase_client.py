# File: secreq_api/infrastructure/supabase_client.py
import asyncio
from typing import Optional

import structlog
from supabase import AsyncClient, acreate_client

log = structlog.get_logger(__name__)


class SupabaseClientProvider:
    """Creates the async Supabase client on first use and reuses it for the process lifetime."""

    def __init__(self, url: str, key: str, name: str):
        self._url = url
        self._key = key
        self._name = name
        self._client: Optional[AsyncClient] = None
        self._lock = asyncio.Lock()

    async def get(self) -> AsyncClient:
        if self._client is not None:
            return self._client
        async with self._lock:
            if self._client is None:
                if not self._key:
                    raise ConnectionError(f"Supabase key for '{self._name}' client is not configured.")
                log.info("Initializing Supabase client", client=self._name, url=self._url)
                self._client = await acreate_client(self._url, self._key)
        return self._client
