"""
Client caller for the procedure endpoint

Issues queries with GET and mutations with POST, turns error envelopes back into
typed exceptions, caches query results and drops them after mutations in the
same namespace.
"""

import json
import logging
from typing import Any, Dict, List, Optional, Tuple

import httpx

from models.user import UserRecord
from rpc.errors import ProcedureError, StoreConnectionError, error_from_payload

logger = logging.getLogger(__name__)

CacheKey = Tuple[str, str]


class ProcedureClient:
    """HTTP client for /api/rpc procedure calls"""

    def __init__(
        self,
        base_url: str = "http://localhost:8080",
        prefix: str = "/api/rpc",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.base_url = base_url.rstrip("/")
        self.prefix = prefix
        self._client = httpx.AsyncClient(base_url=self.base_url, timeout=timeout, transport=transport)
        self._cache: Dict[CacheKey, Any] = {}
        self.in_flight = 0

    async def __aenter__(self) -> "ProcedureClient":
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    async def aclose(self):
        await self._client.aclose()

    @property
    def is_loading(self) -> bool:
        return self.in_flight > 0

    async def query(self, path: str, input: Any = None, use_cache: bool = True) -> Any:
        """Call a read procedure"""
        key = (path, json.dumps(input, sort_keys=True))
        if use_cache and key in self._cache:
            return self._cache[key]

        params = {"input": json.dumps(input)} if input is not None else None
        data = await self._send("GET", path, params=params)
        self._cache[key] = data
        return data

    async def mutate(self, path: str, input: Any = None) -> Any:
        """Call a write procedure; cached queries of its namespace are dropped on success"""
        data = await self._send("POST", path, json_body=input if input is not None else {})
        namespace = path.partition(".")[0]
        self.invalidate(f"{namespace}.")
        return data

    def invalidate(self, prefix: str = ""):
        """Drop cached query results whose path starts with prefix"""
        stale = [key for key in self._cache if key[0].startswith(prefix)]
        for key in stale:
            del self._cache[key]
        if stale:
            logger.debug(f"Invalidated {len(stale)} cached queries for {prefix!r}")

    async def _send(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, str]] = None,
        json_body: Any = None
    ) -> Any:
        url = f"{self.prefix}/{path}"
        self.in_flight += 1
        try:
            if method == "GET":
                response = await self._client.get(url, params=params)
            else:
                response = await self._client.post(url, json=json_body)
        except httpx.RequestError as e:
            logger.warning(f"Request to {path} failed: {e}")
            raise StoreConnectionError(f"Could not reach server: {e}") from e
        finally:
            self.in_flight -= 1

        try:
            envelope = response.json()
        except ValueError:
            raise ProcedureError(
                f"Unexpected response from {path} (HTTP {response.status_code})",
                {"status_code": response.status_code, "body": response.text[:500]}
            )

        if not envelope.get("ok"):
            raise error_from_payload(envelope.get("error") or {})
        return envelope.get("data")


class UserClient:
    """Typed wrapper for the user procedures"""

    def __init__(self, client: ProcedureClient):
        self.client = client

    async def list(self) -> List[UserRecord]:
        data = await self.client.query("user.list")
        return [UserRecord.model_validate(item) for item in data]

    async def create(self, name: str, email: str) -> UserRecord:
        data = await self.client.mutate("user.create", {"name": name, "email": email})
        return UserRecord.model_validate(data)

    async def delete(self, user_id: int) -> bool:
        data = await self.client.mutate("user.delete", {"id": user_id})
        return bool(data.get("success"))
