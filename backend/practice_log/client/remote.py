"""Remote store adapter: the only client component that leaves the process."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from practice_log.client.errors import RemoteStoreError

logger = logging.getLogger(__name__)


class RemoteStore:
    """Interface of the hosted relational store.

    Rows use the wire shape of the ``sessions`` and ``plan`` tables.
    """

    async def fetch_sessions(
        self,
        user_id: str,
        *,
        start: Optional[str] = None,
        end: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        raise NotImplementedError

    async def insert_sessions(self, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Insert a batch and return only the rows the store created."""
        raise NotImplementedError

    async def update_session(self, session_id: int, user_id: str, patch: Dict[str, Any]) -> Dict[str, Any]:
        raise NotImplementedError

    async def delete_session(self, session_id: int, user_id: str) -> None:
        raise NotImplementedError

    async def fetch_plan(self, user_id: str) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    async def insert_plan(self, row: Dict[str, Any]) -> Dict[str, Any]:
        raise NotImplementedError

    async def upsert_plan(self, row: Dict[str, Any]) -> Dict[str, Any]:
        raise NotImplementedError

    async def aclose(self) -> None:
        return None


class HttpRemoteStore(RemoteStore):
    """RemoteStore over the Practice Log HTTP API."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._client = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)

    async def fetch_sessions(
        self,
        user_id: str,
        *,
        start: Optional[str] = None,
        end: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        params = {"user_id": user_id}
        if start:
            params["start"] = start
        if end:
            params["end"] = end
        return await self._request("GET", "/sessions", params=params)

    async def insert_sessions(self, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        payload = await self._request("POST", "/sessions", json={"rows": rows})
        skipped = payload.get("skipped", 0)
        if skipped:
            logger.info("Remote store skipped %s of %s rows that already existed", skipped, len(rows))
        return payload.get("created", [])

    async def update_session(self, session_id: int, user_id: str, patch: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("PATCH", f"/sessions/{session_id}", json={"user_id": user_id, **patch})

    async def delete_session(self, session_id: int, user_id: str) -> None:
        await self._request("DELETE", f"/sessions/{session_id}", params={"user_id": user_id})

    async def fetch_plan(self, user_id: str) -> Optional[Dict[str, Any]]:
        try:
            return await self._request("GET", "/plan", params={"user_id": user_id})
        except RemoteStoreError as exc:
            if exc.status_code == 404:
                return None
            raise

    async def insert_plan(self, row: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("POST", "/plan", json=row)

    async def upsert_plan(self, row: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("PUT", "/plan", json=row)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            raise RemoteStoreError(f"{method} {path} failed: {exc}") from exc

        if response.is_error:
            detail = _error_detail(response)
            raise RemoteStoreError(
                f"{method} {path} returned {response.status_code}: {detail}",
                status_code=response.status_code,
            )
        if response.status_code == 204 or not response.content:
            return None
        return response.json()


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(body, dict) and "detail" in body:
        return str(body["detail"])
    return str(body)[:200]
