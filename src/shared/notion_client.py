# Notion REST API client

import logging
import time
from typing import Optional, List, Dict, Any

import httpx

from src.specs.common.errors import ConfigurationError, NotionAPIError, ResourceNotFoundError

class NotionClient:
    BASE_URL = "https://api.notion.com/v1"
    NOTION_VERSION = "2022-06-28"
    PAGE_SIZE = 100            # Notion maximum
    REQUEST_TIMEOUT = 30.0     # seconds

    def __init__(
        self,
        api_key: Optional[str],
        *,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the Notion client with the integration token"""
        if not api_key:
            raise ConfigurationError("NOTION_API_KEY is not configured.")

        self._client = httpx.AsyncClient(
            base_url=base_url or self.BASE_URL,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Notion-Version": self.NOTION_VERSION,
                "Content-Type": "application/json",
            },
            timeout=httpx.Timeout(self.REQUEST_TIMEOUT),
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        start_time = time.time()
        try:
            response = await self._client.request(method, path, json=json, params=params)
        except httpx.HTTPError as e:
            logging.error(f"Notion request {method} {path} failed: {e}")
            raise NotionAPIError(f"Notion request failed: {e}") from e

        if response.is_error:
            notion_code = None
            message = response.text
            try:
                body = response.json()
                notion_code = body.get("code")
                message = body.get("message") or message
            except ValueError:
                pass
            logging.warning(
                f"Notion {method} {path} returned {response.status_code}",
                extra={"custom_dimensions": {"notionCode": notion_code, "notionMessage": message}},
            )
            raise NotionAPIError(
                f"Notion API error {response.status_code}: {message}",
                http_status=response.status_code,
                notion_code=notion_code,
            )

        logging.debug(f"Notion {method} {path} completed in {time.time() - start_time:.2f}s")
        try:
            return response.json()
        except ValueError as e:
            raise NotionAPIError(f"Notion returned a non-JSON body for {method} {path}") from e

    async def query_database(
        self,
        database_id: str,
        filter: Optional[Dict[str, Any]] = None,
        sorts: Optional[List[Dict[str, Any]]] = None,
    ) -> List[Dict[str, Any]]:
        """
        Query a database, following pagination until every result is read

        Args:
            database_id: ID of the database to query
            filter: Optional Notion filter object
            sorts: Optional list of Notion sort objects

        Returns:
            All result entries in the order Notion returned them

        Raises:
            NotionAPIError: If any page of the query fails
        """
        payload: Dict[str, Any] = {"page_size": self.PAGE_SIZE}
        if filter:
            payload["filter"] = filter
        if sorts:
            payload["sorts"] = sorts

        results: List[Dict[str, Any]] = []
        while True:
            data = await self._request("POST", f"/databases/{database_id}/query", json=payload)
            results.extend(data.get("results") or [])
            next_cursor = data.get("next_cursor")
            if not data.get("has_more") or not next_cursor:
                break
            payload["start_cursor"] = next_cursor

        logging.debug(f"Queried {len(results)} entries from database '{database_id}'")
        return results

    async def retrieve_page(self, page_id: str) -> Dict[str, Any]:
        """
        Retrieve a page by ID

        Raises:
            ResourceNotFoundError: If the page does not exist or is not shared with the integration
            NotionAPIError: For other errors
        """
        try:
            return await self._request("GET", f"/pages/{page_id}")
        except NotionAPIError as e:
            if e.http_status == 404:
                raise ResourceNotFoundError("Page", page_id, details=e.details) from e
            raise

    async def create_page(self, database_id: str, properties: Dict[str, Any]) -> str:
        """Create a page in a database and return its new ID"""
        body = {"parent": {"database_id": database_id}, "properties": properties}
        page = await self._request("POST", "/pages", json=body)
        return page["id"]

    async def update_page(self, page_id: str, properties: Dict[str, Any]) -> None:
        """Patch the given properties of a page; properties not sent are left unchanged"""
        try:
            await self._request("PATCH", f"/pages/{page_id}", json={"properties": properties})
        except NotionAPIError as e:
            if e.http_status == 404:
                raise ResourceNotFoundError("Page", page_id, details=e.details) from e
            raise

    async def list_users(self) -> List[Dict[str, Any]]:
        """List every user of the workspace, following pagination"""
        params: Dict[str, Any] = {"page_size": self.PAGE_SIZE}
        users: List[Dict[str, Any]] = []
        while True:
            data = await self._request("GET", "/users", params=params)
            users.extend(data.get("results") or [])
            next_cursor = data.get("next_cursor")
            if not data.get("has_more") or not next_cursor:
                break
            params["start_cursor"] = next_cursor
        return users
