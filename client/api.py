"""
HTTP client for the Registration Portal API

Every failure surfaces as ApiError carrying the server's `message`
verbatim so forms and dashboards can show it as-is.
"""

from typing import Any, Dict, List, Optional

import httpx

from client.config import ClientConfig


class ApiError(Exception):
    """
    A failed API call.

    status_code is 0 when the server could not be reached at all.
    """

    def __init__(self, message: str, status_code: int = 0, errors: Optional[List[Dict[str, str]]] = None):
        self.message = message
        self.status_code = status_code
        self.errors = errors or []
        super().__init__(message)

    @property
    def retryable(self) -> bool:
        return self.status_code == 0 or self.status_code >= 500


class RegistrationApi:
    """
    Thin async wrapper over the registrations endpoints.

    Usage:
        async with RegistrationApi(config) as api:
            created = await api.create_registration({...})
    """

    def __init__(self, config: ClientConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        self._client = httpx.AsyncClient(
            base_url=config.api_base_url.rstrip("/"),
            timeout=config.timeout,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )

    async def __aenter__(self) -> "RegistrationApi":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.TimeoutException:
            raise ApiError("Request timed out. Please try again.")
        except httpx.HTTPError as e:
            raise ApiError(f"Could not reach the server: {e}")

        try:
            body = response.json()
        except ValueError:
            body = None

        if response.is_success and isinstance(body, dict):
            return body

        if isinstance(body, dict) and body.get("message"):
            raise ApiError(body["message"], response.status_code, body.get("errors"))
        if response.is_success:
            raise ApiError("Unexpected response from server", response.status_code)
        raise ApiError(f"Request failed with status {response.status_code}", response.status_code)

    # ==================== REGISTRATIONS ====================

    async def create_registration(self, data: Dict[str, Any]) -> Dict[str, Any]:
        body = await self._request("POST", "/registrations", json=data)
        return body["data"]

    async def list_registrations(
        self,
        page: int = 1,
        page_size: Optional[int] = None,
        search: Optional[str] = None,
        service: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Returns the full list envelope (data plus pagination meta)"""
        params: Dict[str, Any] = {"page": page, "pageSize": page_size or self.config.page_size}
        if search:
            params["search"] = search
        if service and service != "All":
            params["service"] = service
        return await self._request("GET", "/registrations", params=params)

    async def get_registration(self, registration_id: str) -> Dict[str, Any]:
        body = await self._request("GET", f"/registrations/{registration_id}")
        return body["data"]

    async def delete_registration(self, registration_id: str) -> str:
        body = await self._request("DELETE", f"/registrations/{registration_id}")
        return body.get("message", "Registration deleted")

    async def registration_stats(self) -> Dict[str, Any]:
        body = await self._request("GET", "/registrations/stats")
        return body["data"]

    async def get_catalog(self) -> Dict[str, List[str]]:
        body = await self._request("GET", "/catalog")
        return body["data"]

    async def check_connection(self) -> bool:
        """Check if server is reachable"""
        try:
            await self._request("GET", "/health/live")
            return True
        except ApiError:
            return False
