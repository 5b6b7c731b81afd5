"""HTTP client for the design gallery service."""
from typing import Any, Optional

import httpx

from designs.application.schemas import DesignRead
from .settings import get_client_settings

NETWORK_ERROR = "Network error. Check the connection and try again."


class GalleryApiError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    @property
    def not_found(self) -> bool:
        return self.status_code == 404


class GalleryApi:
    """
    Async client for ``/api/designs``.

    Failures raise GalleryApiError carrying the server's ``error`` message
    (or the HTTP reason phrase when the body has none). Nothing is retried.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_client_settings()
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.GALLERY_API_URL,
            timeout=timeout if timeout is not None else settings.GALLERY_API_TIMEOUT,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )

    async def __aenter__(self) -> "GalleryApi":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, json: Any = None) -> Any:
        try:
            response = await self._client.request(method, path, json=json)
        except httpx.HTTPError as e:
            raise GalleryApiError(NETWORK_ERROR) from e

        try:
            data = response.json()
        except ValueError:
            data = {}

        if response.is_error:
            message = data.get("error") if isinstance(data, dict) else None
            raise GalleryApiError(message or response.reason_phrase, response.status_code)
        return data

    async def list_designs(self) -> list[DesignRead]:
        data = await self._request("GET", "/designs")
        return [DesignRead.model_validate(item) for item in data]

    async def get_design(self, design_id: str) -> DesignRead:
        return DesignRead.model_validate(await self._request("GET", f"/designs/{design_id}"))

    async def create_design(self, name: str, type: str, images: list[str]) -> DesignRead:
        body = {"name": name, "type": type, "images": images}
        return DesignRead.model_validate(await self._request("POST", "/designs", json=body))

    async def delete_design(self, design_id: str) -> bool:
        data = await self._request("DELETE", f"/designs/{design_id}")
        return bool(data.get("deleted"))
