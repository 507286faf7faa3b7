"""
HTTP client for the Engagerr content graph API.

Used by the renderer to fetch families and submit mutations. Transport
failures and unexpected responses become FetchFailureError; structural
rejections (409) are rebuilt into the same GraphError subclasses the
backend raised, carrying its human-readable reason.
"""

import httpx

from engagerr.config import ApiConfig
from engagerr.models import (
    ContentRelationship,
    ContentSuggestion,
    CreateRelationshipRequest,
    FamilySnapshot,
    parse_suggestions,
)
from engagerr.utils.exceptions import (
    STRUCTURAL_ERRORS,
    ContentNotFoundError,
    FetchFailureError,
    NotFoundError,
    RelationshipNotFoundError,
    StructuralConflictError,
    SuggestionNotFoundError,
    ValidationError,
)
from engagerr.utils.logger import get_logger

logger = get_logger(__name__)

_NOT_FOUND_ERRORS: dict[str, type[NotFoundError]] = {
    cls.error_type: cls
    for cls in (ContentNotFoundError, RelationshipNotFoundError, SuggestionNotFoundError)
}


class EngagerrClient:
    """Async client for the content graph endpoints."""

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize client.

        Args:
            base_url: API base URL
            timeout: Request timeout in seconds
            transport: Optional transport (e.g. ASGITransport for in-process use)
        """
        self.base_url = base_url
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def from_config(cls, config: ApiConfig) -> "EngagerrClient":
        return cls(base_url=config.base_url, timeout=config.timeout)

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the underlying HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                transport=self._transport,
                headers={"Content-Type": "application/json"},
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    async def __aenter__(self) -> "EngagerrClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    def _handle_error(self, response: httpx.Response) -> None:
        """Raise the domain error matching an error response."""
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        error_type = body.get("error_type", "")
        message = body.get("message") or response.text or f"HTTP {response.status_code}"
        context = body.get("context") or {}

        if response.status_code == 409:
            error_cls = STRUCTURAL_ERRORS.get(error_type, StructuralConflictError)
            raise error_cls(message, context=context)
        if response.status_code == 404:
            error_cls = _NOT_FOUND_ERRORS.get(error_type, NotFoundError)
            raise error_cls(message, context=context)
        if response.status_code == 422:
            raise ValidationError(message, context=context)
        raise FetchFailureError(
            f"Request failed with HTTP {response.status_code}: {message}",
            context={"status_code": response.status_code, "url": str(response.request.url)},
        )

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        client = await self._get_client()
        try:
            response = await client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.warning(f"{method} {path} failed: {e}")
            raise FetchFailureError(
                f"Could not reach content graph API: {e}", context={"path": path}
            ) from e

        if response.status_code >= 400:
            self._handle_error(response)
        return response

    # ═══════════════════════════════════════════════════════════
    # FAMILIES
    # ═══════════════════════════════════════════════════════════

    async def get_family_snapshot(self, content_id: str) -> FamilySnapshot:
        response = await self._request("GET", f"/content/{content_id}/family")
        return FamilySnapshot.model_validate(response.json())

    # ═══════════════════════════════════════════════════════════
    # SUGGESTIONS
    # ═══════════════════════════════════════════════════════════

    async def list_suggestions(
        self,
        content_id: str,
        confidence_threshold: float | None = None,
        limit: int | None = None,
    ) -> list[ContentSuggestion]:
        params: dict[str, float | int] = {}
        if confidence_threshold is not None:
            params["confidence_threshold"] = confidence_threshold
        if limit is not None:
            params["limit"] = limit
        response = await self._request("GET", f"/content/{content_id}/suggestions", params=params)
        return parse_suggestions(response.json())

    async def approve_suggestion(self, suggestion_id: str) -> ContentRelationship:
        response = await self._request("POST", f"/content/suggestions/{suggestion_id}/approve")
        return ContentRelationship.model_validate(response.json())

    async def reject_suggestion(self, suggestion_id: str) -> None:
        await self._request("POST", f"/content/suggestions/{suggestion_id}/reject")

    # ═══════════════════════════════════════════════════════════
    # RELATIONSHIPS
    # ═══════════════════════════════════════════════════════════

    async def create_relationship(self, request: CreateRelationshipRequest) -> ContentRelationship:
        response = await self._request(
            "POST", "/content/relationships", json=request.model_dump(mode="json")
        )
        return ContentRelationship.model_validate(response.json())

    async def delete_relationship(self, relationship_id: str) -> None:
        await self._request("DELETE", f"/content/relationships/{relationship_id}")
