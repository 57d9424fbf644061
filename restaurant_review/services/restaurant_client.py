"""HTTP client for the restaurant review REST API."""

import logging
from typing import Protocol

import httpx
from pydantic import BaseModel, ValidationError

from restaurant_review.config import Config, get_config
from restaurant_review.errors import EmptyBody, NetworkFailure, ServerError
from restaurant_review.models import (
    PostReviewResponse,
    Restaurant,
    RestaurantResponse,
    Review,
)

logger = logging.getLogger(__name__)


class RestaurantClient(Protocol):
    """Remote operations the review session depends on.

    Both operations raise a ``RestaurantApiError`` subclass on failure.
    """

    async def fetch_restaurant(self, restaurant_id: str) -> Restaurant: ...

    async def post_review(
        self, restaurant_id: str, author: str, text: str
    ) -> tuple[Review, ...]: ...


async def _log_request(request: httpx.Request) -> None:
    logger.debug(f"--> {request.method} {request.url}")
    if request.content:
        logger.debug(f"--> body: {request.content.decode('utf-8', 'replace')}")


async def _log_response(response: httpx.Response) -> None:
    await response.aread()
    logger.debug(
        f"<-- {response.status_code} {response.request.url}: {response.text}"
    )


class HttpRestaurantClient:
    """``RestaurantClient`` backed by ``httpx.AsyncClient``."""

    def __init__(
        self,
        cfg: Config | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            cfg: Configuration to use (global configuration if omitted)
            transport: Optional httpx transport, used by tests
        """
        self.config = cfg or get_config()

        event_hooks = {}
        if self.config.log_http_traffic:
            event_hooks = {"request": [_log_request], "response": [_log_response]}

        self._client = httpx.AsyncClient(
            base_url=self.config.api_base_url,
            timeout=self.config.request_timeout,
            transport=transport,
            event_hooks=event_hooks,
        )
        logger.info(f"Restaurant API client initialized for {self.config.api_base_url}")

    async def __aenter__(self) -> "HttpRestaurantClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying connection pool."""
        await self._client.aclose()

    async def fetch_restaurant(self, restaurant_id: str) -> Restaurant:
        """Fetch a restaurant with its reviews.

        Args:
            restaurant_id: Restaurant identifier

        Returns:
            Restaurant snapshot

        Raises:
            NetworkFailure: The request did not complete
            ServerError: The server rejected the request
            EmptyBody: The response carried no restaurant
        """
        logger.info(f"Fetching restaurant {restaurant_id}")
        response = await self._send("GET", f"detail/{restaurant_id}")
        body = self._parse(response, RestaurantResponse)

        if body.restaurant is None:
            raise EmptyBody(f"No restaurant in response for {restaurant_id}")

        logger.info(
            f"Fetched '{body.restaurant.name}' with "
            f"{len(body.restaurant.customer_reviews)} reviews"
        )
        return body.restaurant

    async def post_review(
        self, restaurant_id: str, author: str, text: str
    ) -> tuple[Review, ...]:
        """Submit a review and return the server's full review list.

        Args:
            restaurant_id: Restaurant identifier
            author: Reviewer name
            text: Review body

        Returns:
            Every review of the restaurant, including the new one

        Raises:
            NetworkFailure: The request did not complete
            ServerError: The server rejected the review
            EmptyBody: The response carried no review list
        """
        logger.info(f"Posting review for {restaurant_id} as {author}")
        headers = {}
        if self.config.has_auth_token():
            headers["Authorization"] = f"token {self.config.api_auth_token}"

        response = await self._send(
            "POST",
            "review",
            data={"id": restaurant_id, "name": author, "review": text},
            headers=headers,
        )
        body = self._parse(response, PostReviewResponse)

        if body.customer_reviews is None:
            raise EmptyBody("No review list in response")

        return body.customer_reviews

    async def _send(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            raise NetworkFailure(f"Request timed out: {method} {url}") from e
        except httpx.TransportError as e:
            raise NetworkFailure(f"Cannot reach {self.config.api_base_url}: {e}") from e

        if not response.is_success:
            raise ServerError(
                f"Server error (status {response.status_code}): "
                f"{self._error_message(response)}",
                status_code=response.status_code,
            )
        return response

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        if response.headers.get("content-type", "").startswith("application/json"):
            try:
                return response.json().get("message") or response.reason_phrase
            except (ValueError, AttributeError):
                pass
        return response.text or response.reason_phrase

    @staticmethod
    def _parse(response: httpx.Response, model: type[BaseModel]):
        if not response.content:
            raise EmptyBody(f"Empty response body (status {response.status_code})")

        try:
            body = model.model_validate(response.json())
        except ValueError as e:
            # json.JSONDecodeError and pydantic.ValidationError
            kind = "Malformed" if isinstance(e, ValidationError) else "Non-JSON"
            raise EmptyBody(f"{kind} response body: {e}") from e

        if body.error:
            raise ServerError(
                body.message or "Server reported an error",
                status_code=response.status_code,
            )
        return body
