"""Trello API client with rate limiting and retry logic."""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from typing import Any, cast

import requests

from pytrello.arguments import Arguments, flatten_arguments
from pytrello.config import TrelloConfig
from pytrello.custom_fields import (
    CustomField,
    CustomFieldItem,
    CustomFieldValue,
    item_request_body,
)
from pytrello.exceptions import (
    TrelloAPIError,
    TrelloAuthenticationError,
    TrelloNotFoundError,
    TrelloRateLimitError,
    TrelloServerError,
)
from pytrello.models import Board, Card, Checklist, List, Member
from pytrello.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.trello.com/1"

# Trello caps list responses at 1000 items
PAGE_SIZE = 1000

MAX_RETRIES = 3
BASE_DELAY = 1.0
RETRY_STATUSES = {429, 500, 502, 503, 504}
POST_RETRY_STATUSES = {429}


class TrelloClient:
    """Authenticated access to the Trello REST API

    Trello API rate limits (per token):
    - 100 requests per 10 seconds = 10 req/sec sustained

    Every request waits for the shared RateLimiter (10 req/sec, burst of 10)
    and is retried with exponential backoff on 429, 5xx and network errors.
    POST requests are retried on 429 only.

    Example:
        >>> client = TrelloClient(api_key="...", token="...")
        >>> board = client.get_board("Bm0nnz1R")
        >>> for field in board.get_custom_fields():
        ...     print(field.name, field.type)
    """

    def __init__(
        self,
        api_key: str,
        token: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        rate_limiter: RateLimiter | None = None,
    ):
        self.api_key = api_key
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.rate_limiter = rate_limiter or RateLimiter()

    @classmethod
    def from_config(cls, config: TrelloConfig) -> TrelloClient:
        return cls(
            api_key=config.api_key,
            token=config.token,
            base_url=config.base_url,
            timeout=config.timeout,
        )

    def _request(
        self,
        method: str,
        endpoint: str,
        args: Mapping[str, Any] | None = None,
        body: Any = None,
    ) -> Any:
        """Make authenticated request to Trello API with rate limiting and retry logic"""
        if not self.rate_limiter.acquire(timeout=30.0):
            raise RuntimeError("Rate limiter timeout - too many requests queued")

        url = f"{self.base_url}/{endpoint}"
        params = {"key": self.api_key, "token": self.token}
        if args:
            params.update(Arguments(args).to_params())

        logger.debug("%s %s", method, endpoint)

        # A POST is resent only after a 429
        idempotent = method.upper() != "POST"
        retry_statuses = RETRY_STATUSES if idempotent else POST_RETRY_STATUSES

        last_exception: requests.RequestException | None = None
        for attempt in range(MAX_RETRIES):
            try:
                response = requests.request(
                    method, url, params=params, json=body, timeout=self.timeout
                )
                response.raise_for_status()
                if not response.content:
                    return None
                return cast(Any, response.json())

            except requests.HTTPError as e:
                last_exception = e
                status_code = e.response.status_code if e.response is not None else 0
                response_text = e.response.text if e.response is not None else ""

                if status_code not in retry_statuses:
                    raise self._translate_error(endpoint, status_code, response_text) from e

                logger.warning(
                    "%s %s returned HTTP %d (attempt %d/%d)",
                    method,
                    endpoint,
                    status_code,
                    attempt + 1,
                    MAX_RETRIES,
                )
                if attempt < MAX_RETRIES - 1:
                    time.sleep(BASE_DELAY * (2**attempt))  # 1s, 2s

            except requests.RequestException as e:
                last_exception = e
                if not idempotent:
                    raise TrelloAPIError(
                        f"Network error during {method} {endpoint}: {str(e)}\n"
                        "The request may already have been applied; check before sending it again.",
                    ) from e
                if attempt < MAX_RETRIES - 1:
                    logger.warning("%s %s failed: %s; retrying", method, endpoint, e)
                    time.sleep(BASE_DELAY * (2**attempt))
                else:
                    raise TrelloAPIError(
                        f"Network error after {MAX_RETRIES} attempts: {str(e)}\n"
                        "Check your internet connection and try again.",
                    ) from e

        if isinstance(last_exception, requests.HTTPError):
            response = last_exception.response
            status_code = response.status_code if response is not None else 0
            response_text = response.text if response is not None else ""

            if status_code == 429:
                raise TrelloRateLimitError(
                    f"Rate limit exceeded after {MAX_RETRIES} retry attempts.\n"
                    "Trello's API rate limit: 100 requests per 10 seconds.\n"
                    "Wait a few minutes and try again.",
                    status_code=status_code,
                    response_text=response_text,
                ) from last_exception
            raise TrelloServerError(
                f"Trello server error (HTTP {status_code}) persisted after {MAX_RETRIES} retries.\n"
                "Trello's servers may be experiencing issues. Try again later.",
                status_code=status_code,
                response_text=response_text,
            ) from last_exception

        raise RuntimeError("Request failed after retries")

    @staticmethod
    def _translate_error(endpoint: str, status_code: int, response_text: str) -> TrelloAPIError:
        """Map a non-retryable HTTP status onto the exception hierarchy"""
        if status_code == 401:
            return TrelloAuthenticationError(
                "Invalid API credentials. Check your TRELLO_API_KEY and TRELLO_TOKEN.\n"
                "Get credentials at: https://trello.com/power-ups/admin",
                status_code=status_code,
                response_text=response_text,
            )
        if status_code == 403:
            return TrelloAuthenticationError(
                f"Access forbidden to resource: {endpoint}\n"
                "Your API token may not have permission to access it.",
                status_code=status_code,
                response_text=response_text,
            )
        if status_code == 404:
            return TrelloNotFoundError(
                f"Resource not found: {endpoint}",
                status_code=status_code,
                response_text=response_text,
            )
        if status_code >= 500:
            return TrelloServerError(
                f"Trello server error (HTTP {status_code}) for {endpoint}",
                status_code=status_code,
                response_text=response_text,
            )
        return TrelloAPIError(
            f"HTTP {status_code} error for {endpoint}: {response_text[:200]}",
            status_code=status_code,
            response_text=response_text,
        )

    def get(self, endpoint: str, args: Mapping[str, Any] | None = None) -> Any:
        return self._request("GET", endpoint, args)

    def post(self, endpoint: str, args: Mapping[str, Any] | None = None) -> Any:
        return self._request("POST", endpoint, args)

    def put(self, endpoint: str, args: Mapping[str, Any] | None = None) -> Any:
        return self._request("PUT", endpoint, args)

    def put_json(
        self, endpoint: str, args: Mapping[str, Any] | None = None, body: Any = None
    ) -> Any:
        """PUT with a JSON request body (query arguments still carry auth)"""
        return self._request("PUT", endpoint, args, body=body)

    def delete(self, endpoint: str, args: Mapping[str, Any] | None = None) -> Any:
        return self._request("DELETE", endpoint, args)

    def paginated_get(self, endpoint: str, args: Mapping[str, Any] | None = None) -> list[dict]:
        """GET a list endpoint, following Trello's 1000-item pages

        Trello pages backwards with the 'before' parameter; the ID of the last
        item of one page is the 'before' of the next. When the caller passes
        its own 'limit', a single request is made with the arguments as given.

        Args:
            endpoint: API endpoint to request
            args: Query arguments (before is managed here unless limit is set)

        Returns:
            Complete list of all items across all pages
        """
        if args and args.get("limit") is not None:
            return cast(list[dict], self.get(endpoint, args))

        all_items: list[dict] = []
        request_args = Arguments(args or {})
        request_args["limit"] = PAGE_SIZE

        while True:
            page_items = self.get(endpoint, request_args)

            if not isinstance(page_items, list):
                return cast(list[dict], page_items)

            all_items.extend(page_items)

            if len(page_items) < PAGE_SIZE:
                break

            last_item_id = page_items[-1].get("id")
            if not last_item_id:
                break

            logger.debug("Fetching next page of %s before %s", endpoint, last_item_id)
            request_args["before"] = last_item_id

        return all_items

    # Resources

    def get_board(self, board_id: str, args: Mapping[str, Any] | None = None) -> Board:
        return Board.from_dict(self.get(f"boards/{board_id}", args), self)

    def list_boards(
        self, member_id: str = "me", args: Mapping[str, Any] | None = None
    ) -> list[Board]:
        """Boards visible to a member (by default, the token's owner)"""
        data = self.get(f"members/{member_id}/boards", args)
        return [Board.from_dict(b, self) for b in data]

    def get_list(self, list_id: str, args: Mapping[str, Any] | None = None) -> List:
        return List.from_dict(self.get(f"lists/{list_id}", args), self)

    def get_card(self, card_id: str, args: Mapping[str, Any] | None = None) -> Card:
        return Card.from_dict(self.get(f"cards/{card_id}", args), self)

    def get_member(self, member_id: str, args: Mapping[str, Any] | None = None) -> Member:
        return Member.from_dict(self.get(f"members/{member_id}", args))

    def get_checklist(self, checklist_id: str, args: Mapping[str, Any] | None = None) -> Checklist:
        return Checklist.from_dict(self.get(f"checklists/{checklist_id}", args))

    def create_card(self, card: Card, args: Mapping[str, Any] | None = None) -> Card:
        """Create ``card`` on Trello; ``card`` is updated from the response

        ``card.id_list`` must name the destination list.
        """
        data = self.post("cards", flatten_arguments([card.creation_arguments(), args]))
        card._refresh_from(Card.from_dict(data))
        card.set_client(self)
        return card

    # Custom fields

    def get_custom_field(
        self, field_id: str, args: Mapping[str, Any] | None = None
    ) -> CustomField:
        return CustomField.from_dict(self.get(f"customFields/{field_id}", args))

    def set_custom_field(
        self,
        card_id: str,
        field_id: str,
        value: Any,
        args: Mapping[str, Any] | None = None,
    ) -> Any:
        """Set a custom field on a card

        Args:
            card_id: Card to update
            field_id: Custom field to set
            value: str, int, float, bool or datetime (or a CustomFieldValue);
                   an empty string clears the field
            args: Extra query arguments

        Raises:
            UnsupportedTypeError: If ``value`` cannot be sent as a custom field
        """
        if not isinstance(value, CustomFieldValue):
            value = CustomFieldValue(value)
        # Encoding errors surface before any request is attempted
        body = item_request_body(value)
        logger.debug("Setting custom field %s on card %s", field_id, card_id)
        return self.put_json(f"cards/{card_id}/customField/{field_id}/item", args, body)

    def set_custom_field_by_item(
        self, item: CustomFieldItem, args: Mapping[str, Any] | None = None
    ) -> Any:
        """Set ``item.value`` on card ``item.id_model`` for field ``item.id_custom_field``

        Raises:
            UnsupportedModelTypeError: If the item targets anything but a card
        """
        item.validate_model_type()
        return self.set_custom_field(item.id_model, item.id_custom_field, item.value, args)
