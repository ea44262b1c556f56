# inspection/items_client.py

import logging
from typing import Optional

import httpx

from config import Config
from core.http import post_with_retries
from inspection.fields import ItemForm

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


class ItemSaveError(Exception):
    """The item could not be stored; the message is fit to show the inspector."""


class ItemsClient:
    """
    Client for the items persistence route.
    """

    def __init__(self,
                 url: Optional[str] = None,
                 timeout: float = 10.0,
                 max_retries: int = 3,
                 backoff_factor: float = 1.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.url = url
        self.timeout = timeout
        self.max_retries = max_retries
        self.backoff_factor = backoff_factor
        self.transport = transport

    @classmethod
    def from_config(cls, config: dict) -> "ItemsClient":
        http = config.get("http", {})
        return cls(
            url=config["host"]["url"].rstrip("/") + config["items"]["endpoint"],
            timeout=http.get("timeout", 10.0),
            max_retries=http.get("max_retries", 3),
            backoff_factor=http.get("backoff_factor", 1.0),
        )

    async def create(self, form: ItemForm) -> str:
        """Store the item and return the id of the created record."""
        if not form.name.strip():
            raise ItemSaveError("name is required")

        url = self.url or Config.url_for("items")
        payload = form.to_payload()
        headers = {"Accept": "application/json", "Content-Type": "application/json"}
        logger.debug("Create item → %s %r", url, payload)

        try:
            resp = await post_with_retries(
                url,
                json=payload,
                headers=headers,
                timeout=self.timeout,
                max_retries=self.max_retries,
                backoff_factor=self.backoff_factor,
                transport=self.transport,
            )
        except httpx.HTTPStatusError as e:
            raise ItemSaveError(_error_message(e.response)) from e
        except httpx.HTTPError as e:
            raise ItemSaveError(f"Save failed: {e}") from e

        try:
            data = resp.json()
        except ValueError as e:
            raise ItemSaveError("Save failed: invalid response from server") from e
        item_id = data.get("id") if isinstance(data, dict) else None
        if item_id is None:
            raise ItemSaveError(data.get("error", "Save failed") if isinstance(data, dict) else "Save failed")
        logger.info("Item saved with id=%s", item_id)
        return str(item_id)


def _error_message(resp: httpx.Response) -> str:
    try:
        data = resp.json()
    except ValueError:
        data = None
    if isinstance(data, dict) and data.get("error"):
        return str(data["error"])
    return f"Save failed (HTTP {resp.status_code})"
