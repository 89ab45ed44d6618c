import asyncio
import logging
from pathlib import Path

import aiohttp
import pydantic
import ujson
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ProtocolError, TransportError
from .favorites import FavoritesStore, LocalStorage, annotate_favorites
from .models import RepositoryRecord
from .proxy import RequestType


class ClientConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", env_prefix="TRENDING_", extra="ignore"
    )

    proxy_url: str = "http://localhost:8080/api/github"
    # Device-local state (favorites) lives here
    data_dir: Path = Path.home() / ".trending_stars"

    @property
    def storage_path(self) -> Path:
        return self.data_dir / "storage.json"


class ProxyClient:
    """Talks to the proxy; never sees the GitHub token."""

    def __init__(self, config: ClientConfig | None = None):
        self.config = config or ClientConfig()

    async def fetch(self, request_type: RequestType) -> list[RepositoryRecord]:
        try:
            async with aiohttp.ClientSession(json_serialize=ujson.dumps) as session:
                async with session.post(
                    self.config.proxy_url, json={"type": request_type.value}
                ) as response:
                    text = await response.text(errors="replace")
                    status = response.status
        except aiohttp.ClientError as e:
            raise TransportError(f"Request to proxy failed: {e}") from e
        except asyncio.TimeoutError as e:
            raise TransportError("Request to proxy timed out") from e

        try:
            body = ujson.loads(text)
        except ValueError as e:
            if status != 200:
                raise TransportError(f"Proxy responded with {status}", status=status) from e
            raise ProtocolError(f"Proxy returned malformed JSON: {e}") from e

        if status != 200:
            message = body.get("error") if isinstance(body, dict) else None
            raise TransportError(message or f"Proxy responded with {status}", status=status)

        try:
            return [RepositoryRecord.model_validate(item) for item in body["data"]]
        except (KeyError, TypeError, pydantic.ValidationError) as e:
            raise ProtocolError(f"Unexpected proxy response shape: {e}") from e


def open_favorites(config: ClientConfig) -> FavoritesStore:
    return FavoritesStore(LocalStorage(config.storage_path))


async def load_repositories(
    client: ProxyClient, store: FavoritesStore
) -> list[RepositoryRecord]:
    records = await client.fetch(RequestType.SEARCH_MOST_STARS_PAST_7_DAYS)
    logging.info(f"Fetched {len(records)} repositories")
    return annotate_favorites(records, store)
