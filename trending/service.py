import asyncio
import logging
import time

import aiohttp
import pydantic
import ujson
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ProtocolError, TransportError
from .models import SearchPage


class GitHubConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", env_prefix="GITHUB_", extra="ignore"
    )

    api_url: str = "https://api.github.com/graphql"
    token: str

    connection_limit: int = 4


class GitHubService:
    """Holds the GitHub token and the HTTP session. Lives on the server side only."""

    def __init__(self, config: GitHubConfig, session: aiohttp.ClientSession):
        self.settings = config
        self.session = session

    @classmethod
    async def create(cls, config: GitHubConfig | None = None):
        config = config or GitHubConfig()
        connector = aiohttp.TCPConnector(limit=config.connection_limit)
        session = aiohttp.ClientSession(connector=connector, json_serialize=ujson.dumps)
        return cls(config, session)

    async def close(self):
        await self.session.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.close()

    async def fetch_page(self, query: str, variables: dict) -> SearchPage:
        result = await self.execute_github_query(query, variables)
        try:
            return SearchPage.model_validate(result["data"]["search"])
        except (KeyError, TypeError, pydantic.ValidationError) as e:
            raise ProtocolError(f"Unexpected search response shape: {e}") from e

    async def execute_github_query(self, query: str, variables: dict) -> dict:
        try:
            logging.info("Attempting query...")

            request_start = time.time()
            async with self.session.post(
                self.settings.api_url,
                json={"query": query, "variables": variables},
                headers={"Authorization": f"Bearer {self.settings.token}"},
            ) as response:
                logging.info(f"Query time: {time.time() - request_start:.2f}s")
                if response.status != 200:
                    body = await response.text(errors="replace")
                    logging.error(f"Error in query: {response.status}: {body}")
                    raise TransportError(
                        f"GitHub responded with {response.status}: {body}",
                        status=response.status,
                    )

                try:
                    result = await response.json(loads=ujson.loads, content_type=None)
                except ValueError as e:
                    raise ProtocolError(f"GitHub returned malformed JSON: {e}") from e
        except aiohttp.ClientError as e:
            raise TransportError(f"Request to GitHub failed: {e}") from e
        except asyncio.TimeoutError as e:
            raise TransportError("Request to GitHub timed out") from e

        if not isinstance(result, dict):
            raise ProtocolError("GitHub returned a non-object JSON body")

        if "errors" in result:
            if result.get("data"):
                logging.warning("Partial success in query, but with errors:")
                logging.warning(str(result["errors"]))
            else:
                raise ProtocolError(f"GraphQL errors: {result['errors']}")

        return result
