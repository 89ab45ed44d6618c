"""
Server-side proxy for GitHub GraphQL queries.

The browser-facing client only names a request type; the GitHub token stays here.
"""

import logging
from enum import Enum
from typing import Protocol

import ujson
from aiohttp import web

from .errors import ValidationError
from .fetcher import FetcherConfig, fetch_recent_top_repositories
from .models import RepositoryRecord
from .service import GitHubConfig, GitHubService

INVALID_METHOD = "Invalid request - No or invalid request method provided."
INVALID_TYPE = "Invalid request - No or invalid POST type provided."


class RequestType(str, Enum):
    SEARCH_MOST_STARS_PAST_7_DAYS = "searchMostStarsPast7Days"


class RequestHandler(Protocol):
    async def handle(self) -> list[RepositoryRecord]: ...


class SearchMostStarsPast7Days:
    def __init__(self, app: web.Application):
        self.app = app

    async def handle(self) -> list[RepositoryRecord]:
        return await fetch_recent_top_repositories(
            self.app[GITHUB_SERVICE], self.app[FETCHER_CONFIG]
        )


GITHUB_CONFIG = web.AppKey("github_config", GitHubConfig)
FETCHER_CONFIG = web.AppKey("fetcher_config", FetcherConfig)
GITHUB_SERVICE = web.AppKey("github_service", GitHubService)
HANDLERS = web.AppKey("handlers", dict)


def json_response(body: dict, status: int = 200) -> web.Response:
    return web.json_response(body, status=status, dumps=ujson.dumps)


async def parse_request_type(request: web.Request) -> RequestType:
    if request.method != "POST":
        raise ValidationError(INVALID_METHOD)
    try:
        body = await request.json(loads=ujson.loads)
    except ValueError as e:
        raise ValidationError(INVALID_TYPE) from e
    if not isinstance(body, dict):
        raise ValidationError(INVALID_TYPE)
    try:
        return RequestType(body.get("type"))
    except ValueError as e:
        raise ValidationError(INVALID_TYPE) from e


async def github_view(request: web.Request) -> web.Response:
    try:
        request_type = await parse_request_type(request)
    except ValidationError as e:
        logging.error(str(e))
        return json_response({"error": str(e)}, status=400)

    handler = request.app[HANDLERS].get(request_type)
    if handler is None:
        logging.error(INVALID_TYPE)
        return json_response({"error": INVALID_TYPE}, status=400)

    try:
        records = await handler.handle()
    except Exception as e:
        # Raw upstream messages reach the caller unsanitized
        logging.error(f"{request_type.value} failed: {e}")
        return json_response({"error": str(e)}, status=500)

    return json_response(
        {"data": [record.model_dump(by_alias=True) for record in records]}
    )


async def open_github_service(app: web.Application):
    app[GITHUB_SERVICE] = await GitHubService.create(app[GITHUB_CONFIG])


async def close_github_service(app: web.Application):
    await app[GITHUB_SERVICE].close()


def create_app(
    github_config: GitHubConfig | None = None,
    fetcher_config: FetcherConfig | None = None,
    handlers: dict[RequestType, RequestHandler] | None = None,
) -> web.Application:
    app = web.Application()
    app[FETCHER_CONFIG] = fetcher_config or FetcherConfig()

    if handlers is None:
        app[GITHUB_CONFIG] = github_config or GitHubConfig()
        app.on_startup.append(open_github_service)
        app.on_cleanup.append(close_github_service)
        handlers = {
            RequestType.SEARCH_MOST_STARS_PAST_7_DAYS: SearchMostStarsPast7Days(app),
        }
    app[HANDLERS] = handlers

    app.router.add_route("*", "/api/github", github_view)
    return app
