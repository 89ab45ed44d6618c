import pytest
from aiohttp import web

from trending.service import GitHubConfig, GitHubService


@pytest.fixture
def fake_github(aiohttp_server):
    """Start a GraphQL endpoint answering with `respond(body) -> web.Response`."""

    async def start(respond):
        requests = []

        async def graphql(request):
            body = await request.json()
            requests.append({"body": body, "headers": dict(request.headers)})
            return await respond(body)

        app = web.Application()
        app.router.add_post("/graphql", graphql)
        server = await aiohttp_server(app)
        return server, requests

    return start


@pytest.fixture
def open_service():
    async def open_(server):
        config = GitHubConfig(token="test-token", api_url=str(server.make_url("/graphql")))
        return await GitHubService.create(config)

    return open_
