"""
Fetches the most starred repositories created in the last week from GitHub.
Pages are walked one at a time, since every cursor comes from the previous response.
Nothing is returned until the last page has been read.
"""

import logging
import time

import pydantic
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ProtocolError
from .models import RepositoryRecord
from .service import GitHubService
from .util import build_search_query, cutoff_date


class FetcherConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", env_prefix="FETCHER_", extra="ignore"
    )

    # Size of the "created in the last N days" window
    days: int = 7
    min_stars: int = 20
    min_size: int = 10

    # Upper bound on pages walked; GitHub search stops at 1000 results anyway
    max_pages: int = 50


GRAPHQL_QUERY = """
query SearchMostStarsPast7Days($queryString: String!, $afterCursor: String) {
  search(query: $queryString, type: REPOSITORY, first: 50, after: $afterCursor) {
    repositoryCount
    edges {
      node {
        ... on Repository {
          name
          description
          stargazers {
            totalCount
          }
          url
          languages(first: 10) {
            nodes {
              name
            }
          }
        }
      }
    }
    pageInfo {
      endCursor
      hasNextPage
    }
  }
}
"""


def node_to_repository(node: dict) -> RepositoryRecord:
    # Favorites are unknown here; the caller annotates them afterwards
    try:
        return RepositoryRecord(
            name=node["name"],
            description=node.get("description"),
            url=node["url"],
            stargazer_count=node["stargazers"]["totalCount"],
            languages=[language["name"] for language in node["languages"]["nodes"]],
            favorite=False,
        )
    except (KeyError, TypeError, pydantic.ValidationError) as e:
        raise ProtocolError(f"Malformed repository node: {e}") from e


async def fetch_recent_top_repositories(
    service: GitHubService, config: FetcherConfig | None = None
) -> list[RepositoryRecord]:
    config = config or FetcherConfig()

    query_string = build_search_query(
        cutoff_date(config.days), config.min_stars, config.min_size
    )
    logging.info(f"Searching GitHub for: {query_string}")

    start_time = time.time()
    repositories: list[RepositoryRecord] = []
    cursor = None

    for page_number in range(1, config.max_pages + 1):
        page = await service.fetch_page(
            GRAPHQL_QUERY, {"queryString": query_string, "afterCursor": cursor}
        )

        repositories.extend(
            node_to_repository(edge["node"]) for edge in page.edges if edge.get("node")
        )
        logging.info(
            f"Page {page_number}: {len(repositories)}/{page.repository_count} repositories"
        )

        if not page.page_info.has_next_page:
            logging.info(f"Search exhausted in {time.time() - start_time:.2f}s")
            return repositories

        if not page.page_info.end_cursor:
            raise ProtocolError("hasNextPage is true but no endCursor was returned")
        cursor = page.page_info.end_cursor

    logging.error(f"Search did not terminate after {config.max_pages} pages")
    raise ProtocolError(f"Pagination did not terminate after {config.max_pages} pages")
