"""Client-side model of the GitHub REST API.

Lazy pagination over listing and search endpoints, plus an in-memory fake of
the service (``github_resource_client.fake``) for tests.
"""

from .cli import main
from .coordinates import Coordinates
from .github import Github, get_github
from .models import Response
from .pagination import Pagination, each
from .request import Request
from .search import Search, SearchPagination, SearchRequest

__all__ = [
    "main",
    "Coordinates",
    "Github",
    "get_github",
    "Response",
    "Pagination",
    "each",
    "Request",
    "Search",
    "SearchPagination",
    "SearchRequest",
]

if __name__ == "__main__":
    main()
