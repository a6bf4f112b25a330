"""CLI commands for querying GitHub listings and searches."""

import argparse
import itertools
import json
import logging
import sys
from pathlib import Path

SEARCH_KINDS = ("repositories", "issues", "users", "code")


def _configure_logging(level: str):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)


def main():
    from .settings import get_settings

    settings = get_settings()

    parser = argparse.ArgumentParser(
        description="Query GitHub listings and searches page by page",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--cache-dir",
        type=Path,
        default=None,
        help="Cache GET responses in this directory",
    )
    parser.add_argument(
        "--skip-cache",
        action="store_true",
        help="Skip reading from cache (still writes to cache)",
    )
    parser.add_argument(
        "--log-level",
        default=settings.log_level,
        help=f"Logging level (default: {settings.log_level})",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # search subcommand
    search_parser = subparsers.add_parser(
        "search",
        help="Search GitHub and print one JSON result per line",
    )
    search_parser.add_argument(
        "kind",
        choices=SEARCH_KINDS,
        help="What to search",
    )
    search_parser.add_argument(
        "keywords",
        help="Search keywords (e.g., 'language:python stars:>1000')",
    )
    search_parser.add_argument(
        "--sort",
        default=None,
        help="Sort field (default depends on kind)",
    )
    search_parser.add_argument(
        "--order",
        default="desc",
        choices=("asc", "desc"),
        help="Sort order (default: desc)",
    )
    search_parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Stop after this many results",
    )

    # api subcommand
    api_parser = subparsers.add_parser(
        "api",
        help="Make a GitHub API call",
    )
    api_parser.add_argument(
        "endpoint",
        help="API endpoint path (e.g., repos/owner/repo/git/refs)",
    )
    api_parser.add_argument(
        "--param",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Query parameter (repeatable, e.g., --param per_page=100)",
    )
    api_parser.add_argument(
        "--method",
        default="GET",
        help="HTTP method (default: GET)",
    )
    api_parser.add_argument(
        "--paginate",
        action="store_true",
        help="Follow Link headers and print every element of every page",
    )

    args = parser.parse_args()
    _configure_logging(args.log_level)

    if args.command == "search":
        from .github import get_github

        github = get_github(cache_dir=args.cache_dir, skip_cache=args.skip_cache)
        search = github.search()
        method = {
            "repositories": search.repos,
            "issues": search.issues,
            "users": search.users,
            "code": search.code,
        }[args.kind]
        kwargs = {"order": args.order}
        if args.sort:
            kwargs["sort"] = args.sort
        results = method(args.keywords, **kwargs)
        for item in itertools.islice(results, args.limit):
            json.dump(item, sys.stdout)
            sys.stdout.write("\n")
    elif args.command == "api":
        from .github import get_github

        params = {}
        for p in args.param:
            k, _, v = p.partition("=")
            params[k] = v

        github = get_github(cache_dir=args.cache_dir, skip_cache=args.skip_cache)
        if args.paginate:
            for item in github.paginate(args.endpoint, **params):
                json.dump(item, sys.stdout)
                sys.stdout.write("\n")
        else:
            request = github.entry().with_path(args.endpoint).with_params(**params).with_method(args.method)
            resp = request.fetch()
            json.dump(resp.json() if resp.binary else {}, sys.stdout, indent=2)
            sys.stdout.write("\n")
            if resp.status >= 400:
                sys.exit(1)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
