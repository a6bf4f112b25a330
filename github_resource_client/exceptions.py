"""Errors raised by the client and the in-memory fake."""


class GithubClientError(Exception):
    """Base class for every error this package raises on its own."""


class MalformedResponseError(GithubClientError, RuntimeError):
    """A response body does not have the shape the caller relies on."""


class UnexpectedStatusError(GithubClientError, RuntimeError):
    """A listing page came back with a status other than 200 OK."""

    def __init__(self, response, expected: int = 200):
        super().__init__(
            f"Expected HTTP {expected} from {response.request.method} "
            f"{response.request.uri}, got {response.status} {response.reason}"
        )
        self.response = response
        self.expected = expected


class ResponseConversionError(GithubClientError, RuntimeError):
    """A response could not be converted into the requested view."""


class StorageError(GithubClientError, OSError):
    """A directive batch or path query failed against the document."""


class NoMatchError(StorageError):
    """A strict directive found a different number of nodes than required."""


class NotFoundError(GithubClientError, LookupError):
    """A lazily resolved fake resource is not in the document."""


class RepoNotFoundError(NotFoundError):
    pass


class ReferenceNotFoundError(NotFoundError):
    pass
