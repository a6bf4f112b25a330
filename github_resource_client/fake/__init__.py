"""In-memory fake of the GitHub API, backed by one XML document."""

from .directives import Directives
from .references import FakeReference, FakeReferences
from .repos import FakeGithub, FakeRepo, FakeRepos
from .storage import XmlStorage

__all__ = [
    "Directives",
    "FakeGithub",
    "FakeReference",
    "FakeReferences",
    "FakeRepo",
    "FakeRepos",
    "XmlStorage",
]
