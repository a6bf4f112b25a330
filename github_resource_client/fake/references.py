"""Fake git references of one repository.

Each reference is a node of the shared document::

    /github/repos/repo[@coords='jeff/test']/git/refs/reference
        <ref>refs/heads/master</ref>
        <sha>6dcb09b5b57875f334f61aebed695e2e4193db5e</sha>

Every operation is a path query or a directive batch against XmlStorage.
``create`` doesn't check for an existing ref: duplicates become sibling
nodes, reads resolve to the first one and ``remove``/``patch`` act on all.
"""

from dataclasses import dataclass

from ..coordinates import Coordinates
from ..exceptions import NoMatchError, ReferenceNotFoundError
from .directives import Directives
from .iterable import FakeIterable
from .repos import FakeRepo, repo_xpath
from .storage import XmlStorage


def _require(value, name):
    if value is None:
        raise ValueError(f"{name} can't be None")


def _named(ref: str):
    """Match reference nodes by the exact text of their ``ref`` child."""

    def condition(node):
        return node.findtext("ref") == ref

    return condition


@dataclass(frozen=True)
class FakeReferences:
    storage: XmlStorage
    login: str
    coords: Coordinates

    def __post_init__(self):
        _require(self.storage, "storage")
        _require(self.login, "login")
        _require(self.coords, "coords")
        self.storage.apply(Directives().xpath(f"{repo_xpath(self.coords)}/git").add_if("refs"))

    @property
    def xpath(self) -> str:
        return f"{repo_xpath(self.coords)}/git/refs"

    def repo(self) -> FakeRepo:
        return FakeRepo(self.storage, self.login, self.coords)

    def create(self, ref: str, sha: str) -> "FakeReference":
        _require(ref, "ref")
        _require(sha, "sha")
        self.storage.apply(
            Directives().xpath(self.xpath).add("reference")
            .add("ref").set(ref).up()
            .add("sha").set(sha).up()
        )
        return self.get(ref)

    def get(self, ref: str) -> "FakeReference":
        _require(ref, "ref")
        return FakeReference(self.storage, self.login, self.coords, ref)

    def iterate(self, subnamespace: str | None = None) -> FakeIterable["FakeReference"]:
        """Every reference, or only those under ``refs/<subnamespace>``."""
        prefix = f"refs/{subnamespace}" if subnamespace is not None else ""

        def in_namespace(node):
            return (node.findtext("ref") or "").startswith(prefix)

        return FakeIterable(
            self.storage,
            f"{self.xpath}/reference",
            lambda node: self.get(node.findtext("ref")),
            in_namespace if prefix else None,
        )

    def tags(self) -> FakeIterable["FakeReference"]:
        return self.iterate("tags")

    def heads(self) -> FakeIterable["FakeReference"]:
        return self.iterate("heads")

    def remove(self, ref: str) -> None:
        """Delete every reference named ``ref``; unknown refs are ignored."""
        _require(ref, "ref")
        self.storage.apply(Directives().xpath(f"{self.xpath}/reference").where(_named(ref)).remove())


@dataclass(frozen=True)
class FakeReference:
    """Lazy handle on one reference, resolved on every read."""

    storage: XmlStorage
    login: str
    coords: Coordinates
    ref: str

    @property
    def xpath(self) -> str:
        return f"{repo_xpath(self.coords)}/git/refs/reference"

    @property
    def references(self) -> FakeReferences:
        return FakeReferences(self.storage, self.login, self.coords)

    def repo(self) -> FakeRepo:
        return FakeRepo(self.storage, self.login, self.coords)

    def json(self) -> dict:
        nodes = [node for node in self.storage.nodes(self.xpath) if _named(self.ref)(node)]
        if not nodes:
            raise ReferenceNotFoundError(f"Reference {self.ref} not found in {self.coords}")
        return {
            "ref": nodes[0].findtext("ref"),
            "object": {"sha": nodes[0].findtext("sha"), "type": "commit"},
        }

    @property
    def sha(self) -> str:
        return self.json()["object"]["sha"]

    def patch(self, sha: str) -> None:
        """Point the reference at ``sha``."""
        _require(sha, "sha")
        try:
            self.storage.apply(
                Directives().xpath(self.xpath).where(_named(self.ref)).strict()
                .xpath("sha").set(sha)
            )
        except NoMatchError as e:
            raise ReferenceNotFoundError(f"Reference {self.ref} not found in {self.coords}") from e
