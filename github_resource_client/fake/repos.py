"""Fake GitHub entry point and repositories, backed by XmlStorage."""

from dataclasses import dataclass

from ..coordinates import Coordinates
from ..exceptions import NoMatchError, RepoNotFoundError
from .directives import Directives, literal
from .iterable import FakeIterable
from .storage import XmlStorage


def repo_xpath(coords: Coordinates) -> str:
    return f"/github/repos/repo[@coords={literal(str(coords))}]"


class FakeGithub:
    """In-memory stand-in for the GitHub API, acting as ``login``.

    Every fake built from the same storage sees the same document, so a
    test can hand one storage to several FakeGithub instances.
    """

    def __init__(self, login: str = "jeff", storage: XmlStorage | None = None):
        if login is None:
            raise ValueError("login can't be None")
        self.login = login
        self.storage = storage if storage is not None else XmlStorage()
        self.storage.apply(Directives().xpath("/github").add_if("repos"))

    def repos(self) -> "FakeRepos":
        return FakeRepos(self.storage, self.login)


@dataclass(frozen=True)
class FakeRepos:
    storage: XmlStorage
    login: str

    def create(self, name: str, description: str = "", private: bool = False) -> "FakeRepo":
        """Create ``login/name`` with an empty git namespace."""
        coords = Coordinates(self.login, name)

        def vacant(repos):
            return all(repo.get("coords") != str(coords) for repo in repos.findall("repo"))

        try:
            self.storage.apply(
                Directives().xpath("/github").add_if("repos").where(vacant).strict(1)
                .add("repo").attr("coords", coords)
                .add("name").set(name).up()
                .add("description").set(description).up()
                .add("private").set(str(private).lower()).up()
                .add("git")
            )
        except NoMatchError as e:
            raise ValueError(f"Repository {coords} already exists") from e
        return self.get(coords)

    def get(self, coords: Coordinates | str) -> "FakeRepo":
        if isinstance(coords, str):
            coords = Coordinates.parse(coords)
        return FakeRepo(self.storage, self.login, coords)

    def remove(self, coords: Coordinates | str) -> None:
        if isinstance(coords, str):
            coords = Coordinates.parse(coords)
        self.storage.apply(Directives().xpath(repo_xpath(coords)).remove())

    def iterate(self) -> FakeIterable["FakeRepo"]:
        return FakeIterable(
            self.storage,
            "/github/repos/repo",
            lambda node: self.get(node.get("coords")),
        )


@dataclass(frozen=True)
class FakeRepo:
    storage: XmlStorage
    login: str
    coordinates: Coordinates

    def json(self) -> dict:
        nodes = self.storage.nodes(repo_xpath(self.coordinates))
        if not nodes:
            raise RepoNotFoundError(f"Repository {self.coordinates} not found")
        node = nodes[0]
        return {
            "name": node.findtext("name"),
            "full_name": str(self.coordinates),
            "owner": {"login": self.coordinates.user},
            "description": node.findtext("description") or "",
            "private": node.findtext("private") == "true",
        }

    def references(self):
        from .references import FakeReferences

        return FakeReferences(self.storage, self.login, self.coordinates)
