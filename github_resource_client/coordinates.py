"""Repository coordinates."""

from dataclasses import dataclass


@dataclass(frozen=True, order=True)
class Coordinates:
    """Owner and name of a repository, rendered as ``owner/name``."""

    user: str
    repo: str

    def __post_init__(self):
        if not self.user or not self.repo:
            raise ValueError(f"Both user and repo are required, got {self.user!r}/{self.repo!r}")
        if "/" in self.user or "/" in self.repo:
            raise ValueError(f"Coordinates parts can't contain '/': {self.user!r}/{self.repo!r}")

    def __str__(self) -> str:
        return f"{self.user}/{self.repo}"

    @classmethod
    def parse(cls, text: str) -> "Coordinates":
        """Parse ``owner/name``."""
        user, sep, repo = text.partition("/")
        if not sep:
            raise ValueError(f"Expected 'owner/name', got {text!r}")
        return cls(user, repo)
