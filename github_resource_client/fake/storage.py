"""In-memory XML document shared by every fake resource."""

import copy
import logging
import threading
import xml.etree.ElementTree as ET
from pathlib import Path

from .directives import Directives, find, select

log = logging.getLogger(__name__)

ROOT = "github"


class XmlStorage:
    """One mutable XML document guarded by a single lock.

    ``apply()`` runs a whole directive batch on a copy and swaps it in only
    when every step succeeded: readers never see half a batch and a failing
    batch changes nothing. With ``path`` the document is loaded from that
    file when it exists and written back after every batch.
    """

    def __init__(self, path: Path | str | None = None):
        self.path = Path(path) if path else None
        self._lock = threading.Lock()
        if self.path and self.path.exists():
            self._root = ET.parse(self.path).getroot()
        else:
            self._root = ET.Element(ROOT)

    def apply(self, directives: Directives) -> None:
        with self._lock:
            doc = copy.deepcopy(self._root)
            directives.apply(doc)
            if self.path:
                self._save(doc)
            self._root = doc
        log.debug("Applied %d directives: %r", len(directives), directives)

    def _save(self, doc: ET.Element) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        ET.ElementTree(doc).write(tmp, encoding="utf-8", xml_declaration=True)
        tmp.replace(self.path)

    def xpath(self, path: str) -> list[str]:
        """String values matching ``path`` (supports ``/text()`` and ``/@attr``)."""
        with self._lock:
            return select(self._root, path)

    def nodes(self, path: str) -> list[ET.Element]:
        """Detached copies of the elements matching ``path``."""
        with self._lock:
            return [copy.deepcopy(node) for node in find(self._root, path)]

    def xml(self) -> str:
        with self._lock:
            return ET.tostring(self._root, encoding="unicode")

    def __str__(self):
        return self.xml()
