"""Directive batches: ordered structural edits of an XML document.

A batch moves a cursor (the set of currently selected nodes, initially the
document root) and edits whatever the cursor holds::

    Directives().xpath("/github/repos/repo[@coords='jeff/test']/git").add_if("refs")

A path that matches nothing empties the cursor and the remaining steps do
nothing. Paths use ElementTree's XPath subset.
"""

import re
import xml.etree.ElementTree as ET

from ..exceptions import NoMatchError, StorageError

_ATTR_SELECTOR = re.compile(r"/@([\w.-]+)$")


def literal(value: str) -> str:
    """Quote ``value`` for use inside a path predicate."""
    if "'" not in value:
        return f"'{value}'"
    if '"' not in value:
        return f'"{value}"'
    raise ValueError(f"Can't quote a value containing both kinds of quotes: {value!r}")


def find(root: ET.Element, path: str, context: ET.Element | None = None) -> list[ET.Element]:
    """Elements matching ``path``, in document order.

    Absolute paths start at the root element (``/github/...``); relative
    ones are evaluated from ``context`` (the root when omitted).
    """
    try:
        if path.startswith("//"):
            return ([root] if root.tag == path[2:] else []) + root.findall("." + path)
        if path.startswith("/"):
            head, _, tail = path[1:].partition("/")
            if head != root.tag:
                return []
            if not tail:
                return [root]
            # "/github//name" searches every descendant of the root
            return root.findall("." + tail if tail.startswith("/") else tail)
        return (context if context is not None else root).findall(path)
    except (SyntaxError, KeyError, TypeError, StopIteration) as e:
        raise StorageError(f"Malformed path {path!r}: {e}") from e


def select(root: ET.Element, path: str) -> list[str]:
    """String values matching ``path``.

    A trailing ``/text()`` selects element text, ``/@name`` an attribute;
    otherwise the full text content of each matched element is returned.
    """
    if path.endswith("/text()"):
        return [node.text for node in find(root, path[: -len("/text()")]) if node.text is not None]
    match = _ATTR_SELECTOR.search(path)
    if match:
        name = match.group(1)
        nodes = find(root, path[: match.start()])
        return [node.get(name) for node in nodes if node.get(name) is not None]
    return ["".join(node.itertext()) for node in find(root, path)]


def _unique(nodes):
    return list(dict.fromkeys(nodes))


class Directives:
    """Chaining builder of structural edits, applied by XmlStorage."""

    def __init__(self, steps=()):
        self._steps = list(steps)

    def __iter__(self):
        return iter(self._steps)

    def __len__(self):
        return len(self._steps)

    def __repr__(self):
        return " ".join(f"{op.upper()}{args!r}" for op, *args in self._steps)

    def _step(self, op, *args):
        self._steps.append((op, *args))
        return self

    def xpath(self, path: str) -> "Directives":
        """Move the cursor to the nodes matching ``path``."""
        return self._step("xpath", path)

    def add(self, name: str) -> "Directives":
        """Append a ``name`` child to every cursor node and move onto them."""
        return self._step("add", name)

    def add_if(self, name: str) -> "Directives":
        """Like add(), but reuse an existing ``name`` child."""
        return self._step("add_if", name)

    def set(self, text) -> "Directives":
        return self._step("set", str(text))

    def attr(self, name: str, value) -> "Directives":
        return self._step("attr", name, str(value))

    def up(self) -> "Directives":
        return self._step("up")

    def remove(self) -> "Directives":
        """Detach every cursor node; the cursor moves to their parents."""
        return self._step("remove")

    def where(self, condition) -> "Directives":
        """Keep only the cursor nodes for which ``condition(node)`` is true."""
        return self._step("where", condition)

    def strict(self, number: int | None = None) -> "Directives":
        """Fail the batch unless the cursor holds ``number`` nodes (any, when None)."""
        return self._step("strict", number)

    def apply(self, root: ET.Element) -> None:
        """Run every step against ``root`` in place.

        XmlStorage calls this on a private copy of its document, so a step
        that fails never leaves a half-edited tree behind.
        """
        cursor = [root]
        for op, *args in self._steps:
            if op == "xpath":
                (path,) = args
                if path.startswith("/"):
                    cursor = find(root, path)
                else:
                    cursor = _unique(n for node in cursor for n in find(root, path, node))
            elif op == "add":
                cursor = [ET.SubElement(node, args[0]) for node in cursor]
            elif op == "add_if":
                found = []
                for node in cursor:
                    child = node.find(args[0])
                    found.append(child if child is not None else ET.SubElement(node, args[0]))
                cursor = found
            elif op == "set":
                for node in cursor:
                    node.text = args[0]
            elif op == "where":
                cursor = [node for node in cursor if args[0](node)]
            elif op == "strict":
                number = args[0]
                if number is None and not cursor:
                    raise NoMatchError("Expected some nodes, found none")
                if number is not None and len(cursor) != number:
                    raise NoMatchError(f"Expected {number} nodes, found {len(cursor)}")
            elif op == "attr":
                for node in cursor:
                    node.set(args[0], args[1])
            elif op in ("up", "remove"):
                parents = {child: parent for parent in root.iter() for child in parent}
                if any(node not in parents for node in cursor):
                    raise StorageError(f"Can't {op} from the document root")
                if op == "remove":
                    for node in cursor:
                        parents[node].remove(node)
                cursor = _unique(parents[node] for node in cursor)
            else:
                raise StorageError(f"Unknown directive {op!r}")
