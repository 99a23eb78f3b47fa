"""Generic node tree for stencil documents.

The action engine never looks at raw document bytes.  It consumes a tree of
``Node`` objects, each carrying a name, positional arguments, keyed arguments
(props) and child nodes.  This module owns the mapping from the YAML surface
of ``stencil.yaml`` onto that tree:

* A top-level mapping key is a node; its value is the node's *payload*.
* A list item that is a mapping is a node: its first key is the node name and
  that key's value is the payload.  Remaining keys are attached to the node.
* Payload: scalar -> one argument, list of scalars -> arguments, list of
  mappings -> children, mapping -> props, null -> nothing.
* Remaining keys: scalar -> prop, list of scalars -> child node with those
  arguments, list of mappings -> child node with children, mapping -> child
  node with props.
* Only ``true``/``false`` are booleans; ``yes``/``no``/``on``/``off`` are
  plain strings.

Example::

    actions:
      - input: repo_name
        hint: Repository name
      - run: "{pm} install"
        inject: [pm]
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml


class DocumentError(Exception):
    """Base class for errors that prevent a document from being used at all."""


class DocumentSyntaxError(DocumentError):
    """Raised when the document text is not valid YAML or has the wrong shape."""

    def __init__(self, message: str, source: str = "") -> None:
        self.source = source
        prefix = f"{source}: " if source else ""
        super().__init__(f"{prefix}{message}")


@dataclass
class Node:
    """A named node with positional arguments, props and child nodes."""

    name: str
    args: list[Any] = field(default_factory=list)
    props: dict[str, Any] = field(default_factory=dict)
    children: list["Node"] = field(default_factory=list)

    def child(self, name: str) -> "Node | None":
        """Return the first child called *name*, or ``None``."""
        for node in self.children:
            if node.name == name:
                return node
        return None

    def arg(self, index: int = 0, default: Any = None) -> Any:
        """Return the positional argument at *index*, or *default*."""
        if index < len(self.args):
            return self.args[index]
        return default

    def get(self, key: str, default: Any = None) -> Any:
        """Look up a field given either as a prop or as a child's first argument.

        The prop wins when both spellings are present.
        """
        if key in self.props:
            return self.props[key]
        node = self.child(key)
        if node is not None and node.args:
            return node.args[0]
        return default

    def has(self, key: str) -> bool:
        return key in self.props or self.child(key) is not None


# ---------------------------------------------------------------------------
# YAML -> Node tree
# ---------------------------------------------------------------------------


class _DocumentLoader(yaml.SafeLoader):
    """``SafeLoader`` where only ``true``/``false`` resolve to booleans.

    ``yes``, ``no``, ``on`` and ``off`` stay strings so that values like
    ``options: [yes, no]`` survive as choices.
    """


_BOOL_TAG = "tag:yaml.org,2002:bool"

_DocumentLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != _BOOL_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}
_DocumentLoader.add_implicit_resolver(
    _BOOL_TAG,
    re.compile(r"^(?:true|True|TRUE|false|False|FALSE)$"),
    list("tTfF"),
)


def _is_scalar(value: Any) -> bool:
    return not isinstance(value, (dict, list))


def _apply_payload(node: Node, payload: Any, source: str) -> None:
    if payload is None:
        return
    if isinstance(payload, dict):
        for key, value in payload.items():
            _attach(node, str(key), value, source)
        return
    if isinstance(payload, list):
        if all(_is_scalar(item) for item in payload):
            node.args.extend(payload)
        else:
            node.children.extend(_node_from_item(item, source) for item in payload)
        return
    node.args.append(payload)


def _attach(node: Node, key: str, value: Any, source: str) -> None:
    if _is_scalar(value):
        node.props[key] = value
        return
    child = Node(name=key)
    _apply_payload(child, value, source)
    node.children.append(child)


def _node_from_item(item: Any, source: str) -> Node:
    """Convert one list entry into a node.

    A bare scalar entry (e.g. ``- repo_name`` inside a ``replace`` block)
    becomes an argument-less node named after the scalar.
    """
    if isinstance(item, dict):
        if not item:
            raise DocumentSyntaxError("empty mapping where a node was expected", source)
        entries = iter(item.items())
        name, payload = next(entries)
        node = Node(name=str(name))
        _apply_payload(node, payload, source)
        for key, value in entries:
            _attach(node, str(key), value, source)
        return node
    if isinstance(item, list):
        raise DocumentSyntaxError("nested list where a node was expected", source)
    return Node(name=str(item))


def parse_document(text: str, source: str = "") -> list[Node]:
    """Parse document text into the list of top-level nodes.

    Raises:
        DocumentSyntaxError: If the text is not valid YAML, or its root is
            neither empty nor a mapping.
    """
    try:
        data = yaml.load(text, Loader=_DocumentLoader)
    except yaml.YAMLError as exc:
        raise DocumentSyntaxError(f"invalid YAML: {exc}", source) from exc

    if data is None:
        return []
    if not isinstance(data, dict):
        raise DocumentSyntaxError(
            f"document root must be a mapping, got {type(data).__name__}", source
        )

    nodes: list[Node] = []
    for key, payload in data.items():
        node = Node(name=str(key))
        _apply_payload(node, payload, source)
        nodes.append(node)
    return nodes


def load_document(path: str | Path) -> list[Node]:
    """Read and parse a document file."""
    file_path = Path(path)
    try:
        text = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise DocumentSyntaxError(f"cannot read document: {exc}", str(file_path)) from exc
    return parse_document(text, source=str(file_path))
