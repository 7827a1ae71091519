# Copyright (c) 2025 takotime808
"""
Parsed XML documents as immutable, indexable trees.

``parse_document`` runs lxml once per file and copies the result into a
:class:`XmlDocument`: a tuple of :class:`Node` records in document pre-order.
Every lookup the extractors need (child-combinator selectors, dotted tag
paths, text content) operates on that owned structure, so no lxml handle
escapes this module.

Namespaces are ignored: tags and attribute names are stored by local name.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple, Union

from lxml import etree

from xmlcsv.errors import ParseError


@dataclass(frozen=True)
class Node:
    """
    One element of a parsed document.

    Attributes
    ----------
    id : int
        Pre-order index of the element; the root is ``0``.
    tag : str
        Local tag name.
    attrs : tuple[tuple[str, str], ...]
        ``(name, value)`` pairs in document order.
    text : str
        Concatenated text of the element and all its descendants, untrimmed.
    children : tuple[int, ...]
        Ids of the child elements, in document order.
    parent : int | None
        Id of the parent element, ``None`` for the root.
    end : int
        One past the id of the last descendant, so descendants are
        ``range(id + 1, end)``.
    """
    id: int
    tag: str
    attrs: Tuple[Tuple[str, str], ...]
    text: str
    children: Tuple[int, ...]
    parent: Optional[int]
    end: int

    def attr(self, name: str) -> Optional[str]:
        for key, value in self.attrs:
            if key == name:
                return value
        return None

    @property
    def has_data(self) -> bool:
        return bool(self.text.strip()) or bool(self.attrs)


@dataclass(frozen=True)
class XmlDocument:
    """An immutable parsed XML document."""
    nodes: Tuple[Node, ...]
    name: Optional[str] = None

    @property
    def root(self) -> Node:
        return self.nodes[0]

    def node(self, node_id: int) -> Node:
        return self.nodes[node_id]

    def children(self, node_id: int) -> List[Node]:
        return [self.nodes[c] for c in self.nodes[node_id].children]

    def iter_descendants(self, node_id: Optional[int] = None, include_self: bool = False) -> Iterator[Node]:
        """Yield descendants of ``node_id`` (the whole document when ``None``) in pre-order."""
        if node_id is None:
            yield from self.nodes
            return
        start = node_id if include_self else node_id + 1
        for i in range(start, self.nodes[node_id].end):
            yield self.nodes[i]

    def text_of(self, node_id: Optional[int]) -> str:
        """Trimmed text content of a node; ``""`` for a missing node."""
        if node_id is None:
            return ""
        return self.nodes[node_id].text.strip()

    def path_of(self, node_id: int) -> str:
        """Dotted tag chain from the root down to ``node_id``."""
        tags = []
        current: Optional[int] = node_id
        while current is not None:
            node = self.nodes[current]
            tags.append(node.tag)
            current = node.parent
        return ".".join(reversed(tags))

    # --- selectors ---

    def _matches(self, node_id: int, chain: Sequence[str]) -> bool:
        current: Optional[int] = node_id
        for tag in reversed(chain):
            if current is None or self.nodes[current].tag != tag:
                return False
            current = self.nodes[current].parent
        return True

    def select_all(self, selector: str, scope: Optional[int] = None) -> List[int]:
        """
        Ids of every node matching ``selector`` below ``scope``.

        ``selector`` is a bare tag or a child-combinator chain such as
        ``"netPrice > amount > monetaryAmount"``. As with CSS
        ``querySelectorAll``, only descendants of ``scope`` are returned but
        the parent chain may reach above it.
        """
        chain = [part.strip() for part in selector.split(">")]
        return [n.id for n in self.iter_descendants(scope) if self._matches(n.id, chain)]

    def select_first(self, selector: str, scope: Optional[int] = None) -> Optional[int]:
        chain = [part.strip() for part in selector.split(">")]
        for n in self.iter_descendants(scope):
            if self._matches(n.id, chain):
                return n.id
        return None

    def select_text(self, selector: str, scope: Optional[int] = None) -> str:
        return self.text_of(self.select_first(selector, scope))

    def find_by_path(self, segments: Sequence[str], start: int) -> Optional[int]:
        """
        Walk ``segments`` (tag names) down from ``start``.

        Each step takes the first direct child with the wanted tag and falls
        back to the first node with that tag in the subtree, the current node
        included.
        """
        current: Optional[int] = start
        for tag in segments:
            if current is None:
                return None
            found = next((c for c in self.nodes[current].children if self.nodes[c].tag == tag), None)
            if found is None:
                found = next(
                    (n.id for n in self.iter_descendants(current, include_self=True) if n.tag == tag),
                    None,
                )
            current = found
        return current


def _local(name: str) -> str:
    return etree.QName(name).localname


def _freeze(root) -> Tuple[Node, ...]:
    """Copy an lxml tree into pre-order ``Node`` records without recursing."""
    tags: List[str] = []
    attrs: List[Tuple[Tuple[str, str], ...]] = []
    parents: List[Optional[int]] = []
    children: List[List[int]] = []
    # text pieces per node; an int stands for the text of its n-th element child
    pieces: List[List[Union[str, int]]] = []

    stack = [(root, None)]
    while stack:
        el, parent = stack.pop()
        node_id = len(tags)
        tags.append(_local(el.tag))
        attrs.append(tuple((_local(k), v) for k, v in el.attrib.items()))
        parents.append(parent)
        children.append([])
        if parent is not None:
            children[parent].append(node_id)
        parts: List[Union[str, int]] = [el.text or ""]
        elements = []
        for child in el:
            # comments, processing instructions and entity references
            # contribute only their tail text
            if isinstance(child.tag, str):
                parts.append(len(elements))
                elements.append(child)
            parts.append(child.tail or "")
        pieces.append(parts)
        stack.extend((child, node_id) for child in reversed(elements))

    count = len(tags)
    texts = [""] * count
    ends = [0] * count
    # descendants always carry higher ids, so a reverse sweep sees them first
    for node_id in reversed(range(count)):
        kids = children[node_id]
        texts[node_id] = "".join(p if isinstance(p, str) else texts[kids[p]] for p in pieces[node_id])
        ends[node_id] = ends[kids[-1]] if kids else node_id + 1

    return tuple(
        Node(
            id=i,
            tag=tags[i],
            attrs=attrs[i],
            text=texts[i],
            children=tuple(children[i]),
            parent=parents[i],
            end=ends[i],
        )
        for i in range(count)
    )


def parse_document(data: Union[bytes, str], name: Optional[str] = None) -> XmlDocument:
    """
    Parse raw XML into an :class:`XmlDocument`.

    Parameters
    ----------
    data
        Raw document bytes, or text (encoded as UTF-8 before parsing).
    name
        File name attached to any :class:`~xmlcsv.errors.ParseError`.

    Raises
    ------
    ParseError
        When the input is empty or not well-formed.
    """
    if isinstance(data, str):
        data = data.encode("utf-8")
    if not data.strip():
        raise ParseError("Invalid XML format: document is empty", file_name=name)
    parser = etree.XMLParser(resolve_entities=False, no_network=True, huge_tree=True)
    try:
        root = etree.fromstring(data, parser)
    except etree.XMLSyntaxError as e:
        raise ParseError(f"Invalid XML format: {e}", file_name=name) from e
    return XmlDocument(nodes=_freeze(root), name=name)
