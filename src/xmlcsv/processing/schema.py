"""Field discovery for arbitrary XML documents."""

from __future__ import annotations

from typing import Dict, List

from xmlcsv.document import XmlDocument
from xmlcsv.extractors.base import Field, SAMPLE_LENGTH


def infer_fields(document: XmlDocument) -> List[Field]:
    """Return the ordered, de-duplicated fields discoverable in ``document``.

    Leaf elements with non-blank text become ``text`` fields; every attribute
    becomes an ``attribute`` field at ``<path>@<name>``. Paths chain tag names
    only, so repeated elements collapse onto their first occurrence.
    """
    found: Dict[str, Field] = {}

    def add(f: Field) -> None:
        if f.path not in found:
            found[f.path] = f

    # attributes are added once the element's subtree is done
    stack = [(document.root.id, document.root.tag, False)]
    while stack:
        node_id, path, subtree_done = stack.pop()
        node = document.node(node_id)
        if subtree_done:
            for attr, value in node.attrs:
                add(Field(
                    path=f"{path}@{attr}",
                    name=f"{node.tag}@{attr}",
                    kind="attribute",
                    sample=value[:SAMPLE_LENGTH],
                ))
            continue
        stack.append((node_id, path, True))
        if node.children:
            for child in reversed(node.children):
                stack.append((child, f"{path}.{document.node(child).tag}", False))
        else:
            text = node.text.strip()
            if text:
                add(Field(path=path, name=node.tag, kind="text", sample=text[:SAMPLE_LENGTH]))

    return list(found.values())


def field_paths(fields: List[Field]) -> List[str]:
    return [f.path for f in fields]
