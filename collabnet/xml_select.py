from __future__ import annotations

import xml.etree.ElementTree as ElementTree
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple


@dataclass(frozen=True)
class Selector:
    """
    A compiled XPath-like selector.

    Supported forms are absolute paths anchored at the document root
    ("/dblpperson/@pid"), descendant paths ("//dblpperson/r/*/author/@pid"),
    and paths ending in an element step whose text is extracted
    ("/dblpperson/person/author" or ".../author/text()"). Steps accept
    element names and the "*" wildcard.
    """
    expression: str
    descendant: bool
    anchor: str
    path: str
    attribute: Optional[str]

    def nodes(self, root: ElementTree.Element) -> List[ElementTree.Element]:
        """
        Return the elements matched by the element steps, in document order.
        """
        if self.descendant:
            anchors = root.iter() if self.anchor == "*" else root.iter(self.anchor)
        elif self.anchor in ("*", root.tag):
            anchors = iter([root])
        else:
            anchors = iter(())

        out: List[ElementTree.Element] = []
        seen = set()
        for anchor in anchors:
            matched = [anchor] if not self.path else anchor.findall(self.path)
            for node in matched:
                if id(node) not in seen:
                    seen.add(id(node))
                    out.append(node)
        return out

    def select(self, root: ElementTree.Element) -> Iterator[Tuple[ElementTree.Element, str]]:
        """
        Yield (element, text) pairs for every match in document order. For
        attribute selectors, elements without the attribute do not match.
        """
        for node in self.nodes(root):
            if self.attribute is None:
                yield node, "".join(node.itertext()).strip()
                continue
            value = node.get(self.attribute)
            if value is not None:
                yield node, value.strip()


def compile_selector(expression: str) -> Selector:
    """
    Parse a selector expression into a Selector, raising ValueError for
    anything outside the supported subset.
    """
    expr = (expression or "").strip()
    if expr.startswith("//"):
        descendant, body = True, expr[2:]
    elif expr.startswith("/"):
        descendant, body = False, expr[1:]
    else:
        raise ValueError(f"Selector must start with '/' or '//': {expression!r}")

    steps = body.split("/")
    if not steps or any(not step for step in steps):
        raise ValueError(f"Empty step in selector: {expression!r}")

    attribute: Optional[str] = None
    last = steps[-1]
    if last.startswith("@"):
        attribute = last[1:]
        if not attribute:
            raise ValueError(f"Missing attribute name in selector: {expression!r}")
        steps = steps[:-1]
    elif last == "text()":
        steps = steps[:-1]

    if not steps:
        raise ValueError(f"Selector has no element step: {expression!r}")
    for step in steps:
        if step != "*" and not _is_name(step):
            raise ValueError(f"Unsupported step {step!r} in selector: {expression!r}")

    return Selector(
        expression=expr,
        descendant=descendant,
        anchor=steps[0],
        path="/".join(steps[1:]),
        attribute=attribute,
    )


def _is_name(step: str) -> bool:
    # XML names: letters, digits, '-', '_', '.', optional prefix
    return all(ch.isalnum() or ch in "-_.:" for ch in step) and not step[0].isdigit()
