"""Navigation tree builder.

Builds the sidebar tree for the .NET reference from the generated Markdown
layout. A page ``Foo.md`` with a sibling directory ``Foo/`` gets the pages
in that directory as collapsed children.
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import TypedDict

from apiref.core.types import URLPath

OVERLOADS_RE = re.compile(r" \(\d.*\)$")
NAMESPACE_SUFFIX = " namespace"


class NavItemDict(TypedDict, total=False):
    """Dictionary representation of a navigation item."""

    text: str
    link: str
    items: list[NavItemDict]
    collapsed: bool


@dataclass(frozen=True)
class NavItem:
    """Sidebar navigation item with optional children."""

    text: str
    link: URLPath
    items: tuple[NavItem, ...] | None = None
    collapsed: bool | None = None

    def to_dict(self) -> NavItemDict:
        """Convert to dictionary for JSON serialization."""
        result: NavItemDict = {"text": self.text, "link": self.link}
        if self.items is not None:
            result["items"] = [item.to_dict() for item in self.items]
        if self.collapsed is not None:
            result["collapsed"] = self.collapsed
        return result


def get_markdown_headers(file_path: Path, prefix: str) -> list[str]:
    """Extract the text of every header line starting with ``prefix``."""
    markdown = file_path.read_text(encoding="utf-8")
    header_re = re.compile(rf"^{re.escape(prefix)} (.*)$", re.MULTILINE)
    return [match.group(1) for match in header_re.finditer(markdown)]


def namespace_anchor(header: str) -> str:
    """Anchor of a namespace header inside the combined index page."""
    return re.sub(r"[. ]", "-", header).lower()


def build_navigation(
    root_dir: Path,
    reference_path: str,
    sub_dir: PurePosixPath | None = None,
    *,
    exclude: Iterable[str] = (),
) -> tuple[NavItem, ...]:
    """Build navigation items for one directory of the reference tree.

    Top-level files are per-assembly pages, so their ``##`` namespace headers
    start the tree; below the root each page contributes its ``#`` title.

    Args:
        root_dir: Root of the generated Markdown tree
        reference_path: Site path the tree is published under
        sub_dir: Directory relative to root_dir (None for the root)
        exclude: File stems to skip in this directory

    Returns:
        Navigation items sorted by file name
    """
    current_dir = root_dir / sub_dir if sub_dir else root_dir
    header_prefix = "#" if sub_dir else "##"
    excluded = set(exclude)

    stems = sorted(
        path.stem
        for path in current_dir.iterdir()
        if path.is_file() and path.suffix == ".md" and path.stem not in excluded
    )

    items: list[NavItem] = []
    for stem in stems:
        headers = get_markdown_headers(current_dir / f"{stem}.md", header_prefix)

        # Merge overloads into a single item
        if headers and OVERLOADS_RE.search(headers[0]):
            headers = [OVERLOADS_RE.sub("", headers[0])]

        child_dir = PurePosixPath(sub_dir, stem) if sub_dir else PurePosixPath(stem)
        sub_items: tuple[NavItem, ...] | None = None
        if (current_dir / stem).is_dir():
            sub_items = build_navigation(root_dir, reference_path, child_dir)

        for header in headers:
            items.append(
                _build_nav_item(header, reference_path, child_dir, sub_items),
            )

    return tuple(items)


def _build_nav_item(
    header: str,
    reference_path: str,
    page_path: PurePosixPath,
    sub_items: tuple[NavItem, ...] | None,
) -> NavItem:
    link = URLPath(f"{reference_path.rstrip('/')}/{page_path}")

    # Namespace content lives in the combined index
    if header.endswith(NAMESPACE_SUFFIX):
        link = URLPath(f"{reference_path}#{namespace_anchor(header)}")
        header = header.removesuffix(NAMESPACE_SUFFIX)

    return NavItem(
        text=header.replace("structure", "struct", 1),
        link=link,
        items=sub_items,
        collapsed=True if sub_items is not None else None,
    )


def write_navigation_module(items: Iterable[NavItem], path: Path) -> None:
    """Write navigation items as a script module for the site config."""
    data = [item.to_dict() for item in items]
    path.write_text("export default " + json.dumps(data, indent=2), encoding="utf-8")
