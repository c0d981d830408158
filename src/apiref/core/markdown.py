"""Post-processing for generated Markdown files.

VitePress misparses a few characters inside table cells
(https://github.com/vuejs/vitepress/issues/449), and every reference page
needs the same front matter. Both edits are idempotent, so a file may be
processed more than once.
"""

import logging
import re
from pathlib import Path

logger = logging.getLogger(__name__)

FRONT_MATTER = "---\neditLink: false\nprev: false\nnext: false\noutline: false\n---\n"

TABLE_ESCAPES = {
    ";": "&semi;",
    "{": "&lbrace;",
    "}": "&rbrace;",
}

# Unescaped pipe; "\|" is literal cell content in GFM tables
CELL_DELIMITER_RE = re.compile(r"(?<!\\)\|")

# Existing character references are matched first and kept as-is
ESCAPE_RE = re.compile(r"(&(?:[A-Za-z][A-Za-z0-9]*|#[0-9]+|#[xX][0-9A-Fa-f]+);)|([;{}])")


def _escape_cell(text: str) -> str:
    return ESCAPE_RE.sub(lambda m: m.group(1) or TABLE_ESCAPES[m.group(2)], text)


def _escape_line(line: str) -> str:
    delimiters = list(CELL_DELIMITER_RE.finditer(line))
    if len(delimiters) < 2:
        return line

    parts = [line[: delimiters[0].end()]]
    for opening, closing in zip(delimiters, delimiters[1:]):
        parts.append(_escape_cell(line[opening.end() : closing.start()]))
        parts.append("|")
    parts.append(line[delimiters[-1].end() :])
    return "".join(parts)


def escape_table_cells(markdown: str) -> str:
    """Escape ``;``, ``{`` and ``}`` between table cell delimiters.

    Text outside a pair of ``|`` on the same line is left untouched.
    """
    return "".join(_escape_line(line) for line in markdown.splitlines(keepends=True))


def add_front_matter(markdown: str) -> str:
    """Prepend the reference-page front matter unless already present."""
    if markdown.startswith(FRONT_MATTER):
        return markdown
    return FRONT_MATTER + markdown


def process_markdown(markdown: str) -> str:
    """Apply all post-processing steps to a Markdown string."""
    return add_front_matter(escape_table_cells(markdown))


def process_markdown_files(directory: Path) -> list[Path]:
    """Post-process every Markdown file below a directory, in place.

    Args:
        directory: Root of the generated Markdown tree

    Returns:
        Processed file paths, sorted
    """
    processed: list[Path] = []
    for file_path in sorted(directory.rglob("*.md")):
        if not file_path.is_file():
            continue
        markdown = file_path.read_text(encoding="utf-8")
        file_path.write_text(process_markdown(markdown), encoding="utf-8")
        processed.append(file_path)
    logger.debug(f"Post-processed {len(processed)} markdown files in {directory}")
    return processed
