"""Marker-based text extraction from rendered documentation pages.

There is no DOM parsing here: the page is scanned for a recognizable
main-content container and for highlighted code regions. A page without the
markers yields empty results.
"""

import html as html_lib
import re
from typing import List, Optional, Tuple

MAIN_CONTENT_MARKERS = ("main-content", "markdown-body", "provider-docs-content", "<main", "<article")
EXAMPLE_MARKERS = ("highlight", "<pre", "<code")

_TAG_RE = re.compile(r"<[^>]+>")
_WHITESPACE_RE = re.compile(r"\s+")
_SCRIPT_STYLE_RE = re.compile(r"<(script|style)\b.*?</\1\s*>", re.S | re.I)
_OPEN_TAG_NAME_RE = re.compile(r"<\s*([a-zA-Z][\w-]*)")


def strip_tags(fragment: str) -> str:
    """Drop markup, unescape entities and collapse whitespace."""
    text = _SCRIPT_STYLE_RE.sub(" ", fragment)
    text = _TAG_RE.sub(" ", text)
    text = html_lib.unescape(text)
    return _WHITESPACE_RE.sub(" ", text).strip()


def _enclosing_tag_start(page: str, marker_index: int) -> int:
    if page.startswith("<", marker_index):
        return marker_index
    return page.rfind("<", 0, marker_index)


def _matching_close(page: str, tag: str, content_start: int) -> int:
    """Index of the close tag balancing an element of ``tag`` opened before ``content_start``."""
    opener = re.compile(rf"<{tag}\b", re.I)
    closer = re.compile(rf"</{tag}\s*>", re.I)
    depth = 1
    position = content_start
    while depth:
        close = closer.search(page, position)
        if close is None:
            return len(page)
        nested = opener.search(page, position, close.start())
        if nested is not None:
            depth += 1
            position = nested.end()
            continue
        depth -= 1
        position = close.end()
        if depth == 0:
            return close.start()
    return len(page)


def _main_region(page: str) -> Optional[Tuple[int, int]]:
    lowered = page.lower()
    for marker in MAIN_CONTENT_MARKERS:
        index = lowered.find(marker)
        if index == -1:
            continue
        tag_start = _enclosing_tag_start(page, index)
        if tag_start == -1:
            continue
        name = _OPEN_TAG_NAME_RE.match(page, tag_start)
        content_start = page.find(">", index)
        if name is None or content_start == -1:
            continue
        content_start += 1
        return content_start, _matching_close(page, name.group(1), content_start)
    return None


def extract_main_text(page: str) -> str:
    """Plain text of the page's main content region, or '' when none is found."""
    if not page:
        return ""
    region = _main_region(page)
    if region is None:
        return ""
    start, end = region
    return strip_tags(page[start:end])


def extract_example_blocks(page: str) -> List[str]:
    """Text of highlighted code regions, in page order, without duplicates."""
    blocks: List[str] = []
    if not page:
        return blocks
    lowered = page.lower()
    position = 0
    while True:
        hits = [(lowered.find(marker, position), marker) for marker in EXAMPLE_MARKERS]
        hits = [(index, marker) for index, marker in hits if index != -1]
        if not hits:
            break
        index, _ = min(hits)
        in_text = page.rfind(">", 0, index) > page.rfind("<", 0, index)
        if in_text and not page.startswith("<", index):
            # marker in running text, not inside a tag
            position = index + 1
            continue
        start = page.find(">", index)
        if start == -1:
            break
        start += 1
        ends = [i for i in (lowered.find("</pre>", start), lowered.find("</code>", start)) if i != -1]
        if not ends:
            break
        end = min(ends)
        text = html_lib.unescape(_TAG_RE.sub("", page[start:end])).strip()
        if text and text not in blocks:
            blocks.append(text)
        position = end + 1
    return blocks
