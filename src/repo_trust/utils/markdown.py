"""README section extraction behind a swappable interface."""

from __future__ import annotations

import re
from typing import Iterator, List, Optional, Protocol, Tuple

_HEADER_RE = re.compile(r"^ {0,3}#{1,6}(?:[ \t]+(?P<title>.*?))?[ \t#]*$")
_FENCE_RE = re.compile(r"^ {0,3}(```|~~~)")


class SectionExtractor(Protocol):
    """Port for pulling one titled section out of a Markdown document."""

    def extract(self, markdown: str, header: str) -> Optional[str]:
        """Return the body under the first matching header, or None."""
        ...


def _headers(lines: List[str]) -> Iterator[Tuple[int, str]]:
    """Yield (line index, title) for ATX headers outside fenced code."""
    in_fence = False
    for i, line in enumerate(lines):
        if _FENCE_RE.match(line):
            in_fence = not in_fence
            continue
        if in_fence:
            continue
        m = _HEADER_RE.match(line)
        if m:
            yield i, (m.group("title") or "")


class RegexSectionExtractor:
    """
    Line-oriented ATX header scan.

    A header matches when its title contains `header` case-insensitively.
    The section body runs to the next header of any level or end of text.
    """

    def extract(self, markdown: str, header: str) -> Optional[str]:
        if not markdown or not header:
            return None
        needle = header.strip().lower()
        lines = markdown.splitlines()
        headers = list(_headers(lines))
        for pos, (idx, title) in enumerate(headers):
            if needle not in title.lower():
                continue
            end = headers[pos + 1][0] if pos + 1 < len(headers) else len(lines)
            return "\n".join(lines[idx + 1:end]).strip()
        return None


_default = RegexSectionExtractor()


def extract_section(markdown: str, header: str) -> Optional[str]:
    return _default.extract(markdown, header)
