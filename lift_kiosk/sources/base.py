"""Helpers shared by the source parsers."""
from __future__ import annotations

import json
import re
from typing import Any, Iterable, Optional

from bs4 import BeautifulSoup

from ..errors import ParseError


def create_soup(html: str) -> BeautifulSoup:
    """Create a BeautifulSoup parser from HTML content."""
    return BeautifulSoup(html, "lxml")


def marker_pattern(name: str) -> re.Pattern[str]:
    """Match ``<name> = <json>;`` on a single line, capturing the JSON."""
    return re.compile(rf"{re.escape(name)}\s*=\s*(.*);")


def _script_texts(soup: BeautifulSoup) -> Iterable[str]:
    for script in soup.find_all("script"):
        text = script.string or script.get_text()
        if text:
            yield text


def find_marked_json(html: str, pattern: re.Pattern[str], *, soup: Optional[BeautifulSoup] = None) -> Any:
    """Locate a JSON blob assigned in an inline script and decode it.

    Inline ``<script>`` bodies are searched first; the raw page is the fallback
    for markup the HTML parser does not recognise as a script.
    """
    soup = soup or create_soup(html)
    match = None
    for text in _script_texts(soup):
        match = pattern.search(text)
        if match:
            break
    if match is None:
        match = pattern.search(html)
    if match is None:
        raise ParseError(f"marker {pattern.pattern!r} not found")
    try:
        return json.loads(match.group(1))
    except json.JSONDecodeError as exc:
        raise ParseError(f"invalid JSON after marker {pattern.pattern!r}: {exc}") from exc


def decode_json(body: str) -> Any:
    try:
        return json.loads(body)
    except json.JSONDecodeError as exc:
        raise ParseError(f"invalid JSON: {exc}") from exc
