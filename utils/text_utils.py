from __future__ import annotations

import re
from typing import Optional

from bs4 import BeautifulSoup  # type: ignore

_TAG_RE = re.compile(r"<[^>]*>")
_FENCE_OPEN_RE = re.compile(r"^\s*```[a-zA-Z]*[ \t]*\n?")
_FENCE_CLOSE_RE = re.compile(r"\n?```\s*$")


def strip_tags(html: Optional[str]) -> str:
    """Remove every ``<...>`` tag, keeping everything between them (script bodies included)."""
    if not html:
        return ""
    return _TAG_RE.sub("", html)


def count_words(text: Optional[str]) -> int:
    """Number of whitespace-separated tokens."""
    if not text:
        return 0
    return len(text.split())


def clean_html_to_text(html: Optional[str]) -> str:
    """
    Convert raw HTML into visible plain text for prompts.

    - Strips <script>, <style> and <noscript> blocks.
    - Uses the built-in html.parser.
    - Normalizes whitespace.
    """
    if not html:
        return ""

    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()

    return " ".join(soup.get_text(separator=" ", strip=True).split())


def truncate_text(text: Optional[str], max_length: int) -> Optional[str]:
    """
    Behavior:
    - If text is None: return None.
    - If max_length <= 0: return "".
    - Else: at most the first max_length characters (no ellipsis).
    """
    if text is None:
        return None
    if max_length <= 0:
        return ""
    return text[:max_length]


def strip_code_fence(text: Optional[str]) -> str:
    """
    Drop a Markdown code fence wrapped around an LLM completion.

    "```json\\n{...}\\n```" -> "{...}". Text without a fence is only trimmed.
    """
    if not text:
        return ""
    stripped = _FENCE_OPEN_RE.sub("", text, count=1)
    stripped = _FENCE_CLOSE_RE.sub("", stripped, count=1)
    return stripped.strip()
