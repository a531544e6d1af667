from __future__ import annotations

import re
from typing import Optional

from .models import Reference

_QUOTES_RE = re.compile("[\"'“”‘’]")
# Trailing "go" pasted along with the link, e.g. from a "Go" button label.
# Anchored at the end, so a repository whose name ends in "go" loses it too.
_TRAILING_GO_RE = re.compile(r"go$", re.IGNORECASE)
_GITHUB_PREFIX_RE = re.compile(r"^https?://(www\.)?github\.com/", re.IGNORECASE)


def normalize(text: Optional[str]) -> Optional[Reference]:
    """Parse a pasted GitHub link into a user or repository reference.

    Accepts full URLs (``https://github.com/octocat/hello-world``) as well as
    bare ``owner`` or ``owner/repo`` paths. Returns ``None`` when nothing that
    looks like an owner survives the cleanup.
    """
    if not text:
        return None
    cleaned = text.strip()
    if not cleaned:
        return None

    cleaned = _QUOTES_RE.sub("", cleaned)
    cleaned = cleaned.rstrip()
    cleaned = _TRAILING_GO_RE.sub("", cleaned, count=1)
    cleaned = _GITHUB_PREFIX_RE.sub("", cleaned)

    segments = [segment for segment in cleaned.split("/") if segment]
    if not segments:
        return None
    if len(segments) == 1:
        return Reference.user(segments[0])
    return Reference.for_repo(segments[0], segments[1])
