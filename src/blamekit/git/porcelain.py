"""Parser for ``git blame --porcelain`` output."""

import re
from typing import Dict, List, Optional, Tuple

from ..models import BlameLine, BlameResult

# <sha> <orig-line> <final-line> [<group-size>]
_HEADER_RE = re.compile(r"^([0-9a-f]{40,64}) (\d+) (\d+)(?: (\d+))?$")

NOT_COMMITTED_RE = re.compile(r"^0+$")


def parse_porcelain(raw: str, file_name: str = "", commit: str = "") -> BlameResult:
    """Parse porcelain blame output into a 0-indexed BlameResult.

    Commit metadata (``author``, ``author-mail``) is only printed the first
    time a sha appears, so it is remembered per sha and reused for later
    groups. Lines are ordered by their final line number.
    """
    authors: Dict[str, Tuple[Optional[str], Optional[str]]] = {}
    entries: Dict[int, str] = {}

    current_sha: Optional[str] = None
    current_final = 0

    for line in raw.split("\n"):
        if not line:
            continue

        if line.startswith("\t"):
            # Content line closes the current entry
            if current_sha is not None:
                entries[current_final] = current_sha
            current_sha = None
            continue

        match = _HEADER_RE.match(line)
        if match:
            current_sha = match.group(1)
            current_final = int(match.group(3))
            authors.setdefault(current_sha, (None, None))
            continue

        if current_sha is None:
            continue

        key, _, value = line.partition(" ")
        name, email = authors[current_sha]
        if key == "author":
            authors[current_sha] = (value, email)
        elif key == "author-mail":
            authors[current_sha] = (name, value.strip().strip("<>"))

    lines: List[BlameLine] = []
    for final_line in sorted(entries):
        sha = entries[final_line]
        name, email = authors.get(sha, (None, None))
        lines.append(
            BlameLine(
                author_name=name,
                author_email=email,
                commit_id=None if NOT_COMMITTED_RE.match(sha) else sha,
            )
        )

    return BlameResult(file_name=file_name, commit=commit, lines=lines)
