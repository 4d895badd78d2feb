"""Data models for blamekit"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Set, Tuple


@dataclass(eq=False)
class Finding:
    """One static-analysis warning tied to a file and line.

    Compared and hashed by identity so that two warnings on the same line stay
    distinct members of a set. The attribution fields are filled in place by
    the blamer and stay ``None`` when nothing could be resolved.
    """

    file_name: str  # absolute or workspace-relative path
    primary_line_number: int  # 1-based
    finding_type: str = ""
    message: str = ""
    severity: str = "NORMAL"  # LOW | NORMAL | HIGH

    author_name: Optional[str] = None
    author_email: Optional[str] = None
    commit_id: Optional[str] = None

    @property
    def is_attributed(self) -> bool:
        return bool(self.commit_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "file_name": self.file_name,
            "primary_line_number": self.primary_line_number,
            "finding_type": self.finding_type,
            "message": self.message,
            "severity": self.severity,
            "author_name": self.author_name,
            "author_email": self.author_email,
            "commit_id": self.commit_id,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Finding":
        return cls(
            file_name=str(d["file_name"]),
            primary_line_number=int(d.get("primary_line_number", d.get("line", 0))),
            finding_type=d.get("finding_type", ""),
            message=d.get("message", ""),
            severity=d.get("severity", "NORMAL"),
            author_name=d.get("author_name"),
            author_email=d.get("author_email"),
            commit_id=d.get("commit_id"),
        )


@dataclass
class BlameRequest:
    """All distinct lines requested for one file, plus what blame resolved.

    Every line present in one of the per-line mappings is also in ``lines``.
    Lookups for unresolved lines return ``None``.
    """

    file_name: str
    lines: Set[int] = field(default_factory=set)
    names: Dict[int, str] = field(default_factory=dict)
    emails: Dict[int, str] = field(default_factory=dict)
    commits: Dict[int, str] = field(default_factory=dict)

    def __iter__(self) -> Iterator[int]:
        return iter(sorted(self.lines))

    def __len__(self) -> int:
        return len(self.lines)

    def add_line(self, line: int) -> "BlameRequest":
        self.lines.add(line)
        return self

    def set_name(self, line: int, name: str) -> None:
        self.lines.add(line)
        self.names[line] = name

    def set_email(self, line: int, email: str) -> None:
        self.lines.add(line)
        self.emails[line] = email

    def set_commit(self, line: int, commit_id: str) -> None:
        self.lines.add(line)
        self.commits[line] = commit_id

    def get_name(self, line: int) -> Optional[str]:
        return self.names.get(line)

    def get_email(self, line: int) -> Optional[str]:
        return self.emails.get(line)

    def get_commit(self, line: int) -> Optional[str]:
        return self.commits.get(line)

    @property
    def resolved_lines(self) -> Set[int]:
        return set(self.commits) | set(self.names)

    def to_dict(self) -> Dict[str, Any]:
        # JSON object keys must be strings
        return {
            "file_name": self.file_name,
            "lines": sorted(self.lines),
            "names": {str(k): v for k, v in self.names.items()},
            "emails": {str(k): v for k, v in self.emails.items()},
            "commits": {str(k): v for k, v in self.commits.items()},
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "BlameRequest":
        return cls(
            file_name=d["file_name"],
            lines={int(line) for line in d.get("lines", [])},
            names={int(k): v for k, v in d.get("names", {}).items()},
            emails={int(k): v for k, v in d.get("emails", {}).items()},
            commits={int(k): v for k, v in d.get("commits", {}).items()},
        )

    def __repr__(self) -> str:
        return f"BlameRequest({self.file_name!r}, lines={sorted(self.lines)})"


@dataclass(frozen=True)
class BlameLine:
    """Author and commit that last touched one line."""

    author_name: Optional[str]
    author_email: Optional[str]
    commit_id: Optional[str]


@dataclass
class BlameResult:
    """Line-by-line blame of one file at one commit, indexed from 0."""

    file_name: str
    commit: str
    lines: List[BlameLine] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.lines)

    def source_author(self, index: int) -> Optional[Tuple[str, str]]:
        """Return ``(name, email)`` for the line at ``index``, or None."""
        entry = self.lines[index]
        if entry.author_name is None:
            return None
        return entry.author_name, entry.author_email or ""

    def source_commit(self, index: int) -> Optional[str]:
        return self.lines[index].commit_id


@dataclass
class AttributionSummary:
    """Outcome of one blame batch, for reporting."""

    total_findings: int = 0
    attributed_findings: int = 0
    reference_commit: Optional[str] = None
    blamed_files: List[str] = field(default_factory=list)
    failed_files: List[str] = field(default_factory=list)
    interrupted: bool = False
    aborted: bool = False

    @property
    def unattributed_findings(self) -> int:
        return self.total_findings - self.attributed_findings
