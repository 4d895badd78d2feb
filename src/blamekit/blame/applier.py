"""Copy resolved blame data back onto findings."""

from typing import Iterable, Mapping

from ..models import BlameRequest, Finding


def apply_blames(findings: Iterable[Finding], requests: Mapping[str, BlameRequest]) -> int:
    """Set author name, email and commit on each finding from its file's request.

    Every finding's file must have a request (they were all registered during
    extraction); a missing one raises KeyError. Unresolved lines leave the
    fields at None.

    Returns:
        Number of findings that received a commit id.
    """
    attributed = 0
    for finding in findings:
        request = requests[finding.file_name]
        line = finding.primary_line_number
        finding.author_name = request.get_name(line)
        finding.author_email = request.get_email(line)
        finding.commit_id = request.get_commit(line)
        if finding.commit_id:
            attributed += 1
    return attributed
