"""Group findings by file into blame requests."""

from typing import Dict, Iterable

from ..models import BlameRequest, Finding


def extract_conflicting_files(findings: Iterable[Finding]) -> Dict[str, BlameRequest]:
    """Build one BlameRequest per distinct file, holding every distinct line.

    Two findings on the same file and line contribute a single requested
    line, so each file is blamed once regardless of how many findings it has.
    """
    requests: Dict[str, BlameRequest] = {}
    for finding in findings:
        request = requests.get(finding.file_name)
        if request is None:
            request = BlameRequest(finding.file_name)
            requests[finding.file_name] = request
        request.add_line(finding.primary_line_number)
    return requests
