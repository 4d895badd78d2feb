"""
blamekit - git author and commit attribution for static-analysis findings.

Groups findings by file, blames each file once against a single reference
commit, and writes the author name, email and commit id of each finding's
line back onto the finding.
"""

__version__ = "0.1.0"

from .blame import GitBlamer, NullBlamer, create_blamer
from .config import BlameConfig, load_config
from .models import AttributionSummary, BlameRequest, Finding

__all__ = [
    "create_blamer",  # Main entry point
    "GitBlamer",
    "NullBlamer",
    "BlameConfig",
    "load_config",
    "Finding",
    "BlameRequest",
    "AttributionSummary",
]
