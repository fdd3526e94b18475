"""Video URL discovery.

Runs every rule of ``VIDEO_URL_RULES`` over the document in table order and
collects the normalized, de-duplicated results.
"""

import logging

from app.models.media import MediaCandidate
from app.services.media_extractor.normalize import CandidateSet
from app.services.media_extractor.patterns import VIDEO_URL_RULES, ScanRule, scan

logger = logging.getLogger(__name__)


def discover_candidates(
    html: str, rules: tuple[ScanRule, ...] = VIDEO_URL_RULES
) -> list[MediaCandidate]:
    """Return every plausible video URL in *html* in discovery order."""
    if not html:
        return []

    found = CandidateSet()
    for rule in rules:
        before = len(found)
        for raw in scan(rule, html):
            found.add(raw, rule.classify)
        added = len(found) - before
        if added:
            logger.debug(f"Rule {rule.name} added {added} candidate(s)")

    return found.to_list()
