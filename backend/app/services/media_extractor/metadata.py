"""Title and description discovery."""

from typing import Optional

from app.services.media_extractor.constants import MAX_TEXT_LENGTH
from app.services.media_extractor.normalize import clean_text
from app.services.media_extractor.patterns import (
    ScanKind,
    ScanRule,
    compile_pattern,
    meta_content_rule,
    scan,
)


def _tag_text_rule(tag: str) -> ScanRule:
    return ScanRule(
        name=f"{tag}_text",
        scan_kind=ScanKind.TAG_CONTENT,
        pattern=compile_pattern(
            rf"<{tag}\b[^<>]{{0,500}}>(?P<value>[^<]{{1,{MAX_TEXT_LENGTH}}})</{tag}\s{{0,5}}>"
        ),
        group="value",
    )


TITLE_RULES: tuple[ScanRule, ...] = (
    meta_content_rule("og_title", ("og:title",)),
    _tag_text_rule("title"),
    _tag_text_rule("h1"),
)

DESCRIPTION_RULES: tuple[ScanRule, ...] = (
    meta_content_rule("og_description", ("og:description",)),
    meta_content_rule("meta_description", ("description",)),
)


def first_text(html: str, rules: tuple[ScanRule, ...]) -> Optional[str]:
    """First non-empty, entity-decoded value any of *rules* finds."""
    if not html:
        return None
    for rule in rules:
        for raw in scan(rule, html):
            text = clean_text(raw)
            if text:
                return text
    return None


def find_title(html: str) -> Optional[str]:
    return first_text(html, TITLE_RULES)


def find_description(html: str) -> Optional[str]:
    return first_text(html, DESCRIPTION_RULES)
