"""
Candidate disambiguator for the vehicle identifier.

Valuation reports list comparable vehicles with syntactically valid VINs,
so the first VIN-shaped token is often not the subject vehicle's. Tiers,
strongest signal first:

1. label_proximity: within LABEL_WINDOW lines of an "Ext Color" label
2. leading_section: inside the first LEADING_SECTION_LINES lines
3. first_occurrence: first occurrence anywhere

A tier is consulted only when every stronger tier is empty.
"""

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from appraisal.config import Settings
from appraisal.utils.candidates import IdentifierCandidate, RawCapture, create_identifier_candidate
from appraisal.utils.text import NormalizedLines

logger = logging.getLogger(__name__)

TIER_LABEL_PROXIMITY = 'label_proximity'
TIER_LEADING_SECTION = 'leading_section'
TIER_FIRST_OCCURRENCE = 'first_occurrence'

# Vendors print the subject VIN next to the exterior color block
CO_LOCATED_LABEL = re.compile(r'\bext(?:erior)?\.? ?colou?r\b', re.IGNORECASE)


@dataclass(frozen=True)
class Selection:
    capture: RawCapture
    candidate: IdentifierCandidate
    tier: str
    ambiguous: bool = False


def find_label_lines(lines: NormalizedLines) -> Tuple[int, ...]:
    return tuple(index for index, line in enumerate(lines) if CO_LOCATED_LABEL.search(line))


def build_candidates(
    captures: Sequence[RawCapture],
    lines: NormalizedLines,
    settings: Settings
) -> List[IdentifierCandidate]:
    label_lines = find_label_lines(lines)
    return [
        create_identifier_candidate(
            value=capture.value,
            line_index=capture.line_index,
            rule_id=capture.rule_id,
            label_lines=label_lines,
            label_window=settings.LABEL_WINDOW,
            leading_section_lines=settings.LEADING_SECTION_LINES,
        )
        for capture in captures
    ]


def select_identifier(
    captures: Sequence[RawCapture],
    lines: NormalizedLines,
    settings: Settings
) -> Optional[Selection]:
    """
    Pick the subject vehicle's identifier among captured occurrences.

    Args:
        captures: Occurrences pooled from every identifier rule, in rule order;
            the sort by line is stable, so rule order breaks same-line ties
        lines: Document lines, used to locate co-located labels
        settings: Window sizes for tiers 1 and 2

    Returns:
        Selection with the winning tier, or None when captures is empty.
        ambiguous is set only when the weakest tier decided among more
        than one distinct value.
    """
    if not captures:
        return None

    candidates = build_candidates(captures, lines, settings)
    paired = sorted(zip(candidates, captures), key=lambda pair: pair[0].line_index)

    tiers = (
        (TIER_LABEL_PROXIMITY, lambda candidate: candidate.near_label),
        (TIER_LEADING_SECTION, lambda candidate: candidate.in_leading_section),
    )
    for tier, accepts in tiers:
        for candidate, capture in paired:
            if accepts(candidate):
                logger.debug("Identifier %s selected by %s", candidate.value, tier)
                return Selection(capture=capture, candidate=candidate, tier=tier)

    candidate, capture = paired[0]
    distinct = {other.value for other, _ in paired}
    ambiguous = len(distinct) > 1
    if ambiguous:
        logger.debug("Identifier %s selected from %d distinct values", candidate.value, len(distinct))
    return Selection(
        capture=capture,
        candidate=candidate,
        tier=TIER_FIRST_OCCURRENCE,
        ambiguous=ambiguous,
    )
