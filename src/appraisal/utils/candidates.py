"""
Capture and candidate dataclasses for field extraction.

A RawCapture is what a single PatternRule produced; an IdentifierCandidate
is one of possibly many VIN-shaped occurrences handed to the disambiguator.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class RawCapture:
    """
    Text captured by a rule, before corrections.

    value is the field-ready string (e.g. "Corolla"); raw_text is the
    capture as it appeared in the document (e.g. "oyota Corolla").
    """
    value: str
    rule_id: str
    line_index: Optional[int] = None
    raw_text: str = ""


@dataclass(frozen=True)
class IdentifierCandidate:
    """
    VIN-shaped occurrence in the document.

    Ordering factors for disambiguation:
    - line_index: position in the document (earlier = better within a tier)
    - near_label: within the label window after "Ext Color"
    - in_leading_section: inside the vehicle identification block
    """
    value: str
    line_index: int
    rule_id: str
    near_label: bool = False
    in_leading_section: bool = False


def create_identifier_candidate(
    value: str,
    line_index: int,
    rule_id: str,
    label_lines: tuple[int, ...] = (),
    label_window: int = 0,
    leading_section_lines: int = 0,
) -> IdentifierCandidate:
    """
    Create IdentifierCandidate with computed positional flags.

    Args:
        value: Identifier text as captured
        line_index: Line the identifier appears on
        rule_id: Rule that produced the occurrence
        label_lines: Indices of lines carrying a co-located label
        label_window: Lines scanned from each label line (label line included)
        leading_section_lines: Size of the leading structural section

    Returns:
        IdentifierCandidate with computed flags
    """
    near_label = any(
        label_index <= line_index < label_index + label_window
        for label_index in label_lines
    )

    return IdentifierCandidate(
        value=value,
        line_index=line_index,
        rule_id=rule_id,
        near_label=near_label,
        in_leading_section=line_index < leading_section_lines,
    )
