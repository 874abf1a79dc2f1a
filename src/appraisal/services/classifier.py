"""
Vendor classifier: picks the FormatProfile for a document.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Optional, Tuple

from appraisal.services.profiles import CCC, GENERIC, MITCHELL, STATE_FARM, FormatProfile
from appraisal.utils.text import NormalizedLines

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VendorSignature:
    """
    Layout marker for one vendor.

    Every pattern in `patterns` must match the joined text for the
    signature to hold.
    """
    name: str
    profile: FormatProfile
    patterns: Tuple[str, ...]
    example: str
    flags: int = re.MULTILINE
    compiled: Tuple[re.Pattern, ...] = field(default=(), init=False, compare=False, repr=False)

    def __post_init__(self):
        object.__setattr__(
            self, 'compiled', tuple(re.compile(pattern, self.flags) for pattern in self.patterns)
        )

    def matches(self, text: str) -> bool:
        return all(pattern.search(text) for pattern in self.compiled)


# Fixed priority order; first match wins
SIGNATURES: Tuple[VendorSignature, ...] = (
    VendorSignature(
        name='ccc.one',
        profile=CCC,
        patterns=(r'CCC ONE|CCC One',),
        example='CCC ONE Market Valuation Report',
    ),
    VendorSignature(
        name='ccc.intelligent_solutions',
        profile=CCC,
        patterns=(r'CCC Intelligent Solutions',),
        example='CCC Intelligent Solutions Inc.',
    ),
    VendorSignature(
        name='ccc.adjusted_vehicle_value',
        profile=CCC,
        patterns=(r'^Adjusted Vehicle Value\b',),
        example='Adjusted Vehicle Value $ 9,180.00',
    ),
    VendorSignature(
        name='mitchell.brand',
        profile=MITCHELL,
        patterns=(r'\bMitchell\b|\bWorkCenter\b',),
        example='Mitchell WorkCenter Total Loss',
    ),
    VendorSignature(
        name='mitchell.loss_vehicle',
        profile=MITCHELL,
        patterns=(r'(?:Loss|oss) ?vehicle: ?(?:19|20)\d{2} [^\n|]+\|',),
        example='Loss vehicle: 2019 Toyota Corolla | S Plus 4 Door Sedan',
        flags=re.MULTILINE | re.IGNORECASE,
    ),
    VendorSignature(
        name='state_farm.brand',
        profile=STATE_FARM,
        patterns=(r'State ?Farm',),
        example='State Farm Mutual Automobile Insurance Company',
        flags=re.MULTILINE | re.IGNORECASE,
    ),
    VendorSignature(
        name='state_farm.valuation_summary',
        profile=STATE_FARM,
        patterns=(r'VALUATION SUMMARY', r'Value before'),
        example='VALUATION SUMMARY ... Value before Deductible',
    ),
)


def classify(
    lines: NormalizedLines,
    signatures: Tuple[VendorSignature, ...] = SIGNATURES
) -> Tuple[FormatProfile, Optional[str]]:
    """
    Select the profile whose signature matches first.

    Returns:
        (profile, signature name); (GENERIC, None) when nothing matches
    """
    text = lines.text
    for signature in signatures:
        if signature.matches(text):
            logger.debug("Classified as %s by signature %s", signature.profile.name, signature.name)
            return signature.profile, signature.name

    logger.debug("No vendor signature matched, using %s", GENERIC.name)
    return GENERIC, None
