"""
PatternRule family: the matchers a FormatProfile is built from.

Rules within a field's list are tried in declaration order and the first
non-empty capture wins, so each list runs from the most specific vendor
pattern to the most permissive fallback.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from appraisal.config import Settings
from appraisal.models.record import FieldName, FieldResult, WarningCode
from appraisal.services.corrections import CorrectionTables, DEFAULT_TABLES, match_manufacturer_fragment
from appraisal.utils.candidates import RawCapture
from appraisal.utils.manufacturers import MANUFACTURER_PATTERN, canonical_manufacturer
from appraisal.utils.text import NormalizedLines
from appraisal.utils.vin import VIN_TOKEN, manufacturer_from_vin, model_year_from_vin


@dataclass
class RuleContext:
    """Per-document state shared by the rules of one extraction call."""
    lines: NormalizedLines
    settings: Settings
    tables: CorrectionTables = DEFAULT_TABLES
    resolved: Dict[FieldName, FieldResult] = field(default_factory=dict)
    warnings: List[WarningCode] = field(default_factory=list)
    vin_tier: Optional[str] = None

    def warn(self, code: WarningCode):
        if code not in self.warnings:
            self.warnings.append(code)

    def resolved_value(self, name: FieldName):
        result = self.resolved.get(name)
        return result.value if result is not None else None


@dataclass(frozen=True)
class PatternRule:
    """A named regex rule with example and notes for documentation."""
    name: str
    field: FieldName
    pattern: str
    example: str
    notes: Optional[str] = None
    flags: int = re.IGNORECASE | re.MULTILINE
    implied_decimal: bool = False
    compiled: re.Pattern = field(default=None, init=False, compare=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, 'compiled', re.compile(self.pattern, self.flags))

    def apply(self, context: RuleContext) -> Optional[RawCapture]:
        """Search the joined document text; group 1 is the capture."""
        text = context.lines.text
        match = self.compiled.search(text)
        if not match:
            return None

        captured = (match.group(1) or '').strip()
        if not captured:
            return None

        return RawCapture(
            value=captured,
            rule_id=self.name,
            line_index=context.lines.line_at(match.start(1)),
            raw_text=captured,
        )


@dataclass(frozen=True)
class HeaderScanRule(PatternRule):
    """
    Header line, then the value within the next K lines.

    pattern matches the header line; value_pattern's group 1 is the value.
    The scan stops at the first line carrying a value token or after K
    lines (settings.HEADER_SCAN_WINDOW), whichever comes first.
    """
    value_pattern: str = ''
    value_compiled: re.Pattern = field(default=None, init=False, compare=False, repr=False)

    def __post_init__(self):
        super().__post_init__()
        object.__setattr__(self, 'value_compiled', re.compile(self.value_pattern, self.flags))

    def apply(self, context: RuleContext) -> Optional[RawCapture]:
        lines = context.lines
        window = context.settings.HEADER_SCAN_WINDOW

        for header_index, line in enumerate(lines):
            if not self.compiled.search(line):
                continue

            for index, candidate_line in lines.window(header_index + 1, window):
                match = self.value_compiled.search(candidate_line)
                if match and match.group(1).strip():
                    captured = match.group(1).strip()
                    return RawCapture(
                        value=captured,
                        rule_id=self.name,
                        line_index=index,
                        raw_text=captured,
                    )

        return None


@dataclass(frozen=True)
class DescriptionRule(PatternRule):
    """
    Captures a vehicle description ("2019 Toyota Corolla | S Plus") and
    yields its make or model part, selected by the rule's field.
    """

    def apply(self, context: RuleContext) -> Optional[RawCapture]:
        text = context.lines.text
        for match in self.compiled.finditer(text):
            description = (match.group(1) or '').strip()
            if not description:
                continue

            raw_make, make, model = split_description(description, context.tables)
            if self.field == FieldName.MAKE:
                value, raw = make, raw_make
            else:
                value, raw = clean_model(model), model

            if value:
                return RawCapture(
                    value=value,
                    rule_id=self.name,
                    line_index=context.lines.line_at(match.start(1)),
                    raw_text=raw,
                )

        return None


@dataclass(frozen=True)
class IdentifierRule(PatternRule):
    """
    Collects every VIN-shaped occurrence the pattern finds; selection
    among them belongs to the disambiguator.
    """
    flags: int = re.MULTILINE

    def collect(self, context: RuleContext) -> List[RawCapture]:
        captures = []
        for index, line in enumerate(context.lines):
            for match in self.compiled.finditer(line):
                token = match.group(1)
                if token and VIN_TOKEN.fullmatch(token):
                    captures.append(RawCapture(
                        value=token,
                        rule_id=self.name,
                        line_index=index,
                        raw_text=token,
                    ))
        return captures

    def apply(self, context: RuleContext) -> Optional[RawCapture]:
        captures = self.collect(context)
        return captures[0] if captures else None


@dataclass(frozen=True)
class VinDecodeRule:
    """Derives year or make from an already-resolved VIN."""
    name: str
    field: FieldName
    example: str = ''
    notes: Optional[str] = None
    implied_decimal: bool = False

    def apply(self, context: RuleContext) -> Optional[RawCapture]:
        vin = context.resolved_value(FieldName.VIN)
        if not vin:
            return None

        if self.field == FieldName.YEAR:
            year = model_year_from_vin(vin)
            decoded = str(year) if year else None
        else:
            decoded = manufacturer_from_vin(vin)

        if not decoded:
            return None

        vin_result = context.resolved[FieldName.VIN]
        return RawCapture(
            value=decoded,
            rule_id=self.name,
            line_index=vin_result.line_index,
            raw_text=decoded,
        )


def split_description(
    description: str,
    tables: CorrectionTables = DEFAULT_TABLES
) -> Tuple[str, str, str]:
    """
    Split a vehicle description into (raw_make, make, model).

    The model is everything after the manufacturer up to the first "|".
    A manufacturer fragment ("oyota") marks the boundary the same way but
    is returned uncorrected; if neither is present the first word is the
    make.

    Examples:
        >>> split_description("Toyota Corolla | S Plus 4 Door Sedan")
        ('Toyota', 'Toyota', 'Corolla')
        >>> split_description("oyota Corolla | S Plus 4 Door Sedan")
        ('oyota', 'oyota', 'Corolla')
    """
    text = description.strip()

    fallback = None
    for match in MANUFACTURER_PATTERN.finditer(text):
        model = _model_after(text, match.end())
        if model:
            return match.group(1), canonical_manufacturer(match.group(1)), model
        if fallback is None:
            fallback = (match.group(1), canonical_manufacturer(match.group(1)), '')

    if fallback:
        return fallback

    fragment = match_manufacturer_fragment(text, tables)
    if fragment:
        _, match = fragment
        raw_make = text[match.start():match.end()]
        return raw_make, raw_make, _model_after(text, match.end())

    words = text.split()
    if not words:
        return '', '', ''
    raw_make = words[0]
    return raw_make, raw_make, _model_after(text, len(raw_make))


def _model_after(text: str, position: int) -> str:
    remainder = text[position:].split('|', 1)[0]
    return remainder.strip(' -,')


_MODEL_TAIL_PATTERNS = (
    re.compile(r'\s+Vehicle\b.*$', re.IGNORECASE),  # "Vehicle Information Section..."
    re.compile(r'\s+Section\b.*$', re.IGNORECASE),
    re.compile(r'\s+\d+\s+Door\b.*$', re.IGNORECASE),
    re.compile(r'\s+\d+\.\d+L\b.*$', re.IGNORECASE),
    re.compile(r'\s+(?:AWD|FWD|RWD|4WD)\b.*$', re.IGNORECASE),
)


def clean_model(model: str) -> str:
    """
    Strip OCR debris and trailing specs from a model name.

    Examples:
        >>> clean_model("Corolla 4 Door Sedan")
        'Corolla'
        >>> clean_model("Model 3 Vehicle Information Section")
        'Model 3'
    """
    if not model:
        return ''

    cleaned = model
    for pattern in _MODEL_TAIL_PATTERNS:
        cleaned = pattern.sub('', cleaned)

    cleaned = re.sub(r'^[^A-Za-z0-9]+', '', cleaned)
    cleaned = re.sub(r'[^A-Za-z0-9\s\-]', ' ', cleaned)
    return re.sub(r'\s+', ' ', cleaned).strip()
