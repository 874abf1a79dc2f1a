"""
OCR correction layer.

Repairs known OCR confusions in values a PatternRule already captured.
Every correction is a deterministic table lookup; nothing here searches
the document or invents a value. Tables are immutable and versioned; the
parser receives one CorrectionTables instance and shares it across calls.

Correction classes:
- manufacturer: dropped leading glyph ("oyota" -> "Toyota")
- model: per-manufacturer confusions ("XG60" -> "XC60" for Volvo),
  then a manufacturer-agnostic fixed-position substitution
- vin: glyph substitutions, tried only when the identifier fails the
  format/check-digit sanity check; always length-preserving
- numeric: dropped decimal point in amounts from rules flagged for it
"""

import logging
import re
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Tuple, Union

from appraisal.models.record import FieldName, MONEY_FIELDS
from appraisal.utils.manufacturers import canonical_manufacturer
from appraisal.utils.money import parse_money, parse_mileage, repair_implied_decimal
from appraisal.utils.vin import is_well_formed, passes_check_digit

logger = logging.getLogger(__name__)

CORRECTION_TABLE_VERSION = "2025.2"


@dataclass(frozen=True)
class CorrectionRule:
    """
    A single known OCR confusion.

    For vin rules, position pins the substitution to one index; when it
    is None every occurrence at or after min_position is replaced.
    prefixes/excluded_prefixes restrict the rule to identifiers whose
    leading characters (WMI) match.
    """
    correction_id: str
    wrong: str
    right: str
    make: Optional[str] = None
    position: Optional[int] = None
    min_position: int = 0
    prefixes: Tuple[str, ...] = ()
    excluded_prefixes: Tuple[str, ...] = ()
    notes: Optional[str] = None

    def applies_to(self, value: str) -> bool:
        if self.prefixes and not value.startswith(self.prefixes):
            return False
        if self.excluded_prefixes and value.startswith(self.excluded_prefixes):
            return False
        if self.position is not None:
            return len(value) > self.position and value[self.position] == self.wrong
        return self.wrong in value[self.min_position:]

    def substitute(self, value: str) -> str:
        """Length-preserving substitution of a single glyph."""
        if self.position is not None:
            return value[:self.position] + self.right + value[self.position + 1:]
        head, tail = value[:self.min_position], value[self.min_position:]
        return head + tail.replace(self.wrong, self.right)


MANUFACTURER_FRAGMENTS: Tuple[CorrectionRule, ...] = tuple(sorted((
    CorrectionRule('make.fragment.oyota', 'oyota', 'Toyota', notes='Leading "T" lost'),
    CorrectionRule('make.fragment.ord', 'ord', 'Ford'),
    CorrectionRule('make.fragment.mw', 'mw', 'BMW'),
    CorrectionRule('make.fragment.ercedes_benz', 'ercedes-benz', 'Mercedes-Benz'),
    CorrectionRule('make.fragment.ercedes', 'ercedes', 'Mercedes'),
    CorrectionRule('make.fragment.olkswagen', 'olkswagen', 'Volkswagen'),
    CorrectionRule('make.fragment.yundai', 'yundai', 'Hyundai'),
    CorrectionRule('make.fragment.issan', 'issan', 'Nissan'),
    CorrectionRule('make.fragment.azda', 'azda', 'Mazda'),
    CorrectionRule('make.fragment.ubaru', 'ubaru', 'Subaru'),
    CorrectionRule('make.fragment.hevrolet', 'hevrolet', 'Chevrolet'),
    CorrectionRule('make.fragment.and_rover', 'and rover', 'Land Rover'),
), key=lambda rule: (-len(rule.wrong), rule.wrong)))

MODEL_CORRECTIONS: Tuple[CorrectionRule, ...] = (
    CorrectionRule('model.volvo.xg40', 'XG40', 'XC40', make='Volvo'),
    CorrectionRule('model.volvo.xg60', 'XG60', 'XC60', make='Volvo'),
    CorrectionRule('model.volvo.xg90', 'XG90', 'XC90', make='Volvo'),
    CorrectionRule('model.toyota.gamry', 'Gamry', 'Camry', make='Toyota'),
    CorrectionRule('model.mercedes_benz.glg', 'GLG', 'GLC', make='Mercedes-Benz'),
)

# Tried only when no (manufacturer, model) entry exists
GENERIC_MODEL_CORRECTIONS: Tuple[CorrectionRule, ...] = (
    CorrectionRule(
        'model.generic.xg_to_xc', 'G', 'C', position=1, prefixes=('X',),
        notes='C read as G after a leading X',
    ),
)

# Forbidden in any VIN; substituted wherever they appear
VIN_FORBIDDEN_GLYPHS: Tuple[CorrectionRule, ...] = (
    CorrectionRule('vin.forbidden_glyph', 'I', '1'),
    CorrectionRule('vin.forbidden_glyph', 'O', '0'),
    CorrectionRule('vin.forbidden_glyph', 'Q', '0'),
)

# Accepted only when the result passes the check digit
VIN_CHARACTER_CORRECTIONS: Tuple[CorrectionRule, ...] = (
    CorrectionRule(
        'vin.wmi_a_to_4', 'A', '4', position=2,
        prefixes=('JH', '1G', '2G', '3G', '4G', '5G', 'KM', 'WD'),
        notes='"4" read as "A" in the third WMI position',
    ),
    CorrectionRule('vin.wmi_6_to_b', '6', 'B', position=1, prefixes=('W',), notes='W6A -> WBA'),
    CorrectionRule('vin.bmw_v_to_8', 'V', '8', position=5, prefixes=('WBA', 'WBS', 'WBY')),
    CorrectionRule(
        'vin.b_to_6', 'B', '6', min_position=3, excluded_prefixes=('WB',),
        notes='"6" read as "B" outside the WMI',
    ),
    CorrectionRule('vin.serial_s_to_5', 'S', '5', min_position=12),
    CorrectionRule('vin.serial_z_to_2', 'Z', '2', min_position=12),
)


@dataclass(frozen=True)
class CorrectionTables:
    version: str = CORRECTION_TABLE_VERSION
    manufacturer_fragments: Tuple[CorrectionRule, ...] = MANUFACTURER_FRAGMENTS
    model_corrections: Tuple[CorrectionRule, ...] = MODEL_CORRECTIONS
    generic_model_corrections: Tuple[CorrectionRule, ...] = GENERIC_MODEL_CORRECTIONS
    vin_forbidden_glyphs: Tuple[CorrectionRule, ...] = VIN_FORBIDDEN_GLYPHS
    vin_character_corrections: Tuple[CorrectionRule, ...] = VIN_CHARACTER_CORRECTIONS


DEFAULT_TABLES = CorrectionTables()


def match_manufacturer_fragment(
    text: str,
    tables: CorrectionTables = DEFAULT_TABLES
) -> Optional[Tuple[CorrectionRule, re.Match]]:
    """
    First fragment rule whose corrupted token occurs in text as a whole word.

    The match is against the lowercased text, so its span indexes text too.
    "ord" matches in "ord Focus" but not inside "Ford".
    """
    lowered = text.lower()
    for rule in tables.manufacturer_fragments:
        match = re.search(r'(?<![a-z])' + re.escape(rule.wrong) + r'(?![a-z])', lowered)
        if match:
            return rule, match
    return None


def find_manufacturer_fragment(
    text: str,
    tables: CorrectionTables = DEFAULT_TABLES
) -> Optional[CorrectionRule]:
    found = match_manufacturer_fragment(text, tables)
    return found[0] if found else None


def correct_make(
    raw_make: str,
    tables: CorrectionTables = DEFAULT_TABLES
) -> Tuple[str, Optional[str]]:
    """
    Resolve a captured manufacturer token.

    Returns:
        (value, correction_id); correction_id is None when the token is
        already a known manufacturer or no fragment matches
    """
    canonical = canonical_manufacturer(raw_make)
    if canonical:
        return canonical, None

    rule = find_manufacturer_fragment(raw_make, tables)
    if rule:
        logger.debug("Manufacturer fragment %r -> %r", raw_make, rule.right)
        return rule.right, rule.correction_id

    return raw_make, None


def correct_model(
    raw_model: str,
    make: Optional[str],
    tables: CorrectionTables = DEFAULT_TABLES
) -> Tuple[str, Optional[str]]:
    """
    Repair a model name once its manufacturer is known.

    The (manufacturer, model) table is keyed on the model's first token;
    the generic fixed-position rules run only when no entry exists for
    that pair.
    """
    if not raw_model or not make:
        return raw_model, None

    tokens = raw_model.split(' ', 1)
    first, rest = tokens[0], tokens[1:]
    make_key = make.lower()

    for rule in tables.model_corrections:
        if rule.make.lower() == make_key and rule.wrong == first:
            logger.debug("Model correction %s: %r -> %r", rule.correction_id, first, rule.right)
            return ' '.join([rule.right] + rest), rule.correction_id

    for rule in tables.generic_model_corrections:
        if rule.applies_to(first):
            corrected = rule.substitute(first)
            logger.debug("Model correction %s: %r -> %r", rule.correction_id, first, corrected)
            return ' '.join([corrected] + rest), rule.correction_id

    return raw_model, None


def correct_vin(
    raw_vin: str,
    tables: CorrectionTables = DEFAULT_TABLES
) -> Tuple[str, Optional[str]]:
    """
    Secondary pass over an identifier that fails its sanity check.

    1. Identifiers that pass format and check digit are returned untouched.
    2. Forbidden glyphs (I, O, Q) are substituted.
    3. Each character correction is tried alone; the first whose result
       passes the check digit is accepted.
    4. Otherwise the forbidden-glyph repair stands if it produced a
       well-formed identifier, else the raw value is kept.
    """
    if passes_check_digit(raw_vin):
        return raw_vin, None

    candidate = raw_vin
    glyph_id = None
    for rule in tables.vin_forbidden_glyphs:
        if rule.applies_to(candidate):
            candidate = rule.substitute(candidate)
            glyph_id = rule.correction_id

    if glyph_id and passes_check_digit(candidate):
        return candidate, glyph_id

    for rule in tables.vin_character_corrections:
        if not rule.applies_to(candidate):
            continue
        repaired = rule.substitute(candidate)
        if passes_check_digit(repaired):
            logger.debug("VIN correction %s: %s -> %s", rule.correction_id, raw_vin, repaired)
            correction_id = rule.correction_id if not glyph_id else f"{glyph_id}+{rule.correction_id}"
            return repaired, correction_id

    if glyph_id and is_well_formed(candidate):
        return candidate, glyph_id

    return raw_vin, None


def correct_numeric(
    field: FieldName,
    capture: str,
    implied_decimal: bool = False
) -> Tuple[Optional[Union[Decimal, int]], Optional[str]]:
    """
    Normalize a numeric capture, repairing a dropped decimal point when
    the producing rule allows it.

    Returns:
        (value, correction_id); value is None for a malformed capture
    """
    if field not in MONEY_FIELDS:
        return parse_mileage(capture), None

    if implied_decimal and '.' not in capture:
        repaired = repair_implied_decimal(capture)
        if repaired:
            return repaired

    return parse_money(capture), None
