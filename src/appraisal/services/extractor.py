"""
Field extractor: runs a profile's rule lists against one document.

Fields are extracted in FieldName order. Later fields read earlier
results through the RuleContext: model corrections are keyed on the
resolved make, and the VIN-decode fallbacks need the resolved VIN.
"""

import logging
import re
from typing import List, Optional

from appraisal.models.record import (
    FieldName,
    FieldResult,
    FieldStatus,
    FieldValue,
    NUMERIC_FIELDS,
    WarningCode,
)
from appraisal.services.corrections import correct_make, correct_model, correct_numeric, correct_vin
from appraisal.services.disambiguator import select_identifier
from appraisal.services.profiles import UNIVERSAL, FormatProfile
from appraisal.services.rules import IdentifierRule, RuleContext, clean_model
from appraisal.utils.candidates import RawCapture

logger = logging.getLogger(__name__)

# Raised by a rule or correction bug on one field; never aborts the record
FIELD_ERRORS = (re.error, AttributeError, IndexError, KeyError, TypeError, ValueError, ArithmeticError)


class FieldExtractor:
    """Applies vendor rules, then the universal fallbacks, field by field."""

    def __init__(self, universal: FormatProfile = UNIVERSAL):
        self.universal = universal

    def extract(self, context: RuleContext, profile: FormatProfile) -> List[FieldResult]:
        """
        Extract every target field into context.resolved.

        Returns:
            One FieldResult per FieldName, in FieldName order
        """
        results = []
        for name in FieldName:
            try:
                result = self.extract_field(name, context, profile)
            except FIELD_ERRORS:
                logger.warning("Error extracting %s", name.value, exc_info=True)
                context.warn(WarningCode.FIELD_EXTRACTION_ERROR)
                result = FieldResult.not_found(name)

            context.resolved[name] = result
            results.append(result)

        return results

    def extract_field(self, name: FieldName, context: RuleContext, profile: FormatProfile) -> FieldResult:
        rules = profile.rules_for(name) + self.universal.rules_for(name)

        if name == FieldName.VIN:
            return self._extract_identifier(rules, context)

        for rule in rules:
            capture = rule.apply(context)
            if capture is None:
                continue

            result = self._finish(name, capture, rule.implied_decimal, context)
            if result is None:
                logger.debug("Rule %s capture %r rejected", rule.name, capture.value)
                continue

            logger.debug("Rule %s matched %s = %r", rule.name, name.value, result.value)
            return result

        return FieldResult.not_found(name)

    def _extract_identifier(self, rules, context: RuleContext) -> FieldResult:
        """Pool occurrences from every identifier rule, then run the tiers once."""
        captures = {}
        for rule in rules:
            if not isinstance(rule, IdentifierRule):
                continue
            for capture in rule.collect(context):
                # Same token on the same line keeps the earlier rule id
                captures.setdefault((capture.line_index, capture.value), capture)

        selection = select_identifier(list(captures.values()), context.lines, context.settings)
        if selection is None:
            return FieldResult.not_found(FieldName.VIN)

        context.vin_tier = selection.tier
        if selection.ambiguous:
            context.warn(WarningCode.AMBIGUOUS_IDENTIFIER)

        value, correction_id = correct_vin(selection.capture.value, context.tables)
        return _build_result(FieldName.VIN, value, correction_id, selection.capture)

    def _finish(
        self,
        name: FieldName,
        capture: RawCapture,
        implied_decimal: bool,
        context: RuleContext
    ) -> Optional[FieldResult]:
        """Apply normalization and corrections; None rejects the capture."""
        correction_id = None

        if name in NUMERIC_FIELDS:
            value, correction_id = correct_numeric(name, capture.value, implied_decimal)
            if value is None:
                return None

        elif name == FieldName.MAKE:
            value, correction_id = correct_make(capture.value, context.tables)

        elif name == FieldName.MODEL:
            cleaned = clean_model(capture.value)
            if not cleaned:
                return None
            make = context.resolved_value(FieldName.MAKE)
            value, correction_id = correct_model(cleaned, make, context.tables)

        elif name == FieldName.LOCATION:
            value = capture.value.strip(' ,.;:-')
            if not value:
                return None

        else:
            value = capture.value

        return _build_result(name, value, correction_id, capture)


def _build_result(
    name: FieldName,
    value: FieldValue,
    correction_id: Optional[str],
    capture: RawCapture
) -> FieldResult:
    corrected = correction_id is not None and str(value) != capture.value
    return FieldResult(
        field=name,
        value=value,
        status=FieldStatus.CORRECTED if corrected else FieldStatus.FOUND,
        rule_id=capture.rule_id,
        correction_id=correction_id if corrected else None,
        raw_value=capture.raw_text or capture.value,
        line_index=capture.line_index,
    )
