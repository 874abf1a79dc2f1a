"""
Valuation report parser: the in-process entry point.

    >>> record = ReportParser().parse(ocr_text)
    >>> record.value("vin")
"""

import logging
from typing import Optional

from appraisal.config import Settings, settings as default_settings
from appraisal.models.record import ExtractionRecord, WarningCode
from appraisal.services.assembler import assemble_record
from appraisal.services.classifier import classify
from appraisal.services.corrections import CorrectionTables, DEFAULT_TABLES
from appraisal.services.extractor import FieldExtractor
from appraisal.services.rules import RuleContext
from appraisal.utils.text import normalize_text

logger = logging.getLogger(__name__)


class ReportParser:
    """
    Service for extracting vehicle fields from valuation report OCR text.

    Holds only immutable configuration, so one instance may be shared
    across threads; every parse() call builds its own RuleContext.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        tables: CorrectionTables = DEFAULT_TABLES
    ):
        self.settings = settings or default_settings
        self.tables = tables
        self.extractor = FieldExtractor()

    def parse(self, text: str) -> ExtractionRecord:
        """
        Parse OCR text and extract every target field.

        Args:
            text: OCR output for one document, pages in reading order

        Returns:
            ExtractionRecord with one FieldResult per field

        Raises:
            TypeError: if text is not a string
        """
        lines = normalize_text(text)

        profile, signature = classify(lines)
        context = RuleContext(lines=lines, settings=self.settings, tables=self.tables)
        if signature is None:
            context.warn(WarningCode.CLASSIFICATION_UNCERTAIN)

        results = self.extractor.extract(context, profile)

        record = assemble_record(
            results,
            profile=profile.name,
            settings=self.settings,
            signature=signature,
            vin_tier=context.vin_tier,
            warnings=context.warnings,
            correction_table_version=self.tables.version,
        )
        logger.debug(
            "Parsed %d lines with %s profile, confidence %d",
            len(lines), record.profile, record.confidence,
        )
        return record


def extract_record(text: str, settings: Optional[Settings] = None) -> ExtractionRecord:
    """Parse text with the default correction tables."""
    return ReportParser(settings=settings).parse(text)
