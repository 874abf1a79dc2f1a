"""
Field extraction engine for OCR text of vehicle valuation reports.
"""

from appraisal.models.record import ExtractionRecord, FieldResult, FieldStatus, FieldName, WarningCode
from appraisal.services.parser import ReportParser, extract_record

__all__ = [
    'ExtractionRecord', 'FieldResult', 'FieldStatus', 'FieldName', 'WarningCode',
    'ReportParser', 'extract_record',
]
