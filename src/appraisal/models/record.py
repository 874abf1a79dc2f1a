"""
Pydantic models for extraction results.
"""

from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

from pydantic import BaseModel


class FieldName(str, Enum):
    """Target fields, in extraction order."""
    VIN = "vin"
    YEAR = "year"
    MAKE = "make"
    MODEL = "model"
    MILEAGE = "mileage"
    MARKET_VALUE = "market_value"
    SETTLEMENT_VALUE = "settlement_value"
    LOCATION = "location"


NUMERIC_FIELDS = (FieldName.MILEAGE, FieldName.MARKET_VALUE, FieldName.SETTLEMENT_VALUE)
MONEY_FIELDS = (FieldName.MARKET_VALUE, FieldName.SETTLEMENT_VALUE)


class FieldStatus(str, Enum):
    FOUND = "found"
    CORRECTED = "corrected"
    NOT_FOUND = "not_found"


class WarningCode(str, Enum):
    """Caller-visible warning codes attached to a record."""
    CLASSIFICATION_UNCERTAIN = "CLASSIFICATION_UNCERTAIN"
    AMBIGUOUS_IDENTIFIER = "AMBIGUOUS_IDENTIFIER"
    MODEL_MATCHES_MANUFACTURER = "MODEL_MATCHES_MANUFACTURER"
    MAKE_WITHOUT_MODEL = "MAKE_WITHOUT_MODEL"
    VIN_CHECK_DIGIT_MISMATCH = "VIN_CHECK_DIGIT_MISMATCH"
    YEAR_VIN_MISMATCH = "YEAR_VIN_MISMATCH"
    MAKE_VIN_MISMATCH = "MAKE_VIN_MISMATCH"
    YEAR_OUT_OF_RANGE = "YEAR_OUT_OF_RANGE"
    MILEAGE_IMPLAUSIBLE = "MILEAGE_IMPLAUSIBLE"
    LOW_CONFIDENCE = "LOW_CONFIDENCE"
    FIELD_EXTRACTION_ERROR = "FIELD_EXTRACTION_ERROR"


FieldValue = Union[Decimal, int, str]


class FieldResult(BaseModel):
    """
    Outcome of extracting one target field.

    value is None exactly when status is not_found. raw_value holds the
    rule's capture before any correction was applied.
    """
    field: FieldName
    value: Optional[FieldValue] = None
    status: FieldStatus = FieldStatus.NOT_FOUND
    rule_id: Optional[str] = None
    correction_id: Optional[str] = None
    raw_value: Optional[str] = None
    line_index: Optional[int] = None

    class Config:
        frozen = True

    @classmethod
    def not_found(cls, field: FieldName) -> "FieldResult":
        return cls(field=field)

    @property
    def is_found(self) -> bool:
        return self.status != FieldStatus.NOT_FOUND


class ExtractionRecord(BaseModel):
    """
    Aggregate result for one document.

    fields holds exactly one FieldResult per FieldName, in FieldName order.
    """
    fields: Tuple[FieldResult, ...]
    profile: str
    signature: Optional[str] = None
    vin_tier: Optional[str] = None
    warnings: Tuple[WarningCode, ...] = ()
    confidence: int = 0
    correction_table_version: str

    class Config:
        frozen = True

    def get(self, name: Union[FieldName, str]) -> FieldResult:
        name = FieldName(name)
        for result in self.fields:
            if result.field == name:
                return result
        raise KeyError(name.value)

    def value(self, name: Union[FieldName, str]) -> Optional[FieldValue]:
        return self.get(name).value

    def to_dict(self) -> Dict[str, Any]:
        """Plain mapping for the hosting application."""
        return {
            'fields': {
                result.field.value: {
                    'value': result.value,
                    'status': result.status.value,
                    'rule_id': result.rule_id,
                    'correction_id': result.correction_id,
                }
                for result in self.fields
            },
            'profile': self.profile,
            'signature': self.signature,
            'vin_tier': self.vin_tier,
            'warnings': [code.value for code in self.warnings],
            'confidence': self.confidence,
            'correction_table_version': self.correction_table_version,
        }
