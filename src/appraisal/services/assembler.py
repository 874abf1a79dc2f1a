"""
Result assembler: cross-field checks, confidence and the final record.

Checks only attach warning codes; no field value is altered here.
"""

import logging
from typing import Dict, List, Optional, Sequence

from appraisal.config import Settings
from appraisal.models.record import ExtractionRecord, FieldName, FieldResult, WarningCode
from appraisal.services.corrections import CORRECTION_TABLE_VERSION
from appraisal.utils.manufacturers import canonical_manufacturer
from appraisal.utils.vin import manufacturer_from_vin, model_year_from_vin, passes_check_digit

logger = logging.getLogger(__name__)

# Field weights (sum to 100); money fields carry no weight
CONFIDENCE_WEIGHTS = {
    FieldName.VIN: 30,
    FieldName.YEAR: 20,
    FieldName.MAKE: 20,
    FieldName.MODEL: 15,
    FieldName.MILEAGE: 10,
    FieldName.LOCATION: 5,
}

# Model-year codes repeat every 30 years
_MODEL_YEAR_CYCLE = 30


def calculate_confidence(results: Dict[FieldName, FieldResult]) -> int:
    """Sum of weights of the fields that were found, 0 to 100."""
    score = sum(
        weight for name, weight in CONFIDENCE_WEIGHTS.items()
        if name in results and results[name].is_found
    )
    return max(0, min(100, score))


def cross_field_warnings(
    results: Dict[FieldName, FieldResult],
    settings: Settings
) -> List[WarningCode]:
    warnings = []

    def found(name: FieldName):
        result = results.get(name)
        return result.value if result is not None and result.is_found else None

    vin = found(FieldName.VIN)
    year = found(FieldName.YEAR)
    make = found(FieldName.MAKE)
    model = found(FieldName.MODEL)
    mileage = found(FieldName.MILEAGE)

    if model and canonical_manufacturer(model):
        warnings.append(WarningCode.MODEL_MATCHES_MANUFACTURER)

    if make and not model:
        warnings.append(WarningCode.MAKE_WITHOUT_MODEL)

    if vin and not passes_check_digit(vin):
        warnings.append(WarningCode.VIN_CHECK_DIGIT_MISMATCH)

    if vin and year:
        decoded_year = model_year_from_vin(vin)
        if decoded_year and (decoded_year - int(year)) % _MODEL_YEAR_CYCLE != 0:
            warnings.append(WarningCode.YEAR_VIN_MISMATCH)

    if vin and make:
        decoded_make = manufacturer_from_vin(vin)
        if decoded_make and decoded_make.lower() != str(make).lower():
            warnings.append(WarningCode.MAKE_VIN_MISMATCH)

    if year:
        if not settings.MIN_MODEL_YEAR <= int(year) <= settings.MAX_MODEL_YEAR:
            warnings.append(WarningCode.YEAR_OUT_OF_RANGE)

    if mileage is not None and mileage > settings.MAX_PLAUSIBLE_MILEAGE:
        warnings.append(WarningCode.MILEAGE_IMPLAUSIBLE)

    return warnings


def assemble_record(
    results: Sequence[FieldResult],
    profile: str,
    settings: Settings,
    signature: Optional[str] = None,
    vin_tier: Optional[str] = None,
    warnings: Sequence[WarningCode] = (),
    correction_table_version: str = CORRECTION_TABLE_VERSION,
) -> ExtractionRecord:
    """
    Combine field results into an immutable ExtractionRecord.

    Missing fields are filled with not_found results, so any combination
    of inputs yields a record with exactly one result per FieldName.

    Args:
        results: Field results from the extractor, any order
        profile: Name of the FormatProfile that was applied
        settings: Validation thresholds
        signature: Classifier signature that selected the profile
        vin_tier: Disambiguation tier that chose the identifier
        warnings: Codes raised before assembly, kept first
        correction_table_version: Version of the tables that were applied

    Returns:
        ExtractionRecord
    """
    by_name = {result.field: result for result in results}
    fields = tuple(by_name.get(name) or FieldResult.not_found(name) for name in FieldName)
    by_name = {result.field: result for result in fields}

    collected = list(warnings)
    collected.extend(cross_field_warnings(by_name, settings))

    confidence = calculate_confidence(by_name)
    if confidence < settings.LOW_CONFIDENCE_THRESHOLD:
        collected.append(WarningCode.LOW_CONFIDENCE)

    # De-duplicate, first raised wins
    unique = tuple(dict.fromkeys(collected))
    if unique:
        logger.debug("Record warnings: %s", ', '.join(code.value for code in unique))

    return ExtractionRecord(
        fields=fields,
        profile=profile,
        signature=signature,
        vin_tier=vin_tier,
        warnings=unique,
        confidence=confidence,
        correction_table_version=correction_table_version,
    )
