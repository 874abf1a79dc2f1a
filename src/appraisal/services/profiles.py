"""
Format profiles: the ordered rule lists for each known report layout.

Lines are already whitespace-collapsed, so separators are written as
literal spaces; no pattern may span a line break unless it says so.
"""

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Tuple, Union

from appraisal.models.record import FieldName
from appraisal.services.corrections import MANUFACTURER_FRAGMENTS
from appraisal.services.rules import (
    DescriptionRule,
    HeaderScanRule,
    IdentifierRule,
    PatternRule,
    VinDecodeRule,
)
from appraisal.utils.manufacturers import manufacturer_alternation

Rule = Union[PatternRule, VinDecodeRule]

# Value tokens. The trailing [^\s|]* swallows OCR garbage glued to a number
# so that numeric normalization rejects the capture instead of truncating it.
AMOUNT = r'(\$? ?\d[\d,]*(?: ?\. ?\d+)?[^\s|]*)'
DOLLAR_AMOUNT = r'(\$ ?\d[\d,]*(?: ?\. ?\d+)?[^\s|]*)'
MILEAGE = r'(\d[\d,]*[^\s|]*)'
YEAR = r'((?:19|20)\d{2})\b'
SEP = r'[ :=]*'

LABELED_VIN = r'\bVIN[ :#]*([A-Z0-9]{17})\b'

MANUFACTURERS = manufacturer_alternation()
FRAGMENTS = '|'.join(re.escape(rule.wrong) for rule in MANUFACTURER_FRAGMENTS)

CASE_SENSITIVE = re.MULTILINE


@dataclass(frozen=True)
class FormatProfile:
    """Named set of per-field rule lists, most specific first."""
    name: str
    rules: Mapping[FieldName, Tuple[Rule, ...]] = field(default_factory=dict)

    def rules_for(self, name: FieldName) -> Tuple[Rule, ...]:
        return self.rules.get(name, ())


def _profile(name: str, *rules: Rule) -> FormatProfile:
    by_field = {}
    for rule in rules:
        by_field.setdefault(rule.field, []).append(rule)
    return FormatProfile(
        name=name,
        rules=MappingProxyType({key: tuple(value) for key, value in by_field.items()}),
    )


def _description_rules(prefix: str, suffix: str, pattern: str, example: str) -> Tuple[DescriptionRule, ...]:
    """Make and model rules sharing one vehicle-description capture."""
    return tuple(
        DescriptionRule(
            name=f'{prefix}.{target.value}.{suffix}',
            field=target,
            pattern=pattern,
            example=example,
        )
        for target in (FieldName.MAKE, FieldName.MODEL)
    )


CCC = _profile(
    'CCC',
    IdentifierRule(
        name='ccc.vin.labeled',
        field=FieldName.VIN,
        pattern=LABELED_VIN,
        example='VIN 4T1BF1FK5GU123456',
    ),
    PatternRule(
        name='ccc.year.labeled',
        field=FieldName.YEAR,
        pattern=r'^Year ' + YEAR,
        example='Year 2016',
    ),
    PatternRule(
        name='ccc.year.loss_vehicle',
        field=FieldName.YEAR,
        pattern=r'Loss Vehicle:? ' + YEAR,
        example='Loss Vehicle 2015 Mercedes-Benz SL-Class SL400',
    ),
    PatternRule(
        name='ccc.make.labeled',
        field=FieldName.MAKE,
        pattern=r'^Make ([A-Za-z][A-Za-z\- ]*?)(?: [})(]+.*)? *$',
        example='Make Toyota } ) oo',
        notes='OCR appends bracket debris after the make',
    ),
    PatternRule(
        name='ccc.model.labeled',
        field=FieldName.MODEL,
        pattern=r'^Model ([A-Za-z0-9\-]+(?: [A-Za-z0-9\-]+){0,2})',
        example='Model Camry',
    ),
    *_description_rules(
        'ccc', 'loss_vehicle',
        pattern=r'Loss Vehicle:? (?:19|20)\d{2} ([^\n]+)',
        example='Loss Vehicle 2015 Mercedes-Benz SL-Class SL400',
    ),
    PatternRule(
        name='ccc.mileage.odometer',
        field=FieldName.MILEAGE,
        pattern=r'^Odometer ' + MILEAGE,
        example='Odometer 82,114',
    ),
    PatternRule(
        name='ccc.market.adjusted_value',
        field=FieldName.MARKET_VALUE,
        pattern=r'^Adjusted Vehicle Value ' + AMOUNT,
        example='Adjusted Vehicle Value $ 9,180.00',
        notes='Adjusted (after condition) value, not Base Vehicle Value',
    ),
    PatternRule(
        name='ccc.settlement.total',
        field=FieldName.SETTLEMENT_VALUE,
        pattern=r'^Total ' + AMOUNT,
        example='Total $ 9,251 .08',
        notes='OCR may split the decimal point from the amount',
    ),
    PatternRule(
        name='ccc.location.labeled',
        field=FieldName.LOCATION,
        pattern=r'^Location ([A-Z][A-Z ,.\-0-9]+?)(?: (?:are|clot|Vehicles)\b.*)? *$',
        example='Location SACRAMENTO, CA 95823',
        flags=CASE_SENSITIVE,
        notes='OCR often appends unrelated words after the zip code',
    ),
)

MITCHELL = _profile(
    'Mitchell',
    IdentifierRule(
        name='mitchell.vin.labeled',
        field=FieldName.VIN,
        pattern=LABELED_VIN,
        example='VIN: 5NPE34AF4FH012345',
    ),
    PatternRule(
        name='mitchell.year.loss_vehicle',
        field=FieldName.YEAR,
        pattern=r'(?:Loss|oss) ?vehicle: ?' + YEAR,
        example='Loss vehicle: 2019 Toyota Corolla | S Plus 4 Door Sedan',
    ),
    *_description_rules(
        'mitchell', 'loss_vehicle',
        pattern=r'(?:Loss|oss) ?vehicle: ?(?:19|20)\d{2} ([^\n]+)',
        example='Loss vehicle: 2019 Toyota Corolla | S Plus 4 Door Sedan',
    ),
    PatternRule(
        name='mitchell.mileage.miles',
        field=FieldName.MILEAGE,
        pattern=r'(\d[\d,]*) ?miles\b',
        example='41,207 miles',
    ),
    PatternRule(
        name='mitchell.market.labeled',
        field=FieldName.MARKET_VALUE,
        pattern=r'Market Val(?:ue|e) ?[=:]? ?' + DOLLAR_AMOUNT,
        example='Market Value = $18,402.11',
        notes='"Value" is often read as "vale"',
    ),
    PatternRule(
        name='mitchell.market.ocr_spacing',
        field=FieldName.MARKET_VALUE,
        pattern=r'Market ?va[lu](?:ue|e) ?= ?' + AMOUNT,
        example='Marketvalue = 978221',
        implied_decimal=True,
        notes='Missing space or "$"; a lost decimal point is repaired',
    ),
    PatternRule(
        name='mitchell.market.severe_ocr',
        field=FieldName.MARKET_VALUE,
        pattern=r'[vmu]a[rliu]k[eoa]t ?[vmu]a[lti][liuo][eoa] ?= ?[s$]? ?(\d{6,})\b',
        example='varketvalie = s978221',
        implied_decimal=True,
    ),
    HeaderScanRule(
        name='mitchell.market.header_scan',
        field=FieldName.MARKET_VALUE,
        pattern=r'^(?:Market Val(?:ue|e)|arket ?Val(?:ue|e)):?$',
        value_pattern=DOLLAR_AMOUNT,
        example='Market Value:\\n...\\n$18,402.11',
    ),
    PatternRule(
        name='mitchell.settlement.labeled',
        field=FieldName.SETTLEMENT_VALUE,
        pattern=r'(?:S|s)?ettle ?m?ent Value ?[=:]? ?' + DOLLAR_AMOUNT,
        example='Settlement Value = $19,233.50',
        notes='Leading "S" and the "m" are often lost',
    ),
    HeaderScanRule(
        name='mitchell.settlement.header_scan',
        field=FieldName.SETTLEMENT_VALUE,
        pattern=r'^(?:S|s)?ettle ?m?ent ?Value ?[:=]?$',
        value_pattern=DOLLAR_AMOUNT,
        example='Settlement Value:\\n$52,352.67',
    ),
    PatternRule(
        name='mitchell.location.labeled',
        field=FieldName.LOCATION,
        pattern=r'(?i:Location)[ :]*([A-Z]{2} \d{5})\b',
        example='Location: CA 95823',
        flags=CASE_SENSITIVE,
    ),
    PatternRule(
        name='mitchell.location.state_zip_line',
        field=FieldName.LOCATION,
        pattern=r'^([A-Z]{2} \d{5})$',
        example='CA 95823',
        flags=CASE_SENSITIVE,
    ),
)

STATE_FARM = _profile(
    'StateFarm',
    IdentifierRule(
        name='state_farm.vin.labeled',
        field=FieldName.VIN,
        pattern=LABELED_VIN,
        example='VIN JH4CU2F88CC019777',
    ),
    PatternRule(
        name='state_farm.year.vehicle',
        field=FieldName.YEAR,
        pattern=r'^Vehicle[ :]+' + YEAR,
        example='Vehicle: 2012 Acura TL',
    ),
    *_description_rules(
        'state_farm', 'vehicle',
        pattern=r'^Vehicle[ :]+(?:19|20)\d{2} ([^\n]+)',
        example='Vehicle: 2012 Acura TL',
    ),
    PatternRule(
        name='state_farm.mileage.labeled',
        field=FieldName.MILEAGE,
        pattern=r'^(?:Odometer|Mileage)[ :]+' + MILEAGE,
        example='Mileage: 143,880',
    ),
    PatternRule(
        name='state_farm.market.actual_cash_value',
        field=FieldName.MARKET_VALUE,
        pattern=r'^(?:Actual Cash Value|Market Value)' + SEP + AMOUNT,
        example='Actual Cash Value $8,912.00',
    ),
    PatternRule(
        name='state_farm.settlement.value_before_deductible',
        field=FieldName.SETTLEMENT_VALUE,
        pattern=r'^(?:Total )?Value before Deductible' + SEP + AMOUNT,
        example='Total Value before Deductible $9,640.31',
    ),
    HeaderScanRule(
        name='state_farm.settlement.header_scan',
        field=FieldName.SETTLEMENT_VALUE,
        pattern=r'^(?:Total )?Value before Deductible:?$',
        value_pattern=DOLLAR_AMOUNT,
        example='Value before Deductible\\n$9,640.31',
    ),
    PatternRule(
        name='state_farm.location.labeled',
        field=FieldName.LOCATION,
        pattern=r'^(?:Loss )?Location[ :]+([A-Z][A-Za-z .\-]+, ?[A-Z]{2} \d{5})',
        example='Loss Location: Bloomington, IL 61710',
    ),
)

GENERIC = _profile(
    'Generic',
    IdentifierRule(
        name='generic.vin.labeled',
        field=FieldName.VIN,
        pattern=LABELED_VIN,
        example='VIN: 1FTFW1E50JFA12345',
    ),
    PatternRule(
        name='generic.year.labeled',
        field=FieldName.YEAR,
        pattern=r'^(?:Model )?Year[ :]+' + YEAR,
        example='Year: 2015',
    ),
    HeaderScanRule(
        name='generic.year.header_scan',
        field=FieldName.YEAR,
        pattern=r'^(?:Model )?Year:?$',
        value_pattern=r'^' + YEAR,
        example='Year\\n2015',
    ),
    PatternRule(
        name='generic.make.labeled',
        field=FieldName.MAKE,
        pattern=r'^Make[ :]+([A-Za-z][A-Za-z\-]*(?: [A-Za-z\-]+)?) *$',
        example='Make: Honda',
    ),
    PatternRule(
        name='generic.model.labeled',
        field=FieldName.MODEL,
        pattern=r'^Model(?! Year)[ :]+([^\n|]+)',
        example='Model: Accord EX-L',
    ),
    PatternRule(
        name='generic.mileage.labeled',
        field=FieldName.MILEAGE,
        pattern=r'^(?:Odometer|Mileage)[ :]+' + MILEAGE,
        example='Mileage: 64,210',
    ),
    HeaderScanRule(
        name='generic.mileage.header_scan',
        field=FieldName.MILEAGE,
        pattern=r'^(?:Odometer|Mileage):?$',
        value_pattern=r'^' + MILEAGE,
        example='Mileage\\n64,210',
    ),
    PatternRule(
        name='generic.market.labeled',
        field=FieldName.MARKET_VALUE,
        pattern=r'(?:Market Value|Actual Cash Value|Adjusted Vehicle Value)' + SEP + AMOUNT,
        example='Market Value: $12,053.00',
    ),
    HeaderScanRule(
        name='generic.market.header_scan',
        field=FieldName.MARKET_VALUE,
        pattern=r'^(?:Market Value|Actual Cash Value):?$',
        value_pattern=DOLLAR_AMOUNT,
        example='Market Value\\n$12,053.00',
    ),
    PatternRule(
        name='generic.settlement.labeled',
        field=FieldName.SETTLEMENT_VALUE,
        pattern=r'(?:Settlement (?:Value|Amount)|Total Settlement)' + SEP + AMOUNT,
        example='Settlement Amount: $11,480.25',
    ),
    HeaderScanRule(
        name='generic.settlement.header_scan',
        field=FieldName.SETTLEMENT_VALUE,
        pattern=r'^(?:Settlement (?:Value|Amount)|Total Settlement):?$',
        value_pattern=DOLLAR_AMOUNT,
        example='Settlement Value\\n$11,480.25',
    ),
    PatternRule(
        name='generic.location.labeled',
        field=FieldName.LOCATION,
        pattern=r'^(?:Loss |Vehicle )?Location[ :]+([^\n|]+)',
        example='Location: Austin, TX 78701',
    ),
)

# Shared fallbacks, tried after the active profile's rules
UNIVERSAL = _profile(
    'Universal',
    IdentifierRule(
        name='universal.vin.token',
        field=FieldName.VIN,
        pattern=r'\b([A-Z0-9]{17})\b',
        example='SALWR2RE0KA836519',
        notes='Any 17-character identifier; comparables make this ambiguous',
    ),
    PatternRule(
        name='universal.year.before_manufacturer',
        field=FieldName.YEAR,
        pattern=r'\b' + YEAR + r' (?:' + MANUFACTURERS + r')\b',
        example='2017 Honda Civic',
    ),
    VinDecodeRule(name='universal.year.vin_decode', field=FieldName.YEAR),
    *_description_rules(
        'universal', 'year_description',
        pattern=r'\b(?:19|20)\d{2} ((?:' + MANUFACTURERS + r')\b[^\n]*)',
        example='2017 Honda Civic | EX 4 Door Sedan',
    ),
    *_description_rules(
        'universal', 'pipe_description',
        pattern=r'^((?:' + MANUFACTURERS + '|' + FRAGMENTS + r')(?![A-Za-z])[^\n|]*\|[^\n]*)$',
        example='oyota Corolla | S Plus 4 Door Sedan',
    ),
    VinDecodeRule(name='universal.make.vin_decode', field=FieldName.MAKE),
    PatternRule(
        name='universal.mileage.labeled',
        field=FieldName.MILEAGE,
        pattern=r'(?:Odometer|Mileage)[ :]+' + MILEAGE,
        example='Mileage 64,210',
    ),
    PatternRule(
        name='universal.mileage.miles',
        field=FieldName.MILEAGE,
        pattern=r'(\d[\d,]*) ?miles\b',
        example='64,210 miles',
    ),
    PatternRule(
        name='universal.market.value_label',
        field=FieldName.MARKET_VALUE,
        pattern=r'Market ?Val(?:ue|e)' + SEP + AMOUNT,
        example='Market Value $12,053.00',
    ),
    PatternRule(
        name='universal.settlement.value_label',
        field=FieldName.SETTLEMENT_VALUE,
        pattern=r'Settlement(?: Value| Amount)?' + SEP + DOLLAR_AMOUNT,
        example='Settlement $11,480.25',
    ),
    PatternRule(
        name='universal.location.city_state_zip',
        field=FieldName.LOCATION,
        pattern=r'(?:\bLocation:? )?\b([A-Z][A-Za-z.\-]+(?: [A-Z][A-Za-z.\-]+)*, ?[A-Z]{2} \d{5}(?:-\d{4})?)\b',
        example='Austin, TX 78701',
        flags=CASE_SENSITIVE,
    ),
    PatternRule(
        name='universal.location.state_zip',
        field=FieldName.LOCATION,
        pattern=r'\b([A-Z]{2} \d{5})\b',
        example='TX 78701',
        flags=CASE_SENSITIVE,
    ),
)
