#!/usr/bin/env python3
"""
Regression test suite for ReportParser.
Uses synthetic snippets based on known vendor valuation report formats.
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from decimal import Decimal

import pytest

from appraisal import ReportParser, extract_record
from appraisal.config import Settings
from appraisal.models.record import FieldName, FieldResult, FieldStatus, WarningCode
from appraisal.services.extractor import FieldExtractor
from appraisal.services.profiles import GENERIC, FormatProfile
from appraisal.services.rules import RuleContext
from appraisal.utils.text import normalize_text


CCC_REPORT = """\
CCC ONE Market Valuation Report
Loss Vehicle 2015 Mercedes-Benz SL-Class SL400
VIN WDDJK6FA9FF035164
Year 2015
Make Mercedes-Benz } )
Model SL-Class Vehicle Information
Odometer 38,540
Location SACRAMENTO, CA 95823 are
Base Vehicle Value $ 41,900.00
Adjusted Vehicle Value $ 42,318.00
Total $ 45,012 .41
"""

MITCHELL_REPORT = """\
Mitchell WorkCenter Total Loss
Claim Number: 12-3456-789
Loss vehicle: 2019 Toyota Corolla | S Plus 4 Door Sedan
VIN: 2T1BURHE6KC123456
Odometer 41,207 miles
Location: CA 95823
Market Value = $18,402.11
Settlement Value = $19,233.50
"""

MITCHELL_DROPPED_DECIMAL = """\
Mitchell WorkCenter Total Loss
Loss vehicle: 2020 Volvo XG60 | T5 Momentum 4 Door Utility
Marketvalue = 978221
Settlement Value:
includes sales tax
$10,412.87
"""

STATE_FARM_REPORT = """\
State Farm Mutual Automobile Insurance Company
VALUATION SUMMARY
Vehicle: 2012 Acura TL
VIN JH4CU2F88CC019777
Mileage: 143,880
Loss Location: Bloomington, IL 61710
Actual Cash Value $8,912.00
Total Value before Deductible $9,640.31
"""

COMPARABLES_REPORT = """\
Comparable Vehicles
SALWR2RV0KA123456 2019 Land Rover Range Rover Velar
SALWR2RW1KA789012 2019 Land Rover Range Rover Velar
Ext Color
Santorini Black
SALWR2RE0KA836519
"""

LABELED_COMPARABLES_REPORT = """\
VIN SALWR2RV0KA123456 2019 Land Rover
VIN SALWR2RW1KA789012 2019 Land Rover
Ext Color
Santorini Black
SALWR2RE0KA836519
"""


@pytest.fixture
def parser():
    return ReportParser()


class TestVendorReports:
    """End-to-end extraction per vendor layout."""

    def test_ccc(self, parser):
        record = parser.parse(CCC_REPORT)
        assert record.profile == 'CCC'
        assert record.value(FieldName.VIN) == "WDDJK6FA9FF035164"
        assert record.value(FieldName.YEAR) == "2015"
        assert record.value(FieldName.MAKE) == "Mercedes-Benz"
        assert record.value(FieldName.MODEL) == "SL-Class"
        assert record.value(FieldName.MILEAGE) == 38540
        assert record.value(FieldName.LOCATION) == "SACRAMENTO, CA 95823"
        assert record.value(FieldName.MARKET_VALUE) == Decimal("42318.00")
        assert record.value(FieldName.SETTLEMENT_VALUE) == Decimal("45012.41")
        assert record.get(FieldName.MARKET_VALUE).rule_id == 'ccc.market.adjusted_value'
        assert record.confidence == 100
        assert record.warnings == ()

    def test_mitchell(self, parser):
        record = parser.parse(MITCHELL_REPORT)
        assert record.profile == 'Mitchell'
        assert record.signature == 'mitchell.brand'
        assert record.value(FieldName.VIN) == "2T1BURHE6KC123456"
        assert record.vin_tier == 'leading_section'
        assert record.value(FieldName.YEAR) == "2019"
        assert record.value(FieldName.MAKE) == "Toyota"
        assert record.value(FieldName.MODEL) == "Corolla"
        assert record.value(FieldName.MILEAGE) == 41207
        assert record.value(FieldName.LOCATION) == "CA 95823"
        assert record.value(FieldName.MARKET_VALUE) == Decimal("18402.11")
        assert record.value(FieldName.SETTLEMENT_VALUE) == Decimal("19233.50")
        assert record.warnings == ()

    def test_mitchell_ocr_repairs(self, parser):
        record = parser.parse(MITCHELL_DROPPED_DECIMAL)
        market = record.get(FieldName.MARKET_VALUE)
        assert market.value == Decimal("9782.21")
        assert market.status == FieldStatus.CORRECTED
        assert market.correction_id == 'numeric.implied_decimal'
        assert market.raw_value == "978221"

        model = record.get(FieldName.MODEL)
        assert model.value == "XC60"
        assert model.correction_id == 'model.volvo.xg60'

        settlement = record.get(FieldName.SETTLEMENT_VALUE)
        assert settlement.value == Decimal("10412.87")
        assert settlement.rule_id == 'mitchell.settlement.header_scan'

    def test_state_farm(self, parser):
        record = parser.parse(STATE_FARM_REPORT)
        assert record.profile == 'StateFarm'
        assert record.value(FieldName.YEAR) == "2012"
        assert record.value(FieldName.MAKE) == "Acura"
        assert record.value(FieldName.MODEL) == "TL"
        assert record.value(FieldName.MILEAGE) == 143880
        assert record.value(FieldName.LOCATION) == "Bloomington, IL 61710"
        assert record.value(FieldName.MARKET_VALUE) == Decimal("8912.00")
        assert record.value(FieldName.SETTLEMENT_VALUE) == Decimal("9640.31")
        assert record.warnings == ()


class TestScenarios:

    def test_year_header_then_value(self, parser):
        record = parser.parse("Year\n2015")
        year = record.get(FieldName.YEAR)
        assert record.profile == 'Generic'
        assert year.value == "2015"
        assert year.status == FieldStatus.FOUND
        assert year.rule_id == 'generic.year.header_scan'
        assert WarningCode.CLASSIFICATION_UNCERTAIN in record.warnings

    def test_manufacturer_fragment(self, parser):
        record = parser.parse("oyota Corolla | S Plus 4 Door Sedan")
        make = record.get(FieldName.MAKE)
        assert make.value == "Toyota"
        assert make.status == FieldStatus.CORRECTED
        assert make.correction_id == 'make.fragment.oyota'
        assert make.raw_value == "oyota"
        assert record.value(FieldName.MODEL) == "Corolla"

    def test_subject_identifier_after_comparables(self, parser):
        record = parser.parse(COMPARABLES_REPORT)
        assert record.value(FieldName.VIN) == "SALWR2RE0KA836519"
        assert record.vin_tier == 'label_proximity'
        assert WarningCode.AMBIGUOUS_IDENTIFIER not in record.warnings

    def test_fragment_inside_known_word_is_not_corrected(self, parser):
        make = parser.parse("Make: Ford Motor").get(FieldName.MAKE)
        assert make.value == "Ford Motor"
        assert make.status == FieldStatus.FOUND
        assert make.correction_id is None

    def test_labeled_comparables_do_not_outrank_subject_identifier(self, parser):
        record = parser.parse(LABELED_COMPARABLES_REPORT)
        vin = record.get(FieldName.VIN)
        assert vin.value == "SALWR2RE0KA836519"
        assert vin.rule_id == 'universal.vin.token'
        assert record.vin_tier == 'label_proximity'

    def test_same_token_keeps_labeled_rule_id(self, parser):
        vin = parser.parse("VIN JH4CU2F88CC019777").get(FieldName.VIN)
        assert vin.rule_id == 'generic.vin.labeled'

    def test_identifiers_outside_every_tier_are_ambiguous(self, parser):
        text = "filler\n" * 40 + "JH4CU2F88CC019777\nSALWR2RV0KA123456\n"
        record = parser.parse(text)
        assert record.value(FieldName.VIN) == "JH4CU2F88CC019777"
        assert WarningCode.AMBIGUOUS_IDENTIFIER in record.warnings

    def test_corrupted_identifier_is_repaired(self, parser):
        record = parser.parse("VIN JHACU2F88CC019777")
        vin = record.get(FieldName.VIN)
        assert vin.value == "JH4CU2F88CC019777"
        assert vin.status == FieldStatus.CORRECTED
        assert vin.correction_id == 'vin.wmi_a_to_4'
        assert vin.raw_value == "JHACU2F88CC019777"

    def test_year_and_make_decoded_from_identifier(self, parser):
        record = parser.parse("VIN JH4CU2F88CC019777")
        assert record.value(FieldName.YEAR) == "2012"
        assert record.get(FieldName.YEAR).rule_id == 'universal.year.vin_decode'
        assert record.value(FieldName.MAKE) == "Acura"


class TestNumericFields:

    def test_thousands_separator(self, parser):
        record = parser.parse("Market Value: 12,053.00")
        assert record.value(FieldName.MARKET_VALUE) == Decimal("12053.00")

    def test_trailing_garbage_is_not_found(self, parser):
        record = parser.parse("Market Value: $12,053.00abc")
        assert record.get(FieldName.MARKET_VALUE).status == FieldStatus.NOT_FOUND

    def test_malformed_capture_falls_through_to_next_rule(self, parser):
        record = parser.parse("Market Value: $12,053.00abc\nMarket Value\n$11,000.00")
        market = record.get(FieldName.MARKET_VALUE)
        assert market.value == Decimal("11000.00")
        assert market.rule_id == 'generic.market.header_scan'


class TestProperties:

    DOCUMENTS = (
        "", CCC_REPORT, MITCHELL_REPORT, MITCHELL_DROPPED_DECIMAL,
        STATE_FARM_REPORT, COMPARABLES_REPORT, "Year\n2015",
    )

    @pytest.mark.parametrize("text", DOCUMENTS)
    def test_one_result_per_field(self, parser, text):
        record = parser.parse(text)
        assert [result.field for result in record.fields] == list(FieldName)

    @pytest.mark.parametrize("text", DOCUMENTS)
    def test_idempotent(self, parser, text):
        assert parser.parse(text) == parser.parse(text)
        assert extract_record(text) == parser.parse(text)

    @pytest.mark.parametrize("text", DOCUMENTS)
    def test_not_found_iff_no_value(self, parser, text):
        for result in parser.parse(text).fields:
            assert (result.value is None) == (result.status == FieldStatus.NOT_FOUND)

    def test_corrected_values_are_not_corrected_again(self, parser):
        repaired = parser.parse("oyota Corolla | S Plus 4 Door Sedan")
        canonical = f"{repaired.value(FieldName.MAKE)} Corolla | S Plus 4 Door Sedan"
        make = parser.parse(canonical).get(FieldName.MAKE)
        assert make.value == "Toyota"
        assert make.status == FieldStatus.FOUND
        assert make.correction_id is None

        vin = parser.parse("VIN JH4CU2F88CC019777").get(FieldName.VIN)
        assert vin.status == FieldStatus.FOUND

    def test_empty_document(self, parser):
        record = parser.parse("")
        assert record.profile == 'Generic'
        assert record.confidence == 0
        assert record.warnings == (WarningCode.CLASSIFICATION_UNCERTAIN, WarningCode.LOW_CONFIDENCE)

    def test_non_string_input_is_rejected(self, parser):
        with pytest.raises(TypeError):
            parser.parse(None)

    def test_year_range_does_not_depend_on_clock(self, parser, monkeypatch):
        import datetime

        class FrozenDate(datetime.date):
            @classmethod
            def today(cls):
                return cls(2021, 1, 1)

        before = parser.parse("Year: 2025")
        monkeypatch.setattr(datetime, 'date', FrozenDate)
        after = parser.parse("Year: 2025")
        assert before == after
        assert WarningCode.YEAR_OUT_OF_RANGE not in after.warnings

        strict = ReportParser(settings=Settings(MAX_MODEL_YEAR=2020)).parse("Year: 2025")
        assert WarningCode.YEAR_OUT_OF_RANGE in strict.warnings

    def test_settings_are_passed_through(self):
        text = "filler\n" * 3 + "JH4CU2F88CC019777\n"
        record = ReportParser(settings=Settings(LEADING_SECTION_LINES=2)).parse(text)
        assert record.vin_tier == 'first_occurrence'


class ExplodingRule:
    name = 'test.explodes'
    field = FieldName.LOCATION
    implied_decimal = False

    def apply(self, context):
        raise ValueError("rule bug")


class TestFieldIsolation:

    def test_rule_error_is_contained_to_its_field(self):
        profile = FormatProfile(
            name='Broken',
            rules={**GENERIC.rules, FieldName.LOCATION: (ExplodingRule(),)},
        )
        context = RuleContext(lines=normalize_text("Year: 2015\nLocation: Austin, TX 78701"), settings=Settings())
        results = FieldExtractor().extract(context, profile)

        by_name = {result.field: result for result in results}
        assert by_name[FieldName.LOCATION] == FieldResult.not_found(FieldName.LOCATION)
        assert by_name[FieldName.YEAR].value == "2015"
        assert context.warnings == [WarningCode.FIELD_EXTRACTION_ERROR]
