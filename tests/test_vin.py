#!/usr/bin/env python3
"""
Tests for VIN validation, decoding and OCR repair.
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from appraisal.services.corrections import correct_vin
from appraisal.utils.vin import (
    compute_check_digit,
    is_well_formed,
    manufacturer_from_vin,
    model_year_from_vin,
    passes_check_digit,
)

ACURA_VIN = "JH4CU2F88CC019777"
MERCEDES_VIN = "WDDJK6FA9FF035164"
BMW_VIN = "WBAGV8C02MCF61721"
TOYOTA_VIN = "2T1BURHE6KC123456"
LAND_ROVER_VIN = "SALWR2RE0KA836519"


class TestCheckDigit:

    def test_valid_identifiers_pass(self):
        for vin in (ACURA_VIN, MERCEDES_VIN, BMW_VIN, TOYOTA_VIN, LAND_ROVER_VIN):
            assert passes_check_digit(vin), vin

    def test_computed_digit(self):
        assert compute_check_digit(ACURA_VIN) == "8"
        assert compute_check_digit(TOYOTA_VIN) == "6"

    def test_single_glyph_change_fails(self):
        assert not passes_check_digit("JHACU2F88CC019777")
        assert not passes_check_digit("WDDJKBFA9FF035164")

    def test_forbidden_letters_are_malformed(self):
        assert not is_well_formed("2T1BURHE6KCI23456")
        assert compute_check_digit("2T1BURHE6KCI23456") is None
        assert not is_well_formed("2T1BURHE6KC12345")


class TestDecoding:

    def test_model_year(self):
        assert model_year_from_vin(ACURA_VIN) == 2012
        assert model_year_from_vin(MERCEDES_VIN) == 2015
        assert model_year_from_vin(TOYOTA_VIN) == 2019
        assert model_year_from_vin("1FTFW1E57") is None

    def test_manufacturer(self):
        assert manufacturer_from_vin(ACURA_VIN) == "Acura"
        assert manufacturer_from_vin(LAND_ROVER_VIN) == "Land Rover"
        assert manufacturer_from_vin("ZZZ00000000000000") is None


class TestCorrectVin:
    """Secondary repair pass, gated on the check digit."""

    def test_valid_identifier_is_untouched(self):
        assert correct_vin(ACURA_VIN) == (ACURA_VIN, None)

    def test_wmi_a_read_for_4(self):
        assert correct_vin("JHACU2F88CC019777") == (ACURA_VIN, "vin.wmi_a_to_4")

    def test_wmi_6_read_for_b(self):
        assert correct_vin("W6AGV8C02MCF61721") == (BMW_VIN, "vin.wmi_6_to_b")

    def test_b_read_for_6(self):
        assert correct_vin("WDDJKBFA9FF035164") == (MERCEDES_VIN, "vin.b_to_6")

    def test_forbidden_glyph(self):
        assert correct_vin("2T1BURHE6KCI23456") == (TOYOTA_VIN, "vin.forbidden_glyph")

    def test_unrepairable_identifier_is_kept(self):
        value, correction_id = correct_vin("2T1BURHE7KC123456")
        assert value == "2T1BURHE7KC123456"
        assert correction_id is None

    def test_repair_is_idempotent(self):
        repaired, _ = correct_vin("JHACU2F88CC019777")
        assert correct_vin(repaired) == (repaired, None)
