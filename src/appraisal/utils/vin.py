"""
Vehicle identification number helpers.

A VIN is 17 characters from [A-HJ-NPR-Z0-9] (no I, O, Q). Position 9 is a
check digit computed from the other 16 characters.
"""

from types import MappingProxyType
from typing import Optional
import re

VIN_LENGTH = 17

VIN_FORMAT = re.compile(r'^[A-HJ-NPR-Z0-9]{17}$')

# Uppercase 17-char tokens with at least one digit and one letter; admits
# I/O/Q so that OCR-corrupted identifiers still become candidates.
VIN_TOKEN = re.compile(r'\b(?=[A-Z0-9]*\d)(?=[A-Z0-9]*[A-Z])[A-Z0-9]{17}\b')

_WEIGHTS = (8, 7, 6, 5, 4, 3, 2, 10, 0, 9, 8, 7, 6, 5, 4, 3, 2)

_TRANSLITERATION = MappingProxyType({
    **{str(d): d for d in range(10)},
    'A': 1, 'B': 2, 'C': 3, 'D': 4, 'E': 5, 'F': 6, 'G': 7, 'H': 8,
    'J': 1, 'K': 2, 'L': 3, 'M': 4, 'N': 5, 'P': 7, 'R': 9,
    'S': 2, 'T': 3, 'U': 4, 'V': 5, 'W': 6, 'X': 7, 'Y': 8, 'Z': 9,
})

# World manufacturer identifier (first three characters)
WMI_MANUFACTURERS = MappingProxyType({
    '1FT': 'Ford',
    '1GC': 'Chevrolet',
    '1GM': 'Chevrolet',
    '1HD': 'Harley-Davidson',
    '2C3': 'Chrysler',
    '2C4': 'Chrysler',
    '2T1': 'Toyota',
    '3FA': 'Ford',
    '3VW': 'Volkswagen',
    '4T1': 'Toyota',
    '5YJ': 'Tesla',
    '5XY': 'Hyundai',
    'JH4': 'Acura',
    'JHM': 'Honda',
    'JN1': 'Nissan',
    'KMH': 'Hyundai',
    'SAL': 'Land Rover',
    'WBA': 'BMW',
    'WBS': 'BMW',
    'WDD': 'Mercedes-Benz',
    'WVW': 'Volkswagen',
    'YV1': 'Volvo',
})

# Position 10 model-year code; the 30-year cycle is resolved toward recent years
_MODEL_YEAR_CODES = MappingProxyType({
    'A': 2010, 'B': 2011, 'C': 2012, 'D': 2013, 'E': 2014, 'F': 2015,
    'G': 2016, 'H': 2017, 'J': 2018, 'K': 2019, 'L': 2020, 'M': 2021,
    'N': 2022, 'P': 2023, 'R': 2024, 'S': 2025, 'T': 2026,
    '1': 2001, '2': 2002, '3': 2003, '4': 2004, '5': 2005,
    '6': 2006, '7': 2007, '8': 2008, '9': 2009,
})


def is_well_formed(vin: str) -> bool:
    return bool(vin) and bool(VIN_FORMAT.match(vin))


def compute_check_digit(vin: str) -> Optional[str]:
    """Expected position-9 character, or None if vin is not well formed."""
    if not is_well_formed(vin):
        return None

    total = sum(_TRANSLITERATION[char] * weight for char, weight in zip(vin, _WEIGHTS))
    remainder = total % 11
    return 'X' if remainder == 10 else str(remainder)


def passes_check_digit(vin: str) -> bool:
    expected = compute_check_digit(vin)
    return expected is not None and vin[8] == expected


def manufacturer_from_vin(vin: str) -> Optional[str]:
    if not vin or len(vin) < 3:
        return None
    return WMI_MANUFACTURERS.get(vin[:3])


def model_year_from_vin(vin: str) -> Optional[int]:
    if not vin or len(vin) < 10:
        return None
    return _MODEL_YEAR_CODES.get(vin[9])
