"""
Vehicle manufacturer names as they appear in valuation reports.
"""

from typing import Optional
import re

# Sorted longest first so "Mercedes-Benz" wins over "Mercedes" and
# "Land Rover" over shorter names sharing a prefix
VEHICLE_MANUFACTURERS = tuple(sorted([
    'Morgan Motor Company',
    'Mahindra & Mahindra',
    'McLaren Automotive',
    'Chevrolet Division',
    'American Motors',
    'Harley Davidson',
    'General Motors',
    'Aston Martin',
    'Alfa Romeo',
    'Land Rover',
    'Range Rover',
    'Rolls Royce',
    'Dodge Ram',
    'AM General',
    'Acura', 'Audi', 'Bentley', 'BMW', 'Buick', 'Cadillac', 'Chevrolet',
    'Chrysler', 'Dodge', 'Ferrari', 'Ford', 'Genesis', 'GMC', 'Honda', 'Hyundai',
    'Infiniti', 'Jaguar', 'Jeep', 'Kia', 'Lamborghini', 'Lexus', 'Lincoln',
    'Lucid', 'Maserati', 'Mazda', 'Mercedes', 'Mercedes-Benz', 'Mini', 'Mitsubishi',
    'Nissan', 'Polestar', 'Porsche', 'Ram', 'Rivian', 'Subaru', 'Tesla', 'Toyota',
    'Volkswagen', 'Volvo',
], key=lambda name: (-len(name), name)))

_CANONICAL = {name.lower(): name for name in VEHICLE_MANUFACTURERS}


def manufacturer_alternation(names=VEHICLE_MANUFACTURERS) -> str:
    """Regex alternation of names, longest first, for embedding in patterns."""
    return '|'.join(re.escape(name) for name in sorted(names, key=lambda n: (-len(n), n)))


MANUFACTURER_PATTERN = re.compile(
    r'(?<![A-Za-z])(' + manufacturer_alternation() + r')(?![A-Za-z])',
    re.IGNORECASE,
)


def canonical_manufacturer(name: str) -> Optional[str]:
    """Canonical spelling when name is exactly a known manufacturer (any case)."""
    if not name:
        return None
    return _CANONICAL.get(re.sub(r'\s+', ' ', name.strip()).lower())
