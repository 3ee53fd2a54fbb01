"""
Packaging hierarchies and base-unit conversion
"""
from .models import (
    PackagingLevel,
    PackagingStructure,
    PackagingBreakdown,
)
from .converter import (
    PackagingConverter,
    units_per_level,
    convert_to_base_units,
    describe_equivalence,
    describe_breakdown,
    break_down,
)
from .validators import (
    PackagingValidator,
    validate_structure,
    define_structure,
)
from .packaging_data import PackagingData

__all__ = [
    'PackagingLevel',
    'PackagingStructure',
    'PackagingBreakdown',
    'PackagingConverter',
    'units_per_level',
    'convert_to_base_units',
    'describe_equivalence',
    'describe_breakdown',
    'break_down',
    'PackagingValidator',
    'validate_structure',
    'define_structure',
    'PackagingData',
]
