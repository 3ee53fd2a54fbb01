"""
Packaging Converter for receiving and display

Converts packaging breakdowns (pallets/cases/boxes/pieces) into base units
and renders human-readable equivalences.
"""
import logging
from typing import Dict, List

from ..errors import ValidationError
from .models import BREAKDOWN_FIELDS, PackagingBreakdown, PackagingStructure

logger = logging.getLogger(__name__)

# Level number -> breakdown field counting it
LEVEL_FIELDS = {level: name for name, level in BREAKDOWN_FIELDS.items()}


def pluralize(name: str, count: int) -> str:
    """Naive English plural for unit names (Box -> Boxes, Piece -> Pieces)"""
    if count == 1 or not name:
        return name
    lower = name.lower()
    if lower.endswith(('s', 'x', 'z', 'ch', 'sh')):
        return f"{name}es"
    if lower.endswith('y') and len(lower) > 1 and lower[-2] not in 'aeiou':
        return f"{name[:-1]}ies"
    return f"{name}s"


class PackagingConverter:
    """Service for packaging-to-base-unit arithmetic"""

    def units_per_level(self, structure: PackagingStructure) -> Dict[int, int]:
        """Base units contained in one unit of each present level"""
        result = {}
        cumulative = 1
        for current in structure.present_levels():
            cumulative *= current.units_of_lower_level
            result[current.level] = cumulative
        return result

    def convert_to_base_units(self, breakdown: PackagingBreakdown,
                              structure: PackagingStructure) -> int:
        """
        Total base units for a breakdown

        Counts for levels the structure does not have contribute zero;
        the caller may still be switching between structures.
        """
        per_level = self.units_per_level(structure)
        total = 0

        for field_name, level in BREAKDOWN_FIELDS.items():
            count = breakdown.count_for(field_name)
            if not count:
                continue

            if level not in per_level:
                logger.warning(
                    f"Structure '{structure.name}' has no level {level}; "
                    f"ignoring {count} {field_name}"
                )
                continue

            total += count * per_level[level]

        return total

    def describe_equivalence(self, structure: PackagingStructure) -> str:
        """Equivalence chain, e.g. '1 Case = 10 Boxes = 100 Pieces'"""
        levels = structure.present_levels()
        top = levels[-1]
        parts = [f"1 {top.name}"]

        cumulative = 1
        for current, lower in zip(reversed(levels), reversed(levels[:-1])):
            cumulative *= current.units_of_lower_level
            parts.append(f"{cumulative} {pluralize(lower.name, cumulative)}")

        return " = ".join(parts)

    def describe_breakdown(self, breakdown: PackagingBreakdown,
                           structure: PackagingStructure) -> str:
        """Readable summary such as '2 Cases + 3 Boxes + 5 Pieces = 235 Pieces'"""
        parts = []
        for current in reversed(structure.present_levels()):
            count = breakdown.count_for(LEVEL_FIELDS[current.level])
            if count:
                parts.append(f"{count} {pluralize(current.name, count)}")

        total = self.convert_to_base_units(breakdown, structure)
        base_name = pluralize(structure.base_unit.name, total)
        if not parts:
            return f"0 {base_name}"
        return f"{' + '.join(parts)} = {total} {base_name}"

    def break_down(self, total: int, structure: PackagingStructure) -> PackagingBreakdown:
        """Greedy largest-level-first breakdown that converts back to total"""
        if total < 0:
            raise ValidationError(f"Quantity cannot be negative: {total}")

        per_level = self.units_per_level(structure)
        counts = {}
        remaining = total

        for level in sorted(per_level, reverse=True):
            counts[LEVEL_FIELDS[level]], remaining = divmod(remaining, per_level[level])

        return PackagingBreakdown(
            packaging_structure_id=structure.id or None,
            **counts,
        )

    def breakdown_fields(self, structure: PackagingStructure) -> List[str]:
        """Breakdown fields usable with this structure, largest first"""
        return [LEVEL_FIELDS[level.level] for level in reversed(structure.present_levels())]


_default_converter = PackagingConverter()

units_per_level = _default_converter.units_per_level
convert_to_base_units = _default_converter.convert_to_base_units
describe_equivalence = _default_converter.describe_equivalence
describe_breakdown = _default_converter.describe_breakdown
break_down = _default_converter.break_down
