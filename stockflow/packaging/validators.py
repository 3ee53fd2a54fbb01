"""
Validation for packaging structure definitions

Malformed structures are rejected when they are defined, so conversion
can assume a well-formed hierarchy.
"""
import logging
from typing import Any, List, Mapping, Optional, Sequence, Union

from ..config import config
from ..errors import ValidationError
from .models import PackagingLevel, PackagingStructure

logger = logging.getLogger(__name__)

LevelDef = Union[PackagingLevel, Mapping[str, Any], None]


def _level_field(level_def: LevelDef, key: str) -> Any:
    if isinstance(level_def, PackagingLevel):
        return getattr(level_def, key)
    return level_def.get(key)


class PackagingValidator:
    """Validator for packaging structure definitions"""

    def __init__(self):
        self.MAX_LEVELS = config.get_app_setting('MAX_PACKAGING_LEVELS', 4)
        self.MAX_NAME_LENGTH = 100

    def validate_structure(self,
                           name: str,
                           base_unit_name: str,
                           levels: Sequence[LevelDef] = ()) -> List[str]:
        """
        Validate a structure definition

        Args:
            name: Structure name
            base_unit_name: Name of level 1
            levels: Definitions for levels 2, 3 and 4 in order; None marks a
                disabled level

        Returns:
            List of error messages (empty if valid)
        """
        errors = []

        if not name or not name.strip():
            errors.append("Structure name is required")
        elif len(name) > self.MAX_NAME_LENGTH:
            errors.append(f"Structure name too long (maximum {self.MAX_NAME_LENGTH} characters)")

        if not base_unit_name or not base_unit_name.strip():
            errors.append("Base unit name is required")

        if len(levels) > self.MAX_LEVELS - 1:
            errors.append(f"At most {self.MAX_LEVELS} packaging levels are supported")
            return errors

        previous_enabled = True  # the base unit always exists
        for index, level_def in enumerate(levels):
            number = index + 2

            if level_def is None:
                previous_enabled = False
                continue

            if not previous_enabled:
                errors.append(f"Level {number} requires level {number - 1} to be defined")

            declared = _level_field(level_def, 'level')
            if declared is not None and declared != number:
                errors.append(f"Level {number} is declared as level {declared}")

            level_name = _level_field(level_def, 'name')
            if not level_name or not str(level_name).strip():
                errors.append(f"Level {number} name is required")

            contains = _level_field(level_def, 'contains')
            if contains is None:
                errors.append(f"Level {number} must say how many units it contains")
            elif isinstance(contains, bool) or not isinstance(contains, int):
                errors.append(f"Level {number} 'contains' must be a whole number")
            elif contains < 1:
                errors.append(f"Level {number} must contain at least 1 unit (got {contains})")

            previous_enabled = True

        return errors

    def define_structure(self,
                         name: str,
                         base_unit_name: str,
                         levels: Sequence[LevelDef] = (),
                         product_id: str = '',
                         primary_supplier: Optional[str] = None,
                         structure_id: str = '') -> PackagingStructure:
        """Build a validated PackagingStructure or raise ValidationError"""
        errors = self.validate_structure(name, base_unit_name, levels)
        if errors:
            logger.warning(f"Rejected packaging structure '{name}': {'; '.join(errors)}")
            raise ValidationError(errors)

        built = {}
        for index, level_def in enumerate(levels):
            if level_def is None:
                continue
            number = index + 2
            built[number] = PackagingLevel(
                name=str(_level_field(level_def, 'name')).strip(),
                level=number,
                contains=_level_field(level_def, 'contains'),
            )

        return PackagingStructure(
            id=structure_id,
            name=name.strip(),
            product_id=product_id,
            base_unit=PackagingLevel(name=base_unit_name.strip(), level=1),
            level2=built.get(2),
            level3=built.get(3),
            level4=built.get(4),
            primary_supplier=primary_supplier or None,
        )


_default_validator = PackagingValidator()

validate_structure = _default_validator.validate_structure
define_structure = _default_validator.define_structure
