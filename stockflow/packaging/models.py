"""
Packaging records - levels, structures and breakdowns

Payloads from the inventory API are camelCase; records here are snake_case.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

# Level number -> key used in the API "levels" object
LEVEL_KEYS = {
    1: 'baseUnit',
    2: 'level2',
    3: 'level3',
    4: 'level4',
}

# Breakdown field -> packaging level it counts
BREAKDOWN_FIELDS = {
    'pieces': 1,
    'boxes': 2,
    'cases': 3,
    'pallets': 4,
}


@dataclass(frozen=True)
class PackagingLevel:
    """One tier of a packaging hierarchy"""
    name: str
    level: int
    contains: Optional[int] = None

    @property
    def units_of_lower_level(self) -> int:
        """Base level always contains 1"""
        if self.level == 1:
            return 1
        return self.contains or 0

    def to_dict(self) -> Dict[str, Any]:
        data = {'name': self.name, 'level': self.level}
        if self.level > 1:
            data['contains'] = self.contains
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any], level: int) -> 'PackagingLevel':
        contains = data.get('contains')
        return cls(
            name=data.get('name', ''),
            level=int(data.get('level', level)),
            contains=int(contains) if contains is not None and level > 1 else None,
        )


@dataclass(frozen=True)
class PackagingStructure:
    """Named, reusable packaging hierarchy for one product"""
    id: str
    name: str
    product_id: str
    base_unit: PackagingLevel
    level2: Optional[PackagingLevel] = None
    level3: Optional[PackagingLevel] = None
    level4: Optional[PackagingLevel] = None
    primary_supplier: Optional[str] = None

    def get_level(self, level: int) -> Optional[PackagingLevel]:
        return {
            1: self.base_unit,
            2: self.level2,
            3: self.level3,
            4: self.level4,
        }.get(level)

    def present_levels(self) -> List[PackagingLevel]:
        """
        Levels bottom-up, stopping at the first gap

        A level above a missing one cannot be converted, so it is not
        reported as present.
        """
        levels = [self.base_unit]
        for number in (2, 3, 4):
            current = self.get_level(number)
            if current is None:
                break
            levels.append(current)
        return levels

    @property
    def top_level(self) -> PackagingLevel:
        return self.present_levels()[-1]

    def levels_to_dict(self) -> Dict[str, Any]:
        levels = {}
        for number, key in LEVEL_KEYS.items():
            current = self.get_level(number)
            if current is not None:
                levels[key] = current.to_dict()
        return levels

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'id': self.id,
            'name': self.name,
            'productId': self.product_id,
            'levels': self.levels_to_dict(),
        }
        if self.primary_supplier:
            data['primarySupplier'] = self.primary_supplier
        return data

    def to_create_payload(self) -> Dict[str, Any]:
        """Body for POST /inventory/packaging-structures"""
        payload = {
            'productId': self.product_id,
            'name': self.name,
            'levels': self.levels_to_dict(),
        }
        if self.primary_supplier:
            payload['primarySupplier'] = self.primary_supplier
        return payload

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PackagingStructure':
        raw_levels = data.get('levels') or {}
        parsed = {}
        for number, key in LEVEL_KEYS.items():
            if raw_levels.get(key):
                parsed[number] = PackagingLevel.from_dict(raw_levels[key], number)

        base_unit = parsed.get(1) or PackagingLevel(name='Unit', level=1)
        product_id = data.get('productId')
        if product_id is None and isinstance(data.get('product'), dict):
            product_id = data['product'].get('id')

        return cls(
            id=str(data.get('id', '')),
            name=data.get('name', ''),
            product_id=str(product_id or ''),
            base_unit=base_unit,
            level2=parsed.get(2),
            level3=parsed.get(3),
            level4=parsed.get(4),
            primary_supplier=data.get('primarySupplier'),
        )


@dataclass(frozen=True)
class PackagingBreakdown:
    """Counts received at each packaging level for one receiving line"""
    pieces: Optional[int] = None
    boxes: Optional[int] = None
    cases: Optional[int] = None
    pallets: Optional[int] = None
    packaging_structure_id: Optional[str] = None

    def count_for(self, field_name: str) -> int:
        return getattr(self, field_name) or 0

    def is_empty(self) -> bool:
        return not any(self.count_for(name) for name in BREAKDOWN_FIELDS)

    def to_dict(self) -> Dict[str, Any]:
        data = {}
        if self.packaging_structure_id:
            data['packagingStructureId'] = self.packaging_structure_id
        for name in ('cases', 'boxes', 'pieces', 'pallets'):
            value = getattr(self, name)
            if value is not None:
                data[name] = value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PackagingBreakdown':
        def _count(key):
            value = data.get(key)
            if value is None or value == '':
                return None
            return int(value)

        return cls(
            pieces=_count('pieces'),
            boxes=_count('boxes'),
            cases=_count('cases'),
            pallets=_count('pallets'),
            packaging_structure_id=data.get('packagingStructureId'),
        )
