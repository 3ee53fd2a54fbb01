import pytest

from stockflow.errors import ValidationError
from stockflow.packaging.converter import (
    PackagingConverter,
    break_down,
    convert_to_base_units,
    describe_breakdown,
    describe_equivalence,
    pluralize,
    units_per_level,
)
from stockflow.packaging.models import PackagingBreakdown


def test_units_per_level_is_cumulative(pallet_structure):
    assert units_per_level(pallet_structure) == {1: 1, 2: 6, 3: 72, 4: 1440}


def test_cases_boxes_pieces_convert_to_base_units(case_structure):
    """2 Cases + 3 Boxes + 5 Pieces = 235 Pieces"""
    breakdown = PackagingBreakdown(cases=2, boxes=3, pieces=5, packaging_structure_id='ps-1')
    assert convert_to_base_units(breakdown, case_structure) == 235


def test_pallets_convert_through_every_level(pallet_structure):
    breakdown = PackagingBreakdown(pallets=1, cases=2, boxes=1, pieces=3)
    assert convert_to_base_units(breakdown, pallet_structure) == 1440 + 144 + 6 + 3


def test_counts_for_missing_levels_contribute_nothing(case_structure, caplog):
    breakdown = PackagingBreakdown(pallets=4, pieces=5)

    with caplog.at_level('WARNING'):
        total = convert_to_base_units(breakdown, case_structure)

    assert total == 5
    assert 'no level 4' in caplog.text


def test_empty_breakdown_is_zero(case_structure):
    assert convert_to_base_units(PackagingBreakdown(), case_structure) == 0
    assert PackagingBreakdown().is_empty()


def test_describe_equivalence(case_structure, pallet_structure):
    assert describe_equivalence(case_structure) == "1 Case = 10 Boxes = 100 Pieces"
    assert describe_equivalence(pallet_structure) == "1 Pallet = 20 Cases = 240 Boxes = 1440 Pieces"


def test_describe_equivalence_base_unit_only(base_only_structure):
    assert describe_equivalence(base_only_structure) == "1 Piece"


def test_describe_breakdown(case_structure):
    breakdown = PackagingBreakdown(cases=2, boxes=3, pieces=5)
    assert describe_breakdown(breakdown, case_structure) == "2 Cases + 3 Boxes + 5 Pieces = 235 Pieces"
    assert describe_breakdown(PackagingBreakdown(), case_structure) == "0 Pieces"


def test_break_down_is_greedy_and_round_trips(case_structure, pallet_structure):
    breakdown = break_down(235, case_structure)
    assert (breakdown.cases, breakdown.boxes, breakdown.pieces) == (2, 3, 5)
    assert breakdown.pallets is None
    assert breakdown.packaging_structure_id == 'ps-1'

    for total in (0, 1, 71, 72, 1439, 1593, 5000):
        assert convert_to_base_units(break_down(total, pallet_structure), pallet_structure) == total


def test_break_down_rejects_negative_totals(case_structure):
    with pytest.raises(ValidationError):
        break_down(-1, case_structure)


def test_breakdown_fields_follow_structure_depth(case_structure, base_only_structure):
    converter = PackagingConverter()
    assert converter.breakdown_fields(case_structure) == ['cases', 'boxes', 'pieces']
    assert converter.breakdown_fields(base_only_structure) == ['pieces']


@pytest.mark.parametrize('name, count, expected', [
    ('Box', 1, 'Box'),
    ('Box', 2, 'Boxes'),
    ('Piece', 3, 'Pieces'),
    ('Battery', 2, 'Batteries'),
    ('Tray', 2, 'Trays'),
    ('Pouch', 4, 'Pouches'),
])
def test_pluralize(name, count, expected):
    assert pluralize(name, count) == expected
