"""
Shared fixtures: an in-memory API client and sample records
"""
from datetime import datetime, timedelta, timezone

import pytest

from stockflow.api_client import ApiError
from stockflow.allocation.models import (
    AllocationOpportunity,
    SourcePurchaseOrder,
    WaitingDemand,
)
from stockflow.packaging.models import PackagingLevel, PackagingStructure
from stockflow.receiving.models import PurchaseOrderLine


class FakeApiClient:
    """
    Stands in for ApiClient

    GET answers come from `responses` keyed by path. Every POST is recorded;
    set `fail_with` to make the next calls raise ApiError.
    """

    def __init__(self, responses=None, post_response=None):
        self.responses = responses or {}
        self.post_response = post_response
        self.fail_with = None
        self.gets = []
        self.posts = []

    def get(self, path, params=None):
        self.gets.append((path, params))
        if self.fail_with is not None:
            raise self.fail_with
        if path not in self.responses:
            raise ApiError(f"GET {path} returned 404: Not Found", status_code=404, url=path)
        return self.responses[path]

    def post(self, path, payload=None):
        self.posts.append((path, payload))
        if self.fail_with is not None:
            raise self.fail_with
        return self.post_response


BASE_TIME = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


def make_demand(line_item_id, quantity_needed, days=0, transaction_number=None, created=True):
    return WaitingDemand(
        transaction_id=f"tx-{line_item_id}",
        transaction_number=transaction_number or f"TX-{line_item_id}",
        line_item_id=line_item_id,
        quantity_needed=quantity_needed,
        client_name=f"Client {line_item_id}",
        created_at=BASE_TIME + timedelta(days=days) if created else None,
    )


def make_opportunity(remaining, demands, received=None, status='pending', opportunity_id='opp-1'):
    received = remaining if received is None else received
    return AllocationOpportunity(
        id=opportunity_id,
        product_id='prod-1',
        product_name='Nitrile Gloves',
        quantity_received=received,
        quantity_allocated=received - remaining,
        quantity_remaining=remaining,
        waiting_transactions=tuple(demands),
        status=status,
        source_po=SourcePurchaseOrder(id='po-1', po_number='PO-0001', supplier_name='Acme Supply'),
        created_at=BASE_TIME,
    )


@pytest.fixture
def fake_client():
    return FakeApiClient()


@pytest.fixture
def case_structure():
    """1 Case = 10 Boxes = 100 Pieces"""
    return PackagingStructure(
        id='ps-1',
        name='Standard Case',
        product_id='prod-1',
        base_unit=PackagingLevel(name='Piece', level=1),
        level2=PackagingLevel(name='Box', level=2, contains=10),
        level3=PackagingLevel(name='Case', level=3, contains=10),
    )


@pytest.fixture
def pallet_structure():
    """1 Pallet = 20 Cases = 240 Boxes = 1440 Pieces"""
    return PackagingStructure(
        id='ps-2',
        name='Bulk Pallet',
        product_id='prod-1',
        base_unit=PackagingLevel(name='Piece', level=1),
        level2=PackagingLevel(name='Box', level=2, contains=6),
        level3=PackagingLevel(name='Case', level=3, contains=12),
        level4=PackagingLevel(name='Pallet', level=4, contains=20),
    )


@pytest.fixture
def base_only_structure():
    return PackagingStructure(
        id='ps-3',
        name='Loose',
        product_id='prod-1',
        base_unit=PackagingLevel(name='Piece', level=1),
    )


@pytest.fixture
def po_line():
    return PurchaseOrderLine(
        id='line-1',
        product_id='prod-1',
        ordered_quantity=500,
        received_quantity=100,
        unit_cost=2.5,
        product_name='Nitrile Gloves',
        sku='GLV-100',
    )


@pytest.fixture
def opportunity():
    """Pool of 50 with demand of 30 (oldest) and 25"""
    return make_opportunity(50, [make_demand('b', 25, days=2), make_demand('a', 30, days=1)])
