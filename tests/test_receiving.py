from dataclasses import replace

import pytest

from stockflow.api_client import ApiError
from stockflow.errors import CommitFailure, ValidationError
from stockflow.packaging.models import PackagingBreakdown
from stockflow.receiving.models import (
    GoodsReceipt,
    InventoryBatch,
    PurchaseOrderLine,
    ReceivedItem,
)
from stockflow.receiving.receiving_service import ReceivingService
from stockflow.receiving.validators import ReceiptValidator


@pytest.fixture
def validator():
    return ReceiptValidator()


@pytest.fixture
def lines(po_line):
    return {po_line.id: po_line}


@pytest.fixture
def structures(case_structure):
    return {case_structure.id: case_structure}


def packed(cases=0, boxes=0, pieces=0, structure_id='ps-1'):
    return ReceivedItem(
        item_id='line-1',
        location='A-01',
        packaging=PackagingBreakdown(cases=cases, boxes=boxes, pieces=pieces,
                                     packaging_structure_id=structure_id),
    )


def receipt_of(*items):
    return GoodsReceipt(purchase_order_id='po-1', items=tuple(items))


# ==================== ReceivedItem ====================

def test_switching_to_packaging_clears_the_flat_quantity():
    item = ReceivedItem(item_id='line-1', quantity=40)

    switched = item.use_packaging('ps-1')

    assert switched.quantity is None
    assert switched.uses_packaging
    assert switched.packaging.packaging_structure_id == 'ps-1'


def test_switching_to_flat_quantity_clears_the_breakdown():
    item = packed(cases=2)

    switched = item.use_flat_quantity(12)

    assert switched.packaging is None
    assert switched.quantity == 12
    assert not switched.uses_packaging


def test_receipt_payload_sends_one_mode_per_line():
    receipt = GoodsReceipt(
        purchase_order_id='po-1',
        items=(
            packed(cases=2, boxes=3, pieces=5),
            ReceivedItem(item_id='line-2', location='B-02', quantity=7, lot_number='LOT-9'),
        ),
        received_by='Dana',
    )

    payload = receipt.to_payload()

    assert payload['receivedBy'] == 'Dana'
    assert 'receiptNumber' not in payload
    assert payload['items'][0] == {
        'itemId': 'line-1',
        'location': 'A-01',
        'packaging': {'packagingStructureId': 'ps-1', 'cases': 2, 'boxes': 3, 'pieces': 5},
    }
    assert payload['items'][1] == {'itemId': 'line-2', 'location': 'B-02', 'quantity': 7, 'lotNumber': 'LOT-9'}


def test_remaining_quantity_on_a_line(po_line):
    assert po_line.remaining_quantity == 400
    assert PurchaseOrderLine(id='x', product_id='p', ordered_quantity=5, received_quantity=9).remaining_quantity == 0


# ==================== ReceiptValidator ====================

def test_packaging_breakdown_resolves_to_base_units(validator, structures):
    assert validator.resolve_quantity(packed(cases=2, boxes=3, pieces=5), structures) == 235


def test_valid_receipts(validator, lines, structures):
    flat = ReceivedItem(item_id='line-1', location='A-01', quantity=400)
    assert validator.validate_receipt(receipt_of(flat), lines, structures) == []
    assert validator.validate_receipt(receipt_of(packed(cases=2, boxes=3, pieces=5)), lines, structures) == []


def test_both_modes_on_one_line_are_rejected(validator, lines, structures):
    item = ReceivedItem(
        item_id='line-1',
        location='A-01',
        quantity=5,
        packaging=PackagingBreakdown(boxes=1, packaging_structure_id='ps-1'),
    )
    errors = validator.validate_receipt(receipt_of(item), lines, structures)
    assert len(errors) == 1
    assert 'not both' in errors[0]


def test_receiving_more_than_outstanding_is_rejected(validator, lines, structures):
    errors = validator.validate_receipt(receipt_of(packed(cases=4, boxes=1)), lines, structures)
    assert errors == ["Item 1 (Nitrile Gloves): receiving 410 but only 400 remain on the purchase order"]


@pytest.mark.parametrize('item, message', [
    (ReceivedItem(item_id='line-1', location='', quantity=5), 'location is required'),
    (ReceivedItem(item_id='line-1', location='A-01'), 'quantity is required'),
    (ReceivedItem(item_id='line-1', location='A-01', quantity=0), 'quantity must be at least 1'),
    (packed(structure_id=None), 'select a packaging structure'),
    (packed(boxes=1, structure_id='ps-missing'), 'unknown packaging structure'),
    (packed(), 'at least 1 base unit'),
    (packed(boxes=-1), 'boxes cannot be negative'),
])
def test_invalid_lines(validator, lines, structures, item, message):
    errors = validator.validate_receipt(receipt_of(item), lines, structures)
    assert any(message in error for error in errors), errors


def test_structure_for_another_product_is_rejected(validator, lines, case_structure):
    other = {case_structure.id: replace(case_structure, name='Other', product_id='prod-2')}
    errors = validator.validate_receipt(receipt_of(packed(boxes=1)), lines, other)
    assert any('for another product' in error for error in errors)


def test_receipt_level_errors(validator, lines, structures):
    assert validator.validate_receipt(receipt_of(), lines, structures) == ["No items to receive"]

    stranger = ReceivedItem(item_id='line-9', location='A-01', quantity=1)
    assert validator.validate_receipt(receipt_of(stranger), lines, structures) == [
        "Item 1: not on this purchase order"
    ]

    flat = ReceivedItem(item_id='line-1', location='A-01', quantity=1)
    errors = validator.validate_receipt(receipt_of(flat, flat), lines, structures)
    assert errors == ["Item 2: purchase order line already added as item 1"]


# ==================== InventoryBatch ====================

def make_batch(original=100, available=100, allocated=0):
    return InventoryBatch(
        id='batch-1',
        batch_number='B-0001',
        product_id='prod-1',
        original_quantity=original,
        available_quantity=available,
        allocated_quantity=allocated,
    )


def test_batch_allocation_moves_stock_to_allocated():
    batch = make_batch()

    allocated = batch.allocate(30)

    assert (allocated.available_quantity, allocated.allocated_quantity) == (70, 30)
    assert batch.available_quantity == 100


@pytest.mark.parametrize('quantity', [0, 101])
def test_batch_allocation_limits(quantity):
    with pytest.raises(ValidationError):
        make_batch().allocate(quantity)


@pytest.mark.parametrize('available, allocated', [(-1, 0), (60, 50), (10, -2)])
def test_batch_quantities_stay_consistent(available, allocated):
    with pytest.raises(ValidationError):
        make_batch(available=available, allocated=allocated)


# ==================== ReceivingService ====================

def test_get_purchase_order_lines(fake_client):
    fake_client.responses['/purchase-orders/po-1'] = {
        'id': 'po-1',
        'items': [
            {
                'id': 'line-1',
                'product': {'id': 'prod-1', 'name': 'Nitrile Gloves', 'sku': 'GLV-100'},
                'orderedQuantity': 500,
                'receivedQuantity': 100,
                'unitCost': '2.50',
            },
        ],
    }

    lines = ReceivingService(client=fake_client).get_purchase_order_lines('po-1')

    assert list(lines) == ['line-1']
    assert lines['line-1'].remaining_quantity == 400
    assert lines['line-1'].unit_cost == 2.5


def test_get_receivable_purchase_orders(fake_client):
    fake_client.responses['/purchase-orders'] = [
        {'id': 'po-1', 'poNumber': 'PO-0001', 'status': 'sent', 'supplier': {'name': 'Acme Supply'}},
    ]

    orders = ReceivingService(client=fake_client).get_receivable_purchase_orders()

    assert fake_client.gets == [('/purchase-orders', {'status': ['sent', 'partially_received']})]
    assert orders[0].po_number == 'PO-0001'
    assert orders[0].supplier_name == 'Acme Supply'


def test_receive_creates_batches(fake_client, lines, structures):
    fake_client.post_response = {
        'receiptNumber': 'GR-0042',
        'batches': [
            {
                'id': 'batch-1',
                'batchNumber': 'B-0001',
                'productId': 'prod-1',
                'originalQuantity': 235,
                'availableQuantity': 235,
                'location': 'A-01',
                'receivedDate': '2024-03-05T08:00:00Z',
            },
            {'id': 'bad', 'batchNumber': 'B-BAD', 'originalQuantity': 1, 'availableQuantity': 5},
        ],
    }
    receipt = receipt_of(packed(cases=2, boxes=3, pieces=5))

    result = ReceivingService(client=fake_client).receive(receipt, lines, structures)

    assert fake_client.posts[0][0] == '/purchase-orders/po-1/receive'
    assert result.receipt_number == 'GR-0042'
    assert [b.batch_number for b in result.batches] == ['B-0001']
    assert result.total_received == 235


def test_receive_rejects_invalid_receipt_without_calling_api(fake_client, lines, structures):
    with pytest.raises(ValidationError):
        ReceivingService(client=fake_client).receive(receipt_of(packed(cases=5)), lines, structures)
    assert fake_client.posts == []


def test_receive_api_failure(fake_client, lines, structures):
    fake_client.fail_with = ApiError('POST returned 500', status_code=500)

    with pytest.raises(CommitFailure):
        ReceivingService(client=fake_client).receive(receipt_of(packed(boxes=1)), lines, structures)


def test_receive_with_null_batch_quantities_still_reports_success(fake_client, lines, structures):
    fake_client.post_response = {
        'receiptNumber': 'GR-0043',
        'batches': [
            {'id': 'batch-1', 'batchNumber': 'B1', 'availableQuantity': None},
            {'id': 'batch-2', 'batchNumber': 'B2', 'originalQuantity': None, 'availableQuantity': 10},
        ],
    }

    result = ReceivingService(client=fake_client).receive(receipt_of(packed(boxes=1)), lines, structures)

    assert result.receipt_number == 'GR-0043'
    assert [(b.batch_number, b.original_quantity, b.available_quantity) for b in result.batches] == [
        ('B1', 0, 0),
        ('B2', 10, 10),
    ]
