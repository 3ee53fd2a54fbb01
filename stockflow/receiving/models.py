"""
Goods receipt records - purchase order lines, received items, batches
"""
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from ..errors import ValidationError
from ..formatters import parse_timestamp
from ..packaging.models import PackagingBreakdown


@dataclass(frozen=True)
class PurchaseOrderSummary:
    """Purchase order header shown when picking what to receive"""
    id: str
    po_number: str
    status: str = ''
    supplier_name: str = ''

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PurchaseOrderSummary':
        supplier = data.get('supplier') or {}
        return cls(
            id=str(data['id']),
            po_number=data.get('poNumber', '') or '',
            status=data.get('status', '') or '',
            supplier_name=supplier.get('name', '') or '',
        )


@dataclass(frozen=True)
class PurchaseOrderLine:
    """One line of a purchase order that goods can be received against"""
    id: str
    product_id: str
    ordered_quantity: int
    received_quantity: int = 0
    unit_cost: float = 0.0
    product_name: str = ''
    sku: str = ''

    @property
    def remaining_quantity(self) -> int:
        return max(self.ordered_quantity - self.received_quantity, 0)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PurchaseOrderLine':
        product = data.get('product') or {}
        return cls(
            id=str(data['id']),
            product_id=str(product.get('id', data.get('productId', ''))),
            ordered_quantity=int(data.get('orderedQuantity', 0)),
            received_quantity=int(data.get('receivedQuantity', 0)),
            unit_cost=float(data.get('unitCost', 0) or 0),
            product_name=product.get('name', '') or '',
            sku=product.get('sku', '') or '',
        )


@dataclass(frozen=True)
class ReceivedItem:
    """
    One receiving line

    Carries either a flat quantity or a packaging breakdown, never both.
    The use_* methods switch mode and clear the other value.
    """
    item_id: str
    location: str = ''
    quantity: Optional[int] = None
    packaging: Optional[PackagingBreakdown] = None
    expiry_date: Optional[str] = None
    lot_number: Optional[str] = None
    notes: Optional[str] = None

    @property
    def uses_packaging(self) -> bool:
        return self.packaging is not None

    def use_packaging(self, packaging_structure_id: Optional[str] = None) -> 'ReceivedItem':
        packaging = self.packaging or PackagingBreakdown()
        if packaging_structure_id is not None:
            packaging = replace(packaging, packaging_structure_id=packaging_structure_id)
        return replace(self, packaging=packaging, quantity=None)

    def use_flat_quantity(self, quantity: Optional[int] = None) -> 'ReceivedItem':
        return replace(self, packaging=None, quantity=quantity)

    def to_dict(self) -> Dict[str, Any]:
        data = {'itemId': self.item_id, 'location': self.location}
        if self.packaging is not None:
            data['packaging'] = self.packaging.to_dict()
        elif self.quantity is not None:
            data['quantity'] = self.quantity
        for key, value in (
            ('expiryDate', self.expiry_date),
            ('lotNumber', self.lot_number),
            ('notes', self.notes),
        ):
            if value:
                data[key] = value
        return data


@dataclass(frozen=True)
class GoodsReceipt:
    """Receipt of one or more purchase order lines"""
    purchase_order_id: str
    items: Tuple[ReceivedItem, ...] = ()
    receipt_number: Optional[str] = None
    received_by: Optional[str] = None
    received_date: Optional[str] = None
    notes: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        """Body for POST /purchase-orders/{id}/receive; empty optionals are left out"""
        payload = {'items': [item.to_dict() for item in self.items]}
        for key, value in (
            ('receiptNumber', self.receipt_number),
            ('receivedBy', self.received_by),
            ('receivedDate', self.received_date),
            ('notes', self.notes),
        ):
            if value:
                payload[key] = value
        return payload


@dataclass(frozen=True)
class InventoryBatch:
    """Receipt-backed pool of stock for one product"""
    id: str
    batch_number: str
    product_id: str
    original_quantity: int
    available_quantity: int
    allocated_quantity: int = 0
    unit_cost: float = 0.0
    received_date: Optional[datetime] = None
    expiry_date: Optional[datetime] = None
    location: Optional[str] = None
    lot_number: Optional[str] = None
    product_name: str = ''

    def __post_init__(self):
        errors = []
        if self.available_quantity < 0:
            errors.append(f"Batch {self.batch_number}: available quantity cannot be negative")
        if self.allocated_quantity < 0:
            errors.append(f"Batch {self.batch_number}: allocated quantity cannot be negative")
        if self.available_quantity + self.allocated_quantity > self.original_quantity:
            errors.append(
                f"Batch {self.batch_number}: available {self.available_quantity} + "
                f"allocated {self.allocated_quantity} exceeds original {self.original_quantity}"
            )
        if errors:
            raise ValidationError(errors)

    def allocate(self, quantity: int) -> 'InventoryBatch':
        """Copy with quantity moved from available to allocated"""
        if quantity < 1:
            raise ValidationError(f"Allocation quantity must be at least 1 (got {quantity})")
        if quantity > self.available_quantity:
            raise ValidationError(
                f"Batch {self.batch_number}: cannot allocate {quantity}, "
                f"only {self.available_quantity} available"
            )
        return replace(
            self,
            available_quantity=self.available_quantity - quantity,
            allocated_quantity=self.allocated_quantity + quantity,
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'InventoryBatch':
        product = data.get('product') or {}
        available = data.get('availableQuantity')
        original = data.get('originalQuantity')
        if original is None:
            original = available
        original = int(original or 0)
        return cls(
            id=str(data.get('id', '')),
            batch_number=data.get('batchNumber', '') or '',
            product_id=str(data.get('productId') or product.get('id', '')),
            original_quantity=original,
            available_quantity=int(available) if available is not None else original,
            allocated_quantity=int(data.get('allocatedQuantity', 0) or 0),
            unit_cost=float(data.get('unitCost', 0) or 0),
            received_date=parse_timestamp(data.get('receivedDate')),
            expiry_date=parse_timestamp(data.get('expiryDate')),
            location=data.get('location'),
            lot_number=data.get('lotNumber'),
            product_name=product.get('name', '') or '',
        )


@dataclass(frozen=True)
class ReceiptResult:
    """Outcome of a confirmed goods receipt"""
    purchase_order_id: str
    batches: Tuple[InventoryBatch, ...]
    receipt_number: Optional[str] = None

    @property
    def total_received(self) -> int:
        return sum(batch.original_quantity for batch in self.batches)
