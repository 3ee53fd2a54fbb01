"""
Allocation records - opportunities, waiting demand, selections and results
"""
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from ..errors import ValidationError
from ..formatters import parse_timestamp


# Demand without a timestamp sorts after everything else
_LATEST = datetime.max.replace(tzinfo=timezone.utc)


class OpportunityStatus(str, Enum):
    PENDING = 'pending'
    ALLOCATED = 'allocated'
    DISMISSED = 'dismissed'


@dataclass(frozen=True)
class WaitingDemand:
    """One unsatisfied transaction line item that needs the product"""
    transaction_id: str
    transaction_number: str
    line_item_id: str
    quantity_needed: int
    client_name: str = ''
    created_at: Optional[datetime] = None

    def __post_init__(self):
        # Naive timestamps are taken as UTC so FIFO ordering can compare them
        object.__setattr__(self, 'created_at', parse_timestamp(self.created_at))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'transactionId': self.transaction_id,
            'transactionNumber': self.transaction_number,
            'lineItemId': self.line_item_id,
            'quantityNeeded': self.quantity_needed,
            'clientName': self.client_name,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'WaitingDemand':
        return cls(
            transaction_id=str(data['transactionId']),
            transaction_number=str(data.get('transactionNumber', '')),
            line_item_id=str(data['lineItemId']),
            quantity_needed=int(data.get('quantityNeeded') or 0),
            client_name=data.get('clientName', '') or '',
            created_at=parse_timestamp(data.get('createdAt')),
        )


def sort_waiting_demand(demands: Iterable[WaitingDemand]) -> List[WaitingDemand]:
    """Oldest created_at first; ties keep their original order"""
    return sorted(demands, key=lambda demand: demand.created_at or _LATEST)


@dataclass(frozen=True)
class SourcePurchaseOrder:
    id: str
    po_number: str = ''
    supplier_name: str = ''

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'poNumber': self.po_number,
            'supplier': {'name': self.supplier_name},
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'SourcePurchaseOrder':
        data = data or {}
        supplier = data.get('supplier') or {}
        return cls(
            id=str(data.get('id', '')),
            po_number=data.get('poNumber', '') or '',
            supplier_name=supplier.get('name', '') or '',
        )


@dataclass(frozen=True)
class AllocationOpportunity:
    """
    Newly received stock for one product matched against waiting demand

    Immutable: committing an allocation yields a new record, so a failed
    commit never leaves a half-updated opportunity behind.
    """
    id: str
    product_id: str
    quantity_received: int
    quantity_allocated: int
    quantity_remaining: int
    waiting_transactions: Tuple[WaitingDemand, ...] = ()
    status: OpportunityStatus = OpportunityStatus.PENDING
    product_name: str = ''
    source_po: Optional[SourcePurchaseOrder] = None
    created_at: Optional[datetime] = None

    def __post_init__(self):
        errors = []
        if self.quantity_remaining < 0:
            errors.append(f"Opportunity {self.id}: remaining quantity cannot be negative")
        if self.quantity_remaining != self.quantity_received - self.quantity_allocated:
            errors.append(
                f"Opportunity {self.id}: remaining {self.quantity_remaining} != "
                f"received {self.quantity_received} - allocated {self.quantity_allocated}"
            )
        if errors:
            raise ValidationError(errors)

        object.__setattr__(self, 'status', OpportunityStatus(self.status))
        object.__setattr__(
            self, 'waiting_transactions', tuple(sort_waiting_demand(self.waiting_transactions))
        )

    @property
    def is_pending(self) -> bool:
        return self.status == OpportunityStatus.PENDING

    @property
    def supplier_name(self) -> str:
        return self.source_po.supplier_name if self.source_po else ''

    @property
    def po_number(self) -> str:
        return self.source_po.po_number if self.source_po else ''

    def find_demand(self, line_item_id: str) -> Optional[WaitingDemand]:
        for demand in self.waiting_transactions:
            if demand.line_item_id == line_item_id:
                return demand
        return None

    def with_allocated(self, quantity: int) -> 'AllocationOpportunity':
        """Copy with the pool reduced by quantity and status allocated"""
        return replace(
            self,
            quantity_allocated=self.quantity_allocated + quantity,
            quantity_remaining=self.quantity_remaining - quantity,
            status=OpportunityStatus.ALLOCATED,
        )

    def with_status(self, status: OpportunityStatus) -> 'AllocationOpportunity':
        return replace(self, status=status)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'product': {'id': self.product_id, 'name': self.product_name},
            'sourcePO': self.source_po.to_dict() if self.source_po else None,
            'quantityReceived': self.quantity_received,
            'quantityAllocated': self.quantity_allocated,
            'quantityRemaining': self.quantity_remaining,
            'waitingTransactions': [demand.to_dict() for demand in self.waiting_transactions],
            'status': self.status.value,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AllocationOpportunity':
        product = data.get('product') or {}
        received = int(data.get('quantityReceived') or 0)
        allocated = int(data.get('quantityAllocated') or 0)
        remaining = data.get('quantityRemaining')

        return cls(
            id=str(data['id']),
            product_id=str(data.get('productId') or product.get('id', '')),
            product_name=product.get('name', '') or '',
            source_po=SourcePurchaseOrder.from_dict(data.get('sourcePO')),
            quantity_received=received,
            quantity_allocated=allocated,
            quantity_remaining=int(remaining) if remaining is not None else received - allocated,
            waiting_transactions=tuple(
                WaitingDemand.from_dict(item) for item in data.get('waitingTransactions') or []
            ),
            status=str(data.get('status', 'pending')).lower(),
            created_at=parse_timestamp(data.get('createdAt')),
        )


@dataclass(frozen=True)
class Allocation:
    """Quantity of the pool assigned to one transaction line item"""
    transaction_id: str
    line_item_id: str
    quantity: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            'transactionId': self.transaction_id,
            'lineItemId': self.line_item_id,
            'quantity': self.quantity,
        }


@dataclass(frozen=True)
class SelectionState:
    """
    Demand records chosen for one opportunity

    selected_demand_ids keeps selection order; quantity_overrides holds
    quantities the user changed from quantity_needed.
    """
    opportunity_id: str
    selected_demand_ids: Tuple[str, ...] = ()
    quantity_overrides: Mapping[str, int] = field(default_factory=dict)

    def is_selected(self, line_item_id: str) -> bool:
        return line_item_id in self.selected_demand_ids

    @property
    def is_empty(self) -> bool:
        return not self.selected_demand_ids


@dataclass(frozen=True)
class AllocationResult:
    """Outcome of a confirmed allocate commit"""
    opportunity: AllocationOpportunity
    allocations: Tuple[Allocation, ...]
    still_waiting: Tuple[WaitingDemand, ...]
    response: Optional[Dict[str, Any]] = None

    @property
    def total_allocated(self) -> int:
        return sum(allocation.quantity for allocation in self.allocations)


@dataclass(frozen=True)
class DismissResult:
    """Outcome of a confirmed dismiss; nothing was allocated"""
    opportunity: AllocationOpportunity
    still_waiting: Tuple[WaitingDemand, ...]
    allocations: Tuple[Allocation, ...] = ()
