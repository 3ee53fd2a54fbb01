"""
Goods receipt against purchase orders
"""
from .models import (
    PurchaseOrderSummary,
    PurchaseOrderLine,
    ReceivedItem,
    GoodsReceipt,
    InventoryBatch,
    ReceiptResult,
)
from .validators import ReceiptValidator
from .receiving_service import ReceivingService

__all__ = [
    'PurchaseOrderSummary',
    'PurchaseOrderLine',
    'ReceivedItem',
    'GoodsReceipt',
    'InventoryBatch',
    'ReceiptResult',
    'ReceiptValidator',
    'ReceivingService',
]
