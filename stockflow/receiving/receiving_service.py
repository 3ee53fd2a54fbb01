"""
Receiving Service - goods receipts against purchase orders
"""
import logging
from typing import Dict, List, Mapping, Optional

from ..api_client import ApiClient, ApiError
from ..errors import CommitFailure, ValidationError
from ..packaging.models import PackagingStructure
from .models import (
    GoodsReceipt,
    InventoryBatch,
    PurchaseOrderLine,
    PurchaseOrderSummary,
    ReceiptResult,
)
from .validators import ReceiptValidator

logger = logging.getLogger(__name__)

RECEIVABLE_STATUSES = ['sent', 'partially_received']


class ReceivingService:
    """Service for loading purchase order lines and submitting receipts"""

    def __init__(self, client: Optional[ApiClient] = None):
        self.client = client or ApiClient()
        self.validator = ReceiptValidator()

    def get_receivable_purchase_orders(self) -> List[PurchaseOrderSummary]:
        """Sent or partially received purchase orders"""
        try:
            items = self.client.get('/purchase-orders', params={'status': RECEIVABLE_STATUSES})
        except ApiError as e:
            logger.error(f"Error loading purchase orders: {e}")
            return []

        return [PurchaseOrderSummary.from_dict(item) for item in items or []]

    def get_purchase_order_lines(self, purchase_order_id: str) -> Dict[str, PurchaseOrderLine]:
        """Lines of a purchase order keyed by line id"""
        try:
            purchase_order = self.client.get(f"/purchase-orders/{purchase_order_id}")
        except ApiError as e:
            logger.error(f"Error loading purchase order {purchase_order_id}: {e}")
            return {}

        lines = [PurchaseOrderLine.from_dict(item) for item in (purchase_order or {}).get('items', [])]
        return {line.id: line for line in lines}

    def receive(self, receipt: GoodsReceipt,
                po_lines: Mapping[str, PurchaseOrderLine],
                structures: Optional[Mapping[str, PackagingStructure]] = None) -> ReceiptResult:
        """
        Validate and submit a goods receipt

        The server recomputes packaging totals; client-side validation only
        keeps bad input from being sent.

        Raises:
            ValidationError: receipt rejected locally
            CommitFailure: API call failed; nothing was received
        """
        errors = self.validator.validate_receipt(receipt, po_lines, structures)
        if errors:
            logger.warning(
                f"Receipt for purchase order {receipt.purchase_order_id} rejected: {'; '.join(errors)}"
            )
            raise ValidationError(errors)

        try:
            response = self.client.post(
                f"/purchase-orders/{receipt.purchase_order_id}/receive",
                receipt.to_payload(),
            )
        except ApiError as e:
            logger.error(f"Receipt failed for purchase order {receipt.purchase_order_id}: {e}")
            raise CommitFailure('Receive goods', receipt.purchase_order_id, e) from e

        response = response or {}
        batches = self._parse_batches(response.get('batches') or [])

        logger.info(
            f"Received {len(receipt.items)} line(s) on purchase order {receipt.purchase_order_id}; "
            f"{len(batches)} batch(es) created"
        )

        return ReceiptResult(
            purchase_order_id=receipt.purchase_order_id,
            batches=tuple(batches),
            receipt_number=response.get('receiptNumber') or receipt.receipt_number,
        )

    def _parse_batches(self, items: List[Dict]) -> List[InventoryBatch]:
        batches = []
        for item in items:
            try:
                batches.append(InventoryBatch.from_dict(item))
            except (ValidationError, TypeError, ValueError) as e:
                logger.warning(f"Ignoring malformed batch {item.get('batchNumber', '?')}: {e}")
        return batches
