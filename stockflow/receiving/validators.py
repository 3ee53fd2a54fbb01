"""
Validation for goods receipts

Each line is resolved to base units before it is checked against what is
still outstanding on its purchase order line.
"""
import logging
from typing import Dict, List, Mapping, Optional

from ..packaging.converter import PackagingConverter
from ..packaging.models import BREAKDOWN_FIELDS, PackagingStructure
from .models import GoodsReceipt, PurchaseOrderLine, ReceivedItem

logger = logging.getLogger(__name__)


class ReceiptValidator:
    """Validator for goods receipt submissions"""

    def __init__(self):
        self.converter = PackagingConverter()
        self.MAX_STRING_LENGTH = 500

    def resolve_quantity(self, item: ReceivedItem,
                         structures: Mapping[str, PackagingStructure]) -> int:
        """Base units on a receiving line (0 when it cannot be resolved)"""
        if item.packaging is None:
            return item.quantity or 0

        structure = structures.get(item.packaging.packaging_structure_id or '')
        if structure is None:
            return 0
        return self.converter.convert_to_base_units(item.packaging, structure)

    def validate_item(self, index: int, item: ReceivedItem,
                      po_line: Optional[PurchaseOrderLine],
                      structures: Mapping[str, PackagingStructure]) -> List[str]:
        """
        Validate one receiving line

        Returns:
            List of error messages (empty if valid)
        """
        errors = []
        label = f"Item {index + 1}"

        if po_line is None:
            errors.append(f"{label}: not on this purchase order")
            return errors

        label = f"Item {index + 1} ({po_line.product_name or po_line.id})"

        if not item.location or not item.location.strip():
            errors.append(f"{label}: location is required")

        if item.notes and len(item.notes) > self.MAX_STRING_LENGTH:
            errors.append(f"{label}: notes too long (maximum {self.MAX_STRING_LENGTH} characters)")

        if item.packaging is not None and item.quantity is not None:
            errors.append(f"{label}: enter either a quantity or a packaging breakdown, not both")
            return errors

        if item.packaging is None:
            if item.quantity is None:
                errors.append(f"{label}: quantity is required")
                return errors
            if isinstance(item.quantity, bool) or not isinstance(item.quantity, int):
                errors.append(f"{label}: quantity must be a whole number")
                return errors
            if item.quantity < 1:
                errors.append(f"{label}: quantity must be at least 1")
                return errors
        else:
            structure_id = item.packaging.packaging_structure_id
            if not structure_id:
                errors.append(f"{label}: select a packaging structure")
                return errors
            structure = structures.get(structure_id)
            if structure is None:
                errors.append(f"{label}: unknown packaging structure {structure_id}")
                return errors
            if structure.product_id and structure.product_id != po_line.product_id:
                errors.append(f"{label}: packaging structure '{structure.name}' is for another product")

            for field_name in BREAKDOWN_FIELDS:
                count = getattr(item.packaging, field_name)
                if count is not None and count < 0:
                    errors.append(f"{label}: {field_name} cannot be negative")
            if errors:
                return errors

        total = self.resolve_quantity(item, structures)
        if total < 1:
            errors.append(f"{label}: received quantity must be at least 1 base unit")
        elif total > po_line.remaining_quantity:
            errors.append(
                f"{label}: receiving {total} but only {po_line.remaining_quantity} "
                f"remain on the purchase order"
            )

        return errors

    def validate_receipt(self, receipt: GoodsReceipt,
                         po_lines: Mapping[str, PurchaseOrderLine],
                         structures: Optional[Mapping[str, PackagingStructure]] = None) -> List[str]:
        """
        Validate a whole receipt

        Args:
            receipt: Receipt to submit
            po_lines: Purchase order lines keyed by line id
            structures: Packaging structures keyed by id

        Returns:
            List of error messages (empty if valid)
        """
        structures = structures or {}
        errors = []

        if not receipt.items:
            errors.append("No items to receive")
            return errors

        seen: Dict[str, int] = {}
        for index, item in enumerate(receipt.items):
            if item.item_id in seen:
                errors.append(
                    f"Item {index + 1}: purchase order line already added as item {seen[item.item_id] + 1}"
                )
                continue
            seen[item.item_id] = index
            errors.extend(self.validate_item(index, item, po_lines.get(item.item_id), structures))

        return errors
