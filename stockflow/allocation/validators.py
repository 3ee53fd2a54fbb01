"""
Validation utilities for the allocation engine

Checks a selection before it is committed to the API.
"""
import logging
from typing import List

from .models import AllocationOpportunity, OpportunityStatus, SelectionState
from .selection import allocation_quantity, selected_total

logger = logging.getLogger(__name__)


class AllocationValidator:
    """Validator for allocate and dismiss requests"""

    def __init__(self):
        self.MIN_ALLOCATION_QTY = 1

    # ==================== Allocate Validation ====================

    def validate_allocation_request(self,
                                    opportunity: AllocationOpportunity,
                                    selection: SelectionState) -> List[str]:
        """
        Validate a selection before committing it

        Returns:
            List of error messages (empty if valid)
        """
        errors = []

        # 1. Only pending opportunities can be allocated
        if opportunity.status != OpportunityStatus.PENDING:
            errors.append(
                f"Opportunity {opportunity.id} is already {opportunity.status.value}"
            )
            return errors

        # 2. Selection must be for this opportunity
        if selection.opportunity_id != opportunity.id:
            errors.append(
                f"Selection belongs to opportunity {selection.opportunity_id}, not {opportunity.id}"
            )
            return errors

        # 3. Something must be selected
        if selection.is_empty:
            errors.append("No waiting transactions selected")
            return errors

        # 4. Validate each selected record
        seen = set()
        for line_item_id in selection.selected_demand_ids:
            if line_item_id in seen:
                errors.append(f"Line item {line_item_id} selected more than once")
                continue
            seen.add(line_item_id)

            demand = opportunity.find_demand(line_item_id)
            if demand is None:
                errors.append(f"Line item {line_item_id} is not waiting on this opportunity")
                continue

            qty = allocation_quantity(demand, selection)
            if qty < self.MIN_ALLOCATION_QTY:
                errors.append(
                    f"{demand.transaction_number}: quantity must be at least {self.MIN_ALLOCATION_QTY}"
                )
            elif qty > demand.quantity_needed:
                logger.warning(
                    f"Allocating {qty} to {demand.transaction_number}, "
                    f"{qty - demand.quantity_needed} above the {demand.quantity_needed} needed"
                )

        # 5. Never exceed the pool
        total = selected_total(opportunity, selection)
        if total > opportunity.quantity_remaining:
            errors.append(
                f"Total allocation would be {total} units but only "
                f"{opportunity.quantity_remaining} remain in this opportunity"
            )

        return errors

    # ==================== Dismiss Validation ====================

    def validate_dismiss(self, opportunity: AllocationOpportunity) -> List[str]:
        """Only pending opportunities can be dismissed"""
        if opportunity.status != OpportunityStatus.PENDING:
            return [f"Opportunity {opportunity.id} is already {opportunity.status.value}"]
        return []
