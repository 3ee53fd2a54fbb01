"""
Allocation Service for committing allocation decisions

Allocate and dismiss are single atomic API calls. Local records are never
updated ahead of the server: the returned result is built only after the
API confirms, and on failure the caller's opportunity and selection are
unchanged and can be resubmitted as they are.
"""
import logging
from typing import Optional

from ..api_client import ApiClient, ApiError
from ..errors import (
    CommitFailure,
    ConstraintViolation,
    InvalidTransitionError,
    ValidationError,
)
from .models import (
    AllocationOpportunity,
    AllocationResult,
    DismissResult,
    OpportunityStatus,
    SelectionState,
)
from .selection import build_allocations, selected_total
from .validators import AllocationValidator

logger = logging.getLogger(__name__)

OPPORTUNITIES_PATH = '/inventory/allocation-opportunities'


class AllocationService:
    """Service for allocate and dismiss commits"""

    def __init__(self, client: Optional[ApiClient] = None):
        self.client = client or ApiClient()
        self.validator = AllocationValidator()

    # ==================== ALLOCATE ====================

    def allocate(self, opportunity: AllocationOpportunity,
                 selection: SelectionState) -> AllocationResult:
        """
        Commit the selected allocations for an opportunity

        Raises:
            InvalidTransitionError: opportunity is not pending
            ConstraintViolation: selection exceeds the remaining pool
            ValidationError: selection is empty or malformed
            CommitFailure: the API call failed; nothing was committed
        """
        if not opportunity.is_pending:
            raise InvalidTransitionError(opportunity.id, opportunity.status.value, 'allocate')

        errors = self.validator.validate_allocation_request(opportunity, selection)
        if errors:
            logger.warning(f"Allocation rejected for opportunity {opportunity.id}: {'; '.join(errors)}")
            total = selected_total(opportunity, selection)
            if total > opportunity.quantity_remaining:
                raise ConstraintViolation(total, opportunity.quantity_remaining)
            raise ValidationError(errors)

        allocations = build_allocations(opportunity, selection)
        payload = {'allocations': [allocation.to_dict() for allocation in allocations]}

        try:
            response = self.client.post(f"{OPPORTUNITIES_PATH}/{opportunity.id}/allocate", payload)
        except ApiError as e:
            logger.error(f"Allocate failed for opportunity {opportunity.id}: {e}")
            raise CommitFailure('Allocate', opportunity.id, e) from e

        total_allocated = sum(allocation.quantity for allocation in allocations)
        updated = opportunity.with_allocated(total_allocated)
        still_waiting = tuple(
            demand for demand in opportunity.waiting_transactions
            if not selection.is_selected(demand.line_item_id)
        )

        logger.info(
            f"Allocated {total_allocated} units of product {opportunity.product_id} "
            f"from opportunity {opportunity.id} to {len(allocations)} line item(s); "
            f"{updated.quantity_remaining} remaining, {len(still_waiting)} still waiting"
        )

        return AllocationResult(
            opportunity=updated,
            allocations=tuple(allocations),
            still_waiting=still_waiting,
            response=response if isinstance(response, dict) else None,
        )

    # ==================== DISMISS ====================

    def dismiss(self, opportunity: AllocationOpportunity) -> DismissResult:
        """
        Dismiss an opportunity without allocating

        Waiting demand and batch stock are untouched; the stock can surface
        again in a later opportunity.

        Raises:
            InvalidTransitionError: opportunity is not pending
            CommitFailure: the API call failed; the opportunity stays pending
        """
        errors = self.validator.validate_dismiss(opportunity)
        if errors:
            raise InvalidTransitionError(opportunity.id, opportunity.status.value, 'dismiss')

        try:
            self.client.post(f"{OPPORTUNITIES_PATH}/{opportunity.id}/dismiss")
        except ApiError as e:
            logger.error(f"Dismiss failed for opportunity {opportunity.id}: {e}")
            raise CommitFailure('Dismiss', opportunity.id, e) from e

        logger.info(
            f"Dismissed opportunity {opportunity.id} "
            f"({opportunity.quantity_remaining} units, {len(opportunity.waiting_transactions)} waiting)"
        )

        return DismissResult(
            opportunity=opportunity.with_status(OpportunityStatus.DISMISSED),
            still_waiting=opportunity.waiting_transactions,
        )
