"""
Opportunity Data Repository - pending allocation opportunities
"""
import logging
from typing import List, Optional, Sequence

import pandas as pd

from ..api_client import ApiClient, ApiError
from ..errors import ValidationError
from .models import AllocationOpportunity, SelectionState
from .selection import allocation_quantity, is_selectable

logger = logging.getLogger(__name__)


class OpportunityData:
    """Repository for allocation opportunity access"""

    def __init__(self, client: Optional[ApiClient] = None):
        self.client = client or ApiClient()

    def get_opportunities(self) -> List[AllocationOpportunity]:
        """
        Pending opportunities, waiting demand sorted oldest first

        Records the API sends in an inconsistent state are skipped and logged.
        """
        try:
            payload = self.client.get('/inventory/allocation-opportunities')
        except ApiError as e:
            logger.error(f"Error loading allocation opportunities: {e}")
            return []

        opportunities = []
        for item in payload or []:
            try:
                opportunity = AllocationOpportunity.from_dict(item)
            except (ValidationError, KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed opportunity {item.get('id', '?')}: {e}")
                continue

            if opportunity.is_pending:
                opportunities.append(opportunity)

        return opportunities


def next_opportunity(opportunities: Sequence[AllocationOpportunity],
                     current_id: Optional[str]) -> Optional[AllocationOpportunity]:
    """First pending opportunity other than current_id"""
    for opportunity in opportunities:
        if opportunity.id != current_id and opportunity.is_pending:
            return opportunity
    return None


def opportunities_to_dataframe(opportunities: Sequence[AllocationOpportunity]) -> pd.DataFrame:
    """Overview table, one row per opportunity"""
    columns = [
        'opportunity_id', 'product_name', 'po_number', 'supplier',
        'quantity_remaining', 'waiting_count', 'waiting_quantity', 'status',
    ]
    rows = [
        {
            'opportunity_id': opportunity.id,
            'product_name': opportunity.product_name,
            'po_number': opportunity.po_number,
            'supplier': opportunity.supplier_name,
            'quantity_remaining': opportunity.quantity_remaining,
            'waiting_count': len(opportunity.waiting_transactions),
            'waiting_quantity': sum(d.quantity_needed for d in opportunity.waiting_transactions),
            'status': opportunity.status.value,
        }
        for opportunity in opportunities
    ]
    return pd.DataFrame(rows, columns=columns)


def demand_to_dataframe(opportunity: AllocationOpportunity,
                        selection: SelectionState) -> pd.DataFrame:
    """Waiting demand table for one opportunity, oldest first"""
    columns = [
        'line_item_id', 'transaction_number', 'client_name', 'quantity_needed',
        'created_at', 'selected', 'selectable', 'allocation_quantity',
    ]
    rows = []
    for demand in opportunity.waiting_transactions:
        selected = selection.is_selected(demand.line_item_id)
        rows.append({
            'line_item_id': demand.line_item_id,
            'transaction_number': demand.transaction_number,
            'client_name': demand.client_name,
            'quantity_needed': demand.quantity_needed,
            'created_at': demand.created_at,
            'selected': selected,
            'selectable': is_selectable(opportunity, selection, demand),
            'allocation_quantity': allocation_quantity(demand, selection) if selected else 0,
        })
    return pd.DataFrame(rows, columns=columns)
