"""
Stock allocation engine

Matches newly received stock against waiting demand for the same product.
"""
from .models import (
    OpportunityStatus,
    WaitingDemand,
    SourcePurchaseOrder,
    AllocationOpportunity,
    Allocation,
    SelectionState,
    AllocationResult,
    DismissResult,
)
from .selection import (
    sort_waiting_demand,
    start_selection,
    allocation_quantity,
    selected_total,
    remaining_pool,
    is_selectable,
    selectable_demand,
    toggle_demand,
    set_allocation_quantity,
    build_allocations,
)
from .validators import AllocationValidator
from .allocation_service import AllocationService
from .opportunity_data import (
    OpportunityData,
    next_opportunity,
    opportunities_to_dataframe,
    demand_to_dataframe,
)

__all__ = [
    'OpportunityStatus',
    'WaitingDemand',
    'SourcePurchaseOrder',
    'AllocationOpportunity',
    'Allocation',
    'SelectionState',
    'AllocationResult',
    'DismissResult',
    'sort_waiting_demand',
    'start_selection',
    'allocation_quantity',
    'selected_total',
    'remaining_pool',
    'is_selectable',
    'selectable_demand',
    'toggle_demand',
    'set_allocation_quantity',
    'build_allocations',
    'AllocationValidator',
    'AllocationService',
    'OpportunityData',
    'next_opportunity',
    'opportunities_to_dataframe',
    'demand_to_dataframe',
]
