"""
Selection rules for distributing an opportunity's pool

Pure functions over AllocationOpportunity and SelectionState. Every
function returns a new SelectionState; nothing is mutated in place.

Rules:
- Demand is offered oldest first
- A record is selectable only while the unselected pool still covers its
  quantity_needed, counting every currently selected record
- A selected record's quantity defaults to quantity_needed and may be
  changed, above quantity_needed too, as long as the total stays within
  the pool
"""
import logging
from dataclasses import replace
from typing import List

from ..errors import ValidationError
from .models import (
    Allocation,
    AllocationOpportunity,
    SelectionState,
    WaitingDemand,
    sort_waiting_demand,
)

logger = logging.getLogger(__name__)

__all__ = [
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
]


def start_selection(opportunity: AllocationOpportunity) -> SelectionState:
    """Empty selection for an opportunity"""
    return SelectionState(opportunity_id=opportunity.id)


def _require_demand(opportunity: AllocationOpportunity, line_item_id: str) -> WaitingDemand:
    demand = opportunity.find_demand(line_item_id)
    if demand is None:
        raise ValidationError(
            f"Line item {line_item_id} is not waiting on opportunity {opportunity.id}"
        )
    return demand


def _require_same_opportunity(opportunity: AllocationOpportunity, selection: SelectionState):
    if selection.opportunity_id != opportunity.id:
        raise ValidationError(
            f"Selection belongs to opportunity {selection.opportunity_id}, not {opportunity.id}"
        )


def allocation_quantity(demand: WaitingDemand, selection: SelectionState) -> int:
    """Quantity to allocate to a demand record: override or quantity_needed"""
    return selection.quantity_overrides.get(demand.line_item_id, demand.quantity_needed)


def selected_total(opportunity: AllocationOpportunity, selection: SelectionState) -> int:
    """Sum of quantities of every currently selected record"""
    total = 0
    for line_item_id in selection.selected_demand_ids:
        demand = opportunity.find_demand(line_item_id)
        if demand is not None:
            total += allocation_quantity(demand, selection)
    return total


def remaining_pool(opportunity: AllocationOpportunity, selection: SelectionState) -> int:
    """Pool left after the current selection"""
    return opportunity.quantity_remaining - selected_total(opportunity, selection)


def is_selectable(opportunity: AllocationOpportunity,
                  selection: SelectionState,
                  demand: WaitingDemand) -> bool:
    """True when the record is unselected and the remaining pool covers it"""
    if selection.is_selected(demand.line_item_id):
        return False
    return remaining_pool(opportunity, selection) >= demand.quantity_needed


def selectable_demand(opportunity: AllocationOpportunity,
                      selection: SelectionState) -> List[WaitingDemand]:
    """Selectable records, oldest first"""
    return [
        demand for demand in sort_waiting_demand(opportunity.waiting_transactions)
        if is_selectable(opportunity, selection, demand)
    ]


def toggle_demand(opportunity: AllocationOpportunity,
                  selection: SelectionState,
                  line_item_id: str) -> SelectionState:
    """
    Select or deselect one demand record

    Deselecting drops any quantity override. Selecting a record the pool
    cannot cover leaves the selection unchanged.
    """
    _require_same_opportunity(opportunity, selection)
    demand = _require_demand(opportunity, line_item_id)

    if selection.is_selected(line_item_id):
        overrides = {
            key: value for key, value in selection.quantity_overrides.items()
            if key != line_item_id
        }
        return replace(
            selection,
            selected_demand_ids=tuple(
                selected for selected in selection.selected_demand_ids if selected != line_item_id
            ),
            quantity_overrides=overrides,
        )

    if not is_selectable(opportunity, selection, demand):
        logger.debug(
            f"Line item {line_item_id} needs {demand.quantity_needed}, "
            f"only {remaining_pool(opportunity, selection)} left in opportunity {opportunity.id}"
        )
        return selection

    return replace(
        selection,
        selected_demand_ids=selection.selected_demand_ids + (line_item_id,),
    )


def set_allocation_quantity(opportunity: AllocationOpportunity,
                            selection: SelectionState,
                            line_item_id: str,
                            quantity: int) -> SelectionState:
    """
    Change the quantity allocated to a selected record

    Raises:
        ValidationError: record not selected, quantity below 1, or the new
            total would exceed the opportunity's remaining quantity
    """
    _require_same_opportunity(opportunity, selection)
    demand = _require_demand(opportunity, line_item_id)

    if not selection.is_selected(line_item_id):
        raise ValidationError(f"Line item {line_item_id} is not selected")

    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise ValidationError(f"Quantity must be a whole number (got {quantity!r})")

    if quantity < 1:
        raise ValidationError(f"Quantity must be at least 1 (got {quantity})")

    others = selected_total(opportunity, selection) - allocation_quantity(demand, selection)
    available = opportunity.quantity_remaining - others
    if quantity > available:
        raise ValidationError(
            f"Cannot allocate {quantity} to {demand.transaction_number}: "
            f"only {available} left in this opportunity"
        )

    overrides = dict(selection.quantity_overrides)
    if quantity == demand.quantity_needed:
        overrides.pop(line_item_id, None)
    else:
        overrides[line_item_id] = quantity

    return replace(selection, quantity_overrides=overrides)


def build_allocations(opportunity: AllocationOpportunity,
                      selection: SelectionState) -> List[Allocation]:
    """Allocations for the selected records, oldest demand first"""
    _require_same_opportunity(opportunity, selection)

    allocations = []
    for demand in sort_waiting_demand(opportunity.waiting_transactions):
        if selection.is_selected(demand.line_item_id):
            allocations.append(Allocation(
                transaction_id=demand.transaction_id,
                line_item_id=demand.line_item_id,
                quantity=allocation_quantity(demand, selection),
            ))
    return allocations
