"""
Allocation Opportunity Modal
============================
Dialog for distributing newly received stock across waiting transactions.

- Waiting transactions listed oldest first
- Checkboxes disabled once the remaining pool cannot cover a transaction
- After a commit the dialog stays open with actions disabled; Close dismisses it
- A failed commit keeps the selection so it can be resubmitted unchanged
"""
import streamlit as st

from ..errors import CommitFailure, InvalidTransitionError, ValidationError
from ..formatters import format_date, format_number
from .allocation_service import AllocationService
from .models import AllocationOpportunity
from .selection import (
    allocation_quantity,
    is_selectable,
    remaining_pool,
    selected_total,
    set_allocation_quantity,
    start_selection,
    toggle_demand,
)


# Initialize services
allocation_service = AllocationService()


def reset_modal_state():
    """Reset all modal-specific state"""
    st.session_state.allocation_selection = None
    st.session_state.allocation_completed = False
    st.session_state.allocation_result = None


def close_modal():
    reset_modal_state()
    st.session_state.modals['allocation'] = False
    st.session_state.selections['opportunity'] = None
    st.rerun()


def _current_selection(opportunity: AllocationOpportunity):
    selection = st.session_state.get('allocation_selection')
    if selection is None or selection.opportunity_id != opportunity.id:
        selection = start_selection(opportunity)
        st.session_state.allocation_selection = selection
    return selection


@st.dialog("Stock Allocation Opportunity", width="large")
def show_allocation_modal():
    """Allocation modal for the opportunity held in session state"""
    opportunity = st.session_state.selections.get('opportunity')

    if opportunity is None:
        st.error("No opportunity selected")
        if st.button("Close"):
            close_modal()
        return

    if 'allocation_completed' not in st.session_state:
        st.session_state.allocation_completed = False
    if 'allocation_result' not in st.session_state:
        st.session_state.allocation_result = None

    is_completed = st.session_state.allocation_completed
    selection = _current_selection(opportunity)

    # Header
    st.markdown(f"### 📦 {opportunity.product_name or opportunity.product_id}")

    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.metric("Quantity Available", format_number(opportunity.quantity_remaining))
    with col2:
        st.metric("Source PO", opportunity.po_number or "-")
    with col3:
        st.metric("Supplier", opportunity.supplier_name or "-")
    with col4:
        st.metric("Waiting Transactions", len(opportunity.waiting_transactions))

    st.divider()

    # ============================================================
    # WAITING TRANSACTIONS - oldest first
    # ============================================================
    st.markdown("**Select transactions to allocate stock (oldest first):**")

    for demand in opportunity.waiting_transactions:
        selected = selection.is_selected(demand.line_item_id)
        can_select = is_selectable(opportunity, selection, demand)

        col1, col2 = st.columns([3, 1])

        with col1:
            label = (
                f"{demand.transaction_number} - {demand.client_name or 'Unknown client'} - "
                f"Needs {format_number(demand.quantity_needed)} units - "
                f"Created {format_date(demand.created_at)}"
            )
            help_text = None
            if not selected and not can_select:
                help_text = (
                    f"⚠️ Only {format_number(remaining_pool(opportunity, selection))} units left "
                    f"in this opportunity"
                )

            checked = st.checkbox(
                label,
                value=selected,
                key=f"demand_{opportunity.id}_{demand.line_item_id}",
                disabled=is_completed or (not selected and not can_select),
                help=help_text,
            )

            if checked != selected:
                st.session_state.allocation_selection = toggle_demand(
                    opportunity, selection, demand.line_item_id
                )
                st.rerun()

        with col2:
            if selected:
                current_qty = allocation_quantity(demand, selection)
                max_qty = opportunity.quantity_remaining - (selected_total(opportunity, selection) - current_qty)
                new_qty = st.number_input(
                    "Qty",
                    min_value=1,
                    max_value=int(max_qty),
                    value=int(current_qty),
                    step=1,
                    key=f"qty_{opportunity.id}_{demand.line_item_id}",
                    help=f"Max: {format_number(max_qty)} units",
                    disabled=is_completed,
                )
                if new_qty != current_qty:
                    try:
                        st.session_state.allocation_selection = set_allocation_quantity(
                            opportunity, selection, demand.line_item_id, int(new_qty)
                        )
                        st.rerun()
                    except ValidationError as e:
                        st.error(f"❌ {e}")

    # Summary section
    if not selection.is_empty:
        st.divider()
        col1, col2, col3 = st.columns(3)
        with col1:
            st.metric("Transactions Selected", len(selection.selected_demand_ids))
        with col2:
            st.metric("Total Allocating", format_number(selected_total(opportunity, selection)))
        with col3:
            st.metric("Remaining", format_number(remaining_pool(opportunity, selection)))

    # ============================================================
    # ACTION BUTTONS
    # ============================================================
    col1, col2, col3 = st.columns(3)

    with col1:
        count = len(selection.selected_demand_ids)
        allocate_clicked = st.button(
            f"✅ Allocate to {count} Transaction{'s' if count != 1 else ''}",
            type="primary",
            use_container_width=True,
            disabled=selection.is_empty or is_completed,
        )

    with col2:
        dismiss_clicked = st.button(
            "⏭️ Skip for Now",
            use_container_width=True,
            disabled=is_completed,
        )

    with col3:
        if st.button("Close", use_container_width=True):
            close_modal()

    if allocate_clicked:
        try:
            result = allocation_service.allocate(opportunity, selection)
        except (InvalidTransitionError, ValidationError) as e:
            st.error(f"❌ {e}")
        except CommitFailure as e:
            st.error(f"❌ Allocation was not saved: {e.cause or e}")
            st.info("Your selection is kept. Click Allocate again to retry.")
        else:
            st.cache_data.clear()
            st.session_state.allocation_result = (
                f"Allocated {format_number(result.total_allocated)} units to "
                f"{len(result.allocations)} transaction(s). "
                f"{len(result.still_waiting)} transaction(s) still waiting."
            )
            st.session_state.allocation_completed = True
            st.rerun()

    if dismiss_clicked:
        try:
            allocation_service.dismiss(opportunity)
        except (InvalidTransitionError, CommitFailure) as e:
            st.error(f"❌ Could not skip this opportunity: {e}")
        else:
            st.cache_data.clear()
            st.session_state.allocation_result = "Opportunity skipped. Waiting transactions were not changed."
            st.session_state.allocation_completed = True
            st.rerun()

    # ============================================================
    # SHOW COMPLETED RESULT
    # ============================================================
    if st.session_state.allocation_completed and st.session_state.allocation_result:
        with st.status("✅ Done", state="complete", expanded=True):
            st.write(st.session_state.allocation_result)
