"""
Receive Goods Modal

Each line is received either as a flat quantity or as a packaging
breakdown; switching mode clears the other value. Totals are shown in
base units before submitting.
"""
from datetime import date

import streamlit as st

from ..config import config
from ..errors import CommitFailure, ValidationError
from ..formatters import format_number
from ..packaging.converter import PackagingConverter, describe_breakdown, pluralize
from ..packaging.models import PackagingBreakdown
from ..packaging.packaging_data import PackagingData
from .models import GoodsReceipt, ReceivedItem
from .receiving_service import ReceivingService

receiving_service = ReceivingService()
packaging_data = PackagingData()
converter = PackagingConverter()


def reset_modal_state():
    st.session_state.receiving_items = {}
    st.session_state.receiving_result = None


def close_modal():
    reset_modal_state()
    st.session_state.modals['receive'] = False
    st.session_state.selections['purchase_order'] = None
    st.rerun()


def _packaging_inputs(line_id: str, item: ReceivedItem, structures) -> ReceivedItem:
    """Structure picker and level counts for one line"""
    options = {structure.id: structure for structure in structures}
    current_id = item.packaging.packaging_structure_id if item.packaging else None

    structure_id = st.selectbox(
        "Packaging structure",
        options=[''] + list(options),
        index=([''] + list(options)).index(current_id) if current_id in options else 0,
        format_func=lambda key: options[key].name if key else "Select a packaging structure...",
        key=f"structure_{line_id}",
    )
    if not structure_id:
        return item.use_packaging('')

    structure = options[structure_id]
    counts = {}
    fields = converter.breakdown_fields(structure)
    columns = st.columns(len(fields))
    for column, field_name, current in zip(columns, fields, reversed(structure.present_levels())):
        with column:
            counts[field_name] = int(st.number_input(
                pluralize(current.name, 2),
                min_value=0,
                value=item.packaging.count_for(field_name) if item.packaging else 0,
                step=1,
                key=f"{field_name}_{line_id}",
            ))

    breakdown = PackagingBreakdown(packaging_structure_id=structure_id, **counts)
    st.caption(describe_breakdown(breakdown, structure))
    return ReceivedItem(
        item_id=item.item_id,
        location=item.location,
        packaging=breakdown,
        expiry_date=item.expiry_date,
        lot_number=item.lot_number,
        notes=item.notes,
    )


@st.dialog("Receive Goods", width="large")
def show_receive_modal(purchase_order_id: str):
    """Receive lines of one purchase order"""
    if 'receiving_items' not in st.session_state:
        reset_modal_state()

    po_lines = receiving_service.get_purchase_order_lines(purchase_order_id)
    if not po_lines:
        st.error("Purchase order not found or has no lines")
        if st.button("Close"):
            close_modal()
        return

    col1, col2, col3 = st.columns(3)
    with col1:
        receipt_number = st.text_input("Receipt Number (Optional)", placeholder="Auto-generated if empty")
    with col2:
        received_by = st.text_input("Received By (Optional)")
    with col3:
        received_date = st.date_input("Received Date", value=date.today())

    items = st.session_state.receiving_items
    structures_by_id = {}

    st.markdown("**Available Items to Receive**")
    for line in po_lines.values():
        added = line.id in items
        st.write(
            f"**{line.product_name}** - SKU: {line.sku} | Ordered: {format_number(line.ordered_quantity)} | "
            f"Received: {format_number(line.received_quantity)} | Remaining: {format_number(line.remaining_quantity)}"
        )
        include = st.checkbox(
            "Receive this item",
            value=added,
            key=f"include_{line.id}",
            disabled=line.remaining_quantity <= 0,
        )
        if not include:
            items.pop(line.id, None)
            continue

        item = items.get(line.id) or ReceivedItem(item_id=line.id)
        use_packaging = st.toggle("Use packaging breakdown", value=item.uses_packaging, key=f"pkg_{line.id}")

        if use_packaging:
            item = item.use_packaging()
            structures = packaging_data.get_structures(line.product_id)
            structures_by_id.update({structure.id: structure for structure in structures})
            item = _packaging_inputs(line.id, item, structures)
            if config.is_feature_enabled('packaging') and st.button(
                "➕ New packaging structure", key=f"new_structure_{line.id}"
            ):
                st.session_state.modals['packaging'] = True
                st.session_state.selections['packaging_product'] = (line.product_id, line.product_name)
                st.rerun()
        else:
            quantity = st.number_input(
                "Quantity Received *",
                min_value=0,
                max_value=line.remaining_quantity,
                value=item.quantity or 0,
                step=1,
                key=f"quantity_{line.id}",
            )
            item = item.use_flat_quantity(int(quantity) or None)

        col1, col2, col3 = st.columns(3)
        with col1:
            location = st.text_input("Location *", value=item.location, key=f"location_{line.id}")
        with col2:
            expiry = st.date_input("Expiry Date", value=None, key=f"expiry_{line.id}")
        with col3:
            lot_number = st.text_input("Lot Number", value=item.lot_number or '', key=f"lot_{line.id}")

        items[line.id] = ReceivedItem(
            item_id=item.item_id,
            location=location,
            quantity=item.quantity,
            packaging=item.packaging,
            expiry_date=expiry.isoformat() if expiry else None,
            lot_number=lot_number or None,
            notes=item.notes,
        )
        st.divider()

    notes = st.text_area("Notes (optional)")

    col1, col2 = st.columns(2)
    with col1:
        if st.button("Cancel", use_container_width=True):
            close_modal()

    with col2:
        if st.button("📥 Receive Goods", type="primary", use_container_width=True, disabled=not items):
            receipt = GoodsReceipt(
                purchase_order_id=purchase_order_id,
                items=tuple(items.values()),
                receipt_number=receipt_number or None,
                received_by=received_by or None,
                received_date=received_date.isoformat() if received_date else None,
                notes=notes or None,
            )
            try:
                result = receiving_service.receive(receipt, po_lines, structures_by_id)
            except ValidationError as e:
                for error in e.errors:
                    st.error(f"❌ {error}")
            except CommitFailure as e:
                st.error(f"❌ Goods were not received: {e.cause or e}")
            else:
                st.cache_data.clear()
                st.success(
                    f"✅ Received {format_number(result.total_received)} units into "
                    f"{len(result.batches)} batch(es)"
                )
                for batch in result.batches:
                    st.write(f"📦 {batch.batch_number} - {format_number(batch.original_quantity)} @ {batch.location or '-'}")
                st.session_state.receiving_items = {}
