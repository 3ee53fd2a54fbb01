"""
Create Packaging Structure Modal

Level N can only be enabled once level N-1 is enabled; the live example
shows the equivalence chain of the structure being defined.
"""
import streamlit as st

from ..config import config
from ..errors import CommitFailure, ValidationError
from .converter import describe_equivalence
from .packaging_data import PackagingData
from .validators import define_structure, validate_structure

packaging_data = PackagingData()

LEVEL_DEFAULTS = {
    2: ('Level 2 (Container)', 'Box', 10),
    3: ('Level 3 (Case/Carton)', 'Case', 10),
    4: ('Level 4 (Pallet/Container)', 'Pallet', 20),
}


def close_modal():
    st.session_state.modals['packaging'] = False
    st.rerun()


@st.dialog("Create Packaging Structure", width="large")
def show_packaging_modal(product_id: str, product_name: str):
    """Define a packaging structure for one product"""
    st.caption(product_name)

    structure_name = st.text_input("Structure Name *", placeholder="e.g., Bulk Pallet 20x10, Standard Box")
    primary_supplier = st.text_input("Primary Supplier (Optional)")

    st.markdown("**Base Unit (Level 1) \\***")
    base_unit_name = st.text_input(
        "Unit Name",
        value=config.get_app_setting('DEFAULT_BASE_UNIT_NAME', 'Piece'),
    )

    levels = []
    for number, (title, default_name, default_contains) in LEVEL_DEFAULTS.items():
        # Offer a level only once the one below it is enabled
        if len(levels) != number - 2 or (levels and levels[-1] is None):
            break

        enabled = st.toggle(title, key=f"packaging_level_{number}")
        if not enabled:
            levels.append(None)
            continue

        col1, col2 = st.columns(2)
        with col1:
            name = st.text_input("Name", value=default_name, key=f"packaging_name_{number}")
        with col2:
            contains = st.number_input(
                "Contains (Base Units)" if number == 2 else f"Contains (Level {number - 1})",
                min_value=1,
                value=default_contains,
                step=1,
                key=f"packaging_contains_{number}",
            )
        levels.append({'name': name, 'contains': int(contains)})

    while levels and levels[-1] is None:
        levels.pop()

    errors = validate_structure(structure_name or 'preview', base_unit_name, levels)
    if not errors:
        preview = define_structure(structure_name or 'preview', base_unit_name, levels, product_id=product_id)
        st.info(f"**Structure Example:** `{describe_equivalence(preview)}`")

    col1, col2 = st.columns(2)
    with col1:
        if st.button("Cancel", use_container_width=True):
            close_modal()

    with col2:
        if st.button("Create Structure", type="primary", use_container_width=True):
            try:
                structure = define_structure(
                    structure_name,
                    base_unit_name,
                    levels,
                    product_id=product_id,
                    primary_supplier=primary_supplier or None,
                )
                packaging_data.create_structure(structure)
            except ValidationError as e:
                for error in e.errors:
                    st.error(f"❌ {error}")
            except CommitFailure:
                st.error("Failed to create packaging structure. Please try again.")
            else:
                st.cache_data.clear()
                close_modal()
