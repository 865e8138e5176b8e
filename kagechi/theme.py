"""
Shared theme, colours and display formatting for the Streamlit pages.
"""

from typing import Optional

# Overlay palette for the parcel figure
COLORS = {
    'parcel': '#2563eb',         # traced boundary
    'parcel_fill': 'rgba(37, 99, 235, 0.15)',
    'assumed_plot': '#dc2626',   # 想定整形地
    'front_road': '#d97706',
    'vertex_label': '#1e293b',
    'edge_label': '#64748b',
}

# 利用単位 colours, assigned in order
USAGE_UNIT_COLORS = [
    '#3B82F6',  # blue
    '#10B981',  # green
    '#F59E0B',  # amber
    '#EF4444',  # red
    '#8B5CF6',  # violet
    '#EC4899',  # pink
]

# 1坪 = 400/121 ㎡
SQM_PER_TSUBO = 400 / 121

SHARED_CSS = """
<style>
    #MainMenu, header, footer, .stDeployButton {
        visibility: hidden;
        display: none;
    }

    .block-container {
        padding: 1.5rem 2rem;
        max-width: 1200px;
    }

    h1 {
        font-weight: 600;
        color: #1e293b;
    }

    [data-testid="stMetricValue"] {
        font-weight: 600;
        font-variant-numeric: tabular-nums;
    }
</style>
"""


def format_area(area_m2: float, unit: str = "㎡", precision: int = 2) -> str:
    """Format an area in ㎡ or 坪."""
    if unit == "坪":
        return f"{area_m2 / SQM_PER_TSUBO:,.{precision}f} 坪"
    return f"{area_m2:,.{precision}f} ㎡"


def format_yen(amount: float) -> str:
    """Round to whole yen with thousands separators."""
    return f"{round(amount):,} 円"


def get_page_config(title: str):
    """Get consistent page configuration."""
    return {
        'page_title': f"{title} | かげち君",
        'page_icon': "📐",
        'layout': "wide",
    }


def inject_theme():
    """Inject shared CSS into the page."""
    import streamlit as st
    st.markdown(SHARED_CSS, unsafe_allow_html=True)


def section_header(title: str, description: Optional[str] = None):
    """Render a consistent section header."""
    import streamlit as st
    st.header(title)
    if description:
        st.caption(description)
