"""
Correction Tables Page - browse the statutory correction schedules.

Also offers a quick lookup of all four rates for given measurements.
"""

import streamlit as st
import pandas as pd
import plotly.express as px

from kagechi.theme import get_page_config, inject_theme, section_header

st.set_page_config(**get_page_config("補正率表"))
inject_theme()

from kagechi.models import ZoneClassification, AreaClass
from kagechi.correction_tables import (
    DEPTH_PRICE_TABLE, IRREGULAR_PLOT_TABLE, NARROW_FRONTAGE_TABLE, EXCESSIVE_DEPTH_TABLE,
    AREA_CLASS_THRESHOLDS, table_rows, area_class,
    depth_price_rate, irregular_plot_rate, narrow_frontage_rate, excessive_depth_rate,
)
from kagechi.assessment import combine_irregular_rates


def _frame(table) -> pd.DataFrame:
    df = pd.DataFrame(table_rows(table))
    df["below"] = df["below"].map(lambda b: "∞" if b == float("inf") else f"{b:g}")
    df["from"] = df["from"].map(lambda b: f"{b:g}")
    return df.rename(columns={"from": "以上", "below": "未満", "rate": "補正率"})


st.title("📋 補正率表")

zones = list(ZoneClassification)
zone = st.sidebar.selectbox("地区区分", zones, index=zones.index(ZoneClassification.ORDINARY_RESIDENTIAL),
                            format_func=lambda z: z.value)
threshold_a, threshold_b = AREA_CLASS_THRESHOLDS[zone]
st.sidebar.caption(f"地積区分: A < {threshold_a:,}㎡ ≦ B < {threshold_b:,}㎡ ≦ C")

tab_depth, tab_irregular, tab_narrow, tab_excessive, tab_lookup = st.tabs([
    "奥行価格補正率", "不整形地補正率", "間口狭小補正率", "奥行長大補正率", "🔎 計算",
])

with tab_depth:
    section_header("奥行価格補正率", "奥行距離（m）")
    df = _frame(DEPTH_PRICE_TABLE[zone])
    st.dataframe(df, hide_index=True, width="stretch")
    depths = [d / 2 for d in range(0, 241)]
    curve = pd.DataFrame({"奥行距離": depths, "補正率": [depth_price_rate(zone, d) for d in depths]})
    fig = px.line(curve, x="奥行距離", y="補正率", line_shape="hv")
    st.plotly_chart(fig, width="stretch")

with tab_irregular:
    section_header("不整形地補正率", "かげ地割合（%）")
    columns = st.columns(len(AreaClass))
    for col, cls in zip(columns, AreaClass):
        with col:
            st.subheader(f"地積区分 {cls.value}")
            st.dataframe(_frame(IRREGULAR_PLOT_TABLE[zone][cls]), hide_index=True, width="stretch")

with tab_narrow:
    section_header("間口狭小補正率", "間口距離（m）")
    st.dataframe(_frame(NARROW_FRONTAGE_TABLE[zone]), hide_index=True, width="stretch")

with tab_excessive:
    section_header("奥行長大補正率", "奥行距離 ÷ 間口距離")
    st.dataframe(_frame(EXCESSIVE_DEPTH_TABLE[zone]), hide_index=True, width="stretch")

with tab_lookup:
    section_header("補正率の計算")
    c1, c2 = st.columns(2)
    area = c1.number_input("地積（㎡）", min_value=0.0, value=300.0)
    frontage = c1.number_input("間口距離（m）", min_value=0.0, value=10.0)
    kage_chi = c2.number_input("かげ地割合（%）", min_value=0.0, max_value=100.0, value=0.0)
    depth = area / frontage if frontage > 0 else 0.0
    c2.metric("計算上の奥行距離", f"{depth:.2f} m")

    irregular = irregular_plot_rate(zone, area, kage_chi)
    narrow = narrow_frontage_rate(zone, frontage)
    excessive = excessive_depth_rate(zone, depth, frontage)
    st.dataframe(pd.DataFrame([
        {"補正率": "奥行価格補正率", "率": depth_price_rate(zone, depth)},
        {"補正率": f"不整形地補正率（地積区分 {area_class(zone, area).value}）", "率": irregular},
        {"補正率": "間口狭小補正率", "率": narrow},
        {"補正率": "奥行長大補正率", "率": excessive},
        {"補正率": "適用補正率", "率": combine_irregular_rates(irregular, narrow, excessive)},
    ]), hide_index=True, width="stretch")
