"""
かげち君 - Main Application

Streamlit front end for the road-price valuation engine: edit a parcel's
vertices, declared area, zone and frontage road, and see the assumed
regular plot, correction rates and assessed value.
"""

import json
import logging

import streamlit as st
import pandas as pd
import plotly.graph_objects as go

from kagechi.theme import get_page_config, inject_theme, section_header, format_area, format_yen, COLORS

# ═══════════════════════════════════════════════════════════════════════════
# PAGE CONFIG
# ═══════════════════════════════════════════════════════════════════════════
st.set_page_config(**get_page_config("土地評価"), initial_sidebar_state="expanded")
inject_theme()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
log = logging.getLogger("app")

# ═══════════════════════════════════════════════════════════════════════════
# IMPORTS
# ═══════════════════════════════════════════════════════════════════════════
from kagechi.models import Point, ZoneClassification, LineType
from kagechi.project import Project, ProjectManager
from kagechi.geometry import edge_infos, centroid
from kagechi.assessment import usage_unit_areas, remaining_area
from kagechi.drawing import straight_line, perpendicular_line, extension_line, parallel_line

FIGURE_KEY = "parcel_figure"
PARCEL_TRACE = 0
EDGE_TRACE = 1


def _sample_project() -> Project:
    project = Project(id="sample", name="新規プロジェクト")
    land = project.add_land(
        "評価対象地",
        [Point(0, 0), Point(120, 0), Point(120, 90), Point(60, 140), Point(0, 100)],
        declared_area=165.0,
    )
    project.set_front_road_from_vertices(land.id, 0, 1, rosenka=300)
    return project


def _point_input(container, label: str, default: Point, key: str) -> Point:
    cx, cy = container.columns(2)
    x = cx.number_input(f"{label} x", value=float(default.x), key=f"{key}_x")
    y = cy.number_input(f"{label} y", value=float(default.y), key=f"{key}_y")
    return Point(x, y)


def _apply_figure_selection(project: Project, land_id: str):
    """Turn clicks on the figure into edits, once per new selection."""
    state = st.session_state.get(FIGURE_KEY)
    points = state["selection"]["points"] if state else []
    signature = json.dumps(points, sort_keys=True, default=str)
    if not points or st.session_state.get("handled_selection") == signature:
        return
    st.session_state.handled_selection = signature

    land = project.get_land(land_id)
    vertices = []
    for p in points:
        clicked = Point(float(p["x"]), float(p["y"]))
        if p.get("curve_number") == EDGE_TRACE and not land.is_roadless:
            edge = project.edge_at(land_id, clicked)
            road = land.front_road
            if edge and road:
                project.set_front_road_from_vertices(land_id, edge[0], edge[1], road.rosenka)
                log.info(f"Front road of {land_id} moved to edge {edge}")
        elif p.get("curve_number") == PARCEL_TRACE:
            index = project.vertex_at(land_id, clicked)
            if index is not None and index not in vertices:
                vertices.append(index)
    if len(vertices) == 2:
        project.set_frontage_indices(land_id, tuple(vertices))


if "project" not in st.session_state:
    st.session_state.project = _sample_project()
if "manager" not in st.session_state:
    st.session_state.manager = ProjectManager()
project: Project = st.session_state.project
manager: ProjectManager = st.session_state.manager

# ═══════════════════════════════════════════════════════════════════════════
# SIDEBAR
# ═══════════════════════════════════════════════════════════════════════════
st.sidebar.title("📐 かげち君")
st.sidebar.markdown("---")

with st.sidebar.expander("📁 プロジェクト", expanded=False):
    saved = manager.list_projects()
    if saved:
        names = {p.id: f"{p.name} ({p.updated_at[:16]})" for p in saved}
        chosen = st.selectbox("保存済み", list(names), format_func=names.get)
        if st.button("開く"):
            st.session_state.project = manager.get_project(chosen)
            st.rerun()
    new_name = st.text_input("新規プロジェクト名", value="")
    if st.button("新規作成") and new_name:
        st.session_state.project = manager.create_project(new_name)
        st.rerun()
    if st.button("💾 保存"):
        manager.save_project(project)
        st.success(f"{manager.path_for(project.id)} に保存しました")

    uploaded = st.file_uploader("JSONを開く", type=["json"])
    if uploaded is not None and st.button("読み込み"):
        try:
            st.session_state.project = Project.from_dict(json.loads(uploaded.getvalue().decode("utf-8")))
            log.info(f"Loaded project from upload {uploaded.name}")
            st.rerun()
        except (json.JSONDecodeError, KeyError, ValueError) as e:
            st.error(f"ファイルの読み込みに失敗しました: {e}")

    st.download_button(
        "⬇️ JSONをダウンロード",
        data=json.dumps(project.to_dict(), indent=2, ensure_ascii=False),
        file_name=f"{project.name}.json",
        mime="application/json",
    )

settings = project.settings
settings.area_unit = st.sidebar.radio("面積単位", ["㎡", "坪"], horizontal=True,
                                      index=0 if settings.area_unit == "㎡" else 1)
with st.sidebar.expander("⚙️ 選択の許容距離"):
    settings.edge_hit_tolerance = st.number_input("辺（描画単位）", min_value=0.0,
                                                  value=float(settings.edge_hit_tolerance))
    settings.vertex_hit_tolerance = st.number_input("頂点（描画単位）", min_value=0.0,
                                                    value=float(settings.vertex_hit_tolerance))
precision = settings.display_precision
unit = settings.area_unit

if not project.lands:
    st.info("土地がありません。プロジェクトを読み込んでください。")
    st.stop()

land_names = {land.id: land.name for land in project.lands}
land_id = st.sidebar.selectbox("評価対象地", list(land_names), format_func=land_names.get)
land = project.get_land(land_id)

_apply_figure_selection(project, land_id)

# ═══════════════════════════════════════════════════════════════════════════
# INPUTS
# ═══════════════════════════════════════════════════════════════════════════
st.title("📐 土地評価")
st.markdown("路線価方式による評価額の計算")

col_inputs, col_vertices = st.columns([1, 1])

# Vertex edits go first so the road below is built from the current outline
with col_vertices:
    section_header("頂点", "描画座標（単位なし）")
    df_vertices = pd.DataFrame([{"x": v.x, "y": v.y} for v in land.vertices])
    edited = st.data_editor(df_vertices, num_rows="dynamic", width="stretch")
    project.set_vertices(land.id, [Point(float(row.x), float(row.y)) for row in edited.dropna().itertuples()])

with col_inputs:
    section_header("入力", "地積・地区区分・正面路線")

    declared = st.number_input("地積（㎡）", min_value=0.0, value=float(land.declared_area or 0.0), step=1.0)
    project.set_declared_area(land.id, declared if declared > 0 else None)

    zones = list(ZoneClassification)
    zone = st.selectbox("地区区分", zones, index=zones.index(land.zone), format_func=lambda z: z.value)
    project.set_zone(land.id, zone)

    roadless = st.checkbox("無道路地", value=land.is_roadless)
    project.set_roadless(land.id, roadless)

    n = len(land.vertices)
    if land.is_roadless:
        st.caption("無道路地のため、辺の正面路線は使用しません。正面路線を自由線で指定してください。")
        line = land.front_road_line
        p1 = _point_input(st, "路線 始点", line.p1 if line else Point(0.0, -50.0), f"road_p1_{land.id}")
        p2 = _point_input(st, "路線 終点", line.p2 if line else Point(100.0, -50.0), f"road_p2_{land.id}")
        rosenka = st.number_input("路線価（千円/㎡）", min_value=0.0, value=float(line.rosenka if line else 0.0),
                                  key=f"line_rosenka_{land.id}")
        if rosenka > 0 and p1 != p2:
            project.set_front_road_line(land.id, p1, p2, rosenka)

        width = st.number_input("通路の幅（m）", min_value=0.0, value=float(land.passage_width or 0.0), step=0.5)
        project.set_passage_width(land.id, width if width > 0 else None)

        c1, c2 = st.columns(2)
        c1.metric("正面路線までの距離", f"{land.distance_to_front_road or 0.0:.{precision}f} m")
        c2.metric("通路の面積", format_area(land.passage_area or 0.0, unit, precision))
    elif n >= 2:
        edges = [(i, (i + 1) % n) for i in range(n)]
        road = land.front_road
        current = edges.index(road.vertex_indices) if road and road.vertex_indices in edges else 0
        edge = st.selectbox("正面路線（辺）", edges, index=current, format_func=lambda e: f"{e[0] + 1} → {e[1] + 1}")
        rosenka = st.number_input("路線価（千円/㎡）", min_value=0.0, value=float(road.rosenka if road else 0.0))
        if rosenka > 0:
            project.set_front_road_from_vertices(land.id, edge[0], edge[1], rosenka)

    if n >= 2:
        use_override = st.checkbox("間口を頂点で指定", value=land.frontage_indices is not None)
        if use_override:
            chosen = land.frontage_indices or (0, 1)
            start = st.number_input("間口 始点", 1, n, value=min(chosen[0] + 1, n))
            end = st.number_input("間口 終点", 1, n, value=min(chosen[1] + 1, n))
            project.set_frontage_indices(land.id, (int(start) - 1, int(end) - 1))
        else:
            project.set_frontage_indices(land.id, None)
        st.caption("図の辺の中点をクリックすると正面路線、頂点を2つ選ぶと間口を指定できます。")

# ═══════════════════════════════════════════════════════════════════════════
# USAGE UNITS / CONSTRUCTION LINES
# ═══════════════════════════════════════════════════════════════════════════
col_units, col_lines = st.columns(2)

with col_units:
    with st.expander("🧩 利用単位"):
        unit_name = st.text_input("名称", value=f"利用単位{len(land.usage_units) + 1}")
        picked = st.multiselect("頂点（順に選択）", list(range(len(land.vertices))), format_func=lambda i: str(i + 1))
        if st.button("利用単位を追加"):
            added = project.add_usage_unit(land.id, unit_name, [land.vertices[i] for i in picked])
            if added is None:
                st.warning("頂点を3つ以上選択してください。")
        for usage_unit in list(land.usage_units):
            c1, c2 = st.columns([4, 1])
            c1.markdown(f"<span style='color:{usage_unit.color}'>■</span> {usage_unit.name}", unsafe_allow_html=True)
            if c2.button("削除", key=f"del_unit_{usage_unit.id}"):
                project.delete_usage_unit(land.id, usage_unit.id)
                st.rerun()

with col_lines:
    with st.expander("📏 補助線"):
        line_type = st.selectbox("種類", list(LineType), format_func=lambda t: t.value)
        n = len(land.vertices)
        if line_type == LineType.STRAIGHT:
            a = _point_input(st, "始点", Point(0.0, 0.0), "line_a")
            b = _point_input(st, "終点", Point(50.0, 50.0), "line_b")
            reference = None
        else:
            ref_edges = [(i, (i + 1) % n) for i in range(n)]
            reference = st.selectbox("基準辺", ref_edges, format_func=lambda e: f"{e[0] + 1} → {e[1] + 1}")
            a = _point_input(st, "始点", Point(0.0, 0.0), "line_start") if line_type == LineType.PARALLEL else None
            b = _point_input(st, "指定点", Point(50.0, 50.0), "line_click")
        if st.button("補助線を追加"):
            try:
                if line_type == LineType.STRAIGHT:
                    points = straight_line(a, b)
                elif reference is None:
                    raise ValueError("基準辺がありません")
                else:
                    edge_start, edge_end = land.vertices[reference[0]], land.vertices[reference[1]]
                    if line_type == LineType.PERPENDICULAR:
                        points = perpendicular_line(edge_start, edge_end, b)
                    elif line_type == LineType.EXTENSION:
                        points = extension_line(edge_start, edge_end, b)
                    else:
                        points = parallel_line(edge_start, edge_end, a, b)
                project.add_drawing_line(line_type, points, (land.id, *reference) if reference else None)
            except ValueError as e:
                st.error(f"補助線を作成できません: {e}")
        for drawn in list(project.drawing_lines):
            c1, c2 = st.columns([4, 1])
            c1.markdown(f"<span style='color:{drawn.color}'>━</span> {drawn.line_type.value}", unsafe_allow_html=True)
            if c2.button("削除", key=f"del_line_{drawn.id}"):
                project.delete_drawing_line(drawn.id)
                st.rerun()

# ═══════════════════════════════════════════════════════════════════════════
# RESULTS
# ═══════════════════════════════════════════════════════════════════════════
result = project.assessments().get(land.id)

st.markdown("---")
col_figure, col_result = st.columns([3, 2])

with col_figure:
    fig = go.Figure()
    xs = [v.x for v in land.vertices]
    ys = [v.y for v in land.vertices]
    # Trace order must match PARCEL_TRACE and EDGE_TRACE
    fig.add_trace(go.Scatter(
        x=xs + xs[:1], y=ys + ys[:1], mode="lines+markers+text", name="評価対象地",
        text=[str(i + 1) for i in range(len(xs))] + [""], textposition="top center",
        textfont=dict(color=COLORS['vertex_label']),
        line=dict(color=COLORS['parcel']), fill="toself", fillcolor=COLORS['parcel_fill'],
    ))
    labels = edge_infos(land.vertices, land.declared_area)
    mids = [land.vertices[e.start_index] for e in labels]
    ends = [land.vertices[e.end_index] for e in labels]
    fig.add_trace(go.Scatter(
        x=[(a.x + b.x) / 2 for a, b in zip(mids, ends)],
        y=[(a.y + b.y) / 2 for a, b in zip(mids, ends)],
        mode="markers+text", name="辺", marker=dict(size=8, color=COLORS['edge_label']),
        text=[f"{e.length:.{precision}f}m" for e in labels], textposition="bottom center",
        textfont=dict(color=COLORS['edge_label']),
    ))
    if result and result.assumed_plot and result.assumed_plot.corners:
        corners = list(result.assumed_plot.corners)
        fig.add_trace(go.Scatter(
            x=[c.x for c in corners + corners[:1]], y=[c.y for c in corners + corners[:1]],
            mode="lines", name="想定整形地", line=dict(color=COLORS['assumed_plot'], dash="dash"),
        ))
    road = land.front_road
    if road:
        fig.add_trace(go.Scatter(
            x=[road.p1.x, road.p2.x], y=[road.p1.y, road.p2.y], mode="lines", name="正面路線",
            line=dict(color=COLORS['front_road'], width=5),
        ))
    for usage_unit in land.usage_units:
        uxs = [v.x for v in usage_unit.vertices]
        uys = [v.y for v in usage_unit.vertices]
        fig.add_trace(go.Scatter(
            x=uxs + uxs[:1], y=uys + uys[:1], mode="lines", name=usage_unit.name,
            line=dict(color=usage_unit.color), fill="toself", opacity=0.4,
        ))
    for drawn in project.drawing_lines:
        fig.add_trace(go.Scatter(
            x=[drawn.p1.x, drawn.p2.x], y=[drawn.p1.y, drawn.p2.y], mode="lines",
            name=drawn.line_type.value, line=dict(color=drawn.color, dash="dot"), showlegend=False,
        ))
    if land.vertices:
        label = centroid(land.vertices)
        fig.add_annotation(x=label.x, y=label.y, text=land.name, showarrow=False)
    fig.update_yaxes(scaleanchor="x", scaleratio=1, autorange="reversed")
    fig.update_layout(height=520, margin=dict(l=10, r=10, t=10, b=10), clickmode="event+select")
    st.plotly_chart(fig, width="stretch", key=FIGURE_KEY, on_select="rerun", selection_mode="points")

with col_result:
    if result is None:
        st.info("頂点を3点以上入力し、地積を設定すると評価結果が表示されます。")
    else:
        section_header("評価結果")
        c1, c2 = st.columns(2)
        c1.metric("1㎡当たりの価額", format_yen(result.price_per_area))
        c2.metric("評価額", format_yen(result.total_value))

        rows = [
            {"項目": "地積", "値": format_area(result.land_area, unit, precision)},
            {"項目": "間口距離", "値": f"{result.frontage:.{precision}f} m"},
            {"項目": "奥行距離", "値": f"{result.depth:.{precision}f} m"},
            {"項目": "計算上の奥行距離", "値": f"{result.calculated_depth:.{precision}f} m"},
            {"項目": "想定整形地", "値": format_area(result.assumed_plot_area, unit, precision)},
            {"項目": "かげ地割合", "値": f"{result.kage_chi_ratio:.1f} %"},
        ]
        if land.is_roadless:
            rows.append({"項目": "正面路線までの距離", "値": f"{land.distance_to_front_road or 0.0:.{precision}f} m"})
            rows.append({"項目": "通路の面積", "値": format_area(land.passage_area or 0.0, unit, precision)})
        st.dataframe(pd.DataFrame(rows), hide_index=True, width="stretch")

        st.dataframe(pd.DataFrame([
            {"補正率": "奥行価格補正率", "率": result.depth_price_rate},
            {"補正率": "不整形地補正率", "率": result.irregular_plot_rate},
            {"補正率": "間口狭小補正率", "率": result.narrow_frontage_rate},
            {"補正率": "奥行長大補正率", "率": result.excessive_depth_rate},
            {"補正率": "適用補正率", "率": result.irregular_rate},
        ]), hide_index=True, width="stretch")

    if land.usage_units:
        section_header("利用単位")
        rows = [{"名称": u.name, "面積": format_area(u.area, unit, precision)} for u in usage_unit_areas(land)]
        rows.append({"名称": "残り", "面積": format_area(remaining_area(land), unit, precision)})
        st.dataframe(pd.DataFrame(rows), hide_index=True, width="stretch")
