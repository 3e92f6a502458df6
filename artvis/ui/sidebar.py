"""Sidebar logic and session state initialization."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import streamlit as st

from artvis.config import CONFIG, DEFAULT_MIN_WEIGHT, MIN_WEIGHT_RANGE
from artvis.data_processing import clear_graph_cache, load_graph_data, load_graph_from_upload
from artvis.models import GraphData


@dataclass
class SidebarState:
    min_weight: int
    show_labels: bool
    size_by_weight: bool
    enable_physics: bool
    physics_params: Dict[str, float]


def init_session_state() -> None:
    if "graph_data" not in st.session_state:
        st.session_state.graph_data = GraphData()
    if "load_errors" not in st.session_state:
        st.session_state.load_errors = []
    if "data_source" not in st.session_state:
        st.session_state.data_source = CONFIG["DATA_PATH"]
    if "loaded_signature" not in st.session_state:
        st.session_state.loaded_signature = None
    if "min_weight" not in st.session_state:
        st.session_state.min_weight = DEFAULT_MIN_WEIGHT
    if "show_labels" not in st.session_state:
        st.session_state.show_labels = True
    if "size_by_weight" not in st.session_state:
        st.session_state.size_by_weight = False
    if "enable_physics" not in st.session_state:
        st.session_state.enable_physics = True
    if "physics_params" not in st.session_state:
        st.session_state.physics_params = dict(CONFIG["PHYSICS_DEFAULTS"])


def _load_graph(uploaded_file, source: str) -> Tuple[GraphData, List[str], Tuple[str, ...]]:
    if uploaded_file is not None:
        signature = ("upload", uploaded_file.name, str(uploaded_file.size))
        if st.session_state.loaded_signature == signature:
            return st.session_state.graph_data, st.session_state.load_errors, signature
        graph, errors = load_graph_from_upload(uploaded_file)
        return graph, errors, signature
    signature = ("source", source)
    if st.session_state.loaded_signature == signature:
        return st.session_state.graph_data, st.session_state.load_errors, signature
    graph, errors = load_graph_data(source)
    return graph, errors, signature


def render_sidebar() -> SidebarState:
    with st.sidebar.expander("Data Source", expanded=False):
        st.text_input(
            "Network JSON path or URL",
            key="data_source",
            help="A JSON document with 'nodes' and 'links' arrays.",
        )
        uploaded_file = st.file_uploader(
            "Upload Network JSON",
            type=["json"],
            help="Overrides the path above while a file is attached.",
        )
        if st.button("Reload data"):
            clear_graph_cache()
            st.session_state.loaded_signature = None

    source = st.session_state.data_source.strip() or CONFIG["DATA_PATH"]
    with st.spinner("Loading collaboration network..."):
        graph, errors, signature = _load_graph(uploaded_file, source)
    st.session_state.graph_data = graph
    st.session_state.load_errors = errors
    # a failed source load is attempted again on the next rerun
    failed = signature[0] == "source" and graph.is_empty() and bool(errors)
    st.session_state.loaded_signature = None if failed else signature

    st.sidebar.slider(
        "Minimum Connection Weight",
        min_value=MIN_WEIGHT_RANGE[0],
        max_value=MIN_WEIGHT_RANGE[1],
        step=1,
        key="min_weight",
        help="Only collaborations with at least this many shared exhibitions are drawn.",
    )

    with st.sidebar.expander("Display", expanded=False):
        st.checkbox("Show initials on nodes", key="show_labels")
        st.checkbox("Size nodes by exhibitions", key="size_by_weight")
        st.checkbox("Enable physics", key="enable_physics")

    with st.sidebar.expander("Physics", expanded=False):
        defaults = CONFIG["PHYSICS_DEFAULTS"]
        params = st.session_state.physics_params
        params["springLength"] = st.slider(
            "Link distance",
            min_value=20,
            max_value=300,
            value=int(params.get("springLength", defaults["springLength"])),
            step=10,
        )
        params["gravity"] = st.slider(
            "Repulsion",
            min_value=-500,
            max_value=-10,
            value=int(params.get("gravity", defaults["gravity"])),
            step=10,
            help="More negative values push nodes further apart.",
        )
        params["avoidOverlap"] = st.slider(
            "Overlap avoidance",
            min_value=0.0,
            max_value=1.0,
            value=float(params.get("avoidOverlap", defaults["avoidOverlap"])),
            step=0.05,
        )
        if st.button("Reset physics"):
            st.session_state.physics_params = dict(defaults)
            st.rerun()

    errors: Optional[List[str]] = st.session_state.load_errors
    if errors:
        with st.sidebar.expander(f"Data issues ({len(errors)})", expanded=False):
            for err in errors[:200]:
                st.caption(err)
            if len(errors) > 200:
                st.caption(f"... and {len(errors) - 200} more.")

    return SidebarState(
        min_weight=int(st.session_state.min_weight),
        show_labels=bool(st.session_state.show_labels),
        size_by_weight=bool(st.session_state.size_by_weight),
        enable_physics=bool(st.session_state.enable_physics),
        physics_params=dict(st.session_state.physics_params),
    )
