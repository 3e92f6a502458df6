"""Logic for the Network, Data, Weights and About tabs."""

from __future__ import annotations

import logging

import pandas as pd
import plotly.express as px
import streamlit as st
import streamlit.components.v1 as components

from artvis.config import CONFIG, GRAPH_CARD_HEIGHT
from artvis.data_processing import (
    build_category_colors,
    compute_centrality_measures,
    filter_graph,
    graph_to_frames,
    summarize_edge_weights,
)
from artvis.ui.sidebar import SidebarState
from artvis.utils import slugify_filename
from artvis.visualizer import (
    build_graph,
    convert_graph_to_json,
    create_category_legend,
    render_graph_html,
)


def render_tabs(state: SidebarState) -> None:
    graph_data = st.session_state.graph_data
    attribute = CONFIG["CATEGORY_ATTRIBUTE"]
    filtered = filter_graph(graph_data, state.min_weight)
    color_map = build_category_colors(filtered.nodes, attribute=attribute)

    tabs = st.tabs(["Collaboration Network", "Data View", "Connection Weights", "About"])

    with tabs[0]:
        st.header("Artist Collaboration Network")
        if graph_data.is_empty():
            st.info("No data available. Check the data source in the sidebar or upload a network JSON file.")
        elif not filtered.nodes:
            st.warning(
                f"No collaborations reach a weight of {state.min_weight}. "
                "Lower the minimum connection weight to see the network."
            )
        else:
            m1, m2, m3 = st.columns(3)
            m1.metric("Artists", len(filtered.nodes), delta=len(filtered.nodes) - len(graph_data.nodes))
            m2.metric("Collaborations", len(filtered.edges), delta=len(filtered.edges) - len(graph_data.edges))
            m3.metric("Nationalities", len(color_map))

            with st.spinner("Generating Network Graph..."):
                try:
                    net = build_graph(
                        filtered,
                        color_map,
                        show_labels=state.show_labels,
                        size_by_weight=state.size_by_weight,
                        enable_physics=state.enable_physics,
                        physics_params=state.physics_params,
                        attribute=attribute,
                    )
                    components.html(render_graph_html(net), height=GRAPH_CARD_HEIGHT, scrolling=False)
                except Exception as exc:
                    logging.error("Graph generation failed: %s", exc)
                    st.error(f"Graph generation failed: {exc}")

            with st.expander("Legend", expanded=True):
                st.markdown(create_category_legend(color_map), unsafe_allow_html=True)
                st.caption(
                    "Colors are assigned over the nationalities visible at the current threshold, "
                    "so a nationality may change color when the slider moves."
                )

    with tabs[1]:
        st.header("Data View")
        if filtered.nodes:
            nodes_df, edges_df = graph_to_frames(filtered, attribute=attribute)
            st.subheader("Artists")
            st.dataframe(nodes_df, use_container_width=True)
            st.subheader("Collaborations")
            st.dataframe(edges_df, use_container_width=True)

            file_stem = slugify_filename(f"collaboration-network-min-{state.min_weight}")
            c1, c2, c3 = st.columns(3)
            c1.download_button(
                "Download Artists as CSV",
                data=nodes_df.to_csv(index=False).encode("utf-8"),
                file_name=f"{file_stem}-nodes.csv",
                mime="text/csv",
            )
            c2.download_button(
                "Download Collaborations as CSV",
                data=edges_df.to_csv(index=False).encode("utf-8"),
                file_name=f"{file_stem}-edges.csv",
                mime="text/csv",
            )
            c3.download_button(
                "Download Filtered Graph as JSON",
                data=convert_graph_to_json(filtered).encode("utf-8"),
                file_name=f"{file_stem}.json",
                mime="application/json",
            )
        else:
            st.info("No data available at the current threshold.")

    with tabs[2]:
        st.header("Connection Weights")
        summary = summarize_edge_weights(graph_data)
        if not summary["count"]:
            st.info("No collaborations loaded.")
        else:
            c1, c2, c3, c4 = st.columns(4)
            c1.metric("Collaborations", summary["count"])
            c2.metric("Median weight", f"{summary['median']:.1f}")
            c3.metric("90th percentile", f"{summary['p90']:.1f}")
            c4.metric("Max weight", f"{summary['max']:.0f}")

            weights_df = pd.DataFrame(
                {"Weight": [edge.weight for edge in graph_data.edges if not edge.is_self_loop]}
            )
            fig = px.histogram(weights_df, x="Weight", nbins=50, title="Distribution of collaboration weights")
            fig.add_vline(x=state.min_weight, line_dash="dash", line_color=CONFIG["HIGHLIGHT_COLOR"])
            fig.update_layout(yaxis_title="Collaborations", bargap=0.05)
            st.plotly_chart(fig, use_container_width=True)

        st.subheader("Centrality at current threshold")
        centrality = compute_centrality_measures(filtered)
        if centrality:
            labels = {node.id: node.display_name for node in filtered.nodes}
            centrality_df = (
                pd.DataFrame.from_dict(centrality, orient="index")
                .reset_index()
                .rename(columns={"index": "ID"})
            )
            centrality_df.insert(1, "Name", centrality_df["ID"].map(labels))
            centrality_df = centrality_df.sort_values("strength", ascending=False)
            st.dataframe(centrality_df, use_container_width=True)
        else:
            st.info("No artists visible at the current threshold.")

    with tabs[3]:
        with st.expander("About", expanded=True):
            st.header("About Artist Collaboration Network")
            st.markdown(
                """
                ### Explore Collaborations Between Artists
                Each node is an artist, each link a pair of artists who exhibited together.
                The link weight counts shared exhibitions; an artist's exhibition total sums
                the weights of all their links, counting solo entries once.

                Use the **Minimum Connection Weight** slider in the sidebar to hide weaker
                collaborations. Artists without any remaining collaboration drop out of the view.
                Hover an artist to highlight their collaborations and list their partners.
                """
            )
