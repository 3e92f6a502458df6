"""PyVis network generation and legend helpers."""

from __future__ import annotations

import json
import logging
import math
from typing import Any, Dict, List, Optional

from pyvis.network import Network

from artvis.config import CONFIG, GRAPH_CANVAS_HEIGHT, UNKNOWN_CATEGORY, VIS_FONT_FACE
from artvis.data_processing import build_adjacency, merge_reciprocal_edges
from artvis.models import FilteredGraph, Node
from artvis.utils import (
    _edge_width_from_weight,
    _escape,
    _format_weight,
    _make_edge_color,
    _make_node_color,
    _pick_label_color,
    _serialize_graph_data,
    _truncate_text,
    category_of,
)


def _node_title(node: Node, neighbours: List[Node], attribute: str) -> str:
    lines = [
        node.display_name,
        f"Nationality: {category_of(node, attribute)}",
        f"Exhibitions: {_format_weight(node.weight)}",
        "",
        "Connected to:",
    ]
    if neighbours:
        for other in neighbours:
            lines.append(_truncate_text(f"{other.display_name} ({category_of(other, attribute)})", 90))
    else:
        lines.append("None")
    return "\n".join(lines)


def _node_size(node: Node, size_by_weight: bool) -> float:
    base = CONFIG["NODE_BASE_SIZE"]
    if not size_by_weight:
        return base
    return base + min(20.0, math.sqrt(max(float(node.weight), 0.0)))


def add_node(
    net: Network,
    node: Node,
    color: str,
    neighbours: List[Node],
    show_labels: bool = True,
    size_by_weight: bool = False,
    attribute: str = "nationality",
) -> None:
    label_color = _pick_label_color(color, light=CONFIG["LABEL_COLOR"])
    net.add_node(
        node.id,
        label=node.initials if show_labels else " ",
        title=_node_title(node, neighbours, attribute),
        color=_make_node_color(color, CONFIG["NODE_BORDER_COLOR"], CONFIG["HIGHLIGHT_COLOR"]),
        shape="circle" if show_labels else "dot",
        size=_node_size(node, size_by_weight),
        borderWidth=2,
        borderWidthSelected=3,
        font={"size": 10, "face": VIS_FONT_FACE, "color": label_color},
        category=category_of(node, attribute),
        weight=node.weight,
    )
    logging.debug("Added node: %s (%s) with color %s", node.display_name, node.id, color)


def add_edge(net: Network, source: int, target: int, weight: float, id_to_label: Dict[int, str]) -> None:
    net.add_edge(
        source,
        target,
        width=_edge_width_from_weight(weight),
        color=_make_edge_color(CONFIG["EDGE_COLOR"], CONFIG["HIGHLIGHT_COLOR"], CONFIG["EDGE_OPACITY"]),
        title=f"{id_to_label.get(source, source)} - {id_to_label.get(target, target)} | weight: {_format_weight(weight)}",
        weight=weight,
        smooth=False,
    )


def _physics_options(physics_params: Optional[Dict[str, float]], enable_physics: bool) -> Dict[str, Any]:
    defaults = CONFIG["PHYSICS_DEFAULTS"]
    params = dict(defaults)
    params.update(physics_params or {})
    return {
        "enabled": bool(enable_physics),
        "solver": "forceAtlas2Based",
        "forceAtlas2Based": {
            "gravitationalConstant": float(params["gravity"]),
            "centralGravity": float(params["centralGravity"]),
            "springLength": float(params["springLength"]),
            "springConstant": float(params["springStrength"]),
            "avoidOverlap": float(params["avoidOverlap"]),
        },
        "stabilization": {"enabled": True, "iterations": 200, "updateInterval": 20, "fit": True},
    }


def build_graph(
    filtered: FilteredGraph,
    color_map: Dict[str, str],
    show_labels: bool = True,
    size_by_weight: bool = False,
    enable_physics: bool = True,
    physics_params: Optional[Dict[str, float]] = None,
    attribute: str = "nationality",
) -> Network:
    net = Network(
        height=f"{GRAPH_CANVAS_HEIGHT}px",
        width="100%",
        directed=False,
        notebook=False,
        bgcolor="#FFFFFF",
    )

    id_to_label = {node.id: node.display_name for node in filtered.nodes}
    adjacency = build_adjacency(filtered)
    for node in filtered.nodes:
        color = color_map.get(category_of(node, attribute)) or color_map.get(UNKNOWN_CATEGORY, CONFIG["EDGE_COLOR"])
        add_node(
            net,
            node,
            color,
            adjacency.get(node.id, []),
            show_labels=show_labels,
            size_by_weight=size_by_weight,
            attribute=attribute,
        )

    for edge in merge_reciprocal_edges(filtered.edges):
        add_edge(net, edge.source, edge.target, edge.weight, id_to_label)

    net.options = {
        "nodes": {"font": {"face": VIS_FONT_FACE}},
        "edges": {"selectionWidth": 1, "hoverWidth": 1},
        "physics": _physics_options(physics_params, enable_physics),
        "interaction": {
            "hover": True,
            "hoverConnectedEdges": True,
            "selectConnectedEdges": True,
            "navigationButtons": True,
            "zoomView": True,
            "dragNodes": True,
            "tooltipDelay": 80,
        },
    }
    logging.info("Built network with %d nodes and %d edges", len(net.nodes), len(net.edges))
    return net


def graph_css_block() -> str:
    return """
    <style>
      #mynetwork {
        border: 1px solid #ccc;
        border-radius: 8px;
        box-shadow: 0 4px 8px rgba(0, 0, 0, 0.1);
        background-color: #fff;
      }
      div.vis-tooltip {
        font-family: 'IBM Plex Sans', Arial, sans-serif;
        white-space: pre-line;
        background: #ffffff;
        border: 1px solid #ccc;
        border-radius: 4px;
        box-shadow: 0px 4px 8px rgba(0, 0, 0, 0.1);
        padding: 10px;
      }
    </style>
    """


def render_graph_html(net: Network) -> str:
    html = net.generate_html()
    return html.replace("</head>", graph_css_block() + "</head>", 1)


def create_category_legend(color_map: Dict[str, str], title: str = "Nationality") -> str:
    items = "".join(
        f"<div class='legend-item'><span class='legend-swatch' style='background:{_escape(color)};'></span>"
        f"<span>{_escape(category)}</span></div>"
        for category, color in sorted(color_map.items())
    )
    return (
        "<div class='legend-card'>"
        f"<div class='legend-title'>{_escape(title)}</div>"
        f"<div class='legend-grid'>{items}</div>"
        "</div>"
    )


def convert_graph_to_json(filtered: FilteredGraph) -> str:
    payload = _serialize_graph_data(filtered)
    payload["min_weight"] = filtered.min_weight
    return json.dumps(payload, indent=2, ensure_ascii=False)
