"""Graph ingestion, node-weight aggregation, threshold filtering and analytics."""

from __future__ import annotations

import json
import logging
from collections import defaultdict
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

import networkx as nx
import numpy as np
import pandas as pd
import requests
import streamlit as st

from artvis.config import CATEGORY_PALETTE, CONFIG
from artvis.models import Edge, FilteredGraph, GraphData, Node
from artvis.utils import (
    _clean_text,
    _coerce_node_id,
    _coerce_weight,
    category_of,
    profile_time,
)

SELF_LOOP_ONCE = "once"
SELF_LOOP_OMIT = "omit"

_NODE_FIELDS = {"id", "firstname", "lastname", "nationality", "weight", "exhibitions_count"}


# ------------------------------
# Ingestion
# ------------------------------


def resolve_endpoint(value: Any) -> Optional[int]:
    """Resolve an edge endpoint given as a bare id or an embedded node object."""
    if isinstance(value, dict):
        value = value.get("id")
    return _coerce_node_id(value)


def _parse_node(raw: Any) -> Tuple[Optional[Node], Optional[str]]:
    if not isinstance(raw, dict):
        return None, f"Skipping node entry that is not an object: {str(raw)[:80]}"
    node_id = _coerce_node_id(raw.get("id"))
    if node_id is None:
        return None, f"Skipping node with missing or non-integer id: {str(raw.get('id'))[:80]}"
    attributes = {k: v for k, v in raw.items() if k not in _NODE_FIELDS}
    node = Node(
        id=node_id,
        firstname=_clean_text(raw.get("firstname")),
        lastname=_clean_text(raw.get("lastname")),
        nationality=_clean_text(raw.get("nationality")),
        attributes=attributes,
    )
    return node, None


def _parse_edge(raw: Any, known_ids: Set[int]) -> Tuple[Optional[Edge], Optional[str]]:
    if not isinstance(raw, dict):
        return None, f"Skipping edge entry that is not an object: {str(raw)[:80]}"
    source = resolve_endpoint(raw.get("source"))
    target = resolve_endpoint(raw.get("target"))
    if source is None or target is None:
        return None, f"Skipping edge with unresolvable endpoints: {raw.get('source')!r} -> {raw.get('target')!r}"
    weight = _coerce_weight(raw.get("weight"))
    if weight is None or weight < 0:
        return None, f"Skipping edge {source} -> {target} with invalid weight {raw.get('weight')!r}"
    missing = [node_id for node_id in (source, target) if node_id not in known_ids]
    if missing:
        logging.debug("Dropping edge %s -> %s referencing unknown node(s) %s", source, target, missing)
        return None, f"Dropped edge {source} -> {target}: unknown node id(s) {', '.join(map(str, missing))}"
    return Edge(source=source, target=target, weight=weight), None


def parse_collaboration_payload(payload: Any) -> Tuple[GraphData, List[str]]:
    """Build a weighted GraphData from a decoded ``{nodes, links|edges}`` document.

    Invalid entries are dropped and described in the returned error list;
    the node weights are attached before returning.
    """
    errors: List[str] = []
    if not isinstance(payload, dict):
        errors.append("Network data must be a JSON object with 'nodes' and 'links'.")
        return GraphData(), errors

    raw_nodes = payload.get("nodes")
    if raw_nodes is None:
        raw_nodes = []
    raw_edges = payload.get("links")
    if raw_edges is None:
        raw_edges = payload.get("edges")
    if raw_edges is None:
        raw_edges = []
    if not isinstance(raw_nodes, list) or not isinstance(raw_edges, list):
        errors.append("'nodes' and 'links' must both be arrays.")
        return GraphData(), errors

    nodes: List[Node] = []
    seen: Set[int] = set()
    for raw in raw_nodes:
        node, err = _parse_node(raw)
        if err:
            errors.append(err)
            continue
        if node.id in seen:
            errors.append(f"Skipping duplicate node id {node.id}")
            continue
        seen.add(node.id)
        nodes.append(node)

    edges: List[Edge] = []
    for raw in raw_edges:
        edge, err = _parse_edge(raw, seen)
        if err:
            errors.append(err)
            continue
        edges.append(edge)

    for err in errors:
        logging.warning(err)
    graph = attach_node_weights(GraphData(nodes=nodes, edges=edges))
    logging.info("Parsed collaboration graph: %d nodes, %d edges, %d issue(s)", len(nodes), len(edges), len(errors))
    return graph, errors


@st.cache_data(show_spinner=False)
def _fetch_payload(source: str) -> Any:
    # raising keeps a failed read out of the cache
    if source.startswith(("http://", "https://")):
        resp = requests.get(source, timeout=CONFIG["REQUEST_TIMEOUT"])
        resp.raise_for_status()
        return resp.json()
    with open(source, "r", encoding="utf-8") as f:
        return json.load(f)


def clear_graph_cache() -> None:
    _fetch_payload.clear()


@profile_time
def load_graph_data(source: str) -> Tuple[GraphData, List[str]]:
    """Load the collaboration network once; any failure yields an empty graph."""
    try:
        payload = _fetch_payload(source)
    except (OSError, ValueError, requests.RequestException) as exc:
        err = f"Error fetching network data from {source}: {exc}"
        logging.error(err)
        return GraphData(), [err]
    return parse_collaboration_payload(payload)


def load_graph_from_upload(uploaded_file) -> Tuple[GraphData, List[str]]:
    try:
        content = uploaded_file.read().decode("utf-8")
        payload = json.loads(content)
    except (UnicodeDecodeError, ValueError) as exc:
        err = f"Error processing file {uploaded_file.name}: {exc}"
        logging.error(err)
        return GraphData(), [err]
    return parse_collaboration_payload(payload)


# ------------------------------
# Weights & Filtering
# ------------------------------


def compute_node_weights(graph: GraphData, self_loop_policy: str = SELF_LOOP_ONCE) -> Dict[int, float]:
    """Sum incident edge weights per node.

    A self-loop adds its weight to its node once with the default policy and
    not at all with ``SELF_LOOP_OMIT``. Edges touching unknown ids are ignored.
    """
    if self_loop_policy not in (SELF_LOOP_ONCE, SELF_LOOP_OMIT):
        raise ValueError(f"Unknown self-loop policy: {self_loop_policy}")
    weights: Dict[int, float] = {node.id: 0 for node in graph.nodes}
    for edge in graph.edges:
        if edge.source not in weights or edge.target not in weights:
            continue
        if edge.is_self_loop and self_loop_policy == SELF_LOOP_OMIT:
            continue
        weights[edge.source] += edge.weight
        if not edge.is_self_loop:
            weights[edge.target] += edge.weight
    return weights


def attach_node_weights(graph: GraphData, weights: Optional[Dict[int, float]] = None) -> GraphData:
    if weights is None:
        weights = compute_node_weights(graph)
    nodes = [
        Node(
            id=node.id,
            firstname=node.firstname,
            lastname=node.lastname,
            nationality=node.nationality,
            weight=weights.get(node.id, 0),
            attributes=node.attributes,
        )
        for node in graph.nodes
    ]
    return GraphData(nodes=nodes, edges=list(graph.edges))


def filter_graph(graph: GraphData | FilteredGraph, min_weight: float) -> FilteredGraph:
    known_ids = {node.id for node in graph.nodes}
    edges: List[Edge] = []
    for edge in graph.edges:
        if edge.weight < min_weight or edge.is_self_loop:
            continue
        if edge.source not in known_ids or edge.target not in known_ids:
            logging.debug("Filter dropped edge %s -> %s with unknown endpoint", edge.source, edge.target)
            continue
        edges.append(edge)

    connected: Set[int] = set()
    for edge in edges:
        connected.add(edge.source)
        connected.add(edge.target)
    nodes = [node for node in graph.nodes if node.id in connected]
    logging.debug(
        "Filtered graph at min_weight=%s: %d/%d nodes, %d/%d edges",
        min_weight,
        len(nodes),
        len(graph.nodes),
        len(edges),
        len(graph.edges),
    )
    return FilteredGraph(nodes=nodes, edges=edges, min_weight=min_weight)


def build_category_colors(
    nodes: Iterable[Node],
    attribute: str = "nationality",
    palette: Optional[List[str]] = None,
) -> Dict[str, str]:
    """Assign palette colors to the sorted distinct categories of ``nodes``.

    Computed over whatever node set is passed in, normally the filtered view,
    so a category may change color when the threshold changes.
    """
    palette = list(palette or CATEGORY_PALETTE)
    categories = sorted({category_of(node, attribute) for node in nodes})
    return {category: palette[idx % len(palette)] for idx, category in enumerate(categories)}


def build_adjacency(filtered: FilteredGraph) -> Dict[int, List[Node]]:
    by_id = {node.id: node for node in filtered.nodes}
    adjacency: Dict[int, List[Node]] = {node.id: [] for node in filtered.nodes}
    linked: Set[frozenset] = set()
    for edge in filtered.edges:
        if edge.source not in by_id or edge.target not in by_id:
            continue
        pair = frozenset((edge.source, edge.target))
        # reciprocal or repeated edges list the partner once
        if pair in linked:
            continue
        linked.add(pair)
        adjacency[edge.source].append(by_id[edge.target])
        adjacency[edge.target].append(by_id[edge.source])
    return adjacency


def merge_reciprocal_edges(edges: Iterable[Edge]) -> List[Edge]:
    """Collapse edges joining the same pair of nodes into one undirected edge.

    ``(a, b)`` and ``(b, a)`` (and repeats of either) become a single edge whose
    weight is the sum of theirs. The first occurrence fixes the orientation and
    the position in the output.
    """
    merged: Dict[frozenset, Edge] = {}
    for edge in edges:
        pair = frozenset((edge.source, edge.target))
        first = merged.get(pair)
        if first is None:
            merged[pair] = edge
        else:
            merged[pair] = Edge(source=first.source, target=first.target, weight=first.weight + edge.weight)
    return list(merged.values())


def connected_nodes(filtered: FilteredGraph, node_id: int) -> List[Node]:
    return build_adjacency(filtered).get(node_id, [])


# ------------------------------
# Analytics
# ------------------------------


@profile_time
def compute_centrality_measures(filtered: FilteredGraph) -> Dict[int, Dict[str, float]]:
    G = nx.Graph()
    for node in filtered.nodes:
        G.add_node(node.id)
    strength: Dict[int, float] = defaultdict(float)
    for edge in filtered.edges:
        G.add_edge(edge.source, edge.target)
        strength[edge.source] += edge.weight
        strength[edge.target] += edge.weight

    if G.number_of_nodes() == 0:
        return {}
    degree = nx.degree_centrality(G)
    try:
        betweenness = nx.betweenness_centrality(G)
    except nx.NetworkXError as exc:
        logging.error("Betweenness centrality computation failed: %s", exc)
        betweenness = {node: 0.0 for node in G.nodes()}

    return {
        node_id: {
            "degree": degree.get(node_id, 0.0),
            "betweenness": betweenness.get(node_id, 0.0),
            "strength": strength.get(node_id, 0.0),
            "neighbors": G.degree(node_id),
        }
        for node_id in G.nodes()
    }


def summarize_edge_weights(graph: GraphData) -> Dict[str, Optional[float]]:
    values = np.array([edge.weight for edge in graph.edges if not edge.is_self_loop], dtype=float)
    if values.size == 0:
        return {"count": 0, "min": None, "max": None, "mean": None, "median": None, "p90": None}
    return {
        "count": int(values.size),
        "min": float(values.min()),
        "max": float(values.max()),
        "mean": float(values.mean()),
        "median": float(np.median(values)),
        "p90": float(np.percentile(values, 90)),
    }


def graph_to_frames(filtered: FilteredGraph, attribute: str = "nationality") -> Tuple[pd.DataFrame, pd.DataFrame]:
    labels = {node.id: node.display_name for node in filtered.nodes}
    degree: Dict[int, int] = defaultdict(int)
    for edge in filtered.edges:
        degree[edge.source] += 1
        degree[edge.target] += 1

    nodes_df = pd.DataFrame(
        [
            {
                "ID": node.id,
                "Name": node.display_name,
                "Category": category_of(node, attribute),
                "Exhibitions": node.weight,
                "Connections": degree.get(node.id, 0),
            }
            for node in filtered.nodes
        ],
        columns=["ID", "Name", "Category", "Exhibitions", "Connections"],
    )
    edges_df = pd.DataFrame(
        [
            {
                "Source": edge.source,
                "Source Name": labels.get(edge.source, str(edge.source)),
                "Target": edge.target,
                "Target Name": labels.get(edge.target, str(edge.target)),
                "Weight": edge.weight,
            }
            for edge in filtered.edges
        ],
        columns=["Source", "Source Name", "Target", "Target Name", "Weight"],
    )
    return nodes_df, edges_df
