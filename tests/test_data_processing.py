import itertools
import json
import random

import pytest
import requests

from artvis import data_processing
from artvis.data_processing import (
    SELF_LOOP_OMIT,
    attach_node_weights,
    build_adjacency,
    clear_graph_cache,
    compute_centrality_measures,
    compute_node_weights,
    connected_nodes,
    filter_graph,
    graph_to_frames,
    load_graph_data,
    load_graph_from_upload,
    merge_reciprocal_edges,
    parse_collaboration_payload,
    resolve_endpoint,
    summarize_edge_weights,
)
from artvis.models import Edge, GraphData, Node

THRESHOLDS = [0, 1, 2, 5, 10, 25, 40, 60, 100]


# ------------------------------
# compute_node_weights
# ------------------------------


def test_node_weights_count_self_loop_once(scenario_graph):
    assert compute_node_weights(scenario_graph) == {1: 14, 2: 7, 3: 2}


def test_node_weights_can_omit_self_loops(scenario_graph):
    assert compute_node_weights(scenario_graph, self_loop_policy=SELF_LOOP_OMIT) == {1: 5, 2: 7, 3: 2}


def test_node_weights_rejects_unknown_policy(scenario_graph):
    with pytest.raises(ValueError):
        compute_node_weights(scenario_graph, self_loop_policy="twice")


def test_node_weights_default_to_zero_for_isolated_nodes():
    graph = GraphData(nodes=[Node(id=1), Node(id=2), Node(id=3)], edges=[Edge(1, 2, 4)])
    assert compute_node_weights(graph) == {1: 4, 2: 4, 3: 0}


def test_node_weights_ignore_edges_to_unknown_nodes():
    graph = GraphData(nodes=[Node(id=1), Node(id=2)], edges=[Edge(1, 2, 3), Edge(1, 99, 50)])
    weights = compute_node_weights(graph)
    assert weights == {1: 3, 2: 3}
    assert 99 not in weights


def test_node_weights_invariant_under_edge_permutation(scenario_graph):
    expected = compute_node_weights(scenario_graph)
    for perm in itertools.permutations(scenario_graph.edges):
        shuffled = GraphData(nodes=scenario_graph.nodes, edges=list(perm))
        assert compute_node_weights(shuffled) == expected


def test_node_weights_invariant_under_shuffle_on_larger_graph(random_graph):
    expected = compute_node_weights(random_graph)
    rng = random.Random(3)
    for _ in range(5):
        edges = list(random_graph.edges)
        rng.shuffle(edges)
        assert compute_node_weights(GraphData(nodes=random_graph.nodes, edges=edges)) == expected


def test_attach_node_weights_does_not_mutate_input(scenario_graph):
    weighted = attach_node_weights(scenario_graph)
    assert [n.weight for n in scenario_graph.nodes] == [0, 0, 0]
    assert [n.weight for n in weighted.nodes] == [14, 7, 2]
    assert weighted.edges == scenario_graph.edges
    assert weighted.edges is not scenario_graph.edges


# ------------------------------
# filter_graph scenarios
# ------------------------------


def test_filter_keeps_heavy_edges_and_their_nodes(weighted_scenario_graph):
    filtered = filter_graph(weighted_scenario_graph, 3)
    assert filtered.edges == [Edge(1, 2, 5)]
    assert [n.id for n in filtered.nodes] == [1, 2]
    assert filtered.min_weight == 3


def test_filter_above_every_weight_is_empty(weighted_scenario_graph):
    filtered = filter_graph(weighted_scenario_graph, 10)
    assert filtered.edges == []
    assert filtered.nodes == []


def test_filter_drops_edges_referencing_unknown_nodes():
    graph = attach_node_weights(
        GraphData(nodes=[Node(id=1), Node(id=2)], edges=[Edge(1, 2, 5), Edge(1, 99, 50), Edge(99, 2, 8)])
    )
    filtered = filter_graph(graph, 0)
    assert filtered.edges == [Edge(1, 2, 5)]
    referenced = {n.id for n in filtered.nodes} | {e.source for e in filtered.edges} | {e.target for e in filtered.edges}
    assert 99 not in referenced


def test_filter_at_zero_keeps_everything_but_self_loops(weighted_scenario_graph):
    filtered = filter_graph(weighted_scenario_graph, 0)
    assert filtered.edges == [Edge(1, 2, 5), Edge(2, 3, 2)]
    assert [n.id for n in filtered.nodes] == [1, 2, 3]


def test_filter_threshold_is_inclusive(weighted_scenario_graph):
    assert filter_graph(weighted_scenario_graph, 5).edges == [Edge(1, 2, 5)]


def test_filter_node_with_only_self_loop_is_dropped():
    graph = attach_node_weights(GraphData(nodes=[Node(id=1), Node(id=2), Node(id=3)], edges=[Edge(1, 2, 3), Edge(3, 3, 40)]))
    filtered = filter_graph(graph, 1)
    assert [n.id for n in filtered.nodes] == [1, 2]


def test_filter_preserves_node_weights_from_full_graph(weighted_scenario_graph):
    filtered = filter_graph(weighted_scenario_graph, 3)
    assert {n.id: n.weight for n in filtered.nodes} == {1: 14, 2: 7}


def test_filter_does_not_mutate_source(weighted_scenario_graph):
    before_nodes = list(weighted_scenario_graph.nodes)
    before_edges = list(weighted_scenario_graph.edges)
    filter_graph(weighted_scenario_graph, 4)
    assert weighted_scenario_graph.nodes == before_nodes
    assert weighted_scenario_graph.edges == before_edges


def test_filter_on_empty_graph():
    filtered = filter_graph(GraphData(), 1)
    assert filtered.nodes == [] and filtered.edges == []


# ------------------------------
# filter_graph properties
# ------------------------------


@pytest.mark.parametrize("threshold", THRESHOLDS)
def test_filtered_edges_meet_threshold_and_are_not_self_loops(random_graph, threshold):
    filtered = filter_graph(random_graph, threshold)
    for edge in filtered.edges:
        assert edge.weight >= threshold
        assert edge.source != edge.target


@pytest.mark.parametrize("threshold", THRESHOLDS)
def test_filtered_nodes_are_exactly_the_edge_endpoints(random_graph, threshold):
    filtered = filter_graph(random_graph, threshold)
    endpoints = {e.source for e in filtered.edges} | {e.target for e in filtered.edges}
    assert {n.id for n in filtered.nodes} == endpoints


@pytest.mark.parametrize("low,high", list(itertools.combinations(THRESHOLDS, 2)))
def test_filter_is_monotone(random_graph, low, high):
    loose = filter_graph(random_graph, low)
    strict = filter_graph(random_graph, high)
    assert set(strict.edges) <= set(loose.edges)
    assert {n.id for n in strict.nodes} <= {n.id for n in loose.nodes}


@pytest.mark.parametrize("threshold", THRESHOLDS)
def test_filter_is_idempotent(random_graph, threshold):
    once = filter_graph(random_graph, threshold)
    twice = filter_graph(once, threshold)
    assert twice == once


def test_filter_accepts_its_own_output(weighted_scenario_graph):
    once = filter_graph(weighted_scenario_graph, 3)
    twice = filter_graph(once, 3)
    assert twice.edges == once.edges
    assert [n.id for n in twice.nodes] == [n.id for n in once.nodes]
    assert filter_graph(once, 10).edges == filter_graph(weighted_scenario_graph, 10).edges


# ------------------------------
# Ingestion
# ------------------------------


def test_resolve_endpoint_accepts_ids_and_embedded_nodes():
    assert resolve_endpoint(4) == 4
    assert resolve_endpoint(4.0) == 4
    assert resolve_endpoint({"id": 7, "firstname": "Max"}) == 7
    assert resolve_endpoint("4") is None
    assert resolve_endpoint(True) is None
    assert resolve_endpoint({"name": "no id"}) is None


def test_parse_payload_normalizes_embedded_endpoints(collaboration_payload):
    graph, errors = parse_collaboration_payload(collaboration_payload)
    assert errors == []
    assert graph.edges == [Edge(1, 2, 5), Edge(2, 3, 2), Edge(1, 1, 9)]
    assert {n.id: n.weight for n in graph.nodes} == {1: 14, 2: 7, 3: 2}
    matisse = graph.nodes[2]
    assert matisse.display_name == "Henri Matisse"
    assert matisse.attributes == {"born": 1869}


def test_parse_payload_accepts_edges_key():
    payload = {"nodes": [{"id": 1}, {"id": 2}], "edges": [{"source": 1, "target": 2, "weight": 3}]}
    graph, errors = parse_collaboration_payload(payload)
    assert errors == []
    assert graph.edges == [Edge(1, 2, 3)]


def test_parse_payload_treats_missing_weight_as_zero():
    payload = {"nodes": [{"id": 1}, {"id": 2}], "links": [{"source": 1, "target": 2}, {"source": 2, "target": 1, "weight": None}]}
    graph, errors = parse_collaboration_payload(payload)
    assert errors == []
    assert [e.weight for e in graph.edges] == [0, 0]


def test_parse_payload_reports_invalid_entries():
    payload = {
        "nodes": [{"id": 1}, {"id": 2}, {"id": 2}, {"id": "x"}, "junk"],
        "links": [
            {"source": 1, "target": 99, "weight": 10},
            {"source": 1, "target": 2, "weight": -1},
            {"source": 1, "target": 2, "weight": "many"},
            {"source": None, "target": 2, "weight": 1},
            {"source": 1, "target": 2, "weight": 4},
        ],
    }
    graph, errors = parse_collaboration_payload(payload)
    assert [n.id for n in graph.nodes] == [1, 2]
    assert graph.edges == [Edge(1, 2, 4)]
    assert len(errors) == 7
    assert any("unknown node id(s) 99" in err for err in errors)
    assert any("duplicate node id 2" in err for err in errors)


@pytest.mark.parametrize("payload", [None, [], "nodes", {"nodes": {}, "links": []}])
def test_parse_payload_rejects_malformed_documents(payload):
    graph, errors = parse_collaboration_payload(payload)
    assert graph.is_empty()
    assert len(errors) == 1


def test_load_graph_data_from_file(tmp_path, collaboration_payload):
    path = tmp_path / "network.json"
    path.write_text(json.dumps(collaboration_payload), encoding="utf-8")
    graph, errors = load_graph_data(str(path))
    assert errors == []
    assert len(graph.nodes) == 3
    assert len(graph.edges) == 3


def test_load_graph_data_missing_file_yields_empty_graph(tmp_path):
    graph, errors = load_graph_data(str(tmp_path / "missing.json"))
    assert graph.is_empty()
    assert len(errors) == 1
    assert "Error fetching network data" in errors[0]


def test_load_graph_data_invalid_json_yields_empty_graph(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    graph, errors = load_graph_data(str(path))
    assert graph.is_empty()
    assert errors


class _FakeResponse:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        return self._payload


def test_load_graph_data_from_url(monkeypatch, collaboration_payload):
    calls = []

    def fake_get(url, timeout):
        calls.append((url, timeout))
        return _FakeResponse(collaboration_payload)

    monkeypatch.setattr(data_processing.requests, "get", fake_get)
    graph, errors = load_graph_data("https://example.org/data/network-ok.json")
    assert errors == []
    assert len(graph.nodes) == 3
    assert calls and calls[0][0] == "https://example.org/data/network-ok.json"


def test_load_graph_data_http_error_yields_empty_graph(monkeypatch):
    monkeypatch.setattr(data_processing.requests, "get", lambda url, timeout: _FakeResponse({}, status_code=404))
    graph, errors = load_graph_data("https://example.org/data/network-missing.json")
    assert graph.is_empty()
    assert "404" in errors[0]


def test_load_graph_data_does_not_cache_failures(monkeypatch, collaboration_payload):
    clear_graph_cache()
    responses = [_FakeResponse({}, status_code=503), _FakeResponse(collaboration_payload)]
    calls = []

    def flaky_get(url, timeout):
        calls.append(url)
        return responses[len(calls) - 1]

    monkeypatch.setattr(data_processing.requests, "get", flaky_get)
    url = "https://example.org/data/network-flaky.json"
    graph, errors = load_graph_data(url)
    assert graph.is_empty()
    assert "503" in errors[0]

    graph, errors = load_graph_data(url)
    assert errors == []
    assert len(graph.nodes) == 3

    # a successful read is served from the cache
    graph, _ = load_graph_data(url)
    assert len(graph.nodes) == 3
    assert len(calls) == 2


class _FakeUpload:
    def __init__(self, name, content: bytes):
        self.name = name
        self._content = content

    def read(self):
        return self._content


def test_load_graph_from_upload(collaboration_payload):
    upload = _FakeUpload("network.json", json.dumps(collaboration_payload).encode("utf-8"))
    graph, errors = load_graph_from_upload(upload)
    assert errors == []
    assert len(graph.edges) == 3


def test_load_graph_from_bad_upload():
    graph, errors = load_graph_from_upload(_FakeUpload("network.json", b"\xff\xfe not json"))
    assert graph.is_empty()
    assert "network.json" in errors[0]


# ------------------------------
# Neighbours & analytics
# ------------------------------


def test_connected_nodes_lists_partners(weighted_scenario_graph):
    filtered = filter_graph(weighted_scenario_graph, 0)
    assert [n.id for n in connected_nodes(filtered, 2)] == [1, 3]
    assert [n.id for n in connected_nodes(filtered, 3)] == [2]
    assert connected_nodes(filtered, 42) == []


def test_connected_nodes_lists_reciprocal_partner_once():
    graph = attach_node_weights(
        GraphData(
            nodes=[Node(id=1), Node(id=2), Node(id=3)],
            edges=[Edge(1, 2, 5), Edge(2, 1, 7), Edge(3, 1, 2), Edge(1, 3, 4)],
        )
    )
    filtered = filter_graph(graph, 1)
    assert len(filtered.edges) == 4
    assert [n.id for n in connected_nodes(filtered, 1)] == [2, 3]
    assert [n.id for n in connected_nodes(filtered, 2)] == [1]


def test_merge_reciprocal_edges_sums_weights():
    edges = [Edge(1, 2, 5), Edge(2, 3, 2), Edge(2, 1, 7), Edge(1, 2, 1)]
    assert merge_reciprocal_edges(edges) == [Edge(1, 2, 13), Edge(2, 3, 2)]
    assert merge_reciprocal_edges([]) == []


def test_build_adjacency_covers_every_filtered_node(random_graph):
    filtered = filter_graph(random_graph, 20)
    adjacency = build_adjacency(filtered)
    assert set(adjacency) == {n.id for n in filtered.nodes}
    assert all(adjacency[n.id] for n in filtered.nodes)


def test_centrality_measures(weighted_scenario_graph):
    centrality = compute_centrality_measures(filter_graph(weighted_scenario_graph, 0))
    assert set(centrality) == {1, 2, 3}
    assert centrality[2]["degree"] == pytest.approx(1.0)
    assert centrality[2]["betweenness"] == pytest.approx(1.0)
    assert centrality[1]["strength"] == 5
    assert centrality[2]["strength"] == 7
    assert centrality[2]["neighbors"] == 2


def test_centrality_measures_empty_view(weighted_scenario_graph):
    assert compute_centrality_measures(filter_graph(weighted_scenario_graph, 50)) == {}


def test_summarize_edge_weights_excludes_self_loops(scenario_graph):
    summary = summarize_edge_weights(scenario_graph)
    assert summary["count"] == 2
    assert summary["min"] == 2
    assert summary["max"] == 5
    assert summary["median"] == pytest.approx(3.5)


def test_summarize_edge_weights_empty_graph():
    assert summarize_edge_weights(GraphData())["count"] == 0


def test_graph_to_frames(collaboration_payload):
    graph, _ = parse_collaboration_payload(collaboration_payload)
    nodes_df, edges_df = graph_to_frames(filter_graph(graph, 1))
    assert list(nodes_df["ID"]) == [1, 2, 3]
    assert list(nodes_df["Category"]) == ["AT", "AT", "FR"]
    assert list(nodes_df["Connections"]) == [1, 2, 1]
    assert list(edges_df["Source Name"]) == ["Gustav Klimt", "Egon Schiele"]
    assert list(edges_df["Weight"]) == [5, 2]


def test_graph_to_frames_empty_view():
    nodes_df, edges_df = graph_to_frames(filter_graph(GraphData(), 1))
    assert nodes_df.empty and edges_df.empty
    assert "Weight" in edges_df.columns
