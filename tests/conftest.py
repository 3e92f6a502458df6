import random

import pytest

from artvis.data_processing import attach_node_weights
from artvis.models import Edge, GraphData, Node


@pytest.fixture
def scenario_graph() -> GraphData:
    nodes = [Node(id=1), Node(id=2), Node(id=3)]
    edges = [Edge(1, 2, 5), Edge(2, 3, 2), Edge(1, 1, 9)]
    return GraphData(nodes=nodes, edges=edges)


@pytest.fixture
def weighted_scenario_graph(scenario_graph) -> GraphData:
    return attach_node_weights(scenario_graph)


@pytest.fixture
def random_graph() -> GraphData:
    rng = random.Random(7)
    nationalities = ["AT", "DE", "FR", None, "NL"]
    nodes = [
        Node(id=i, firstname=f"First{i}", lastname=f"Last{i}", nationality=rng.choice(nationalities))
        for i in range(1, 41)
    ]
    edges = []
    for _ in range(120):
        source = rng.randint(1, 40)
        target = source if rng.random() < 0.1 else rng.randint(1, 40)
        edges.append(Edge(source, target, rng.randint(0, 60)))
    return attach_node_weights(GraphData(nodes=nodes, edges=edges))


@pytest.fixture
def collaboration_payload() -> dict:
    return {
        "nodes": [
            {"id": 1, "firstname": "Gustav", "lastname": "Klimt", "nationality": "AT"},
            {"id": 2, "firstname": "Egon", "lastname": "Schiele", "nationality": "AT"},
            {"id": 3, "firstname": "Henri", "lastname": "Matisse", "nationality": "FR", "born": 1869},
        ],
        "links": [
            {"source": 1, "target": 2, "weight": 5},
            {"source": {"id": 2}, "target": {"id": 3, "firstname": "Henri"}, "weight": 2},
            {"source": 1, "target": 1, "weight": 9},
        ],
    }
