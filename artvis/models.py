"""Data models for the collaboration graph."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class Edge:
    source: int
    target: int
    weight: float = 0

    @property
    def is_self_loop(self) -> bool:
        return self.source == self.target


@dataclass(frozen=True)
class Node:
    id: int
    firstname: Optional[str] = None
    lastname: Optional[str] = None
    nationality: Optional[str] = None
    weight: float = 0
    attributes: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @property
    def display_name(self) -> str:
        name = f"{self.firstname or ''} {self.lastname or ''}".strip()
        return name or f"Artist {self.id}"

    @property
    def initials(self) -> str:
        return f"{(self.firstname or '')[:1]}{(self.lastname or '')[:1]}"


@dataclass(frozen=True)
class GraphData:
    nodes: List[Node] = field(default_factory=list)
    edges: List[Edge] = field(default_factory=list)

    @property
    def node_ids(self) -> set:
        return {node.id for node in self.nodes}

    def is_empty(self) -> bool:
        return not self.nodes and not self.edges


@dataclass(frozen=True)
class FilteredGraph:
    """Read-only view of a GraphData at a given minimum edge weight."""

    nodes: List[Node]
    edges: List[Edge]
    min_weight: float

    def as_graph_data(self) -> GraphData:
        return GraphData(nodes=list(self.nodes), edges=list(self.edges))
