"""
Logic Graph Builder.

Derives a directed graph from a form's block array:
    - sequential edges between adjacent blocks (fall-through)
    - one conditional edge per logic block condition
    - one default edge per logic block default target

The builder performs no validation. Edges whose target does not
resolve to a block are kept as dangling edges so the integrity
checks can report them.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence

from formlogic.model import Block, Condition, classify, BlockKind

logger = logging.getLogger(__name__)


class EdgeKind(Enum):
    SEQUENTIAL = "sequential"
    CONDITIONAL = "conditional"
    DEFAULT = "default"


@dataclass(frozen=True)
class Edge:
    source: str
    target: str
    kind: EdgeKind
    condition: Optional[Condition] = None


class LogicGraph:
    """
    Adjacency structure over block ids.

    Nodes keep insertion order; the first node is the entry.
    Parallel edges between the same pair are not deduplicated.
    """

    def __init__(self):
        self.nodes: List[str] = []
        self._node_set = set()
        self._outgoing: Dict[str, List[Edge]] = defaultdict(list)

    def add_node(self, node_id: str) -> None:
        if node_id not in self._node_set:
            self._node_set.add(node_id)
            self.nodes.append(node_id)

    def add_edge(self, edge: Edge) -> None:
        self._outgoing[edge.source].append(edge)

    @property
    def entry(self) -> Optional[str]:
        return self.nodes[0] if self.nodes else None

    def has_node(self, node_id: str) -> bool:
        return isinstance(node_id, str) and node_id in self._node_set

    def edges_from(self, node_id: str, kinds: Optional[Iterable[EdgeKind]] = None) -> List[Edge]:
        edges = self._outgoing.get(node_id, [])
        if kinds is None:
            return list(edges)
        kinds = set(kinds)
        return [e for e in edges if e.kind in kinds]

    def successors(self, node_id: str, kinds: Optional[Iterable[EdgeKind]] = None) -> List[str]:
        return [e.target for e in self.edges_from(node_id, kinds)]

    def all_edges(self) -> List[Edge]:
        return [e for node in self.nodes for e in self._outgoing.get(node, [])]

    def dangling_edges(self) -> List[Edge]:
        return [e for e in self.all_edges() if not self.has_node(e.target)]

    def edge_counts(self) -> Dict[str, int]:
        counts = {kind.value: 0 for kind in EdgeKind}
        for edge in self.all_edges():
            counts[edge.kind.value] += 1
        return counts


def build_logic_graph(blocks: Sequence[Block]) -> LogicGraph:
    """
    Build the logic graph for an ordered block array.

    Args:
        blocks: Blocks in form order (first block is the entry)

    Returns:
        LogicGraph with sequential, conditional and default edges
    """
    graph = LogicGraph()
    for block in blocks:
        graph.add_node(block.id)

    for current, following in zip(blocks, blocks[1:]):
        graph.add_edge(Edge(current.id, following.id, EdgeKind.SEQUENTIAL))

    for block in blocks:
        if classify(block) != BlockKind.LOGIC:
            continue
        for condition in block.conditions:
            # Conditions without a usable target id have no edge; integrity reports them
            if not isinstance(condition.target_block_id, str):
                continue
            graph.add_edge(Edge(block.id, condition.target_block_id, EdgeKind.CONDITIONAL, condition))
        default_target = block.default_target
        if isinstance(default_target, str):
            graph.add_edge(Edge(block.id, default_target, EdgeKind.DEFAULT))

    logger.debug("Built logic graph: %d nodes, edges %s", len(graph.nodes), graph.edge_counts())
    return graph
