"""
Graphviz DOT diagram generator for form logic graphs.

Converts a block array into Graphviz DOT format for visualization.

Supports multiple modes:
    - SIMPLE: Block flow only (no condition labels)
    - DETAILED: Condition and default labels on logic edges
    - GROUPED: Blocks sharing a groupId drawn as clusters
"""

from enum import Enum
from typing import Any, Dict, List, Sequence, Union

from formlogic.graph import Edge, EdgeKind, build_logic_graph
from formlogic.model import Block, BlockKind, classify
from formlogic.serialization import as_blocks


class DotMode(Enum):
    """Visualization modes for DOT output."""
    SIMPLE = "simple"      # Just block flow
    DETAILED = "detailed"  # Include condition labels
    GROUPED = "grouped"    # Clusters by groupId


NODE_STYLES = {
    BlockKind.INPUT: "shape=box, fillcolor=lightblue",
    BlockKind.LAYOUT: "shape=note, fillcolor=white",
    BlockKind.LOGIC: "shape=diamond, fillcolor=lightyellow",
    BlockKind.HIDDEN: "shape=box, style=\"filled,dashed\", fillcolor=lightgrey",
    BlockKind.UNCLASSIFIED: "shape=box, fillcolor=white",
}

EDGE_STYLES = {
    EdgeKind.SEQUENTIAL: "style=dashed, color=grey",
    EdgeKind.CONDITIONAL: "style=solid",
    EdgeKind.DEFAULT: "style=dotted",
}


def _escape_dot_string(s: str) -> str:
    """Escape special characters for DOT labels."""
    if not s:
        return '""'
    s = s.replace('\\', '\\\\')
    s = s.replace('"', '\\"')
    s = s.replace('\n', '\\n')
    return f'"{s}"'


def _escape_dot_id(identifier: str) -> str:
    """Escape/quote an identifier for DOT."""
    if not identifier or identifier[0].isdigit() or not identifier.replace('_', '').isalnum():
        return _escape_dot_string(identifier)
    return identifier


def _block_label(block: Block) -> str:
    title = block.payload.get("title") or block.payload.get("label")
    if title:
        return f"{title}\n[{block.type}]"
    return f"{block.id}\n[{block.type}]"


def _edge_label(edge: Edge) -> str:
    if edge.kind == EdgeKind.DEFAULT:
        return "default"
    condition = edge.condition
    if condition is None:
        return ""
    label = condition.operator_name
    if condition.has_value:
        label = f"{label} {condition.value}"
    # Shorten for readability
    if len(label) > 40:
        label = label[:37] + "..."
    return label


def generate_dot(
    blocks: Sequence[Union[Block, Dict[str, Any]]],
    mode: DotMode = DotMode.SIMPLE,
) -> str:
    """
    Generate Graphviz DOT format for a form's logic graph.

    Args:
        blocks: Blocks in form order
        mode: Visualization mode (SIMPLE, DETAILED, GROUPED)

    Returns:
        String containing DOT graph definition
    """
    blocks = as_blocks(blocks)
    graph = build_logic_graph(blocks)
    lines: List[str] = []

    # Header
    lines.append("digraph form {")
    lines.append("  rankdir=TB;")
    lines.append("  node [style=filled];")

    # =========================================================================
    # NODES
    # =========================================================================

    for position, block in enumerate(blocks):
        style = NODE_STYLES[classify(block)]
        if position == 0:
            style += ", penwidth=2"
        label = _escape_dot_string(_block_label(block))
        lines.append(f"  {_escape_dot_id(block.id)} [{style}, label={label}];")

    # Dangling targets are drawn so broken jumps stay visible
    for target in sorted({e.target for e in graph.dangling_edges()}):
        label = _escape_dot_string(f"{target}\n(missing)")
        lines.append(f"  {_escape_dot_id(target)} [shape=box, style=dashed, color=red, label={label}];")

    # =========================================================================
    # EDGES
    # =========================================================================

    for edge in graph.all_edges():
        attrs = [EDGE_STYLES[edge.kind]]
        if mode == DotMode.DETAILED:
            label = _edge_label(edge)
            if label:
                attrs.append(f"label={_escape_dot_string(label)}")
        lines.append(f"  {_escape_dot_id(edge.source)} -> {_escape_dot_id(edge.target)} [{', '.join(attrs)}];")

    # =========================================================================
    # GROUPS (GROUPED MODE)
    # =========================================================================

    if mode == DotMode.GROUPED:
        blocks_by_group: Dict[str, List[str]] = {}
        for block in blocks:
            if block.group_id:
                blocks_by_group.setdefault(block.group_id, []).append(block.id)

        for group_id, block_ids in blocks_by_group.items():
            lines.append(f"  subgraph {_escape_dot_string('cluster_' + group_id)} {{")
            lines.append(f"    label={_escape_dot_string(group_id)};")
            lines.append("    style=filled;")
            lines.append("    color=lightgrey;")
            for block_id in block_ids:
                lines.append(f"    {_escape_dot_id(block_id)};")
            lines.append("  }")

    # Footer
    lines.append("}")

    return "\n".join(lines)


def save_dot_file(
    blocks: Sequence[Union[Block, Dict[str, Any]]],
    filename: str,
    mode: DotMode = DotMode.SIMPLE,
) -> None:
    """
    Generate DOT and save to file.

    Args:
        blocks: Blocks to visualize
        filename: Output file path (.dot extension recommended)
        mode: Visualization mode
    """
    dot = generate_dot(blocks, mode=mode)
    with open(filename, 'w') as f:
        f.write(dot)


__all__ = ["DotMode", "generate_dot", "save_dot_file"]
