"""
Logic Flow Analyzer: structural diagnostics for a form's logic graph.

This module runs three checks over a registered block collection:
    - Referential integrity (every reference resolves, conditions complete)
    - Reachability from the entry block
    - Conditional cycles rooted at each logic block

IMPORTANT: This is the analysis layer. It does NOT modify blocks.
It only produces read-only reports.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Any, Dict, List, Optional, Sequence, Union

from formlogic.config import FormLogicSettings
from formlogic.graph import EdgeKind, LogicGraph, build_logic_graph
from formlogic.model import Block
from formlogic.registry import BlockRegistry, DuplicateBlockId
from formlogic.report import ValidationReport
from formlogic.serialization import as_blocks

logger = logging.getLogger(__name__)

CONDITIONAL_ONLY = (EdgeKind.CONDITIONAL,)


# =============================================================================
# 1. REFERENTIAL INTEGRITY
# =============================================================================


def check_references(registry: BlockRegistry, report: ValidationReport) -> None:
    """
    Check that every logic block reference resolves and every condition is complete.

    Every failure here is an issue: a dangling reference or an incomplete
    condition describes a graph that cannot execute.
    """
    for block in registry.logic_blocks():
        trigger = block.trigger_field
        if trigger is None:
            report.add_issue(f"missing trigger field in block {block.id}")
        elif registry.lookup(trigger) is None:
            report.add_issue(f"unknown trigger field {trigger} in block {block.id}")

        if block.malformed_conditions:
            report.add_issue(f"malformed conditions in block {block.id}")

        for position, condition in enumerate(block.conditions, 1):
            where = f"condition {position} of block {block.id}"

            if condition.operator is None:
                if condition.raw_operator is None:
                    report.add_issue(f"missing operator in {where}")
                else:
                    report.add_issue(f"unknown operator {condition.raw_operator!r} in {where}")

            if condition.target_block_id is None:
                report.add_issue(f"missing target block in {where}")
            elif registry.lookup(condition.target_block_id) is None:
                report.add_issue(f"unknown target block {condition.target_block_id} in {where}")

            if condition.missing_value:
                report.add_issue(f"missing value for operator {condition.operator_name} in {where}")

        default_target = block.default_target
        if default_target is not None and registry.lookup(default_target) is None:
            report.add_issue(f"unknown default target {default_target} in block {block.id}")


# =============================================================================
# 2. REACHABILITY
# =============================================================================


def find_unreachable(graph: LogicGraph) -> List[str]:
    """
    Return the ids never visited by a traversal from the entry block.

    All edge kinds are followed. Order follows the graph's node order.
    """
    entry = graph.entry
    if entry is None:
        return []

    visited = {entry}
    queue = deque([entry])
    while queue:
        node = queue.popleft()
        for neighbor in graph.successors(node):
            if graph.has_node(neighbor) and neighbor not in visited:
                visited.add(neighbor)
                queue.append(neighbor)

    return [node for node in graph.nodes if node not in visited and node != entry]


# =============================================================================
# 3. CONDITIONAL CYCLES
# =============================================================================


def _conditional_cycle_from(graph: LogicGraph, root: str) -> Optional[List[str]]:
    """Depth-first walk along conditional edges; return the first looping path."""
    visited = {root}
    path = [root]
    on_path = {root}
    stack = [iter(graph.successors(root, CONDITIONAL_ONLY))]

    while stack:
        neighbor = next(stack[-1], None)
        if neighbor is None:
            stack.pop()
            on_path.discard(path.pop())
            continue
        if not graph.has_node(neighbor):
            continue
        if neighbor in on_path:
            return path[path.index(neighbor):] + [neighbor]
        if neighbor in visited:
            continue
        visited.add(neighbor)
        on_path.add(neighbor)
        path.append(neighbor)
        stack.append(iter(graph.successors(neighbor, CONDITIONAL_ONLY)))

    return None


def find_conditional_cycles(graph: LogicGraph, registry: BlockRegistry) -> Dict[str, List[str]]:
    """
    Probe each logic block for a conditional loop.

    Each logic block is an independent root with a fresh visited set, so a
    loop reachable from several logic blocks is reported once per root.
    Sequential and default edges are not followed.

    Returns:
        Mapping of root logic block id -> looping path
    """
    cycles: Dict[str, List[str]] = {}
    for block in registry.logic_blocks():
        cycle = _conditional_cycle_from(graph, block.id)
        if cycle:
            cycles[block.id] = cycle
    return cycles


# =============================================================================
# ENTRY POINT
# =============================================================================


def validate_logic_flow(
    blocks: Sequence[Union[Block, Dict[str, Any]]],
    settings: Optional[FormLogicSettings] = None,
) -> ValidationReport:
    """
    Validate the logic graph of a form.

    Args:
        blocks: Blocks in form order, as Block objects or wire mappings
        settings: Size limits (defaults to FormLogicSettings())

    Returns:
        ValidationReport with integrity issues, and reachability and
        cycle warnings

    Raises:
        BlockFormatError: a mapping lacks ``id`` or ``type``
        FormTooLargeError: more blocks than settings.max_blocks
    """
    blocks = as_blocks(blocks)
    report = ValidationReport()
    registry = BlockRegistry(settings)

    try:
        registry.register(blocks)
    except DuplicateBlockId as e:
        for block_id in e.block_ids:
            report.add_issue(f"duplicate block id {block_id}")
        report.counts = {"total_blocks": len(blocks)}
        return report

    if not blocks:
        report.add_warning("form has no blocks")
        report.counts = {"total_blocks": 0}
        return report

    graph = build_logic_graph(registry.blocks)

    check_references(registry, report)

    unreachable = find_unreachable(graph)
    for block_id in unreachable:
        block = registry.lookup(block_id)
        report.add_warning(f"block {block_id} ({block.type}) may be unreachable")

    cycles = find_conditional_cycles(graph, registry)
    for root, path in cycles.items():
        report.add_warning(
            f"potential infinite loop from logic block {root}: {' -> '.join(path)}"
        )

    if unreachable:
        report.add_recommendation("Route to unreachable blocks from a logic block, or remove them")
    if cycles:
        report.add_recommendation("Give looping logic blocks a condition or default target that exits the loop")

    kind_counts = registry.kind_counts()
    edge_counts = graph.edge_counts()
    report.counts = {
        "total_blocks": len(registry),
        "input_blocks": kind_counts["input"],
        "layout_blocks": kind_counts["layout"],
        "logic_blocks": kind_counts["logic"],
        "hidden_blocks": kind_counts["hidden"],
        "unclassified_blocks": kind_counts["unclassified"],
        "sequential_edges": edge_counts["sequential"],
        "conditional_edges": edge_counts["conditional"],
        "default_edges": edge_counts["default"],
        "dangling_edges": len(graph.dangling_edges()),
        "unreachable_blocks": len(unreachable),
        "cycle_roots": len(cycles),
    }

    logger.debug(
        "Validated %d blocks: %s, %d issues, %d warnings",
        len(registry), report.status.value, len(report.issues), len(report.warnings),
    )
    return report
