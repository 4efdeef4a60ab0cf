"""
Tests for the Logic Flow Analyzer.

Tests verify that the analyzer correctly:
    - Reports dangling references and incomplete conditions as issues
    - Finds blocks unreachable from the entry block
    - Probes each logic block for conditional loops
    - Keeps warnings from affecting the status
"""

import pytest
from formlogic.analyzer import (
    check_references,
    find_conditional_cycles,
    find_unreachable,
    validate_logic_flow,
)
from formlogic.builders import build_conditional_block
from formlogic.config import FormLogicSettings
from formlogic.examples import build_example_form
from formlogic.graph import Edge, EdgeKind, LogicGraph, build_logic_graph
from formlogic.model import Block
from formlogic.registry import BlockRegistry, FormTooLargeError
from formlogic.report import ReportStatus, ValidationReport


def _logic(block_id, trigger, conditions, default=None):
    payload = {"triggerField": trigger, "conditions": conditions}
    if default is not None:
        payload["defaultTarget"] = default
    return Block(id=block_id, type="LOGIC_CONDITIONAL", payload=payload)


def _jump(target, operator="contains", value="yes"):
    return {"operator": operator, "value": value, "targetBlockId": target}


def _cycle_warnings(report):
    return [w for w in report.warnings if "infinite loop" in w]


def test_example_form_is_clean():
    report = validate_logic_flow(build_example_form())
    assert report.status == ReportStatus.VALID
    assert report.issues == []
    assert report.warnings == []
    assert report.counts["total_blocks"] == 9
    assert report.counts["logic_blocks"] == 1
    assert report.counts["conditional_edges"] == 2
    assert report.counts["default_edges"] == 1


def test_accepts_wire_mappings():
    blocks = [
        {"id": "q1", "type": "INPUT_TEXT", "payload": {}},
        {"id": "q2", "type": "INPUT_TEXT"},
    ]
    report = validate_logic_flow(blocks)
    assert report.is_valid
    assert report.counts["sequential_edges"] == 1


class TestReferentialIntegrity:
    """Dangling references and incomplete conditions are issues."""

    def test_unknown_trigger_field(self):
        blocks = [Block(id="q1", type="INPUT_TEXT"), _logic("logic", "ghost", [_jump("q1")])]
        report = validate_logic_flow(blocks)
        assert report.status == ReportStatus.INVALID
        assert "unknown trigger field ghost in block logic" in report.issues

    def test_missing_trigger_field(self):
        blocks = [Block(id="q1", type="INPUT_TEXT"), _logic("logic", None, [_jump("q1")])]
        report = validate_logic_flow(blocks)
        assert "missing trigger field in block logic" in report.issues

    def test_unknown_target(self):
        blocks = [Block(id="q1", type="INPUT_TEXT"), _logic("logic", "q1", [_jump("ghost")])]
        report = validate_logic_flow(blocks)
        assert "unknown target block ghost in condition 1 of block logic" in report.issues
        assert report.counts["dangling_edges"] == 1

    def test_missing_target(self):
        blocks = [
            Block(id="q1", type="INPUT_TEXT"),
            _logic("logic", "q1", [{"operator": "equals", "value": "x"}]),
        ]
        report = validate_logic_flow(blocks)
        assert "missing target block in condition 1 of block logic" in report.issues

    def test_missing_value(self):
        blocks = [
            Block(id="q1", type="INPUT_TEXT"),
            _logic("logic", "q1", [{"operator": "equals", "targetBlockId": "q1"}]),
        ]
        report = validate_logic_flow(blocks)
        assert any(i.startswith("missing value for operator equals") for i in report.issues)

    @pytest.mark.parametrize("operator", ["is_empty", "is_not_empty"])
    def test_empty_checks_need_no_value(self, operator):
        blocks = [
            Block(id="q1", type="INPUT_TEXT"),
            _logic("logic", "q1", [{"operator": operator, "targetBlockId": "q2"}]),
            Block(id="q2", type="INPUT_TEXT"),
        ]
        report = validate_logic_flow(blocks)
        assert report.issues == []

    def test_unknown_operator(self):
        blocks = [
            Block(id="q1", type="INPUT_TEXT"),
            _logic("logic", "q1", [_jump("q1", operator="matches")]),
        ]
        report = validate_logic_flow(blocks)
        assert "unknown operator 'matches' in condition 1 of block logic" in report.issues

    def test_unknown_default_target(self):
        blocks = [Block(id="q1", type="INPUT_TEXT"), _logic("logic", "q1", [_jump("q1")], default="ghost")]
        report = validate_logic_flow(blocks)
        assert "unknown default target ghost in block logic" in report.issues

    def test_no_warnings_from_integrity(self):
        blocks = [Block(id="q1", type="INPUT_TEXT"), _logic("logic", "ghost", [_jump("nowhere")], default="gone")]
        registry = BlockRegistry().register(blocks)
        report = ValidationReport()
        check_references(registry, report)
        assert len(report.issues) == 3
        assert report.warnings == []

    def test_resolved_references_have_no_issues(self):
        blocks = [
            Block(id="q1", type="INPUT_CHECKBOXES"),
            _logic("logic", "q1", [_jump("q2"), _jump("q3", operator="is_not_empty", value=None)], default="q3"),
            Block(id="q2", type="INPUT_TEXT"),
            Block(id="q3", type="INPUT_TEXT"),
        ]
        assert validate_logic_flow(blocks).issues == []

    def test_non_mapping_conditions_are_incomplete(self):
        blocks = [
            Block(id="q1", type="INPUT_TEXT"),
            _logic("logic", "q1", ["jump-to-q2", None]),
            Block(id="q2", type="INPUT_TEXT"),
        ]
        report = validate_logic_flow(blocks)
        assert report.status == ReportStatus.INVALID
        for position in (1, 2):
            assert f"missing operator in condition {position} of block logic" in report.issues
            assert f"missing target block in condition {position} of block logic" in report.issues

    @pytest.mark.parametrize("conditions", [5, "jump", {"operator": "equals", "targetBlockId": "q1"}])
    def test_non_list_conditions_are_malformed(self, conditions):
        blocks = [Block(id="q1", type="INPUT_TEXT"), _logic("logic", "q1", conditions)]
        report = validate_logic_flow(blocks)
        assert report.status == ReportStatus.INVALID
        assert report.issues == ["malformed conditions in block logic"]

    def test_unhashable_references_are_unknown(self):
        blocks = [
            Block(id="q1", type="INPUT_TEXT"),
            _logic("logic", ["q1"], [_jump({"id": "q1"})], default=["q1"]),
        ]
        report = validate_logic_flow(blocks)
        assert report.status == ReportStatus.INVALID
        assert "unknown trigger field ['q1'] in block logic" in report.issues
        assert "unknown target block {'id': 'q1'} in condition 1 of block logic" in report.issues
        assert "unknown default target ['q1'] in block logic" in report.issues
        assert report.counts["conditional_edges"] == 0


class TestReachability:
    """Blocks never visited from the entry block are warnings."""

    def test_sequential_order_reaches_everything(self):
        blocks = [Block(id=f"q{i}", type="INPUT_TEXT") for i in range(5)]
        report = validate_logic_flow(blocks)
        assert report.warnings == []
        assert report.counts["unreachable_blocks"] == 0

    def test_one_warning_per_unreachable_block(self):
        graph = LogicGraph()
        for node in ("entry", "a", "orphan1", "orphan2"):
            graph.add_node(node)
        graph.add_edge(Edge("entry", "a", EdgeKind.CONDITIONAL))
        graph.add_edge(Edge("orphan1", "orphan2", EdgeKind.SEQUENTIAL))
        assert find_unreachable(graph) == ["orphan1", "orphan2"]

    def test_default_edges_are_followed(self):
        graph = LogicGraph()
        for node in ("entry", "end"):
            graph.add_node(node)
        graph.add_edge(Edge("entry", "end", EdgeKind.DEFAULT))
        assert find_unreachable(graph) == []

    def test_dangling_targets_are_not_traversed(self):
        graph = LogicGraph()
        graph.add_node("entry")
        graph.add_node("lost")
        graph.add_edge(Edge("entry", "ghost", EdgeKind.CONDITIONAL))
        assert find_unreachable(graph) == ["lost"]

    def test_entry_never_reported(self):
        graph = LogicGraph()
        graph.add_node("entry")
        assert find_unreachable(graph) == []
        assert find_unreachable(LogicGraph()) == []

    def test_warning_message(self, monkeypatch):
        import formlogic.analyzer as analyzer

        monkeypatch.setattr(analyzer, "find_unreachable", lambda graph: ["q2"])
        blocks = [Block(id="q1", type="INPUT_TEXT"), Block(id="q2", type="INPUT_EMAIL")]
        report = analyzer.validate_logic_flow(blocks)
        assert report.warnings == ["block q2 (INPUT_EMAIL) may be unreachable"]
        assert report.is_valid


class TestConditionalCycles:
    """Each logic block is probed for conditional loops independently."""

    def test_two_block_loop_reported_per_root(self):
        blocks = [
            Block(id="q1", type="INPUT_CHECKBOXES"),
            _logic("L1", "q1", [_jump("L2")]),
            _logic("L2", "q1", [_jump("L1")]),
        ]
        report = validate_logic_flow(blocks)
        warnings = _cycle_warnings(report)
        assert len(warnings) == 2
        assert any("from logic block L1: L1 -> L2 -> L1" in w for w in warnings)
        assert any("from logic block L2: L2 -> L1 -> L2" in w for w in warnings)
        # Advisory only
        assert report.status == ReportStatus.VALID

    def test_self_loop(self):
        blocks = [Block(id="q1", type="INPUT_TEXT"), _logic("L1", "q1", [_jump("L1")])]
        report = validate_logic_flow(blocks)
        assert _cycle_warnings(report) == ["potential infinite loop from logic block L1: L1 -> L1"]

    def test_removing_back_edge_clears_warning(self):
        blocks = [
            Block(id="q1", type="INPUT_CHECKBOXES"),
            _logic("L1", "q1", [_jump("L2")]),
            _logic("L2", "q1", [_jump("q2")]),
            Block(id="q2", type="INPUT_TEXT"),
        ]
        report = validate_logic_flow(blocks)
        assert _cycle_warnings(report) == []
        assert report.counts["cycle_roots"] == 0

    def test_loop_downstream_of_root_names_that_root(self):
        """Visited state resets per root, so every logic block reaching the loop reports it."""
        blocks = [
            Block(id="q1", type="INPUT_TEXT"),
            _logic("L0", "q1", [_jump("L1")]),
            _logic("L1", "q1", [_jump("L2")]),
            _logic("L2", "q1", [_jump("L1")]),
        ]
        graph = build_logic_graph(blocks)
        cycles = find_conditional_cycles(graph, BlockRegistry().register(blocks))
        assert cycles == {
            "L0": ["L1", "L2", "L1"],
            "L1": ["L1", "L2", "L1"],
            "L2": ["L2", "L1", "L2"],
        }

    def test_default_and_sequential_edges_ignored(self):
        blocks = [
            Block(id="q1", type="INPUT_TEXT"),
            _logic("L1", "q1", [_jump("q1")], default="L1"),
        ]
        report = validate_logic_flow(blocks)
        assert _cycle_warnings(report) == []

    def test_shared_target_is_not_a_loop(self):
        blocks = [
            Block(id="q1", type="INPUT_TEXT"),
            _logic("L1", "q1", [_jump("L2", value="a"), _jump("L2", value="b")]),
            _logic("L2", "q1", [_jump("q2")]),
            Block(id="q2", type="INPUT_TEXT"),
        ]
        report = validate_logic_flow(blocks)
        assert _cycle_warnings(report) == []

    def test_long_chain(self):
        """A deep chain of logic blocks does not exhaust the stack."""
        count = 1200
        blocks = [Block(id="q", type="INPUT_TEXT")]
        blocks += [_logic(f"L{i}", "q", [_jump(f"L{i + 1}")]) for i in range(count)]
        blocks.append(Block(id=f"L{count}", type="INPUT_TEXT"))
        cycles = find_conditional_cycles(build_logic_graph(blocks), BlockRegistry().register(blocks))
        assert cycles == {}


class TestReportShape:
    """Duplicates, empty forms and limits."""

    def test_duplicate_ids_are_issues(self):
        blocks = [Block(id="q1", type="INPUT_TEXT"), Block(id="q1", type="INPUT_EMAIL")]
        report = validate_logic_flow(blocks)
        assert report.status == ReportStatus.INVALID
        assert report.issues == ["duplicate block id q1"]

    def test_empty_form(self):
        report = validate_logic_flow([])
        assert report.status == ReportStatus.VALID
        assert report.warnings == ["form has no blocks"]

    def test_size_limit_raises(self):
        blocks = [Block(id=f"q{i}", type="INPUT_TEXT") for i in range(4)]
        with pytest.raises(FormTooLargeError):
            validate_logic_flow(blocks, FormLogicSettings(max_blocks=3))


def test_built_block_round_trips_through_validator():
    logic = build_conditional_block(
        "q_tools",
        [
            {"operator": "contains", "value": "python", "targetBlock": "q_python"},
            {"operator": "is_empty", "targetBlock": "q_feedback"},
        ],
        default_target="q_feedback",
    )
    blocks = [
        Block(id="q_tools", type="INPUT_CHECKBOXES"),
        logic,
        Block(id="q_python", type="INPUT_TEXT"),
        Block(id="q_feedback", type="INPUT_TEXTAREA"),
    ]
    report = validate_logic_flow(blocks)
    assert report.issues == []
    assert report.counts["conditional_edges"] == 2
    assert report.counts["default_edges"] == 1
