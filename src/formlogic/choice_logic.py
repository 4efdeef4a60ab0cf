"""
Operator compatibility checks for choice-question triggers.

A condition on a checkbox (or multi-select multiple choice) question sees a
list of selected values. Equality operators compare the whole answer, so
``equals "A"`` stops matching as soon as a respondent picks "A" and anything
else. ``contains`` is the operator family that works for every cardinality.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Any, Dict, List, Optional, Sequence, Union

from formlogic.model import Block, Operator
from formlogic.report import ValidationReport
from formlogic.serialization import as_blocks

logger = logging.getLogger(__name__)

MULTIPLE_CHOICE = "INPUT_MULTIPLE_CHOICE"
CHECKBOXES = "INPUT_CHECKBOXES"
MULTIPLE_CHOICE_FAMILY = (MULTIPLE_CHOICE, CHECKBOXES)


def _trigger_type(trigger: Block) -> str:
    # Same casing policy as classify()
    return (trigger.type or "").upper()


def _max_selections(trigger: Block) -> Optional[float]:
    """Declared selection limit; fractional limits are kept as given."""
    raw = trigger.payload.get("maxSelections")
    if raw is None or isinstance(raw, bool):
        return None
    try:
        number = float(raw)
    except (TypeError, ValueError):
        return None
    return int(number) if number.is_integer() else number


def allows_multiple_selections(trigger: Block) -> bool:
    block_type = _trigger_type(trigger)
    if block_type == CHECKBOXES:
        return True
    if block_type == MULTIPLE_CHOICE:
        max_selections = _max_selections(trigger)
        return max_selections is not None and max_selections > 1
    return False


def _option_labels(trigger: Block) -> List[str]:
    """Every value and text declared by the trigger's options."""
    labels = []
    for option in trigger.payload.get("options") or []:
        if isinstance(option, dict):
            for key in ("value", "text"):
                if option.get(key) is not None:
                    labels.append(str(option[key]))
        elif option is not None:
            labels.append(str(option))
    return labels


def validate_choice_logic(
    trigger_question: Union[Block, Dict[str, Any]],
    logic_blocks: Sequence[Union[Block, Dict[str, Any]]],
) -> ValidationReport:
    """
    Check that the conditions on a choice question suit its cardinality.

    Args:
        trigger_question: The question block the conditions read
        logic_blocks: Logic blocks whose conditions reference the trigger

    Returns:
        ValidationReport; INVALID if any condition is incompatible or incomplete
    """
    trigger = as_blocks([trigger_question])[0]
    logic_blocks = as_blocks(logic_blocks)
    report = ValidationReport()

    is_choice = _trigger_type(trigger) in MULTIPLE_CHOICE_FAMILY
    is_multi = allows_multiple_selections(trigger)
    max_selections = _max_selections(trigger)
    has_options = isinstance(trigger.payload.get("options"), list) and bool(trigger.payload["options"])
    option_labels = set(_option_labels(trigger))

    if not is_choice:
        report.add_warning(
            f"trigger {trigger.id} is {trigger.type}, not a multiple choice or checkbox question"
        )

    operator_counts: Counter = Counter()
    condition_count = 0
    value_mismatches = 0

    for block in logic_blocks:
        trigger_field = block.trigger_field
        if trigger_field is not None and trigger_field != trigger.id:
            report.add_warning(
                f"logic block {block.id} is triggered by {trigger_field}, not {trigger.id}"
            )

        if block.malformed_conditions:
            report.add_issue(f"malformed conditions in block {block.id}")

        for position, condition in enumerate(block.conditions, 1):
            condition_count += 1
            operator_counts[condition.operator_name] += 1
            where = f"condition {position} of block {block.id}"
            op = condition.operator

            if op is None and condition.raw_operator is None:
                report.add_issue(f"missing operator in {where}")
            elif op is None:
                report.add_issue(f"unknown operator {condition.raw_operator!r} in {where}")
            elif op == Operator.EQUALS and is_multi:
                report.add_issue(
                    f"CRITICAL: {where} uses 'equals' on multi-select trigger {trigger.id}; "
                    f"'equals' stops matching once more than one option is selected, use 'contains'"
                )
            elif op == Operator.EQUALS and is_choice:
                report.add_warning(
                    f"{where} uses 'equals' on single-select trigger {trigger.id}; "
                    f"prefer 'contains' so the condition survives enabling multiple selections"
                )
            elif op == Operator.NOT_EQUALS and is_multi:
                report.add_issue(
                    f"{where} uses 'not_equals' on multi-select trigger {trigger.id}; "
                    f"equality operators are incompatible with multiple selections, use 'not_contains'"
                )

            if condition.missing_value:
                report.add_issue(f"missing value for operator {condition.operator_name} in {where}")

            if condition.target_block_id is None:
                report.add_issue(f"missing target block in {where}")

            if condition.has_value and has_options and str(condition.value) not in option_labels:
                value_mismatches += 1
                report.add_warning(
                    f"value {condition.value!r} in {where} does not match any declared option of {trigger.id}"
                )

    # Recommendations are emitted in a fixed order
    if is_multi:
        report.add_recommendation("Use 'contains' or 'not_contains' for conditions on multi-select triggers")
    elif is_choice:
        report.add_recommendation(
            "Prefer 'contains' over 'equals' so conditions keep working if multiple selections are enabled"
        )
    if is_choice:
        bounds = "no selection, one selection"
        if is_multi:
            bounds += f", and {max_selections} selections" if max_selections else ", and every option selected"
        report.add_recommendation(f"Test boundary selection counts: {bounds}")
    if value_mismatches:
        report.add_recommendation("Use the trigger's declared option values as condition values")
    if not is_choice:
        report.add_recommendation(
            "Choice logic checks apply to INPUT_MULTIPLE_CHOICE and INPUT_CHECKBOXES triggers"
        )

    report.counts = {
        "trigger_id": trigger.id,
        "trigger_type": trigger.type,
        "is_multiple_choice_family": is_choice,
        "allows_multiple_selections": is_multi,
        "max_selections": max_selections,
        "option_count": len(trigger.payload.get("options") or []),
        "logic_blocks": len(logic_blocks),
        "conditions": condition_count,
        "operators": dict(sorted(operator_counts.items())),
    }

    logger.debug(
        "Choice logic for %s: %s, %d issues, %d warnings",
        trigger.id, report.status.value, len(report.issues), len(report.warnings),
    )
    return report
