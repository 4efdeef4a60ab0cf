"""
Constructors for logic blocks and dynamic question sets.

These emit NEW blocks; they never touch an existing form. The caller
inserts the result into the form and re-runs validate_logic_flow before
handing it to the form-storage service.

Both constructors fail fast: invalid input raises, nothing partial
is returned.
"""

from __future__ import annotations

import logging
import re
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from formlogic.model import Block, Condition, Operator, is_missing
from formlogic.serialization import blocks_to_dicts

logger = logging.getLogger(__name__)

CONDITIONAL_BLOCK_TYPE = "LOGIC_CONDITIONAL"
DYNAMIC_GROUP_TYPE = "DYNAMIC_QUESTION_SET"
DYNAMIC_QUESTION_TYPES = ("INPUT_MULTIPLE_CHOICE", "INPUT_DROPDOWN", "INPUT_CHECKBOXES")


class BlockConstructionError(ValueError):
    """Base class for rejected constructor input."""
    pass


class InvalidCondition(BlockConstructionError):
    pass


class MissingConditionValue(BlockConstructionError):
    pass


class EmptyOptionSets(BlockConstructionError):
    pass


class InvalidOptionSet(BlockConstructionError):
    pass


class UnsupportedQuestionType(BlockConstructionError):
    pass


def new_block_id() -> str:
    return str(uuid.uuid4())


def slugify(text: str) -> str:
    """Lower-case ``text`` and replace whitespace runs with hyphens."""
    return re.sub(r"\s+", "-", text.strip().lower())


def _shape_condition(trigger_field: str, raw: Any, position: int) -> Dict[str, Any]:
    if not isinstance(raw, dict):
        raise InvalidCondition(f"Condition {position} must be a mapping, got {type(raw).__name__}")

    parsed = Condition.from_dict(raw)
    if is_missing(parsed.raw_operator):
        raise InvalidCondition(f"Condition {position} has no operator: {raw!r}")
    if parsed.operator is None:
        raise InvalidCondition(f"Condition {position} has unknown operator {parsed.raw_operator!r}")
    if parsed.target_block_id is None:
        raise InvalidCondition(f"Condition {position} has no targetBlock: {raw!r}")
    if parsed.missing_value:
        raise MissingConditionValue(
            f"Condition {position} needs a value for operator {parsed.operator.value}"
        )

    shaped: Dict[str, Any] = {"field": trigger_field, "operator": parsed.operator.value}
    if parsed.has_value:
        shaped["value"] = parsed.value
    shaped["jumpTo"] = parsed.target_block_id
    return shaped


def build_conditional_block(
    trigger_field: str,
    conditions: Sequence[Dict[str, Any]],
    default_target: Optional[str] = None,
    logic_type: str = "simple_branch",
) -> Block:
    """
    Build one logic block routing on ``trigger_field``.

    Args:
        trigger_field: Id of the block whose answer the conditions read
        conditions: Mappings with ``operator``, optional ``value`` and
            ``targetBlock`` (``targetBlockId`` and ``jumpTo`` also accepted)
        default_target: Block to jump to when no condition matches
        logic_type: Advisory logic type label

    Returns:
        A new LOGIC_CONDITIONAL block with a random UUID id

    Raises:
        InvalidCondition: blank trigger, no conditions, or a condition
            without a known operator or a target
        MissingConditionValue: a condition needs a value and has none
    """
    if is_missing(trigger_field):
        raise InvalidCondition("A trigger field is required")
    if not conditions:
        raise InvalidCondition("At least one condition is required")

    shaped = [_shape_condition(trigger_field, raw, position) for position, raw in enumerate(conditions, 1)]

    block = Block(
        id=new_block_id(),
        type=CONDITIONAL_BLOCK_TYPE,
        payload={
            "triggerField": trigger_field,
            "logicType": logic_type or "simple_branch",
            "conditions": shaped,
            "defaultJumpTo": None if is_missing(default_target) else default_target,
        },
    )
    logger.debug("Built %s block %s on %s with %d conditions", block.payload["logicType"], block.id, trigger_field, len(shaped))
    return block


@dataclass
class DynamicQuestionSet:
    """Question variants plus the logic blocks routing between them."""

    question_blocks: List[Block] = field(default_factory=list)
    logic_blocks: List[Block] = field(default_factory=list)

    @property
    def base_id(self) -> Optional[str]:
        if not self.question_blocks:
            return None
        return self.question_blocks[0].payload["dynamicQuestion"]["baseId"]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "questionBlocks": blocks_to_dicts(self.question_blocks),
            "logicBlocks": blocks_to_dicts(self.logic_blocks),
        }


def _materialize_options(options: Any, index: int) -> List[Dict[str, Any]]:
    if not isinstance(options, list) or not options:
        raise InvalidOptionSet(f"Option set {index} has no options")

    materialized = []
    for position, option in enumerate(options):
        if not isinstance(option, dict) or is_missing(option.get("text")):
            raise InvalidOptionSet(f"Option {position} of option set {index} has no text")
        text = str(option["text"])
        value = option.get("value")
        materialized.append({
            "id": new_block_id(),
            "text": text,
            "value": slugify(text) if is_missing(value) else value,
        })
    return materialized


def build_dynamic_question_set(
    question_label: str,
    question_type: str,
    trigger_field: str,
    conditional_option_sets: Sequence[Dict[str, Any]],
) -> DynamicQuestionSet:
    """
    Build question variants whose options depend on a trigger's answer.

    Variant 0 is the fallback and gets no routing block. Every later
    variant gets one logic block using ``contains``, which holds for
    single- and multi-select triggers alike.

    Raises:
        UnsupportedQuestionType: question_type is not a choice input
        EmptyOptionSets: no option sets were given
        InvalidOptionSet: a set lacks a triggerValue or options
        InvalidCondition: the label or trigger field is blank
    """
    if question_type not in DYNAMIC_QUESTION_TYPES:
        raise UnsupportedQuestionType(
            f"Question type {question_type!r} is not one of {', '.join(DYNAMIC_QUESTION_TYPES)}"
        )
    if is_missing(question_label):
        raise InvalidCondition("A question label is required")
    if is_missing(trigger_field):
        raise InvalidCondition("A trigger field is required")
    if not conditional_option_sets:
        raise EmptyOptionSets("At least one conditional option set is required")

    base_id = new_block_id()
    result = DynamicQuestionSet()

    for index, option_set in enumerate(conditional_option_sets):
        if not isinstance(option_set, dict):
            raise InvalidOptionSet(f"Option set {index} must be a mapping")
        trigger_value = option_set.get("triggerValue")
        if is_missing(trigger_value):
            raise InvalidOptionSet(f"Option set {index} has no triggerValue")
        options = _materialize_options(option_set.get("options"), index)

        suffix = option_set.get("labelSuffix")
        title = question_label if is_missing(suffix) else f"{question_label} ({suffix})"
        variant_id = f"{base_id}_variant_{index}"

        result.question_blocks.append(Block(
            id=variant_id,
            type=question_type,
            group_id=base_id,
            group_type=DYNAMIC_GROUP_TYPE,
            payload={
                "title": title,
                "options": options,
                "dynamicQuestion": {
                    "baseId": base_id,
                    "triggerField": trigger_field,
                    "triggerValue": trigger_value,
                    "variantIndex": index,
                },
            },
        ))

        if index > 0:
            result.logic_blocks.append(build_conditional_block(
                trigger_field,
                [{"operator": Operator.CONTAINS.value, "value": trigger_value, "targetBlock": variant_id}],
                logic_type="dynamic_question_routing",
            ))

    logger.debug(
        "Built dynamic question set %s: %d variants, %d routing blocks",
        base_id, len(result.question_blocks), len(result.logic_blocks),
    )
    return result
