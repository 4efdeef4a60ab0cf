"""
Core Form Model Objects

Defines the fundamental data structures of a form's logic graph.

These are pure data classes representing:
    - Blocks (atomic form elements: inputs, layout, logic)
    - Conditions (one conditional jump of a logic block)
    - Block kinds (classification derived from the block type)
    - Operators (comparison operators a condition may use)

ARCHITECTURAL RULE:
    These objects:
        - Know nothing about the remote form-storage service
        - Are never mutated by validators
        - Map one-to-one onto the wire shape of a block
        - Represent structure, not behavior
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class BlockKind(Enum):
    """
    Classification of a block, derived from its type prefix.

    This is a closed set. Validators only care about the
    logic / non-logic distinction; the rest is reporting detail.
    """

    INPUT = "input"
    LAYOUT = "layout"
    LOGIC = "logic"
    HIDDEN = "hidden"
    UNCLASSIFIED = "unclassified"


class Operator(Enum):
    """
    Comparison operators supported in logic block conditions.
    """

    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    CONTAINS = "contains"
    NOT_CONTAINS = "not_contains"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    GREATER_EQUAL = "greater_equal"
    LESS_EQUAL = "less_equal"
    IS_EMPTY = "is_empty"
    IS_NOT_EMPTY = "is_not_empty"
    STARTS_WITH = "starts_with"
    ENDS_WITH = "ends_with"

    @property
    def requires_value(self) -> bool:
        return self not in (Operator.IS_EMPTY, Operator.IS_NOT_EMPTY)

    @classmethod
    def parse(cls, raw: Any) -> Optional["Operator"]:
        """Return the operator named by ``raw``, or None if unknown."""
        if isinstance(raw, Operator):
            return raw
        if not isinstance(raw, str):
            return None
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return None


# Accepted spellings of a condition's jump target, in lookup order.
TARGET_KEYS = ("targetBlockId", "targetBlock", "jumpTo")
DEFAULT_TARGET_KEYS = ("defaultTarget", "defaultJumpTo")


def is_missing(value: Any) -> bool:
    """A condition value or reference counts as missing if None or blank."""
    return value is None or (isinstance(value, str) and value.strip() == "")


def _first_present(data: Dict[str, Any], keys) -> Any:
    for key in keys:
        if not is_missing(data.get(key)):
            return data[key]
    return None


@dataclass
class Block:
    """
    Represents a single form block.

    Properties:
        id:
            Unique identifier within a form

        type:
            Block type string, e.g. "INPUT_CHECKBOXES", "LAYOUT_PAGE_BREAK",
            "LOGIC_CONDITIONAL", "HIDDEN_FIELD"

        payload:
            Arbitrary type-specific content (title, options, logic...)

        group_id / group_type:
            Optional grouping metadata used by the storage service

    IMPORTANT:
        Identity is ``id``. Blocks are read or produced, never
        modified in place.
    """

    id: str
    type: str
    payload: Dict[str, Any] = field(default_factory=dict)
    group_id: Optional[str] = None
    group_type: Optional[str] = None

    @property
    def kind(self) -> BlockKind:
        return classify(self)

    @property
    def is_logic(self) -> bool:
        return self.kind == BlockKind.LOGIC

    @property
    def trigger_field(self) -> Optional[str]:
        value = self.payload.get("triggerField")
        return None if is_missing(value) else value

    @property
    def default_target(self) -> Optional[str]:
        return _first_present(self.payload, DEFAULT_TARGET_KEYS)

    @property
    def logic_type(self) -> Optional[str]:
        return self.payload.get("logicType")

    @property
    def malformed_conditions(self) -> bool:
        """True when ``conditions`` is present but not a list."""
        raw = self.payload.get("conditions")
        return raw is not None and not isinstance(raw, (list, tuple))

    @property
    def conditions(self) -> List["Condition"]:
        """
        Conditions declared in the payload, parsed leniently.

        An entry that is not a mapping becomes an empty Condition, and
        malformed fields are surfaced as None for validators to report.
        A non-list ``conditions`` yields no conditions.
        """
        raw = self.payload.get("conditions")
        if not isinstance(raw, (list, tuple)):
            return []
        return [
            Condition.from_dict(c) if isinstance(c, dict) else Condition(operator=None, target_block_id=None)
            for c in raw
        ]


@dataclass(frozen=True)
class Condition:
    """
    One conditional jump of a logic block.

    Properties:
        operator:
            Parsed Operator, or None if missing/unknown
            (``raw_operator`` keeps what was supplied)

        target_block_id:
            Block to jump to when the condition holds

        value:
            Comparison value; unset for is_empty / is_not_empty

        field:
            Trigger field the condition reads, when carried inline
    """

    operator: Optional[Operator]
    target_block_id: Optional[str]
    value: Any = None
    field: Optional[str] = None
    raw_operator: Any = None

    @property
    def operator_name(self) -> str:
        if self.operator is not None:
            return self.operator.value
        return str(self.raw_operator) if self.raw_operator is not None else "<missing>"

    @property
    def has_value(self) -> bool:
        return not is_missing(self.value)

    @property
    def missing_value(self) -> bool:
        """True when the operator needs a value and none was given."""
        if self.operator is not None and not self.operator.requires_value:
            return False
        return not self.has_value

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Condition":
        raw_operator = data.get("operator")
        return cls(
            operator=Operator.parse(raw_operator),
            target_block_id=_first_present(data, TARGET_KEYS),
            value=data.get("value"),
            field=data.get("field"),
            raw_operator=raw_operator,
        )


def classify(block: Block) -> BlockKind:
    """
    Classify a block by its type prefix.

    INPUT_* -> INPUT, LAYOUT_* -> LAYOUT, LOGIC_* -> LOGIC,
    HIDDEN_FIELD -> HIDDEN, anything else -> UNCLASSIFIED.
    """
    block_type = (block.type or "").upper()
    if block_type.startswith("INPUT_"):
        return BlockKind.INPUT
    if block_type.startswith("LAYOUT_"):
        return BlockKind.LAYOUT
    if block_type.startswith("LOGIC_"):
        return BlockKind.LOGIC
    if block_type == "HIDDEN_FIELD":
        return BlockKind.HIDDEN
    return BlockKind.UNCLASSIFIED
