"""
Form Logic Package

Static analysis and construction of conditional logic in form blocks.

A form is an ordered array of blocks. Logic blocks add conditional
"jump" edges on top of the sequential fall-through order. This package
checks that graph (references, reachability, conditional loops, choice
operator compatibility) and builds new logic blocks.

ARCHITECTURAL GUARANTEE:
------------------------
This package contains ZERO knowledge of:
    - The remote form-storage API
    - Transport or tool dispatch
    - Rendering or executing forms

All operations are pure functions over in-memory blocks.
"""

__version__ = "0.1.0"

from formlogic.analyzer import validate_logic_flow
from formlogic.builders import build_conditional_block, build_dynamic_question_set
from formlogic.choice_logic import validate_choice_logic
from formlogic.model import Block, BlockKind, Condition, Operator
from formlogic.report import ReportStatus, ValidationReport

__all__ = [
    "Block",
    "BlockKind",
    "Condition",
    "Operator",
    "ReportStatus",
    "ValidationReport",
    "build_conditional_block",
    "build_dynamic_question_set",
    "validate_choice_logic",
    "validate_logic_flow",
]
