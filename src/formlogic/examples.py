"""
Example form builder for demos and tests.

Builds a small team survey: a role question, a checkbox tools question,
a logic block branching on the tools selected, follow-up questions, and a
hidden tracking field. The form is valid as built.
"""
from typing import List

from formlogic.model import Block


def _options(*texts: str) -> List[dict]:
    return [{"id": f"opt_{t.lower()}", "text": t, "value": t.lower()} for t in texts]


def build_example_form() -> List[Block]:
    blocks = [
        Block(id="intro", type="LAYOUT_TITLE", payload={"title": "Team tooling survey"}),
        Block(
            id="q_role",
            type="INPUT_MULTIPLE_CHOICE",
            payload={
                "title": "What is your role?",
                "options": _options("Developer", "Designer", "Manager"),
                "maxSelections": 1,
            },
        ),
        Block(
            id="q_tools",
            type="INPUT_CHECKBOXES",
            payload={
                "title": "Which tools do you use?",
                "options": _options("Python", "Figma", "Jira"),
            },
        ),
        Block(
            id="logic_tools",
            type="LOGIC_CONDITIONAL",
            payload={
                "triggerField": "q_tools",
                "logicType": "multi_branch",
                "conditions": [
                    {"operator": "contains", "value": "python", "targetBlockId": "q_python"},
                    {"operator": "contains", "value": "figma", "targetBlockId": "q_design"},
                ],
                "defaultTarget": "q_feedback",
            },
        ),
        Block(id="q_python", type="INPUT_TEXT", payload={"title": "Which Python version do you run?"}),
        Block(id="q_design", type="INPUT_TEXT", payload={"title": "How do you hand off designs?"}),
        Block(id="page_feedback", type="LAYOUT_PAGE_BREAK"),
        Block(id="q_feedback", type="INPUT_TEXTAREA", payload={"title": "Anything else?"}),
        Block(id="utm_source", type="HIDDEN_FIELD", payload={"name": "utm_source"}),
    ]
    return blocks
