"""
Demo: validate the example form, add generated logic, and export a diagram.
"""

from formlogic.analyzer import validate_logic_flow
from formlogic.backends import DotMode, save_dot_file
from formlogic.builders import build_dynamic_question_set
from formlogic.choice_logic import validate_choice_logic
from formlogic.cli import format_report
from formlogic.examples import build_example_form
from formlogic.serialization import blocks_to_yaml


if __name__ == "__main__":
    blocks = build_example_form()

    print(format_report(validate_logic_flow(blocks), "LOGIC FLOW REPORT: example form"))

    trigger = next(b for b in blocks if b.id == "q_tools")
    logic_blocks = [b for b in blocks if b.is_logic and b.trigger_field == trigger.id]
    print(format_report(validate_choice_logic(trigger, logic_blocks), "CHOICE LOGIC REPORT: q_tools"))

    # Role-dependent follow-up question, inserted after the role question
    dynamic = build_dynamic_question_set(
        "Pick your focus area",
        "INPUT_MULTIPLE_CHOICE",
        "q_role",
        [
            {"triggerValue": "developer", "labelSuffix": "engineering", "options": [{"text": "Backend"}, {"text": "Frontend"}]},
            {"triggerValue": "designer", "labelSuffix": "design", "options": [{"text": "Visual design"}, {"text": "UX research"}]},
        ],
    )
    extended = blocks[:2] + dynamic.logic_blocks + dynamic.question_blocks + blocks[2:]
    print(format_report(validate_logic_flow(extended), "LOGIC FLOW REPORT: with dynamic question"))

    save_dot_file(extended, "example_form.dot", mode=DotMode.DETAILED)
    with open("example_form.yaml", "w") as f:
        f.write(blocks_to_yaml(extended))
    print("✅ Saved example_form.dot and example_form.yaml")
