"""
Command line front end: validate a form's logic from a JSON or YAML file.

    formlogic-validate form.yaml
    formlogic-validate form.json --trigger q_tools --format json
    formlogic-validate form.yaml --dot form.dot

Exit status is 0 for VALID reports, 1 for INVALID, 2 for unusable input.
"""

import argparse
import logging
import sys
from typing import List, Optional

import yaml

from formlogic.analyzer import validate_logic_flow
from formlogic.backends import DotMode, save_dot_file
from formlogic.choice_logic import validate_choice_logic
from formlogic.config import FormLogicSettings
from formlogic.model import Block
from formlogic.report import ValidationReport
from formlogic.serialization import (
    blocks_from_json,
    blocks_from_yaml,
    report_to_json,
    report_to_yaml,
)

logger = logging.getLogger(__name__)


def load_blocks(path: str) -> List[Block]:
    with open(path, 'r', encoding='utf-8') as f:
        content = f.read()
    if path.lower().endswith(".json"):
        return blocks_from_json(content)
    return blocks_from_yaml(content)


def format_report(report: ValidationReport, title: str) -> str:
    lines = [
        "=" * 70,
        title,
        "=" * 70,
        f"Status: {report.status.value}",
        "",
    ]
    if report.counts:
        lines.append("COUNTS")
        for key, value in report.counts.items():
            lines.append(f"  {key}: {value}")
        lines.append("")
    for heading, messages in (
        ("ISSUES", report.issues),
        ("WARNINGS", report.warnings),
        ("RECOMMENDATIONS", report.recommendations),
    ):
        if messages:
            lines.append(heading)
            for i, msg in enumerate(messages, 1):
                lines.append(f"  {i}. {msg}")
            lines.append("")
    return "\n".join(lines)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Validate the conditional logic of a form")
    parser.add_argument("form", help="Path to a JSON or YAML file holding the form's blocks")
    parser.add_argument("--trigger", help="Also check operator compatibility for this trigger question id")
    parser.add_argument("--format", choices=["text", "json", "yaml"], default="text", help="Report output format")
    parser.add_argument("--dot", metavar="OUT", help="Write a Graphviz DOT diagram of the logic graph")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    try:
        settings = FormLogicSettings.from_env()
        blocks = load_blocks(args.form)
        reports = [("LOGIC FLOW REPORT", validate_logic_flow(blocks, settings))]
    except (OSError, ValueError, yaml.YAMLError) as e:
        # BlockFormatError and FormTooLargeError are ValueErrors
        logger.error("Cannot validate %s: %s", args.form, e)
        return 2

    if args.trigger:
        trigger = next((b for b in blocks if b.id == args.trigger), None)
        if trigger is None:
            logger.error("Trigger %s not found in %s", args.trigger, args.form)
            return 2
        logic_blocks = [b for b in blocks if b.is_logic and b.trigger_field == trigger.id]
        reports.append((f"CHOICE LOGIC REPORT: {trigger.id}", validate_choice_logic(trigger, logic_blocks)))

    for title, report in reports:
        if args.format == "json":
            print(report_to_json(report))
        elif args.format == "yaml":
            print(report_to_yaml(report))
        else:
            print(format_report(report, title))

    if args.dot:
        save_dot_file(blocks, args.dot, mode=DotMode.DETAILED)
        logger.info("Saved diagram to %s", args.dot)

    return 0 if all(report.is_valid for _, report in reports) else 1


if __name__ == "__main__":
    sys.exit(main())
