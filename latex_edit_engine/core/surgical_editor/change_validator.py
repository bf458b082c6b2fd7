"""
ChangeValidator component for checking applied edits.

Compares the document before and after an edit with cheap local heuristics:
how much of the document changed, whether braces and environments still
balance, and whether the section structure moved more than the intent
allows. Findings are reported, never raised.
"""

import logging
import re
from typing import List, Optional, Tuple

from latex_edit_engine.core.surgical_editor.line_scanner import scan
from latex_edit_engine.core.surgical_editor.models import EditAction, EditIntent, ValidationReport
from latex_edit_engine.core.surgical_editor.section_locator import SectionLocator

logger = logging.getLogger(__name__)

MAX_SURGICAL_CHANGE_PERCENT = 50.0
MAX_CREATION_CHANGE_PERCENT = 200.0
MAX_SECTION_COUNT_SHIFT = 3

OPEN_BRACE_RE = re.compile(r"(?<!\\)\{")
CLOSE_BRACE_RE = re.compile(r"(?<!\\)\}")
BEGIN_ENV_RE = re.compile(r"\\begin\{([^}]+)\}")
END_ENV_RE = re.compile(r"\\end\{([^}]+)\}")


def check_latex_syntax(latex_code: str) -> Tuple[bool, List[str]]:
    """Balanced unescaped braces and matching \\begin / \\end counts."""
    errors = []
    if len(OPEN_BRACE_RE.findall(latex_code)) != len(CLOSE_BRACE_RE.findall(latex_code)):
        errors.append("Unbalanced braces")
    if len(BEGIN_ENV_RE.findall(latex_code)) != len(END_ENV_RE.findall(latex_code)):
        errors.append("Unbalanced environments")
    return not errors, errors


def check_document_structure(original: str, modified: str, creating_section: bool = False) -> Tuple[bool, List[str]]:
    issues = []
    original_count = len(scan(original).sections)
    modified_count = len(scan(modified).sections)
    shift = modified_count - original_count

    if creating_section:
        if shift != 1:
            issues.append(f"Expected 1 new section, got {shift}")
    elif abs(shift) > MAX_SECTION_COUNT_SHIFT:
        issues.append(f"Major section structure changes detected ({original_count} -> {modified_count} sections)")
    return not issues, issues


class ChangeValidator:
    """Heuristic validation of one applied edit."""

    def __init__(self, locator: Optional[SectionLocator] = None):
        self.locator = locator or SectionLocator()

    def is_creating_section(self, original: str, intent: Optional[EditIntent]) -> bool:
        if intent is None or intent.action != EditAction.ADD or not intent.target_section:
            return False
        return self.locator.locate(scan(original), original, intent.target_section) is None

    def validate(
        self,
        original: str,
        modified: str,
        intent: Optional[EditIntent] = None,
        creating_section: Optional[bool] = None,
    ) -> ValidationReport:
        """
        Validate the change from `original` to `modified`.

        Args:
            original: Document before the edit
            modified: Document after the edit
            intent: Intent the edit was applied for
            creating_section: Whether a new section was created (derived from
                the intent and the original document when omitted)

        Returns:
            ValidationReport with metrics and issues
        """
        if creating_section is None:
            creating_section = self.is_creating_section(original, intent)

        length_delta = len(modified) - len(original)
        if original:
            percentage_change = abs(length_delta) / len(original) * 100
        else:
            percentage_change = 100.0 if modified else 0.0

        issues: List[str] = []
        is_surgical = True
        if creating_section:
            if percentage_change > MAX_CREATION_CHANGE_PERCENT:
                issues.append("Changes are extremely large for section creation")
                is_surgical = False
        elif percentage_change > MAX_SURGICAL_CHANGE_PERCENT:
            issues.append(f"Changes affect more than {MAX_SURGICAL_CHANGE_PERCENT:.0f}% of document")
            is_surgical = False

        syntax_valid, syntax_errors = check_latex_syntax(modified)
        if not syntax_valid:
            issues.append(f"LaTeX syntax errors: {', '.join(syntax_errors)}")

        structure_valid, structure_issues = check_document_structure(original, modified, creating_section)
        if not structure_valid:
            issues.append(f"Structure issues: {', '.join(structure_issues)}")

        report = ValidationReport(
            is_surgical=is_surgical,
            syntax_valid=syntax_valid,
            structure_valid=structure_valid,
            length_delta=length_delta,
            percentage_change=percentage_change,
            issues=issues,
        )
        logger.info(
            "Validation %s (%d issues, %.1f%% change)",
            "PASSED" if report.overall_valid else "FAILED", len(issues), percentage_change,
        )
        return report
