"""
Intent classification component.

Maps a free-text user instruction to an edit action, an insertion point and
an optional target section using ordered keyword rules. Rules are evaluated in
strict priority order and the first match wins; new rules should be appended
where they belong in that order rather than folded into existing ones.
"""

import logging
import re
from typing import List, Optional, Tuple

from latex_edit_engine.core.surgical_editor.line_scanner import scan
from latex_edit_engine.core.surgical_editor.models import (
    DocumentIndex,
    EditAction,
    EditIntent,
    InsertionPoint,
    TextRange,
)
from latex_edit_engine.core.surgical_editor.section_locator import SectionLocator

logger = logging.getLogger(__name__)


CREATION_PREFIXES = ("write", "create")
CREATION_PHRASES = ("write a", "write an", "create a", "create an")

# (phrases, action) evaluated top to bottom after the creation rule
ACTION_RULES: List[Tuple[Tuple[str, ...], EditAction]] = [
    (("delete", "remove", "clear", "get rid of"), EditAction.DELETE),
    (("replace", "rewrite", "change to", "should be"), EditAction.REPLACE),
    # "make ... just/only ..." is handled between REPLACE and EXPAND
    (("expand", "elaborate", "add more", "extend"), EditAction.EXPAND),
    (("add", "insert", "include"), EditAction.ADD),
    (("fix", "correct", "repair"), EditAction.FIX),
]

BEGINNING_WORDS = ("beginning", "start", "top")
END_WORDS = ("end", "bottom", "conclusion")

# No "future work": it would outrank "conclusion" in requests such as
# "add a sentence about future work to the conclusion"
SECTION_KEYWORDS = [
    "introduction", "intro",
    "literature review", "literature", "review", "related work",
    "background", "methodology", "methods", "approach",
    "results", "findings", "analysis", "experiments",
    "discussion", "evaluation", "interpretation",
    "conclusion", "conclusions", "summary",
    "abstract", "references", "bibliography",
    "acknowledgments", "acknowledgements", "appendix",
]


def _contains_phrase(text: str, phrase: str) -> bool:
    """True if `phrase` occurs in `text` starting at a word boundary (suffixes allowed)."""
    return re.search(r"(?<![a-z])" + re.escape(phrase), text) is not None


def _contains_word(text: str, word: str) -> bool:
    return re.search(r"\b" + re.escape(word) + r"\b", text) is not None


def is_creation_language(prompt: str) -> bool:
    """True for "write ..." / "create a ..." style requests."""
    prompt_lower = prompt.lower().strip()
    if prompt_lower.startswith(CREATION_PREFIXES):
        return True
    return any(_contains_phrase(prompt_lower, phrase) for phrase in CREATION_PHRASES)


def classify_action(prompt: str) -> EditAction:
    prompt_lower = prompt.lower().strip()

    if is_creation_language(prompt_lower):
        return EditAction.ADD

    for phrases, action in ACTION_RULES[:2]:
        if any(_contains_phrase(prompt_lower, p) for p in phrases):
            return action

    if _contains_phrase(prompt_lower, "make") and (
        _contains_phrase(prompt_lower, "just") or _contains_phrase(prompt_lower, "only")
    ):
        return EditAction.REPLACE

    for phrases, action in ACTION_RULES[2:]:
        if any(_contains_phrase(prompt_lower, p) for p in phrases):
            return action

    return EditAction.IMPROVE


def classify_insertion_point(prompt: str) -> InsertionPoint:
    prompt_lower = prompt.lower().strip()

    if any(_contains_word(prompt_lower, w) for w in BEGINNING_WORDS):
        return InsertionPoint.BEGINNING
    if any(_contains_word(prompt_lower, w) for w in END_WORDS):
        return InsertionPoint.END
    return InsertionPoint.END


def extract_target_section(prompt: str) -> Optional[str]:
    """
    Return the section vocabulary term that appears first in the prompt.

    When two terms start at the same position ("literature review" and
    "literature") the longer one wins.
    """
    prompt_lower = prompt.lower()
    best: Optional[Tuple[int, int, str]] = None

    for keyword in SECTION_KEYWORDS:
        match = re.search(r"\b" + re.escape(keyword) + r"\b", prompt_lower)
        if not match:
            continue
        candidate = (match.start(), -len(keyword), keyword)
        if best is None or candidate < best:
            best = candidate

    return best[2] if best else None


def should_create_new_section(
    prompt: str,
    document: str,
    target_section: Optional[str],
    index: Optional[DocumentIndex] = None,
    locator: Optional[SectionLocator] = None,
) -> bool:
    """
    True iff the prompt uses creation language and the target is either
    unspecified or absent from the current document.
    """
    if not is_creation_language(prompt):
        return False
    if not target_section:
        return True

    index = index or scan(document)
    locator = locator or SectionLocator()
    return locator.find_section(index, target_section) is None


def assess_complexity(prompt: str, has_selection: bool = False) -> str:
    word_count = len(prompt.split())
    has_multiple_actions = " and " in prompt or "," in prompt

    if word_count > 15 or has_multiple_actions:
        return "complex"
    if word_count > 8 or has_selection:
        return "medium"
    return "simple"


class IntentClassifier:
    """Bundles every intent decision for one instruction into an EditIntent."""

    def __init__(self, locator: Optional[SectionLocator] = None):
        self.locator = locator or SectionLocator()

    def analyze(
        self,
        prompt: str,
        document: str,
        index: Optional[DocumentIndex] = None,
        selection: Optional[TextRange] = None,
    ) -> EditIntent:
        index = index or scan(document)
        action = classify_action(prompt)
        target_section = extract_target_section(prompt)
        has_selection = selection is not None and not selection.is_empty

        intent = EditIntent(
            action=action,
            insertion_point=classify_insertion_point(prompt),
            target_section=target_section,
            is_creation_request=should_create_new_section(
                prompt, document, target_section, index=index, locator=self.locator
            ),
            has_selection=has_selection,
            complexity=assess_complexity(prompt, has_selection),
        )
        logger.info(
            "Intent: %s on %s (insertion=%s, creation=%s, %s)",
            intent.action.value, target_section or "selection/cursor",
            intent.insertion_point.value, intent.is_creation_request, intent.complexity,
        )
        return intent
