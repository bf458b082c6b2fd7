"""
Tests for the intent classification component.
"""

import pytest
from unittest.mock import Mock

from latex_edit_engine.core.surgical_editor.intent_classifier import (
    IntentClassifier,
    assess_complexity,
    classify_action,
    classify_insertion_point,
    extract_target_section,
    is_creation_language,
    should_create_new_section,
)
from latex_edit_engine.core.surgical_editor.models import EditAction, InsertionPoint, TextRange

DOCUMENT = (
    "\\documentclass{article}\n"
    "\\begin{document}\n"
    "\\section{Introduction}\n"
    "Hello.\n"
    "\\section{Conclusion}\n"
    "Done.\n"
    "\\end{document}"
)


class TestClassifyAction:

    @pytest.mark.parametrize("prompt, expected", [
        ("write a conclusion section summarizing results", EditAction.ADD),
        ("Create an appendix with the proofs", EditAction.ADD),
        ("delete the methods section", EditAction.DELETE),
        ("please get rid of the related work", EditAction.DELETE),
        ("rewrite the abstract", EditAction.REPLACE),
        ("the title should be shorter", EditAction.REPLACE),
        ("make the intro just one paragraph", EditAction.REPLACE),
        ("expand the discussion", EditAction.EXPAND),
        ("add more details to the results", EditAction.EXPAND),
        ("insert a table in the results", EditAction.ADD),
        ("fix the typos in the introduction", EditAction.FIX),
        ("make it better", EditAction.IMPROVE),
        ("improve this", EditAction.IMPROVE),
    ])
    def test_classify_action(self, prompt, expected):
        assert classify_action(prompt) == expected

    def test_creation_beats_other_keywords(self):
        # "write a" wins even though "remove" appears later
        assert classify_action("write a note on how to remove outliers") == EditAction.ADD

    def test_delete_beats_add(self):
        assert classify_action("remove the paragraph I added") == EditAction.DELETE

    def test_rewrite_is_not_creation_language(self):
        assert not is_creation_language("rewrite a better abstract")
        assert classify_action("rewrite a better abstract") == EditAction.REPLACE

    def test_inflected_verbs_still_match(self):
        assert classify_action("I want this deleted") == EditAction.DELETE


class TestInsertionPoint:

    @pytest.mark.parametrize("prompt, expected", [
        ("add a sentence to the beginning of the introduction", InsertionPoint.BEGINNING),
        ("put a summary at the top", InsertionPoint.BEGINNING),
        ("add a sentence at the end", InsertionPoint.END),
        ("add a sentence about future work to the conclusion", InsertionPoint.END),
        ("add a paragraph on this topic", InsertionPoint.END),
        ("add a citation", InsertionPoint.END),
    ])
    def test_classify_insertion_point(self, prompt, expected):
        assert classify_insertion_point(prompt) == expected


class TestExtractTargetSection:

    def test_classifier_priority_example(self):
        assert extract_target_section("write a conclusion section summarizing results") == "conclusion"

    def test_longer_term_wins_at_same_position(self):
        assert extract_target_section("expand the literature review") == "literature review"

    def test_case_insensitive(self):
        assert extract_target_section("Fix the Introduction") == "introduction"

    def test_whole_words_only(self):
        assert extract_target_section("add to the intro") == "intro"
        assert extract_target_section("make the introductory remarks clearer") is None

    def test_no_target(self):
        assert extract_target_section("improve this") is None


class TestShouldCreateNewSection:

    def test_creation_language_and_missing_section(self):
        assert should_create_new_section("write a methodology section", DOCUMENT, "methodology")

    def test_existing_section_is_not_recreated(self):
        assert not should_create_new_section("write a conclusion", DOCUMENT, "conclusion")

    def test_requires_creation_language(self):
        assert not should_create_new_section("add a methodology section", DOCUMENT, "methodology")

    def test_no_target_with_creation_language(self):
        assert should_create_new_section("write a paragraph about bees", DOCUMENT, None)

    def test_locator_is_not_consulted_without_creation_language(self):
        locator = Mock()
        should_create_new_section("improve this", DOCUMENT, "conclusion", locator=locator)
        locator.find_section.assert_not_called()


class TestAssessComplexity:

    def test_levels(self):
        assert assess_complexity("improve this") == "simple"
        assert assess_complexity("improve this", has_selection=True) == "medium"
        assert assess_complexity("please improve the flow of the second paragraph here") == "medium"
        assert assess_complexity("fix typos, then tighten the prose") == "complex"
        assert assess_complexity(" ".join(["word"] * 16)) == "complex"


class TestIntentClassifier:

    def setup_method(self):
        self.classifier = IntentClassifier()

    def test_end_to_end_intent(self):
        intent = self.classifier.analyze("add a sentence about future work to the conclusion", DOCUMENT)

        assert intent.action == EditAction.ADD
        assert intent.target_section == "conclusion"
        assert intent.insertion_point == InsertionPoint.END
        assert intent.is_creation_request is False
        assert intent.is_structural_change

    def test_selection_is_recorded(self):
        intent = self.classifier.analyze("improve this", DOCUMENT, selection=TextRange(0, 5))

        assert intent.action == EditAction.IMPROVE
        assert intent.target_section is None
        assert intent.has_selection is True
        assert intent.complexity == "medium"
        assert not intent.is_structural_change

    def test_creation_request(self):
        intent = self.classifier.analyze("write a discussion section", DOCUMENT)

        assert intent.action == EditAction.ADD
        assert intent.target_section == "discussion"
        assert intent.is_creation_request is True
