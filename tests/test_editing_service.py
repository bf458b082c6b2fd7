"""
Tests for the SurgicalEditingService.
"""

import pytest
from unittest.mock import Mock

from latex_edit_engine.core.surgical_editor.editing_service import SurgicalEditingService
from latex_edit_engine.core.surgical_editor.models import EditAction, TextRange

DOCUMENT = (
    "\\documentclass{article}\n"
    "\\begin{document}\n"
    "\\section{Introduction}\n"
    "Hello.\n"
    "\\section{Conclusion}\n"
    "Done.\n"
    "\\end{document}"
)


class TestSurgicalEditingService:
    """Test cases for the full edit cycle with a mocked generation service."""

    def setup_method(self):
        self.client = Mock()
        self.service = SurgicalEditingService(completion_client=self.client)

    def test_successful_edit(self):
        self.client.complete.return_value = "Sure!\n```latex\nFuture work includes X.\n```"

        outcome = self.service.perform_surgical_edit(DOCUMENT, "add a sentence about future work to the conclusion")

        assert outcome.success
        assert outcome.strategy == "section"
        assert "Done.\nFuture work includes X.\n\\end{document}" in outcome.new_document
        assert outcome.intent.action == EditAction.ADD
        assert outcome.validation.overall_valid
        assert outcome.fallback_document is None
        assert outcome.trace[0].decision == "started"

    def test_prompt_targets_the_section(self):
        self.client.complete.return_value = "More."

        self.service.perform_surgical_edit(DOCUMENT, "add a sentence to the conclusion")

        prompt = self.client.complete.call_args.args[0]
        assert "Current conclusion section:" in prompt
        assert "=== SURGICAL EDITING INSTRUCTIONS ===" in prompt

    def test_selection_edit(self):
        self.client.complete.return_value = "Hi."
        start = DOCUMENT.index("Hello.")

        outcome = self.service.perform_surgical_edit(
            DOCUMENT, "improve this", selection=TextRange(start, start + len("Hello."))
        )

        assert outcome.strategy == "selection"
        assert outcome.new_document == DOCUMENT.replace("Hello.", "Hi.")
        assert outcome.affected_range == TextRange(start, start + len("Hi."))

    def test_empty_replies_are_retried(self):
        self.client.complete.side_effect = ["", "   ", "Better."]

        outcome = self.service.perform_surgical_edit(DOCUMENT, "make it better", cursor=0)

        assert outcome.success
        assert self.client.complete.call_count == 3
        assert outcome.new_document == "Better." + DOCUMENT

    def test_persistent_empty_reply_fails_with_fallback(self):
        self.client.complete.return_value = ""

        outcome = self.service.perform_surgical_edit(DOCUMENT, "make it better")

        assert not outcome.success
        assert outcome.fallback_document == DOCUMENT
        assert outcome.new_document is None
        assert "empty reply" in outcome.error
        assert self.client.complete.call_count == self.service.max_attempts

    def test_empty_reply_accepted_for_deletion(self):
        self.client.complete.return_value = ""
        start = DOCUMENT.index("Hello.")

        outcome = self.service.perform_surgical_edit(
            DOCUMENT, "delete this", selection=TextRange(start, start + len("Hello."))
        )

        assert outcome.success
        assert outcome.strategy == "deletion"
        assert outcome.new_document == DOCUMENT.replace("Hello.", "")
        assert self.client.complete.call_count == 1

    def test_service_failure_keeps_document(self):
        self.client.complete.side_effect = RuntimeError("Generation service call failed: timeout")

        outcome = self.service.perform_surgical_edit(DOCUMENT, "add a sentence to the conclusion")

        assert not outcome.success
        assert outcome.fallback_document == DOCUMENT
        assert "timeout" in outcome.error
        assert outcome.trace[-1].decision == "failed"

    def test_history_is_recorded(self):
        self.client.complete.return_value = "More."
        self.service.perform_surgical_edit(DOCUMENT, "add a sentence to the conclusion")
        self.client.complete.side_effect = RuntimeError("down")
        self.service.perform_surgical_edit(DOCUMENT, "add a sentence to the conclusion")

        history = self.service.get_edit_history()
        assert [record.success for record in history] == [True, False]
        assert history[0].strategy == "section"
        assert history[0].action == "add"
        assert history[1].error == "down"
        assert history[0].session_id != history[1].session_id

        self.service.clear_history()
        assert self.service.get_edit_history() == []

    def test_validation_can_be_disabled(self):
        service = SurgicalEditingService(completion_client=self.client, validation_enabled=False)
        self.client.complete.return_value = "More."

        outcome = service.perform_surgical_edit(DOCUMENT, "add a sentence to the conclusion")

        assert outcome.success
        assert outcome.validation is None

    def test_section_creation_is_validated_as_creation(self):
        self.client.complete.return_value = "```latex\n\\section{Discussion}\nWe discuss.\n```"

        outcome = self.service.perform_surgical_edit(DOCUMENT, "write a discussion section")

        assert outcome.success
        assert "\\section{Discussion}\nWe discuss.\n\n\\end{document}" in outcome.new_document
        assert outcome.validation.structure_valid
