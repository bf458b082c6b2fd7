"""
Tests for the edit executor functions and the SurgicalEditor wrapper.
"""

import pytest

from latex_edit_engine.core.surgical_editor.edit_executor import (
    SurgicalEditor,
    add_content_to_section,
    create_section,
    delete_section,
    replace_section,
)
from latex_edit_engine.core.surgical_editor.line_scanner import scan
from latex_edit_engine.core.surgical_editor.models import (
    EditAction,
    InsertionPoint,
    SectionEditResult,
    SectionNotFound,
)
from latex_edit_engine.core.surgical_editor.section_locator import locate

DOCUMENT = (
    "\\documentclass{article}\n"
    "\\begin{document}\n"
    "\\section{Introduction}\n"
    "Hello.\n"
    "\\section{Methods}\n"
    "We measured.\n"
    "\\section{Conclusion}\n"
    "Done.\n"
    "\\end{document}"
)


def _boundary(text, target):
    return locate(scan(text), text, target)


class TestAddContent:

    def test_add_at_end_grows_by_content_plus_newline(self):
        boundary = _boundary(DOCUMENT, "conclusion")
        result = add_content_to_section(boundary, "  Future work includes X.  ", InsertionPoint.END)

        assert len(result.new_document) == len(DOCUMENT) + len("Future work includes X.") + 1
        assert "Conclusion}\nDone.\nFuture work includes X.\n\\end{document}" in result.new_document
        assert result.action == EditAction.ADD
        assert result.added_content == "Future work includes X."
        assert result.delta_length == len("Future work includes X.") + 1

    def test_affected_range_covers_inserted_content(self):
        boundary = _boundary(DOCUMENT, "methods")
        result = add_content_to_section(boundary, "We also counted.", InsertionPoint.END)

        start, end = result.affected_range.start, result.affected_range.end
        assert result.new_document[start:end] == "We also counted."

    def test_add_at_beginning_goes_after_header(self):
        boundary = _boundary(DOCUMENT, "methods")
        result = add_content_to_section(boundary, "First things first.", InsertionPoint.BEGINNING)

        assert "\\section{Methods}\nFirst things first.\nWe measured.\n\\section{Conclusion}" in result.new_document
        start, end = result.affected_range.start, result.affected_range.end
        assert result.new_document[start:end] == "First things first."
        assert result.insertion_point == InsertionPoint.BEGINNING

    def test_add_at_end_trims_trailing_whitespace(self):
        text = "\\section{Intro}\nBody.\n\n\n\\section{Next}\nN"
        result = add_content_to_section(_boundary(text, "intro"), "More.", InsertionPoint.END)

        assert result.new_document == "\\section{Intro}\nBody.\nMore.\n\\section{Next}\nN"

    def test_surrounding_text_is_untouched(self):
        boundary = _boundary(DOCUMENT, "methods")
        result = add_content_to_section(boundary, "Extra.")

        assert result.new_document.startswith(boundary.before_content)
        assert result.new_document.endswith(boundary.after_content)


class TestDeleteSection:

    def test_delete_then_section_is_gone(self):
        result = delete_section(_boundary(DOCUMENT, "methods"))

        assert "\\section{Methods}" not in result.new_document
        assert "We measured." not in result.new_document
        assert _boundary(result.new_document, "methods") is None
        assert scan(result.new_document).section_titles() == ["Introduction", "Conclusion"]

    def test_delete_reports_removed_content(self):
        boundary = _boundary(DOCUMENT, "methods")
        result = delete_section(boundary)

        assert result.deleted_content == "\\section{Methods}\nWe measured."
        assert result.affected_range.is_empty
        assert result.affected_range.start == boundary.start_pos
        assert result.new_length == len(DOCUMENT) - len(boundary.original_content)


class TestReplaceSection:

    def test_replace_preserves_surrounding_slices(self):
        before = _boundary(DOCUMENT, "methods")
        new_content = "\\section{Methods}\nWe measured twice."
        result = replace_section(before, new_content)

        after = _boundary(result.new_document, "methods")
        assert after.before_content == before.before_content
        assert after.after_content == before.after_content
        assert after.original_content == new_content

    def test_replace_does_not_infer_header(self):
        result = replace_section(_boundary(DOCUMENT, "methods"), "Just text.")

        assert "\\section{Methods}" not in result.new_document
        assert result.replaced_content == "Just text."
        start, end = result.affected_range.start, result.affected_range.end
        assert result.new_document[start:end] == "Just text."


class TestCreateSection:

    def test_create_before_end_marker(self):
        result = create_section(DOCUMENT, scan(DOCUMENT), "\\section{Discussion}\nWe discuss.", "discussion")

        assert result.new_document.endswith("Done.\n\n\\section{Discussion}\nWe discuss.\n\n\\end{document}")
        assert scan(result.new_document).section_titles() == ["Introduction", "Methods", "Conclusion", "Discussion"]
        start, end = result.affected_range.start, result.affected_range.end
        assert result.new_document[start:end] == "\\section{Discussion}\nWe discuss."

    def test_create_before_bibliography(self):
        text = "\\section{Results}\nR\n\\bibliography{refs}\n\\end{document}"
        result = create_section(text, scan(text), "\\section{Discussion}\nD")

        assert result.new_document == "\\section{Results}\nR\n\n\\section{Discussion}\nD\n\n\\bibliography{refs}\n\\end{document}"

    def test_create_appends_without_marker(self):
        text = "\\section{Results}\nR\n"
        result = create_section(text, scan(text), "\\section{Discussion}\nD")

        assert result.new_document == "\\section{Results}\nR\n\n\\section{Discussion}\nD"

    def test_create_in_empty_document(self):
        result = create_section("", scan(""), "\\section{Discussion}\nD")

        assert result.new_document == "\\section{Discussion}\nD"
        assert result.affected_range.start == 0


class TestSurgicalEditor:

    def setup_method(self):
        self.editor = SurgicalEditor()

    def test_missing_section_returns_not_found(self):
        outcome = self.editor.add_to_section(DOCUMENT, "appendix", "A.")

        assert isinstance(outcome, SectionNotFound)
        assert outcome.target_section == "appendix"
        assert outcome.available_sections == ["Introduction", "Methods", "Conclusion"]

    def test_add_delete_replace_by_name(self):
        added = self.editor.add_to_section(DOCUMENT, "intro", "Welcome.", InsertionPoint.BEGINNING)
        assert isinstance(added, SectionEditResult)
        assert "\\section{Introduction}\nWelcome.\nHello." in added.new_document

        deleted = self.editor.delete(DOCUMENT, "conclusion")
        assert "\\section{Conclusion}" not in deleted.new_document
        assert deleted.new_document.endswith("We measured.\n\n\\end{document}")

        replaced = self.editor.replace(DOCUMENT, "introduction", "\\section{Introduction}\nHi.")
        assert "\\section{Introduction}\nHi.\n\\section{Methods}" in replaced.new_document

    def test_delete_missing_section_leaves_document_alone(self):
        outcome = self.editor.delete(DOCUMENT, "appendix")

        assert isinstance(outcome, SectionNotFound)

    def test_trace_records_locate_decision(self):
        trace = []
        self.editor.replace(DOCUMENT, "method", "X", trace=trace)

        assert trace[0].decision == "contains"

    def test_create(self):
        result = self.editor.create(DOCUMENT, "\\section{Appendix}\nA.", "appendix")

        assert "\\section{Appendix}" in result.new_document
