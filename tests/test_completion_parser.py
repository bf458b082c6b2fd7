"""
Tests for completion normalization helpers.
"""

from latex_edit_engine.core.surgical_editor.completion_parser import (
    ensure_section_header,
    extract_latex_code,
    format_section_title,
    has_section_header,
    is_deletion_confirmed,
    normalize_completion,
    starts_with_section_header,
    strip_leading_section_header,
)
from latex_edit_engine.core.surgical_editor.models import Section, SectionLevel


class TestExtractLatexCode:

    def test_fenced_latex_block(self):
        reply = "Here you go:\n```latex\n\\section{A}\nBody\n```\nHope it helps!"
        assert extract_latex_code(reply) == "\\section{A}\nBody"

    def test_tex_and_bare_fences(self):
        assert extract_latex_code("```tex\n\\emph{x}\n```") == "\\emph{x}"
        assert extract_latex_code("```\nplain\n```") == "plain"

    def test_first_block_wins(self):
        reply = "```latex\nfirst\n```\nand\n```latex\nsecond\n```"
        assert extract_latex_code(reply) == "first"

    def test_short_unfenced_reply_with_commands(self):
        assert extract_latex_code("  We use \\textbf{bold} here.  ") == "We use \\textbf{bold} here."

    def test_long_unfenced_reply_is_prose(self):
        reply = "Consider \\cite{x}. " + "word " * 200
        assert extract_latex_code(reply) is None

    def test_prose_without_commands(self):
        assert extract_latex_code("Sure, happy to help.") is None
        assert extract_latex_code("") is None

    def test_normalize_falls_back_to_trimmed_reply(self):
        assert normalize_completion("  Future work includes X.\n") == "Future work includes X."
        assert normalize_completion("```latex\nX\n```") == "X"
        assert normalize_completion(None) == ""


class TestSectionHeaders:

    def test_strip_leading_header(self):
        assert strip_leading_section_header("\n\\section{Conclusion}\nText\nMore") == "Text\nMore"

    def test_strip_keeps_text_after_header_on_same_line(self):
        assert strip_leading_section_header("\\section*{Conclusion} Inline\nMore") == "Inline\nMore"

    def test_strip_without_header(self):
        assert strip_leading_section_header("  Text\n\\section{Later}") == "Text\n\\section{Later}"

    def test_strip_for_section_drops_only_its_own_header(self):
        discussion = Section(
            level=SectionLevel.SECTION,
            title="Discussion",
            normalized_title="discussion",
            line_index=0,
            char_start=0,
            char_end=len("\\section{Discussion}"),
        )

        assert strip_leading_section_header("\\section{Discussion}\nMore.", discussion) == "More."
        assert strip_leading_section_header("\\subsection*{discussion}\nMore.", discussion) == "More."
        assert (
            strip_leading_section_header("\\subsection{Limitations}\nSmall sample.", discussion)
            == "\\subsection{Limitations}\nSmall sample."
        )

    def test_starts_with_section_header(self):
        assert starts_with_section_header("  \\subsection*{Setup}\nBody")
        assert not starts_with_section_header("Body\n\\section{Late}")

    def test_has_section_header(self):
        assert has_section_header("Lead-in \\section{Future Work}\nX", "future work")
        assert has_section_header("\\section{Outlook}\nX", "future work")
        assert not has_section_header("Just text", "future work")

    def test_format_section_title(self):
        assert format_section_title("related work") == "Related Work"
        assert format_section_title("intro") == "Introduction"
        assert format_section_title("appendix") == "Appendix"

    def test_ensure_section_header(self):
        assert ensure_section_header("Body", "related work") == "\\section{Related Work}\n\nBody"
        assert ensure_section_header("\\section{Related Work}\nBody", "related work") == "\\section{Related Work}\nBody"


class TestDeletionConfirmation:

    def test_confirmations(self):
        assert is_deletion_confirmed("I've deleted the Methods section")
        assert is_deletion_confirmed("Done - I have deleted it.")
        assert is_deletion_confirmed("I deleted the section as requested.")

    def test_non_confirmations(self):
        assert not is_deletion_confirmed("Sure, here is a rewrite.")
        assert not is_deletion_confirmed("I've removed the typo from the introduction.")
        assert not is_deletion_confirmed("")
        assert not is_deletion_confirmed(None)
