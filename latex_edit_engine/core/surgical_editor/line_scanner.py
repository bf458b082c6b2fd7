"""
Line scanner component.

Builds a DocumentIndex from raw LaTeX text by classifying each line against an
ordered list of matchers. There is no grammar here: a line either starts with
one of the structural commands we care about or it is plain content belonging
to the preceding section.
"""

import logging
import re
from typing import Callable, List, Optional

from latex_edit_engine.core.surgical_editor.models import (
    DocumentEndMarker,
    DocumentIndex,
    EnvironmentEnd,
    EnvironmentStart,
    Section,
    SectionLevel,
    StructuralElement,
)

logger = logging.getLogger(__name__)

# \section{Title}, \subsection*{Title}, ... (single brace group, no nesting)
SECTION_RE = re.compile(r"^\\(chapter|section|subsection|subsubsection|paragraph)(\*?)\{([^}]+)\}")
BEGIN_RE = re.compile(r"^\\begin\{([^}]+)\}")
END_RE = re.compile(r"^\\end\{([^}]+)\}")
DOCUMENT_END_RE = re.compile(r"^\\(bibliographystyle|bibliography|printbibliography|end\{document\})")

LineMatcher = Callable[[str, int, int, int], Optional[StructuralElement]]


def normalize_title(title: str) -> str:
    """Lower-case and strip a section title or user-supplied section name."""
    return title.lower().strip()


def match_section(trimmed: str, line_index: int, char_start: int, char_end: int) -> Optional[Section]:
    match = SECTION_RE.match(trimmed)
    if not match:
        return None
    level, star, title = match.groups()
    return Section(
        level=SectionLevel(level),
        title=title.strip(),
        normalized_title=normalize_title(title),
        line_index=line_index,
        char_start=char_start,
        char_end=char_end,
        starred=bool(star),
    )


def match_environment_start(trimmed: str, line_index: int, char_start: int, char_end: int) -> Optional[EnvironmentStart]:
    match = BEGIN_RE.match(trimmed)
    if not match:
        return None
    return EnvironmentStart(name=match.group(1), line_index=line_index, char_start=char_start, char_end=char_end)


def match_environment_end(trimmed: str, line_index: int, char_start: int, char_end: int) -> Optional[EnvironmentEnd]:
    match = END_RE.match(trimmed)
    # \end{document} terminates the document body, handled by match_document_end
    if not match or match.group(1).strip() == "document":
        return None
    return EnvironmentEnd(name=match.group(1), line_index=line_index, char_start=char_start, char_end=char_end)


def match_document_end(trimmed: str, line_index: int, char_start: int, char_end: int) -> Optional[DocumentEndMarker]:
    if not DOCUMENT_END_RE.match(trimmed):
        return None
    return DocumentEndMarker(command=trimmed, line_index=line_index, char_start=char_start, char_end=char_end)


# Order matters: the first matcher returning an element wins.
DEFAULT_MATCHERS: List[LineMatcher] = [
    match_section,
    match_environment_start,
    match_environment_end,
    match_document_end,
]


class LineScanner:
    """
    Tokenizes LaTeX text into line-level structural events with exact offsets.

    For every line, char_start is the offset of its first character and
    char_end the offset just past its last character (the newline is not
    included). Lines that match no matcher produce no element.
    """

    def __init__(self, matchers: Optional[List[LineMatcher]] = None):
        self.matchers = matchers or DEFAULT_MATCHERS

    def scan(self, text: str) -> DocumentIndex:
        lines = text.split("\n")
        elements: List[StructuralElement] = []
        cursor = 0

        for line_index, line in enumerate(lines):
            char_start = cursor
            char_end = cursor + len(line)
            element = self.classify_line(line, line_index, char_start, char_end)
            if element is not None:
                elements.append(element)
            cursor = char_end + 1

        index = DocumentIndex(elements=tuple(elements), total_lines=len(lines), total_chars=len(text))
        logger.debug(
            "Scanned %d lines: %d elements, %d sections",
            index.total_lines, len(index.elements), len(index.sections),
        )
        return index

    def classify_line(self, line: str, line_index: int, char_start: int, char_end: int) -> Optional[StructuralElement]:
        trimmed = line.strip()
        if not trimmed.startswith("\\"):
            return None
        for matcher in self.matchers:
            element = matcher(trimmed, line_index, char_start, char_end)
            if element is not None:
                return element
        return None


_default_scanner = LineScanner()


def scan(text: str) -> DocumentIndex:
    """Build a fresh DocumentIndex for `text`."""
    return _default_scanner.scan(text)
