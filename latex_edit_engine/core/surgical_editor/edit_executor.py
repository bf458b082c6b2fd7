"""
Edit executor component.

Pure functions that splice content into a document around a SectionBoundary.
Only the section slice changes: before_content and after_content are copied
through untouched, so every byte outside the edited region is preserved.
"""

import logging
from typing import List, Optional, Union

from latex_edit_engine.core.surgical_editor.line_scanner import scan
from latex_edit_engine.core.surgical_editor.models import (
    DocumentIndex,
    EditAction,
    InsertionPoint,
    SectionBoundary,
    SectionEditResult,
    SectionNotFound,
    TextRange,
    TraceEvent,
)
from latex_edit_engine.core.surgical_editor.section_locator import SectionLocator

logger = logging.getLogger(__name__)

SECTION_SEPARATOR = "\n\n"


def add_content_to_section(
    boundary: SectionBoundary,
    new_content: str,
    insertion_point: InsertionPoint = InsertionPoint.END,
) -> SectionEditResult:
    """
    Add `new_content` to the located section.

    BEGINNING puts the content right after the section header line; END
    appends it after the section's trailing whitespace has been trimmed.
    """
    content = new_content.strip()
    original = boundary.original_content

    if insertion_point == InsertionPoint.BEGINNING:
        header_line, _, rest = original.partition("\n")
        updated_section = header_line + "\n" + content + "\n" + rest
        content_offset = len(header_line) + 1
    else:
        kept = original.rstrip()
        updated_section = kept + "\n" + content
        content_offset = len(kept) + 1

    new_document = boundary.before_content + updated_section + boundary.after_content
    start = boundary.start_pos + content_offset

    logger.info(
        "Added %d chars to '%s' at %s (%d -> %d chars)",
        len(content), boundary.section_name, insertion_point.value,
        len(boundary.document), len(new_document),
    )
    return SectionEditResult(
        new_document=new_document,
        original_length=len(boundary.document),
        new_length=len(new_document),
        section=boundary.section_name,
        action=EditAction.ADD,
        affected_range=TextRange(start, start + len(content)),
        added_content=content,
        insertion_point=insertion_point,
    )


def delete_section(boundary: SectionBoundary) -> SectionEditResult:
    """Excise the whole section, header included."""
    new_document = boundary.before_content + boundary.after_content

    logger.info("Deleted section '%s' (%d chars removed)", boundary.section_name, len(boundary.original_content))
    return SectionEditResult(
        new_document=new_document,
        original_length=len(boundary.document),
        new_length=len(new_document),
        section=boundary.section_name,
        action=EditAction.DELETE,
        affected_range=TextRange(boundary.start_pos, boundary.start_pos),
        deleted_content=boundary.original_content,
    )


def replace_section(boundary: SectionBoundary, new_section_content: str) -> SectionEditResult:
    """
    Swap the section for `new_section_content`.

    No header is inferred: callers that want one must include it.
    """
    new_document = boundary.before_content + new_section_content + boundary.after_content

    logger.info(
        "Replaced section '%s' (%d -> %d chars)",
        boundary.section_name, len(boundary.original_content), len(new_section_content),
    )
    return SectionEditResult(
        new_document=new_document,
        original_length=len(boundary.document),
        new_length=len(new_document),
        section=boundary.section_name,
        action=EditAction.REPLACE,
        affected_range=TextRange(boundary.start_pos, boundary.start_pos + len(new_section_content)),
        replaced_content=new_section_content,
    )


def create_section(text: str, index: DocumentIndex, section_content: str, section_name: str = "") -> SectionEditResult:
    """
    Insert a brand new section.

    The section goes right before the first document end marker
    (\\bibliography, \\end{document}, ...) or, failing that, at the end of the
    document, separated by a blank line on each side.
    """
    content = section_content.strip()
    markers = index.document_end_markers

    if markers:
        insert_pos = markers[0].char_start
        before = text[:insert_pos].rstrip()
        after = text[insert_pos:]
        prefix = before + SECTION_SEPARATOR if before else ""
        new_document = prefix + content + SECTION_SEPARATOR + after
    else:
        before = text.rstrip()
        prefix = before + SECTION_SEPARATOR if before else ""
        new_document = prefix + content

    start = len(prefix)
    logger.info("Created section '%s' at offset %d", section_name or content.split("\n", 1)[0], start)
    return SectionEditResult(
        new_document=new_document,
        original_length=len(text),
        new_length=len(new_document),
        section=section_name,
        action=EditAction.ADD,
        affected_range=TextRange(start, start + len(content)),
        added_content=content,
    )


EditOutcome = Union[SectionEditResult, SectionNotFound]


class SurgicalEditor:
    """
    Section edits addressed by name.

    Each call rescans the given document, locates the section and runs the
    matching executor function. A missing section yields SectionNotFound.
    """

    def __init__(self, locator: Optional[SectionLocator] = None):
        self.locator = locator or SectionLocator()

    def _locate(self, document: str, target_section: str, trace: Optional[List[TraceEvent]]):
        index = scan(document)
        boundary = self.locator.locate(index, document, target_section, trace=trace)
        if boundary is None:
            return None, SectionNotFound(target_section=target_section, available_sections=index.section_titles())
        return boundary, None

    def add_to_section(
        self,
        document: str,
        target_section: str,
        new_content: str,
        insertion_point: InsertionPoint = InsertionPoint.END,
        trace: Optional[List[TraceEvent]] = None,
    ) -> EditOutcome:
        boundary, not_found = self._locate(document, target_section, trace)
        if not_found is not None:
            return not_found
        return add_content_to_section(boundary, new_content, insertion_point)

    def delete(self, document: str, target_section: str, trace: Optional[List[TraceEvent]] = None) -> EditOutcome:
        boundary, not_found = self._locate(document, target_section, trace)
        if not_found is not None:
            return not_found
        return delete_section(boundary)

    def replace(
        self,
        document: str,
        target_section: str,
        new_section_content: str,
        trace: Optional[List[TraceEvent]] = None,
    ) -> EditOutcome:
        boundary, not_found = self._locate(document, target_section, trace)
        if not_found is not None:
            return not_found
        return replace_section(boundary, new_section_content)

    def create(self, document: str, section_content: str, section_name: str = "") -> SectionEditResult:
        return create_section(document, scan(document), section_content, section_name)
