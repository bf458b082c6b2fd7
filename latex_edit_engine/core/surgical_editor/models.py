"""
Data models for the surgical editor.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union


# --- Enums ---

class SectionLevel(Enum):
    CHAPTER = "chapter"
    SECTION = "section"
    SUBSECTION = "subsection"
    SUBSUBSECTION = "subsubsection"
    PARAGRAPH = "paragraph"


class EditAction(Enum):
    """
    Edit actions a user instruction can resolve to.

    - ADD: insert new content (also covers "write a ..." section creation)
    - DELETE: remove a section or the selection
    - REPLACE: swap a section or the selection for new content
    - EXPAND: add more content to an existing section
    - FIX: correct the targeted content
    - IMPROVE: fallback for vague requests, rewrite in place
    """
    ADD = "add"
    DELETE = "delete"
    REPLACE = "replace"
    EXPAND = "expand"
    FIX = "fix"
    IMPROVE = "improve"


class InsertionPoint(Enum):
    BEGINNING = "beginning"
    END = "end"


class MatchTier(Enum):
    """Tier at which the section locator matched a target name."""
    EXACT = "exact"
    CONTAINS = "contains"
    WORD_OVERLAP = "word_overlap"


# --- Structural elements ---

def _check_offsets(char_start: int, char_end: int) -> None:
    if char_start < 0 or char_start > char_end:
        raise ValueError(f"Invalid element offsets: char_start={char_start}, char_end={char_end}")


@dataclass(frozen=True)
class Section:
    """A sectioning command line (\\section{...}, \\subsection*{...}, ...)."""
    level: SectionLevel
    title: str
    normalized_title: str
    line_index: int
    char_start: int
    char_end: int
    starred: bool = False

    def __post_init__(self):
        _check_offsets(self.char_start, self.char_end)


@dataclass(frozen=True)
class EnvironmentStart:
    """A \\begin{name} line."""
    name: str
    line_index: int
    char_start: int
    char_end: int

    def __post_init__(self):
        _check_offsets(self.char_start, self.char_end)


@dataclass(frozen=True)
class EnvironmentEnd:
    """An \\end{name} line (other than \\end{document})."""
    name: str
    line_index: int
    char_start: int
    char_end: int

    def __post_init__(self):
        _check_offsets(self.char_start, self.char_end)


@dataclass(frozen=True)
class DocumentEndMarker:
    """A bibliography command or \\end{document} line."""
    command: str
    line_index: int
    char_start: int
    char_end: int

    def __post_init__(self):
        _check_offsets(self.char_start, self.char_end)


StructuralElement = Union[Section, EnvironmentStart, EnvironmentEnd, DocumentEndMarker]


@dataclass(frozen=True)
class DocumentIndex:
    """
    Ordered structural elements of one document snapshot.

    Offsets point into the exact text the index was built from. The index must
    be rebuilt after every edit; it is never patched or reused.
    """
    elements: Tuple[StructuralElement, ...]
    total_lines: int
    total_chars: int

    @property
    def sections(self) -> List[Section]:
        return [e for e in self.elements if isinstance(e, Section)]

    @property
    def environment_starts(self) -> List[EnvironmentStart]:
        return [e for e in self.elements if isinstance(e, EnvironmentStart)]

    @property
    def environment_ends(self) -> List[EnvironmentEnd]:
        return [e for e in self.elements if isinstance(e, EnvironmentEnd)]

    @property
    def document_end_markers(self) -> List[DocumentEndMarker]:
        return [e for e in self.elements if isinstance(e, DocumentEndMarker)]

    def section_titles(self) -> List[str]:
        return [s.title for s in self.sections]

    def next_section_after(self, section: Section) -> Optional[Section]:
        """Return the section following `section` in document order, if any."""
        sections = self.sections
        position = sections.index(section)
        if position + 1 < len(sections):
            return sections[position + 1]
        return None

    def first_end_marker_after(self, char_pos: int) -> Optional[DocumentEndMarker]:
        for marker in self.document_end_markers:
            if marker.char_start > char_pos:
                return marker
        return None


@dataclass(frozen=True)
class SectionBoundary:
    """
    Exact character span of a located section.

    before_content + original_content + after_content always equals the
    document the boundary was computed from.
    """
    section_name: str
    start_pos: int
    end_pos: int
    original_content: str
    before_content: str
    after_content: str
    element: Section
    match_tier: MatchTier

    @property
    def document(self) -> str:
        return self.before_content + self.original_content + self.after_content


@dataclass(frozen=True)
class SectionNotFound:
    """Explicit result for section operations whose target could not be located."""
    target_section: str
    available_sections: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class TextRange:
    """Half-open [start, end) range of character offsets."""
    start: int
    end: int

    def __post_init__(self):
        if self.start < 0 or self.start > self.end:
            raise ValueError(f"Invalid range: start={self.start}, end={self.end}")

    @property
    def is_empty(self) -> bool:
        return self.start == self.end

    def fits(self, text: str) -> bool:
        return self.end <= len(text)


# --- Results ---

@dataclass
class TraceEvent:
    """One decision taken while classifying, locating or applying an edit."""
    stage: str
    decision: str
    details: Dict[str, Any] = field(default_factory=dict)


@dataclass
class EditIntent:
    """Everything the intent classifier derives from a user instruction."""
    action: EditAction
    insertion_point: InsertionPoint
    target_section: Optional[str]
    is_creation_request: bool
    has_selection: bool = False
    complexity: str = "simple"

    @property
    def is_structural_change(self) -> bool:
        return self.target_section is not None and self.action in (
            EditAction.DELETE, EditAction.REPLACE, EditAction.ADD
        )


@dataclass
class SectionEditResult:
    """Outcome of one edit executor operation."""
    new_document: str
    original_length: int
    new_length: int
    section: str
    action: EditAction
    affected_range: TextRange
    added_content: Optional[str] = None
    deleted_content: Optional[str] = None
    replaced_content: Optional[str] = None
    insertion_point: Optional[InsertionPoint] = None

    @property
    def delta_length(self) -> int:
        return self.new_length - self.original_length


@dataclass
class ApplyResult:
    """Final output of the apply orchestrator."""
    new_document: str
    affected_range: TextRange
    action: EditAction
    target_section: Optional[str]
    insertion_point: InsertionPoint
    strategy: str
    trace: List[TraceEvent] = field(default_factory=list)


@dataclass
class ValidationReport:
    """Post-edit checks on the new document."""
    is_surgical: bool
    syntax_valid: bool
    structure_valid: bool
    length_delta: int
    percentage_change: float
    issues: List[str] = field(default_factory=list)

    @property
    def overall_valid(self) -> bool:
        return self.is_surgical and self.syntax_valid and self.structure_valid


@dataclass
class SurgicalEditOutcome:
    """Result of a full generate-and-apply cycle of the editing service."""
    success: bool
    session_id: str
    new_document: Optional[str] = None
    affected_range: Optional[TextRange] = None
    intent: Optional[EditIntent] = None
    strategy: Optional[str] = None
    ai_response: Optional[str] = None
    validation: Optional[ValidationReport] = None
    error: Optional[str] = None
    fallback_document: Optional[str] = None
    trace: List[TraceEvent] = field(default_factory=list)
