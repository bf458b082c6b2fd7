"""
Section locator component.

Resolves a user-named section ("intro", "literature review", ...) against a
DocumentIndex and computes the exact character boundary of the matched
section.

Matching is tiered. Each tier scans every section in document order and the
first tier with a candidate wins:

1. EXACT: normalized title equals the normalized target
2. CONTAINS: either string contains the other
3. WORD_OVERLAP: shared words cover the whole target, or at least half of the
   section title

Within a tier the earliest section wins. There is no scoring beyond tier and
document order, so a permissive tier can never override a stricter hit found
later in the document. Word-overlap ties broken by document order are a known
coarse heuristic.
"""

import logging
from typing import Callable, List, Optional, Tuple

from latex_edit_engine.core.surgical_editor.line_scanner import normalize_title
from latex_edit_engine.core.surgical_editor.models import (
    DocumentIndex,
    MatchTier,
    Section,
    SectionBoundary,
    TraceEvent,
)

logger = logging.getLogger(__name__)


class BoundaryReconstructionError(RuntimeError):
    """Raised when a computed boundary does not reconstruct its source text."""


def matches_exact(section: Section, target: str) -> bool:
    return section.normalized_title == target


def matches_contains(section: Section, target: str) -> bool:
    return target in section.normalized_title or section.normalized_title in target


def matches_word_overlap(section: Section, target: str) -> bool:
    section_words = set(section.normalized_title.split())
    target_words = set(target.split())
    common = section_words & target_words
    if not common:
        return False
    return len(common) >= len(target_words) or len(common) >= len(section_words) / 2


MATCH_TIERS: List[Tuple[MatchTier, Callable[[Section, str], bool]]] = [
    (MatchTier.EXACT, matches_exact),
    (MatchTier.CONTAINS, matches_contains),
    (MatchTier.WORD_OVERLAP, matches_word_overlap),
]


class SectionLocator:
    """Finds sections by fuzzy name and slices the document around them."""

    def find_section(self, index: DocumentIndex, target_name: str) -> Optional[Tuple[Section, MatchTier]]:
        """
        Return the matched section and the tier it matched at, or None.

        Args:
            index: Index of the current document
            target_name: Section name as phrased by the user
        """
        target = normalize_title(target_name)
        if not target:
            return None

        sections = index.sections
        for tier, predicate in MATCH_TIERS:
            for section in sections:
                if predicate(section, target):
                    return section, tier
        return None

    def locate(
        self,
        index: DocumentIndex,
        text: str,
        target_name: str,
        trace: Optional[List[TraceEvent]] = None,
    ) -> Optional[SectionBoundary]:
        """
        Locate `target_name` in `text` and compute its boundary.

        Returns None when no section matches at any tier.
        """
        if index.total_chars != len(text):
            raise ValueError("DocumentIndex was built from a different text; rescan before locating")

        found = self.find_section(index, target_name)
        if found is None:
            logger.info("No section found for '%s' (available: %s)", target_name, index.section_titles())
            if trace is not None:
                trace.append(TraceEvent("locate", "not_found", {
                    "target": target_name,
                    "available_sections": index.section_titles(),
                }))
            return None

        section, tier = found
        boundary = self.build_boundary(index, text, section, tier)
        logger.debug(
            "Located '%s' as '%s' (%s) at %d-%d",
            target_name, section.title, tier.value, boundary.start_pos, boundary.end_pos,
        )
        if trace is not None:
            trace.append(TraceEvent("locate", tier.value, {
                "target": target_name,
                "section": section.title,
                "start_pos": boundary.start_pos,
                "end_pos": boundary.end_pos,
            }))
        return boundary

    def build_boundary(self, index: DocumentIndex, text: str, section: Section, tier: MatchTier) -> SectionBoundary:
        """
        Compute the span of `section`.

        The section ends just before the newline preceding the next section or,
        for the last section, the first document end marker after it. Without
        either it runs to the end of the text.
        """
        start_pos = section.char_start

        next_section = index.next_section_after(section)
        if next_section is not None:
            end_pos = next_section.char_start - 1
        else:
            marker = index.first_end_marker_after(section.char_start)
            end_pos = marker.char_start - 1 if marker is not None else len(text)
        end_pos = max(end_pos, start_pos)

        boundary = SectionBoundary(
            section_name=section.title,
            start_pos=start_pos,
            end_pos=end_pos,
            original_content=text[start_pos:end_pos],
            before_content=text[:start_pos],
            after_content=text[end_pos:],
            element=section,
            match_tier=tier,
        )
        if boundary.document != text:
            raise BoundaryReconstructionError(
                f"Boundary for '{section.title}' ({start_pos}-{end_pos}) does not reconstruct the document"
            )
        return boundary


_default_locator = SectionLocator()


def locate(
    index: DocumentIndex,
    text: str,
    target_name: str,
    trace: Optional[List[TraceEvent]] = None,
) -> Optional[SectionBoundary]:
    """Module-level shortcut for SectionLocator().locate()."""
    return _default_locator.locate(index, text, target_name, trace=trace)
