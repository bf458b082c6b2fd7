"""
Apply orchestrator component.

Top-level entry point of the surgical editor. It classifies the instruction,
resolves the target section against a freshly scanned index and applies the
generated completion through the first strategy that can handle it:

1. section        - structural edit of the named section
2. deletion       - confirmed deletion without a named section
3. selection      - replace the user's active selection
4. cursor         - insert at the last known cursor position
5. document_start - insert at offset 0, the universal last resort

Each strategy returns None when it cannot act, which hands the request to the
next one. A generated answer is therefore never discarded just because
structural targeting failed.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

from latex_edit_engine.core.surgical_editor.completion_parser import (
    ensure_section_header,
    is_deletion_confirmed,
    normalize_completion,
    starts_with_section_header,
    strip_leading_section_header,
)
from latex_edit_engine.core.surgical_editor.edit_executor import (
    add_content_to_section,
    create_section,
    delete_section,
    replace_section,
)
from latex_edit_engine.core.surgical_editor.intent_classifier import IntentClassifier
from latex_edit_engine.core.surgical_editor.line_scanner import scan
from latex_edit_engine.core.surgical_editor.models import (
    ApplyResult,
    DocumentIndex,
    EditAction,
    EditIntent,
    SectionEditResult,
    TextRange,
    TraceEvent,
)
from latex_edit_engine.core.surgical_editor.section_locator import SectionLocator

logger = logging.getLogger(__name__)


@dataclass
class ApplyContext:
    """Inputs and derived state shared by the strategies of one apply call."""
    prompt: str
    document: str
    completion: str
    content: str
    intent: EditIntent
    index: DocumentIndex
    selection: Optional[TextRange] = None
    cursor: Optional[int] = None
    trace: List[TraceEvent] = field(default_factory=list)

    def note(self, stage: str, decision: str, **details) -> None:
        self.trace.append(TraceEvent(stage, decision, details))


class ApplyOrchestrator:
    """
    Sequences intent classification, section location and editing.

    The orchestrator is stateless: every call rebuilds the document index from
    the text it receives, so callers must pass the latest document and
    serialize edit cycles on the same document themselves.
    """

    def __init__(self, locator: Optional[SectionLocator] = None):
        self.locator = locator or SectionLocator()
        self.intent_classifier = IntentClassifier(locator=self.locator)
        self.strategies: List[Tuple[str, Callable[[ApplyContext], Optional[ApplyResult]]]] = [
            ("section", self._apply_to_section),
            ("deletion", self._apply_deletion),
            ("selection", self._apply_to_selection),
            ("cursor", self._apply_at_cursor),
            ("document_start", self._apply_at_document_start),
        ]

    def apply(
        self,
        prompt: str,
        document: str,
        completion: str,
        selection: Optional[TextRange] = None,
        cursor: Optional[int] = None,
        intent: Optional[EditIntent] = None,
    ) -> ApplyResult:
        """
        Apply a generated completion to `document` according to `prompt`.

        Args:
            prompt: The user's instruction
            document: Current full document text
            completion: Raw reply of the generation service
            selection: Active editor selection, if any
            cursor: Last known cursor offset, if any
            intent: Pre-computed intent (classified from `prompt` when omitted)

        Returns:
            ApplyResult with the new document and the affected range
        """
        index = scan(document)
        if intent is None:
            intent = self.intent_classifier.analyze(prompt, document, index=index, selection=selection)

        ctx = ApplyContext(
            prompt=prompt,
            document=document,
            completion=completion or "",
            content=normalize_completion(completion or ""),
            intent=intent,
            index=index,
            selection=selection,
            cursor=cursor,
        )
        ctx.note("classify", intent.action.value, insertion_point=intent.insertion_point.value,
                 target_section=intent.target_section, creation=intent.is_creation_request)

        for name, strategy in self.strategies:
            result = strategy(ctx)
            if result is not None:
                ctx.note("apply", name, start=result.affected_range.start, end=result.affected_range.end)
                logger.info(
                    "Applied %s via '%s' strategy (%d -> %d chars)",
                    intent.action.value, name, len(document), len(result.new_document),
                )
                return result
            ctx.note("apply", "skipped", strategy=name)

        # document_start always applies
        raise RuntimeError("No apply strategy produced a result")

    # ---- Strategies ----

    def _apply_to_section(self, ctx: ApplyContext) -> Optional[ApplyResult]:
        target = ctx.intent.target_section
        if not target:
            return None

        action = ctx.intent.action

        if action == EditAction.DELETE:
            if not is_deletion_confirmed(ctx.completion):
                ctx.note("section", "deletion_not_confirmed", target=target)
                return None
            boundary = self.locator.locate(ctx.index, ctx.document, target, trace=ctx.trace)
            if boundary is None:
                return None
            return self._from_edit(ctx, delete_section(boundary), "section")

        if action in (EditAction.ADD, EditAction.EXPAND):
            boundary = self.locator.locate(ctx.index, ctx.document, target, trace=ctx.trace)
            if boundary is not None:
                content = strip_leading_section_header(ctx.content, boundary.element)
                if not content:
                    ctx.note("section", "empty_content", target=target)
                    return None
                edit = add_content_to_section(boundary, content, ctx.intent.insertion_point)
                return self._from_edit(ctx, edit, "section")
            if ctx.intent.is_creation_request and ctx.content:
                section_content = ensure_section_header(ctx.content, target)
                ctx.note("section", "create", target=target)
                edit = create_section(ctx.document, ctx.index, section_content, section_name=target)
                return self._from_edit(ctx, edit, "section")
            return None

        if action == EditAction.REPLACE:
            boundary = self.locator.locate(ctx.index, ctx.document, target, trace=ctx.trace)
            if boundary is None:
                return None
            return self._from_edit(ctx, replace_section(boundary, ctx.content), "section")

        # IMPROVE / FIX: only a complete rewritten section can replace the original
        if not starts_with_section_header(ctx.content):
            ctx.note("section", "no_section_header", target=target)
            return None
        boundary = self.locator.locate(ctx.index, ctx.document, target, trace=ctx.trace)
        if boundary is None:
            return None
        return self._from_edit(ctx, replace_section(boundary, ctx.content), "section")

    def _apply_deletion(self, ctx: ApplyContext) -> Optional[ApplyResult]:
        if ctx.intent.action != EditAction.DELETE or ctx.intent.target_section:
            return None
        if ctx.completion.strip() and not is_deletion_confirmed(ctx.completion):
            return None

        selection = self._usable_selection(ctx)
        if selection is not None:
            new_document = ctx.document[:selection.start] + ctx.document[selection.end:]
            return self._result(ctx, new_document, TextRange(selection.start, selection.start), "deletion")

        logger.warning("Confirmed deletion without section or selection: clearing the whole document")
        return self._result(ctx, "", TextRange(0, 0), "deletion")

    def _apply_to_selection(self, ctx: ApplyContext) -> Optional[ApplyResult]:
        selection = self._usable_selection(ctx)
        if selection is None:
            return None
        new_document = ctx.document[:selection.start] + ctx.content + ctx.document[selection.end:]
        return self._result(ctx, new_document, TextRange(selection.start, selection.start + len(ctx.content)), "selection")

    def _apply_at_cursor(self, ctx: ApplyContext) -> Optional[ApplyResult]:
        if ctx.cursor is None:
            return None
        position = min(max(ctx.cursor, 0), len(ctx.document))
        return self._insert_at(ctx, position, "cursor")

    def _apply_at_document_start(self, ctx: ApplyContext) -> Optional[ApplyResult]:
        logger.warning("No section, selection or cursor available: inserting at document start")
        return self._insert_at(ctx, 0, "document_start")

    # ---- Helpers ----

    def _usable_selection(self, ctx: ApplyContext) -> Optional[TextRange]:
        selection = ctx.selection
        if selection is None or selection.is_empty:
            return None
        if not selection.fits(ctx.document):
            ctx.note("selection", "out_of_bounds", start=selection.start, end=selection.end)
            return None
        return selection

    def _insert_at(self, ctx: ApplyContext, position: int, strategy: str) -> ApplyResult:
        new_document = ctx.document[:position] + ctx.content + ctx.document[position:]
        return self._result(ctx, new_document, TextRange(position, position + len(ctx.content)), strategy)

    def _from_edit(self, ctx: ApplyContext, edit: SectionEditResult, strategy: str) -> ApplyResult:
        return self._result(ctx, edit.new_document, edit.affected_range, strategy)

    def _result(self, ctx: ApplyContext, new_document: str, affected_range: TextRange, strategy: str) -> ApplyResult:
        return ApplyResult(
            new_document=new_document,
            affected_range=affected_range,
            action=ctx.intent.action,
            target_section=ctx.intent.target_section,
            insertion_point=ctx.intent.insertion_point,
            strategy=strategy,
            trace=ctx.trace,
        )


_default_orchestrator = ApplyOrchestrator()


def smart_apply(
    prompt: str,
    document: str,
    completion: str,
    selection: Optional[TextRange] = None,
    cursor: Optional[int] = None,
) -> ApplyResult:
    """Module-level shortcut for ApplyOrchestrator().apply()."""
    return _default_orchestrator.apply(prompt, document, completion, selection=selection, cursor=cursor)
