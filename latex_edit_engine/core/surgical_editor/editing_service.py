"""
SurgicalEditingService: the full instruction-to-document editing cycle.

One call runs:
1. Scan the document structure
2. Analyze the instruction's intent
3. Build the editing prompt
4. Ask the generation service for a completion (retrying empty replies)
5. Apply the completion through the orchestrator's strategies
6. Validate the change

Failures never lose the user's document: the outcome then carries the
original text as `fallback_document`.
"""

import logging
import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional

from latex_edit_engine.core.surgical_editor.apply_orchestrator import ApplyOrchestrator
from latex_edit_engine.core.surgical_editor.change_validator import ChangeValidator
from latex_edit_engine.core.surgical_editor.completion_client import CompletionClient
from latex_edit_engine.core.surgical_editor.config import MAX_GENERATION_ATTEMPTS
from latex_edit_engine.core.surgical_editor.line_scanner import scan
from latex_edit_engine.core.surgical_editor.models import (
    EditAction,
    SurgicalEditOutcome,
    TextRange,
    TraceEvent,
)
from latex_edit_engine.core.surgical_editor.prompt_builder import PromptBuilder
from latex_edit_engine.core.surgical_editor.section_locator import SectionLocator

logger = logging.getLogger(__name__)


@dataclass
class EditSessionRecord:
    """History entry for one editing session."""
    session_id: str
    timestamp: str
    instruction: str
    success: bool
    action: Optional[str] = None
    target_section: Optional[str] = None
    strategy: Optional[str] = None
    error: Optional[str] = None
    processing_time_ms: int = 0


class SurgicalEditingService:
    """
    Runs editing sessions against a generation service.

    Sessions on the same document must be serialized by the caller; the
    service itself keeps no document state between calls.
    """

    def __init__(
        self,
        completion_client: Optional[CompletionClient] = None,
        max_attempts: int = MAX_GENERATION_ATTEMPTS,
        validation_enabled: bool = True,
    ):
        """
        Initialize the service.

        Args:
            completion_client: Generation service client (built from the
                environment if None)
            max_attempts: Generation attempts before giving up on empty replies
            validation_enabled: Whether to run the change validator
        """
        self.completion_client = completion_client or CompletionClient()
        self.max_attempts = max_attempts
        self.validation_enabled = validation_enabled

        locator = SectionLocator()
        self.orchestrator = ApplyOrchestrator(locator=locator)
        self.prompt_builder = PromptBuilder(locator=locator)
        self.validator = ChangeValidator(locator=locator)
        self.edit_history: List[EditSessionRecord] = []

    def perform_surgical_edit(
        self,
        document: str,
        instruction: str,
        selection: Optional[TextRange] = None,
        cursor: Optional[int] = None,
    ) -> SurgicalEditOutcome:
        """
        Edit `document` according to `instruction`.

        Args:
            document: Current full document text
            instruction: The user's natural-language instruction
            selection: Active editor selection, if any
            cursor: Last known cursor offset, if any

        Returns:
            SurgicalEditOutcome; on failure `success` is False and
            `fallback_document` holds the unchanged document
        """
        session_id = uuid.uuid4().hex[:12]
        started = time.time()
        logger.info("Starting surgical edit session %s", session_id)

        index = scan(document)
        logger.debug("Structure: %d sections, %d environments", len(index.sections), len(index.environment_starts))

        intent = self.orchestrator.intent_classifier.analyze(instruction, document, index=index, selection=selection)
        creating_section = self.validator.is_creating_section(document, intent)
        trace = [TraceEvent("session", "started", {"session_id": session_id, "sections": len(index.sections)})]

        try:
            prompt = self.prompt_builder.build(
                instruction,
                document,
                selection,
                intent.target_section,
                intent.action,
                intent.insertion_point,
                index=index,
            )
            ai_response = self._generate(prompt, allow_empty=intent.action == EditAction.DELETE)
            result = self.orchestrator.apply(
                instruction, document, ai_response, selection=selection, cursor=cursor, intent=intent
            )
        except (RuntimeError, ValueError) as e:
            logger.error("Surgical edit session %s failed: %s", session_id, e)
            trace.append(TraceEvent("session", "failed", {"error": str(e)}))
            self._record(session_id, instruction, started, success=False, intent=intent, error=str(e))
            return SurgicalEditOutcome(
                success=False,
                session_id=session_id,
                intent=intent,
                error=str(e),
                fallback_document=document,
                trace=trace,
            )

        trace.extend(result.trace)
        validation = None
        if self.validation_enabled:
            validation = self.validator.validate(
                document, result.new_document, intent, creating_section=creating_section
            )
            if not validation.overall_valid:
                logger.warning("Session %s validation issues: %s", session_id, "; ".join(validation.issues))

        self._record(session_id, instruction, started, success=True, intent=intent, strategy=result.strategy)
        logger.info("Surgical edit session %s completed via '%s'", session_id, result.strategy)
        return SurgicalEditOutcome(
            success=True,
            session_id=session_id,
            new_document=result.new_document,
            affected_range=result.affected_range,
            intent=intent,
            strategy=result.strategy,
            ai_response=ai_response,
            validation=validation,
            trace=trace,
        )

    def _generate(self, prompt: str, allow_empty: bool = False) -> str:
        """
        Ask the generation service, retrying when the reply is empty.

        Raises:
            RuntimeError: If the service fails or keeps returning nothing
        """
        for attempt in range(1, self.max_attempts + 1):
            response = self.completion_client.complete(prompt)
            if response and response.strip():
                return response
            if allow_empty:
                return ""
            logger.warning("Empty reply from generation service (attempt %d/%d)", attempt, self.max_attempts)
        raise RuntimeError(f"Generation service returned an empty reply after {self.max_attempts} attempts")

    def _record(self, session_id, instruction, started, success, intent=None, strategy=None, error=None) -> None:
        self.edit_history.append(EditSessionRecord(
            session_id=session_id,
            timestamp=datetime.now(timezone.utc).isoformat(),
            instruction=instruction,
            success=success,
            action=intent.action.value if intent else None,
            target_section=intent.target_section if intent else None,
            strategy=strategy,
            error=error,
            processing_time_ms=int((time.time() - started) * 1000),
        ))

    def get_edit_history(self) -> List[EditSessionRecord]:
        return list(self.edit_history)

    def clear_history(self) -> None:
        self.edit_history = []
