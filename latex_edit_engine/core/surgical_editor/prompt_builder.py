"""
Prompt construction for the generation service.

Packages (user prompt, selected text, document, target section, action,
insertion point) into one natural-language instruction, picking a template per
action/target combination, and appends the surgical editing instructions.
"""

import logging
from typing import List, Optional

from latex_edit_engine.core.surgical_editor.completion_parser import format_section_title
from latex_edit_engine.core.surgical_editor.config import DEFAULT_CONTEXT_TAIL, EDITOR_CONTEXT_WINDOW
from latex_edit_engine.core.surgical_editor.intent_classifier import should_create_new_section
from latex_edit_engine.core.surgical_editor.line_scanner import scan
from latex_edit_engine.core.surgical_editor.models import (
    DocumentIndex,
    EditAction,
    InsertionPoint,
    TextRange,
)
from latex_edit_engine.core.surgical_editor.prompts import (
    DEFAULT_PROMPT_TEMPLATE,
    SECTION_ADD_INSTRUCTION,
    SECTION_ADD_OUTPUT_INSTRUCTION,
    SECTION_CREATE_PROMPT_TEMPLATE,
    SECTION_DELETE_PROMPT_TEMPLATE,
    SECTION_EDIT_PROMPT_TEMPLATE,
    SECTION_FULL_OUTPUT_INSTRUCTION,
    SECTION_IMPROVE_INSTRUCTION,
    SECTION_REPLACE_INSTRUCTION,
    SELECTION_ACTION_INSTRUCTIONS,
    SELECTION_DEFAULT_INSTRUCTION,
    SELECTION_DELETE_PROMPT_TEMPLATE,
    SELECTION_EDIT_PROMPT_TEMPLATE,
    SURGICAL_ACTION_INSTRUCTIONS,
    SURGICAL_ADD_CONTENT_INSTRUCTIONS,
    SURGICAL_ADD_SECTION_INSTRUCTIONS,
    SURGICAL_INSTRUCTIONS_FOOTER,
    SURGICAL_INSTRUCTIONS_HEADER,
)
from latex_edit_engine.core.surgical_editor.section_locator import SectionLocator

logger = logging.getLogger(__name__)

SECTION_EXCERPT_LENGTH = 200


def get_editor_context(document: str, selection: Optional[TextRange], window: int = EDITOR_CONTEXT_WINDOW) -> str:
    """Text around the selection, or the whole document when nothing is selected."""
    if selection is None or selection.is_empty:
        return document
    start = max(0, selection.start - window)
    end = min(len(document), selection.end + window)
    return document[start:end]


def create_surgical_instructions(action: EditAction, target_section: Optional[str], has_selection: bool) -> str:
    instructions: List[str] = list(SURGICAL_INSTRUCTIONS_HEADER)

    if target_section:
        instructions.append(f"Target: {target_section} section only")
    if has_selection:
        instructions.append("Modify only the selected text portion")

    if action == EditAction.ADD:
        instructions.extend(SURGICAL_ADD_SECTION_INSTRUCTIONS if target_section else SURGICAL_ADD_CONTENT_INSTRUCTIONS)
    else:
        instructions.extend(SURGICAL_ACTION_INSTRUCTIONS.get(action.value, []))

    instructions.append(SURGICAL_INSTRUCTIONS_FOOTER)
    return "\n".join(instructions)


class PromptBuilder:
    """Builds the instruction string sent to the generation service."""

    def __init__(self, locator: Optional[SectionLocator] = None):
        self.locator = locator or SectionLocator()

    def build(
        self,
        user_message: str,
        document: str,
        selection: Optional[TextRange],
        target_section: Optional[str],
        action: EditAction,
        insertion_point: InsertionPoint,
        index: Optional[DocumentIndex] = None,
    ) -> str:
        selected_text = ""
        if selection is not None and not selection.is_empty and selection.fits(document):
            selected_text = document[selection.start:selection.end]

        if selected_text:
            body = self._selection_prompt(user_message, selected_text, action)
        else:
            body = self._build_body(user_message, document, target_section, action, insertion_point, index)
            if body is None:
                body = DEFAULT_PROMPT_TEMPLATE.format(
                    user_message=user_message,
                    document_tail=get_editor_context(document, selection)[-DEFAULT_CONTEXT_TAIL:],
                )
        instructions = create_surgical_instructions(action, target_section, bool(selected_text))
        return f"{body}\n\n{instructions}"

    def _build_body(
        self,
        user_message: str,
        document: str,
        target_section: Optional[str],
        action: EditAction,
        insertion_point: InsertionPoint,
        index: Optional[DocumentIndex],
    ) -> Optional[str]:
        """Section creation or section edit prompt; None when no section applies."""
        if target_section:
            index = index or scan(document)
            boundary = self.locator.locate(index, document, target_section)

            if boundary is None and (
                action == EditAction.ADD
                or should_create_new_section(user_message, document, target_section, index=index, locator=self.locator)
            ):
                logger.debug("Building section creation prompt for '%s'", target_section)
                return SECTION_CREATE_PROMPT_TEMPLATE.format(
                    target_section=target_section,
                    user_message=user_message,
                    section_title=format_section_title(target_section),
                )

            if boundary is not None:
                return self._section_prompt(user_message, target_section, boundary.original_content, action, insertion_point)

        return None

    def _selection_prompt(self, user_message: str, selected_text: str, action: EditAction) -> str:
        if action == EditAction.DELETE:
            return SELECTION_DELETE_PROMPT_TEMPLATE.format(selected_text=selected_text, user_message=user_message)

        action_instruction = SELECTION_ACTION_INSTRUCTIONS.get(action.value, SELECTION_DEFAULT_INSTRUCTION)
        return SELECTION_EDIT_PROMPT_TEMPLATE.format(
            action_instruction=action_instruction,
            selected_text=selected_text,
            user_message=user_message,
        )

    def _section_prompt(
        self,
        user_message: str,
        target_section: str,
        section_content: str,
        action: EditAction,
        insertion_point: InsertionPoint,
    ) -> str:
        if action == EditAction.DELETE:
            return SECTION_DELETE_PROMPT_TEMPLATE.format(
                target_section=target_section,
                section_excerpt=section_content[:SECTION_EXCERPT_LENGTH],
                user_message=user_message,
            )

        if action == EditAction.REPLACE:
            action_instruction = SECTION_REPLACE_INSTRUCTION.format(target_section=target_section)
        elif action in (EditAction.ADD, EditAction.EXPAND):
            action_instruction = SECTION_ADD_INSTRUCTION.format(
                insertion_point=insertion_point.value, target_section=target_section
            )
        else:
            action_instruction = SECTION_IMPROVE_INSTRUCTION.format(target_section=target_section)

        output_instruction = (
            SECTION_ADD_OUTPUT_INSTRUCTION
            if action in (EditAction.ADD, EditAction.EXPAND)
            else SECTION_FULL_OUTPUT_INSTRUCTION
        )
        return SECTION_EDIT_PROMPT_TEMPLATE.format(
            action_instruction=action_instruction,
            target_section=target_section,
            section_content=section_content,
            user_message=user_message,
            output_instruction=output_instruction,
        )


def build_edit_prompt(
    user_message: str,
    document: str,
    selection: Optional[TextRange],
    target_section: Optional[str],
    action: EditAction,
    insertion_point: InsertionPoint,
) -> str:
    """Module-level shortcut for PromptBuilder().build()."""
    return PromptBuilder().build(user_message, document, selection, target_section, action, insertion_point)
