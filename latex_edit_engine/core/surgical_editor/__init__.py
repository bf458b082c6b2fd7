"""
Surgical editor for LaTeX documents.

Applies machine-generated content to one part of a LaTeX document (a named
section, the user's selection or the cursor position) while leaving every
other byte untouched.

The main entry points are `ApplyOrchestrator` / `smart_apply` for applying an
existing completion, and `SurgicalEditingService` for the full
instruction-to-document cycle against the generation service.
"""

# Structure analysis
from latex_edit_engine.core.surgical_editor.line_scanner import LineScanner, scan
from latex_edit_engine.core.surgical_editor.section_locator import (
    BoundaryReconstructionError,
    SectionLocator,
    locate,
)

# Intent and editing
from latex_edit_engine.core.surgical_editor.intent_classifier import IntentClassifier
from latex_edit_engine.core.surgical_editor.edit_executor import (
    SurgicalEditor,
    add_content_to_section,
    create_section,
    delete_section,
    replace_section,
)
from latex_edit_engine.core.surgical_editor.completion_parser import extract_latex_code
from latex_edit_engine.core.surgical_editor.prompt_builder import PromptBuilder, build_edit_prompt
from latex_edit_engine.core.surgical_editor.change_validator import ChangeValidator

# Main entry points
from latex_edit_engine.core.surgical_editor.apply_orchestrator import ApplyOrchestrator, smart_apply
from latex_edit_engine.core.surgical_editor.editing_service import SurgicalEditingService

# Data models
from latex_edit_engine.core.surgical_editor.models import (
    ApplyResult,
    DocumentEndMarker,
    DocumentIndex,
    EditAction,
    EditIntent,
    EnvironmentEnd,
    EnvironmentStart,
    InsertionPoint,
    MatchTier,
    Section,
    SectionBoundary,
    SectionEditResult,
    SectionLevel,
    SectionNotFound,
    SurgicalEditOutcome,
    TextRange,
    TraceEvent,
    ValidationReport,
)

__all__ = [
    # Main entry points
    'ApplyOrchestrator',
    'smart_apply',
    'SurgicalEditingService',

    # Components
    'LineScanner',
    'scan',
    'SectionLocator',
    'locate',
    'BoundaryReconstructionError',
    'IntentClassifier',
    'SurgicalEditor',
    'add_content_to_section',
    'create_section',
    'delete_section',
    'replace_section',
    'extract_latex_code',
    'PromptBuilder',
    'build_edit_prompt',
    'ChangeValidator',

    # Data models
    'ApplyResult',
    'DocumentEndMarker',
    'DocumentIndex',
    'EditAction',
    'EditIntent',
    'EnvironmentEnd',
    'EnvironmentStart',
    'InsertionPoint',
    'MatchTier',
    'Section',
    'SectionBoundary',
    'SectionEditResult',
    'SectionLevel',
    'SectionNotFound',
    'SurgicalEditOutcome',
    'TextRange',
    'TraceEvent',
    'ValidationReport',
]
