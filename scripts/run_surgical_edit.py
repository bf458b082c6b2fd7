"""
Run one surgical edit on a LaTeX file.

With --completion / --completion-file the generator reply is supplied directly
and no API call is made (useful to replay a recorded answer). Otherwise the
full editing service runs against Mistral.

Usage examples:
  - Live edit:
      python scripts/run_surgical_edit.py \
        --document paper.tex \
        --instruction "add a paragraph about limitations to the end of the conclusion" \
        --output paper.edited.tex

  - Replay a recorded reply, with trace events logged:
      python scripts/run_surgical_edit.py \
        --document paper.tex \
        --instruction "improve this" --selection 120:480 \
        --completion-file reply.txt \
        --log-file scripts/output/edit_trace.jsonl

Notes:
  - Requires .env/.env.local with MISTRAL_API_KEY for live edits.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from latex_edit_engine.core.surgical_editor.apply_orchestrator import ApplyOrchestrator
from latex_edit_engine.core.surgical_editor.completion_client import CompletionClient
from latex_edit_engine.core.surgical_editor.editing_service import SurgicalEditingService
from latex_edit_engine.core.surgical_editor.models import TextRange


def _load_env() -> None:
    project_root = Path(__file__).resolve().parents[1]
    load_dotenv(project_root / ".env.local")
    load_dotenv(project_root / ".env")


def _parse_selection(value: Optional[str]) -> Optional[TextRange]:
    if not value:
        return None
    try:
        start, end = (int(part) for part in value.split(":", 1))
    except ValueError:
        raise argparse.ArgumentTypeError(f"Selection must look like START:END, got {value!r}")
    return TextRange(start, end)


def _trace_events(trace) -> list:
    return [{"event": e.stage, "payload": {"decision": e.decision, **e.details}} for e in trace]


def _serialize(value: Any) -> Any:
    return getattr(value, "value", value)


def run_offline(args, document: str, completion: str, selection: Optional[TextRange]) -> Dict[str, Any]:
    result = ApplyOrchestrator().apply(
        args.instruction, document, completion, selection=selection, cursor=args.cursor
    )
    return {
        "success": True,
        "new_document": result.new_document,
        "strategy": result.strategy,
        "action": result.action.value,
        "target_section": result.target_section,
        "affected_range": asdict(result.affected_range),
        "trace": _trace_events(result.trace),
    }


def run_live(args, document: str, selection: Optional[TextRange]) -> Dict[str, Any]:
    service = SurgicalEditingService(completion_client=CompletionClient(use_cache=not args.no_cache))
    outcome = service.perform_surgical_edit(document, args.instruction, selection=selection, cursor=args.cursor)
    payload: Dict[str, Any] = {
        "success": outcome.success,
        "session_id": outcome.session_id,
        "new_document": outcome.new_document if outcome.success else outcome.fallback_document,
        "strategy": outcome.strategy,
        "error": outcome.error,
        "trace": _trace_events(outcome.trace),
    }
    if outcome.intent is not None:
        payload["action"] = outcome.intent.action.value
        payload["target_section"] = outcome.intent.target_section
    if outcome.affected_range is not None:
        payload["affected_range"] = asdict(outcome.affected_range)
    if outcome.validation is not None:
        payload["validation"] = {k: _serialize(v) for k, v in asdict(outcome.validation).items()}
        payload["validation"]["overall_valid"] = outcome.validation.overall_valid
    return payload


def main() -> int:
    ap = argparse.ArgumentParser(description="Apply a surgical edit to a LaTeX document")
    ap.add_argument("--document", required=True, help="Path to the .tex file to edit")
    ap.add_argument("--instruction", required=True, help="Natural-language edit instruction")
    ap.add_argument("--selection", default=None, help="Selected character range as START:END")
    ap.add_argument("--cursor", type=int, default=None, help="Cursor character offset")
    ap.add_argument("--completion", default=None, help="Generator reply to apply (skips the API call)")
    ap.add_argument("--completion-file", default=None, help="File holding the generator reply")
    ap.add_argument("--output", default=None, help="Write the edited document here (stdout summary otherwise)")
    ap.add_argument("--log-file", default=None, help="Append trace events as JSON lines")
    ap.add_argument("--no-cache", action="store_true")
    ap.add_argument("--verbose", action="store_true")
    args = ap.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )
    _load_env()

    document = Path(args.document).read_text(encoding="utf-8")
    try:
        selection = _parse_selection(args.selection)
    except (argparse.ArgumentTypeError, ValueError) as e:
        ap.error(str(e))

    completion = args.completion
    if args.completion_file:
        completion = Path(args.completion_file).read_text(encoding="utf-8")

    if completion is not None:
        payload = run_offline(args, document, completion, selection)
    else:
        payload = run_live(args, document, selection)

    if args.log_file:
        with open(args.log_file, "a", encoding="utf-8") as out:
            for event in payload["trace"]:
                out.write(json.dumps(event, ensure_ascii=False) + "\n")

    new_document = payload.pop("new_document")
    if args.output and new_document is not None:
        Path(args.output).write_text(new_document, encoding="utf-8")
    elif new_document is not None:
        payload["new_document_preview"] = new_document[:400]

    payload.pop("trace")
    print(json.dumps(payload, ensure_ascii=False, indent=2))
    return 0 if payload["success"] else 1


if __name__ == "__main__":
    sys.exit(main())
