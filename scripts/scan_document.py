"""
Print the structural index of a LaTeX file, one JSON line per element.

Optionally resolves a section name and prints its boundary, which is handy
when checking how an instruction's target will be matched.

Usage:
  python scripts/scan_document.py --document paper.tex
  python scripts/scan_document.py --document paper.tex --section "lit review"
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from latex_edit_engine.core.surgical_editor.line_scanner import scan
from latex_edit_engine.core.surgical_editor.models import Section
from latex_edit_engine.core.surgical_editor.section_locator import locate


def _element_payload(element) -> dict:
    payload = {
        "type": type(element).__name__,
        "line": element.line_index,
        "char_start": element.char_start,
        "char_end": element.char_end,
    }
    if isinstance(element, Section):
        payload.update(level=element.level.value, title=element.title, starred=element.starred)
    elif hasattr(element, "name"):
        payload["name"] = element.name
    else:
        payload["command"] = element.command
    return payload


def main() -> int:
    ap = argparse.ArgumentParser(description="Scan a LaTeX document's structure")
    ap.add_argument("--document", required=True)
    ap.add_argument("--section", default=None, help="Section name to resolve")
    args = ap.parse_args()

    text = Path(args.document).read_text(encoding="utf-8")
    index = scan(text)
    for element in index.elements:
        print(json.dumps(_element_payload(element), ensure_ascii=False))

    if args.section:
        boundary = locate(index, text, args.section)
        if boundary is None:
            print(json.dumps({"event": "section_not_found", "target": args.section,
                              "available": index.section_titles()}, ensure_ascii=False))
            return 1
        print(json.dumps({
            "event": "section_located",
            "target": args.section,
            "title": boundary.section_name,
            "match_tier": boundary.match_tier.value,
            "start_pos": boundary.start_pos,
            "end_pos": boundary.end_pos,
            "preview": boundary.original_content[:160],
        }, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
