"""
Normalization of generated completions before they are spliced in.

The generator answers conversationally: code may be fenced, a section header
may be echoed back, and deletions are confirmed in prose. These helpers turn
that reply into content the edit executor can use.
"""

import re
from typing import Optional

from latex_edit_engine.core.surgical_editor.config import MAX_UNFENCED_CODE_LENGTH
from latex_edit_engine.core.surgical_editor.line_scanner import normalize_title
from latex_edit_engine.core.surgical_editor.models import Section

CODE_BLOCK_RE = re.compile(r"```(?:latex|tex)?[ \t]*\n?([\s\S]*?)```", re.IGNORECASE)
LATEX_COMMAND_RE = re.compile(r"\\[a-zA-Z]+(?:\[[^\]]*\])?(?:\{[^}]*\})*|\\[^a-zA-Z\s]")
SECTION_HEADER_LINE_RE = re.compile(r"^\s*\\(chapter|section|subsection|subsubsection|paragraph)\*?\{([^}]*)\}")

# "removed" is not accepted: replies about removing a typo or a sentence
# must not confirm a whole-section delete
DELETION_CONFIRMATIONS = (
    "i've deleted",
    "i have deleted",
    "deleted the",
)

SECTION_TITLE_MAP = {
    "intro": "Introduction",
    "introduction": "Introduction",
    "conclusion": "Conclusion",
    "conclusions": "Conclusions",
    "methodology": "Methodology",
    "methods": "Methods",
    "results": "Results",
    "discussion": "Discussion",
    "literature review": "Literature Review",
    "related work": "Related Work",
}


def extract_latex_code(reply: str) -> Optional[str]:
    """
    Pull LaTeX code out of a generator reply.

    The first fenced block wins. Without a fence, a short reply containing
    LaTeX commands is taken whole. Returns None when the reply looks like
    plain prose.
    """
    if not reply:
        return None

    match = CODE_BLOCK_RE.search(reply)
    if match:
        return match.group(1).strip()

    if LATEX_COMMAND_RE.search(reply) and len(reply) < MAX_UNFENCED_CODE_LENGTH:
        return reply.strip()

    return None


def normalize_completion(reply: str) -> str:
    """Extracted code if any, otherwise the trimmed reply."""
    return extract_latex_code(reply) or (reply or "").strip()


def is_echoed_header(header: "re.Match", section: Optional[Section]) -> bool:
    """True if `header` repeats `section`: same level or same title."""
    if section is None:
        return True
    level, title = header.group(1), header.group(2)
    return level == section.level.value or normalize_title(title) == section.normalized_title


def strip_leading_section_header(content: str, section: Optional[Section] = None) -> str:
    """
    Drop the first non-blank line if it is a sectioning command.

    With `section` given, only a header echoing that section is dropped, so a
    new subsection added to it keeps its heading.
    """
    lines = content.split("\n")
    for i, line in enumerate(lines):
        if not line.strip():
            continue
        header = SECTION_HEADER_LINE_RE.match(line)
        if header and is_echoed_header(header, section):
            remainder = line[header.end():]
            rest = ([remainder] if remainder.strip() else []) + lines[i + 1:]
            return "\n".join(rest).strip()
        break
    return content.strip()


def starts_with_section_header(content: str) -> bool:
    return SECTION_HEADER_LINE_RE.match(content.lstrip()) is not None


def has_section_header(content: str, target_section: str) -> bool:
    """True if `content` already names the target in a \\section header or opens with any header."""
    named = re.compile(r"\\section\*?\{[^}]*" + re.escape(target_section) + r"[^}]*\}", re.IGNORECASE)
    if named.search(content):
        return True
    return starts_with_section_header(content)


def format_section_title(target_section: str) -> str:
    key = target_section.lower().strip()
    if key in SECTION_TITLE_MAP:
        return SECTION_TITLE_MAP[key]
    return key[:1].upper() + key[1:]


def ensure_section_header(content: str, target_section: str) -> str:
    """Prefix a \\section{...} header when the generator omitted one."""
    if has_section_header(content, target_section):
        return content
    return f"\\section{{{format_section_title(target_section)}}}\n\n{content}"


def is_deletion_confirmed(reply: str) -> bool:
    reply_lower = (reply or "").lower()
    return any(phrase in reply_lower for phrase in DELETION_CONFIRMATIONS)
