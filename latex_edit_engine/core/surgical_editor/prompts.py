"""
Prompt templates for the generation service.

This module centralizes every template used to ask the language model for
LaTeX content. Templates are plain `str.format` strings; the prompt builder
picks one per action/target combination.
"""

EDITING_SYSTEM_PROMPT = """
You are a writing assistant embedded in a LaTeX editor for academic papers.
You help the author edit one part of their document at a time.
Answer with LaTeX code inside a single ```latex fenced block when you produce content.
Never output \\documentclass, \\begin{document} or \\end{document} unless explicitly asked.
"""

# --- Selection-based prompts ---

SELECTION_DELETE_PROMPT_TEMPLATE = """Please delete this selected LaTeX code. Just respond with "I've deleted the selected content" to confirm:

```latex
{selected_text}
```

User request: {user_message}"""

SELECTION_EDIT_PROMPT_TEMPLATE = """{action_instruction}

Selected LaTeX code:
```latex
{selected_text}
```

User request: {user_message}

Please provide clean LaTeX code without \\documentclass, \\begin{{document}}, or \\end{{document}}. Focus only on the specific improvement requested."""

SELECTION_ACTION_INSTRUCTIONS = {
    "replace": "Replace this selected LaTeX code with the requested content. Provide only the replacement code.",
    "add": "Add new content to enhance this section. Provide only the new content to add.",
    "expand": "Add new content to enhance this section. Provide only the new content to add.",
}
SELECTION_DEFAULT_INSTRUCTION = "Improve this selected LaTeX code."

# --- Section-based prompts ---

SECTION_CREATE_PROMPT_TEMPLATE = """Please create a new {target_section} section for an academic document.

User request: {user_message}

Write a complete section starting with \\section{{{section_title}}} followed by well-structured content. Make it comprehensive and professional.

Respond naturally as if you're helping a colleague write their paper. Don't include \\documentclass or document structure - just the section."""

SECTION_DELETE_PROMPT_TEMPLATE = """The user wants to delete the {target_section} section. Please respond with "I've deleted the {target_section} section" to confirm deletion.

Current {target_section} section:
```latex
{section_excerpt}...
```

User request: {user_message}"""

SECTION_EDIT_PROMPT_TEMPLATE = """{action_instruction}

Current {target_section} section:
```latex
{section_content}
```

User request: {user_message}

{output_instruction}

Respond in a natural, helpful way as if you're assisting a colleague with their document."""

SECTION_REPLACE_INSTRUCTION = (
    "Please rewrite the entire {target_section} section based on the user's request. "
    "Provide the complete section with \\section{{}} header."
)
SECTION_ADD_INSTRUCTION = (
    "Please provide additional content to add to the {insertion_point} of the {target_section} section. "
    "Provide only the new content, not the existing text."
)
SECTION_IMPROVE_INSTRUCTION = "Please improve the {target_section} section based on the user's request."

SECTION_ADD_OUTPUT_INSTRUCTION = "Provide only the new content to be added - no section header or existing content."
SECTION_FULL_OUTPUT_INSTRUCTION = "Provide the complete improved section with \\section{} header."

# --- Fallback prompt ---

DEFAULT_PROMPT_TEMPLATE = """{user_message}

Current document context:
```latex
{document_tail}
```

Please help improve this LaTeX document. Provide clean LaTeX code that fits naturally into the existing structure. Respond conversationally and helpfully."""

# --- Surgical instructions appended to every prompt ---

SURGICAL_INSTRUCTIONS_HEADER = [
    "",
    "=== SURGICAL EDITING INSTRUCTIONS ===",
    "CRITICAL: This is surgical editing - make ONLY the requested changes.",
    "Preserve ALL other content exactly as-is.",
    "Maintain proper LaTeX syntax and formatting.",
    "Do NOT add \\documentclass, \\begin{document}, or \\end{document} unless specifically requested.",
]
SURGICAL_INSTRUCTIONS_FOOTER = "=== END SURGICAL INSTRUCTIONS ===\n"

SURGICAL_ACTION_INSTRUCTIONS = {
    "delete": ["Return empty string or comment to confirm deletion"],
    "replace": ["Return ONLY the replacement content"],
    "expand": ["Return ONLY the new content to be added (no existing content)"],
    "improve": ["Return the complete improved section with proper LaTeX formatting"],
    "fix": ["Return the complete improved section with proper LaTeX formatting"],
}
SURGICAL_ADD_SECTION_INSTRUCTIONS = [
    "IMPORTANT: Include complete section with \\section{Title} header",
    "Format: \\section{Title}\\n\\nContent here...",
    "Do NOT assume section header will be added separately",
]
SURGICAL_ADD_CONTENT_INSTRUCTIONS = ["Return ONLY the new content to be added"]
