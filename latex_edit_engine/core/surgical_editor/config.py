"""
Configuration constants for the surgical editor.

Values can be overridden through environment variables (usually loaded from
.env.local / .env by the scripts).
"""

import os

# Mistral model configuration
MISTRAL_MODEL = os.getenv("MISTRAL_MODEL", "mistral-large-latest")
MISTRAL_TEMPERATURE = 0.2

# Disk cache for generation calls
CACHE_DIR = os.getenv("LATEX_EDIT_CACHE_DIR", "cache")

# Minimum seconds between two calls to the generation service
RATE_LIMIT_MIN_DELAY = float(os.getenv("LATEX_EDIT_MIN_DELAY", "1.0"))

# Characters of document kept around the selection when building prompts
EDITOR_CONTEXT_WINDOW = 500

# Characters of document tail sent when no section or selection is targeted
DEFAULT_CONTEXT_TAIL = 1000

# Replies shorter than this that contain LaTeX commands are treated as code
MAX_UNFENCED_CODE_LENGTH = 500

# Attempts made by the editing service when the generator returns nothing
MAX_GENERATION_ATTEMPTS = 3
