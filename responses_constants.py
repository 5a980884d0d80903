"""Shared constants for responses-client.

Import-safe module with no dependencies. Can be imported from anywhere
without risk of circular imports.
"""

CLIENT_VERSION = "0.4.0"
ORIGINATOR = "codex_cli_py"

RESPONSES_CLIENT_HOME_ENV = "RESPONSES_CLIENT_HOME"
RESPONSES_CLIENT_MODEL_ENV = "RESPONSES_CLIENT_MODEL"

DEFAULT_MODEL = "codex-mini-latest"

# Capacity of the queue between the SSE reader and the event consumer.
RESPONSE_CHANNEL_CAPACITY = 1600

PROJECT_DOC_FILENAME = "AGENTS.md"
PROJECT_DOC_MAX_BYTES = 32 * 1024
PROJECT_DOC_SEPARATOR = "\n\n--- project-doc ---\n\n"
