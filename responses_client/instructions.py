"""Instruction text sent in the ``instructions`` field of every request.

Both texts are bundled with the package and read once at import time.
"""

from pathlib import Path
from typing import Optional

from responses_client.model_family import ModelFamily

_PACKAGE_DIR = Path(__file__).parent

BASE_INSTRUCTIONS = (_PACKAGE_DIR / "prompt.md").read_text(encoding="utf-8")
APPLY_PATCH_TOOL_INSTRUCTIONS = (_PACKAGE_DIR / "apply_patch_tool_instructions.md").read_text(encoding="utf-8")


def compose_instructions(model_family: ModelFamily, base_override: Optional[str] = None) -> str:
    """Final instruction text for a turn.

    Args:
        model_family: Capabilities of the target model.
        base_override: Replaces ``BASE_INSTRUCTIONS`` when given.

    Returns:
        The base text, followed by the apply_patch guide (joined with a
        single newline) when the family needs it.
    """
    base = base_override if base_override is not None else BASE_INSTRUCTIONS
    sections = [base]
    if model_family.needs_special_apply_patch_instructions:
        sections.append(APPLY_PATCH_TOOL_INSTRUCTIONS)
    return "\n".join(sections)
