"""Model family capability flags.

Pure lookup utilities with no I/O. A model slug is matched by prefix against
the known families; the first match wins, so more specific prefixes are
listed before the general ones (``codex-mini-latest`` before ``codex-``).
"""

import logging
from dataclasses import dataclass, replace
from typing import Optional, Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModelFamily:
    """Capabilities shared by every model in a family.

    Attributes:
        slug: Full model slug as configured (e.g. "o3-2025-04-16").
        family: Family name the slug was matched against (e.g. "o3").
        needs_special_apply_patch_instructions: Append the apply_patch tool
            guide to the instructions for this family.
        supports_reasoning_summaries: Whether the family accepts the
            ``reasoning`` request parameter.
        uses_local_shell_tool: Whether the family was trained on the
            built-in ``local_shell`` tool.
    """

    slug: str
    family: str
    needs_special_apply_patch_instructions: bool = False
    supports_reasoning_summaries: bool = False
    uses_local_shell_tool: bool = False


# (prefix, capability overrides)
KNOWN_FAMILIES: Tuple[Tuple[str, dict], ...] = (
    ("o3", {"supports_reasoning_summaries": True}),
    ("o4-mini", {"supports_reasoning_summaries": True}),
    ("codex-mini-latest", {"supports_reasoning_summaries": True, "uses_local_shell_tool": True}),
    ("codex-", {"supports_reasoning_summaries": True}),
    ("gpt-4.1", {"needs_special_apply_patch_instructions": True}),
    ("gpt-4o", {"needs_special_apply_patch_instructions": True}),
    ("gpt-3.5", {"needs_special_apply_patch_instructions": True}),
    ("gpt-5", {"supports_reasoning_summaries": True}),
)


def find_family_for_model(slug: str) -> Optional[ModelFamily]:
    """Return the family for a known model slug, or None if it is unrecognised."""
    for prefix, capabilities in KNOWN_FAMILIES:
        if slug.startswith(prefix):
            return ModelFamily(slug=slug, family=prefix, **capabilities)
    return None


def derive_default_model_family(slug: str) -> ModelFamily:
    """Capability-free family for slugs that ``find_family_for_model`` doesn't know."""
    return ModelFamily(slug=slug, family=slug)


def resolve_model_family(slug: str) -> ModelFamily:
    """Known family for ``slug``, falling back to a capability-free one."""
    family = find_family_for_model(slug)
    if family is None:
        logger.debug("Unknown model family for '%s'; using default capabilities", slug)
        return derive_default_model_family(slug)
    return family


def with_capabilities(family: ModelFamily, **overrides) -> ModelFamily:
    """Copy of ``family`` with some capability flags overridden (config escape hatch)."""
    return replace(family, **overrides)
