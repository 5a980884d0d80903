"""Configuration loading for responses-client.

Config files live in ~/.responses-client/ (override with
RESPONSES_CLIENT_HOME):

    .env         -- environment variables, loaded with python-dotenv
    config.yaml  -- model, reasoning, sandbox and instruction settings

Example config.yaml::

    model: o3
    model_reasoning_effort: high        # low | medium | high | none
    model_reasoning_summary: detailed   # auto | concise | detailed | none
    approval_policy: on-request         # untrusted | on-failure | on-request | never
    sandbox_mode: workspace-write       # danger-full-access | read-only | workspace-write
    sandbox_workspace_write:
      writable_roots: [/tmp]
      network_access: false
    disable_response_storage: true
    instructions: "Prefer small commits."

RESPONSES_CLIENT_MODEL overrides ``model``. Unknown enum values raise
ConfigValidationError; missing keys and keys left empty (YAML null) fall
back to the defaults below. Write ``none`` to turn reasoning off explicitly.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv

from responses_client.environment_context import (
    AskForApproval,
    DangerFullAccess,
    ReadOnly,
    SandboxMode,
    SandboxPolicy,
    SessionState,
    WorkspaceWrite,
)
from responses_client.errors import ConfigValidationError
from responses_client.model_family import ModelFamily, resolve_model_family, with_capabilities
from responses_client.reasoning import (
    DEFAULT_REASONING_EFFORT,
    DEFAULT_REASONING_SUMMARY,
    ReasoningEffortConfig,
    ReasoningSummaryConfig,
)
from responses_constants import (
    DEFAULT_MODEL,
    PROJECT_DOC_FILENAME,
    PROJECT_DOC_MAX_BYTES,
    PROJECT_DOC_SEPARATOR,
    RESPONSES_CLIENT_HOME_ENV,
    RESPONSES_CLIENT_MODEL_ENV,
)

logger = logging.getLogger(__name__)


def get_home() -> Path:
    return Path(os.getenv(RESPONSES_CLIENT_HOME_ENV, Path.home() / ".responses-client"))


def get_config_path() -> Path:
    return get_home() / "config.yaml"


def _load_env_file(path: Path) -> bool:
    if not path.exists():
        return False
    try:
        load_dotenv(dotenv_path=path, encoding="utf-8")
    except UnicodeDecodeError:
        load_dotenv(dotenv_path=path, encoding="latin-1")
    logger.info("Loaded environment variables from %s", path)
    return True


def load_environment(project_dir: Optional[Path] = None) -> None:
    """Load ~/.responses-client/.env, falling back to the project's .env.

    Variables already present in the process environment are never overridden.
    """
    project_env = Path(project_dir or Path.cwd()) / ".env"
    if not _load_env_file(get_home() / ".env") and not _load_env_file(project_env):
        logger.debug("No .env file found. Using system environment variables.")


@dataclass
class ClientConfig:
    """Resolved client settings. See the module docstring for the file format."""

    model: str = DEFAULT_MODEL
    model_reasoning_effort: ReasoningEffortConfig = DEFAULT_REASONING_EFFORT
    model_reasoning_summary: ReasoningSummaryConfig = DEFAULT_REASONING_SUMMARY
    # Force reasoning support on/off for models whose family is unknown.
    model_supports_reasoning_summaries: Optional[bool] = None
    approval_policy: AskForApproval = AskForApproval.ON_REQUEST
    sandbox_mode: SandboxMode = SandboxMode.READ_ONLY
    writable_roots: List[Path] = field(default_factory=list)
    network_access: bool = False
    disable_response_storage: bool = False
    parallel_tool_calls: bool = False
    instructions: Optional[str] = None
    experimental_instructions_file: Optional[Path] = None
    project_doc_max_bytes: int = PROJECT_DOC_MAX_BYTES

    def model_family(self) -> ModelFamily:
        family = resolve_model_family(self.model)
        if self.model_supports_reasoning_summaries is not None:
            family = with_capabilities(
                family, supports_reasoning_summaries=self.model_supports_reasoning_summaries
            )
        return family

    def sandbox_policy(self) -> SandboxPolicy:
        if self.sandbox_mode == SandboxMode.DANGER_FULL_ACCESS:
            return DangerFullAccess()
        if self.sandbox_mode == SandboxMode.WORKSPACE_WRITE:
            return WorkspaceWrite(
                writable_roots=tuple(self.writable_roots),
                network_access=self.network_access,
            )
        return ReadOnly()

    def session_for(self, cwd: Path) -> SessionState:
        return SessionState(
            cwd=Path(cwd),
            approval_policy=self.approval_policy,
            sandbox_policy=self.sandbox_policy(),
        )

    def base_instructions(self) -> Optional[str]:
        """Contents of ``experimental_instructions_file``, or None when unset.

        Raises:
            ConfigValidationError: If the file can't be read or is empty.
        """
        if self.experimental_instructions_file is None:
            return None
        path = Path(self.experimental_instructions_file).expanduser()
        try:
            contents = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigValidationError(f"Failed to read instructions file {path}: {e}") from e
        if not contents.strip():
            raise ConfigValidationError(f"Instructions file {path} is empty")
        return contents


def _enum_value(enum_cls, raw: Any, key: str):
    allowed = ", ".join(member.value for member in enum_cls)
    if not isinstance(raw, str):
        raise ConfigValidationError(f"Invalid value for '{key}': {raw!r} (expected one of: {allowed})")
    try:
        return enum_cls(raw.strip().lower())
    except ValueError:
        raise ConfigValidationError(f"Invalid value for '{key}': {raw!r} (expected one of: {allowed})")


def _bool_value(raw: Any, key: str) -> bool:
    if isinstance(raw, bool):
        return raw
    raise ConfigValidationError(f"Invalid value for '{key}': {raw!r} (expected true or false)")


def config_from_dict(data: Dict[str, Any]) -> ClientConfig:
    """Validate a parsed config.yaml mapping into a ClientConfig."""
    config = ClientConfig()

    if data.get("model"):
        config.model = str(data["model"]).strip()
    if data.get("model_reasoning_effort") is not None:
        config.model_reasoning_effort = _enum_value(
            ReasoningEffortConfig, data["model_reasoning_effort"], "model_reasoning_effort"
        )
    if data.get("model_reasoning_summary") is not None:
        config.model_reasoning_summary = _enum_value(
            ReasoningSummaryConfig, data["model_reasoning_summary"], "model_reasoning_summary"
        )
    if data.get("model_supports_reasoning_summaries") is not None:
        config.model_supports_reasoning_summaries = _bool_value(
            data["model_supports_reasoning_summaries"], "model_supports_reasoning_summaries"
        )
    if data.get("approval_policy") is not None:
        config.approval_policy = _enum_value(AskForApproval, data["approval_policy"], "approval_policy")
    if data.get("sandbox_mode") is not None:
        config.sandbox_mode = _enum_value(SandboxMode, data["sandbox_mode"], "sandbox_mode")

    workspace_cfg = data.get("sandbox_workspace_write") or {}
    if not isinstance(workspace_cfg, dict):
        raise ConfigValidationError("'sandbox_workspace_write' must be a mapping")
    config.writable_roots = [Path(p).expanduser() for p in workspace_cfg.get("writable_roots") or []]
    if workspace_cfg.get("network_access") is not None:
        config.network_access = _bool_value(workspace_cfg["network_access"], "sandbox_workspace_write.network_access")

    if data.get("disable_response_storage") is not None:
        config.disable_response_storage = _bool_value(data["disable_response_storage"], "disable_response_storage")
    if data.get("parallel_tool_calls") is not None:
        config.parallel_tool_calls = _bool_value(data["parallel_tool_calls"], "parallel_tool_calls")
    if data.get("instructions"):
        config.instructions = str(data["instructions"])
    if data.get("experimental_instructions_file"):
        config.experimental_instructions_file = Path(str(data["experimental_instructions_file"]))
    if data.get("project_doc_max_bytes") is not None:
        try:
            config.project_doc_max_bytes = int(data["project_doc_max_bytes"])
        except (TypeError, ValueError):
            raise ConfigValidationError(
                f"Invalid value for 'project_doc_max_bytes': {data['project_doc_max_bytes']!r}"
            )

    return config


def load_config(path: Optional[Path] = None) -> ClientConfig:
    """Load config.yaml (defaults when missing) and apply env overrides.

    Raises:
        ConfigValidationError: On unparsable YAML or invalid values.
    """
    config_path = Path(path) if path is not None else get_config_path()

    data: Dict[str, Any] = {}
    if config_path.exists():
        try:
            loaded = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as e:
            raise ConfigValidationError(f"Invalid YAML in {config_path}: {e}") from e
        if not isinstance(loaded, dict):
            raise ConfigValidationError(f"{config_path} must contain a mapping at the top level")
        data = loaded
        logger.debug("Loaded config from %s", config_path)

    env_model = os.getenv(RESPONSES_CLIENT_MODEL_ENV)
    if env_model and env_model.strip():
        data = {**data, "model": env_model.strip()}

    return config_from_dict(data)


def read_project_doc(cwd: Path, max_bytes: int = PROJECT_DOC_MAX_BYTES) -> Optional[str]:
    """Contents of ``<cwd>/AGENTS.md`` (truncated to ``max_bytes``), or None."""
    if max_bytes <= 0:
        return None
    doc_path = Path(cwd) / PROJECT_DOC_FILENAME
    if not doc_path.is_file():
        return None
    try:
        raw = doc_path.read_bytes()
    except OSError as e:
        logger.warning("Failed to read %s: %s", doc_path, e)
        return None
    if len(raw) > max_bytes:
        logger.warning("Project doc %s exceeds %d bytes - truncating.", doc_path, max_bytes)
        raw = raw[:max_bytes]
    text = raw.decode("utf-8", errors="ignore").strip()
    return text or None


def load_user_instructions(config: ClientConfig, cwd: Path) -> Optional[str]:
    """Configured instructions and the project doc, joined; None if both are empty."""
    parts = []
    if config.instructions and config.instructions.strip():
        parts.append(config.instructions)
    project_doc = read_project_doc(cwd, config.project_doc_max_bytes)
    if project_doc:
        parts.append(project_doc)
    if not parts:
        return None
    return PROJECT_DOC_SEPARATOR.join(parts)
