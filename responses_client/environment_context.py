"""Per-turn snapshot of the execution environment sent to the model.

The snapshot is taken once per turn from the active session and is only
ever serialized; nothing in the turn mutates it. The approval and sandbox
values are decided by the policy engine upstream; this module only
describes them to the model.

Serialized shape (2-space indented)::

    <environment_context>
      <cwd>/repo</cwd>
      <approval_policy>on-request</approval_policy>
      <sandbox_mode>workspace-write</sandbox_mode>
      <network_access>restricted</network_access>
    </environment_context>
"""

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple, Union

logger = logging.getLogger(__name__)

ENVIRONMENT_CONTEXT_TAG = "environment_context"


class AskForApproval(str, Enum):
    """When the user is asked before the agent runs a command."""

    UNTRUSTED = "untrusted"
    ON_FAILURE = "on-failure"
    ON_REQUEST = "on-request"
    NEVER = "never"


class SandboxMode(str, Enum):
    DANGER_FULL_ACCESS = "danger-full-access"
    READ_ONLY = "read-only"
    WORKSPACE_WRITE = "workspace-write"


class NetworkAccess(str, Enum):
    RESTRICTED = "restricted"
    ENABLED = "enabled"


@dataclass(frozen=True)
class DangerFullAccess:
    """No sandbox at all."""

    mode = SandboxMode.DANGER_FULL_ACCESS


@dataclass(frozen=True)
class ReadOnly:
    mode = SandboxMode.READ_ONLY


@dataclass(frozen=True)
class WorkspaceWrite:
    """Writes allowed under the cwd and ``writable_roots``; network is opt-in."""

    writable_roots: Tuple[Path, ...] = ()
    network_access: bool = False

    mode = SandboxMode.WORKSPACE_WRITE


SandboxPolicy = Union[DangerFullAccess, ReadOnly, WorkspaceWrite]


def network_access_for(policy: SandboxPolicy) -> NetworkAccess:
    """Network is enabled for full access, or for workspace-write with its flag set."""
    if isinstance(policy, DangerFullAccess):
        return NetworkAccess.ENABLED
    if isinstance(policy, WorkspaceWrite) and policy.network_access:
        return NetworkAccess.ENABLED
    return NetworkAccess.RESTRICTED


@dataclass(frozen=True)
class SessionState:
    """The slice of session state the environment snapshot is taken from."""

    cwd: Path
    approval_policy: AskForApproval
    sandbox_policy: SandboxPolicy


@dataclass(frozen=True)
class EnvironmentContext:
    cwd: Path
    approval_policy: AskForApproval
    sandbox_mode: SandboxMode
    network_access: NetworkAccess

    @classmethod
    def from_session(cls, session) -> "EnvironmentContext":
        """Snapshot any object exposing ``cwd``, ``approval_policy`` and ``sandbox_policy``."""
        policy = session.sandbox_policy
        return cls(
            cwd=Path(session.cwd),
            approval_policy=AskForApproval(session.approval_policy),
            sandbox_mode=policy.mode,
            network_access=network_access_for(policy),
        )

    def serialize_to_xml(self) -> str:
        root = ET.Element(ENVIRONMENT_CONTEXT_TAG)
        ET.SubElement(root, "cwd").text = str(self.cwd)
        ET.SubElement(root, "approval_policy").text = self.approval_policy.value
        ET.SubElement(root, "sandbox_mode").text = self.sandbox_mode.value
        ET.SubElement(root, "network_access").text = self.network_access.value
        ET.indent(root, space="  ")
        return ET.tostring(root, encoding="unicode")

    def __str__(self) -> str:
        return (
            f"Current working directory: {self.cwd}\n"
            f"Approval policy: {self.approval_policy.value}\n"
            f"Sandbox mode: {self.sandbox_mode.value}\n"
            f"Network access: {self.network_access.value}\n"
        )


def format_environment_context(context: Optional[EnvironmentContext]) -> Optional[str]:
    """Serialize the snapshot for the model, or None if absent or unserializable.

    A serialization failure is logged and the block is dropped; the turn
    still goes out without it.
    """
    if context is None:
        return None
    try:
        return context.serialize_to_xml()
    except Exception as e:
        logger.error("Error serializing environment context: %s", e)
        return None
