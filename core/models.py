# ================================================================
# File     : core/models.py
# Purpose  : Data shapes flowing through the role report pipeline
# Notes    : Raw Graph payloads are mapped into these at the edge
#            (handlers/graph/directory.py); everything downstream
#            works with these types only.
# ================================================================

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

TENANT_SCOPE = "/"
AU_SCOPE_PREFIX = "/administrativeUnits/"

TENANT_SCOPE_LABEL = "/ (Tenant-wide)"
NOT_SCOPED_AU_NAME = "Not scoped to an AU"
NOT_APPLICABLE = "N/A"
FAILED_AU_NAME = "[Failed to retrieve AU]"
UNKNOWN_SCOPE_NAME = "Unknown scope"


@dataclass(frozen=True)
class RoleAssignment:
    principal_id: str
    role_definition_id: str
    directory_scope_id: str


@dataclass(frozen=True)
class RoleDefinition:
    id: str
    display_name: str
    description: str = ""


@dataclass(frozen=True)
class AdministrativeUnit:
    id: str
    display_name: str


class DeclaredType(Enum):
    """Object kind as tagged by the directory (@odata.type)."""
    USER = "user"
    GROUP = "group"
    DEVICE = "device"
    OTHER = "other"


class MemberType(Enum):
    USER = "User"
    GROUP = "Group"
    DEVICE = "Device"
    OTHER = "Other"


@dataclass(frozen=True)
class DirectoryObjectRef:
    id: str
    declared_type: DeclaredType
    attributes: Dict[str, Any] = field(default_factory=dict, compare=False)


@dataclass(frozen=True)
class MemberRecord:
    """
    One AU member, flattened to a uniform shape.

    secondary_id is the UPN for users, mail for groups and the operating
    system for devices. job_title and enabled only apply to users; enabled
    is None when unknown or not applicable.
    """
    member_type: MemberType
    name: str
    secondary_id: str = ""
    job_title: str = ""
    enabled: Optional[bool] = None

    @property
    def enabled_label(self) -> str:
        if self.enabled is None:
            return ""
        return "True" if self.enabled else "False"


@dataclass(frozen=True)
class RoleEntry:
    role_name: str
    role_description: str
    scope: str
    au_name: str
    au_id: str
    members: Tuple[MemberRecord, ...] = ()


# ---------- scope kinds ----------

@dataclass(frozen=True)
class TenantWide:
    pass


@dataclass(frozen=True)
class AdministrativeUnitScope:
    raw: str
    fragment: str


@dataclass(frozen=True)
class UnrecognizedScope:
    raw: str


ScopeKind = Union[TenantWide, AdministrativeUnitScope, UnrecognizedScope]
