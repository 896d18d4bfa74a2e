# ================================================================
# File     : handlers/graph/directory.py
# Purpose  : Directory lookups used by the role report, on top of
#            GraphClient. Maps raw Graph JSON into core.models types.
# Notes    : Read-only. Errors from GraphClient propagate unchanged;
#            callers decide what is fatal and what is recoverable.
# ================================================================

from typing import Any, Dict, List

from core.models import AdministrativeUnit, DirectoryObjectRef, RoleAssignment, RoleDefinition
from core.utils import fncPrintMessage
from handlers.graph.client import GraphNotFound
from handlers.graph.graph_helpers import fncDeclaredType, fncODataFilterLiteral, fncPathSegment, fncSelect

REQUIRED_PERMS = [
    "Directory.Read.All",
    "RoleManagement.Read.Directory",
    "AdministrativeUnit.Read.All",
]

USER_FIELDS = ["id", "displayName", "userPrincipalName", "userType", "jobTitle", "accountEnabled"]
GROUP_FIELDS = ["id", "displayName", "mail"]
DEVICE_FIELDS = ["id", "displayName", "operatingSystem"]


class DirectoryService:
    """Typed directory operations; every call goes through the given client."""

    def __init__(self, client):
        self.client = client

    # ---------- principal ----------

    def current_principal_id(self) -> str:
        me = self.client.get(fncSelect("me", ["id", "userPrincipalName"]))
        fncPrintMessage(f"Signed in as {me.get('userPrincipalName') or me.get('id')}", "debug")
        if not me.get("id"):
            raise GraphNotFound("Signed-in principal has no object id")
        return me["id"]

    def resolve_principal_id(self, user: str) -> str:
        """Accept a UPN or an object id and return the object id."""
        row = self.client.get(fncSelect(f"users/{fncPathSegment(user)}", ["id"]))
        if not row.get("id"):
            raise GraphNotFound(f"User not found: {user}")
        return row["id"]

    # ---------- roles ----------

    def list_role_assignments(self, principal_id: str) -> List[RoleAssignment]:
        flt = f"principalId eq {fncODataFilterLiteral(principal_id)}"
        rows = self.client.get_all(
            fncSelect("roleManagement/directory/roleAssignments", ["id", "principalId", "roleDefinitionId", "directoryScopeId"]),
            params={"$filter": flt},
        )
        return [
            RoleAssignment(
                principal_id=r.get("principalId") or principal_id,
                role_definition_id=r.get("roleDefinitionId") or "",
                directory_scope_id=r.get("directoryScopeId") or "",
            )
            for r in rows
        ]

    def get_role_definition(self, role_definition_id: str) -> RoleDefinition:
        row = self.client.get(fncSelect(
            f"roleManagement/directory/roleDefinitions/{fncPathSegment(role_definition_id)}",
            ["id", "displayName", "description"],
        ))
        return RoleDefinition(
            id=row.get("id") or role_definition_id,
            display_name=row.get("displayName") or "",
            description=row.get("description") or "",
        )

    # ---------- administrative units ----------

    def get_administrative_unit(self, au_id: str) -> AdministrativeUnit:
        if not au_id:
            # An empty id would hit the AU collection endpoint instead.
            raise GraphNotFound("Administrative unit id is empty", 404)
        row = self.client.get(fncSelect(f"directory/administrativeUnits/{fncPathSegment(au_id)}", ["id", "displayName"]))
        return AdministrativeUnit(id=row.get("id") or au_id, display_name=row.get("displayName") or "")

    def list_administrative_unit_members(self, au_id: str) -> List[DirectoryObjectRef]:
        rows = self.client.get_all(f"directory/administrativeUnits/{fncPathSegment(au_id)}/members")
        return [_to_ref(r) for r in rows]

    # ---------- member details ----------

    def get_user_details(self, user_id: str) -> Dict[str, Any]:
        return self.client.get(fncSelect(f"users/{fncPathSegment(user_id)}", USER_FIELDS))

    def get_group_details(self, group_id: str) -> Dict[str, Any]:
        return self.client.get(fncSelect(f"groups/{fncPathSegment(group_id)}", GROUP_FIELDS))

    def get_device_details(self, device_id: str) -> Dict[str, Any]:
        return self.client.get(fncSelect(f"devices/{fncPathSegment(device_id)}", DEVICE_FIELDS))


def _to_ref(obj: Dict[str, Any]) -> DirectoryObjectRef:
    attrs = {k: v for k, v in obj.items() if k not in ("id", "@odata.type")}
    return DirectoryObjectRef(id=obj.get("id") or "", declared_type=fncDeclaredType(obj), attributes=attrs)
