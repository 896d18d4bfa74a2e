# ================================================================
# File     : modules/entra/role_entries.py
# Purpose  : Build one RoleEntry per role assignment of a principal
# Notes    : Role definition / assignment listing failures are fatal
#            and propagate. AU lookups are isolated per assignment:
#            a bad AU marks its own entry and the run carries on.
# ================================================================

from concurrent.futures import ThreadPoolExecutor
from typing import List

from core.models import (
    FAILED_AU_NAME,
    NOT_APPLICABLE,
    NOT_SCOPED_AU_NAME,
    TENANT_SCOPE_LABEL,
    UNKNOWN_SCOPE_NAME,
    AdministrativeUnitScope,
    RoleAssignment,
    RoleEntry,
    TenantWide,
)
from core.utils import fncPrintMessage
from modules.entra.member_resolver import resolve_members
from modules.entra.scope_classifier import classify_scope


def _au_entry(role_name: str, role_description: str, scope: AdministrativeUnitScope, directory) -> RoleEntry:
    try:
        au = directory.get_administrative_unit(scope.fragment)
        refs = directory.list_administrative_unit_members(au.id)
        members = resolve_members(refs, directory)
    except Exception as ex:
        fncPrintMessage(f"Could not resolve AU '{scope.fragment}' for role '{role_name}': {ex}", "warn")
        return RoleEntry(
            role_name=role_name,
            role_description=role_description,
            scope=scope.raw,
            au_name=FAILED_AU_NAME,
            au_id=scope.fragment,
        )

    fncPrintMessage(f"AU '{au.display_name}' has {len(members)} member(s)", "debug")
    return RoleEntry(
        role_name=role_name,
        role_description=role_description,
        scope=scope.raw,
        au_name=au.display_name,
        au_id=au.id,
        members=tuple(members),
    )


def build_role_entry(assignment: RoleAssignment, directory) -> RoleEntry:
    role = directory.get_role_definition(assignment.role_definition_id)
    kind = classify_scope(assignment.directory_scope_id)

    if isinstance(kind, TenantWide):
        return RoleEntry(
            role_name=role.display_name,
            role_description=role.description,
            scope=TENANT_SCOPE_LABEL,
            au_name=NOT_SCOPED_AU_NAME,
            au_id=NOT_APPLICABLE,
        )

    if isinstance(kind, AdministrativeUnitScope):
        return _au_entry(role.display_name, role.description, kind, directory)

    fncPrintMessage(f"Unrecognised scope '{kind.raw}' on role '{role.display_name}'", "warn")
    # Keep the scope column non-empty even for a blank scope id
    return RoleEntry(
        role_name=role.display_name,
        role_description=role.description,
        scope=kind.raw or "(empty scope)",
        au_name=UNKNOWN_SCOPE_NAME,
        au_id=kind.raw,
    )


def build_role_entries(directory, principal_id: str, parallel: int = 1) -> List[RoleEntry]:
    """
    List the principal's role assignments and resolve each into a RoleEntry.
    Output order always follows the assignment listing, even with parallel > 1.
    """
    assignments = directory.list_role_assignments(principal_id)
    fncPrintMessage(f"Found {len(assignments)} role assignment(s) for {principal_id}", "info")

    if parallel <= 1 or len(assignments) <= 1:
        return [build_role_entry(a, directory) for a in assignments]

    with ThreadPoolExecutor(max_workers=parallel) as executor:
        return list(executor.map(lambda a: build_role_entry(a, directory), assignments))
