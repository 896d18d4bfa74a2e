"""Pytest fixtures for RoleHound tests."""

from __future__ import annotations

from typing import Any

import pytest

from core.models import (
    AdministrativeUnit,
    DeclaredType,
    DirectoryObjectRef,
    RoleAssignment,
    RoleDefinition,
)
from handlers.graph.client import GraphNotFound, GraphServiceError


# --- Fake directory collaborator ---


class FakeDirectory:
    """In-memory stand-in for handlers.graph.directory.DirectoryService."""

    def __init__(self) -> None:
        self.me = "me-id"
        self.users_by_upn: dict[str, str] = {}
        self.assignments: dict[str, list[RoleAssignment]] = {}
        self.role_definitions: dict[str, RoleDefinition] = {}
        self.aus: dict[str, AdministrativeUnit] = {}
        self.au_members: dict[str, list[DirectoryObjectRef]] = {}
        self.users: dict[str, dict[str, Any]] = {}
        self.groups: dict[str, dict[str, Any]] = {}
        self.devices: dict[str, dict[str, Any]] = {}
        self.failing_aus: set[str] = set()
        self.failing_members: set[str] = set()
        self.calls: list[tuple[str, str]] = []

    # principal
    def current_principal_id(self) -> str:
        self.calls.append(("me", ""))
        return self.me

    def resolve_principal_id(self, user: str) -> str:
        self.calls.append(("user", user))
        if user in self.users_by_upn:
            return self.users_by_upn[user]
        raise GraphNotFound(f"User not found: {user}", 404)

    # roles
    def list_role_assignments(self, principal_id: str) -> list[RoleAssignment]:
        self.calls.append(("assignments", principal_id))
        return list(self.assignments.get(principal_id, []))

    def get_role_definition(self, role_definition_id: str) -> RoleDefinition:
        self.calls.append(("role", role_definition_id))
        if role_definition_id not in self.role_definitions:
            raise GraphNotFound(f"Role definition not found: {role_definition_id}", 404)
        return self.role_definitions[role_definition_id]

    # administrative units
    def get_administrative_unit(self, au_id: str) -> AdministrativeUnit:
        self.calls.append(("au", au_id))
        if au_id in self.failing_aus:
            raise GraphServiceError("Graph API request failed with status 503", 503)
        if au_id not in self.aus:
            raise GraphNotFound(f"AU not found: {au_id}", 404)
        return self.aus[au_id]

    def list_administrative_unit_members(self, au_id: str) -> list[DirectoryObjectRef]:
        self.calls.append(("au_members", au_id))
        return list(self.au_members.get(au_id, []))

    # member details
    def _detail(self, store: dict, kind: str, object_id: str) -> dict[str, Any]:
        self.calls.append((kind, object_id))
        if object_id in self.failing_members:
            raise GraphServiceError(f"{kind} lookup failed", 500)
        return store[object_id]

    def get_user_details(self, user_id: str) -> dict[str, Any]:
        return self._detail(self.users, "user_details", user_id)

    def get_group_details(self, group_id: str) -> dict[str, Any]:
        return self._detail(self.groups, "group_details", group_id)

    def get_device_details(self, device_id: str) -> dict[str, Any]:
        return self._detail(self.devices, "device_details", device_id)

    # seeding helpers
    def add_role(self, role_id: str, name: str, description: str = "") -> None:
        self.role_definitions[role_id] = RoleDefinition(id=role_id, display_name=name, description=description)

    def assign(self, principal_id: str, role_id: str, scope: str) -> None:
        self.assignments.setdefault(principal_id, []).append(
            RoleAssignment(principal_id=principal_id, role_definition_id=role_id, directory_scope_id=scope)
        )

    def add_au(self, au_id: str, name: str, members: list[DirectoryObjectRef] | None = None,
               lookup_key: str | None = None) -> None:
        self.aus[lookup_key or au_id] = AdministrativeUnit(id=au_id, display_name=name)
        self.au_members[au_id] = list(members or [])


def ref(object_id: str, declared: DeclaredType) -> DirectoryObjectRef:
    return DirectoryObjectRef(id=object_id, declared_type=declared)


@pytest.fixture
def directory() -> FakeDirectory:
    return FakeDirectory()


@pytest.fixture
def scenario_directory() -> FakeDirectory:
    """Tenant-wide Directory Readers plus an AU-scoped User Administrator over one user."""
    d = FakeDirectory()
    d.add_role("role-readers", "Directory Readers", "Can read basic directory information.")
    d.add_role("role-useradmin", "User Administrator", "Can manage all aspects of users and groups.")
    d.add_au("au-emea", "EMEA Staff", [ref("user-felix", DeclaredType.USER)])
    d.users["user-felix"] = {
        "displayName": "Felix Schneider",
        "userPrincipalName": "Felix.Schneider@example.com",
        "jobTitle": "Engineer",
        "accountEnabled": True,
    }
    d.assign("me-id", "role-readers", "/")
    d.assign("me-id", "role-useradmin", "/administrativeUnits/au-emea")
    return d


# --- Fake Graph client (for DirectoryService tests) ---


class FakeGraphClient:
    """Answers get/get_all from canned payloads keyed by endpoint."""

    def __init__(self, single: dict[str, Any] | None = None, lists: dict[str, list] | None = None) -> None:
        self.single = single or {}
        self.lists = lists or {}
        self.requests: list[tuple[str, str, Any]] = []

    def get(self, endpoint: str, params=None) -> dict[str, Any]:
        self.requests.append(("get", endpoint, params))
        if endpoint not in self.single:
            raise GraphNotFound(f"no canned response for {endpoint}", 404)
        return self.single[endpoint]

    def get_all(self, endpoint: str, params=None) -> list[dict[str, Any]]:
        self.requests.append(("get_all", endpoint, params))
        if endpoint not in self.lists:
            raise GraphNotFound(f"no canned response for {endpoint}", 404)
        return self.lists[endpoint]
