"""Unit tests for building RoleEntries from role assignments."""

import pytest

from core.models import (
    FAILED_AU_NAME,
    NOT_APPLICABLE,
    DeclaredType,
    MemberType,
    RoleAssignment,
    RoleEntry,
)
from handlers.graph.client import GraphNotFound
from modules.entra.role_entries import build_role_entries, build_role_entry

from tests.conftest import FakeDirectory, ref


def test_tenant_wide_entry(scenario_directory: FakeDirectory) -> None:
    entry = build_role_entry(RoleAssignment("me-id", "role-readers", "/"), scenario_directory)
    assert entry == RoleEntry(
        role_name="Directory Readers",
        role_description="Can read basic directory information.",
        scope="/ (Tenant-wide)",
        au_name="Not scoped to an AU",
        au_id="N/A",
        members=(),
    )


def test_au_entry_resolves_members(scenario_directory: FakeDirectory) -> None:
    entry = build_role_entry(
        RoleAssignment("me-id", "role-useradmin", "/administrativeUnits/au-emea"), scenario_directory
    )
    assert entry.scope == "/administrativeUnits/au-emea"
    assert entry.au_name == "EMEA Staff"
    assert entry.au_id == "au-emea"
    assert len(entry.members) == 1
    assert entry.members[0].name == "Felix Schneider"
    assert entry.members[0].enabled is True


def test_au_id_comes_from_lookup_not_fragment(directory: FakeDirectory) -> None:
    """The canonical id returned by the AU lookup wins over the scope fragment."""
    directory.add_role("r", "Helpdesk Administrator")
    directory.add_au("canonical-id", "Sales", [ref("x", DeclaredType.OTHER)], lookup_key="ALIAS")
    entry = build_role_entry(RoleAssignment("p", "r", "/administrativeUnits/ALIAS"), directory)
    assert entry.au_id == "canonical-id"
    assert ("au_members", "canonical-id") in directory.calls


def test_members_keep_listing_order_and_count(directory: FakeDirectory) -> None:
    directory.add_role("r", "Groups Administrator")
    directory.groups["g1"] = {"displayName": "Alpha", "mail": "a@example.com"}
    directory.devices["d1"] = {"displayName": "PC-1", "operatingSystem": "Linux"}
    refs = [ref("g1", DeclaredType.GROUP), ref("o1", DeclaredType.OTHER), ref("d1", DeclaredType.DEVICE)]
    directory.add_au("au1", "Mixed", refs)

    entry = build_role_entry(RoleAssignment("p", "r", "/administrativeUnits/au1"), directory)
    assert [m.member_type for m in entry.members] == [MemberType.GROUP, MemberType.OTHER, MemberType.DEVICE]
    assert len(entry.members) == len(refs)


def test_empty_au_has_no_members(directory: FakeDirectory) -> None:
    directory.add_role("r", "User Administrator")
    directory.add_au("au-empty", "Nobody Home")
    entry = build_role_entry(RoleAssignment("p", "r", "/administrativeUnits/au-empty"), directory)
    assert entry.au_name == "Nobody Home"
    assert entry.members == ()


def test_failed_au_lookup_marks_entry(directory: FakeDirectory) -> None:
    directory.add_role("r", "User Administrator")
    directory.failing_aus.add("au-broken")
    entry = build_role_entry(RoleAssignment("p", "r", "/administrativeUnits/au-broken"), directory)
    assert entry.au_name == FAILED_AU_NAME
    assert entry.au_id == "au-broken"
    assert entry.scope == "/administrativeUnits/au-broken"
    assert entry.members == ()


def test_member_lookup_failure_abandons_whole_au(directory: FakeDirectory) -> None:
    directory.add_role("r", "User Administrator")
    directory.users["u1"] = {"displayName": "Fine", "userPrincipalName": "fine@example.com"}
    directory.add_au("au1", "Half Broken", [ref("u1", DeclaredType.USER), ref("u2", DeclaredType.USER)])
    directory.failing_members.add("u2")

    entry = build_role_entry(RoleAssignment("p", "r", "/administrativeUnits/au1"), directory)
    assert entry.au_name == FAILED_AU_NAME
    assert entry.members == ()


def test_unrecognized_scope(directory: FakeDirectory) -> None:
    directory.add_role("r", "Application Administrator")
    entry = build_role_entry(RoleAssignment("p", "r", "/applications/app-1"), directory)
    assert entry.scope == "/applications/app-1"
    assert entry.au_name == "Unknown scope"
    assert entry.au_id == "/applications/app-1"
    assert entry.members == ()


def test_blank_scope_still_has_scope_text(directory: FakeDirectory) -> None:
    directory.add_role("r", "Application Administrator")
    entry = build_role_entry(RoleAssignment("p", "r", ""), directory)
    assert entry.scope
    assert entry.au_name == "Unknown scope"


def test_missing_role_definition_is_fatal(directory: FakeDirectory) -> None:
    with pytest.raises(GraphNotFound):
        build_role_entry(RoleAssignment("p", "missing", "/"), directory)


def test_au_id_is_na_only_for_tenant_wide(scenario_directory: FakeDirectory) -> None:
    scenario_directory.add_role("role-x", "Unknown Role")
    scenario_directory.assign("me-id", "role-x", "/weird")
    scenario_directory.failing_aus.add("bad")
    scenario_directory.assign("me-id", "role-x", "/administrativeUnits/bad")

    entries = build_role_entries(scenario_directory, "me-id")
    for entry in entries:
        assert (entry.au_id == NOT_APPLICABLE) == (entry.scope == "/ (Tenant-wide)")
        assert entry.scope


def test_one_failing_au_among_many_is_isolated(directory: FakeDirectory) -> None:
    """N assignments with one broken AU still give N entries, N-1 untouched."""
    directory.add_role("r", "User Administrator")
    for i in range(5):
        directory.users[f"u{i}"] = {"displayName": f"User {i}", "userPrincipalName": f"u{i}@example.com"}
        directory.add_au(f"au{i}", f"AU {i}", [ref(f"u{i}", DeclaredType.USER)])
        directory.assign("p", "r", f"/administrativeUnits/au{i}")
    directory.failing_aus.add("au2")

    entries = build_role_entries(directory, "p")
    assert len(entries) == 5
    assert [e.au_name for e in entries] == ["AU 0", "AU 1", FAILED_AU_NAME, "AU 3", "AU 4"]
    assert all(len(e.members) == 1 for i, e in enumerate(entries) if i != 2)


def test_entries_follow_assignment_order(scenario_directory: FakeDirectory) -> None:
    entries = build_role_entries(scenario_directory, "me-id")
    assert [e.role_name for e in entries] == ["Directory Readers", "User Administrator"]


def test_parallel_build_keeps_order(directory: FakeDirectory) -> None:
    directory.add_role("r", "User Administrator")
    for i in range(12):
        directory.add_au(f"au{i}", f"AU {i}")
        directory.assign("p", "r", f"/administrativeUnits/au{i}")
    directory.failing_aus.add("au7")

    entries = build_role_entries(directory, "p", parallel=4)
    assert [e.au_id for e in entries] == [f"au{i}" for i in range(12)]
    assert entries[7].au_name == FAILED_AU_NAME


def test_no_assignments_gives_no_entries(directory: FakeDirectory) -> None:
    assert build_role_entries(directory, "nobody") == []
