# ================================================================
# File     : modules/entra/member_resolver.py
# Purpose  : Turn AU member references into uniform MemberRecords
# Notes    : Dispatch is on the declared @odata.type tag only.
#            Lookup failures propagate to the caller.
# ================================================================

from typing import Iterable, List

from core.models import DeclaredType, DirectoryObjectRef, MemberRecord, MemberType


def _text(value) -> str:
    return "" if value is None else str(value)


def _user(ref: DirectoryObjectRef, directory) -> MemberRecord:
    u = directory.get_user_details(ref.id)
    enabled = u.get("accountEnabled")
    return MemberRecord(
        member_type=MemberType.USER,
        name=_text(u.get("displayName")),
        secondary_id=_text(u.get("userPrincipalName")),
        job_title=_text(u.get("jobTitle")),
        enabled=enabled if isinstance(enabled, bool) else None,
    )


def _group(ref: DirectoryObjectRef, directory) -> MemberRecord:
    g = directory.get_group_details(ref.id)
    return MemberRecord(
        member_type=MemberType.GROUP,
        name=_text(g.get("displayName")),
        secondary_id=_text(g.get("mail")),
    )


def _device(ref: DirectoryObjectRef, directory) -> MemberRecord:
    d = directory.get_device_details(ref.id)
    return MemberRecord(
        member_type=MemberType.DEVICE,
        name=_text(d.get("displayName")),
        secondary_id=_text(d.get("operatingSystem")),
    )


def _other(ref: DirectoryObjectRef, directory) -> MemberRecord:
    return MemberRecord(member_type=MemberType.OTHER, name=ref.id)


_RESOLVERS = {
    DeclaredType.USER: _user,
    DeclaredType.GROUP: _group,
    DeclaredType.DEVICE: _device,
    DeclaredType.OTHER: _other,
}


def resolve_member(ref: DirectoryObjectRef, directory) -> MemberRecord:
    resolver = _RESOLVERS.get(ref.declared_type, _other)
    return resolver(ref, directory)


def resolve_members(refs: Iterable[DirectoryObjectRef], directory) -> List[MemberRecord]:
    """Resolve references one by one, keeping their order."""
    return [resolve_member(ref, directory) for ref in refs]
