# ================================================================
# File     : core/reporting.py
# Purpose  : Render RoleEntries as a text report or as flat rows
# Notes    : Pure functions of the entry list; nothing is fetched here.
# ================================================================

from typing import Dict, Iterable, List

from core.models import AU_SCOPE_PREFIX, FAILED_AU_NAME, NOT_APPLICABLE, MemberRecord, RoleEntry

BORDER = "=" * 60
CRLF = "\r\n"
NO_MEMBERS = "No members in AU"

ROW_HEADERS = [
    "RoleName",
    "RoleDescription",
    "Scope",
    "AUName",
    "AUId",
    "MemberType",
    "MemberName",
    "MemberUPNOrInfo",
    "MemberJobTitle",
    "MemberEnabled",
]


# ---------- tiny helpers ----------

def _member_line(m: MemberRecord) -> str:
    return (
        f"{m.member_type.value}: {m.name} | UPN/Info: {m.secondary_id} "
        f"| Job Title: {m.job_title} | Enabled: {m.enabled_label}"
    )


def _entry_lines(entry: RoleEntry) -> List[str]:
    lines = [
        BORDER,
        f"Role: {entry.role_name}",
        f"Description: {entry.role_description}",
        f"Scope: {entry.scope}",
        f"AU Name: {entry.au_name}",
        f"AU ID: {entry.au_id}",
        BORDER,
    ]
    if not entry.members:
        lines.append(NO_MEMBERS)
    else:
        lines.extend(_member_line(m) for m in entry.members)
    return lines


def _role_fields(entry: RoleEntry) -> Dict[str, str]:
    return {
        "RoleName": entry.role_name,
        "RoleDescription": entry.role_description,
        "Scope": entry.scope,
        "AUName": entry.au_name,
        "AUId": entry.au_id,
    }


# ================================================================
# Function: fncRenderLines
# Purpose : Text report as a list of lines (no line endings)
# Notes   : Each entry block is followed by one blank line
# ================================================================
def fncRenderLines(entries: Iterable[RoleEntry]) -> List[str]:
    lines: List[str] = []
    for entry in entries:
        lines.extend(_entry_lines(entry))
        lines.append("")
    return lines


# ================================================================
# Function: fncRenderText
# Purpose : Text report joined with CRLF line endings
# ================================================================
def fncRenderText(entries: Iterable[RoleEntry]) -> str:
    lines = fncRenderLines(entries)
    if not lines:
        return ""
    return CRLF.join(lines) + CRLF


# ================================================================
# Function: fncRenderRows
# Purpose : One flat row per member (or one placeholder row per
#           entry without members); every value is a string
# ================================================================
def fncRenderRows(entries: Iterable[RoleEntry]) -> List[Dict[str, str]]:
    rows: List[Dict[str, str]] = []
    for entry in entries:
        base = _role_fields(entry)
        if not entry.members:
            rows.append({**base, "MemberType": "", "MemberName": "", "MemberUPNOrInfo": "",
                         "MemberJobTitle": "", "MemberEnabled": ""})
            continue
        for m in entry.members:
            rows.append({
                **base,
                "MemberType": m.member_type.value,
                "MemberName": m.name,
                "MemberUPNOrInfo": m.secondary_id,
                "MemberJobTitle": m.job_title,
                "MemberEnabled": m.enabled_label,
            })
    return rows


# ================================================================
# Function: fncSummarise
# Purpose : Headline counts for the console and JSON export
# ================================================================
def fncSummarise(entries: List[RoleEntry]) -> Dict[str, int]:
    return {
        "Roles": len(entries),
        "Tenant-wide": sum(1 for e in entries if e.au_id == NOT_APPLICABLE),
        "AU-scoped": sum(1 for e in entries if e.scope.startswith(AU_SCOPE_PREFIX)),
        "Failed AUs": sum(1 for e in entries if e.au_name == FAILED_AU_NAME),
        "Member rows": sum(len(e.members) for e in entries),
    }
