# ================================================================
# File     : modules/entra/au_role_report.py
# Purpose  : Report a principal's directory role assignments, their
#            scope (tenant-wide or administrative unit) and, for AU
#            scoped roles, the AU's users, groups and devices.
# Notes    : Read-only. Follows the run(client, args) signature.
# Output   : data["entries"] -> list[RoleEntry]
#            data["rows"]    -> list[dict] (tabular form)
#            data["summary"] -> headline counts
# ================================================================

from core.reporting import fncRenderRows, fncSummarise
from core.utils import fncPrintMessage, fncToTable, fncNewRunId
from handlers.graph.directory import DirectoryService
from modules.entra.role_entries import build_role_entries

PREVIEW_HEADERS = ["RoleName", "Scope", "AUName", "MemberType", "MemberName", "MemberUPNOrInfo"]


def _principal_id(directory, args) -> str:
    user = getattr(args, "user", None)
    if user:
        fncPrintMessage(f"Resolving principal: {user}", "info")
        return directory.resolve_principal_id(user)
    fncPrintMessage("No --user given; reporting on the signed-in principal.", "info")
    return directory.current_principal_id()


# ================================================================
# Function: run
# Purpose : Entry point for module execution
# Notes   : client is an initialised GraphClient. Identity and role
#           listing errors propagate to the caller.
# ================================================================
def run(client, args, directory=None):
    run_id = fncNewRunId("hound")
    fncPrintMessage(f"Running AU role report (run={run_id})", "info")

    directory = directory or DirectoryService(client)
    principal_id = _principal_id(directory, args)
    entries = build_role_entries(directory, principal_id, parallel=int(getattr(args, "parallel", 1) or 1))

    rows = fncRenderRows(entries)
    summary = fncSummarise(entries)

    if getattr(args, "preview", False):
        fncPrintMessage("Role assignment preview (top 50)", "info")
        print(fncToTable(rows, headers=PREVIEW_HEADERS, max_rows=50))

    for label, value in summary.items():
        fncPrintMessage(f"{label}: {value}", "debug")
    if summary["Failed AUs"]:
        fncPrintMessage(f"{summary['Failed AUs']} administrative unit(s) could not be read.", "warn")

    fncPrintMessage(f"AU role report complete — {len(entries)} role(s), {len(rows)} row(s)", "success")
    return {
        "run_id": run_id,
        "principal_id": principal_id,
        "entries": entries,
        "rows": rows,
        "summary": summary,
    }
