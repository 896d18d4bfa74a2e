#!/usr/bin/env python3
# ================================================================
# Tool     : RoleHound
# Purpose  : Report Entra ID directory role assignments and the
#            administrative units (and their members) they cover
# Notes    : "Sniffing out who can do what, where." Read-only.
# ================================================================

import argparse
import pathlib

from core.config import fncInitConfig, fncApplyCliOverrides, fncIsDebug, fncGetProviderConfig
from core.utils import fncPrintMessage, fncSetDebug, fncDisplayBanner, fncMask
from core.exports import fncExportList, fncExportReport, fncPrintReport, fncWriteOutput
from modules.entra import au_role_report

# ================================================================
# Function: fncParseArguments
# Purpose  : Define and parse command-line arguments for RoleHound
# ================================================================
def fncParseArguments(argv=None):
    parser = argparse.ArgumentParser(
        prog="RoleHound",
        description="RoleHound — Entra role assignment and administrative unit reporter"
    )

    parser.add_argument(
        "--user",
        help="UPN or object id to report on (default: the signed-in user)",
        default=None
    )

    parser.add_argument(
        "--output",
        help="Write the report to a file: .csv for rows, anything else (e.g. .txt) for text",
        default=None
    )

    parser.add_argument(
        "--export",
        nargs="*",
        metavar="FMT[,FMT...]",
        help="Also export to the reports folder: txt, csv, json. Example: --export txt,csv json",
        default=None
    )

    parser.add_argument(
        "--parallel",
        type=int,
        default=None,
        help="Number of role assignments to resolve concurrently (default: 1 = sequential)"
    )

    parser.add_argument(
        "--preview",
        action="store_true",
        help="Print a tabular preview of the rows to the console"
    )

    parser.add_argument(
        "--config",
        help="Path to config.json (default: ~/.rolehound/config.json)",
        default=None
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable verbose debug output"
    )

    return parser.parse_args(argv)


# ================================================================
# Function: fncInitClient
# Purpose  : Build the Graph client from config / environment
# Notes    : Missing tenant or client id are prompted for by GraphClient
# ================================================================
def fncInitClient(cfg: dict):
    from handlers.graph.client import GraphClient

    entra_cfg = fncGetProviderConfig(cfg, "entra")
    fncPrintMessage(
        f"Tenant: {entra_cfg.get('tenant_id') or '(prompt)'} | Client: {entra_cfg.get('client_id') or '(prompt)'} "
        f"| Secret: {fncMask(entra_cfg.get('client_secret')) or '(none, delegated sign-in)'}",
        "debug",
    )
    return GraphClient(
        tenant_id=entra_cfg.get("tenant_id"),
        client_id=entra_cfg.get("client_id"),
        client_secret=entra_cfg.get("client_secret"),
        authority=entra_cfg.get("authority"),
    )


# ================================================================
# Function: main
# Purpose  : Main entry point for RoleHound execution
# Notes    : Returns the process exit code; 1 when the run is aborted
# ================================================================
def main(argv=None) -> int:
    args = fncParseArguments(argv)

    cfg = fncInitConfig(args.config)
    cfg = fncApplyCliOverrides(cfg, args)
    fncSetDebug(fncIsDebug(cfg))
    args.parallel = cfg.get("parallel", 1)

    fncDisplayBanner("v1.0")
    fncPrintMessage("🐕 Releasing the hound on your Entra tenant...", "info")
    if args.parallel > 4:
        fncPrintMessage("Warning: --parallel > 4 may hit Microsoft Graph throttling.", "warn")

    try:
        with fncInitClient(cfg) as client:
            result = au_role_report.run(client, args)
    except Exception as ex:
        fncPrintMessage(f"Run aborted, no report written: {ex}", "error")
        return 1

    entries = result["entries"]

    if args.output:
        fncWriteOutput(args.output, entries)
    else:
        fncPrintReport(entries)

    export_formats = fncExportList(args.export)
    if export_formats:
        reports_root = pathlib.Path(cfg.get("reports_dir") or pathlib.Path.home() / ".rolehound" / "reports")
        fncExportReport("au_role_report", result["principal_id"], entries, export_formats, reports_root)

    fncPrintMessage("Report complete. Good boy.", "success")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
