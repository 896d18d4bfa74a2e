# ================================================================
# File     : exports.py
# Purpose  : Write the role report to its sinks (console, TXT, CSV, JSON)
# Notes    : Called by RoleHound.py once the entries are built
# ================================================================

import pathlib
from dataclasses import asdict
from datetime import datetime, timezone
from typing import List

from core.models import RoleEntry
from core.reporting import ROW_HEADERS, fncRenderLines, fncRenderRows, fncRenderText, fncSummarise
from core.utils import fncPrintMessage, fncEnsureFolder, fncExportCSV, fncWriteJSON

SUPPORTED_FORMATS = ("txt", "csv", "json")


# ================================================================
# Function: fncExportList
# Purpose  : Flatten --export list-of-strings from argparse
# Notes    : "txt,csv json" -> {"txt", "csv", "json"}; unknowns dropped
# ================================================================
def fncExportList(args_export) -> set:
    if not args_export:
        return set()
    out = set()
    for chunk in args_export:
        for part in str(chunk).replace(",", " ").split():
            fmt = part.strip().lower()
            if fmt in SUPPORTED_FORMATS:
                out.add(fmt)
            else:
                fncPrintMessage(f"Ignoring unknown export format: {part}", "warn")
    return out


# ================================================================
# Function: fncGetExportPath
# Purpose  : Build timestamped output folder under the reports dir
# ================================================================
def fncGetExportPath(name: str, root: pathlib.Path) -> pathlib.Path:
    ts = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
    slug = name.replace("/", "_").replace("\\", "_").replace("@", "_at_")
    return fncEnsureFolder(pathlib.Path(root) / ts / slug)


# ================================================================
# Function: fncWriteText
# Purpose  : Save the text report (CRLF line endings, UTF-8)
# ================================================================
def fncWriteText(path: str, entries: List[RoleEntry]) -> None:
    p = pathlib.Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    with open(p, "w", newline="", encoding="utf-8") as f:
        f.write(fncRenderText(entries))
    fncPrintMessage(f"Saved report → {p}", "success")


# ================================================================
# Function: fncWriteRowsCSV
# Purpose  : Save the tabular form with a fixed column order
# ================================================================
def fncWriteRowsCSV(path: str, entries: List[RoleEntry]) -> None:
    fncExportCSV(path, fncRenderRows(entries), headers=ROW_HEADERS)


# ================================================================
# Function: fncPrintReport
# Purpose  : Print the text report to the console
# ================================================================
def fncPrintReport(entries: List[RoleEntry]) -> None:
    print("\n".join(fncRenderLines(entries)))


# ================================================================
# Function: fncWriteOutput
# Purpose  : Single --output target; .csv gets rows, anything else text
# ================================================================
def fncWriteOutput(path: str, entries: List[RoleEntry]) -> None:
    if pathlib.Path(path).suffix.lower() == ".csv":
        fncWriteRowsCSV(path, entries)
    else:
        fncWriteText(path, entries)


# ================================================================
# Function: fncExportReport
# Purpose  : Write every requested format into one run folder
# ================================================================
def fncExportReport(name: str, principal_id: str, entries: List[RoleEntry], formats: set,
                    root: pathlib.Path) -> pathlib.Path:
    out_dir = fncGetExportPath(name, root)

    if "txt" in formats:
        fncWriteText(str(out_dir / f"{name}.txt"), entries)

    if "csv" in formats:
        fncWriteRowsCSV(str(out_dir / f"{name}.csv"), entries)

    if "json" in formats:
        data = {
            "principal_id": principal_id,
            "summary": fncSummarise(entries),
            "entries": [_entry_to_dict(e) for e in entries],
        }
        fncWriteJSON(str(out_dir / f"{name}.json"), data)

    fncPrintMessage(f"Exports written → {out_dir}", "success")
    return out_dir


def _entry_to_dict(entry: RoleEntry) -> dict:
    d = asdict(entry)
    d["members"] = [
        {**asdict(m), "member_type": m.member_type.value}
        for m in entry.members
    ]
    return d
