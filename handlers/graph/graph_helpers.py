# ================================================================
# File     : handlers/graph/graph_helpers.py
# Purpose  : Small Graph helpers (endpoint building, @odata.type tags)
# Notes    : Keeps URL quoting and type-tag parsing out of callers.
# ================================================================

from typing import Any, Dict, List
from urllib.parse import quote

from core.models import DeclaredType

_ODATA_TYPE_TAGS = {
    "#microsoft.graph.user": DeclaredType.USER,
    "#microsoft.graph.group": DeclaredType.GROUP,
    "#microsoft.graph.device": DeclaredType.DEVICE,
}


def fncSelect(endpoint: str, fields: List[str]) -> str:
    """Append a $select clause to an endpoint."""
    if not fields:
        return endpoint
    sep = "&" if "?" in endpoint else "?"
    return f"{endpoint}{sep}$select={','.join(fields)}"


def fncPathSegment(value: str) -> str:
    """Quote one path segment (ids, UPNs with '#EXT#', etc.)."""
    return quote(str(value), safe="@")


def fncODataFilterLiteral(value: str) -> str:
    """OData string literal; single quotes are doubled."""
    return "'" + str(value).replace("'", "''") + "'"


def fncDeclaredType(obj: Dict[str, Any]) -> DeclaredType:
    """Map the explicit @odata.type tag to a DeclaredType; unknown tags -> OTHER."""
    tag = str(obj.get("@odata.type") or "").strip().lower()
    return _ODATA_TYPE_TAGS.get(tag, DeclaredType.OTHER)
