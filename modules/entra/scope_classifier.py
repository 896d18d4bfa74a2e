# ================================================================
# File     : modules/entra/scope_classifier.py
# Purpose  : Classify a role assignment's directoryScopeId
# Notes    : Total over all inputs; never raises.
# ================================================================

from core.models import (
    AU_SCOPE_PREFIX,
    TENANT_SCOPE,
    AdministrativeUnitScope,
    ScopeKind,
    TenantWide,
    UnrecognizedScope,
)


def classify_scope(scope_id) -> ScopeKind:
    raw = scope_id if isinstance(scope_id, str) else ("" if scope_id is None else str(scope_id))
    if raw == TENANT_SCOPE:
        return TenantWide()
    if raw.startswith(AU_SCOPE_PREFIX):
        return AdministrativeUnitScope(raw=raw, fragment=raw[len(AU_SCOPE_PREFIX):])
    return UnrecognizedScope(raw=raw)
