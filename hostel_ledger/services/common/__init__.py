from hostel_ledger.services.common.permissions import (
    Capability,
    PermissionDenied,
    Principal,
    ROLE_CAPABILITIES,
    ensure_entity_in_hostel,
    ensure_same_hostel,
    optional_hostel_scope,
    require_capability,
    require_hostel_link,
    resolve_hostel_scope,
)

__all__ = [
    "Capability",
    "PermissionDenied",
    "Principal",
    "ROLE_CAPABILITIES",
    "ensure_entity_in_hostel",
    "ensure_same_hostel",
    "optional_hostel_scope",
    "require_capability",
    "require_hostel_link",
    "resolve_hostel_scope",
]
