"""
Permission and authorization utilities.

Roles form a closed enumeration; each role maps to a fixed capability set
and every authorization decision in the service layer goes through it.
Tenant scoping (which hostel a principal may act on) lives here as well.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import FrozenSet, Mapping, Optional

from hostel_ledger.core.exceptions import (
    AuthorizationError,
    ErrorCode,
    ValidationError,
)
from hostel_ledger.models.base.enums import UserRole


class Capability(str, enum.Enum):
    """Fine-grained actions a role may perform."""
    ALLOCATE_ROOM = "allocation.create"
    CHECKOUT_ALLOCATION = "allocation.delete"
    VIEW_ALLOCATIONS = "allocation.view"
    RECORD_PAYMENT = "payment.create"
    VIEW_PAYMENTS = "payment.view"
    VIEW_RECEIPTS = "receipt.view"
    SET_DISPLAY_PRICE = "allocation.display_price"
    MANAGE_CHECK_INS = "check_in.manage"
    MANAGE_SEMESTERS = "semester.manage"
    RECORD_EXPENSE = "expense.create"
    VIEW_EXPENSES = "expense.view"
    CROSS_HOSTEL = "hostel.any"


_STAFF_CAPABILITIES: FrozenSet[Capability] = frozenset({
    Capability.ALLOCATE_ROOM,
    Capability.CHECKOUT_ALLOCATION,
    Capability.VIEW_ALLOCATIONS,
    Capability.RECORD_PAYMENT,
    Capability.VIEW_PAYMENTS,
    Capability.VIEW_RECEIPTS,
    Capability.MANAGE_CHECK_INS,
    Capability.MANAGE_SEMESTERS,
    Capability.RECORD_EXPENSE,
    Capability.VIEW_EXPENSES,
})

ROLE_CAPABILITIES: Mapping[UserRole, FrozenSet[Capability]] = {
    UserRole.SUPER_ADMIN: _STAFF_CAPABILITIES | {Capability.CROSS_HOSTEL},
    UserRole.HOSTEL_OWNER: _STAFF_CAPABILITIES,
    UserRole.CUSTODIAN: _STAFF_CAPABILITIES | {Capability.SET_DISPLAY_PRICE},
}


class PermissionDenied(AuthorizationError):
    """Raised when a principal lacks a capability or acts outside its hostel."""

    def __init__(
        self,
        message: str,
        user_id: Optional[int] = None,
        role: Optional[UserRole] = None,
        required_permission: Optional[str] = None,
    ) -> None:
        super().__init__(
            message,
            required_permission=required_permission,
            error_code=ErrorCode.INSUFFICIENT_PERMISSIONS if required_permission else ErrorCode.AUTHORIZATION_FAILED,
        )
        self.user_id = user_id
        self.role = role


@dataclass(frozen=True)
class Principal:
    """
    Represents an authenticated staff member in the service layer.

    Attributes:
        user_id: Identifier of the staff account (token ``sub``)
        role: Staff role
        hostel_id: Hostel the account belongs to; None for Super-Admins
        metadata: Optional request context
    """
    user_id: int
    role: UserRole
    hostel_id: Optional[int] = None
    metadata: dict = field(default_factory=dict)

    @property
    def capabilities(self) -> FrozenSet[Capability]:
        return ROLE_CAPABILITIES.get(self.role, frozenset())

    def can(self, capability: Capability) -> bool:
        return capability in self.capabilities

    @property
    def is_cross_hostel(self) -> bool:
        return self.can(Capability.CROSS_HOSTEL)


def require_capability(
    principal: Principal,
    capability: Capability,
    *,
    error_message: Optional[str] = None,
) -> None:
    """
    Assert that principal's role grants a capability.

    Raises:
        PermissionDenied: If the role lacks the capability
    """
    if not principal.can(capability):
        msg = error_message or (
            f"Role '{principal.role.value}' is not allowed to perform '{capability.value}'"
        )
        raise PermissionDenied(
            msg,
            user_id=principal.user_id,
            role=principal.role,
            required_permission=capability.value,
        )


def resolve_hostel_scope(principal: Principal, requested_hostel_id: Optional[int] = None) -> int:
    """
    Work out which hostel an operation targets.

    Cross-hostel principals must name the hostel explicitly. Everyone else
    is pinned to their own hostel, and naming a different one is refused.

    Raises:
        ValidationError: hostel missing for a cross-hostel principal, or the
            principal is not linked to any hostel
        PermissionDenied: a different hostel was requested
    """
    if principal.is_cross_hostel:
        if not requested_hostel_id:
            raise ValidationError("hostelId is required")
        return requested_hostel_id

    own_hostel_id = require_hostel_link(principal)
    if requested_hostel_id and requested_hostel_id != own_hostel_id:
        raise PermissionDenied(
            "You can only act on your own hostel",
            user_id=principal.user_id,
            role=principal.role,
        )
    return own_hostel_id


def optional_hostel_scope(principal: Principal, requested_hostel_id: Optional[int] = None) -> Optional[int]:
    """
    Like :func:`resolve_hostel_scope` for read paths, where a cross-hostel
    principal may omit the hostel to see every tenant.
    """
    if principal.is_cross_hostel:
        return requested_hostel_id or None
    return resolve_hostel_scope(principal, requested_hostel_id)


def require_hostel_link(principal: Principal) -> int:
    if not principal.hostel_id:
        raise ValidationError("User is not linked to a hostel")
    return principal.hostel_id


def ensure_same_hostel(principal: Principal, entity_hostel_id: int, entity_label: str) -> None:
    """
    Check that an entity belongs to the principal's hostel.

    Cross-hostel principals are exempt.

    Raises:
        ValidationError: principal is not linked to a hostel
        PermissionDenied: entity belongs to another hostel
    """
    if principal.is_cross_hostel:
        return
    own_hostel_id = require_hostel_link(principal)
    if int(entity_hostel_id) != int(own_hostel_id):
        raise PermissionDenied(
            f"{entity_label} does not belong to your hostel",
            user_id=principal.user_id,
            role=principal.role,
        )


def ensure_entity_in_hostel(principal: Principal, entity_hostel_id: int, hostel_id: int, entity_label: str) -> None:
    """Check that an entity belongs to an already resolved hostel scope."""
    if int(entity_hostel_id) != int(hostel_id):
        raise PermissionDenied(
            f"{entity_label} does not belong to your hostel",
            user_id=principal.user_id,
            role=principal.role,
        )
