"""Role gate for back-office users.

Policy table (permission → roles allowed):

    ADMIN_ONLY   admin
    EDIT         admin, editor
    DELETE       admin
    PRIVILEGED   admin, editor, operator

The plain "user" role (public site accounts) is allowed nothing here.
"""

import enum
from dataclasses import dataclass
from typing import Iterable, Optional, Union


class Role(str, enum.Enum):
    USER = "user"
    ADMIN = "admin"
    EDITOR = "editor"
    OPERATOR = "operator"


class Permission(str, enum.Enum):
    ADMIN_ONLY = "admin_only"
    EDIT = "edit"
    DELETE = "delete"
    PRIVILEGED = "privileged"


POLICY: dict[Permission, frozenset[Role]] = {
    Permission.ADMIN_ONLY: frozenset({Role.ADMIN}),
    Permission.EDIT: frozenset({Role.ADMIN, Role.EDITOR}),
    Permission.DELETE: frozenset({Role.ADMIN}),
    Permission.PRIVILEGED: frozenset({Role.ADMIN, Role.EDITOR, Role.OPERATOR}),
}

ROLE_DISPLAY_NAMES = {
    Role.ADMIN: "Administrator",
    Role.EDITOR: "Editor",
    Role.OPERATOR: "Operator",
    Role.USER: "User",
}

_DENY_MESSAGES = {
    Permission.ADMIN_ONLY: "Admin access required",
    Permission.EDIT: "Admin or Editor access required",
    Permission.DELETE: "Admin access required",
    Permission.PRIVILEGED: "Admin, Editor, or Operator access required",
}


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: str = ""


def parse_role(value: Optional[str]) -> Optional[Role]:
    try:
        return Role(value) if value else None
    except ValueError:
        return None


def allowed_roles(required: Union[Permission, Iterable[Role]]) -> frozenset[Role]:
    if isinstance(required, Permission):
        return POLICY[required]
    return frozenset(required)


def authorize(
    role: Optional[Union[Role, str]],
    required: Union[Permission, Iterable[Role]],
) -> Decision:
    """Decide whether a principal with `role` may perform `required`.

    `required` is either a Permission from the policy table or an explicit
    set of roles.
    """
    allowed = allowed_roles(required)
    parsed = role if isinstance(role, Role) else parse_role(role)
    if parsed is not None and parsed in allowed:
        return Decision(allowed=True)

    if isinstance(required, Permission):
        return Decision(allowed=False, reason=_DENY_MESSAGES[required])
    names = ", ".join(sorted(r.value for r in allowed))
    return Decision(allowed=False, reason=f"Access denied. Required roles: {names}")


def role_display_name(role: str) -> str:
    parsed = parse_role(role)
    return ROLE_DISPLAY_NAMES[parsed] if parsed else role
