"""Role-based permissions for FireCert.

Design:
  - Each role gets a default permission set (defined here, not in the DB).
  - `User.custom_permissions` holds per-user overrides ({perm: True/False}).
  - `resolve_permissions` computes the effective set, which is embedded
    in the access token so most checks never touch the database.

Permission naming: `<resource>.<action>`
"""

from __future__ import annotations


# ── All known permissions ───────────────────────────────────

ALL_PERMISSIONS: set[str] = {
    # Establishments
    "establishment.read",
    "establishment.write",       # add / register own establishments

    # Certification applications
    "application.read",
    "application.submit",        # run the certification wizard, cancel own
    "application.review",        # review / approve / reject (admin)

    # Inspections
    "inspection.read",
    "inspection.submit",         # file checklists for assigned inspections
}


# ── Role → default permissions ──────────────────────────────

ROLE_DEFAULTS: dict[str, set[str]] = {
    "admin": ALL_PERMISSIONS.copy(),

    "inspector": {
        "establishment.read",
        "application.read",
        "inspection.read", "inspection.submit",
    },

    "owner": {
        "establishment.read", "establishment.write",
        "application.read", "application.submit",
    },
}


# ── Resolution ──────────────────────────────────────────────

def resolve_permissions(
    role: str,
    custom_overrides: dict[str, bool] | None = None,
) -> list[str]:
    """Role defaults plus overrides, sorted for stable token claims."""
    effective = ROLE_DEFAULTS.get(role, set()).copy()
    for perm, granted in (custom_overrides or {}).items():
        if perm not in ALL_PERMISSIONS:
            continue
        if granted:
            effective.add(perm)
        else:
            effective.discard(perm)
    return sorted(effective)


def has_permission(user_permissions: list[str] | set[str], required: str) -> bool:
    return required in user_permissions
