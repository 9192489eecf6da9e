"""
Owner-or-admin authorization rule shared by URL and user mutations.
"""

from shortener.models.user import UserRole
from shortener.schemas.token import Claims


def is_authorized(resource_owner_id: str, claims: Claims) -> bool:
    """
    Decide whether the principal may mutate a resource.

    ADMIN may mutate anything. Anyone else only resources they own; a
    resource without an owner is never theirs.

    Args:
        resource_owner_id: Owner recorded on the resource ("" if none)
        claims: Verified claims of the acting principal

    Returns:
        True if the mutation is permitted
    """
    if claims.has_role(UserRole.ADMIN):
        return True
    return resource_owner_id != "" and resource_owner_id == claims.subject
