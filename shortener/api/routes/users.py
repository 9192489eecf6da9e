"""
User routes for profile and account management.
Demonstrates protected routes and role-based access control.
"""

from fastapi import APIRouter, Response, status

from shortener.api.deps import AdminClaimsDep, ClaimsDep, UserServiceDep
from shortener.core.logging import get_logger
from shortener.schemas.user import UserResponse, UserUpdate

logger = get_logger(__name__)

router = APIRouter(prefix="/user", tags=["users"])


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: str, service: UserServiceDep, claims: ClaimsDep) -> UserResponse:
    """
    Get a user's profile.
    This is a protected route that requires authentication.

    Args:
        user_id: 24 character hex id
        service: User service
        claims: Verified token claims

    Returns:
        User profile data
    """
    return UserResponse.model_validate(await service.get_by_id(user_id))


@router.put("", status_code=status.HTTP_204_NO_CONTENT)
async def update_user(user_in: UserUpdate, service: UserServiceDep, claims: ClaimsDep) -> Response:
    """
    Update a profile. The caller must be the user or an ADMIN, and must
    supply the account's current password.
    """
    await service.update(user_in, claims)
    logger.info(f"User updated: {user_in.id} (by: {claims.subject})")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(user_id: str, service: UserServiceDep, claims: AdminClaimsDep) -> Response:
    """Delete a user. Only users with the ADMIN role can access this endpoint."""
    await service.delete(user_id, claims)
    logger.info(f"User deleted: {user_id} (by admin: {claims.subject})")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
