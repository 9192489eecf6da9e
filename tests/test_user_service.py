"""
Tests for the user service layer.
"""

from datetime import datetime, timezone

import pytest
import pytest_asyncio

from conftest import FakeUserRepository, make_claims
from shortener.core.exceptions import (
    AuthenticationFailureError,
    BadParamInputError,
    ForbiddenError,
    NoAffectedError,
    NotFoundError,
)
from shortener.core.security import verify_password
from shortener.models.user import User, UserRole
from shortener.schemas.user import UserCreate, UserUpdate, is_valid_user_id
from shortener.services.user_service import UserService

PASSWORD = "password123"


@pytest.fixture
def service(user_repository: FakeUserRepository) -> UserService:
    return UserService(user_repository, timeout=5)


@pytest_asyncio.fixture
async def user(service: UserService) -> User:
    return await service.create(
        UserCreate(email="service@example.com", password=PASSWORD, full_name="Service User")
    )


@pytest_asyncio.fixture
async def stranger(service: UserService) -> User:
    return await service.create(UserCreate(email="stranger@example.com", password=PASSWORD))


async def test_create_user(service: UserService, user_repository: FakeUserRepository) -> None:
    """Test user creation."""
    user = await service.create(
        UserCreate(email="new@example.com", password=PASSWORD, full_name="New User")
    )

    assert is_valid_user_id(user.id)
    assert user.email == "new@example.com"
    assert user.full_name == "New User"
    assert user.roles == [UserRole.USER.value]
    assert user.hashed_password != PASSWORD
    assert verify_password(PASSWORD, user.hashed_password)
    assert user.id in user_repository.items


async def test_create_admin_user(service: UserService) -> None:
    user = await service.create(
        UserCreate(email="boss@example.com", password=PASSWORD), roles=[UserRole.ADMIN.value]
    )
    assert user.roles == ["ADMIN"]


async def test_create_duplicate_email(service: UserService, user: User) -> None:
    with pytest.raises(BadParamInputError):
        await service.create(UserCreate(email=user.email, password=PASSWORD))


async def test_get_by_id(service: UserService, user: User) -> None:
    """Test retrieving user by ID."""
    found = await service.get_by_id(user.id)
    assert found.email == user.email


async def test_get_by_id_rejects_malformed_id(service: UserService) -> None:
    with pytest.raises(BadParamInputError):
        await service.get_by_id("not-a-hex-id")


async def test_get_by_id_missing(service: UserService) -> None:
    with pytest.raises(NotFoundError):
        await service.get_by_id("0" * 24)


async def test_authenticate_success(service: UserService, user: User) -> None:
    """Test successful authentication."""
    now = datetime.now(timezone.utc)
    claims = await service.authenticate(now, user.email, PASSWORD)

    assert claims.subject == user.id
    assert claims.roles == user.roles
    assert claims.issued_at == int(now.timestamp())
    assert claims.expires_at - claims.issued_at == 3600


async def test_authenticate_failures_are_indistinguishable(service: UserService, user: User) -> None:
    now = datetime.now(timezone.utc)

    with pytest.raises(AuthenticationFailureError) as wrong_password:
        await service.authenticate(now, user.email, "wrongpassword")
    with pytest.raises(AuthenticationFailureError) as unknown_email:
        await service.authenticate(now, "nobody@example.com", PASSWORD)

    assert wrong_password.value.message == unknown_email.value.message


async def test_authenticate_matches_signup_email_normalization(service: UserService) -> None:
    created = await service.create(UserCreate(email="Mixed.Case@Example.COM", password=PASSWORD))
    assert created.email == "Mixed.Case@example.com"

    claims = await service.authenticate(datetime.now(timezone.utc), "Mixed.Case@Example.COM", PASSWORD)
    assert claims.subject == created.id


async def test_authenticate_rejects_malformed_email(service: UserService, user: User) -> None:
    with pytest.raises(AuthenticationFailureError):
        await service.authenticate(datetime.now(timezone.utc), "not-an-email", PASSWORD)


async def test_user_updates_own_profile(
    service: UserService, user_repository: FakeUserRepository, user: User
) -> None:
    await service.update(
        UserUpdate(
            id=user.id,
            full_name="Renamed",
            current_password=PASSWORD,
            new_password="brandnew123",
        ),
        make_claims(user.id),
    )

    stored = user_repository.items[user.id]
    assert stored.full_name == "Renamed"
    assert stored.email == user.email
    assert verify_password("brandnew123", stored.hashed_password)


async def test_update_requires_current_password(service: UserService, user: User) -> None:
    with pytest.raises(AuthenticationFailureError):
        await service.update(
            UserUpdate(id=user.id, full_name="Renamed", current_password="wrongpass1"),
            make_claims(user.id),
        )


async def test_update_checks_password_before_ownership(
    service: UserService, user: User, stranger: User
) -> None:
    with pytest.raises(AuthenticationFailureError):
        await service.update(
            UserUpdate(id=user.id, current_password="wrongpass1"),
            make_claims(stranger.id),
        )


async def test_stranger_cannot_update(service: UserService, user: User, stranger: User) -> None:
    with pytest.raises(ForbiddenError):
        await service.update(
            UserUpdate(id=user.id, full_name="Hijacked", current_password=PASSWORD),
            make_claims(stranger.id),
        )


async def test_admin_updates_any_profile(
    service: UserService, user_repository: FakeUserRepository, user: User
) -> None:
    await service.update(
        UserUpdate(id=user.id, email="moved@example.com", current_password=PASSWORD),
        make_claims("0" * 24, "ADMIN"),
    )
    assert user_repository.items[user.id].email == "moved@example.com"


async def test_update_to_taken_email(service: UserService, user: User, stranger: User) -> None:
    with pytest.raises(BadParamInputError):
        await service.update(
            UserUpdate(id=user.id, email=stranger.email, current_password=PASSWORD),
            make_claims(user.id),
        )


async def test_update_missing_user(service: UserService) -> None:
    with pytest.raises(NotFoundError):
        await service.update(
            UserUpdate(id="0" * 24, current_password=PASSWORD), make_claims("0" * 24, "ADMIN")
        )


async def test_admin_deletes_user(
    service: UserService, user_repository: FakeUserRepository, user: User
) -> None:
    await service.delete(user.id, make_claims("0" * 24, "ADMIN"))
    assert user.id not in user_repository.items


async def test_user_cannot_delete_even_self(
    service: UserService, user_repository: FakeUserRepository, user: User
) -> None:
    with pytest.raises(ForbiddenError):
        await service.delete(user.id, make_claims(user.id))
    assert user.id in user_repository.items


async def test_delete_rejects_malformed_id(service: UserService) -> None:
    with pytest.raises(BadParamInputError):
        await service.delete("xyz", make_claims("0" * 24, "ADMIN"))


async def test_delete_missing_user(service: UserService) -> None:
    with pytest.raises(NoAffectedError):
        await service.delete("0" * 24, make_claims("0" * 24, "ADMIN"))
