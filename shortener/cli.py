"""
Administrative commands.

    python -m shortener.cli keygen ./keys/private.pem
    python -m shortener.cli seed
    python -m shortener.cli create-admin admin@example.org s3cretpass
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional, Sequence

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from shortener.core.config import settings
from shortener.core.exceptions import ShortenerError
from shortener.core.logging import get_logger, setup_logging
from shortener.core.security import generate_private_key_pem
from shortener.db.seed import seed
from shortener.db.session import async_session_factory, init_db
from shortener.models.user import UserRole
from shortener.repositories.user_repository import SQLUserRepository
from shortener.schemas.user import UserCreate
from shortener.services.user_service import UserService

logger = get_logger(__name__)


def keygen(path: str) -> None:
    """Write a new 2048-bit RSA private key for signing tokens."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(generate_private_key_pem())
    target.chmod(0o600)
    logger.info(f"Private key written to {target}")


async def run_seed() -> None:
    await init_db()
    async with async_session_factory() as session:
        await seed(session)


async def create_admin(email: str, password: str, full_name: str) -> None:
    await init_db()
    async with async_session_factory() as session:
        service = UserService(SQLUserRepository(session), timeout=settings.CONTEXT_TIMEOUT_SECONDS)
        user = await service.create(
            UserCreate(email=email, password=password, full_name=full_name),
            roles=[UserRole.ADMIN.value],
        )
    logger.info(f"Admin created: {user.email} (ID: {user.id})")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="shortener", description="URL shortener admin commands")
    commands = parser.add_subparsers(dest="command", required=True)

    keygen_cmd = commands.add_parser("keygen", help="generate an RSA private key for token signing")
    keygen_cmd.add_argument("path", nargs="?", default=settings.AUTH_PRIVATE_KEY_FILE)

    commands.add_parser("seed", help="insert development data")

    admin_cmd = commands.add_parser("create-admin", help="create an ADMIN account")
    admin_cmd.add_argument("email")
    admin_cmd.add_argument("password")
    admin_cmd.add_argument("--full-name", default="Admin User")

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    setup_logging()
    args = build_parser().parse_args(argv)

    try:
        if args.command == "keygen":
            keygen(args.path)
        elif args.command == "seed":
            asyncio.run(run_seed())
        elif args.command == "create-admin":
            asyncio.run(create_admin(args.email, args.password, args.full_name))
    except (ShortenerError, ValidationError, SQLAlchemyError, OSError) as e:
        logger.error(f"{args.command} failed: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
