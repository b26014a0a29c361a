import argparse
import asyncio
import getpass
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from wallet_gateway.domain.exceptions import AdminCreationError
from wallet_gateway.domain.models import Role
from wallet_gateway.infrastructure.database.session import SessionLocal, engine, init_models
from wallet_gateway.services.admin_directory import AdminDirectory


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create a wallet-gateway admin")
    parser.add_argument("name", help="Display name for the admin")
    parser.add_argument(
        "--role",
        choices=[role.value for role in Role],
        default=Role.SUPER.value,
        help="Admin role (defaults to super, for bootstrapping)",
    )
    parser.add_argument(
        "--create-schema",
        action="store_true",
        help="Create missing tables before inserting the admin",
    )
    return parser.parse_args()


def prompt_for_password() -> str:
    for _ in range(3):
        password = getpass.getpass("Password: ")
        confirm = getpass.getpass("Confirm password: ")
        if password != confirm:
            print("Passwords do not match. Try again.", file=sys.stderr)
            continue
        if len(password) < 8:
            print("Password must be at least 8 characters long.", file=sys.stderr)
            continue
        return password
    raise SystemExit("Failed to set password after three attempts.")


async def create_admin(name: str, password: str, role: Role, create_schema: bool) -> int:
    if create_schema:
        await init_models()

    try:
        async with SessionLocal() as db:
            admin = await AdminDirectory(db).create(name, password, role)
    except AdminCreationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    finally:
        await engine.dispose()

    print(f"Created {admin.role} admin {admin.name} with code {admin.code}")
    return 0


def main() -> int:
    args = parse_args()
    password = prompt_for_password()
    return asyncio.run(create_admin(args.name.strip(), password, Role(args.role), args.create_schema))


if __name__ == "__main__":
    raise SystemExit(main())
