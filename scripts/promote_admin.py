"""Promote a user to admin (or demote with --demote).

Usage:
    python -m scripts.promote_admin <uid> [--demote]
The user must have signed in once so that users/{uid} exists.
All imports use apa.*.
"""

import asyncio
import sys

from apa.application.services.identity_service import IdentityService
from apa.core.config import get_settings
from apa.domain.enums import UserRole
from apa.domain.exceptions import ApaException
from apa.infrastructure.firebase.collections import COLLECTION_USERS
from apa.infrastructure.store import build_record_store
from apa.shared.telemetry.logging import setup_logging


async def main() -> None:
    """Set users/{uid}.role; the profile is not created if missing."""
    args = [a for a in sys.argv[1:] if not a.startswith("--")]
    if len(args) != 1:
        print("Usage: python -m scripts.promote_admin <uid> [--demote]", file=sys.stderr)
        sys.exit(1)
    uid = args[0]
    role = UserRole.USER if "--demote" in sys.argv else UserRole.ADMIN

    setup_logging()
    store = build_record_store(get_settings())
    try:
        identity = IdentityService(store.repo(COLLECTION_USERS))
        record = await identity.set_role(uid, role)
    except ApaException as e:
        print(f"{e.error_code}: {e.message}", file=sys.stderr)
        sys.exit(1)
    finally:
        await store.aclose()
    print(f"users/{record.id} role is now {record.get('role')}")


if __name__ == "__main__":
    asyncio.run(main())
