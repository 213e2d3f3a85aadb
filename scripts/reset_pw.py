"""Reset a user's password from the command line.

Usage: python scripts/reset_pw.py someone@example.com NewPassword123
"""
import asyncio
import sys

from workout_tracker.database import async_session_maker, close_db
from workout_tracker.kernel.errors import NotFoundError
from workout_tracker.kernel.identity import IdentityService
from workout_tracker.kernel.store import RecordStore


async def reset(email: str, new_password: str) -> int:
    try:
        async with async_session_maker() as session:
            async with session.begin():
                store = RecordStore(session)
                user = await store.get_identity_by_email(email)
                if user is None:
                    print(f"No user with email {email}")
                    return 1
                try:
                    await IdentityService(store).change_password(user.id, new_password)
                except NotFoundError:
                    print(f"User {email} was deleted meanwhile")
                    return 1
    finally:
        await close_db()
    print(f"Updated password for {email}")
    return 0


if __name__ == "__main__":
    if len(sys.argv) != 3:
        print(__doc__)
        sys.exit(2)
    sys.exit(asyncio.run(reset(sys.argv[1], sys.argv[2])))
