"""
Create the first admin account.
Usage: python create_admin.py [username] [password]
Falls back to ADMIN_USERNAME / ADMIN_PASSWORD from the environment (.env).
"""
import asyncio
import os
import sys
from dotenv import load_dotenv
from sqlalchemy import select

load_dotenv()

from app.core.permissions import AdminRole
from app.database import AsyncSessionLocal
from app.models.admin import Admin
from app.services.admin_service import AdminService


async def create_admin(username: str, password: str) -> int:
    async with AsyncSessionLocal() as db:
        result = await db.execute(select(Admin).where(Admin.username == username))
        if result.scalar_one_or_none():
            print(f"Admin '{username}' already exists")
            return 1

        db.add(AdminService.build_admin(username, password, role=AdminRole.SUPER_ADMIN))
        await db.commit()

    print(f"Super admin '{username}' created")
    return 0


if __name__ == "__main__":
    username = sys.argv[1] if len(sys.argv) > 1 else os.getenv("ADMIN_USERNAME", "admin")
    password = sys.argv[2] if len(sys.argv) > 2 else os.getenv("ADMIN_PASSWORD")
    if not password:
        print("ERROR: pass a password or set ADMIN_PASSWORD")
        sys.exit(1)
    if len(password) < 8:
        print("ERROR: admin password must be at least 8 characters")
        sys.exit(1)
    sys.exit(asyncio.run(create_admin(username, password)))
