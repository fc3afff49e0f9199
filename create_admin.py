"""
Create the first super admin in the configured store.

Usage: python create_admin.py
"""
import asyncio

from app.config import settings
from app.db.factory import bootstrap_admin_data, create_store
from app.logging_config import configure_logging
from app.services.users import UserService


async def create_admin():
    store = create_store(settings)
    try:
        data = bootstrap_admin_data(settings)
        admin = await UserService(store).bootstrap_admin(data)
        if admin is None:
            print("ℹ️ A super admin already exists.")
        else:
            print(f"✅ Super admin created: {admin.email}")
    finally:
        await store.close()


if __name__ == "__main__":
    configure_logging(settings.LOG_LEVEL, settings.LOG_FILE or None)
    asyncio.run(create_admin())
