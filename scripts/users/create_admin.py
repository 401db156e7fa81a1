import argparse
import asyncio
import os
import sys
from pathlib import Path
from typing import Optional

# Add project root to path to import libs
project_root = Path(__file__).resolve().parents[2]
sys.path.append(str(project_root))

from dotenv import load_dotenv

# Load env file (defaults to .env when ENV_FILE not set)
# MUST be done before importing libs that use get_settings()
env_file = os.environ.get("ENV_FILE", ".env")
load_dotenv(project_root / env_file, override=True)

from sqlalchemy import select

from libs.common.config import get_settings
from libs.db.config import AsyncSessionLocal
from services.storefront_service.models import UserProfile

settings = get_settings()


async def create_admin_user(email: str, user_id: Optional[str], full_name: Optional[str]):
    print("🚀 Starting Admin User Script")
    print(f"Connecting to database for {email}...")

    async with AsyncSessionLocal() as session:
        async with session.begin():
            result = await session.execute(
                select(UserProfile).where(UserProfile.email == email)
            )
            profile = result.scalars().first()

            if profile:
                if profile.is_admin:
                    print(f"⚠️ {email} is already an admin.")
                    return
                profile.is_admin = True
                print(f"✅ Granted admin to existing profile {profile.id}")
            else:
                if not user_id:
                    print(
                        "❌ No profile found for this email. Pass --user-id "
                        "(the token subject) to create one."
                    )
                    return
                session.add(
                    UserProfile(
                        id=user_id,
                        email=email,
                        full_name=full_name or "Store Admin",
                        is_admin=True,
                    )
                )
                print(f"✅ Admin profile created for {user_id}")

    print("\n🎉 Admin setup complete!")
    print(f"Email: {email}")


def parse_args():
    parser = argparse.ArgumentParser(description="Grant store admin rights to a user")
    parser.add_argument("--email", default=settings.ADMIN_EMAIL)
    parser.add_argument("--user-id", default=None, help="Auth subject for a new profile")
    parser.add_argument("--full-name", default=None)
    return parser.parse_args()


if __name__ == "__main__":
    args = parse_args()
    asyncio.run(create_admin_user(args.email, args.user_id, args.full_name))
