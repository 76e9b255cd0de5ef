"""
Script to create the users table.

Run this once against a fresh database (DATABASE_URL from .env).
"""
import asyncio
from socialauth.database import init_db


async def main():
    """Main entry point."""
    print("Creating database tables...")
    await init_db()
    print("Done!")


if __name__ == "__main__":
    asyncio.run(main())
