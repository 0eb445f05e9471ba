"""
Database setup script for the Nagrik Seva backend.
Creates the complaint, status update and notification tables.
"""
import asyncio
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from nagrik.core.config import settings
from nagrik.core.database import async_engine, init_db


async def create_tables():
    """Create all database tables"""
    print("Creating database tables...")
    await init_db(async_engine)
    print("✅ Tables created successfully!")


async def main():
    """Main setup function"""
    print("=" * 60)
    print("Nagrik Seva Database Setup")
    print("=" * 60)
    print(f"Database: {settings.ASYNC_DATABASE_URL}")

    try:
        await create_tables()

        print("\n✅ Setup complete! You can now start the server.")
        print("   Run: python main.py")
        print("   Sample data: python scripts/seed_db.py --yes")

    except Exception as e:
        print(f"\n❌ Error during setup: {e}")
        raise
    finally:
        await async_engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
