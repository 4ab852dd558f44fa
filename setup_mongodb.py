"""
MongoDB Setup Script
Tests connection and initializes the relay's collections and indexes.
"""
import asyncio
from message_relay.repositories import DatabaseManager
from message_relay.config import settings


async def setup_mongodb():
    """Initialize the relay database with collections and indexes."""
    db_manager = DatabaseManager()
    print("🔄 Connecting to MongoDB...")
    print(f"   Database: {settings.mongodb_database}")
    print()

    try:
        await db_manager.connect()
        await db_manager.ping()
        print("✅ Connection successful!")
        print()

        db = db_manager.database

        existing_collections = await db.list_collection_names()
        print(f"📦 Existing collections: {existing_collections or 'None'}")
        print()

        print("🔨 Creating indexes...")
        await db_manager.create_indexes()
        print("✅ Indexes created successfully!")
        print()

        print("📊 Verifying indexes:")
        total = 0
        for name in ("conversations", "messages"):
            indexes = await db[name].index_information()
            total += len(indexes)
            print(f"   {name.title()} collection: {len(indexes)} indexes")
            for idx_name in indexes:
                print(f"      - {idx_name}")

        print()
        print("🎉 MongoDB setup complete!")
        print(f"   ✅ Collections: conversations, messages")
        print(f"   ✅ Indexes: {total} total")

    except Exception as e:
        print(f"❌ Error: {e}")
        print()
        print("💡 Troubleshooting:")
        print("   1. Check MONGODB_URI points at a running server")
        print("   2. Check that the username and password are correct")
        raise

    finally:
        await db_manager.disconnect()
        print("👋 Disconnected from MongoDB")


if __name__ == "__main__":
    asyncio.run(setup_mongodb())
