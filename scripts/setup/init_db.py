# scripts/setup/init_db.py
"""
Initialize the report archive database: creates all tables.
Run once before first launch, or after adding new models.
Usage: python scripts/setup/init_db.py
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from asset_analytics.database import create_tables, engine
from asset_analytics.config import settings
from sqlalchemy import inspect, text


def main():
    print("🗄️  Asset Analytics DB Initialization")
    print("=" * 40)
    print(f"📡 Database: {settings.DATABASE_URL}")

    # Test connection
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        print("✅ Database connection OK")
    except Exception as e:
        print(f"❌ Cannot connect to database: {e}")
        print("\nCheck DATABASE_URL in .env")
        sys.exit(1)

    # Create all tables
    print("\n📋 Creating tables...")
    create_tables()
    print("✅ All tables created")

    tables = sorted(inspect(engine).get_table_names())
    print(f"\n📊 Tables in database ({len(tables)} total):")
    for t in tables:
        print(f"   ✓ {t}")

    if not os.path.exists(settings.DATA_PATH):
        print(f"\n⚠️  No dataset at {settings.DATA_PATH}. Generate one first:")
        print("   python scripts/setup/generate_seed.py")

    print("\n🎉 Database ready! You can now start the backend:")
    print("   uvicorn asset_analytics.main:app --host 0.0.0.0 --port 8080 --reload")


if __name__ == "__main__":
    main()
