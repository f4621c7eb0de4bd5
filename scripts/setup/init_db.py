# scripts/setup/init_db.py
"""
Initialize database: creates all tables.
Run once before first launch, or after adding new models.
Usage: python scripts/setup/init_db.py
"""

import os
import sys

from sqlalchemy import inspect, text

from fleet_inspection.config import settings
from fleet_inspection.database import build_engine, create_tables


def main():
    print("🗄️  Fleet Inspection DB Initialization")
    print("=" * 40)
    print(f"📡 Database: {settings.DATABASE_URL}")

    if settings.DATABASE_URL.startswith("sqlite:///"):
        db_dir = os.path.dirname(settings.DATABASE_URL[len("sqlite:///"):])
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)

    engine = build_engine(settings.DATABASE_URL)

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
    create_tables(engine)
    print("✅ All tables created")

    tables = sorted(inspect(engine).get_table_names())
    print(f"\n📊 Tables in database ({len(tables)} total):")
    for t in tables:
        print(f"   ✓ {t}")

    os.makedirs(settings.inspections_upload_dir, exist_ok=True)
    print(f"\n🖼️  Upload directory ready: {settings.UPLOAD_DIR}")

    engine.dispose()
    print("\n🎉 Database ready! You can now start the backend:")
    print("   uvicorn fleet_inspection.main:app --host 0.0.0.0 --port 8080 --reload")


if __name__ == "__main__":
    main()
