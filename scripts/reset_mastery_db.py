"""
Reset the mastery database.

DANGEROUS: This deletes all learner progress!
Only use when you want to start fresh for testing.

Usage:
    python scripts/reset_mastery_db.py
"""

from madina.config import load_settings
from madina.storage import SqlKeyValueStore


def main():
    settings = load_settings()

    print("=" * 60)
    print("WARNING: Reset Mastery Database")
    print("=" * 60)
    print()
    print(f"Database: {settings.database_url}")
    print("This will DELETE all learner progress:")
    print("  - Mastery records (SM-2 schedule, directional strength, encounters)")
    print("  - Collocation mastery")
    print("  - Confidence and error logs")
    print()

    response = input("Are you sure you want to reset? (type 'yes' to confirm): ")

    if response.lower() == "yes":
        print("\nResetting database...")
        store = SqlKeyValueStore(settings.database_url)
        store.reset_db()
        store.dispose()
        print("✓ Database reset complete!")
        print("\nThe database now has an empty table ready for new progress.")
    else:
        print("\nCancelled. No changes made.")


if __name__ == "__main__":
    main()
