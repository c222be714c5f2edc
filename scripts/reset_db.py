"""
Drop and recreate every table. All data is lost.
Run: python -m scripts.reset_db --yes
"""
import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from wagehire.core import config
from wagehire.db.init_db import reset_db
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


if __name__ == "__main__":
    if "--yes" not in sys.argv:
        print("This drops every table and all data. Re-run with --yes to continue.")
        sys.exit(1)

    logger.info("Resetting database")
    reset_db()
    print("\n[SUCCESS] Database reset completed")
    if config.DATABASE_URL.startswith("sqlite"):
        print(f"   Database: {config.DATABASE_URL}")
