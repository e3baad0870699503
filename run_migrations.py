"""Run database migrations up to head"""
import sys
from alembic import command
from alembic.config import Config
from dotenv import load_dotenv

load_dotenv()

try:
    from app.config import settings
    db_url = settings.DATABASE_URL
except Exception as e:
    print(f"ERROR loading configuration: {e}")
    sys.exit(1)

# Hide credentials when echoing the target
db_url_display = db_url.split("@")[-1] if "@" in db_url else db_url
print(f"Running migrations against {db_url_display}")

try:
    command.upgrade(Config("alembic.ini"), "head")
    print("Migrations completed successfully")
except Exception as e:
    print(f"Migration failed: {e}")
    print("Check DATABASE_URL and that the database is reachable")
    import traceback
    traceback.print_exc()
    sys.exit(1)
