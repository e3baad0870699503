import logging
import sys
from app.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

level = getattr(logging, (settings.LOG_LEVEL or "").upper(), None)
if not isinstance(level, int):
    level = logging.DEBUG if settings.APP_DEBUG else logging.INFO

logging.basicConfig(
    level=level,
    format=LOG_FORMAT,
    handlers=[
        logging.StreamHandler(sys.stdout),
    ],
)

# Job runs and bcrypt backend probing are noise at DEBUG
logging.getLogger("apscheduler").setLevel(logging.WARNING)
logging.getLogger("passlib").setLevel(logging.ERROR)

logger = logging.getLogger("udyam")
