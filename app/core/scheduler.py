from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from app.utils.logger import logger
from app.config import settings

scheduler = AsyncIOScheduler(timezone="UTC")


def setup_scheduled_tasks():
    """Setup all scheduled background tasks"""
    try:
        # OTP cleanup - drop challenges past their expiry
        scheduler.add_job(
            purge_expired_otps,
            IntervalTrigger(minutes=settings.OTP_CLEANUP_INTERVAL_MINUTES),
            id='purge_expired_otps',
            replace_existing=True,
            max_instances=1
        )

        logger.info("Background jobs scheduled successfully")
    except Exception as e:
        logger.error(f"Failed to setup scheduled tasks: {e}")


async def purge_expired_otps():
    """Delete OTP challenges whose validity window has passed"""
    from app.database import AsyncSessionLocal
    from app.services.otp_service import OtpService

    try:
        async with AsyncSessionLocal() as db:
            removed = await OtpService.purge_expired(db)
            if removed:
                logger.info(f"Purged {removed} expired OTP challenges")
    except Exception as e:
        logger.error(f"Error purging expired OTP challenges: {e}", exc_info=True)
