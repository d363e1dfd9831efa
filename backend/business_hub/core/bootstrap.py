# business_hub/core/bootstrap.py
"""
Bootstrap module for application initialization.
Handles first-start setup: the default admin account and the credit grants
configured through the environment.
"""
import os
import logging
from business_hub.config import settings
from business_hub.models.user import User
from business_hub.core.security import hash_password
from business_hub.services.credits import DAILY_ALLOWANCE, seed_grants, today

logger = logging.getLogger("uvicorn.error")

async def ensure_default_admin() -> None:
    """
    If no admin exists in the database, create a default admin based on environment variables.
    Only takes effect under the following conditions:
      - Currently no user with role="admin"
      - And ADMIN_PASSWORD is set (to avoid using default weak password)
    Environment variables:
      ADMIN_EMAIL        (default: "admin@example.com")
      ADMIN_DISPLAY_NAME (default: "Admin")
      ADMIN_PASSWORD     (required, otherwise won't create)
    """
    has_admin = await User.filter(role="admin").exists()
    if has_admin:
        return

    admin_password = os.getenv("ADMIN_PASSWORD")
    if not admin_password:
        logger.warning("[bootstrap] No admin present, but ADMIN_PASSWORD not set -> skip creating default admin.")
        return

    admin_email = os.getenv("ADMIN_EMAIL", "admin@example.com").strip().lower()
    admin_name = os.getenv("ADMIN_DISPLAY_NAME", "Admin")

    # An ordinary account may already own the admin email: promote it instead
    existing = await User.get_or_none(email=admin_email)
    if existing:
        existing.role = "admin"
        await existing.save(update_fields=["role"])
        logger.warning("[bootstrap] Promoted existing account to admin -> email=%s id=%s",
                       existing.email, existing.id)
        return

    u = await User.create(
        email=admin_email,
        display_name=admin_name,
        password_hash=hash_password(admin_password),
        auth_provider="password",
        role="admin",
        credits=DAILY_ALLOWANCE,
        credits_last_reset=today(),
    )
    logger.warning("[bootstrap] Created default admin -> email=%s id=%s", u.email, u.id)

async def seed_credit_grants() -> None:
    """
    Upsert the grants listed in CREDIT_GRANTS ("email:balance,...").
    """
    if not settings.credit_grants:
        return
    count = await seed_grants(settings.credit_grants)
    logger.info("[bootstrap] Seeded %d credit grant(s) from configuration", count)
