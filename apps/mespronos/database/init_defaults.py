#!/usr/bin/env python3
"""
Initialize default database values.
This script is run on startup to populate default settings and other default values.
"""

import asyncio
import os
from mespronos.database.db import AsyncSessionLocal
from mespronos.services import data_service
from mespronos.utils.constants import (
    DEFAULT_REMINDER_HOURS,
    REMINDER_HOURS_ENV,
    REMINDER_HOURS_KEY,
)


async def init_defaults():
    """Initialize default database values."""
    print("Initializing default database values...")

    async with AsyncSessionLocal() as session:
        # Reminder thresholds: keep whatever an admin already configured
        existing_hours = await data_service.get_setting(session, REMINDER_HOURS_KEY)

        if existing_hours:
            print(f"✓ Reminder hours already configured: {existing_hours}")
        else:
            default_hours = os.getenv(REMINDER_HOURS_ENV, DEFAULT_REMINDER_HOURS)
            await data_service.set_setting(session, REMINDER_HOURS_KEY, default_hours)
            print(f"✓ Set default reminder hours: {default_hours}")

        await session.commit()

    print("✓ Default values initialized")


if __name__ == "__main__":
    asyncio.run(init_defaults())
