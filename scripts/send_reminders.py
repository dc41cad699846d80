#!/usr/bin/env python3
"""
Send bet reminders once. Meant to be triggered by cron, e.g.:

    */15 * * * * cd /srv/mespronos && python scripts/send_reminders.py

This script:
1. Reads the reminder settings (enabled flag, lookahead hours)
2. Emails members with missing bets on upcoming games
3. Records a reminder per day so it is not sent twice
4. Prints a summary per threshold and per day
"""

import asyncio
import logging
import os
import sys

# Add apps to path (so mespronos.* imports work)
# This mirrors the Docker setup where PYTHONPATH=/app and mespronos is at /app/mespronos
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
apps_path = os.path.join(project_root, "apps")
sys.path.insert(0, apps_path)

from mespronos.services import settings_service  # noqa: E402
from mespronos.services.reminder_service import ReminderService  # noqa: E402


async def send_reminders() -> int:
    """Run the reminder job once. Returns the number of emails sent."""
    service = ReminderService()
    try:
        summary = await service.run()
    finally:
        await settings_service.close_redis_connection()

    if not summary.enabled:
        print("Bet reminders are disabled, nothing to do.")
        return 0

    print("=" * 60)
    print(f"📧 Bet reminders ({summary.eligible_users} member(s) with reminder enabled)")
    print("=" * 60)

    if not summary.thresholds:
        print("No reminder hours configured.")

    for threshold in summary.thresholds:
        print(
            f"[{threshold.hour}h] {threshold.upcoming_games} upcoming game(s), "
            f"{threshold.users_to_remind} member(s) with missing bets"
        )
        for day in threshold.days:
            status = "recorded" if day.recorded else "not recorded"
            print(
                f"   - {day.day_label} (#{day.day_id}): "
                f"{day.emails_sended}/{day.users_notified} mail(s) sent, {status}"
            )

    print(f"\n✅ Done: {summary.emails_sended} mail(s) sent")
    return summary.emails_sended


if __name__ == "__main__":
    logging.basicConfig(
        level=getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    asyncio.run(send_reminders())
