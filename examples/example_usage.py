"""Example: one sign-in/sign-out cycle without any UI.

Signs in the demo manager, prints the live elapsed time for a few seconds,
signs out and prints the daily attendance totals.

Usage: python examples/example_usage.py [YYYY-MM-DD]
"""

import asyncio
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from src.shop_attendance.shop_attendance.common.datetime_utils import format_minutes, now_local, parse_iso_date
from src.shop_attendance.shop_attendance.main import create_app


async def run(since) -> None:
    container = create_app()
    controller = container.session_controller
    await controller.start()

    ok = await controller.login("manager@shop.local", "manager123")
    if not ok:
        raise SystemExit("login failed (did you run scripts/seed_db.py?)")

    await controller.settle()
    viewer = controller.state.user
    print(f"signed in as {viewer.display_name} ({viewer.role.value}), session start {controller.state.active_session_start}")

    for _ in range(3):
        await asyncio.sleep(1.1)
        print("elapsed", controller.elapsed)

    await controller.logout()
    await controller.aclose()

    for total in container.attendance_service.daily_totals(viewer, start_date=since):
        print(total.work_date.isoformat(), total.user_name, format_minutes(total.total_minutes))


def main():
    since = parse_iso_date(sys.argv[1]) if len(sys.argv) > 1 else now_local().date()
    asyncio.run(run(since))


if __name__ == "__main__":
    main()
