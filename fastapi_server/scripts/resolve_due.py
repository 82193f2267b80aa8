"""
Run one scheduler pass: resolve every match whose voting window has closed.

Meant for cron when the in-process loop (SHOWDOWN_SCHEDULER_INTERVAL_SECONDS)
is disabled, e.g. `* * * * * python scripts/resolve_due.py`.
"""
import logging
from pathlib import Path

from sqlmodel import Session

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in __import__("sys").path:
    __import__("sys").path.insert(0, str(PROJECT_ROOT))

from showdown import config
from showdown.database import create_db_and_tables, engine
from showdown.services.scheduler import run_scheduler_tick


def main():
    logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    create_db_and_tables()
    outcomes = run_scheduler_tick(lambda: Session(engine))
    if not outcomes:
        print("Nothing due.")
        return

    for outcome in outcomes:
        status = "already finished" if outcome.already_finished else "resolved"
        print(
            f"Match {outcome.match_number} {status}: winner={outcome.winner_id} "
            f"{outcome.final_score_a}-{outcome.final_score_b}"
            f"{' (next match started)' if outcome.next_match_activated else ''}"
        )


if __name__ == "__main__":
    main()
