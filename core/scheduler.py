"""
Blocking polling loop: run a cycle, sleep, repeat; survive unexpected cycle errors.
"""

from __future__ import annotations

import time
from typing import Callable, Optional

from infra.logger import get_logger

# A cycle returns how long to sleep before the next one (seconds).
Cycle = Callable[[], float]


class Scheduler:
    """Simple blocking scheduler loop."""

    def __init__(
        self,
        name: str,
        cycle: Cycle,
        error_delay_sec: float = 5.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.name = name
        self.cycle = cycle
        self.error_delay_sec = error_delay_sec
        self.sleep = sleep
        self.logger = get_logger("Scheduler")

    def run(self, max_cycles: Optional[int] = None) -> int:
        """
        Run until interrupted (or for max_cycles). Returns the number of cycles run.
        """
        self.logger.info("Scheduler started for %s", self.name)
        cycles = 0
        while max_cycles is None or cycles < max_cycles:
            cycles += 1
            try:
                sleep_for = self.cycle()
            except Exception:  # noqa: BLE001 - loop must survive any cycle failure
                self.logger.exception("Error in %s cycle; retrying in %.1fs", self.name, self.error_delay_sec)
                sleep_for = self.error_delay_sec
            if sleep_for > 0:
                self.logger.debug("Cycle end, sleeping %.2fs", sleep_for)
                self.sleep(sleep_for)
        return cycles
