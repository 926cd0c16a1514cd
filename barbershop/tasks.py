# barbershop/tasks.py

import logging
import time
from typing import Callable

logger = logging.getLogger(__name__)


class RetryRunner:
    """Runs detached work with a bounded number of attempts.

    Used for everything that happens after a booking or contact request has
    already been answered. A task that still fails after the last attempt is
    logged and dropped; nothing is raised to the caller.
    """

    def __init__(self, attempts: int = 3, delay: float = 1.0, sleep: Callable[[float], None] = time.sleep):
        self.attempts = max(1, attempts)
        self.delay = delay
        self.sleep = sleep

    def run(self, description: str, func: Callable, *args, **kwargs) -> bool:
        retry_delay = self.delay
        for attempt in range(1, self.attempts + 1):
            try:
                func(*args, **kwargs)
                return True
            except Exception as e:
                if attempt == self.attempts:
                    logger.error(f"{description} failed after {attempt} attempts, giving up: {e}")
                    return False
                logger.warning(f"{description} attempt {attempt} failed, retrying in {retry_delay}s: {e}")
                self.sleep(retry_delay)
                retry_delay *= 2
        return False
