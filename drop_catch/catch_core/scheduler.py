"""
Scheduler
=========

Cooperative recurring timers driven by explicit timestamps.

Tasks never run on their own: the owner calls ``run_due(now_ms)`` and every
task whose due time has arrived fires in order of due time, then
registration order. A cancelled task never fires again, so a timer left
over from a previous game cannot call into a restarted one.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

# Callback receives the scheduled fire time (not the poll time)
TaskCallback = Callable[[float], None]


class RecurringTask:
    """A fixed-interval timer. First fire is one interval after start."""

    def __init__(
        self,
        name: str,
        interval_ms: float,
        callback: TaskCallback,
        start_ms: float,
        order: int = 0
    ):
        if interval_ms <= 0:
            raise ValueError(f"Task interval must be positive, got {interval_ms}")
        self.name = name
        self._interval_ms = interval_ms
        self._callback = callback
        self._next_due_ms = start_ms + interval_ms
        self._cancelled = False
        self._order = order
        self.fire_count = 0

    @property
    def interval_ms(self) -> float:
        return self._interval_ms

    @property
    def next_due_ms(self) -> float:
        return self._next_due_ms

    @property
    def callback(self) -> TaskCallback:
        return self._callback

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def sort_key(self):
        return (self._next_due_ms, self._order)

    def is_due(self, now_ms: float) -> bool:
        return not self._cancelled and self._next_due_ms <= now_ms

    def cancel(self) -> None:
        self._cancelled = True

    def fire(self) -> None:
        """Run the callback for the current due time and schedule the next one."""
        if self._cancelled:
            return
        due = self._next_due_ms
        self._next_due_ms = due + self._interval_ms
        self.fire_count += 1
        self._callback(due)

    def __repr__(self) -> str:
        state = "cancelled" if self._cancelled else f"next={self._next_due_ms:.0f}"
        return f"RecurringTask({self.name}, every {self._interval_ms:.0f}ms, {state})"


class TaskScheduler:
    """Named recurring tasks executed one at a time."""

    def __init__(self):
        self._tasks: Dict[str, RecurringTask] = {}
        self._registered = 0

    def __contains__(self, name: str) -> bool:
        return name in self._tasks

    def get(self, name: str) -> Optional[RecurringTask]:
        return self._tasks.get(name)

    @property
    def task_names(self) -> List[str]:
        return list(self._tasks)

    def add_recurring(
        self,
        name: str,
        interval_ms: float,
        callback: TaskCallback,
        now_ms: float
    ) -> RecurringTask:
        """
        Register a recurring task starting at ``now_ms``.

        An existing task with the same name is cancelled first.
        """
        self.cancel(name)
        self._registered += 1
        task = RecurringTask(name, interval_ms, callback, now_ms, order=self._registered)
        self._tasks[name] = task
        return task

    def reschedule(self, name: str, interval_ms: float, now_ms: float) -> Optional[RecurringTask]:
        """
        Restart a task with a new interval.

        The old cadence is dropped; the next fire is one full new interval
        after ``now_ms``.
        """
        old = self._tasks.get(name)
        if old is None:
            return None
        logger.debug("Rescheduling %s: %sms -> %sms", name, old.interval_ms, interval_ms)
        return self.add_recurring(name, interval_ms, old.callback, now_ms)

    def cancel(self, name: str) -> None:
        task = self._tasks.pop(name, None)
        if task is not None:
            task.cancel()

    def cancel_all(self) -> None:
        for task in self._tasks.values():
            task.cancel()
        self._tasks.clear()

    def next_due_ms(self) -> Optional[float]:
        """Earliest due time among active tasks, or None if idle."""
        if not self._tasks:
            return None
        return min(task.next_due_ms for task in self._tasks.values())

    def run_due(self, now_ms: float) -> int:
        """
        Fire every task that is due at or before ``now_ms``.

        Tasks may cancel, add or reschedule tasks from their callbacks; the
        next task to fire is picked again after every callback.

        Returns:
            Number of callbacks executed.
        """
        fired = 0
        while True:
            due = [task for task in self._tasks.values() if task.is_due(now_ms)]
            if not due:
                return fired
            task = min(due, key=lambda t: t.sort_key)
            task.fire()
            fired += 1


class SpawnScheduler:
    """
    Spawns objects at the current spawn interval.

    ``reconfigure`` cancels the running cadence and starts a new one at the
    given time, so a level-up never resumes a partial interval.
    """

    TASK_NAME = "spawn"

    def __init__(self, scheduler: TaskScheduler, spawn_fn: TaskCallback):
        self._scheduler = scheduler
        self._spawn_fn = spawn_fn

    @property
    def active(self) -> bool:
        return self.TASK_NAME in self._scheduler

    @property
    def interval_ms(self) -> Optional[float]:
        task = self._scheduler.get(self.TASK_NAME)
        return task.interval_ms if task is not None else None

    @property
    def next_spawn_ms(self) -> Optional[float]:
        task = self._scheduler.get(self.TASK_NAME)
        return task.next_due_ms if task is not None else None

    def start(self, interval_ms: float, now_ms: float) -> None:
        self._scheduler.add_recurring(self.TASK_NAME, interval_ms, self._spawn_fn, now_ms)

    def reconfigure(self, interval_ms: float, now_ms: float) -> None:
        if not self.active:
            return
        self._scheduler.reschedule(self.TASK_NAME, interval_ms, now_ms)

    def stop(self) -> None:
        self._scheduler.cancel(self.TASK_NAME)
