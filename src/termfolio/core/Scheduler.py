# termfolio/core/Scheduler.py
"""Scheduler Module
=================
This module provides the `TaskScheduler` class, which delivers fire-once
deferred tasks (e.g. "open this resource in two seconds") back to the
console's single UI thread.

Key Features:
-------------
- Timing runs on an asyncio event loop in a dedicated background thread, so
  the curses main loop never blocks on a delay.
- A task is a plain dictionary carrying its payload by value
  (``{"type": "open_resource", "target": url}``). It never references live
  session state, so it stays valid however many commands run before it fires.
- A due task is only *posted* to the thread-safe `to_ui_queue`; the host
  drains that queue on its own thread and performs the side effect there.
  All effects therefore run on the UI thread, one at a time.
- No per-task cancellation: a scheduled task fires even if the user moved
  on. `stop()` cancels whatever is still pending when the host shuts down.
"""

import asyncio
import logging
import queue
import threading
from typing import Any, Optional


# The control queue carries (delay, task) pairs, or None to stop.
QueueItem = Optional[tuple[float, dict[str, Any]]]


# ==================== TaskScheduler Class ====================
class TaskScheduler:
    """Class TaskScheduler
    ======================
    Runs an asyncio event loop in a background thread and turns
    ``schedule(delay, task)`` calls into tasks posted to `to_ui_queue` once
    their delay has elapsed.

    Attributes:
        loop (Optional[asyncio.AbstractEventLoop]): The loop running in the background thread.
        thread (Optional[threading.Thread]): The background thread.
        from_ui_queue (queue.Queue): (delay, task) requests from the UI thread.
        to_ui_queue (queue.Queue): Due tasks, drained by the UI thread.
        _tasks (set): Pending timers.
    """

    def __init__(self, to_ui_queue: queue.Queue[dict[str, Any]]) -> None:
        self.loop: Optional[asyncio.AbstractEventLoop] = None
        self.thread: Optional[threading.Thread] = None
        self.from_ui_queue: queue.Queue[QueueItem] = queue.Queue()
        self.to_ui_queue: queue.Queue[dict[str, Any]] = to_ui_queue
        self._tasks: set[asyncio.Task[Any]] = set()

    def _start_loop_in_thread(self) -> None:
        """Internal method to set up and run the event loop."""
        try:
            self.loop = asyncio.new_event_loop()
            asyncio.set_event_loop(self.loop)
            self.loop.run_until_complete(self.main_loop())
        finally:
            if self.loop:
                if self.loop.is_running():
                    self.loop.stop()
                self.loop.close()
            logging.info("TaskScheduler event loop has shut down.")

    def start(self) -> None:
        """Starts the asyncio event loop in a background thread."""
        if self.thread is not None:
            logging.warning("TaskScheduler already started.")
            return
        logging.info("Starting TaskScheduler background thread...")
        self.thread = threading.Thread(
            target=self._start_loop_in_thread, daemon=True, name="TaskSchedulerThread"
        )
        self.thread.start()

    async def main_loop(self) -> None:
        """Waits for schedule requests until the stop signal (None) arrives."""
        if not self.loop:
            logging.error("Event loop not initialized before starting main_loop.")
            return

        logging.info("TaskScheduler main_loop is running and waiting for tasks.")

        while True:
            try:
                item = await self.loop.run_in_executor(None, self.from_ui_queue.get)

                if item is None:
                    logging.info("TaskScheduler received stop signal. Breaking main_loop.")
                    break

                delay, task_data = item
                task = self.loop.create_task(self.fire_after(delay, task_data))
                self._tasks.add(task)
                task.add_done_callback(self._tasks.discard)

            except Exception as e:
                if self.loop and self.loop.is_running():
                    logging.error(f"Critical error in TaskScheduler main_loop: {e}", exc_info=True)
                    await asyncio.sleep(1)
                else:
                    logging.info("Exception in main_loop during shutdown, likely normal")
                    break

        await self._shutdown_tasks()

    async def fire_after(self, delay: float, task_data: dict[str, Any]) -> None:
        """Sleeps for `delay` seconds, then posts `task_data` to the UI queue."""
        await asyncio.sleep(max(delay, 0.0))
        logging.debug(f"TaskScheduler: task {task_data.get('type')!r} is due.")
        self.to_ui_queue.put(task_data)

    def schedule(self, delay: float, task_data: dict[str, Any]) -> None:
        """Thread-safe method for the UI thread to schedule a task.

        The task dictionary is copied, so later changes made by the caller
        never reach the queued task.
        """
        logging.debug(f"Scheduling task {task_data.get('type')!r} in {delay:.2f}s")
        self.from_ui_queue.put((float(delay), dict(task_data)))

    def drain(self) -> list[dict[str, Any]]:
        """Returns every due task without blocking. Called from the UI thread."""
        due: list[dict[str, Any]] = []
        try:
            while True:
                due.append(self.to_ui_queue.get_nowait())
        except queue.Empty:
            pass
        return due

    async def _shutdown_tasks(self) -> None:
        """Internal coroutine to cancel all pending timers."""
        if not self._tasks:
            return
        logging.info(f"Cancelling {len(self._tasks)} pending scheduled tasks...")
        tasks_to_cancel = list(self._tasks)
        for task in tasks_to_cancel:
            task.cancel()

        await asyncio.gather(*tasks_to_cancel, return_exceptions=True)
        logging.info("All scheduled tasks cancelled.")

    def stop(self) -> None:
        """Gracefully and thread-safely stops the event loop and its timers."""
        if not self.thread or not self.loop or not self.thread.is_alive():
            logging.debug("TaskScheduler.stop() called, but no active loop or thread to stop.")
            return

        logging.info("Stopping TaskScheduler...")

        try:
            self.from_ui_queue.put(None)
            self.thread.join(timeout=2.0)

            if self.thread.is_alive():
                logging.error("TaskScheduler thread did not stop gracefully within the timeout.")
                self.loop.call_soon_threadsafe(self.loop.stop)
            else:
                logging.info("TaskScheduler thread has been successfully stopped and joined.")

        except Exception as e:
            logging.error(f"An exception occurred while stopping TaskScheduler thread: {e}", exc_info=True)
