"""
=============================================================================
FIXED-SIZE THREAD POOL
=============================================================================

A pool of ``size`` worker threads. Each worker handles one connection at a
time, from start to finish, then takes the next one.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        Thread Pool                                   │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   accept loop ──submit()──►  [ slots: BoundedSemaphore(size) ]       │
    │                                        │                             │
    │                                        ▼                             │
    │                               queue.Queue of Tasks                   │
    │                                        │                             │
    │                 ┌──────────┬───────────┼──────────┐                  │
    │                 ▼          ▼           ▼          ▼                  │
    │             Worker-0   Worker-1    Worker-2 … Worker-(size-1)        │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
BACKPRESSURE
=============================================================================

submit() takes a slot before queueing a task, and the worker gives the
slot back when the task finishes. With every worker busy, submit()
blocks, so the accept loop stops calling accept() and new connections
wait in the kernel's listen backlog. The pool itself never holds more
than ``size`` tasks and needs no queue limit or rejection policy.

=============================================================================
SHUTDOWN: THE POISON PILL
=============================================================================

shutdown() puts one ``None`` per worker on the queue. A worker that gets
``None`` exits its loop. Tasks queued before the pills still run.

=============================================================================
"""

import threading
import queue
import time
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional


logger = logging.getLogger(__name__)


class WorkerState(Enum):
    """Worker thread states, for monitoring."""

    IDLE = "idle"
    BUSY = "busy"
    STOPPED = "stopped"


@dataclass
class Task:
    """
    A deferred function call.

    Attributes:
        func: The function to execute.
        args: Positional arguments for the function.
        submitted_at: Time the task was queued.
    """

    func: Callable[..., Any]
    args: tuple = ()
    submitted_at: float = field(default_factory=time.time)


class Worker(threading.Thread):
    """
    Worker thread: take a task, run it, release its slot, repeat.

    Exceptions escaping a task are logged and the worker keeps going; one
    bad connection must not shrink the pool.
    """

    def __init__(self, task_queue: queue.Queue, slots: threading.BoundedSemaphore, worker_id: int):
        super().__init__(name=f"Worker-{worker_id}", daemon=True)
        self.task_queue = task_queue
        self.slots = slots
        self.worker_id = worker_id
        self.state = WorkerState.IDLE
        self.tasks_completed = 0
        self.tasks_failed = 0

    def run(self):
        logger.debug(f"Worker {self.worker_id} started")

        while True:
            task = self.task_queue.get()
            if task is None:
                # Poison pill
                self.task_queue.task_done()
                break

            try:
                self._execute_task(task)
            finally:
                self.slots.release()
                self.task_queue.task_done()

        self.state = WorkerState.STOPPED
        logger.debug(f"Worker {self.worker_id} stopped")

    def _execute_task(self, task: Task):
        self.state = WorkerState.BUSY
        start_time = time.time()
        try:
            task.func(*task.args)
            self.tasks_completed += 1
            logger.debug(
                f"Worker {self.worker_id} completed task in {time.time() - start_time:.3f}s "
                f"(queued {start_time - task.submitted_at:.3f}s)"
            )
        except Exception as e:
            self.tasks_failed += 1
            logger.exception(f"Worker {self.worker_id} task failed: {e}")
        finally:
            self.state = WorkerState.IDLE


class ThreadPool:
    """
    Fixed-size thread pool.

    Usage:
        pool = ThreadPool(size=4)
        pool.start()
        pool.submit(handler.handle, args=(conn,))   # blocks while all busy
        pool.shutdown()
    """

    def __init__(self, size: int):
        if size < 1:
            raise ValueError(f"Thread pool size must be >= 1, got {size}")

        self.size = size
        self._task_queue: queue.Queue[Optional[Task]] = queue.Queue()
        self._slots = threading.BoundedSemaphore(size)
        self._workers: list[Worker] = []
        self._lock = threading.Lock()
        self._started = False
        self._shutdown = False

    def start(self):
        """Create and start all workers. Idempotent."""
        with self._lock:
            if self._started:
                return
            logger.info(f"Starting thread pool with {self.size} workers")
            for worker_id in range(self.size):
                worker = Worker(self._task_queue, self._slots, worker_id)
                self._workers.append(worker)
                worker.start()
            self._started = True

    def submit(self, func: Callable[..., Any], args: tuple = (),
               timeout: Optional[float] = None) -> bool:
        """
        Queue ``func(*args)`` once a worker is free.

        Blocks while all workers are busy.

        Args:
            func: Function to run on a worker.
            args: Its positional arguments.
            timeout: Give up after this many seconds without a free worker.
                None waits indefinitely.

        Returns:
            True if the task was queued, False if ``timeout`` expired.

        Raises:
            RuntimeError: Pool not started or already shut down.
        """
        if not self._started:
            raise RuntimeError("Thread pool not started")
        if self._shutdown:
            raise RuntimeError("Thread pool is shutting down")

        if not self._slots.acquire(timeout=timeout):
            return False

        self._task_queue.put(Task(func=func, args=args))
        return True

    def shutdown(self, wait: bool = True, timeout: Optional[float] = None):
        """
        Stop all workers after the tasks already queued.

        Args:
            wait: Join the worker threads.
            timeout: Per-worker join timeout when waiting.
        """
        with self._lock:
            if self._shutdown or not self._started:
                self._shutdown = True
                return
            self._shutdown = True

        logger.info("Shutting down thread pool")
        for _ in self._workers:
            self._task_queue.put(None)

        if wait:
            for worker in self._workers:
                worker.join(timeout)

        logger.debug(f"Thread pool stopped: {self.stats}")

    # =========================================================================
    # MONITORING
    # =========================================================================

    @property
    def busy_workers(self) -> int:
        return sum(1 for w in self._workers if w.state == WorkerState.BUSY)

    @property
    def alive_workers(self) -> int:
        return sum(1 for w in self._workers if w.is_alive())

    @property
    def stats(self) -> dict:
        return {
            "size": self.size,
            "alive": self.alive_workers,
            "busy": self.busy_workers,
            "completed": sum(w.tasks_completed for w in self._workers),
            "failed": sum(w.tasks_failed for w in self._workers),
        }
