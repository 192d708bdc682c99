"""
=============================================================================
THREAD POOL
=============================================================================

A fixed set of worker threads pulling tasks from a shared queue, with a
hard cap on how much work may be waiting.

=============================================================================
ADMISSION
=============================================================================

    capacity = workers + queue_size

    ┌─────────────────────────────────────────────────────────────────────┐
    │                           ThreadPool                                 │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   submit(task)                                                       │
    │      │                                                               │
    │      ├── with lock:                                                  │
    │      │      pending >= capacity?  ──► return False (rejected)       │
    │      │      pending += 1                                             │
    │      │                                                               │
    │      └── queue.put(task)                                             │
    │                │                                                     │
    │                ▼                                                     │
    │   ┌──────────┐ ┌──────────┐ ┌──────────┐ ┌──────────┐               │
    │   │ Worker 0 │ │ Worker 1 │ │ Worker 2 │ │ Worker 3 │               │
    │   └──────────┘ └──────────┘ └──────────┘ └──────────┘               │
    │        │  run task, then  with lock: pending -= 1                    │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

`pending` counts tasks that are queued or running. Because admission is
decided by that counter and not by the queue's own maxsize, queue_size=0
means "only hand work to an idle worker", which queue.Queue(maxsize=0)
(unbounded) could not express.

submit() never blocks. The caller decides what a rejection means; the
HTTP dispatcher answers it with a 500 and closes the socket.

=============================================================================
WORKER LIFECYCLE
=============================================================================

    while True:
        task = queue.get()        ← blocks until work arrives
        if task is None:          ← poison pill from shutdown()
            break
        execute(task)             ← exceptions are logged, never raised

A task that raises does not kill its worker and does not touch any
other worker's task.

=============================================================================
"""

import logging
import queue
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional


logger = logging.getLogger(__name__)


class WorkerState(Enum):
    IDLE = "idle"
    BUSY = "busy"
    STOPPED = "stopped"


@dataclass
class Task:
    """
    A deferred call: func(*args) run later on a worker thread.

    Attributes:
        func: The function to execute.
        args: Positional arguments for the function.
        submitted_at: Submission time, for queue-wait logging.
    """
    func: Callable[..., Any]
    args: tuple = ()
    submitted_at: float = field(default_factory=time.time)


class Worker(threading.Thread):
    """Worker thread that runs tasks from the pool's queue until poisoned."""

    def __init__(self, pool: "ThreadPool", worker_id: int):
        # daemon=True: a stalled client can't keep the process alive
        super().__init__(name=f"Worker-{worker_id}", daemon=True)

        self.pool = pool
        self.worker_id = worker_id
        self.state = WorkerState.IDLE

    def run(self):
        logger.debug(f"Worker {self.worker_id} started")

        while True:
            task = self.pool._task_queue.get()
            if task is None:
                break

            self._execute_task(task)

        self.state = WorkerState.STOPPED
        logger.debug(f"Worker {self.worker_id} stopped")

    def _execute_task(self, task: Task):
        """
        Run one task.

        Whatever happens inside the task, the worker survives and the
        pool's pending counter is released.
        """
        self.state = WorkerState.BUSY
        start_time = time.time()
        waited = start_time - task.submitted_at
        failed = False

        try:
            task.func(*task.args)
            logger.debug(
                f"Worker {self.worker_id} completed task in "
                f"{time.time() - start_time:.3f}s (queued {waited:.3f}s)"
            )
        except Exception as e:
            failed = True
            logger.exception(
                f"Worker {self.worker_id} task failed after "
                f"{time.time() - start_time:.3f}s: {e}"
            )
        finally:
            self.state = WorkerState.IDLE
            self.pool._task_finished(failed)


class ThreadPool:
    """
    Fixed-size thread pool with bounded, non-blocking admission.

        pool = ThreadPool(workers=4, queue_size=16)
        pool.start()

        if not pool.submit(handle_connection, args=(conn,)):
            reject(conn)

        pool.shutdown()
    """

    def __init__(self, workers: int = 4, queue_size: int = 16):
        """
        Args:
            workers: Number of worker threads, fixed for the pool's life.
            queue_size: Tasks allowed to wait when every worker is busy.
        """
        self.workers = workers
        self.queue_size = queue_size
        self.capacity = workers + queue_size

        # Bounded by the pending counter, not by maxsize, so shutdown can
        # always enqueue its poison pills
        self._task_queue: queue.Queue[Optional[Task]] = queue.Queue()

        self._workers: list[Worker] = []
        self._lock = threading.Lock()
        self._started = False
        self._shutdown = False

        # Guarded by _lock
        self._pending = 0
        self._completed = 0
        self._failed = 0
        self._rejected = 0

    def start(self):
        """Start all worker threads. Calling it twice is a no-op."""
        if self._started:
            return

        logger.info(f"Starting thread pool with {self.workers} workers (queue {self.queue_size})")

        for worker_id in range(self.workers):
            worker = Worker(self, worker_id)
            self._workers.append(worker)
            worker.start()

        self._started = True

    def submit(self, func: Callable[..., Any], args: tuple = ()) -> bool:
        """
        Submit func(*args) for execution without blocking.

        Returns:
            True if accepted, False if the pool is at capacity, not
            started, or shutting down.
        """
        with self._lock:
            if not self._started or self._shutdown:
                self._rejected += 1
                return False

            if self._pending >= self.capacity:
                self._rejected += 1
                return False

            self._pending += 1

        self._task_queue.put(Task(func=func, args=args))
        return True

    def _task_finished(self, failed: bool):
        with self._lock:
            self._pending -= 1
            if failed:
                self._failed += 1
            else:
                self._completed += 1

    def shutdown(self, wait: bool = True, timeout: Optional[float] = None):
        """
        Stop the pool.

        New submissions are refused immediately. With wait=True, tasks
        already accepted run to completion before workers exit.

        Args:
            wait: Join worker threads.
            timeout: Per-worker join timeout; None waits indefinitely.
        """
        with self._lock:
            if not self._started or self._shutdown:
                return
            self._shutdown = True

        logger.info("Shutting down thread pool...")

        # FIFO queue: pills land behind every accepted task
        for _ in self._workers:
            self._task_queue.put(None)

        if wait:
            for worker in self._workers:
                worker.join(timeout=timeout)
                if worker.is_alive():
                    logger.warning(f"Worker {worker.worker_id} still busy after shutdown timeout")

        logger.info("Thread pool shutdown complete")

    # =========================================================================
    # MONITORING
    # =========================================================================

    @property
    def pending(self) -> int:
        """Tasks queued or running."""
        with self._lock:
            return self._pending

    @property
    def busy_workers(self) -> int:
        return sum(1 for w in self._workers if w.state == WorkerState.BUSY)

    @property
    def stats(self) -> dict:
        """Snapshot of worker and task counters."""
        with self._lock:
            tasks = {
                "pending": self._pending,
                "completed": self._completed,
                "failed": self._failed,
                "rejected": self._rejected,
            }

        return {
            "workers": {
                "total": len(self._workers),
                "busy": self.busy_workers,
                "alive": sum(1 for w in self._workers if w.is_alive()),
            },
            "tasks": tasks,
        }
