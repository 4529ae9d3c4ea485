"""
Base worker classes for background operations.

Provides common functionality for all workers:
- Progress reporting
- Cancellation through a CancellationToken
- Error handling
- State management
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Optional

from PyQt6.QtCore import QObject, QThread, pyqtSignal, pyqtSlot, QMutex, QMutexLocker

from folderdiff.core.cancellation import CancellationToken
from folderdiff.core.errors import ComparisonCancelled, ComparisonError


class WorkerState(Enum):
    """State of a worker."""
    PENDING = auto()
    RUNNING = auto()
    CANCELLING = auto()
    CANCELLED = auto()
    COMPLETED = auto()
    FAILED = auto()


@dataclass
class ProgressInfo:
    """Progress information from a worker."""
    current: int
    total: int
    message: str = ""
    detail: str = ""

    @property
    def percent(self) -> float:
        if self.total == 0:
            return 0.0
        return (self.current / self.total) * 100

    @property
    def is_indeterminate(self) -> bool:
        return self.total == 0


class WorkerSignals(QObject):
    """
    Signals for worker communication.

    These signals are used to communicate between
    the worker thread and the UI thread.
    """
    # Detailed progress: ProgressInfo object
    progress_detail = pyqtSignal(object)

    # Status message
    status = pyqtSignal(str)

    # Worker started
    started = pyqtSignal()

    # Worker finished successfully with result
    finished = pyqtSignal(object)

    # Worker failed with error
    error = pyqtSignal(str, str)  # (error_type, message)

    # Worker was cancelled
    cancelled = pyqtSignal()

    # State changed
    state_changed = pyqtSignal(object)  # WorkerState


class WorkerMeta(type(QObject), type(ABC)):
    pass


class BaseWorker(QObject, ABC, metaclass=WorkerMeta):
    """
    Base class for workers that run in a QThread.

    Subclass and implement the `do_work` method.

    Usage:
        worker = MyWorker(args)
        thread = WorkerThread(worker)
        worker.signals.finished.connect(on_done)
        thread.start()
    """

    def __init__(self, parent: Optional[QObject] = None):
        super().__init__(parent)
        self.signals = WorkerSignals()
        self._state = WorkerState.PENDING
        self._cancel_token = CancellationToken()
        self._mutex = QMutex()
        self._result: Any = None
        self._error: Optional[tuple[str, str]] = None

    @property
    def state(self) -> WorkerState:
        """Current worker state."""
        with QMutexLocker(self._mutex):
            return self._state

    @state.setter
    def state(self, value: WorkerState) -> None:
        with QMutexLocker(self._mutex):
            self._state = value
        self.signals.state_changed.emit(value)

    @property
    def cancel_token(self) -> CancellationToken:
        return self._cancel_token

    @property
    def is_cancelled(self) -> bool:
        """Check if cancellation was requested."""
        return self._cancel_token.is_cancelled

    @property
    def result(self) -> Any:
        """Get the result (after completion)."""
        return self._result

    @property
    def error(self) -> Optional[tuple[str, str]]:
        """Get error info (after failure)."""
        return self._error

    def cancel(self) -> None:
        """Request cancellation. Safe to call from any thread."""
        self._cancel_token.cancel()
        with QMutexLocker(self._mutex):
            if self._state == WorkerState.RUNNING:
                self._state = WorkerState.CANCELLING
        self.signals.state_changed.emit(WorkerState.CANCELLING)

    @pyqtSlot()
    def run(self) -> None:
        """
        Main worker execution method.

        This is called when the thread starts.
        Subclasses should not override this directly,
        instead override `do_work`.
        """
        self.state = WorkerState.RUNNING
        self.signals.started.emit()

        try:
            result = self.do_work()
        except ComparisonCancelled:
            self._set_cancelled()
            return
        except ComparisonError as e:
            logging.error(f"{type(self).__name__} - {e}")
            self._set_failed(e)
            return
        except Exception as e:
            logging.exception(f"{type(self).__name__} - Unexpected error")
            self._set_failed(e)
            return

        if self.is_cancelled:
            self._set_cancelled()
        else:
            self._result = result
            self.state = WorkerState.COMPLETED
            self.signals.finished.emit(result)

    def _set_cancelled(self) -> None:
        self.state = WorkerState.CANCELLED
        self.signals.cancelled.emit()

    def _set_failed(self, error: Exception) -> None:
        self._error = (type(error).__name__, str(error))
        self.state = WorkerState.FAILED
        self.signals.error.emit(type(error).__name__, str(error))

    @abstractmethod
    def do_work(self) -> Any:
        """
        Perform the actual work.

        Subclasses must implement this method.
        Should pass `cancel_token` down or call `check_cancelled`
        periodically.

        Returns:
            The result of the work.
        """
        pass

    def report_progress_detail(self, info: ProgressInfo) -> None:
        """Report detailed progress."""
        self.signals.progress_detail.emit(info)

    def report_status(self, message: str) -> None:
        """Report a status message."""
        self.signals.status.emit(message)

    def check_cancelled(self) -> None:
        """Raise ComparisonCancelled if cancellation was requested."""
        self._cancel_token.raise_if_cancelled()


class WorkerThread(QThread):
    """
    Convenience class for running a worker in its own thread.

    Usage:
        thread = WorkerThread(my_worker)
        thread.start()
        # Worker runs in thread
        thread.wait()  # Wait for completion
    """

    def __init__(
        self,
        worker: BaseWorker,
        parent: Optional[QObject] = None
    ):
        super().__init__(parent)
        self.worker = worker
        self.worker.moveToThread(self)

        # Connect signals
        self.started.connect(self.worker.run)
        self.worker.signals.finished.connect(self.quit)
        self.worker.signals.error.connect(self.quit)
        self.worker.signals.cancelled.connect(self.quit)

    def cancel(self) -> None:
        """Cancel the worker."""
        self.worker.cancel()

    @property
    def result(self) -> Any:
        """Get the worker's result."""
        return self.worker.result

    @property
    def error(self) -> Optional[tuple[str, str]]:
        """Get error info if failed."""
        return self.worker.error
