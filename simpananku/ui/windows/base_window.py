"""
Base screen class for all SimpananKu screens
"""

import asyncio
import logging
from typing import Set

from PyQt6.QtWidgets import QWidget, QMessageBox


class BaseScreen(QWidget):
    """Base class for the stacked screens of the main window"""

    def __init__(self, title: str = "SimpananKu"):
        super().__init__()
        self.setWindowTitle(title)
        self.logger = logging.getLogger(self.__class__.__module__)
        self._tasks: Set[asyncio.Task] = set()

        # Apply base styling
        self._apply_base_styling()

    def _apply_base_styling(self):
        """Apply base styling to the screen"""
        self.setStyleSheet("""
            QWidget {
                background-color: #f0f9ff;
                color: #1e293b;
                font-size: 14px;
            }
            QLineEdit, QTextEdit {
                background-color: #ffffff;
                border: 1px solid #e2e8f0;
                border-radius: 10px;
                padding: 10px;
            }
        """)

    def run_async(self, coro) -> asyncio.Task:
        """Schedule a coroutine from a Qt slot and keep a reference until it finishes"""
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task):
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            self.logger.error(f"Unhandled error in screen task: {task.exception()}")

    def show_error(self, message: str, title: str = "Error"):
        """Dismissable alert"""
        QMessageBox.warning(self, title, message)

    def confirm(self, title: str, message: str, accept_text: str, reject_text: str = "Batal") -> bool:
        box = QMessageBox(self)
        box.setWindowTitle(title)
        box.setText(message)
        accept = box.addButton(accept_text, QMessageBox.ButtonRole.DestructiveRole)
        box.addButton(reject_text, QMessageBox.ButtonRole.RejectRole)
        box.exec()
        return box.clickedButton() is accept

    def cancel_tasks(self):
        for task in list(self._tasks):
            task.cancel()
