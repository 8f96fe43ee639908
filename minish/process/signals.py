"""
Signal Notification Module

Signal handlers only record that something happened; the pipeline checks
the channel while it waits and acts on it from normal control flow.

SIGINT, SIGQUIT and SIGTSTP are all treated as interrupts: the shell
reports them and carries on. Children get the default dispositions back
when they exec, since caught signals are reset by exec.

Author: YSNRFD
Version: 1.0.0
"""

import signal
import threading
from contextlib import contextmanager
from typing import Iterator

from minish.logger import get_logger


INTERRUPT_NOTICE = "Signal caught, but continuing..."

INTERRUPT_SIGNALS = tuple(
    getattr(signal, name)
    for name in ('SIGINT', 'SIGQUIT', 'SIGTSTP')
    if hasattr(signal, name)
)


def _in_main_thread() -> bool:
    return threading.current_thread() is threading.main_thread()


class SignalChannel:
    """
    Notification channel between signal handlers and the engine.

    Attributes are plain flags: a handler runs on the main thread between
    bytecodes, so setting a bool is all it does. Inside ``interruptible``
    the interrupt handler also raises KeyboardInterrupt.

    Example:
        >>> channel = SignalChannel()
        >>> with channel.observing_interrupts():
        ...     ...  # SIGINT, SIGQUIT and SIGTSTP now only set a flag
        >>> channel.consume_interrupt()
        False
    """

    def __init__(self):
        self._logger = get_logger('signals')
        self._interrupted = False
        self._child_changed = False
        self._child_handler_installed = False
        self._interruptible = False

    def notify_interrupt(self, signum=None, frame=None) -> None:
        self._interrupted = True
        if self._interruptible:
            raise KeyboardInterrupt

    def notify_child(self, signum=None, frame=None) -> None:
        self._child_changed = True

    def consume_interrupt(self) -> bool:
        """Return and clear the pending interrupt flag."""
        pending, self._interrupted = self._interrupted, False
        return pending

    def consume_child_event(self) -> bool:
        """Return and clear the pending child-state-change flag."""
        pending, self._child_changed = self._child_changed, False
        return pending

    def install_child_handler(self) -> bool:
        """
        Route SIGCHLD to this channel.

        Returns:
            True if the handler was installed
        """
        if not hasattr(signal, 'SIGCHLD') or not _in_main_thread():
            return False

        signal.signal(signal.SIGCHLD, self.notify_child)
        self._child_handler_installed = True
        self._logger.debug("Installed SIGCHLD handler")
        return True

    def uninstall_child_handler(self) -> None:
        if self._child_handler_installed:
            signal.signal(signal.SIGCHLD, signal.SIG_DFL)
            self._child_handler_installed = False

    @contextmanager
    def observing_interrupts(self) -> Iterator['SignalChannel']:
        """
        Turn interrupt signals into a flag on this channel for the block.

        The previous handlers are restored on exit. Outside the main thread
        signal handlers cannot be changed, so the block runs unchanged.
        """
        if not _in_main_thread():
            yield self
            return

        previous = {
            signum: signal.signal(signum, self.notify_interrupt)
            for signum in INTERRUPT_SIGNALS
        }
        try:
            yield self
        finally:
            for signum, handler in previous.items():
                signal.signal(signum, handler)

    @contextmanager
    def interruptible(self) -> Iterator['SignalChannel']:
        """
        Make interrupts raise KeyboardInterrupt inside the block.

        Used around blocking reads at the prompt, which would otherwise
        resume after the handler returns.
        """
        self._interruptible = True
        try:
            yield self
        finally:
            self._interruptible = False
