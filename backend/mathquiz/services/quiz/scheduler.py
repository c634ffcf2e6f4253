import threading
from typing import Optional

from mathquiz import socketio


class TimerHandle:
    """A cancellable background timer owned by one quiz session."""

    def __init__(self, kind: str, session_code: str, interval: float):
        self.kind = kind
        self.session_code = session_code
        self.interval = interval
        self._cancelled = threading.Event()

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def wait(self) -> bool:
        """Sleep one interval. Returns True if the handle was cancelled meanwhile."""
        return self._cancelled.wait(self.interval)


def _scheduler_enabled(app) -> bool:
    return not (app.config.get('TESTING') and not app.config.get('ENABLE_SCHEDULER_IN_TESTS'))


def arm_countdown(app, session) -> Optional[TimerHandle]:
    """Start the once-per-interval tick source for the session's round.

    - No-ops in TESTING mode
    - Cancels whatever countdown the session already had, so only one
      periodic source is ever live per session
    - Must be called with the session lock held
    """
    disarm_countdown(app, session)
    if not _scheduler_enabled(app):
        return None

    interval = float(app.config.get('TICK_INTERVAL_SEC', 1.0))
    handle = TimerHandle('countdown', session.code, interval)
    session.countdown = handle
    app.logger.info(f"[timer-set] session={session.code} kind=countdown interval={interval}s")

    def _worker(h: TimerHandle):
        while not h.wait():
            if not session.tick(handle=h):
                app.logger.info(f"[timer-abort] session={h.session_code} kind=countdown")
                return
        app.logger.info(f"[timer-stop] session={h.session_code} kind=countdown")

    socketio.start_background_task(_worker, handle)
    return handle


def disarm_countdown(app, session) -> None:
    handle = session.countdown
    session.countdown = None
    if handle is not None and not handle.cancelled:
        handle.cancel()
        app.logger.info(f"[timer-cancel] session={session.code} kind=countdown")


def schedule_advance(app, session) -> Optional[TimerHandle]:
    """Show the next problem after ADVANCE_DELAY_SEC, unless the round ends first.

    A newer submission replaces any advance still pending for the session.
    Must be called with the session lock held.
    """
    cancel_advance(app, session)
    if not _scheduler_enabled(app):
        return None

    delay = float(app.config.get('ADVANCE_DELAY_SEC', 1.0))
    handle = TimerHandle('advance', session.code, delay)
    session.pending_advance = handle
    app.logger.info(f"[timer-set] session={session.code} kind=advance delay={delay}s")

    def _worker(h: TimerHandle):
        if h.wait():
            return
        app.logger.info(f"[timer-fire] session={h.session_code} kind=advance")
        if not session.advance(handle=h):
            app.logger.info(f"[timer-abort] session={h.session_code} kind=advance round no longer active")

    socketio.start_background_task(_worker, handle)
    return handle


def cancel_advance(app, session) -> None:
    handle = session.pending_advance
    session.pending_advance = None
    if handle is not None and not handle.cancelled:
        handle.cancel()
        app.logger.info(f"[timer-cancel] session={session.code} kind=advance")


def cancel_all(app, session) -> None:
    disarm_countdown(app, session)
    cancel_advance(app, session)
