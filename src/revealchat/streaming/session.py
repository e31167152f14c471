"""Reveal session: the timed, pausable reveal of one message.

Hides the reveal state machine and its timer bookkeeping. A session is
owned by whatever displays the message and must be disposed when that
view goes away; disposing an unfinished session cancels it without
marking the message as animated.
"""

import asyncio
from collections.abc import AsyncIterator, Callable
from typing import Any

from .models import RevealStatus, RevealToken
from .scheduler import AsyncioScheduler, Scheduler, TimerHandle
from .timing import token_delay
from .tokenizer import join_tokens, tokenize

CURSOR_GLYPH = "●"


class RevealSession:
    """Reveals the tokens of one message over time.

    States: idle -> running <-> paused, then completed or canceled.
    Requests that do not fit the current state are ignored.

    Usage:
        session = RevealSession(message.id, message.content, on_update=view.update)
        session.start()
        ...
        session.dispose()
    """

    def __init__(
        self,
        message_id: str,
        content: str | list[RevealToken],
        scheduler: Scheduler | None = None,
        on_update: Callable[[str], Any] | None = None,
        on_complete: Callable[[str], Any] | None = None,
        on_cancel: Callable[[str], Any] | None = None,
        delay_fn: Callable[[RevealToken, RevealToken | None], int] = token_delay,
        speed: float = 1.0,
    ) -> None:
        """Create an idle session.

        Args:
            message_id: Id of the message being revealed
            content: Message text, or tokens produced by ``tokenize``
            scheduler: Timer source (defaults to the running asyncio loop)
            on_update: Called with the displayed text after every reveal
            on_complete: Called once with the message id on completion
            on_cancel: Called once with the message id on cancellation
            delay_fn: Milliseconds to wait before a token is revealed
            speed: Divides every delay; 2.0 reveals twice as fast

        Raises:
            ValueError: If speed is not positive
        """
        if speed <= 0:
            raise ValueError(f"speed must be positive, got {speed}")

        self.message_id = message_id
        self.tokens = tokenize(content) if isinstance(content, str) else list(content)
        self.content = join_tokens(self.tokens)
        self.speed = speed

        self._scheduler = scheduler or AsyncioScheduler()
        self._on_update = on_update
        self._on_complete = on_complete
        self._on_cancel = on_cancel
        self._delay_fn = delay_fn

        self._status = RevealStatus.IDLE
        self._cursor = 0
        self._revealed: list[str] = []
        self._handle: TimerHandle | None = None
        self._waiters: list[asyncio.Future[RevealStatus]] = []
        self._debug_callback: Any = None

    def set_debug_callback(self, callback: Any) -> None:
        """Set debug callback for logging.

        Args:
            callback: Callable(level: str, component: str, message: str)
        """
        self._debug_callback = callback

    def _debug(self, level: str, component: str, message: str) -> None:
        """Send debug message if callback is set."""
        if self._debug_callback:
            self._debug_callback(level, component, message)

    @property
    def status(self) -> RevealStatus:
        return self._status

    @property
    def cursor(self) -> int:
        """Index of the next token to reveal."""
        return self._cursor

    @property
    def is_active(self) -> bool:
        """True while running or paused."""
        return self._status in (RevealStatus.RUNNING, RevealStatus.PAUSED)

    @property
    def has_pending_timer(self) -> bool:
        return self._handle is not None

    @property
    def revealed_text(self) -> str:
        """Concatenation of the tokens revealed so far."""
        return "".join(self._revealed)

    @property
    def displayed_text(self) -> str:
        """Text to show for the message right now.

        The revealed prefix plus a cursor glyph while the reveal is active,
        the full content once completed, and the bare prefix otherwise.
        """
        if self._status == RevealStatus.COMPLETED:
            return self.content
        if self.is_active:
            return self.revealed_text + CURSOR_GLYPH
        return self.revealed_text

    def start(self) -> None:
        """Reveal the first token immediately and schedule the rest."""
        if self._status != RevealStatus.IDLE:
            return

        self._debug("debug", "Reveal", f"Starting reveal of {self.message_id} ({len(self.tokens)} tokens)")
        self._status = RevealStatus.RUNNING
        if not self.tokens:
            self._complete()
            return
        self._reveal_next()

    def pause(self) -> None:
        """Suspend the reveal, keeping the cursor."""
        if self._status != RevealStatus.RUNNING:
            return
        self._cancel_timer()
        self._status = RevealStatus.PAUSED
        self._debug("debug", "Reveal", f"Paused {self.message_id} at {self._cursor}/{len(self.tokens)}")
        self._notify()

    def resume(self) -> None:
        """Continue from the cursor; the next token waits a full delay."""
        if self._status != RevealStatus.PAUSED:
            return
        self._status = RevealStatus.RUNNING
        self._debug("debug", "Reveal", f"Resumed {self.message_id} at {self._cursor}/{len(self.tokens)}")
        if self._notify():
            self._schedule_next()

    def toggle_pause(self) -> None:
        if self._status == RevealStatus.RUNNING:
            self.pause()
        elif self._status == RevealStatus.PAUSED:
            self.resume()

    def stop(self) -> None:
        """Cancel the reveal; the partial prefix stays as it is."""
        if self._status.is_finished:
            return
        self._cancel_timer()
        self._status = RevealStatus.CANCELED
        self._debug("info", "Reveal", f"Canceled {self.message_id} at {self._cursor}/{len(self.tokens)}")
        self._notify()
        if self._on_cancel is not None:
            self._on_cancel(self.message_id)
        self._resolve_waiters()

    cancel = stop

    def dispose(self) -> None:
        """Release the timer; cancels the session if it has not finished."""
        if not self._status.is_finished:
            self.stop()

    async def wait(self) -> RevealStatus:
        """Wait until the session completes or is canceled."""
        if self._status.is_finished:
            return self._status
        future: asyncio.Future[RevealStatus] = asyncio.get_running_loop().create_future()
        self._waiters.append(future)
        return await future

    def _reveal_next(self) -> None:
        self._revealed.append(self.tokens[self._cursor].text)
        self._cursor += 1
        if self._cursor >= len(self.tokens):
            self._complete()
            return
        if self._notify():
            self._schedule_next()

    def _schedule_next(self) -> None:
        # The update listener may already have changed the state
        if self._status != RevealStatus.RUNNING or self._handle is not None:
            return
        token = self.tokens[self._cursor]
        previous = self.tokens[self._cursor - 1] if self._cursor > 0 else None
        delay_ms = self._delay_fn(token, previous) / self.speed
        self._handle = self._scheduler.call_later(delay_ms / 1000, self._tick)

    def _tick(self) -> None:
        self._handle = None
        if self._status != RevealStatus.RUNNING:
            return
        self._reveal_next()

    def _complete(self) -> None:
        self._status = RevealStatus.COMPLETED
        self._debug("debug", "Reveal", f"Completed {self.message_id}")
        self._notify()
        if self._on_complete is not None:
            self._on_complete(self.message_id)
        self._resolve_waiters()

    def _notify(self) -> bool:
        """Push the displayed text to the listener.

        A failing listener cancels the session; the caller then shows the
        full text instead.
        """
        if self._on_update is None:
            return True
        try:
            self._on_update(self.displayed_text)
        except Exception as e:
            self._debug("error", "Reveal", f"Update callback failed for {self.message_id}: {e}")
            if not self._status.is_finished:
                self._on_update = None
                self.stop()
            return False
        return True

    def _cancel_timer(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _resolve_waiters(self) -> None:
        waiters, self._waiters = self._waiters, []
        for future in waiters:
            if not future.done():
                future.set_result(self._status)


async def reveal_stream(
    content: str,
    speed: float = 1.0,
    delay_fn: Callable[[RevealToken, RevealToken | None], int] = token_delay,
) -> AsyncIterator[str]:
    """Yield successive displayed texts of a reveal on the running loop.

    The last value is the full content without the cursor glyph. Closing
    the generator early cancels the reveal.
    """
    queue: asyncio.Queue[str | None] = asyncio.Queue()
    session = RevealSession(
        "stream",
        content,
        on_update=queue.put_nowait,
        on_complete=lambda _id: queue.put_nowait(None),
        on_cancel=lambda _id: queue.put_nowait(None),
        delay_fn=delay_fn,
        speed=speed,
    )
    session.start()
    try:
        while True:
            text = await queue.get()
            if text is None:
                break
            yield text
    finally:
        session.dispose()
