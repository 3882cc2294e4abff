"""Execution session manager: pass tokens, supersession and cancellation."""
import itertools
import logging

from .cache import ResultCache

logger = logging.getLogger(__name__)


class CancellationToken:
    """Marks one pass. Once cancelled it never becomes live again."""

    def __init__(self, serial: int):
        self.serial = serial
        self._cancelled = False

    def __repr__(self) -> str:
        state = "cancelled" if self._cancelled else "live"
        return f"<CancellationToken #{self.serial} {state}>"

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True


class SessionManager:
    """Issues strictly increasing tokens and keeps at most one of them active.

    Also owns the result cache shared by every pass of the engine.
    """

    def __init__(self):
        self._serials = itertools.count(1)
        self._active: CancellationToken | None = None
        self.results = ResultCache()

    @property
    def active_token(self) -> CancellationToken | None:
        return self._active

    def begin(self) -> CancellationToken:
        """Start a new pass, superseding whichever pass was active."""
        previous = self._active
        token = CancellationToken(next(self._serials))
        if previous is not None and not previous.cancelled:
            previous.cancel()
            logger.info("Pass #%d superseded by pass #%d", previous.serial, token.serial)
        self._active = token
        return token

    def is_active(self, token: CancellationToken) -> bool:
        return token is self._active and not token.cancelled

    def cancel(self, token: CancellationToken | None = None) -> bool:
        """Deactivate the active pass (or `token`, only if it is the active one).

        Returns True if a live pass was cancelled.
        """
        active = self._active
        if active is None or (token is not None and token is not active):
            return False
        self._active = None
        if active.cancelled:
            return False
        active.cancel()
        logger.info("Pass #%d cancelled", active.serial)
        return True
