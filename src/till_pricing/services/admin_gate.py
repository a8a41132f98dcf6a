"""
Admin Gate - PIN check in front of the price editor.
"""
import hmac
import logging

from ..exceptions import TillError

logger = logging.getLogger(__name__)


def pin_matches(entry: str, pin: str) -> bool:
    return hmac.compare_digest(str(entry or "").encode(), str(pin).encode())


class AdminGate:
    """
    Tracks whether the admin panel is unlocked for this session.

    Opening the panel unlocks it straight away when the PIN is switched off.
    """

    def __init__(self):
        self.is_open = False
        self.authorised = False

    def open(self, pin_enabled: bool):
        self.is_open = True
        self.authorised = not pin_enabled

    def close(self):
        self.is_open = False
        self.authorised = False

    def try_pin(self, entry: str, pin: str) -> bool:
        """Unlock with a PIN entry; raises TillError("WRONG_PIN") on mismatch."""
        if not pin_matches(entry, pin):
            logger.warning("Rejected admin PIN entry")
            raise TillError("WRONG_PIN")
        self.authorised = True
        return True

    def require_authorised(self):
        if not self.authorised:
            raise TillError("ADMIN_LOCKED")
