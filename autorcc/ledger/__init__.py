"""Settings ledger, its fingerprint and the lock that guards it."""

from autorcc.ledger.fingerprint import SEPARATOR, compute_fingerprint
from autorcc.ledger.lock import FileLock, touch
from autorcc.ledger.settings import LEDGER_TAG, SettingsLedger, find_setting

__all__ = [
    "FileLock",
    "LEDGER_TAG",
    "SEPARATOR",
    "SettingsLedger",
    "compute_fingerprint",
    "find_setting",
    "touch",
]
