"""Input-layer public API for key decoding and dispatch."""

from .key_registry import KeyComboBinding, KeyComboRegistry
from .reader import ESC_SEQUENCE_TIMEOUT_MS, _PENDING_BYTES, normalize_enter, read_key

__all__ = [
    "read_key",
    "normalize_enter",
    "_PENDING_BYTES",
    "ESC_SEQUENCE_TIMEOUT_MS",
    "KeyComboBinding",
    "KeyComboRegistry",
]
