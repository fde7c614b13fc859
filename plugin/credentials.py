# =============================================================================
# VisualEyes Heatmap Client - API Key Storage
# =============================================================================
# Persists the user's API key as the raw, unstructured contents of
# settings.txt in the per-installation data directory, and provides the
# key-entry dialog flow used by the "set-key" command.
# =============================================================================

import logging
import os
from dataclasses import dataclass
from typing import Callable, Optional

logger = logging.getLogger(__name__)

FILENAME = "settings.txt"


class CredentialStore:
    """
    Reads and writes the single stored API key.

    No locking and no validation: the service decides whether a key is
    valid (HTTP 401 on first use).

    Args:
        data_dir: Per-installation data directory.
        filename: Name of the settings file inside ``data_dir``.
    """

    def __init__(self, data_dir: str, filename: str = FILENAME):
        self._path = os.path.join(data_dir, filename)

    @classmethod
    def from_config(cls, config) -> "CredentialStore":
        return cls(data_dir=config.data_dir, filename=config.settings_filename)

    @property
    def path(self) -> str:
        return self._path

    def get(self) -> Optional[str]:
        """
        Return the stored key, or None when no settings file exists yet.
        """
        if not os.path.isfile(self._path):
            logger.debug("No settings file at %s", self._path)
            return None
        with open(self._path, "r", encoding="utf-8") as f:
            return f.read()

    def set(self, new_key: str) -> None:
        """
        Overwrite the settings file with ``new_key``, creating it if needed.
        """
        os.makedirs(os.path.dirname(self._path) or ".", exist_ok=True)
        with open(self._path, "w", encoding="utf-8") as f:
            f.write(new_key)
        logger.info("API key stored in %s", self._path)


@dataclass(frozen=True)
class DialogResult:
    """
    Outcome of one key-entry dialog.

    Attributes:
        submitted: True when the user pressed "Set key".
        key:       The key that was stored (None when cancelled).
        previous:  The key shown when the dialog opened.
    """

    submitted: bool
    key: Optional[str] = None
    previous: str = ""


class KeyDialog:
    """
    Key-entry dialog flow.

    The previously stored key is read when the dialog opens and handed to
    the prompt as its initial value; nothing is kept between dialogs.

    Args:
        store:  Where the key is read from and written to.
        prompt: Callable receiving the previous key and returning the new
                key, or None when the user cancels.
    """

    def __init__(self, store: CredentialStore, prompt: Callable[[str], Optional[str]]):
        self._store = store
        self._prompt = prompt

    def open(self) -> DialogResult:
        previous = self._store.get() or ""
        logger.debug("Opening key dialog (previous key %s)", "found" if previous else "not found")

        new_key = self._prompt(previous)
        if new_key is None:
            logger.info("Key dialog cancelled")
            return DialogResult(submitted=False, previous=previous)

        self._store.set(new_key)
        return DialogResult(submitted=True, key=new_key, previous=previous)
