"""
Encrypted key-value storage for auth state
"""

import os
import logging
import hashlib
from pathlib import Path
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken


class SecureStore:
    """Stores each value Fernet-encrypted in its own file under `directory`"""

    KEY_FILE = ".key"

    def __init__(self, directory: Path):
        self.directory = Path(directory)
        self.logger = logging.getLogger(__name__)
        self._fernet: Optional[Fernet] = None

    def _ensure_fernet(self) -> Fernet:
        if self._fernet is None:
            self.directory.mkdir(parents=True, exist_ok=True)
            key_path = self.directory / self.KEY_FILE
            if key_path.exists():
                key = key_path.read_bytes().strip()
            else:
                key = Fernet.generate_key()
                key_path.write_bytes(key)
                os.chmod(key_path, 0o600)
            self._fernet = Fernet(key)
        return self._fernet

    def _path_for(self, key: str) -> Path:
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
        return self.directory / f"{digest}.bin"

    def get_item(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        if not path.exists():
            return None

        try:
            return self._ensure_fernet().decrypt(path.read_bytes()).decode("utf-8")
        except InvalidToken:
            self.logger.warning(f"Discarding unreadable value for '{key}'")
            self.remove_item(key)
            return None

    def set_item(self, key: str, value: str):
        path = self._path_for(key)
        token = self._ensure_fernet().encrypt(value.encode("utf-8"))
        path.write_bytes(token)
        os.chmod(path, 0o600)

    def remove_item(self, key: str):
        path = self._path_for(key)
        if path.exists():
            path.unlink()
