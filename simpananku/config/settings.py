"""
Settings management for SimpananKu
"""

import os
import json
import logging
from pathlib import Path
from typing import Dict, Any, List, Optional
from dataclasses import dataclass, asdict, field, fields


DEFAULT_SUPABASE_URL = "https://adbbcmzgumpqxrbrwjgh.supabase.co"
DEFAULT_ANON_KEY = ""

logger = logging.getLogger(__name__)


@dataclass
class BackendConfig:
    """Hosted backend configuration"""
    supabase_url: str = DEFAULT_SUPABASE_URL
    anon_key: str = DEFAULT_ANON_KEY
    api_timeout: int = 30
    entries_table: str = "text_entries"

    @property
    def project_ref(self) -> str:
        """Subdomain of the project URL, used to name the stored session key"""
        host = self.supabase_url.split("://", 1)[-1]
        return host.split(".", 1)[0]


@dataclass
class AuthConfig:
    """Sign-in and session behavior"""
    provider: str = "google"
    redirect_scheme: str = "simpananku"
    redirect_path: str = "auth/callback"
    link_prefixes: List[str] = field(default_factory=lambda: ["simpananku://", "exp://"])
    auto_refresh_token: bool = True
    persist_session: bool = True
    refresh_margin: int = 60


@dataclass
class WindowConfig:
    """Main window geometry"""
    main_width: int = 420
    main_height: int = 760


@dataclass
class UIConfig:
    """UI behavior configuration"""
    mask_passwords: bool = True
    confirm_delete: bool = True


def _from_dict(config_cls, data: Dict[str, Any]):
    # Drop keys written by older versions
    known = {f.name for f in fields(config_cls)}
    return config_cls(**{k: v for k, v in data.items() if k in known})


class Settings:
    """Main settings manager"""

    ENV_OVERRIDES = {
        "supabase_url": ("SIMPANANKU_SUPABASE_URL", "EXPO_PUBLIC_SUPABASE_URL"),
        "anon_key": ("SIMPANANKU_SUPABASE_ANON_KEY", "EXPO_PUBLIC_SUPABASE_ANON_KEY"),
    }

    def __init__(self, config_dir: Optional[Path] = None):
        env_dir = os.getenv("SIMPANANKU_CONFIG_DIR")
        if config_dir is None:
            config_dir = Path(env_dir) if env_dir else Path.home() / ".config" / "simpananku"
        self.config_dir = Path(config_dir)
        self.config_file = self.config_dir / "settings.json"
        self.config_dir.mkdir(parents=True, exist_ok=True)

        # Default settings
        self.backend = BackendConfig()
        self.auth = AuthConfig()
        self.windows = WindowConfig()
        self.ui = UIConfig()

        self.load()

    @property
    def store_dir(self) -> Path:
        return self.config_dir / "store"

    @property
    def log_dir(self) -> Path:
        return self.config_dir / "logs"

    def load(self):
        """Load settings from file, then apply environment overrides"""
        if self.config_file.exists():
            try:
                with open(self.config_file, 'r') as f:
                    data = json.load(f)

                if 'backend' in data:
                    self.backend = _from_dict(BackendConfig, data['backend'])

                if 'auth' in data:
                    self.auth = _from_dict(AuthConfig, data['auth'])

                if 'windows' in data:
                    self.windows = _from_dict(WindowConfig, data['windows'])

                if 'ui' in data:
                    self.ui = _from_dict(UIConfig, data['ui'])

            except (OSError, ValueError, TypeError) as e:
                logger.warning(f"Error loading settings: {e} - using default settings")

        self._apply_env_overrides()

    def _apply_env_overrides(self):
        for attr, names in self.ENV_OVERRIDES.items():
            for name in names:
                value = os.getenv(name)
                if value:
                    setattr(self.backend, attr, value)
                    break

    def save(self):
        """Save settings to file"""
        try:
            with open(self.config_file, 'w') as f:
                json.dump(self.to_dict(), f, indent=2)
        except OSError as e:
            logger.error(f"Error saving settings: {e}")

    @property
    def redirect_url(self) -> str:
        return f"{self.auth.redirect_scheme}://{self.auth.redirect_path}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert settings to dictionary"""
        return {
            'backend': asdict(self.backend),
            'auth': asdict(self.auth),
            'windows': asdict(self.windows),
            'ui': asdict(self.ui)
        }
