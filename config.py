# =============================================================================
# VisualEyes Heatmap Client - Centralized Configuration
# =============================================================================
# Provides a single Config dataclass containing all tunable parameters for
# both the plugin workflow and the local mock prediction server. Parameters
# are overridable via environment variables with the VISUALEYES_ prefix
# (e.g., VISUALEYES_API_URL=http://127.0.0.1:8000/predict/).
# =============================================================================

import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


def _default_data_dir() -> str:
    """
    Per-installation data directory holding settings.txt.

    Returns:
        str: ``~/.visualeyes`` expanded for the current user.
    """
    return str(Path.home() / ".visualeyes")


def _default_temp_dir() -> str:
    """Scratch directory for renditions and downloaded heatmaps."""
    return os.path.join(tempfile.gettempdir(), "visualeyes")


def _optional_float(value: str) -> Optional[float]:
    """Parse an env value where an empty string means "unset"."""
    return float(value) if value.strip() else None


@dataclass
class Config:
    """
    Centralized configuration for the VisualEyes heatmap client.

    All fields can be overridden via environment variables prefixed with
    VISUALEYES_.
    """

    # -- Remote prediction API --
    api_url: str = "https://www.visualeyes.design/predict/"
    platform: str = "adobexd"
    request_timeout_seconds: Optional[float] = None  # None = transport default

    # -- Local storage --
    data_dir: str = field(default_factory=_default_data_dir)
    settings_filename: str = "settings.txt"
    temp_dir: str = field(default_factory=_default_temp_dir)

    # -- AOI validation --
    min_aoi_width: float = 70
    min_aoi_height: float = 32
    branding_color: str = "#3E21DE"

    # -- Rendition --
    rendition_scale: float = 1
    rendition_quality: int = 100
    rendition_mime: str = "image/jpg"

    # -- Notifications --
    toast_seconds: float = 5.0

    # -- Mock prediction server --
    mock_host: str = "127.0.0.1"
    mock_port: int = 8000

    log_level: str = "INFO"

    def __post_init__(self):
        """Apply environment variable overrides."""
        self._apply_env_overrides()

    def _apply_env_overrides(self):
        """
        Override config fields from environment variables.

        Looks for VISUALEYES_<FIELD_NAME_UPPERCASE> environment variables and
        applies them with appropriate type conversion.
        """
        field_types = {
            "api_url": str,
            "platform": str,
            "request_timeout_seconds": _optional_float,
            "data_dir": str,
            "settings_filename": str,
            "temp_dir": str,
            "min_aoi_width": float,
            "min_aoi_height": float,
            "branding_color": str,
            "rendition_scale": float,
            "rendition_quality": int,
            "rendition_mime": str,
            "toast_seconds": float,
            "mock_host": str,
            "mock_port": int,
            "log_level": str,
        }
        for field_name, field_type in field_types.items():
            env_key = f"VISUALEYES_{field_name.upper()}"
            env_value = os.environ.get(env_key)
            if env_value is not None:
                setattr(self, field_name, field_type(env_value))

    @property
    def mock_url(self) -> str:
        return f"http://{self.mock_host}:{self.mock_port}"


# ---------------------------------------------------------------------------
# Singleton accessor
# ---------------------------------------------------------------------------
_config_instance: Optional[Config] = None


def get_config() -> Config:
    """
    Return the singleton Config instance, creating it on first call.

    Returns:
        Config: The global configuration object.
    """
    global _config_instance
    if _config_instance is None:
        _config_instance = Config()
    return _config_instance
