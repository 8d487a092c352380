"""
Client Configuration Management
"""

import os
import json
from pathlib import Path
from dataclasses import dataclass, asdict
from typing import Optional, Dict, Any


@dataclass
class ClientConfig:
    """Configuration for the registration and admin clients"""

    # API settings
    api_base_url: str = "http://localhost:8000/api/v1"
    ws_url: str = "ws://localhost:8000/ws"
    timeout: float = 10.0

    # Admin access (checked locally by the Authenticator)
    admin_username: str = "admin"
    admin_password: Optional[str] = None

    # Live updates
    reconnect_base_delay: float = 1.0  # seconds
    reconnect_max_delay: float = 30.0  # seconds
    max_reconnect_attempts: int = 0  # 0 = retry forever

    # Dashboard
    page_size: int = 100

    def load_from_file(self, config_path: str) -> None:
        """Load configuration from JSON file"""
        path = Path(config_path)
        if path.exists():
            with open(path) as f:
                data = json.load(f)
                for key, value in data.items():
                    if hasattr(self, key):
                        setattr(self, key, value)

    def save_to_file(self, config_path: str) -> None:
        """Save configuration to JSON file"""
        with open(config_path, 'w') as f:
            json.dump(asdict(self), f, indent=2)

    @classmethod
    def load(cls, config_path: Optional[str] = None) -> "ClientConfig":
        """File first (if given), then REGISTRATION_* environment variables"""
        config = cls()
        path = config_path or os.environ.get("REGISTRATION_CONFIG")
        if path:
            config.load_from_file(path)

        config._load_from_env()

        return config

    def _load_from_env(self) -> None:
        """Load configuration from environment variables"""
        env_mappings = {
            "REGISTRATION_API_URL": "api_base_url",
            "REGISTRATION_WS_URL": "ws_url",
            "REGISTRATION_TIMEOUT": ("timeout", float),
            "REGISTRATION_ADMIN_USERNAME": "admin_username",
            "REGISTRATION_ADMIN_PASSWORD": "admin_password",
            "REGISTRATION_RECONNECT_BASE_DELAY": ("reconnect_base_delay", float),
            "REGISTRATION_RECONNECT_MAX_DELAY": ("reconnect_max_delay", float),
            "REGISTRATION_MAX_RECONNECT_ATTEMPTS": ("max_reconnect_attempts", int),
            "REGISTRATION_PAGE_SIZE": ("page_size", int),
        }

        for env_var, mapping in env_mappings.items():
            value = os.environ.get(env_var)
            if value:
                if isinstance(mapping, tuple):
                    attr, converter = mapping
                    setattr(self, attr, converter(value))
                else:
                    setattr(self, mapping, value)

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary"""
        data = asdict(self)
        if data.get("admin_password"):
            data["admin_password"] = "********"
        return data
