from __future__ import annotations

import os
from dataclasses import dataclass, field, replace


class StartupError(Exception):
    """Fatal configuration problem detected before the server starts."""


def _env_port(default: int = 3000) -> int:
    raw = os.getenv("PORT", "").strip()
    if not raw:
        return default
    try:
        port = int(raw)
    except ValueError:
        port = 0
    if not 0 < port < 65536:
        raise StartupError(f"PORT must be a whole number between 1 and 65535, got {raw!r}.")
    return port


@dataclass(frozen=True)
class Config:
    template_name: str = ""
    api_key: str = ""
    templates_dir: str = "templates"
    database_path: str = "db.json"
    mount_path: str = "/api"
    host: str = "0.0.0.0"
    port: int = 3000
    cors_allowed_origins: tuple[str, ...] = field(default_factory=lambda: ("*",))  # "*" allows any origin
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> Config:
        cors = os.getenv("CORS_ALLOW_ORIGINS", "*")
        return cls(
            template_name=os.getenv("TEMPLATE", "").strip(),
            api_key=os.getenv("API_KEY", ""),
            templates_dir=os.getenv("TEMPLATES_DIR", "templates"),
            database_path=os.getenv("DATABASE_FILE", "db.json"),
            mount_path="/" + os.getenv("MOUNT_PATH", "/api").strip("/"),
            host=os.getenv("HOST", "0.0.0.0"),
            port=_env_port(),
            cors_allowed_origins=tuple(o for o in [c.strip() for c in cors.split(",")] if o),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    @property
    def template_path(self) -> str:
        return os.path.join(self.templates_dir, self.template_name)

    def override(self, d: dict) -> Config:
        known = {k: v for k, v in d.items() if k in self.__dataclass_fields__}
        return replace(self, **known) if known else self

    def to_flask_dict(self):
        return {
            "CORS_ALLOWED_ORIGINS": list(self.cors_allowed_origins),
        }
