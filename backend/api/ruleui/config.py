"""Service settings read from the environment."""

import os

from pydantic import BaseModel

from . import __version__


def _env_flag(name: str, default: bool = False) -> bool:
    val = os.getenv(name)
    if val is None:
        return default
    return val.strip().lower() in {"1", "true", "yes", "on"}


class Settings(BaseModel):
    # Query component linked from rule expressions
    query_url: str = os.getenv("RULEUI_QUERY_URL", "http://localhost:9090")

    # Path prefix handling behind reverse proxies
    web_external_prefix: str = os.getenv("RULEUI_WEB_EXTERNAL_PREFIX", "")
    web_prefix_header: str = os.getenv("RULEUI_WEB_PREFIX_HEADER", "")

    allowed_origins: str = os.getenv("ALLOWED_ORIGINS", "*")

    # Snapshot of rule groups served when no rule manager is injected
    rules_snapshot_path: str | None = os.getenv("RULEUI_RULES_SNAPSHOT") or None

    build_version: str = os.getenv("RULEUI_BUILD_VERSION", __version__)
    log_level: str = os.getenv("RULEUI_LOG_LEVEL", "INFO")
    debug_templates: bool = _env_flag("RULEUI_DEBUG_TEMPLATES")


settings = Settings()
