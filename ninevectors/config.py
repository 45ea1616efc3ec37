"""Application settings loaded from environment variables or .env."""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


def _find_env_files() -> list[Path]:
    """Find .env files to load, searching upward from CWD and in the package dir.

    The package-level .env is loaded first so that a project .env found
    from the working directory wins (last file wins in pydantic-settings).
    """
    candidates: list[Path] = []

    pkg_env = Path(__file__).resolve().parent.parent / ".env"
    if pkg_env.is_file():
        candidates.append(pkg_env)

    cwd = Path.cwd().resolve()
    for parent in [cwd, *cwd.parents]:
        env_path = parent / ".env"
        if env_path.is_file() and env_path not in candidates:
            candidates.append(env_path)
            break  # stop at first match going upward

    return candidates


class NineVectorsSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="NINEVECTORS_",
        env_file=_find_env_files(),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # API
    api_url: str = "http://localhost:3001/api"
    request_timeout: float = 30.0
    max_retries: int = 3
    retry_backoff_scale: float = 1.0  # multiplies the 2**n second backoff

    # Local state (tour preferences, drafts, token, log file)
    state_dir: Path = Path("~/.config/ninevectors")
    log_level: str = "INFO"  # log file only; the terminal follows -v

    # Tours
    coach_timeout_seconds: float = 5.0
    tour_grace_seconds: float = 0.3  # delay before a finished tour is cleared

    # Demo carousels
    auto_advance_seconds: float = 5.0


def load_settings(**overrides: object) -> NineVectorsSettings:
    """Load settings with optional CLI overrides.

    ``None`` overrides are dropped so that unset CLI options fall through
    to the environment.  ``state_dir`` is always returned expanded.
    """
    cleaned = {k: v for k, v in overrides.items() if v is not None}
    settings = NineVectorsSettings(**cleaned)  # type: ignore[arg-type]
    if settings.state_dir != settings.state_dir.expanduser():
        settings = settings.model_copy(
            update={"state_dir": settings.state_dir.expanduser()}
        )
    return settings
