"""Settings loader with environment variable and Docker secrets integration."""
from __future__ import annotations
import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_API_BASE_URL = "https://gorest.co.in/public-api"
DEFAULT_REQUEST_TIMEOUT = 5.0


def _load_secret_from_file(secret_name: str, env_var: str | None = None) -> str | None:
    """
    Load secret from /run/secrets (Docker secrets pattern).

    Priority:
    1. /run/secrets/{secret_name} (Docker secrets mount)
    2. Environment variable (fallback)

    Args:
        secret_name: Name of the secret file in /run/secrets
        env_var: Optional environment variable name to check as fallback

    Returns:
        Secret value or None if not found
    """
    secret_file = Path("/run/secrets") / secret_name

    # Priority 1: Read from /run/secrets
    if secret_file.exists() and secret_file.is_file():
        try:
            secret_value = secret_file.read_text().strip()
            if secret_value:
                print(f"[settings] ✓ Loaded {secret_name} from /run/secrets")
                return secret_value
        except OSError as e:
            print(f"[settings] ✗ Failed to read /run/secrets/{secret_name}: {e}")

    # Priority 2: Fallback to environment variable
    if env_var:
        secret_value = os.getenv(env_var)
        if secret_value:
            print(f"[settings] ✓ Loaded {env_var} from environment (fallback)")
            return secret_value

    return None


@dataclass
class AppConfig:
    """Application configuration container."""
    # Remote users API
    api_base_url: str = DEFAULT_API_BASE_URL
    api_token: str = ""
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT

    # Audit
    audit_operator: str = "operator"

    # Logging
    log_level: str = "INFO"

    @property
    def has_api_token(self) -> bool:
        """True when a bearer token is configured (not checked against the service)."""
        return bool(self.api_token)


def _parse_timeout(raw: str | None) -> float:
    if raw is None or not raw.strip():
        return DEFAULT_REQUEST_TIMEOUT
    try:
        value = float(raw)
    except ValueError:
        raise RuntimeError(f"USERS_API_TIMEOUT must be a number of seconds, got {raw!r}")
    if value <= 0:
        raise RuntimeError(f"USERS_API_TIMEOUT must be positive, got {raw!r}")
    return value


def load_settings() -> AppConfig:
    """Load application settings from environment and /run/secrets."""
    api_base_url = (os.environ.get("USERS_API_BASE_URL") or DEFAULT_API_BASE_URL).rstrip("/")

    # Bearer token: /run/secrets > environment. Absence is not an error; the
    # service rejects unauthenticated writes on its own.
    api_token = _load_secret_from_file("users_api_token", "USERS_API_TOKEN") or ""
    if not api_token:
        print("[settings] WARNING: USERS_API_TOKEN not set; create/update/delete will be rejected by the service")

    request_timeout = _parse_timeout(os.environ.get("USERS_API_TIMEOUT"))
    audit_operator = os.environ.get("USERS_OPERATOR", "operator").strip() or "operator"
    log_level = os.environ.get("LOG_LEVEL", "INFO").strip().upper() or "INFO"

    print(f"[settings] api={api_base_url}; timeout={request_timeout}s; token={'***' if api_token else 'EMPTY'}")

    return AppConfig(
        api_base_url=api_base_url,
        api_token=api_token,
        request_timeout=request_timeout,
        audit_operator=audit_operator,
        log_level=log_level,
    )
