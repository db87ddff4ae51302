from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
import os

from dotenv import load_dotenv, set_key

from adsquery.util import normalize_customer_id

ENV_PREFIX = "GOOGLE_ADS_"
REQUIRED_FIELDS = ("developer_token", "client_id", "client_secret")


def _env_float(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    env_path: Path
    oauth_host: str
    oauth_port: int
    oauth_grace_seconds: float
    auth_uri: str
    token_uri: str
    output_dir: Path
    collect_days: int
    request_delay_seconds: float

    @staticmethod
    def load() -> "Settings":
        env_path = Path(os.getenv("ADS_ENV_PATH", ".env"))
        load_dotenv(env_path)

        return Settings(
            env_path=env_path,
            oauth_host=os.getenv("ADS_OAUTH_HOST", "127.0.0.1").strip() or "127.0.0.1",
            # Must match the redirect URI registered on the OAuth client.
            oauth_port=_env_int("ADS_OAUTH_PORT", 8080),
            oauth_grace_seconds=_env_float("ADS_OAUTH_GRACE_SECONDS", 1.0),
            auth_uri=os.getenv("GOOGLE_ADS_AUTH_URI", "https://accounts.google.com/o/oauth2/auth"),
            token_uri=os.getenv("GOOGLE_ADS_TOKEN_URI", "https://oauth2.googleapis.com/token"),
            output_dir=Path(os.getenv("ADS_CLICK_VIEW_DIR", "click_view_data")),
            collect_days=max(1, _env_int("ADS_COLLECT_DAYS", 90)),
            request_delay_seconds=max(0.0, _env_float("ADS_REQUEST_DELAY_SECONDS", 0.1)),
        )


@dataclass
class Credentials:
    """
    Google Ads credential bundle.

    Filled from the environment, completed interactively, then written back
    to the `.env` file as GOOGLE_ADS_* keys.
    """

    developer_token: str = ""
    client_id: str = ""
    client_secret: str = ""
    refresh_token: str = ""
    customer_id: str = ""
    login_customer_id: str = ""

    @staticmethod
    def from_env() -> "Credentials":
        def _get(name: str) -> str:
            return (os.getenv(ENV_PREFIX + name.upper()) or "").strip()

        return Credentials(
            developer_token=_get("developer_token"),
            client_id=_get("client_id"),
            client_secret=_get("client_secret"),
            refresh_token=_get("refresh_token"),
            customer_id=normalize_customer_id(_get("customer_id")),
            login_customer_id=normalize_customer_id(_get("login_customer_id")),
        )

    def missing_required(self) -> list[str]:
        return [name for name in REQUIRED_FIELDS if not str(getattr(self, name) or "").strip()]

    def missing_for_api(self) -> list[str]:
        missing = self.missing_required()
        if not self.refresh_token.strip():
            missing.append("refresh_token")
        return missing

    def to_env(self) -> dict[str, str]:
        return {ENV_PREFIX + f.name.upper(): str(getattr(self, f.name) or "") for f in fields(self)}

    def save(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.touch(exist_ok=True)
        for key, value in self.to_env().items():
            set_key(str(path), key, value)
