import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()

PLAID_ENVIRONMENTS = ("sandbox", "development", "production")


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    plaid_client_id: str | None = None
    plaid_secret: str | None = None
    plaid_env: str = "sandbox"
    plaid_country_codes: tuple[str, ...] = ("US",)
    use_mock_data: bool = True
    database_url: str = "sqlite:///finance_dashboard.db"
    display_timezone: str = "UTC"
    log_level: str = "INFO"

    @property
    def has_plaid_credentials(self) -> bool:
        return bool(self.plaid_client_id and self.plaid_secret)


def load_settings() -> Settings:
    """
    Reads settings from the environment (and a local .env file).
    Mock data is on by default whenever Plaid credentials are missing.
    """
    client_id = os.getenv("PLAID_CLIENT_ID")
    secret = os.getenv("PLAID_SECRET")

    plaid_env = os.getenv("PLAID_ENV", "sandbox").strip().lower()
    if plaid_env not in PLAID_ENVIRONMENTS:
        raise ValueError(f"PLAID_ENV must be one of {', '.join(PLAID_ENVIRONMENTS)}, got {plaid_env!r}")

    countries = tuple(
        code.strip().upper()
        for code in os.getenv("PLAID_COUNTRY_CODES", "US").split(",")
        if code.strip()
    ) or ("US",)

    return Settings(
        plaid_client_id=client_id,
        plaid_secret=secret,
        plaid_env=plaid_env,
        plaid_country_codes=countries,
        use_mock_data=_env_bool("PLAID_USE_MOCK_DATA", default=not (client_id and secret)),
        database_url=os.getenv("DATABASE_URL", "sqlite:///finance_dashboard.db"),
        display_timezone=os.getenv("DISPLAY_TIMEZONE", "UTC"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
