"""Environment-driven settings selecting and addressing the archiver transport."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

_TRANSPORTS = ("rpc", "http")
_DEFAULT_RPC_PORT = 8003


class Settings(BaseSettings):
    """Client settings loaded from environment variables or a local .env file."""

    APP_NAME: str = "Archiver Client"
    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"
    VERSION: str = "0.1.0"
    ARCHIVER_TRANSPORT: str = "http"
    ARCHIVER_HOST: str = "localhost"
    ARCHIVER_PORT: int = _DEFAULT_RPC_PORT
    ARCHIVER_BASE_URL: str = ""
    ARCHIVER_RPC_SECURE: bool = False
    ARCHIVER_TIMEOUT_S: float = 0.0

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def archiver_transport(self) -> str:
        """Return the normalized transport name, rejecting unknown values."""

        transport = self.ARCHIVER_TRANSPORT.strip().lower()
        if transport not in _TRANSPORTS:
            raise ValueError(
                f"ARCHIVER_TRANSPORT must be one of {', '.join(_TRANSPORTS)}, got {transport!r}"
            )
        return transport

    def archiver_target(self) -> str:
        """Return the host:port target used by the RPC transport."""

        return f"{self.ARCHIVER_HOST.strip()}:{self.ARCHIVER_PORT}"

    def archiver_base_url(self) -> str:
        """Return the HTTP base URL, preferring an explicit ARCHIVER_BASE_URL."""

        base_url = self.ARCHIVER_BASE_URL.strip()
        if base_url:
            return base_url.rstrip("/")
        return f"http://{self.archiver_target()}"

    def archiver_timeout_s(self) -> float | None:
        """Return the default per-call deadline, or None to keep the transport default."""

        if self.ARCHIVER_TIMEOUT_S <= 0:
            return None
        return self.ARCHIVER_TIMEOUT_S


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings to avoid repeated environment parsing."""

    return Settings()
