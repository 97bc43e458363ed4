import os
from dotenv import load_dotenv

load_dotenv()


def _optional_float(name: str) -> float | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    return float(raw)


class Settings:
    MONITOR_URL: str = os.getenv("MONITOR_URL", "https://example.com")
    MONITOR_INTERVAL: float = float(os.getenv("MONITOR_INTERVAL", "10"))
    MONITOR_TIMEOUT: float = float(os.getenv("MONITOR_TIMEOUT", "3"))
    MONITOR_CONNECT_TIMEOUT: float | None = _optional_float("MONITOR_CONNECT_TIMEOUT")
    MONITOR_DELIVERY_TIMEOUT: float = float(os.getenv("MONITOR_DELIVERY_TIMEOUT", "5"))
    MONITOR_TARGET_PATH: str | None = os.getenv("MONITOR_TARGET_PATH") or None


settings = Settings()
