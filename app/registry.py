from __future__ import annotations

from pathlib import Path
import yaml
from app.config import settings
from app.models import CheckTarget


def load_target(path: Path | str | None = None) -> CheckTarget:
    """
    Build the monitored target from a YAML file when one is given (or set via
    MONITOR_TARGET_PATH), otherwise from the MONITOR_* environment settings.
    """
    if path is None and settings.MONITOR_TARGET_PATH:
        path = settings.MONITOR_TARGET_PATH

    if path is None:
        return CheckTarget(
            url=settings.MONITOR_URL,
            interval_s=settings.MONITOR_INTERVAL,
            timeout_s=settings.MONITOR_TIMEOUT,
            connect_timeout_s=settings.MONITOR_CONNECT_TIMEOUT,
        )

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Missing target file at {path}")

    data = yaml.safe_load(path.read_text()) or {}
    # Allow either a bare mapping or one nested under "target".
    if isinstance(data, dict) and isinstance(data.get("target"), dict):
        data = data["target"]
    return CheckTarget.model_validate(data)
