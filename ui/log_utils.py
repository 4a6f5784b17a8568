"""Shared logging utilities."""

import json
import shutil
from datetime import UTC, datetime
from pathlib import Path
from typing import Any
from uuid import uuid4

LOG_ROOT = Path.cwd() / "logs"
CLI_LOG_FILE = LOG_ROOT / "proxy.log"
MAX_FORWARD_LOGS = 200


def write_forward_log(
    method: str,
    upstream_url: str,
    status: int,
    size: int,
    headers: dict[str, str],
    *,
    log_root: Path = LOG_ROOT,
    keep: int = MAX_FORWARD_LOGS,
) -> Path:
    """Write a single forwarded-request log entry, keeping the newest `keep` files."""
    payload = {
        "timestamp": _utc_now(),
        "method": method,
        "upstream_url": upstream_url,
        "status": status,
        "response_bytes": size,
        "headers": _redact_headers(headers),
    }
    folder = log_root / "forwarded"
    file_path = _write_json(folder, payload)
    _cleanup_folder(folder, keep)
    return file_path


def _cleanup_folder(folder: Path, keep: int) -> int:
    """Delete all but the `keep` most recent log files in a folder."""
    if not folder.exists():
        return 0

    files = sorted(folder.glob("*.json"))
    if len(files) <= keep:
        return 0

    deleted = 0
    # Filenames start with a UTC timestamp, so sorted order is oldest first
    for old_file in files[: len(files) - keep]:
        try:
            old_file.unlink()
            deleted += 1
        except FileNotFoundError:
            pass
    return deleted


def write_cli_log(
    level: str,
    message: str,
    *,
    log_file: Path = CLI_LOG_FILE,
    **extra: Any,
) -> None:
    """Append a line to the rolling CLI log file."""
    log_file.parent.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now(UTC).strftime("%Y-%m-%d %H:%M:%S")
    extra_str = " ".join(f"{k}={v}" for k, v in extra.items()) if extra else ""
    line = f"[{timestamp}] {level}: {message}"
    if extra_str:
        line += f" {extra_str}"
    line += "\n"
    with log_file.open("a") as f:
        f.write(line)


def clear_logs(log_root: Path = LOG_ROOT) -> None:
    """Remove logs from previous runs."""
    if log_root.exists():
        shutil.rmtree(log_root)


def _write_json(folder: Path, payload: dict[str, Any]) -> Path:
    """Write payload to a unique JSON file in the given folder."""
    folder.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now(UTC).strftime("%Y%m%dT%H%M%S.%fZ")
    file_path = folder / f"{timestamp}_{uuid4().hex}.json"
    file_path.write_text(json.dumps(payload, indent=2, default=str))
    return file_path


def _redact_headers(headers: dict[str, str]) -> dict[str, str]:
    """Redact sensitive headers."""
    redacted = {}
    for key, value in headers.items():
        lowered = key.lower()
        if "key" in lowered or "authorization" in lowered or lowered == "cookie":
            redacted[key] = _mask(value)
        else:
            redacted[key] = value
    return redacted


def _mask(value: str) -> str:
    if len(value) <= 10:
        return "***"
    return value[:6] + "..." + value[-4:]


def _utc_now() -> str:
    return datetime.now(UTC).isoformat()
