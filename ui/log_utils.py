"""Shared logging utilities."""

import json
from datetime import UTC, datetime
from pathlib import Path
from typing import Any
from uuid import uuid4

LOG_ROOT = Path.cwd() / "logs"
CLI_LOG_FILE = LOG_ROOT / "proxy.log"

SENSITIVE_MARKERS = ("key", "authorization", "cookie", "token")


def body_preview(body: str, limit: int = 60) -> str:
    """Single-line preview of a text body."""
    text = body.replace("\n", " ").strip()
    return text[:limit] + "..." if len(text) > limit else text


def write_incoming_log(
    method: str,
    path: str,
    headers: dict[str, str],
    body: Any,
    *,
    stage: str | None = None,
    log_root: Path | None = None,
) -> Path:
    """Write a single incoming request log entry."""
    log_root = log_root or LOG_ROOT
    payload = {
        "timestamp": _utc_now(),
        "method": method,
        "path": path,
        "headers": _redact_headers(headers),
        "body": body,
    }
    if stage:
        payload["stage"] = str(stage)
    return _write_json(log_root / "incoming", payload)


def write_forward_log(
    identity: str | None,
    body: str,
    headers: dict[str, str],
    *,
    path: str,
    log_root: Path | None = None,
) -> Path:
    """Write a single forwarded request log entry, grouped by identity."""
    log_root = log_root or LOG_ROOT
    payload = {
        "timestamp": _utc_now(),
        "identity": identity,
        "path": path,
        "headers": _redact_headers(headers),
        "body": body,
    }
    return _write_json(_identity_folder(log_root / "forwarded", identity), payload)


def clear_logs(log_root: Path | None = None) -> int:
    """Delete JSON request logs from a previous run."""
    log_root = log_root or LOG_ROOT
    deleted = 0
    for folder in (log_root / "incoming", log_root / "forwarded"):
        if not folder.exists():
            continue
        for old_file in folder.rglob("*.json"):
            old_file.unlink()
            deleted += 1
    return deleted


def write_cli_log(
    level: str,
    message: str,
    *,
    log_file: Path | None = None,
    **extra: Any,
) -> None:
    """Append a line to the rolling CLI log file."""
    log_file = log_file or CLI_LOG_FILE
    log_file.parent.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now(UTC).strftime("%Y-%m-%d %H:%M:%S")
    extra_str = " ".join(f"{k}={v}" for k, v in extra.items()) if extra else ""
    line = f"[{timestamp}] {level}: {message}"
    if extra_str:
        line += f" {extra_str}"
    line += "\n"
    with log_file.open("a") as f:
        f.write(line)


def _write_json(folder: Path, payload: dict[str, Any]) -> Path:
    """Write payload to a unique JSON file in the given folder."""
    folder.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now(UTC).strftime("%Y%m%dT%H%M%S.%fZ")
    file_path = folder / f"{timestamp}_{uuid4().hex}.json"
    # Bodies may carry surrogate-escaped bytes; escape everything non-ASCII
    file_path.write_text(json.dumps(payload, indent=2, default=str, ensure_ascii=True))
    return file_path


def _identity_folder(base: Path, identity: str | None) -> Path:
    if not identity:
        return base
    safe = "".join(c if c.isalnum() or c in "-_." else "_" for c in identity)
    return base / safe.strip(".") if safe.strip(".") else base


def _redact_headers(headers: dict[str, str]) -> dict[str, str]:
    """Redact sensitive headers."""
    redacted = {}
    for key, value in headers.items():
        if any(marker in key.lower() for marker in SENSITIVE_MARKERS):
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
