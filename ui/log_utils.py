"""Shared logging utilities."""

import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

LOG_ROOT = Path.cwd() / "logs"
CLI_LOG_FILE = LOG_ROOT / "gateway.log"

SENSITIVE_HEADER_MARKERS = ("authorization", "cookie", "key", "token")


def configure_logging(debug: bool = False) -> None:
    """Route stdlib logging to stderr with a compact format."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def write_cli_log(
    level: str,
    message: str,
    *,
    log_file: Path | None = None,
    **extra: Any,
) -> None:
    """Append a line to the rolling CLI log file."""
    log_file = log_file or CLI_LOG_FILE
    timestamp = datetime.now(UTC).strftime("%Y-%m-%d %H:%M:%S")
    extra_str = " ".join(f"{k}={v}" for k, v in extra.items()) if extra else ""
    line = f"[{timestamp}] {level}: {message}"
    if extra_str:
        line += f" {extra_str}"
    line += "\n"
    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        with log_file.open("a") as f:
            f.write(line)
    except OSError as e:
        logging.getLogger(__name__).debug("Cannot write %s: %s", log_file, e)


def clear_logs(log_file: Path | None = None) -> None:
    """Truncate the CLI log file at startup."""
    log_file = log_file or CLI_LOG_FILE
    if log_file.exists():
        log_file.write_text("")


def redact_headers(headers: list[tuple[str, str]] | dict[str, str]) -> dict[str, str]:
    """Redact sensitive headers."""
    items = headers.items() if isinstance(headers, dict) else headers
    redacted = {}
    for key, value in items:
        if any(marker in key.lower() for marker in SENSITIVE_HEADER_MARKERS):
            redacted[key] = _mask(value)
        else:
            redacted[key] = value
    return redacted


def _mask(value: str) -> str:
    if len(value) <= 10:
        return "***"
    return value[:6] + "..." + value[-4:]
