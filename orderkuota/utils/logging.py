"""Logger setup and a JSONL audit trail for API calls."""

import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable

from orderkuota.utils.pii import mask_secrets, redact_for_logging


def get_logger(name: str, level: str = "INFO") -> logging.Logger:
    """Get a configured logger instance."""
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.setLevel(getattr(logging, level.upper()))
    return logger


class AuditLogger:
    """Append-only audit log of outgoing API calls with secrets masked."""

    def __init__(self, log_dir: Path, secrets: Iterable[str] = (), client: str = "client"):
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.client = client
        self._secrets = [s for s in secrets if s]
        self._logger = get_logger(f"audit.{client}")

    def add_secret(self, secret: str | None):
        """Register another value that must never be written verbatim."""
        if secret and secret not in self._secrets:
            self._secrets.append(secret)

    def _get_log_file(self) -> Path:
        """Get the current audit log file path."""
        date_str = datetime.now().strftime("%Y-%m-%d")
        return self.log_dir / f"audit_{date_str}.jsonl"

    def _write_entry(self, entry: dict):
        """Write an audit entry to the log file."""
        entry["timestamp"] = datetime.now().isoformat()
        entry["client"] = self.client

        line = mask_secrets(json.dumps(entry), self._secrets)
        with open(self._get_log_file(), "a", encoding="utf-8") as f:
            f.write(line + "\n")

    def log_request(
        self,
        method: str,
        url: str,
        status: int | None,
        elapsed_ms: float,
        form: dict[str, Any] | None = None,
        error: str | None = None,
    ):
        """Log one HTTP exchange."""
        entry = {
            "event": "api_request",
            "method": method,
            "url": url,
            "status": status,
            "elapsed_ms": round(elapsed_ms, 1),
            "form": redact_for_logging(form) if form else None,
            "error": error,
        }
        self._write_entry(entry)
        if error:
            self._logger.warning(f"{method} request failed: {mask_secrets(error, self._secrets)}")
        else:
            self._logger.debug(f"{method} request finished with status {status}")

    def log_qris_generated(self, amount: int, checksum: str):
        """Log a locally generated dynamic QRIS payload."""
        entry = {
            "event": "qris_generated",
            "amount": amount,
            "checksum": checksum,
        }
        self._write_entry(entry)
        self._logger.info(f"Dynamic QRIS generated for amount {amount}")
