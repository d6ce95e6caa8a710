"""I/O utilities for atomic writes, JSON documents and logging setup."""

import json
import logging
import tempfile
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from shutil import move
from typing import Any


def setup_logging(log_dir: Path, log_level: str = "INFO") -> logging.Logger:
    """Set up logging configuration for TrayAnim.

    Args:
        log_dir: Directory to store log files
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)

    Returns:
        Configured logger instance
    """
    log_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = log_dir / f"trayanim_{timestamp}.log"

    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.FileHandler(log_file),
            logging.StreamHandler()
        ]
    )

    return logging.getLogger("trayanim")


@contextmanager
def atomic_write(target_path: Path, mode: str = "w"):
    """Context manager for atomic file writes using temporary files.

    The target is only replaced once the block completes without raising;
    on error the temporary file is removed and the target is untouched.

    Args:
        target_path: Final path where file should be written
        mode: File open mode ("w" for text, "wb" for bytes)

    Yields:
        File handle for writing

    Example:
        with atomic_write(Path("tray-icon.processed"), "wb") as f:
            f.write(payload)
    """
    target_path.parent.mkdir(parents=True, exist_ok=True)

    encoding = None if "b" in mode else "utf-8"
    with tempfile.NamedTemporaryFile(
        mode=mode,
        dir=target_path.parent,
        delete=False,
        suffix=f".tmp_{target_path.name}",
        encoding=encoding,
    ) as temp_file:
        try:
            yield temp_file
            temp_file.flush()
        except Exception:
            temp_file.close()
            Path(temp_file.name).unlink(missing_ok=True)
            raise

    try:
        move(temp_file.name, target_path)
    except Exception:
        Path(temp_file.name).unlink(missing_ok=True)
        raise


def write_bytes_atomic(data: bytes, target_path: Path) -> None:
    """Atomically replace ``target_path`` with ``data``."""
    with atomic_write(target_path, "wb") as f:
        f.write(data)


def save_json(data: dict[str, Any], json_path: Path) -> None:
    """Atomically save data as JSON file.

    Raises:
        IOError: If file cannot be written
    """
    with atomic_write(json_path) as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


def load_json(json_path: Path) -> dict[str, Any]:
    """Load JSON data from file.

    Raises:
        IOError: If file cannot be read
        json.JSONDecodeError: If JSON is invalid
    """
    with open(json_path, encoding="utf-8") as f:
        return json.load(f)

