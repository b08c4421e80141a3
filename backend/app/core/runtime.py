"""
Environment parsing helpers and startup checks.
"""

import os
from pathlib import Path
from typing import Dict, Optional


def parse_bool_env(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def env_int(name: str, default: int, minimum: Optional[int] = None) -> int:
    """Read an int env var, falling back to the default when unset or malformed."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        return default
    if minimum is not None and value < minimum:
        return minimum
    return value


def env_float(name: str, default: float, minimum: Optional[float] = None) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw.strip())
    except ValueError:
        return default
    if minimum is not None and value < minimum:
        return minimum
    return value


def assert_directory_writable(path: Path, *, create: bool = True) -> None:
    if create:
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise RuntimeError(f"Cannot create directory: {path}") from exc
    if not path.exists() or not path.is_dir():
        raise RuntimeError(f"Required directory is missing: {path}")

    probe = path / f".write_probe_{os.getpid()}.tmp"
    try:
        probe.write_text("ok", encoding="utf-8")
        probe.unlink(missing_ok=True)
    except OSError as exc:
        raise RuntimeError(f"Directory is not writable: {path}") from exc


def run_startup_runtime_checks(
    *,
    directories: Dict[str, Path],
    strict_dirs: bool = True,
) -> Dict[str, object]:
    """Verify the working directories are usable before accepting jobs."""
    report: Dict[str, object] = {"directories": {}, "ok": True}

    for dir_name, dir_path in directories.items():
        try:
            assert_directory_writable(dir_path)
            report["directories"][dir_name] = {"path": str(dir_path), "writable": True}
        except RuntimeError as exc:
            report["directories"][dir_name] = {
                "path": str(dir_path),
                "writable": False,
                "error": str(exc),
            }
            report["ok"] = False
            if strict_dirs:
                raise

    return report
