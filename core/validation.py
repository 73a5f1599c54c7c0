"""Input file checks run before any workspace exists.

Interactive runs may recover (new path, permission fix, explicit consent);
otherwise every failed check raises ValidationError.
"""
import os
import shutil
import logging
from pathlib import Path

from core.config import load_settings, load_tools_catalog
from core.content import probe_mime, probe_description, looks_executable
from core.errors import ValidationError
from core.utils import run_timestamp

LOG = logging.getLogger("validation")


def _confirm(prompt, question):
    answer = prompt(f"{question} (y/n): ").strip()
    return answer in ("y", "Y")


def available_memory():
    """MemAvailable from /proc/meminfo in bytes, None when unknown."""
    try:
        with open("/proc/meminfo") as f:
            for line in f:
                if line.startswith("MemAvailable:"):
                    return int(line.split()[1]) * 1024
    except (OSError, ValueError, IndexError):
        pass
    return None


def _locate(path, interactive, prompt, max_retries):
    attempts = 0
    while not path.is_file() and attempts < max_retries:
        LOG.error(f"File not found: {path}")
        if not interactive:
            break
        new_path = prompt("Enter correct file path or press Enter to retry: ").strip()
        if new_path:
            path = Path(new_path).expanduser()
        attempts += 1
    if not path.is_file():
        raise ValidationError(path, "File not found")
    return path


def _check_readable(path, interactive, prompt):
    if os.access(path, os.R_OK):
        return
    LOG.error(f"File not readable: {path}")
    if interactive and _confirm(prompt, "Would you like to fix file permissions?"):
        try:
            path.chmod(path.stat().st_mode | 0o444)
        except OSError as e:
            raise ValidationError(path, f"Failed to fix file permissions ({e})") from e
        if os.access(path, os.R_OK):
            return
    raise ValidationError(path, "File not readable")


def _check_size(path, size, settings, interactive, prompt):
    limit = int(settings.get("max_file_size", 0))
    if limit and size > limit:
        LOG.error(f"File size ({size} bytes) exceeds maximum allowed size ({limit} bytes)")
        if not (interactive and _confirm(prompt, "Continue anyway? This may cause system instability")):
            raise ValidationError(path, "File exceeds maximum allowed size")
    memory = available_memory()
    if memory is not None and size > memory:
        LOG.error(f"File size ({size} bytes) exceeds available memory ({memory} bytes)")
        if not (interactive and _confirm(prompt, "Continue anyway? This may cause system slowdown")):
            raise ValidationError(path, "File exceeds available memory")


def check_security(path, level, extensions=None, mime=None, description=None):
    """Paranoid level rejects executables, scripts and denylisted extensions."""
    if level != "paranoid":
        return
    mime = probe_mime(path) if mime is None else mime
    description = probe_description(path) if description is None else description
    if looks_executable(mime, description):
        LOG.error(f"Security check failed: File appears to be executable ({mime})")
        raise ValidationError(path, "Security check failed: file appears to be executable")
    if extensions is None:
        extensions = load_tools_catalog()["suspicious_extensions"]
    if path.suffix.lower() in extensions:
        LOG.error(f"Security check failed: Suspicious file extension {path.suffix}")
        raise ValidationError(path, "Security check failed: suspicious file extension")


def backup_input(path, settings, when=None):
    backup_dir = Path(settings["backup_dir"])
    target = backup_dir / f"{path.name}.{run_timestamp(when)}.bak"
    try:
        backup_dir.mkdir(parents=True, exist_ok=True)
        shutil.copy2(path, target)
    except OSError as e:
        raise ValidationError(path, f"Failed to create backup of input file ({e})") from e
    LOG.info(f"Created backup: {target}")
    return target


def validate_file(path, settings=None, security_level=None, interactive=False, prompt=input):
    """Check an input file and return its (possibly re-entered) path."""
    settings = settings or load_settings()
    level = security_level or settings.get("security_level", "normal")
    path = _locate(Path(path).expanduser(), interactive, prompt, int(settings.get("max_retries", 3)))

    _check_readable(path, interactive, prompt)

    size = path.stat().st_size
    if size == 0:
        LOG.warning(f"File is empty: {path}")
        if not (interactive and _confirm(prompt, "Continue with empty file?")):
            raise ValidationError(path, "File is empty")

    if level != "minimal":
        _check_size(path, size, settings, interactive, prompt)

    check_security(path, level)

    if settings.get("backup_inputs", True):
        backup_input(path, settings)
    return path
