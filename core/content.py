"""MIME probing and classification into content categories."""
import re
import shutil
import logging
import mimetypes
import subprocess

from core.models import ContentCategory, MediaFormat

LOG = logging.getLogger("content")

PROBE_TIMEOUT = 30

_FORMATS = {
    "image/png": MediaFormat.PNG,
    "image/apng": MediaFormat.PNG,
    "image/jpeg": MediaFormat.JPEG,
    "image/jpg": MediaFormat.JPEG,
    "image/pjpeg": MediaFormat.JPEG,
    "image/gif": MediaFormat.GIF,
    "image/bmp": MediaFormat.BMP,
    "image/x-bmp": MediaFormat.BMP,
    "image/x-ms-bmp": MediaFormat.BMP,
}

_CATEGORIES = {
    "image": ContentCategory.IMAGE,
    "audio": ContentCategory.AUDIO,
    "video": ContentCategory.VIDEO,
}

EXECUTABLE_MIME = re.compile(r"executable|sharedlib|dosexec|mach-binary|script|javascript", re.I)
EXECUTABLE_DESCRIPTION = re.compile(r"executable|script|binary", re.I)


def _file_probe(args, path):
    if shutil.which("file") is None:
        return None
    try:
        proc = subprocess.run(["file", *args, str(path)], stdout=subprocess.PIPE,
                              stderr=subprocess.DEVNULL, timeout=PROBE_TIMEOUT, check=False)
    except (OSError, subprocess.TimeoutExpired) as e:
        LOG.warning(f"file probe failed for {path}: {e}")
        return None
    if proc.returncode != 0:
        return None
    return proc.stdout.decode("utf-8", errors="ignore").strip()


def probe_mime(path):
    """MIME type from ``file --mime-type``, falling back to the extension."""
    mime = _file_probe(["--mime-type", "-b"], path)
    if mime:
        return mime
    guessed, _ = mimetypes.guess_type(str(path))
    return guessed or "application/octet-stream"


def probe_description(path):
    return _file_probe(["-b"], path) or ""


def classify(mime):
    """Return (ContentCategory, MediaFormat) for a MIME string."""
    mime = (mime or "").strip().lower()
    major = mime.split("/", 1)[0]
    category = _CATEGORIES.get(major, ContentCategory.GENERIC)
    media_format = _FORMATS.get(mime, MediaFormat.OTHER) if category is ContentCategory.IMAGE else MediaFormat.OTHER
    return category, media_format


def looks_executable(mime, description=""):
    return bool(EXECUTABLE_MIME.search(mime or "") or EXECUTABLE_DESCRIPTION.search(description or ""))
