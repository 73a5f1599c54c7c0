"""Centralized configuration loader for stegtool."""
import os
import yaml
from pathlib import Path
from jsonschema import validate, ValidationError as SchemaError

_ROOT = Path(__file__).resolve().parent.parent
_SETTINGS = None
_TOOLS_CFG = None

SECURITY_LEVELS = ("minimal", "normal", "paranoid")

SETTINGS_SCHEMA = {
    "type": "object",
    "properties": {
        "output_root": {"type": "string"},
        "backup_dir": {"type": "string"},
        "backup_inputs": {"type": "boolean"},
        "tool_timeout": {"type": "integer", "minimum": 1},
        "max_retries": {"type": "integer", "minimum": 1},
        "max_file_size": {"type": "integer", "minimum": 0},
        "security_level": {"enum": list(SECURITY_LEVELS)},
        "entropy_threshold": {"type": "number", "minimum": 0, "maximum": 8},
        "wordlist": {"type": "string"},
        "password_attempts": {"type": "integer", "minimum": 0},
    },
}

TOOLS_SCHEMA = {
    "type": "object",
    "properties": {
        "required_tools": {"type": "array", "items": {"type": "string"}},
        "optional_tools": {"type": "array", "items": {"type": "string"}},
        "suspicious_extensions": {"type": "array", "items": {"type": "string"}},
        "exit_status_overrides": {
            "type": "object",
            "additionalProperties": {
                "type": "object",
                "additionalProperties": {"enum": ["success", "warning", "error"]},
            },
        },
    },
}

DEFAULT_REQUIRED_TOOLS = [
    "exiftool", "binwalk", "foremost", "steghide", "zsteg", "outguess",
    "convert", "pngcheck", "jpeginfo", "ent", "tesseract", "ffmpeg",
    "xxd", "strings", "file", "identify",
]

DEFAULT_OPTIONAL_TOOLS = [
    # image steganography
    "stegoveritas", "stegseek", "jsteg", "stegdetect", "openstego",
    # audio
    "sox", "wavsteg", "mp3stego",
    # forensics
    "volatility", "scalpel", "bulk_extractor", "photorec", "hashdeep",
    # metadata
    "mat2", "exiv2", "mediainfo", "hachoir-metadata",
]

DEFAULT_SUSPICIOUS_EXTENSIONS = [
    ".exe", ".dll", ".so", ".sh", ".bash", ".cmd", ".bat", ".ps1", ".vbs", ".js",
]


def _load_dotenv():
    """Load .env file into os.environ if it exists (does not override existing vars)."""
    env_path = _ROOT / ".env"
    if not env_path.exists():
        return
    for line in env_path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" in line:
            key, value = line.split("=", 1)
            key, value = key.strip(), value.strip()
            if key and key not in os.environ:
                os.environ[key] = value


# Load .env on module import
_load_dotenv()


def _find_file(*candidates):
    """Return the first path that exists, or None."""
    for p in candidates:
        if p.exists():
            return p
    return None


def _read_yaml(path, schema):
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    try:
        validate(instance=data, schema=schema)
    except SchemaError as ve:
        raise ValueError(f"invalid configuration in {path}: {ve.message}") from ve
    return data


def load_settings():
    """Load config/settings.yaml with sensible defaults."""
    global _SETTINGS
    if _SETTINGS is not None:
        return _SETTINGS

    defaults = {
        "output_root": str(_ROOT / "outputs"),
        "backup_dir": str(_ROOT / "backups"),
        "backup_inputs": True,
        "tool_timeout": 300,
        "max_retries": 3,
        "max_file_size": 10 * 1024 ** 3,
        "security_level": "normal",
        "entropy_threshold": 7.5,
        "wordlist": "/usr/share/wordlists/rockyou.txt",
        "password_attempts": 5,
    }
    path = _find_file(_ROOT / "config" / "settings.yaml")
    if path:
        defaults.update(_read_yaml(path, SETTINGS_SCHEMA))

    # Relative paths in the file are relative to the project root
    for key in ("output_root", "backup_dir"):
        if not Path(defaults[key]).is_absolute():
            defaults[key] = str(_ROOT / defaults[key])

    # Allow env-var overrides (highest priority)
    if os.environ.get("STEGTOOL_OUTPUT_DIR"):
        defaults["output_root"] = os.environ["STEGTOOL_OUTPUT_DIR"]
    if os.environ.get("STEGTOOL_BACKUP_DIR"):
        defaults["backup_dir"] = os.environ["STEGTOOL_BACKUP_DIR"]
    if os.environ.get("STEGTOOL_TIMEOUT"):
        defaults["tool_timeout"] = int(os.environ["STEGTOOL_TIMEOUT"])
    if os.environ.get("STEGTOOL_WORDLIST"):
        defaults["wordlist"] = os.environ["STEGTOOL_WORDLIST"]
    level = os.environ.get("STEGTOOL_SECURITY_LEVEL", "").lower()
    if level:
        if level not in SECURITY_LEVELS:
            raise ValueError(f"STEGTOOL_SECURITY_LEVEL must be one of {', '.join(SECURITY_LEVELS)}")
        defaults["security_level"] = level

    _SETTINGS = defaults
    return _SETTINGS


def load_tools_catalog():
    """Load the required/optional tool catalogs from config/tools.yaml."""
    global _TOOLS_CFG
    if _TOOLS_CFG is not None:
        return _TOOLS_CFG

    catalog = {
        "required_tools": list(DEFAULT_REQUIRED_TOOLS),
        "optional_tools": list(DEFAULT_OPTIONAL_TOOLS),
        "suspicious_extensions": list(DEFAULT_SUSPICIOUS_EXTENSIONS),
        "exit_status_overrides": {},
    }
    path = _find_file(_ROOT / "config" / "tools.yaml")
    if path:
        data = _read_yaml(path, TOOLS_SCHEMA)
        for key in catalog:
            if data.get(key) is not None:
                catalog[key] = data[key]

    catalog["suspicious_extensions"] = [e.lower() for e in catalog["suspicious_extensions"]]
    _TOOLS_CFG = catalog
    return _TOOLS_CFG


def status_overrides_for(tool):
    """Per-tool {exit code: status name} overrides, keys coerced to int."""
    raw = load_tools_catalog().get("exit_status_overrides", {}).get(tool, {})
    return {int(code): status for code, status in raw.items()}
