"""Data types shared across the orchestrator."""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple

DEFAULT_TIMEOUT = 300


class ContentCategory(Enum):
    IMAGE = "image"
    AUDIO = "audio"
    VIDEO = "video"
    GENERIC = "generic"


class MediaFormat(Enum):
    PNG = "png"
    JPEG = "jpeg"
    GIF = "gif"
    BMP = "bmp"
    OTHER = "other"


class ToolStatus(Enum):
    SUCCESS = "success"
    WARNING = "warning"
    TIMEOUT = "timeout"
    ERROR = "error"
    SKIPPED = "skipped-unavailable"

    @property
    def label(self):
        return {
            ToolStatus.SUCCESS: "SUCCESS",
            ToolStatus.WARNING: "WARNING",
            ToolStatus.TIMEOUT: "TIMEOUT",
            ToolStatus.ERROR: "ERROR",
            ToolStatus.SKIPPED: "SKIPPED",
        }[self]


@dataclass(frozen=True)
class ToolInvocation:
    name: str
    command: str
    category: str = "Basic Analysis"
    probe: Optional[str] = None          # defaults to name
    timeout: int = DEFAULT_TIMEOUT
    display_command: Optional[str] = None  # header text when command holds secrets
    status_overrides: Dict[int, ToolStatus] = field(default_factory=dict)
    requires: Tuple[str, ...] = ()
    workdirs: Tuple[str, ...] = ()         # created inside the category directory

    @property
    def check(self):
        probe = self.probe or self.name
        return probe.split()[0] if probe.strip() else probe

    @property
    def optional(self):
        return bool(self.requires)


@dataclass(frozen=True)
class Step:
    """One row of a phase table. ``command`` takes {file} and {wordlist}."""
    name: str
    command: str
    category: str
    probe: Optional[str] = None
    requires: Tuple[str, ...] = ()       # silently omitted unless all present
    categories: Tuple[ContentCategory, ...] = ()
    formats: Tuple[MediaFormat, ...] = ()
    workdirs: Tuple[str, ...] = ()
    timeout: Optional[int] = None


class InterruptChoice(Enum):
    CONTINUE = "continue"
    RESTART = "restart"
    QUIT = "quit"


@dataclass(frozen=True)
class ToolResult:
    name: str
    status: ToolStatus
    category: str
    artifact: Optional[Path]
    exit_code: Optional[int] = None
    duration: float = 0.0
    started_at: Optional[str] = None
    detail: str = ""

    def as_dict(self):
        return {
            "tool": self.name,
            "status": self.status.value,
            "category": self.category,
            "artifact": str(self.artifact) if self.artifact else None,
            "exit_code": self.exit_code,
            "duration": round(self.duration, 3),
            "started_at": self.started_at,
            "detail": self.detail,
        }


@dataclass
class AnalysisRun:
    """One input file analysed inside one workspace.

    Counters only ever grow; ``record`` is the single place that touches them.
    """
    target: Path
    workspace: "Workspace"
    registry: "ToolRegistry"
    settings: dict
    mime_type: str = "application/octet-stream"
    category: ContentCategory = ContentCategory.GENERIC
    media_format: MediaFormat = MediaFormat.OTHER
    interactive: bool = False
    progress: bool = True
    started_at: datetime = field(default_factory=datetime.now)
    errors: int = 0
    warnings: int = 0
    timeouts: int = 0
    results: List[ToolResult] = field(default_factory=list)

    @property
    def log(self):
        return self.workspace.log

    @property
    def timeout(self):
        return int(self.settings.get("tool_timeout", DEFAULT_TIMEOUT))

    def record(self, result):
        self.results.append(result)
        if result.status is ToolStatus.ERROR:
            self.errors += 1
        elif result.status is ToolStatus.WARNING:
            self.warnings += 1
        elif result.status is ToolStatus.TIMEOUT:
            self.timeouts += 1
        return result

    def echo(self, message):
        if self.progress:
            print(message, flush=True)
