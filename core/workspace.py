"""Per-run output workspace: directory tree, run log and summary.

Layout::

    <output_root>/<sanitized name>_<YYYYMMDD_HHMMSS>/
        analysis_log.txt
        analysis_summary.txt
        Basic Analysis/ Metadata/ Steganography/ Image Analysis/
        Audio Analysis/ Video Analysis/ Extracted/ Logs/

Tool transcripts are ``<category>/<tool>_output.txt`` and are append-only.
Each invocation adds a header block, the tool output, and a footer block.
"""
import re
import logging
from pathlib import Path

from core.errors import WorkspaceError
from core.utils import sanitize_filename, run_timestamp, now_text, file_digest

VERSION = "1.1.0"

SUBDIRS = (
    "Basic Analysis",
    "Metadata",
    "Steganography",
    "Image Analysis",
    "Audio Analysis",
    "Video Analysis",
    "Extracted",
    "Logs",
)
ADVANCED_SUBDIRS = ("Metadata/Advanced", "Steganography/Advanced")

HEADER_RULE = "==========================="
LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

FINDING_MARKERS = re.compile(r"found|detected|extracted")
RECOMMENDATIONS = (
    "1. Review files in the Steganography directory for hidden content",
    "2. Check Extracted directory for carved files",
    "3. Examine high-entropy areas manually",
    "4. Run specialized tools based on file format findings",
)

logging.addLevelName(logging.WARNING, "WARN")
LOG = logging.getLogger("workspace")
# one run is active at a time; each workspace swaps in its own file handler
RUN_LOG = logging.getLogger("stegtool.run")
RUN_LOG.setLevel(logging.DEBUG)


class Workspace:
    def __init__(self, path, target):
        self.path = Path(path)
        self.target = Path(target)
        self.log = RUN_LOG
        self._handler = None

    @classmethod
    def create(cls, output_root, target, when=None, advanced=False):
        """Build the directory tree for one run of ``target``.

        The path is never reused: an existing directory is a WorkspaceError.
        """
        name = sanitize_filename(Path(target).name)
        path = Path(output_root) / f"{name}_{run_timestamp(when)}"
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.mkdir()
        except FileExistsError as e:
            raise WorkspaceError(f"Output directory already exists: {path}") from e
        except OSError as e:
            raise WorkspaceError(f"Cannot create output directory {path}: {e}") from e

        ws = cls(path, target)
        ws.open_log()
        for subdir in SUBDIRS + (ADVANCED_SUBDIRS if advanced else ()):
            try:
                (path / subdir).mkdir(parents=True, exist_ok=True)
            except OSError as e:
                ws.log.warning(f"Failed to create subdirectory: {subdir} ({e})")
        try:
            ws.write_summary_header()
        except OSError as e:
            ws.close()
            raise WorkspaceError(f"Cannot write summary file: {e}") from e
        ws.log.info(f"Created output directory structure: {path}")
        return ws

    # paths

    @property
    def log_path(self):
        return self.path / "analysis_log.txt"

    @property
    def summary_path(self):
        return self.path / "analysis_summary.txt"

    @property
    def logs_dir(self):
        return self.path / "Logs"

    def category_dir(self, category):
        return self.path / category

    def artifact_path(self, name, category):
        return self.category_dir(category) / f"{name}_output.txt"

    # logging

    def open_log(self):
        if self._handler is not None:
            return
        try:
            handler = logging.FileHandler(self.log_path, encoding="utf-8")
        except OSError as e:
            raise WorkspaceError(f"Cannot open run log {self.log_path}: {e}") from e
        handler.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATEFMT))
        for stale in list(self.log.handlers):
            self.log.removeHandler(stale)
        self.log.addHandler(handler)
        self._handler = handler

    def close(self):
        if self._handler is not None:
            self.log.removeHandler(self._handler)
            self._handler.close()
            self._handler = None

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    # summary

    def write_summary_header(self):
        try:
            digest = file_digest(self.target)
        except OSError:
            digest = "unavailable"
        self.summary_path.write_text(
            "# Steganography Analysis Summary\n"
            f"Analysis started: {now_text()}\n"
            f"Target file: {self.target}\n"
            f"SHA-256: {digest}\n"
            f"Output directory: {self.path}\n"
            f"Script version: {VERSION}\n"
            "\n## Analysis Status\n"
        )

    def append_summary(self, text):
        with open(self.summary_path, "a") as f:
            f.write(text)

    def summary_text(self):
        if not self.summary_path.exists():
            return None
        return self.summary_path.read_text()


def tool_output(text):
    """Return only the tool output of a transcript, without header/footer blocks.

    Text that carries no header is returned unchanged.
    """
    body, state, seen_header = [], "outside", False
    for line in text.splitlines():
        if line.startswith("=== ") and line.endswith(" analysis ==="):
            state, seen_header = "header", True
        elif state == "header" and line == HEADER_RULE:
            state = "body"
        elif state == "body" and line.startswith("=== Analysis "):
            state = "footer"
        elif state == "body":
            body.append(line)
    if not seen_header:
        return text
    return "\n".join(body)


def read_entropy(path):
    """First decimal number in an ent transcript, or None."""
    if not path.exists():
        return None
    match = re.search(r"(\d+\.\d+)", tool_output(path.read_text(errors="ignore")))
    return float(match.group(1)) if match else None


def generate_summary(run):
    """Append findings to analysis_summary.txt. Advisory only; never raises."""
    ws = run.workspace
    try:
        threshold = float(run.settings.get("entropy_threshold", 7.5))
        lines = [
            "",
            "## Analysis Results Summary",
            f"Analysis completed: {now_text()}",
            f"Total errors: {run.errors}",
            f"Total warnings: {run.warnings}",
            f"Total timeouts: {run.timeouts}",
            "",
            "### Files Generated:",
            f"Total output files: {sum(1 for _ in ws.path.rglob('*.txt'))}",
            "",
            "### Key Findings:",
        ]

        entropy = read_entropy(ws.artifact_path("ent", "Basic Analysis"))
        if entropy is not None and entropy > threshold:
            lines.append(
                f"- HIGH ENTROPY DETECTED ({entropy}/8.0) - Potential steganography or encryption"
            )

        extracted = ws.category_dir("Extracted")
        extracted_count = sum(1 for p in extracted.rglob("*") if p.is_file()) if extracted.is_dir() else 0
        if extracted_count:
            lines.append(f"- Found {extracted_count} extracted/carved files")

        stego = ws.category_dir("Steganography")
        stego_hits = 0
        if stego.is_dir():
            for p in stego.rglob("*.txt"):
                if FINDING_MARKERS.search(tool_output(p.read_text(errors="ignore"))):
                    stego_hits += 1
        if stego_hits:
            lines.append(f"- Potential steganography detected in {stego_hits} analysis files")

        lines += ["", "### Recommendations:", *RECOMMENDATIONS, ""]
        ws.append_summary("\n".join(lines))
        run.log.info(f"Summary written to {ws.summary_path}")
    except Exception as e:
        run.log.error(f"Summary generation failed: {e}")
