"""Shared fixtures: throwaway settings, a fake PATH, and runs bound to tmp workspaces."""
from datetime import datetime, timedelta

import pytest

from core.models import AnalysisRun, ContentCategory, MediaFormat
from core.registry import ToolRegistry
from core.workspace import Workspace


@pytest.fixture
def registry_factory():
    def _make(*available, required=(), optional=()):
        present = set(available)
        return ToolRegistry(
            required=list(required),
            optional=list(optional),
            which=lambda name: f"/usr/bin/{name}" if name in present else None,
        )
    return _make


@pytest.fixture
def settings(tmp_path):
    return {
        "output_root": str(tmp_path / "outputs"),
        "backup_dir": str(tmp_path / "backups"),
        "backup_inputs": False,
        "tool_timeout": 30,
        "max_retries": 3,
        "max_file_size": 10 * 1024 ** 3,
        "security_level": "normal",
        "entropy_threshold": 7.5,
        "wordlist": str(tmp_path / "wordlist.txt"),
        "password_attempts": 5,
    }


@pytest.fixture
def target(tmp_path):
    p = tmp_path / "sample image.png"
    p.write_bytes(b"\x89PNG\r\n\x1a\n" + b"\x00" * 64)
    return p


@pytest.fixture
def make_run(settings, target, registry_factory):
    runs = []
    base = datetime(2026, 1, 1, 12, 0, 0)

    def _make(*available, category=ContentCategory.GENERIC, media_format=MediaFormat.OTHER,
              mime="application/octet-stream", path=None, registry=None, interactive=False):
        when = base + timedelta(seconds=len(runs))
        ws = Workspace.create(settings["output_root"], path or target, when=when)
        run = AnalysisRun(
            target=path or target,
            workspace=ws,
            registry=registry or registry_factory(*available),
            settings=settings,
            mime_type=mime,
            category=category,
            media_format=media_format,
            interactive=interactive,
            progress=False,
        )
        runs.append(run)
        return run

    yield _make
    for run in runs:
        run.workspace.close()
