#!/usr/bin/env python3
"""Per-file driver: validate, set up the workspace, analyse, report."""
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from core.config import load_settings
from core.content import probe_mime, classify
from core.models import AnalysisRun
from core.registry import ToolRegistry
from core.validation import validate_file
from core.workspace import Workspace
from orchestrator.interactive import InteractiveSession
from tasks.analysis_task import run_analysis, print_report

LOG = logging.getLogger("orchestrator")

ADVANCED_MARKER_TOOLS = ("stegoveritas", "mat2")


@dataclass
class RunOptions:
    interactive: bool = False
    batch: bool = False
    security_level: Optional[str] = None
    progress: bool = True
    settings: Optional[dict] = None
    registry: Optional[ToolRegistry] = None
    prompt: Callable[[str], str] = input

    def resolved_settings(self):
        return self.settings if self.settings is not None else load_settings()

    def resolved_registry(self):
        if self.registry is None:
            self.registry = ToolRegistry()
        return self.registry


def start_run(path, options):
    """Validate ``path`` and open a fresh workspace for it.

    Raises ValidationError before anything is written, WorkspaceError when the
    tree cannot be created.
    """
    settings = options.resolved_settings()
    registry = options.resolved_registry()
    target = validate_file(
        path,
        settings=settings,
        security_level=options.security_level,
        interactive=options.interactive,
        prompt=options.prompt,
    )
    mime = probe_mime(target)
    category, media_format = classify(mime)

    workspace = Workspace.create(
        settings["output_root"],
        target,
        advanced=registry.any_available(*ADVANCED_MARKER_TOOLS),
    )
    run = AnalysisRun(
        target=target,
        workspace=workspace,
        registry=registry,
        settings=settings,
        mime_type=mime,
        category=category,
        media_format=media_format,
        interactive=options.interactive,
        progress=options.progress,
    )
    run.log.info(f"Target {target} ({mime}, {category.value})")
    registry.check_dependencies(workspace)
    return run


def process_target(path, options, session_factory=None):
    """Analyse one file end to end and return its AnalysisRun."""
    run = start_run(path, options)
    try:
        if options.interactive:
            (session_factory or InteractiveSession)(run, prompt=options.prompt).loop()
        else:
            run_analysis(run)
            print_report(run)
    finally:
        run.workspace.close()
    return run
