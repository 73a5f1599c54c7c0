"""Catalog of external tools and their availability on this host."""
import shutil
import logging
from dataclasses import dataclass, field
from typing import List

from core.config import load_tools_catalog

LOG = logging.getLogger("registry")


@dataclass
class DependencyReport:
    missing_required: List[str] = field(default_factory=list)
    missing_optional: List[str] = field(default_factory=list)

    @property
    def complete(self):
        return not self.missing_required and not self.missing_optional

    def render(self):
        return (
            f"Missing required tools: {' '.join(self.missing_required)}\n"
            f"Missing optional tools: {' '.join(self.missing_optional)}\n"
            "Run ./install_requirements.sh to install missing tools\n"
        )


class ToolRegistry:
    def __init__(self, required=None, optional=None, which=shutil.which):
        catalog = None
        if required is None or optional is None:
            catalog = load_tools_catalog()
        self.required = list(required if required is not None else catalog["required_tools"])
        self.optional = list(optional if optional is not None else catalog["optional_tools"])
        self._which = which

    def is_available(self, probe):
        """True when the first word of ``probe`` resolves on PATH."""
        if not probe or not probe.strip():
            return False
        return self._which(probe.split()[0]) is not None

    def any_available(self, *probes):
        return any(self.is_available(p) for p in probes)

    def check_dependencies(self, workspace=None):
        """Report absent tools; never raises, absence is not fatal for any tool."""
        log = workspace.log if workspace is not None else LOG
        log.info("Checking tool dependencies...")
        report = DependencyReport()
        for tool in self.required:
            if self.is_available(tool):
                log.debug(f"Found required tool: {tool}")
            else:
                report.missing_required.append(tool)
                log.warning(f"Required tool missing: {tool} - Some features will be limited")
        for tool in self.optional:
            if self.is_available(tool):
                log.debug(f"Found optional tool: {tool}")
            else:
                report.missing_optional.append(tool)
                log.info(f"Optional tool missing: {tool} - specific features will be skipped")

        if report.complete:
            log.info("All required and optional tools available")
        if workspace is not None:
            try:
                (workspace.logs_dir / "missing_tools.txt").write_text(report.render())
            except OSError as e:
                log.error(f"Could not write missing tools report: {e}")

        log.info(
            f"Dependency check complete. Required: {len(self.required)}, "
            f"Missing required: {len(report.missing_required)}, "
            f"Missing optional: {len(report.missing_optional)}"
        )
        return report
