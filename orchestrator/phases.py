"""Phase catalog, planner and the generic step executor.

A phase is a gated, ordered table of steps. Planning is a pure function of the
run's content category, media format and tool availability; execution runs
the plan strictly in order through core.sandbox.run_tool.
"""
from dataclasses import dataclass
from typing import List, Tuple

from core.config import status_overrides_for
from core.errors import InvocationError, AnalysisAborted, RestartRequested
from core.models import ContentCategory, InterruptChoice, Step, ToolInvocation, ToolStatus
from core.sandbox import run_tool
from tools.shell_safe import render_command
from tools.file_analysis import BASIC_STEPS, METADATA_STEPS, CARVING_STEPS
from tools.image_analysis import IMAGE_STEPS
from tools.media_analysis import MEDIA_STEPS
from tools.advanced_carving import ADVANCED_STEPS, CARVERS


@dataclass(frozen=True)
class Phase:
    number: int
    title: str
    steps: Tuple[Step, ...]
    icon: str = "🔍"
    categories: Tuple[ContentCategory, ...] = ()   # empty: every category
    any_tool: Tuple[str, ...] = ()                 # empty: no tool gate


PHASES = (
    Phase(1, "Basic File Analysis", BASIC_STEPS, icon="📊"),
    Phase(2, "Metadata Analysis", METADATA_STEPS, icon="📋"),
    Phase(3, "File Carving", CARVING_STEPS, icon="🔧"),
    Phase(4, "Image-Specific Analysis", IMAGE_STEPS, icon="🖼️",
          categories=(ContentCategory.IMAGE,)),
    Phase(5, "Audio/Video Analysis", MEDIA_STEPS, icon="🎵",
          categories=(ContentCategory.AUDIO, ContentCategory.VIDEO)),
    Phase(6, "Advanced File Carving", ADVANCED_STEPS, icon="⚒️", any_tool=CARVERS),
)


def get_phase(number):
    for phase in PHASES:
        if phase.number == number:
            return phase
    raise KeyError(f"no phase {number}")


def phase_applies(phase, category, is_available):
    if phase.categories and category not in phase.categories:
        return False
    if phase.any_tool and not any(is_available(t) for t in phase.any_tool):
        return False
    return True


def build_invocation(step, run):
    command = render_command(step.command, file=run.target, wordlist=run.settings.get("wordlist", ""))
    check = (step.probe or step.name).split()[0]
    overrides = status_overrides_for(check)
    overrides.update(status_overrides_for(step.name))
    return ToolInvocation(
        name=step.name,
        command=command,
        category=step.category,
        probe=step.probe or step.name,
        timeout=step.timeout or run.timeout,
        status_overrides={code: ToolStatus(s) for code, s in overrides.items()},
        requires=step.requires,
        workdirs=step.workdirs,
    )


def plan_phase(phase, run, is_available=None) -> List[ToolInvocation]:
    """Invocations ``phase`` would run for ``run`` right now; [] when gated off."""
    is_available = is_available or run.registry.is_available
    if not phase_applies(phase, run.category, is_available):
        return []
    plan = []
    for step in phase.steps:
        if step.categories and run.category not in step.categories:
            continue
        if step.formats and run.media_format not in step.formats:
            continue
        if not all(is_available(t) for t in step.requires):
            continue
        plan.append(build_invocation(step, run))
    return plan


def run_phase(phase, run, on_interrupt=None):
    """Execute one phase. Tool failures never stop the phase.

    ``on_interrupt(stage)`` decides what a Ctrl-C during a step means; without
    it the KeyboardInterrupt propagates.
    """
    plan = plan_phase(phase, run)
    if not plan:
        run.log.info(f"Phase {phase.number} ({phase.title}) not applicable to {run.mime_type}")
        return []

    run.echo(f"\n{phase.icon} Phase {phase.number}: {phase.title}")
    run.log.info(f"Phase {phase.number}: {phase.title} ({len(plan)} steps)")
    results = []
    for inv in plan:
        # optional tools are re-checked right before they run
        if inv.optional and not all(run.registry.is_available(t) for t in inv.requires):
            run.log.debug(f"Skipping {inv.name}: {', '.join(inv.requires)} no longer available")
            continue
        try:
            results.append(run_tool(run, inv))
        except InvocationError as e:
            run.log.error(f"{inv.name}: {e}")
        except KeyboardInterrupt:
            if on_interrupt is None:
                raise
            stage = f"Phase {phase.number} ({inv.name})"
            run.log.warning(f"Analysis interrupted during stage: {stage}")
            choice = on_interrupt(stage)
            if choice is InterruptChoice.CONTINUE:
                continue
            if choice is InterruptChoice.RESTART:
                raise RestartRequested(stage)
            raise AnalysisAborted(stage)
    return results
