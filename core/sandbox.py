import subprocess, os, signal, time, logging

from core.errors import InvocationError
from core.models import ToolStatus, ToolResult
from core.utils import now_text

LOG = logging.getLogger("sandbox")

TIMEOUT_EXIT_CODE = 124
KILL_GRACE_SECONDS = 5
PREVIEW_MIN_LINES = 10

GLYPHS = {
    ToolStatus.SUCCESS: "✅",
    ToolStatus.WARNING: "⚠️ ",
    ToolStatus.TIMEOUT: "⏰",
    ToolStatus.ERROR: "❌",
    ToolStatus.SKIPPED: "⏭ ",
}


def classify(exit_code, overrides=None):
    """Map an exit status to a ToolStatus; per-tool overrides win."""
    if overrides and exit_code in overrides:
        return ToolStatus(overrides[exit_code])
    if exit_code == 0:
        return ToolStatus.SUCCESS
    if exit_code == 1:
        return ToolStatus.WARNING
    return ToolStatus.ERROR


def _terminate(proc):
    # The child leads its own session, so the whole pipeline goes down with it.
    try:
        os.killpg(proc.pid, signal.SIGTERM)
    except ProcessLookupError:
        proc.wait()
        return
    try:
        proc.wait(timeout=KILL_GRACE_SECONDS)
    except subprocess.TimeoutExpired:
        try:
            os.killpg(proc.pid, signal.SIGKILL)
        except ProcessLookupError:
            pass
        proc.wait()


def _header(inv, started):
    return (
        f"=== {inv.name} analysis ===\n"
        f"Command: {inv.display_command or inv.command}\n"
        f"Tool check: {inv.check}\n"
        f"Category: {inv.category}\n"
        f"Started: {started}\n"
        f"Timeout: {inv.timeout}s\n"
        "===========================\n\n"
    )


def _footer(status, exit_code, duration, interrupted=False):
    if interrupted:
        title, label = "Analysis Interrupted", "INTERRUPTED"
    elif status is ToolStatus.SUCCESS:
        title, label = "Analysis Complete", status.label
    else:
        title, label = "Analysis Failed", status.label
    verb = "Completed" if status is ToolStatus.SUCCESS and not interrupted else "Failed"
    return (
        f"\n\n=== {title} ===\n"
        f"{verb}: {now_text()}\n"
        f"Duration: {duration:.2f}s\n"
        f"Exit code: {exit_code if exit_code is not None else 'n/a'}\n"
        f"Status: {label}\n"
    )


def _skip(run, inv):
    check = inv.check
    run.log.warning(f"Tool not available: {check} - skipping {inv.name} analysis")
    try:
        run.workspace.logs_dir.mkdir(parents=True, exist_ok=True)
        with open(run.workspace.logs_dir / "skipped_tools.txt", "a") as f:
            f.write(f"Tool not found: {check} ({now_text()})\n")
    except OSError as e:
        run.log.error(f"Cannot write skip log: {e}")
    run.echo(f"{GLYPHS[ToolStatus.SKIPPED]} {inv.name} skipped ({check} not installed)")
    return run.record(ToolResult(inv.name, ToolStatus.SKIPPED, inv.category, None,
                                 detail=f"{check} not found"))


def _report(run, inv, status, exit_code, duration, artifact):
    name = inv.name
    if status is ToolStatus.SUCCESS:
        run.echo(f"{GLYPHS[status]} {name} analysis complete ({duration:.0f}s)")
        run.log.info(f"{name} analysis successful (duration: {duration:.0f}s)")
        lines = artifact.read_text(errors="ignore").splitlines()
        if len(lines) > PREVIEW_MIN_LINES:
            run.echo("📋 Preview of results (last 5 lines):")
            for line in lines[-5:]:
                run.echo(f"   {line}")
    elif status is ToolStatus.TIMEOUT:
        run.echo(f"{GLYPHS[status]} {name} analysis timed out after {inv.timeout}s")
        run.log.warning(f"{name} timed out ({inv.timeout}s)")
    elif status is ToolStatus.WARNING:
        run.echo(f"{GLYPHS[status]} {name} analysis completed with warnings (exit code: {exit_code})")
        run.log.warning(f"{name} completed with warnings (exit code: {exit_code})")
    else:
        run.echo(f"{GLYPHS[status]} {name} analysis failed (exit code: {exit_code})")
        run.log.error(f"{name} failed (exit code: {exit_code})")


def run_tool(run, inv):
    """Run one external tool against the run's workspace and classify the outcome.

    Output goes to ``<workspace>/<category>/<name>_output.txt``; stdout and
    stderr are merged. The transcript is only ever appended to, so a rerun adds
    a new header/footer section. Tool failures are returned, never raised;
    only a malformed invocation raises InvocationError.
    """
    if not inv.name or not inv.command or not inv.command.strip():
        raise InvocationError("Invalid parameters for run_tool: name and command are required")

    artifact = run.workspace.artifact_path(inv.name, inv.category)
    try:
        artifact.parent.mkdir(parents=True, exist_ok=True)
        for sub in inv.workdirs:
            (artifact.parent / sub).mkdir(parents=True, exist_ok=True)
    except OSError as e:
        run.log.error(f"Cannot create output directory for {inv.name}: {e}")
        return run.record(ToolResult(inv.name, ToolStatus.ERROR, inv.category, None, detail=str(e)))

    if not run.registry.is_available(inv.check):
        return _skip(run, inv)

    run.echo(f"\n🔍 Running {inv.name} analysis...")
    run.log.info(f"Starting {inv.name} analysis with command: {inv.display_command or inv.command}")

    started = now_text()
    with open(artifact, "a") as f:
        if f.tell() > 0:
            f.write("\n")
        f.write(_header(inv, started))

    exit_code, status, detail, interrupted = None, None, "", False
    start = time.monotonic()
    with open(artifact, "ab") as out:
        try:
            proc = subprocess.Popen(
                ["bash", "-c", inv.command],
                stdout=out,
                stderr=subprocess.STDOUT,
                stdin=subprocess.DEVNULL,
                cwd=str(artifact.parent),
                start_new_session=True,
            )
        except OSError as e:
            proc = None
            status, detail = ToolStatus.ERROR, f"exception: {e}"
        if proc is not None:
            try:
                exit_code = proc.wait(timeout=inv.timeout)
                status = classify(exit_code, inv.status_overrides)
            except subprocess.TimeoutExpired:
                _terminate(proc)
                exit_code, status = TIMEOUT_EXIT_CODE, ToolStatus.TIMEOUT
            except KeyboardInterrupt:
                _terminate(proc)
                exit_code, status, interrupted = proc.returncode, ToolStatus.ERROR, True
    duration = time.monotonic() - start

    with open(artifact, "a") as f:
        f.write(_footer(status, exit_code, duration, interrupted))

    if interrupted:
        run.log.warning(f"{inv.name} interrupted by user")
        raise KeyboardInterrupt

    _report(run, inv, status, exit_code, duration, artifact)
    return run.record(ToolResult(
        name=inv.name,
        status=status,
        category=inv.category,
        artifact=artifact,
        exit_code=exit_code,
        duration=duration,
        started_at=started,
        detail=detail,
    ))
