# Full pipeline: phases 1-6 in order, then summary and invocation record
from orchestrator.phases import PHASES, run_phase
from core.workspace import generate_summary
from core.utils import save_json

def run_analysis(run, on_interrupt=None):
    for phase in PHASES:
        run_phase(phase, run, on_interrupt=on_interrupt)
    generate_summary(run)
    write_invocations(run)
    return run

def write_invocations(run):
    try:
        save_json(run.workspace.logs_dir / "invocations.json",
                  {"target": str(run.target),
                   "mime_type": run.mime_type,
                   "category": run.category.value,
                   "results": [r.as_dict() for r in run.results]})
    except OSError as e:
        run.log.error(f"Could not write invocation record: {e}")

def print_report(run):
    ws = run.workspace
    run.echo("\n🎉 Analysis Complete!")
    run.echo(f"📁 Results saved in: {ws.path}")
    run.echo(f"📊 Summary: {run.errors} errors, {run.warnings} warnings, {run.timeouts} timeouts")
    run.echo("\n📋 Key Output Files:")
    run.echo(f"   📄 Full log: {ws.log_path}")
    run.echo(f"   📋 Summary: {ws.summary_path}")
    run.echo(f"   🔍 Steganography: {ws.category_dir('Steganography')}/")
    run.echo(f"   📦 Extracted: {ws.category_dir('Extracted')}/")
    run.log.info(f"Run finished: {run.errors} errors, {run.warnings} warnings, {run.timeouts} timeouts")
