"""Passphrase recovery for steghide and outguess payloads.

Interactive only. The flow is a small state machine::

    TRY_BLANK -> DONE | PROMPT_LOOP
    PROMPT_LOOP -> DONE | WORDLIST_FALLBACK
    WORDLIST_FALLBACK -> DONE

Every attempt gets its own transcript and extraction file, so earlier
attempts stay inspectable.
"""
import re
import getpass
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional

from core.errors import InvocationError
from core.models import ToolInvocation, ToolStatus
from core.sandbox import run_tool
from core.workspace import tool_output
from tools.shell_safe import MASK, render_command

STEGO = "Steganography"
PASSWORD_MARKERS = re.compile(r"passphrase|password required")

EXTRACTORS = {
    "steghide": ("steghide extract -sf {file} -p {password} -xf {out}", "steghide_extracted_{tag}.bin"),
    "outguess": ("outguess -k {password} -r {file} {out}", "outguess_extracted_{tag}.txt"),
}


class PasswordState(Enum):
    TRY_BLANK = "try-blank"
    PROMPT_LOOP = "prompt-loop"
    WORDLIST_FALLBACK = "wordlist-fallback"
    DONE = "done"


@dataclass
class PasswordOutcome:
    tool: str
    success: bool = False
    method: Optional[str] = None
    trail: List[PasswordState] = field(default_factory=list)
    artifacts: List[Path] = field(default_factory=list)


def needs_password(workspace):
    """True when a Steganography transcript asks for a passphrase."""
    stego = workspace.category_dir(STEGO)
    if not stego.is_dir():
        return False
    for path in stego.glob("*_output.txt"):
        if PASSWORD_MARKERS.search(tool_output(path.read_text(errors="ignore"))):
            return True
    return False


def _unique(path):
    if not path.exists():
        return path
    n = 1
    while path.with_name(f"{path.name}.{n}").exists():
        n += 1
    return path.with_name(f"{path.name}.{n}")


def _attempt(run, tool, password, tag, outcome):
    template, out_name = EXTRACTORS[tool]
    out = _unique(run.workspace.category_dir(STEGO) / out_name.format(tag=tag))
    command = render_command(template, file=run.target, password=password, out=out.name)
    shown = render_command(template, file=run.target, password=MASK if password else "", out=out.name)
    inv = ToolInvocation(
        name=f"{tool}_attempt_{tag}",
        command=command,
        category=STEGO,
        probe=tool,
        timeout=run.timeout,
        display_command=shown,
    )
    result = run_tool(run, inv)
    if result.artifact is not None:
        outcome.artifacts.append(result.artifact)
    if out.exists():
        outcome.artifacts.append(out)
    return result.status is ToolStatus.SUCCESS


def _wordlist_fallback(run, tool, outcome):
    wordlist = Path(run.settings.get("wordlist", ""))
    if tool != "steghide":
        run.log.info(f"Automated password cracking not supported for tool: {tool}")
        return False
    if not wordlist.is_file():
        run.log.info(f"Wordlist not found: {wordlist} - skipping automated recovery")
        return False
    if not run.registry.is_available("stegseek"):
        run.echo("💡 Install 'stegseek' for automated password recovery")
        run.log.info("stegseek not available - automated password recovery unsupported")
        return False

    run.log.info("Attempting password recovery using wordlist")
    run.echo("🔍 Attempting automated password recovery...")
    out = _unique(run.workspace.category_dir(STEGO) / "steghide_cracked.txt")
    inv = ToolInvocation(
        name="stegseek_crack",
        command=render_command("stegseek {file} {wordlist} {out}", file=run.target,
                               wordlist=wordlist, out=out.name),
        category=STEGO,
        probe="stegseek",
        timeout=run.timeout,
    )
    result = run_tool(run, inv)
    if result.artifact is not None:
        outcome.artifacts.append(result.artifact)
    return result.status is ToolStatus.SUCCESS


def try_passwords(run, tool, prompt=getpass.getpass):
    if tool not in EXTRACTORS:
        raise InvocationError(f"Unsupported steganography tool: {tool}")

    outcome = PasswordOutcome(tool)
    attempts = int(run.settings.get("password_attempts", 5))
    state = PasswordState.TRY_BLANK
    while state is not PasswordState.DONE:
        outcome.trail.append(state)
        if state is PasswordState.TRY_BLANK:
            run.log.info("Attempting extraction with blank passphrase first...")
            run.echo("🔑 Trying blank passphrase...")
            if _attempt(run, tool, "", "blank", outcome):
                outcome.success, outcome.method = True, "blank"
                run.echo("✅ Successfully extracted data with blank passphrase!")
                state = PasswordState.DONE
            else:
                state = PasswordState.PROMPT_LOOP

        elif state is PasswordState.PROMPT_LOOP:
            run.echo("\n🔐 Blank passphrase didn't work. You can try entering a password.")
            for i in range(1, attempts + 1):
                password = prompt(f"Enter password attempt {i}/{attempts} (or press Enter to skip): ")
                if not password:
                    break
                if _attempt(run, tool, password, str(i), outcome):
                    outcome.success, outcome.method = True, f"attempt {i}"
                    run.log.info(f"Successfully extracted data with password on attempt {i}")
                    run.echo("✅ Successfully extracted data with provided password!")
                    break
                run.echo(f"❌ Password attempt {i} failed")
            state = PasswordState.DONE if outcome.success else PasswordState.WORDLIST_FALLBACK

        elif state is PasswordState.WORDLIST_FALLBACK:
            if _wordlist_fallback(run, tool, outcome):
                outcome.success, outcome.method = True, "wordlist"
            state = PasswordState.DONE

    outcome.trail.append(PasswordState.DONE)
    return outcome
