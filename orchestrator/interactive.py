"""Menu-driven controller for one analysis run.

The menu is a finite-state machine: IDLE -> RUNNING -> IDLE for every
numbered action and IDLE -> EXITED for option 9. It never advances on its
own, so phases can be rerun, skipped or taken out of order inside a single
workspace. Input and output are injected, which keeps ``handle`` testable
without a terminal.
"""
import getpass
from enum import Enum
from functools import partial

from core.errors import AnalysisAborted, RestartRequested
from core.models import InterruptChoice
from orchestrator.phases import get_phase, run_phase
from tasks.analysis_task import run_analysis, write_invocations
from tools.stego_passwords import needs_password, try_passwords


class MenuState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    EXITED = "exited"


PASSWORD_TOOLS = ("steghide", "outguess")


def ask_interrupt_choice(prompt, stage):
    answer = prompt(f"Analysis interrupted during {stage}. (C)ontinue, (R)estart, or (Q)uit? ").strip().lower()
    if answer.startswith("c"):
        return InterruptChoice.CONTINUE
    if answer.startswith("r"):
        return InterruptChoice.RESTART
    return InterruptChoice.QUIT


class InteractiveSession:
    def __init__(self, run, prompt=input, show=print, password_prompt=getpass.getpass):
        self.run = run
        self.prompt = prompt
        self.show = show
        self.password_prompt = password_prompt
        self.state = MenuState.IDLE
        self.transitions = {
            "1": ("Basic File Analysis", partial(self.run_single_phase, 1)),
            "2": ("Metadata Analysis", partial(self.run_single_phase, 2)),
            "3": ("File Carving", partial(self.run_single_phase, 3)),
            "4": ("Image-Specific Analysis", partial(self.run_single_phase, 4)),
            "5": ("Audio/Video Analysis", partial(self.run_single_phase, 5)),
            "6": ("Advanced File Carving", partial(self.run_single_phase, 6)),
            "7": ("Run All Phases", self.run_all),
            "8": ("View Analysis Summary", self.show_summary),
            "9": ("Exit Interactive Mode", None),
        }

    def on_interrupt(self, stage):
        return ask_interrupt_choice(self.prompt, stage)

    # actions

    def run_single_phase(self, number):
        run_phase(get_phase(number), self.run, on_interrupt=self.on_interrupt)
        write_invocations(self.run)
        if number in (4, 5):
            self.offer_passwords()

    def run_all(self):
        run_analysis(self.run, on_interrupt=self.on_interrupt)
        self.show("\n📊 Analysis Summary:")
        self.show_summary()
        self.offer_passwords()

    def show_summary(self):
        text = self.run.workspace.summary_text()
        if text:
            self.show(text)
        else:
            self.show("No summary found. Run an analysis phase first.")

    def offer_passwords(self):
        if not needs_password(self.run.workspace):
            return []
        self.show("\n🔐 Steganography content requiring password detected")
        answer = self.prompt("Would you like to attempt password extraction? (y/n): ").strip()
        if answer not in ("y", "Y"):
            return []
        outcomes = []
        for tool in PASSWORD_TOOLS:
            if not self.run.registry.is_available(tool):
                self.run.log.info(f"{tool} not available - skipping password attempts")
                continue
            outcomes.append(try_passwords(self.run, tool, prompt=self.password_prompt))
        return outcomes

    # state machine

    def render_menu(self):
        lines = ["", "===== Interactive Analysis Menu ====="]
        lines += [f"{key}) {label}" for key, (label, _) in self.transitions.items()]
        return "\n".join(lines)

    def handle(self, choice):
        """Apply one menu choice and return the resulting state."""
        if self.state is MenuState.EXITED:
            return self.state
        entry = self.transitions.get(choice.strip())
        if entry is None:
            self.show("Invalid choice. Try again.")
            return self.state
        label, action = entry
        if action is None:
            self.state = MenuState.EXITED
            return self.state

        self.state = MenuState.RUNNING
        self.run.log.info(f"Menu selection: {label}")
        try:
            while True:
                try:
                    action()
                    break
                except RestartRequested as e:
                    self.show(f"Restarting {label} after interrupt in {e}")
                except KeyboardInterrupt:
                    # interrupts outside a phase step: password prompts, summary, records
                    self.run.log.warning(f"Analysis interrupted during stage: {label}")
                    choice = self.on_interrupt(label)
                    if choice is InterruptChoice.CONTINUE:
                        break
                    if choice is InterruptChoice.RESTART:
                        self.show(f"Restarting {label}")
                        continue
                    raise AnalysisAborted(label)
        except AnalysisAborted:
            self.state = MenuState.EXITED
            raise
        self.state = MenuState.IDLE
        return self.state

    def loop(self):
        while self.state is not MenuState.EXITED:
            self.show(self.render_menu())
            try:
                choice = self.prompt("Select an option: ")
            except EOFError:
                self.state = MenuState.EXITED
                break
            except KeyboardInterrupt:
                if self.on_interrupt("menu") is InterruptChoice.QUIT:
                    self.state = MenuState.EXITED
                    raise AnalysisAborted("menu")
                continue
            self.handle(choice)
        return self.state
