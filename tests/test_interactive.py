"""Tests for the interactive menu state machine."""
import pytest

import orchestrator.interactive as interactive
from core.errors import AnalysisAborted, RestartRequested
from core.models import InterruptChoice
from orchestrator.interactive import InteractiveSession, MenuState, ask_interrupt_choice


def _script(*answers):
    answers = list(answers)

    def prompt(question):
        if not answers:
            raise EOFError
        answer = answers.pop(0)
        if isinstance(answer, BaseException):
            raise answer
        return answer
    return prompt


@pytest.fixture
def calls(monkeypatch):
    seen = []
    monkeypatch.setattr(interactive, "run_phase",
                        lambda phase, run, on_interrupt=None: seen.append(("phase", phase.number)))
    monkeypatch.setattr(interactive, "run_analysis",
                        lambda run, on_interrupt=None: seen.append(("all", None)))
    monkeypatch.setattr(interactive, "write_invocations", lambda run: None)
    monkeypatch.setattr(interactive, "needs_password", lambda workspace: False)
    return seen


@pytest.fixture
def session(make_run):
    shown = []
    s = InteractiveSession(make_run(interactive=True), prompt=_script(), show=shown.append)
    s.shown = shown
    return s


class TestHandle:
    def test_phase_choice_returns_to_idle(self, session, calls):
        assert session.handle("3") is MenuState.IDLE
        assert calls == [("phase", 3)]

    def test_out_of_order_and_rerun(self, session, calls):
        for choice in ("5", "1", "1"):
            session.handle(choice)
        assert calls == [("phase", 5), ("phase", 1), ("phase", 1)]

    def test_run_all(self, session, calls):
        session.handle("7")
        assert calls == [("all", None)]
        assert "\n📊 Analysis Summary:" in session.shown

    def test_invalid_choice(self, session, calls):
        assert session.handle("42") is MenuState.IDLE
        assert "Invalid choice. Try again." in session.shown
        assert calls == []

    def test_exit(self, session, calls):
        assert session.handle("9") is MenuState.EXITED
        assert session.handle("1") is MenuState.EXITED
        assert calls == []

    def test_summary_view(self, session, calls):
        session.handle("8")
        assert any(s.startswith("# Steganography Analysis Summary") for s in session.shown)

    def test_restart_reruns_action(self, session, monkeypatch):
        attempts = []

        def flaky(phase, run, on_interrupt=None):
            attempts.append(phase.number)
            if len(attempts) == 1:
                raise RestartRequested("Phase 2 (exiftool)")

        monkeypatch.setattr(interactive, "run_phase", flaky)
        monkeypatch.setattr(interactive, "write_invocations", lambda run: None)
        assert session.handle("2") is MenuState.IDLE
        assert attempts == [2, 2]

    def test_abort_exits(self, session, monkeypatch):
        def quit_(phase, run, on_interrupt=None):
            raise AnalysisAborted("Phase 1 (file)")

        monkeypatch.setattr(interactive, "run_phase", quit_)
        with pytest.raises(AnalysisAborted):
            session.handle("1")
        assert session.state is MenuState.EXITED


class TestPasswordOffer:
    def test_offered_after_image_phase(self, session, calls, monkeypatch):
        monkeypatch.setattr(interactive, "needs_password", lambda workspace: True)
        tried = []
        monkeypatch.setattr(interactive, "try_passwords",
                            lambda run, tool, prompt=None: tried.append(tool))
        session.run.registry = _Available("steghide")
        session.prompt = _script("y")
        session.handle("4")
        assert tried == ["steghide"]

    def test_declined(self, session, calls, monkeypatch):
        monkeypatch.setattr(interactive, "needs_password", lambda workspace: True)
        monkeypatch.setattr(interactive, "try_passwords",
                            lambda run, tool, prompt=None: pytest.fail("should not run"))
        session.prompt = _script("n")
        session.handle("4")

    def test_not_offered_after_basic_phase(self, session, calls, monkeypatch):
        monkeypatch.setattr(interactive, "needs_password", lambda workspace: pytest.fail("checked"))
        session.handle("1")


class TestInterruptOutsidePhase:
    def _password_interrupt(self, session, calls, monkeypatch, *answers):
        monkeypatch.setattr(interactive, "needs_password", lambda workspace: True)
        monkeypatch.setattr(interactive, "try_passwords", lambda run, tool, prompt=None: prompt("Password: "))
        session.run.registry = _Available("steghide")
        asked = []
        script = _script("y", *answers)

        def prompt(question):
            asked.append(question)
            return script(question)

        def hidden(question):
            raise KeyboardInterrupt

        session.prompt = prompt
        session.password_prompt = hidden
        return asked

    def test_continue_returns_to_menu(self, session, calls, monkeypatch):
        asked = self._password_interrupt(session, calls, monkeypatch, "c")
        assert session.handle("4") is MenuState.IDLE
        assert any("(C)ontinue, (R)estart, or (Q)uit" in q for q in asked)
        assert calls == [("phase", 4)]

    def test_restart_reruns_action(self, session, calls, monkeypatch):
        self._password_interrupt(session, calls, monkeypatch, "r", "n")
        assert session.handle("4") is MenuState.IDLE
        assert calls == [("phase", 4), ("phase", 4)]

    def test_quit_aborts(self, session, calls, monkeypatch):
        self._password_interrupt(session, calls, monkeypatch, "q")
        with pytest.raises(AnalysisAborted):
            session.handle("4")
        assert session.state is MenuState.EXITED

    def test_interrupt_in_summary(self, session, monkeypatch):
        def interrupted(run, on_interrupt=None):
            raise KeyboardInterrupt

        monkeypatch.setattr(interactive, "run_analysis", interrupted)
        session.prompt = _script("c")
        assert session.handle("7") is MenuState.IDLE


class _Available:
    def __init__(self, *tools):
        self.tools = set(tools)

    def is_available(self, probe):
        return probe in self.tools


class TestLoop:
    def test_scripted_session(self, make_run, calls):
        s = InteractiveSession(make_run(), prompt=_script("1", "x", "2", "9"), show=lambda m: None)
        assert s.loop() is MenuState.EXITED
        assert calls == [("phase", 1), ("phase", 2)]

    def test_eof_exits(self, make_run, calls):
        s = InteractiveSession(make_run(), prompt=_script(), show=lambda m: None)
        assert s.loop() is MenuState.EXITED

    def test_interrupt_at_menu_continue(self, make_run, calls):
        prompt = _script(KeyboardInterrupt(), "c", "1", "9")
        s = InteractiveSession(make_run(), prompt=prompt, show=lambda m: None)
        assert s.loop() is MenuState.EXITED
        assert calls == [("phase", 1)]

    def test_interrupt_at_menu_quit(self, make_run, calls):
        s = InteractiveSession(make_run(), prompt=_script(KeyboardInterrupt(), "q"), show=lambda m: None)
        with pytest.raises(AnalysisAborted):
            s.loop()

    def test_menu_lists_nine_options(self, session):
        menu = session.render_menu()
        assert "1) Basic File Analysis" in menu
        assert "9) Exit Interactive Mode" in menu


class TestInterruptChoice:
    @pytest.mark.parametrize("answer,choice", [
        ("c", InterruptChoice.CONTINUE),
        ("Continue", InterruptChoice.CONTINUE),
        ("r", InterruptChoice.RESTART),
        ("q", InterruptChoice.QUIT),
        ("", InterruptChoice.QUIT),
    ])
    def test_answers(self, answer, choice):
        assert ask_interrupt_choice(lambda q: answer, "Phase 1 (file)") is choice
