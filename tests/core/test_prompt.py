import io

import pytest

from ultrafetch_installer.core.prompt import AutoConfirmer, TerminalConfirmer
from ultrafetch_installer.main import EXIT_INTERRUPTED, install
from ultrafetch_installer.tasks.dependencies import DEPENDENCY_SPEC


class FakeTTY(io.StringIO):
    def isatty(self) -> bool:
        return True


def answering(*replies):
    """builtins.input stand-in: hand out each reply in turn; exception types are raised."""
    pending = list(replies)

    def _input(prompt=""):
        reply = pending.pop(0)
        if isinstance(reply, type) and issubclass(reply, BaseException):
            raise reply
        return reply

    return _input


def test_terminal_confirmer_without_tty_answers_no(monkeypatch):
    monkeypatch.setattr("builtins.input", answering())
    confirm = TerminalConfirmer(stdin=io.StringIO("y\n"))
    assert confirm("Continue anyway?", default=True) is False


@pytest.mark.parametrize(
    "reply, default, expected",
    [("y", False, True), ("n", True, False), ("", True, True), ("", False, False)],
)
def test_terminal_confirmer_reads_answer_on_tty(monkeypatch, reply, default, expected):
    monkeypatch.setattr("builtins.input", answering(reply))
    assert TerminalConfirmer(stdin=FakeTTY())("Run now?", default=default) is expected


def test_terminal_confirmer_asks_again_after_invalid_answer(monkeypatch):
    monkeypatch.setattr("builtins.input", answering("maybe", "y"))
    assert TerminalConfirmer(stdin=FakeTTY())("Continue anyway?") is True


def test_terminal_confirmer_treats_end_of_input_as_no(monkeypatch):
    monkeypatch.setattr("builtins.input", answering(EOFError))
    assert TerminalConfirmer(stdin=FakeTTY())("Continue anyway?", default=True) is False


def test_terminal_confirmer_lets_ctrl_c_through(monkeypatch):
    monkeypatch.setattr("builtins.input", answering(KeyboardInterrupt))
    with pytest.raises(KeyboardInterrupt):
        TerminalConfirmer(stdin=FakeTTY())("Continue anyway?")


def test_ctrl_c_at_connectivity_question_exits_interrupted(make_host, config, monkeypatch):
    monkeypatch.setattr("os.geteuid", lambda: 0)
    make_host(online=False)
    monkeypatch.setattr("builtins.input", answering(KeyboardInterrupt))

    assert install(config, TerminalConfirmer(stdin=FakeTTY())) == EXIT_INTERRUPTED
    assert not config.install_path.exists()


def test_ctrl_c_at_quick_run_question_exits_interrupted(make_host, config, monkeypatch):
    monkeypatch.setattr("os.geteuid", lambda: 0)
    host = make_host(commands=set(DEPENDENCY_SPEC))
    monkeypatch.setattr("builtins.input", answering(KeyboardInterrupt))

    assert install(config, TerminalConfirmer(stdin=FakeTTY())) == EXIT_INTERRUPTED
    assert config.install_path.exists()
    assert [str(config.install_path)] not in host.calls


def test_auto_confirmer_records_questions():
    confirm = AutoConfirmer(True)
    assert confirm("Continue anyway?") is True
    assert confirm.asked == ["Continue anyway?"]
