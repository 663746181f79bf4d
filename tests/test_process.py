import os
import signal
import sys

from asl.process import Process, env, my_dir, my_path, my_pid, set_env

ECHO_SCRIPT = (
    "import sys; print('subprocess ' + ','.join(sys.argv[1:])); "
    "sys.exit(1 + len(sys.argv[1:]))"
)


def test_execute_collects_output_and_status():
    proc = Process.execute(sys.executable, ["-c", ECHO_SCRIPT, "-subproc", 1])
    assert proc.exit_status() == 3
    assert proc.output().strip() == "subprocess -subproc,1"


def test_run_and_read_lines():
    proc = Process()
    proc.run(sys.executable, ["-c", ECHO_SCRIPT, "-subproc", 5, 'a "b\\'])
    lines = []
    while True:
        line = proc.read_output_line()
        if line == "\n":
            break
        lines.append(line)
    proc.wait()
    assert len(lines) > 0
    assert proc.exit_status() == 4
    assert lines[0] == 'subprocess -subproc,5,a "b\\'


def test_execute_collects_errors():
    proc = Process.execute(sys.executable, ["-c", "import sys; sys.stderr.write('oops')"])
    assert proc.errors() == "oops"
    assert proc.output() == ""
    assert proc.exit_status() == 0


def test_missing_command_is_not_started():
    proc = Process.execute("/nonexistent/definitely-missing-command")
    assert proc.started() is False
    assert proc.pid() == -1
    assert proc.finished() is True


def test_write_input_and_read_reply():
    proc = Process()
    proc.run(sys.executable, ["-c", "print(input().upper())"])
    assert proc.started() is True
    assert proc.write_input("hello\n") == 6
    assert proc.read_output_line() == "HELLO"
    assert proc.wait() == 0


def test_read_output_line_at_end_gives_newline():
    proc = Process()
    proc.run(sys.executable, ["-c", "pass"])
    assert proc.read_output_line() == "\n"
    assert proc.wait() == 0


def test_finished_after_wait():
    proc = Process()
    proc.run(sys.executable, ["-c", "import sys; sys.exit(7)"])
    assert proc.wait() == 7
    assert proc.finished() is True
    assert proc.running() is False
    assert proc.exit_status() == 7


def test_signal_terminates_child():
    proc = Process()
    proc.run(sys.executable, ["-c", "import time; time.sleep(30)"])
    assert proc.running() is True
    proc.signal(signal.SIGTERM)
    proc.wait()
    assert proc.finished() is True
    assert proc.exit_status() != 0


def test_ignore_output_discards_streams():
    proc = Process()
    proc.ignore_output()
    proc.run(sys.executable, ["-c", "import sys; print('x'); sys.exit(5)"])
    assert proc.read_output() == b""
    assert proc.wait() == 5


def test_env_round_trip(monkeypatch):
    monkeypatch.delenv("ASL_TEST_VARIABLE", raising=False)
    assert env("ASL_TEST_VARIABLE") == ""
    set_env("ASL_TEST_VARIABLE", "value")
    assert env("ASL_TEST_VARIABLE") == "value"
    assert os.environ["ASL_TEST_VARIABLE"] == "value"


def test_my_pid_and_paths():
    assert my_pid() == os.getpid()
    assert os.path.isabs(my_path())
    assert my_dir() == os.path.dirname(my_path())