import os
import subprocess
import sys
import textwrap

import pytest

from pingsweep import app

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


class StubPinger:
    def __init__(self, probe):
        self.ping = probe


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("PINGSWEEP_CONFIG", raising=False)
    return tmp_path


@pytest.fixture
def stub_probe(monkeypatch, fake_probe):
    probe = fake_probe(alive={"10.0.0.1"})
    monkeypatch.setattr(app, "get_pinger", lambda method: StubPinger(probe))
    return probe


def test_missing_cidrs_prints_usage(workdir, stub_probe, capsys):
    assert app.main(["--no-color"]) == 0
    out = capsys.readouterr().out
    assert "Error: Missing required -c parameter" in out
    assert "usage: pingsweep" in out
    assert stub_probe.calls == []
    assert not (workdir / "ping_log.txt").exists()


def test_sweep_writes_log(workdir, stub_probe, capsys):
    log_path = workdir / "out" / "scan.log"
    assert app.main(["--no-color", "--no-progress", "-c", "10.0.0.0/30", "-o", str(log_path)]) == 0

    out = capsys.readouterr().out
    assert "Alive: 1 | Dead: 1 | Total: 2 | Timeout: 800 ms" in out
    assert "Threads:    100" in out
    text = log_path.read_text(encoding="utf-8")
    assert "=== Results for Subnet: 10.0.0.0/30 (Timeout: 800 ms) ===" in text
    assert "10.0.0.1        UP" in text


def test_non_positive_values_fall_back(workdir, stub_probe, capsys):
    assert app.main(["--no-color", "--no-progress", "-c", "10.0.0.0/30", "-t", "0", "-n", "-5"]) == 0
    out = capsys.readouterr().out
    assert "Warning: Invalid timeout value (0), using default 800" in out
    assert "Warning: Invalid thread count (-5), using default 100" in out
    assert all(timeout == 800 for _, timeout in stub_probe.calls)


def test_invalid_cidr_is_skipped(workdir, stub_probe, capsys):
    assert app.main(["--no-color", "--no-progress", "-c", "192.168.1.0/31,10.0.0.0/30"]) == 0
    out = capsys.readouterr().out
    assert "Error in CIDR 192.168.1.0/31" in out
    assert "Total: 2" in out
    assert len(stub_probe.calls) == 2


def test_only_separators_means_no_cidrs(workdir, stub_probe, capsys):
    assert app.main(["--no-color", "-c", " , "]) == 0
    assert "Error: No valid CIDRs provided" in capsys.readouterr().out


def test_unopenable_log_is_fatal(workdir, stub_probe, capsys):
    (workdir / "blocker").write_text("x")
    assert app.main(["--no-color", "-c", "10.0.0.0/30", "-o", str(workdir / "blocker" / "log.txt")]) == 1
    assert stub_probe.calls == []


def test_config_file_supplies_defaults(workdir, stub_probe, capsys):
    (workdir / "pingsweep.yaml").write_text("timeout_ms: 250\nlog_file: from_config.log\n", encoding="utf-8")
    assert app.main(["--no-color", "--no-progress", "-c", "10.0.0.0/30"]) == 0
    assert (workdir / "from_config.log").exists()
    assert all(timeout == 250 for _, timeout in stub_probe.calls)


def test_broken_config_is_fatal(workdir, stub_probe):
    (workdir / "pingsweep.yaml").write_text("timeout_ms: [\n", encoding="utf-8")
    assert app.main(["-c", "10.0.0.0/30"]) == 1


def test_write_config(workdir, stub_probe):
    assert app.main(["--no-color", "-n", "7", "--write-config"]) == 0
    assert "concurrency: 7" in (workdir / "pingsweep.yaml").read_text(encoding="utf-8")
    assert stub_probe.calls == []


def test_local_network(workdir, stub_probe, monkeypatch, capsys):
    monkeypatch.setattr(app, "get_local_network", lambda: "10.0.0.0/30")
    assert app.main(["--no-color", "--no-progress", "--local"]) == 0
    assert "Processing Subnet: 10.0.0.0/30 (2 IPs)" in capsys.readouterr().out


def test_invalid_grid_columns_fail_before_scanning(workdir, stub_probe, capsys):
    (workdir / "pingsweep.yaml").write_text("grid_columns: 0\n", encoding="utf-8")
    assert app.main(["--no-color", "--no-progress", "-c", "10.0.0.0/30"]) == 1
    assert "grid_columns" in capsys.readouterr().err
    assert stub_probe.calls == []
    assert not (workdir / "ping_log.txt").exists()


VERBOSE_RUN = textwrap.dedent("""
    import sys
    from pingsweep import app

    class BrokenPinger:
        def ping(self, ip, timeout_ms):
            raise OSError("no route to host")

    app.get_pinger = lambda method: BrokenPinger()
    sys.exit(app.main(sys.argv[1:]))
""")


def run_fresh_interpreter(workdir, *args):
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [PROJECT_ROOT, env.get("PYTHONPATH")]))
    env.pop("PINGSWEEP_CONFIG", None)
    return subprocess.run(
        [sys.executable, "-c", VERBOSE_RUN, *args],
        cwd=str(workdir), env=env, capture_output=True, text=True, timeout=60,
    )


def test_verbose_enables_debug_logging(workdir):
    result = run_fresh_interpreter(workdir, "-v", "--no-color", "--no-progress", "-c", "10.0.0.0/30", "-o", "x.log")
    assert result.returncode == 0
    assert " - DEBUG - " in result.stderr
    assert "treating host as down" in result.stderr
    assert "Alive: 0 | Dead: 2 | Total: 2" in result.stdout


def test_debug_logging_off_by_default(workdir):
    result = run_fresh_interpreter(workdir, "--no-color", "--no-progress", "-c", "10.0.0.0/30", "-o", "x.log")
    assert result.returncode == 0
    assert "DEBUG" not in result.stderr
