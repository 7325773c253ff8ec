"""Shared pytest fixtures."""

import json
import os
import stat

import pytest


@pytest.fixture
def write_config(tmp_path):
    """Write a config dict to a JSON file and return its path."""
    def _write(data, name="manager.cfg"):
        path = tmp_path / name
        path.write_text(json.dumps(data))
        return str(path)
    return _write


@pytest.fixture
def base_config(tmp_path):
    """Minimal valid config."""
    return {
        "name": "t",
        "http": "localhost:50000",
        "master": "localhost:48342",
        "workdir": str(tmp_path / "workdir"),
        "vmlinux": "vmlinux",
        "type": "local",
        "count": 1,
        "port": 48343,
    }


def _make_script(path, body):
    path.write_text("#!/bin/sh\n" + body)
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return str(path)


@pytest.fixture
def make_script():
    """Create an executable shell script."""
    return _make_script


@pytest.fixture
def binaries(tmp_path):
    """Fuzzer and executor stand-ins that exist on disk."""
    bindir = tmp_path / "bin"
    bindir.mkdir()
    fuzzer = _make_script(bindir / "fuzzer", "exit 0\n")
    executor = _make_script(bindir / "executor", "exit 0\n")
    return fuzzer, executor


@pytest.fixture
def local_params(binaries):
    fuzzer, executor = binaries
    return {"Fuzzer": fuzzer, "Executor": executor, "Parallel": 0}


def _process_gone(pid):
    """True once pid no longer names a running process (zombies count as gone)."""
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return True
    except PermissionError:
        return False
    try:
        with open(f"/proc/{pid}/stat") as f:
            # "pid (comm) state ..."; comm may contain spaces
            return f.read().rsplit(")", 1)[1].split()[0] == "Z"
    except (OSError, IndexError):
        return True


@pytest.fixture
def process_gone():
    """Check whether a pid is dead."""
    return _process_gone
