"""Shared test fixtures for fc-metrics-updater."""

import os
import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from fc_metrics_updater.config import KATA_FC_METRICS_PATH, UpdaterConfig

GENERATED_GO = "package virtcontainers\n"


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Keep user config files and Go/updater variables out of every test."""
    home = tmp_path / "home"
    home.mkdir()
    cwd = tmp_path / "cwd"
    cwd.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(cwd)
    monkeypatch.delenv("GOPATH", raising=False)
    for key in list(os.environ):
        if key.startswith("FC_METRICS_"):
            monkeypatch.delenv(key)
    return cwd


@pytest.fixture
def project_dir(tmp_path) -> Path:
    """An empty generator project directory."""
    path = tmp_path / "fc-metrics-generator"
    path.mkdir()
    return path.resolve()


@pytest.fixture
def gopath(tmp_path) -> Path:
    """A Go workspace whose kata-containers checkout has the target directory."""
    path = tmp_path / "go"
    (path / KATA_FC_METRICS_PATH).parent.mkdir(parents=True)
    return path.resolve()


@pytest.fixture
def config(project_dir, gopath) -> UpdaterConfig:
    return UpdaterConfig(project_dir=str(project_dir), workspace_root=str(gopath))


class FakeRunner:
    """Stand-in for subprocess.run that records every invocation.

    ``failures`` maps an executable name (argv[0] basename) to either a
    return code or an exception instance to raise.
    """

    def __init__(self):
        self.calls = []
        self.failures = {}

    @property
    def programs(self):
        return [Path(argv[0]).name for argv, _ in self.calls]

    def __call__(self, argv, **kwargs):
        self.calls.append((list(argv), kwargs))
        program = Path(argv[0]).name

        failure = self.failures.get(program)
        if isinstance(failure, BaseException):
            raise failure
        if failure:
            return subprocess.CompletedProcess(argv, failure, stdout="", stderr=f"{program} failed\n")

        stdout = kwargs.get("stdout")
        if program == "fc-metrics-generator" and stdout is not None:
            stdout.write(GENERATED_GO)
            stdout.flush()
        return subprocess.CompletedProcess(argv, 0, stdout="", stderr="")


@pytest.fixture
def fake_run():
    """Patch subprocess.run used by the workflow commands."""
    runner = FakeRunner()
    with patch("fc_metrics_updater.commands.subprocess.run", side_effect=runner):
        yield runner


@pytest.fixture
def generated_go() -> str:
    """What the fake generator prints."""
    return GENERATED_GO
