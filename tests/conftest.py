"""Shared pytest fixtures for sequence-runner tests."""

import asyncio

import pytest
from typer.testing import CliRunner

from sequence_runner.work import WorkItem


class RecordingDelegate:
    """
    Presentation delegate that records every call.

    ``mode`` selects how steps finish: "sync" returns None, "async" returns
    a coroutine. Steps named in ``fail`` raise (sync) or reject (async).
    """

    def __init__(self, mode="sync", fail=(), delay=0.0, optional=True):
        self.mode = mode
        self.fail = set(fail)
        self.delay = delay
        self.calls = []
        self.on_interaction = None
        if not optional:
            # Hide the optional steps from getattr lookups
            self.update_content = None
            self.skip = None
            self.finish = None

    def _step(self, name, *args):
        self.calls.append((name, *args))
        if self.mode == "async":
            return self._deferred(name)
        if name in self.fail:
            raise RuntimeError(f"{name} failed")
        return None

    async def _deferred(self, name):
        await asyncio.sleep(self.delay)
        if name in self.fail:
            raise RuntimeError(f"{name} failed")

    @property
    def call_names(self):
        return [call[0] for call in self.calls]

    def initialize(self, options, on_interaction=None):
        self.on_interaction = on_interaction
        return self._step("initialize")

    def show(self, item, options):
        return self._step("show", item)

    def hide(self):
        return self._step("hide")

    def update_content(self, item):
        return self._step("update_content", item)

    def skip(self):
        return self._step("skip")

    def finish(self, state):
        return self._step("finish", state)

    def destroy(self):
        self.calls.append(("destroy",))


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    return CliRunner()


@pytest.fixture
def make_delegate():
    """Factory for recording delegates."""
    return RecordingDelegate


@pytest.fixture
def abc_items():
    """Three items whose priorities order them b, c, a."""
    return [
        WorkItem(name="a", priority=1),
        WorkItem(name="b", priority=9),
        WorkItem(name="c", priority=5),
    ]


@pytest.fixture
def run_items():
    """Run a runner to completion on a fresh event loop, with a timeout."""

    def _run(runner, items, timeout=2.0):
        async def _go():
            return await asyncio.wait_for(runner.run(items), timeout)

        return asyncio.run(_go())

    return _run


@pytest.fixture
def items_file(tmp_path):
    """Create a sample items file."""
    path = tmp_path / "items.yaml"
    path.write_text(
        """
- name: intro
  priority: 1
  duration: 1
- name: big-win
  priority: 9
  duration: 1
  amount: 250
- name: outro
  duration: 1
"""
    )
    return path


@pytest.fixture
def sample_config(tmp_path):
    """Create a sample config file."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()

    config_file = config_dir / "config.yaml"
    config_file.write_text(
        """
runner:
  priorityBased: false
  autoStartDelay: 0

logging:
  level: "ERROR"
  console_logging: false

features:
  bigWin:
    className: sequential
    delegate: console
    description: "Big win celebration"
    options:
      autoStart: true
      autoStartDelay: 5
  cascade:
    implementation: runner
    delegate: null
    options:
      priority_based: true
      staggerDelay: 0.04
"""
    )
    return config_file
