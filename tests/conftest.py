"""Global fixtures for vcrbpkg tests."""

import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional

import pytest

from vcrbpkg.models import ProcessResult


class FakeRunner:
    """ProcessRunner stand-in that records commands and replays canned results.

    ``handler`` receives the argument list and returns a ProcessResult, or
    None for a plain success.
    """

    def __init__(self, handler: Optional[Callable[[List[str]], Optional[ProcessResult]]] = None,
                 tools: Optional[Dict[str, str]] = None):
        self.handler = handler
        self.tools = tools if tools is not None else {
            'ruby': '/usr/bin/ruby',
            'rvm': '/usr/local/rvm/bin/rvm',
            'git': '/usr/bin/git',
        }
        self.calls = []
        self.deadline_calls = []

    def which(self, tool):
        return self.tools.get(tool)

    def run(self, args, cwd=None, env=None, capture=True, timeout=None):
        self.calls.append({'args': list(args), 'cwd': cwd, 'env': env, 'capture': capture})
        return self._respond(args)

    def run_with_deadline(self, args, deadline, cwd=None, env=None):
        self.deadline_calls.append({'args': list(args), 'deadline': deadline, 'cwd': cwd, 'env': env})
        return self._respond(args)

    @property
    def commands(self) -> List[str]:
        return [' '.join(call['args']) for call in self.calls]

    def _respond(self, args):
        result = self.handler(list(args)) if self.handler else None
        if result is None:
            result = ProcessResult(args=list(args), returncode=0)
        return result


def ok(args, output=''):
    return ProcessResult(args=args, returncode=0, output=output)


def failed(args, output='', returncode=1):
    return ProcessResult(args=args, returncode=returncode, output=output)


def killed(args):
    return ProcessResult(args=args, returncode=None, timed_out=True, duration=15.0)


@pytest.fixture
def fake_runner():
    return FakeRunner()


@pytest.fixture
def test_logger():
    """Logger handed explicitly to components under test."""
    logger = logging.getLogger('vcrbpkg.tests')
    logger.setLevel(logging.DEBUG)
    return logger


@pytest.fixture
def rails_app(tmp_path: Path) -> Path:
    """Minimal directory with a Rails layout."""
    for name in ('app', 'config', 'public'):
        (tmp_path / name).mkdir()
    (tmp_path / 'Gemfile').write_text("source 'https://rubygems.org'\n\ngem 'rails', '~> 6.1.7'\n",
                                      encoding='utf-8')
    return tmp_path


@pytest.fixture(autouse=True)
def reset_vcrbpkg_logger():
    """Undo setup_logging() calls made by CLI tests."""
    logger = logging.getLogger('vcrbpkg')
    level = logger.level
    handlers = list(logger.handlers)
    yield
    logger.setLevel(level)
    logger.handlers[:] = handlers
