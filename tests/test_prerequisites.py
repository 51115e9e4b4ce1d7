"""Tests for PrerequisiteChecker."""

import pytest

from conftest import FakeRunner, failed, ok
from vcrbpkg.exceptions import PrerequisiteMissingError
from vcrbpkg.prerequisites import PrerequisiteChecker


class TestEnsureTools:

    def test_all_tools_present(self, test_logger):
        def handler(args):
            if args[0] == 'ruby':
                return ok(args, "ruby 3.2.2 (2023-03-30 revision e51014f9c0) [x86_64-linux]\n")
            if args[0] == 'rvm':
                return ok(args, "rvm 1.29.12 (latest) by Michal Papis\n")
            return ok(args)

        runner = FakeRunner(handler)
        versions = PrerequisiteChecker(runner, logger=test_logger).ensure_tools(['ruby', 'rvm'])

        assert versions['ruby'].startswith("ruby 3.2.2")
        assert versions['rvm'].startswith("rvm 1.29.12")
        assert runner.commands == ['ruby --version', 'rvm version']

    def test_tool_not_on_path(self, test_logger):
        runner = FakeRunner(tools={'ruby': '/usr/bin/ruby'})
        checker = PrerequisiteChecker(runner, logger=test_logger)

        with pytest.raises(PrerequisiteMissingError) as excinfo:
            checker.ensure_tools(['ruby', 'rvm'])

        assert excinfo.value.tool == 'rvm'
        assert 'get.rvm.io' in excinfo.value.hint
        assert 'get.rvm.io' in str(excinfo.value)

    def test_broken_tool(self, test_logger):
        runner = FakeRunner(lambda args: failed(args, "rvm: command failed"))
        checker = PrerequisiteChecker(runner, logger=test_logger)

        with pytest.raises(PrerequisiteMissingError) as excinfo:
            checker.ensure_tool('ruby')

        assert excinfo.value.tool == 'ruby'
        assert "ruby --version" in excinfo.value.reason

    def test_stops_at_first_missing_tool(self, test_logger):
        runner = FakeRunner(tools={})
        checker = PrerequisiteChecker(runner, logger=test_logger)

        with pytest.raises(PrerequisiteMissingError):
            checker.ensure_tools(['ruby', 'rvm'])
        assert runner.calls == []


class TestInstallationInstructions:

    def test_known_and_unknown_tools(self):
        text = PrerequisiteChecker(FakeRunner()).get_installation_instructions(['rvm', 'docker'])

        assert "rvm: RVM may not be available" in text
        assert "docker: Please install docker" in text
