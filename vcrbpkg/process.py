"""
External process execution.

Every tool vcrbpkg drives (git, ruby, rvm, bundler, veracode) goes through
ProcessRunner so that the rest of the code never touches subprocess directly
and tests can substitute a fake runner.
"""

import os
import shutil
import signal
import subprocess
import time
from typing import Dict, List, Optional

from .logging_config import get_logger
from .models import ProcessResult

# Conventional shell exit code for "command not found"
COMMAND_NOT_FOUND = 127


class ProcessRunner:
    """Runs external commands with working directory and environment overrides."""

    def __init__(self, logger=None):
        self.logger = logger or get_logger('process')

    def which(self, tool: str) -> Optional[str]:
        """Return the full path of an executable on PATH, or None."""
        return shutil.which(tool)

    def run(self, args: List[str], cwd: Optional[str] = None, env: Optional[Dict[str, str]] = None,
            capture: bool = True, timeout: Optional[float] = None) -> ProcessResult:
        """
        Run a command to completion.

        Args:
            args: Command and arguments
            cwd: Working directory
            env: Variables overlaid on the current environment
            capture: Capture combined stdout/stderr as text instead of streaming it
            timeout: Optional limit in seconds; the child is killed on expiry

        Returns:
            ProcessResult; a missing executable yields returncode 127 instead of raising
        """
        self.logger.debug(f"Executing command: {' '.join(args)} (cwd={cwd})")
        start_time = time.time()

        try:
            result = subprocess.run(
                args,
                cwd=cwd,
                env=self._build_env(env),
                stdout=subprocess.PIPE if capture else None,
                stderr=subprocess.STDOUT if capture else None,
                text=True,
                timeout=timeout
            )
        except subprocess.TimeoutExpired as e:
            duration = time.time() - start_time
            self.logger.warning(f"Command timed out after {duration:.2f}s: {' '.join(args)}")
            return ProcessResult(args=list(args), returncode=None, output=_decode(e.output),
                                 timed_out=True, duration=duration)
        except OSError as e:
            duration = time.time() - start_time
            self.logger.debug(f"Unable to start {args[0]}: {e}")
            return ProcessResult(args=list(args), returncode=COMMAND_NOT_FOUND, output=str(e),
                                 duration=duration)

        duration = time.time() - start_time
        output = result.stdout or ''
        self.logger.debug(f"Command completed in {duration:.2f}s with exit code: {result.returncode}")
        if output:
            self.logger.debug(f"OUTPUT ({len(output)} chars): {output[:200]}{'...' if len(output) > 200 else ''}")

        return ProcessResult(args=list(args), returncode=result.returncode, output=output, duration=duration)

    def run_with_deadline(self, args: List[str], deadline: float, cwd: Optional[str] = None,
                          env: Optional[Dict[str, str]] = None) -> ProcessResult:
        """
        Run a long-lived command and kill it once ``deadline`` seconds pass.

        The child gets its own process group so that the kill also reaches any
        workers it forked. Output is streamed to the console.

        Returns:
            ProcessResult with ``timed_out`` set when the deadline killed the process
        """
        self.logger.debug(f"Executing command with {deadline}s deadline: {' '.join(args)} (cwd={cwd})")
        start_time = time.time()

        try:
            process = subprocess.Popen(
                args,
                cwd=cwd,
                env=self._build_env(env),
                start_new_session=(os.name == 'posix')
            )
        except OSError as e:
            self.logger.debug(f"Unable to start {args[0]}: {e}")
            return ProcessResult(args=list(args), returncode=COMMAND_NOT_FOUND, output=str(e),
                                 duration=time.time() - start_time)

        try:
            returncode = process.wait(timeout=deadline)
        except subprocess.TimeoutExpired:
            self._kill_process_group(process)
            duration = time.time() - start_time
            self.logger.debug(f"Killed {args[0]} after {duration:.2f}s")
            return ProcessResult(args=list(args), returncode=None, timed_out=True, duration=duration)
        except BaseException:
            # Ctrl-C while waiting must not leave the server running
            self._kill_process_group(process)
            raise

        duration = time.time() - start_time
        self.logger.debug(f"Command exited after {duration:.2f}s with exit code: {returncode}")
        return ProcessResult(args=list(args), returncode=returncode, duration=duration)

    def _kill_process_group(self, process: subprocess.Popen) -> None:
        """Kill a child and everything in its process group, then reap it."""
        if os.name == 'posix':
            try:
                os.killpg(process.pid, signal.SIGKILL)
            except ProcessLookupError:
                pass
        else:
            process.kill()
        process.wait()

    @staticmethod
    def _build_env(overrides: Optional[Dict[str, str]]) -> Optional[Dict[str, str]]:
        if not overrides:
            return None
        env = os.environ.copy()
        env.update(overrides)
        return env


def _decode(output) -> str:
    if output is None:
        return ''
    if isinstance(output, bytes):
        return output.decode(errors='replace')
    return output
