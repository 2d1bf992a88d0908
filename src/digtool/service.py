from __future__ import annotations

import logging
from typing import List, Optional

from .formatter import format_dig_output
from .models import DigOptions, DigResult, ToolInfo
from .parser import parse_dig_output
from .runner import CommandResult, DigRunner

logger = logging.getLogger(__name__)


class DigExecutionError(RuntimeError):
    """dig could not be run, exited non-zero, or hit the deadline. Details are logged, not carried."""

    def __init__(self, message: str = "Failed to execute dig command"):
        super().__init__(message)


class DigService:
    """
    Runs dig for one (domain, type, subnet) against the configured server.

    Arguments are assumed to be validated already (reporting.targets); the
    command is passed to the OS as an argv list, never through a shell.
    """

    def __init__(
        self,
        runner: Optional[DigRunner] = None,
        server: str = "223.5.5.5",
        dig_path: str = "dig",
        query_timeout: float = 3.0,
        process_timeout: float = 10.0,
    ) -> None:
        self.runner = runner or DigRunner(dig_path=dig_path, timeout_seconds=process_timeout)
        self.server = server
        self.query_timeout = float(query_timeout)

    @property
    def dig_path(self) -> str:
        return self.runner.dig_path

    def build_args(self, options: DigOptions) -> List[str]:
        args = [options.domain, options.record_type, f"+timeout={max(1, int(self.query_timeout))}"]
        if options.subnet:
            args.append(f"+subnet={options.subnet}")
        args.append(f"@{self.server}")
        return args

    def describe(self, options: DigOptions) -> str:
        """Query description shown above the formatted output."""
        q = f"dig {options.domain} {options.record_type}"
        if options.subnet:
            q += f" +subnet={options.subnet}"
        return q + f" @{self.server}"

    @staticmethod
    def _failure_reason(res: CommandResult) -> str:
        if res.not_found:
            return "binary not found"
        if res.timed_out:
            return "timeout"
        return f"exit status {res.returncode}"

    async def execute(self, options: DigOptions) -> DigResult:
        args = self.build_args(options)
        logger.debug("run: %s %s", self.dig_path, " ".join(args))

        res = await self.runner.dig(args)
        if not res.ok:
            logger.error(
                "Dig command execution failed (%s): cmd=%s domain=%s type=%s subnet=%s stderr=%s",
                self._failure_reason(res),
                " ".join(res.cmd),
                options.domain,
                options.record_type,
                options.subnet,
                res.stderr.strip(),
            )
            raise DigExecutionError()

        parsed = parse_dig_output(res.stdout)
        logger.debug("parsed result: %s", parsed)

        query = self.describe(options)
        return DigResult(output=format_dig_output(parsed, query), parsed=parsed, command=query)

    async def tool_info(self) -> ToolInfo:
        res = await self.runner.dig(["-v"])
        if not res.ok:
            logger.error(
                "Dig tool check failed (%s): path=%s stderr=%s",
                self._failure_reason(res),
                self.dig_path,
                res.stderr.strip(),
            )
            return ToolInfo(available=False, path=self.dig_path, error="Dig tool not available")

        # dig prints its version banner on stderr
        version = (res.stdout.strip() or res.stderr.strip()) or None
        return ToolInfo(available=True, path=self.dig_path, version=version)
