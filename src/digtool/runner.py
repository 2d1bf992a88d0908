import asyncio
from dataclasses import dataclass
from typing import List, Optional, Sequence


@dataclass(frozen=True)
class CommandResult:
    cmd: List[str]
    stdout: str
    stderr: str = ""
    returncode: Optional[int] = 0
    timed_out: bool = False
    not_found: bool = False

    @property
    def ok(self) -> bool:
        return not self.timed_out and not self.not_found and self.returncode == 0


class CommandRunner:
    """Small async wrapper around create_subprocess_exec with a deadline and consistent output."""

    def __init__(self, timeout_seconds: float = 10.0):
        self.timeout_seconds = float(timeout_seconds)

    async def run(self, cmd: Sequence[str], timeout_seconds: Optional[float] = None) -> CommandResult:
        cmd_list = list(cmd)
        t = self.timeout_seconds if timeout_seconds is None else float(timeout_seconds)
        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd_list,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except (FileNotFoundError, PermissionError) as e:
            return CommandResult(cmd=cmd_list, stdout="", stderr=str(e), returncode=None, not_found=True)

        try:
            out, err = await asyncio.wait_for(proc.communicate(), timeout=t)
        except asyncio.TimeoutError:
            proc.kill()
            await proc.wait()
            return CommandResult(
                cmd=cmd_list,
                stdout="",
                stderr=f"[timeout after {t}s] {' '.join(cmd_list)}",
                returncode=None,
                timed_out=True,
            )

        return CommandResult(
            cmd=cmd_list,
            stdout=out.decode("utf-8", errors="replace"),
            stderr=err.decode("utf-8", errors="replace"),
            returncode=proc.returncode,
        )


class DigRunner(CommandRunner):
    def __init__(self, dig_path: str = "dig", timeout_seconds: float = 10.0):
        super().__init__(timeout_seconds=timeout_seconds)
        self.dig_path = dig_path

    async def dig(self, args: Sequence[str], timeout_seconds: Optional[float] = None) -> CommandResult:
        return await self.run([self.dig_path, *list(args)], timeout_seconds=timeout_seconds)
