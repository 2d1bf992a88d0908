# conftest.py
from __future__ import annotations

from typing import List, Sequence, Tuple, Union

import pytest

from digtool.runner import CommandResult
from digtool.service import DigService


SAMPLE_DIG_OUTPUT = """\
; <<>> DiG 9.18.24 <<>> www.example.com A +timeout=3 +subnet=101.249.112.0/24 @223.5.5.5
;; global options: +cmd
;; Got answer:
;; ->>HEADER<<- opcode: QUERY, status: NOERROR, id: 49969
;; flags: qr rd ra; QUERY: 1, ANSWER: 3, AUTHORITY: 0, ADDITIONAL: 1

;; OPT PSEUDOSECTION:
; EDNS: version: 0, flags:; udp: 4096
; CLIENT-SUBNET: 101.249.112.0/24/24
;; QUESTION SECTION:
;www.example.com.\t\tIN\tA

;; ANSWER SECTION:
www.example.com.\t300\tIN\tCNAME\twww.example.com-v4.edgesuite.net.
www.example.com-v4.edgesuite.net. 21600 IN CNAME a1422.dscr.akamai.net.
a1422.dscr.akamai.net.\t20\tIN\tA\t23.45.67.89

;; Query time: 12 msec
;; SERVER: 223.5.5.5#53(223.5.5.5) (UDP)
;; WHEN: Mon Oct 19 10:00:00 CST 2026
;; MSG SIZE  rcvd: 150
"""


def answer_output(address: str, name: str = "example.com.") -> str:
    return (
        ";; ->>HEADER<<- opcode: QUERY, status: NOERROR, id: 1234\n"
        ";; flags: qr rd ra; QUERY: 1, ANSWER: 1, AUTHORITY: 0, ADDITIONAL: 1\n"
        "\n"
        ";; ANSWER SECTION:\n"
        f"{name}\t300\tIN\tA\t{address}\n"
    )


def failed(returncode: int = 9, timed_out: bool = False) -> CommandResult:
    return CommandResult(
        cmd=["dig"],
        stdout="",
        stderr=";; connection timed out; no servers could be reached",
        returncode=None if timed_out else returncode,
        timed_out=timed_out,
    )


Rule = Tuple[List[str], Union[str, CommandResult]]


class FlexibleFakeRunner:
    """
    Fake dig runner that matches calls by required tokens rather than exact arg lists.

    Provide rules like:
      rules = [
        (["+subnet=1.2.3.0/24"], "....output...."),
        (["-v"], CommandResult(...)),
      ]
    The first rule whose required tokens are all present wins. Plain strings
    become a successful run with that stdout.
    """

    def __init__(self, rules: Sequence[Rule], dig_path: str = "dig"):
        self.rules = list(rules)
        self.dig_path = dig_path
        self.calls: List[List[str]] = []

    async def dig(self, args, timeout_seconds=None) -> CommandResult:
        args = list(args)
        self.calls.append(args)
        for required, out in self.rules:
            if all(tok in args for tok in required):
                if isinstance(out, CommandResult):
                    return out
                return CommandResult(cmd=[self.dig_path, *args], stdout=out)
        raise AssertionError(
            "Unexpected dig call:\n"
            f"  args={args}\n"
            "No rules matched. Add a rule with required tokens that appear in args."
        )


@pytest.fixture
def make_service():
    def _make(rules: Sequence[Rule], server: str = "223.5.5.5") -> DigService:
        return DigService(runner=FlexibleFakeRunner(rules), server=server)

    return _make
