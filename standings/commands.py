#!/usr/bin/env python3
"""
Command Log Runner
==================
Replays a line-oriented contest log against a ContestEngine and renders
the results as text.

    ADDTEAM <name>
    START DURATION <minutes> PROBLEM <count>
    SUBMIT <problem> BY <team> WITH <verdict> AT <minute>
    FLUSH | FREEZE | SCROLL | END
    QUERY_RANKING <team>
    QUERY_SUBMISSION <team> WHERE PROBLEM=<problem|ALL> AND STATUS=<verdict|ALL>

Usage:
    python -m standings.commands contest.log [--output result.txt]
    cat contest.log | python -m standings.commands
"""

import argparse
import re
import sys
from pathlib import Path
from typing import Iterable, Iterator

from standings.core import Verdict
from standings.engine import ContestEngine, Result, ScoreboardRow, SubmissionAnswer

WILDCARD = "ALL"
VERDICTS = {v.value for v in Verdict}

_SUBMIT_RE = re.compile(r"^(\S+) BY (\S+) WITH (\S+) AT (\d+)$")
_START_RE = re.compile(r"^DURATION (\d+) PROBLEM (\d+)$")
_QUERY_SUB_RE = re.compile(r"^(\S+) WHERE PROBLEM=(\S+) AND STATUS=(\S+)$")

MESSAGES = {
    ("ADDTEAM", Result.OK): "[Info]Add successfully.",
    ("ADDTEAM", Result.ALREADY_STARTED): "[Error]Add failed: competition has started.",
    ("ADDTEAM", Result.DUPLICATED_TEAM): "[Error]Add failed: duplicated team name.",
    ("START", Result.OK): "[Info]Competition starts.",
    ("START", Result.ALREADY_STARTED): "[Error]Start failed: competition has started.",
    ("FREEZE", Result.OK): "[Info]Freeze scoreboard.",
    ("FREEZE", Result.ALREADY_FROZEN): "[Error]Freeze failed: scoreboard has been frozen.",
    ("SCROLL", Result.OK): "[Info]Scroll scoreboard.",
    ("SCROLL", Result.NOT_FROZEN): "[Error]Scroll failed: scoreboard has not been frozen.",
    ("QUERY_RANKING", Result.OK): "[Info]Complete query ranking.",
    ("QUERY_RANKING", Result.TEAM_NOT_FOUND): "[Error]Query ranking failed: cannot find the team.",
    ("QUERY_SUBMISSION", Result.OK): "[Info]Complete query submission.",
    ("QUERY_SUBMISSION", Result.NO_SUBMISSION): "[Info]Complete query submission.",
    ("QUERY_SUBMISSION", Result.TEAM_NOT_FOUND): "[Error]Query submission failed: cannot find the team.",
}
FROZEN_WARNING = "[Warning]Scoreboard is frozen. The ranking may be inaccurate until it were scrolled."
NO_SUBMISSION = "Cannot find any submission."


class CommandError(ValueError):
    """A log line that cannot be parsed."""


def format_row(row: ScoreboardRow) -> str:
    return " ".join([row.name, str(row.rank), str(row.solved), str(row.penalty), *row.cells])


def parse_verdict(text: str) -> Verdict:
    try:
        return Verdict(text)
    except ValueError:
        raise CommandError(f"unknown verdict {text!r}") from None


def _wildcard(value: str) -> str | None:
    return None if value == WILDCARD else value


class CommandRunner:
    """Executes parsed commands against one engine."""

    def __init__(self, engine: ContestEngine | None = None):
        self.engine = engine if engine is not None else ContestEngine()
        self.ended = False

    def execute(self, line: str) -> list[str]:
        """Run one log line and return its output lines."""
        cmd, _, args = line.strip().partition(" ")
        args = args.strip()
        handler = getattr(self, f"_do_{cmd.lower()}", None)
        if not cmd.isupper() or handler is None:
            raise CommandError(f"unknown command {cmd!r}")
        return handler(args)

    def _do_addteam(self, args: str) -> list[str]:
        if not args or " " in args:
            raise CommandError("ADDTEAM takes a single team name")
        return [MESSAGES["ADDTEAM", self.engine.add_team(args)]]

    def _do_start(self, args: str) -> list[str]:
        m = _START_RE.match(args)
        if not m:
            raise CommandError("expected START DURATION <minutes> PROBLEM <count>")
        result = self.engine.start(int(m.group(1)), int(m.group(2)))
        return [MESSAGES["START", result]]

    def _do_submit(self, args: str) -> list[str]:
        m = _SUBMIT_RE.match(args)
        if not m:
            raise CommandError("expected SUBMIT <problem> BY <team> WITH <verdict> AT <minute>")
        problem, team, verdict, time = m.groups()
        result = self.engine.submit(problem, team, parse_verdict(verdict), int(time))
        if not result.ok:
            return [f"[Error]Submit failed: {result.value}."]
        return []

    def _do_flush(self, args: str) -> list[str]:
        self.engine.flush()
        return ["[Info]Flush scoreboard."]

    def _do_freeze(self, args: str) -> list[str]:
        return [MESSAGES["FREEZE", self.engine.freeze()]]

    def _do_scroll(self, args: str) -> list[str]:
        result, report = self.engine.scroll()
        out = [MESSAGES["SCROLL", result]]
        if report is None:
            return out
        out.extend(format_row(row) for row in report.before)
        for change in report.changes:
            out.append(f"{change.team} {change.overtaken} {change.solved} {change.penalty}")
        out.extend(format_row(row) for row in report.after)
        return out

    def _do_query_ranking(self, args: str) -> list[str]:
        answer = self.engine.query_ranking(args)
        out = [MESSAGES["QUERY_RANKING", answer.result]]
        if answer.result.ok:
            if answer.frozen:
                out.append(FROZEN_WARNING)
            out.append(f"{args} NOW AT RANKING {answer.rank}")
        return out

    def _do_query_submission(self, args: str) -> list[str]:
        m = _QUERY_SUB_RE.match(args)
        if not m:
            raise CommandError("expected QUERY_SUBMISSION <team> WHERE PROBLEM=<p> AND STATUS=<s>")
        team, problem, status = m.groups()
        if status != WILDCARD and status not in VERDICTS:
            # No submission can carry an unknown status
            result = Result.NO_SUBMISSION if team in self.engine.teams else Result.TEAM_NOT_FOUND
            answer = SubmissionAnswer(result)
        else:
            verdict = None if status == WILDCARD else Verdict(status)
            answer = self.engine.query_submission(team, _wildcard(problem), verdict)
        out = [MESSAGES["QUERY_SUBMISSION", answer.result]]
        if answer.result is Result.NO_SUBMISSION:
            out.append(NO_SUBMISSION)
        elif answer.submission is not None:
            sub = answer.submission
            out.append(f"{team} {sub.problem} {sub.verdict} {sub.time}")
        return out

    def _do_end(self, args: str) -> list[str]:
        self.ended = True
        return ["[Info]Competition ends."]


def run_commands(lines: Iterable[str], engine: ContestEngine | None = None) -> Iterator[str]:
    """Execute a command log, yielding output lines; stops after ``END``."""
    runner = CommandRunner(engine)
    for line in lines:
        if not line.strip():
            continue
        try:
            yield from runner.execute(line)
        except CommandError:
            yield f"[Error]Invalid command: {line.strip()}"
        if runner.ended:
            break


def main():
    parser = argparse.ArgumentParser(description="Replay a contest command log")
    parser.add_argument("log", nargs="?", default=None, help="Command log (default: stdin)")
    parser.add_argument("--output", type=str, default=None, help="Write output here instead of stdout")
    args = parser.parse_args()

    if args.log is None:
        lines = sys.stdin.read().splitlines()
    else:
        try:
            lines = Path(args.log).read_text(encoding="utf-8").splitlines()
        except OSError as exc:
            print(f"❌ Cannot read {args.log}: {exc}", file=sys.stderr)
            sys.exit(1)

    output = list(run_commands(lines))

    if args.output is None:
        for line in output:
            print(line)
    else:
        Path(args.output).parent.mkdir(parents=True, exist_ok=True)
        Path(args.output).write_text("\n".join(output) + "\n", encoding="utf-8")
        print(f"📁 Saved {len(output)} lines to: {args.output}")


if __name__ == "__main__":
    main()
