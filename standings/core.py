"""
Scoreboard data model: submissions, per-problem status, team aggregates
and the ICPC ranking comparator.
"""

from dataclasses import dataclass, field
from enum import Enum
from functools import cmp_to_key

WA_PENALTY_MINUTES = 20


class Verdict(str, Enum):
    ACCEPTED = "Accepted"
    WRONG_ANSWER = "Wrong_Answer"
    RUNTIME_ERROR = "Runtime_Error"
    TIME_LIMIT_EXCEED = "Time_Limit_Exceed"

    @property
    def accepted(self) -> bool:
        return self is Verdict.ACCEPTED

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Submission:
    problem: str
    verdict: Verdict
    time: int
    frozen: bool = False


@dataclass
class ProblemStatus:
    """
    State of one (team, problem) cell.

    While the board is frozen, attempts on an unsolved problem are only
    queued in ``pending``; they are counted when the scroll reveals them.
    """
    solved: bool = False
    wrong_attempts: int = 0
    solve_time: int = 0
    wrong_before_freeze: int = 0
    pending: list[Submission] = field(default_factory=list)

    def cell(self) -> str:
        """Scoreboard cell: ``-W/F`` or ``0/F`` frozen, ``+N`` solved, ``-N`` or ``.`` otherwise."""
        if self.pending:
            if self.wrong_before_freeze > 0:
                return f"-{self.wrong_before_freeze}/{len(self.pending)}"
            return f"0/{len(self.pending)}"
        if self.solved:
            return f"+{self.wrong_attempts}" if self.wrong_attempts > 0 else "+"
        return f"-{self.wrong_attempts}" if self.wrong_attempts > 0 else "."


class Team:
    """A contestant team and its running totals."""

    def __init__(self, name: str):
        self.name = name
        self.problems: dict[str, ProblemStatus] = {}
        self.submissions: list[Submission] = []
        self.solved_count = 0
        self.penalty = 0
        self._solve_times: list[int] = []
        self._solve_times_sorted = True

    def __repr__(self) -> str:
        return f"Team({self.name!r}, solved={self.solved_count}, penalty={self.penalty})"

    def open_problems(self, problem_ids: list[str]) -> None:
        for pid in problem_ids:
            self.problems.setdefault(pid, ProblemStatus())

    @property
    def solve_times(self) -> list[int]:
        """Solve times of solved problems, latest first."""
        if not self._solve_times_sorted:
            self._solve_times.sort(reverse=True)
            self._solve_times_sorted = True
        return self._solve_times

    def record_solve(self, status: ProblemStatus, time: int, wrong_attempts: int) -> None:
        status.solved = True
        status.solve_time = time
        status.wrong_attempts = wrong_attempts
        self.solved_count += 1
        self.penalty += WA_PENALTY_MINUTES * wrong_attempts + time
        self._solve_times.append(time)
        self._solve_times_sorted = False

    def add_submission(self, problem: str, verdict: Verdict, time: int, frozen: bool) -> Submission:
        """Append to the history and account for the attempt (or queue it if frozen)."""
        submission = Submission(problem, verdict, time, frozen)
        self.submissions.append(submission)

        status = self.problems[problem]
        # Nothing changes once a problem is accepted
        if status.solved:
            return submission

        if frozen:
            status.pending.append(submission)
        elif verdict.accepted:
            self.record_solve(status, time, status.wrong_attempts)
        else:
            status.wrong_attempts += 1
        return submission

    def snapshot_freeze(self) -> None:
        for status in self.problems.values():
            if not status.solved:
                status.wrong_before_freeze = status.wrong_attempts

    def first_pending_problem(self, problem_ids: list[str]) -> str | None:
        for pid in problem_ids:
            if self.problems[pid].pending:
                return pid
        return None

    def reveal(self, problem: str) -> None:
        """Resolve the queued attempts of one problem in submission order."""
        status = self.problems[problem]
        if not status.solved:
            rejected = 0
            for sub in status.pending:
                if sub.verdict.accepted:
                    self.record_solve(status, sub.time, status.wrong_before_freeze + rejected)
                    break
                rejected += 1
            else:
                status.wrong_attempts = status.wrong_before_freeze + rejected
        status.pending.clear()


def compare_teams(a: Team, b: Team) -> int:
    """
    ICPC order: more solved, then less penalty, then smaller latest solve
    times compared from the latest one down, then name. Negative if ``a``
    ranks above ``b``.
    """
    if a.solved_count != b.solved_count:
        return -1 if a.solved_count > b.solved_count else 1
    if a.penalty != b.penalty:
        return -1 if a.penalty < b.penalty else 1
    for ta, tb in zip(a.solve_times, b.solve_times):
        if ta != tb:
            return -1 if ta < tb else 1
    if a.name != b.name:
        return -1 if a.name < b.name else 1
    return 0


def rank_teams(teams) -> list[Team]:
    """Return a new list of ``teams`` sorted best first."""
    return sorted(teams, key=cmp_to_key(compare_teams))
