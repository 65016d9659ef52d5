"""
Contest engine: owns the teams, ingests submissions and drives the
freeze / scroll reveal.

Every operation checks its preconditions first and reports a ``Result``
instead of raising, so nothing is half-applied on failure.
"""

from dataclasses import dataclass
from enum import Enum

from standings.core import Submission, Team, Verdict, rank_teams


class Result(Enum):
    OK = "ok"
    ALREADY_STARTED = "already started"
    NOT_STARTED = "not started"
    DUPLICATED_TEAM = "duplicated team name"
    TEAM_NOT_FOUND = "team not found"
    PROBLEM_NOT_FOUND = "problem not found"
    ALREADY_FROZEN = "already frozen"
    NOT_FROZEN = "not frozen"
    NO_SUBMISSION = "no matching submission"

    @property
    def ok(self) -> bool:
        return self is Result.OK


@dataclass(frozen=True)
class ScoreboardRow:
    name: str
    rank: int
    solved: int
    penalty: int
    cells: tuple[str, ...]


@dataclass(frozen=True)
class RankChange:
    team: str
    overtaken: str
    solved: int
    penalty: int


@dataclass
class ScrollReport:
    before: list[ScoreboardRow]
    changes: list[RankChange]
    after: list[ScoreboardRow]


@dataclass(frozen=True)
class RankingAnswer:
    result: Result
    rank: int | None = None
    frozen: bool = False


@dataclass(frozen=True)
class SubmissionAnswer:
    result: Result
    submission: Submission | None = None


def problem_ids_for(count: int) -> list[str]:
    return [chr(ord("A") + i) for i in range(count)]


class ContestEngine:

    def __init__(self):
        self.teams: dict[str, Team] = {}
        # Last computed ranking; insertion order until the first flush or scroll
        self._ordering: list[Team] = []
        self.started = False
        self.frozen = False
        self.flushed = False
        self.duration = 0
        self.problem_ids: list[str] = []

    # ── Setup ─────────────────────────────────────────────────────────

    def add_team(self, name: str) -> Result:
        if self.started:
            return Result.ALREADY_STARTED
        if name in self.teams:
            return Result.DUPLICATED_TEAM
        team = Team(name)
        self.teams[name] = team
        self._ordering.append(team)
        return Result.OK

    def start(self, duration: int, problem_count: int) -> Result:
        if self.started:
            return Result.ALREADY_STARTED
        self.started = True
        self.duration = duration
        self.problem_ids = problem_ids_for(problem_count)
        for team in self.teams.values():
            team.open_problems(self.problem_ids)
        return Result.OK

    # ── Submissions ───────────────────────────────────────────────────

    def submit(self, problem: str, team_name: str, verdict: Verdict, time: int) -> Result:
        if not self.started:
            return Result.NOT_STARTED
        team = self.teams.get(team_name)
        if team is None:
            return Result.TEAM_NOT_FOUND
        if problem not in team.problems:
            return Result.PROBLEM_NOT_FOUND
        team.add_submission(problem, verdict, time, self.frozen)
        return Result.OK

    # ── Ranking ───────────────────────────────────────────────────────

    def rank(self) -> list[Team]:
        """Compute a fresh ranking without storing it."""
        return rank_teams(self.teams.values())

    @property
    def ordering(self) -> list[Team]:
        return list(self._ordering)

    def flush(self) -> list[Team]:
        self._ordering = self.rank()
        self.flushed = True
        return self.ordering

    def scoreboard(self) -> list[ScoreboardRow]:
        """Rows of the stored ordering (not recomputed)."""
        return self._rows(self._ordering)

    def _rows(self, ordering: list[Team]) -> list[ScoreboardRow]:
        return [
            ScoreboardRow(
                name=team.name,
                rank=i + 1,
                solved=team.solved_count,
                penalty=team.penalty,
                cells=tuple(team.problems[pid].cell() for pid in self.problem_ids),
            )
            for i, team in enumerate(ordering)
        ]

    # ── Freeze / scroll ───────────────────────────────────────────────

    def freeze(self) -> Result:
        if self.frozen:
            return Result.ALREADY_FROZEN
        for team in self.teams.values():
            team.snapshot_freeze()
        self.frozen = True
        return Result.OK

    def pending_count(self) -> int:
        return sum(
            len(status.pending)
            for team in self.teams.values()
            for status in team.problems.values()
        )

    def _next_reveal(self) -> tuple[Team, str] | None:
        # Worst ranked team first, then contest problem order
        for team in reversed(self._ordering):
            problem = team.first_pending_problem(self.problem_ids)
            if problem is not None:
                return team, problem
        return None

    def scroll(self) -> tuple[Result, ScrollReport | None]:
        """
        Reveal every frozen attempt one (team, problem) at a time, starting
        from the lowest ranked team, and report each team that climbs.
        """
        if not self.frozen:
            return Result.NOT_FROZEN, None

        self._ordering = self.rank()
        before = self._rows(self._ordering)
        changes = []

        while True:
            target = self._next_reveal()
            if target is None:
                break
            team, problem = target
            old_rank = self._ordering.index(team)

            team.reveal(problem)

            self._ordering = self.rank()
            new_rank = self._ordering.index(team)
            if new_rank < old_rank:
                # The climber passed at least the team now directly below it
                below = self._ordering[new_rank + 1]
                changes.append(RankChange(
                    team=team.name,
                    overtaken=below.name,
                    solved=team.solved_count,
                    penalty=team.penalty,
                ))

        after = self._rows(self._ordering)
        self.frozen = False
        return Result.OK, ScrollReport(before, changes, after)

    # ── Queries ───────────────────────────────────────────────────────

    def query_ranking(self, team_name: str) -> RankingAnswer:
        team = self.teams.get(team_name)
        if team is None:
            return RankingAnswer(Result.TEAM_NOT_FOUND)
        return RankingAnswer(Result.OK, self._ordering.index(team) + 1, self.frozen)

    def query_submission(self, team_name: str, problem: str | None = None,
                         verdict: Verdict | None = None) -> SubmissionAnswer:
        """Most recent submission of the team matching both filters (``None`` matches anything)."""
        team = self.teams.get(team_name)
        if team is None:
            return SubmissionAnswer(Result.TEAM_NOT_FOUND)
        for sub in reversed(team.submissions):
            if problem is not None and sub.problem != problem:
                continue
            if verdict is not None and sub.verdict != verdict:
                continue
            return SubmissionAnswer(Result.OK, sub)
        return SubmissionAnswer(Result.NO_SUBMISSION)
