#!/usr/bin/env python3
"""
Codeforces Contest Importer
===========================
Fetches contest standings and submissions from the Codeforces API and
replays them into a ContestEngine, freezing the board at the requested
minute so the blind-hour attempts can be scrolled.

Usage:
    python -m standings.codeforces <contest_id> [--freeze-minutes 60] [--output contest.log]
"""

import argparse
import itertools
import sys
import time
from pathlib import Path
from typing import Iterator

import requests

from standings.commands import run_commands
from standings.core import Verdict
from standings.engine import ContestEngine, problem_ids_for

CF_API = "https://codeforces.com/api"
ATTEMPTS = 4
BACKOFF_SECONDS = 2
SUBMISSIONS_PAGE = 10000

VERDICT_MAP = {
    "OK": Verdict.ACCEPTED,
    "WRONG_ANSWER": Verdict.WRONG_ANSWER,
    "TIME_LIMIT_EXCEEDED": Verdict.TIME_LIMIT_EXCEED,
    "RUNTIME_ERROR": Verdict.RUNTIME_ERROR,
    "MEMORY_LIMIT_EXCEEDED": Verdict.WRONG_ANSWER,
    "PRESENTATION_ERROR": Verdict.WRONG_ANSWER,
    "IDLENESS_LIMIT_EXCEEDED": Verdict.WRONG_ANSWER,
}

IGNORED_VERDICTS = {
    "TESTING", "SKIPPED", "COMPILATION_ERROR",
    "HACKED", "CHALLENGED",
}


class CodeforcesError(RuntimeError):
    """The API answered, but with a FAILED status."""


def _request(method: str, params: dict | None):
    resp = requests.get(f"{CF_API}/{method}", params=params, timeout=30)
    resp.raise_for_status()
    payload = resp.json()
    if payload.get("status") != "OK":
        raise CodeforcesError(f"CF API error: {payload.get('comment', 'unknown')}")
    return payload["result"]


def api_get(method: str, params: dict | None = None):
    """
    Return the ``result`` of a Codeforces API call. Failed attempts are
    retried with a linear backoff; the last failure propagates.
    """
    for attempt in range(1, ATTEMPTS + 1):
        try:
            return _request(method, params)
        except (requests.RequestException, CodeforcesError) as exc:
            if attempt == ATTEMPTS:
                raise
            wait = BACKOFF_SECONDS * attempt
            print(f"  ⚠ {method} failed ({exc}), retry {attempt}/{ATTEMPTS - 1} in {wait}s…")
            time.sleep(wait)


def fetch_standings(contest_id: int) -> dict:
    """Fetch the official standings (contest meta, problems, rows)."""
    result = api_get("contest.standings", {"contestId": contest_id, "showUnofficial": False})
    return {"contest": result["contest"], "problems": result["problems"], "rows": result.get("rows", [])}


def iter_submission_pages(contest_id: int, page_size: int = SUBMISSIONS_PAGE) -> Iterator[list[dict]]:
    """Yield ``contest.status`` pages until a short one ends the listing."""
    for first in itertools.count(1, page_size):
        page = api_get("contest.status", {"contestId": contest_id, "from": first, "count": page_size})
        if page:
            yield page
        if len(page) < page_size:
            return
        time.sleep(0.5)


def fetch_submissions(contest_id: int) -> list[dict]:
    return [sub for page in iter_submission_pages(contest_id) for sub in page]


def party_key(party: dict) -> tuple:
    """Identity of a party, shared by standings rows and submission authors."""
    if party.get("teamName"):
        return "team", party.get("teamId", party["teamName"])
    return "members", tuple(m["handle"] for m in party.get("members", []))


def team_name(party: dict) -> str:
    """Single-token name for a party (team name or first member handle)."""
    name = party.get("teamName")
    if not name:
        members = party.get("members", [])
        name = members[0]["handle"] if members else "unknown"
    return "_".join(name.split())


def assign_team_names(rows: list[dict]) -> dict[tuple, str]:
    """
    Map each standings party to a distinct single-token name. Parties whose
    names collapse to the same token get ``_2``, ``_3``, ... suffixes.
    """
    names = {}
    taken = set()
    for row in rows:
        key = party_key(row["party"])
        if key in names:
            continue
        base = name = team_name(row["party"])
        suffix = 1
        while name in taken:
            suffix += 1
            name = f"{base}_{suffix}"
        if name != base:
            print(f"  ⚠ Team name {base} is taken, importing as {name}")
        taken.add(name)
        names[key] = name
    return names


def build_log(standings: dict, submissions: list[dict], freeze_minutes: int) -> list[str]:
    """
    Turn Codeforces data into a command log: official contestants become
    teams, submissions are replayed chronologically in minutes, and the
    board freezes before the first submission at or after ``freeze_minutes``.
    """
    names = assign_team_names(standings["rows"])
    lines = [f"ADDTEAM {name}" for name in names.values()]

    problems = standings["problems"]
    duration = standings["contest"].get("durationSeconds", 0) // 60
    lines.append(f"START DURATION {duration} PROBLEM {len(problems)}")
    # Codeforces indices ("A", "B1", ...) map to engine ids by position
    problem_map = {p["index"]: pid for p, pid in zip(problems, problem_ids_for(len(problems)))}

    frozen = False
    # sorted() is stable, so same-second submissions keep the API order
    for sub in sorted(submissions, key=lambda s: s.get("relativeTimeSeconds", 0)):
        party = sub.get("author", {})
        if party.get("participantType") != "CONTESTANT":
            continue
        name = names.get(party_key(party))
        if name is None:
            continue
        verdict = sub.get("verdict", "")
        if verdict in IGNORED_VERDICTS or verdict not in VERDICT_MAP:
            continue
        problem = problem_map.get(sub["problem"]["index"])
        if problem is None:
            continue

        minute = sub.get("relativeTimeSeconds", 0) // 60
        if minute >= freeze_minutes and not frozen:
            lines.append("FREEZE")
            frozen = True
        lines.append(f"SUBMIT {problem} BY {name} WITH {VERDICT_MAP[verdict].value} AT {minute}")

    if not frozen:
        lines.append("FREEZE")
    return lines


def load_contest(contest_id: int, freeze_minutes: int) -> tuple[ContestEngine, list[str]]:
    """Fetch a contest and return the frozen engine plus the log that built it."""
    print(f"📡  Fetching data for contest {contest_id}...")
    standings = fetch_standings(contest_id)
    submissions = fetch_submissions(contest_id)
    lines = build_log(standings, submissions, freeze_minutes)
    engine = ContestEngine()
    for message in run_commands(lines, engine):
        if message.startswith("[Error]"):
            print(f"  ⚠ {message}")
    return engine, lines


def main():
    parser = argparse.ArgumentParser(
        description="Import a Codeforces contest as a frozen scoreboard"
    )
    parser.add_argument("contest_id", type=int, help="Codeforces contest ID")
    parser.add_argument(
        "--freeze-minutes", type=int, default=60,
        help="Minutes into contest when scoreboard freezes (default: 60)",
    )
    parser.add_argument(
        "--output", type=str, default=None,
        help="Output command log path (default: samples/contest_<id>.log)",
    )
    args = parser.parse_args()

    output_path = args.output
    if output_path is None:
        output_path = str(Path("samples") / f"contest_{args.contest_id}.log")

    try:
        engine, lines = load_contest(args.contest_id, args.freeze_minutes)
    except Exception as exc:
        print(f"❌ Failed to fetch contest data: {exc}", file=sys.stderr)
        sys.exit(1)

    lines = lines + ["SCROLL", "END"]
    Path(output_path).parent.mkdir(parents=True, exist_ok=True)
    Path(output_path).write_text("\n".join(lines) + "\n", encoding="utf-8")

    print(f"\n✅ Exported {len(engine.teams)} teams, {engine.pending_count()} frozen submissions")
    print(f"📁 Saved to: {output_path}")


if __name__ == "__main__":
    main()
