#!/usr/bin/env python3
"""
Freeze & Scroll Scoreboard — Flask Application
==============================================
An ICPC-style contest scoreboard served over a JSON API:

  LIVE:    Teams submit, the board is flushed on demand.
  FROZEN:  New verdicts are withheld and shown as pending cells.
  SCROLL:  Frozen attempts are revealed worst team first, reporting
           every team that climbs.

Usage:
    python app.py                          # start on port 5000
    python app.py --port 8080              # custom port
    python app.py --script contest.log     # replay a command log at boot
    python app.py --debug                  # Flask debug mode
"""

import argparse
import threading
from pathlib import Path
from flask import Flask, jsonify, request

from standings import codeforces
from standings.commands import WILDCARD, run_commands
from standings.core import Verdict
from standings.engine import ContestEngine, Result, ScoreboardRow
from standings.generate_sample import generate_sample_script

# ═══════════════════════════════════════════════════════════════════════
#  CONTEST STATE
# ═══════════════════════════════════════════════════════════════════════

class ContestState:
    """
    Owns the running ContestEngine.

    Flask serves requests from several threads, so every engine read or
    write goes through ``_lock``, and each request takes it once.
    """

    def __init__(self):
        self.engine = ContestEngine()
        self.source: str = "manual"
        self._lock = threading.Lock()

    def _phase(self) -> str:
        # Caller holds _lock
        if not self.engine.started:
            return "setup"
        return "frozen" if self.engine.frozen else "live"

    def call(self, method: str, *args):
        """Run one engine method; returns its value and the phase after it."""
        with self._lock:
            value = getattr(self.engine, method)(*args)
            return value, self._phase()

    def start(self, duration: int, problems: int) -> tuple[Result, str, int]:
        with self._lock:
            result = self.engine.start(duration, problems)
            return result, self._phase(), len(self.engine.teams)

    def flush(self) -> list[ScoreboardRow]:
        with self._lock:
            self.engine.flush()
            return self.engine.scoreboard()

    def scoreboard(self) -> dict:
        with self._lock:
            return {
                "phase": self._phase(),
                "problems": list(self.engine.problem_ids),
                "scoreboard": [row_json(r) for r in self.engine.scoreboard()],
            }

    def status(self) -> dict:
        with self._lock:
            engine = self.engine
            return {
                "phase": self._phase(),
                "source": self.source,
                "started": engine.started,
                "frozen": engine.frozen,
                "flushed": engine.flushed,
                "durationMinutes": engine.duration,
                "problems": list(engine.problem_ids),
                "teamCount": len(engine.teams),
                "pendingSubmissions": engine.pending_count(),
            }

    def run_script(self, lines: list[str]) -> list[str]:
        with self._lock:
            return list(run_commands(lines, self.engine))

    def reset(self, engine: ContestEngine | None = None, source: str = "manual") -> str:
        """Replace the engine (fresh one by default); returns the new phase."""
        with self._lock:
            self.engine = engine if engine is not None else ContestEngine()
            self.source = source
            phase = self._phase()
        print(f"⏹ RESET — new {source} contest")
        return phase

    def simulate(self, seed: int = 42) -> tuple[list[str], str]:
        """Reset and replay a generated contest up to (not including) the scroll."""
        lines = generate_sample_script(seed=seed)
        cut = lines.index("SCROLL")
        engine = ContestEngine()
        with self._lock:
            self.engine = engine
            self.source = "simulation"
            output = list(run_commands(lines[:cut], engine))
            phase = self._phase()
            teams, pending = len(engine.teams), engine.pending_count()
        print(f"🎮 SIMULATION — {teams} teams, {pending} frozen submissions")
        return output, phase

    def import_codeforces(self, contest_id: int, freeze_minutes: int) -> tuple[str, str]:
        """Swap in an imported contest; returns its phase and source."""
        engine, _ = codeforces.load_contest(contest_id, freeze_minutes)
        pending = engine.pending_count()
        source = f"codeforces:{contest_id}"
        phase = self.reset(engine, source=source)
        print(f"🔒 FROZEN — imported contest {contest_id}, {pending} frozen submissions")
        return phase, source


# ═══════════════════════════════════════════════════════════════════════
#  FLASK APP
# ═══════════════════════════════════════════════════════════════════════

app = Flask(__name__, static_folder=None)
contest_state = ContestState()

ERROR_STATUS = {
    Result.TEAM_NOT_FOUND: 404,
    Result.NO_SUBMISSION: 404,
    Result.PROBLEM_NOT_FOUND: 404,
}


def row_json(row: ScoreboardRow) -> dict:
    return {
        "name": row.name,
        "rank": row.rank,
        "solved": row.solved,
        "penalty": row.penalty,
        "cells": list(row.cells),
    }


def result_response(result: Result, phase: str, **extra):
    if result.ok:
        return jsonify({"status": "ok", "phase": phase, **extra})
    return jsonify({"error": result.value}), ERROR_STATUS.get(result, 409)


def _body() -> dict:
    return request.get_json(force=True, silent=True) or {}


# ── API routes ────────────────────────────────────────────────────────

@app.route("/api/status", methods=["GET"])
def get_status():
    """Return current phase and contest metadata."""
    return jsonify(contest_state.status())


@app.route("/api/teams", methods=["POST"])
def add_team():
    name = str(_body().get("name", "")).strip()
    if not name:
        return jsonify({"error": "name is required"}), 400
    return result_response(*contest_state.call("add_team", name))


@app.route("/api/start", methods=["POST"])
def start_contest():
    body = _body()
    try:
        duration = int(body.get("duration", 0))
        problems = int(body.get("problems", 0))
    except (ValueError, TypeError):
        return jsonify({"error": "Invalid numeric parameters"}), 400
    if duration <= 0 or not 1 <= problems <= 26:
        return jsonify({"error": "duration must be positive and problems in 1..26"}), 400

    result, phase, team_count = contest_state.start(duration, problems)
    if result.ok:
        print(f"🟢 LIVE — {team_count} teams, {problems} problems")
    return result_response(result, phase)


@app.route("/api/submit", methods=["POST"])
def submit():
    body = _body()
    try:
        verdict = Verdict(body.get("verdict"))
        time = int(body.get("time"))
    except (ValueError, TypeError):
        return jsonify({"error": "verdict and time are required"}), 400
    if time < 0:
        return jsonify({"error": "time must be non-negative"}), 400

    result, phase = contest_state.call("submit", str(body.get("problem", "")),
                                       str(body.get("team", "")), verdict, time)
    return result_response(result, phase)


@app.route("/api/flush", methods=["POST"])
def flush():
    rows = contest_state.flush()
    return jsonify({"status": "ok", "scoreboard": [row_json(r) for r in rows]})


@app.route("/api/freeze", methods=["POST"])
def freeze():
    result, phase = contest_state.call("freeze")
    if result.ok:
        print("🔒 FROZEN — scoreboard locked")
    return result_response(result, phase)


@app.route("/api/scroll", methods=["POST"])
def scroll():
    """Reveal every frozen submission and return both snapshots plus the climbs."""
    (result, report), phase = contest_state.call("scroll")
    if report is None:
        return result_response(result, phase)
    print(f"🎬 SCROLL — {len(report.changes)} rank changes revealed")
    return result_response(
        result,
        phase,
        before=[row_json(r) for r in report.before],
        changes=[
            {"team": c.team, "overtaken": c.overtaken, "solved": c.solved, "penalty": c.penalty}
            for c in report.changes
        ],
        after=[row_json(r) for r in report.after],
    )


@app.route("/api/scoreboard", methods=["GET"])
def get_scoreboard():
    """Rows in the last computed order; call /api/flush to refresh."""
    return jsonify(contest_state.scoreboard())


@app.route("/api/ranking/<team>", methods=["GET"])
def query_ranking(team):
    answer, phase = contest_state.call("query_ranking", team)
    if not answer.result.ok:
        return result_response(answer.result, phase)
    return jsonify({"team": team, "rank": answer.rank, "frozenWarning": answer.frozen})


@app.route("/api/submission/<team>", methods=["GET"])
def query_submission(team):
    problem = request.args.get("problem", WILDCARD)
    status = request.args.get("status", WILDCARD)
    verdict = None
    if status != WILDCARD:
        try:
            verdict = Verdict(status)
        except ValueError:
            return jsonify({"error": f"unknown verdict {status}"}), 400

    answer, phase = contest_state.call("query_submission", team,
                                       None if problem == WILDCARD else problem, verdict)
    if not answer.result.ok:
        return result_response(answer.result, phase)
    sub = answer.submission
    return jsonify({
        "team": team,
        "problem": sub.problem,
        "verdict": sub.verdict.value,
        "time": sub.time,
        "frozen": sub.frozen,
    })


@app.route("/api/commands", methods=["POST"])
def run_command_script():
    """Run a command log against the current contest."""
    script = _body().get("script")
    if not isinstance(script, str):
        return jsonify({"error": "script is required"}), 400
    return jsonify({"output": contest_state.run_script(script.splitlines())})


@app.route("/api/simulate", methods=["POST"])
def simulate_contest():
    """Start a generated contest, frozen and ready to scroll."""
    try:
        seed = int(_body().get("seed", 42))
    except (ValueError, TypeError):
        return jsonify({"error": "Invalid seed"}), 400
    output, phase = contest_state.simulate(seed=seed)
    return jsonify({"status": "ok", "phase": phase, "output": output})


@app.route("/api/import", methods=["POST"])
def import_contest():
    """Import a Codeforces contest as a frozen board."""
    body = _body()
    try:
        contest_id = int(body.get("contestId"))
        freeze_minutes = int(body.get("freezeMinutes", 60))
    except (ValueError, TypeError):
        return jsonify({"error": "Invalid numeric parameters"}), 400

    try:
        phase, source = contest_state.import_codeforces(contest_id, freeze_minutes)
    except Exception as e:
        print(f"❌ Import failed: {e}")
        return jsonify({"error": str(e)}), 500
    return jsonify({"status": "ok", "phase": phase, "source": source})


@app.route("/api/reset", methods=["POST"])
def reset_contest():
    phase = contest_state.reset()
    return jsonify({"status": "ok", "phase": phase})


# ═══════════════════════════════════════════════════════════════════════
#  CLI
# ═══════════════════════════════════════════════════════════════════════

def main():
    parser = argparse.ArgumentParser(description="Freeze & Scroll Scoreboard — Flask Server")
    parser.add_argument("--port", type=int, default=5000, help="Port (default: 5000)")
    parser.add_argument("--host", type=str, default="0.0.0.0", help="Host (default: 0.0.0.0)")
    parser.add_argument("--script", type=str, default=None, help="Command log to replay at boot")
    parser.add_argument("--debug", action="store_true", help="Enable Flask debug mode")
    args = parser.parse_args()

    if args.script:
        lines = Path(args.script).read_text(encoding="utf-8").splitlines()
        output = contest_state.run_script(lines)
        errors = [line for line in output if line.startswith("[Error]")]
        print(f"📜 Replayed {len(lines)} commands from {args.script} ({len(errors)} errors)")

    print("═══════════════════════════════════════════════════════")
    print("  Freeze & Scroll Scoreboard — Server")
    print(f"  http://localhost:{args.port}")
    print("═══════════════════════════════════════════════════════")

    app.run(host=args.host, port=args.port, debug=args.debug)


if __name__ == "__main__":
    main()
