#!/usr/bin/env python3
"""
Generate a realistic contest command log for demos and smoke tests.
No Codeforces API needed. Stronger teams solve more and earlier, and a
burst of late submissions lands after the freeze so the scroll has
something to reveal.

Usage:
    python -m standings.generate_sample [--output samples/contest_demo.log]
    python -m standings.generate_sample --teams 40 --duration 300 --freeze 240
"""

import argparse
import random
from pathlib import Path

from standings.core import Verdict
from standings.engine import problem_ids_for

# ── Algerian-flavored team names for realism ────────────────────────────

TEAMS = [
    "Yassine_CP", "Amine_DZ", "Fatima_Code", "Khaled_ACM",
    "Meriem_Algo", "Raouf_Master", "Sara_Dev", "Mourad_IOI",
    "Lina_Solver", "Nabil_Pro", "Amira_DZ", "Zakaria_CP",
    "Houssem_Bit", "Djamila_X", "Bilal_Hash",
    "Imane_Tree", "Walid_Graph", "Noura_DP", "Sofiane_Seg",
    "Chaima_Math", "Abdelkader_FF", "Hadjer_BFS", "Oussama_Greedy",
    "Asma_Binary", "Mehdi_Trie", "Rania_Flow", "Aymen_Suffix",
    "Lamia_Stack", "Ismail_Queue", "Yasmine_FFT",
    "Ilyes_MST", "Wissam_LCA", "Hanane_Lazy", "Farid_Sparse",
    "Ikram_Centroid", "Djamel_HLD", "Samira_BIT", "Tarek_DSU",
    "Mouna_Sweep", "Nassim_Convex",
]

REJECTIONS = [Verdict.WRONG_ANSWER, Verdict.TIME_LIMIT_EXCEED, Verdict.RUNTIME_ERROR]


def generate_sample_script(seed: int = 42, n_teams: int = 12, n_problems: int = 7,
                           duration: int = 300, freeze_at: int = 240,
                           n_submissions: int = 200) -> list[str]:
    """Return a deterministic command log for a generated contest."""
    if n_teams < 1 or n_problems < 1 or duration < 1:
        raise ValueError("need at least one team, one problem and one minute")
    rng = random.Random(seed)
    teams = TEAMS[:n_teams]
    problems = problem_ids_for(n_problems)

    # Skill levels: higher = more likely to get accepted
    skills = {team: rng.uniform(0.2, 0.9) for team in teams}

    submissions = []
    for _ in range(n_submissions):
        team = rng.choice(teams)
        j = rng.randrange(len(problems))
        difficulty = (j + 1) / len(problems)
        time = rng.randint(1, duration)
        p_accept = max(0.05, min(0.95, skills[team] - difficulty * 0.5 + 0.2))
        verdict = Verdict.ACCEPTED if rng.random() < p_accept else rng.choice(REJECTIONS)
        submissions.append((time, problems[j], team, verdict))
    submissions.sort(key=lambda s: s[0])

    lines = [f"ADDTEAM {team}" for team in teams]
    lines.append(f"START DURATION {duration} PROBLEM {n_problems}")

    flushed = frozen = False
    for time, problem, team, verdict in submissions:
        if not flushed and time >= freeze_at // 2:
            lines.append("FLUSH")
            lines.append(f"QUERY_RANKING {teams[0]}")
            flushed = True
        if not frozen and time >= freeze_at:
            lines.append("FLUSH")
            lines.append("FREEZE")
            frozen = True
        lines.append(f"SUBMIT {problem} BY {team} WITH {verdict.value} AT {time}")

    if not frozen:
        lines.append("FREEZE")
    lines.append(f"QUERY_RANKING {teams[-1]}")
    lines.append(f"QUERY_SUBMISSION {teams[-1]} WHERE PROBLEM=ALL AND STATUS=ALL")
    lines.append("SCROLL")
    lines.append(f"QUERY_SUBMISSION {teams[0]} WHERE PROBLEM={problems[0]} AND STATUS={Verdict.ACCEPTED.value}")
    lines.append("END")
    return lines


def main():
    parser = argparse.ArgumentParser(description="Generate a sample contest command log")
    parser.add_argument(
        "--output", type=str, default=None,
        help="Output path (default: samples/contest_demo.log)"
    )
    parser.add_argument("--seed", type=int, default=42, help="Random seed")
    parser.add_argument("--teams", type=int, default=12, help=f"Number of teams (max {len(TEAMS)})")
    parser.add_argument("--problems", type=int, default=7, help="Number of problems")
    parser.add_argument("--duration", type=int, default=300, help="Contest duration in minutes")
    parser.add_argument("--freeze", type=int, default=240, help="Freeze time in minutes")
    parser.add_argument("--submissions", type=int, default=200, help="Number of submissions")
    args = parser.parse_args()

    if args.teams < 1:
        parser.error("--teams must be at least 1")
    if not 1 <= args.problems <= 26:
        parser.error("--problems must be between 1 and 26")
    if args.duration < 1:
        parser.error("--duration must be at least 1")

    output_path = args.output
    if output_path is None:
        output_path = str(Path("samples") / "contest_demo.log")

    lines = generate_sample_script(args.seed, args.teams, args.problems,
                                   args.duration, args.freeze, args.submissions)

    Path(output_path).parent.mkdir(parents=True, exist_ok=True)
    Path(output_path).write_text("\n".join(lines) + "\n", encoding="utf-8")

    n_subs = sum(1 for line in lines if line.startswith("SUBMIT"))
    print(f"✅ Generated demo log: {min(args.teams, len(TEAMS))} teams, {n_subs} submissions")
    print(f"📁 Saved to: {output_path}")


if __name__ == "__main__":
    main()
