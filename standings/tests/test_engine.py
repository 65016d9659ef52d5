import unittest

from standings.core import Verdict
from standings.engine import ContestEngine, RankChange, Result

AC = Verdict.ACCEPTED
WA = Verdict.WRONG_ANSWER


def started_engine(teams=("alpha", "bravo", "charlie"), problems=3):
    engine = ContestEngine()
    for name in teams:
        engine.add_team(name)
    engine.start(300, problems)
    return engine


class TestSetup(unittest.TestCase):

    def test_add_team_results(self):
        engine = ContestEngine()
        self.assertIs(engine.add_team("alpha"), Result.OK)
        self.assertIs(engine.add_team("alpha"), Result.DUPLICATED_TEAM)
        self.assertIs(engine.start(300, 2), Result.OK)
        self.assertIs(engine.add_team("bravo"), Result.ALREADY_STARTED)
        self.assertNotIn("bravo", engine.teams)

    def test_start_twice(self):
        engine = started_engine()
        self.assertIs(engine.start(100, 5), Result.ALREADY_STARTED)
        self.assertEqual(engine.duration, 300)
        self.assertEqual(engine.problem_ids, ["A", "B", "C"])

    def test_submit_validation(self):
        engine = ContestEngine()
        engine.add_team("alpha")
        self.assertIs(engine.submit("A", "alpha", AC, 1), Result.NOT_STARTED)
        engine.start(300, 2)
        self.assertIs(engine.submit("A", "ghost", AC, 1), Result.TEAM_NOT_FOUND)
        self.assertIs(engine.submit("Z", "alpha", AC, 1), Result.PROBLEM_NOT_FOUND)
        self.assertEqual(engine.teams["alpha"].submissions, [])


class TestFlushAndQueries(unittest.TestCase):

    def setUp(self):
        self.engine = started_engine(("zulu", "alpha", "mike"))

    def test_rank_before_flush_is_insertion_order(self):
        self.engine.submit("A", "mike", AC, 5)
        answer = self.engine.query_ranking("zulu")
        self.assertIs(answer.result, Result.OK)
        self.assertEqual(answer.rank, 1)
        self.assertFalse(answer.frozen)
        self.assertEqual(self.engine.query_ranking("mike").rank, 3)

    def test_rank_after_flush_is_snapshot(self):
        self.engine.submit("A", "mike", AC, 5)
        self.engine.flush()
        self.assertEqual(self.engine.query_ranking("mike").rank, 1)
        self.assertEqual(self.engine.query_ranking("alpha").rank, 2)
        self.assertEqual(self.engine.query_ranking("zulu").rank, 3)

        # Not recomputed until the next flush
        self.engine.submit("A", "zulu", AC, 1)
        self.engine.submit("B", "zulu", AC, 2)
        self.assertEqual(self.engine.query_ranking("zulu").rank, 3)
        self.engine.flush()
        self.assertEqual(self.engine.query_ranking("zulu").rank, 1)

    def test_query_ranking_unknown_team(self):
        self.assertIs(self.engine.query_ranking("ghost").result, Result.TEAM_NOT_FOUND)

    def test_query_ranking_warns_when_frozen(self):
        self.engine.freeze()
        self.assertTrue(self.engine.query_ranking("alpha").frozen)

    def test_query_submission_filters(self):
        self.engine.submit("A", "alpha", WA, 1)
        self.engine.submit("B", "alpha", AC, 2)
        self.engine.submit("A", "alpha", AC, 3)
        self.engine.submit("C", "alpha", WA, 4)

        latest = self.engine.query_submission("alpha")
        self.assertEqual((latest.submission.problem, latest.submission.time), ("C", 4))

        by_problem = self.engine.query_submission("alpha", "A")
        self.assertEqual(by_problem.submission.time, 3)

        by_verdict = self.engine.query_submission("alpha", None, WA)
        self.assertEqual(by_verdict.submission.time, 4)

        both = self.engine.query_submission("alpha", "A", WA)
        self.assertEqual(both.submission.time, 1)

        none = self.engine.query_submission("alpha", "B", WA)
        self.assertIs(none.result, Result.NO_SUBMISSION)
        self.assertIsNone(none.submission)

    def test_query_submission_unknown_team(self):
        self.assertIs(self.engine.query_submission("ghost").result, Result.TEAM_NOT_FOUND)


class TestFreeze(unittest.TestCase):

    def test_freeze_twice(self):
        engine = started_engine()
        self.assertIs(engine.freeze(), Result.OK)
        self.assertIs(engine.freeze(), Result.ALREADY_FROZEN)

    def test_freeze_snapshots_unsolved_wrong_attempts(self):
        engine = started_engine()
        engine.submit("A", "alpha", WA, 1)
        engine.submit("A", "alpha", WA, 2)
        engine.submit("B", "alpha", WA, 3)
        engine.submit("B", "alpha", AC, 4)
        engine.freeze()

        problems = engine.teams["alpha"].problems
        self.assertEqual(problems["A"].wrong_before_freeze, 2)
        self.assertEqual(problems["B"].wrong_before_freeze, 0)

    def test_frozen_submit_defers_accounting(self):
        engine = started_engine()
        engine.freeze()
        engine.submit("B", "bravo", WA, 250)
        engine.submit("B", "bravo", AC, 260)

        status = engine.teams["bravo"].problems["B"]
        self.assertEqual(len(status.pending), 2)
        self.assertFalse(status.solved)
        self.assertEqual(status.wrong_attempts, 0)
        self.assertEqual(engine.pending_count(), 2)
        self.assertEqual(engine.rank()[0].name, "alpha")


class TestScroll(unittest.TestCase):

    def test_scroll_requires_freeze(self):
        engine = started_engine()
        result, report = engine.scroll()
        self.assertIs(result, Result.NOT_FROZEN)
        self.assertIsNone(report)

    def test_scroll_resolves_pending(self):
        engine = started_engine()
        engine.submit("B", "bravo", WA, 10)
        engine.freeze()
        engine.submit("B", "bravo", WA, 250)
        engine.submit("B", "bravo", AC, 260)

        result, report = engine.scroll()

        self.assertIs(result, Result.OK)
        status = engine.teams["bravo"].problems["B"]
        self.assertTrue(status.solved)
        self.assertEqual(status.wrong_attempts, 2)  # 1 before freeze + 1 frozen
        self.assertEqual(status.solve_time, 260)
        self.assertEqual(engine.teams["bravo"].penalty, 40 + 260)
        self.assertEqual(engine.pending_count(), 0)
        self.assertFalse(engine.frozen)

        self.assertEqual(report.before[0].name, "alpha")
        self.assertEqual(report.before[1].cells, (".", "-1/2", "."))
        self.assertEqual(report.after[0].name, "bravo")
        self.assertEqual(report.after[0].cells, (".", "+2", "."))
        self.assertEqual(report.changes, [RankChange("bravo", "alpha", 1, 300)])

    def test_scroll_order_worst_first_and_events(self):
        engine = started_engine(("alpha", "bravo", "charlie"))
        engine.submit("A", "alpha", AC, 10)
        engine.submit("B", "alpha", AC, 20)
        engine.submit("A", "bravo", AC, 15)
        engine.freeze()
        # charlie (last) reaches two solves, but slower than alpha
        engine.submit("A", "charlie", AC, 200)
        engine.submit("B", "charlie", AC, 201)
        # bravo gets a rejection only
        engine.submit("B", "bravo", WA, 210)

        result, report = engine.scroll()

        self.assertIs(result, Result.OK)
        self.assertEqual([r.name for r in report.before], ["alpha", "bravo", "charlie"])
        # charlie A: 1 solve, 200 > bravo's 15 -> stays last, no event.
        # charlie B: 2 solves, 401 > alpha's 30 -> passes bravo only.
        self.assertEqual(report.changes, [RankChange("charlie", "bravo", 2, 401)])
        self.assertEqual([r.name for r in report.after], ["alpha", "charlie", "bravo"])
        self.assertEqual(report.after[2].cells, ("+", "-1", "."))
        self.assertEqual(engine.query_ranking("charlie").rank, 2)

    def test_event_names_team_directly_below_new_position(self):
        engine = started_engine(("alpha", "bravo", "charlie", "delta"))
        engine.submit("A", "alpha", AC, 50)
        engine.submit("A", "bravo", AC, 60)
        engine.submit("A", "charlie", AC, 70)
        engine.freeze()
        engine.submit("A", "delta", AC, 100)
        engine.submit("B", "delta", AC, 110)

        _, report = engine.scroll()

        # delta: first reveal ties on count, worse penalty -> still last;
        # second reveal jumps over all three at once.
        self.assertEqual(report.changes, [RankChange("delta", "alpha", 2, 210)])
        self.assertEqual(report.after[0].name, "delta")

    def test_event_names_last_team_when_climber_lands_above_it(self):
        engine = started_engine(("alpha", "bravo"))
        engine.submit("A", "alpha", AC, 50)
        engine.freeze()
        engine.submit("A", "bravo", AC, 10)

        _, report = engine.scroll()

        self.assertEqual(report.changes, [RankChange("bravo", "alpha", 1, 10)])
        self.assertIsInstance(report.changes[0].overtaken, str)

    def test_scroll_without_pending_prints_same_board(self):
        engine = started_engine()
        engine.submit("A", "charlie", AC, 10)
        engine.freeze()
        result, report = engine.scroll()
        self.assertIs(result, Result.OK)
        self.assertEqual(report.changes, [])
        self.assertEqual(report.before, report.after)
        self.assertFalse(engine.frozen)
        self.assertEqual(engine.query_ranking("charlie").rank, 1)

    def test_refreeze_after_scroll(self):
        engine = started_engine()
        engine.freeze()
        engine.submit("A", "alpha", WA, 100)
        engine.scroll()
        self.assertEqual(engine.teams["alpha"].problems["A"].wrong_attempts, 1)

        self.assertIs(engine.freeze(), Result.OK)
        self.assertEqual(engine.teams["alpha"].problems["A"].wrong_before_freeze, 1)
        engine.submit("A", "alpha", AC, 150)
        engine.scroll()
        status = engine.teams["alpha"].problems["A"]
        self.assertTrue(status.solved)
        self.assertEqual(status.wrong_attempts, 1)
        self.assertEqual(engine.teams["alpha"].penalty, 170)

    def test_scroll_reveals_each_problem_once(self):
        engine = started_engine(("alpha", "bravo"), problems=4)
        engine.freeze()
        for i, problem in enumerate("ABCD"):
            engine.submit(problem, "alpha", WA, 10 + i)
            engine.submit(problem, "bravo", AC if i % 2 else WA, 20 + i)

        _, report = engine.scroll()

        self.assertEqual(engine.pending_count(), 0)
        for team in engine.teams.values():
            for status in team.problems.values():
                self.assertEqual(status.pending, [])
        self.assertEqual(engine.teams["bravo"].solved_count, 2)
        self.assertEqual(engine.teams["alpha"].problems["D"].wrong_attempts, 1)
        self.assertEqual(report.after[0].name, "bravo")


if __name__ == '__main__':
    unittest.main()
