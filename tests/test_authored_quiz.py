import unittest
import datetime as dt
import os
import sys

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from studymonk.authored_quiz import AuthoredRun
from studymonk.quiz_flow import InvalidAnswer, InvalidTransition

NOW = dt.datetime(2024, 3, 1, 9, 0, tzinfo=dt.timezone.utc)


def make_quiz(time_limit=5):
    return {
        "_id": "quiz-1",
        "title": "Sorting",
        "timeLimit": time_limit,
        "questions": [
            {
                "_id": "s1",
                "question": "Stable sort?",
                "options": [{"text": "merge", "isCorrect": True}, {"text": "heap", "isCorrect": False}],
                "points": 4,
            },
            {
                "question": "Quicksort worst case?",
                "options": [{"text": "n log n", "isCorrect": False}, {"text": "n^2", "isCorrect": True}],
            },
            {
                "_id": "s3",
                "question": "Counting sort needs?",
                "options": [{"text": "bounded keys", "isCorrect": True}, {"text": "comparisons", "isCorrect": False}],
            },
        ],
    }


class TestAuthoredRun(unittest.TestCase):
    def setUp(self):
        self.run = AuthoredRun(user_id="u1", quiz=make_quiz())

    def test_select_before_start(self):
        with self.assertRaises(InvalidTransition):
            self.run.select(0, 0, NOW)

    def test_answers_can_change(self):
        self.run.start(NOW)
        self.run.select(0, 1, NOW)
        self.run.select(0, 0, NOW)

        self.assertEqual(self.run.answers, {0: 0})
        self.assertAlmostEqual(self.run.progress_percentage(), 100 / 3)

        with self.assertRaises(InvalidAnswer):
            self.run.select(3, 0, NOW)
        with self.assertRaises(InvalidAnswer):
            self.run.select(1, 2, NOW)

    def test_navigation_is_clamped(self):
        self.run.start(NOW)
        self.assertEqual(self.run.previous(), 0)
        self.assertEqual(self.run.next(), 1)
        self.assertEqual(self.run.go_to(10), 2)
        self.assertEqual(self.run.next(), 2)
        self.assertEqual(self.run.go_to(-3), 0)

    def test_formatted_answers(self):
        self.run.start(NOW)
        self.run.select(0, 0, NOW)
        self.run.select(1, 1, NOW)
        self.run.select(2, 1, NOW)

        answers = self.run.formatted_answers()

        self.assertEqual(answers[0], {"questionId": "s1", "selectedOption": 0, "isCorrect": True, "points": 4, "timeTaken": 0})
        # no _id falls back to the index, no points falls back to 10
        self.assertEqual(answers[1]["questionId"], 1)
        self.assertEqual(answers[1]["points"], 10)
        self.assertEqual(answers[2]["points"], 0)
        self.assertFalse(answers[2]["isCorrect"])

    def test_unanswered_question(self):
        self.run.start(NOW)
        answers = self.run.formatted_answers()
        self.assertEqual([a["selectedOption"] for a in answers], [-1, -1, -1])
        self.assertTrue(all(a["points"] == 0 for a in answers))

    def test_timer(self):
        self.run.start(NOW)

        self.assertEqual(self.run.time_left(NOW + dt.timedelta(minutes=2)), 180)
        self.assertEqual(self.run.time_taken_minutes(NOW + dt.timedelta(seconds=150)), 3)
        self.assertFalse(self.run.is_expired(NOW + dt.timedelta(minutes=4)))
        self.assertTrue(self.run.is_expired(NOW + dt.timedelta(minutes=5)))

    def test_no_answers_after_time_is_up(self):
        self.run.start(NOW)
        self.run.select(0, 0, NOW + dt.timedelta(minutes=4))

        with self.assertRaises(InvalidTransition):
            self.run.select(0, 1, NOW + dt.timedelta(minutes=5))
        self.assertEqual(self.run.answers, {0: 0})

        # the late run can still be submitted
        self.run.finish({"passed": False})
        self.assertTrue(self.run.completed)

    def test_no_time_limit_never_expires(self):
        run = AuthoredRun(user_id="u1", quiz=make_quiz(time_limit=0))
        run.start(NOW)
        self.assertFalse(run.is_expired(NOW + dt.timedelta(days=1)))

    def test_finish(self):
        self.run.start(NOW)
        self.run.finish({"passed": True, "score": 14})

        self.assertTrue(self.run.completed)
        view = self.run.view(NOW)
        self.assertEqual(view["results"], {"passed": True, "score": 14})
        self.assertNotIn("question", view)
        self.assertEqual(view["timeLeft"], 0)

        with self.assertRaises(InvalidTransition):
            self.run.select(0, 0, NOW)
        with self.assertRaises(InvalidTransition):
            self.run.start(NOW)

    def test_document(self):
        self.run.start(NOW)
        self.run.select(2, 0, NOW)
        self.run.go_to(2)
        self.run.version = 3
        doc = self.run.to_document()
        doc["_id"] = "abc"

        restored = AuthoredRun.from_document(doc)

        self.assertEqual(restored.answers, {2: 0})
        self.assertEqual(restored.current_question, 2)
        self.assertEqual(restored.quiz_id, "quiz-1")
        self.assertEqual(restored.version, 3)
        self.assertEqual(restored.view(NOW)["question"]["text"], "Counting sort needs?")


if __name__ == "__main__":
    unittest.main()
