import unittest
import os
import sys

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from studymonk import history


class TestHistory(unittest.TestCase):
    def test_format_quiz_attempt(self):
        attempt = {
            "_id": "a1",
            "score": {"correct": 5, "total": 10, "percentage": 50},
            "passed": False,
            "timeTaken": 7,
            "completedAt": "2024-02-03T04:05:06.000Z",
        }

        formatted = history.format_quiz_attempt(attempt)

        self.assertEqual(formatted["_id"], "a1")
        self.assertEqual(formatted["formattedDate"], "2024-02-03")
        self.assertEqual(formatted["formattedTime"], "04:05:06")
        self.assertEqual(formatted["duration"], "7 min")
        self.assertEqual(formatted["scoreDisplay"], "5/10 (50%)")
        self.assertEqual(formatted["status"], "Failed")
        self.assertEqual(formatted["scoreBand"], "low")

    def test_missing_date(self):
        formatted = history.format_quiz_attempt({"passed": True})
        self.assertEqual(formatted["formattedDate"], "")
        self.assertEqual(formatted["scoreDisplay"], "0/0 (0%)")
        self.assertEqual(formatted["status"], "Passed")

    def test_score_band(self):
        self.assertEqual(history.score_band(80), "high")
        self.assertEqual(history.score_band(79.9), "medium")
        self.assertEqual(history.score_band(60), "medium")
        self.assertEqual(history.score_band(59), "low")

    def test_quiz_summary(self):
        stats = {
            "success": True,
            "data": {
                "overview": {
                    "totalAttempts": 12,
                    "averageScore": 72.5,
                    "passRate": 75,
                    "totalTimeTaken": 140,
                    "bestScore": 95,
                },
                "learningStreak": 4,
            },
        }

        self.assertEqual(
            history.quiz_summary(stats),
            {"totalQuizzes": 12, "averageScore": 73, "passRate": 75, "totalTime": 140, "bestScore": 95, "streak": 4},
        )

        cards = history.stat_cards(stats)
        self.assertEqual([c["title"] for c in cards], ["Total Quizzes", "Average Score", "Pass Rate", "Learning Streak"])
        self.assertEqual(cards[1]["value"], "73%")
        self.assertEqual(cards[3]["value"], "4 days")

    def test_empty_stats(self):
        self.assertEqual(history.quiz_summary({}), history.EMPTY_SUMMARY)
        self.assertEqual(history.stat_cards({"data": {}}), [])


if __name__ == "__main__":
    unittest.main()
