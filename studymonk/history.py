from __future__ import annotations

import datetime as dt
import typing as t

from studymonk.quiz_flow import round_half_up

JsonDict = dict[str, t.Any]

EMPTY_SUMMARY: JsonDict = {
    "totalQuizzes": 0,
    "averageScore": 0,
    "passRate": 0,
    "totalTime": 0,
    "bestScore": 0,
    "streak": 0,
}


def _parse_datetime(value: t.Any) -> dt.datetime | None:
    if isinstance(value, dt.datetime):
        return value
    if not isinstance(value, str) or not value:
        return None
    try:
        return dt.datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def score_band(percentage: float) -> str:
    if percentage >= 80:
        return "high"
    if percentage >= 60:
        return "medium"
    return "low"


def format_quiz_attempt(attempt: JsonDict) -> JsonDict:
    score = t.cast(JsonDict, attempt.get("score") or {})
    correct = score.get("correct", 0)
    total = score.get("total", 0)
    pct = score.get("percentage", 0) or 0
    completed = _parse_datetime(attempt.get("completedAt"))
    passed = bool(attempt.get("passed"))
    return {
        **attempt,
        "formattedDate": completed.strftime("%Y-%m-%d") if completed else "",
        "formattedTime": completed.strftime("%H:%M:%S") if completed else "",
        "duration": f"{attempt.get('timeTaken', 0)} min",
        "scoreDisplay": f"{correct}/{total} ({pct}%)",
        "status": "Passed" if passed else "Failed",
        "scoreBand": score_band(float(pct)),
    }


def quiz_summary(stats: JsonDict) -> JsonDict:
    data = t.cast(JsonDict, stats.get("data") or {})
    overview = t.cast(JsonDict, data.get("overview") or {})
    return {
        "totalQuizzes": overview.get("totalAttempts", 0),
        "averageScore": round_half_up(float(overview.get("averageScore") or 0)),
        "passRate": overview.get("passRate", 0),
        "totalTime": overview.get("totalTimeTaken", 0),
        "bestScore": overview.get("bestScore", 0),
        "streak": data.get("learningStreak", 0),
    }


def stat_cards(stats: JsonDict) -> list[JsonDict]:
    data = t.cast(JsonDict, stats.get("data") or {})
    overview = data.get("overview")
    if not overview:
        return []
    return [
        {"title": "Total Quizzes", "value": overview.get("totalAttempts", 0)},
        {"title": "Average Score", "value": f"{round_half_up(float(overview.get('averageScore') or 0))}%"},
        {"title": "Pass Rate", "value": f"{overview.get('passRate', 0)}%"},
        {"title": "Learning Streak", "value": f"{data.get('learningStreak', 0)} days"},
    ]
