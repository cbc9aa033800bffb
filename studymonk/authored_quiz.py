from __future__ import annotations

import dataclasses
import datetime as dt
import typing as t

from studymonk.quiz_flow import InvalidAnswer, InvalidTransition, as_utc, format_time, round_half_up

JsonDict = dict[str, t.Any]

DEFAULT_POINTS = 10


@dataclasses.dataclass
class AuthoredRun:
    """A student's pass through an admin-published quiz.

    Unlike the generated wizard, answers can be revisited and changed until
    the quiz is submitted.
    """

    user_id: str
    quiz: JsonDict
    answers: dict[int, int] = dataclasses.field(default_factory=dict)
    current_question: int = 0
    started: bool = False
    completed: bool = False
    started_at: dt.datetime | None = None
    results: JsonDict | None = None
    run_id: str | None = None
    version: int = 0

    @property
    def quiz_id(self) -> str:
        return str(self.quiz.get("_id") or self.quiz.get("id") or "")

    @property
    def questions(self) -> list[JsonDict]:
        return list(self.quiz.get("questions") or [])

    @property
    def time_limit_seconds(self) -> int:
        try:
            return int(float(self.quiz.get("timeLimit") or 0) * 60)
        except (TypeError, ValueError):
            return 0

    def start(self, now: dt.datetime) -> None:
        if self.completed:
            raise InvalidTransition("Quiz already submitted")
        if self.started:
            return
        self.started = True
        self.started_at = now

    def _require_active(self, now: dt.datetime | None = None) -> None:
        if not self.started:
            raise InvalidTransition("Quiz has not been started")
        if self.completed:
            raise InvalidTransition("Quiz already submitted")
        if now is not None and self.is_expired(now):
            raise InvalidTransition("Time is up for this quiz")

    def select(self, question_index: int, option_index: int, now: dt.datetime) -> None:
        self._require_active(now)
        questions = self.questions
        if not 0 <= question_index < len(questions):
            raise InvalidAnswer(f"Question {question_index} does not exist")
        options = questions[question_index].get("options") or []
        if not 0 <= option_index < len(options):
            raise InvalidAnswer(f"Option {option_index} does not exist for question {question_index + 1}")
        self.answers[question_index] = option_index

    def go_to(self, index: int) -> int:
        self._require_active()
        last = max(0, len(self.questions) - 1)
        self.current_question = min(max(0, int(index)), last)
        return self.current_question

    def next(self) -> int:
        return self.go_to(self.current_question + 1)

    def previous(self) -> int:
        return self.go_to(self.current_question - 1)

    def progress_percentage(self) -> float:
        total = len(self.questions)
        if not total:
            return 0.0
        return len(self.answers) / total * 100

    def elapsed_seconds(self, now: dt.datetime) -> int:
        start = as_utc(self.started_at)
        if start is None:
            return 0
        return max(0, int((now - start).total_seconds()))

    def time_left(self, now: dt.datetime) -> int:
        if not self.started or self.completed:
            return 0
        return max(0, self.time_limit_seconds - self.elapsed_seconds(now))

    def is_expired(self, now: dt.datetime) -> bool:
        # quizzes published without a time limit never expire
        if self.time_limit_seconds <= 0:
            return False
        return self.started and not self.completed and self.time_left(now) == 0

    def time_taken_minutes(self, now: dt.datetime) -> int:
        return round_half_up(self.elapsed_seconds(now) / 60)

    def _is_correct(self, index: int, question: JsonDict) -> bool:
        selected = self.answers.get(index)
        if selected is None:
            return False
        options = question.get("options") or []
        if not 0 <= selected < len(options):
            return False
        return bool(options[selected].get("isCorrect"))

    def formatted_answers(self) -> list[JsonDict]:
        out: list[JsonDict] = []
        for index, question in enumerate(self.questions):
            correct = self._is_correct(index, question)
            out.append(
                {
                    "questionId": question.get("_id") or index,
                    "selectedOption": self.answers.get(index, -1),
                    "isCorrect": correct,
                    "points": (question.get("points") or DEFAULT_POINTS) if correct else 0,
                    "timeTaken": 0,
                }
            )
        return out

    def finish(self, results: JsonDict | None) -> None:
        self._require_active()
        self.results = results or {}
        self.completed = True

    def view(self, now: dt.datetime) -> JsonDict:
        questions = self.questions
        left = self.time_left(now)
        out: JsonDict = {
            "runID": self.run_id,
            "quizId": self.quiz_id,
            "title": self.quiz.get("title"),
            "started": self.started,
            "completed": self.completed,
            "currentQuestion": self.current_question,
            "totalQuestions": len(questions),
            "answers": {str(k): v for k, v in self.answers.items()},
            "progress": self.progress_percentage(),
            "timeLeft": left,
            "timeLeftDisplay": format_time(left),
        }
        if self.started and not self.completed and questions:
            q = questions[self.current_question]
            out["question"] = {
                "text": q.get("question") or q.get("text"),
                "options": [o.get("text") for o in q.get("options") or []],
                "points": q.get("points") or DEFAULT_POINTS,
            }
        if self.completed:
            out["results"] = self.results
        return out

    def to_document(self) -> JsonDict:
        return {
            "userId": self.user_id,
            "quiz": self.quiz,
            "answers": {str(k): v for k, v in self.answers.items()},
            "currentQuestion": self.current_question,
            "started": self.started,
            "completed": self.completed,
            "startedAt": self.started_at,
            "results": self.results,
            "version": self.version,
        }

    @staticmethod
    def from_document(doc: JsonDict) -> "AuthoredRun":
        return AuthoredRun(
            run_id=str(doc["_id"]) if doc.get("_id") is not None else None,
            user_id=str(doc.get("userId") or ""),
            quiz=t.cast(JsonDict, doc.get("quiz") or {}),
            answers={int(k): int(v) for k, v in (doc.get("answers") or {}).items()},
            current_question=int(doc.get("currentQuestion") or 0),
            started=bool(doc.get("started")),
            completed=bool(doc.get("completed")),
            started_at=as_utc(doc.get("startedAt")),
            results=doc.get("results"),
            version=int(doc.get("version") or 0),
        )
