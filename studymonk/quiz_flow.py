"""Generated-quiz workflow: selection, timed traversal, scoring and review.

A `QuizRun` is the state of one student's pass through the quiz wizard. It is
plain data plus transition methods; callers persist it with `to_document` /
`from_document` and pass the current time in explicitly so expiry can be
evaluated on every request.
"""
from __future__ import annotations

import dataclasses
import datetime as dt
import enum
import math
import typing as t

from studymonk.catalog import DEFAULT_PASSING_SCORE, QuizConfig

JsonDict = dict[str, t.Any]


class QuizGenerationError(ValueError):
    pass


class InvalidAnswer(ValueError):
    pass


class InvalidTransition(RuntimeError):
    pass


class Stage(str, enum.Enum):
    SELECTION = "selection"
    IN_PROGRESS = "in_progress"
    SCORE = "score"
    REVIEW = "review"


@dataclasses.dataclass(frozen=True)
class Option:
    text: str
    correct: bool

    def to_dict(self) -> JsonDict:
        return {"text": self.text, "correct": self.correct}

    @staticmethod
    def from_dict(data: JsonDict) -> "Option":
        return Option(text=str(data.get("text") or ""), correct=bool(data.get("correct")))


@dataclasses.dataclass(frozen=True)
class Question:
    text: str
    options: list[Option]

    @property
    def correct_option(self) -> Option | None:
        for option in self.options:
            if option.correct:
                return option
        return None

    def to_dict(self) -> JsonDict:
        return {"text": self.text, "options": [o.to_dict() for o in self.options]}

    @staticmethod
    def from_dict(data: JsonDict) -> "Question":
        return Question(
            text=str(data.get("text") or ""),
            options=[Option.from_dict(o) for o in data.get("options") or []],
        )


@dataclasses.dataclass(frozen=True)
class UserAnswer:
    question_index: int
    selected_option: Option
    is_correct: bool

    def to_dict(self, question: Question | None = None) -> JsonDict:
        out: JsonDict = {
            "questionIndex": self.question_index,
            "selectedOption": self.selected_option.to_dict(),
            "isCorrect": self.is_correct,
        }
        if question is not None:
            out["question"] = question.to_dict()
        return out

    @staticmethod
    def from_dict(data: JsonDict) -> "UserAnswer":
        return UserAnswer(
            question_index=int(data.get("questionIndex") or 0),
            selected_option=Option.from_dict(data.get("selectedOption") or {}),
            is_correct=bool(data.get("isCorrect")),
        )


@dataclasses.dataclass(frozen=True)
class QuizStats:
    total_questions: int
    correct_answers: int
    wrong_answers: int
    percentage: int
    time_taken: int
    passed: bool
    passing_score: int

    def to_dict(self) -> JsonDict:
        return {
            "totalQuestions": self.total_questions,
            "correctAnswers": self.correct_answers,
            "wrongAnswers": self.wrong_answers,
            "percentage": self.percentage,
            "timeTaken": self.time_taken,
            "passed": self.passed,
            "passingScore": self.passing_score,
        }


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def percentage(correct: int, total: int) -> int:
    if total <= 0:
        return 0
    return round_half_up(correct / total * 100)


def format_time(seconds: int) -> str:
    seconds = max(0, int(seconds))
    return f"{seconds // 60}:{seconds % 60:02d}"


def as_utc(value: dt.datetime | None) -> dt.datetime | None:
    # Mongo hands back naive datetimes unless the client is tz aware
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=dt.timezone.utc)
    return value


def process_generated_quiz(payload: t.Any, question_count: int) -> list[Question]:
    """Turn a `/ai/generate-quiz` reply into scored questions.

    An option is correct when its text equals the item's `answer`; only the
    first `question_count` items are kept.
    """
    items = payload.get("quiz") if isinstance(payload, dict) else None
    if not isinstance(items, list):
        raise QuizGenerationError("Failed to load quiz questions.")

    questions: list[Question] = []
    for item in items[: max(0, int(question_count))]:
        if not isinstance(item, dict):
            continue
        answer = item.get("answer")
        options = [
            Option(text=str(opt), correct=opt == answer)
            for opt in item.get("options") or []
        ]
        questions.append(Question(text=str(item.get("question") or ""), options=options))

    if not questions:
        raise QuizGenerationError("Failed to load quiz questions.")
    return questions


@dataclasses.dataclass
class QuizRun:
    user_id: str
    config: QuizConfig | None = None
    stage: Stage = Stage.SELECTION
    questions: list[Question] = dataclasses.field(default_factory=list)
    current_index: int = 0
    score: int = 0
    user_answers: list[UserAnswer] = dataclasses.field(default_factory=list)
    started_at: dt.datetime | None = None
    completed_at: dt.datetime | None = None
    error: str | None = None
    attempt_id: str | None = None
    insights: t.Any = None
    run_id: str | None = None
    version: int = 0

    def _require(self, *stages: Stage) -> None:
        if self.stage not in stages:
            allowed = ", ".join(s.value for s in stages)
            raise InvalidTransition(f"Quiz is in stage '{self.stage.value}', expected one of: {allowed}")

    @property
    def time_limit_seconds(self) -> int:
        return self.config.time_limit_seconds if self.config else 0

    @property
    def passing_score(self) -> int:
        return self.config.passing_score if self.config else DEFAULT_PASSING_SCORE

    @property
    def current_question(self) -> Question | None:
        if self.stage is not Stage.IN_PROGRESS:
            return None
        if 0 <= self.current_index < len(self.questions):
            return self.questions[self.current_index]
        return None

    def begin(self, questions: list[Question], now: dt.datetime) -> None:
        self._require(Stage.SELECTION)
        if self.config is None:
            raise InvalidTransition("Choose a subject, difficulty and question count first")
        if not questions:
            raise QuizGenerationError("Failed to load quiz questions.")
        self.questions = list(questions)
        self.current_index = 0
        self.score = 0
        self.user_answers = []
        self.started_at = now
        self.completed_at = None
        self.error = None
        self.attempt_id = None
        self.insights = None
        self.stage = Stage.IN_PROGRESS

    def fail(self, message: str) -> None:
        self._require(Stage.SELECTION)
        self.error = message

    def elapsed_seconds(self, now: dt.datetime) -> int:
        start = as_utc(self.started_at)
        if start is None:
            return 0
        end = as_utc(self.completed_at) or now
        return max(0, int((end - start).total_seconds()))

    def time_left(self, now: dt.datetime) -> int:
        if self.stage is not Stage.IN_PROGRESS:
            return 0
        return max(0, self.time_limit_seconds - self.elapsed_seconds(now))

    def is_expired(self, now: dt.datetime) -> bool:
        return self.stage is Stage.IN_PROGRESS and self.time_left(now) == 0

    def ran_out_of_time(self) -> bool:
        """True once the run was completed by its timer rather than by the last answer."""
        if self.stage not in (Stage.SCORE, Stage.REVIEW) or self.completed_at is None:
            return False
        return self.elapsed_seconds(self.completed_at) >= self.time_limit_seconds

    def answer(self, option_index: int, now: dt.datetime) -> UserAnswer | None:
        self._require(Stage.IN_PROGRESS)
        if self.is_expired(now):
            self.complete(now)
            return None

        question = self.questions[self.current_index]
        if not 0 <= option_index < len(question.options):
            raise InvalidAnswer(f"Option {option_index} does not exist for question {self.current_index + 1}")

        selected = question.options[option_index]
        user_answer = UserAnswer(
            question_index=self.current_index,
            selected_option=selected,
            is_correct=selected.correct,
        )
        self.user_answers.append(user_answer)
        if selected.correct:
            self.score += 1

        if self.current_index < len(self.questions) - 1:
            self.current_index += 1
        else:
            self.complete(now)
        return user_answer

    def complete(self, now: dt.datetime) -> None:
        self._require(Stage.IN_PROGRESS)
        self.completed_at = now
        self.stage = Stage.SCORE

    def show_review(self) -> None:
        self._require(Stage.SCORE, Stage.REVIEW)
        self.stage = Stage.REVIEW

    def show_score(self) -> None:
        self._require(Stage.SCORE, Stage.REVIEW)
        self.stage = Stage.SCORE

    def retry(self) -> None:
        self._require(Stage.SCORE, Stage.REVIEW, Stage.SELECTION)
        if self.config is None:
            raise InvalidTransition("No previous quiz settings to retry")
        self._clear()

    def reset(self) -> None:
        self._clear()
        self.config = None

    def _clear(self) -> None:
        self.stage = Stage.SELECTION
        self.questions = []
        self.current_index = 0
        self.score = 0
        self.user_answers = []
        self.started_at = None
        self.completed_at = None
        self.error = None
        self.attempt_id = None
        self.insights = None

    def time_taken_minutes(self, now: dt.datetime) -> int:
        return round_half_up(self.elapsed_seconds(now) / 60)

    def stats(self, now: dt.datetime) -> QuizStats:
        total = len(self.questions)
        pct = percentage(self.score, total)
        return QuizStats(
            total_questions=total,
            correct_answers=self.score,
            wrong_answers=total - self.score,
            percentage=pct,
            time_taken=self.time_taken_minutes(now),
            passed=pct >= self.passing_score,
            passing_score=self.passing_score,
        )

    def attempt_payload(self, now: dt.datetime) -> JsonDict:
        if self.config is None:
            raise InvalidTransition("Quiz has no settings to save")
        total = len(self.questions)
        return {
            **self.config.to_dict(),
            "questions": [q.to_dict() for q in self.questions],
            "score": {
                "correct": self.score,
                "total": total,
                "percentage": percentage(self.score, total),
            },
            "timeTaken": self.time_taken_minutes(now),
            "userAnswers": [
                ua.to_dict(self.questions[ua.question_index]) for ua in self.user_answers
            ],
        }

    def review(self) -> list[JsonDict]:
        by_index = {ua.question_index: ua for ua in self.user_answers}
        entries: list[JsonDict] = []
        for index, question in enumerate(self.questions):
            ua = by_index.get(index)
            correct = question.correct_option
            entries.append(
                {
                    "index": index,
                    "question": question.text,
                    "options": [
                        {
                            "text": option.text,
                            "isCorrect": option.correct,
                            "isUserAnswer": ua is not None and ua.selected_option == option,
                        }
                        for option in question.options
                    ],
                    "userAnswer": ua.selected_option.text if ua else None,
                    "isCorrect": bool(ua and ua.is_correct),
                    "correctOption": correct.text if correct else None,
                }
            )
        return entries

    def view(self, now: dt.datetime) -> JsonDict:
        out: JsonDict = {
            "runID": self.run_id,
            "stage": self.stage.value,
            "config": self.config.to_dict() if self.config else None,
            "error": self.error,
        }
        if self.stage is Stage.IN_PROGRESS:
            question = self.current_question
            left = self.time_left(now)
            out.update(
                {
                    "currentIndex": self.current_index,
                    "totalQuestions": len(self.questions),
                    "question": {
                        "text": question.text,
                        "options": [o.text for o in question.options],
                    } if question else None,
                    "timeLeft": left,
                    "timeLeftDisplay": format_time(left),
                }
            )
        elif self.stage in (Stage.SCORE, Stage.REVIEW):
            out["stats"] = self.stats(now).to_dict()
            out["attemptId"] = self.attempt_id
            out["insights"] = self.insights
            if self.stage is Stage.REVIEW:
                out["review"] = self.review()
        return out

    def to_document(self) -> JsonDict:
        return {
            "userId": self.user_id,
            "stage": self.stage.value,
            "config": self.config.to_dict() if self.config else None,
            "questions": [q.to_dict() for q in self.questions],
            "currentIndex": self.current_index,
            "score": self.score,
            "userAnswers": [ua.to_dict() for ua in self.user_answers],
            "startedAt": self.started_at,
            "completedAt": self.completed_at,
            "error": self.error,
            "attemptId": self.attempt_id,
            "insights": self.insights,
            "version": self.version,
        }

    @staticmethod
    def from_document(doc: JsonDict) -> "QuizRun":
        config_data = doc.get("config")
        return QuizRun(
            run_id=str(doc["_id"]) if doc.get("_id") is not None else None,
            user_id=str(doc.get("userId") or ""),
            config=QuizConfig.from_dict(config_data) if config_data else None,
            stage=Stage(doc.get("stage") or Stage.SELECTION.value),
            questions=[Question.from_dict(q) for q in doc.get("questions") or []],
            current_index=int(doc.get("currentIndex") or 0),
            score=int(doc.get("score") or 0),
            user_answers=[UserAnswer.from_dict(a) for a in doc.get("userAnswers") or []],
            started_at=as_utc(doc.get("startedAt")),
            completed_at=as_utc(doc.get("completedAt")),
            error=doc.get("error"),
            attempt_id=doc.get("attemptId"),
            insights=doc.get("insights"),
            version=int(doc.get("version") or 0),
        )
