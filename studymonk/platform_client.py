from __future__ import annotations

import json
import logging
import os
import time
import typing as t
import urllib.error
import urllib.parse
import urllib.request

JsonDict = dict[str, t.Any]

DEFAULT_API_URL = "https://study-monk-backend.onrender.com/api"

logger = logging.getLogger(__name__)


class PlatformError(RuntimeError):
    def __init__(self, status: int, message: str) -> None:
        super().__init__(message)
        self.status = status
        self.message = message


def _error_message(body: str | None, fallback: str) -> str:
    if not body:
        return fallback
    try:
        parsed = json.loads(body)
    except json.JSONDecodeError:
        return fallback
    if isinstance(parsed, dict):
        msg = parsed.get("error") or parsed.get("message")
        if isinstance(msg, str) and msg.strip():
            return msg.strip()
    return fallback


def _retry_after_seconds(value: str | None) -> float | None:
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        return None


class StudyPlatformClient:
    """Request/response contracts of the StudyMonk REST backend.

    The admin API serves published quizzes, study materials and
    notifications; the main API serves auth, AI features and quiz attempts.
    """

    def __init__(
        self,
        api_url: str | None = None,
        admin_api_url: str | None = None,
        timeout_s: float | None = None,
        max_attempts: int = 3,
    ) -> None:
        self.api_url = (api_url or os.environ.get("STUDY_API_URL") or DEFAULT_API_URL).rstrip("/")
        self.admin_api_url = (
            admin_api_url or os.environ.get("STUDY_ADMIN_API_URL") or self.api_url
        ).rstrip("/")
        self.timeout_s = float(timeout_s or os.environ.get("STUDY_API_TIMEOUT") or 30.0)
        self.max_attempts = max(1, int(max_attempts))

    def _url(self, path: str, *, admin: bool, params: JsonDict | None = None) -> str:
        base = self.admin_api_url if admin else self.api_url
        url = f"{base}/{path.lstrip('/')}"
        if params:
            clean = {k: v for k, v in params.items() if v is not None and v != ""}
            if clean:
                url += "?" + urllib.parse.urlencode(clean)
        return url

    def _open(
        self,
        method: str,
        path: str,
        *,
        admin: bool = False,
        token: str | None = None,
        params: JsonDict | None = None,
        body: JsonDict | None = None,
    ) -> tuple[bytes, t.Any]:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        data = json.dumps(body, ensure_ascii=False).encode("utf-8") if body is not None else None
        url = self._url(path, admin=admin, params=params)

        for attempt in range(self.max_attempts):
            req = urllib.request.Request(url, data=data, headers=headers, method=method)
            try:
                with urllib.request.urlopen(req, timeout=self.timeout_s) as resp:
                    return resp.read(), resp.headers
            except urllib.error.HTTPError as e:
                try:
                    err_body = e.read().decode("utf-8")
                except Exception:
                    err_body = None
                if e.code == 429 and attempt < self.max_attempts - 1:
                    delay = _retry_after_seconds(e.headers.get("Retry-After") if e.headers else None)
                    delay = delay or float(2 ** attempt)
                    logger.warning("%s %s rate limited, retrying in %.1fs", method, path, delay)
                    time.sleep(min(30.0, max(0.5, delay)))
                    continue
                message = _error_message(err_body, f"Server responded with {e.code}")
                logger.error("%s %s failed: %s %s", method, path, e.code, message)
                raise PlatformError(e.code, message) from e
            except urllib.error.URLError as e:
                logger.error("%s %s unreachable: %s", method, path, e.reason)
                raise PlatformError(503, f"Study platform unreachable: {e.reason}") from e

        raise PlatformError(429, "Too many requests")

    def _json(self, method: str, path: str, **kwargs: t.Any) -> JsonDict:
        raw, _ = self._open(method, path, **kwargs)
        if not raw:
            return {}
        try:
            return t.cast(JsonDict, json.loads(raw.decode("utf-8")))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise PlatformError(502, "Study platform returned invalid JSON") from e

    # auth

    def signup(self, name: str, email: str, password: str) -> JsonDict:
        return self._json("POST", "auth/signup", body={"name": name, "email": email, "password": password})

    def login(self, email: str, password: str) -> JsonDict:
        return self._json("POST", "auth/login", body={"email": email, "password": password})

    # AI

    def generate_quiz(self, topic: str, level: str, count: int) -> JsonDict:
        return self._json("POST", "ai/generate-quiz", body={"topic": topic, "level": level, "count": count})

    def chat(self, message: str) -> str:
        data = self._json("POST", "ai/chat", body={"message": message})
        reply = data.get("response")
        if not isinstance(reply, str) or not reply:
            raise PlatformError(502, str(data.get("error") or "Failed to get response"))
        return reply

    def check_usage(self) -> JsonDict:
        return self._json("GET", "ai/check-usage")

    # published quizzes

    def get_quizzes(self, **params: t.Any) -> JsonDict:
        return self._json("GET", "admin/quizzes", admin=True, params={"published": "true", **params})

    def get_quiz(self, quiz_id: str) -> JsonDict:
        return self._json("GET", f"admin/quizzes/{urllib.parse.quote(quiz_id)}", admin=True)

    def get_quiz_stats(self, quiz_id: str, *, token: str) -> JsonDict:
        return self._json("GET", f"admin/quizzes/{urllib.parse.quote(quiz_id)}/stats", admin=True, token=token)

    def submit_quiz_attempt(self, quiz_id: str, answers: list[JsonDict], time_taken: int, *, token: str) -> JsonDict:
        return self._json(
            "POST",
            "quiz-attempts",
            admin=True,
            token=token,
            body={"quizId": quiz_id, "answers": answers, "timeTaken": time_taken},
        )

    def get_user_attempts(self, user_id: str, *, token: str) -> JsonDict:
        return self._json("GET", f"quiz-attempts/user/{urllib.parse.quote(user_id)}", admin=True, token=token)

    # quiz attempts

    def create_quiz_attempt(self, attempt: JsonDict, *, token: str) -> JsonDict:
        return self._json("POST", "quiz-attempts", token=token, body=attempt)

    def get_user_quiz_history(
        self,
        *,
        token: str,
        page: int = 1,
        limit: int = 10,
        subject: str | None = None,
        difficulty: str | None = None,
        passed: bool | None = None,
    ) -> JsonDict:
        params: JsonDict = {"page": str(page), "limit": str(limit)}
        if subject:
            params["subject"] = subject
        if difficulty:
            params["difficulty"] = difficulty
        if passed is not None:
            params["passed"] = "true" if passed else "false"
        return self._json("GET", "quiz-attempts", token=token, params=params)

    def get_quiz_attempt(self, attempt_id: str, *, token: str) -> JsonDict:
        return self._json("GET", f"quiz-attempts/{urllib.parse.quote(attempt_id)}", token=token)

    def get_dashboard_stats(self, *, token: str) -> JsonDict:
        return self._json("GET", "quiz-attempts/dashboard-stats", token=token)

    def delete_quiz_attempt(self, attempt_id: str, *, token: str) -> JsonDict:
        return self._json("DELETE", f"quiz-attempts/{urllib.parse.quote(attempt_id)}", token=token)

    def get_recent_attempts(self, *, token: str) -> list[JsonDict]:
        history = self.get_user_quiz_history(token=token, limit=5)
        return list((history.get("data") or {}).get("attempts") or [])

    def get_subject_performance(self, *, token: str) -> t.Any:
        stats = self.get_dashboard_stats(token=token)
        return (stats.get("data") or {}).get("subjectPerformance") or []

    # study materials

    def get_materials(self, **params: t.Any) -> list[JsonDict]:
        data = self._json("GET", "study-materials", admin=True, params={"limit": 100, **params})
        return list((data.get("data") or {}).get("materials") or [])

    def get_materials_by_category(self, category: str) -> list[JsonDict]:
        return self.get_materials(subject=category)

    def get_material(self, material_id: str) -> JsonDict:
        return self._json("GET", f"study-materials/{urllib.parse.quote(material_id)}", admin=True)

    def download_material(self, material_id: str) -> tuple[bytes, str, str | None]:
        raw, headers = self._open("GET", f"study-materials/{urllib.parse.quote(material_id)}/download", admin=True)
        content_type = headers.get("Content-Type") if headers else None
        disposition = headers.get("Content-Disposition") if headers else None
        return raw, content_type or "application/octet-stream", disposition

    # notifications

    def get_notifications(self, *, token: str, **params: t.Any) -> JsonDict:
        return self._json("GET", "notifications/user", admin=True, token=token, params=params)

    def mark_notification_read(self, notification_id: str, *, token: str) -> JsonDict:
        return self._json("PATCH", f"notifications/{urllib.parse.quote(notification_id)}/read", admin=True, token=token)

    def mark_all_notifications_read(self, *, token: str) -> JsonDict:
        return self._json("PATCH", "notifications/mark-all-read", admin=True, token=token)

    def get_unread_count(self, *, token: str) -> JsonDict:
        return self._json("GET", "notifications/unread-count", admin=True, token=token)
