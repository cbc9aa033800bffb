import datetime as dt
import logging
import os
from functools import wraps
from typing import Any, Dict, Optional, Tuple

import bson
from bson import ObjectId
from flask import Flask, Response, jsonify, request, send_from_directory, session, stream_with_context

import set_env_vars
from backend.mongo import connect, ensure_indexes
from studymonk import assistant, catalog, history, materials
from studymonk.auth import DEFAULT_ADMIN_FRONTEND_URL, can_access_admin, has_role, public_user, user_id_of
from studymonk.authored_quiz import AuthoredRun
from studymonk.notifications import NotificationService
from studymonk.platform_client import PlatformError, StudyPlatformClient
from studymonk.quiz_flow import (
    InvalidAnswer,
    InvalidTransition,
    QuizGenerationError,
    QuizRun,
    Stage,
    process_generated_quiz,
)

set_env_vars.load()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s [%(levelname)s] %(message)s",
)
logger = logging.getLogger("studymonk")

FRONTEND_DIST = os.path.join(os.path.dirname(os.path.abspath(__file__)), "frontend", "dist")


def _secret_key() -> str:
    # signs the session cookie that carries the platform token
    key = os.getenv("FLASK_SECRET_KEY")
    if not key:
        raise RuntimeError("FLASK_SECRET_KEY environment variable is not set")
    return key


server = Flask(__name__, static_folder=None)
server.secret_key = _secret_key()

mongo = connect()
ensure_indexes(mongo)

study_api = StudyPlatformClient()
notification_service = NotificationService(study_api)

STATE_TTL = dt.timedelta(hours=float(os.getenv("QUIZ_RUN_TTL_HOURS", "24")))
ADMIN_FRONTEND_URL = os.getenv("ADMIN_FRONTEND_URL", DEFAULT_ADMIN_FRONTEND_URL)
QUIZ_SERVICE_ERROR = "Failed to contact quiz service."
RUN_CONFLICT_ERROR = "This quiz was updated by another request. Reload it and try again."


def _now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def _token() -> str:
    return session.get("token", "")


def _user() -> Dict[str, Any]:
    return session.get("user") or {}


def _user_id() -> str:
    return user_id_of(_user())


def _platform_error(e: PlatformError, fallback: Optional[str] = None):
    status = e.status if 400 <= e.status < 500 else 502
    return jsonify({"error": fallback or e.message}), status


def login_required(f):
    @wraps(f)
    def decorated(*args, **kwargs):
        if not _token():
            return jsonify({"error": "Authentication required"}), 401
        user = _user()
        if not has_role(user, "user"):
            return jsonify({"error": "You need user privileges to access this page."}), 403
        if can_access_admin(user):
            return jsonify({
                "error": "Administrators use the admin panel",
                "redirect": ADMIN_FRONTEND_URL,
            }), 403
        return f(*args, **kwargs)
    return decorated


def _json_body() -> Dict[str, Any]:
    return request.get_json(silent=True) or {}


@server.route("/api/hello")
def hello():
    return jsonify({
        "message": "API Working!",
        "app": os.getenv("APP_NAME", "AI Study Platform"),
        "version": os.getenv("APP_VERSION", "1.0.0"),
    })


# auth

def _start_session(data: Dict[str, Any]):
    token = data.get("token")
    user = data.get("user")
    if not token or not user:
        return jsonify({"error": "Login failed. Please try again."}), 502
    session["token"] = token
    session["user"] = public_user(user)
    return jsonify({"success": True, "user": session["user"]})


@server.route("/api/auth/login", methods=["POST"])
def login():
    payload = _json_body()
    email = payload.get("email")
    password = payload.get("password")
    if not email or not password:
        return jsonify({"error": "Email and password are required"}), 400
    try:
        data = study_api.login(email, password)
    except PlatformError as e:
        logger.warning("Login failed for %s: %s", email, e.message)
        status = e.status if 400 <= e.status < 500 else 502
        return jsonify({"success": False, "error": e.message or "Login failed. Please try again."}), status
    return _start_session(data)


@server.route("/api/auth/signup", methods=["POST"])
def signup():
    payload = _json_body()
    name = payload.get("name")
    email = payload.get("email")
    password = payload.get("password")
    if not name or not email or not password:
        return jsonify({"error": "Name, email and password are required"}), 400
    try:
        data = study_api.signup(name, email, password)
    except PlatformError as e:
        logger.warning("Signup failed for %s: %s", email, e.message)
        status = e.status if 400 <= e.status < 500 else 502
        return jsonify({"success": False, "error": e.message or "Signup failed. Please try again."}), status
    return _start_session(data)


@server.route("/api/auth/logout", methods=["POST"])
def logout():
    session.pop("token", None)
    session.pop("user", None)
    return jsonify({"success": True})


@server.route("/api/auth/me", methods=["GET"])
def me():
    if not _token():
        return jsonify({"user": None}), 401
    return jsonify({"user": _user()})


# generated quizzes

@server.route("/api/quiz/catalog", methods=["GET"])
def quiz_catalog():
    return jsonify(catalog.catalog_payload())


def _save_quiz_run(run: QuizRun) -> bool:
    """Insert a new run, or update it only if nobody saved it since it was loaded."""
    doc = run.to_document()
    doc["expiresAt"] = _now() + STATE_TTL
    if run.run_id is None:
        result = mongo.quiz_runs.insert_one(doc)
        run.run_id = str(result.inserted_id)
        return True

    doc["version"] = run.version + 1
    result = mongo.quiz_runs.update_one(
        {"_id": ObjectId(run.run_id), "version": run.version},
        {"$set": doc},
    )
    if result.matched_count == 0:
        logger.warning("Quiz run %s was changed by another request", run.run_id)
        return False
    run.version += 1
    return True


def _record_attempt(run: QuizRun, now: dt.datetime) -> None:
    # a failed save never blocks the score screen
    try:
        result = study_api.create_quiz_attempt(run.attempt_payload(now), token=_token())
    except PlatformError as e:
        logger.error("Error saving quiz attempt for run %s: %s", run.run_id, e.message)
        return
    data = result.get("data") or {}
    run.attempt_id = str(data["attemptId"]) if data.get("attemptId") else None
    run.insights = data.get("insights")
    if run.insights:
        logger.info("Performance insights for run %s: %s", run.run_id, run.insights)


def _store_completion(run: QuizRun, now: dt.datetime) -> bool:
    # the run reaches the score stage in Mongo first; only that request saves the attempt
    if not _save_quiz_run(run):
        return False
    _record_attempt(run, now)
    if run.attempt_id or run.insights:
        _save_quiz_run(run)
    return True


def _run_conflict():
    return jsonify({"error": RUN_CONFLICT_ERROR}), 409


def _generate_questions(run: QuizRun, now: dt.datetime) -> None:
    cfg = run.config
    try:
        payload = study_api.generate_quiz(
            topic=cfg.subject.name,
            level=cfg.difficulty.name,
            count=cfg.question_count.value,
        )
        questions = process_generated_quiz(payload, cfg.question_count.value)
    except QuizGenerationError as e:
        logger.warning("Quiz generation returned no questions: %s", e)
        run.fail(str(e))
        return
    except PlatformError as e:
        logger.error("Quiz generation error: %s", e.message)
        run.fail(QUIZ_SERVICE_ERROR)
        return
    run.begin(questions, now)


def _load_quiz_run(runID: str) -> Tuple[Optional[QuizRun], Any]:
    try:
        obj_id = ObjectId(runID)
    except bson.errors.InvalidId:
        return None, (jsonify({"error": "Invalid runID"}), 400)

    query = {"_id": obj_id, "userId": _user_id()}
    doc = mongo.quiz_runs.find_one(query)
    if not doc:
        return None, (jsonify({"error": "Quiz not found"}), 404)

    run = QuizRun.from_document(doc)
    now = _now()
    if run.is_expired(now):
        run.complete(now)
        if not _store_completion(run, now):
            # another request completed it first
            doc = mongo.quiz_runs.find_one(query)
            if not doc:
                return None, (jsonify({"error": "Quiz not found"}), 404)
            run = QuizRun.from_document(doc)
    return run, None


def _quiz_view(run: QuizRun, status: int = 200):
    return jsonify(run.view(_now())), status


@server.route("/api/quiz/start", methods=["POST"])
@login_required
def start_quiz():
    payload = _json_body()
    try:
        config = catalog.build_config(
            payload.get("subject"),
            payload.get("difficulty"),
            payload.get("questionCount"),
        )
    except catalog.CatalogError as e:
        return jsonify({"error": str(e)}), 400

    run = QuizRun(user_id=_user_id(), config=config)
    _generate_questions(run, _now())
    _save_quiz_run(run)
    return _quiz_view(run, 502 if run.error else 200)


@server.route("/api/quiz/<runID>", methods=["GET"])
@login_required
def get_quiz_run(runID):
    run, err = _load_quiz_run(runID)
    if err:
        return err
    return _quiz_view(run)


@server.route("/api/quiz/<runID>/answer", methods=["POST"])
@login_required
def answer_question(runID):
    run, err = _load_quiz_run(runID)
    if err:
        return err

    now = _now()
    if run.ran_out_of_time():
        # the timer finished the quiz; a late answer is not recorded
        out = run.view(now)
        out["answered"] = None
        return jsonify(out)

    payload = _json_body()
    try:
        option_index = int(payload.get("optionIndex"))
    except (TypeError, ValueError):
        return jsonify({"error": "optionIndex must be an integer"}), 400

    try:
        user_answer = run.answer(option_index, now)
    except InvalidAnswer as e:
        return jsonify({"error": str(e)}), 400
    except InvalidTransition as e:
        return jsonify({"error": str(e)}), 409

    if run.stage is Stage.SCORE:
        saved = _store_completion(run, now)
    else:
        saved = _save_quiz_run(run)
    if not saved:
        return _run_conflict()

    out = run.view(now)
    out["answered"] = user_answer.to_dict() if user_answer else None
    return jsonify(out)


@server.route("/api/quiz/<runID>/complete", methods=["POST"])
@login_required
def complete_quiz(runID):
    run, err = _load_quiz_run(runID)
    if err:
        return err
    now = _now()
    try:
        run.complete(now)
    except InvalidTransition as e:
        return jsonify({"error": str(e)}), 409
    if not _store_completion(run, now):
        return _run_conflict()
    return _quiz_view(run)


@server.route("/api/quiz/<runID>/review", methods=["POST"])
@login_required
def review_quiz(runID):
    run, err = _load_quiz_run(runID)
    if err:
        return err
    try:
        run.show_review()
    except InvalidTransition as e:
        return jsonify({"error": str(e)}), 409
    if not _save_quiz_run(run):
        return _run_conflict()
    return _quiz_view(run)


@server.route("/api/quiz/<runID>/score", methods=["POST"])
@login_required
def show_score(runID):
    run, err = _load_quiz_run(runID)
    if err:
        return err
    try:
        run.show_score()
    except InvalidTransition as e:
        return jsonify({"error": str(e)}), 409
    if not _save_quiz_run(run):
        return _run_conflict()
    return _quiz_view(run)


@server.route("/api/quiz/<runID>/retry", methods=["POST"])
@login_required
def retry_quiz(runID):
    run, err = _load_quiz_run(runID)
    if err:
        return err
    try:
        run.retry()
    except InvalidTransition as e:
        return jsonify({"error": str(e)}), 409
    _generate_questions(run, _now())
    if not _save_quiz_run(run):
        return _run_conflict()
    return _quiz_view(run, 502 if run.error else 200)


@server.route("/api/quiz/<runID>/reset", methods=["POST"])
@login_required
def reset_quiz(runID):
    run, err = _load_quiz_run(runID)
    if err:
        return err
    run.reset()
    if not _save_quiz_run(run):
        return _run_conflict()
    return _quiz_view(run)


# pre-authored quizzes

@server.route("/api/quizzes", methods=["GET"])
@login_required
def list_quizzes():
    try:
        return jsonify(study_api.get_quizzes(**request.args.to_dict()))
    except PlatformError as e:
        return _platform_error(e, "Failed to fetch quizzes")


@server.route("/api/quizzes/<quizId>", methods=["GET"])
@login_required
def get_quiz(quizId):
    try:
        return jsonify(study_api.get_quiz(quizId))
    except PlatformError as e:
        return _platform_error(e, "Failed to fetch quiz")


@server.route("/api/quizzes/<quizId>/stats", methods=["GET"])
@login_required
def get_quiz_stats(quizId):
    try:
        return jsonify(study_api.get_quiz_stats(quizId, token=_token()))
    except PlatformError as e:
        return _platform_error(e, "Failed to fetch quiz stats")


@server.route("/api/quizzes/<quizId>/start", methods=["POST"])
@login_required
def start_authored_quiz(quizId):
    try:
        response = study_api.get_quiz(quizId)
    except PlatformError as e:
        return _platform_error(e, "Failed to fetch quiz")
    if not response.get("success") or not response.get("data"):
        return jsonify({"error": "Quiz not found"}), 404

    run = AuthoredRun(user_id=_user_id(), quiz=response["data"])
    now = _now()
    run.start(now)
    doc = run.to_document()
    doc["expiresAt"] = now + STATE_TTL
    result = mongo.authored_runs.insert_one(doc)
    run.run_id = str(result.inserted_id)
    return jsonify(run.view(now))


def _save_authored_run(run: AuthoredRun) -> bool:
    doc = run.to_document()
    doc["expiresAt"] = _now() + STATE_TTL
    doc["version"] = run.version + 1
    result = mongo.authored_runs.update_one(
        {"_id": ObjectId(run.run_id), "version": run.version},
        {"$set": doc},
    )
    if result.matched_count == 0:
        logger.warning("Authored run %s was changed by another request", run.run_id)
        return False
    run.version += 1
    return True


def _submit_authored(run: AuthoredRun, now: dt.datetime) -> bool:
    # claim the run before talking to the platform so one attempt is submitted per run
    if not _save_authored_run(run):
        return False
    response = study_api.submit_quiz_attempt(
        run.quiz_id,
        run.formatted_answers(),
        run.time_taken_minutes(now),
        token=_token(),
    )
    if not response.get("success"):
        raise PlatformError(502, str(response.get("error") or "Failed to submit quiz"))
    run.finish(response.get("data"))
    _save_authored_run(run)
    return True


def _load_authored_run(runID: str) -> Tuple[Optional[AuthoredRun], Any]:
    try:
        obj_id = ObjectId(runID)
    except bson.errors.InvalidId:
        return None, (jsonify({"error": "Invalid runID"}), 400)

    query = {"_id": obj_id, "userId": _user_id()}
    doc = mongo.authored_runs.find_one(query)
    if not doc:
        return None, (jsonify({"error": "Quiz not found"}), 404)

    run = AuthoredRun.from_document(doc)
    now = _now()
    if run.is_expired(now):
        try:
            submitted = _submit_authored(run, now)
        except PlatformError as e:
            # the run stays open but refuses answers until it is submitted
            logger.error("Auto-submit failed for authored run %s: %s", runID, e.message)
        else:
            if not submitted:
                doc = mongo.authored_runs.find_one(query)
                if not doc:
                    return None, (jsonify({"error": "Quiz not found"}), 404)
                run = AuthoredRun.from_document(doc)
    return run, None


@server.route("/api/authored/<runID>", methods=["GET"])
@login_required
def get_authored_run(runID):
    run, err = _load_authored_run(runID)
    if err:
        return err
    return jsonify(run.view(_now()))


@server.route("/api/authored/<runID>/answer", methods=["POST"])
@login_required
def select_authored_answer(runID):
    run, err = _load_authored_run(runID)
    if err:
        return err
    payload = _json_body()
    try:
        question_index = int(payload.get("questionIndex"))
        option_index = int(payload.get("optionIndex"))
    except (TypeError, ValueError):
        return jsonify({"error": "questionIndex and optionIndex must be integers"}), 400
    now = _now()
    try:
        run.select(question_index, option_index, now)
    except InvalidAnswer as e:
        return jsonify({"error": str(e)}), 400
    except InvalidTransition as e:
        return jsonify({"error": str(e)}), 409
    if not _save_authored_run(run):
        return _run_conflict()
    return jsonify(run.view(now))


@server.route("/api/authored/<runID>/navigate", methods=["POST"])
@login_required
def navigate_authored(runID):
    run, err = _load_authored_run(runID)
    if err:
        return err
    payload = _json_body()
    direction = payload.get("direction")
    try:
        if direction == "next":
            run.next()
        elif direction == "previous":
            run.previous()
        elif "index" in payload:
            run.go_to(int(payload["index"]))
        else:
            return jsonify({"error": "Provide direction (next/previous) or index"}), 400
    except (TypeError, ValueError):
        return jsonify({"error": "index must be an integer"}), 400
    except InvalidTransition as e:
        return jsonify({"error": str(e)}), 409
    if not _save_authored_run(run):
        return _run_conflict()
    return jsonify(run.view(_now()))


@server.route("/api/authored/<runID>/submit", methods=["POST"])
@login_required
def submit_authored(runID):
    run, err = _load_authored_run(runID)
    if err:
        return err
    if run.completed:
        return jsonify(run.view(_now()))
    now = _now()
    try:
        submitted = _submit_authored(run, now)
    except InvalidTransition as e:
        return jsonify({"error": str(e)}), 409
    except PlatformError as e:
        logger.error("Failed to submit quiz %s: %s", run.quiz_id, e.message)
        return jsonify({"error": "Failed to submit quiz. Please try again."}), 502
    if not submitted:
        return _run_conflict()
    return jsonify(run.view(now))


@server.route("/api/attempts/mine", methods=["GET"])
@login_required
def my_attempts():
    try:
        return jsonify(study_api.get_user_attempts(_user_id(), token=_token()))
    except PlatformError as e:
        return _platform_error(e, "Failed to fetch user attempts")


# history & dashboard

def _parse_passed(value: Optional[str]) -> Optional[bool]:
    if value is None or value == "":
        return None
    return value.lower() == "true"


@server.route("/api/history", methods=["GET"])
@login_required
def quiz_history():
    try:
        page = int(request.args.get("page", 1))
        limit = int(request.args.get("limit", 10))
    except ValueError:
        return jsonify({"error": "page and limit must be integers"}), 400
    try:
        result = study_api.get_user_quiz_history(
            token=_token(),
            page=page,
            limit=limit,
            subject=request.args.get("subject"),
            difficulty=request.args.get("difficulty"),
            passed=_parse_passed(request.args.get("passed")),
        )
    except PlatformError as e:
        return _platform_error(e, "Failed to fetch quiz history")

    data = result.get("data") or {}
    attempts = data.get("attempts") or []
    data["attempts"] = [history.format_quiz_attempt(a) for a in attempts]
    result["data"] = data
    return jsonify(result)


@server.route("/api/history/<attemptId>", methods=["GET"])
@login_required
def quiz_attempt_detail(attemptId):
    try:
        return jsonify(study_api.get_quiz_attempt(attemptId, token=_token()))
    except PlatformError as e:
        return _platform_error(e, "Failed to fetch quiz attempt")


@server.route("/api/history/<attemptId>", methods=["DELETE"])
@login_required
def delete_quiz_attempt(attemptId):
    try:
        return jsonify(study_api.delete_quiz_attempt(attemptId, token=_token()))
    except PlatformError as e:
        return _platform_error(e, "Failed to delete quiz attempt")


@server.route("/api/dashboard/stats", methods=["GET"])
@login_required
def dashboard_stats():
    try:
        stats = study_api.get_dashboard_stats(token=_token())
    except PlatformError as e:
        return _platform_error(e, "Failed to load statistics")
    return jsonify({**stats, "cards": history.stat_cards(stats)})


@server.route("/api/dashboard/summary", methods=["GET"])
@login_required
def dashboard_summary():
    try:
        stats = study_api.get_dashboard_stats(token=_token())
    except PlatformError as e:
        logger.error("Quiz summary service error: %s", e.message)
        return jsonify(dict(history.EMPTY_SUMMARY))
    return jsonify(history.quiz_summary(stats))


@server.route("/api/dashboard/recent", methods=["GET"])
@login_required
def recent_attempts():
    try:
        attempts = study_api.get_recent_attempts(token=_token())
    except PlatformError as e:
        return _platform_error(e, "Failed to fetch recent attempts")
    return jsonify([history.format_quiz_attempt(a) for a in attempts])


@server.route("/api/dashboard/subjects", methods=["GET"])
@login_required
def subject_performance():
    try:
        return jsonify(study_api.get_subject_performance(token=_token()))
    except PlatformError as e:
        return _platform_error(e, "Failed to fetch subject performance")


# assistant

def _load_conversation() -> assistant.Conversation:
    doc = mongo.conversations.find_one({"userId": _user_id()})
    return assistant.Conversation.from_document(doc, _user_id())


def _save_conversation(conversation: assistant.Conversation) -> None:
    doc = conversation.to_document()
    doc["expiresAt"] = _now() + STATE_TTL
    mongo.conversations.update_one({"userId": conversation.user_id}, {"$set": doc}, upsert=True)


def _converse(text: str) -> Tuple[assistant.Conversation, assistant.Message]:
    conversation = _load_conversation()
    conversation.add_user_message(text, _now())
    try:
        reply = study_api.chat(text)
    except PlatformError as e:
        logger.error("Chat error: %s", e.message)
        message = conversation.add_error(_now())
    else:
        message = conversation.add_reply(reply, _now())
    _save_conversation(conversation)
    return conversation, message


@server.route("/api/assistant/faq", methods=["GET"])
@login_required
def assistant_faq():
    return jsonify(assistant.FAQ_QUESTIONS)


@server.route("/api/assistant/messages", methods=["GET"])
@login_required
def assistant_messages():
    conversation = _load_conversation()
    return jsonify({
        "messages": [m.to_dict() for m in conversation.messages],
        "messageCount": conversation.message_count,
    })


@server.route("/api/assistant/messages", methods=["DELETE"])
@login_required
def clear_assistant_messages():
    conversation = _load_conversation()
    conversation.clear()
    _save_conversation(conversation)
    return jsonify({"status": "Chat cleared"})


@server.route("/api/assistant/chat", methods=["POST"])
@login_required
def assistant_chat():
    text = str(_json_body().get("message") or "").strip()
    if not text:
        return jsonify({"error": "Message is required."}), 400

    conversation, message = _converse(text)
    out = {
        "message": message.to_dict(),
        "blocks": assistant.format_blocks(message.text),
        "messageCount": conversation.message_count,
    }
    if message.is_error:
        return jsonify({**out, "error": "Failed to get response"}), 502
    return jsonify(out)


@server.route("/api/assistant/stream", methods=["POST"])
@login_required
def assistant_stream():
    text = str(_json_body().get("message") or "").strip()
    if not text:
        return jsonify({"error": "Message is required."}), 400

    _, message = _converse(text)
    response = Response(stream_with_context(assistant.sse_events(message.text)), mimetype="text/event-stream")
    response.headers["Cache-Control"] = "no-cache"
    return response


@server.route("/api/ai/usage", methods=["GET"])
@login_required
def ai_usage():
    try:
        return jsonify(study_api.check_usage())
    except PlatformError as e:
        return _platform_error(e, "Failed to check API usage")


# study materials

@server.route("/api/materials", methods=["GET"])
@login_required
def list_materials():
    category = request.args.get("category") or materials.ALL_CATEGORIES
    query = request.args.get("q", "")
    try:
        items = study_api.get_materials()
    except PlatformError as e:
        logger.error("Error fetching study materials: %s", e.message)
        return jsonify({"error": "Failed to load study materials. Please try again later."}), 502

    return jsonify({
        "materials": materials.search(items, query, category),
        "categories": materials.categories(items),
        "activeCategory": category,
        "total": len(items),
    })


@server.route("/api/materials/category/<category>", methods=["GET"])
@login_required
def materials_by_category(category):
    try:
        return jsonify(study_api.get_materials_by_category(category))
    except PlatformError as e:
        return _platform_error(e, f"Failed to load {category} materials. Please try again later.")


@server.route("/api/materials/<materialId>", methods=["GET"])
@login_required
def get_material(materialId):
    try:
        return jsonify(study_api.get_material(materialId))
    except PlatformError as e:
        return _platform_error(e, "Error fetching study material details")


@server.route("/api/materials/<materialId>/download", methods=["GET"])
@login_required
def download_material(materialId):
    try:
        body, content_type, disposition = study_api.download_material(materialId)
    except PlatformError as e:
        return _platform_error(e, "Failed to download material")

    filename = materials.filename_from_disposition(disposition, materialId)
    return Response(
        body,
        mimetype=content_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# notifications

@server.route("/api/notifications", methods=["GET"])
@login_required
def list_notifications():
    try:
        return jsonify(notification_service.get_notifications(token=_token(), **request.args.to_dict()))
    except PlatformError as e:
        return _platform_error(e)


@server.route("/api/notifications/unread-count", methods=["GET"])
@login_required
def unread_notifications():
    return jsonify({"count": notification_service.unread_count(token=_token())})


@server.route("/api/notifications/<notificationId>/read", methods=["PATCH", "POST"])
@login_required
def read_notification(notificationId):
    try:
        return jsonify(notification_service.mark_read(notificationId, token=_token()))
    except PlatformError as e:
        return _platform_error(e, "Failed to mark notification as read")


@server.route("/api/notifications/read-all", methods=["PATCH", "POST"])
@login_required
def read_all_notifications():
    try:
        return jsonify(notification_service.mark_all_read(token=_token()))
    except PlatformError as e:
        return _platform_error(e, "Failed to mark notifications as read")


@server.route("/", defaults={"path": ""})
@server.route("/<path:path>")
def spa(path):
    if path.startswith("api"):
        return jsonify({"error": "API route not found"}), 404
    if path and os.path.isfile(os.path.join(FRONTEND_DIST, path)):
        return send_from_directory(FRONTEND_DIST, path)
    return send_from_directory(FRONTEND_DIST, "index.html")


if __name__ == '__main__':
    server.run(port=int(os.getenv("PORT", "8080")))
