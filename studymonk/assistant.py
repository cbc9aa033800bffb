from __future__ import annotations

import dataclasses
import datetime as dt
import json
import re
import typing as t

JsonDict = dict[str, t.Any]

CONNECTION_ERROR_TEXT = (
    "I'm having trouble connecting right now. Please check your connection and try again! 🔄"
)

HEADING_EMOJIS = frozenset("📚🎯💡⏰🧠📝🎓🚀❓✅")

FAQ_QUESTIONS: list[JsonDict] = [
    {"text": "How do I prepare for exams effectively?", "category": "Study Tips"},
    {"text": "What are the best study techniques for retention?", "category": "Learning"},
    {"text": "Can you explain complex topics simply?", "category": "Understanding"},
    {"text": "How to manage study time efficiently?", "category": "Time Management"},
    {"text": "Help me with programming concepts", "category": "Programming"},
    {"text": "Create a study schedule for me", "category": "Planning"},
]

_NUMBERED = re.compile(r"^(\d+)\.\s*(.*)")


@dataclasses.dataclass(frozen=True)
class Message:
    text: str
    sender: t.Literal["user", "ai"]
    timestamp: dt.datetime
    is_error: bool = False

    def to_dict(self) -> JsonDict:
        return {
            "text": self.text,
            "sender": self.sender,
            "timestamp": self.timestamp,
            "isError": self.is_error,
        }

    @staticmethod
    def from_dict(data: JsonDict) -> "Message":
        sender = "user" if data.get("sender") == "user" else "ai"
        ts = data.get("timestamp")
        if not isinstance(ts, dt.datetime):
            ts = dt.datetime.now(dt.timezone.utc)
        return Message(
            text=str(data.get("text") or ""),
            sender=t.cast(t.Literal["user", "ai"], sender),
            timestamp=ts,
            is_error=bool(data.get("isError")),
        )


@dataclasses.dataclass
class Conversation:
    user_id: str
    messages: list[Message] = dataclasses.field(default_factory=list)
    message_count: int = 0

    def add_user_message(self, text: str, now: dt.datetime) -> Message:
        msg = Message(text=text, sender="user", timestamp=now)
        self.messages.append(msg)
        self.message_count += 1
        return msg

    def add_reply(self, text: str, now: dt.datetime) -> Message:
        msg = Message(text=text, sender="ai", timestamp=now)
        self.messages.append(msg)
        return msg

    def add_error(self, now: dt.datetime) -> Message:
        msg = Message(text=CONNECTION_ERROR_TEXT, sender="ai", timestamp=now, is_error=True)
        self.messages.append(msg)
        return msg

    def clear(self) -> None:
        self.messages = []
        self.message_count = 0

    def to_document(self) -> JsonDict:
        return {
            "userId": self.user_id,
            "messages": [m.to_dict() for m in self.messages],
            "messageCount": self.message_count,
        }

    @staticmethod
    def from_document(doc: JsonDict | None, user_id: str) -> "Conversation":
        if not doc:
            return Conversation(user_id=user_id)
        return Conversation(
            user_id=user_id,
            messages=[Message.from_dict(m) for m in doc.get("messages") or []],
            message_count=int(doc.get("messageCount") or 0),
        )


def stream_words(text: str) -> list[str]:
    """Split a reply into words and the whitespace between them.

    Joining the chunks gives back the original text exactly.
    """
    return [chunk for chunk in re.split(r"(\s+)", text or "") if chunk]


def sse_events(text: str) -> t.Iterator[str]:
    for chunk in stream_words(text):
        yield f"data: {json.dumps({'chunk': chunk}, ensure_ascii=False)}\n\n"
    yield "data: [DONE]\n\n"


def _segments(line: str) -> list[JsonDict]:
    out: list[JsonDict] = []
    for i, part in enumerate(line.split("**")):
        if not part:
            continue
        if i % 2 == 1:
            out.append({"text": part, "bold": True, "heading": part[:1] in HEADING_EMOJIS})
        else:
            out.append({"text": part, "bold": False, "heading": False})
    return out


def format_blocks(text: str) -> list[JsonDict]:
    blocks: list[JsonDict] = []
    for paragraph in (text or "").split("\n\n"):
        stripped = paragraph.strip()
        if not stripped:
            continue
        lines = paragraph.split("\n")
        if stripped.startswith("- ") or stripped.startswith("* "):
            blocks.append(
                {
                    "type": "bullets",
                    "items": [_segments(re.sub(r"^\s*[-*]\s*", "", line)) for line in lines if line.strip()],
                }
            )
        elif _NUMBERED.match(stripped):
            items: list[JsonDict] = []
            for line in lines:
                m = _NUMBERED.match(line.strip())
                if m:
                    items.append({"number": int(m.group(1)), "segments": _segments(m.group(2))})
                elif line.strip():
                    items.append({"number": None, "segments": _segments(line)})
            blocks.append({"type": "numbered", "items": items})
        else:
            blocks.append({"type": "paragraph", "lines": [_segments(line) for line in lines]})
    return blocks
