import unittest
import datetime as dt
import os
import sys

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from studymonk import assistant

NOW = dt.datetime(2024, 1, 1, tzinfo=dt.timezone.utc)


class TestConversation(unittest.TestCase):
    def test_counts_user_messages(self):
        conversation = assistant.Conversation(user_id="u1")
        conversation.add_user_message("hi", NOW)
        conversation.add_reply("hello!", NOW)
        conversation.add_user_message("quiz me", NOW)

        self.assertEqual(conversation.message_count, 2)
        self.assertEqual([m.sender for m in conversation.messages], ["user", "ai", "user"])

        conversation.clear()
        self.assertEqual(conversation.messages, [])
        self.assertEqual(conversation.message_count, 0)

    def test_error_reply(self):
        conversation = assistant.Conversation(user_id="u1")
        message = conversation.add_error(NOW)
        self.assertTrue(message.is_error)
        self.assertEqual(message.sender, "ai")
        self.assertEqual(message.text, assistant.CONNECTION_ERROR_TEXT)

    def test_document(self):
        conversation = assistant.Conversation(user_id="u1")
        conversation.add_user_message("hi", NOW)
        conversation.add_error(NOW)

        restored = assistant.Conversation.from_document(conversation.to_document(), "u1")

        self.assertEqual(restored.messages, conversation.messages)
        self.assertEqual(restored.message_count, 1)
        self.assertEqual(assistant.Conversation.from_document(None, "u2").messages, [])


class TestStreaming(unittest.TestCase):
    def test_stream_words_keeps_whitespace(self):
        text = "Spaced  repetition\nworks  well"
        chunks = assistant.stream_words(text)
        self.assertEqual("".join(chunks), text)
        self.assertEqual(chunks[:3], ["Spaced", "  ", "repetition"])
        self.assertEqual(assistant.stream_words(""), [])

    def test_sse_events(self):
        events = list(assistant.sse_events("a b"))
        self.assertEqual(events[0], 'data: {"chunk": "a"}\n\n')
        self.assertEqual(len(events), 4)
        self.assertEqual(events[-1], "data: [DONE]\n\n")


class TestFormatBlocks(unittest.TestCase):
    def test_blocks(self):
        text = (
            "**📚 Study Plan**\nStart early.\n\n"
            "- **Review** notes\n- Practice problems\n\n"
            "1. Sleep well\n2. Eat breakfast"
        )

        blocks = assistant.format_blocks(text)

        self.assertEqual([b["type"] for b in blocks], ["paragraph", "bullets", "numbered"])
        heading = blocks[0]["lines"][0][0]
        self.assertEqual(heading, {"text": "📚 Study Plan", "bold": True, "heading": True})
        self.assertEqual(blocks[1]["items"][0][0], {"text": "Review", "bold": True, "heading": False})
        self.assertEqual(blocks[1]["items"][1], [{"text": "Practice problems", "bold": False, "heading": False}])
        self.assertEqual([i["number"] for i in blocks[2]["items"]], [1, 2])

    def test_blank_text(self):
        self.assertEqual(assistant.format_blocks(""), [])
        self.assertEqual(assistant.format_blocks("\n\n  \n\n"), [])

    def test_faq(self):
        self.assertEqual(len(assistant.FAQ_QUESTIONS), 6)
        self.assertTrue(all(q["category"] for q in assistant.FAQ_QUESTIONS))


if __name__ == "__main__":
    unittest.main()
