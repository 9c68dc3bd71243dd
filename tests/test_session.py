# -*- coding: utf-8 -*-
"""ConversationSession 测试：用假的 generate_content 替身，不走网络。"""

from __future__ import annotations

import base64
import json

import pytest

from reelscript.core.context import render_script_context
from reelscript.core.errors import ConfigurationError, DownstreamError, ModelCallError, SessionBusyError
from reelscript.core.schemas import AnchorImage, Scene
from reelscript.core.turn_log import TurnLog
from reelscript.pipeline.session import ConversationSession, SessionState, parse_model_reply
from reelscript.skills.tool_calls.prompt import ANCHOR_PREFACE, CONFIRM_SCRIPT, CONFIRM_TITLE, CONTEXT_DELIMITER
from reelscript.skills.tool_calls.schema import GenerateScriptEffect, TOOL_NAMES, TranslateNarrationsEffect


def _reply(*parts):
	return {"candidates": [{"content": {"role": "model", "parts": list(parts)}}]}


def _call(name, args):
	return {"functionCall": {"name": name, "args": args}}


class FakeGemini:
	"""按顺序返回预设响应；响应也可以是异常或 callable(payload)。"""

	def __init__(self, *responses):
		self.responses = list(responses)
		self.payloads = []

	def generate_content(self, payload, model=None):
		self.payloads.append(payload)
		r = self.responses.pop(0)
		if isinstance(r, Exception):
			raise r
		if callable(r):
			return r(payload)
		return r

	def generate_text(self, prompt, images=None, model=None):
		return json.dumps(["[excited] Aujourd'hui est le jour"])

	def generate_thumbnail(self, prompt, reference_images, model_id=None):
		return b"PNG", "image/png"


def _scenes():
	return [Scene(1, "A hero wakes", "[excited] Today is the day")]


def _user_parts(fake, i=-1):
	return fake.payloads[i]["contents"][-1]["parts"]


class TestUserMessage:
	def test_context_prepended_with_delimiter(self):
		fake = FakeGemini(_reply({"text": "ok"}))
		ConversationSession(fake).send_turn("make it darker", _scenes())

		text = _user_parts(fake)[0]["text"]
		assert text == render_script_context(_scenes()) + CONTEXT_DELIMITER + "make it darker"
		assert text.startswith("CURRENT SCRIPT:\n\nScene 1:\n")

	def test_no_context_for_empty_script(self):
		fake = FakeGemini(_reply({"text": "ok"}))
		ConversationSession(fake).send_turn("hello", [])
		assert _user_parts(fake)[0]["text"] == "hello"

	def test_anchor_images_follow_text_and_skip_empty_slots(self):
		fake = FakeGemini(_reply({"text": "ok"}))
		anchors = [AnchorImage(b"one"), None, AnchorImage(b"three", "image/jpeg")]
		ConversationSession(fake).send_turn("use image 3 for scene 1", [], anchors)

		parts = _user_parts(fake)
		assert len(parts) == 3
		assert parts[0]["text"] == ANCHOR_PREFACE + "use image 3 for scene 1"
		assert parts[1]["inlineData"] == {"mimeType": "image/png", "data": base64.b64encode(b"one").decode("ascii")}
		assert parts[2]["inlineData"]["mimeType"] == "image/jpeg"

	def test_payload_declares_tools(self):
		fake = FakeGemini(_reply({"text": "ok"}))
		ConversationSession(fake, system_instruction="be brief").send_turn("hi")

		payload = fake.payloads[0]
		declared = [d["name"] for d in payload["tools"][0]["functionDeclarations"]]
		assert sorted(declared) == sorted(TOOL_NAMES)
		assert payload["toolConfig"]["functionCallingConfig"]["mode"] == "AUTO"
		assert payload["systemInstruction"]["parts"][0]["text"] == "be brief"


class TestRouting:
	def test_tool_calls_are_dispatched(self):
		fake = FakeGemini(_reply(_call("translateNarrations", {
			"targetLanguage": "French",
			"translatedNarrations": ["[excited] Aujourd'hui est le jour"],
		})))
		result = ConversationSession(fake).send_turn("translate to French", _scenes())

		assert isinstance(result.effects[0], TranslateNarrationsEffect)
		assert result.tool_calls == ["translateNarrations"]
		assert result.used_fallback is False
		assert "French" in result.display_text

	def test_first_confirmation_is_displayed(self):
		fake = FakeGemini(_reply(
			{"text": "Here are both."},
			_call("generateYouTubeTitle", {"title": "Wake Up"}),
			_call("generateYouTubeDescription", {"description": "A hero wakes up."}),
		))
		result = ConversationSession(fake).send_turn("title and description please", _scenes())
		assert result.display_text == CONFIRM_TITLE
		assert len(result.effects) == 2

	def test_failures_follow_confirmation(self):
		class QuotaGemini(FakeGemini):
			def generate_thumbnail(self, prompt, reference_images, model_id=None):
				raise DownstreamError("quota exceeded")

		fake = QuotaGemini(_reply(
			_call("generateYouTubeTitle", {"title": "Wake Up"}),
			_call("generateYouTubeThumbnail", {}),
		))
		result = ConversationSession(fake).send_turn("title and thumbnail", _scenes())

		assert result.display_text == CONFIRM_TITLE + " Thumbnail generation failed: quota exceeded."
		assert len(result.effects) == 1

	def test_failures_shown_when_nothing_succeeds(self):
		fake = FakeGemini(_reply(_call("translateNarrations", {
			"targetLanguage": "French",
			"translatedNarrations": ["un", "deux"],
		})))
		result = ConversationSession(fake).send_turn("translate", _scenes())
		assert result.effects == []
		assert result.display_text.startswith("Translation failed:")

	def test_sdk_style_function_calls(self):
		data = {
			"candidates": [{"content": {"role": "model", "parts": [{"text": ""}]}}],
			"functionCalls": [{"name": "generateYouTubeTitle", "args": {"title": "T"}}],
		}
		result = ConversationSession(FakeGemini(data)).send_turn("title", [])
		assert result.display_text == CONFIRM_TITLE

	def test_fallback_recovers_script_from_text(self):
		fake = FakeGemini(_reply({"text": 'Here you go: [{"description":"d","narration":"n"}]'}))
		result = ConversationSession(fake).send_turn("write a script", [])

		assert result.used_fallback is True
		assert result.display_text == CONFIRM_SCRIPT
		assert isinstance(result.effects[0], GenerateScriptEffect)
		assert result.effects[0].scenes[0].description == "d"

	def test_free_text_is_verbatim(self):
		text = "Scene 1 could open on a tighter close-up [excited]."
		fake = FakeGemini(_reply({"text": text}))
		result = ConversationSession(fake).send_turn("critique", _scenes())
		assert result.display_text == text
		assert result.effects == []
		assert result.used_fallback is False

	def test_thought_parts_are_not_displayed(self):
		fake = FakeGemini(_reply({"text": "let me think", "thought": True}, {"text": "Hi!"}))
		assert ConversationSession(fake).send_turn("hi").display_text == "Hi!"


class TestLifecycle:
	def test_model_failure_leaves_session_usable(self):
		fake = FakeGemini(ModelCallError("HTTP 503"), _reply({"text": "back"}))
		session = ConversationSession(fake)

		with pytest.raises(ModelCallError):
			session.send_turn("hello")
		assert session.state is SessionState.IDLE
		assert session.history == []

		assert session.send_turn("again").display_text == "back"
		assert len(session.history) == 2

	def test_blocked_prompt_is_model_failure(self):
		with pytest.raises(ModelCallError):
			parse_model_reply({"promptFeedback": {"blockReason": "SAFETY"}})

	def test_overlapping_turn_is_rejected(self):
		seen = {}

		def reenter(payload):
			seen["state"] = session.state
			with pytest.raises(SessionBusyError):
				session.send_turn("second")
			return _reply({"text": "first done"})

		session = ConversationSession(FakeGemini(reenter))
		result = session.send_turn("first")

		assert seen["state"] is SessionState.AWAITING_MODEL
		assert result.display_text == "first done"
		assert session.state is SessionState.IDLE

	def test_function_responses_open_next_turn(self):
		fake = FakeGemini(
			_reply(_call("generateYouTubeTitle", {"title": "T"}), _call("nope", {})),
			_reply({"text": "ok"}),
		)
		session = ConversationSession(fake)
		session.send_turn("title")
		session.send_turn("thanks")

		contents = fake.payloads[1]["contents"]
		assert len(contents) == 3
		assert contents[1]["role"] == "model"

		parts = contents[2]["parts"]
		assert parts[0]["functionResponse"]["name"] == "generateYouTubeTitle"
		assert parts[0]["functionResponse"]["response"]["status"] == "ok"
		assert parts[1]["functionResponse"]["response"]["status"] == "unknown"
		assert parts[2] == {"text": "thanks"}

	def test_reset_clears_history(self):
		session = ConversationSession(FakeGemini(_reply({"text": "ok"})))
		session.send_turn("hi")
		session.reset()
		assert session.history == []

	def test_missing_client(self):
		with pytest.raises(ConfigurationError):
			ConversationSession(None)

	def test_turn_log_records_success_and_failure(self, tmp_path):
		log = TurnLog(tmp_path / "logs" / "llm.jsonl")
		fake = FakeGemini(
			_reply(_call("generateYouTubeTitle", {"title": "T"})),
			ModelCallError("timeout"),
		)
		session = ConversationSession(fake, turn_log=log)
		session.send_turn("title")
		with pytest.raises(ModelCallError):
			session.send_turn("again")

		rows = log.read_all()
		assert rows[0]["effects"] == ["youtube_title"]
		assert rows[0]["tool_calls"] == ["generateYouTubeTitle"]
		assert rows[1]["error"] == "timeout"

	def test_translate_script_uses_contract(self):
		effect = ConversationSession(FakeGemini()).translate_script(_scenes(), "French")
		assert effect.translations == ["[excited] Aujourd'hui est le jour"]
