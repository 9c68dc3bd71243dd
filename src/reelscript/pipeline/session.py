# -*- coding: utf-8 -*-
"""
reelscript/pipeline/session.py

目的：
- ConversationSession：一个会话独占一份对话历史（chat handle），
  把“上下文注入 + 模型往返 + tool 调度 / fallback 提取”组合成一次 send_turn。
- 返回规范化的 TurnResult；宿主自己决定何时把 effects 应用到 ScriptState。

状态机：
- IDLE           : 没有在途的轮次
- AWAITING_MODEL : 已发出一轮，等待模型返回
同一 session 同一时间只允许一轮在途；重叠调用直接抛 SessionBusyError。

注意：
- 模型往返失败（ModelCallError）会中断本轮并抛给调用方，
  此时历史不追加、状态回到 IDLE，下一轮照常可用。
- 本地不做任何状态修改，直到 TurnResult 完整生成。
"""

from __future__ import annotations

import enum
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from reelscript.core.context import render_script_context
from reelscript.core.errors import ConfigurationError, ModelCallError, SessionBusyError
from reelscript.core.schemas import AnchorImage, Scene, numbering_issues
from reelscript.core.turn_log import TurnLog
from reelscript.providers.llm.gemini_client import inline_image_part
from reelscript.skills.tool_calls.dispatcher import CallOutcome, DispatchResult, ToolCallDispatcher
from reelscript.skills.tool_calls.fallback import try_extract_script
from reelscript.skills.tool_calls.prompt import ANCHOR_PREFACE, CONFIRM_SCRIPT, SYSTEM_PROMPT, build_turn_text
from reelscript.skills.tool_calls.schema import (
	FUNCTION_DECLARATIONS,
	GenerateScriptEffect,
	RawToolCall,
	TranslateNarrationsEffect,
	TurnResult,
)
from reelscript.skills.translate_narrations.skill import TranslateNarrationsSkill


class SessionState(enum.Enum):
	IDLE = "idle"
	AWAITING_MODEL = "awaiting_model"


@dataclass
class ModelReply:
	"""从 generateContent 原始响应里抽出来的东西。"""
	text: str
	tool_calls: List[RawToolCall] = field(default_factory=list)
	content: Dict[str, Any] = field(default_factory=dict)


def parse_model_reply(data: Dict[str, Any]) -> ModelReply:
	"""
	解析模型响应。

	- tool call 优先读 candidate parts 里的 functionCall，
	  其次兼容顶层 functionCalls（SDK 风格的响应）
	- 没有 candidates（被拦截/空响应）视为模型往返失败
	"""
	candidates = data.get("candidates") or []
	if not candidates:
		reason = (data.get("promptFeedback") or {}).get("blockReason", "")
		raise ModelCallError(f"model returned no candidates {reason}".strip())

	content = candidates[0].get("content") or {}
	parts = content.get("parts") or []

	calls: List[RawToolCall] = []
	for p in parts:
		fc = p.get("functionCall")
		if isinstance(fc, dict) and fc.get("name"):
			calls.append(RawToolCall(name=fc["name"], args=fc.get("args") or {}))

	if not calls:
		for fc in data.get("functionCalls") or []:
			if isinstance(fc, dict) and fc.get("name"):
				calls.append(RawToolCall(name=fc["name"], args=fc.get("args") or {}))

	text = "".join(p["text"] for p in parts if isinstance(p.get("text"), str) and not p.get("thought")).strip()

	return ModelReply(
		text=text,
		tool_calls=calls,
		content={"role": "model", "parts": parts},
	)


def _function_response_parts(outcomes: List[CallOutcome]) -> List[Dict[str, Any]]:
	return [
		{
			"functionResponse": {
				"name": o.name,
				"response": {"status": o.status, "message": o.message},
			}
		}
		for o in outcomes
	]


class ConversationSession:
	def __init__(
		self,
		llm_client: Any,
		dispatcher: Optional[ToolCallDispatcher] = None,
		system_instruction: str = SYSTEM_PROMPT,
		turn_log: Optional[TurnLog] = None,
	):
		"""
		llm_client 只需要提供 generate_content(payload) -> dict；
		dispatcher 缺省时用同一个 client 兼做缩略图生成和翻译。
		"""
		if llm_client is None:
			raise ConfigurationError("API key not configured: no model client for this session")

		self.llm_client = llm_client
		self.dispatcher = dispatcher or ToolCallDispatcher(thumbnail_generator=llm_client, translator=llm_client)
		self.system_instruction = system_instruction
		self.turn_log = turn_log

		self._history: List[Dict[str, Any]] = []
		self._pending_responses: List[Dict[str, Any]] = []
		self._state = SessionState.IDLE
		self._lock = threading.Lock()

	@property
	def state(self) -> SessionState:
		return self._state

	@property
	def history(self) -> List[Dict[str, Any]]:
		return list(self._history)

	def reset(self) -> None:
		with self._lock:
			self._history = []
			self._pending_responses = []

	def send_turn(
		self,
		user_text: str,
		current_scenes: Sequence[Scene] = (),
		anchor_images: Optional[Sequence[Optional[AnchorImage]]] = None,
	) -> TurnResult:
		if not self._lock.acquire(blocking=False):
			raise SessionBusyError("a turn is already in flight for this session")

		try:
			self._state = SessionState.AWAITING_MODEL
			scenes = list(current_scenes)
			user_content = self._build_user_content(user_text, scenes, anchor_images)

			try:
				reply = parse_model_reply(self.llm_client.generate_content(self._build_payload(user_content)))
			except ModelCallError as e:
				self._log_turn(user_text, error=str(e))
				raise

			result, outcomes = self._interpret(reply, scenes)

			# 整轮成功才写历史
			self._history.append(user_content)
			self._history.append(reply.content)
			self._pending_responses = _function_response_parts(outcomes)

			self._log_turn(user_text, result=result)
			return result

		finally:
			self._state = SessionState.IDLE
			self._lock.release()

	def translate_script(self, scenes: Sequence[Scene], target_language: str) -> TranslateNarrationsEffect:
		"""宿主的“全部翻译”按钮：不经过对话，直接走翻译契约。"""
		return TranslateNarrationsSkill(self.llm_client).run(list(scenes), target_language)

	# ---- internals ----

	def _build_user_content(
		self,
		user_text: str,
		scenes: List[Scene],
		anchor_images: Optional[Sequence[Optional[AnchorImage]]],
	) -> Dict[str, Any]:
		text = build_turn_text(render_script_context(scenes), user_text)

		images = [img for img in (anchor_images or []) if img is not None]
		if images:
			text = ANCHOR_PREFACE + text

		# 上一轮的 tool call 需要先回 functionResponse，历史才合法
		parts: List[Dict[str, Any]] = list(self._pending_responses)
		parts.append({"text": text})
		for img in images:
			parts.append(inline_image_part(img))

		return {"role": "user", "parts": parts}

	def _build_payload(self, user_content: Dict[str, Any]) -> Dict[str, Any]:
		return {
			"systemInstruction": {"parts": [{"text": self.system_instruction}]},
			"contents": self._history + [user_content],
			"tools": [{"functionDeclarations": FUNCTION_DECLARATIONS}],
			"toolConfig": {"functionCallingConfig": {"mode": "AUTO"}},
		}

	def _interpret(self, reply: ModelReply, scenes: List[Scene]) -> tuple[TurnResult, List[CallOutcome]]:
		if reply.tool_calls:
			d: DispatchResult = self.dispatcher.dispatch(reply.tool_calls, scenes)
			# 确认句在前，同批的失败提示跟在后面；都没有才退回模型原文
			display = " ".join(s for s in [d.confirmation_text, *d.failures] if s) or reply.text
			result = TurnResult(
				display_text=display,
				effects=d.effects,
				tool_calls=[c.name for c in reply.tool_calls],
				failures=d.failures,
				raw_text=reply.text,
			)
			return result, d.outcomes

		recovered = try_extract_script(reply.text)
		if recovered is not None:
			effect = GenerateScriptEffect(scenes=recovered, numbering_issues=numbering_issues(recovered))
			return TurnResult(display_text=CONFIRM_SCRIPT, effects=[effect], used_fallback=True, raw_text=reply.text), []

		return TurnResult(display_text=reply.text, raw_text=reply.text), []

	def _log_turn(self, user_text: str, result: Optional[TurnResult] = None, error: str = "") -> None:
		if self.turn_log is None:
			return

		record: Dict[str, Any] = {"user_text": user_text}
		if result is not None:
			record.update({
				"tool_calls": result.tool_calls,
				"effects": [e.kind for e in result.effects],
				"used_fallback": result.used_fallback,
				"failures": result.failures,
				"display_text": result.display_text,
			})
		if error:
			record["error"] = error

		self.turn_log.append(record)
