# -*- coding: utf-8 -*-
"""
tool_calls/dispatcher.py

这个文件做什么：
- 把一轮里模型返回的若干 tool call 依次执行，汇总成 effects + 一句确认文案：
  1) 按到达顺序处理（不重排）
  2) 未知工具名：记日志，跳过
  3) 参数校验失败：静默跳过（不产生 effect，也不产生提示句），继续下一条
  4) 合法调用交给对应 handler；handler 失败只影响这一条，转成一句失败提示
  5) 确认文案取“第一个成功的 effect”的固定句子，后面成功的照样产出 effect

注意：
- 同一批里，后面的 handler 看到的是前面 effect 预演之后的 scene 列表
  （比如先 generateScript 再 translateNarrations）。
- dispatch 本身不改宿主状态，也不会把异常抛出去。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple

from reelscript.core.context import render_script_summary
from reelscript.core.errors import DownstreamError, LengthMismatchError, MalformedToolCallError, ProtocolError
from reelscript.core.schemas import AnchorImage, Scene, numbering_issues
from reelscript.skills.translate_narrations.skill import TranslateNarrationsSkill
from reelscript.skills.youtube_metadata.prompt import build_thumbnail_prompt
from reelscript.skills.youtube_metadata.skill import scene_images

from .applier import apply_to_scenes
from .prompt import (
	CONFIRM_DESCRIPTION,
	CONFIRM_SCRIPT,
	CONFIRM_THUMBNAIL,
	CONFIRM_TITLE,
	DEFAULT_THUMBNAIL_SUMMARY,
	confirm_translation,
	fail_generic,
	fail_thumbnail,
	fail_translation,
)
from .schema import (
	DEFAULT_MODEL_TIER,
	MODEL_TIERS,
	Effect,
	GenerateScriptCall,
	GenerateScriptEffect,
	GenerateYouTubeDescriptionCall,
	GenerateYouTubeThumbnailCall,
	GenerateYouTubeTitleCall,
	RawToolCall,
	ToolCallRequest,
	TranslateNarrationsCall,
	TranslateNarrationsEffect,
	YouTubeDescriptionEffect,
	YouTubeThumbnailEffect,
	YouTubeTitleEffect,
)
from .validator import canonical_tool_name, parse_tool_call


logger = logging.getLogger(__name__)

THUMBNAIL_REFERENCE_IMAGES = 2

STATUS_OK = "ok"
STATUS_SKIPPED = "skipped"
STATUS_UNKNOWN = "unknown"
STATUS_FAILED = "failed"


class ThumbnailGenerator(Protocol):
	def generate_thumbnail(
		self,
		prompt: str,
		reference_images: List[AnchorImage],
		model_id: Optional[str] = None,
	) -> Tuple[bytes, str]:
		...


@dataclass
class CallOutcome:
	"""一条调用的处理结果，session 用它回填 functionResponse。"""
	name: str
	status: str
	message: str = ""


@dataclass
class DispatchResult:
	effects: List[Effect] = field(default_factory=list)
	confirmation_text: str = ""
	failures: List[str] = field(default_factory=list)
	outcomes: List[CallOutcome] = field(default_factory=list)


Handler = Callable[[Any, List[Scene]], Tuple[Effect, str]]


class ToolCallDispatcher:
	def __init__(self, thumbnail_generator: Optional[ThumbnailGenerator] = None, translator: Any = None):
		"""
		thumbnail_generator：缩略图下游（GeminiLLMClient 即可）
		translator：模型只给 targetLanguage 不给译文时，用它走翻译契约
		"""
		self.thumbnail_generator = thumbnail_generator
		self.translator = translator
		self._handlers: Dict[type, Handler] = {
			GenerateScriptCall: self._handle_generate_script,
			TranslateNarrationsCall: self._handle_translate,
			GenerateYouTubeTitleCall: self._handle_title,
			GenerateYouTubeDescriptionCall: self._handle_description,
			GenerateYouTubeThumbnailCall: self._handle_thumbnail,
		}

	def dispatch(self, calls: List[RawToolCall], current_scenes: List[Scene]) -> DispatchResult:
		result = DispatchResult()
		scenes = [replace(s) for s in current_scenes]

		for raw in calls:
			name = canonical_tool_name(raw.name)
			if name is None:
				logger.warning("ignoring unknown tool call: %r", raw.name)
				result.outcomes.append(CallOutcome(name=str(raw.name), status=STATUS_UNKNOWN, message="unknown tool"))
				continue

			try:
				request = parse_tool_call(raw)
			except MalformedToolCallError as e:
				logger.info("skipping malformed tool call %s: %s", name, e)
				result.outcomes.append(CallOutcome(name=name, status=STATUS_SKIPPED, message=str(e)))
				continue

			try:
				effect, sentence = self._run_handler(request, scenes)
				scenes = apply_to_scenes(scenes, effect)
			except Exception as e:
				# handler 失败只影响这一条：记下失败提示，继续处理后面的调用
				logger.warning("tool call %s failed: %s", name, e)
				result.failures.append(self._failure_sentence(request, name, e))
				result.outcomes.append(CallOutcome(name=name, status=STATUS_FAILED, message=str(e)))
				continue

			result.effects.append(effect)
			result.outcomes.append(CallOutcome(name=name, status=STATUS_OK))
			if not result.confirmation_text:
				result.confirmation_text = sentence

		return result

	def _run_handler(self, request: ToolCallRequest, scenes: List[Scene]) -> Tuple[Effect, str]:
		return self._handlers[type(request)](request, scenes)

	def _failure_sentence(self, request: ToolCallRequest, name: str, err: Exception) -> str:
		if isinstance(request, GenerateYouTubeThumbnailCall):
			return fail_thumbnail(str(err))
		if isinstance(request, TranslateNarrationsCall):
			return fail_translation(str(err))
		return fail_generic(name, str(err))

	# ---- handlers ----

	def _handle_generate_script(self, req: GenerateScriptCall, scenes: List[Scene]) -> Tuple[Effect, str]:
		issues = numbering_issues(req.scenes)
		if issues:
			logger.info("generated script has numbering issues: %s", "; ".join(issues))
		return GenerateScriptEffect(scenes=list(req.scenes), numbering_issues=issues), CONFIRM_SCRIPT

	def _handle_translate(self, req: TranslateNarrationsCall, scenes: List[Scene]) -> Tuple[Effect, str]:
		if not scenes:
			raise ProtocolError("there are no scenes to translate")

		if req.translated_narrations is not None:
			if len(req.translated_narrations) != len(scenes):
				raise LengthMismatchError(expected=len(scenes), actual=len(req.translated_narrations))
			effect = TranslateNarrationsEffect(
				target_language=req.target_language,
				translations=list(req.translated_narrations),
			)

		elif req.scenes is not None:
			# 稀疏形式：按 sceneNumber 对齐；没点名的 scene 明确清成 ""（全量替换，不叠加上一次）
			by_number = {p.scene_number: p.narration for p in req.scenes}
			if not any(s.scene_number in by_number for s in scenes):
				raise ProtocolError("none of the translated sceneNumbers exist in the script")
			effect = TranslateNarrationsEffect(
				target_language=req.target_language,
				translations=[by_number.get(s.scene_number, "") for s in scenes],
			)

		else:
			if self.translator is None:
				raise DownstreamError("no translator configured")
			effect = TranslateNarrationsSkill(self.translator).run(scenes, req.target_language)

		return effect, confirm_translation(req.target_language)

	def _handle_title(self, req: GenerateYouTubeTitleCall, scenes: List[Scene]) -> Tuple[Effect, str]:
		return YouTubeTitleEffect(title=req.title), CONFIRM_TITLE

	def _handle_description(self, req: GenerateYouTubeDescriptionCall, scenes: List[Scene]) -> Tuple[Effect, str]:
		return YouTubeDescriptionEffect(description=req.description), CONFIRM_DESCRIPTION

	def _handle_thumbnail(self, req: GenerateYouTubeThumbnailCall, scenes: List[Scene]) -> Tuple[Effect, str]:
		if self.thumbnail_generator is None:
			raise DownstreamError("no thumbnail generator configured")

		prompt = req.prompt or build_thumbnail_prompt(render_script_summary(scenes) or DEFAULT_THUMBNAIL_SUMMARY)
		model_id = MODEL_TIERS[req.model_tier or DEFAULT_MODEL_TIER]
		refs = scene_images(scenes, limit=THUMBNAIL_REFERENCE_IMAGES)

		image, mime_type = self.thumbnail_generator.generate_thumbnail(prompt, refs, model_id)
		effect = YouTubeThumbnailEffect(image=image, mime_type=mime_type, prompt=prompt, model_id=model_id)
		return effect, CONFIRM_THUMBNAIL
