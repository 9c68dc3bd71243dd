# -*- coding: utf-8 -*-
"""
tool_calls/validator.py

这个文件做什么：
- 把模型返回的 RawToolCall 校验成强类型的 ToolCallRequest。
- 参数名、必填/可选严格按 wire 契约（FUNCTION_DECLARATIONS）检查。
- 任何不合规：抛 MalformedToolCallError，由 dispatcher 跳过这一条。

注意：
- 模型偶尔会漏字段、类型写错、把数字写成字符串；这些一律按不合规处理。
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from reelscript.core.errors import MalformedToolCallError
from reelscript.core.schemas import Scene

from .schema import (
	MODEL_TIERS,
	TOOL_ALIASES,
	TOOL_GENERATE_SCRIPT,
	TOOL_NAMES,
	TOOL_TRANSLATE_NARRATIONS,
	TOOL_YOUTUBE_DESCRIPTION,
	TOOL_YOUTUBE_THUMBNAIL,
	TOOL_YOUTUBE_TITLE,
	GenerateScriptCall,
	GenerateYouTubeDescriptionCall,
	GenerateYouTubeThumbnailCall,
	GenerateYouTubeTitleCall,
	RawToolCall,
	SceneNarration,
	ToolCallRequest,
	TranslateNarrationsCall,
)


def canonical_tool_name(name: Optional[str]) -> Optional[str]:
	"""已知工具名（含别名）-> 规范名；未知返回 None。"""
	if not isinstance(name, str):
		return None
	name = TOOL_ALIASES.get(name, name)
	if name in TOOL_NAMES:
		return name
	return None


def _require_str(args: Dict[str, Any], key: str, where: str) -> str:
	v = args.get(key)
	if not isinstance(v, str) or not v.strip():
		raise MalformedToolCallError(f"{where}: '{key}' must be a non-empty string")
	return v


def _require_int(v: Any, key: str, where: str) -> int:
	# JSON 里整数偶尔会以 1.0 的形式出现；bool 是 int 的子类，要排除
	if isinstance(v, bool):
		raise MalformedToolCallError(f"{where}: '{key}' must be an integer")
	if isinstance(v, int):
		return v
	if isinstance(v, float) and v.is_integer():
		return int(v)
	raise MalformedToolCallError(f"{where}: '{key}' must be an integer")


def _require_list(args: Dict[str, Any], key: str, where: str) -> List[Any]:
	v = args.get(key)
	if not isinstance(v, list):
		raise MalformedToolCallError(f"{where}: '{key}' must be an array")
	return v


def _optional_str(args: Dict[str, Any], key: str, where: str) -> Optional[str]:
	v = args.get(key)
	if v is None:
		return None
	if not isinstance(v, str):
		raise MalformedToolCallError(f"{where}: '{key}' must be a string")
	return v.strip() or None


def validate_generate_script(args: Dict[str, Any]) -> GenerateScriptCall:
	where = TOOL_GENERATE_SCRIPT
	items = _require_list(args, "scenes", where)
	if not items:
		raise MalformedToolCallError(f"{where}: 'scenes' must not be empty")

	scenes: List[Scene] = []
	for i, item in enumerate(items):
		at = f"{where}.scenes[{i}]"
		if not isinstance(item, dict):
			raise MalformedToolCallError(f"{at} must be an object")

		number = _require_int(item.get("sceneNumber"), "sceneNumber", at)
		for k in ("description", "narration"):
			if not isinstance(item.get(k), str):
				raise MalformedToolCallError(f"{at}: '{k}' must be a string")

		scenes.append(Scene(scene_number=number, description=item["description"], narration=item["narration"]))

	return GenerateScriptCall(scenes=scenes)


def validate_translate_narrations(args: Dict[str, Any]) -> TranslateNarrationsCall:
	where = TOOL_TRANSLATE_NARRATIONS
	language = _require_str(args, "targetLanguage", where).strip()

	flat: Optional[List[str]] = None
	if args.get("translatedNarrations") is not None:
		items = _require_list(args, "translatedNarrations", where)
		for i, t in enumerate(items):
			if not isinstance(t, str):
				raise MalformedToolCallError(f"{where}.translatedNarrations[{i}] must be a string")
		flat = list(items)

	sparse: Optional[List[SceneNarration]] = None
	if args.get("scenes") is not None:
		items = _require_list(args, "scenes", where)
		sparse = []
		for i, item in enumerate(items):
			at = f"{where}.scenes[{i}]"
			if not isinstance(item, dict):
				raise MalformedToolCallError(f"{at} must be an object")
			number = _require_int(item.get("sceneNumber"), "sceneNumber", at)
			if not isinstance(item.get("narration"), str):
				raise MalformedToolCallError(f"{at}: 'narration' must be a string")
			sparse.append(SceneNarration(scene_number=number, narration=item["narration"]))

	# 给了就原样保留（空数组也算给了，由 handler 按长度判失败）；两个键都缺省才走翻译契约
	return TranslateNarrationsCall(
		target_language=language,
		translated_narrations=flat,
		scenes=sparse,
	)


def validate_youtube_title(args: Dict[str, Any]) -> GenerateYouTubeTitleCall:
	return GenerateYouTubeTitleCall(title=_require_str(args, "title", TOOL_YOUTUBE_TITLE).strip())


def validate_youtube_description(args: Dict[str, Any]) -> GenerateYouTubeDescriptionCall:
	return GenerateYouTubeDescriptionCall(description=_require_str(args, "description", TOOL_YOUTUBE_DESCRIPTION).strip())


def validate_youtube_thumbnail(args: Dict[str, Any]) -> GenerateYouTubeThumbnailCall:
	where = TOOL_YOUTUBE_THUMBNAIL
	prompt = _optional_str(args, "prompt", where)

	tier_key = "modelTier" if args.get("modelTier") is not None else "imageModel"
	tier = _optional_str(args, tier_key, where)
	if tier is not None:
		tier = tier.lower()
		if tier not in MODEL_TIERS:
			raise MalformedToolCallError(f"{where}: '{tier_key}' must be one of {sorted(MODEL_TIERS)}")

	return GenerateYouTubeThumbnailCall(prompt=prompt, model_tier=tier)


_VALIDATORS = {
	TOOL_GENERATE_SCRIPT: validate_generate_script,
	TOOL_TRANSLATE_NARRATIONS: validate_translate_narrations,
	TOOL_YOUTUBE_TITLE: validate_youtube_title,
	TOOL_YOUTUBE_DESCRIPTION: validate_youtube_description,
	TOOL_YOUTUBE_THUMBNAIL: validate_youtube_thumbnail,
}


def parse_tool_call(raw: RawToolCall) -> ToolCallRequest:
	"""
	RawToolCall -> ToolCallRequest。

	未知工具名也抛 MalformedToolCallError；dispatcher 会先用
	canonical_tool_name 区分“未知”与“参数错误”，分别记日志。
	"""
	name = canonical_tool_name(raw.name)
	if name is None:
		raise MalformedToolCallError(f"unknown tool: {raw.name}")

	args = raw.args if isinstance(raw.args, dict) else None
	if args is None:
		raise MalformedToolCallError(f"{name}: args must be an object")

	return _VALIDATORS[name](args)
