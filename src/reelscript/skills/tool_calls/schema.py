# -*- coding: utf-8 -*-
"""
tool_calls/schema.py

- RawToolCall：模型原始返回的一次调用（name + args），尚未校验。
- ToolCallRequest：校验后的五种调用（封闭的 tagged variant，一种一个 dataclass）。
- Effect：宿主可应用的变更（同样五种 + NoneEffect），是 core 回传变更的唯一通道。
- FUNCTION_DECLARATIONS：发给 Gemini 的 tool 声明（参数名即 wire 契约）。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from reelscript.core.schemas import Scene


TOOL_GENERATE_SCRIPT = "generateScript"
TOOL_TRANSLATE_NARRATIONS = "translateNarrations"
TOOL_YOUTUBE_TITLE = "generateYouTubeTitle"
TOOL_YOUTUBE_DESCRIPTION = "generateYouTubeDescription"
TOOL_YOUTUBE_THUMBNAIL = "generateYouTubeThumbnail"

TOOL_NAMES = (
	TOOL_GENERATE_SCRIPT,
	TOOL_TRANSLATE_NARRATIONS,
	TOOL_YOUTUBE_TITLE,
	TOOL_YOUTUBE_DESCRIPTION,
	TOOL_YOUTUBE_THUMBNAIL,
)

# 旧 prompt 里用过的名字，收到时按新名字处理
TOOL_ALIASES = {
	"generateMovieScript": TOOL_GENERATE_SCRIPT,
}

MODEL_TIERS = {
	"cheap": "gemini-2.5-flash-image",
	"expensive": "gemini-3-pro-image-preview",
}
DEFAULT_MODEL_TIER = "cheap"


@dataclass(frozen=True)
class RawToolCall:
	name: str
	args: Dict[str, Any] = field(default_factory=dict)


# ---- requests ----

@dataclass(frozen=True)
class SceneNarration:
	scene_number: int
	narration: str


@dataclass(frozen=True)
class GenerateScriptCall:
	scenes: List[Scene]


@dataclass(frozen=True)
class TranslateNarrationsCall:
	target_language: str
	translated_narrations: Optional[List[str]] = None
	scenes: Optional[List[SceneNarration]] = None


@dataclass(frozen=True)
class GenerateYouTubeTitleCall:
	title: str


@dataclass(frozen=True)
class GenerateYouTubeDescriptionCall:
	description: str


@dataclass(frozen=True)
class GenerateYouTubeThumbnailCall:
	prompt: Optional[str] = None
	model_tier: Optional[str] = None


ToolCallRequest = Union[
	GenerateScriptCall,
	TranslateNarrationsCall,
	GenerateYouTubeTitleCall,
	GenerateYouTubeDescriptionCall,
	GenerateYouTubeThumbnailCall,
]


# ---- effects ----

@dataclass(frozen=True)
class GenerateScriptEffect:
	scenes: List[Scene]
	numbering_issues: List[str] = field(default_factory=list)
	kind = "generate_script"


@dataclass(frozen=True)
class TranslateNarrationsEffect:
	"""translations 与应用时的 scene 列表等长、同序（全量覆盖，不是稀疏补丁）。"""
	target_language: str
	translations: List[str]
	kind = "translate_narrations"


@dataclass(frozen=True)
class YouTubeTitleEffect:
	title: str
	kind = "youtube_title"


@dataclass(frozen=True)
class YouTubeDescriptionEffect:
	description: str
	kind = "youtube_description"


@dataclass(frozen=True)
class YouTubeThumbnailEffect:
	image: bytes
	mime_type: str
	prompt: str
	model_id: str
	kind = "youtube_thumbnail"


@dataclass(frozen=True)
class NoneEffect:
	kind = "none"


Effect = Union[
	GenerateScriptEffect,
	TranslateNarrationsEffect,
	YouTubeTitleEffect,
	YouTubeDescriptionEffect,
	YouTubeThumbnailEffect,
	NoneEffect,
]


@dataclass
class TurnResult:
	"""
	一轮对话的规范化输出。

	display_text / effects 是对宿主的契约；
	其余字段只用于日志和调试。
	"""
	display_text: str
	effects: List[Effect] = field(default_factory=list)
	tool_calls: List[str] = field(default_factory=list)
	used_fallback: bool = False
	failures: List[str] = field(default_factory=list)
	raw_text: str = ""


# ---- Gemini function declarations ----

FUNCTION_DECLARATIONS: List[Dict[str, Any]] = [
	{
		"name": TOOL_GENERATE_SCRIPT,
		"description": (
			"Writes the generated movie script with scenes into the scene editor. "
			"Call this when the user has described their idea and you are ready to produce the script."
		),
		"parameters": {
			"type": "OBJECT",
			"properties": {
				"scenes": {
					"type": "ARRAY",
					"description": "Array of scene objects for the video reel",
					"items": {
						"type": "OBJECT",
						"properties": {
							"sceneNumber": {"type": "INTEGER", "description": "Scene number (1-based index)"},
							"description": {"type": "STRING", "description": "Vivid visual description for image generation"},
							"narration": {"type": "STRING", "description": "Narration text with optional TTS tags like [excited] or [whispering]"},
						},
						"required": ["sceneNumber", "description", "narration"],
					},
				},
			},
			"required": ["scenes"],
		},
	},
	{
		"name": TOOL_TRANSLATE_NARRATIONS,
		"description": (
			"Translates all scene narrations to a target language and updates the narration boxes. "
			"Call when the user asks to translate (e.g. \"Translate to Spanish\"). "
			"Pass either translatedNarrations in scene order, or scenes with sceneNumber and translated narration."
		),
		"parameters": {
			"type": "OBJECT",
			"properties": {
				"targetLanguage": {"type": "STRING", "description": "Target language name (e.g. Spanish, French)"},
				"translatedNarrations": {
					"type": "ARRAY",
					"description": "Translated narrations, one per scene, in scene order",
					"items": {"type": "STRING"},
				},
				"scenes": {
					"type": "ARRAY",
					"description": "Array of objects with sceneNumber and translated narration",
					"items": {
						"type": "OBJECT",
						"properties": {
							"sceneNumber": {"type": "INTEGER"},
							"narration": {"type": "STRING", "description": "Translated narration for this scene"},
						},
						"required": ["sceneNumber", "narration"],
					},
				},
			},
			"required": ["targetLanguage"],
		},
	},
	{
		"name": TOOL_YOUTUBE_TITLE,
		"description": "Generates a catchy YouTube video title. Pass the title you generate so it is displayed in the app.",
		"parameters": {
			"type": "OBJECT",
			"properties": {"title": {"type": "STRING", "description": "Catchy title under 100 characters"}},
			"required": ["title"],
		},
	},
	{
		"name": TOOL_YOUTUBE_DESCRIPTION,
		"description": "Generates a YouTube video description. Pass the description you generate so it is displayed in the app.",
		"parameters": {
			"type": "OBJECT",
			"properties": {"description": {"type": "STRING", "description": "Engaging SEO-friendly description"}},
			"required": ["description"],
		},
	},
	{
		"name": TOOL_YOUTUBE_THUMBNAIL,
		"description": (
			"Triggers thumbnail image generation. Optionally pass a prompt, "
			"and modelTier: \"cheap\" or \"expensive\"."
		),
		"parameters": {
			"type": "OBJECT",
			"properties": {
				"prompt": {"type": "STRING", "description": "Optional: thumbnail image prompt"},
				"modelTier": {"type": "STRING", "description": "Optional: \"cheap\" or \"expensive\" image model"},
			},
		},
	},
]
