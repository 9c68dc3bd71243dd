# -*- coding: utf-8 -*-
"""
generate_script/skill.py

这个文件做什么：
- 不经过对话，直接把一句“视频点子”变成 scene 列表（一次性生成）。
  1) 模板里替换 {{MOVIE_IDEA}}
  2) 调用 LLM 拿文本
  3) 去代码块、解析 JSON、转成 Scene

注意：
- 模型偶尔只返回单个对象而不是数组，这里包成一个元素的列表。
- 解析失败抛 MalformedResponseError，不回退。
"""

from __future__ import annotations

import json
from typing import Any, List, Optional

from reelscript.core.errors import MalformedResponseError
from reelscript.core.schemas import Scene, scene_from_dict
from reelscript.skills.translate_narrations.validator import strip_code_fences


SCRIPT_PROMPT_TEMPLATE = (
	"You are a screenwriter for short vertical video reels (30-60 seconds).\n"
	"Turn the idea below into 4-8 scenes. For each scene write a vivid visual description "
	"for an image generator and one or two sentences of narration. "
	"You may add bracketed delivery tags such as [excited] or [whispering] to the narration. "
	"If the idea mentions image 1, image 2 or image 3, keep those references in the descriptions.\n"
	"Return ONLY a JSON array of objects with keys sceneNumber, description, narration.\n\n"
	"Idea: {{MOVIE_IDEA}}"
)


def build_script_prompt(movie_idea: str, template: Optional[str] = None) -> str:
	return (template or SCRIPT_PROMPT_TEMPLATE).replace("{{MOVIE_IDEA}}", movie_idea.strip())


class GenerateScriptSkill:
	def __init__(self, llm_client: Any, template: Optional[str] = None):
		self.llm_client = llm_client
		self.template = template

	def run(self, movie_idea: str) -> List[Scene]:
		if not movie_idea or not movie_idea.strip():
			raise ValueError("movie idea must not be empty")

		text = self.llm_client.generate_text(build_script_prompt(movie_idea, self.template))
		if not text:
			raise MalformedResponseError("No response from model")

		try:
			parsed = json.loads(strip_code_fences(text))
		except ValueError:
			raise MalformedResponseError("Script generation did not return valid JSON")

		items = parsed if isinstance(parsed, list) else [parsed]
		scenes = [scene_from_dict(item, i + 1) for i, item in enumerate(items) if isinstance(item, dict)]
		if not scenes:
			raise MalformedResponseError("Script generation returned no scenes")

		return scenes
