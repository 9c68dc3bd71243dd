# -*- coding: utf-8 -*-
"""
youtube_metadata/skill.py

这个文件做什么：
- 宿主“一键生成”标题/简介时走这里（对话里模型直接把标题写进 tool 参数，不经过这里）。
- 场景图作为视觉参考，最多附 3 张。

注意：
- 只依赖 llm_client.generate_text(prompt, images=...) -> str
"""

from __future__ import annotations

from typing import Any, List

from reelscript.core.context import render_script_summary
from reelscript.core.schemas import AnchorImage, Scene

from .prompt import build_description_prompt, build_title_prompt


MAX_CONTEXT_IMAGES = 3


def scene_images(scenes: List[Scene], limit: int = MAX_CONTEXT_IMAGES) -> List[AnchorImage]:
	return [AnchorImage(data=s.image_blob) for s in scenes if s.image_blob][:limit]


class YouTubeMetadataSkill:
	def __init__(self, llm_client: Any):
		self.llm_client = llm_client

	def title(self, scenes: List[Scene]) -> str:
		prompt = build_title_prompt(render_script_summary(scenes))
		text = self.llm_client.generate_text(prompt, images=scene_images(scenes))
		return (text or "").strip() or "Untitled"

	def description(self, scenes: List[Scene]) -> str:
		prompt = build_description_prompt(render_script_summary(scenes))
		text = self.llm_client.generate_text(prompt, images=scene_images(scenes))
		return (text or "").strip()
