# -*- coding: utf-8 -*-
"""
reelscript/core/context.py

这个文件做什么：
- 把当前脚本渲染成一段纯文本，在每一轮对话前注入给模型，
  让模型能引用/点评具体某一镜。

格式（必须稳定，逐字节可复现）：
	CURRENT SCRIPT:

	Scene 1:
	Description: ...
	Narration (original): ...
	Narration (translated): ...   # 只有非空译文才输出

注意：
- 纯函数：同样输入永远得到同样输出。
- 空脚本返回 ""，调用方据此整段省略，不要只注入一个空标签。
"""

from __future__ import annotations

from typing import List

from reelscript.core.schemas import Scene


CONTEXT_LABEL = "CURRENT SCRIPT:"


def _render_scene(s: Scene) -> str:
	lines = [
		f"Scene {s.scene_number}:",
		f"Description: {s.description or ''}",
		f"Narration (original): {s.narration or ''}",
	]
	if s.narration_translated:
		lines.append(f"Narration (translated): {s.narration_translated}")
	return "\n".join(lines)


def render_script_summary(scenes: List[Scene]) -> str:
	"""scene 块拼接（不带标签），给标题/简介/缩略图 prompt 当素材。"""
	return "\n\n".join(_render_scene(s) for s in scenes)


def render_script_context(scenes: List[Scene]) -> str:
	if not scenes:
		return ""
	return f"{CONTEXT_LABEL}\n\n{render_script_summary(scenes)}"
