# -*- coding: utf-8 -*-
"""
translate_narrations/skill.py

这个文件做什么：
- translate_batch：批量翻译 narration 的“契约”：
  1) 空输入直接返回 []，不发请求
  2) build prompt
  3) 调用 LLM 拿文本
  4) 解析为字符串数组 + 校验长度
- TranslateNarrationsSkill：把翻译结果按位置拼回 scene，产出一个全量覆盖的 effect。

注意：
- 这里只依赖一个 llm_client 接口：
  llm_client.generate_text(prompt: str) -> str
- 契约层不做 per-scene 合并；合并在 skill.run 里按位置 zip。
"""

from __future__ import annotations

from typing import Any, List

from reelscript.core.schemas import Scene
from reelscript.skills.tool_calls.schema import TranslateNarrationsEffect

from .prompt import build_translate_prompt
from .validator import parse_string_array, validate_length


def translate_batch(llm_client: Any, narrations: List[str], target_language: str) -> List[str]:
	if not narrations:
		return []

	prompt = build_translate_prompt(narrations, target_language)
	text = llm_client.generate_text(prompt)

	result = parse_string_array(text)
	validate_length(result, len(narrations))
	return result


class TranslateNarrationsSkill:
	def __init__(self, llm_client: Any):
		self.llm_client = llm_client

	def run(self, scenes: List[Scene], target_language: str) -> TranslateNarrationsEffect:
		narrations = [s.narration or "" for s in scenes]
		translated = translate_batch(self.llm_client, narrations, target_language)
		return TranslateNarrationsEffect(target_language=target_language, translations=translated)
