# -*- coding: utf-8 -*-
"""
translate_narrations/prompt.py

这个文件做什么：
- 把 narration 列表 + 目标语言拼成一个“受约束的翻译任务”。
- 这里不调用模型，只做 prompt 组装。

关键点：
- 强调：方括号标签（[excited]、[whispering]）原样保留。
- 强调：只返回 JSON 数组，顺序和长度与输入一致。
"""

from __future__ import annotations

from typing import List


def build_translate_prompt(narrations: List[str], target_language: str) -> str:
	numbered = "\n".join(f"{i + 1}. {n}" for i, n in enumerate(narrations))

	return (
		"You are a professional translator. "
		f"Translate the following narration lines into {target_language}. "
		"Preserve meaning and tone. "
		"Keep bracketed TTS/emotional tags (e.g. [excited], [whispering]) exactly unchanged. "
		"Do not add any commentary. Return ONLY a valid JSON array of strings "
		"in the same order and length as the input.\n\n"
		f"Narrations:\n{numbered}"
	)
