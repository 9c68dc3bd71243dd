# -*- coding: utf-8 -*-
"""
tool_calls/fallback.py

这个文件做什么：
- 模型没走 tool call、而是把脚本 JSON 直接写进正文时，尽力把它捞出来。
- 只在“本轮没有任何结构化调用”时才会被调用，永远不是首选通道。

实现原则：
- 去掉 ``` 代码块标记，容忍前后夹杂的说明文字。
- 只从 "[ {" 这种像对象数组开头的位置尝试 raw_decode；正文里的 [excited] 之类标签不算候选。
- 每个候选允许一次“去尾逗号”的宽松重试。
- 至少一个元素有非空 description 或 narration 才算数；否则返回 None。
- 任何解析失败都返回 None（RecoveryMiss），不抛异常。
"""

from __future__ import annotations

import json
import re
from typing import Any, List, Optional

from reelscript.core.schemas import Scene, scene_from_dict


_FENCE_RE = re.compile(r"```(?:json)?\s*\n?|\n?```", flags=re.IGNORECASE)
_TRAILING_COMMA_RE = re.compile(r",\s*([\]}])")
_CANDIDATE_RE = re.compile(r"\[\s*\{")

# 只限制候选位置个数，标签再多也不占名额
MAX_CANDIDATES = 64

_decoder = json.JSONDecoder()


def _meaningful(item: Any) -> bool:
	if not isinstance(item, dict):
		return False
	for k in ("description", "narration"):
		v = item.get(k)
		if isinstance(v, str) and v.strip():
			return True
	return False


def _decode_array_at(text: str, pos: int) -> Optional[List[Any]]:
	try:
		value, _ = _decoder.raw_decode(text, pos)
	except ValueError:
		# 宽松重试：只对从 pos 开始的片段去尾逗号
		relaxed = _TRAILING_COMMA_RE.sub(r"\1", text[pos:])
		try:
			value, _ = _decoder.raw_decode(relaxed, 0)
		except ValueError:
			return None

	if isinstance(value, list):
		return value
	return None


def try_extract_script(free_text: str) -> Optional[List[Scene]]:
	if not free_text or not free_text.strip():
		return None

	cleaned = _FENCE_RE.sub("", free_text)

	for tried, match in enumerate(_CANDIDATE_RE.finditer(cleaned)):
		if tried >= MAX_CANDIDATES:
			break

		arr = _decode_array_at(cleaned, match.start())
		if arr is not None:
			items = [item for item in arr if _meaningful(item)]
			if items:
				return [scene_from_dict(item, i + 1) for i, item in enumerate(items)]

	return None
