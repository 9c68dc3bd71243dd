# -*- coding: utf-8 -*-
"""
translate_narrations/validator.py

这个文件做什么：
- 对翻译模型返回的文本做强校验，任何不合规直接报错。

为什么必须强校验：
- 模型偶尔会多给一行、少给一行、包 Markdown、夹带解释。
- 译文要按位置拼回 scene，长度一错就会整体错位，所以宁可失败也不“修补”。
- 标签内容不在这里校验：是否保留标签由 prompt 约束，本地不做修复。
"""

from __future__ import annotations

import json
import re
from typing import Any, List

from reelscript.core.errors import LengthMismatchError, MalformedResponseError


_FENCE_RE = re.compile(r"```(?:json)?\s*\n?|\n?```", flags=re.IGNORECASE)


def strip_code_fences(text: str) -> str:
	return _FENCE_RE.sub("", text).strip()


def parse_string_array(text: str) -> List[str]:
	"""
	模型文本 -> List[str]。

	- 空文本、非 JSON、非数组、元素不是字符串：MalformedResponseError
	"""
	if not text or not text.strip():
		raise MalformedResponseError("No translation response")

	cleaned = strip_code_fences(text)
	try:
		parsed: Any = json.loads(cleaned)
	except ValueError:
		raise MalformedResponseError("Translation did not return valid JSON array")

	if not isinstance(parsed, list):
		raise MalformedResponseError("Translation did not return a JSON array")

	for i, item in enumerate(parsed):
		if not isinstance(item, str):
			raise MalformedResponseError(f"Translation item {i} is not a string")

	return parsed


def validate_length(result: List[str], expected: int) -> None:
	if len(result) != expected:
		raise LengthMismatchError(expected=expected, actual=len(result))
