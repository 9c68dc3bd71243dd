# -*- coding: utf-8 -*-
"""
reelscript/core/schemas/scene.py

Scene / ScriptState：脚本的基础数据结构，整个项目的共享契约。
- core 定义，skills / pipeline / cli 使用。
- 不依赖任何业务层（LLM、TTS 等）。

wire 格式（JSON，与模型 tool call 参数一致）使用 camelCase：
- sceneNumber / description / narration / narrationTranslated
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional


@dataclass
class Scene:
	"""
	一个 scene 单元（短视频的一镜）。

	scene_number：
	- 1-based，脚本内唯一，决定展示/播放顺序

	narration / narration_translated：
	- 可能带 [whispering] 这类方括号标签，整体当作不可翻译的字面量
	- narration_translated 为 None 表示“还没翻译过”，与 "" 语义不同

	image_blob / audio_blob：
	- 外部生成器产出的二进制，core 从不读写，只负责原样保留
	"""
	scene_number: int
	description: str = ""
	narration: str = ""
	narration_translated: Optional[str] = None
	image_blob: Optional[bytes] = None
	audio_blob: Optional[bytes] = None

	def to_dict(self) -> Dict[str, Any]:
		data: Dict[str, Any] = {
			"sceneNumber": self.scene_number,
			"description": self.description,
			"narration": self.narration,
		}
		if self.narration_translated is not None:
			data["narrationTranslated"] = self.narration_translated
		return data


def _as_text(v: Any) -> str:
	if v is None:
		return ""
	if isinstance(v, str):
		return v
	return str(v)


def scene_from_dict(data: Dict[str, Any], position: int) -> Scene:
	"""
	wire JSON -> Scene。

	position 是 1-based 的列表位置：
	- 只在 sceneNumber 缺失时用来补位
	- 已有的 sceneNumber 原样保留（重复/断号也不改，交给 numbering_issues 报告）
	"""
	raw_number = data.get("sceneNumber")
	if isinstance(raw_number, bool) or raw_number is None:
		number = position
	elif isinstance(raw_number, int):
		number = raw_number
	elif isinstance(raw_number, float) and raw_number.is_integer():
		number = int(raw_number)
	else:
		number = position

	translated = data.get("narrationTranslated")

	return Scene(
		scene_number=number,
		description=_as_text(data.get("description")),
		narration=_as_text(data.get("narration")),
		narration_translated=translated if isinstance(translated, str) else None,
	)


def numbering_issues(scenes: List[Scene]) -> List[str]:
	"""
	检查 scene 编号：唯一、正数、连续 1..N。

	只报告，不修正。
	"""
	issues: List[str] = []
	numbers = [s.scene_number for s in scenes]

	for n in numbers:
		if n < 1:
			issues.append(f"scene number must be positive: {n}")

	dup = sorted(n for n, cnt in Counter(numbers).items() if cnt > 1)
	for n in dup:
		issues.append(f"duplicate scene number: {n}")

	expected = set(range(1, len(scenes) + 1))
	missing = sorted(expected - set(numbers))
	if missing and not dup:
		issues.append("scene numbers are not contiguous, missing: " + ", ".join(str(n) for n in missing))

	return issues


@dataclass
class ReelMetadata:
	title: str = ""
	description: str = ""
	thumbnail: Optional[bytes] = None
	thumbnail_mime_type: str = "image/png"


@dataclass(frozen=True)
class AnchorImage:
	"""用户提供的参考图（最多 3 张），core 只透传。"""
	data: bytes
	mime_type: str = "image/png"


@dataclass
class ScriptState:
	"""
	宿主（host）持有的权威脚本状态。

	注意：
	- core 从不持有自己的副本：dispatch / session 只拿 snapshot()，
	  返回 effect，由宿主用 skills.tool_calls.applier 应用回来。
	"""
	scenes: List[Scene] = field(default_factory=list)
	metadata: ReelMetadata = field(default_factory=ReelMetadata)

	def snapshot(self) -> List[Scene]:
		return [replace(s) for s in self.scenes]

	def replace_scenes(self, scenes: List[Scene]) -> None:
		self.scenes = [replace(s) for s in scenes]

	def update_scene(self, index: int, field_name: str, value: Any) -> None:
		"""宿主 UI 的单字段编辑（对应表单里改一格）。"""
		if field_name not in ("description", "narration", "narration_translated", "image_blob", "audio_blob"):
			raise ValueError(f"field not editable: {field_name}")
		if index < 0 or index >= len(self.scenes):
			raise IndexError(f"scene index out of range: {index}")

		self.scenes[index] = replace(self.scenes[index], **{field_name: value})

	def set_translations(self, translations: List[str]) -> None:
		"""
		整体覆盖 narration_translated（一次翻译定义全部 scene 的译文状态）。
		长度必须与 scene 数一致；其余字段（含 blob）保持不变。
		"""
		if len(translations) != len(self.scenes):
			raise ValueError(f"translations length {len(translations)} != scenes {len(self.scenes)}")

		self.scenes = [
			replace(s, narration_translated=t)
			for s, t in zip(self.scenes, translations)
		]

	def numbering_issues(self) -> List[str]:
		return numbering_issues(self.scenes)
