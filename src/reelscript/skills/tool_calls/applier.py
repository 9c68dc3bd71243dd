# -*- coding: utf-8 -*-
"""
tool_calls/applier.py

这个文件做什么：
- 把 effect 应用到 scene 列表 / ScriptState 上。
- apply_to_scenes 是纯函数：输入 -> 输出，不读写文件、不调用模型。
  dispatcher 用它在同一批调用里“预演”前面 effect 的结果。
- apply_effects 是宿主侧入口：整轮 TurnResult 出来以后一次性应用。

实现原则：
- 只有 GenerateScript 会整表替换；翻译只改 narration_translated，blob 原样保留。
- 非法 effect（比如译文长度和 scene 数对不上）直接 raise，不做修补。
"""

from __future__ import annotations

from dataclasses import replace
from typing import List

from reelscript.core.errors import LengthMismatchError
from reelscript.core.schemas import Scene, ScriptState

from .schema import (
	Effect,
	GenerateScriptEffect,
	TranslateNarrationsEffect,
	YouTubeDescriptionEffect,
	YouTubeThumbnailEffect,
	YouTubeTitleEffect,
)


def apply_to_scenes(scenes: List[Scene], effect: Effect) -> List[Scene]:
	if isinstance(effect, GenerateScriptEffect):
		return [replace(s) for s in effect.scenes]

	if isinstance(effect, TranslateNarrationsEffect):
		if len(effect.translations) != len(scenes):
			raise LengthMismatchError(expected=len(scenes), actual=len(effect.translations))
		return [replace(s, narration_translated=t) for s, t in zip(scenes, effect.translations)]

	# 其余 effect 不动 scene
	return scenes


def apply_effects(state: ScriptState, effects: List[Effect]) -> None:
	"""
	按顺序把 effects 应用到宿主状态。

	先在副本上全部算完再落到 state：中途失败时 state 保持原样。
	"""
	scenes = state.snapshot()
	metadata = replace(state.metadata)

	for e in effects:
		scenes = apply_to_scenes(scenes, e)

		if isinstance(e, YouTubeTitleEffect):
			metadata.title = e.title
		elif isinstance(e, YouTubeDescriptionEffect):
			metadata.description = e.description
		elif isinstance(e, YouTubeThumbnailEffect):
			metadata.thumbnail = e.image
			metadata.thumbnail_mime_type = e.mime_type

	state.scenes = scenes
	state.metadata = metadata
