# -*- coding: utf-8 -*-
"""
tool_calls/prompt.py

这个文件做什么：
- 对话助手的 system instruction（默认内置，可由调用方覆盖）。
- 每种 effect 成功/失败时给用户看的固定提示句。
- 每轮用户消息的拼装（脚本上下文 + 分隔符 + 用户原话，参考图前言）。
"""

from __future__ import annotations

SYSTEM_PROMPT = (
	"You are a creative assistant that helps the user write short vertical video reels.\n"
	"A script is an ordered list of scenes. Each scene has a sceneNumber (1-based), "
	"a vivid visual description for an image generator, and a short spoken narration. "
	"Narrations may contain bracketed delivery tags like [excited] or [whispering].\n"
	"When the user's message starts with CURRENT SCRIPT:, that block is the script as it is right now; "
	"use it to critique or reference specific scenes.\n"
	"Use the tools instead of writing JSON in your reply:\n"
	"- generateScript: write or rewrite the whole script.\n"
	"- translateNarrations: translate every narration, keeping bracketed tags unchanged.\n"
	"- generateYouTubeTitle / generateYouTubeDescription: produce metadata for the reel.\n"
	"- generateYouTubeThumbnail: request a thumbnail image (modelTier cheap or expensive).\n"
	"Otherwise answer conversationally and briefly."
)

CONTEXT_DELIMITER = "\n\n---\nUser message: "

ANCHOR_PREFACE = "Here are my anchor images (image 1, 2, 3) for style reference:\n\n"

DEFAULT_THUMBNAIL_SUMMARY = "Short video reel."

CONFIRM_SCRIPT = (
	"I've added the script to your scene editor. You can review and edit it there, "
	"then generate images and audio for each scene."
)
CONFIRM_TITLE = "I've generated a YouTube title. Check the YouTube metadata section."
CONFIRM_DESCRIPTION = "I've generated a YouTube description. Check the YouTube metadata section."
CONFIRM_THUMBNAIL = "Thumbnail generated and displayed in the YouTube metadata section."


def confirm_translation(target_language: str) -> str:
	return f"I've translated the narrations to {target_language}. The narration boxes are updated."


def fail_translation(err: str) -> str:
	return f"Translation failed: {err}."


def fail_thumbnail(err: str) -> str:
	return f"Thumbnail generation failed: {err or 'Unknown error'}."


def fail_generic(tool_name: str, err: str) -> str:
	return f"{tool_name} failed: {err}."


def build_turn_text(script_context: str, user_text: str) -> str:
	if not script_context:
		return user_text
	return f"{script_context}{CONTEXT_DELIMITER}{user_text}"
