# -*- coding: utf-8 -*-
"""
youtube_metadata/prompt.py

标题 / 简介 / 缩略图三种 prompt 的组装，只拼字符串，不调用模型。
输入都是 render_script_summary() 的脚本摘要。
"""

from __future__ import annotations


def build_title_prompt(script_summary: str) -> str:
	return (
		"Generate a single catchy YouTube video title (under 100 characters) for this reel. "
		"Use the script below and the attached scene images as context. "
		"Return ONLY the title text, no quotes or extra text.\n\n"
		f"Script:\n{script_summary}"
	)


def build_description_prompt(script_summary: str) -> str:
	return (
		"Generate a YouTube video description (2-4 short paragraphs, engaging and SEO-friendly) for this reel. "
		"Use the script and attached scene images below. Return ONLY the description text.\n\n"
		f"Script:\n{script_summary}"
	)


def build_thumbnail_prompt(script_summary: str) -> str:
	return (
		"Create a single, eye-catching YouTube thumbnail image for this video reel. "
		"The thumbnail should be vertical (9:16) or square, bold and click-worthy. "
		f"Base it on this content:\n\n{script_summary}\n\n"
		"Make it visually striking with clear focal point, suitable for YouTube/Shorts."
	)
