# -*- coding: utf-8 -*-
"""
reelscript/cli.py

目的：
- 提供项目的命令行入口（同时也是一个最小“宿主”）。
- init      ：创建 ReelPack 目录骨架（只建目录，不写业务数据）。
- new       ：从一句点子一次性生成 script.json。
- context   ：打印每轮会注入给模型的脚本上下文。
- translate ：整份脚本批量翻译（翻译契约）。
- metadata  ：生成 YouTube 标题 + 简介。
- chat      ：交互式对话；每轮拿到 TurnResult 后由宿主应用 effects。

注意：
- CLI 不做业务细节：不解析模型响应、不校验 tool call。
- CLI 只负责参数解析 + 读写 ReelPack + 把任务交给 session / skill。
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Callable, Optional

from reelscript.core.errors import ReelScriptError


def build_parser() -> argparse.ArgumentParser:
	p = argparse.ArgumentParser(
		prog="reelscript",
		description="Conversational short-video script assistant (Gemini tool calling)",
	)
	p.add_argument("--verbose", action="store_true", help="打印 INFO 级日志")

	sub = p.add_subparsers(dest="cmd", required=True)

	initp = sub.add_parser("init", help="Create an empty ReelPack directory skeleton")
	initp.add_argument("--project_dir", required=True, help="e.g. output/reel_001")

	newp = sub.add_parser("new", help="Generate script.json from a one-line idea")
	newp.add_argument("--project_dir", required=True)
	newp.add_argument("--idea", required=True)

	ctxp = sub.add_parser("context", help="Print the script context injected into every turn")
	ctxp.add_argument("--project_dir", required=True)

	trp = sub.add_parser("translate", help="Translate every narration into a target language")
	trp.add_argument("--project_dir", required=True)
	trp.add_argument("--language", required=True, help="e.g. French, Mandarin Chinese")

	metap = sub.add_parser("metadata", help="Generate YouTube title and description")
	metap.add_argument("--project_dir", required=True)

	chatp = sub.add_parser("chat", help="Chat with the script assistant")
	chatp.add_argument("--project_dir", required=True)
	chatp.add_argument("--system_prompt", default=None, help="可选：覆盖内置 system instruction 的文本文件")

	return p


def cmd_init(project_dir: str) -> None:
	from reelscript.core.io import project_paths

	paths = project_paths(project_dir)
	paths.ensure_dirs()
	print(f"[OK] ReelPack skeleton created: {paths.root}")


def cmd_context(project_dir: str) -> None:
	from reelscript.core.context import render_script_context
	from reelscript.core.io import load_script, project_paths

	scenes = load_script(project_paths(project_dir).script)
	text = render_script_context(scenes)
	print(text if text else "[INFO] script is empty")


def _load_client(project_dir: str):
	from reelscript.providers.llm.gemini_client import load_gemini_client

	# 向上查找含 .env 的项目根目录
	root = Path(project_dir).resolve()
	while root != root.parent:
		if (root / ".env").exists():
			break
		root = root.parent
	if not (root / ".env").exists():
		root = Path.cwd()

	return load_gemini_client(project_root=str(root))


def cmd_new(project_dir: str, idea: str, llm=None) -> None:
	from reelscript.core.io import project_paths, save_script
	from reelscript.skills.generate_script.skill import GenerateScriptSkill

	paths = project_paths(project_dir)
	paths.ensure_dirs()

	client = llm or _load_client(project_dir)
	try:
		scenes = GenerateScriptSkill(client).run(idea)
	finally:
		if llm is None:
			client.close()

	save_script(paths.script, scenes)
	print(f"[OK] {len(scenes)} scene(s) -> {paths.script}")


def cmd_translate(project_dir: str, language: str, llm=None) -> None:
	from reelscript.core.io import load_script, project_paths, save_script
	from reelscript.core.schemas import ScriptState
	from reelscript.skills.tool_calls.applier import apply_effects
	from reelscript.skills.translate_narrations.skill import TranslateNarrationsSkill

	paths = project_paths(project_dir)
	state = ScriptState(scenes=load_script(paths.script))
	if not any(s.narration for s in state.scenes):
		print("[INFO] nothing to translate")
		return

	client = llm or _load_client(project_dir)
	try:
		effect = TranslateNarrationsSkill(client).run(state.snapshot(), language)
	finally:
		if llm is None:
			client.close()

	apply_effects(state, [effect])
	save_script(paths.script, state.scenes)
	print(f"[OK] translated {len(state.scenes)} narration(s) to {language}")


def cmd_metadata(project_dir: str, llm=None) -> None:
	from reelscript.core.io import load_metadata, load_script, project_paths, save_metadata
	from reelscript.skills.youtube_metadata.skill import YouTubeMetadataSkill

	paths = project_paths(project_dir)
	scenes = load_script(paths.script)
	if not scenes:
		print("[INFO] script is empty")
		return

	client = llm or _load_client(project_dir)
	try:
		skill = YouTubeMetadataSkill(client)
		m = load_metadata(paths)
		m.title = skill.title(scenes)
		m.description = skill.description(scenes)
	finally:
		if llm is None:
			client.close()

	save_metadata(paths, m)
	print(f"[OK] title: {m.title}")


def cmd_chat(
	project_dir: str,
	system_prompt: Optional[str] = None,
	llm=None,
	read_line: Callable[[str], str] = input,
) -> None:
	from reelscript.core.io import load_anchor_images, load_metadata, load_script, project_paths, save_metadata, save_script
	from reelscript.core.schemas import ScriptState
	from reelscript.core.turn_log import TurnLog
	from reelscript.pipeline.session import ConversationSession
	from reelscript.skills.tool_calls.applier import apply_effects
	from reelscript.skills.tool_calls.prompt import SYSTEM_PROMPT

	paths = project_paths(project_dir)
	paths.ensure_dirs()

	state = ScriptState(scenes=load_script(paths.script), metadata=load_metadata(paths))
	anchors = load_anchor_images(paths.anchors_dir)
	instruction = Path(system_prompt).read_text(encoding="utf-8") if system_prompt else SYSTEM_PROMPT

	client = llm or _load_client(project_dir)
	session = ConversationSession(client, system_instruction=instruction, turn_log=TurnLog(paths.turn_log))

	print("[INFO] type /quit to save and exit")
	try:
		while True:
			try:
				line = read_line("you> ").strip()
			except EOFError:
				break

			if not line:
				continue
			if line in ("/quit", "/exit"):
				break

			try:
				result = session.send_turn(line, state.snapshot(), anchors)
			except ReelScriptError as e:
				print(f"[ERROR] {e}")
				continue

			apply_effects(state, result.effects)
			for e in result.effects:
				issues = getattr(e, "numbering_issues", None)
				if issues:
					print(f"[WARN] {'; '.join(issues)}")

			print(f"[assistant] {result.display_text}")
	finally:
		if llm is None:
			client.close()

	save_script(paths.script, state.scenes)
	save_metadata(paths, state.metadata)
	print(f"[OK] saved {len(state.scenes)} scene(s) -> {paths.script}")


def main(argv=None) -> None:
	args = build_parser().parse_args(argv)
	logging.basicConfig(
		level=logging.INFO if args.verbose else logging.WARNING,
		format="%(levelname)s %(name)s: %(message)s",
	)

	if args.cmd == "init":
		cmd_init(args.project_dir)
		return

	if args.cmd == "new":
		cmd_new(args.project_dir, args.idea)
		return

	if args.cmd == "context":
		cmd_context(args.project_dir)
		return

	if args.cmd == "translate":
		cmd_translate(args.project_dir, args.language)
		return

	if args.cmd == "metadata":
		cmd_metadata(args.project_dir)
		return

	if args.cmd == "chat":
		cmd_chat(args.project_dir, system_prompt=args.system_prompt)
		return
