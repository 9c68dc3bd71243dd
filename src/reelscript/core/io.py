# -*- coding: utf-8 -*-
"""
reelscript/core/io.py

目的：
- 统一管理项目目录（ReelPack）的路径约定（哪些文件放哪里）。
- 统一 script.json / metadata.json 的读写，以及 anchors/ 参考图的加载。

为什么要做这层：
- 避免 CLI 和各个 skill 到处手写路径字符串。
- 一旦目录结构要调整，只改这里。

ReelPack 约定核心路径：
- script.json           : scene 列表（wire JSON，不含 blob）
- metadata.json         : YouTube 标题/简介
- thumbnail.<ext>       : 缩略图（扩展名跟随 MIME 类型，png / jpg / webp）
- anchors/image_1.*     : 参考图 1..3（可选，缺位允许）
- logs/llm.jsonl        : 每轮对话一条记录
"""

from __future__ import annotations

import json
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from reelscript.core.schemas import AnchorImage, ReelMetadata, Scene, scene_from_dict


ANCHOR_SLOTS = 3


@dataclass(frozen=True)
class ProjectPaths:
	"""
	把 ReelPack 内部常用文件路径集中在一个结构体里。

	注意：
	- 只存路径，不做读写。
	- ensure_dirs() 负责创建目录骨架。
	"""
	root: Path
	script: Path
	metadata: Path
	anchors_dir: Path
	logs_dir: Path

	@property
	def turn_log(self) -> Path:
		return self.logs_dir / "llm.jsonl"

	def thumbnail_for(self, mime_type: str) -> Path:
		ext = mimetypes.guess_extension(mime_type or "") or ".png"
		return self.root / f"thumbnail{ext}"

	def existing_thumbnail(self) -> Optional[Path]:
		found = sorted(self.root.glob("thumbnail.*")) if self.root.exists() else []
		return found[0] if found else None

	def ensure_dirs(self) -> None:
		# 重复执行必须安全（exist_ok=True）
		for d in (self.root, self.anchors_dir, self.logs_dir):
			d.mkdir(parents=True, exist_ok=True)


def project_paths(project_dir: str | Path) -> ProjectPaths:
	root = Path(project_dir)

	return ProjectPaths(
		root=root,
		script=root / "script.json",
		metadata=root / "metadata.json",
		anchors_dir=root / "anchors",
		logs_dir=root / "logs",
	)


def load_script(path: Path) -> List[Scene]:
	"""
	从 script.json 加载 scene 列表。

	容错：
	- 文件不存在 -> 空脚本
	- 允许顶层是数组，也允许 {"scenes": [...]}
	"""
	if not path.exists():
		return []

	data = json.loads(path.read_text(encoding="utf-8"))
	if isinstance(data, dict):
		data = data.get("scenes", [])
	if not isinstance(data, list):
		raise ValueError(f"script must be a JSON array of scenes: {path}")

	return [scene_from_dict(item, i + 1) for i, item in enumerate(data) if isinstance(item, dict)]


def save_script(path: Path, scenes: List[Scene]) -> None:
	data = {
		"schema_version": "reelscript.v0.1",
		"scenes": [s.to_dict() for s in scenes],
	}
	path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")


def save_metadata(paths: ProjectPaths, m: ReelMetadata) -> None:
	data = {"title": m.title, "description": m.description}
	paths.metadata.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")

	if m.thumbnail:
		target = paths.thumbnail_for(m.thumbnail_mime_type)
		# 换了格式时删掉旧扩展名的那份，目录里只留一张缩略图
		old = paths.existing_thumbnail()
		if old is not None and old != target:
			old.unlink()
		target.write_bytes(m.thumbnail)


def load_metadata(paths: ProjectPaths) -> ReelMetadata:
	m = ReelMetadata()
	if paths.metadata.exists():
		data = json.loads(paths.metadata.read_text(encoding="utf-8"))
		m.title = data.get("title", "")
		m.description = data.get("description", "")
	thumb = paths.existing_thumbnail()
	if thumb is not None:
		m.thumbnail = thumb.read_bytes()
		m.thumbnail_mime_type = mimetypes.guess_type(thumb.name)[0] or "image/png"
	return m


def load_anchor_images(anchors_dir: Path) -> List[Optional[AnchorImage]]:
	"""
	按槽位加载 anchors/image_1.* .. image_3.*，缺的槽位是 None（保持位置）。
	"""
	out: List[Optional[AnchorImage]] = []

	for slot in range(1, ANCHOR_SLOTS + 1):
		found = sorted(anchors_dir.glob(f"image_{slot}.*")) if anchors_dir.exists() else []
		if not found:
			out.append(None)
			continue

		f = found[0]
		mime = mimetypes.guess_type(f.name)[0] or "image/png"
		out.append(AnchorImage(data=f.read_bytes(), mime_type=mime))

	return out
