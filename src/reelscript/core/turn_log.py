# -*- coding: utf-8 -*-
"""
reelscript/core/turn_log.py

目的：
- 每轮对话追加一条 JSONL 记录到 logs/llm.jsonl，便于事后审计/调试。
- 只记录“发生了什么”（tool 名、effect 种类、是否走了 fallback、失败原因），
  不记录二进制（图片/缩略图）。

注意：
- 这是日志，不是会话持久化：重启进程后不会用它恢复对话。
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List


@dataclass
class TurnLog:
	path: Path

	def append(self, record: Dict[str, Any]) -> None:
		self.path.parent.mkdir(parents=True, exist_ok=True)

		row = {"ts": datetime.now(timezone.utc).isoformat()}
		row.update(record)

		with self.path.open("a", encoding="utf-8") as f:
			f.write(json.dumps(row, ensure_ascii=False) + "\n")

	def read_all(self) -> List[Dict[str, Any]]:
		if not self.path.exists():
			return []

		rows = []
		for line in self.path.read_text(encoding="utf-8").splitlines():
			if line.strip():
				rows.append(json.loads(line))
		return rows
