# -*- coding: utf-8 -*-
"""
providers/llm/gemini_client.py

这个文件做什么：
- 提供一个极薄的 Gemini REST Client（httpx），供 skill / session 调用。
- 支持从项目根目录的 .env 读取配置（推荐），避免在 shell 里 export。
- 对外暴露：
  - generate_content(payload, model)  -> 原始响应 dict（session 用，带 tools）
  - generate_text(prompt, images)     -> str（翻译 / 标题 / 简介 / 一次性脚本）
  - generate_thumbnail(prompt, reference_images, model_id) -> (bytes, mime)

配置来源优先级（从高到低）：
1) 显式传参（api_key/base_url/model）
2) .env 文件
3) 系统环境变量（兜底）

安全约定：
- .env 必须写进 .gitignore
- 不要把 key 写进任何代码文件
"""

from __future__ import annotations

import base64
import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import httpx
from dotenv import load_dotenv

from reelscript.core.errors import ConfigurationError, DownstreamError, ModelCallError
from reelscript.core.schemas import AnchorImage


DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_TEXT_MODEL = "gemini-2.5-flash"
DEFAULT_IMAGE_MODEL = "gemini-2.5-flash-image"


@dataclass
class GeminiConfig:
	api_key: str
	base_url: str = DEFAULT_BASE_URL
	text_model: str = DEFAULT_TEXT_MODEL
	image_model: str = DEFAULT_IMAGE_MODEL
	timeout_s: float = 60.0


def _snip(body: str, limit: int = 1000) -> str:
	if len(body) > limit:
		return body[:limit] + "...(truncated)"
	return body


def inline_image_part(img: AnchorImage) -> Dict[str, Any]:
	return {
		"inlineData": {
			"mimeType": img.mime_type or "image/png",
			"data": base64.b64encode(img.data).decode("ascii"),
		}
	}


def response_text(data: Dict[str, Any]) -> str:
	"""拼出第一个 candidate 里所有 text part。"""
	candidates = data.get("candidates") or []
	if not candidates:
		return ""
	parts = (candidates[0].get("content") or {}).get("parts") or []
	return "".join(p["text"] for p in parts if isinstance(p.get("text"), str)).strip()


class GeminiLLMClient:
	def __init__(self, cfg: GeminiConfig, transport: Optional[httpx.BaseTransport] = None):
		self.cfg = cfg
		self._client = httpx.Client(
			base_url=cfg.base_url,
			timeout=httpx.Timeout(cfg.timeout_s),
			headers={
				"x-goog-api-key": cfg.api_key,
				"Content-Type": "application/json",
			},
			transport=transport,
		)

	def close(self) -> None:
		self._client.close()

	def generate_content(self, payload: Dict[str, Any], model: Optional[str] = None) -> Dict[str, Any]:
		"""
		一次 generateContent 往返。

		任何网络/HTTP 失败都统一成 ModelCallError，调用方据此中断本轮。
		"""
		m = model or self.cfg.text_model

		try:
			r = self._client.post(f"/models/{m}:generateContent", json=payload)
		except httpx.HTTPError as e:
			raise ModelCallError(f"Gemini request failed: {e}") from e

		if r.status_code < 200 or r.status_code >= 300:
			raise ModelCallError(f"Gemini HTTP {r.status_code}: {_snip(r.text)}")

		try:
			return r.json()
		except ValueError:
			raise ModelCallError(f"Gemini returned non-JSON body: {_snip(r.text)}")

	def generate_text(self, prompt: str, images: Optional[List[AnchorImage]] = None, model: Optional[str] = None) -> str:
		parts: List[Dict[str, Any]] = [{"text": prompt}]
		for img in images or []:
			parts.append(inline_image_part(img))

		data = self.generate_content({"contents": [{"role": "user", "parts": parts}]}, model=model)
		return response_text(data)

	def generate_thumbnail(
		self,
		prompt: str,
		reference_images: List[AnchorImage],
		model_id: Optional[str] = None,
	) -> Tuple[bytes, str]:
		"""
		生成一张图片，返回 (bytes, mime_type)。

		注意：
		- 这是 handler 侧的下游调用，失败统一抛 DownstreamError，
		  由 dispatcher 转成一句失败提示，不影响同批其它 tool call。
		"""
		parts: List[Dict[str, Any]] = [{"text": prompt}]
		for img in reference_images:
			parts.append(inline_image_part(img))

		payload = {
			"contents": [{"role": "user", "parts": parts}],
			"generationConfig": {"responseModalities": ["TEXT", "IMAGE"]},
		}

		try:
			data = self.generate_content(payload, model=model_id or self.cfg.image_model)
		except ModelCallError as e:
			raise DownstreamError(str(e)) from e

		for c in data.get("candidates") or []:
			for p in (c.get("content") or {}).get("parts") or []:
				inline = p.get("inlineData") or {}
				if inline.get("data"):
					return base64.b64decode(inline["data"]), inline.get("mimeType") or "image/png"

		raise DownstreamError(f"No image in response: {_snip(json.dumps(data, ensure_ascii=False), 300)}")


def _load_dotenv_if_present(project_root: Path) -> None:
	"""
	如果项目根目录存在 .env，则加载到 os.environ。
	"""
	env_path = project_root / ".env"
	if env_path.exists():
		load_dotenv(dotenv_path=str(env_path), override=False)


def load_gemini_client(
	project_root: Optional[str] = None,
	api_key: Optional[str] = None,
	base_url: Optional[str] = None,
	text_model: Optional[str] = None,
	image_model: Optional[str] = None,
	timeout_s: Optional[float] = None,
) -> GeminiLLMClient:
	"""
	加载 Gemini client。

	默认从 project_root/.env 读取（project_root 缺省为当前工作目录）。
	缺 GEMINI_API_KEY 直接抛 ConfigurationError：这是会话级致命错误，不重试。
	"""
	root = Path(project_root or os.getcwd()).resolve()
	_load_dotenv_if_present(root)

	key = (api_key or os.environ.get("GEMINI_API_KEY", "")).strip()
	if not key:
		raise ConfigurationError("Missing GEMINI_API_KEY (from .env or env)")

	url = (base_url or os.environ.get("GEMINI_BASE_URL", "")).strip() or DEFAULT_BASE_URL
	tm = (text_model or os.environ.get("GEMINI_TEXT_MODEL", "")).strip() or DEFAULT_TEXT_MODEL
	im = (image_model or os.environ.get("GEMINI_IMAGE_MODEL", "")).strip() or DEFAULT_IMAGE_MODEL
	t = float(timeout_s or os.environ.get("GEMINI_TIMEOUT_S", "60").strip() or 60)

	cfg = GeminiConfig(api_key=key, base_url=url, text_model=tm, image_model=im, timeout_s=t)
	return GeminiLLMClient(cfg)
