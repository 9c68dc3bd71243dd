# -*- coding: utf-8 -*-
"""Gemini client 测试：httpx.MockTransport 模拟服务端，不联网。"""

from __future__ import annotations

import base64
import json
import os

import httpx
import pytest

from reelscript.core.errors import ConfigurationError, DownstreamError, ModelCallError
from reelscript.core.schemas import AnchorImage
from reelscript.providers.llm.gemini_client import GeminiConfig, GeminiLLMClient, load_gemini_client


def _client(handler):
	return GeminiLLMClient(GeminiConfig(api_key="test-key"), transport=httpx.MockTransport(handler))


def _text_response(text):
	return httpx.Response(200, json={"candidates": [{"content": {"role": "model", "parts": [{"text": text}]}}]})


class TestGeminiClient:
	def test_generate_text_request_shape(self):
		seen = {}

		def handler(request):
			seen["url"] = str(request.url)
			seen["key"] = request.headers.get("x-goog-api-key")
			seen["body"] = json.loads(request.content)
			return _text_response("  hello  ")

		c = _client(handler)
		out = c.generate_text("say hello", images=[AnchorImage(b"img", "image/jpeg")])
		c.close()

		assert out == "hello"
		assert seen["url"].endswith("/models/gemini-2.5-flash:generateContent")
		assert seen["key"] == "test-key"
		parts = seen["body"]["contents"][0]["parts"]
		assert parts[0] == {"text": "say hello"}
		assert parts[1]["inlineData"]["mimeType"] == "image/jpeg"

	def test_http_error_is_model_call_error(self):
		c = _client(lambda request: httpx.Response(503, text="overloaded"))
		with pytest.raises(ModelCallError) as ei:
			c.generate_content({"contents": []})
		assert "503" in str(ei.value)

	def test_non_json_body_is_model_call_error(self):
		c = _client(lambda request: httpx.Response(200, text="<html>"))
		with pytest.raises(ModelCallError):
			c.generate_content({"contents": []})

	def test_transport_error_is_model_call_error(self):
		def handler(request):
			raise httpx.ConnectError("no route", request=request)

		with pytest.raises(ModelCallError):
			_client(handler).generate_text("hi")

	def test_thumbnail_decodes_inline_image(self):
		seen = {}

		def handler(request):
			seen["url"] = str(request.url)
			seen["body"] = json.loads(request.content)
			return httpx.Response(200, json={"candidates": [{"content": {"parts": [
				{"text": "here"},
				{"inlineData": {"mimeType": "image/webp", "data": base64.b64encode(b"IMG").decode("ascii")}},
			]}}]})

		image, mime = _client(handler).generate_thumbnail("bold", [AnchorImage(b"ref")], "gemini-3-pro-image-preview")

		assert image == b"IMG"
		assert mime == "image/webp"
		assert "gemini-3-pro-image-preview" in seen["url"]
		assert seen["body"]["generationConfig"]["responseModalities"] == ["TEXT", "IMAGE"]
		assert len(seen["body"]["contents"][0]["parts"]) == 2

	def test_thumbnail_without_image_is_downstream_error(self):
		c = _client(lambda request: _text_response("I cannot draw that"))
		with pytest.raises(DownstreamError):
			c.generate_thumbnail("bold", [])

	def test_thumbnail_http_failure_is_downstream_error(self):
		c = _client(lambda request: httpx.Response(429, text="quota"))
		with pytest.raises(DownstreamError):
			c.generate_thumbnail("bold", [])


class TestLoadClient:
	def test_missing_key(self, tmp_path, monkeypatch):
		monkeypatch.delenv("GEMINI_API_KEY", raising=False)
		with pytest.raises(ConfigurationError):
			load_gemini_client(project_root=str(tmp_path))

	def test_reads_dotenv(self, tmp_path, monkeypatch):
		monkeypatch.delenv("GEMINI_API_KEY", raising=False)
		monkeypatch.delenv("GEMINI_TEXT_MODEL", raising=False)
		(tmp_path / ".env").write_text("GEMINI_API_KEY=from-dotenv\nGEMINI_TEXT_MODEL=gemini-custom\n", encoding="utf-8")

		c = load_gemini_client(project_root=str(tmp_path))
		try:
			assert c.cfg.api_key == "from-dotenv"
			assert c.cfg.text_model == "gemini-custom"
		finally:
			c.close()
			# load_dotenv 直接写 os.environ，手动清掉
			os.environ.pop("GEMINI_API_KEY", None)
			os.environ.pop("GEMINI_TEXT_MODEL", None)
