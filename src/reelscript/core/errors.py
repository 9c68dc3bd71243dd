# -*- coding: utf-8 -*-
"""
reelscript/core/errors.py

这个文件做什么：
- 定义整个项目的错误分类（taxonomy）。
- 上层按“错误类别”决定是中断整轮对话，还是只丢弃某一个 effect。

分类约定：
- ConfigurationError : 缺 key / 缺 client，直接抛给调用方，不重试
- ModelCallError     : 模型往返失败（HTTP 错误、超时、无 candidates），整轮中断
- SessionBusyError   : 同一个 session 上重叠的 send_turn
- ProtocolError      : 模型给的数据不合规（参数缺失、长度不一致、JSON 解析失败），只影响单个 effect
- DownstreamError    : handler 自己的网络调用失败（如缩略图生成），只影响单个 effect

注意：
- 找不到可恢复脚本（RecoveryMiss）不是错误，FallbackExtractor 直接返回 None。
"""

from __future__ import annotations


class ReelScriptError(Exception):
	"""所有项目内错误的基类。"""


class ConfigurationError(ReelScriptError, ValueError):
	pass


class ModelCallError(ReelScriptError, RuntimeError):
	pass


class SessionBusyError(ReelScriptError, RuntimeError):
	pass


class ProtocolError(ReelScriptError, ValueError):
	"""模型输出不符合约定。只丢弃受影响的 effect，兄弟 effect 照常执行。"""


class MalformedToolCallError(ProtocolError):
	pass


class LengthMismatchError(ProtocolError):
	def __init__(self, expected: int, actual: int):
		self.expected = expected
		self.actual = actual
		super().__init__(f"expected {expected} items, got {actual}")


class MalformedResponseError(ProtocolError):
	pass


class DownstreamError(ReelScriptError, RuntimeError):
	pass
