"""reelscript：对话式短视频脚本助手。"""

__version__ = "0.1.0"
