# -*- coding: utf-8 -*-
"""
reelscript/__main__.py

目的：
- 支持 `python -m reelscript` 这种启动方式。
- 直接转发到 cli.main()，不在这里放业务逻辑。
"""

from .cli import main

if __name__ == "__main__":
	main()
