"""pawnpkg - Pawn 包清单解析工具

读取本地 pawn.json / pawn.yaml，或按中心仓库 → 包自身仓库的顺序拉取远程清单，
并从清单中选出实际用于构建/运行的配置。
"""

__version__ = "0.4.0"
