"""
路由引擎使用的默认常量。

代价哨兵沿用“最大值的一半”这一取法：两个哨兵相加仍不会越过整数
上限，Floyd-Warshall 松弛时无需额外判断。样例拓扑即桌面演示程序启动
时预置的网络，未提供配置文件时使用。
"""

UNREACHABLE_COST = (2**32 - 1) // 2
MAX_RETRIES = 3            # 首次发送失败后的最大重传次数
DRAW_RESOLUTION = 100      # 随机抽样精度，取值 1/100 .. 100/100

SAMPLE_LINKS = (
    ("A", "B", 100),
    ("A", "C", 56),
    ("B", "E", 14),
    ("C", "D", 77),
    ("E", "F", 56),
    ("E", "G", 75),
    ("G", "C", 86),
    ("H", "C", 81),
    ("H", "F", 14),
    ("F", "C", 76),
    ("F", "A", 66),
    ("F", "B", 71),
    ("F", "D", 76),
    ("E", "J", 92),
    ("E", "K", 81),
    ("A", "K", 12),
    ("K", "I", 76),
    ("I", "D", 15),
    ("D", "L", 55),
    ("L", "C", 64),
)
