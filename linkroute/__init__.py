"""
带缓存最短路与故障感知转发的加权网络路由引擎。

暴露的主要组件：
- `Graph`：可变拓扑及其上的最短路搜索；
- `Router`：全源最短路表缓存与故障感知的 `route_packet`；
- `PacketSender`：发送/重传/确认计数的可靠性模型；
- `RoutingEngine`：持有上述资源并加锁访问的上下文对象；
- `CliShell`：调试用的交互式命令行。
"""

from .graph import Graph
from .router import Router
from .packet_sender import PacketSender
from .engine import RoutingEngine
from .cli import CliShell

__all__ = ["Graph", "Router", "PacketSender", "RoutingEngine", "CliShell"]
