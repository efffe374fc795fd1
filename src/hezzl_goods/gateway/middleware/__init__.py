"""Gateway 中间件与日志配置"""

from .logging_config import setup_logging
from .logging_mw import LoggingMiddleware
from .trace_mw import TraceMiddleware

__all__ = ["LoggingMiddleware", "TraceMiddleware", "setup_logging"]
