"""服务入口 -- python -m hezzl_goods.gateway

在 BIND_ADDRESS 上启动 uvicorn，SIGINT / SIGTERM 后最多等待 10 秒完成在途请求。
"""

import uvicorn

from ..core.config import GRACEFUL_SHUTDOWN_TIMEOUT_S, load_settings
from .main import create_app


def main() -> None:
    settings = load_settings()
    host, port = settings.bind_host_port
    app = create_app(settings)

    uvicorn.run(
        app,
        host=host,
        port=port,
        log_config=None,
        timeout_graceful_shutdown=GRACEFUL_SHUTDOWN_TIMEOUT_S,
    )


if __name__ == "__main__":
    main()
