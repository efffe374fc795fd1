"""hezzl-goods -- 商品目录服务

子包：
  core     领域模型、配置、异常、SQLite 持久化
  cache    读穿透缓存（Redis / 进程内）
  audit    审计事件总线、生产者、批量消费者
  gateway  FastAPI HTTP 层 + GoodsService 编排
"""

__version__ = "0.1.0"
