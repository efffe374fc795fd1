"""hezzl-goods Gateway -- HTTP 接入层（FastAPI）"""
