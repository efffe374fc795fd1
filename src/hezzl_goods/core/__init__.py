"""hezzl-goods Core -- 领域模型、配置、异常与持久化"""
