"""通用工具: 日志、YAML 读写、网络"""
