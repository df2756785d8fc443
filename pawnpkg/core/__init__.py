"""核心层: 数据模型、异常、配置、清单读写与配置选择"""
