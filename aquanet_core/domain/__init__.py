"""领域层模型与协议。

包含：
- models: 对话消息、非流式结果、流式分片等统一模型。
- llm: Provider 级别的配置与输入/输出模型。
- aquaculture: 养殖领域的固定词表、任务类型与数据载荷。
- exceptions: 业务异常类型定义。
"""
