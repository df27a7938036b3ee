"""领域层模型与异常。

包含：
- models: ChatMessage / WebhookRequest / DeliveryStatus / TurnState。
- exceptions: 业务异常类型定义（传输、空回复、投递失败、校验）。
"""
