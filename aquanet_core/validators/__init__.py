"""配置的跨字段校验规则。"""
