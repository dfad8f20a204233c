"""系统提示词拼装。

build_system_prompt 根据已校验的 BotConfig 确定性地生成 system prompt：
没有领域配置时返回调用方的 defaultPrompt 或通用兜底句；
有领域配置时按固定顺序拼接以下片段，空片段跳过，以换行连接：

1. 角色定义
2. 知识领域
3. 专业程度与语言
4. 术语风格（二选一）
5. 引用来源要求（仅 requireSourceCitation）
6. 物种专长（仅 speciesSpecific 非空）
7. 地区规范（仅 regionalGuidelines 非空）
8. 调用方的 defaultPrompt
"""

from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from aquanet_core.config.schema import AquacultureConfig, BotConfig


ROLE_SENTENCE = "You are an AI assistant specialized in aquaculture business."
INDUSTRY_TERMS_ON = "Use industry-specific terminology and technical language."
INDUSTRY_TERMS_OFF = "Use simplified language accessible to general audience."
CITATION_SENTENCE = "Include source citations for technical information and data."


def compose_domain_fragments(aqua: "AquacultureConfig", default_prompt: Optional[str] = None) -> List[str]:
    """按固定顺序返回各片段，未启用的片段为空串。"""

    customization = aqua.customization
    return [
        ROLE_SENTENCE,
        f"Your expertise covers: {', '.join(aqua.knowledge_domains)}." if aqua.knowledge_domains else "",
        f"Provide {aqua.expertise_level}-level information in {aqua.language} language.",
        INDUSTRY_TERMS_ON if aqua.use_industry_terms else INDUSTRY_TERMS_OFF,
        CITATION_SENTENCE if aqua.validation.require_source_citation else "",
        f"Specialized in: {', '.join(customization.species_specific)}." if customization.species_specific else "",
        (
            f"Follow guidelines for: {', '.join(customization.regional_guidelines)}."
            if customization.regional_guidelines
            else ""
        ),
        default_prompt or "",
    ]


def build_system_prompt(config: "BotConfig") -> str:
    aqua = config.aquaculture_config
    if aqua is None:
        return config.default_prompt or ROLE_SENTENCE
    return "\n".join(f for f in compose_domain_fragments(aqua, config.default_prompt) if f)
