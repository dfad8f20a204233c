"""养殖领域配置的跨字段校验（第二阶段）。

每条规则是一个具名谓词：通过时返回 None，失败时返回具体原因。
规则按 AQUACULTURE_RULES 的顺序执行，第一条失败的规则即抛出
ConfigurationError（rule 为规则名，fields 为涉及字段）。
本阶段只在结构校验成功之后运行，因此可以直接访问已补齐默认值的字段。
"""

from collections import Counter
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Optional, Tuple

from aquanet_core.domain.aquaculture import VALID_FARMING_METHODS, DataSource, ExpertiseLevel
from aquanet_core.domain.exceptions import ConfigurationError

if TYPE_CHECKING:
    from aquanet_core.config.schema import AquacultureConfig


@dataclass(frozen=True)
class Rule:
    name: str
    fields: Tuple[str, ...]
    check: Callable[["AquacultureConfig"], Optional[str]]


def _no_duplicate_sources(cfg: "AquacultureConfig") -> Optional[str]:
    dupes = sorted(s for s, n in Counter(cfg.data_sources).items() if n > 1)
    if dupes:
        return f"Data sources must not contain duplicates: {', '.join(dupes)}"
    return None


def _alert_system_has_monitoring(cfg: "AquacultureConfig") -> Optional[str]:
    tools = cfg.tools
    if tools.alert_system and not (tools.water_calculator or tools.disease_identifier):
        return "Alert system requires at least one monitoring tool (waterCalculator or diseaseIdentifier)"
    return None


def _citation_has_fact_check_sources(cfg: "AquacultureConfig") -> Optional[str]:
    validation = cfg.validation
    if validation.require_source_citation and not validation.fact_check_sources:
        return "Source citation requires at least one fact-check source"
    return None


def _species_present(cfg: "AquacultureConfig") -> Optional[str]:
    if not cfg.customization.species_specific:
        return "At least one species must be specified"
    return None


def _farming_methods_present(cfg: "AquacultureConfig") -> Optional[str]:
    if not cfg.customization.farming_methods:
        return "At least one farming method must be specified"
    return None


def _species_have_valid_method(cfg: "AquacultureConfig") -> Optional[str]:
    methods = set(cfg.customization.farming_methods)
    # 对照表之外的物种没有任何合法模式
    unmatched = [
        species
        for species in cfg.customization.species_specific
        if not methods & VALID_FARMING_METHODS.get(species, frozenset())
    ]
    if unmatched:
        return f"Farming methods are not suitable for species: {', '.join(unmatched)}"
    return None


def _advanced_uses_research(cfg: "AquacultureConfig") -> Optional[str]:
    if cfg.expertise_level == ExpertiseLevel.ADVANCED.value and (
        DataSource.RESEARCH_PAPERS.value not in cfg.data_sources
    ):
        return "Advanced expertise level requires research_papers data source"
    return None


AQUACULTURE_RULES: Tuple[Rule, ...] = (
    Rule("duplicate_data_sources", ("dataSources",), _no_duplicate_sources),
    Rule(
        "alert_system_requires_monitoring",
        ("tools.alertSystem", "tools.waterCalculator", "tools.diseaseIdentifier"),
        _alert_system_has_monitoring,
    ),
    Rule(
        "citation_requires_fact_check_sources",
        ("validation.requireSourceCitation", "validation.factCheckSources"),
        _citation_has_fact_check_sources,
    ),
    Rule("species_required", ("customization.speciesSpecific",), _species_present),
    Rule("farming_methods_required", ("customization.farmingMethods",), _farming_methods_present),
    Rule(
        "species_requires_matching_method",
        ("customization.speciesSpecific", "customization.farmingMethods"),
        _species_have_valid_method,
    ),
    Rule(
        "advanced_requires_research_papers",
        ("expertiseLevel", "dataSources"),
        _advanced_uses_research,
    ),
)


def check_aquaculture_config(cfg: "AquacultureConfig") -> None:
    """依次执行全部规则，遇到第一条失败的规则即抛出 ConfigurationError。"""

    for rule in AQUACULTURE_RULES:
        reason = rule.check(cfg)
        if reason is not None:
            raise ConfigurationError(
                reason,
                rule=rule.name,
                fields=tuple(f"aquacultureConfig.{f}" for f in rule.fields),
            )
