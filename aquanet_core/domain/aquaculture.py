"""养殖领域的固定词表与数据载荷。

- KnowledgeDomain / DataSource / ExpertiseLevel / Language: 配置中可选的封闭枚举。
- VALID_FARMING_METHODS: 物种 → 适用养殖模式 对照表（封闭表，未列出的物种一律不合法）。
- TaskType: 领域服务支持的八类任务。
- AquacultureData: 任务提示词使用的结构化数据载荷。
"""

from datetime import datetime
from enum import Enum
from typing import Dict, FrozenSet, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class KnowledgeDomain(str, Enum):
    FARMING_TECHNIQUES = "farming_techniques"
    WATER_QUALITY = "water_quality"
    DISEASE_MANAGEMENT = "disease_management"
    BREEDING = "breeding"
    FEED_MANAGEMENT = "feed_management"
    PRODUCTION = "production"
    MARKET_ANALYSIS = "market_analysis"
    REGULATIONS = "regulations"


class DataSource(str, Enum):
    RESEARCH_PAPERS = "research_papers"
    INDUSTRY_STANDARDS = "industry_standards"
    TECHNICAL_GUIDELINES = "technical_guidelines"
    EXPERT_KNOWLEDGE = "expert_knowledge"
    CASE_STUDIES = "case_studies"
    MARKET_REPORTS = "market_reports"


class ExpertiseLevel(str, Enum):
    BASIC = "basic"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class Language(str, Enum):
    VI = "vi"
    EN = "en"


# 物种 → 适用的养殖模式
VALID_FARMING_METHODS: Dict[str, FrozenSet[str]] = {
    "shrimp": frozenset({"intensive", "semi-intensive", "extensive"}),
    "tilapia": frozenset({"cage", "pond", "recirculating"}),
    "pangasius": frozenset({"intensive", "semi-intensive"}),
}


class TaskType(str, Enum):
    """领域服务的任务类型，与提示词模板一一对应。"""

    WATER_QUALITY_ANALYSIS = "water_quality_analysis"
    DISEASE_DIAGNOSIS = "disease_diagnosis"
    FEEDING_OPTIMIZATION = "feeding_optimization"
    GROWTH_PREDICTION = "growth_prediction"
    COST_ANALYSIS = "cost_analysis"
    TECHNICAL_ADVICE = "technical_advice"
    MARKET_ANALYSIS = "market_analysis"
    ENVIRONMENTAL_IMPACT = "environmental_impact"


# ---- 数据载荷 ----


class _PayloadModel(BaseModel):
    """载荷基类：接受 camelCase 或 snake_case，序列化为 camelCase。"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class WaterQuality(_PayloadModel):
    temperature: Optional[float] = None
    ph: Optional[float] = Field(default=None, alias="pH")
    dissolved_oxygen: Optional[float] = None
    salinity: Optional[float] = None
    ammonia: Optional[float] = None
    nitrite: Optional[float] = None
    alkalinity: Optional[float] = None


class Weather(_PayloadModel):
    temperature: Optional[float] = None
    humidity: Optional[float] = None
    rainfall: Optional[float] = None
    wind_speed: Optional[float] = None


class EnvironmentalData(_PayloadModel):
    water_quality: Optional[WaterQuality] = None
    weather: Optional[Weather] = None


class BiologicalData(_PayloadModel):
    species: str
    stage: str
    age: Optional[float] = None
    size: Optional[float] = None
    density: Optional[float] = None
    feeding_rate: Optional[float] = None
    survival_rate: Optional[float] = None
    disease_symptoms: Optional[List[str]] = None


class ProductionCosts(_PayloadModel):
    feed: Optional[float] = None
    electricity: Optional[float] = None
    labor: Optional[float] = None
    other: Optional[float] = None


class ProductionData(_PayloadModel):
    stocking_date: Optional[datetime] = None
    harvest_date: Optional[datetime] = None
    feed_used: Optional[float] = None
    production: Optional[float] = None
    fcr: Optional[float] = None
    costs: Optional[ProductionCosts] = None


class DataMetadata(_PayloadModel):
    farm_id: str
    pond_id: str
    timestamp: datetime
    source: str
    confidence_level: Optional[float] = None


class AquacultureData(_PayloadModel):
    """一次任务调用的结构化数据，所有分组均可选。"""

    environmental_data: Optional[EnvironmentalData] = None
    biological_data: Optional[BiologicalData] = None
    production_data: Optional[ProductionData] = None
    metadata: Optional[DataMetadata] = None

    def to_prompt_json(self) -> str:
        """序列化为缩进 JSON（camelCase，省略空字段）。"""

        return self.model_dump_json(by_alias=True, exclude_none=True, indent=2)
