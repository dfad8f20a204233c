"""养殖领域任务服务。

每个公开方法对应一种 TaskType：从 ProviderRegistry 取得（或创建）Provider，
用任务模板生成用户提示词与 system prompt，并以该任务固定的温度发起单轮问答。
"""

import logging
from typing import Any, Mapping, Optional, Union

from aquanet_core.domain.aquaculture import TaskType
from aquanet_core.domain.llm import LLMInput, ProviderConfig
from aquanet_core.infrastructure.logging.logger import log_event
from aquanet_core.prompts.tasks import (
    TaskData,
    build_task_prompt,
    build_task_system_prompt,
    resolve_task_type,
    task_temperature,
)
from aquanet_core.providers.registry import ProviderRegistry


class AquacultureService:
    def __init__(
        self,
        config: Union[ProviderConfig, Mapping[str, Any]],
        registry: Optional[ProviderRegistry] = None,
    ) -> None:
        self._config = ProviderConfig.parse(config)
        self._registry = registry if registry is not None else ProviderRegistry()

    async def run_task(self, task_type: Union[TaskType, str], data: TaskData) -> str:
        """执行任意一种任务；未知任务类型在发起请求前即被拒绝。"""

        task = resolve_task_type(task_type)
        prompt = build_task_prompt(task, data)
        system_prompt = build_task_system_prompt(task)
        temperature = task_temperature(task)

        provider = await self._registry.get_or_create(self._config)
        log_event(
            logging.INFO,
            "Running aquaculture task",
            {"provider": self._config.provider, "model": self._config.model},
            task_type=task.value,
            temperature=temperature,
        )
        output = await provider.query(
            LLMInput(prompt=prompt, system_prompt=system_prompt, temperature=temperature)
        )
        return output.content

    async def analyze_water_quality(self, data: TaskData) -> str:
        return await self.run_task(TaskType.WATER_QUALITY_ANALYSIS, data)

    async def diagnose_diseases(self, data: TaskData) -> str:
        return await self.run_task(TaskType.DISEASE_DIAGNOSIS, data)

    async def optimize_feeding(self, data: TaskData) -> str:
        return await self.run_task(TaskType.FEEDING_OPTIMIZATION, data)

    async def predict_growth(self, data: TaskData) -> str:
        return await self.run_task(TaskType.GROWTH_PREDICTION, data)

    async def analyze_costs(self, data: TaskData) -> str:
        return await self.run_task(TaskType.COST_ANALYSIS, data)

    async def get_technical_advice(self, data: TaskData) -> str:
        return await self.run_task(TaskType.TECHNICAL_ADVICE, data)

    async def analyze_market(self, data: TaskData) -> str:
        return await self.run_task(TaskType.MARKET_ANALYSIS, data)

    async def assess_environmental_impact(self, data: TaskData) -> str:
        return await self.run_task(TaskType.ENVIRONMENTAL_IMPACT, data)
