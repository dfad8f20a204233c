import json
from datetime import datetime

import pytest

from aquanet_core.domain.aquaculture import AquacultureData, TaskType
from aquanet_core.domain.exceptions import UnsupportedOperationError
from aquanet_core.prompts.tasks import (
    EXPERT_PREAMBLE,
    TASK_GUIDANCE,
    TASK_INSTRUCTIONS,
    TASK_TEMPERATURES,
    build_task_prompt,
    build_task_system_prompt,
    task_temperature,
)


DATA = {"biologicalData": {"species": "shrimp", "stage": "juvenile"}}


def test_every_task_has_own_templates():
    assert set(TASK_INSTRUCTIONS) == set(TaskType)
    assert set(TASK_GUIDANCE) == set(TaskType)
    assert set(TASK_TEMPERATURES) == set(TaskType)
    assert len(set(TASK_INSTRUCTIONS.values())) == len(TaskType)
    assert len(set(TASK_GUIDANCE.values())) == len(TaskType)


@pytest.mark.parametrize("task", list(TaskType))
def test_user_prompt_is_instruction_plus_json(task):
    prompt = build_task_prompt(task, DATA)
    instruction, _, body = prompt.partition("\n")
    assert instruction == TASK_INSTRUCTIONS[task]
    assert json.loads(body) == DATA
    assert body == json.dumps(DATA, ensure_ascii=False, indent=2)


@pytest.mark.parametrize("task", list(TaskType))
def test_system_prompt_is_preamble_plus_guidance(task):
    assert build_task_system_prompt(task) == EXPERT_PREAMBLE + TASK_GUIDANCE[task]


def test_task_type_accepts_string_value():
    assert build_task_system_prompt("disease_diagnosis") == build_task_system_prompt(TaskType.DISEASE_DIAGNOSIS)


def test_unsupported_task_type():
    with pytest.raises(UnsupportedOperationError) as exc:
        build_task_prompt("fortune_telling", DATA)
    assert exc.value.code == "UNSUPPORTED_TASK"
    assert "fortune_telling" in exc.value.message
    with pytest.raises(UnsupportedOperationError):
        build_task_system_prompt("fortune_telling")


def test_temperatures_by_task():
    assert task_temperature(TaskType.WATER_QUALITY_ANALYSIS) == 0.3
    assert task_temperature(TaskType.DISEASE_DIAGNOSIS) == 0.3
    assert task_temperature(TaskType.COST_ANALYSIS) == 0.3
    assert task_temperature(TaskType.FEEDING_OPTIMIZATION) == 0.5
    assert task_temperature(TaskType.GROWTH_PREDICTION) == 0.5
    assert task_temperature(TaskType.ENVIRONMENTAL_IMPACT) == 0.5
    assert task_temperature(TaskType.TECHNICAL_ADVICE) == 0.7
    assert task_temperature(TaskType.MARKET_ANALYSIS) == 0.7


def test_structured_payload_serialized_camel_case():
    data = AquacultureData.model_validate(
        {
            "environmentalData": {"waterQuality": {"pH": 7.8, "dissolvedOxygen": 5.2}},
            "metadata": {
                "farmId": "f1",
                "pondId": "p3",
                "timestamp": datetime(2024, 5, 1, 8, 30),
                "source": "sensor",
            },
        }
    )
    prompt = build_task_prompt(TaskType.WATER_QUALITY_ANALYSIS, data)
    body = json.loads(prompt.partition("\n")[2])
    assert body["environmentalData"]["waterQuality"] == {"pH": 7.8, "dissolvedOxygen": 5.2}
    assert body["metadata"]["farmId"] == "f1"
    assert "biologicalData" not in body
