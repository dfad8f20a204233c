"""领域任务提示词模板。

每个 TaskType 对应一条固定的用户指令与一段系统提示补充说明，
一一映射、没有兜底：未知任务类型抛出 UnsupportedOperationError，
绝不会退化为其他任务的模板。提示词文本面向越南语用户。
"""

import json
from typing import Any, Dict, Mapping, Union

from aquanet_core.domain.aquaculture import AquacultureData, TaskType
from aquanet_core.domain.exceptions import UnsupportedOperationError


TaskData = Union[AquacultureData, Mapping[str, Any]]

EXPERT_PREAMBLE = "Bạn là một chuyên gia tư vấn trong lĩnh vực nuôi trồng thủy sản. "

TASK_INSTRUCTIONS: Dict[TaskType, str] = {
    TaskType.WATER_QUALITY_ANALYSIS: (
        "Phân tích các thông số chất lượng nước sau và đưa ra đánh giá, khuyến nghị:"
    ),
    TaskType.DISEASE_DIAGNOSIS: (
        "Dựa trên các triệu chứng và thông số môi trường sau, "
        "hãy chẩn đoán bệnh và đề xuất phương pháp điều trị:"
    ),
    TaskType.FEEDING_OPTIMIZATION: "Dựa trên dữ liệu sau, hãy đề xuất phương án tối ưu hóa cho ăn:",
    TaskType.GROWTH_PREDICTION: "Dựa trên dữ liệu lịch sử sau, hãy dự đoán tăng trưởng và năng suất:",
    TaskType.COST_ANALYSIS: (
        "Phân tích chi phí sản xuất và đề xuất giải pháp tối ưu dựa trên dữ liệu sau:"
    ),
    TaskType.TECHNICAL_ADVICE: "Dựa trên thông tin sau, hãy đưa ra tư vấn kỹ thuật chi tiết:",
    TaskType.MARKET_ANALYSIS: (
        "Phân tích thị trường và đề xuất chiến lược kinh doanh dựa trên dữ liệu sau:"
    ),
    TaskType.ENVIRONMENTAL_IMPACT: (
        "Đánh giá tác động môi trường và đề xuất giải pháp bền vững dựa trên dữ liệu sau:"
    ),
}

TASK_GUIDANCE: Dict[TaskType, str] = {
    TaskType.WATER_QUALITY_ANALYSIS: (
        "Hãy phân tích chi tiết các thông số chất lượng nước, đánh giá mức độ phù hợp, "
        "và đưa ra các khuyến nghị cụ thể để cải thiện. Tập trung vào các thông số quan trọng "
        "như DO, pH, độ kiềm, và các chỉ số nitrogen."
    ),
    TaskType.DISEASE_DIAGNOSIS: (
        "Hãy phân tích các triệu chứng bệnh, điều kiện môi trường, và đưa ra chẩn đoán chính xác. "
        "Đề xuất các biện pháp điều trị và phòng ngừa phù hợp. "
        "Ưu tiên các giải pháp thân thiện với môi trường."
    ),
    TaskType.FEEDING_OPTIMIZATION: (
        "Hãy phân tích và đề xuất phương án cho ăn tối ưu, bao gồm: loại thức ăn, kích cỡ, "
        "tần suất, và khẩu phần. Cân nhắc các yếu tố như giai đoạn phát triển, "
        "điều kiện môi trường, và hiệu quả kinh tế."
    ),
    TaskType.GROWTH_PREDICTION: (
        "Hãy dự đoán tăng trưởng và năng suất dựa trên dữ liệu lịch sử. "
        "Phân tích các yếu tố ảnh hưởng và đề xuất giải pháp cải thiện. "
        "Cung cấp các chỉ số dự báo cụ thể và độ tin cậy."
    ),
    TaskType.COST_ANALYSIS: (
        "Hãy phân tích chi tiết cơ cấu chi phí, xác định các điểm không hiệu quả, "
        "và đề xuất giải pháp tối ưu hóa. Tính toán các chỉ số ROI và đề xuất chiến lược giảm chi phí."
    ),
    TaskType.TECHNICAL_ADVICE: (
        "Hãy đưa ra tư vấn kỹ thuật toàn diện về quy trình nuôi trồng, bao gồm: chuẩn bị ao, "
        "quản lý môi trường, phòng bệnh, và thu hoạch. "
        "Đảm bảo các khuyến nghị phù hợp với điều kiện thực tế."
    ),
    TaskType.MARKET_ANALYSIS: (
        "Hãy phân tích xu hướng thị trường, cung cầu, giá cả, và đối thủ cạnh tranh. "
        "Đề xuất chiến lược kinh doanh phù hợp và các cơ hội phát triển mới."
    ),
    TaskType.ENVIRONMENTAL_IMPACT: (
        "Hãy đánh giá tác động môi trường của hoạt động nuôi trồng, bao gồm: chất thải, "
        "sử dụng tài nguyên, và đa dạng sinh học. "
        "Đề xuất các giải pháp bền vững và thân thiện với môi trường."
    ),
}

# 每类任务固定的采样温度
TASK_TEMPERATURES: Dict[TaskType, float] = {
    TaskType.WATER_QUALITY_ANALYSIS: 0.3,
    TaskType.DISEASE_DIAGNOSIS: 0.3,
    TaskType.FEEDING_OPTIMIZATION: 0.5,
    TaskType.GROWTH_PREDICTION: 0.5,
    TaskType.COST_ANALYSIS: 0.3,
    TaskType.TECHNICAL_ADVICE: 0.7,
    TaskType.MARKET_ANALYSIS: 0.7,
    TaskType.ENVIRONMENTAL_IMPACT: 0.5,
}


def resolve_task_type(task_type: Union[TaskType, str]) -> TaskType:
    try:
        task = TaskType(task_type)
    except ValueError:
        raise UnsupportedOperationError(
            code="UNSUPPORTED_TASK",
            message=f"Unsupported task type: {task_type}",
        ) from None
    if task not in TASK_INSTRUCTIONS or task not in TASK_GUIDANCE:
        raise UnsupportedOperationError(code="UNSUPPORTED_TASK", message=f"Unsupported task type: {task_type}")
    return task


def serialize_task_data(data: TaskData) -> str:
    if isinstance(data, AquacultureData):
        return data.to_prompt_json()
    return json.dumps(data, ensure_ascii=False, indent=2, default=str)


def build_task_prompt(task_type: Union[TaskType, str], data: TaskData) -> str:
    """用户提示词 = 任务指令 + 换行 + 缩进 JSON 数据。"""

    task = resolve_task_type(task_type)
    return f"{TASK_INSTRUCTIONS[task]}\n{serialize_task_data(data)}"


def build_task_system_prompt(task_type: Union[TaskType, str]) -> str:
    task = resolve_task_type(task_type)
    return EXPERT_PREAMBLE + TASK_GUIDANCE[task]


def task_temperature(task_type: Union[TaskType, str]) -> float:
    return TASK_TEMPERATURES[resolve_task_type(task_type)]
