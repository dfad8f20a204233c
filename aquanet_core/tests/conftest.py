import copy
import os
import tempfile

# 日志写到临时目录，避免在仓库里生成 logs/
os.environ.setdefault("AQUANET_LOG_DIR", tempfile.mkdtemp(prefix="aquanet-logs-"))

import pytest


VALID_AQUA = {
    "knowledgeDomains": ["water_quality", "disease_management"],
    "dataSources": ["industry_standards", "research_papers"],
    "expertiseLevel": "intermediate",
    "language": "en",
    "useIndustryTerms": True,
    "tools": {
        "waterCalculator": True,
        "farmingCalendar": False,
        "alertSystem": False,
        "diseaseIdentifier": False,
        "feedOptimizer": False,
    },
    "validation": {
        "requireSourceCitation": True,
        "confidenceScoring": True,
        "expertReviewThreshold": 0.8,
        "factCheckSources": ["FAO"],
    },
    "customization": {
        "speciesSpecific": ["shrimp"],
        "farmingMethods": ["intensive"],
        "regionalGuidelines": ["Mekong Delta"],
        "customPrompts": {},
    },
}


@pytest.fixture
def aqua_config():
    return copy.deepcopy(VALID_AQUA)


@pytest.fixture
def bot_config(aqua_config):
    return {"apiKey": "sk-test", "aquacultureConfig": aqua_config}
