"""Minimal demonstration of the aquaculture advisory bot."""

import asyncio
import os

from aquanet_core import AquacultureService, AquanetBot, ProviderRegistry


CONFIG = {
    "apiKey": os.environ.get("DEEPSEEK_API_KEY", ""),
    "responseMode": "streamed",
    "onStream": lambda text: print(text, end="", flush=True),
    "aquacultureConfig": {
        "knowledgeDomains": ["water_quality", "disease_management"],
        "dataSources": ["research_papers", "industry_standards"],
        "expertiseLevel": "advanced",
        "language": "vi",
        "tools": {"alertSystem": True, "waterCalculator": True},
        "validation": {"factCheckSources": ["FAO", "Bộ NN&PTNT"]},
        "customization": {
            "speciesSpecific": ["shrimp"],
            "farmingMethods": ["intensive"],
            "regionalGuidelines": ["Đồng bằng sông Cửu Long"],
        },
    },
}


async def main() -> None:
    registry = ProviderRegistry()
    bot = AquanetBot(CONFIG, registry=registry)
    await bot.query("Ao tôm thẻ bị đục nước sau mưa, nên xử lý thế nào?")
    print()

    service = AquacultureService(
        {"provider": "deepseek", "apiKey": CONFIG["apiKey"], "model": "deepseek-chat"},
        registry=registry,
    )
    print(await service.analyze_water_quality({"environmentalData": {"waterQuality": {"pH": 8.6, "ammonia": 0.8}}}))


if __name__ == "__main__":
    asyncio.run(main())
