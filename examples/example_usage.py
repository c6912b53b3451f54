"""Example: call the service layer directly, without Flask.

Controllers are thin; the aggregation rules live in AnalyticsService.
"""

import importlib
import json

from config import get_settings_module

from src.tuition_system.tuition_system.container import build_container


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(
        db_config=settings.DB_CONFIG,
        strict_durations=getattr(settings, "STRICT_DURATIONS", False),
    )
    print(json.dumps(container.analytics_service.overall_stats(), indent=2))
    print(json.dumps(container.analytics_service.top_teachers(limit=3), indent=2))


if __name__ == "__main__":
    main()
