import logging
from typing import Any, Dict, Optional

from camerpulse.core.logging.structured_event_logger import StructuredEventLogger
from camerpulse.generation.domain.runtime_config import RegionalBoost, RuntimeConfig
from camerpulse.generation.domain.styles import PollStyle, StyleMapping, normalize_category
from camerpulse.generation.interfaces.runtime_config_store import RuntimeConfigStore


class RuntimeConfigLoader:
    """
    Reads the config table at the start of every run and turns the loose
    JSON rows into a RuntimeConfig. Nothing is cached between runs.
    """

    def __init__(
        self,
        store: RuntimeConfigStore,
        default_style: PollStyle = PollStyle.CARD,
        logger: Optional[StructuredEventLogger] = None,
    ):
        self.store = store
        self.default_style = default_style
        self.logger = logger or StructuredEventLogger()

    def load(self) -> RuntimeConfig:
        return self.parse(self.store.load_enabled())

    def parse(self, rows: Dict[str, Any]) -> RuntimeConfig:
        defaults = RuntimeConfig()
        system = self._section(rows, "system_enabled")
        thresholds = self._section(rows, "sentiment_thresholds")
        schedule = self._section(rows, "generation_schedule")
        publish = self._section(rows, "auto_publish")
        boost = self._section(rows, "regional_boost")

        return RuntimeConfig(
            enabled=self._bool(system, "system_enabled.enabled", defaults.enabled),
            trending_threshold=self._float(
                thresholds, "sentiment_thresholds.trending", defaults.trending_threshold
            ),
            frequency=str(schedule.get("frequency") or defaults.frequency),
            max_per_week=self._int(schedule, "generation_schedule.max_per_week", defaults.max_per_week),
            min_confidence=self._float(
                schedule, "generation_schedule.min_confidence", defaults.min_confidence
            ),
            auto_publish_enabled=self._bool(publish, "auto_publish.enabled", defaults.auto_publish_enabled),
            require_admin_approval=self._bool(
                publish, "auto_publish.require_admin_approval", defaults.require_admin_approval
            ),
            style_mapping=self._style_mapping(rows.get("style_mapping")),
            regional_boost=RegionalBoost(
                enabled=self._bool(boost, "regional_boost.enabled", False),
                boost_factor=self._float(boost, "regional_boost.boost_factor", 1.0),
                affected_regions_only=self._bool(boost, "regional_boost.affected_regions_only", False),
            ),
            topic_weights=self._weights(rows.get("topic_weights")),
        )

    def _section(self, rows: Dict[str, Any], key: str) -> Dict[str, Any]:
        value = rows.get(key)
        if value is None:
            return {}
        if not isinstance(value, dict):
            self._invalid(key, value)
            return {}
        return value

    def _bool(self, section: Dict[str, Any], path: str, default: bool) -> bool:
        field = path.split(".")[-1]
        if field not in section:
            return default
        value = section[field]
        if isinstance(value, bool):
            return value
        self._invalid(path, value)
        return default

    def _float(self, section: Dict[str, Any], path: str, default: float) -> float:
        field = path.split(".")[-1]
        if field not in section:
            return default
        value = section[field]
        if isinstance(value, bool):
            self._invalid(path, value)
            return default
        try:
            return float(value)
        except (TypeError, ValueError):
            self._invalid(path, value)
            return default

    def _int(self, section: Dict[str, Any], path: str, default: int) -> int:
        field = path.split(".")[-1]
        if field not in section:
            return default
        value = section[field]
        if isinstance(value, bool):
            self._invalid(path, value)
            return default
        try:
            return int(value)
        except (TypeError, ValueError):
            self._invalid(path, value)
            return default

    def _style_mapping(self, raw: Any) -> StyleMapping:
        if raw is None:
            return StyleMapping(default=self.default_style)
        if not isinstance(raw, dict):
            self._invalid("style_mapping", raw)
            return StyleMapping(default=self.default_style)

        default = self.default_style
        if "default" in raw:
            parsed_default = PollStyle.parse(raw.get("default"))
            if parsed_default is None:
                self._invalid("style_mapping.default", raw.get("default"))
            else:
                default = parsed_default

        styles = {}
        for key, value in raw.items():
            if key == "default":
                continue
            category = normalize_category(key)
            style = PollStyle.parse(value)
            if not category or style is None:
                self._invalid(f"style_mapping.{key}", value)
                continue
            styles[category] = style
        return StyleMapping(default=default, styles=styles)

    def _weights(self, raw: Any) -> Dict[str, float]:
        if not isinstance(raw, dict):
            return {}
        weights = {}
        for key, value in raw.items():
            try:
                weights[str(key)] = float(value)
            except (TypeError, ValueError):
                self._invalid(f"topic_weights.{key}", value)
        return weights

    def _invalid(self, path: str, value: Any) -> None:
        self.logger.emit("CONFIG_VALUE_INVALID", level=logging.WARNING, key=path, value=value)
