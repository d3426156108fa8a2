import json
import os
from collections.abc import Callable
from typing import IO

from pydantic import TypeAdapter, ValidationError

from smart_categorizer.core import settings
from smart_categorizer.errors import ModelLoadError
from smart_categorizer.logger import get_logger
from smart_categorizer.manager import CategorizationEngine
from smart_categorizer.models import CategorizationRule

logger = get_logger(__name__)

_RULES_ADAPTER = TypeAdapter(list[CategorizationRule])


def _write_atomic(path: str, write: Callable[[IO], None], binary: bool = False) -> None:
    """Write through a sibling .tmp file and os.replace() it over ``path``."""
    tmp_path = f"{path}.tmp"
    mode = "wb" if binary else "w"
    encoding = None if binary else "utf-8"
    try:
        with open(tmp_path, mode, encoding=encoding) as f:
            write(f)
        os.replace(tmp_path, path)
    except BaseException:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise


class EngineStore:
    """Keeps learned mappings, custom rules and the ML model blob on disk.

    The engine itself never touches the filesystem; this store is the
    collaborator that feeds it at startup and writes back after changes.
    """

    def __init__(self, data_dir: str = ".") -> None:
        self.data_dir = data_dir
        self.learned_path = os.path.join(data_dir, settings.LEARNED_PAYEES_FILENAME)
        self.rules_path = os.path.join(data_dir, settings.CUSTOM_RULES_FILENAME)
        self.model_path = os.path.join(data_dir, settings.MODEL_FILENAME)

    def _load_json(self, path: str, label: str) -> object | None:
        if not os.path.exists(path):
            return None
        try:
            with open(path, encoding="utf-8") as f:
                return json.load(f)
        except json.JSONDecodeError as exc:
            logger.warning("Ignoring corrupt %s file %s: %s", label, path, exc)
            return None

    def load_learned(self) -> dict[str, str]:
        data = self._load_json(self.learned_path, "learned payees")
        if data is None:
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring learned payees file %s: expected an object", self.learned_path)
            return {}
        return {str(key): str(value) for key, value in data.items()}

    def save_learned(self, engine: CategorizationEngine) -> int:
        payees = engine.export_learned_payees()
        _write_atomic(self.learned_path, lambda f: json.dump(payees, f, indent=2, sort_keys=True))
        return len(payees)

    def load_rules(self) -> list[CategorizationRule]:
        data = self._load_json(self.rules_path, "custom rules")
        if data is None:
            return []
        try:
            return _RULES_ADAPTER.validate_python(data)
        except ValidationError as exc:
            logger.warning("Ignoring invalid custom rules file %s: %s", self.rules_path, exc)
            return []

    def save_rules(self, engine: CategorizationEngine) -> int:
        rules = [rule.model_dump(mode="json") for rule in engine.custom_rules()]
        _write_atomic(self.rules_path, lambda f: json.dump(rules, f, indent=2))
        return len(rules)

    def load_model_blob(self) -> bytes | None:
        if not os.path.exists(self.model_path):
            return None
        with open(self.model_path, "rb") as f:
            return f.read()

    def save_model(self, engine: CategorizationEngine) -> bool:
        blob = engine.save_ml_model()
        if blob is None:
            return False
        _write_atomic(self.model_path, lambda f: f.write(blob), binary=True)
        return True

    def restore(self, engine: CategorizationEngine) -> None:
        payees = self.load_learned()
        if payees:
            engine.import_learned_payees(payees)

        custom = [rule for rule in self.load_rules() if not engine.is_system_rule(rule.id)]
        if custom:
            custom_ids = {rule.id for rule in custom}
            kept = [rule for rule in engine.rules() if rule.id not in custom_ids]
            engine.update_rules([*kept, *custom])
            logger.info("Restored %s custom rules", len(custom))

        blob = self.load_model_blob()
        if blob is None:
            logger.info("ML model file not found, using empty classifier")
            return
        try:
            engine.load_ml_model(blob)
        except ModelLoadError as exc:
            logger.warning("Failed to load ML model from %s: %s, using empty classifier", self.model_path, exc)
