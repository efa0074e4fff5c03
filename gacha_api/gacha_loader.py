import json
import logging
from pathlib import Path
from typing import Optional

from gacha_api.import_validator import validate_gacha_payload
from gacha_api.models.gacha_models import GachaModel

logger = logging.getLogger(__name__)

DEFAULT_GACHA_PATH = Path(__file__).parent / "default_gacha.json"


def load_gacha_model(path: Optional[Path] = None) -> GachaModel:
    path = path or DEFAULT_GACHA_PATH

    with open(path, "r", encoding="utf-8") as f:
        payload = json.load(f)

    report = validate_gacha_payload(payload)
    for warning in report["warnings"]:
        logger.warning("%s: %s (%s)", path.name, warning["message"], warning["path"])
    if not report["valid"]:
        details = "; ".join(f"{e['path']}: {e['message']}" for e in report["errors"])
        raise ValueError(f"Invalid gacha config {path}: {details}")

    logger.info("Loaded gacha config %s with %d items", path, report["summary"]["total_items"])
    return GachaModel.model_validate(payload)
