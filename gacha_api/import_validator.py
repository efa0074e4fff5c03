from typing import Any, Dict, List

from gacha_api.import_rules import (
    FATAL_MISSING_FIELDS,
    FATAL_MISSING_ITEM_FIELDS,
    OPTIONAL_ITEM_FIELDS,
    RARITY_KEYS,
)


def validate_gacha_payload(payload: Any) -> Dict[str, Any]:
    """Checks a raw gacha config record before it is loaded into a picker."""
    errors: List[Dict[str, str]] = []
    warnings: List[Dict[str, str]] = []

    summary = {
        "total_items": 0,
        "rarity_counts": {r: 0 for r in RARITY_KEYS},
    }

    # ---- top-level must be dict ----
    if not isinstance(payload, dict):
        errors.append({
            "path": "$",
            "message": "Gacha config must be an object/dict."
        })
        return {"valid": False, "errors": errors, "warnings": warnings, "summary": summary}

    missing = [f for f in FATAL_MISSING_FIELDS if f not in payload]
    if missing:
        errors.append({
            "path": "$",
            "message": f"Missing required fields: {', '.join(missing)}"
        })
        return {"valid": False, "errors": errors, "warnings": warnings, "summary": summary}

    # pullCost
    cost = payload["pullCost"]
    if isinstance(cost, bool) or not isinstance(cost, int) or cost < 1:
        errors.append({
            "path": "$.pullCost",
            "message": "pullCost must be an integer >= 1."
        })

    # refundPercent
    refund = payload["refundPercent"]
    if isinstance(refund, bool) or not isinstance(refund, (int, float)) or not 0 <= refund <= 1:
        errors.append({
            "path": "$.refundPercent",
            "message": "refundPercent must be a number between 0 and 1."
        })

    # rarityMapping
    mapping = payload["rarityMapping"]
    known_rarities = set()
    if not isinstance(mapping, dict):
        errors.append({
            "path": "$.rarityMapping",
            "message": "rarityMapping must be an object/dict of rarity -> weight."
        })
    else:
        for rarity, weight in mapping.items():
            if rarity not in RARITY_KEYS:
                errors.append({
                    "path": f"$.rarityMapping.{rarity}",
                    "message": f"Unknown rarity key '{rarity}'. Allowed: {RARITY_KEYS}"
                })
                continue
            if isinstance(weight, bool) or not isinstance(weight, int) or weight < 1:
                errors.append({
                    "path": f"$.rarityMapping.{rarity}",
                    "message": "Rarity weight must be an integer >= 1."
                })
                continue
            known_rarities.add(rarity)

        for rarity in RARITY_KEYS:
            if rarity not in mapping:
                warnings.append({
                    "path": "$.rarityMapping",
                    "message": f"No weight for '{rarity}'; items of that rarity cannot be added."
                })

    # itemPool
    pool = payload["itemPool"]
    if not isinstance(pool, list):
        errors.append({
            "path": "$.itemPool",
            "message": "itemPool must be a list of item objects."
        })
        pool = []

    if isinstance(payload["itemPool"], list) and not pool:
        warnings.append({
            "path": "$.itemPool",
            "message": "itemPool is empty; every pull will fail until items are added."
        })

    seen_ids = set()
    for i, item in enumerate(pool):
        path = f"$.itemPool[{i}]"

        if not isinstance(item, dict):
            errors.append({
                "path": path,
                "message": "Item must be an object/dict."
            })
            continue

        missing = [f for f in FATAL_MISSING_ITEM_FIELDS if f not in item]
        if missing:
            errors.append({
                "path": path,
                "message": f"Missing required fields: {', '.join(missing)}"
            })
            continue

        if not isinstance(item["id"], str) or not item["id"].strip():
            errors.append({
                "path": f"{path}.id",
                "message": "Item id must be a non-empty string."
            })
            continue

        if item["id"] in seen_ids:
            errors.append({
                "path": f"{path}.id",
                "message": f"Duplicate item id '{item['id']}'."
            })
            continue
        seen_ids.add(item["id"])

        rarity = item["rarity"]
        if rarity not in RARITY_KEYS:
            errors.append({
                "path": f"{path}.rarity",
                "message": f"Unknown rarity '{rarity}'. Allowed: {RARITY_KEYS}"
            })
            continue

        if isinstance(mapping, dict) and rarity not in known_rarities:
            errors.append({
                "path": f"{path}.rarity",
                "message": f"Rarity '{rarity}' has no weight in rarityMapping."
            })
            continue

        # Optional fields warnings (non-fatal)
        for field in OPTIONAL_ITEM_FIELDS:
            if field not in item:
                warnings.append({
                    "path": path,
                    "message": f"Missing optional field '{field}' (recommended)."
                })

        summary["total_items"] += 1
        summary["rarity_counts"][rarity] += 1

    return {
        "valid": len(errors) == 0,
        "errors": errors,
        "warnings": warnings,
        "summary": summary,
    }
