import json
import logging
from pathlib import Path
from typing import Any, Optional, Sequence

import pandas as pd
import requests
from pydantic import BaseModel

from . import settings
from . import utils

logger = logging.getLogger(__name__)


def models_to_frame(validated_data: Sequence[BaseModel]) -> pd.DataFrame:
    """
    Flattens models into a table: nested models become dotted columns
    (health.status) and size lists become comma-separated text.
    """
    rows = [item.model_dump(mode="json", by_alias=True) for item in validated_data]
    df = pd.json_normalize(rows)
    for col in df.columns:
        if df[col].map(lambda v: isinstance(v, list)).any():
            df[col] = df[col].map(
                lambda v: ", ".join(str(x) for x in v) if isinstance(v, list) else v
            )
    return df


def save_outputs(
    validated_data: Sequence[BaseModel],
    base_name: str,
    output_dir: Optional[Path] = None,
) -> Path:
    """Saves the data to CSV and conditionally to JSON, with dated filenames."""
    output_dir = output_dir or settings.OUTPUT_DIR
    output_dir.mkdir(parents=True, exist_ok=True)
    date_suffix = utils.get_date_suffix_for_filename()

    csv_path = output_dir / f"{base_name}_{date_suffix}.csv"
    json_path = output_dir / f"{base_name}_{date_suffix}.json"

    models_to_frame(validated_data).to_csv(csv_path, index=False)
    logger.info(f"✅ Report saved to: {csv_path}")

    if settings.SAVE_JSON_OUTPUT:
        with open(json_path, "w", encoding="utf-8") as f:
            json_data = [item.model_dump(mode="json", by_alias=True) for item in validated_data]
            json.dump(json_data, f, indent=2, ensure_ascii=False)
        logger.info(f"✅ JSON output saved to: {json_path}")
    else:
        logger.info("INFO: Skipping JSON file save as per configuration.")

    return csv_path


def post_to_webhook(
    validated_data: Sequence[BaseModel],
    metadata: dict[str, Any],
    report_type: str,
    extra_data: Optional[dict[str, Sequence[BaseModel]]] = None,
) -> bool:
    """
    Posts the validated data and run metadata to the webhook.
    Secondary result sets (sweep drafts, per-store breakdown) travel under
    "extraData", keyed by name.
    Returns True when the webhook accepted the payload.
    """
    if not settings.WEBHOOK_URL:
        logger.warning("⚠️ WEBHOOK_URL not set. Skipping webhook post.")
        return False

    logger.info(f"🚀 Posting {report_type} report to webhook: {settings.WEBHOOK_URL}")

    payload = {
        "reportType": report_type,
        "reportData": [item.model_dump(mode="json", by_alias=True) for item in validated_data],
        "metadata": metadata,
        "extraData": {
            name: [item.model_dump(mode="json", by_alias=True) for item in models]
            for name, models in (extra_data or {}).items()
        },
    }

    try:
        response = requests.post(settings.WEBHOOK_URL, json=payload, timeout=15)
        response.raise_for_status()
        logger.info("✅ Report successfully posted to webhook.")
        return True
    except requests.exceptions.RequestException as e:
        logger.error(f"❌ Error posting to webhook: {e}")
        return False
