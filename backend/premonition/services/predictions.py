"""Pre-season prediction dataset loading."""

import json
import logging
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from premonition.services.models import TEAM_COUNT, Prediction

logger = logging.getLogger(__name__)

DEFAULT_PREDICTIONS_PATH = Path(__file__).parent.parent / "data" / "predictions.json"


class PredictionRecord(BaseModel):
    """One entry of the JSON dataset."""

    name: str = Field(min_length=1)
    groups: list[str] = Field(default_factory=list)
    rankings: list[str]

    @field_validator("rankings")
    @classmethod
    def _twenty_distinct_teams(cls, rankings: list[str]) -> list[str]:
        if len(rankings) != TEAM_COUNT:
            raise ValueError(f"rankings must list {TEAM_COUNT} teams, got {len(rankings)}")
        if len(set(rankings)) != len(rankings):
            raise ValueError("rankings must not repeat a team")
        return rankings

    def to_prediction(self) -> Prediction:
        return Prediction(
            name=self.name,
            groups=tuple(self.groups),
            rankings=tuple(self.rankings),
        )


def parse_predictions(raw: list[dict]) -> list[Prediction]:
    """Validate raw records and convert them to Prediction values.

    Raises:
        ValueError: On a malformed record or a duplicate participant name
    """
    predictions = [PredictionRecord.model_validate(item).to_prediction() for item in raw]

    seen: set[str] = set()
    for prediction in predictions:
        if prediction.name in seen:
            raise ValueError(f"Duplicate participant name: {prediction.name}")
        seen.add(prediction.name)

    return predictions


def load_predictions(path: Path | None = None) -> list[Prediction]:
    """Load the prediction dataset from ``path`` or the packaged default."""
    path = Path(path) if path is not None else DEFAULT_PREDICTIONS_PATH
    predictions = parse_predictions(json.loads(path.read_text(encoding="utf-8")))
    logger.info(f"Loaded {len(predictions)} predictions from {path}")
    return predictions


def filter_by_group(predictions: list[Prediction], group: str) -> list[Prediction]:
    """Keep participants in ``group`` (everyone for "all"), preserving order."""
    return [p for p in predictions if p.in_group(group)]


def available_groups(predictions: list[Prediction]) -> list[str]:
    """Distinct group tags in first-seen order."""
    groups: list[str] = []
    for prediction in predictions:
        for group in prediction.groups:
            if group not in groups:
                groups.append(group)
    return groups
