"""Feature flags -> ScanConfig."""

from __future__ import annotations

import re
from typing import Iterable, Sequence

from geiger_report.models.scan import ScanConfig

_FEATURE_SEPARATORS = re.compile(r"[,\s]+")


class FeatureConfigBuilder:
    """
    Translate raw feature-selection flags into a ScanConfig.

    Mutually exclusive combinations (e.g. ``--all-features`` together with
    ``--no-default-features``) are passed through; cargo decides what they
    mean.
    """

    @staticmethod
    def build(
        features: Sequence[str],
        all_features: bool,
        no_default_features: bool,
    ) -> ScanConfig:
        return ScanConfig(
            features=tuple(features),
            all_features=all_features,
            no_default_features=no_default_features,
        )


def split_features(values: Iterable[str]) -> list[str]:
    """Split ``--features`` values the way cargo does: on commas and whitespace."""
    tokens: list[str] = []
    for value in values:
        tokens.extend(t for t in _FEATURE_SEPARATORS.split(value) if t)
    return tokens
