"""User-defined emotion labels.

Deployments can add labels the built-in table lacks ("nostalgic", "awe")
or redefine existing ones. Custom definitions are merged into a *new* table,
so the defaults stay intact and testable on their own.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional

from affect_engine.model.mapping import (
    EMOTION_MAPPINGS,
    EmotionDelta,
    get_emotion_mapping,
    make_delta,
    normalize_label,
)
from affect_engine.model.values import BASIC_EMOTION_NAMES, DIMENSION_NAMES

logger = logging.getLogger(__name__)


@dataclass
class TaxonomyValidation:
    """Result of checking a configured label list against a mapping table."""
    valid: bool
    warnings: list[str] = field(default_factory=list)


def _filter_names(label: str, section: str, values: Optional[Mapping], allowed: tuple) -> dict:
    kept = {}
    for name, delta in (values or {}).items():
        if name not in allowed:
            logger.warning(f"Custom label '{label}': dropping unknown {section} name '{name}'")
            continue
        if not isinstance(delta, (int, float)) or isinstance(delta, bool):
            logger.warning(f"Custom label '{label}': dropping non-numeric delta for '{name}'")
            continue
        kept[name] = float(delta)
    return kept


def create_custom_mapping(label: str, definition: Mapping) -> EmotionDelta:
    """Build a delta mapping from a plain definition.

    Args:
        label: Label being defined (used only for log messages)
        definition: {"dimensions": {name: delta}, "emotions": {name: delta}}

    Returns:
        EmotionDelta containing only recognised dimension/emotion names
    """
    return make_delta(
        _filter_names(label, "dimension", definition.get("dimensions"), DIMENSION_NAMES),
        _filter_names(label, "emotion", definition.get("emotions"), BASIC_EMOTION_NAMES),
    )


def merge_custom_mappings(
    custom: Optional[Mapping[str, object]],
    base: Mapping[str, EmotionDelta] = EMOTION_MAPPINGS,
) -> dict[str, EmotionDelta]:
    """Merge custom labels over a base table.

    Keys are normalized (trimmed, lowercased). Custom entries win over base
    entries with the same key; later custom entries win over earlier ones.
    Values may be EmotionDelta instances or plain definitions.
    """
    merged = dict(base)
    for label, definition in (custom or {}).items():
        key = normalize_label(label)
        if not key:
            logger.warning("Ignoring custom mapping with an empty label")
            continue
        if isinstance(definition, EmotionDelta):
            merged[key] = definition
        elif isinstance(definition, Mapping):
            merged[key] = create_custom_mapping(key, definition)
        else:
            logger.warning(f"Ignoring custom mapping for '{key}': expected a mapping")
    return merged


def validate_taxonomy(
    labels: Iterable[str],
    table: Mapping[str, EmotionDelta] = EMOTION_MAPPINGS,
) -> TaxonomyValidation:
    """Check that a label list is usable with a mapping table.

    An empty list is invalid. Labels without a mapping and duplicate labels
    produce warnings but keep the taxonomy valid, since unknown labels are
    simply ignored at runtime.
    """
    labels = list(labels)
    if not labels:
        return TaxonomyValidation(valid=False, warnings=["Taxonomy must contain at least one label"])

    warnings = []
    seen = set()
    for label in labels:
        key = normalize_label(label)
        if key in seen:
            warnings.append(f"Label '{label}' is a duplicate")
            continue
        seen.add(key)
        if get_emotion_mapping(key, table) is None:
            warnings.append(f"Label '{label}' has no emotion mapping and will have no effect")

    return TaxonomyValidation(valid=True, warnings=warnings)
