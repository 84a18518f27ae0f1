"""Shared Pydantic types and validators for reuse across models.

Centralises identifier constraints, property-bag normalisation, finite
weights and Literal enums so every model speaks the same language.
"""

from __future__ import annotations

import math
from typing import Annotated, Any, Literal

from pydantic import AfterValidator, BeforeValidator, Field

# ---------------------------------------------------------------------------
# Property bags
# ---------------------------------------------------------------------------


def normalize_properties(v: Any) -> dict[str, Any]:
    """Accept ``dict | None`` and return a fresh ``dict``.

    * ``None`` → ``{}``
    * non-string keys are stringified so the bag stays JSON-serialisable
    """
    if v is None:
        return {}
    if isinstance(v, dict):
        return {str(k): val for k, val in v.items()}
    raise ValueError("properties must be an object")


Properties = Annotated[dict[str, Any], BeforeValidator(normalize_properties)]
"""Open-ended key/value bag: accepts dict or None, always outputs dict."""


# ---------------------------------------------------------------------------
# Numeric types
# ---------------------------------------------------------------------------


def _require_finite(v: float) -> float:
    if math.isnan(v) or math.isinf(v):
        raise ValueError("weight must be a finite number")
    return v


Weight = Annotated[float, AfterValidator(_require_finite)]
"""Finite float edge weight (NaN/Inf rejected, negatives allowed)."""

NonNegativeInt = Annotated[int, Field(ge=0)]
"""Integer >= 0 for counts and depths."""


# ---------------------------------------------------------------------------
# String constraints
# ---------------------------------------------------------------------------

NodeId = Annotated[str, Field(min_length=1)]
"""Non-empty caller-supplied node identifier."""

GraphId = Annotated[str, Field(min_length=1)]
"""Non-empty engine-generated graph identifier."""


# ---------------------------------------------------------------------------
# Literal enums
# ---------------------------------------------------------------------------

QueryType = Literal["path", "neighbors", "cluster"]
AnalysisType = Literal["centrality", "communities", "anomalies", "statistics"]
ExportFormat = Literal["json", "graphml", "cypher"]
ConflictResolution = Literal["keep_first", "keep_last", "merge_properties"]

QUERY_TYPES: frozenset[str] = frozenset({"path", "neighbors", "cluster"})
ANALYSIS_TYPES: frozenset[str] = frozenset({"centrality", "communities", "anomalies", "statistics"})
EXPORT_FORMATS: frozenset[str] = frozenset({"json", "graphml", "cypher"})
CONFLICT_RESOLUTIONS: frozenset[str] = frozenset({"keep_first", "keep_last", "merge_properties"})
