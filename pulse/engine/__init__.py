"""Health scoring engine.

Public API:
  recalculate_health_score -- Recalculate one project -> int score
  score_project            -- Same, returning the HealthResult breakdown
  HealthResult             -- TypedDict for the breakdown
  HealthStore              -- Data-access protocol the engine is given
  ProjectSignals           -- Records read for one recalculation
"""

from pulse.engine.context import HealthStore, ProjectSignals
from pulse.engine.scorer import HealthResult, recalculate_health_score, score_project

__all__ = [
    "HealthResult",
    "HealthStore",
    "ProjectSignals",
    "recalculate_health_score",
    "score_project",
]
