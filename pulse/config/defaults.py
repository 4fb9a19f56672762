"""Default values for the health scoring engine.

The weighting scheme below is the canonical one: a 4-record signal window,
30/25/25/20 component weights and linear severity penalties. Any other
scheme is expressed through pulse.yaml, not by editing the engine.
"""

# ---------------------------------------------------------------------------
# Component Weights (must sum to 1.0)
# ---------------------------------------------------------------------------
COMPONENT_WEIGHTS = {
    "satisfaction": 0.30,  # Client satisfaction (feedback ratings)
    "confidence": 0.25,    # Employee confidence (check-ins)
    "schedule": 0.25,      # Reported completion vs linear timeline
    "risk": 0.20,          # Open risks and flagged issues
}

# ---------------------------------------------------------------------------
# Risk Exposure Penalties (points off a 100 start)
# ---------------------------------------------------------------------------
RISK_PENALTIES = {
    "HIGH": 15,
    "MEDIUM": 8,
    "LOW": 3,
}

FLAGGED_ISSUE_PENALTY = 10

# ---------------------------------------------------------------------------
# Signal Window (most recent N feedback / check-in records)
# ---------------------------------------------------------------------------
SIGNAL_WINDOW = 4

# ---------------------------------------------------------------------------
# Neutral Defaults (used when a signal has no records yet)
# ---------------------------------------------------------------------------
SUB_SCORE_DEFAULTS = {
    "satisfaction": 60.0,
    "confidence": 60.0,
    "schedule": 50.0,
    "risk": 100.0,
}

# Returned when the project is missing or the aggregate is not a number.
FALLBACK_SCORE = 100

# ---------------------------------------------------------------------------
# Status Thresholds (score >= threshold)
# ---------------------------------------------------------------------------
STATUS_THRESHOLDS = {
    "on_track": 80,
    "at_risk": 60,
}

# ---------------------------------------------------------------------------
# Rating Scales
# ---------------------------------------------------------------------------
RATING_SCALE = {
    "min": 1,
    "max": 5,
}

# (avg - 1) * 25 maps a 1-5 rating onto 0-100
RATING_RESCALE_FACTOR = 25

# ---------------------------------------------------------------------------
# Event Alerts (notifications raised by submissions, not by recalculation)
# ---------------------------------------------------------------------------
ALERT_DEFAULTS = {
    "low_confidence_max": 2,
    "notify_low_confidence": True,
    "notify_flagged_issue": True,
    "notify_high_risk": True,
}

# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------
DATABASE_DEFAULTS = {
    "path": "~/.pulse/pulse.db",
    "busy_timeout_ms": 5000,
}
