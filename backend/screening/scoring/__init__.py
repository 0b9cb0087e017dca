"""Remote risk scoring against the external screening API."""

from .risk_scorer import RemoteRiskScorer, ScorerSettings, evaluate_risk

__all__ = ["RemoteRiskScorer", "ScorerSettings", "evaluate_risk"]
