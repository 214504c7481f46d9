# product_lifecycle_engine/initiative_engine/services/scoring/engines/__init__.py

from .rice import RiceScoringEngine, rice_score

__all__ = ["RiceScoringEngine", "rice_score"]
