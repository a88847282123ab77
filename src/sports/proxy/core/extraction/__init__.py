from sports.proxy.core.extraction.extractor import IntentExtractor, Mention, SurfaceIndex
from sports.proxy.core.extraction.intents import INTENTS, Intent

__all__ = ["IntentExtractor", "Mention", "SurfaceIndex", "INTENTS", "Intent"]
