"""Intent interpretation: remote (Gemini) tier over a local keyword tier."""

from doce.intent.local import LocalIntentClassifier
from doce.intent.models import FREE_CONVERSATION, IntentResult
from doce.intent.remote import RemoteIntentClassifier

__all__ = ["FREE_CONVERSATION", "IntentResult", "LocalIntentClassifier", "RemoteIntentClassifier"]
