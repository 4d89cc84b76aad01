"""Conversation layer: orchestrator, sessions, responder and the chat facade."""

from doce.conversation.assistant import APOLOGY, Assistant, AssistantReply
from doce.conversation.orchestrator import ConversationOrchestrator, ConversationReply, ReplyKind
from doce.conversation.responder import FreeConversationResponder, ResponderReply
from doce.conversation.session import ConversationSession, SessionRegistry

__all__ = [
    "APOLOGY",
    "Assistant",
    "AssistantReply",
    "ConversationOrchestrator",
    "ConversationReply",
    "ConversationSession",
    "FreeConversationResponder",
    "ReplyKind",
    "ResponderReply",
    "SessionRegistry",
]
