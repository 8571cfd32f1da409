"""Data models for the issue/chat proxy."""

from .chat_models import (
    ChatRequest, ChatResponse,
    EndSessionRequest, EndSessionResponse,
    ErrorResponse
)
from .jira_models import JiraIssueSummary, JiraIssue, JiraIssueList
from .session_model import Session

__all__ = [
    "ChatRequest", "ChatResponse",
    "EndSessionRequest", "EndSessionResponse",
    "ErrorResponse",
    "JiraIssueSummary", "JiraIssue", "JiraIssueList",
    "Session"
]
