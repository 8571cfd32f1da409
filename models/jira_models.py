"""
Response models for the Jira passthrough endpoints.

Each model knows how to pick its fields out of a raw Jira REST v2 issue.
"""

from typing import Any, Dict, List

from pydantic import BaseModel, Field


def _fields(raw: Dict[str, Any]) -> Dict[str, Any]:
    fields = raw.get("fields")
    return fields if isinstance(fields, dict) else {}


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _nested(fields: Dict[str, Any], name: str, attr: str) -> str:
    value = fields.get(name)
    return _text(value.get(attr)) if isinstance(value, dict) else ""


class JiraIssueSummary(BaseModel):
    """An issue as listed by /api/jira/issues."""
    key: str
    summary: str = ""
    status: str = ""
    project: str = ""

    @classmethod
    def from_api(cls, raw: Dict[str, Any]) -> "JiraIssueSummary":
        fields = _fields(raw)
        return cls(
            key=str(raw.get("key") or ""),
            summary=_text(fields.get("summary")),
            status=_nested(fields, "status", "name"),
            project=_nested(fields, "project", "key"),
        )


class JiraIssue(JiraIssueSummary):
    """A single issue with its description, as returned by /api/jira/issue."""
    description: str = ""

    @classmethod
    def from_api(cls, raw: Dict[str, Any]) -> "JiraIssue":
        summary = JiraIssueSummary.from_api(raw)
        description = _fields(raw).get("description")
        return cls(
            **summary.model_dump(),
            description=description.strip() if isinstance(description, str) else "",
        )


class JiraIssueList(BaseModel):
    issues: List[JiraIssueSummary] = Field(default_factory=list)
