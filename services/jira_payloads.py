from typing import Optional

from models import Epic, Story


def text_to_adf(text: str) -> dict:
    """
    Wrap plain text in a single-paragraph Atlassian Document Format document.
    """
    return {
        "version": 1,
        "type": "doc",
        "content": [
            {
                "type": "paragraph",
                "content": [
                    {"type": "text", "text": text}
                ]
            }
        ]
    }


def _issue_fields(project_key: str, summary: str, description: str, issue_type: str, label: str) -> dict:
    return {
        "project": {"key": project_key},
        "summary": summary,
        "description": text_to_adf(description),
        "issuetype": {"name": issue_type},
        "labels": [label],
    }


def build_epic_payload(epic: Epic, project_key: str, label: str, epic_name_field: Optional[str] = None) -> dict:
    fields = _issue_fields(project_key, epic.summary, epic.description, "Epic", label)
    if epic_name_field:
        fields[epic_name_field] = epic.summary
    return {"fields": fields}


def build_story_payload(story: Story, project_key: str, label: str, epic_key: str) -> dict:
    fields = _issue_fields(project_key, story.summary, story.description, "Story", label)
    fields["parent"] = {"key": epic_key}
    return {"fields": fields}
