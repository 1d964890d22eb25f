import json

import httpx
import pytest

from config import Settings


class JiraRecorder:
    """MockTransport handler that records create-issue calls and hands out PROJ-n keys."""

    def __init__(self, fail_on_call=None, failure_status=400, failure_body=None):
        self.calls = []
        self.fail_on_call = fail_on_call
        self.failure_status = failure_status
        self.failure_body = failure_body or {"errorMessages": [], "errors": {"summary": "Field is required"}}

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(json.loads(request.content))
        if self.fail_on_call is not None and len(self.calls) == self.fail_on_call:
            return httpx.Response(self.failure_status, json=self.failure_body)
        key = f"PROJ-{len(self.calls)}"
        return httpx.Response(201, json={"id": str(10000 + len(self.calls)), "key": key})

    def issue_types(self):
        return [call["fields"]["issuetype"]["name"] for call in self.calls]


@pytest.fixture
def settings():
    return Settings(
        openai_api_key="sk-test",
        completion_base_url="https://llm.test",
        jira_base_url="https://test.atlassian.net/",
        jira_email="test@example.com",
        jira_api_token="test-token",
    )


@pytest.fixture
def agile_document():
    return {
        "epic": {"summary": "Checkout revamp", "description": "Rebuild the checkout flow"},
        "stories": [
            {
                "summary": "Guest checkout",
                "description": "As a guest I want to pay without an account",
                "acceptanceCriteria": ["Guest can pay by card"],
                "tasks": ["Add guest session", "Update payment form"],
            },
            {"summary": "Saved cards", "description": "As a customer I want to reuse my card"},
        ],
    }
