import httpx
import pytest

from conftest import JiraRecorder
from errors import TrackerCreateFailed
from models import PublicationRequest
from services.jira_service import JiraService
from services.publication import PublicationService


def make_service(settings, recorder):
    jira = JiraService(settings, transport=httpx.MockTransport(recorder))
    return PublicationService(jira, epic_name_field=settings.jira_epic_name_field)


def make_request(stories):
    return PublicationRequest.model_validate({
        "epic": {"summary": "S", "description": "D"},
        "stories": stories,
        "projectKey": "PROJ",
        "jiraLabel": "ai-generated",
        "jiraUser": "alex@example.com",
    })


@pytest.mark.asyncio
async def test_publish_epic_then_story(settings):
    recorder = JiraRecorder()
    service = make_service(settings, recorder)

    result = await service.publish(make_request([{"summary": "s1", "description": "d1"}]))

    assert recorder.issue_types() == ["Epic", "Story"]
    assert recorder.calls[0]["fields"]["customfield_10011"] == "S"
    assert recorder.calls[1]["fields"]["parent"] == {"key": "PROJ-1"}
    assert result.model_dump(by_alias=True) == {"message": "Created in JIRA", "epicKey": "PROJ-1"}


@pytest.mark.asyncio
async def test_publish_keeps_story_order(settings):
    recorder = JiraRecorder()
    service = make_service(settings, recorder)
    stories = [{"summary": f"s{i}", "description": f"d{i}"} for i in range(3)]

    await service.publish(make_request(stories))

    assert [call["fields"]["summary"] for call in recorder.calls] == ["S", "s0", "s1", "s2"]
    assert all(call["fields"]["labels"] == ["ai-generated"] for call in recorder.calls)


@pytest.mark.asyncio
async def test_publish_without_stories(settings):
    recorder = JiraRecorder()
    service = make_service(settings, recorder)

    result = await service.publish(make_request([]))

    assert recorder.issue_types() == ["Epic"]
    assert result.epic_key == "PROJ-1"


@pytest.mark.asyncio
async def test_epic_failure_skips_stories(settings):
    recorder = JiraRecorder(fail_on_call=1, failure_status=401, failure_body={"errorMessages": ["Unauthorized"]})
    service = make_service(settings, recorder)

    with pytest.raises(TrackerCreateFailed) as exc_info:
        await service.publish(make_request([{"summary": "s1", "description": "d1"}]))

    assert recorder.issue_types() == ["Epic"]
    assert exc_info.value.stage == "epic"
    assert exc_info.value.story_index is None
    assert exc_info.value.upstream == {"errorMessages": ["Unauthorized"]}


@pytest.mark.asyncio
async def test_first_story_failure_aborts_remaining(settings):
    recorder = JiraRecorder(fail_on_call=2)
    service = make_service(settings, recorder)
    stories = [{"summary": "s1", "description": "d1"}, {"summary": "s2", "description": "d2"}]

    with pytest.raises(TrackerCreateFailed) as exc_info:
        await service.publish(make_request(stories))

    assert recorder.issue_types() == ["Epic", "Story"]
    assert recorder.calls[1]["fields"]["summary"] == "s1"
    assert exc_info.value.stage == "story"
    assert exc_info.value.story_index == 0
    assert exc_info.value.epic_key == "PROJ-1"
    assert exc_info.value.status == 400


@pytest.mark.asyncio
async def test_later_story_failure_reports_created_keys(settings):
    recorder = JiraRecorder(fail_on_call=3)
    service = make_service(settings, recorder)
    stories = [{"summary": f"s{i}", "description": f"d{i}"} for i in range(3)]

    with pytest.raises(TrackerCreateFailed) as exc_info:
        await service.publish(make_request(stories))

    assert len(recorder.calls) == 3
    assert exc_info.value.story_index == 1
    assert exc_info.value.created_story_keys == ["PROJ-2"]
    assert exc_info.value.details["createdStoryKeys"] == ["PROJ-2"]


@pytest.mark.asyncio
async def test_publishing_twice_duplicates_issues(settings):
    recorder = JiraRecorder()
    service = make_service(settings, recorder)
    request = make_request([{"summary": "s1", "description": "d1"}])

    first = await service.publish(request)
    second = await service.publish(request)

    assert recorder.issue_types() == ["Epic", "Story", "Epic", "Story"]
    assert first.epic_key == "PROJ-1"
    assert second.epic_key == "PROJ-3"
    assert recorder.calls[3]["fields"]["parent"] == {"key": "PROJ-3"}
