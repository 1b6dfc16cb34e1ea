import json

import httpx
import pytest

from aura_planner.cloud.ai_scheduler import AIScheduleClient, SYSTEM_PROMPT
from aura_planner.config import Settings
from aura_planner.exceptions import GeneratorError


API_URL = "https://ai.test/v1/chat/completions"


@pytest.fixture
def settings():
    return Settings(ai_api_url=API_URL, ai_api_key="secret", ai_model="test-model")


def reply(content, status=200):
    def handler(request):
        handler.requests.append(request)
        return httpx.Response(status, json={"choices": [{"message": {"content": content}}]})
    handler.requests = []
    return handler


SCHEDULE_JSON = json.dumps([
    {"id": "a", "taskId": "t1", "startTime": "9:00 AM", "endTime": "10:00 AM",
     "type": "work", "title": "Write report", "description": "Deep work"},
    {"startTime": "10:00 AM", "endTime": "10:15 AM", "type": "break"},
])


class TestGenerate:

    def test_parses_schedule_from_reply(self, settings, user_input):
        handler = reply(f"Here is your plan:\n{SCHEDULE_JSON}\nEnjoy!")
        client = AIScheduleClient(settings, transport=httpx.MockTransport(handler))

        items = client.generate(user_input)

        assert [i.type for i in items] == ["work", "break"]
        assert items[0].task_id == "t1"
        assert items[1].title == "Untitled Task"
        assert items[1].id.startswith("schedule-")

        request = handler.requests[0]
        assert str(request.url) == API_URL
        assert request.headers["Authorization"] == "Bearer secret"
        payload = json.loads(request.content)
        assert payload["model"] == "test-model"
        assert payload["temperature"] == 0.7
        assert payload["messages"][0] == {"role": "system", "content": SYSTEM_PROMPT}

    def test_regeneration_prompt(self, settings, user_input):
        handler = reply(SCHEDULE_JSON)
        client = AIScheduleClient(settings, transport=httpx.MockTransport(handler))

        client.generate(user_input, feedback="Too packed", preferences={"longerBreaks": True})

        payload = json.loads(handler.requests[0].content)
        prompt = payload["messages"][1]["content"]
        assert payload["temperature"] == 0.8
        assert '"Too packed"' in prompt
        assert "Make breaks longer" in prompt
        assert "Reduce work session lengths" not in prompt

    def test_http_error_status(self, settings, user_input):
        client = AIScheduleClient(settings, transport=httpx.MockTransport(reply(SCHEDULE_JSON, status=500)))
        with pytest.raises(GeneratorError):
            client.generate(user_input)

    def test_reply_without_json(self, settings, user_input):
        client = AIScheduleClient(settings, transport=httpx.MockTransport(reply("Sorry, I can't.")))
        with pytest.raises(GeneratorError):
            client.generate(user_input)

    def test_timeout(self, settings, user_input):
        def handler(request):
            raise httpx.ConnectTimeout("too slow", request=request)

        client = AIScheduleClient(settings, transport=httpx.MockTransport(handler))
        with pytest.raises(GeneratorError):
            client.generate(user_input)

    def test_not_configured(self, user_input):
        client = AIScheduleClient(Settings())
        assert not client.is_configured
        with pytest.raises(GeneratorError):
            client.generate(user_input)


class TestPrompts:

    def test_prompt_describes_the_day(self, user_input):
        prompt = AIScheduleClient.build_prompt(user_input)

        assert "9:00 AM to 11:00 AM (2.0 hours available)" in prompt
        assert "- [t1] Write report (60 min, high priority)" in prompt
        assert "stable mood, optimal for steady work" in prompt
        assert "good energy, productive day ahead" in prompt

    def test_parse_rejects_non_objects(self):
        with pytest.raises(GeneratorError):
            AIScheduleClient.parse_schedule("[1, 2, 3]")


class TestWellnessRecommendation:

    def test_uses_reply(self, settings):
        client = AIScheduleClient(settings, transport=httpx.MockTransport(reply("  Drink some water.  ")))
        assert client.wellness_recommendation("balanced", 6, 1, 3) == "Drink some water."

    def test_falls_back_on_failure(self):
        client = AIScheduleClient(Settings())
        assert client.wellness_recommendation("stressed", 6, 1, 3).startswith("Take 5 deep breaths")
