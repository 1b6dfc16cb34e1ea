"""
AI schedule generator (chat-completions API over httpx)
"""
import json
import logging
import re
from typing import Any, Dict, List, Optional

import httpx

from ..config import Settings, get_settings
from ..exceptions import GeneratorError
from ..models import ScheduleItem, UserInput, normalize_schedule
from ..logic.time_math import to_12h, remaining_minutes

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are AURA, an AI wellness and productivity assistant. Your job is to create balanced, realistic schedules that prioritize both productivity and well-being. Always consider the user's energy level, mood, and include appropriate breaks and wellness interventions.

Return your response as a valid JSON array of schedule items with this exact structure:
[
  {
    "id": "unique-id",
    "taskId": "task-id-if-work-item",
    "startTime": "9:00 AM",
    "endTime": "10:00 AM",
    "type": "work|break|wellness",
    "title": "Task Title",
    "description": "Brief description"
  }
]

Rules:
- Use the exact start and end times provided by the user
- Include 15-min breaks between work sessions
- Add 30-min wellness breaks after 90 min of consecutive work
- Adjust task durations based on user energy/mood
- Low energy = longer time estimates, more breaks
- Stressed = shorter focused sessions, more wellness breaks
- Never exceed the available time window
- Only reference the task ids you are given
- Minimum task duration: 15 minutes"""

MOOD_DESCRIPTIONS = {
    "energized": "high motivation, ready for challenging tasks",
    "balanced": "stable mood, optimal for steady work",
    "tired": "low energy, needs more breaks and easier tasks",
    "stressed": "anxious, needs calming activities and shorter focus sessions",
}

PREFERENCE_ADJUSTMENTS = {
    "longerBreaks": "- Make breaks longer (20-30 minutes instead of 15)",
    "shorterWorkBlocks": "- Reduce work session lengths (30-45 minutes max)",
    "moreWellnessTime": "- Add more wellness activities and self-care time",
    "differentTaskOrder": "- Rearrange tasks in a different order",
}

_JSON_ARRAY_RE = re.compile(r"\[[\s\S]*\]")


def energy_description(energy: int) -> str:
    if energy >= 8:
        return "very high energy, can handle intensive work"
    if energy >= 6:
        return "good energy, productive day ahead"
    if energy >= 4:
        return "moderate energy, needs balanced approach"
    return "low energy, requires gentle schedule with frequent breaks"


def fallback_wellness_message(mood: str, energy: int) -> str:
    if mood == "stressed":
        return "Take 5 deep breaths. You're doing great, one step at a time."
    if mood == "tired":
        return "Consider a short walk or some fresh air to recharge your energy."
    if energy <= 3:
        return "Your body needs rest. Take a proper break and hydrate."
    return "You're making good progress! Keep up the balanced approach."


class AIScheduleClient:
    """Schedule generator backed by an OpenAI-compatible endpoint"""

    def __init__(self, settings: Optional[Settings] = None, transport: Optional[httpx.BaseTransport] = None):
        self.settings = settings or get_settings()
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return self.settings.ai_configured

    def _get_headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        if self.settings.ai_api_key:
            headers["Authorization"] = f"Bearer {self.settings.ai_api_key}"
        return headers

    def _chat(self, messages: List[Dict[str, str]], temperature: float, max_tokens: int) -> str:
        if not self.is_configured:
            raise GeneratorError("AI schedule generator is not configured")

        payload = {
            "model": self.settings.ai_model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        try:
            with httpx.Client(transport=self._transport, timeout=self.settings.ai_timeout) as client:
                response = client.post(self.settings.ai_api_url, headers=self._get_headers(), json=payload)
        except httpx.HTTPError as e:
            raise GeneratorError(f"AI request failed: {e}") from e

        if response.status_code != 200:
            raise GeneratorError(f"AI request failed ({response.status_code})")

        try:
            content = response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise GeneratorError("No response content from AI") from e
        if not content:
            raise GeneratorError("No response content from AI")
        return content

    def generate(
        self,
        user_input: UserInput,
        feedback: Optional[str] = None,
        preferences: Optional[Dict[str, Any]] = None,
    ) -> List[ScheduleItem]:
        """
        Ask the AI for a schedule

        Args:
            user_input: planning request
            feedback: free text from the user or the rescheduler
            preferences: longerBreaks / shorterWorkBlocks / moreWellnessTime / differentTaskOrder

        Returns:
            normalized schedule items

        Raises:
            GeneratorError: on timeouts, non-2xx responses or unusable JSON
        """
        prompt = self.build_prompt(user_input)
        if feedback or preferences:
            prompt = self.build_regeneration_prompt(prompt, feedback or "", preferences or {})

        content = self._chat(
            [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            temperature=0.8 if feedback or preferences else 0.7,
            max_tokens=2000,
        )
        return normalize_schedule(self.parse_schedule(content))

    @staticmethod
    def parse_schedule(content: str) -> List[Dict[str, Any]]:
        """Pull the JSON schedule array out of a model reply"""
        match = _JSON_ARRAY_RE.search(content)
        if not match:
            raise GeneratorError("Invalid JSON response from AI")
        try:
            items = json.loads(match.group(0))
        except json.JSONDecodeError as e:
            raise GeneratorError("Invalid JSON response from AI") from e
        if not isinstance(items, list) or not all(isinstance(i, dict) for i in items):
            raise GeneratorError("AI response is not a list of schedule items")
        return items

    @staticmethod
    def build_prompt(user_input: UserInput) -> str:
        """Planning prompt for the chat model"""
        start = to_12h(user_input.start_time)
        end = to_12h(user_input.end_time)
        hours = remaining_minutes(user_input.start_time, user_input.end_time) / 60
        task_list = "\n".join(
            f"- [{t.id}] {t.name} ({t.estimated_time} min, {t.priority} priority)"
            for t in user_input.tasks
        )
        mood = user_input.mood
        energy = user_input.energy

        return f"""Create a balanced daily schedule for a user with the following requirements:

**Time Window:** {start} to {end} ({hours:.1f} hours available)
**Current Mood:** {mood}
**Energy Level:** {energy}/10

**Tasks to schedule:**
{task_list}

**User Context:**
- Mood: {mood} ({MOOD_DESCRIPTIONS.get(mood, mood)})
- Energy: {energy}/10 ({energy_description(energy)})
- Must start at exactly {start}
- Must finish by {end}

Please create a schedule that:
1. Balances productivity with wellness
2. Includes appropriate breaks and wellness activities
3. Adjusts task timing based on mood and energy
4. Uses the EXACT time window provided ({start} - {end})
5. Fits within the available {hours:.1f} hours"""

    @staticmethod
    def build_regeneration_prompt(base_prompt: str, feedback: str, preferences: Dict[str, Any]) -> str:
        """Base prompt plus the user's feedback and preferences"""
        adjustments = [text for key, text in PREFERENCE_ADJUSTMENTS.items() if preferences.get(key)]

        adjustment_text = ""
        if adjustments:
            adjustment_text = "\n**REQUIRED ADJUSTMENTS:**\n" + "\n".join(adjustments) + "\n"

        feedback_text = ""
        if feedback.strip():
            feedback_text = (f'\n**USER FEEDBACK:**\n"{feedback}"\n\n'
                             "Please address this feedback directly in the new schedule.\n")

        return f"""{base_prompt}

**SCHEDULE REGENERATION REQUEST:**
The user has reviewed their previous schedule and wants changes.
{feedback_text}{adjustment_text}
Please create a NEW schedule that specifically addresses their concerns while maintaining balance and staying within the time constraints."""

    def wellness_recommendation(self, mood: str, energy: int, completed: int, total: int) -> str:
        """Short personalized tip; falls back to a fixed message on any failure"""
        try:
            return self._chat(
                [
                    {
                        "role": "system",
                        "content": ("You are AURA, a caring wellness AI assistant. Provide brief, encouraging "
                                    "wellness recommendations based on user state. Keep responses under 100 "
                                    "words and focus on actionable advice."),
                    },
                    {
                        "role": "user",
                        "content": (f"User status:\n- Mood: {mood}\n- Energy: {energy}/10\n"
                                    f"- Progress: {completed}/{total} tasks completed\n\n"
                                    "Provide a short, personalized wellness recommendation to help them "
                                    "maintain balance and motivation."),
                    },
                ],
                temperature=0.8,
                max_tokens=150,
            ).strip()
        except GeneratorError as e:
            logger.warning("Wellness recommendation error: %s", e)
            return fallback_wellness_message(mood, energy)
