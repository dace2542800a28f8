"""
Prompt and default settings used by MCQ (multiple choice question) generation.

Values live in ``system_settings`` under the ``mcq_generation_*`` keys and
fall back to the built-in defaults below.
"""

import json
import logging
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from lms_admin.models.user import User
from .settings import SettingsService


logger = logging.getLogger(__name__)


SYSTEM_PROMPT_KEY = "mcq_generation_system_prompt"
FORMAT_INSTRUCTIONS_KEY = "mcq_generation_format_instructions"
DEFAULTS_KEY = "mcq_generation_defaults"

DEFAULT_SYSTEM_PROMPT = """You are an expert educational assessment designer. Generate high-quality multiple choice questions (MCQs).

GUIDELINES:
1. Test comprehension and application, not just recall
2. All distractors should be plausible but clearly wrong
3. Avoid "all/none of the above" options
4. Keep questions clear and unambiguous
5. Ensure only one option is definitively correct
6. Match the difficulty level requested"""

DEFAULT_FORMAT_INSTRUCTIONS = """OUTPUT FORMAT (JSON):
{
  "questions": [{
    "questionText": "Question text?",
    "options": ["Option A", "Option B", "Option C", "Option D"],
    "correctAnswer": "Option A",
    "explanation": "Brief explanation of why this is correct",
    "difficulty": "medium"
  }]
}

IMPORTANT RULES:
- correctAnswer must EXACTLY match one of the options strings
- Each question must have the specified number of options
- Return ONLY valid JSON, no markdown formatting"""

DEFAULT_MCQ_DEFAULTS: Dict[str, Any] = {
    "optionCount": 4,
    "maxQuestions": 10,
    "defaultDifficulty": "medium",
    "includeExplanations": True,
    "temperature": 0.4,
}


class McqSettingsService:
    def __init__(self, db: Session):
        self.settings = SettingsService(db)

    def get_generation_settings(self) -> Dict[str, Any]:
        defaults = dict(DEFAULT_MCQ_DEFAULTS)
        stored_defaults = self.settings.get_setting_value(DEFAULTS_KEY)
        if stored_defaults:
            try:
                defaults.update(json.loads(stored_defaults))
            except ValueError:
                logger.warning("Ignoring malformed %s value", DEFAULTS_KEY)

        return {
            "systemPrompt": self.settings.get_setting_value(SYSTEM_PROMPT_KEY) or DEFAULT_SYSTEM_PROMPT,
            "formatInstructions": (
                self.settings.get_setting_value(FORMAT_INSTRUCTIONS_KEY) or DEFAULT_FORMAT_INSTRUCTIONS
            ),
            "defaults": defaults,
        }

    def update_generation_settings(
        self,
        system_prompt: Optional[str] = None,
        format_instructions: Optional[str] = None,
        defaults: Optional[Dict[str, Any]] = None,
        actor: Optional[User] = None,
    ) -> Dict[str, Any]:
        if system_prompt is not None:
            self.settings.update_system_setting(
                SYSTEM_PROMPT_KEY,
                {
                    "value": system_prompt,
                    "type": "text",
                    "description": "System prompt for MCQ generation",
                },
                actor=actor,
            )
        if format_instructions is not None:
            self.settings.update_system_setting(
                FORMAT_INSTRUCTIONS_KEY,
                {
                    "value": format_instructions,
                    "type": "text",
                    "description": "Output format instructions for MCQ generation",
                },
                actor=actor,
            )
        if defaults is not None:
            self.settings.update_system_setting(
                DEFAULTS_KEY,
                {
                    "value": json.dumps(defaults),
                    "type": "json",
                    "description": "Default settings for MCQ generation",
                },
                actor=actor,
            )
        return self.get_generation_settings()
