"""
Script generation prompts.

Used by: script_generation/generator.py
"""

from dataclasses import dataclass


@dataclass
class PromptTemplate:
    """
    A prompt template with {placeholders}.

    Placeholders are substituted by plain replacement so literal JSON braces
    in the template need no escaping.
    """
    template: str
    description: str = ""

    def format(self, **kwargs) -> str:
        result = self.template
        for key, value in kwargs.items():
            result = result.replace("{" + key + "}", str(value))
        return result

    def __str__(self) -> str:
        return f"PromptTemplate({self.description})"


COURSE_SCRIPT = PromptTemplate(
    template="""You are creating engaging training content for a corporate training video platform.

Course Title: {title}

Source Material:
{source_text}

Your task:
1. Break this content into {min_segments}-{max_segments} script segments (150-300 words each). Each segment becomes one video episode.
2. Rewrite each segment as natural, conversational narration - NOT verbatim from the source
3. Generate {quiz_count} quiz questions that test comprehension

Respond in this exact JSON format:
{
  "summary": "A brief 1-2 sentence summary of the training",
  "segments": [
    {
      "title": "Segment title (4-6 words)",
      "script": "The full narration script for this segment.",
      "keyPoints": ["Key point 1", "Key point 2", "Key point 3"]
    }
  ],
  "quizQuestions": [
    {
      "question": "Clear, specific question text",
      "options": ["Option A", "Option B", "Option C", "Option D"],
      "correctAnswer": 0,
      "explanation": "Brief explanation of why this is correct",
      "triggerPercentage": 30
    }
  ]
}

Requirements:
- Scripts should sound natural when read aloud
- Every question has exactly 4 options; correctAnswer is the 0-based index of the right one
- Make quizzes scenario-based when possible
- Spread quiz triggerPercentage values across the episode (30, 60, 90)
- Output only the JSON object""",
    description="Segment source text into narrated episodes plus quiz questions",
)

SYSTEM_INSTRUCTION = (
    "You are an instructional designer. You always answer with a single valid JSON object."
)
