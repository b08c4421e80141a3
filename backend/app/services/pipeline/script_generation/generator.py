"""
Script Generator

Turns raw source text into narrated segments plus quiz questions.

Providers are tried in priority order. Each one gets the source text cut to
its own context budget and must answer with JSON; the first top-level object
is pulled out of whatever prose surrounds it. A provider that errors, times
out or returns unusable JSON is logged and skipped. When every provider has
failed (or none is configured) the offline generator takes over, so
`generate` always returns a script.
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence

from app.config.pipeline import MAX_SEGMENTS, QUIZ_OPTION_COUNT, QUIZ_TRIGGER_PERCENTAGES
from app.config.providers import CONTENT_CONTEXT_BUDGETS
from app.core import LogTimer, get_logger
from app.models.course import GeneratedScript, QuizQuestion, ScriptSegment
from app.services.infrastructure.parsing import JsonParseError, parse_json_object
from app.services.llm import LLMConfig, LLMProvider, ProviderType

from ..errors import StageErrorKind, StageResult
from .offline import OfflineScriptGenerator, template_quizzes
from .prompts import COURSE_SCRIPT, SYSTEM_INSTRUCTION

logger = get_logger(__name__, component="script_generator")

DEFAULT_CONTEXT_BUDGET = 8000
MIN_SEGMENTS = 5
QUIZ_COUNT = 3


def _as_text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def parse_segments(raw_segments: Any) -> List[ScriptSegment]:
    """Keep segments with a non-empty script, capped at MAX_SEGMENTS"""
    if not isinstance(raw_segments, list):
        return []

    segments: List[ScriptSegment] = []
    for raw in raw_segments:
        if not isinstance(raw, dict):
            continue
        script = _as_text(raw.get("script"))
        if not script:
            continue
        key_points = raw.get("keyPoints", raw.get("key_points")) or []
        segments.append(
            ScriptSegment(
                title=_as_text(raw.get("title")),
                script=script,
                key_points=[_as_text(point) for point in key_points if _as_text(point)]
                if isinstance(key_points, list) else [],
            )
        )
        if len(segments) == MAX_SEGMENTS:
            break
    return segments


def parse_quiz_questions(raw_quizzes: Any) -> List[QuizQuestion]:
    """Keep well-formed questions: text, exactly 4 options, valid answer index"""
    if not isinstance(raw_quizzes, list):
        return []

    quizzes: List[QuizQuestion] = []
    for raw in raw_quizzes:
        if not isinstance(raw, dict):
            continue
        question = _as_text(raw.get("question"))
        options = raw.get("options")
        if not question or not isinstance(options, list) or len(options) != QUIZ_OPTION_COUNT:
            continue
        try:
            correct = int(raw.get("correctAnswer", raw.get("correct_answer")))
        except (TypeError, ValueError):
            continue
        if not 0 <= correct < QUIZ_OPTION_COUNT:
            continue

        default_trigger = QUIZ_TRIGGER_PERCENTAGES[len(quizzes) % len(QUIZ_TRIGGER_PERCENTAGES)]
        try:
            trigger = int(raw.get("triggerPercentage", raw.get("trigger_percentage", default_trigger)))
        except (TypeError, ValueError):
            trigger = default_trigger

        quizzes.append(
            QuizQuestion(
                question=question,
                options=[str(option) for option in options],
                correct_answer=correct,
                explanation=_as_text(raw.get("explanation")),
                trigger_percentage=min(max(trigger, 0), 100),
            )
        )
    return quizzes


def parse_generated_content(data: Dict[str, Any], title: str, source: str) -> GeneratedScript:
    """Validate a provider's JSON payload.

    Raises:
        ValueError: if the payload has no usable segments
    """
    segments = parse_segments(data.get("segments"))
    if not segments:
        raise ValueError("response contained no usable segments")

    quizzes = parse_quiz_questions(data.get("quizQuestions", data.get("quiz_questions")))
    if not quizzes:
        logger.info("Provider returned no usable quiz questions; using templates", extra={"provider": source})
        quizzes = template_quizzes(title)

    return GeneratedScript(
        segments=segments,
        quiz_questions=quizzes,
        summary=_as_text(data.get("summary")),
        source=source,
    )


class ScriptGenerator:
    """Provider ladder with a deterministic offline floor."""

    def __init__(
        self,
        providers: Sequence[LLMProvider] = (),
        context_budgets: Optional[Mapping[ProviderType, int]] = None,
        offline: Optional[OfflineScriptGenerator] = None,
    ):
        self.providers = list(providers)
        self.context_budgets = dict(context_budgets or CONTENT_CONTEXT_BUDGETS)
        self.offline = offline or OfflineScriptGenerator()

    def build_prompt(self, text: str, title: str, budget: int) -> str:
        return COURSE_SCRIPT.format(
            title=title,
            source_text=text[:budget],
            min_segments=min(MIN_SEGMENTS, MAX_SEGMENTS),
            max_segments=MAX_SEGMENTS,
            quiz_count=QUIZ_COUNT,
        )

    async def try_provider(self, provider: LLMProvider, text: str, title: str) -> StageResult[GeneratedScript]:
        budget = self.context_budgets.get(provider.provider_type, DEFAULT_CONTEXT_BUDGET)
        config = LLMConfig(
            model=provider.default_model,
            temperature=0.7,
            system_instruction=SYSTEM_INSTRUCTION,
            json_mode=True,
        )
        try:
            response = await provider.generate(self.build_prompt(text, title, budget), config)
            data = parse_json_object(response.text)
            script = parse_generated_content(data, title, provider.name)
        except JsonParseError as e:
            return StageResult.fail(StageErrorKind.SCRIPT_GENERATION, f"unparseable response: {e}", provider.name)
        except Exception as e:
            return StageResult.fail(StageErrorKind.SCRIPT_GENERATION, str(e) or type(e).__name__, provider.name)
        return StageResult.ok(script)

    async def generate(self, text: str, title: str) -> GeneratedScript:
        """Never raises; falls back to the offline generator."""
        if text and text.strip():
            for provider in self.providers:
                with LogTimer(logger, f"script generation via {provider.name}"):
                    result = await self.try_provider(provider, text, title)
                if result.is_ok:
                    logger.info(
                        "Script generated",
                        extra={
                            "provider": provider.name,
                            "segments": len(result.value.segments),
                            "quiz_questions": len(result.value.quiz_questions),
                        },
                    )
                    return result.value
                logger.warning(
                    "Content provider failed; trying next",
                    extra={"provider": provider.name, "error": str(result.error)},
                )

        script = self.offline.generate(text or "", title)
        logger.info(
            "Using offline script generator",
            extra={"segments": len(script.segments), "quiz_questions": len(script.quiz_questions)},
        )
        return script
