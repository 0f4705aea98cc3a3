"""
Gemini AI service for quiz question generation
"""
import google.generativeai as genai
from pydantic import ValidationError
from app.config import settings
from app.schemas.quiz_generation import GenerationRequest, GeneratedQuestion
from app.utils.exceptions import GenerationBackendError, GenerationStage
import json
import logging
from typing import List, Dict, Any

logger = logging.getLogger(__name__)


class GeminiQuestionService:
    """Generates quiz questions through the Gemini API"""

    def __init__(self, model=None, temperature: float = None):
        if model is None:
            if settings.GEMINI_API_KEY:
                genai.configure(api_key=settings.GEMINI_API_KEY)
            else:
                logger.warning("GEMINI_API_KEY is not set; question generation will fail")
            model = genai.GenerativeModel(settings.GEMINI_MODEL)
        self.model = model
        self.temperature = settings.GEMINI_TEMPERATURE if temperature is None else temperature

    async def generate_questions(self, request: GenerationRequest) -> List[Dict[str, Any]]:
        """
        Generate questions for a normalized request

        Args:
            request: Request with category and time limit filled in

        Returns:
            Ordered list of question dictionaries

        Raises:
            GenerationBackendError: The call failed or the response was unusable
        """
        prompt = self._create_quiz_prompt(request)

        try:
            response = await self.model.generate_content_async(
                prompt,
                generation_config=genai.types.GenerationConfig(
                    temperature=self.temperature,
                    response_mime_type="application/json"
                )
            )
            response_text = response.text
        except Exception as e:
            logger.error(f"Gemini request failed for topic '{request.topic}': {str(e)}")
            raise GenerationBackendError(
                "Question generation request failed",
                topic=request.topic,
                stage=GenerationStage.AWAITING_EXTERNAL_GENERATION,
                cause=e
            ) from e

        questions = self._parse_quiz_response(response_text, request)
        logger.info(f"Gemini returned {len(questions)} questions for '{request.topic}'")
        return questions

    def _create_quiz_prompt(self, request: GenerationRequest) -> str:
        """Create structured prompt for quiz generation"""

        difficulty = request.difficulty.value.lower()
        return f"""
You are an expert educator creating a {difficulty} level quiz about "{request.topic}".

Category: {request.category}

Generate EXACTLY {request.question_count} multiple choice questions:
- Each question has 4 options
- Exactly one option is correct
- Use realistic distractors based on common misconceptions
- Include a one or two sentence explanation of the correct answer
- Harder questions may be worth more points (1 to 3)

Return ONLY valid JSON in this exact format (no markdown, no preamble):

[
  {{
    "question": "Question text here?",
    "options": ["Option A", "Option B", "Option C", "Option D"],
    "correct_answer": "Option A",
    "explanation": "Why Option A is correct",
    "points": 1,
    "difficulty": "{request.difficulty.value}"
  }}
]
"""

    def _parse_quiz_response(self, response_text: str, request: GenerationRequest) -> List[Dict[str, Any]]:
        """Parse Gemini's quiz response into validated question dictionaries"""
        cleaned = (response_text or "").strip()

        # Remove markdown code blocks
        if cleaned.startswith("```json"):
            cleaned = cleaned[7:].removesuffix("```").strip()
        elif cleaned.startswith("```"):
            cleaned = cleaned[3:].removesuffix("```").strip()

        try:
            payload = json.loads(cleaned)
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse quiz JSON: {str(e)}")
            logger.error(f"Response text: {cleaned[:500]}")
            raise GenerationBackendError(
                "Generation backend returned invalid JSON",
                topic=request.topic,
                stage=GenerationStage.AWAITING_EXTERNAL_GENERATION,
                cause=e
            ) from e

        if isinstance(payload, dict) and "questions" in payload:
            payload = payload["questions"]

        if not isinstance(payload, list) or not payload:
            raise GenerationBackendError(
                "Generation backend returned no questions",
                topic=request.topic,
                stage=GenerationStage.AWAITING_EXTERNAL_GENERATION
            )

        try:
            questions = [GeneratedQuestion.model_validate(item).model_dump(mode="json") for item in payload]
        except ValidationError as e:
            logger.error(f"Generated question failed validation: {str(e)}")
            raise GenerationBackendError(
                "Generation backend returned malformed questions",
                topic=request.topic,
                stage=GenerationStage.AWAITING_EXTERNAL_GENERATION,
                cause=e
            ) from e

        if len(questions) != request.question_count:
            logger.warning(f"Expected {request.question_count} questions, got {len(questions)}")

        return questions
