"""
Grading Pipeline

For each submitted answer: find its question, transcribe it, take the
service's similarity as the answer's point, and record it. The quiz score is
the sum of recorded points divided by the number of questions in the quiz,
so unanswered questions count as zero.

Answers are processed concurrently; the aggregate is a fold over the
materialised records and does not depend on their order.
"""

import asyncio
import logging
from typing import Iterable, List, Optional, Tuple

from generation.schemas import QuestionItem
from grading.schemas import AnswerRecord, ExerciseQuiz, GradeResult, SubmittedAnswer, TranscriptionResult
from grading.similarity import character_match_score
from grading.transcription import TranscriptionDispatcher
from services.errors import TranscriptionServiceError, UnsupportedMedia

log = logging.getLogger("grading.pipeline")


def _clamp(point: Optional[float]) -> float:
    if point is None:
        return 0.0
    return min(100.0, max(0.0, float(point)))


def aggregate_score(points: Iterable[float], total_questions: int) -> int:
    """Truncated mean over all questions of the quiz; 0 for an empty quiz."""
    if total_questions <= 0:
        return 0
    return min(100, int(sum(points) / total_questions))


class GradingPipeline:

    def __init__(self, dispatcher: TranscriptionDispatcher):
        self.dispatcher = dispatcher

    async def _grade_one(self, question: QuestionItem, answer: SubmittedAnswer) -> Optional[AnswerRecord]:
        try:
            result = await self.dispatcher.transcribe(answer.file_type, answer.answer, question.key)
        except UnsupportedMedia as e:
            log.warning(f"[GRADE] skip answer for {answer.question_id}: {e}")
            return None
        except TranscriptionServiceError as e:
            log.warning(f"[GRADE] transcription failed for {answer.question_id}, scoring 0: {e}")
            result = TranscriptionResult()

        return AnswerRecord(
            question_id=answer.question_id,
            raw_answer_payload=answer.answer,
            media_type=answer.file_type,
            transcribed_text=result.text,
            similarity_point=_clamp(result.similarity_hint),
            local_similarity=character_match_score(question.key, result.text),
            duration=answer.duration,
            time_opened=answer.time_opened,
            time_answered=answer.time_answered,
        )

    async def grade(
        self,
        quiz: ExerciseQuiz,
        answers: List[SubmittedAnswer],
    ) -> Tuple[GradeResult, List[AnswerRecord]]:
        """
        Grade one submission against a quiz.

        Args:
            quiz:    The quiz being answered (not modified)
            answers: Learner submissions; unknown question ids are dropped

        Returns:
            (aggregate result, recorded answers)
        """
        jobs = []
        for answer in answers:
            question = quiz.find_question(answer.question_id)
            if question is None:
                log.info(f"[GRADE] unknown question id {answer.question_id}, dropped")
                continue
            jobs.append(self._grade_one(question, answer))

        records = [r for r in await asyncio.gather(*jobs) if r is not None]
        score = aggregate_score((r.similarity_point for r in records), len(quiz.questions))
        log.info(f"[GRADE] quiz={quiz.id} answered={len(records)}/{len(quiz.questions)} score={score}")
        return (
            GradeResult(
                quiz_id=quiz.id,
                score=score,
                answered=len(records),
                total_questions=len(quiz.questions),
            ),
            records,
        )
