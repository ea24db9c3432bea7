from __future__ import annotations

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from packages.mis_dto.result import SessionResult
from packages.mis_providers.profile import ProfileRepository
from packages.mis_providers.results import ResultRepository
from packages.mis_storage.models import CandidateProfile, InterviewResultRecord


class SqlProfileRepository(ProfileRepository):
    def __init__(self, sessionmaker: async_sessionmaker[AsyncSession]):
        self.sessionmaker = sessionmaker

    async def exists(self, user_id: str) -> bool:
        async with self.sessionmaker() as db:
            found = await db.scalar(
                select(CandidateProfile.id).where(CandidateProfile.user_id == user_id)
            )
            return found is not None


class SqlResultRepository(ResultRepository):
    def __init__(self, sessionmaker: async_sessionmaker[AsyncSession]):
        self.sessionmaker = sessionmaker

    async def exists(self, session_id: str) -> bool:
        async with self.sessionmaker() as db:
            found = await db.scalar(
                select(InterviewResultRecord.session_id).where(InterviewResultRecord.session_id == session_id)
            )
            return found is not None

    async def save(self, result: SessionResult, user_id: Optional[str] = None) -> None:
        feedback = result.overall_feedback
        async with self.sessionmaker() as db:
            await db.merge(InterviewResultRecord(
                session_id=result.session_id,
                user_id=user_id,
                overall_score_percentage=feedback.overall_score_percentage,
                strengths=list(feedback.strengths),
                weaknesses=list(feedback.weaknesses),
                study_plan_summary=feedback.study_plan_summary,
                report=result.model_dump(mode="json"),
            ))
            await db.commit()

    async def get(self, session_id: str) -> Optional[SessionResult]:
        async with self.sessionmaker() as db:
            record = await db.get(InterviewResultRecord, session_id)
            if record is None:
                return None
            return SessionResult.model_validate(record.report)
