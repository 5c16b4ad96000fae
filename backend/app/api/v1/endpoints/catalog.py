"""Read-only catalogs of professions and subjects"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from app.core.database import get_db
from app.schemas.profile import ProfessionResponse
from app.schemas.group import SubjectResponse
from app.services.profile_service import profile_service
from app.services.group_service import group_service


router = APIRouter()


@router.get("/professions", response_model=List[ProfessionResponse])
async def list_professions(db: AsyncSession = Depends(get_db)):
    return await profile_service.list_professions(db)


@router.get("/subjects", response_model=List[SubjectResponse])
async def list_subjects(db: AsyncSession = Depends(get_db)):
    return await group_service.list_subjects(db)
