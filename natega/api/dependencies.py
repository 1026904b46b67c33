"""FastAPI dependency injection factories for the dataset store."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from natega.config.settings import Settings, get_settings
from natega.db.session import get_async_session
from natega.repositories.base import DatasetStore
from natega.repositories.students import StudentRepository


async def get_dataset_store(
    session: AsyncSession = Depends(get_async_session),
) -> DatasetStore:
    return StudentRepository(session)


def get_app_settings() -> Settings:
    return get_settings()
