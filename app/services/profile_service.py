"""
Profile service layer.
Reads and partial updates of the current user's profile documents.
Profiles are created on first write.
"""

import logging
import uuid
from datetime import datetime
from typing import List
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.exceptions import NotFoundError, ValidationError
from app.models import Profile, User
from app.schemas.profile import (
    Availability,
    Certification,
    CertificationCreate,
    Education,
    EducationUpdate,
    PortfolioLink,
    PortfolioLinkCreate,
    ProfileResponse,
)

logger = logging.getLogger(__name__)

settings = get_settings()


async def _find_profile(db: AsyncSession, user_id: UUID):
    result = await db.execute(select(Profile).where(Profile.user_id == user_id))
    return result.scalar_one_or_none()


async def _get_or_create_profile(db: AsyncSession, user_id: UUID) -> Profile:
    profile = await _find_profile(db, user_id)
    if profile is not None:
        return profile

    user = await db.get(User, user_id)
    if user is None or user.is_deleted:
        raise NotFoundError("User", str(user_id))

    profile = Profile(user_id=user_id, skills=[], portfolio_links=[])
    db.add(profile)
    await db.flush()
    logger.info(f"Profile created for user {user_id}")
    return profile


async def _save(db: AsyncSession, profile: Profile) -> ProfileResponse:
    profile.updated_at = datetime.utcnow()
    await db.commit()
    await db.refresh(profile)
    return ProfileResponse.model_validate(profile)


async def get_profile(db: AsyncSession, user_id: UUID) -> ProfileResponse:
    profile = await _find_profile(db, user_id)
    if profile is None:
        raise NotFoundError("Profile", str(user_id))
    return ProfileResponse.model_validate(profile)


async def update_skills(db: AsyncSession, user_id: UUID, skills: List[str]) -> ProfileResponse:
    profile = await _get_or_create_profile(db, user_id)
    profile.skills = list(skills)
    return await _save(db, profile)


async def get_availability(db: AsyncSession, user_id: UUID) -> Availability:
    profile = await _find_profile(db, user_id)
    if profile is None or not profile.availability:
        return Availability()
    return Availability.model_validate(profile.availability)


async def update_availability(db: AsyncSession, user_id: UUID, data: Availability) -> Availability:
    profile = await _get_or_create_profile(db, user_id)
    profile.availability = data.model_dump(mode="json")
    await _save(db, profile)
    return data


def _education(profile: Profile) -> Education:
    return Education.model_validate(profile.education or {})


async def update_education(db: AsyncSession, user_id: UUID, data: EducationUpdate) -> ProfileResponse:
    """Replace degree/institution/year, keeping existing certifications."""
    profile = await _get_or_create_profile(db, user_id)
    education = _education(profile).model_copy(update=data.model_dump())
    profile.education = education.model_dump(mode="json")
    return await _save(db, profile)


async def add_certification(
    db: AsyncSession,
    user_id: UUID,
    data: CertificationCreate,
) -> Certification:
    profile = await _get_or_create_profile(db, user_id)
    education = _education(profile)
    certification = Certification(id=str(uuid.uuid4()), **data.model_dump())
    education.certifications = [*education.certifications, certification]
    profile.education = education.model_dump(mode="json")
    await _save(db, profile)
    return certification


async def remove_certification(db: AsyncSession, user_id: UUID, certification_id: str) -> None:
    profile = await _find_profile(db, user_id)
    education = _education(profile) if profile else Education()
    remaining = [c for c in education.certifications if c.id != certification_id]
    if profile is None or len(remaining) == len(education.certifications):
        raise NotFoundError("Certification", certification_id)

    education.certifications = remaining
    profile.education = education.model_dump(mode="json")
    await _save(db, profile)


def _links(profile: Profile) -> List[PortfolioLink]:
    return [PortfolioLink.model_validate(link) for link in (profile.portfolio_links or [])]


async def list_portfolio_links(db: AsyncSession, user_id: UUID) -> List[PortfolioLink]:
    profile = await _find_profile(db, user_id)
    return _links(profile) if profile else []


async def add_portfolio_link(
    db: AsyncSession,
    user_id: UUID,
    data: PortfolioLinkCreate,
) -> PortfolioLink:
    profile = await _get_or_create_profile(db, user_id)
    links = _links(profile)
    if len(links) >= settings.max_portfolio_links:
        raise ValidationError(
            f"A profile can hold at most {settings.max_portfolio_links} portfolio links",
            details={"max_links": settings.max_portfolio_links},
        )

    link = PortfolioLink(id=str(uuid.uuid4()), **data.model_dump())
    profile.portfolio_links = [l.model_dump() for l in links] + [link.model_dump()]
    await _save(db, profile)
    return link


async def update_portfolio_link(
    db: AsyncSession,
    user_id: UUID,
    link_id: str,
    data: PortfolioLinkCreate,
) -> PortfolioLink:
    profile = await _find_profile(db, user_id)
    links = _links(profile) if profile else []
    if not any(l.id == link_id for l in links):
        raise NotFoundError("Portfolio link", link_id)

    updated = PortfolioLink(id=link_id, **data.model_dump())
    profile.portfolio_links = [
        (updated if l.id == link_id else l).model_dump() for l in links
    ]
    await _save(db, profile)
    return updated


async def remove_portfolio_link(db: AsyncSession, user_id: UUID, link_id: str) -> None:
    profile = await _find_profile(db, user_id)
    links = _links(profile) if profile else []
    remaining = [l for l in links if l.id != link_id]
    if len(remaining) == len(links):
        raise NotFoundError("Portfolio link", link_id)

    profile.portfolio_links = [l.model_dump() for l in remaining]
    await _save(db, profile)
