"""
Profile API endpoints for the current user.
"""

from typing import List

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import CurrentUser, get_current_user
from app.database import get_db
from app.schemas.common import ApiResponse, envelope
from app.schemas.profile import (
    Availability,
    Certification,
    CertificationCreate,
    EducationUpdate,
    PortfolioLink,
    PortfolioLinkCreate,
    ProfileResponse,
    SkillsUpdate,
)
from app.services import profile_service

router = APIRouter(prefix="/profile", tags=["Profile"])


@router.get("", response_model=ApiResponse[ProfileResponse], summary="Get my profile")
async def get_my_profile(
    request: Request,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return envelope(request, await profile_service.get_profile(db, user.id))


@router.put("/skills", response_model=ApiResponse[ProfileResponse], summary="Replace my skills")
async def update_skills(
    request: Request,
    body: SkillsUpdate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    profile = await profile_service.update_skills(db, user.id, body.skills)
    return envelope(request, profile, "Skills updated")


@router.get("/availability", response_model=ApiResponse[Availability], summary="Get my availability")
async def get_availability(
    request: Request,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return envelope(request, await profile_service.get_availability(db, user.id))


@router.put("/availability", response_model=ApiResponse[Availability], summary="Update my availability")
async def update_availability(
    request: Request,
    body: Availability,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    availability = await profile_service.update_availability(db, user.id, body)
    return envelope(request, availability, "Availability updated")


@router.put("/education", response_model=ApiResponse[ProfileResponse], summary="Update my education")
async def update_education(
    request: Request,
    body: EducationUpdate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    profile = await profile_service.update_education(db, user.id, body)
    return envelope(request, profile, "Education updated")


@router.post(
    "/certifications",
    response_model=ApiResponse[Certification],
    status_code=status.HTTP_201_CREATED,
    summary="Add a certification",
)
async def add_certification(
    request: Request,
    body: CertificationCreate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    certification = await profile_service.add_certification(db, user.id, body)
    return envelope(request, certification, "Certification added")


@router.delete(
    "/certifications/{certification_id}",
    response_model=ApiResponse[None],
    summary="Remove a certification",
)
async def remove_certification(
    request: Request,
    certification_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await profile_service.remove_certification(db, user.id, certification_id)
    return envelope(request, None, "Certification removed")


@router.get("/portfolio", response_model=ApiResponse[List[PortfolioLink]], summary="List my portfolio links")
async def list_portfolio_links(
    request: Request,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return envelope(request, await profile_service.list_portfolio_links(db, user.id))


@router.post(
    "/portfolio",
    response_model=ApiResponse[PortfolioLink],
    status_code=status.HTTP_201_CREATED,
    summary="Add a portfolio link",
)
async def add_portfolio_link(
    request: Request,
    body: PortfolioLinkCreate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    link = await profile_service.add_portfolio_link(db, user.id, body)
    return envelope(request, link, "Portfolio link added")


@router.put(
    "/portfolio/{link_id}",
    response_model=ApiResponse[PortfolioLink],
    summary="Replace a portfolio link",
)
async def update_portfolio_link(
    request: Request,
    link_id: str,
    body: PortfolioLinkCreate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    link = await profile_service.update_portfolio_link(db, user.id, link_id, body)
    return envelope(request, link, "Portfolio link updated")


@router.delete(
    "/portfolio/{link_id}",
    response_model=ApiResponse[None],
    summary="Remove a portfolio link",
)
async def remove_portfolio_link(
    request: Request,
    link_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await profile_service.remove_portfolio_link(db, user.id, link_id)
    return envelope(request, None, "Portfolio link removed")
