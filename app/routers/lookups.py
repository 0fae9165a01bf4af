# =============================================================================
# app/routers/lookups.py - Academic Lookup Endpoints
# =============================================================================
# Pickers for onboarding, profile editing and the directory filters.
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from app.auth import AuthUser, get_current_user
from core.models.lookup import (
    DepartmentLookupRow,
    LookupOption,
    SchoolLookupRow,
    UniversityLookupRow,
)
from core.services.lookup_service import LookupService

router = APIRouter()


@router.get("/cities", response_model=list[LookupOption])
async def list_cities(user: AuthUser = Depends(get_current_user)):
    """All cities, by name."""
    return LookupService.list_cities()


@router.get("/universities", response_model=list[UniversityLookupRow], response_model_exclude_none=True)
async def list_universities(
    user: AuthUser = Depends(get_current_user),
    city_id: Annotated[str | None, Query(description="Only universities present in this city")] = None,
    with_domains: Annotated[bool, Query(description="Include email domains")] = False,
):
    """Universities, optionally narrowed to one city."""
    if not city_id:
        return [UniversityLookupRow(id=row.id, name=row.name) for row in LookupService.list_universities()]
    return LookupService.universities_for_city(city_id, with_domains=with_domains)


@router.get("/schools", response_model=list[SchoolLookupRow])
async def list_schools(
    university_id: Annotated[str, Query(min_length=1)],
    user: AuthUser = Depends(get_current_user),
    city_id: Annotated[str | None, Query()] = None,
):
    """Schools of a university, narrowed to a city when possible."""
    return LookupService.schools_for_university(university_id, city_id=city_id)


@router.get("/departments", response_model=list[DepartmentLookupRow])
async def list_departments(
    school_id: Annotated[str, Query(min_length=1)],
    user: AuthUser = Depends(get_current_user),
    city_id: Annotated[str | None, Query()] = None,
):
    """Departments of a school, narrowed to a city when possible."""
    return LookupService.departments_for_school(school_id, city_id=city_id)
