"""
Fixtures shared by the reports test modules.
"""

from __future__ import annotations

import pytest

from accounts.models import RoleType
from reports.models import Report, ReportStatus


@pytest.fixture()
def citizen(create_user):
    return create_user(username="citizen")


@pytest.fixture()
def make_officer(create_user, office):
    def _factory(office_name: str = "public works project manager", **kwargs):
        return create_user(
            role_type=RoleType.MUNICIPALITY,
            municipality_role=office(office_name),
            **kwargs,
        )

    return _factory


@pytest.fixture()
def make_maintainer(create_user):
    def _factory(category: str = "WATER_SUPPLY_DRINKING_WATER", **kwargs):
        kwargs.setdefault("company_name", "Acme Works")
        return create_user(
            role_type=RoleType.EXTERNAL_MAINTAINER,
            maintainer_category=category,
            **kwargs,
        )

    return _factory


@pytest.fixture()
def make_report(citizen):
    """
    Insert a report directly in the given lifecycle state, bypassing the
    services.
    """

    def _factory(
        status: str = ReportStatus.PENDING_APPROVAL,
        category: str = "WATER_SUPPLY_DRINKING_WATER",
        **kwargs,
    ) -> Report:
        kwargs.setdefault("submitted_by", citizen)
        return Report.objects.create(
            title="Leaking pipe",
            description="Water running down the street.",
            category=category,
            latitude=45.0,
            longitude=7.6,
            status=status,
            **kwargs,
        )

    return _factory
