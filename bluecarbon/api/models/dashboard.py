"""Role dashboard response models."""

from __future__ import annotations

from typing import Literal

from bluecarbon.api.models.common import CamelModel
from bluecarbon.api.models.registry import (
    CreditResponse,
    SubmissionResponse,
    UserResponse,
)


class FishermanDashboardResponse(CamelModel):
    role: Literal["FISHERMAN"] = "FISHERMAN"
    user: UserResponse
    submissions: list[SubmissionResponse]
    approved_count: int
    credits_generated: float


class NgoDashboardResponse(CamelModel):
    role: Literal["NGO"] = "NGO"
    user: UserResponse
    queue: list[SubmissionResponse]
    history: list[SubmissionResponse]


class RegistryTotalsModel(CamelModel):
    submissions: int
    approved: int
    in_review: int
    rejected: int
    credits_minted: float
    credits_sold: float
    users: int


class AdminDashboardResponse(CamelModel):
    role: Literal["ADMIN"] = "ADMIN"
    user: UserResponse
    submissions: list[SubmissionResponse]
    credits: list[CreditResponse]
    users: list[UserResponse]
    totals: RegistryTotalsModel


class CorporateDashboardResponse(CamelModel):
    role: Literal["CORPORATE"] = "CORPORATE"
    user: UserResponse
    marketplace: list[CreditResponse]
    owned: list[CreditResponse]


DashboardResponse = (
    FishermanDashboardResponse
    | NgoDashboardResponse
    | AdminDashboardResponse
    | CorporateDashboardResponse
)
