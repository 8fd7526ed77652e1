"""Pydantic request models for the REST API.

Field names follow the mini app's camelCase JSON. Required strings default
to empty so services can answer with a domain message instead of a schema
dump.
"""

from typing import Optional
from pydantic import BaseModel


class CreateAccountRequest(BaseModel):
    walletAddress: str = ""
    transactionHash: str = ""


class CreateDefaultUserRequest(BaseModel):
    walletAddress: str = ""
    invitationCode: str = ""
    maxUses: Optional[int] = None


class ActivateAccountRequest(BaseModel):
    walletAddress: str = ""
    invitationCode: str = ""


class DailyClaimRequest(BaseModel):
    walletAddress: str = ""
    transactionHash: str = ""


class UpdateBalanceRequest(BaseModel):
    walletAddress: str = ""
    amount: Optional[float] = None
    type: str = ""
    description: str = ""


class UpdateMembershipRequest(BaseModel):
    walletAddress: str = ""
    membershipLevel: str = ""
    transactionHash: str = ""
