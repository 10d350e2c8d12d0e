"""
Pydantic schemas for the invocation entry point

This module defines the request and response models exchanged with the
external caller of LedgerService (for example an HTTP layer). Responses carry
either a result or a structured error, never both.
"""

from typing import Any
from pydantic import BaseModel, Field, ConfigDict


class InvokeRequest(BaseModel):
    """Request schema for submitting a chaincode transaction"""
    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "channel": "mychannel",
                "chaincode": "fabcar",
                "fcn": "CreateUser",
                "args": ["{\"id\": \"alice\"}"],
                "username": "alice",
                "org": "Org1",
                "permissions": "READ-WRITE"
            }
        }
    )

    channel: str = Field(..., min_length=1, description="Channel name")
    chaincode: str = Field(..., min_length=1, description="Chaincode name")
    fcn: str = Field(..., min_length=1, description="Chaincode function to submit")
    args: list[str] = Field(default_factory=list, description="Positional string arguments")
    username: str = Field(..., min_length=1, description="Acting identity label")
    org: str = Field(..., min_length=1, description="Organization of the acting identity")
    permission_tier: str | None = Field(None, alias="permissions",
                                        description="Permission tier used if the user must be registered")


class RegisterUserRequest(BaseModel):
    """Request schema for registering a user and recording it on the ledger"""
    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "username": "alice",
                "orgName": "Org1",
                "name": "Alice",
                "password": "s3cret",
                "userType": "lawyer",
                "permissions": "READ-WRITE"
            }
        }
    )

    username: str = Field(..., min_length=1, description="Enrollment ID and wallet label")
    org: str = Field(..., min_length=1, alias="orgName", description="Organization identifier")
    name: str = Field("", description="Display name stored in the ledger user record")
    password: str = Field("", repr=False, description="Password stored in the ledger user record")
    user_type: str = Field("", alias="userType", description="Domain role of the user")
    permission_tier: str | None = Field(None, alias="permissions", description="Permission tier")


class InvokeResponse(BaseModel):
    """Response schema for transaction invocation"""
    model_config = ConfigDict(populate_by_name=True)

    result: dict[str, Any] | None = Field(None, description="{message, result} on success")
    error: str | None = Field(None, description="Error message on failure")
    error_data: dict[str, Any] | None = Field(None, alias="errorData", description="Structured error details")

    @property
    def success(self) -> bool:
        return self.error is None


class RegisterResponse(BaseModel):
    """Response schema for user registration"""
    model_config = ConfigDict(populate_by_name=True)

    success: bool = Field(..., description="Whether the operation was successful")
    message: str = Field(..., description="Response message")
    secret: str | None = Field(None, description="Enrollment secret issued by this call, if any")
    error_data: dict[str, Any] | None = Field(None, alias="errorData", description="Structured error details")
