"""
Pydantic models exchanged with the Drive session layer.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class SessionCredentials(BaseModel):
    """Delegated credentials supplied when a user's session is initialized."""

    model_config = ConfigDict(populate_by_name=True)

    access_token: Optional[str] = Field(
        None, alias="accessToken", description="Bearer token for Drive calls."
    )
    refresh_token: Optional[str] = Field(
        None,
        alias="refreshToken",
        description="Long-lived token used to mint new access tokens.",
    )
    expiry_date: Optional[datetime] = Field(
        None,
        alias="expiryDate",
        description="Absolute expiry of the access token when known.",
    )


class RemoteFile(BaseModel):
    """Handle to a file held in Google Drive."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., description="Drive file identifier.")
    name: Optional[str] = Field(None, description="Display name in Drive.")
    mime_type: Optional[str] = Field(None, alias="mimeType")
    view_url: Optional[str] = Field(
        None, alias="webViewLink", description="Browser link to view the file."
    )
    edit_url: Optional[str] = Field(
        None, alias="editUrl", description="Browser link to edit a converted copy."
    )


__all__ = ["RemoteFile", "SessionCredentials"]
