from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class AskRequest(BaseModel):
    """Question submitted from the assistant form."""

    model_config = ConfigDict(populate_by_name=True)

    question: Optional[str] = None
    email: Optional[str] = None
    manager_email: Optional[str] = Field(default=None, alias="managerEmail")
    client_email: Optional[str] = Field(default=None, alias="clientEmail")

    def recipients(self) -> list:
        return [self.email, self.manager_email, self.client_email]


class AskResponse(BaseModel):
    """Generated report returned to the form."""

    question: str
    answer: str
    timestamp: str
