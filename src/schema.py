# Solana Actions wire models
from typing import Literal

from pydantic import BaseModel

# GET /api/tip
class ActionParameter(BaseModel):
    name: str
    label: str
    required: bool = True


class LinkedAction(BaseModel):
    type: Literal["post"] = "post"
    label: str
    href: str
    parameters: list[ActionParameter] | None = None


class ActionLinks(BaseModel):
    actions: list[LinkedAction]


class ActionGetResponse(BaseModel):
    type: Literal["action"] = "action"
    icon: str
    title: str
    description: str
    label: str
    links: ActionLinks


# POST /api/tip
class ActionPostRequest(BaseModel):
    account: str


class ActionPostResponse(BaseModel):
    transaction: str
    message: str


class ActionError(BaseModel):
    message: str


# GET /actions.json
class ActionRule(BaseModel):
    pathPattern: str
    apiPath: str


class ActionsJson(BaseModel):
    rules: list[ActionRule]
