from typing import Union

from pydantic import BaseModel, ConfigDict

from toastcore.models.page import SetDataForSlug


class SetEvent(BaseModel):
    """A normalized page update."""

    model_config = ConfigDict(frozen=True)

    page: SetDataForSlug


class EndEvent(BaseModel):
    """Terminates a page stream; nothing may follow it."""

    model_config = ConfigDict(frozen=True)


Event = Union[SetEvent, EndEvent]
