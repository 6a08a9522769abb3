from pydantic import BaseModel


class ContentResponse(BaseModel):
    html: str
