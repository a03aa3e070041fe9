from pydantic import BaseModel


class ScrapeRequest(BaseModel):
    url: str | None = None


class ErrorMessage(BaseModel):
    message: str
