from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field


# Fields accept any JSON value; the service decides what is valid.

class PerformanceAnalyzeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    target_url: Optional[Any] = Field(None, alias="targetUrl")
    strategy: Optional[Any] = "mobile"


class WebsiteAnalyzeRequest(BaseModel):
    url: Optional[Any] = None
    strategy: Optional[Any] = "mobile"
