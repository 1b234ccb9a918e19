from typing import Optional, Dict, Any
from pydantic import BaseModel, ConfigDict, Field


class ConfiguredRepo(BaseModel):
    """A repository known to be analyzed in SonarCloud."""
    model_config = ConfigDict(populate_by_name=True)

    github_url: str = Field(..., alias="githubUrl")
    sonar_project_key: str = Field(..., alias="sonarProjectKey")
    display_name: str = Field(..., alias="displayName")
    branch: str = "main"
    configured: bool = True
    last_sync: Optional[str] = Field(None, alias="lastSync")

    def to_summary(self) -> Dict[str, Any]:
        """Fields exposed by the repository listing."""
        return {
            "githubUrl": self.github_url,
            "displayName": self.display_name,
            "sonarProjectKey": self.sonar_project_key,
            "configured": self.configured,
        }


# Request fields stay untyped; the service reports bad values as 400s.

class ValidateRepoRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    github_url: Optional[Any] = Field(None, alias="githubUrl")


class AnalyzeRepoRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    github_url: Optional[Any] = Field(None, alias="githubUrl")
    include_issues: Optional[Any] = Field(True, alias="includeIssues")
