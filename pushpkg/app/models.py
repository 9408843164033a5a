from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictStr


class WebsiteModel(BaseModel):
  websiteName: StrictStr = Field(min_length=1)
  websitePushID: StrictStr = Field(min_length=1)
  allowedDomains: StrictStr = Field(min_length=1)
  urlFormatString: StrictStr = Field(min_length=1)
  authenticationToken: StrictStr = Field(min_length=1)
  webServiceURL: StrictStr = Field(min_length=1)

  model_config = ConfigDict(extra="allow")


class ManifestEntryModel(BaseModel):
  hashType: str = "sha512"
  hashValue: str = Field(pattern=r"^[0-9a-f]{128}$")


class ValidationReport(BaseModel):
  problems: List[str] = Field(default_factory=list)
  website: Optional[WebsiteModel] = None

  @property
  def ok(self) -> bool:
    return not self.problems
