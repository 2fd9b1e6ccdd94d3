"""Shared base class for the package's pydantic records."""

from pydantic import BaseModel, ConfigDict


class SchemaBase(BaseModel):
    """Base for normalized records such as IssueData and RepositoryRef.

    Strings from API payloads and CLI input are whitespace-stripped.
    """

    model_config = ConfigDict(str_strip_whitespace=True)
