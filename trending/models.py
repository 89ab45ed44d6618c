from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class RepositoryRecord(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str
    description: str = ""
    url: str
    stargazer_count: int = Field(ge=0)
    # GitHub query asks for at most 10 languages
    languages: list[str] = Field(default_factory=list, max_length=10)
    favorite: bool = False

    @field_validator("description", mode="before")
    @classmethod
    def empty_description(cls, value):
        return value or ""


class PageInfo(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    end_cursor: str | None = None
    has_next_page: bool


class SearchPage(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    repository_count: int = 0
    edges: list[dict]
    page_info: PageInfo
