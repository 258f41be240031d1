from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class HintRequest(BaseModel):
    question_id: str = Field(..., validation_alias=AliasChoices("questionId", "question_id"))


class HintOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    hint: str
    hint_count: int = Field(..., alias="hintCount")
    max_hints: int = Field(..., alias="maxHints")
