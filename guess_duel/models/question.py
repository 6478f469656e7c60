from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class RecordKind(str, Enum):
    ASK = "ask"
    GUESS = "guess"
    HINT = "hint"


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True)

    index: int = Field(ge=1)
    text: str

    def __str__(self) -> str:
        return self.text


class AskRecord(_Record):
    kind: Literal[RecordKind.ASK] = RecordKind.ASK
    result: bool


class GuessRecord(_Record):
    kind: Literal[RecordKind.GUESS] = RecordKind.GUESS
    result: bool


class HintRecord(_Record):
    kind: Literal[RecordKind.HINT] = RecordKind.HINT


QuestionRecord = Annotated[Union[AskRecord, GuessRecord, HintRecord], Field(discriminator="kind")]
