from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from pydantic import BaseModel

from contentgen.core.config import settings
from contentgen.generation.llm_client import LLMClient

InType = TypeVar("InType", bound=BaseModel)
OutType = TypeVar("OutType", bound=BaseModel)


class BaseGenerator(ABC, Generic[InType, OutType]):
    """One content type of the Generation Service: request payload in, artifact out."""

    def __init__(self, model_name: str | None = None, llm: LLMClient | None = None):
        self.llm = llm or LLMClient(model_name=model_name or settings.MODEL_DEFAULT)

    @abstractmethod
    async def run(self, input_data: InType) -> OutType:
        """Make a single provider call and return the artifact."""
        pass
