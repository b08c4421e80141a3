"""
Use case base class.

A use case owns one business operation end to end and knows nothing about
HTTP. Routes build the request object, call `execute`, and translate the
outcome (or the exception) into a response.

Example:
    >>> class CourseGenerationUseCase(UseCase[GenerationRequest, Course]):
    ...     async def execute(self, request: GenerationRequest) -> Course:
    ...         return await self.pipeline.run(request)

    >>> course = await CourseGenerationUseCase(...).execute(request)
"""

from abc import ABC, abstractmethod
from typing import TypeVar, Generic

RequestT = TypeVar("RequestT")
ResponseT = TypeVar("ResponseT")


class UseCase(ABC, Generic[RequestT, ResponseT]):
    """
    One operation with a typed input and output.

    Type Parameters:
        RequestT: what the caller hands in (e.g. GenerationRequest)
        ResponseT: what the operation produces (e.g. Course)
    """

    @abstractmethod
    async def execute(self, request: RequestT) -> ResponseT:
        """
        Run the operation.

        Raises:
            Domain errors only (e.g. PersistenceError). Mapping them to HTTP
            status codes is the route's job.
        """
