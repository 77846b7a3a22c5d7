"""Base protocol for pipeline handlers."""

from typing import Protocol, TypeVar

from vision_tags.core.types import Result
from vision_tags.exceptions import VisionTagsError

# Contravariant input (handlers can accept supertypes), invariant output
T_In = TypeVar("T_In", contravariant=True)
T_Out = TypeVar("T_Out")
T_Error = TypeVar("T_Error", bound=VisionTagsError)


class BaseAsyncHandler(Protocol[T_In, T_Out, T_Error]):
    """Protocol for asynchronous pipeline handlers.

    Each handler performs a single transformation on its input, making it easy
    to compose with the service layer that produces model output.
    """

    async def handle(self, command: T_In) -> Result[T_Out, T_Error]:
        """Process one input.

        Args:
            command: The input from the previous stage.

        Returns:
            A Result object containing either the output or an error.
        """
        ...
