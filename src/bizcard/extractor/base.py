"""Abstract base class for business card extractors."""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from bizcard.models.business_card import BusinessCardData


class Extractor(ABC):
    """Abstract base class for image-to-fields extractors."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the name of this extractor."""
        ...

    @abstractmethod
    async def extract(
        self,
        image_b64: str,
        fields: Sequence[str],
        mime_type: str | None = None,
    ) -> BusinessCardData:
        """
        Extract the requested fields from a base64-encoded card image.

        Args:
            image_b64: Base64 image payload without a data-URI prefix.
            fields: Field names to request, in order.
            mime_type: Declared image mime type.

        Returns:
            Mapping of field name to extracted value.

        Raises:
            BackendError: If the backend response is unusable.
        """
        ...
