"""Base adapter interface for object storage providers."""
from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class StoredObject:
    """Result of an upload: public URL plus the handle used to delete it."""
    url: str
    asset_id: str


class ObjectStorageAdapter(ABC):
    """Base adapter for object storage providers."""

    @abstractmethod
    def test_connection(self) -> bool:
        """Test connection to the provider."""
        pass

    @abstractmethod
    def upload(
        self,
        data: bytes,
        folder: str,
        filename: str,
        content_type: str
    ) -> StoredObject:
        """
        Store a payload under a logical folder.

        Returns the public URL and the asset id to pass to ``delete`` later.
        """
        pass

    @abstractmethod
    def delete(self, asset_id: str) -> None:
        """Delete a stored object by asset id. Raises on provider failure."""
        pass
