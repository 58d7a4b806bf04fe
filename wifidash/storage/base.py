from abc import ABC, abstractmethod


class StorageError(Exception):
    pass


class BlobStorage(ABC):
    @abstractmethod
    def extract_id(self, url: str) -> str:
        """Storage identifier for a stored URL; raises StorageError if the URL is not ours."""
        raise NotImplementedError

    @abstractmethod
    def delete(self, blob_id: str) -> None:
        """Delete one blob; raises StorageError on failure."""
        raise NotImplementedError

    def close(self) -> None:
        """Release network resources; no-op by default."""
        return None
