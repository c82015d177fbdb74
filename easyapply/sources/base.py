from abc import ABC, abstractmethod

from easyapply.models import JobReference


class ListingSourceBase(ABC):
    @abstractmethod
    def search(self, page, limit: int = 25) -> list[JobReference]:
        pass
