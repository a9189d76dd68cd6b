import logging

from matchmaking.models.application import NORMALIZED_FIELDS, ProfileApplication
from matchmaking.services.application_service import ApplicationService
from matchmaking.services.record_store import Predicate, RecordStore

logger = logging.getLogger(__name__)

# Search criterion -> stored attribute
CRITERIA_FIELDS = {
    "gender": "gender",
    "city": "city",
    "age": "age",
    "religion": "religion",
    "ethnicity": "ethnicity",
    "height": "height",
    "has_children": "has_children",
    "want_children": "want_children",
    "profession": "profession",
    "education": "university_degree",
}


def build_search_predicate(criteria: dict) -> Predicate:
    """Equality conjunction over the supplied criteria, always restricted to approved records.

    Falsy criteria are left out entirely, so there is no way to ask for an
    explicitly empty (or false) attribute.
    """
    predicate = Predicate()
    for criterion, field in CRITERIA_FIELDS.items():
        value = criteria.get(criterion)
        if not value:
            continue
        if field in NORMALIZED_FIELDS and isinstance(value, str):
            value = value.strip().lower()
        predicate = predicate.where(field, value)
    return predicate.where("approved", True)


class SearchService:
    def __init__(self, store: RecordStore, applications: ApplicationService):
        self.store = store
        self.applications = applications

    def search(self, criteria: dict) -> list[dict]:
        predicate = build_search_predicate(criteria)
        items = self.store.scan("applications", predicate)
        logger.info("Search with %s criteria matched %s applications", len(predicate.conditions) - 1, len(items))
        return self.applications.with_photos([ProfileApplication.from_item(item) for item in items])
