"""ORM models exposed for metadata discovery."""
from lifepilot.db.models.documents import AnalysisDocument, ScheduleDocument, UserProfileDocument
from lifepilot.db.models.generation_ticket import GenerationTicketRecord

__all__ = [
    "AnalysisDocument",
    "GenerationTicketRecord",
    "ScheduleDocument",
    "UserProfileDocument",
]
