"""Ticket Lifecycle - support ticket responses and status changes"""
from datetime import datetime
from typing import Callable, Optional, Union

from . import transition_rules as rules
from ..domain.enums import AuthorType, LifecycleAction, TicketStatus
from ..domain.errors import ValidationError
from ..domain.models import ActorContext, SupportTicket
from ..repositories.record_store import RecordStore
from ..repositories.ticket_repo import SupportTicketRepository
from ..utils.idgen import generate_response_id
from ..utils.logger import get_logger
from ..utils.time import utc_now

logger = get_logger(__name__)

DEFAULT_AUTHOR = "Admin"


class TicketLifecycle:
    """Support ticket mutations performed from the admin console"""

    def __init__(
        self,
        store: Optional[RecordStore] = None,
        clock: Callable[[], datetime] = utc_now
    ):
        self.ticket_repo = SupportTicketRepository(store)
        self._clock = clock

    def add_response(
        self,
        ticket_id: str,
        message: str,
        author: str = DEFAULT_AUTHOR,
        author_type: Union[str, AuthorType] = AuthorType.ADMIN,
        actor: Optional[ActorContext] = None
    ) -> SupportTicket:
        """
        Append a response to the thread.

        Any response moves the ticket to In Progress, including tickets that
        were already Resolved or Closed.
        """
        text = (message or "").strip()
        if not text:
            raise ValidationError("Response message cannot be empty", details={"ticket_id": ticket_id})
        author_type = self._parse_author_type(author_type)
        self.ticket_repo.get_ticket_or_raise(ticket_id)

        now = self._clock()
        response = {
            "id": generate_response_id(),
            "message": text,
            "timestamp": now,
            "author": author or DEFAULT_AUTHOR,
            "authorType": author_type.value,
        }
        updated = self.ticket_repo.append_response(
            ticket_id,
            response,
            {
                "status": TicketStatus.IN_PROGRESS.value,
                "updatedAt": now,
                "lastResponseAt": now,
            }
        )
        self._log(LifecycleAction.ADD_RESPONSE, updated, actor)
        return updated

    def update_status(
        self,
        ticket_id: str,
        new_status: Union[str, TicketStatus],
        actor: Optional[ActorContext] = None
    ) -> SupportTicket:
        """Direct override into any ticket status. No-op when unchanged."""
        status = rules.parse_status(
            new_status.value if isinstance(new_status, TicketStatus) else new_status,
            TicketStatus,
            rules.TICKET_OVERRIDE_STATUSES
        )
        ticket = self.ticket_repo.get_ticket_or_raise(ticket_id)
        if rules.status_is(ticket.status, status):
            return ticket

        updated = self.ticket_repo.update_ticket(
            ticket_id, {"status": status.value, "updatedAt": self._clock()}
        )
        self._log(LifecycleAction.UPDATE_STATUS, updated, actor)
        return updated

    def resolve(self, ticket_id: str, actor: Optional[ActorContext] = None) -> SupportTicket:
        """Mark the ticket resolved"""
        self.ticket_repo.get_ticket_or_raise(ticket_id)
        now = self._clock()
        updated = self.ticket_repo.update_ticket(
            ticket_id,
            {
                "status": TicketStatus.RESOLVED.value,
                "resolvedAt": now,
                "updatedAt": now,
            }
        )
        self._log(LifecycleAction.RESOLVE, updated, actor)
        return updated

    @staticmethod
    def _parse_author_type(author_type: Union[str, AuthorType]) -> AuthorType:
        if isinstance(author_type, AuthorType):
            return author_type
        try:
            return AuthorType(str(author_type).strip().lower())
        except ValueError:
            raise ValidationError(
                "Author type must be 'admin' or 'student'",
                details={"author_type": author_type}
            )

    @staticmethod
    def _log(action: LifecycleAction, ticket: SupportTicket, actor: Optional[ActorContext]) -> None:
        logger.info(
            f"Ticket {action.value.lower()}: {ticket.id}",
            extra={
                "action": action.value,
                "ticket_id": ticket.id,
                "status": ticket.status,
                "actor_email": actor.email if actor else None,
            }
        )
