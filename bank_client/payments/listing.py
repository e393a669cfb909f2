"""Incoming/outgoing view over a user's payment requests."""

from collections.abc import Iterable
from dataclasses import dataclass, field

from bank_client.models.banking import PaymentRequest


def _ordering_key(request: PaymentRequest) -> tuple[float, int]:
    # Newest first, ties by ascending id
    return (-request.created_at.timestamp(), request.request_id)


@dataclass
class PaymentRequestListing:
    """Payment requests split by the side the user is on."""

    incoming: list[PaymentRequest] = field(default_factory=list)
    outgoing: list[PaymentRequest] = field(default_factory=list)

    @classmethod
    def build(cls, user_id: int, requests: Iterable[PaymentRequest]) -> "PaymentRequestListing":
        """Split and order ``requests`` from the point of view of ``user_id``."""
        incoming = []
        outgoing = []
        for request in requests:
            if request.is_incoming_for(user_id):
                incoming.append(request)
            elif request.is_outgoing_for(user_id):
                outgoing.append(request)
        return cls.ordered(incoming, outgoing)

    @classmethod
    def ordered(
        cls,
        incoming: Iterable[PaymentRequest],
        outgoing: Iterable[PaymentRequest],
    ) -> "PaymentRequestListing":
        """Listing from already split sides, newest first with ties by id."""
        return cls(
            incoming=sorted(incoming, key=_ordering_key),
            outgoing=sorted(outgoing, key=_ordering_key),
        )

    @property
    def pending_incoming_count(self) -> int:
        return sum(1 for r in self.incoming if r.is_pending)

    @property
    def pending_outgoing_count(self) -> int:
        return sum(1 for r in self.outgoing if r.is_pending)

    def __len__(self) -> int:
        return len(self.incoming) + len(self.outgoing)
