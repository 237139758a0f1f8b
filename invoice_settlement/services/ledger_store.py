"""
Ledger store: the durable append primitive behind the LedgerEngine.

The store does no accounting checks. It numbers the rows of a
batch, writes them in the caller's transaction, and turns any
database failure into a PostingError. Nothing outside the
LedgerEngine should call it.
"""

import logging
import uuid

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from invoice_settlement.exceptions import PostingError
from invoice_settlement.models.ledger_entry import LedgerEntry

logger = logging.getLogger(__name__)


class LedgerStore:

    def __init__(self, db: Session):
        self.db = db

    def append_batch(
        self, batch_id: uuid.UUID, entries: list[LedgerEntry]
    ) -> uuid.UUID:
        """
        Append entries as one batch, numbered 1..N in list order.

        The rows are flushed, not committed. If the flush fails
        the session is left for the caller to roll back, so a
        partial batch is never committed.
        """
        for row_num, entry in enumerate(entries, start=1):
            entry.batch_id = batch_id
            entry.row_num = row_num

        try:
            self.db.add_all(entries)
            self.db.flush()
        except SQLAlchemyError as e:
            logger.error(
                "Ledger batch %s could not be stored", batch_id, exc_info=True
            )
            raise PostingError(
                f"Ledger batch {batch_id} could not be stored",
                details={"batch_id": str(batch_id)},
            ) from e

        return batch_id
