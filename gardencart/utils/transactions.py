from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.orm import Session


@contextmanager
def smart_transaction(session: Session) -> Iterator[Session]:
    """
    Run a block of work on `session` as one unit.

    If a transaction is already open, a SAVEPOINT (begin_nested) is used so
    the caller's outer transaction stays in charge of the final commit.
    Otherwise a fresh transaction is started and committed on exit.

    Usage:
        with smart_transaction(db):
            ... DB work ...
    """
    if session.in_transaction():
        cm = session.begin_nested()
    else:
        cm = session.begin()
    with cm:
        yield session
