"""
BaseService -- abstract base for kernel services.

Responsibility:
    Common constructor and session contract for every write-side service.
    Services receive a SQLAlchemy ``Session`` and persist through
    ``session.flush()``, never ``session.commit()``.

Architecture position:
    Kernel > Services -- imperative shell.

Invariants enforced:
    - Transaction boundaries: services flush inside the caller's
      transaction and never commit or roll back.  The caller
      (``session_scope()``, the batch generator, or a test fixture) owns
      commit and rollback.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from payroll_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseService(ABC, Generic[ModelType]):
    """
    Abstract base class for kernel services.

    Non-goals:
        - Does NOT manage the transaction lifecycle.
        - Does NOT provide read-only queries; those live in
          ``payroll_kernel/selectors/``.
    """

    def __init__(self, session: Session):
        self.session = session
