# teashop/repositories/verification_repo.py
from datetime import datetime

from sqlalchemy import delete, update
from sqlmodel import Session, select

from teashop.models.user import VerificationCode


class VerificationCodeRepository:
    """
    Data access for one-time login codes.

    Methods do not commit unless stated; the auth service groups
    "supersede old codes + insert new code" and "consume code + create
    user" into single transactions.
    """

    def latest_since(
        self,
        session: Session,
        email: str,
        since: datetime,
    ) -> VerificationCode | None:
        stmt = (
            select(VerificationCode)
            .where(
                VerificationCode.email == email,
                VerificationCode.created_at > since,
            )
            .order_by(VerificationCode.created_at.desc(), VerificationCode.id.desc())
        )
        return session.exec(stmt).first()

    def invalidate_unused(self, session: Session, email: str) -> None:
        stmt = (
            update(VerificationCode)
            .where(VerificationCode.email == email, VerificationCode.used == False)  # noqa: E712
            .values(used=True)
            .execution_options(synchronize_session=False)
        )
        session.execute(stmt)

    def add(self, session: Session, code: VerificationCode) -> VerificationCode:
        session.add(code)
        session.flush()
        return code

    def find_valid(
        self,
        session: Session,
        email: str,
        code: str,
        now: datetime,
    ) -> VerificationCode | None:
        """Newest unused, unexpired code matching email + code."""
        stmt = (
            select(VerificationCode)
            .where(
                VerificationCode.email == email,
                VerificationCode.code == code,
                VerificationCode.used == False,  # noqa: E712
                VerificationCode.expires_at > now,
            )
            .order_by(VerificationCode.created_at.desc(), VerificationCode.id.desc())
        )
        return session.exec(stmt).first()

    def consume(self, session: Session, code_id: int) -> bool:
        """
        Mark a code as used, only if it is still unused.

        Returns False when another request consumed it first.
        """
        stmt = (
            update(VerificationCode)
            .where(VerificationCode.id == code_id, VerificationCode.used == False)  # noqa: E712
            .values(used=True)
            .execution_options(synchronize_session=False)
        )
        return session.execute(stmt).rowcount == 1

    def delete(self, session: Session, code: VerificationCode) -> None:
        """Remove a single code. Commits."""
        session.delete(code)
        session.commit()

    def delete_expired(self, session: Session, now: datetime) -> int:
        """Purge expired codes. Commits."""
        stmt = delete(VerificationCode).where(VerificationCode.expires_at < now)
        removed = session.execute(stmt).rowcount
        session.commit()
        return removed
