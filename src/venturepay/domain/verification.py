"""Email verification codes: issue, deliver and check.

Codes are stored as SHA-256 digests with an explicit expiry, so every server
instance sees the same state and a leaked table does not reveal live codes.
"""

from __future__ import annotations

import hashlib
import hmac
import secrets
from datetime import timedelta
from logging import getLogger
from typing import TYPE_CHECKING, Final

from venturepay.domain.model import VerificationCode, VerificationResult, utc_now

if TYPE_CHECKING:
    from collections.abc import Callable

    from venturepay.domain.model import Clock
    from venturepay.domain.ports.gateways import VerificationSender
    from venturepay.domain.ports.unit_of_work import VerificationUnitOfWork

log = getLogger(__name__)

CODE_DIGITS: Final[int] = 6
DEFAULT_CODE_TTL: Final[timedelta] = timedelta(minutes=10)
DEFAULT_MAX_ATTEMPTS: Final[int] = 5


def generate_code() -> str:
    return str(secrets.randbelow(9 * 10 ** (CODE_DIGITS - 1)) + 10 ** (CODE_DIGITS - 1))


def hash_code(code: str) -> str:
    return hashlib.sha256(code.strip().encode("utf-8")).hexdigest()


def issue_code(
    *,
    subject: str,
    email: str,
    sender: VerificationSender,
    unit_of_work_factory: Callable[[], VerificationUnitOfWork],
    ttl: timedelta = DEFAULT_CODE_TTL,
    clock: Clock = utc_now,
    code_factory: Callable[[], str] = generate_code,
) -> VerificationCode:
    """Store a fresh code for ``subject`` and mail it to ``email``.

    A new code replaces any earlier one. The code is stored only after the mail
    went out, so a delivery failure leaves the previous code in place.
    """

    code = code_factory()
    now = clock()
    record = VerificationCode(
        subject=subject,
        email=email,
        code_hash=hash_code(code),
        created_at=now,
        expires_at=now + ttl,
    )
    sender.send_code(email, code)
    with unit_of_work_factory() as uow:
        uow.repositories.verification_codes.add(record)
        uow.commit()
    log.info("Issued verification code for %s, valid until %s", subject, record.expires_at)
    return record


def verify_code(
    *,
    subject: str,
    code: str,
    unit_of_work_factory: Callable[[], VerificationUnitOfWork],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    clock: Clock = utc_now,
) -> VerificationResult:
    with unit_of_work_factory() as uow:
        repository = uow.repositories.verification_codes
        record = repository.get(subject)
        if record is None:
            return VerificationResult.NOT_FOUND

        if record.is_expired(clock()):
            repository.remove(subject)
            uow.commit()
            log.info("Verification code for %s expired", subject)
            return VerificationResult.EXPIRED

        if record.attempts >= max_attempts:
            return VerificationResult.TOO_MANY_ATTEMPTS

        if hmac.compare_digest(record.code_hash, hash_code(code)):
            repository.remove(subject)
            uow.commit()
            log.info("Verified code for %s", subject)
            return VerificationResult.VERIFIED

        record.attempts += 1
        uow.commit()
        log.info("Wrong verification code for %s (attempt %s)", subject, record.attempts)
        return VerificationResult.INVALID
