"""
Agreement Signing Service.

Backs the NDA and contract screens of the onboarding checklist: renders
the document text, checks the typed-name signature, and completes the
matching task with the signature stored in its ``metadata``.

A task that is already complete stays signed; a second signature is
refused rather than overwriting the first.
"""

from __future__ import annotations

from datetime import date
from typing import Callable, Optional

from pydantic import ValidationError

from uwezo.logger import StructuredLogger
from uwezo.models.agreements import (
    NDA_AGREEMENT,
    NDA_TEMPLATE,
    AgreementSignature,
    ContractSignature,
    SignedAgreement,
    contract_template,
    render_agreement,
)
from uwezo.models.enums import TaskType
from uwezo.models.service_models import ServiceResult
from uwezo.services.base_service import INVALID_INPUT, NOT_FOUND, BaseService
from uwezo.services.task_tracker import OnboardingTaskTracker
from uwezo.utils.general import utc_now_iso


class AgreementSigningService(BaseService):
    """Signs the onboarding NDA and engagement contract.

    Parameters
    ----------
    tracker:
        Onboarding tracker that owns the ``nda`` and ``contract`` tasks.
    logger:
        Structured logger instance.
    today:
        Returns the date printed on rendered documents.
    """

    def __init__(
        self,
        tracker: OnboardingTaskTracker,
        logger: StructuredLogger,
        today: Callable[[], date] = date.today,
    ) -> None:
        super().__init__(logger)
        self._tracker = tracker
        self._today = today

    # ------------------------------------------------------------------
    # Document text
    # ------------------------------------------------------------------

    def nda_text(self) -> str:
        return render_agreement(NDA_TEMPLATE, self._today())

    def contract_text(self, engagement_type: str) -> str:
        """Contract for *engagement_type*, or a prompt when none is chosen."""
        try:
            template = contract_template(engagement_type)
        except KeyError:
            return "Please select a contract type to view the agreement."
        return render_agreement(template, self._today())

    # ------------------------------------------------------------------
    # Signing
    # ------------------------------------------------------------------

    def signature_for(self, user_id: str, task_type: TaskType) -> Optional[SignedAgreement]:
        """The recorded signature for the *task_type* task, once it is complete."""
        task = self._tracker.find_by_type(self._tracker.load(user_id), task_type)
        if task is None or not task.completed or task.user_task is None:
            return None
        meta = task.user_task.metadata
        return SignedAgreement(
            task_id=task.id,
            signature=str(meta.get("signature", "")),
            signed_at=str(meta.get("signed_at") or task.user_task.completed_at or ""),
            type=str(meta.get("type", task_type)),
        )

    def sign_nda(
        self, user_id: str, full_name: str, agree: bool,
    ) -> ServiceResult[SignedAgreement]:
        try:
            signature = AgreementSignature(full_name=full_name, agree=agree)
        except ValidationError as exc:
            return self._failure(_first_message(exc), INVALID_INPUT)
        return self._sign(user_id, TaskType.NDA, signature, NDA_AGREEMENT)

    def sign_contract(
        self, user_id: str, engagement_type: str, full_name: str, agree: bool,
    ) -> ServiceResult[SignedAgreement]:
        try:
            signature = ContractSignature(
                engagement_type=engagement_type or None,
                full_name=full_name,
                agree=agree,
            )
        except ValidationError as exc:
            return self._failure(_first_message(exc), INVALID_INPUT)
        return self._sign(user_id, TaskType.CONTRACT, signature, signature.engagement_type)

    def _sign(
        self,
        user_id: str,
        task_type: TaskType,
        signature: AgreementSignature,
        agreement_type: str,
    ) -> ServiceResult[SignedAgreement]:
        task = self._tracker.find_by_type(self._tracker.load(user_id), task_type)
        if task is None:
            return self._failure("This agreement is not part of your onboarding.", NOT_FOUND)
        if task.completed:
            return self._failure("This agreement has already been signed.", INVALID_INPUT)

        signed = SignedAgreement(
            task_id=task.id,
            signature=signature.full_name,
            signed_at=utc_now_iso(),
            type=agreement_type,
        )
        self._tracker.set_completion(user_id, task.id, True, metadata=signed.as_metadata())
        self._logger.info(
            "%s signed by %s (%s)", task_type, user_id, agreement_type,
            extra={"event": "AGREEMENT_SIGNED", "user_id": user_id},
        )
        return ServiceResult(success=True, data=signed)


def _first_message(exc: ValidationError) -> str:
    return exc.errors()[0]["msg"]
