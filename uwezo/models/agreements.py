"""
Agreement Models.

Texts for the two documents signed during onboarding (the NDA and the
engagement contract) and the typed-name signature collected for them.
Templates carry a ``{DATE}`` placeholder filled in when the document is
shown.
"""

from __future__ import annotations

from datetime import date
from typing import Final, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_core import PydanticCustomError

__all__ = [
    "ENGAGEMENT_TYPES",
    "NDA_AGREEMENT",
    "NDA_TEMPLATE",
    "AgreementSignature",
    "ContractSignature",
    "SignedAgreement",
    "contract_template",
    "render_agreement",
]

MIN_NAME_LENGTH: Final[int] = 3
NDA_AGREEMENT: Final[str] = "nda"

ENGAGEMENT_TYPES: Final[tuple[str, ...]] = (
    "Intern",
    "Partnership",
    "Contractual",
    "Sub-contractual",
    "Permanent",
    "Instructor",
    "Student",
    "Partner",
    "Course Developer",
    "Sponsor",
    "Customer",
    "Reseller",
)


NDA_TEMPLATE: Final[str] = """\
NON-DISCLOSURE AGREEMENT (NDA)

This Non-Disclosure Agreement ("Agreement") is made on {DATE} between Uwezo Inc. \
("Disclosing Party") and the undersigned individual ("Receiving Party").

1. CONFIDENTIAL INFORMATION
Any non-public information the Disclosing Party shares with the Receiving Party, \
in any form and whether or not marked confidential: technical data, trade secrets, \
product plans, customer lists, software, designs, finances and other business \
information, together with anything the Receiving Party derives from it.

2. OBLIGATIONS
The Receiving Party will keep Confidential Information in strict confidence, will \
not disclose it to third parties without written consent, will use it only to \
evaluate a business relationship with the Disclosing Party, and will share it only \
with advisors who need to know and are bound to the same terms.

3. EXCEPTIONS
These obligations do not cover information that is or becomes public through no \
breach of this Agreement, was already known to the Receiving Party, is received \
lawfully from a third party, or must be disclosed by law or court order (after \
prompt written notice to the Disclosing Party).

4. RETURN OF MATERIALS
On request, or when this Agreement ends, the Receiving Party will return or \
destroy all materials containing Confidential Information.

5. TERM
This Agreement remains in effect for five (5) years from the date above unless \
both parties end it earlier in writing.

6. REMEDIES
A breach may cause harm that money cannot repair; the Disclosing Party may seek \
injunctive relief and specific performance.

7. ENTIRE AGREEMENT
This Agreement is the whole agreement between the parties on its subject and \
replaces any earlier understanding.

By signing below, the Receiving Party confirms having read, understood and \
accepted every term of this Agreement.

Date: {DATE}
"""


# (title, party label, clauses) per engagement type.
_CONTRACTS: Final[dict[str, tuple[str, str, tuple[tuple[str, str], ...]]]] = {
    "Intern": ("INTERNSHIP AGREEMENT", "Intern", (
        ("Position and Duration", "An internship of 3-6 months in the assigned department."),
        ("Responsibilities", "Complete assigned projects, attend team meetings and training, "
                             "and keep to professional conduct."),
        ("Compensation", "Paid or unpaid, as agreed during the interview process."),
        ("Confidentiality", "All company information stays confidential."),
    )),
    "Permanent": ("PERMANENT EMPLOYMENT AGREEMENT", "Employee", (
        ("Position and Duties", "Duties as assigned by management, in line with company "
                                "policies and procedures."),
        ("Compensation and Benefits", "The agreed salary, the standard benefits package and "
                                      "annual performance reviews."),
        ("Term and Termination", "A permanent position subject to company policy and "
                                 "applicable law."),
        ("Confidentiality", "Company information stays strictly confidential."),
    )),
    "Contractual": ("CONTRACTUAL AGREEMENT", "Contractor", (
        ("Scope of Work", "The agreed services for the agreed duration."),
        ("Payment Terms", "Payment follows the agreed schedule and milestones."),
        ("Deliverables", "Work products belong to the Company on completion."),
        ("Status", "An independent contractor relationship, not employment."),
    )),
    "Partnership": ("PARTNERSHIP AGREEMENT", "Partner", (
        ("Partnership Terms", "Both parties collaborate on the agreed projects or initiatives."),
        ("Responsibilities", "Each party meets its agreed obligations."),
        ("Revenue Sharing", "Revenue is shared on the agreed terms."),
        ("Duration", "Effective until either party ends it."),
    )),
    "Sub-contractual": ("SUB-CONTRACTOR AGREEMENT", "Sub-contractor", (
        ("Sub-contracting Terms", "Services are provided under the main project contract."),
        ("Scope of Work", "Tasks and deliverables as set out in the project specification."),
        ("Payment", "As agreed in the sub-contracting arrangement."),
    )),
    "Instructor": ("INSTRUCTOR AGREEMENT", "Instructor", (
        ("Teaching", "Deliver high-quality instruction in your area of expertise."),
        ("Course Content", "Develop and maintain current course materials."),
        ("Compensation", "Per course or hourly, as agreed."),
    )),
    "Student": ("STUDENT AGREEMENT", "Student", (
        ("Learning Commitment", "Take an active part in courses and programs."),
        ("Code of Conduct", "Behave professionally and respect others."),
        ("Certification", "Successful completion may lead to certification."),
    )),
    "Partner": ("BUSINESS PARTNER AGREEMENT", "Business Partner", (
        ("Partnership Scope", "A collaborative business relationship for mutual benefit."),
        ("Terms of Engagement", "As discussed and agreed."),
        ("Intellectual Property", "Each party respects the other's intellectual property."),
    )),
    "Course Developer": ("COURSE DEVELOPER AGREEMENT", "Developer", (
        ("Content Development", "Create educational content to the agreed specification."),
        ("Quality Standards", "Content meets company quality and educational standards."),
        ("Intellectual Property", "Developed content belongs to Uwezo Inc."),
    )),
    "Sponsor": ("SPONSORSHIP AGREEMENT", "Sponsor", (
        ("Sponsorship Terms", "Support for the agreed events, programs or initiatives."),
        ("Benefits", "Recognition and promotion as outlined."),
        ("Duration", "The agreed sponsorship term."),
    )),
    "Customer": ("CUSTOMER AGREEMENT", "Customer", (
        ("Services", "Access to company services and products."),
        ("Terms of Service", "Use is subject to company terms and conditions."),
        ("Payment", "Payment terms for services as applicable."),
    )),
    "Reseller": ("RESELLER AGREEMENT", "Reseller", (
        ("Reseller Rights", "Authorisation to resell the named products or services."),
        ("Commission Structure", "Payment terms and commission rates as agreed."),
        ("Territory", "The agreed geographic or market territory, if any."),
    )),
}


def contract_template(engagement_type: str) -> str:
    """Contract text for *engagement_type*, still holding ``{DATE}``.

    Raises ``KeyError`` for a type outside :data:`ENGAGEMENT_TYPES`.
    """
    title, party, clauses = _CONTRACTS[engagement_type]
    lines = [
        title,
        "",
        f'This agreement is entered on {{DATE}} between Uwezo Inc. ("Company") '
        f'and you ("{party}").',
    ]
    for number, (heading, body) in enumerate(clauses, start=1):
        lines += ["", f"{number}. {heading}", body]
    return "\n".join(lines) + "\n"


def render_agreement(template: str, on: date) -> str:
    return template.replace("{DATE}", on.strftime("%d %B %Y"))


# ---------------------------------------------------------------------------
# Signatures
# ---------------------------------------------------------------------------

class AgreementSignature(BaseModel):
    """Typed-name signature plus the agree-to-terms tick."""

    full_name: str
    agree: bool

    @field_validator("full_name", mode="before")
    @classmethod
    def _strip(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value

    @field_validator("full_name")
    @classmethod
    def _long_enough(cls, value: str) -> str:
        if len(value) < MIN_NAME_LENGTH:
            raise PydanticCustomError(
                "name_too_short", "Full name must be at least 3 characters.",
            )
        return value

    @field_validator("agree")
    @classmethod
    def _must_agree(cls, value: bool) -> bool:
        if not value:
            raise PydanticCustomError(
                "terms_not_accepted", "You must agree to the terms and conditions.",
            )
        return value


class ContractSignature(AgreementSignature):
    engagement_type: Optional[str] = Field(default=None, validate_default=True)

    @field_validator("engagement_type")
    @classmethod
    def _known_type(cls, value: Optional[str]) -> str:
        if value not in ENGAGEMENT_TYPES:
            raise PydanticCustomError(
                "engagement_type", "Please select a type of engagement.",
            )
        return value


class SignedAgreement(BaseModel):
    """What gets stored in the task's ``metadata`` once signed."""

    task_id: str
    signature: str
    signed_at: str
    type: str

    def as_metadata(self) -> dict[str, object]:
        return {"signature": self.signature, "signed_at": self.signed_at, "type": self.type}
