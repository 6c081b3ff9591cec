"""
Transaction Form Validation

DESIGN DECISION: Validation happens in two distinct stages:

STAGE 1 - FIELD VALIDATION:
- Required field presence (amount, account, location, date)
- Number formats (amount, commission)
- Allowed values (credit/debit)

STAGE 2 - PAYLOAD CONSTRUCTION:
- Only runs when stage 1 found no errors
- Builds the TransactionCreate model, which enforces the same invariants
  the storage boundary enforces

IMPORTANT: Validation NEVER silently fixes issues.
It reports them so the form can show the exact reason next to the field.
"""

from decimal import Decimal, InvalidOperation
from typing import Optional

from pydantic import ValidationError

from bizmanager.models.records import (
    TransactionCreate,
    TransactionForm,
    TransactionType,
    ValidationIssue,
    ValidationResult,
)
from bizmanager.validation.commission import parse_commission, validate_commission


class TransactionValidator:
    """
    Validates the manual transaction entry form.

    The transaction number is not checked here: a blank number is
    generated by the flow after validation passes.
    """

    def _validate_fields(self, form: TransactionForm) -> list[ValidationIssue]:
        issues = []

        if not form.amount:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="missing",
                message="Amount is required",
            ))
        else:
            amount = self._parse_amount(form.amount)
            if amount is None:
                issues.append(ValidationIssue(
                    field="amount",
                    issue_type="invalid_number",
                    message="Amount must be a valid number",
                ))
            elif amount < 0:
                issues.append(ValidationIssue(
                    field="amount",
                    issue_type="negative",
                    message="Amount cannot be negative",
                ))

        commission_issue = validate_commission(form.commission)
        if commission_issue is not None:
            issues.append(commission_issue)

        if form.type.lower() not in {t.value for t in TransactionType}:
            issues.append(ValidationIssue(
                field="type",
                issue_type="invalid_value",
                message="Type must be either credit or debit",
            ))

        if form.date is None:
            issues.append(ValidationIssue(
                field="date",
                issue_type="missing",
                message="Date is required",
            ))

        if form.account_id is None:
            issues.append(ValidationIssue(
                field="account_id",
                issue_type="missing",
                message="Please select an account",
            ))

        if form.location_id is None:
            issues.append(ValidationIssue(
                field="location_id",
                issue_type="missing",
                message="Please select a location",
            ))

        return issues

    @staticmethod
    def _parse_amount(text: str) -> Optional[Decimal]:
        try:
            amount = Decimal(text.replace("₹", "").replace(",", "").strip())
        except InvalidOperation:
            return None
        if not amount.is_finite():
            return None
        return amount

    def validate(self, form: TransactionForm) -> ValidationResult:
        """Run field validation and return every issue found."""
        return ValidationResult(issues=self._validate_fields(form))

    def build_payload(
        self,
        form: TransactionForm,
        transaction_no: str,
    ) -> tuple[Optional[TransactionCreate], ValidationResult]:
        """
        Validate the form and build the create/update payload.

        Returns (payload, result). The payload is None when there are errors.
        """
        result = self.validate(form)
        if result.has_errors:
            return None, result

        try:
            payload = TransactionCreate(
                transaction_no=transaction_no,
                date=form.date,
                amount=self._parse_amount(form.amount),
                commission=parse_commission(form.commission),
                type=form.type.lower(),
                account_id=form.account_id,
                location_id=form.location_id,
                description=form.description or None,
            )
        except ValidationError as e:
            for error in e.errors():
                field = str(error["loc"][0]) if error["loc"] else "form"
                result.issues.append(ValidationIssue(
                    field=field,
                    issue_type=error["type"],
                    message=error["msg"],
                ))
            return None, result

        return payload, result


def validation_summary(result: ValidationResult) -> str:
    """Short user-facing summary of validation errors."""
    if result.is_valid:
        return "✅ All checks passed."

    lines = ["❌ Please fix the following:"]
    for issue in result.issues:
        if issue.severity == "error":
            lines.append(f"   • {issue.message}")
    return "\n".join(lines)
