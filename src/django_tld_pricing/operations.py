"""Mapping table from operation type to interval fields."""

from typing import NamedTuple, Optional

from django_tld_pricing.models import OperationType


class OperationFields(NamedTuple):
    price_field: str
    cost_field: str
    first_year_price_field: Optional[str]
    first_year_cost_field: Optional[str]
    discount_flag: Optional[str]


OPERATION_FIELDS = {
    OperationType.REGISTRATION: OperationFields(
        price_field='registration_price',
        cost_field='registration_cost',
        first_year_price_field='first_year_registration_price',
        first_year_cost_field='first_year_registration_cost',
        discount_flag='apply_to_registration',
    ),
    OperationType.RENEWAL: OperationFields(
        price_field='renewal_price',
        cost_field='renewal_cost',
        first_year_price_field=None,
        first_year_cost_field=None,
        discount_flag='apply_to_renewal',
    ),
    OperationType.TRANSFER: OperationFields(
        price_field='transfer_price',
        cost_field='transfer_cost',
        first_year_price_field=None,
        first_year_cost_field=None,
        discount_flag='apply_to_transfer',
    ),
    OperationType.PRIVACY: OperationFields(
        price_field='privacy_price',
        cost_field='privacy_cost',
        first_year_price_field=None,
        first_year_cost_field=None,
        discount_flag=None,
    ),
}


def fields_for(operation) -> OperationFields:
    """Return the field mapping for an operation type."""
    return OPERATION_FIELDS[OperationType(operation)]
