"""API request models with their validation constraints.

Fields are Optional so that missing values reach the validation engine and
are reported with the other violations instead of failing body parsing.
"""

from datetime import date
from decimal import Decimal
from typing import Annotated, Optional

from pydantic import BaseModel, Field

from formguard.validators import (
    Digits,
    DecimalMin,
    Email,
    NotBlank,
    NotNull,
    Past,
    Pattern,
    Size,
    Unique,
    Valid,
)

# Groups evaluated when a customer is created
CREATE_GROUPS = ("default", "create")


class PhoneForm(BaseModel):
    """A customer phone number."""

    kind: Annotated[Optional[str], NotNull(), Pattern(regexp="home|work|mobile")] = None
    number: Annotated[Optional[str], NotBlank(), Pattern(regexp=r"\+?[0-9 ()-]{8,20}")] = None


class CustomerForm(BaseModel):
    """Customer registration data."""

    name: Annotated[Optional[str], NotNull(), Size(min=3, max=60)] = None
    email: Annotated[
        Optional[str],
        NotBlank(),
        Email(),
        Unique(lookup="customers", groups=("create",), message="{customer.email.taken}"),
    ] = None
    birth_date: Annotated[Optional[date], NotNull(), Past()] = None
    credit_limit: Annotated[Optional[Decimal], DecimalMin(value="0"), Digits(integer=7, fraction=2)] = None
    nickname: Annotated[Optional[str], Size(max=20)] = None
    accepted_terms: bool = False
    phones: Annotated[list[PhoneForm], Valid(), Size(max=3)] = Field(default_factory=list)


class CustomerSearch(BaseModel):
    """Search by name prefix."""

    name: Annotated[Optional[str], NotBlank(), Size(min=2)] = None


class EmailChange(BaseModel):
    """New e-mail address for an existing customer."""

    email: Annotated[Optional[str], NotBlank(), Email(), Unique(lookup="customers")] = None
