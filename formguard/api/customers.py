"""Customers API — demo resource exercising every validation outcome.

    POST /customers                 -> structured 400 on errors
    POST /customers/preview         -> re-renders the form page on errors
    POST /customers/search          -> forwards to the listing on errors
    PUT  /customers/{id}/email      -> redirects to the customer on errors
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import HTMLResponse, JSONResponse

from formguard.api.dependencies import get_error_collector
from formguard.api.outcomes import ValidationRoute
from formguard.api.pages import customer_form, customer_preview
from formguard.errors import ErrorCollector, I18nMessage, Messages
from formguard.models.requests import CREATE_GROUPS, CustomerForm, CustomerSearch, EmailChange
from formguard.models.responses import (
    CreateCustomerResponse,
    CustomerListResponse,
    CustomerResponse,
)
from formguard.services.customer_repository import Customer
from formguard.validators import Severity

router = APIRouter(route_class=ValidationRoute)

MINIMUM_AGE = 18


def _repository(request: Request):
    return request.app.state.customer_repository


def _to_response(customer: Customer) -> CustomerResponse:
    return CustomerResponse.model_validate(customer, from_attributes=True)


def _age_on(birth_date: date, today: date) -> int:
    before_birthday = (today.month, today.day) < (birth_date.month, birth_date.day)
    return today.year - birth_date.year - int(before_birthday)


def _check_registration(errors: ErrorCollector, customer: CustomerForm) -> None:
    """Constraints plus the rules that need more than one field."""
    errors.validate(customer, prefix="customer", groups=CREATE_GROUPS)

    if customer.birth_date is not None:
        today = errors.context.now().date()
        errors.ensure(
            _age_on(customer.birth_date, today) >= MINIMUM_AGE,
            I18nMessage("customer.birth_date", "customer.birth_date.too_young", (MINIMUM_AGE,)),
        )
    errors.ensure(
        customer.accepted_terms,
        I18nMessage("customer.accepted_terms", "customer.terms.required"),
    )
    errors.add_if(
        customer.nickname is None,
        I18nMessage("customer.nickname", "customer.nickname.missing", severity=Severity.WARN),
    )
    errors.add_if(
        not customer.phones,
        I18nMessage("customer.phones", "customer.phones.none", severity=Severity.INFO),
    )


def customer_listing(request: Request, name_prefix: Optional[str] = None) -> JSONResponse:
    """Listing view, also the forward target of a failed search."""
    customers = _repository(request).list(name_prefix)
    collector = getattr(request.state, "error_collector", None)
    errors = collector.errors if collector is not None else Messages().errors
    payload = CustomerListResponse(
        customers=[_to_response(c) for c in customers],
        errors=errors.to_list(),
    )
    return JSONResponse(jsonable_encoder(payload))


# ─── Endpoints ───


@router.get("/customers", response_model=CustomerListResponse, name="list_customers")
async def list_customers(request: Request):
    """List all customers."""
    return customer_listing(request)


@router.get("/customers/new", response_class=HTMLResponse, name="new_customer")
async def new_customer(request: Request):
    """Empty registration form."""
    return customer_form(request, Messages())


@router.get("/customers/{customer_id}", response_model=CustomerResponse, name="show_customer")
async def show_customer(customer_id: int, request: Request):
    customer = _repository(request).get(customer_id)
    if customer is None:
        raise HTTPException(status_code=404, detail=f"Customer {customer_id} not found")
    return _to_response(customer)


@router.post("/customers", status_code=201, response_model=CreateCustomerResponse)
async def create_customer(
    request: Request,
    customer: CustomerForm = Body(embed=True),
    errors: ErrorCollector = Depends(get_error_collector),
):
    """Register a customer. Errors come back as a structured 400."""
    _check_registration(errors, customer)
    errors.on_error_send_bad_request()

    created = _repository(request).add(
        name=customer.name,
        email=customer.email,
        birth_date=customer.birth_date,
        credit_limit=customer.credit_limit,
        nickname=customer.nickname,
        phones=[p.model_dump() for p in customer.phones],
    )
    return CreateCustomerResponse(
        customer=_to_response(created),
        warnings=errors.warnings.to_list(),
        info=errors.info.to_list(),
    )


@router.post("/customers/preview", response_class=HTMLResponse)
async def preview_customer(
    request: Request,
    customer: CustomerForm = Body(embed=True),
    errors: ErrorCollector = Depends(get_error_collector),
):
    """Check a draft. Errors re-render the form page with the messages."""
    _check_registration(errors, customer)
    errors.on_error_use_page("customers.form", customer=customer)
    return customer_preview(request, errors.messages, customer=customer)


@router.post("/customers/search", response_model=CustomerListResponse)
async def search_customers(
    request: Request,
    search: CustomerSearch = Body(embed=True),
    errors: ErrorCollector = Depends(get_error_collector),
):
    """Search by name prefix. An invalid search falls back to the full listing."""
    errors.validate(search, prefix="search")
    errors.on_error_forward_to(customer_listing)
    return customer_listing(request, name_prefix=search.name)


@router.put("/customers/{customer_id}/email", response_model=CustomerResponse, name="change_email")
async def change_email(
    customer_id: int,
    request: Request,
    change: EmailChange = Body(embed=True),
    errors: ErrorCollector = Depends(get_error_collector),
):
    """Change a customer's e-mail. Invalid changes redirect back to the customer."""
    repository = _repository(request)
    if repository.get(customer_id) is None:
        raise HTTPException(status_code=404, detail=f"Customer {customer_id} not found")

    context = errors.context.with_services(customers=repository.excluding(customer_id))
    errors.validate(change, prefix="change", context=context)
    errors.on_error_redirect_to("show_customer", customer_id=customer_id)

    return _to_response(repository.update_email(customer_id, change.email))
