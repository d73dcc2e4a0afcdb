from fastapi import APIRouter, HTTPException, status

from app.application import payments
from app.core.domain.errors import UnknownPaymentProviderError
from app.interfaces.api.schemas import PaymentRequest, PaymentResponse, ProvidersResponse

router = APIRouter(prefix="/payments", tags=["payments"])


@router.get("/providers", response_model=ProvidersResponse)
def list_providers() -> ProvidersResponse:
    return ProvidersResponse(
        default=payments.DEFAULT_PROVIDER, providers=payments.available_providers()
    )


@router.post("", response_model=PaymentResponse)
def process_payment(payload: PaymentRequest) -> PaymentResponse:
    try:
        result = payments.process_payment(payload.amount, payload.provider)
    except UnknownPaymentProviderError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return PaymentResponse(
        provider=result.provider,
        amount=result.amount,
        status=result.status,
        reference=result.reference,
        message=result.message,
    )
