"""
Receipt endpoints.
"""

from fastapi import APIRouter, Depends, Path
from fastapi.responses import HTMLResponse

from hostel_ledger.api.deps import get_current_principal, get_receipt_service
from hostel_ledger.schemas.receipt import ReceiptData
from hostel_ledger.services import ReceiptService
from hostel_ledger.services.common import Principal

router = APIRouter(prefix="/receipts", tags=["Receipts"])


@router.get("/{payment_id}/preview", response_class=HTMLResponse)
async def preview_receipt(
    payment_id: int = Path(..., gt=0),
    principal: Principal = Depends(get_current_principal),
    service: ReceiptService = Depends(get_receipt_service),
) -> HTMLResponse:
    """Printable HTML receipt."""
    receipt = await service.get_receipt(principal, payment_id)
    return HTMLResponse(content=service.render_html(receipt))


@router.get("/{payment_id}", response_model=ReceiptData)
async def get_receipt(
    payment_id: int = Path(..., gt=0),
    principal: Principal = Depends(get_current_principal),
    service: ReceiptService = Depends(get_receipt_service),
) -> ReceiptData:
    return await service.get_receipt(principal, payment_id)
