from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse, RedirectResponse

from microservices.orders_microservice import confirmation_url
from schemas.orders_schemas import CheckoutReason
from services.auth_service import SessionIdentityProvider, get_session
from services.cart_service import CartStore, get_cart_store
from services.orders_service import build_order_confirmation

router = APIRouter(prefix="/orders")
confirmation_router = APIRouter(prefix="/checkout")

FAILURE_STATUS = {
    CheckoutReason.UNAUTHENTICATED: 401,
    CheckoutReason.EMPTY_CART: 400,
    CheckoutReason.IN_PROGRESS: 409,
    CheckoutReason.REJECTED: 400,
    CheckoutReason.TRANSPORT: 502,
}


@router.post("/checkout")
async def checkout(store: CartStore = Depends(get_cart_store)):
    # places the order, on success send the browser to the confirmation page
    result = await store.checkout()
    if result:
        return RedirectResponse(confirmation_url(result), status_code=303)
    return JSONResponse(
        status_code=FAILURE_STATUS[result.reason],
        content={"status": "failure", "reason": result.reason.value, "message": result.message},
    )


@confirmation_router.get("/success")
def checkout_success(orderId: Optional[str] = Query(None), total: Optional[str] = Query(None),
                     session: SessionIdentityProvider = Depends(get_session)):
    identity = session.current()
    if identity is None:
        raise HTTPException(status_code=401, detail="Please login to view your order")
    confirmation = build_order_confirmation(identity, orderId, total)
    return {"status": "success", "order": confirmation}
