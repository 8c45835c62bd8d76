from fastapi import APIRouter, Depends

from schemas.cart_schemas import LineItem, RemoveItemSchema, SaveLocalCart, UpdateQuantitySchema
from services.cart_service import CartStore, get_cart_store

router = APIRouter(prefix="/cart")


@router.get("")
def get_cart(store: CartStore = Depends(get_cart_store)):
    return {"status": "success", "cart": store.view()}


@router.post("/add-cart-item")
def add_cart_item(item: LineItem, store: CartStore = Depends(get_cart_store)):
    # adds item to cart. if item already in cart, increase its quantity
    line = store.add_item(item)
    return {"status": "success", "item": line, "total_items": store.total_items()}


@router.post("/delete-cart-item")
def delete_cart_item(req: RemoveItemSchema, store: CartStore = Depends(get_cart_store)):
    if store.remove_item(req.id):
        return {"status": "success"}
    return {"status": "failure", "message": "Item not in cart"}


@router.post("/update-quantity")
def update_quantity(req: UpdateQuantitySchema, store: CartStore = Depends(get_cart_store)):
    if store.update_quantity(req.id, req.quantity):
        return {"status": "success", "cart": store.view()}
    return {"status": "failure", "message": "Item not in cart", "cart": store.view()}


@router.post("/clear")
def clear_cart(store: CartStore = Depends(get_cart_store)):
    store.clear_cart()
    return {"status": "success"}


@router.post("/save-local-cart")
def save_local_cart(request: SaveLocalCart, store: CartStore = Depends(get_cart_store)):
    # merges a cart saved elsewhere (e.g. before login) into this one
    merged = store.merge_items(request.local_cart)
    if merged:
        return {"status": "success", "message": "Items added successfuly.", "cart": store.view()}
    return {"status": "failure", "message": "Items were not added", "cart": store.view()}
