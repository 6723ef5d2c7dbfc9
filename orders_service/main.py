import logging
from typing import Optional

from fastapi import FastAPI, Request, Header, HTTPException
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from orders_service import config
from orders_service.database import Base, engine, SessionLocal
from orders_service.errors import InvalidPayload, InvalidSignature
from orders_service.routes import router
from orders_service.store import OrderStore
from orders_service.webhooks import StripeEvent, dispatch, verify_event

logging.basicConfig(level=config.log_level(), format="%(asctime)s %(levelname)s %(name)s %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(title="Gallery Orders Service")

app.include_router(router)

Base.metadata.create_all(bind=engine)


def reconcile(event: StripeEvent) -> str:
    db = SessionLocal()
    try:
        return dispatch(event, OrderStore(db, reject_stale=config.reject_stale_events()))
    finally:
        db.close()


@app.get("/health")
def health():
    return {"status": "ok"}


@app.post("/webhook")
@app.post("/webhooks/stripe")
async def stripe_webhook(request: Request, stripe_signature: Optional[str] = Header(None)):
    payload = await request.body()

    if not stripe_signature:
        raise HTTPException(status_code=400, detail="No signature")

    try:
        event = verify_event(payload, stripe_signature, config.webhook_secret())
    except InvalidSignature as exc:
        logger.warning("Webhook signature verification failed: %s", exc)
        raise HTTPException(status_code=400, detail="Invalid signature")
    except InvalidPayload as exc:
        logger.warning("Webhook payload rejected: %s", exc)
        raise HTTPException(status_code=400, detail="Invalid payload")

    try:
        outcome = await run_in_threadpool(reconcile, event)
    except Exception:
        logger.exception("Webhook error on %s event %s", event.type, event.id)
        return JSONResponse({"error": "Webhook handler failed"}, status_code=500)

    logger.info("WEBHOOK type=%s id=%s outcome=%s", event.type, event.id, outcome)
    return {"received": True}
