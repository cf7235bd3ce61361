"""Public newsletter sign-up and unsubscribe endpoints."""
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from catalogue_admin.interfaces.http.deps import (
    get_db_session,
    get_newsletter_service,
    get_request_origin,
    get_side_effect_dispatcher,
)
from catalogue_admin.modules.activities import ActivityKind, ActivityService
from catalogue_admin.modules.common import RequestOrigin
from catalogue_admin.modules.newsletter import NewsletterService, SubscribeInput
from catalogue_admin.modules.notifications import SideEffectDispatcher
from catalogue_admin.schemas import Envelope, SubscribeData, SubscribeRequest, envelope

router = APIRouter()


@router.post(
    "/subscribe",
    response_model=Envelope[SubscribeData],
    status_code=status.HTTP_201_CREATED,
    summary="订阅邮件通讯",
)
async def subscribe(
    payload: SubscribeRequest,
    response: Response,
    origin: RequestOrigin = Depends(get_request_origin),
    newsletter: NewsletterService = Depends(get_newsletter_service),
    dispatcher: SideEffectDispatcher = Depends(get_side_effect_dispatcher),
):
    outcome = await newsletter.subscribe(
        SubscribeInput(
            email=str(payload.email),
            name=payload.name,
            company_name=payload.company_name,
            phone_number=payload.phone_number,
            city=payload.city,
            source=payload.source,
        )
    )
    subscriber = outcome.subscriber
    dispatcher.notify(
        ActivityKind.NEWSLETTER_SUBSCRIBE,
        {
            "email": subscriber.email,
            "name": subscriber.name,
            "companyName": subscriber.company_name,
            "phoneNumber": subscriber.phone_number,
            "city": subscriber.city,
            "source": subscriber.source,
            "reactivated": not outcome.created,
        },
        origin=origin,
    )

    data = SubscribeData(subscriber_id=subscriber.id, email=subscriber.email)
    if not outcome.created:
        response.status_code = status.HTTP_200_OK
        return envelope(data, "Successfully resubscribed to newsletter")
    return envelope(data, "Successfully subscribed to newsletter")


@router.get("/unsubscribe/{token}", response_model=Envelope[dict], summary="退订邮件通讯")
async def unsubscribe(
    token: str,
    origin: RequestOrigin = Depends(get_request_origin),
    newsletter: NewsletterService = Depends(get_newsletter_service),
    db: AsyncSession = Depends(get_db_session),
):
    subscriber = await newsletter.unsubscribe(token)
    await ActivityService.with_session(db).create(
        ActivityKind.NEWSLETTER_UNSUBSCRIBE,
        details={"email": subscriber.email},
        origin=origin,
    )
    return envelope({"email": subscriber.email}, "Successfully unsubscribed from newsletter")
