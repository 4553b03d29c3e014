from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import or_, update
from starlette.responses import Response

from svc_content import utils
from svc_content.db.models import User

from .. import responses
from ..context import RequestContext

if TYPE_CHECKING:
    from ..pipeline import Pipeline

logger = logging.getLogger(__name__)

SUBJECT = "CMS Verification Code"


def add_verification_routes(pipeline: "Pipeline") -> None:
    @pipeline.post("/api/verification")
    async def request_verification(ctx: RequestContext) -> Response:
        if ctx.settings.demo:
            return responses.unauthorized()
        body = ctx.body if isinstance(ctx.body, dict) else {}
        email = body.get("email")
        if not email or not isinstance(email, str):
            return responses.bad_request("email is required.")

        now = utils.now()
        code = utils.verification_code()
        # An unexpired code stays valid; a new one is only issued after expiry.
        async with ctx.db.transaction() as s:
            res = await s.execute(
                update(User)
                .where(
                    User.email == email,
                    or_(User.verification_expires_at.is_(None), User.verification_expires_at <= now),
                )
                .values(verification=code, verification_expires_at=now + ctx.settings.verification_lifetime_seconds)
            )

        if res.rowcount:
            await ctx.environment.mailer.send(email, SUBJECT, f"Verification code: {code}")
        else:
            logger.debug("No verification issued for %s", email)
        return responses.no_content()
