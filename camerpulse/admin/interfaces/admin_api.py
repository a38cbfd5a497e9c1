from typing import Any, Dict, Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Header, HTTPException

from camerpulse.admin.security.jwt_hmac import AdminAuthError, AdminClaims, AdminTokenVerifier, require_role
from camerpulse.review.errors import ConfigKeyRejected, ReviewConflict, ReviewNotFound
from camerpulse.review.services.poll_review_service import PollReviewService


def build_admin_router(service: PollReviewService, verifier: AdminTokenVerifier) -> APIRouter:
    router = APIRouter(prefix="/admin/v1", tags=["admin"])

    def _claims(required_role: str):
        def _dep(authorization: Optional[str] = Header(None)) -> AdminClaims:
            if not authorization or not authorization.startswith("Bearer "):
                raise HTTPException(status_code=401, detail="Missing bearer token")
            token = authorization.split(" ", 1)[1].strip()
            try:
                claims = verifier.verify(token)
                require_role(claims, required_role)
                return claims
            except AdminAuthError as exc:
                raise HTTPException(status_code=403, detail=str(exc))

        return _dep

    def _review(audit_id: UUID, approved: bool, payload: Optional[Dict[str, Any]], claims: AdminClaims):
        reason = str((payload or {}).get("reason", ""))
        try:
            if approved:
                review = service.approve(audit_id, reviewer=claims.sub, reason=reason)
            else:
                review = service.reject(audit_id, reviewer=claims.sub, reason=reason)
        except ReviewNotFound as exc:
            raise HTTPException(status_code=404, detail=str(exc))
        except ReviewConflict as exc:
            raise HTTPException(status_code=409, detail=str(exc))
        return {
            "status": "ok",
            "audit_id": str(review.audit_id),
            "poll_id": str(review.poll_id),
            "approved": review.approved,
        }

    @router.get("/autonomous-polls")
    def list_autonomous_polls(limit: int = 10, claims=Depends(_claims("viewer"))):
        return {"items": [item.to_dict() for item in service.list_recent(limit=limit)]}

    @router.post("/autonomous-polls/{audit_id}/approve")
    def approve_poll(
        audit_id: UUID,
        payload: Optional[Dict[str, Any]] = Body(None),
        claims=Depends(_claims("reviewer")),
    ):
        return _review(audit_id, True, payload, claims)

    @router.post("/autonomous-polls/{audit_id}/reject")
    def reject_poll(
        audit_id: UUID,
        payload: Optional[Dict[str, Any]] = Body(None),
        claims=Depends(_claims("reviewer")),
    ):
        return _review(audit_id, False, payload, claims)

    @router.get("/config")
    def get_config(claims=Depends(_claims("viewer"))):
        return {"items": service.get_config()}

    @router.put("/config/{config_key}")
    def put_config(config_key: str, payload: Dict[str, Any], claims=Depends(_claims("admin"))):
        try:
            service.update_config(config_key, payload, actor=claims.sub)
        except ConfigKeyRejected as exc:
            raise HTTPException(status_code=400, detail=str(exc))
        return {"status": "ok", "config_key": config_key}

    return router
