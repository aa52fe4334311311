"""Session service layer - stores the access token Shopify issued for each shop."""
from typing import Optional
from sqlalchemy.orm import Session

from upsell.models import ShopSession


class SessionService:
    """Service for managing per-shop access tokens."""

    def get_session(self, db: Session, shop: str) -> Optional[ShopSession]:
        """Get the stored session for a shop domain."""
        return db.query(ShopSession).filter(ShopSession.shop == shop).first()

    def get_access_token(self, db: Session, shop: str) -> Optional[str]:
        """Get just the access token for a shop."""
        session = self.get_session(db, shop)
        return session.access_token if session else None

    def save_session(
        self,
        db: Session,
        shop: str,
        access_token: str,
        scope: Optional[str] = None
    ) -> ShopSession:
        """Create or update the session for a shop."""
        session = self.get_session(db, shop)

        if session:
            session.access_token = access_token
            if scope is not None:
                session.scope = scope
        else:
            session = ShopSession(shop=shop, access_token=access_token, scope=scope)
            db.add(session)

        db.commit()
        db.refresh(session)
        return session

    def delete_session(self, db: Session, shop: str) -> bool:
        """Delete the session for a shop (e.g. after uninstall)."""
        session = self.get_session(db, shop)
        if session:
            db.delete(session)
            db.commit()
            return True
        return False


session_service = SessionService()
