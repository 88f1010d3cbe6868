# marketplace/services/identity_service.py
import logging

from marketplace.core.errors import InfrastructureError, InvalidRequestError
from marketplace.database import DocumentStore
from marketplace.models.user import User
from marketplace.repositories.user_repo import UserRepository
from marketplace.schemas.identity import Identity, IdentityEvent, IdentityEventData
from marketplace.services.role_service import initial_role_state

logger = logging.getLogger(__name__)


class IdentityService:
    """
    Keeps local User rows in step with the identity provider.

    Two entry points:
      - get_or_create: the one place a local user is created lazily, on the
        first authenticated request of an identity.
      - handle_event: signed lifecycle webhooks (created/updated/deleted).

    Every operation is safe to replay. Deleting a user does not cascade;
    the stores and orders left behind are picked up by the consistency
    scan.
    """

    def __init__(self, repo: UserRepository):
        self.repo = repo

    def get_or_create(self, db: DocumentStore, identity: Identity) -> User:
        user = self.repo.get_by_external_id(db, identity.external_id)
        if user is not None:
            return user
        try:
            return self._create(db, identity.external_id, identity.email, identity.name, identity.image_url)
        except InfrastructureError:
            # A concurrent first request may have inserted the same identity.
            user = self.repo.get_by_external_id(db, identity.external_id)
            if user is None:
                raise
            logger.info("User %s was created concurrently", identity.external_id)
            return user

    def handle_event(self, db: DocumentStore, event: IdentityEvent) -> User | None:
        logger.info("Identity event %s for %s", event.type, event.data.id)
        if event.type == "user.created":
            return self.on_created(db, event.data)
        if event.type == "user.updated":
            return self.on_updated(db, event.data)
        self.on_deleted(db, event.data)
        return None

    def on_created(self, db: DocumentStore, data: IdentityEventData) -> User:
        """
        Insert the local user, or refresh it if it already exists.

        Raises:
            InvalidRequestError: the event has no primary email.
        """
        email = data.primary_email
        if not email:
            raise InvalidRequestError(detail="No primary email found")

        existing = self.repo.get_by_external_id(db, data.id)
        if existing is not None:
            # Replayed event, or the user was lazily created first.
            # Role is never touched here.
            return self._sync(db, existing, data, email)

        return self._create(db, data.id, email, data.display_name, data.image_url)

    def on_updated(self, db: DocumentStore, data: IdentityEventData) -> User | None:
        user = self.repo.get_by_external_id(db, data.id)
        if user is None:
            logger.info("Identity update for unknown user %s ignored", data.id)
            return None
        return self._sync(db, user, data, data.primary_email or user.email)

    def on_deleted(self, db: DocumentStore, data: IdentityEventData) -> None:
        user = self.repo.get_by_external_id(db, data.id)
        if user is None:
            return
        self.repo.delete(db, user)
        logger.info("User %s deleted (external id %s)", user.id, data.id)

    def _create(
        self,
        db: DocumentStore,
        external_id: str,
        email: str,
        name: str | None,
        image_url: str | None,
    ) -> User:
        state = initial_role_state(email)
        user = self.repo.create(
            db,
            User(
                external_id=external_id,
                email=email,
                name=name,
                image_url=image_url,
                role=state.role,
                onboarded=state.onboarded,
            ),
        )
        logger.info("Created local user %s with role %s", user.id, user.role)
        return user

    def _sync(
        self,
        db: DocumentStore,
        user: User,
        data: IdentityEventData,
        email: str,
    ) -> User:
        updated = self.repo.update(
            db,
            user,
            email=email,
            name=data.display_name,
            image_url=data.image_url,
        )
        return updated or user
