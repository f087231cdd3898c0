"""
Repository Pattern for Data Access

Provides CRUD operations and domain-specific queries for all models.
"""
from typing import List, Optional, Dict, Any, Tuple, Type, TypeVar

from sqlalchemy import select, func, or_
from sqlalchemy.orm import Session, joinedload
from sqlalchemy.sql import Select

from src.buyerleads.db.models import Buyer, BuyerHistory, User
from src.buyerleads.models.buyer import BuyerFilters
from src.buyerleads.models.enums import HistoryAction, UserRole
from src.buyerleads.utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar('T')

# Sortable buyer columns by field name
SORT_COLUMNS = {
    'updated_at': Buyer.updated_at,
    'created_at': Buyer.created_at,
    'full_name': Buyer.full_name,
    'city': Buyer.city,
    'property_type': Buyer.property_type,
    'status': Buyer.status,
    'timeline': Buyer.timeline,
    'budget_min': Buyer.budget_min,
    'budget_max': Buyer.budget_max,
}


class BaseRepository:
    """
    Base repository with common CRUD operations.

    Generic repository that can be extended for specific models.
    """

    def __init__(self, model: Type[T]):
        """
        Initialize repository with model class.

        Args:
            model: SQLAlchemy model class
        """
        self.model = model

    def get_by_id(self, session: Session, id_value: Any) -> Optional[T]:
        """
        Get single record by primary key.

        Args:
            session: Database session
            id_value: Primary key value

        Returns:
            Model instance or None
        """
        result = session.get(self.model, id_value)
        logger.debug(
            "repository_get_by_id",
            model=self.model.__name__,
            id=id_value,
            found=result is not None
        )
        return result

    def create(self, session: Session, **kwargs) -> T:
        """
        Create new record.

        Args:
            session: Database session
            **kwargs: Model field values

        Returns:
            Created model instance
        """
        instance = self.model(**kwargs)
        session.add(instance)
        session.flush()
        logger.debug("repository_created", model=self.model.__name__, id=getattr(instance, 'id', None))
        return instance

    def update(self, session: Session, instance: T, **kwargs) -> T:
        """
        Apply field values to a loaded record.

        Args:
            session: Database session
            instance: Loaded model instance
            **kwargs: Fields to update

        Returns:
            Updated model instance
        """
        for key, value in kwargs.items():
            setattr(instance, key, value)

        session.flush()
        logger.debug("repository_updated", model=self.model.__name__, id=getattr(instance, 'id', None))
        return instance

    def delete(self, session: Session, id_value: Any) -> bool:
        """
        Delete record (hard delete).

        Args:
            session: Database session
            id_value: Primary key value

        Returns:
            True if deleted, False if not found
        """
        instance = self.get_by_id(session, id_value)
        if not instance:
            logger.warning("repository_delete_not_found", model=self.model.__name__, id=id_value)
            return False

        session.delete(instance)
        session.flush()
        logger.debug("repository_deleted", model=self.model.__name__, id=id_value)
        return True

    def count(self, session: Session) -> int:
        """
        Count total records.

        Args:
            session: Database session

        Returns:
            Total count
        """
        return session.scalar(select(func.count()).select_from(self.model))


class UserRepository(BaseRepository):
    """Repository for User model."""

    def __init__(self):
        super().__init__(User)

    def get_by_email(self, session: Session, email: str) -> Optional[User]:
        """
        Get user by email address.

        Args:
            session: Database session
            email: Email address

        Returns:
            User instance or None
        """
        return session.execute(
            select(User).where(User.email == email)
        ).scalar_one_or_none()

    def get_or_create(
        self,
        session: Session,
        user_id: str,
        email: str,
        full_name: Optional[str] = None,
        role: UserRole = UserRole.USER,
    ) -> User:
        """
        Return the user with this id or email, creating it on first sight.

        Identities come from the auth provider; a local row is needed so
        ownership and history foreign keys resolve. Email is unique, so an
        unknown id whose email is already stored resolves to that user.

        Args:
            session: Database session
            user_id: Identity provider user id
            email: User email
            full_name: Display name (defaults to the email local part)
            role: USER or ADMIN

        Returns:
            User instance (flushed, not committed)
        """
        user = self.get_by_id(session, user_id)
        if user:
            return user

        user = self.get_by_email(session, email)
        if user:
            logger.info("user_resolved_by_email", user_id=user.id, token_subject=user_id, email=email)
            return user

        user = self.create(
            session,
            id=user_id,
            email=email,
            full_name=full_name or email.split('@')[0],
            role=role,
        )
        logger.info("user_registered", user_id=user_id, email=email, role=role.value)
        return user


class BuyerRepository(BaseRepository):
    """Repository for Buyer model with filter/search queries."""

    def __init__(self):
        super().__init__(Buyer)

    def get_with_owner(self, session: Session, buyer_id: str) -> Optional[Buyer]:
        """
        Get buyer with its owner eagerly loaded.

        Args:
            session: Database session
            buyer_id: Buyer id

        Returns:
            Buyer instance or None
        """
        return session.execute(
            select(Buyer)
            .options(joinedload(Buyer.owner))
            .where(Buyer.id == buyer_id)
        ).scalar_one_or_none()

    def search(self, session: Session, filters: BuyerFilters, sort_by: str) -> Tuple[List[Buyer], int]:
        """
        Get one page of buyers matching the filters.

        Args:
            session: Database session
            filters: Filter, search and paging options
            sort_by: Key of SORT_COLUMNS

        Returns:
            Tuple of (buyers on the page, total matching count)
        """
        query = self._filtered(filters)

        total = session.scalar(
            select(func.count()).select_from(query.order_by(None).subquery())
        )

        offset = (filters.page - 1) * filters.page_size
        page_query = (
            self._sorted(query, sort_by, filters.sort_order)
            .options(joinedload(Buyer.owner))
            .offset(offset)
            .limit(filters.page_size)
        )
        buyers = session.execute(page_query).scalars().all()

        logger.debug(
            "buyer_search",
            total=total,
            returned=len(buyers),
            page=filters.page,
            page_size=filters.page_size,
        )
        return list(buyers), total

    def find_all(self, session: Session, filters: BuyerFilters, sort_by: str) -> List[Buyer]:
        """
        Get every buyer matching the filters, ignoring paging.

        Args:
            session: Database session
            filters: Filter and search options
            sort_by: Key of SORT_COLUMNS

        Returns:
            List of buyers
        """
        query = self._sorted(self._filtered(filters), sort_by, filters.sort_order)
        return list(session.execute(query).scalars().all())

    def _filtered(self, filters: BuyerFilters) -> Select:
        query = select(Buyer)

        if filters.city:
            query = query.where(Buyer.city == filters.city)
        if filters.property_type:
            query = query.where(Buyer.property_type == filters.property_type)
        if filters.status:
            query = query.where(Buyer.status == filters.status)
        if filters.timeline:
            query = query.where(Buyer.timeline == filters.timeline)

        if filters.search and filters.search.strip():
            term = filters.search.strip().lower()
            query = query.where(or_(
                func.lower(Buyer.full_name).contains(term, autoescape=True),
                Buyer.phone.contains(term, autoescape=True),
                func.lower(Buyer.email).contains(term, autoescape=True),
            ))

        return query

    def _sorted(self, query: Select, sort_by: str, sort_order: str) -> Select:
        column = SORT_COLUMNS[sort_by]
        column = column.asc() if sort_order == 'asc' else column.desc()
        return query.order_by(column, Buyer.id)


class BuyerHistoryRepository(BaseRepository):
    """Repository for the append-only buyer history."""

    def __init__(self):
        super().__init__(BuyerHistory)

    def append(
        self,
        session: Session,
        buyer_id: str,
        changed_by: str,
        action: HistoryAction,
        diff: Dict[str, Any],
    ) -> BuyerHistory:
        """
        Append a history entry.

        Args:
            session: Database session
            buyer_id: Buyer the entry describes
            changed_by: Acting user id
            action: created, updated or imported
            diff: JSON-serializable change payload

        Returns:
            Created BuyerHistory instance
        """
        return self.create(
            session,
            buyer_id=buyer_id,
            changed_by=changed_by,
            action=action,
            diff=diff,
        )

    def recent_for_buyer(self, session: Session, buyer_id: str, limit: Optional[int] = None) -> List[BuyerHistory]:
        """
        Get a buyer's history, newest first.

        Args:
            session: Database session
            buyer_id: Buyer id
            limit: Maximum number of entries

        Returns:
            List of BuyerHistory with the acting user loaded
        """
        query = (
            select(BuyerHistory)
            .options(joinedload(BuyerHistory.user))
            .where(BuyerHistory.buyer_id == buyer_id)
            .order_by(BuyerHistory.changed_at.desc(), BuyerHistory.id)
        )
        if limit:
            query = query.limit(limit)

        return list(session.execute(query).scalars().all())
