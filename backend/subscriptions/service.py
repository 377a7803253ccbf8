# ------------------------------ IMPORTS ------------------------------
from datetime import date, timedelta
from typing import Optional, List, Dict, Any
import logging

from sqlalchemy.orm import Session

from core.database import transaction
from core.database.models import Account, CartItem, Subscription, UserSubscription
from core.exceptions import NotFoundError, ConflictError, InvalidRequestError
from core.security.auth import ensure_owner
from core.security.roles import Role
from core.services.email_service import EmailService
from core.utils.api_helpers import apply_updates, require_fields
from core.utils.data_helpers import today
from dealers.service import DealerService

logger = logging.getLogger(__name__)

PLAN_FIELDS = ("name", "description", "price", "duration_days", "max_featured_cars")

# ------------------------------ SERVICE ------------------------------

class SubscriptionService:
    """Subscription plans and the per-account subscriptions bought from them."""

    def __init__(self, db: Session, email: EmailService):
        self.db = db
        self.email = email
        self.dealers = DealerService(db)

    # ------------------------------ PLANS ------------------------------

    def list_plans(self) -> List[Subscription]:
        return self.db.query(Subscription).order_by(Subscription.price, Subscription.id).all()

    def get_plan(self, plan_id: int) -> Subscription:
        plan = self.db.get(Subscription, plan_id)
        if not plan:
            raise NotFoundError("Subscription plan", plan_id)
        return plan

    def create_plan(self, data: Dict[str, Any]) -> Subscription:
        require_fields(data, "name", "price")
        plan = Subscription()
        apply_updates(plan, data, PLAN_FIELDS)
        if plan.duration_days is None:
            plan.duration_days = 30
        if plan.max_featured_cars is None:
            plan.max_featured_cars = 1

        with transaction(self.db):
            self.db.add(plan)
        self.db.refresh(plan)
        logger.info(f"Created subscription plan {plan.id} ({plan.name})")
        return plan

    def update_plan(self, plan_id: int, data: Dict[str, Any]) -> Subscription:
        plan = self.get_plan(plan_id)
        with transaction(self.db):
            changed = apply_updates(plan, data, PLAN_FIELDS)
        logger.info(f"Updated subscription plan {plan_id}: {changed}")
        return plan

    def delete_plan(self, plan_id: int) -> None:
        """Delete a plan nobody currently holds, with its lapsed subscriptions and cart entries."""
        plan = self.get_plan(plan_id)
        holders = [s for s in plan.user_subscriptions if s.is_current()]
        if holders:
            raise ConflictError(
                "Plan still has active subscribers",
                {"plan_id": plan_id, "active_subscriptions": len(holders)},
                error_code="PLAN_IN_USE"
            )

        with transaction(self.db):
            for lapsed in list(plan.user_subscriptions):
                self.db.delete(lapsed)
            self.db.query(CartItem).filter(CartItem.subscription_id == plan.id).delete(synchronize_session=False)
            self.db.query(Account).filter(Account.subscription_id == plan.id).update(
                {Account.subscription_id: None}, synchronize_session=False
            )
            self.db.delete(plan)
        logger.info(f"Deleted subscription plan {plan_id}")

    def apply_discount(self, plan_id: int, percent: float, expiry: date, on: Optional[date] = None) -> Subscription:
        """Discount a plan by a percentage until (not including) the expiry date."""
        if percent is None or not 0 < percent <= 100:
            raise InvalidRequestError("Discount must be between 0 and 100 percent", {"discount": percent})
        if expiry is None or expiry <= (on or today()):
            raise InvalidRequestError("Discount expiry must be in the future", {"discount_expiry": str(expiry)})

        plan = self.get_plan(plan_id)
        with transaction(self.db):
            plan.discount = percent
            plan.discount_expiry = expiry
        logger.info(f"Plan {plan_id} discounted {percent}% until {expiry}")
        return plan

    def remove_discount(self, plan_id: int) -> Subscription:
        plan = self.get_plan(plan_id)
        with transaction(self.db):
            plan.discount = None
            plan.discount_expiry = None
        return plan

    # ------------------------------ ACCOUNT SUBSCRIPTIONS ------------------------------

    def get_user_subscriptions(self, account: Account) -> List[UserSubscription]:
        return (
            self.db.query(UserSubscription)
            .filter(UserSubscription.account_id == account.id)
            .order_by(UserSubscription.start_date.desc(), UserSubscription.id.desc())
            .all()
        )

    def get_active_subscriptions(self, account: Account, on: Optional[date] = None) -> List[UserSubscription]:
        """Active and not expired."""
        return [s for s in self.get_user_subscriptions(account) if s.is_current(on)]

    def _get_owned(self, account: Account, user_subscription_id: int) -> UserSubscription:
        user_subscription = self.db.get(UserSubscription, user_subscription_id)
        if not user_subscription:
            raise NotFoundError("Subscription", user_subscription_id)
        ensure_owner(account, user_subscription.account_id, "subscription", user_subscription_id)
        return user_subscription

    def activate(self, account: Account, plan: Subscription, auto_renew: bool = False, on: Optional[date] = None) -> UserSubscription:
        """Start a subscription and grant the dealer role, inside the caller's transaction.

        A private seller becomes a dealer: the PRIVATE role is dropped and their
        listings are retagged as dealer listings.
        """
        on = on or today()
        user_subscription = UserSubscription(
            account_id=account.id,
            subscription_id=plan.id,
            start_date=on,
            expiry_date=on + timedelta(days=plan.duration_days),
            active=True,
            auto_renew=auto_renew,
        )
        self.db.add(user_subscription)
        account.subscription_id = plan.id
        account.set_roles((account.role_set - {Role.PRIVATE}) | {Role.DEALER})
        converted = self.dealers.listings.convert_to_dealer_listings(account.id)
        if converted:
            logger.info(f"Account {account.id} became a dealer, retagged {converted} private listings")
        self.db.flush()
        return user_subscription

    def subscribe(self, account: Account, plan_id: int, auto_renew: bool = False, on: Optional[date] = None) -> UserSubscription:
        plan = self.get_plan(plan_id)
        with transaction(self.db):
            user_subscription = self.activate(account, plan, auto_renew=auto_renew, on=on)

        logger.info(f"Account {account.id} subscribed to plan {plan.id} until {user_subscription.expiry_date}")
        self.email.send_subscription_confirmation(account.email, plan.name, user_subscription.expiry_date)
        return user_subscription

    def toggle_auto_renew(self, account: Account, user_subscription_id: int) -> UserSubscription:
        user_subscription = self._get_owned(account, user_subscription_id)
        with transaction(self.db):
            user_subscription.auto_renew = not user_subscription.auto_renew
        logger.info(f"Subscription {user_subscription_id} auto-renew set to {user_subscription.auto_renew}")
        return user_subscription

    def revoke_dealer_access(self, account: Account) -> None:
        """Drop the dealer role and remove the dealer with its listings, inside the caller's transaction."""
        roles = account.role_set - {Role.DEALER}
        account.set_roles(roles | {Role.USER})
        account.subscription_id = None

        dealer = self.dealers.find_by_owner(account)
        if dealer is not None:
            dealer_id = dealer.id
            removed = self.dealers.purge_dealer(dealer)
            self.dealers.verify_deleted(dealer_id)
            logger.info(f"Removed dealer {dealer_id} and {removed} listings of account {account.id}")
        elif not account.has_role(Role.PRIVATE):
            removed = self.dealers.listings.purge_seller_listings(account.id)
            if removed:
                logger.info(f"Removed {removed} listings of account {account.id} with no dealer")

    def cancel_subscription(self, account: Account, user_subscription_id: int, on: Optional[date] = None) -> None:
        """Cancel one of the caller's subscriptions; losing the last one ends dealer access."""
        user_subscription = self._get_owned(account, user_subscription_id)
        plan_name = user_subscription.subscription.name

        with transaction(self.db):
            self.db.delete(user_subscription)
            self.db.flush()
            remaining = [
                s for s in self.db.query(UserSubscription).filter(UserSubscription.account_id == account.id).all()
                if s.is_current(on)
            ]
            if not remaining:
                self.revoke_dealer_access(account)

        logger.info(f"Account {account.id} cancelled subscription {user_subscription_id}")
        self.email.send_subscription_cancelled(account.email, plan_name)

    # ------------------------------ SWEEP ------------------------------

    def run_sweep(self, on: Optional[date] = None) -> Dict[str, int]:
        """Renew or deactivate every active subscription past its expiry date.

        Safe to run repeatedly: an overdue subscription is renewed by as many
        periods as it takes to pass the sweep date, at most once per day, and a
        deactivated one is no longer picked up.
        """
        on = on or today()
        overdue = (
            self.db.query(UserSubscription)
            .filter(UserSubscription.active.is_(True), UserSubscription.expiry_date < on)
            .all()
        )

        renewed, expired, downgraded = [], [], []
        with transaction(self.db):
            for user_subscription in overdue:
                if user_subscription.auto_renew:
                    if user_subscription.is_due_for_renewal(on):
                        while user_subscription.expiry_date < on and user_subscription.renew(on):
                            pass
                        renewed.append(user_subscription)
                elif user_subscription.is_expired(on):
                    user_subscription.active = False
                    expired.append(user_subscription)
            self.db.flush()

            for account in {s.account for s in expired}:
                if not any(s.is_current(on) for s in account.user_subscriptions):
                    self.revoke_dealer_access(account)
                    downgraded.append(account)

        for user_subscription in renewed:
            self.email.send_subscription_renewed(
                user_subscription.account.email, user_subscription.subscription.name, user_subscription.expiry_date
            )
        for user_subscription in expired:
            self.email.send_subscription_expired(user_subscription.account.email, user_subscription.subscription.name)

        result = {"renewed": len(renewed), "expired": len(expired), "downgraded": len(downgraded)}
        if overdue:
            logger.info(f"Subscription sweep for {on}: {result}")
        return result

# ------------------------------ END OF FILE ------------------------------
