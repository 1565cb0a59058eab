#!/usr/bin/env python3
"""
Backfill monthly_distributions with each user's current distribution.
Safe to run repeatedly: users that already have a snapshot for the
current month are skipped.
"""

from spewn import create_app, db
from spewn.models.monthly_distribution import MonthlyDistribution
from spewn.models.user import User
from spewn.utils.distribution import current_month


def backfill_monthly_distributions(app=None, month=None):
    """Snapshot every user's current distribution for ``month``. Returns the count written."""
    app = app or create_app()
    month = month or current_month()
    count = 0

    with app.app_context():
        print(f"Backfilling monthly distributions for {month}...")
        try:
            for user in User.query.order_by(User.id).all():
                distribution = user.distribution
                if not distribution:
                    continue

                exists = MonthlyDistribution.query.filter_by(user_id=user.id, month=month).first()
                if exists:
                    continue

                db.session.add(MonthlyDistribution(user_id=user.id, month=month, distribution=distribution))
                if not user.start_month:
                    user.start_month = month
                if user.salary and any(user.splits.values()):
                    user.onboard_complete = True

                count += 1
                print(f"  ✓ {user.email}")

            db.session.commit()
            print(f"✓ Backfill complete. Updated {count} users.")
        except Exception as e:
            print(f"✗ Backfill failed: {e}")
            db.session.rollback()
            raise

    return count


if __name__ == '__main__':
    backfill_monthly_distributions()
