"""
QuerySets for listings.

Visibility rule:
    - Admins see every item.
    - Everyone else sees approved items, plus their own items whatever
      their approval status.
"""

from __future__ import annotations

from django.db.models import Q

from core.managers import BaseQuerySet


class ItemQuerySet(BaseQuerySet):
    """
    Chainable item queries.

    Usage:
        Item.objects.visible_to(request.user).filter(category_id=3).newest()
    """

    def approved(self) -> ItemQuerySet:
        return self.filter(approval_status="approved")

    def visible_to(self, user) -> ItemQuerySet:
        """Restrict to the items ``user`` may browse."""
        if user is None or not user.is_authenticated:
            return self.approved()
        if user.is_staff:
            return self.all()
        return self.filter(Q(approval_status="approved") | Q(seller=user))

    def search(self, term: str) -> ItemQuerySet:
        """Case-insensitive match on title, description or location."""
        term = term.strip()
        if not term:
            return self
        return self.filter(
            Q(title__icontains=term)
            | Q(description__icontains=term)
            | Q(location__icontains=term)
        )
