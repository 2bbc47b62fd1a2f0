import logging
from decimal import Decimal

from django.conf import settings
from django.db import DatabaseError, models, transaction

from bookings.pricing import PriceTable

logger = logging.getLogger(__name__)


def _default_price(name):
    return Decimal(str(settings.DEFAULT_GAME_PRICES[name]))


class PriceSettings(models.Model):
    """Singleton row holding the unit prices used when creating bookings."""

    SINGLETON_ID = 1

    playzone_1hr = models.DecimalField(max_digits=10, decimal_places=2)
    playzone_unlimited = models.DecimalField(max_digits=10, decimal_places=2)
    skatepark_30min = models.DecimalField(max_digits=10, decimal_places=2)
    skatepark_1hr = models.DecimalField(max_digits=10, decimal_places=2)
    skatepark_extra_hour = models.DecimalField(max_digits=10, decimal_places=2)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'venue_price_settings'
        verbose_name_plural = 'price settings'

    def __str__(self):
        return f"Prices (updated {self.updated_at:%Y-%m-%d %H:%M})" if self.updated_at else 'Prices'

    @classmethod
    def defaults(cls):
        return {name: _default_price(name) for name in PriceTable._fields}

    @classmethod
    def load(cls):
        prices, _ = cls.objects.get_or_create(pk=cls.SINGLETON_ID, defaults=cls.defaults())
        return prices

    @classmethod
    def current_table(cls):
        """Current prices, or the configured defaults if no row is saved or it can't be read."""
        try:
            with transaction.atomic():
                prices = cls.objects.filter(pk=cls.SINGLETON_ID).first()
        except DatabaseError:
            logger.exception("Could not read price settings, using defaults")
            return PriceTable(**cls.defaults())
        if prices is None:
            return PriceTable(**cls.defaults())
        return prices.as_price_table()

    def as_price_table(self):
        return PriceTable(**{name: getattr(self, name) for name in PriceTable._fields})

    def save(self, *args, **kwargs):
        self.pk = self.SINGLETON_ID
        super().save(*args, **kwargs)


class StaffMember(models.Model):
    ROLE_CHOICES = [
        ('admin', 'Admin'),
        ('counter', 'Counter'),
    ]

    email = models.EmailField(unique=True)
    name = models.CharField(max_length=255)
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default='counter', db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'venue_staff_member'
        ordering = ['name']

    def __str__(self):
        return f"{self.name} <{self.email}> ({self.role})"
