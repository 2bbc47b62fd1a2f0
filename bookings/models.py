from django.db import models
from django.utils import timezone

from .pricing import PLAYZONE, SKATEPARK, compute_price


class InvalidTransition(Exception):
    pass


class Booking(models.Model):
    PENDING = 'Pending'
    CONFIRMED = 'Confirmed'
    COMPLETED = 'Completed'

    STATUS_CHOICES = [
        (PENDING, 'Pending'),
        (CONFIRMED, 'Confirmed'),
        (COMPLETED, 'Completed'),
    ]
    GAME_CHOICES = [
        (PLAYZONE, 'Playzone'),
        (SKATEPARK, 'Skatepark'),
    ]
    PLAYZONE_PACKAGE_CHOICES = [
        ('1hr', '1 Hour'),
        ('unlimited', 'Unlimited'),
    ]
    SKATEPARK_PACKAGE_CHOICES = [
        ('30min', 'Half Hour'),
        ('1hr', '1 Hour'),
    ]
    GENDER_CHOICES = [
        ('Male', 'Male'),
        ('Female', 'Female'),
    ]

    token_number = models.CharField(max_length=20, db_index=True)
    customer_name = models.CharField(max_length=255)
    phone_number = models.CharField(max_length=50, blank=True)
    gender = models.CharField(max_length=10, choices=GENDER_CHOICES, blank=True)
    age = models.PositiveSmallIntegerField(null=True, blank=True)
    address = models.CharField(max_length=255, blank=True)
    number_of_persons = models.PositiveIntegerField(default=1)
    date_english = models.DateField()
    date_nepali = models.CharField(max_length=50)
    date_nepali_exact = models.BooleanField(default=True)
    game_type = models.CharField(max_length=20, choices=GAME_CHOICES)
    playzone_package = models.CharField(max_length=20, choices=PLAYZONE_PACKAGE_CHOICES, blank=True)
    skatepark_base_package = models.CharField(max_length=20, choices=SKATEPARK_PACKAGE_CHOICES, blank=True)
    skatepark_extra_hours = models.PositiveIntegerField(null=True, blank=True)
    price = models.DecimalField(max_digits=10, decimal_places=2)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=PENDING, db_index=True)
    start_time = models.DateTimeField(null=True, blank=True)
    end_time = models.DateTimeField(null=True, blank=True)
    actual_duration_minutes = models.PositiveIntegerField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'bookings_booking'
        ordering = ['-created_at']

    def __str__(self):
        return f"#{self.token_number} {self.customer_name} - {self.game_type} - {self.status}"

    @property
    def package(self):
        if self.game_type == PLAYZONE:
            return self.playzone_package or None
        if self.game_type == SKATEPARK:
            return self.skatepark_base_package or None
        return None

    @property
    def extra_hours(self):
        if self.game_type == SKATEPARK:
            return self.skatepark_extra_hours or 0
        return 0

    def package_description(self):
        if not self.package:
            return 'N/A'
        if self.extra_hours:
            return f"{self.package} + {self.extra_hours}hr(s) extra"
        return self.package

    def derived_price(self, prices):
        """Price this booking would get under ``prices``; the stored price is never updated."""
        return compute_price(self.game_type, self.package, self.extra_hours, self.number_of_persons, prices)

    def confirm(self, now=None):
        if self.status != self.PENDING:
            raise InvalidTransition(f"Cannot confirm a booking that is {self.status}")
        self.status = self.CONFIRMED
        self.start_time = now or timezone.now()
        self.save(update_fields=['status', 'start_time', 'updated_at'])

    def complete(self, now=None):
        if self.status != self.CONFIRMED:
            raise InvalidTransition(f"Cannot complete a booking that is {self.status}")
        end_time = now or timezone.now()
        started = self.start_time or self.created_at or end_time
        self.status = self.COMPLETED
        self.end_time = end_time
        self.actual_duration_minutes = max(round((end_time - started).total_seconds() / 60), 0)
        self.save(update_fields=['status', 'end_time', 'actual_duration_minutes', 'updated_at'])
