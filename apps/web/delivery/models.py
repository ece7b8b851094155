"""
Delivery models - physical stores and their delivery configuration.

Stores are created and edited by administrators. Only active stores take
part in delivery eligibility.
"""

from decimal import Decimal
from typing import Any

from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from pydantic import TypeAdapter
from pydantic import ValidationError as SchemaValidationError

from storefront_schemas import Coordinate, DayHours, StoreConfig, Weekday

from apps.web.core.models import TimestampedModel

_HOURS_ADAPTER = TypeAdapter(dict[Weekday, DayHours])


class Store(TimestampedModel):
    """
    A physical store that prepares and delivers orders.

    Delivery settings (radius, fees, minimum order, tax) are per store and
    are copied onto an order's pricing snapshot when it is placed.
    """

    name = models.CharField(max_length=200)
    code = models.SlugField(unique=True, help_text="Short store identifier")

    # Address
    street = models.CharField(max_length=255, blank=True)
    city = models.CharField(max_length=100, blank=True)
    postal_code = models.CharField(max_length=20, blank=True)
    country = models.CharField(max_length=100, default="Netherlands")

    # Location (WGS84 degrees)
    latitude = models.FloatField(
        validators=[MinValueValidator(-90), MaxValueValidator(90)],
    )
    longitude = models.FloatField(
        validators=[MinValueValidator(-180), MaxValueValidator(180)],
    )

    # Delivery settings
    radius_km = models.DecimalField(
        max_digits=6,
        decimal_places=2,
        default=Decimal("15.00"),
        help_text="Maximum delivery distance (inclusive)",
    )
    coverage_cities = models.JSONField(
        default=list,
        blank=True,
        help_text='Core delivery cities, e.g. ["Amersfoort", "Leusden"] (empty = all)',
    )
    delivery_fee = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("2.50"),
    )
    service_fee = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.50"),
        help_text="Flat fee per order",
    )
    minimum_order_amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("10.00"),
        help_text="Checkout is blocked below this subtotal",
    )
    tax_rate_percent = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal("0"),
        help_text="Tax rate as a percentage of the subtotal (e.g., 9 for 9%)",
    )
    estimated_minutes_min = models.PositiveIntegerField(default=30)
    estimated_minutes_max = models.PositiveIntegerField(default=45)
    operating_hours = models.JSONField(
        default=dict,
        blank=True,
        help_text=(
            'Weekly hours, e.g. {"monday": {"open": "10:00", "close": "22:00", '
            '"is_open": true}}. Missing days are closed; empty = always open'
        ),
    )

    # Status
    is_active = models.BooleanField(default=True)
    show_on_website = models.BooleanField(default=True)

    class Meta:
        ordering = ["pk"]
        indexes = [
            models.Index(fields=["is_active", "show_on_website"]),
        ]

    def __str__(self) -> str:
        return self.name

    def clean(self) -> None:
        super().clean()
        try:
            _HOURS_ADAPTER.validate_python(self.operating_hours or {})
        except SchemaValidationError as e:
            raise ValidationError({"operating_hours": str(e)}) from e

    def save(self, *args: Any, **kwargs: Any) -> None:
        super().save(*args, **kwargs)
        from apps.web.delivery.services import invalidate_store_cache  # noqa: PLC0415

        invalidate_store_cache()

    def delete(self, *args: Any, **kwargs: Any) -> tuple[int, dict[str, int]]:
        result = super().delete(*args, **kwargs)
        from apps.web.delivery.services import invalidate_store_cache  # noqa: PLC0415

        invalidate_store_cache()
        return result

    @property
    def full_address(self) -> str:
        parts = [self.street, self.postal_code, self.city, self.country]
        return ", ".join(p for p in parts if p)

    def to_config(self) -> StoreConfig:
        """Convert to the pure StoreConfig record used by the pricing engine."""
        return StoreConfig(
            id=self.pk,
            name=self.name,
            coordinate=Coordinate(latitude=self.latitude, longitude=self.longitude),
            radius_km=float(self.radius_km),
            coverage_cities=self.coverage_cities or [],
            delivery_fee=self.delivery_fee,
            service_fee=self.service_fee,
            minimum_order_amount=self.minimum_order_amount,
            tax_rate_percent=self.tax_rate_percent,
            estimated_minutes_min=self.estimated_minutes_min,
            estimated_minutes_max=self.estimated_minutes_max,
            is_active=self.is_active,
            operating_hours=self.operating_hours or None,
        )
