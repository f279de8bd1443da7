from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _


class Table(models.Model):
    class Status(models.TextChoices):
        AVAILABLE = "available", _("Available")
        OCCUPIED = "occupied", _("Occupied")
        RESERVED = "reserved", _("Reserved")
        CLEANING = "cleaning", _("Cleaning")
        MAINTENANCE = "maintenance", _("Maintenance")
        OUT_OF_SERVICE = "out_of_service", _("Out of Service")

    class Section(models.TextChoices):
        MAIN_HALL = "Main Hall", _("Main Hall")
        TERRACE = "Terrace", _("Terrace")
        PRIVATE_ROOM = "Private Room", _("Private Room")
        BAR_AREA = "Bar Area", _("Bar Area")
        GARDEN = "Garden", _("Garden")
        VIP = "VIP", _("VIP")

    class Shape(models.TextChoices):
        ROUND = "round", _("Round")
        SQUARE = "square", _("Square")
        RECTANGLE = "rectangle", _("Rectangle")
        OVAL = "oval", _("Oval")

    class Size(models.TextChoices):
        SMALL = "small", _("Small")
        MEDIUM = "medium", _("Medium")
        LARGE = "large", _("Large")

    # Statuses in which new food orders may be placed at the table
    NON_ORDERABLE_STATUSES = [Status.MAINTENANCE, Status.OUT_OF_SERVICE]

    table_number = models.PositiveIntegerField(
        unique=True, validators=[MinValueValidator(1)]
    )
    name = models.CharField(max_length=100, blank=True)
    section = models.CharField(
        max_length=20, choices=Section.choices, default=Section.MAIN_HALL
    )
    location = models.CharField(max_length=255, blank=True)
    capacity = models.PositiveSmallIntegerField(
        default=4, validators=[MinValueValidator(1), MaxValueValidator(20)]
    )
    description = models.TextField(blank=True)
    shape = models.CharField(max_length=20, choices=Shape.choices, default=Shape.SQUARE)
    size = models.CharField(max_length=20, choices=Size.choices, default=Size.MEDIUM)
    is_active = models.BooleanField(default=True)

    status = models.CharField(
        max_length=20, choices=Status.choices, default=Status.AVAILABLE, db_index=True
    )
    # Weak reference: the table never owns the order
    current_order = models.ForeignKey(
        "orders.Order",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    last_occupied_at = models.DateTimeField(null=True, blank=True)
    last_cleaned_at = models.DateTimeField(null=True, blank=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["table_number"]
        indexes = [
            models.Index(fields=["section", "status"], name="table_section_status_idx"),
        ]

    def save(self, *args, **kwargs):
        if not self.name:
            self.name = f"Table {self.table_number}"
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.name} (#{self.table_number})"

    @property
    def is_orderable(self):
        return self.is_active and self.status not in self.NON_ORDERABLE_STATUSES
