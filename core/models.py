from django.core.exceptions import ValidationError
from django.db import models
from django.utils.translation import gettext_lazy as _

from .choices import TermLabel


class Period(models.Model):
    """
    Abstract dated period with an active flag.
    Only one row per concrete model may be active at a time.
    """
    start_date = models.DateField()
    end_date = models.DateField()
    is_active = models.BooleanField(
        default=False,
        help_text="Only one period of this kind can be active at a time"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True

    def clean(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValidationError({'end_date': _('End date must be after the start date.')})

    def save(self, *args, **kwargs):
        # Ensure only one period is active
        if self.is_active:
            type(self).objects.filter(is_active=True).exclude(pk=self.pk).update(is_active=False)
        super().save(*args, **kwargs)


class AcademicYear(Period):
    """
    Represents an academic year (e.g., 2024/2025).
    """
    label = models.CharField(
        max_length=50,
        unique=True,
        help_text="e.g., 2024/2025"
    )

    class Meta:
        ordering = ['-start_date']
        verbose_name = "Academic Year"
        verbose_name_plural = "Academic Years"

    def __str__(self):
        return self.label


class Term(Period):
    """
    Represents a term. Terms are not tied to a single academic year;
    marks and discipline records carry both the term and the year.
    """
    label = models.CharField(
        max_length=20,
        unique=True,
        choices=TermLabel.choices,
    )

    class Meta:
        ordering = ['start_date']
        verbose_name = "Term"
        verbose_name_plural = "Terms"

    def __str__(self):
        return f"{self.label} Term"

    @property
    def is_third(self):
        return 'third' in self.label.lower()
