import base64
import logging
import mimetypes

from django.db import models
from django.utils.translation import gettext_lazy as _

from core.choices import Gender, PromotionStatus

logger = logging.getLogger(__name__)


class Student(models.Model):
    """
    Represents a student of the college. A student belongs to one department;
    the level is recorded per academic year on the enrollment.
    """
    name = models.CharField(max_length=200)
    matricule = models.CharField(
        max_length=50,
        unique=True,
        null=True,
        blank=True,
        help_text="Unique student matriculation number"
    )
    gender = models.CharField(max_length=10, choices=Gender.choices)
    date_of_birth = models.DateField(null=True, blank=True)
    place_of_birth = models.CharField(max_length=100, blank=True)
    photo = models.ImageField(upload_to='students/photos/', blank=True, null=True)
    department = models.ForeignKey(
        'academics.Department',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='students'
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']
        verbose_name = "Student"
        verbose_name_plural = "Students"

    def __str__(self):
        if self.matricule:
            return f"{self.name} ({self.matricule})"
        return self.name

    def photo_as_data_uri(self):
        """Return the photo as a base64 data URI for embedding in reports, or None."""
        if not self.photo:
            return None
        try:
            with self.photo.open('rb') as fh:
                encoded = base64.b64encode(fh.read()).decode('utf-8')
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read photo for student {self.pk}: {e}")
            return None
        mime_type = mimetypes.guess_type(self.photo.name)[0] or 'image/png'
        return f"data:{mime_type};base64,{encoded}"

    def get_enrollment(self, academic_year):
        """Return the student's enrollment for the given academic year."""
        return self.enrollments.filter(academic_year=academic_year).select_related(
            'level', 'previous_level', 'class_assigned'
        ).first()


class Enrollment(models.Model):
    """
    Places a student at a level (and optionally a class) for one academic year.
    Also records repeater and promotion status for that year.
    """
    student = models.ForeignKey(
        Student,
        on_delete=models.CASCADE,
        related_name='enrollments'
    )
    academic_year = models.ForeignKey(
        'core.AcademicYear',
        on_delete=models.PROTECT,
        related_name='enrollments'
    )
    level = models.ForeignKey(
        'academics.Level',
        on_delete=models.PROTECT,
        related_name='enrollments'
    )
    class_assigned = models.ForeignKey(
        'academics.Class',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='enrollments'
    )
    is_repeater = models.BooleanField(default=False)
    promoted = models.BooleanField(
        null=True,
        blank=True,
        help_text="Set when promotion has been decided for this year"
    )
    promotion_status = models.CharField(
        max_length=20,
        choices=PromotionStatus.choices,
        default=PromotionStatus.PENDING
    )
    previous_level = models.ForeignKey(
        'academics.Level',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
        help_text="Level the student was at in the previous academic year"
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-academic_year__start_date', 'student__name']
        unique_together = ['student', 'academic_year']
        verbose_name = "Enrollment"
        verbose_name_plural = "Enrollments"
        indexes = [
            models.Index(fields=['academic_year', 'level'], name='enrollment_year_level_idx'),
        ]

    def __str__(self):
        return f"{self.student.name} - {self.level} ({self.academic_year})"
