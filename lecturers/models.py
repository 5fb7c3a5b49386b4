import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils.translation import gettext_lazy as _

from core.choices import Gender


class Lecturer(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    # Link to User account
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='lecturer_profile',
        help_text="Associated user account for login"
    )

    full_name = models.CharField(max_length=200)
    email = models.EmailField(blank=True)
    gender = models.CharField(max_length=10, choices=Gender.choices, blank=True)
    phone = models.CharField(max_length=20, blank=True)
    photo = models.ImageField(upload_to='lecturers/photos/', blank=True, null=True)

    courses = models.ManyToManyField(
        'academics.Course',
        blank=True,
        related_name='lecturers'
    )

    # Class master of one department + level
    is_class_master = models.BooleanField(default=False)
    department = models.ForeignKey(
        'academics.Department',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='lecturers'
    )
    level = models.ForeignKey(
        'academics.Level',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='lecturers'
    )

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['full_name']
        verbose_name = "Lecturer"
        verbose_name_plural = "Lecturers"

    def __str__(self):
        return self.full_name

    def clean(self):
        if self.is_class_master and not (self.department_id and self.level_id):
            raise ValidationError(_('A class master must be assigned a department and a level.'))

    @classmethod
    def class_master_name(cls, department_id, level_id):
        """Name of the class master for a department and level, or 'N/A'."""
        if not department_id or not level_id:
            return 'N/A'
        lecturer = cls.objects.filter(
            is_class_master=True,
            department_id=department_id,
            level_id=level_id,
        ).only('full_name').first()
        return lecturer.full_name if lecturer else 'N/A'
