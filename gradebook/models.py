import uuid
from decimal import Decimal

from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models

from core.choices import Conduct
from core.models import AcademicYear, Term
from students.models import Student


SCORE_VALIDATORS = [MinValueValidator(Decimal('0')), MaxValueValidator(Decimal('20'))]


class Mark(models.Model):
    """A student's CA and exam scores (each out of 20) for one course in a term."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    student = models.ForeignKey(
        Student,
        on_delete=models.CASCADE,
        related_name='marks',
        db_index=True
    )
    course = models.ForeignKey(
        'academics.Course',
        on_delete=models.CASCADE,
        related_name='marks',
        db_index=True
    )
    term = models.ForeignKey(
        Term,
        on_delete=models.CASCADE,
        related_name='marks'
    )
    academic_year = models.ForeignKey(
        AcademicYear,
        on_delete=models.CASCADE,
        related_name='marks'
    )
    ca_score = models.DecimalField(
        max_digits=4,
        decimal_places=2,
        null=True,
        blank=True,
        validators=SCORE_VALIDATORS,
        help_text='Continuous assessment score out of 20'
    )
    exam_score = models.DecimalField(
        max_digits=4,
        decimal_places=2,
        null=True,
        blank=True,
        validators=SCORE_VALIDATORS,
        help_text='Exam score out of 20'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.student} - {self.course.code} ({self.term}, {self.academic_year})"

    @property
    def ca(self):
        return float(self.ca_score or 0)

    @property
    def exam(self):
        return float(self.exam_score or 0)

    class Meta:
        db_table = 'mark'
        ordering = ['student', 'course']
        verbose_name = 'Mark'
        verbose_name_plural = 'Marks'
        unique_together = ['student', 'course', 'term', 'academic_year']
        indexes = [
            models.Index(fields=['academic_year', 'term'], name='mark_year_term_idx'),
            models.Index(fields=['course', 'term', 'academic_year'], name='mark_course_term_year_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(ca_score__gte=0, ca_score__lte=20) | models.Q(ca_score__isnull=True),
                name='mark_ca_score_range',
            ),
            models.CheckConstraint(
                condition=models.Q(exam_score__gte=0, exam_score__lte=20) | models.Q(exam_score__isnull=True),
                name='mark_exam_score_range',
            ),
        ]


class DisciplineRecord(models.Model):
    """
    Attendance and conduct record of a student for one term.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    student = models.ForeignKey(
        Student,
        on_delete=models.CASCADE,
        related_name='discipline_records'
    )
    term = models.ForeignKey(
        Term,
        on_delete=models.CASCADE,
        related_name='discipline_records'
    )
    academic_year = models.ForeignKey(
        AcademicYear,
        on_delete=models.CASCADE,
        related_name='discipline_records'
    )
    justified_absences = models.PositiveIntegerField(default=0, help_text='Hours')
    unjustified_absences = models.PositiveIntegerField(default=0, help_text='Hours')
    lateness = models.PositiveIntegerField(default=0, help_text='Number of times late')
    punishment_hours = models.PositiveIntegerField(default=0)
    conduct = models.CharField(
        max_length=20,
        choices=Conduct.choices,
        default=Conduct.GOOD
    )
    warnings = models.JSONField(
        default=list,
        blank=True,
        help_text='List of warnings issued during the term'
    )
    reprimands = models.PositiveIntegerField(default=0)
    suspensions = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.student} - {self.term} ({self.academic_year})"

    def as_report_snapshot(self):
        """Discipline block of a report card."""
        return {
            'unjustified_abs': str(self.unjustified_absences),
            'justified_abs': str(self.justified_absences),
            'late': str(self.lateness),
            'punishment': str(self.punishment_hours),
            'conduct': self.conduct or Conduct.GOOD,
            'warning': str(len(self.warnings or [])),
            'reprimand': str(self.reprimands),
            'suspension': str(self.suspensions),
        }

    @staticmethod
    def default_snapshot():
        """Discipline block used when no record exists for the term."""
        return {
            'unjustified_abs': '0',
            'justified_abs': '0',
            'late': '0',
            'punishment': '0',
            'conduct': Conduct.GOOD.value,
            'warning': '0',
            'reprimand': '0',
            'suspension': '0',
        }

    class Meta:
        db_table = 'discipline_record'
        ordering = ['student', 'term']
        verbose_name = 'Discipline Record'
        verbose_name_plural = 'Discipline Records'
        unique_together = ['student', 'term', 'academic_year']
